"""Background reader for frames the device pushes on its own.

Received RF frames are reported as unsolicited lines. They must be read on
a connection of their own: mixing them into command exchanges would break
the arrival-order matching of replies to requests.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable

from ..errors import TransportError
from ..protocol.framing import parse_frame
from .serial_connection import SerialConnection

logger = logging.getLogger(__name__)


class FrameListener:
    """Reads lines from a connection and passes each one to *handler*.

    The loop runs until :meth:`stop` closes the connection or a transport
    error occurs; the error is kept in :attr:`error`.
    """

    def __init__(
        self,
        connection: SerialConnection,
        handler: Callable[[str], None],
    ) -> None:
        self._connection = connection
        self._handler = handler
        self._thread: threading.Thread | None = None
        self._stop = threading.Event()
        self.error: TransportError | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Open the connection if needed and start the reader thread."""
        if self.running:
            return
        self._connection.open()
        self._stop.clear()
        self.error = None
        self._thread = threading.Thread(
            target=self._run, name="rfplayer-listener", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        """Close the connection and wait for the reader thread to exit."""
        self._stop.set()
        self._connection.close()
        thread = self._thread
        self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                line = self._connection.read_line()
            except TransportError as e:
                if not self._stop.is_set():
                    logger.error("Listener stopped: %s", e)
                    self.error = e
                break

            text = parse_frame(line)
            if not text:
                continue
            try:
                self._handler(text)
            except Exception:
                logger.exception("Frame handler failed for %r", text)
