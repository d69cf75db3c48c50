"""Command/response client for the RFPlayer.

Each operation builds one command, discards stale input, writes the frame
and reads back a single line. Many commands (signal emission, learning,
frequency changes) get no synchronous answer: the read times out and the
operation returns an empty string.
"""

from __future__ import annotations

import logging
import threading

from .errors import ProtocolMismatch, TransportError
from .models.device import ParrotDevice
from .models.status import StatusResponse
from .protocol.commands import (
    Command,
    FrequencyBand,
    StatusCategory,
    StatusFormat,
    build_emit_signal,
    build_enable_receiver,
    build_factory_reset,
    build_get_status,
    build_hello,
    build_parrot_remapping,
    build_ping,
    build_record_signal,
    build_set_format,
    build_set_frequency,
)
from .protocol.framing import build_frame, parse_frame
from .protocol.parser import extract_parrot_devices, parse_status
from .transport.serial_connection import SerialConnection

logger = logging.getLogger(__name__)

PING_ACK = "PONG"
RESET_ACK = "OK"


class RFPlayer:
    """High-level client bound to one serial connection.

    Usage::

        with RFPlayer("/dev/ttyUSB0") as rf:
            rf.ping()
            print(rf.get_status("RADIO", "JSON"))

    Exchanges on the connection are serialized with a lock, so a client
    may be shared between threads but never has two commands in flight.
    """

    def __init__(self, port: str | SerialConnection) -> None:
        if isinstance(port, SerialConnection):
            self._connection = port
        else:
            self._connection = SerialConnection(port)
        self._lock = threading.Lock()

    @property
    def connection(self) -> SerialConnection:
        return self._connection

    def open(self) -> RFPlayer:
        self._connection.open()
        return self

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> RFPlayer:
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    # -- Raw exchange -------------------------------------------------------

    def send_command(self, command: str | Command) -> str:
        """Send a command and return the unframed response text.

        Returns:
            The reply with the ``ZIA--`` prefix and surrounding whitespace
            removed, or ``""`` when the device sent nothing before the
            read timeout.

        Raises:
            TransportError: If the write or the read fails.
        """
        text = command.encode() if isinstance(command, Command) else command
        with self._lock:
            try:
                line = self._connection.send_and_receive(build_frame(text))
            except TransportError as e:
                e.command = text
                raise
        response = parse_frame(line)
        logger.debug("%s -> %r", text, response)
        return response

    # -- Device commands ----------------------------------------------------

    def ping(self) -> None:
        """Check the device answers ``PONG``.

        Raises:
            ProtocolMismatch: If the reply does not contain ``PONG``.
        """
        command = build_ping()
        response = self.send_command(command)
        if PING_ACK not in response:
            raise ProtocolMismatch(
                f"unexpected response to PING: {response!r}",
                command=command.encode(),
                response=response,
            )

    def hello(self) -> str:
        """Return the device's identification banner."""
        return self.send_command(build_hello())

    def emit_signal(self, protocol: str, device_id: int, action: str) -> str:
        """Transmit an ON/OFF style signal for a device id and protocol."""
        return self.send_command(build_emit_signal(protocol, device_id, action))

    def record_signal(self, device_id: int, action: str, metadata: str) -> str:
        """Put the device into learning mode for a parrot entry.

        Learning is confirmed or cancelled with the button on the device;
        this returns as soon as the command has been sent.
        """
        return self.send_command(build_record_signal(device_id, action, metadata))

    def set_frequency(self, band: str | FrequencyBand, freq: int) -> str:
        """Set the frequency of a band; 0 disables the band.

        Raises:
            ValidationError: If *freq* is negative.
        """
        return self.send_command(build_set_frequency(band, freq))

    def enable_receiver(self, *protocols: str) -> str:
        """Enable reception for the given protocols."""
        return self.send_command(build_enable_receiver(*protocols))

    def set_format(self, fmt: str | StatusFormat) -> str:
        """Choose the format in which received frames are reported."""
        return self.send_command(build_set_format(StatusFormat.parse(fmt)))

    def get_status(
        self,
        category: str | StatusCategory | None = None,
        fmt: str | StatusFormat | None = None,
    ) -> str:
        """Fetch a status section; defaults to ``SYSTEM`` in ``TEXT``."""
        return self.send_command(build_get_status(category, fmt))

    def decoded_status(
        self,
        category: str | StatusCategory | None = None,
        fmt: str | StatusFormat | None = None,
    ) -> StatusResponse:
        """Fetch a status section and decode it according to its format."""
        return parse_status(self.get_status(category, fmt), fmt)

    def get_parrot_devices(self) -> list[ParrotDevice]:
        """List the signals learned into the parrot memory bank."""
        raw = self.get_status(StatusCategory.PARROT, StatusFormat.JSON)
        return extract_parrot_devices(raw)

    def parrot_remapping(self, protocol: str, start_id: int) -> str:
        """Remap parrot entries to *protocol*, starting at an X10 address."""
        return self.send_command(build_parrot_remapping(protocol, start_id))

    def factory_reset(self, full: bool = False) -> None:
        """Reset the device configuration.

        With *full* set, learned parrot entries and signal shaping settings
        are cleared as well.

        Raises:
            ProtocolMismatch: If the device does not answer ``OK``.
        """
        command = build_factory_reset(full)
        response = self.send_command(command)
        if RESET_ACK not in response:
            raise ProtocolMismatch(
                f"unexpected response to factory reset: {response!r}",
                command=command.encode(),
                response=response,
            )
