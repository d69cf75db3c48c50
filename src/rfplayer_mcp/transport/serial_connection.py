"""Serial connection to the RFPlayer.

The device presents as a USB CDC serial port (``/dev/ttyUSB0``,
``/dev/ttyACM0`` or ``COMx``) running at 115200 baud, 8N1. Lines are
terminated with a carriage return in both directions.
"""

from __future__ import annotations

import logging

import serial

from ..errors import TransportError
from ..protocol.framing import TERMINATOR

logger = logging.getLogger(__name__)

DEFAULT_PORT = "/dev/ttyUSB0"
DEFAULT_BAUDRATE = 115200
READ_TIMEOUT_S = 5.0


class SerialConnection:
    """Owns the serial handle used to talk to one RFPlayer.

    Usage::

        conn = SerialConnection("/dev/ttyUSB0")
        conn.open()
        conn.write(frame_bytes)
        line = conn.read_line()
        conn.close()

    A connection carries one exchange at a time; the protocol has no
    request ids, so replies are matched to requests by arrival order only.
    """

    def __init__(
        self,
        port: str = DEFAULT_PORT,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = READ_TIMEOUT_S,
    ) -> None:
        self._port = port
        self._baudrate = baudrate
        self._timeout = timeout
        self._serial: serial.Serial | None = None

    @property
    def port(self) -> str:
        return self._port

    @property
    def connected(self) -> bool:
        return self._serial is not None and self._serial.is_open

    def open(self) -> None:
        """Open the serial port.

        Raises:
            TransportError: If the port cannot be opened.
        """
        if self.connected:
            return
        try:
            self._serial = serial.Serial(
                port=self._port,
                baudrate=self._baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self._timeout,
            )
        except serial.SerialException as e:
            raise TransportError(
                f"Could not open serial port {self._port}: {e}"
            ) from e

        logger.info("Opened %s at %d baud", self._port, self._baudrate)

    def close(self) -> None:
        """Close the port. Calling it again is a no-op.

        A read blocked in another thread is cancelled first so it returns.
        """
        ser = self._serial
        if ser is None:
            return
        self._serial = None

        try:
            if hasattr(ser, "cancel_read"):
                ser.cancel_read()
            ser.close()
        except (serial.SerialException, OSError) as e:
            logger.warning("Error closing %s: %s", self._port, e)
        finally:
            logger.info("Closed %s", self._port)

    def _require_open(self) -> serial.Serial:
        ser = self._serial
        if ser is None or not ser.is_open:
            raise TransportError(f"Serial port {self._port} is not open")
        return ser

    def flush_input(self) -> None:
        """Discard any bytes received but not yet read."""
        ser = self._require_open()
        try:
            ser.reset_input_buffer()
        except serial.SerialException as e:
            raise TransportError(f"Failed to flush input: {e}") from e

    def write(self, data: bytes) -> int:
        """Write raw bytes to the device.

        Returns:
            Number of bytes written.

        Raises:
            TransportError: If the port is not open or the write fails.
        """
        ser = self._require_open()
        try:
            written = ser.write(data)
            ser.flush()
        except serial.SerialException as e:
            raise TransportError(f"Failed to send command: {e}") from e
        logger.debug("TX: %r", data)
        return written

    def read_line(self) -> bytes | None:
        """Read one line, up to and including the carriage return.

        Returns:
            The line, or ``None`` if the read timeout expired before a
            complete line arrived. Many commands have no synchronous reply,
            so a timeout is the normal end of those exchanges.

        Raises:
            TransportError: If the port is not open or the read fails.
        """
        ser = self._require_open()
        try:
            data = ser.read_until(TERMINATOR)
        except serial.SerialException as e:
            raise TransportError(f"Failed to read response: {e}") from e

        if not data.endswith(TERMINATOR):
            if data:
                logger.debug("Discarding partial line: %r", data)
            return None
        logger.debug("RX: %r", data)
        return data

    def send_and_receive(self, frame: bytes) -> bytes | None:
        """Flush stale input, write a frame and read back one line."""
        self.flush_input()
        self.write(frame)
        return self.read_line()
