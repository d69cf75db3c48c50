"""Tests for the serial connection, with pyserial mocked out."""

from unittest.mock import MagicMock, patch

import pytest
import serial

from rfplayer_mcp.errors import TransportError
from rfplayer_mcp.transport.serial_connection import (
    DEFAULT_BAUDRATE,
    READ_TIMEOUT_S,
    SerialConnection,
)

SERIAL_CLS = "rfplayer_mcp.transport.serial_connection.serial.Serial"


def _open_connection() -> tuple[SerialConnection, MagicMock]:
    port = MagicMock()
    port.is_open = True
    with patch(SERIAL_CLS, return_value=port) as serial_cls:
        conn = SerialConnection("/dev/ttyUSB0")
        conn.open()
    serial_cls.assert_called_once()
    return conn, port


def test_open_uses_fixed_line_settings():
    """The port opens at 115200 baud with a 5 second timeout."""
    port = MagicMock()
    with patch(SERIAL_CLS, return_value=port) as serial_cls:
        SerialConnection("/dev/ttyACM0").open()
    kwargs = serial_cls.call_args.kwargs
    assert kwargs["port"] == "/dev/ttyACM0"
    assert kwargs["baudrate"] == DEFAULT_BAUDRATE == 115200
    assert kwargs["timeout"] == READ_TIMEOUT_S == 5.0


def test_open_failure_raises_transport_error():
    """An unavailable port raises TransportError."""
    with patch(SERIAL_CLS, side_effect=serial.SerialException("no such port")):
        with pytest.raises(TransportError, match="Could not open"):
            SerialConnection("/dev/missing").open()


def test_close_is_idempotent():
    """Closing twice closes the handle once."""
    conn, port = _open_connection()
    conn.close()
    conn.close()
    port.close.assert_called_once()
    assert [c[0] for c in port.method_calls if c[0] in ("cancel_read", "close")] == [
        "cancel_read",
        "close",
    ]
    assert not conn.connected


def test_write_when_closed_raises():
    """I/O on a closed connection raises TransportError."""
    conn = SerialConnection()
    with pytest.raises(TransportError):
        conn.write(b"ZIA++PING\r")
    with pytest.raises(TransportError):
        conn.read_line()


def test_write_failure_raises_transport_error():
    """Write failures are wrapped."""
    conn, port = _open_connection()
    port.write.side_effect = serial.SerialTimeoutException("write timeout")
    with pytest.raises(TransportError):
        conn.write(b"ZIA++PING\r")


def test_read_line_complete():
    """A complete line is returned with its terminator."""
    conn, port = _open_connection()
    port.read_until.return_value = b"ZIA--PONG\r"
    assert conn.read_line() == b"ZIA--PONG\r"
    port.read_until.assert_called_with(b"\r")


@pytest.mark.parametrize("data", [b"", b"ZIA--PAR"])
def test_read_line_timeout_is_end_of_stream(data):
    """A timeout, with or without partial data, reads as None."""
    conn, port = _open_connection()
    port.read_until.return_value = data
    assert conn.read_line() is None


def test_read_failure_raises_transport_error():
    """Non-timeout read failures are wrapped."""
    conn, port = _open_connection()
    port.read_until.side_effect = serial.SerialException("device disconnected")
    with pytest.raises(TransportError):
        conn.read_line()


def test_send_and_receive_flushes_before_write():
    """Stale input is discarded before the frame is written."""
    conn, port = _open_connection()
    calls = []
    port.reset_input_buffer.side_effect = lambda: calls.append("flush")
    port.write.side_effect = lambda data: calls.append("write") or len(data)
    port.read_until.side_effect = lambda term: calls.append("read") or b"PONG\r"

    assert conn.send_and_receive(b"ZIA++PING\r") == b"PONG\r"
    assert calls == ["flush", "write", "read"]
    port.write.assert_called_once_with(b"ZIA++PING\r")
