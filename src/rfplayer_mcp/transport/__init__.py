"""Serial transport: the connection and the unsolicited-frame reader."""

from .serial_connection import SerialConnection
from .listener import FrameListener
