"""Client and MCP server for the RFPlayer radio transceiver."""

from .client import RFPlayer
from .errors import (
    RFPlayerError,
    TransportError,
    ProtocolMismatch,
    MalformedPayload,
    InvalidFormat,
    ValidationError,
)
from .models import ParrotDevice, StatusResponse
from .protocol import decode_status, extract_parrot_devices

__version__ = "0.1.0"
