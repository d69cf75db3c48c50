"""Exception types raised by the RFPlayer client.

All errors carry the command that was attempted and the raw response
(if any) so callers can log or display them.
"""

from __future__ import annotations


class RFPlayerError(Exception):
    """Base class for every error raised by this package."""

    def __init__(
        self,
        message: str,
        command: str | None = None,
        response: str | None = None,
    ) -> None:
        super().__init__(message)
        self.command = command
        self.response = response


class TransportError(RFPlayerError):
    """The serial port could not be opened, written or read."""


class ProtocolMismatch(RFPlayerError):
    """The device answered without the expected acknowledgement token."""


class MalformedPayload(RFPlayerError):
    """A status payload requested as JSON is not valid JSON."""


class InvalidFormat(RFPlayerError):
    """A JSON status payload does not have the expected category key."""


class ValidationError(RFPlayerError, ValueError):
    """A command argument is out of range."""
