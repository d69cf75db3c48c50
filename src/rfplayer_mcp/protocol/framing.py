"""Line framing for the RFPlayer text protocol.

Frame layout::

    host -> device:   ZIA++<VERB> <ARG1> <ARG2> ...\\r
    device -> host:   [ZIA--]<payload>\\r

- Command prefix: the literal ``ZIA++``
- Reply prefix: the literal ``ZIA--``; some firmware variants omit it
- Terminator: carriage return, in both directions
"""

from __future__ import annotations

from ..errors import ValidationError

COMMAND_PREFIX = "ZIA++"
REPLY_PREFIX = "ZIA--"
TERMINATOR = b"\r"
ENCODING = "utf-8"


def build_frame(command: str) -> bytes:
    """Wrap an encoded command into a frame ready to write to the port.

    Args:
        command: Space-separated command text, e.g. ``"STATUS SYSTEM JSON"``.

    Returns:
        The UTF-8 bytes of ``ZIA++<command>\\r``.
    """
    try:
        return (COMMAND_PREFIX + command).encode(ENCODING) + TERMINATOR
    except UnicodeEncodeError as e:
        raise ValidationError(f"Command text cannot be encoded: {e}") from e


def strip_reply_prefix(text: str) -> str:
    """Remove one leading reply prefix, leaving text without it unchanged."""
    if text.startswith(REPLY_PREFIX):
        return text[len(REPLY_PREFIX):]
    return text


def parse_frame(line: bytes | None) -> str:
    """Turn a raw line read from the device into response text.

    Args:
        line: Bytes up to and including the terminator, or ``None`` when
            the read ended without data.

    Returns:
        The payload with the reply prefix stripped and surrounding
        whitespace trimmed. Empty when nothing was received.
    """
    if not line:
        return ""
    text = line.decode(ENCODING, errors="replace")
    return strip_reply_prefix(text).strip()
