"""Tests for line framing."""

import pytest

from rfplayer_mcp.errors import ValidationError
from rfplayer_mcp.protocol.framing import (
    COMMAND_PREFIX,
    REPLY_PREFIX,
    TERMINATOR,
    build_frame,
    parse_frame,
    strip_reply_prefix,
)


def test_prefixes_are_five_characters():
    """Both prefixes are 5-character literals."""
    assert COMMAND_PREFIX == "ZIA++"
    assert REPLY_PREFIX == "ZIA--"


def test_build_frame():
    """Frames are the prefix, the command and a carriage return."""
    assert build_frame("PING") == b"ZIA++PING\r"
    assert build_frame("STATUS SYSTEM JSON") == b"ZIA++STATUS SYSTEM JSON\r"


def test_build_frame_terminator():
    """Every frame ends with exactly one CR."""
    frame = build_frame("HELLO")
    assert frame.endswith(TERMINATOR)
    assert frame.count(b"\r") == 1


def test_strip_reply_prefix_once():
    """The reply prefix is removed once."""
    assert strip_reply_prefix("ZIA--PONG") == "PONG"


def test_strip_reply_prefix_absent():
    """Text without the prefix is returned unchanged."""
    assert strip_reply_prefix("PONG") == "PONG"
    assert strip_reply_prefix(strip_reply_prefix("ZIA--PONG")) == "PONG"


def test_parse_frame_with_prefix():
    """Prefix and trailing CR are removed."""
    assert parse_frame(b"ZIA--PONG\r") == "PONG"


def test_parse_frame_without_prefix():
    """Some firmware omits the reply prefix."""
    assert parse_frame(b"  PONG \r") == "PONG"


def test_parse_frame_empty():
    """No data parses to an empty response."""
    assert parse_frame(None) == ""
    assert parse_frame(b"") == ""
    assert parse_frame(b"\r") == ""


def test_build_frame_utf8_metadata():
    """Accented free text is sent as UTF-8."""
    assert build_frame("PARROTLEARN ID 1 ON [Lampe séjour]") == (
        "ZIA++PARROTLEARN ID 1 ON [Lampe séjour]\r".encode("utf-8")
    )


def test_build_frame_unencodable_text():
    """Text that cannot be encoded raises ValidationError."""
    with pytest.raises(ValidationError):
        build_frame("PARROTLEARN ID 1 ON [\ud800]")


def test_parse_frame_utf8():
    """UTF-8 replies are decoded intact."""
    assert parse_frame("ZIA--Lampe séjour\r".encode("utf-8")) == "Lampe séjour"


def test_parse_frame_invalid_bytes_replaced():
    """Invalid bytes are replaced rather than raising."""
    assert parse_frame(b"ZIA--bad \xff byte\r") == "bad � byte"
