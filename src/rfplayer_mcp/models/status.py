"""Decoded status payload."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..protocol.commands import StatusFormat


@dataclass
class StatusResponse:
    """A status payload together with the format it was requested in.

    ``text`` is the normalized payload: the raw text for TEXT and XML,
    a sorted-key JSON serialization for JSON. ``data`` holds the parsed
    mapping for JSON and is ``None`` otherwise.
    """

    format: StatusFormat
    raw: str
    text: str
    data: dict[str, Any] | None = None

    def to_dict(self) -> dict:
        result: dict[str, Any] = {"format": self.format.value}
        if self.data is not None:
            result["status"] = self.data
        else:
            result["status"] = self.text
        return result
