"""Status payload decoding and parrot catalog extraction."""

from __future__ import annotations

import json
import logging
from typing import Any

from ..errors import InvalidFormat, MalformedPayload
from ..models.device import ParrotDevice
from ..models.status import StatusResponse
from .commands import StatusFormat

logger = logging.getLogger(__name__)

PARROT_STATUS_KEY = "parrotStatus"
ENTRY_TAG = "entry"


def _load_json(raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as e:
        raise MalformedPayload(
            f"Status payload is not valid JSON: {e}", response=raw
        ) from e


def parse_status(raw: str, fmt: str | StatusFormat | None = None) -> StatusResponse:
    """Decode a status payload fetched in the given format.

    TEXT and XML payloads are kept verbatim. JSON payloads are parsed and
    re-serialized with sorted keys so equal mappings give equal text.

    Raises:
        MalformedPayload: If JSON was requested and the text does not parse.
    """
    status_format = StatusFormat.parse(fmt)
    if status_format is not StatusFormat.JSON:
        return StatusResponse(format=status_format, raw=raw, text=raw)

    data = _load_json(raw)
    try:
        text = json.dumps(data, sort_keys=True, allow_nan=False)
    except ValueError as e:
        raise MalformedPayload(
            f"Status payload has non-finite numbers: {e}", response=raw
        ) from e
    return StatusResponse(
        format=status_format,
        raw=raw,
        text=text,
        data=data if isinstance(data, dict) else None,
    )


def decode_status(raw: str, fmt: str | StatusFormat | None = None) -> str:
    """Return the normalized text of a status payload."""
    return parse_status(raw, fmt).text


def extract_parrot_devices(raw: str) -> list[ParrotDevice]:
    """Extract learned devices from a ``STATUS PARROT JSON`` payload.

    Keys of the ``parrotStatus`` mapping that start with ``entry`` are
    device records; the rest of the key is the device id. Entries that are
    not mappings or whose id is not an integer are skipped.

    Raises:
        MalformedPayload: If the payload is not valid JSON.
        InvalidFormat: If the payload has no ``parrotStatus`` mapping.
    """
    data = _load_json(raw)
    parrot_status = data.get(PARROT_STATUS_KEY) if isinstance(data, dict) else None
    if not isinstance(parrot_status, dict):
        raise InvalidFormat("Invalid Parrot status format", response=raw)

    devices: list[ParrotDevice] = []
    for key, value in parrot_status.items():
        if not key.startswith(ENTRY_TAG):
            continue
        if not isinstance(value, dict):
            logger.debug("Skipping %s: not a mapping", key)
            continue
        try:
            device_id = int(key[len(ENTRY_TAG):])
        except ValueError:
            logger.debug("Skipping %s: id is not an integer", key)
            continue

        name = value.get("reminder")
        protocol = value.get("protocol")
        devices.append(ParrotDevice(
            id=device_id,
            name=name if isinstance(name, str) else "",
            protocol=protocol if isinstance(protocol, str) else "",
        ))

    return devices
