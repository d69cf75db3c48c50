"""Command verbs, argument enums and high-level command builders.

Every builder returns the command text without the frame prefix or
terminator; :func:`~rfplayer_mcp.protocol.framing.build_frame` adds those.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..errors import ValidationError

X10_UNITS_PER_HOUSE = 16
X10_HOUSES = 26
X10_MAX_ID = X10_UNITS_PER_HOUSE * X10_HOUSES


class Verb(str, Enum):
    """Command verbs understood by the device."""

    PING = "PING"
    HELLO = "HELLO"
    PARROTLEARN = "PARROTLEARN"
    FREQ = "FREQ"
    RECEIVER = "RECEIVER"
    FORMAT = "FORMAT"
    STATUS = "STATUS"
    REMAPPING = "REMAPPING"
    FACTORYRESET = "FACTORYRESET"


class StatusCategory(str, Enum):
    """Status sections that can be queried with ``STATUS``."""

    SYSTEM = "SYSTEM"
    RADIO = "RADIO"
    TRANSCODER = "TRANSCODER"
    PARROT = "PARROT"
    ALARM = "ALARM"

    @classmethod
    def parse(cls, value: str | StatusCategory | None) -> StatusCategory:
        """Resolve a category name, defaulting to SYSTEM."""
        if not value:
            return cls.SYSTEM
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValidationError(
                f"Unknown status category '{value}'. Valid: {[c.value for c in cls]}"
            ) from None


class StatusFormat(str, Enum):
    """Output formats for ``STATUS`` and received frames."""

    TEXT = "TEXT"
    XML = "XML"
    JSON = "JSON"

    @classmethod
    def parse(cls, value: str | StatusFormat | None) -> StatusFormat:
        """Resolve a format name case-insensitively, defaulting to TEXT."""
        if not value:
            return cls.TEXT
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValidationError(
                f"Unknown status format '{value}'. Valid: {[f.value for f in cls]}"
            ) from None


class FrequencyBand(str, Enum):
    """Radio bands and the frequencies (kHz) each one accepts.

    A frequency of 0 disables the band.
    """

    L = "L"
    H = "H"

    @property
    def frequencies(self) -> tuple[int, ...]:
        return BAND_FREQUENCIES[self]

    def accepts(self, freq: int) -> bool:
        return freq in BAND_FREQUENCIES[self]


BAND_FREQUENCIES: dict[FrequencyBand, tuple[int, ...]] = {
    FrequencyBand.L: (0, 433420, 433920),
    FrequencyBand.H: (0, 868350, 868950),
}


@dataclass
class Command:
    """A verb with positional arguments and an optional bracketed note."""

    verb: str
    args: list[str] = field(default_factory=list)
    metadata: str | None = None

    def encode(self) -> str:
        parts = [str(self.verb)] + [str(a) for a in self.args]
        if self.metadata is not None:
            parts.append(f"[{self.metadata}]")
        return " ".join(parts)

    def __str__(self) -> str:
        return self.encode()


def _value(item) -> str:
    return item.value if isinstance(item, Enum) else str(item)


def id_to_x10(device_id: int) -> str:
    """Convert a numeric id (1-416) to an X10 house/unit code like ``B3``."""
    if not 1 <= device_id <= X10_MAX_ID:
        raise ValidationError(f"X10 id must be 1-{X10_MAX_ID}, got {device_id}")
    house = chr(ord("A") + (device_id - 1) // X10_UNITS_PER_HOUSE)
    unit = (device_id - 1) % X10_UNITS_PER_HOUSE + 1
    return f"{house}{unit}"


def build_ping() -> Command:
    return Command(Verb.PING.value)


def build_hello() -> Command:
    return Command(Verb.HELLO.value)


def build_emit_signal(protocol: str, device_id: int, action: str) -> Command:
    """Build a signal emission command: ``<ACTION> ID <id> <protocol>``.

    The action (usually ON or OFF) is passed through unchecked.
    """
    return Command(action, ["ID", str(device_id), protocol])


def build_record_signal(device_id: int, action: str, metadata: str) -> Command:
    """Build a learn command: ``PARROTLEARN ID <id> <ACTION> [<metadata>]``."""
    return Command(
        Verb.PARROTLEARN.value, ["ID", str(device_id), action], metadata=metadata
    )


def build_set_frequency(band: str | FrequencyBand, freq: int) -> Command:
    """Build a ``FREQ <band> <freq>`` command.

    Only the sign of the frequency is checked here; whether the value is
    legal for the band is left to the caller (see :class:`FrequencyBand`).
    """
    if freq < 0:
        raise ValidationError("freq must be non-negative")
    return Command(Verb.FREQ.value, [_value(band), str(freq)])


def build_enable_receiver(*protocols: str) -> Command:
    """Build ``RECEIVER + <protocol...>`` to enable reception protocols."""
    return Command(Verb.RECEIVER.value, ["+", *protocols])


def build_set_format(fmt: str | StatusFormat) -> Command:
    return Command(Verb.FORMAT.value, [_value(fmt)])


def build_get_status(
    category: str | StatusCategory | None = None,
    fmt: str | StatusFormat | None = None,
) -> Command:
    """Build ``STATUS <category> <format>``, defaulting to SYSTEM and TEXT."""
    return Command(
        Verb.STATUS.value,
        [StatusCategory.parse(category).value, StatusFormat.parse(fmt).value],
    )


def build_parrot_remapping(protocol: str, start_id: int) -> Command:
    """Build ``REMAPPING PARROT ONOFF <protocol> <x10-code>``."""
    return Command(
        Verb.REMAPPING.value, ["PARROT", "ONOFF", protocol, id_to_x10(start_id)]
    )


def build_factory_reset(full: bool = False) -> Command:
    """Build ``FACTORYRESET``, or ``FACTORYRESET ALL`` when *full* is set."""
    return Command(Verb.FACTORYRESET.value, ["ALL"] if full else [])
