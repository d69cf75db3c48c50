"""Parrot device model: one learned remote-control entry."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ParrotDevice:
    """A signal learned into the device's parrot memory bank."""

    id: int
    name: str = ""
    protocol: str = ""

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "protocol": self.protocol}
