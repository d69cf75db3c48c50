"""Adapter between smart-home switch accessories and the RFPlayer.

The host accessory framework owns the switch state and calls
:meth:`SwitchAccessory.set_on` when a user toggles it. The adapter only
needs something that can emit a signal, not the whole client.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from .models.device import ParrotDevice

logger = logging.getLogger(__name__)


class SignalEmitter(Protocol):
    """Anything that can transmit an ON/OFF signal for a device."""

    def emit_signal(self, protocol: str, device_id: int, action: str) -> str:
        ...


class SwitchAccessory:
    """A switch bound to one learned parrot device."""

    def __init__(self, emitter: SignalEmitter, device: ParrotDevice) -> None:
        self._emitter = emitter
        self.device = device

    @property
    def name(self) -> str:
        return self.device.name or f"RFPlayer {self.device.id}"

    def set_on(self, on: bool) -> str:
        """Send ON or OFF for the device; errors go back to the host."""
        action = "ON" if on else "OFF"
        logger.info("Switch %r -> %s", self.name, action)
        return self._emitter.emit_signal(self.device.protocol, self.device.id, action)


def build_accessories(
    emitter: SignalEmitter, devices: Iterable[ParrotDevice]
) -> list[SwitchAccessory]:
    """Create one switch accessory per parrot device."""
    return [SwitchAccessory(emitter, device) for device in devices]
