"""MCP server entry point for the RFPlayer.

Exposes the client's commands as tools and the connection state as
resources, using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from mcp.server.fastmcp import FastMCP

from .bridge import build_accessories
from .client import RFPlayer
from .errors import RFPlayerError
from .models.device import ParrotDevice
from .protocol.commands import FrequencyBand, StatusCategory, StatusFormat
from .protocol.parser import parse_status
from .transport.serial_connection import DEFAULT_PORT

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "rfplayer",
    instructions="MCP server for the RFPlayer 433/868 MHz radio transceiver",
)

# Global connection state
_client: RFPlayer | None = None
_device_cache: dict[int, ParrotDevice] = {}


def _default_port() -> str:
    return os.environ.get("RFPLAYER_PORT", DEFAULT_PORT)


def _get_client() -> RFPlayer:
    """Get the connected client, raising if not connected."""
    if _client is None or not _client.connection.connected:
        raise RuntimeError(
            "Not connected to device. Use the 'connect' tool first."
        )
    return _client


def _error(e: RFPlayerError) -> dict[str, Any]:
    result: dict[str, Any] = {"error": str(e)}
    if e.command:
        result["command"] = e.command
    if e.response:
        result["response"] = e.response
    return result


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(port: str | None = None) -> dict[str, Any]:
    """Open the serial connection to the RFPlayer.

    Sends HELLO to confirm the device answers and returns its banner.

    Args:
        port: Serial port (default: $RFPLAYER_PORT or /dev/ttyUSB0).
    """
    global _client
    if _client is not None and _client.connection.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "port": _client.connection.port,
        }

    client = RFPlayer(port or _default_port())
    try:
        client.open()
        banner = client.hello()
    except RFPlayerError as e:
        client.close()
        return _error(e)

    _client = client
    return {"connected": True, "port": client.connection.port, "hello": banner}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the serial connection."""
    global _client
    if _client is None:
        return {"disconnected": True}
    _client.close()
    _client = None
    _device_cache.clear()
    return {"disconnected": True}


@mcp.tool()
def ping() -> dict[str, Any]:
    """Check that the device answers PING with PONG."""
    try:
        _get_client().ping()
    except RFPlayerError as e:
        return _error(e)
    return {"pong": True}


@mcp.tool()
def hello() -> dict[str, Any]:
    """Return the device identification banner (model and firmware)."""
    try:
        return {"hello": _get_client().hello()}
    except RFPlayerError as e:
        return _error(e)


# ─── STATUS TOOLS ─────────────────────────────────────────────────────

@mcp.tool()
def get_status(category: str = "SYSTEM", format: str = "JSON") -> dict[str, Any]:
    """Read a status section from the device.

    Args:
        category: SYSTEM, RADIO, TRANSCODER, PARROT or ALARM.
        format: TEXT, XML or JSON. JSON is returned as a parsed object.
    """
    try:
        fmt = StatusFormat.parse(format)
        raw = _get_client().get_status(StatusCategory.parse(category), fmt)
        result = parse_status(raw, fmt).to_dict()
    except RFPlayerError as e:
        return _error(e)
    result["category"] = StatusCategory.parse(category).value
    return result


@mcp.tool()
def list_parrot_devices() -> dict[str, Any]:
    """List the remote-control signals learned into the parrot memory."""
    try:
        devices = _get_client().get_parrot_devices()
    except RFPlayerError as e:
        return _error(e)

    _device_cache.clear()
    for device in devices:
        _device_cache[device.id] = device
    accessories = build_accessories(_get_client(), sorted(devices, key=lambda d: d.id))
    return {
        "devices": [
            dict(a.device.to_dict(), label=a.name) for a in accessories
        ],
    }


# ─── RADIO TOOLS ──────────────────────────────────────────────────────

@mcp.tool()
def emit_signal(protocol: str, device_id: int, on: bool = True) -> dict[str, Any]:
    """Transmit an ON or OFF signal.

    Args:
        protocol: RF protocol name (e.g. X10, VISONIC, CHACON, PARROT).
        device_id: Device id within the protocol.
        on: True sends ON, False sends OFF.
    """
    action = "ON" if on else "OFF"
    try:
        response = _get_client().emit_signal(protocol, device_id, action)
    except RFPlayerError as e:
        return _error(e)
    return {"sent": True, "action": action, "response": response}


@mcp.tool()
def switch_parrot_device(device_id: int, on: bool) -> dict[str, Any]:
    """Toggle a learned parrot device, as a home-automation switch would.

    Args:
        device_id: Parrot entry id (see list_parrot_devices).
        on: Desired switch state.
    """
    device = _device_cache.get(device_id)
    if device is None:
        return {"error": f"Unknown parrot device {device_id}. Run list_parrot_devices first."}

    accessory = build_accessories(_get_client(), [device])[0]
    try:
        response = accessory.set_on(on)
    except RFPlayerError as e:
        return _error(e)
    return {"name": accessory.name, "on": on, "response": response}


@mcp.tool()
def record_signal(device_id: int, action: str = "ON", metadata: str = "") -> dict[str, Any]:
    """Start learning a remote-control signal into a parrot entry.

    The device waits for the signal; confirm or cancel with its button.

    Args:
        device_id: Parrot entry id to record into.
        action: ON or OFF.
        metadata: Free-text reminder stored with the entry.
    """
    try:
        response = _get_client().record_signal(device_id, action.upper(), metadata)
    except RFPlayerError as e:
        return _error(e)
    return {"learning": True, "device_id": device_id, "response": response}


@mcp.tool()
def set_frequency(band: str, freq: int) -> dict[str, Any]:
    """Set the frequency of a radio band.

    Args:
        band: L (433 MHz) or H (868 MHz).
        freq: Frequency in kHz; L: 433420 or 433920, H: 868350 or 868950,
              0 disables the band.
    """
    try:
        radio_band = FrequencyBand(band.upper())
    except ValueError:
        return {"error": f"Unknown band '{band}'. Valid: {[b.value for b in FrequencyBand]}"}
    if not radio_band.accepts(freq):
        return {"error": f"Band {radio_band.value} accepts {list(radio_band.frequencies)}, got {freq}"}

    try:
        response = _get_client().set_frequency(radio_band, freq)
    except RFPlayerError as e:
        return _error(e)
    return {"band": radio_band.value, "freq": freq, "response": response}


@mcp.tool()
def enable_receiver(protocols: list[str]) -> dict[str, Any]:
    """Enable reception for RF protocols.

    Args:
        protocols: Protocol names, e.g. ["X10", "RTS", "VISONIC"].
    """
    try:
        response = _get_client().enable_receiver(*protocols)
    except RFPlayerError as e:
        return _error(e)
    return {"enabled": protocols, "response": response}


@mcp.tool()
def set_format(format: str) -> dict[str, Any]:
    """Choose the format of received RF frames (TEXT, XML or JSON)."""
    try:
        response = _get_client().set_format(format)
    except RFPlayerError as e:
        return _error(e)
    return {"format": StatusFormat.parse(format).value, "response": response}


@mcp.tool()
def parrot_remapping(protocol: str, start_id: int) -> dict[str, Any]:
    """Remap parrot entries to another protocol.

    Args:
        protocol: Target protocol.
        start_id: First id (1-416), sent as an X10 address.
    """
    try:
        response = _get_client().parrot_remapping(protocol, start_id)
    except RFPlayerError as e:
        return _error(e)
    return {"remapped": True, "response": response}


@mcp.tool()
def factory_reset(full: bool = False) -> dict[str, Any]:
    """Reset the device to factory settings.

    Args:
        full: Also erase learned parrot entries and signal shaping settings.
    """
    try:
        _get_client().factory_reset(full)
    except RFPlayerError as e:
        return _error(e)
    _device_cache.clear()
    return {"reset": True, "full": full}


# ─── RESOURCES ───────────────────────────────────────────────────────

@mcp.resource("rfplayer://device/status")
def resource_device_status() -> str:
    """Connection state and port."""
    connected = _client is not None and _client.connection.connected
    result: dict[str, Any] = {"connected": connected}
    if connected:
        result["port"] = _client.connection.port
    return json.dumps(result)


@mcp.resource("rfplayer://parrot/devices")
def resource_parrot_devices() -> str:
    """Cached list of learned parrot devices."""
    devices = [_device_cache[i].to_dict() for i in sorted(_device_cache)]
    return json.dumps({"devices": devices})


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
