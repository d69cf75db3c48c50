"""Tests for the MCP tool wrappers."""

from __future__ import annotations

import json
import sys
from unittest.mock import MagicMock, patch

import pytest

from rfplayer_mcp.client import RFPlayer
from rfplayer_mcp.errors import ProtocolMismatch, TransportError
from rfplayer_mcp.models.device import ParrotDevice


def _get_server_module():
    """Import server module with FastMCP mocked to avoid init issues."""
    mock_fastmcp_cls = MagicMock()
    mock_fastmcp_instance = MagicMock()
    # Make the @mcp.tool() decorator a no-op that returns the function unchanged
    mock_fastmcp_instance.tool.return_value = lambda fn: fn
    mock_fastmcp_instance.resource.return_value = lambda fn: fn
    mock_fastmcp_cls.return_value = mock_fastmcp_instance

    with patch("mcp.server.fastmcp.FastMCP", mock_fastmcp_cls):
        sys.modules.pop("rfplayer_mcp.server", None)
        import rfplayer_mcp.server as server_mod

    return server_mod


def _mock_client() -> MagicMock:
    client = MagicMock(spec=RFPlayer)
    client.connection.connected = True
    client.connection.port = "/dev/ttyUSB0"
    return client


def test_tools_require_connection():
    """Tools fail clearly before connect."""
    server = _get_server_module()
    with pytest.raises(RuntimeError, match="connect"):
        server.ping()


def test_ping_reports_mismatch():
    """Protocol errors come back as error dicts with context."""
    server = _get_server_module()
    client = _mock_client()
    client.ping.side_effect = ProtocolMismatch(
        "unexpected response to PING: ''", command="PING", response=""
    )
    with patch.object(server, "_client", client):
        result = server.ping()
    assert result == {"error": "unexpected response to PING: ''", "command": "PING"}


def test_get_status_json_is_parsed():
    """JSON status is returned as an object."""
    server = _get_server_module()
    client = _mock_client()
    client.get_status.return_value = '{"systemStatus": {"version": "1.39"}}'
    with patch.object(server, "_client", client):
        result = server.get_status("system", "json")
    assert result == {
        "format": "JSON",
        "status": {"systemStatus": {"version": "1.39"}},
        "category": "SYSTEM",
    }


def test_get_status_malformed_json():
    """Malformed JSON is reported, not raised."""
    server = _get_server_module()
    client = _mock_client()
    client.get_status.return_value = "{broken"
    with patch.object(server, "_client", client):
        result = server.get_status("SYSTEM", "JSON")
    assert "error" in result
    assert result["response"] == "{broken"


def test_set_frequency_checks_band():
    """Illegal band/frequency combinations are refused before sending."""
    server = _get_server_module()
    client = _mock_client()
    with patch.object(server, "_client", client):
        assert "error" in server.set_frequency("L", 868350)
        assert "error" in server.set_frequency("X", 0)
        client.set_frequency.assert_not_called()

        client.set_frequency.return_value = ""
        result = server.set_frequency("l", 433920)
    assert result == {"band": "L", "freq": 433920, "response": ""}


def test_list_and_switch_parrot_devices():
    """Listed devices can be toggled through the switch adapter."""
    server = _get_server_module()
    client = _mock_client()
    client.get_parrot_devices.return_value = [
        ParrotDevice(id=2, name="Fan", protocol="VISONIC"),
        ParrotDevice(id=1, name="Lamp", protocol="X10"),
    ]
    client.emit_signal.return_value = ""
    with patch.object(server, "_client", client):
        listed = server.list_parrot_devices()
        switched = server.switch_parrot_device(1, False)
        resource = json.loads(server.resource_parrot_devices())

    assert [d["id"] for d in listed["devices"]] == [1, 2]
    assert listed["devices"][0]["label"] == "Lamp"
    client.emit_signal.assert_called_once_with("X10", 1, "OFF")
    assert switched == {"name": "Lamp", "on": False, "response": ""}
    assert [d["name"] for d in resource["devices"]] == ["Lamp", "Fan"]


def test_switch_unknown_device():
    """Switching an unlisted device is an error."""
    server = _get_server_module()
    with patch.object(server, "_client", _mock_client()):
        assert "error" in server.switch_parrot_device(99, True)


def test_connect_failure_reports_error():
    """A port that cannot be opened is reported and nothing is kept."""
    server = _get_server_module()
    with patch.object(server, "RFPlayer") as client_cls:
        client_cls.return_value.open.side_effect = TransportError("Could not open serial port /dev/none")
        result = server.connect("/dev/none")
    assert result == {"error": "Could not open serial port /dev/none"}
    client_cls.return_value.close.assert_called_once()
    assert server._client is None
