"""MCP server entry point for the Tiva C clock/ADC board.

Exposes tools, resources, and prompts via the Model Context Protocol
using the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from mcp.server.fastmcp import FastMCP

from .controller import DeviceController, list_ports as enumerate_ports
from .models.telemetry import ButtonState
from .protocol.commands import InvalidPayload, normalize_message
from .transport.delivery import TelemetryListener

logger = logging.getLogger(__name__)

PORT_ENV_VAR = "TIVA_UART_PORT"
DEFAULT_MAX_RECORDS = 50

mcp = FastMCP(
    "tiva-uart",
    instructions="MCP server for a Tiva C board reporting time, ADC and button state over UART",
)


class _ServerListener(TelemetryListener):
    """Collects telemetry and errors between tool calls."""

    def __init__(self) -> None:
        self.latest: dict[str, Any] | None = None
        self.records: list[dict[str, Any]] = []
        self.last_error: str | None = None

    def on_telemetry(self, time: str, reading: str, button_state: ButtonState) -> None:
        self.latest = {"time": time, "reading": reading, "button": button_state.value}
        self.records.append(self.latest)

    def on_connection_error(self, message: str) -> None:
        self.last_error = message

    def take_records(self) -> list[dict[str, Any]]:
        records, self.records = self.records, []
        return records

    def take_error(self) -> str | None:
        error, self.last_error = self.last_error, None
        return error


_listener = _ServerListener()
_controller = DeviceController(_listener)


def _error(default: str) -> dict[str, str]:
    return {"error": _listener.take_error() or default}


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(port: str | None = None) -> dict[str, Any]:
    """Open the serial link to the board (9600 baud, 8N1).

    Args:
        port: Serial port identifier, e.g. "/dev/ttyACM0" or "COM3".
              Defaults to the TIVA_UART_PORT environment variable.
    """
    port = port or os.environ.get(PORT_ENV_VAR, "")
    if not port:
        return {"error": f"No port given and {PORT_ENV_VAR} is not set"}

    if _controller.connected:
        return {
            "connected": True,
            "message": "Already connected",
            "port": _controller.connection.config.port,
        }

    if not _controller.connect(port):
        return _error(f"Could not open {port!r}")

    return {"connected": True, **_controller.connection.config.to_dict()}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the serial link to the board."""
    _controller.disconnect()
    return {"disconnected": True}


@mcp.tool()
def list_ports() -> dict[str, Any]:
    """List serial ports available on this host."""
    return {
        "ports": [
            {"device": device, "description": description}
            for device, description in enumerate_ports()
        ]
    }


# ─── COMMAND TOOLS ────────────────────────────────────────────────────

@mcp.tool()
def send_time(time: str) -> dict[str, Any]:
    """Set the board clock.

    Args:
        time: Time of day as exactly 8 characters, HH:MM:SS (e.g. "12:30:00").
    """
    try:
        sent = _controller.send_time_set(time)
    except InvalidPayload as e:
        return {"error": str(e)}
    if not sent:
        return _error("Failed to send time")
    return {"sent": True, "time": time}


@mcp.tool()
def sync_time() -> dict[str, Any]:
    """Set the board clock to this host's current local time."""
    payload = _controller.sync_time()
    if payload is None:
        return _error("Failed to send time")
    return {"sent": True, "time": payload}


@mcp.tool()
def send_message(message: str) -> dict[str, Any]:
    """Show a short message on the board's LCD.

    Args:
        message: Display text. Only 3 characters fit; longer text is
                 truncated and shorter text is padded with spaces.
    """
    if not _controller.send_message(message):
        return _error("Failed to send message")
    return {"sent": True, "message": normalize_message(message)}


# ─── TELEMETRY TOOLS ──────────────────────────────────────────────────

@mcp.tool()
def get_telemetry(max_records: int = DEFAULT_MAX_RECORDS) -> dict[str, Any]:
    """Collect telemetry received since the last call.

    The board reports once per second. Records are returned oldest
    first; readings that arrived beyond ``max_records`` stay queued for
    the next call.

    Args:
        max_records: Maximum number of records to return (1-1000).
    """
    if not 1 <= max_records <= 1000:
        return {"error": "max_records must be 1-1000"}

    _controller.poll(max_records)
    return {
        "connected": _controller.connected,
        "records": _listener.take_records(),
        "latest": _listener.latest,
    }


@mcp.tool()
def get_status() -> dict[str, Any]:
    """Report link state, port settings and receive counters.

    Line and drop counters cover the current connection, or the last
    one after disconnecting; records_pending is the current backlog.
    """
    config = _controller.connection.config
    return {
        "connected": _controller.connected,
        "link": config.to_dict() if config else None,
        **_controller.connection.stats(),
    }


# ─── RESOURCES ───────────────────────────────────────────────────────

@mcp.resource("tiva://device/status")
def resource_device_status() -> str:
    """Current link state and counters."""
    return json.dumps(get_status(), indent=2)


@mcp.resource("tiva://telemetry/latest")
def resource_latest_telemetry() -> str:
    """Most recent telemetry sample.

    Reads the sink's latest record without draining it, so queued
    records are left for get_telemetry.
    """
    latest = _controller.connection.sink.latest
    return json.dumps(latest.to_dict() if latest else None, indent=2)


# ─── PROMPTS ─────────────────────────────────────────────────────────

@mcp.prompt()
def watch_button(seconds: int = 10) -> str:
    """Watch the board's button for a while and summarize presses."""
    return f"""Call get_telemetry roughly every second for {seconds} seconds.
For each record note the time and button state ("Pressed" or "Released").
Then summarize:
- How many one-second windows saw a press
- The ADC reading range (and voltage, if the reading is an integer count)
- Any gaps in the reported times

If not connected, use list_ports to find the board and connect first."""


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
