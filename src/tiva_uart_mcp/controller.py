"""Presentation-facing controller for the Tiva C board.

Wraps ``SerialConnection`` with the actions a front end offers
(connect, disconnect, set time, set message) and reports failures to a
``TelemetryListener`` instead of raising them.
"""

from __future__ import annotations

import logging
from datetime import datetime

import serial.tools.list_ports

from .protocol.commands import build_message, build_time_set, format_clock
from .transport.delivery import QueueSink, TelemetryListener
from .transport.serial_connection import (
    LinkConfig,
    LinkError,
    NotConnected,
    SerialConnection,
)

logger = logging.getLogger(__name__)

NOT_CONNECTED_MESSAGE = "Please connect first!"


def list_ports() -> list[tuple[str, str]]:
    """Enumerate serial ports as sorted ``(device, description)`` pairs."""
    ports = [(info.device, info.description) for info in serial.tools.list_ports.comports()]
    ports.sort(key=lambda p: p[0])
    return ports


class DeviceController:
    """Connects a front end to the board.

    Telemetry is never pushed from the receive thread; the front end
    calls ``poll()`` from its own loop and receives
    ``listener.on_telemetry`` callbacks there.
    """

    def __init__(
        self,
        listener: TelemetryListener | None = None,
        connection: SerialConnection | None = None,
    ) -> None:
        self.listener = listener if listener is not None else TelemetryListener()
        self.connection = connection if connection is not None else SerialConnection(QueueSink())

    @property
    def connected(self) -> bool:
        return self.connection.is_open()

    def connect(self, port: str) -> bool:
        """Open ``port``. Returns False and reports the cause on failure."""
        try:
            self.connection.open(LinkConfig(port=port.strip()))
        except LinkError as e:
            logger.debug("Connect failed: %s", e)
            self.listener.on_connection_error(
                f"Port error: could not open {port!r}. "
                f"Check the port identifier and make sure the port is not busy."
            )
            return False
        return True

    def disconnect(self) -> None:
        self.connection.close()

    def send_time_set(self, text: str) -> bool:
        """Send an ``S`` command.

        Raises:
            InvalidPayload: If ``text`` is not 8 ASCII characters.
        """
        return self._send(build_time_set(text))

    def send_message(self, text: str) -> bool:
        return self._send(build_message(text))

    def sync_time(self, now: datetime | None = None) -> str | None:
        """Set the board clock to the host's local time.

        Returns:
            The ``HH:MM:SS`` payload sent, or None if sending failed.
        """
        payload = format_clock(now if now is not None else datetime.now())
        if self.send_time_set(payload):
            return payload
        return None

    def poll(self, max_records: int | None = None) -> int:
        """Deliver pending telemetry to the listener on this thread."""
        return self.connection.sink.dispatch(self.listener, max_records)

    def _send(self, frame: bytes) -> bool:
        try:
            self.connection.send(frame)
        except NotConnected:
            self.listener.on_connection_error(NOT_CONNECTED_MESSAGE)
            return False
        except LinkError as e:
            self.listener.on_connection_error(str(e))
            return False
        return True
