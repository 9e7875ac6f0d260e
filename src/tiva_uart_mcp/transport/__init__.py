"""Transport layer: serial connection lifecycle, receive pump, delivery."""

from .delivery import QueueSink, TelemetryListener
from .receive_pump import ReceivePump
from .serial_connection import (
    ConnectionState,
    LinkConfig,
    LinkError,
    NotConnected,
    PortUnavailable,
    SerialConnection,
    WriteFailure,
)
