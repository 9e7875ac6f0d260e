"""Serial connection to the Tiva C board.

The board's UART0 runs at a fixed 9600 baud, 8 data bits, no parity,
1 stop bit. Ports are opened through pyserial's ``serial_for_url`` so
device paths (``/dev/ttyACM0``, ``COM3``) and URL handlers
(``loop://``, ``socket://host:port``) are both accepted.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

import serial

from .delivery import QueueSink
from .receive_pump import ReceivePump

logger = logging.getLogger(__name__)

READ_TIMEOUT_S = 0.1
WRITE_TIMEOUT_S = 1.0


class LinkError(ConnectionError):
    """Base class for serial link failures."""


class PortUnavailable(LinkError):
    """The port could not be opened (bad name, busy, or no permission)."""


class NotConnected(LinkError):
    """An operation needed an open connection but there is none."""


class WriteFailure(LinkError):
    """Writing to the open port failed."""


class ConnectionState(Enum):
    CLOSED = "closed"
    OPEN = "open"


@dataclass(frozen=True)
class LinkConfig:
    """Port identifier plus the board's fixed UART parameters."""

    BAUD_RATE: ClassVar[int] = 9600
    DATA_BITS: ClassVar[int] = serial.EIGHTBITS
    STOP_BITS: ClassVar[float] = serial.STOPBITS_ONE
    PARITY: ClassVar[str] = serial.PARITY_NONE

    port: str = ""

    def to_dict(self) -> dict:
        return {
            "port": self.port,
            "baud_rate": self.BAUD_RATE,
            "data_bits": self.DATA_BITS,
            "stop_bits": self.STOP_BITS,
            "parity": self.PARITY,
        }


class SerialConnection:
    """Owns the serial port and the receive pump reading from it.

    Usage::

        sink = QueueSink()
        conn = SerialConnection(sink)
        conn.open(LinkConfig(port="/dev/ttyACM0"))
        conn.send(build_message("Hi"))
        records = sink.drain()
        conn.close()

    ``open`` while open and ``close`` while closed are both no-ops.
    """

    def __init__(self, sink: QueueSink | None = None) -> None:
        self._sink = sink if sink is not None else QueueSink()
        self._port: serial.SerialBase | None = None
        self._pump: ReceivePump | None = None
        self._config: LinkConfig | None = None
        self._lock = threading.RLock()

    @property
    def sink(self) -> QueueSink:
        return self._sink

    @property
    def state(self) -> ConnectionState:
        return ConnectionState.OPEN if self._port is not None else ConnectionState.CLOSED

    @property
    def config(self) -> LinkConfig | None:
        return self._config

    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    def open(self, config: LinkConfig) -> LinkConfig:
        """Open the port named by ``config`` and start the receive pump.

        Returns:
            The config the connection is open with.

        Raises:
            PortUnavailable: If the port identifier is empty or the port
                cannot be opened. The connection stays closed.
        """
        with self._lock:
            if self._port is not None:
                if config.port != self._config.port:
                    logger.warning(
                        "Already connected to %s; ignoring open(%s)",
                        self._config.port,
                        config.port,
                    )
                return self._config

            if not config.port:
                raise PortUnavailable("No port identifier given")

            try:
                port = serial.serial_for_url(config.port, do_not_open=True)
                port.baudrate = config.BAUD_RATE
                port.bytesize = config.DATA_BITS
                port.stopbits = config.STOP_BITS
                port.parity = config.PARITY
                port.timeout = READ_TIMEOUT_S
                port.write_timeout = WRITE_TIMEOUT_S
                port.open()
            except (serial.SerialException, OSError, ValueError) as e:
                raise PortUnavailable(
                    f"Could not open serial port {config.port!r}. "
                    f"Check that the port identifier is correct and that "
                    f"no other program is using it. Last error: {e}"
                ) from e

            self._port = port
            self._config = config
            self._sink.reset_counters()
            self._pump = ReceivePump(port, self._sink)
            self._pump.start()
            logger.info("Connected to %s at %d baud", config.port, config.BAUD_RATE)
            return config

    def close(self) -> None:
        """Stop the receive pump, then release the port.

        The port is closed even if stopping the pump fails. The stopped
        pump is kept so ``stats()`` still reports the last session.
        """
        with self._lock:
            if self._port is None:
                return

            port, pump = self._port, self._pump
            port_name = self._config.port if self._config else ""
            self._port = None
            self._config = None
            try:
                if pump is not None:
                    pump.request_stop()
                    cancel_read = getattr(port, "cancel_read", None)
                    if cancel_read is not None:
                        cancel_read()
                    pump.stop()
            except Exception as e:
                logger.warning("Error stopping receive pump: %s", e)
            finally:
                try:
                    port.close()
                except Exception as e:
                    logger.warning("Error closing port: %s", e)
                logger.info("Disconnected from %s", port_name)

    def send(self, data: bytes) -> int:
        """Write raw bytes to the port.

        Returns:
            Number of bytes written.

        Raises:
            NotConnected: If the connection is closed. Nothing is written.
            WriteFailure: If the underlying write fails.
        """
        with self._lock:
            if self._port is None:
                raise NotConnected("Not connected to a serial port")
            try:
                written = self._port.write(data)
                self._port.flush()
            except (serial.SerialException, OSError) as e:
                raise WriteFailure(f"Write to {self._config.port!r} failed: {e}") from e
            return written if written is not None else len(data)

    def stats(self) -> dict:
        """Counters for the current session, or the last one once closed.

        Line and drop counters restart on every ``open``;
        ``records_pending`` is the sink's current backlog.
        """
        pump = self._pump
        return {
            "lines_received": pump.lines_received if pump else 0,
            "lines_discarded": pump.lines_discarded if pump else 0,
            "records_dropped": self._sink.dropped,
            "records_pending": self._sink.pending(),
        }
