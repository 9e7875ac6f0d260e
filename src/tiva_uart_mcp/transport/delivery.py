"""Hand-off of decoded telemetry from the receive pump to its consumer.

The pump runs on its own thread; consumers (a UI loop, an MCP tool call)
run elsewhere. Records cross that boundary only through ``QueueSink``.
The consumer drains it on its own context with ``dispatch`` or ``drain``.
"""

from __future__ import annotations

import logging
import queue

from ..models.telemetry import ButtonState, TelemetryRecord

logger = logging.getLogger(__name__)

DEFAULT_SINK_CAPACITY = 256


class TelemetryListener:
    """Callbacks the presentation layer implements.

    Both methods are invoked on the consumer's own context, never on
    the receive pump thread.
    """

    def on_telemetry(
        self, time: str, reading: str, button_state: ButtonState
    ) -> None:
        pass

    def on_connection_error(self, message: str) -> None:
        pass


class QueueSink:
    """Bounded, thread-safe FIFO of undelivered telemetry records.

    When the consumer falls behind and the queue is full, the oldest
    record is dropped to make room for the newest one. ``latest`` always
    holds the most recent record put, whether or not it has been drained.
    """

    def __init__(self, capacity: int = DEFAULT_SINK_CAPACITY) -> None:
        self._queue: queue.Queue[TelemetryRecord] = queue.Queue(maxsize=capacity)
        self.dropped = 0
        self.latest: TelemetryRecord | None = None

    def put(self, record: TelemetryRecord) -> None:
        """Enqueue a record. Safe to call from any thread."""
        self.latest = record
        while True:
            try:
                self._queue.put_nowait(record)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                    self.dropped += 1
                except queue.Empty:
                    pass

    def pending(self) -> int:
        return self._queue.qsize()

    def drain(self, max_records: int | None = None) -> list[TelemetryRecord]:
        """Remove and return pending records in arrival order."""
        records: list[TelemetryRecord] = []
        while max_records is None or len(records) < max_records:
            try:
                records.append(self._queue.get_nowait())
            except queue.Empty:
                break
        return records

    def dispatch(
        self, listener: TelemetryListener, max_records: int | None = None
    ) -> int:
        """Deliver pending records to ``listener`` on the calling thread.

        Returns:
            Number of records delivered.
        """
        records = self.drain(max_records)
        for record in records:
            listener.on_telemetry(record.time, record.reading, record.button_state)
        return len(records)

    def reset_counters(self) -> None:
        self.dropped = 0

    def clear(self) -> None:
        self.latest = None
        dropped = len(self.drain())
        if dropped:
            logger.debug("Discarded %d undelivered records", dropped)
