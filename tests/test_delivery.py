"""Tests for the cross-thread telemetry sink."""

import threading

from tiva_uart_mcp.models.telemetry import ButtonState, TelemetryRecord
from tiva_uart_mcp.transport.delivery import QueueSink, TelemetryListener


def _record(n: int, button: str = "1") -> TelemetryRecord:
    return TelemetryRecord(time=f"00:00:{n:02d}", reading=str(n), button_raw=button)


class RecordingListener(TelemetryListener):
    def __init__(self):
        self.calls = []
        self.threads = set()

    def on_telemetry(self, time, reading, button_state):
        self.calls.append((time, reading, button_state))
        self.threads.add(threading.get_ident())


def test_drain_preserves_order():
    """Records come out in the order they were put."""
    sink = QueueSink()
    for n in range(5):
        sink.put(_record(n))
    assert [r.reading for r in sink.drain()] == ["0", "1", "2", "3", "4"]
    assert sink.pending() == 0


def test_drain_respects_limit():
    """drain(max_records) leaves the rest queued."""
    sink = QueueSink()
    for n in range(5):
        sink.put(_record(n))
    assert len(sink.drain(2)) == 2
    assert sink.pending() == 3


def test_full_sink_drops_oldest():
    """When full, the oldest undelivered record is discarded."""
    sink = QueueSink(capacity=3)
    for n in range(5):
        sink.put(_record(n))
    assert [r.reading for r in sink.drain()] == ["2", "3", "4"]
    assert sink.dropped == 2


def test_dispatch_calls_listener_on_calling_thread():
    """Records put from another thread are delivered on the consumer's thread."""
    sink = QueueSink()
    producer = threading.Thread(
        target=lambda: [sink.put(_record(n, "0")) for n in range(3)]
    )
    producer.start()
    producer.join()

    listener = RecordingListener()
    assert sink.dispatch(listener) == 3
    assert listener.calls == [
        ("00:00:00", "0", ButtonState.PRESSED),
        ("00:00:01", "1", ButtonState.PRESSED),
        ("00:00:02", "2", ButtonState.PRESSED),
    ]
    assert listener.threads == {threading.get_ident()}


def test_dispatch_empty_sink():
    """Dispatching with nothing queued calls nothing."""
    listener = RecordingListener()
    assert QueueSink().dispatch(listener) == 0
    assert listener.calls == []


def test_clear():
    """clear() empties the queue."""
    sink = QueueSink()
    sink.put(_record(1))
    sink.clear()
    assert sink.pending() == 0


def test_default_listener_is_noop():
    """The base listener accepts callbacks without doing anything."""
    listener = TelemetryListener()
    listener.on_telemetry("t", "r", ButtonState.RELEASED)
    listener.on_connection_error("boom")


def test_latest_survives_drain():
    """latest tracks the newest record put, independent of draining."""
    sink = QueueSink()
    assert sink.latest is None
    sink.put(_record(1))
    sink.put(_record(2))
    sink.drain()
    assert sink.latest == _record(2)
    sink.clear()
    assert sink.latest is None


def test_reset_counters():
    """reset_counters() zeroes the drop count without touching the queue."""
    sink = QueueSink(capacity=1)
    sink.put(_record(1))
    sink.put(_record(2))
    assert sink.dropped == 1
    sink.reset_counters()
    assert sink.dropped == 0
    assert sink.pending() == 1
