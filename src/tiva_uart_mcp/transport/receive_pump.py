"""Background listener that turns the serial byte stream into telemetry."""

from __future__ import annotations

import logging
import threading

from ..protocol.framing import LineAssembler
from ..protocol.parser import MalformedLine, decode_line
from .delivery import QueueSink

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64
READ_ERROR_BACKOFF = 0.1
JOIN_TIMEOUT = 2.0


class ReceivePump(threading.Thread):
    """Reads an open port until stopped, delivering decoded records.

    The pump only reads from ``port``; opening and closing it belongs
    to ``SerialConnection``. The port must have a read timeout so the
    loop notices ``stop()`` promptly.

    Malformed lines and read errors are logged at DEBUG and dropped;
    the pump keeps listening.
    """

    def __init__(self, port, sink: QueueSink) -> None:
        super().__init__(name="serial-receive-pump", daemon=True)
        self._port = port
        self._sink = sink
        self._assembler = LineAssembler()
        self._stop_event = threading.Event()
        self.lines_received = 0
        self.lines_discarded = 0

    def request_stop(self) -> None:
        """Signal the loop to exit without waiting."""
        self._stop_event.set()

    def stop(self, timeout: float = JOIN_TIMEOUT) -> None:
        """Signal the loop to exit and wait for it."""
        self.request_stop()
        if self.is_alive() and threading.current_thread() is not self:
            self.join(timeout)
            if self.is_alive():
                logger.warning("Receive pump did not stop within %.1fs", timeout)

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(self) -> None:
        logger.debug("Receive pump started")
        while not self._stop_event.is_set():
            try:
                waiting = self._port.in_waiting
                data = self._port.read(min(max(waiting, 1), READ_CHUNK_SIZE))
            except Exception as e:
                logger.debug("Read error: %s", e)
                self._assembler.reset()
                self._stop_event.wait(READ_ERROR_BACKOFF)
                continue

            if not data:
                continue
            for line in self._assembler.feed(data):
                self._handle_line(line)

        # A partial line at shutdown is never delivered
        self._assembler.reset()
        logger.debug("Receive pump stopped")

    def _handle_line(self, line: str) -> None:
        self.lines_received += 1
        try:
            record = decode_line(line)
        except MalformedLine:
            self.lines_discarded += 1
            logger.debug("Discarding malformed line: %r", line)
            return
        self._sink.put(record)
