"""Shared helpers for the test suite."""

from __future__ import annotations

import time


class FakePort:
    """Scripted stand-in for an open serial port.

    Each ``read`` returns the next scripted chunk, or raises it if it is
    an exception. ``on_exhausted`` runs once the script is used up.
    """

    def __init__(self, chunks, on_exhausted=None):
        self._chunks = list(chunks)
        self._on_exhausted = on_exhausted

    @property
    def in_waiting(self) -> int:
        return 0

    def read(self, size: int = 1) -> bytes:
        if not self._chunks:
            if self._on_exhausted is not None:
                self._on_exhausted()
            time.sleep(0.005)
            return b""
        item = self._chunks.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def wait_for(predicate, timeout: float = 2.0) -> bool:
    """Poll ``predicate`` until it is true or ``timeout`` expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
