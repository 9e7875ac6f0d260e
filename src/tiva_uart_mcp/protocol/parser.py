"""Telemetry line decoding.

A telemetry line carries three ``;``-separated fields::

    <time>;<reading>;<button>

Any other shape is rejected with ``MalformedLine``.
"""

from __future__ import annotations

from ..models.telemetry import TelemetryRecord

FIELD_SEPARATOR = ";"
TELEMETRY_FIELDS = 3


class MalformedLine(ValueError):
    """An inbound line is not a three-field telemetry report."""

    def __init__(self, line: str) -> None:
        super().__init__(f"Malformed telemetry line: {line!r}")
        self.line = line


def decode_line(line: str) -> TelemetryRecord:
    """Decode one telemetry line into a ``TelemetryRecord``.

    Raises:
        MalformedLine: If the line does not split into exactly 3 fields.
    """
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) != TELEMETRY_FIELDS:
        raise MalformedLine(line)

    time, reading, button_raw = parts
    return TelemetryRecord(time=time, reading=reading, button_raw=button_raw)
