"""Line assembly for the inbound byte stream.

The device emits one ASCII report per second, terminated by CR LF::

    12:30:00;1024;1\r\n

Bytes arrive from the serial port in arbitrary chunks; ``LineAssembler``
buffers them until a terminator is seen and yields complete lines with
the terminator removed.
"""

from __future__ import annotations

LINE_TERMINATOR = b"\n"
CARRIAGE_RETURN = b"\r"
MAX_LINE_LENGTH = 256


class LineAssembler:
    """Accumulates raw bytes and splits them into complete lines.

    Usage::

        assembler = LineAssembler()
        for line in assembler.feed(port.read(64)):
            handle(line)
    """

    def __init__(self, max_line_length: int = MAX_LINE_LENGTH) -> None:
        self._buffer = bytearray()
        self._max_line_length = max_line_length

    @property
    def pending(self) -> bytes:
        """Bytes of the current unterminated line."""
        return bytes(self._buffer)

    def feed(self, data: bytes) -> list[str]:
        """Add received bytes and return every line they complete.

        Lines are returned in arrival order, without the ``\\n``
        terminator or a trailing ``\\r``. A partial line that grows past
        ``max_line_length`` without a terminator is dropped.
        """
        self._buffer += data
        lines: list[str] = []
        while True:
            end = self._buffer.find(LINE_TERMINATOR)
            if end < 0:
                break
            raw = bytes(self._buffer[:end])
            del self._buffer[: end + 1]
            if raw.endswith(CARRIAGE_RETURN):
                raw = raw[:-1]
            lines.append(raw.decode("ascii", errors="replace"))

        if len(self._buffer) > self._max_line_length:
            self._buffer.clear()
        return lines

    def reset(self) -> None:
        """Discard any partially received line."""
        self._buffer.clear()
