"""Command identifiers and outbound command builders.

Each host-to-device command is a single ASCII letter followed by a
fixed-width ASCII payload. No terminator is sent; the firmware reads
exactly as many payload bytes as the command letter implies::

    +---------+-----------------------------+
    | Command |           Payload           |
    | 1 byte  |  8 bytes (S) / 3 bytes (M)  |
    +---------+-----------------------------+
"""

from __future__ import annotations

from datetime import datetime
from enum import IntEnum

TIME_PAYLOAD_SIZE = 8
MESSAGE_PAYLOAD_SIZE = 3
CLOCK_FORMAT = "%H:%M:%S"


class InvalidPayload(ValueError):
    """A command payload cannot be framed for the device."""


class Command(IntEnum):
    """Command letters understood by the firmware."""

    SET_TIME = ord("S")
    SET_MESSAGE = ord("M")


def build_command(command: Command, payload: bytes = b"") -> bytes:
    """Prefix a payload with its command letter."""
    return bytes([command.value]) + payload


def build_time_set(text: str) -> bytes:
    """Build a set-time command (``S`` + ``HH:MM:SS``).

    Args:
        text: Exactly 8 ASCII characters, e.g. ``"12:30:00"``.

    Raises:
        InvalidPayload: If the payload is not 8 ASCII characters.
    """
    if len(text) != TIME_PAYLOAD_SIZE:
        raise InvalidPayload(
            f"Time payload must be {TIME_PAYLOAD_SIZE} characters "
            f"(HH:MM:SS), got {len(text)}: {text!r}"
        )
    try:
        payload = text.encode("ascii")
    except UnicodeEncodeError as e:
        raise InvalidPayload(f"Time payload must be ASCII: {text!r}") from e
    return build_command(Command.SET_TIME, payload)


def normalize_message(text: str) -> str:
    """Truncate or space-pad a display message to exactly 3 characters."""
    return text[:MESSAGE_PAYLOAD_SIZE].ljust(MESSAGE_PAYLOAD_SIZE)


def build_message(text: str) -> bytes:
    """Build a display-message command (``M`` + 3 characters).

    Longer input is truncated, shorter input is padded with spaces.
    Characters outside ASCII are sent as ``?`` so the frame width
    never changes.
    """
    payload = normalize_message(text).encode("ascii", errors="replace")
    return build_command(Command.SET_MESSAGE, payload)


def format_clock(moment: datetime) -> str:
    """Render a time-of-day as the 8-character ``HH:MM:SS`` payload."""
    return moment.strftime(CLOCK_FORMAT)
