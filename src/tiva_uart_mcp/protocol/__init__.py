"""Protocol layer: command builders, line assembly, and telemetry decoding."""

from .commands import Command, InvalidPayload, build_message, build_time_set
from .framing import LineAssembler
from .parser import MalformedLine, decode_line
