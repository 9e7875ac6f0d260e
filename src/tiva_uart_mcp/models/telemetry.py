"""Telemetry sample model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

BUTTON_RELEASED_RAW = "1"

# 12-bit SAR ADC referenced to 3.3 V
ADC_FULL_SCALE = 4095
ADC_REFERENCE_VOLTS = 3.3


class ButtonState(str, Enum):
    """Logical state of the board's user button."""

    PRESSED = "Pressed"
    RELEASED = "Released"

    @classmethod
    def from_raw(cls, raw: str) -> ButtonState:
        if raw.strip() == BUTTON_RELEASED_RAW:
            return cls.RELEASED
        return cls.PRESSED


@dataclass(frozen=True)
class TelemetryRecord:
    """One decoded telemetry sample.

    Fields are kept as the text tokens the device sent; interpretation
    is left to properties so an odd reading never blocks delivery.
    """

    time: str
    reading: str
    button_raw: str

    @property
    def button_state(self) -> ButtonState:
        return ButtonState.from_raw(self.button_raw)

    @property
    def adc_counts(self) -> int | None:
        """The reading as an integer ADC count, or None if it isn't one."""
        try:
            return int(self.reading.strip())
        except ValueError:
            return None

    @property
    def voltage(self) -> float | None:
        counts = self.adc_counts
        if counts is None:
            return None
        return round(counts * ADC_REFERENCE_VOLTS / ADC_FULL_SCALE, 3)

    def to_dict(self) -> dict:
        return {
            "time": self.time,
            "reading": self.reading,
            "button": self.button_state.value,
            "voltage": self.voltage,
        }
