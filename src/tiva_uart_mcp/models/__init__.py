"""Data models for decoded telemetry."""

from .telemetry import ButtonState, TelemetryRecord
