"""Immutable data models for the hub session, commands and sensor records.

All models are frozen dataclasses. They are the contract between the
transport, router, analysis and application layers.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Record field order on the wire
RECORD_FIELDS = ("hue", "saturation", "color_value", "reflection", "ambient")


class Mode(Enum):
    """Which framing the notification channel is currently used for."""
    IDLE = "idle"
    AWAITING_READY = "awaiting_ready"
    STREAMING_READY = "streaming_ready"
    AWAITING_SENSOR_RECORD = "awaiting_sensor_record"


@dataclass(frozen=True)
class HubCommand:
    """A command for the hub program.

    Attributes:
        opcode: Leading command byte (0-255)
        name: ASCII command name sent after the opcode
    """
    opcode: int
    name: str


# Asks the hub program to take one spectroscopic reading
PRUNUS = HubCommand(opcode=0x06, name="prunus")


@dataclass(frozen=True)
class SensorRecord:
    """One spectroscopic reading.

    Values are kept as the text the hub sent; they are only consumed
    by text analysis.

    Attributes:
        hue: Hue reading
        saturation: Saturation reading
        color_value: Color value (brightness) reading
        reflection: Reflected light intensity
        ambient: Ambient light intensity
    """
    hue: str
    saturation: str
    color_value: str
    reflection: str
    ambient: str

    @classmethod
    def from_fields(cls, fields) -> SensorRecord:
        """Build a record from positional fields in wire order."""
        fields = tuple(fields)
        if len(fields) != len(RECORD_FIELDS):
            raise ValueError(
                f"Expected {len(RECORD_FIELDS)} fields, got {len(fields)}"
            )
        return cls(*fields)

    def as_tuple(self) -> tuple:
        return (self.hue, self.saturation, self.color_value,
                self.reflection, self.ambient)


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of analysing one sensor record.

    Attributes:
        record: The record that was analysed
        text: Analysis text, or None on failure
        error: The failure, or None on success
    """
    record: SensorRecord
    text: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class SessionState:
    """Snapshot of a hub session.

    The ``can_*`` properties tell a UI which actions are currently
    meaningful.

    Attributes:
        connected: BLE link to the hub is up
        channel_open: Notifications are enabled on the command/event channel
        stream_active: A data stream was started and not stopped
        hub_ready: The hub announced it is idle and accepts a command
        mode: Current framing mode of the channel
        device_name: Name of the connected hub, if any
    """
    connected: bool = False
    channel_open: bool = False
    stream_active: bool = False
    hub_ready: bool = False
    mode: Mode = Mode.IDLE
    device_name: Optional[str] = None

    @property
    def can_connect(self) -> bool:
        return not self.connected

    @property
    def can_start(self) -> bool:
        return self.connected and not self.stream_active

    @property
    def can_stop(self) -> bool:
        return self.connected and self.stream_active

    @property
    def can_fetch(self) -> bool:
        return (self.connected and self.hub_ready
                and self.mode == Mode.STREAMING_READY)

    @property
    def can_disconnect(self) -> bool:
        return self.connected
