"""Session configuration for the NaViTech hub client.

Defaults describe the stock hub firmware: a Pybricks command/event
service advertised under the name "NaViTech".
"""
from __future__ import annotations

from dataclasses import dataclass

# BLE identity of the hub
HUB_NAME_FILTER = "NaViTech"
COMMAND_EVENT_SERVICE_UUID = "c5f50001-8280-46da-89f4-6d8051e4aeef"
COMMAND_EVENT_CHAR_UUID = "c5f50002-8280-46da-89f4-6d8051e4aeef"

# Protocol
READINESS_TOKEN = "rdy"
RECORD_PREFIX = "NaVi"
RECORD_FIELD_COUNT = 5
STDOUT_MARKER = 0x01

# Timing
DEFAULT_SCAN_TIMEOUT = 10.0  # seconds
DEFAULT_DRAIN_WINDOW = 2.0  # seconds

LINE_BUFFER_MAX_SIZE = 64 * 1024  # 64KB


@dataclass(frozen=True)
class SessionConfig:
    """Tunables for one hub session.

    Attributes:
        device_name: Advertised name the scanner filters on
        service_uuid: Command/event service identifier
        char_uuid: Command/event characteristic identifier
        readiness_token: Status text announcing the hub is idle
        drain_window: Seconds after a fetch command before readiness
            framing is restored
        scan_timeout: Seconds to scan for the hub
        grace_notifications: Packets dropped right after a stream start
        line_buffer_max_size: Cap on an unterminated line in bytes
    """
    device_name: str = HUB_NAME_FILTER
    service_uuid: str = COMMAND_EVENT_SERVICE_UUID
    char_uuid: str = COMMAND_EVENT_CHAR_UUID
    readiness_token: str = READINESS_TOKEN
    drain_window: float = DEFAULT_DRAIN_WINDOW
    scan_timeout: float = DEFAULT_SCAN_TIMEOUT
    grace_notifications: int = 0
    line_buffer_max_size: int = LINE_BUFFER_MAX_SIZE

    def __post_init__(self) -> None:
        if self.drain_window < 0:
            raise ValueError("drain_window must be >= 0")
        if self.grace_notifications < 0:
            raise ValueError("grace_notifications must be >= 0")
        if self.line_buffer_max_size <= 0:
            raise ValueError("line_buffer_max_size must be positive")
