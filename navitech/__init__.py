"""NaViTech hub client - BLE session protocol and spectroscopic analysis."""

from .config import SessionConfig
from .models import (
    AnalysisResult,
    HubCommand,
    Mode,
    PRUNUS,
    SensorRecord,
    SessionState,
)
from .buffer import LineBuffer
from .hub import HubSession, NotificationRouter
from .transport import Transport, BleTransport
from .analysis import Analyzer, AnalysisDispatcher, GeminiAnalyzer

__all__ = [
    "SessionConfig",
    "AnalysisResult",
    "HubCommand",
    "Mode",
    "PRUNUS",
    "SensorRecord",
    "SessionState",
    "LineBuffer",
    "HubSession",
    "NotificationRouter",
    "Transport",
    "BleTransport",
    "Analyzer",
    "AnalysisDispatcher",
    "GeminiAnalyzer",
]
