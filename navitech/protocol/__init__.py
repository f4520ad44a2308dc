"""Protocol layer for hub command/event communication."""

from .base import Protocol
from .pybricks_protocol import PybricksProtocol
from .parser import ProtocolParser
from .serializer import CommandSerializer
from .assembler import SensorRecordAssembler

__all__ = [
    "Protocol",
    "PybricksProtocol",
    "ProtocolParser",
    "CommandSerializer",
    "SensorRecordAssembler",
]
