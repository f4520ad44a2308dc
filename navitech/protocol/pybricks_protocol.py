"""Pybricks command/event protocol implementation.

Wraps ProtocolParser, SensorRecordAssembler and CommandSerializer.
"""
from __future__ import annotations

from typing import Callable, Optional

from ..config import LINE_BUFFER_MAX_SIZE
from ..errors import MalformedRecordError
from ..models import HubCommand
from .assembler import SensorRecordAssembler
from .base import Protocol
from .parser import ProtocolParser
from .serializer import CommandSerializer


class PybricksProtocol(Protocol):
    """Text protocol spoken by the hub program over the Pybricks
    command/event characteristic.

    Uses:
    - "rdy" status lines when the hub is idle
    - NaVi prefixed record lines after a fetch
    - opcode + ASCII name commands (e.g., 0x06 "prunus")
    """

    def __init__(self, line_buffer_max_size: int = LINE_BUFFER_MAX_SIZE):
        self._line_buffer_max_size = line_buffer_max_size

    def decode_status(self, raw: bytes) -> str:
        return ProtocolParser.decode_status(raw)

    def new_assembler(self,
                      on_malformed: Optional[Callable[[MalformedRecordError], None]] = None,
                      ) -> SensorRecordAssembler:
        return SensorRecordAssembler(
            max_size=self._line_buffer_max_size,
            on_malformed=on_malformed,
        )

    def serialize_command(self, command: HubCommand) -> bytes:
        return CommandSerializer.serialize_command(command)

    @property
    def name(self) -> str:
        return "pybricks"
