"""Abstract base class for hub communication protocols.

Defines the interface for decoding notifications and serializing commands.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..errors import MalformedRecordError
from ..models import HubCommand
from .assembler import SensorRecordAssembler


class Protocol(ABC):
    """Abstract protocol for hub communication.

    Protocols handle:
    - Decoding status lines
    - Creating record assemblers for sensor responses
    - Serializing commands into wire format
    """

    @abstractmethod
    def decode_status(self, raw: bytes) -> str:
        """Decode a raw status line into text.

        Args:
            raw: Line bytes without terminator

        Returns:
            Cleaned status text (may be empty)
        """
        pass

    @abstractmethod
    def new_assembler(self,
                      on_malformed: Optional[Callable[[MalformedRecordError], None]] = None,
                      ) -> SensorRecordAssembler:
        """Create a fresh assembler for one fetch response.

        Args:
            on_malformed: Called for each record line that is skipped
        """
        pass

    @abstractmethod
    def serialize_command(self, command: HubCommand) -> bytes:
        """Serialize command into wire format.

        Args:
            command: Command object to serialize

        Returns:
            Bytes ready to write to the hub
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Protocol identifier (e.g., 'pybricks')."""
        pass
