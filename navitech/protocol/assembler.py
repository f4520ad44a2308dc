"""Record assembler that turns sensor packets into SensorRecords.

One assembler lives for the duration of one fetch. It keeps its own
line buffer so record text never mixes with status framing.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from ..config import LINE_BUFFER_MAX_SIZE
from ..errors import MalformedRecordError
from ..buffer import LineBuffer
from ..models import SensorRecord
from .parser import ProtocolParser

logger = logging.getLogger(__name__)


class SensorRecordAssembler:
    """Accumulates sensor packets and produces complete records.

    Each packet may start with the stdout marker, which is dropped
    before buffering. Lines are decoded only once complete, so UTF-8
    sequences split across packets decode correctly.
    """

    def __init__(self,
                 max_size: int = LINE_BUFFER_MAX_SIZE,
                 on_malformed: Optional[Callable[[MalformedRecordError], None]] = None):
        """Initialize assembler.

        Args:
            max_size: Cap on an unterminated record line in bytes
            on_malformed: Called with the error for each skipped line
        """
        self._buffer = LineBuffer(max_size=max_size)
        self._on_malformed = on_malformed
        self._records = 0
        self._malformed = 0

    def feed(self, packet: bytes) -> List[SensorRecord]:
        """Apply one notification packet.

        Args:
            packet: Raw packet from the channel

        Returns:
            Records completed by this packet, in arrival order
        """
        records: List[SensorRecord] = []
        payload = ProtocolParser.strip_marker(packet)

        for raw_line in self._buffer.feed(payload):
            line = raw_line.decode('utf-8', errors='replace')
            try:
                record = ProtocolParser.parse_record_line(line)
            except MalformedRecordError as e:
                self._malformed += 1
                logger.warning(f"Skipping malformed record line {e.line!r}: {e}")
                if self._on_malformed is not None:
                    self._on_malformed(e)
                continue

            if record is None:
                if line.strip():
                    logger.info(f"Ignoring spurious line while awaiting record: {line.strip()!r}")
                continue

            self._records += 1
            records.append(record)

        return records

    @property
    def record_count(self) -> int:
        return self._records

    @property
    def malformed_count(self) -> int:
        return self._malformed

    @property
    def pending(self) -> bytes:
        return self._buffer.pending
