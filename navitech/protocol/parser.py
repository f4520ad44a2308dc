"""Protocol parser for hub notifications.

Decodes status lines and sensor record lines.
Pure functions with no side effects.
"""
from __future__ import annotations

from typing import Optional

from ..config import RECORD_FIELD_COUNT, RECORD_PREFIX, STDOUT_MARKER
from ..errors import MalformedRecordError
from ..models import SensorRecord


class ProtocolParser:
    """Parser for the two kinds of text the hub sends.

    - Status lines: free text, NUL padded, sometimes led by a stray
      framing byte (e.g. ``b"\\x01rdy\\x00"``)
    - Record lines: ``NaVi<hue>,<saturation>,<value>,<reflection>,<ambient>``
    """

    @staticmethod
    def decode_status(raw: bytes) -> str:
        """Decode a status line.

        NUL bytes are removed, the text is UTF-8 decoded and trimmed, and
        a single leading non-alphanumeric character is dropped.

        Examples:
            >>> ProtocolParser.decode_status(b"\\x02rdy\\x00")
            'rdy'
        """
        text = raw.replace(b'\x00', b'').decode('utf-8', errors='replace').strip()
        if text and not text[0].isalnum():
            text = text[1:]
        return text

    @staticmethod
    def strip_marker(packet: bytes) -> bytes:
        """Drop the leading stdout marker byte if present."""
        if packet and packet[0] == STDOUT_MARKER:
            return packet[1:]
        return packet

    @staticmethod
    def parse_record_line(line: str) -> Optional[SensorRecord]:
        """Parse a single record line.

        Args:
            line: Decoded line (with or without surrounding whitespace)

        Returns:
            SensorRecord if the line carries the record prefix, None for
            any other line

        Raises:
            MalformedRecordError: If a prefixed line does not have exactly
                five fields

        Examples:
            >>> ProtocolParser.parse_record_line("NaVixx45,0.5,0.8,12,33").hue
            'xx45'
        """
        line = line.strip()
        if not line.startswith(RECORD_PREFIX):
            return None

        payload = line[len(RECORD_PREFIX):].strip()
        fields = payload.split(",")
        if len(fields) != RECORD_FIELD_COUNT:
            raise MalformedRecordError(
                f"Expected {RECORD_FIELD_COUNT} fields, got {len(fields)}",
                line=line,
            )
        return SensorRecord.from_fields(fields)
