"""Line buffer for the notification byte stream.

Packets from the hub do not respect line boundaries. The buffer
accumulates them and hands out complete lines, keeping the trailing
fragment for the next packet.
"""
from __future__ import annotations

import logging
from typing import List

from .config import LINE_BUFFER_MAX_SIZE

logger = logging.getLogger(__name__)

LINE_TERMINATOR = b'\n'


class LineBuffer:
    """Byte accumulator that splits on newlines.

    Emitted lines never come back: after a line is returned the buffer
    only holds bytes received after its terminator.
    """

    def __init__(self, max_size: int = LINE_BUFFER_MAX_SIZE):
        """Initialize buffer.

        Args:
            max_size: Maximum size of an unterminated fragment in bytes.
                If exceeded, the oldest bytes are dropped.
        """
        self._max_size = max_size
        self._buffer = bytearray()
        self._overflow_count = 0

    def feed(self, chunk: bytes) -> List[bytes]:
        """Append a chunk and return the complete lines it finished.

        Lines are returned without their terminator. The retained
        fragment is capped before this returns.
        """
        if chunk:
            self._buffer.extend(chunk)

        lines: List[bytes] = []
        while True:
            idx = self._buffer.find(LINE_TERMINATOR)
            if idx == -1:
                break
            lines.append(bytes(self._buffer[:idx]))
            del self._buffer[:idx + 1]

        self._trim()
        return lines

    def flush(self) -> bytes:
        """Return the retained fragment as a finished line and empty the buffer."""
        fragment = bytes(self._buffer)
        self._buffer.clear()
        return fragment

    def _trim(self) -> None:
        if len(self._buffer) <= self._max_size:
            return
        drop_count = len(self._buffer) - self._max_size
        del self._buffer[:drop_count]
        self._overflow_count += 1
        logger.warning(f"Line buffer overflow: dropped {drop_count} bytes of unterminated data")

    def reset(self) -> None:
        """Discard the retained fragment."""
        if self._buffer:
            logger.debug(f"Discarding {len(self._buffer)} buffered bytes")
        self._buffer.clear()

    @property
    def pending(self) -> bytes:
        """Bytes received since the last terminator."""
        return bytes(self._buffer)

    @property
    def size(self) -> int:
        return len(self._buffer)

    @property
    def overflow_count(self) -> int:
        return self._overflow_count
