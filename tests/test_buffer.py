"""Unit tests for LineBuffer."""

import unittest

from navitech.buffer import LineBuffer


class TestLineBuffer(unittest.TestCase):
    """Test newline splitting and fragment retention."""

    def setUp(self):
        self.buffer = LineBuffer()

    def test_empty_buffer(self):
        """New buffer holds nothing."""
        self.assertEqual(self.buffer.size, 0)
        self.assertEqual(self.buffer.pending, b"")
        self.assertEqual(list(self.buffer.feed(b"")), [])

    def test_single_complete_line(self):
        """A terminated line is emitted without its terminator."""
        self.assertEqual(list(self.buffer.feed(b"rdy\n")), [b"rdy"])
        self.assertEqual(self.buffer.size, 0)

    def test_multiple_lines_in_one_chunk(self):
        """Lines come out in order."""
        lines = list(self.buffer.feed(b"a\nb\nc\n"))
        self.assertEqual(lines, [b"a", b"b", b"c"])

    def test_partial_line_retained(self):
        """Trailing fragment is kept for the next chunk."""
        self.assertEqual(list(self.buffer.feed(b"NaVi1,2")), [])
        self.assertEqual(self.buffer.pending, b"NaVi1,2")

        lines = list(self.buffer.feed(b",3,4,5\nNaVi6"))
        self.assertEqual(lines, [b"NaVi1,2,3,4,5"])
        self.assertEqual(self.buffer.pending, b"NaVi6")

    def test_empty_lines(self):
        """Consecutive terminators produce empty lines."""
        self.assertEqual(list(self.buffer.feed(b"\n\n")), [b"", b""])

    def test_reset_discards_fragment(self):
        """Reset drops the pending fragment; it is never replayed."""
        list(self.buffer.feed(b"stale"))
        self.buffer.reset()
        self.assertEqual(self.buffer.size, 0)

        self.assertEqual(list(self.buffer.feed(b"rdy\n")), [b"rdy"])

    def test_emitted_lines_never_reappear(self):
        """Once emitted, a line is gone from the buffer."""
        list(self.buffer.feed(b"one\ntw"))
        self.assertNotIn(b"one", self.buffer.pending)
        self.assertEqual(list(self.buffer.feed(b"o\n")), [b"two"])

    def test_any_chunking_reconstructs_input(self):
        """Lines + fragment equal the input minus terminators for every split."""
        data = b"rdy\nNaVi1,2,3,4,5\n\nNaVi6,7,8,9,10\npartial"
        expected = data.replace(b"\n", b"")

        for first in range(len(data) + 1):
            for second in range(first, len(data) + 1, 3):
                buffer = LineBuffer()
                lines = []
                for chunk in (data[:first], data[first:second], data[second:]):
                    lines.extend(buffer.feed(chunk))
                self.assertEqual(b"".join(lines) + buffer.pending, expected)
                self.assertEqual(lines, data.split(b"\n")[:-1])

    def test_byte_at_a_time(self):
        """Single-byte chunks still assemble lines."""
        lines = []
        for byte in b"NaVi1,2,3,4,5\n":
            lines.extend(self.buffer.feed(bytes([byte])))
        self.assertEqual(lines, [b"NaVi1,2,3,4,5"])

    def test_overflow_drops_oldest_bytes(self):
        """An unterminated fragment larger than max_size is trimmed."""
        buffer = LineBuffer(max_size=8)
        self.assertEqual(list(buffer.feed(b"0123456789AB")), [])
        self.assertEqual(buffer.pending, b"456789AB")
        self.assertEqual(buffer.overflow_count, 1)

        self.assertEqual(list(buffer.feed(b"\n")), [b"456789AB"])

    def test_overflow_cap_applied_on_feed(self):
        """The cap holds even if the returned lines are never looked at."""
        buffer = LineBuffer(max_size=4)
        lines = buffer.feed(b"ab\n0123456789")
        self.assertEqual(buffer.pending, b"6789")
        self.assertEqual(lines, [b"ab"])

    def test_flush_returns_fragment(self):
        """Flush hands out the fragment and leaves the buffer empty."""
        self.buffer.feed(b"a\nrdy")
        self.assertEqual(self.buffer.flush(), b"rdy")
        self.assertEqual(self.buffer.size, 0)
        self.assertEqual(self.buffer.flush(), b"")


if __name__ == '__main__':
    unittest.main()
