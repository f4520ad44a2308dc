"""Unit tests for the protocol layer.

Tests verify:
- Command serialization
- Status line decoding
- Record line parsing and malformed input
- Record assembly across packets
"""
import unittest

from navitech.errors import MalformedRecordError
from navitech.models import PRUNUS, HubCommand, SensorRecord
from navitech.protocol import (
    CommandSerializer,
    Protocol,
    ProtocolParser,
    PybricksProtocol,
    SensorRecordAssembler,
)


class TestCommandSerializer(unittest.TestCase):
    """Test opcode + ASCII name encoding."""

    def test_prunus(self):
        self.assertEqual(CommandSerializer.serialize_command(PRUNUS), b"\x06prunus")

    def test_no_terminator_or_length(self):
        data = CommandSerializer.serialize_command(HubCommand(0x10, "go"))
        self.assertEqual(data, b"\x10go")
        self.assertEqual(len(data), 3)

    def test_empty_name(self):
        self.assertEqual(CommandSerializer.serialize_command(HubCommand(0x06, "")), b"\x06")

    def test_opcode_out_of_range(self):
        with self.assertRaises(ValueError):
            CommandSerializer.serialize_command(HubCommand(256, "prunus"))
        with self.assertRaises(ValueError):
            CommandSerializer.serialize_command(HubCommand(-1, "prunus"))

    def test_non_ascii_name(self):
        with self.assertRaises(ValueError):
            CommandSerializer.serialize_command(HubCommand(0x06, "prünus"))

    def test_unknown_command_type(self):
        with self.assertRaises(ValueError):
            CommandSerializer.serialize_command("prunus")


class TestStatusDecode(unittest.TestCase):
    """Test status line cleanup."""

    def test_control_byte_and_nul(self):
        self.assertEqual(ProtocolParser.decode_status(b"\x02rdy\x00"), "rdy")

    def test_plain(self):
        self.assertEqual(ProtocolParser.decode_status(b"rdy"), "rdy")

    def test_nul_padding(self):
        self.assertEqual(ProtocolParser.decode_status(b"rdy\x00\x00\x00"), "rdy")

    def test_surrounding_whitespace(self):
        self.assertEqual(ProtocolParser.decode_status(b"  rdy\r"), "rdy")

    def test_stdout_marker(self):
        self.assertEqual(ProtocolParser.decode_status(b"\x01rdy\r"), "rdy")

    def test_only_one_leading_byte_dropped(self):
        self.assertEqual(ProtocolParser.decode_status(b"\x02\x03rdy"), "\x03rdy")

    def test_alphanumeric_start_kept(self):
        self.assertEqual(ProtocolParser.decode_status(b"9rdy"), "9rdy")

    def test_case_sensitive(self):
        self.assertNotEqual(ProtocolParser.decode_status(b"RDY"), "rdy")

    def test_empty(self):
        self.assertEqual(ProtocolParser.decode_status(b"\x00\x00"), "")
        self.assertEqual(ProtocolParser.decode_status(b""), "")

    def test_invalid_utf8_does_not_raise(self):
        self.assertIsInstance(ProtocolParser.decode_status(b"\xffrdy"), str)


class TestStripMarker(unittest.TestCase):

    def test_marker_removed(self):
        self.assertEqual(ProtocolParser.strip_marker(b"\x01NaVi"), b"NaVi")

    def test_no_marker(self):
        self.assertEqual(ProtocolParser.strip_marker(b"NaVi"), b"NaVi")

    def test_only_first_byte(self):
        self.assertEqual(ProtocolParser.strip_marker(b"\x01\x01x"), b"\x01x")

    def test_empty(self):
        self.assertEqual(ProtocolParser.strip_marker(b""), b"")


class TestRecordParse(unittest.TestCase):
    """Test NaVi record lines."""

    def test_five_fields(self):
        record = ProtocolParser.parse_record_line("NaVixx45,0.5,0.8,12,33")
        self.assertEqual(record, SensorRecord("xx45", "0.5", "0.8", "12", "33"))
        self.assertEqual(record.as_tuple(), ("xx45", "0.5", "0.8", "12", "33"))

    def test_fields_kept_as_text(self):
        record = ProtocolParser.parse_record_line("NaVi1,2,3,4,5")
        self.assertEqual(record.hue, "1")
        self.assertIsInstance(record.ambient, str)

    def test_whitespace_trimmed(self):
        record = ProtocolParser.parse_record_line("  NaVi 1,2,3,4,5\r ")
        self.assertEqual(record.as_tuple(), ("1", "2", "3", "4", "5"))

    def test_four_fields(self):
        with self.assertRaises(MalformedRecordError) as ctx:
            ProtocolParser.parse_record_line("NaVi1,2,3,4")
        self.assertEqual(ctx.exception.line, "NaVi1,2,3,4")

    def test_six_fields(self):
        with self.assertRaises(MalformedRecordError):
            ProtocolParser.parse_record_line("NaVi1,2,3,4,5,6")

    def test_not_a_record(self):
        self.assertIsNone(ProtocolParser.parse_record_line("rdy"))
        self.assertIsNone(ProtocolParser.parse_record_line(""))
        self.assertIsNone(ProtocolParser.parse_record_line("navi1,2,3,4,5"))


class TestSensorRecordAssembler(unittest.TestCase):
    """Test record assembly from notification packets."""

    def setUp(self):
        self.assembler = SensorRecordAssembler()

    def test_single_packet(self):
        records = self.assembler.feed(b"\x01NaVi1,2,3,4,5\n")
        self.assertEqual(records, [SensorRecord("1", "2", "3", "4", "5")])

    def test_record_split_across_packets_with_markers(self):
        """Every packet carries its own marker; none leak into the text."""
        self.assertEqual(self.assembler.feed(b"\x01NaVi10,2"), [])
        self.assertEqual(self.assembler.feed(b"\x010,30,4"), [])
        records = self.assembler.feed(b"\x010,50\n")
        self.assertEqual(records, [SensorRecord("10", "20", "30", "40", "50")])

    def test_multiple_records_in_one_packet(self):
        records = self.assembler.feed(b"NaVi1,2,3,4,5\nNaVi6,7,8,9,10\n")
        self.assertEqual(len(records), 2)
        self.assertEqual(records[1].hue, "6")
        self.assertEqual(self.assembler.record_count, 2)

    def test_malformed_line_skipped(self):
        """A bad line does not stop the stream."""
        records = self.assembler.feed(b"NaVi1,2,3\nNaVi1,2,3,4,5\n")
        self.assertEqual(records, [SensorRecord("1", "2", "3", "4", "5")])
        self.assertEqual(self.assembler.malformed_count, 1)

    def test_malformed_line_reported(self):
        errors = []
        assembler = SensorRecordAssembler(on_malformed=errors.append)
        assembler.feed(b"\x01NaVi1,2,3\n")
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], MalformedRecordError)
        self.assertEqual(errors[0].line, "NaVi1,2,3")

    def test_non_record_lines_ignored(self):
        records = self.assembler.feed(b"rdy\nhello\nNaVi1,2,3,4,5\n")
        self.assertEqual(len(records), 1)

    def test_utf8_split_across_packets(self):
        data = "NaVi1,2,3,4,é\n".encode("utf-8")
        cut = data.index(b"\xc3") + 1
        self.assertEqual(self.assembler.feed(data[:cut]), [])
        records = self.assembler.feed(data[cut:])
        self.assertEqual(records[0].ambient, "é")

    def test_incomplete_line_pending(self):
        self.assembler.feed(b"NaVi1,2")
        self.assertEqual(self.assembler.pending, b"NaVi1,2")


class TestPybricksProtocol(unittest.TestCase):

    def test_is_protocol(self):
        self.assertIsInstance(PybricksProtocol(), Protocol)
        self.assertEqual(PybricksProtocol().name, "pybricks")

    def test_delegates(self):
        protocol = PybricksProtocol()
        self.assertEqual(protocol.serialize_command(PRUNUS), b"\x06prunus")
        self.assertEqual(protocol.decode_status(b"\x02rdy\x00"), "rdy")

    def test_new_assembler_is_fresh(self):
        protocol = PybricksProtocol()
        first = protocol.new_assembler()
        first.feed(b"NaVi1")
        second = protocol.new_assembler()
        self.assertIsNot(first, second)
        self.assertEqual(second.pending, b"")

    def test_new_assembler_reports_malformed(self):
        errors = []
        assembler = PybricksProtocol().new_assembler(on_malformed=errors.append)
        assembler.feed(b"NaVi1\n")
        self.assertEqual(len(errors), 1)

    def test_abstract(self):
        with self.assertRaises(TypeError):
            Protocol()


if __name__ == '__main__':
    unittest.main()
