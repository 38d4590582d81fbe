"""Tests for message bank parsing and building."""

import struct
import unittest

from exim.binary_file import PointerWidth
from exim.errors import CodecError, MalformedEnvelopeError
from exim.mbm import (
    MBM,
    MBMEntry,
    MBM_MAGIC,
    MBM_VERSION,
    HEADER_SIZE,
    ENTRY_SIZE,
    parse_mbm,
    serialize_mbm,
)


def _sample_mbm():
    return MBM([MBMEntry(0, "A"), MBMEntry(1, None), MBMEntry(5, "")])


class TestSerializeMbm(unittest.TestCase):
    """Test serialize_mbm layout."""

    def setUp(self):
        self.data = serialize_mbm(_sample_mbm())

    def test_header(self):
        """MSG2 header with file size, entry count and table offset."""
        zero, magic, version, size, count, table = struct.unpack("<I4s4I", self.data[:24])
        self.assertEqual(zero, 0)
        self.assertEqual(magic, MBM_MAGIC)
        self.assertEqual(version, MBM_VERSION)
        self.assertEqual(size, len(self.data))
        self.assertEqual(count, 3)
        self.assertEqual(table, HEADER_SIZE)
        self.assertEqual(self.data[24:32], b"\x00" * 8)

    def test_entries(self):
        """Placeholders have no length and no offset."""
        entries = [
            struct.unpack("<4I", self.data[HEADER_SIZE + i * ENTRY_SIZE:HEADER_SIZE + (i + 1) * ENTRY_SIZE])
            for i in range(3)
        ]
        self.assertEqual(entries, [(0, 4, 0x50, 0), (1, 0, 0, 0), (5, 2, 0x54, 0)])

    def test_messages(self):
        """Messages end with 0xFFFF."""
        self.assertEqual(self.data[0x50:], b"\x00A\xff\xff" + b"\xff\xff")

    def test_empty_bank(self):
        """A bank without entries is only a header."""
        data = serialize_mbm(MBM())
        self.assertEqual(len(data), HEADER_SIZE)
        self.assertEqual(parse_mbm(data), MBM())


class TestParseMbm(unittest.TestCase):
    """Test parse_mbm."""

    def test_roundtrip(self):
        """Indices, placeholders and empty messages survive."""
        mbm = MBM([MBMEntry(3, "あ[8004]\nB"), MBMEntry(4, None), MBMEntry(7, "")])
        data = serialize_mbm(mbm)
        self.assertEqual(parse_mbm(data), mbm)
        self.assertEqual(serialize_mbm(parse_mbm(data)), data)

    def test_pointer_width_ignored(self):
        """Message banks do not depend on the pointer width."""
        data = serialize_mbm(_sample_mbm())
        self.assertEqual(parse_mbm(data, PointerWidth.LONG), parse_mbm(data, PointerWidth.SHORT))
        self.assertEqual(serialize_mbm(_sample_mbm(), PointerWidth.LONG), data)

    def test_too_small(self):
        """Data shorter than the header is rejected."""
        with self.assertRaises(CodecError):
            parse_mbm(b"\x00" * 8)

    def test_bad_magic(self):
        """Data without the MSG2 magic is rejected."""
        data = bytearray(serialize_mbm(_sample_mbm()))
        data[4:8] = b"NOPE"
        with self.assertRaises(CodecError):
            parse_mbm(bytes(data))

    def test_message_out_of_bounds(self):
        """A message offset past the end of file is rejected."""
        data = bytearray(serialize_mbm(_sample_mbm()))
        struct.pack_into("<I", data, HEADER_SIZE + 8, 0x1000)
        with self.assertRaises(CodecError):
            parse_mbm(bytes(data))

    def test_entry_table_out_of_bounds(self):
        """An entry count larger than the file is rejected."""
        data = bytearray(serialize_mbm(_sample_mbm()))
        struct.pack_into("<I", data, 0x10, 100)
        with self.assertRaises(CodecError):
            parse_mbm(bytes(data))

    def test_message_without_terminator(self):
        """The entry length bounds a message missing its terminator."""
        data = bytearray(serialize_mbm(MBM([MBMEntry(0, "AB")])))
        # Shorten the first message so its terminator is cut off
        struct.pack_into("<I", data, HEADER_SIZE + 4, 4)
        self.assertEqual(parse_mbm(bytes(data)).entries, [MBMEntry(0, "AB")])


class TestMbmFromDict(unittest.TestCase):
    """Test MBM.from_dict payload validation."""

    def test_valid(self):
        """Missing or null text makes a placeholder."""
        payload = {"entries": [{"index": 0, "text": "a"}, {"index": 2, "text": None}, {"index": 3}]}
        self.assertEqual(
            MBM.from_dict(payload),
            MBM([MBMEntry(0, "a"), MBMEntry(2, None), MBMEntry(3, None)]),
        )

    def test_to_dict(self):
        """Placeholders are written with a null text."""
        self.assertEqual(
            _sample_mbm().to_dict(),
            {"entries": [
                {"index": 0, "text": "A"},
                {"index": 1, "text": None},
                {"index": 5, "text": ""},
            ]},
        )

    def test_table_payload(self):
        """A table payload is not a message bank."""
        with self.assertRaises(MalformedEnvelopeError):
            MBM.from_dict({"strings": ["a"]})

    def test_missing_index(self):
        """Every entry needs an index."""
        with self.assertRaises(MalformedEnvelopeError):
            MBM.from_dict({"entries": [{"text": "a"}]})

    def test_invalid_index(self):
        """Indices are non-negative integers."""
        for index in ("1", -1, True, 1.5):
            with self.subTest(index=index):
                with self.assertRaises(MalformedEnvelopeError):
                    MBM.from_dict({"entries": [{"index": index, "text": "a"}]})

    def test_invalid_text(self):
        """Text is a string or null."""
        with self.assertRaises(MalformedEnvelopeError):
            MBM.from_dict({"entries": [{"index": 0, "text": ["a"]}]})


if __name__ == "__main__":
    unittest.main()
