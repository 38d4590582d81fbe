"""
Message banks (.mbm): an indexed list of messages behind a "MSG2" header.

Layout, all integers little-endian:

    0x00  u32  always 0
    0x04  4s   magic "MSG2"
    0x08  u32  version, 0x00010000
    0x0C  u32  file size
    0x10  u32  number of entries
    0x14  u32  offset of the entry table (0x20)
    0x18  8x   padding

Each entry is 16 bytes: message index, byte length, offset, padding.
A message ends with 0xFFFF, which is counted in its length. An entry with a
null length has no message.
"""
import logging
import struct
from dataclasses import dataclass, field
from typing import Optional

from .binary_file import BinaryFile, PointerWidth
from .errors import CodecError, MalformedEnvelopeError
from .text import decode_text, encode_text

logger = logging.getLogger(__name__)

MBM_MAGIC = b"MSG2"
MBM_VERSION = 0x00010000
HEADER_SIZE = 0x20
ENTRY_SIZE = 0x10
MESSAGE_TERMINATOR = b"\xff\xff"


@dataclass
class MBMEntry:
    """A single message slot."""
    index: int
    text: Optional[str] = None


@dataclass
class MBM:
    """Messages of a message bank, in file order."""
    entries: list[MBMEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Return the JSON payload of the message bank."""
        return {
            "entries": [
                {"index": entry.index, "text": entry.text} for entry in self.entries
            ]
        }

    @classmethod
    def from_dict(cls, payload) -> "MBM":
        """
        Build a message bank from its JSON payload.

        :param payload: Decoded JSON object, {"entries": [{"index", "text"}, ...]}
        :raises MalformedEnvelopeError: If the payload has another shape
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("entries"), list):
            raise MalformedEnvelopeError("A message bank payload needs an 'entries' list")
        entries = []
        for i, entry in enumerate(payload["entries"]):
            if not isinstance(entry, dict) or "index" not in entry:
                raise MalformedEnvelopeError(f"Message entry {i} needs an 'index'")
            index = entry["index"]
            text = entry.get("text")
            # bool is an int subclass
            if not isinstance(index, int) or isinstance(index, bool) or index < 0:
                raise MalformedEnvelopeError(
                    f"Message entry {i} has an invalid index: {index!r}"
                )
            if text is not None and not isinstance(text, str):
                raise MalformedEnvelopeError(
                    f"Message entry {i} text is {type(text).__name__}, expected a string"
                )
            entries.append(MBMEntry(index=index, text=text))
        return cls(entries=entries)


def parse_mbm(data: bytes, pointer_width: Optional[PointerWidth] = None) -> MBM:
    """
    Parse a message bank.

    :param data: Raw .mbm file content
    :param pointer_width: Ignored, message banks have a single layout
    :return: Parsed message bank
    :raises CodecError: If the data is not a valid message bank
    """
    if len(data) < HEADER_SIZE:
        raise CodecError(
            f"Message bank too small: {len(data)} bytes (minimum {HEADER_SIZE} required)"
        )
    if data[4:8] != MBM_MAGIC:
        raise CodecError(f"Invalid message bank magic: expected {MBM_MAGIC!r}, got {data[4:8]!r}")

    bfile = BinaryFile.from_bytes(data)
    bfile.seek(0x10)
    count = bfile.read_int()
    table_offset = bfile.read_int()
    if table_offset + count * ENTRY_SIZE > len(data):
        raise CodecError(
            f"Entry table (0x{table_offset:x}, {count} entries) exceeds the file size "
            f"0x{len(data):x}"
        )

    entries = []
    for i in range(count):
        bfile.seek(table_offset + i * ENTRY_SIZE)
        index, length, offset, _ = struct.unpack("<4I", bfile.read(ENTRY_SIZE))
        if length == 0:
            entries.append(MBMEntry(index=index))
            continue
        bfile.validate_offset(offset, f"message {index}")
        if offset + length > len(data):
            raise CodecError(
                f"Message {index} (0x{offset:x}, {length} bytes) exceeds the file size"
            )
        bfile.seek(offset)
        raw = bfile.read(length)
        if raw.endswith(MESSAGE_TERMINATOR):
            raw = raw[:-len(MESSAGE_TERMINATOR)]
        try:
            entries.append(MBMEntry(index=index, text=decode_text(raw)))
        except CodecError as exc:
            raise CodecError(f"Message {index}: {exc}") from exc
    logger.debug("Read %d message entries", len(entries))
    return MBM(entries=entries)


def serialize_mbm(mbm: MBM, pointer_width: Optional[PointerWidth] = None) -> bytes:
    """
    Build a message bank.

    :param mbm: Message bank to write
    :param pointer_width: Ignored, message banks have a single layout
    :return: Raw .mbm file content
    """
    blobs = []
    for entry in mbm.entries:
        if entry.text is None:
            blobs.append(b"")
            continue
        try:
            blobs.append(encode_text(entry.text) + MESSAGE_TERMINATOR)
        except CodecError as exc:
            raise CodecError(f"Message {entry.index}: {exc}") from exc

    strings_start = HEADER_SIZE + len(blobs) * ENTRY_SIZE
    file_size = strings_start + sum(len(blob) for blob in blobs)

    bfile = BinaryFile.in_memory()
    bfile.write_int(0)
    bfile.write(MBM_MAGIC)
    bfile.write_int(MBM_VERSION)
    bfile.write_int(file_size)
    bfile.write_int(len(blobs))
    bfile.write_int(HEADER_SIZE)
    bfile.write(b"\x00" * 8)

    offset = strings_start
    for entry, blob in zip(mbm.entries, blobs):
        if blob:
            bfile.write(struct.pack("<4I", entry.index, len(blob), offset, 0))
            offset += len(blob)
        else:
            bfile.write(struct.pack("<4I", entry.index, 0, 0, 0))
    for blob in blobs:
        bfile.write(blob)
    return bfile.getvalue()
