"""
Text tables (.tbl): a pointer table followed by the strings it points to.
"""
import logging
from dataclasses import dataclass, field

from .binary_file import BinaryFile, PointerWidth
from .errors import (
    CodecError,
    InvalidPointerError,
    MalformedEnvelopeError,
    TextEncodingError,
)
from .text import decode_text, encode_text

logger = logging.getLogger(__name__)

STRING_TERMINATOR = b"\x00\x00"


@dataclass
class Table:
    """Ordered strings of a text table."""
    strings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Return the JSON payload of the table."""
        return {"strings": list(self.strings)}

    @classmethod
    def from_dict(cls, payload) -> "Table":
        """
        Build a table from its JSON payload.

        :param payload: Decoded JSON object, {"strings": [str, ...]}
        :raises MalformedEnvelopeError: If the payload has another shape
        """
        if not isinstance(payload, dict) or not isinstance(payload.get("strings"), list):
            raise MalformedEnvelopeError("A table payload needs a 'strings' list")
        for i, string in enumerate(payload["strings"]):
            if not isinstance(string, str):
                raise MalformedEnvelopeError(
                    f"Table string {i} is {type(string).__name__}, expected a string"
                )
        return cls(strings=list(payload["strings"]))


def read_pointer_table(bfile: BinaryFile, width: PointerWidth) -> list[int]:
    """
    Read all the pointers at the start of a table.

    The first pointer gives the end of the pointer table, hence the number
    of pointers.

    :param bfile: Table data
    :param width: Width of each pointer
    :return: Absolute string offsets
    :raises InvalidPointerError: If the pointers are inconsistent with the width
    """
    bfile.seek(0)
    first = bfile.read_pointer(width)
    if first == 0 or first % width.size:
        raise InvalidPointerError(
            f"First pointer 0x{first:x} is not a multiple of {width.size}; "
            f"is this really a table with {width.value} pointers?"
        )
    bfile.validate_offset(first, "end of pointer table")
    pointers = [first]
    for _ in range(first // width.size - 1):
        pointer = bfile.read_pointer(width)
        if pointer < first:
            raise InvalidPointerError(
                f"Pointer 0x{pointer:x} at 0x{bfile.tell() - width.size:x} "
                f"points inside the pointer table (ends at 0x{first:x})"
            )
        bfile.validate_offset(pointer, f"string {len(pointers)}")
        pointers.append(pointer)
    return pointers


def parse_table(data: bytes, pointer_width: PointerWidth) -> Table:
    """
    Parse a text table.

    :param data: Raw .tbl file content
    :param pointer_width: Width of the pointers
    :return: Parsed table
    :raises CodecError: If the data is not a valid table for this width
    """
    if not data:
        return Table()
    bfile = BinaryFile.from_bytes(data)
    strings = []
    for i, pointer in enumerate(read_pointer_table(bfile, pointer_width)):
        bfile.seek(pointer)
        try:
            strings.append(decode_text(bfile.read_until(STRING_TERMINATOR)))
        except CodecError as exc:
            raise CodecError(f"String {i} at 0x{pointer:x}: {exc}") from exc
    logger.debug("Read %d strings with %s pointers", len(strings), pointer_width.value)
    return Table(strings=strings)


def serialize_table(table: Table, pointer_width: PointerWidth) -> bytes:
    """
    Build a text table.

    Strings are written in order, each one after the previous.

    :param table: Table to write
    :param pointer_width: Width of the pointers
    :return: Raw .tbl file content
    :raises CodecError: If an offset does not fit in the pointer width
    """
    blobs = []
    for i, string in enumerate(table.strings):
        try:
            encoded = encode_text(string)
        except CodecError as exc:
            raise CodecError(f"String {i}: {exc}") from exc
        # A null unit would end the string early when read back
        if any(encoded[j:j + 2] == STRING_TERMINATOR for j in range(0, len(encoded), 2)):
            raise TextEncodingError(
                f"String {i}: '[0000]' ends a table string and cannot be used inside one"
            )
        blobs.append(encoded + STRING_TERMINATOR)

    bfile = BinaryFile.in_memory()
    offset = len(blobs) * pointer_width.size
    for blob in blobs:
        try:
            bfile.write_pointer(offset, pointer_width)
        except InvalidPointerError as exc:
            raise CodecError(
                f"{exc}. The table is too large for {pointer_width.value} pointers, "
                "try --long."
            ) from exc
        offset += len(blob)
    for blob in blobs:
        bfile.write(blob)
    return bfile.getvalue()
