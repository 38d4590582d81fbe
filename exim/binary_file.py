"""
Define BinaryFile class and pointer widths.
"""
import os
import struct
import warnings
from enum import Enum
from io import BytesIO
from typing import Optional, IO

from .errors import InvalidPointerError, TextEncodingError


class PointerWidth(Enum):
    """Size of the offsets stored in a text table."""
    SHORT = "short"
    LONG = "long"

    @property
    def size(self) -> int:
        """Number of bytes used by one pointer."""
        return 2 if self is PointerWidth.SHORT else 4

    @property
    def struct_format(self) -> str:
        """Little-endian struct format of one pointer."""
        return "<H" if self is PointerWidth.SHORT else "<I"

    @property
    def max_offset(self) -> int:
        """Largest offset a pointer of this width can hold."""
        return (1 << (8 * self.size)) - 1


class BinaryFile:
    """Format for easily manipulation of binary files with pointers."""

    def __init__(
        self,
        file_path: Optional[str] = None,
        mode: str = "rb",
        *,
        _file: Optional[IO[bytes]] = None,
        _size: Optional[int] = None
    ):
        """
        Set properties for the binary file.

        :param file_path: File path (None for in-memory mode)
        :param mode: File opening mode (e.g.: "rb", "wb")
        :param _file: Internal: pre-opened file object (for from_bytes)
        :param _size: Internal: pre-calculated size (for from_bytes)
        """
        self.file_path = file_path
        self.mode = mode
        self._size = _size

        if _file is not None:
            self.file = _file
        else:
            self.file = None
            if mode not in ("rb", "r+b", "wb"):
                warnings.warn(f"Mode '{mode}' is not advised")

    def __enter__(self):
        """Open the binary file context."""
        if self.file is None:
            self.file = open(self.file_path, self.mode)
            current_pos = self.file.tell()
            self.file.seek(0, os.SEEK_END)
            self._size = self.file.tell()
            self.file.seek(current_pos)
        return self

    def __exit__(self, *args):
        """Close file on exit."""
        if self.file_path is not None:
            # Only close file-based instances, not BytesIO
            self.file.close()

    @property
    def size(self) -> int:
        """Return the file size in bytes."""
        return self._size

    def read(self, num_bytes):
        """Read num_bytes bytes."""
        return self.file.read(num_bytes)

    def read_int(self):
        """Read next 4 bytes as a little-endian unsigned integer."""
        data = self.file.read(4)
        if len(data) < 4:
            raise InvalidPointerError(
                f"Unexpected end of data at 0x{self.tell() - len(data):x}"
            )
        return struct.unpack("<I", data)[0]

    def read_pointer(self, width: PointerWidth) -> int:
        """Read the next pointer of the given width."""
        data = self.file.read(width.size)
        if len(data) < width.size:
            raise InvalidPointerError(
                f"Pointer table truncated at 0x{self.tell() - len(data):x}"
            )
        return struct.unpack(width.struct_format, data)[0]

    def read_until(self, terminator: bytes) -> bytes:
        """
        Read 2-byte units until the terminator unit or the end of file.

        The terminator is consumed but not returned.

        :param terminator: Two bytes ending the data
        :return: Data read, without the terminator
        :raises TextEncodingError: If the data ends with half a unit
        """
        stream = bytearray()
        unit = self.read(2)
        while unit != terminator and len(unit) == 2:
            stream += unit
            unit = self.read(2)
        if len(unit) == 1:
            raise TextEncodingError(
                f"Odd trailing byte 0x{unit[0]:02x} at 0x{self.tell() - 1:x}"
            )
        return bytes(stream)

    def seek(self, offset, seek_type=0):
        """Go to seek point."""
        self.file.seek(offset, seek_type)

    def tell(self):
        """Tell current pointer position."""
        return self.file.tell()

    def write(self, value):
        """Write a value to the file."""
        self.file.write(value)

    def write_int(self, value):
        """Write data as an integer."""
        self.write(struct.pack("<I", value))

    def write_pointer(self, value: int, width: PointerWidth):
        """
        Write a pointer of the given width.

        :raises InvalidPointerError: If the value does not fit the width
        """
        if value > width.max_offset:
            raise InvalidPointerError(
                f"Offset 0x{value:x} does not fit in {width.value} pointers "
                f"(maximum 0x{width.max_offset:x})"
            )
        self.write(struct.pack(width.struct_format, value))

    def validate_offset(self, offset: int, context: str = "") -> None:
        """
        Validate that an offset is within the file bounds.

        :param offset: The offset to validate
        :param context: Optional context string for error messages
        :raises InvalidPointerError: If offset is outside file bounds
        """
        if offset < 0 or offset >= self._size:
            ctx = f" ({context})" if context else ""
            raise InvalidPointerError(
                f"Pointer offset 0x{offset:x} is outside file bounds "
                f"(0x0 - 0x{max(self._size - 1, 0):x}){ctx}"
            )

    def getvalue(self) -> bytes:
        """Return everything written to an in-memory file."""
        return self.file.getvalue()

    @classmethod
    def from_bytes(cls, data: bytes) -> "BinaryFile":
        """
        Create a BinaryFile from in-memory bytes.

        :param data: Binary data to wrap.
        :return: BinaryFile instance backed by BytesIO.
        """
        return cls(
            file_path=None,
            mode="rb",
            _file=BytesIO(data),
            _size=len(data)
        )

    @classmethod
    def in_memory(cls) -> "BinaryFile":
        """Create an empty writable BinaryFile backed by BytesIO."""
        return cls(file_path=None, mode="wb", _file=BytesIO(), _size=0)
