"""
File kinds and the codecs converting them.
"""
import os
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .binary_file import PointerWidth
from .errors import UnsupportedFormatError
from .mbm import MBM, parse_mbm, serialize_mbm
from .table import Table, parse_table, serialize_table


class FileKind(Enum):
    """Binary file variants that can be converted."""
    TABLE = "Table"
    MBM = "MBM"

    @property
    def legacy_tag(self) -> str:
        """Tag line of the two-line JSON layout."""
        return f"OriginTablets.Types.{self.value}"

    @classmethod
    def from_extension(cls, file_path: str) -> "FileKind":
        """
        Get the file kind from a binary file name.

        :param file_path: Path ending in .tbl or .mbm (any case)
        :raises UnsupportedFormatError: For any other extension
        """
        extension = os.path.splitext(file_path)[1].lower()
        if extension == ".tbl":
            return cls.TABLE
        if extension == ".mbm":
            return cls.MBM
        raise UnsupportedFormatError(
            f"'{file_path}' has an unsupported extension '{extension}'. "
            "Only .tbl and .mbm files can be exported."
        )


@dataclass(frozen=True)
class FormatCodec:
    """
    Binary conversion capability for one file kind.

    :param parse: (bytes, PointerWidth) -> record
    :param serialize: (record, PointerWidth) -> bytes
    :param from_dict: JSON payload -> record
    """
    kind: FileKind
    parse: Callable
    serialize: Callable
    from_dict: Callable


CODECS = {
    FileKind.TABLE: FormatCodec(FileKind.TABLE, parse_table, serialize_table, Table.from_dict),
    FileKind.MBM: FormatCodec(FileKind.MBM, parse_mbm, serialize_mbm, MBM.from_dict),
}


def get_codec(kind: FileKind, codecs: Optional[dict] = None) -> FormatCodec:
    """
    Return the codec of a file kind.

    :param kind: File kind to convert
    :param codecs: Replacement registry, defaults to CODECS
    """
    return (CODECS if codecs is None else codecs)[kind]


def uses_pointer_width(kind: FileKind) -> bool:
    """Only tables have short and long variants."""
    return kind is FileKind.TABLE
