"""
Definition of the ExIm module.
"""

__version__ = "1.0.0"

from .binary_file import PointerWidth
from .envelope import Envelope, read_envelope, write_envelope
from .errors import (
    EximError,
    UsageError,
    UnsupportedFormatError,
    MalformedEnvelopeError,
    PointerWidthMismatchError,
    CodecError,
)
from .formats import FileKind, FormatCodec, get_codec
from .mbm import MBM, MBMEntry, parse_mbm, serialize_mbm
from .pipeline import convert, export_file, import_file
from .resolver import ConversionRequest, Mode
from .table import Table, parse_table, serialize_table
