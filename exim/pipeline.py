"""
Export binary files to JSON and import them back.
"""
import logging
import os

from .binary_file import BinaryFile
from .envelope import build_envelope, read_envelope, write_envelope
from .errors import PointerWidthMismatchError
from .formats import FileKind, get_codec, uses_pointer_width
from .resolver import Mode

logger = logging.getLogger(__name__)


def read_binary(input_file):
    """Read a whole binary file."""
    with BinaryFile(input_file) as bfile:
        return bfile.read(bfile.size)


def export_file(request, codecs=None):
    """
    Convert a .tbl or .mbm file to a JSON document.

    :param ConversionRequest request: Export request
    :param dict codecs: Replacement codec registry
    :return Envelope: Written envelope
    :raises UnsupportedFormatError: If the input extension is unknown
    """
    kind = FileKind.from_extension(request.input_path)
    codec = get_codec(kind, codecs)
    data = read_binary(request.input_path)
    logger.debug("Parsing %s (%d bytes) as %s", request.input_path, len(data), kind.value)
    record = codec.parse(data, request.pointer_width)

    envelope = build_envelope(
        kind, record, request.pointer_width, os.path.basename(request.input_path)
    )
    write_envelope(request.output_path, envelope, request.legacy_envelope)
    logger.debug("Wrote %s envelope to %s", kind.value, request.output_path)
    return envelope


def check_pointer_width(envelope, request):
    """
    Verify that a table is imported with the width it was exported with.

    :raises PointerWidthMismatchError: If the widths differ
    """
    if not uses_pointer_width(envelope.kind) or envelope.pointer_width is None:
        return
    if envelope.pointer_width is not request.pointer_width:
        hint = "add" if envelope.pointer_width.value == "long" else "remove"
        raise PointerWidthMismatchError(
            f"'{request.input_path}' was exported with {envelope.pointer_width.value} "
            f"pointers but {request.pointer_width.value} pointers were requested; "
            f"{hint} -l/--long."
        )


def import_file(request, codecs=None):
    """
    Convert a JSON document back to a .tbl or .mbm file.

    :param ConversionRequest request: Import request
    :param dict codecs: Replacement codec registry
    :return int: Number of bytes written
    :raises MalformedEnvelopeError: If the document cannot be read
    """
    envelope = read_envelope(request.input_path)
    logger.debug(
        "Read %s envelope%s", envelope.kind.value, " (legacy layout)" if envelope.legacy else ""
    )
    check_pointer_width(envelope, request)
    codec = get_codec(envelope.kind, codecs)
    record = codec.from_dict(envelope.payload)
    data = codec.serialize(record, request.pointer_width)

    with BinaryFile(request.output_path, "wb") as bfile:
        bfile.write(data)
    logger.debug("Wrote %d bytes to %s", len(data), request.output_path)
    return len(data)


def convert(request, codecs=None):
    """
    Run a conversion request.

    :param ConversionRequest request: Validated request
    :param dict codecs: Replacement codec registry
    """
    if request.mode is Mode.EXPORT:
        envelope = export_file(request, codecs)
        print(f"Exported {envelope.kind.value} '{request.input_path}' to '{request.output_path}'")
    else:
        size = import_file(request, codecs)
        print(f"Imported '{request.input_path}' to '{request.output_path}' ({size} bytes)")
