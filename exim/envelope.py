"""
JSON documents describing an exported table or message bank.

Every export starts with a type tag line naming the file kind, followed by a
JSON object that may span any number of lines:

    OriginTablets.Types.Table
    {
      "kind": "Table",
      "pointer_width": "short",
      "metadata": {"source_file": "item.tbl", "version": "1.0.0"},
      "payload": {"strings": [...]}
    }

The legacy layout has the bare payload after the tag line. A document
without tag line, starting directly with the object, is also accepted.
"""
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from .binary_file import PointerWidth
from .errors import MalformedEnvelopeError
from .formats import FileKind, uses_pointer_width

logger = logging.getLogger(__name__)

JSON_INDENT = 2

LEGACY_TAGS = {kind.legacy_tag: kind for kind in FileKind}
LEGACY_TAGS.update({kind.value: kind for kind in FileKind})

# str.splitlines would also break on separators allowed inside JSON strings
LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass
class Envelope:
    """A record with the information needed to convert it back."""
    kind: FileKind
    payload: dict
    pointer_width: Optional[PointerWidth] = None
    metadata: dict = field(default_factory=dict)
    legacy: bool = False


def build_envelope(kind, record, pointer_width=None, source_file=""):
    """
    Wrap a record for export.

    :param FileKind kind: Kind of the record
    :param record: Table or MBM, anything with a to_dict method
    :param PointerWidth pointer_width: Width used to parse a table
    :param str source_file: Name of the exported binary file
    :return Envelope: Envelope ready to be written
    """
    from . import __version__

    return Envelope(
        kind=kind,
        payload=record.to_dict(),
        pointer_width=pointer_width if uses_pointer_width(kind) else None,
        metadata={"source_file": source_file, "version": __version__},
    )


def dumps_envelope(envelope, legacy=False):
    """
    Serialize an envelope as text.

    :param Envelope envelope: Envelope to serialize
    :param bool legacy: Write the bare payload after the tag line
    :return str: Tag line and JSON text, ending with a newline
    """
    if legacy:
        document = envelope.payload
    else:
        document = {"kind": envelope.kind.value}
        if envelope.pointer_width is not None:
            document["pointer_width"] = envelope.pointer_width.value
        document["metadata"] = envelope.metadata
        document["payload"] = envelope.payload
    body = json.dumps(document, ensure_ascii=False, indent=JSON_INDENT)
    return envelope.kind.legacy_tag + "\n" + body + "\n"


def split_lines(text):
    """Split text on any line break."""
    return LINE_BREAK.split(text)


def join_body_lines(lines):
    """
    Rebuild a JSON body written across several lines.

    Lines are joined without separator: a line break can only be whitespace
    between JSON tokens, never part of a string.
    """
    return "".join(lines)


def kind_from_tag(tag):
    """
    Get the file kind from a legacy tag line.

    :param str tag: First line of a legacy document
    :return FileKind: Matching kind
    """
    tag = tag.strip()
    if tag in LEGACY_TAGS:
        return LEGACY_TAGS[tag]
    kind = FileKind.MBM if "MBM" in tag else FileKind.TABLE
    logger.warning("Unknown type tag '%s', reading the file as %s", tag, kind.value)
    return kind


def _loads_json(text, what):
    """Decode JSON text, reporting errors as malformed envelopes."""
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedEnvelopeError(f"Invalid JSON in {what}: {exc}") from exc


def _is_structured(document):
    """Tell a kind/payload object apart from a bare payload."""
    return isinstance(document, dict) and "kind" in document and "payload" in document


def _loads_structured(document):
    """Read the kind/payload object."""
    if not isinstance(document, dict):
        raise MalformedEnvelopeError("The document must be a JSON object")
    kind_value = document.get("kind")
    try:
        kind = FileKind(kind_value)
    except ValueError as exc:
        raise MalformedEnvelopeError(
            f"Unknown kind {kind_value!r}, expected one of "
            + ", ".join(repr(k.value) for k in FileKind)
        ) from exc
    payload = document.get("payload")
    if not isinstance(payload, dict):
        raise MalformedEnvelopeError("The document has no 'payload' object")

    pointer_width = None
    width_value = document.get("pointer_width")
    if width_value is not None:
        try:
            pointer_width = PointerWidth(width_value)
        except ValueError as exc:
            raise MalformedEnvelopeError(
                f"Unknown pointer width {width_value!r}, expected 'short' or 'long'"
            ) from exc
    metadata = document.get("metadata")
    return Envelope(
        kind=kind,
        payload=payload,
        pointer_width=pointer_width if uses_pointer_width(kind) else None,
        metadata=metadata if isinstance(metadata, dict) else {},
    )


def _loads_tagged(lines):
    """Read a tag line followed by a JSON body."""
    kind = kind_from_tag(lines[0])
    body = _loads_json(join_body_lines(lines[1:]), f"{kind.value} body")
    if _is_structured(body):
        envelope = _loads_structured(body)
        if envelope.kind is not kind:
            raise MalformedEnvelopeError(
                f"The type tag says {kind.value} but the document kind is "
                f"{envelope.kind.value}"
            )
        return envelope
    if not isinstance(body, dict):
        raise MalformedEnvelopeError(f"The {kind.value} body must be a JSON object")
    return Envelope(kind=kind, payload=body, legacy=True)


def loads_envelope(text):
    """
    Read an envelope from text, in any layout.

    :param str text: Document text
    :return Envelope: Decoded envelope
    :raises MalformedEnvelopeError: If the text is empty or not a valid envelope
    """
    if not text.strip():
        raise MalformedEnvelopeError("The file is empty, no type tag found")
    text = text.lstrip()
    if text.startswith("{"):
        return _loads_structured(_loads_json(text, "document"))
    return _loads_tagged(split_lines(text))


def write_envelope(output_file, envelope, legacy=False):
    """Write an envelope to a file, replacing it."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(dumps_envelope(envelope, legacy))


def read_envelope(input_file):
    """
    Read an envelope from a file.

    :param str input_file: Path to a JSON document
    :return Envelope: Decoded envelope
    """
    try:
        with open(input_file, "r", encoding="utf-8-sig") as f:
            text = f.read()
    except UnicodeDecodeError as exc:
        raise MalformedEnvelopeError(f"'{input_file}' is not UTF-8 text: {exc}") from exc
    return loads_envelope(text)
