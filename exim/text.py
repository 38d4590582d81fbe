"""
Conversion between game text and Python strings.

Game text is a sequence of 16-bit units stored high byte first. Most units are
two-byte Shift-JIS characters; the others are written as "[XXXX]" escapes so
that any binary string survives a round trip through JSON.
"""
import codecs
import re

from .errors import TextEncodingError

TEXT_ENCODING = "shift_jisx0213"

NEWLINE_UNIT = 0x8001

ESCAPE_PATTERN = re.compile(r"\[([0-9A-Fa-f]{4})\]")


def _escape(unit):
    """Return the escape sequence of a raw unit."""
    return f"[{unit:04X}]"


def decode_unit(high, low):
    """
    Decode a single 16-bit unit.

    :param int high: First byte
    :param int low: Second byte
    :return str: Decoded text, possibly an escape sequence
    """
    unit = high << 8 | low
    if unit == NEWLINE_UNIT:
        return "\n"
    if high == 0 and 0x20 <= low < 0x7F:
        char = chr(low)
        return "[[" if char == "[" else char
    pair = bytes((high, low))
    try:
        char = codecs.decode(pair, TEXT_ENCODING)
    except UnicodeDecodeError:
        return _escape(unit)
    # Only keep characters that give back the exact same bytes
    if len(char) == 1 and codecs.encode(char, TEXT_ENCODING) == pair:
        return char
    return _escape(unit)


def decode_text(data):
    """
    Decode game text to a string.

    :param bytes data: Game text without terminator
    :return str: Decoded string
    :raises TextEncodingError: If data has an odd length
    """
    if len(data) % 2:
        raise TextEncodingError(f"Game text has an odd length ({len(data)} bytes)")
    return "".join(
        decode_unit(data[i], data[i + 1]) for i in range(0, len(data), 2)
    )


def encode_char(char):
    """
    Encode a single character to a 16-bit unit.

    :param str char: Character to encode
    :return bytes: Two bytes of game text
    """
    if char == "\n":
        return NEWLINE_UNIT.to_bytes(2, "big")
    if 0x20 <= ord(char) < 0x7F:
        return bytes((0, ord(char)))
    try:
        encoded = codecs.encode(char, TEXT_ENCODING)
    except UnicodeEncodeError as exc:
        raise TextEncodingError(
            f"Character {char!r} (U+{ord(char):04X}) cannot be written as game text"
        ) from exc
    if len(encoded) != 2:
        raise TextEncodingError(
            f"Character {char!r} (U+{ord(char):04X}) is not a two-byte character"
        )
    return encoded


def encode_text(text):
    """
    Encode a string to game text, without terminator.

    :param str text: String using "[XXXX]" escapes and "[[" for a literal "["
    :return bytes: Encoded game text
    :raises TextEncodingError: If a character or escape cannot be encoded
    """
    output = bytearray()
    position = 0
    while position < len(text):
        char = text[position]
        if char == "[":
            if text.startswith("[[", position):
                output += b"\x00["
                position += 2
                continue
            match = ESCAPE_PATTERN.match(text, position)
            if match is None:
                raise TextEncodingError(
                    f"Invalid escape at position {position} in {text!r}. "
                    "Use '[XXXX]' for raw codes or '[[' for a bracket."
                )
            output += int(match.group(1), 16).to_bytes(2, "big")
            position = match.end()
            continue
        output += encode_char(char)
        position += 1
    return bytes(output)
