"""
Exceptions raised while converting text tables and message banks.
"""


class EximError(Exception):
    """Base class for every error reported to the user."""
    pass


class UsageError(EximError):
    """Raised when the command line cannot be turned into a conversion request."""

    def __init__(self, message, show_usage=True):
        """
        :param str message: Message shown to the user
        :param bool show_usage: Whether the short usage text should follow the message
        """
        super().__init__(message)
        self.show_usage = show_usage


class UnsupportedFormatError(EximError):
    """Raised when an input file extension is neither .tbl nor .mbm."""
    pass


class MalformedEnvelopeError(EximError):
    """Raised when a JSON file cannot be read back as a table or message bank."""
    pass


class PointerWidthMismatchError(EximError):
    """Raised when the requested pointer width differs from the exported one."""
    pass


class CodecError(EximError, ValueError):
    """Raised when binary data cannot be parsed or built."""
    pass


class InvalidPointerError(CodecError):
    """Raised when a pointer offset is outside the valid file bounds."""
    pass


class TextEncodingError(CodecError):
    """Raised when a string cannot be converted to or from game text."""
    pass
