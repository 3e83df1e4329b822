"""Exceptions raised by lbconv.

Only two things are fatal: the input cannot be obtained, or a block never
finds its terminator. Everything else is absorbed as a Diagnostic.
"""


class LBConvError(Exception):
    """Base class for all lbconv errors."""


class ConfigSourceError(LBConvError):
    """The configuration text could not be obtained (missing file, empty input)."""


class DialectDetectionError(LBConvError):
    """The text matches neither supported dialect."""


class ParseError(LBConvError):
    """Malformed structure that cannot be recovered from."""

    def __init__(self, message: str, line_number: int = 0, dialect: str = "") -> None:
        self.line_number = line_number
        self.dialect = dialect
        location = f" (line {line_number})" if line_number else ""
        super().__init__(f"{message}{location}")


class UnterminatedBlockError(ParseError):
    """A block opener reached end of input without its terminator."""
