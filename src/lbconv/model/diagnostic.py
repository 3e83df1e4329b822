"""Diagnostic dataclass - Non-fatal observations made while parsing."""

from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    """Severity levels for diagnostics."""

    WARNING = "warning"  # Input was partially ignored
    INFO = "info"  # Advisory, e.g. a dangling reference


@dataclass(frozen=True)
class Diagnostic:
    """Something the parser absorbed instead of failing on.

    Attributes:
        severity: How much the observation matters.
        message: Human readable description.
        line_number: 1-based source line, 0 when not tied to a line.
        excerpt: The offending source text, if any.
    """

    severity: Severity
    message: str
    line_number: int = 0
    excerpt: str = ""

    def __str__(self) -> str:
        """Format diagnostic for display."""
        location = f"line {self.line_number}: " if self.line_number else ""
        suffix = f" [{self.excerpt}]" if self.excerpt else ""
        return f"{location}{self.message}{suffix}"
