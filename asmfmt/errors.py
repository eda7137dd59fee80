"""
Error kinds raised by the formatter.

A formatting run either succeeds or fails with exactly one of the
:class:`AsmFormatError` subclasses below; no partial output is produced.
"""
from __future__ import annotations

from typing import Optional


class AsmFormatError(Exception):
    """Base class for every error raised while formatting assembly source."""

    def __init__(
        self,
        message: str,
        line_no: Optional[int] = None,
        line: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.line_no = line_no
        self.line = line

    def __str__(self) -> str:
        if self.line_no is None:
            return self.message
        return f"line {self.line_no}: {self.message}"


class MalformedLineError(AsmFormatError):
    """A single source line cannot be classified (e.g. unbalanced quoting)."""


class UnterminatedConstructError(AsmFormatError):
    """A block comment or continuation chain is still open at end of input."""
