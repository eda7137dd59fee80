"""
FormatTask
==========

Entry point for formatting whole documents.

Every call builds a fresh :class:`~asmfmt.pipeline.formatter.Formatter`
with its own :class:`~asmfmt.passes.macro_table.MacroTable`, so documents
never influence each other.

Bytes are decoded as UTF-8 with ``surrogateescape``: bytes that are not
valid UTF-8 are carried through to the output unchanged.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from ..parser.statement_parser import StatementParser
from ..passes.macro_table import MacroTable
from .formatter import Formatter

logger = logging.getLogger(__name__)

_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class FormatTask:
    """
    High-level entry point for the formatting pipeline.

    Parameters
    ----------
    parser:
        Statement classifier shared by all runs (it is stateless).
    """

    def __init__(self, parser: Optional[StatementParser] = None) -> None:
        self._parser = parser if parser is not None else StatementParser()

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def format_text(self, source: str) -> str:
        """
        Format assembly supplied as a **string**.

        Raises
        ------
        MalformedLineError
            A line cannot be classified.
        UnterminatedConstructError
            A block comment or continuation chain is still open at the end.
        """
        return Formatter(MacroTable(), self._parser).format(source)

    def format_bytes(self, data: bytes) -> bytes:
        """Format assembly supplied as raw **bytes**."""
        text = data.decode(_ENCODING, errors=_ERRORS)
        return self.format_text(text).encode(_ENCODING, errors=_ERRORS)

    def format_file(self, file_path: Union[str, Path]) -> str:
        """
        Read and format an assembly source **file**.  The file itself is
        left untouched.
        """
        logger.info("Formatting file: %s", file_path)
        source = Path(file_path).read_bytes().decode(_ENCODING, errors=_ERRORS)
        return self.format_text(source)

    def is_formatted(self, source: str) -> bool:
        """True when *source* is already in canonical form."""
        return self.format_text(source) == source


def format_text(source: str) -> str:
    """Format *source* with a default :class:`FormatTask`."""
    return FormatTask().format_text(source)


def format_bytes(data: bytes) -> bytes:
    """Format *data* with a default :class:`FormatTask`."""
    return FormatTask().format_bytes(data)
