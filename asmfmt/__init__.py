"""
asmfmt
======

A formatter for Go / Plan 9 assembly source.

Reformats ``.s`` files with canonical indentation (tabs), one space between
operands, vertically aligned trailing comments and aligned ``\\``
continuation markers in multi-line macros.  Only whitespace changes: no
statement is reordered and no comment text is rewritten.

Quick start
-----------
>>> from asmfmt import format_text
>>> print(format_text("loop:\\nDECQ CX // count down\\nJNZ loop\\n"), end="")
loop:
	DECQ CX // count down
	JNZ loop
"""

from .errors import AsmFormatError, MalformedLineError, UnterminatedConstructError
from .models import Statement
from .parser.statement_parser import StatementParser
from .passes.macro_table import MacroTable
from .pipeline.format_task import FormatTask, format_bytes, format_text
from .pipeline.formatter import Formatter

__version__ = "0.1.0"
__all__ = [
    "AsmFormatError",
    "MalformedLineError",
    "UnterminatedConstructError",
    "Statement",
    "StatementParser",
    "MacroTable",
    "FormatTask",
    "Formatter",
    "format_text",
    "format_bytes",
]
