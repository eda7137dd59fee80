"""
StatementParser
===============

Classifies a single physical line of Go / Plan 9 assembly into a
:class:`~asmfmt.models.Statement`.

Line layout::

    [instruction] [operand, operand, ...] [\\] [// comment] [\\]

Field extraction rules:

* The first ``//`` outside a quoted literal starts the comment.  Quoted
  literals are ``"..."`` and ``'...'`` with backslash escapes; an unclosed
  quote raises :class:`~asmfmt.errors.MalformedLineError`.  A ``/* ... */``
  span inside the code is opaque.
* A trailing backslash on the code (``MOVQ AX, BX \\``) or on the comment
  (``// text \\``) marks the line as continued; the marker is removed from
  the fields.
* The instruction is the first token, delimited by whitespace outside
  parentheses, brackets, braces and quotes, so ``ROUND(a, b)`` stays whole.
* Operands are split at top-level commas.  Preprocessor directives keep
  ``[name, rest-of-line]`` and macro invocations keep their argument text
  verbatim.  ``#error`` and ``#warning`` keep their text whole, and quotes
  in it need not balance.

+--------------------+-----------------------------------------------------+
| Kind               | Example                                             |
+====================+=====================================================+
| label              | ``loop:``                                           |
+--------------------+-----------------------------------------------------+
| level-0 directive  | ``TEXT ·add(SB), NOSPLIT, $0-24``                   |
|                    | ``GLOBL ·table(SB), RODATA, $64``                   |
+--------------------+-----------------------------------------------------+
| preprocessor       | ``#define ROUND(a, b) ADDQ a, b``                   |
+--------------------+-----------------------------------------------------+
| macro invocation   | ``ROUND(AX, BX)``                                   |
+--------------------+-----------------------------------------------------+
| comment only       | ``// text``  ``/* text */``                         |
+--------------------+-----------------------------------------------------+
| instruction        | ``MOVQ a+0(FP), AX``                                |
+--------------------+-----------------------------------------------------+
"""
from __future__ import annotations

import re
from typing import Iterator, List, Optional, Tuple

from ..errors import MalformedLineError
from ..models import Statement
from ..passes.macro_table import MacroTable

_QUOTES = "\"'"
_OPENERS = "([{"
_CLOSERS = ")]}"

# Directives whose argument is free text, where quotes need not balance.
_FREE_TEXT_DIRECTIVES = frozenset({"#error", "#warning"})

_SPACE_BEFORE_SEMICOLON_RE = re.compile(r"\s+;$")


# ---------------------------------------------------------------------------
# Character walking
# ---------------------------------------------------------------------------


def _closing_quote(text: str, start: int) -> int:
    """Index of the quote closing the literal opened at *start*, or -1."""
    quote = text[start]
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            return i
        i += 1
    return -1


def _walk(
    text: str, line_no: Optional[int] = None, quotes: bool = True
) -> Iterator[Tuple[int, str, int]]:
    """
    Yield ``(index, char, depth)`` for every character outside quoted
    literals and ``/* */`` spans.  *depth* is the bracket nesting level
    after the character has been read.  With *quotes* false, quote
    characters are ordinary text.  A ``/*`` left open is reported once as
    the token ``"/*"`` and ends the walk.
    """
    depth = 0
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if quotes and ch in _QUOTES:
            end = _closing_quote(text, i)
            if end < 0:
                raise MalformedLineError(
                    f"unterminated {ch} quote", line_no=line_no, line=text
                )
            i = end + 1
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end < 0:
                yield i, "/*", depth
                return
            i = end + 2
            continue
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(depth - 1, 0)
        yield i, ch, depth
        i += 1


def _split_token(text: str, quotes: bool = True) -> Tuple[str, str]:
    """Split *text* at the first top-level whitespace: ``(token, rest)``."""
    for i, ch, depth in _walk(text, quotes=quotes):
        if ch.isspace() and depth == 0:
            return text[:i], text[i:].strip()
    return text, ""


def _is_free_text(text: str) -> bool:
    """``#error`` and ``#warning`` carry prose rather than operands."""
    parts = text.split(None, 1)
    return bool(parts) and parts[0].lower() in _FREE_TEXT_DIRECTIVES


# ---------------------------------------------------------------------------
# Parser class
# ---------------------------------------------------------------------------


class StatementParser:
    """
    Stateless classifier.  Macro knowledge comes from the
    :class:`~asmfmt.passes.macro_table.MacroTable` passed to :meth:`parse`.
    """

    def parse(
        self,
        line: str,
        macros: Optional[MacroTable] = None,
        line_no: Optional[int] = None,
    ) -> Optional[Statement]:
        """
        Classify one physical line.

        Parameters
        ----------
        line:
            Source line, surrounding whitespace is ignored.
        macros:
            Macros defined so far; used to recognise invocations.
        line_no:
            1-based line number, attached to errors.

        Returns
        -------
        Optional[Statement]
            ``None`` for a blank line.
        """
        stripped = line.strip()
        if not stripped:
            return None

        code, comment, continued, comment_continued = self._split_fields(
            stripped, line_no
        )

        if not code:
            return Statement(
                instruction="",
                comment=comment,
                continued=continued,
                comment_continued=comment_continued,
            )

        # Single-line block comment, optionally followed by a marker.
        if code.startswith("/*"):
            end = code.find("*/", 2)
            if end == len(code) - 2 and not comment:
                return Statement(
                    instruction="",
                    comment=code[2:end],
                    continued=continued,
                    comment_continued=continued,
                    block_comment=True,
                )
            return Statement(
                instruction=code,
                comment=comment,
                function=True,
                continued=continued,
                comment_continued=comment_continued,
            )

        code = _SPACE_BEFORE_SEMICOLON_RE.sub(";", code)
        instruction, rest = _split_token(code, quotes=not _is_free_text(code))
        if not rest and not continued and instruction.endswith(";"):
            instruction = instruction.rstrip(";").strip() or instruction

        if instruction.startswith("#"):
            params: Tuple[str, ...] = self._preprocessor_params(instruction, rest)
            function = False
        else:
            function = self._is_function(instruction, macros)
            if function:
                params = (rest,) if rest else ()
            else:
                params = tuple(self._parse_operands(rest)) if rest else ()

        return Statement(
            instruction=instruction,
            params=params,
            comment=comment,
            function=function,
            continued=continued,
            comment_continued=comment_continued,
        )

    def split_line(
        self, line: str, line_no: Optional[int] = None
    ) -> Tuple[str, str]:
        """
        Separate a leading label or block comment from code that follows it
        on the same line.

        Returns ``(head, tail)``; *tail* is ``""`` when the line stays whole.

        >>> StatementParser().split_line("loop: DECQ CX // again")
        ('loop:', 'DECQ CX // again')
        """
        stripped = line.strip()
        if stripped.startswith("/*"):
            end = stripped.find("*/", 2)
            if end >= 0:
                tail = stripped[end + 2:].strip()
                if tail and tail != "\\":
                    return stripped[: end + 2], tail
            return stripped, ""

        comment_at = self._find_comment_start(stripped, line_no)
        code = stripped if comment_at < 0 else stripped[:comment_at].rstrip()
        token, rest = _split_token(code, quotes=not _is_free_text(code))
        if token.endswith(":") and rest and rest != "\\":
            return token, stripped[len(token):].strip()
        return stripped, ""

    def open_comment_at(self, text: str, line_no: Optional[int] = None) -> int:
        """
        Index in the stripped line *text* of a ``/*`` that is not closed on
        the same line, or -1.  Openers inside quotes or a ``//`` comment do
        not count.

        >>> StatementParser().open_comment_at("MOVQ AX, BX /* note")
        12
        >>> StatementParser().open_comment_at("MOVQ AX, BX /* note */")
        -1
        """
        quotes = not _is_free_text(text)
        for i, ch, _depth in _walk(text, line_no, quotes):
            if ch == "/*":
                return i
            if ch == "/" and text.startswith("//", i):
                return -1
        return -1

    # ------------------------------------------------------------------
    # Field splitting
    # ------------------------------------------------------------------

    def _split_fields(
        self, text: str, line_no: Optional[int]
    ) -> Tuple[str, str, bool, bool]:
        """Return ``(code, comment, continued, comment_continued)``."""
        comment_at = self._find_comment_start(text, line_no)
        if comment_at < 0:
            code, comment = text, None
        else:
            code, comment = text[:comment_at].strip(), text[comment_at + 2:]

        continued = comment_continued = False
        if code.endswith("\\"):
            continued = True
            code = code[:-1].rstrip()
        elif comment is not None and comment.rstrip().endswith("\\"):
            continued = comment_continued = True
            comment = comment.rstrip()[:-1]

        if comment is None:
            comment = ""
        elif code:
            comment = comment.strip()
        else:
            # Comment-only lines keep the author's leading whitespace.
            comment = comment.rstrip()
        return code, comment, continued, comment_continued

    @staticmethod
    def _find_comment_start(text: str, line_no: Optional[int] = None) -> int:
        quotes = not _is_free_text(text)
        for i, ch, _depth in _walk(text, line_no, quotes):
            if ch == "/" and text.startswith("//", i):
                return i
        return -1

    # ------------------------------------------------------------------
    # Operands
    # ------------------------------------------------------------------

    @staticmethod
    def _is_function(instruction: str, macros: Optional[MacroTable]) -> bool:
        # Macros from an #include'd header are not in the table, but the
        # call syntax still gives them away.
        if "(" in instruction:
            return True
        return macros is not None and instruction in macros

    @staticmethod
    def _preprocessor_params(instruction: str, rest: str) -> Tuple[str, ...]:
        if not rest:
            return ()
        if instruction.lower() in _FREE_TEXT_DIRECTIVES:
            return (rest,)
        name, body = _split_token(rest)
        return (name, body) if body else (name,)

    @staticmethod
    def _parse_operands(operands_str: str) -> List[str]:
        """
        Split an operand string at top-level commas.

        >>> StatementParser._parse_operands("$1,AX")
        ['$1', 'AX']
        >>> StatementParser._parse_operands('$"a, b", (R1)(R2*8)')
        ['$"a, b"', '(R1)(R2*8)']
        """
        operands: List[str] = []
        start = 0
        for i, ch, depth in _walk(operands_str):
            if ch == "," and depth == 0:
                operands.append(operands_str[start:i].strip())
                start = i + 1
        operands.append(operands_str[start:].strip())
        return operands
