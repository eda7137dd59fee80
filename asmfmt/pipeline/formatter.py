"""
Formatter
=========

Single-pass state machine that turns classified statements into formatted
output lines.

Per physical line (see :meth:`Formatter.add_line`):

1.  Inside a ``/* ... */`` block the line is written straight away and is
    never classified.  Lines starting with ``*`` are re-indented so the
    stars line up under the opener; other lines keep their offset from the
    opener's column.  Code in front of an opener is formatted first and
    the opener stays behind it.
2.  Blank lines flush the queue and emit at most one blank output line.
3.  Comment-only lines are queued until the statement they precede arrives,
    and take that statement's indentation.
4.  Level-0 statements (labels, ``TEXT``, ``DATA``, ``GLOBL``, ``FUNCDATA``,
    ``PCDATA``) flush the queue and are emitted on their own.  A label or
    ``TEXT`` opens a body: following lines are indented one tab.
5.  Terminators (``RET``, ``JMP``) close the body: the group is flushed and
    the next non-level-0 line starts at indentation 0.
6.  A line ending in ``\\`` starts a continuation chain.  The chain is
    aligned as one group and its lines after the first are indented one
    level deeper; for a ``#define`` that is the macro body, which is also
    recorded in the :class:`~asmfmt.passes.macro_table.MacroTable`.
7.  Before each emitted group one blank line is inserted unless the previous
    line was blank, a comment or a level-0 statement, or nothing has been
    written yet.

Open block comments and continuation chains at end of input raise
:class:`~asmfmt.errors.UnterminatedConstructError`.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..errors import MalformedLineError, UnterminatedConstructError
from ..models import FormatterState, QueuedLine, Statement
from ..output.alignment import TAB, align_lines
from ..parser.statement_parser import StatementParser
from ..passes.line_split import LineSplitPass
from ..passes.macro_table import MacroTable, first_statement, last_statement

logger = logging.getLogger(__name__)


class Formatter:
    """
    Formats one document.  Create a new instance for every run; the state
    and macro table are never shared between documents.

    Parameters
    ----------
    macros:
        Macro table to fill while formatting.  A fresh one is created when
        omitted.
    parser:
        Statement classifier; a default :class:`StatementParser` is used
        when omitted.
    """

    def __init__(
        self,
        macros: Optional[MacroTable] = None,
        parser: Optional[StatementParser] = None,
    ) -> None:
        self.macros = macros if macros is not None else MacroTable()
        self._parser = parser if parser is not None else StatementParser()
        self.state = FormatterState()
        self._line_no = 0
        self._block_start = 0
        self._block_lead = ""
        self._chain_start = 0
        self._macro_name = ""
        self._macro_body: List[str] = []

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def format(self, text: str) -> str:
        """
        Format a complete document.

        Parameters
        ----------
        text:
            Assembly source.

        Returns
        -------
        str
            Formatted source, ``\\n`` terminated (empty for empty input).
        """
        for line_no, line in enumerate(LineSplitPass().run(text), start=1):
            self._line_no = line_no
            self.add_line(line)
        return self.finish()

    def add_line(self, line: str) -> None:
        """Feed the next physical line."""
        st = self.state
        if "\x00" in line:
            raise MalformedLineError(
                "zero byte in input; file is unlikely an assembler file",
                line_no=self._line_no,
                line=line,
            )

        if st.inside_block_comment:
            self._block_comment_line(line)
            return

        text = line.strip()
        if not text:
            self._blank_line()
            return

        opener = self._parser.open_comment_at(text, self._line_no)
        if opener >= 0:
            self._open_block_comment(line, opener)
            return

        head, tail = self._parser.split_line(text, self._line_no)
        if not tail:
            self._add_statement_line(text)
            return

        # "loop: DECQ CX" -> "loop:" + "DECQ CX".  Inside a chain the split
        # needs its own marker to keep the chain intact.
        tail_statement = self._parser.parse(tail, self.macros, self._line_no)
        if st.in_chain or (tail_statement is not None and tail_statement.continued):
            head += " \\"
        self._add_statement_line(head)
        self.add_line(tail)

    def finish(self) -> str:
        """Flush what is left and return the formatted document."""
        st = self.state
        if st.inside_block_comment:
            raise UnterminatedConstructError(
                "block comment is never closed", line_no=self._block_start
            )
        if st.in_chain:
            raise UnterminatedConstructError(
                "continuation chain is never closed", line_no=self._chain_start
            )
        self._flush()
        while st.out and st.out[-1] == "":
            st.out.pop()
        logger.debug(
            "Formatted %d input lines into %d output lines (%d macros)",
            self._line_no,
            len(st.out),
            len(self.macros),
        )
        return "\n".join(st.out) + "\n" if st.out else ""

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _add_statement_line(self, text: str) -> None:
        st = self.state
        statement = self._parser.parse(text, self.macros, self._line_no)
        if statement is None:
            return

        if st.in_chain:
            self._chain_line(statement)
            return

        if statement.define:
            self._record_define(statement)

        if statement.is_comment_only and not statement.continued:
            if st.pending_statements:
                self._flush()
            st.pending_comments.append(statement)
            return

        self._add_statement(statement)

    def _add_statement(self, statement: Statement) -> None:
        st = self.state
        level0 = statement.level0
        opens = statement.opens_body
        terminator = statement.is_terminator

        if statement.function:
            first, last = self._expansion(statement)
            if first is not None and first.level0:
                level0, opens = True, first.opens_body
            if last is not None and last.is_terminator:
                terminator = True

        if level0:
            if st.pending_statements:
                self._flush()
            target = 0
        else:
            if self._opens_implicit_body(statement):
                st.indentation = 1
            target = st.indentation
            if statement.continued and st.pending_statements:
                self._flush()

        st.pending_statements.append(QueuedLine(target, statement))

        if opens:
            st.indentation = 1
            st.block_closed = False
        if terminator:
            st.indentation = 0
            st.block_closed = True

        if statement.continued:
            st.chain_indentation = target + 1
            self._chain_start = self._line_no
        elif level0 or terminator:
            self._flush()
            if level0:
                st.last_line_label = True

    def _opens_implicit_body(self, statement: Statement) -> bool:
        """Instructions before the first label are still indented."""
        st = self.state
        if st.indentation != 0 or st.block_closed:
            return False
        if statement.is_preprocessor or statement.is_comment_only:
            return False
        return not statement.function or statement.is_command

    def _expansion(
        self, statement: Statement
    ) -> Tuple[Optional[Statement], Optional[Statement]]:
        """First and last statement of the macro *statement* invokes."""
        name = statement.instruction.split("(", 1)[0]
        body = self.macros.lookup(name)
        if not body:
            return None, None
        return (
            self._parse_fragment(first_statement(body)),
            self._parse_fragment(last_statement(body)),
        )

    def _parse_fragment(self, text: str) -> Optional[Statement]:
        if not text:
            return None
        try:
            return self._parser.parse(text)
        except MalformedLineError:
            # Splitting a body at ";" can cut through a quoted literal.
            logger.debug("Macro fragment %r is not a statement", text)
            return None

    # ------------------------------------------------------------------
    # Continuation chains and macros
    # ------------------------------------------------------------------

    def _record_define(self, statement: Statement) -> None:
        name = statement.define
        body = statement.params[1] if len(statement.params) > 1 else ""
        self.macros.record(name, body)
        if statement.continued:
            self._macro_name = name
            self._macro_body = [body] if body else []

    def _chain_line(self, statement: Statement) -> None:
        st = self.state
        target = 0 if statement.level0 else st.chain_indentation
        st.pending_statements.append(QueuedLine(target, statement))
        if self._macro_name and not statement.is_comment_only:
            self._macro_body.append(statement.render())
        if not statement.continued:
            self._end_chain()

    def _end_chain(self) -> None:
        st = self.state
        st.chain_indentation = None
        if self._macro_name:
            self.macros.record(self._macro_name, "\n".join(self._macro_body))
            self._macro_name = ""
            self._macro_body = []
        self._flush()

    # ------------------------------------------------------------------
    # Block comments
    # ------------------------------------------------------------------

    def _open_block_comment(self, line: str, opener: int) -> None:
        st = self.state
        text = line.strip()
        if opener == 0:
            self._flush()
            self._new_line()
            st.out.append(TAB * self._current_indentation() + text)
        else:
            # "MOVQ AX, BX /* note": the code is formatted on its own, the
            # opener stays behind it.
            self.add_line(text[:opener].rstrip())
            self._flush()
            st.out[-1] += " " + text[opener:]
        st.inside_block_comment = True
        st.last_star = False
        self._block_start = self._line_no
        self._block_lead = line[: len(line) - len(line.lstrip())]
        self._mark_comment(continued=False)

    def _shift(self, text: str) -> str:
        """Move a free-text comment line from the opener's column to ours."""
        if not text.strip():
            return ""
        if text.startswith(self._block_lead):
            text = text[len(self._block_lead):]
        else:
            text = text.lstrip()
        return (TAB * self._current_indentation() + text).rstrip()

    def _block_comment_line(self, line: str) -> None:
        st = self.state
        stripped = line.strip()
        indent = TAB * self._current_indentation()
        end = line.find("*/")

        if end < 0:
            if stripped.startswith("*"):
                st.out.append(indent + " " + stripped)
                st.last_star = True
            elif stripped or not st.last_line_empty:
                st.out.append(self._shift(line))
                st.last_star = False
            self._mark_comment(continued=False, empty=not stripped)
            return

        closing = line[: end + 2]
        rest = line[end + 2:].strip()
        if stripped.startswith("*") and st.last_star:
            closing = indent + " " + closing.strip()
        else:
            closing = self._shift(closing)

        continued = rest == "\\"
        if continued:
            closing += " \\"
            rest = ""

        st.inside_block_comment = False
        st.last_star = False
        st.out.append(closing)
        self._mark_comment(continued=continued)

        if rest:
            self.add_line(rest)
        elif st.in_chain and not continued:
            self._end_chain()

    def _mark_comment(self, continued: bool, empty: bool = False) -> None:
        st = self.state
        st.any_contents = True
        st.last_line_empty = empty
        st.last_line_comment = True
        st.last_line_label = False
        st.last_line_continued = continued

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _current_indentation(self) -> int:
        st = self.state
        return st.chain_indentation if st.in_chain else st.indentation

    def _blank_line(self) -> None:
        st = self.state
        if st.in_chain:
            self._end_chain()
        self._flush()
        if st.any_contents and not st.last_line_empty:
            st.out.append("")
            st.last_line_empty = True
            st.last_line_continued = False

    def _new_line(self) -> None:
        """Blank line before a new group, unless one is not wanted."""
        st = self.state
        if (
            st.any_contents
            and not st.last_line_empty
            and not st.last_line_comment
            and not st.last_line_label
            and not st.last_line_continued
        ):
            st.out.append("")
            st.last_line_empty = True

    def _flush(self) -> None:
        """Align and emit the pending comments and statements."""
        st = self.state
        if not st.pending_comments and not st.pending_statements:
            return

        if st.pending_statements:
            indentation = st.pending_statements[0].indentation
        else:
            indentation = self._current_indentation()
        group = [QueuedLine(indentation, c) for c in st.pending_comments]
        group.extend(st.pending_statements)
        st.pending_comments = []
        st.pending_statements = []

        self._new_line()
        st.out.extend(align_lines(group))

        last = group[-1].statement
        st.any_contents = True
        st.last_line_empty = False
        st.last_line_comment = last.is_comment_only
        st.last_line_label = last.level0
        st.last_line_continued = last.continued
