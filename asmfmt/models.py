"""
Core data models for the assembly formatter.

A :class:`Statement` is the immutable result of classifying one physical
source line.  Every derived trait is a property computed from the parsed
fields, so nothing can go stale while the formatter walks the file.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


# ---------------------------------------------------------------------------
# Instruction sets used for classification
# ---------------------------------------------------------------------------

GLOBAL_DIRECTIVES = frozenset({"DATA", "GLOBL", "FUNCDATA", "PCDATA"})

TERMINATORS = frozenset({"RET", "JMP"})

# Comment bodies that must stay glued to the "//" marker.
_VERBATIM_COMMENT_PREFIXES = ("+", "/", "go:")


# ---------------------------------------------------------------------------
# Statement
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Statement:
    """One classified physical line of assembly."""

    instruction: str
    params: Tuple[str, ...] = ()
    comment: str = ""             # Without the comment markers
    function: bool = False        # Macro / function invocation
    continued: bool = False       # Ends with a "\" continuation marker
    comment_continued: bool = False  # The marker trails the comment: "// x \"
    block_comment: bool = False   # Comment is a single-line /* ... */

    def __repr__(self) -> str:
        return (
            f"Statement(instruction={self.instruction!r}, "
            f"params={list(self.params)}, comment={self.comment!r})"
        )

    # ------------------------------------------------------------------
    # Traits
    # ------------------------------------------------------------------

    @property
    def is_comment_only(self) -> bool:
        return not self.instruction

    @property
    def has_comment(self) -> bool:
        if self.is_comment_only:
            return not self.continued or self.comment_continued or bool(self.comment)
        return bool(self.comment) or self.block_comment

    @property
    def is_label(self) -> bool:
        return self.instruction.endswith(":")

    @property
    def is_preprocessor(self) -> bool:
        return self.instruction.startswith("#")

    @property
    def is_global(self) -> bool:
        """DATA, GLOBL, FUNCDATA and PCDATA, in any case."""
        return self.instruction.upper() in GLOBAL_DIRECTIVES

    @property
    def is_text(self) -> bool:
        return self.instruction.upper() == "TEXT" or self.is_global

    @property
    def opens_body(self) -> bool:
        """Labels and ``TEXT`` start a block whose lines are indented."""
        return self.is_label or self.instruction.upper() == "TEXT"

    @property
    def level0(self) -> bool:
        """True if this line is always rendered without indentation."""
        return self.is_label or self.is_text or self.is_global

    @property
    def is_terminator(self) -> bool:
        return self.instruction.upper() in TERMINATORS

    @property
    def is_command(self) -> bool:
        """Mnemonics written fully upper-case in source."""
        if self.is_label:
            return False
        return self.instruction == self.instruction.upper()

    @property
    def will_continue(self) -> bool:
        if self.continued:
            return True
        if not self.params:
            return False
        return self.params[-1].endswith("\\")

    @property
    def define(self) -> str:
        """Name of the macro defined by a ``#define`` line, else ``""``."""
        if self.instruction.lower() != "#define" or not self.params:
            return ""
        name = self.params[0].split("(", 1)[0].strip()
        return name.rstrip("\\").strip()

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> str:
        """Canonical code text of the line, without comment or marker."""
        if not self.params:
            return self.instruction
        if self.function or self.is_preprocessor:
            return " ".join((self.instruction,) + self.params)
        return f"{self.instruction} {', '.join(self.params)}".rstrip()

    def render_comment(self) -> str:
        if self.block_comment:
            return f"/*{self.comment}*/"
        text = self.comment
        if not text:
            return "//"
        if text[0].isspace() or text.startswith(_VERBATIM_COMMENT_PREFIXES):
            return "//" + text
        return "// " + text


# ---------------------------------------------------------------------------
# Formatter state
# ---------------------------------------------------------------------------


@dataclass
class QueuedLine:
    """A statement waiting in a flush group, with its target indentation."""

    indentation: int
    statement: Statement


@dataclass
class FormatterState:
    """
    Mutable context of one formatting run.

    ``pending_comments`` and ``pending_statements`` are only non-empty
    between a queue event and the next flush; a flush empties both.
    """

    indentation: int = 0
    inside_block_comment: bool = False
    last_star: bool = False
    last_line_empty: bool = False
    last_line_comment: bool = False
    last_line_label: bool = False
    last_line_continued: bool = False
    any_contents: bool = False
    block_closed: bool = False
    chain_indentation: Optional[int] = None
    pending_comments: List[Statement] = field(default_factory=list)
    pending_statements: List[QueuedLine] = field(default_factory=list)
    out: List[str] = field(default_factory=list)

    @property
    def in_chain(self) -> bool:
        return self.chain_indentation is not None
