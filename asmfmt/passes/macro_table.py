"""
MacroTable
==========

Run-scoped record of the ``#define`` macros seen so far.

The formatter is single pass, so a macro is only recognised once its
definition has been read.  The table is an explicit object handed to the
classifier and the formatter; two runs never share one.

Bodies are stored as the rendered code of the definition, one source line
per ``\\n``.  :func:`first_statement` / :func:`last_statement` expose what an
invocation expands to, which lets the formatter treat e.g. a macro ending in
``RET`` as a terminator.
"""
from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

_STATEMENT_SEP_RE = re.compile(r"[;\n]")


class MacroTable:
    """Mapping of macro name to definition body."""

    def __init__(self) -> None:
        self._defines: Dict[str, str] = {}

    def record(self, name: str, body: str) -> None:
        """Insert or overwrite *name*; the last definition wins."""
        if name in self._defines:
            logger.debug("Redefining macro %r", name)
        else:
            logger.debug("Recording macro %r", name)
        self._defines[name] = body

    def lookup(self, name: str) -> Optional[str]:
        return self._defines.get(name)

    def names(self) -> List[str]:
        return list(self._defines)

    def __contains__(self, name: object) -> bool:
        return name in self._defines

    def __len__(self) -> int:
        return len(self._defines)

    def __repr__(self) -> str:
        return f"MacroTable(names={self.names()})"


def _body_statements(body: str) -> List[str]:
    return [s.strip() for s in _STATEMENT_SEP_RE.split(body) if s.strip()]


def first_statement(body: str) -> str:
    """First instruction text of a macro body, ``""`` for an empty body."""
    parts = _body_statements(body)
    return parts[0] if parts else ""


def last_statement(body: str) -> str:
    """Last instruction text of a macro body, ``""`` for an empty body."""
    parts = _body_statements(body)
    return parts[-1] if parts else ""
