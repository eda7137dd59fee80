"""
LineSplitPass
=============

Splits raw source text into physical lines.

Only ``\\n`` is a line boundary; a ``\\r`` directly before it is dropped so
that CRLF files are accepted.  Other characters that :meth:`str.splitlines`
would treat as boundaries (form feeds, ``\\x1c`` ...) stay inside the line,
which keeps block comments and continuation markers where the author put
them.
"""
from __future__ import annotations

from typing import List


class LineSplitPass:
    """Turns a source string into a list of lines without terminators."""

    def run(self, text: str) -> List[str]:
        """
        Split *text* into lines.

        Parameters
        ----------
        text:
            Complete source document.

        Returns
        -------
        List[str]
            One entry per physical line.  A trailing newline does not produce
            an extra empty entry.
        """
        if not text:
            return []
        lines = text.split("\n")
        if lines[-1] == "":
            lines.pop()
        return [line[:-1] if line.endswith("\r") else line for line in lines]
