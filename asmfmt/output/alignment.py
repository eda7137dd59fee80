"""
Alignment of flush groups.

Every line of a group is rendered as::

    <tabs><code> <pad> // comment           plain line
    <tabs><code> <pad> \\ [// comment]      continued, marker after the code
    <tabs><code> <pad> // comment <pad> \\  continued, marker after a comment

Within one group all trailing comments start in the same column, and so do
all continuation markers.  The column is the widest natural width among the
lines carrying that marker plus :data:`GAP`.  Indentation tabs count as one
column each, so lines of a group that share their indentation line up in any
editor.
"""
from __future__ import annotations

from typing import List, Sequence

from ..models import QueuedLine

TAB = "\t"
GAP = 1


def _has_trailing_comment(line: QueuedLine) -> bool:
    """Code followed by a comment that sits before any continuation marker."""
    st = line.statement
    if st.is_comment_only or not st.has_comment:
        return False
    return not st.continued or st.comment_continued


def comment_column(lines: Sequence[QueuedLine]) -> int:
    """Column at which trailing comments of the group start (0 if none)."""
    widths = [
        line.indentation + len(line.statement.render())
        for line in lines
        if _has_trailing_comment(line)
    ]
    return max(widths) + GAP if widths else 0


def _body(line: QueuedLine, comment_col: int) -> str:
    """Code and, when it precedes the marker, the padded comment."""
    st = line.statement
    code = st.render()
    if not st.has_comment or (st.continued and not st.comment_continued):
        return code
    comment = st.render_comment()
    if not code:
        return comment
    pad = comment_col - line.indentation - len(code)
    return code + " " * pad + comment


def align_lines(lines: Sequence[QueuedLine]) -> List[str]:
    """
    Render a flush group.

    Parameters
    ----------
    lines:
        The queued lines of the group, in source order.

    Returns
    -------
    List[str]
        One text line per queued line, indentation included, without
        trailing whitespace.
    """
    comment_col = comment_column(lines)
    bodies = [_body(line, comment_col) for line in lines]

    marker_widths = [
        line.indentation + len(body)
        for line, body in zip(lines, bodies)
        if line.statement.continued
    ]
    marker_col = max(marker_widths) + GAP if marker_widths else 0

    result: List[str] = []
    for line, body in zip(lines, bodies):
        st = line.statement
        text = body
        if st.continued:
            pad = marker_col - line.indentation - len(body)
            text = body + " " * pad + "\\"
            if st.has_comment and not st.comment_continued:
                text += " " + st.render_comment()
        result.append((TAB * line.indentation + text).rstrip())
    return result
