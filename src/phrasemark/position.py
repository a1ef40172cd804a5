"""Save-time position bookkeeping for phrases.

A phrase saved from a document gets a (line, column) address and the
document's content hash. Both are hints for later passes: decoration always
re-locates against the current text.
"""
from __future__ import annotations

import re

from phrasemark.phrase_types import Position

CONTEXT_RADIUS = 50

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def offset_to_line_col(document_text: str, offset: int) -> Position:
    """Convert a character offset to a 1-based line / 0-based column.

    CRLF and bare CR count as one line break each. Offsets outside the text
    are clamped.
    """
    offset = max(0, min(offset, len(document_text)))
    line_no = 1
    line_start = 0
    for m in _LINE_BREAK_RE.finditer(document_text, 0, offset):
        line_no += 1
        line_start = m.end()
    return Position(line_no=line_no, col_offset=offset - line_start)


def line_col_to_offset(document_text: str, position: Position) -> int:
    """Inverse of :func:`offset_to_line_col`, clamped to the document.

    A line number past the end lands on the last line; a column past the
    end of its line lands on that line's end.
    """
    line_starts = [0]
    line_starts.extend(m.end() for m in _LINE_BREAK_RE.finditer(document_text))
    idx = min(position.line_no, len(line_starts)) - 1
    start = line_starts[idx]
    nxt = _LINE_BREAK_RE.search(document_text, start)
    line_end = nxt.start() if nxt is not None else len(document_text)
    return min(start + position.col_offset, line_end)


def record_position(phrase_text: str, document_text: str) -> Position | None:
    """Compute the (line, column) of a phrase being saved.

    Only exact and case-insensitive matches are considered: the selection
    was taken from this very text, so the flexible tiers are not needed.

    Returns:
        The Position of the first occurrence, or None if the phrase is not
        in the document (the phrase is then saved without a position).
    """
    if not phrase_text:
        return None
    idx = document_text.find(phrase_text)
    if idx < 0:
        m = re.compile(re.escape(phrase_text), re.IGNORECASE).search(document_text)
        if m is None:
            return None
        idx = m.start()
    return offset_to_line_col(document_text, idx)


def context_around(
    phrase_text: str,
    document_text: str,
    *,
    radius: int = CONTEXT_RADIUS,
) -> str:
    """Snippet of up to *radius* chars on each side of the first exact match.

    Returns an empty string when the phrase does not occur verbatim.
    """
    if not phrase_text:
        return ""
    idx = document_text.find(phrase_text)
    if idx < 0:
        return ""
    start = max(0, idx - radius)
    end = min(len(document_text), idx + len(phrase_text) + radius)
    return document_text[start:end]
