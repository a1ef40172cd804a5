"""Reading-order keys for phrase lists.

Keys are lexicographic tuples, so a line of any length orders correctly.
The packed ``line * 100000 + col`` number is still understood (and can be
produced) for storage layers that keep a single numeric hint, but it is
never compared directly.
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TypeAlias

from phrasemark.phrase_types import FORMULA_LINE_STRIDE, PhraseRecord, Position
from phrasemark.position import offset_to_line_col
from phrasemark.textmatch import locate

OrderingKey: TypeAlias = tuple[int, int, int, float, str]

_POSITIONED = 0
_BY_RECENCY = 1


def pack_position(line_no: int, col_offset: int) -> int:
    """Pack a position into the legacy single-number hint."""
    return Position(line_no, col_offset).formula_position


def unpack_position(formula_position: int) -> Position | None:
    """Decode a packed hint. Returns None for values below line 1."""
    if formula_position < FORMULA_LINE_STRIDE:
        return None
    line_no, col_offset = divmod(formula_position, FORMULA_LINE_STRIDE)
    return Position(line_no, col_offset)


def stored_position(phrase: PhraseRecord) -> Position | None:
    """Saved (line, column), else the decoded formula hint."""
    pos = phrase.position
    if pos is not None:
        return pos
    if phrase.formula_position is not None:
        return unpack_position(phrase.formula_position)
    return None


def reading_position(
    phrase: PhraseRecord,
    document_text: str | None = None,
    *,
    prefer_text: bool = False,
) -> Position | None:
    """Best known reading position of a phrase.

    By default stored hints win and the current text is only consulted when
    there are none. With *prefer_text* the position found in *document_text*
    wins and stored hints are the fallback.
    """
    if prefer_text and document_text:
        found = _position_in_text(phrase, document_text)
        if found is not None:
            return found
    pos = stored_position(phrase)
    if pos is not None:
        return pos
    if document_text and not prefer_text:
        return _position_in_text(phrase, document_text)
    return None


def _position_in_text(phrase: PhraseRecord, document_text: str) -> Position | None:
    offset = locate(phrase.text, document_text)
    if offset is None:
        return None
    return offset_to_line_col(document_text, offset)


def ordering_key(
    phrase: PhraseRecord,
    document_text: str | None = None,
) -> OrderingKey:
    """Comparable key placing phrases in reading order.

    Positioned phrases come first, by (line, column). Phrases with no
    position follow, most recently added first. The id breaks ties.
    """
    pos = reading_position(phrase, document_text)
    if pos is not None:
        return (_POSITIONED, pos.line_no, pos.col_offset, 0.0, phrase.id)
    return (_BY_RECENCY, 0, 0, -_added_timestamp(phrase.added_at), phrase.id)


def sort_phrases(
    phrases: Iterable[PhraseRecord],
    document_text: str | None = None,
) -> list[PhraseRecord]:
    """Return phrases sorted for list display."""
    return sorted(phrases, key=lambda p: ordering_key(p, document_text))


def _added_timestamp(added_at: str | None) -> float:
    if not added_at:
        return 0.0
    try:
        return datetime.fromisoformat(added_at).timestamp()
    except ValueError:
        return 0.0
