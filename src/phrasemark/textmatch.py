"""Tiered phrase location and actual-match extraction.

Pure text operations with zero storage or UI dependencies.

The locator runs a cascade, each tier only if the previous one failed:

1. exact substring
2. case-insensitive substring
3. whitespace-flexible regex (words joined by ``\\s+``)
4. collapsed-whitespace search mapped back through an inverse map

A tier either finds the whole phrase or nothing; there is no partial match.
Nothing in this module raises for odd input: a pattern that cannot be built
or run falls through to the next tier, and total failure is ``None``.
"""
from __future__ import annotations

import logging
import re

from phrasemark.phrase_types import Match
from phrasemark.text_normalize import (
    collapse_whitespace,
    normalize_phrase,
    to_original_offset,
)

log = logging.getLogger(__name__)

TIER_EXACT = 1
TIER_CASE_INSENSITIVE = 2
TIER_FLEXIBLE_WHITESPACE = 3
TIER_NORMALIZED = 4

# Words shorter than this are too common to anchor a best-effort span.
SIGNIFICANT_WORD_MIN_LENGTH = 4

_PATTERN_ERRORS: tuple[type[Exception], ...] = (re.error, OverflowError, RecursionError)


def flexible_whitespace_pattern(phrase_text: str) -> re.Pattern[str] | None:
    """Compile the tier-3 pattern: escaped words joined by ``\\s+``.

    Returns None for a phrase with no words.
    """
    words = phrase_text.split()
    if not words:
        return None
    return re.compile(r"\s+".join(re.escape(w) for w in words), re.IGNORECASE)


def _search_bound(document_text: str, limit: int | None) -> int:
    if limit is None:
        return len(document_text)
    return max(0, min(limit, len(document_text)))


# ---------------------------------------------------------------------------
# PhraseLocator
# ---------------------------------------------------------------------------


def locate_with_tier(
    phrase_text: str,
    document_text: str,
    *,
    start: int = 0,
    limit: int | None = None,
) -> tuple[int, int] | None:
    """Find the start of *phrase_text* in *document_text*.

    Args:
        phrase_text: Stored phrase text.
        document_text: Current document text.
        start: Matches must begin at or after this offset.
        limit: Only ``document_text[:limit]`` is searched; the match must
            end at or before it. None searches the whole document.

    Returns:
        ``(offset, tier)`` of the first occurrence found by the first
        successful tier, or None if no tier matched.
    """
    if not isinstance(phrase_text, str) or not isinstance(document_text, str):
        return None
    if not phrase_text.strip():
        return None
    end = _search_bound(document_text, limit)
    start = max(0, min(start, end))

    pos = document_text.find(phrase_text, start, end)
    if pos >= 0:
        return pos, TIER_EXACT

    try:
        m = re.compile(re.escape(phrase_text), re.IGNORECASE).search(document_text, start, end)
    except _PATTERN_ERRORS as exc:
        log.debug("case-insensitive search failed: %s", exc)
        m = None
    if m is not None:
        return m.start(), TIER_CASE_INSENSITIVE

    try:
        pattern = flexible_whitespace_pattern(phrase_text)
        m = pattern.search(document_text, start, end) if pattern is not None else None
    except _PATTERN_ERRORS as exc:
        log.debug("flexible-whitespace pattern failed, falling through: %s", exc)
        m = None
    if m is not None:
        return m.start(), TIER_FLEXIBLE_WHITESPACE

    pos_norm = _normalized_search(phrase_text, document_text[start:end])
    if pos_norm is not None:
        return start + pos_norm, TIER_NORMALIZED
    return None


def locate(
    phrase_text: str,
    document_text: str,
    *,
    start: int = 0,
    limit: int | None = None,
) -> int | None:
    """Offset of the phrase in the document, or None when not found."""
    located = locate_with_tier(phrase_text, document_text, start=start, limit=limit)
    return located[0] if located is not None else None


def _normalized_search(phrase_text: str, document_text: str) -> int | None:
    """Tier 4: search collapsed text, map the offset back to the original."""
    needle = normalize_phrase(phrase_text)
    if not needle:
        return None
    collapsed, inverse_map = collapse_whitespace(document_text)
    try:
        m = re.compile(re.escape(needle), re.IGNORECASE).search(collapsed)
    except _PATTERN_ERRORS as exc:
        log.debug("normalized search failed: %s", exc)
        return None
    if m is None:
        return None
    return to_original_offset(inverse_map, m.start())


# ---------------------------------------------------------------------------
# MatchExtractor
# ---------------------------------------------------------------------------


def extract_actual_match(
    phrase_text: str,
    document_text: str,
    start_offset: int,
    *,
    limit: int | None = None,
    min_word_length: int = SIGNIFICANT_WORD_MIN_LENGTH,
) -> str:
    """Determine the substring at *start_offset* that is "the same phrase".

    Strategies, in order: the tier-3 regex anchored at the offset; an exact
    substring at the offset; a case-insensitive substring at the offset; the
    span up to the last significant word of the phrase. If all fail, the
    stored phrase text is returned unchanged, so its length may not match
    the document.
    """
    end = _search_bound(document_text, limit)
    if start_offset < 0 or start_offset >= end:
        return phrase_text

    try:
        pattern = flexible_whitespace_pattern(phrase_text)
        m = pattern.match(document_text, start_offset, end) if pattern is not None else None
    except _PATTERN_ERRORS as exc:
        log.debug("anchored flexible pattern failed: %s", exc)
        m = None
    if m is not None and m.end() > m.start():
        actual = m.group(0)
        # The pattern drops trailing whitespace that the stored text may keep.
        if len(phrase_text) > len(actual) and document_text.startswith(
            phrase_text, start_offset, end,
        ):
            return phrase_text
        return actual

    if document_text.startswith(phrase_text, start_offset, end):
        return phrase_text

    stop = start_offset + len(phrase_text)
    if stop <= end:
        candidate = document_text[start_offset:stop]
        if candidate.casefold() == phrase_text.casefold():
            return candidate

    span = _significant_word_span(
        phrase_text, document_text, start_offset, end, min_word_length,
    )
    if span is not None:
        return span

    log.debug("could not determine match length at offset %d", start_offset)
    return phrase_text


def _significant_word_span(
    phrase_text: str,
    document_text: str,
    start_offset: int,
    end: int,
    min_word_length: int,
) -> str | None:
    """Span from *start_offset* to the end of the last significant word.

    The first significant word must occur within the phrase's own length of
    the offset, and the whole span may be at most twice the phrase length.
    """
    words = [w for w in phrase_text.split() if len(w) >= min_word_length]
    if not words:
        return None
    window_end = min(end, start_offset + 2 * len(phrase_text))
    try:
        first = re.compile(re.escape(words[0]), re.IGNORECASE).search(
            document_text, start_offset, min(window_end, start_offset + len(phrase_text)),
        )
        if first is None:
            return None
        if len(words) == 1:
            return document_text[start_offset:first.end()]
        last = re.compile(re.escape(words[-1]), re.IGNORECASE).search(
            document_text, first.end(), window_end,
        )
    except _PATTERN_ERRORS as exc:
        log.debug("significant-word span failed: %s", exc)
        return None
    if last is None:
        return None
    return document_text[start_offset:last.end()]


def find_match(
    phrase_text: str,
    document_text: str,
    *,
    start: int = 0,
    limit: int | None = None,
    min_word_length: int = SIGNIFICANT_WORD_MIN_LENGTH,
) -> Match | None:
    """Locate a phrase and return the actual document range it occupies.

    ``Match.text`` is always a slice of *document_text*; when extraction
    degrades to the stored text, the range is clipped to the search bound.
    """
    located = locate_with_tier(phrase_text, document_text, start=start, limit=limit)
    if located is None:
        return None
    offset, tier = located
    actual = extract_actual_match(
        phrase_text, document_text, offset,
        limit=limit, min_word_length=min_word_length,
    )
    stop = min(offset + len(actual), _search_bound(document_text, limit))
    if stop <= offset:
        return None
    log.debug("tier %d match at [%d, %d)", tier, offset, stop)
    return Match(start=offset, end=stop, text=document_text[offset:stop], tier=tier)
