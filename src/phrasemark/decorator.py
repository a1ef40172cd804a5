"""Decoration pass: relocate saved phrases and wrap them in anchors.

One pass takes a document string and an unordered collection of phrase
records and returns the document with every locatable phrase replaced by
its anchor markup (see :mod:`phrasemark.anchors`).

Algorithm:
    1. Key every phrase by its reading position: where it is found in the
       current text, else saved (line, column), else the decoded formula hint.
       Phrases with no position at all are skipped.
    2. Process phrases from last-appearing to first, keeping a shrinking
       ``search_limit`` (initially the document length). Each phrase is
       searched only in ``document_text[:search_limit]``.
    3. Locate, extract the actual match, record the placement, then move
       ``search_limit`` to the match start.
    4. Assemble the output left to right from the original text and the
       recorded placements, building the anchor index on the way.

Because every placement lies at or after the current ``search_limit``, the
text below the limit is never touched, so the original string can be
searched directly and spliced once at the end.

The pass is pure: the same ``(document_text, phrases)`` always produces the
same output, and nothing is cached between calls.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from phrasemark.anchors import (
    MARKER_LENGTH,
    AnchorIndex,
    AnchorSpan,
    marker_for,
    render_phrase,
)
from phrasemark.ordering import reading_position
from phrasemark.phrase_types import (
    DOCUMENT_FORMATS,
    Document,
    Match,
    PhraseRecord,
    PhraseRecordError,
    Position,
    as_record,
)
from phrasemark.textmatch import SIGNIFICANT_WORD_MIN_LENGTH, find_match

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DecorationConfig:
    """Options for one decoration pass.

    Attributes:
        join_lines_with_space: Join the fragments of a multi-line phrase with
            a single space instead of keeping the original line breaks.
            Stripping tags then no longer reproduces the input exactly.
        document_format: ``"plain"``, ``"markdown"`` or ``"html"``. In HTML
            documents, occurrences inside a tag are passed over and matches
            that would cut through a tag are skipped, so the output stays
            well-formed.
        marker_length: Characters of the phrase id shown as the marker.
        min_word_length: Minimum length of a "significant" word used by the
            best-effort extraction strategy.
    """

    join_lines_with_space: bool = False
    document_format: str = "plain"
    marker_length: int = MARKER_LENGTH
    min_word_length: int = SIGNIFICANT_WORD_MIN_LENGTH

    def __post_init__(self) -> None:
        if self.document_format not in DOCUMENT_FORMATS:
            raise ValueError(
                f"document_format must be one of {sorted(DOCUMENT_FORMATS)}, "
                f"got {self.document_format!r}"
            )
        if self.marker_length < 1:
            raise ValueError(f"marker_length must be >= 1, got {self.marker_length}")
        if self.min_word_length < 1:
            raise ValueError(f"min_word_length must be >= 1, got {self.min_word_length}")


DEFAULT_CONFIG = DecorationConfig()


@dataclass(frozen=True, slots=True)
class DecorationResult:
    """Output of a decoration pass."""

    text: str
    index: AnchorIndex
    placed: tuple[str, ...] = ()
    skipped: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def decoration_order(
    document_text: str,
    phrases: Iterable[PhraseRecord],
) -> tuple[list[PhraseRecord], list[PhraseRecord]]:
    """Split phrases into (ordered last-to-first, unpositioned).

    Ties on position are broken by id so the order is deterministic.
    """
    keyed: list[tuple[Position, PhraseRecord]] = []
    unpositioned: list[PhraseRecord] = []
    for phrase in phrases:
        pos = reading_position(phrase, document_text, prefer_text=True)
        if pos is None:
            unpositioned.append(phrase)
        else:
            keyed.append((pos, phrase))
    keyed.sort(key=lambda kp: (kp[0].line_no, kp[0].col_offset, kp[1].id), reverse=True)
    return [p for _, p in keyed], unpositioned


# ---------------------------------------------------------------------------
# Decoration pass
# ---------------------------------------------------------------------------


def decorate_with_index(
    document_text: str,
    phrases: Iterable[PhraseRecord | dict[str, Any]],
    *,
    config: DecorationConfig | None = None,
) -> DecorationResult:
    """Decorate a document and index the rendered anchors.

    Args:
        document_text: Current document text.
        phrases: PhraseRecords or dicts with at least ``id`` and ``text``.
        config: Pass options; defaults to :data:`DEFAULT_CONFIG`.

    Returns:
        DecorationResult with the annotated text, the anchor index, and the
        ids that were placed (document order) or skipped.
    """
    cfg = config or DEFAULT_CONFIG
    records: list[PhraseRecord] = []
    skipped: list[str] = []
    for item in phrases:
        try:
            records.append(as_record(item))
        except PhraseRecordError as exc:
            log.warning("ignoring malformed phrase record: %s", exc)

    ordered, unpositioned = decoration_order(document_text, records)
    skipped.extend(p.id for p in unpositioned)

    placements: list[tuple[PhraseRecord, Match]] = []
    search_limit = len(document_text)
    for phrase in ordered:
        match = _place(phrase, document_text, search_limit, cfg)
        if match is None:
            skipped.append(phrase.id)
            continue
        placements.append((phrase, match))
        search_limit = match.start

    placements.reverse()
    text, index = _assemble(document_text, placements, cfg)
    placed = tuple(p.id for p, _ in placements)
    log.debug(
        "decoration pass: %d placed, %d skipped, %d chars",
        len(placed), len(skipped), len(document_text),
    )
    return DecorationResult(
        text=text, index=index, placed=placed, skipped=tuple(skipped),
    )


def decorate(
    document_text: str,
    phrases: Iterable[PhraseRecord | dict[str, Any]],
    *,
    config: DecorationConfig | None = None,
) -> str:
    """Return *document_text* with every locatable phrase wrapped in anchors."""
    return decorate_with_index(document_text, phrases, config=config).text


def decorate_document(
    document: Document,
    phrases: Iterable[PhraseRecord | dict[str, Any]],
    *,
    join_lines_with_space: bool = False,
) -> DecorationResult:
    """Decorate a :class:`Document`, taking the format from the document."""
    config = DecorationConfig(
        join_lines_with_space=join_lines_with_space,
        document_format=document.format,
    )
    return decorate_with_index(document.text, phrases, config=config)


def _place(
    phrase: PhraseRecord,
    document_text: str,
    search_limit: int,
    cfg: DecorationConfig,
) -> Match | None:
    """Locate one phrase below the limit; None means "leave undecorated".

    In HTML documents an occurrence that starts inside a tag is passed over
    and the search resumes after that tag.
    """
    start = 0
    while True:
        try:
            match = find_match(
                phrase.text, document_text,
                start=start, limit=search_limit, min_word_length=cfg.min_word_length,
            )
        except Exception:
            log.warning("locating phrase %s failed", phrase.id, exc_info=True)
            return None
        if match is None:
            log.debug("phrase %s not found below offset %d", phrase.id, search_limit)
            return None
        if not match.text.strip():
            return None
        if cfg.document_format != "html":
            return match
        tag_end = _enclosing_tag_end(document_text, match.start)
        if tag_end is not None:
            start = tag_end
            continue
        if "<" in match.text or ">" in match.text:
            log.debug("phrase %s would split markup, skipped", phrase.id)
            return None
        return match


def _enclosing_tag_end(document_text: str, offset: int) -> int | None:
    """Offset just past the tag containing *offset*, or None outside tags."""
    lt = document_text.rfind("<", 0, offset)
    if lt < 0 or document_text.rfind(">", 0, offset) > lt:
        return None
    gt = document_text.find(">", offset)
    return gt + 1 if gt >= 0 else len(document_text)


def _assemble(
    document_text: str,
    placements: list[tuple[PhraseRecord, Match]],
    cfg: DecorationConfig,
) -> tuple[str, AnchorIndex]:
    """Splice ascending, non-overlapping placements into the original text."""
    out: list[str] = []
    spans: list[AnchorSpan] = []
    cursor = 0
    pos = 0
    for phrase, match in placements:
        pieces = render_phrase(
            phrase.id,
            match.text,
            marker_for(phrase.id, cfg.marker_length),
            join_lines_with_space=cfg.join_lines_with_space,
        )
        if pieces is None:
            continue
        gap = document_text[cursor:match.start]
        out.append(gap)
        pos += len(gap)
        for piece in pieces:
            if piece.fragment is not None:
                spans.append(AnchorSpan(
                    phrase_id=phrase.id,
                    start=pos,
                    end=pos + len(piece.markup),
                    text=piece.fragment,
                    has_marker=piece.has_marker,
                ))
            out.append(piece.markup)
            pos += len(piece.markup)
        cursor = match.end
    out.append(document_text[cursor:])
    return "".join(out), AnchorIndex(spans=tuple(spans), marker_length=cfg.marker_length)
