"""Annotation markup for decorated phrases.

Each located phrase is wrapped in one or more anchor fragments of the fixed
shape::

    <span class="phrase-anchor" data-phrase-id="{id}">{text}<sup class="phrase-marker">{marker}</sup></span>

The rendering and interaction layers parse this by literal class name and
``data-phrase-id``, so tag names, attribute name and marker length are part
of the output contract.

Two ways to get from a marker or phrase id to rendered spans:
- ``AnchorIndex``: built by the decorator during the pass, with exact
  offsets into the decorated text.
- ``parse_anchors``: for callers that only hold decorated markup.
"""
from __future__ import annotations

import html
import re
from dataclasses import dataclass
from typing import NamedTuple

from bs4 import BeautifulSoup

from phrasemark.text_normalize import split_lines_keep_breaks

ANCHOR_CLASS = "phrase-anchor"
MARKER_CLASS = "phrase-marker"
ID_ATTRIBUTE = "data-phrase-id"
MARKER_LENGTH = 4

_ANCHOR_RE = re.compile(
    r'<span class="phrase-anchor" data-phrase-id="[^"]*">'
    r"(.*?)"
    r'(?:<sup class="phrase-marker">[^<]*</sup>)?'
    r"</span>",
    re.DOTALL,
)


def marker_for(phrase_id: str, length: int = MARKER_LENGTH) -> str:
    """Short visible marker: the first *length* characters of the id."""
    return phrase_id[:length]


def render_anchor(phrase_id: str, text: str, marker: str | None = None) -> str:
    """Render one anchor fragment; the marker is optional."""
    sup = (
        f'<sup class="{MARKER_CLASS}">{html.escape(marker, quote=False)}</sup>'
        if marker is not None
        else ""
    )
    return (
        f'<span class="{ANCHOR_CLASS}" {ID_ATTRIBUTE}="{html.escape(phrase_id, quote=True)}">'
        f"{text}{sup}</span>"
    )


# ---------------------------------------------------------------------------
# Fragment rendering
# ---------------------------------------------------------------------------


class RenderedPiece(NamedTuple):
    """A piece of decorated output.

    ``fragment`` is the wrapped document text for anchor pieces and None for
    raw pass-through text (line breaks, blank lines, joining spaces).
    """

    markup: str
    fragment: str | None = None
    has_marker: bool = False


def render_phrase(
    phrase_id: str,
    matched_text: str,
    marker: str,
    *,
    join_lines_with_space: bool = False,
) -> list[RenderedPiece] | None:
    """Render the decorated equivalent of *matched_text*.

    One anchor per non-blank line, all sharing *phrase_id*; only the last
    carries the marker. Line breaks between fragments are kept verbatim
    unless *join_lines_with_space* is set, in which case consecutive
    fragments are joined by a single space.

    Returns:
        The pieces in output order, or None if the text has nothing to wrap.
    """
    pairs = split_lines_keep_breaks(matched_text)
    wrapped = [i for i, (line, _) in enumerate(pairs) if line.strip()]
    if not wrapped:
        return None
    first, last = wrapped[0], wrapped[-1]

    pieces: list[RenderedPiece] = []
    for i, (line, brk) in enumerate(pairs):
        inside = first <= i < last
        if i in wrapped:
            if join_lines_with_space and i > first:
                pieces.append(RenderedPiece(" "))
            mark = marker if i == last else None
            pieces.append(RenderedPiece(
                render_anchor(phrase_id, line, mark), line, i == last,
            ))
        elif line and not (join_lines_with_space and first < i < last):
            pieces.append(RenderedPiece(line))
        if brk and not (join_lines_with_space and inside):
            pieces.append(RenderedPiece(brk))
    return pieces


# ---------------------------------------------------------------------------
# Anchor index
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AnchorSpan:
    """One rendered anchor fragment and its range in the decorated text."""

    phrase_id: str
    start: int
    end: int
    text: str
    has_marker: bool

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"invalid span range [{self.start}, {self.end})")


@dataclass(frozen=True, slots=True)
class AnchorIndex:
    """Lookup from phrase id and marker to rendered spans for one pass."""

    spans: tuple[AnchorSpan, ...] = ()
    marker_length: int = MARKER_LENGTH

    def for_phrase(self, phrase_id: str) -> tuple[AnchorSpan, ...]:
        return tuple(s for s in self.spans if s.phrase_id == phrase_id)

    def phrase_range(self, phrase_id: str) -> tuple[int, int] | None:
        """Range covering every fragment of a phrase, or None."""
        spans = self.for_phrase(phrase_id)
        if not spans:
            return None
        return spans[0].start, spans[-1].end

    def phrase_ids(self) -> list[str]:
        """Decorated phrase ids in document order, without duplicates."""
        seen: dict[str, None] = {}
        for span in self.spans:
            seen.setdefault(span.phrase_id, None)
        return list(seen)

    def resolve_marker(self, marker: str) -> str | None:
        """Phrase id for a "jump to phrase" marker.

        Markers can collide; the earliest anchor in the document wins,
        which is the last one the decorator placed.
        """
        for span in self.spans:
            if span.has_marker and marker_for(span.phrase_id, self.marker_length) == marker:
                return span.phrase_id
        return None

    def marker_span(self, phrase_id: str) -> AnchorSpan | None:
        """The fragment carrying the phrase's marker (scroll target)."""
        for span in self.spans:
            if span.phrase_id == phrase_id and span.has_marker:
                return span
        return None

    def __contains__(self, phrase_id: object) -> bool:
        return any(s.phrase_id == phrase_id for s in self.spans)

    def __len__(self) -> int:
        return len(self.phrase_ids())


# ---------------------------------------------------------------------------
# Markup parsing
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ParsedAnchor:
    """An anchor fragment recovered from decorated markup."""

    phrase_id: str
    text: str
    marker: str | None


def parse_anchors(markup: str) -> list[ParsedAnchor]:
    """Recover anchor fragments from decorated markup, in document order."""
    if not markup:
        return []
    soup = BeautifulSoup(markup, "html.parser")
    anchors: list[ParsedAnchor] = []
    for span in soup.find_all("span", class_=ANCHOR_CLASS):
        phrase_id = span.get(ID_ATTRIBUTE)
        if not phrase_id:
            continue
        sup = span.find("sup", class_=MARKER_CLASS)
        marker = sup.get_text() if sup is not None else None
        if sup is not None:
            sup.extract()
        anchors.append(ParsedAnchor(
            phrase_id=str(phrase_id),
            text=span.get_text(),
            marker=marker,
        ))
    return anchors


def resolve_marker_in_markup(markup: str, marker: str) -> str | None:
    """Phrase id whose marker element reads *marker*; earliest anchor wins."""
    for anchor in parse_anchors(markup):
        if anchor.marker == marker:
            return anchor.phrase_id
    return None


def strip_annotations(markup: str) -> str:
    """Remove anchor and marker elements, keeping the wrapped text."""
    return _ANCHOR_RE.sub(lambda m: m.group(1), markup)
