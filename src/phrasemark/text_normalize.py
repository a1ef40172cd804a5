"""Whitespace normalization with a reversible offset map.

``collapse_whitespace`` turns every run of whitespace (spaces, tabs, CR, LF,
CRLF, non-breaking spaces ...) into a single space and records, as an
inverse map, where each surviving segment came from. The inverse map lets
a match found in collapsed text be resolved back to an offset in the
original document, which is how the last tier of the phrase locator maps
its result.

Inverse-map runs use the same run-length form as HTML normalization: each
entry says "``length`` normalized chars starting at ``normalized_start``
come from the original text starting at ``original_start``".
"""
from __future__ import annotations

import bisect
import re
from dataclasses import dataclass
from typing import TypeAlias

# ---------------------------------------------------------------------------
# Inverse map types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class InverseMapEntry:
    """Single entry in an inverse map: normalized offset -> original offset."""

    normalized_start: int
    original_start: int
    length: int

    def __post_init__(self) -> None:
        if self.length < 0:
            raise ValueError(f"length must be non-negative, got {self.length}")


InverseMap: TypeAlias = tuple[InverseMapEntry, ...]


_WS_RUN_RE = re.compile(r"\s+")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


# ---------------------------------------------------------------------------
# Collapse
# ---------------------------------------------------------------------------


def collapse_whitespace(text: str) -> tuple[str, InverseMap]:
    """Collapse whitespace runs to one space and build the inverse map.

    Leading and trailing whitespace is kept (as a single space) so that
    normalized offsets stay aligned with the original's reading order.

    Returns:
        Tuple of (collapsed_text, inverse_map).
    """
    if not text:
        return ("", ())

    parts: list[str] = []
    runs: list[InverseMapEntry] = []
    norm_pos = 0
    raw_pos = 0

    for m in _WS_RUN_RE.finditer(text):
        if m.start() > raw_pos:
            seg_len = m.start() - raw_pos
            _append_run(runs, norm_pos, raw_pos, seg_len)
            parts.append(text[raw_pos:m.start()])
            norm_pos += seg_len
        # A whitespace run becomes one space mapped to the run's first char.
        _append_run(runs, norm_pos, m.start(), 1)
        parts.append(" ")
        norm_pos += 1
        raw_pos = m.end()

    if raw_pos < len(text):
        seg_len = len(text) - raw_pos
        _append_run(runs, norm_pos, raw_pos, seg_len)
        parts.append(text[raw_pos:])

    return ("".join(parts), tuple(runs))


def normalize_phrase(text: str) -> str:
    """Collapse whitespace in a phrase and trim both ends."""
    return _WS_RUN_RE.sub(" ", text).strip()


def to_original_offset(inverse_map: InverseMap, normalized_offset: int) -> int:
    """Resolve a collapsed-text offset to the original-text offset.

    Offsets past the last run resolve to the end of the last run.
    """
    if not inverse_map:
        return normalized_offset
    starts = [entry.normalized_start for entry in inverse_map]
    idx = bisect.bisect_right(starts, normalized_offset) - 1
    if idx < 0:
        return inverse_map[0].original_start
    entry = inverse_map[idx]
    delta = normalized_offset - entry.normalized_start
    if delta >= entry.length:
        # Past the end of the collapsed text.
        return entry.original_start + entry.length
    return entry.original_start + delta


# ---------------------------------------------------------------------------
# Small helpers
# ---------------------------------------------------------------------------


def split_lines_keep_breaks(text: str) -> list[tuple[str, str]]:
    """Split text into ``(line, line_break)`` pairs.

    The break of the last pair is ``""``. Handles LF, CR and CRLF, so
    ``"".join(line + brk for line, brk in pairs) == text``.
    """
    pairs: list[tuple[str, str]] = []
    pos = 0
    for m in _LINE_BREAK_RE.finditer(text):
        pairs.append((text[pos:m.start()], m.group(0)))
        pos = m.end()
    pairs.append((text[pos:], ""))
    return pairs


def has_line_break(text: str) -> bool:
    return _LINE_BREAK_RE.search(text) is not None


def _append_run(
    runs: list[InverseMapEntry], norm_start: int, raw_start: int, length: int,
) -> None:
    """Append a run, merging with the previous one when both are contiguous."""
    if (
        runs
        and runs[-1].normalized_start + runs[-1].length == norm_start
        and runs[-1].original_start + runs[-1].length == raw_start
    ):
        prev = runs[-1]
        runs[-1] = InverseMapEntry(
            normalized_start=prev.normalized_start,
            original_start=prev.original_start,
            length=prev.length + length,
        )
    else:
        runs.append(InverseMapEntry(
            normalized_start=norm_start,
            original_start=raw_start,
            length=length,
        ))
