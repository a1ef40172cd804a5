"""Core record types shared by the locator, decorator and ordering code.

- ``Document``: text being read, with its content hash and format tag.
- ``PhraseRecord``: a saved selection ("this text was once found here").
- ``Position``: a (line, column) address recorded at save time.
- ``Match``: ephemeral result of locating one phrase in one document.

Records are built from caller dicts with :meth:`PhraseRecord.from_dict`,
which accepts both snake_case keys and the camelCase keys written by the
reader clients (``lineNo``, ``colOffset``, ``formulaPosition`` ...).
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any

from phrasemark.hashing import content_hash

# Columns per line assumed by the packed ``formula_position`` hint.
FORMULA_LINE_STRIDE = 100_000

DOCUMENT_FORMATS: frozenset[str] = frozenset({"plain", "markdown", "html"})

_TAG_PREFIX_RE = re.compile(r"^#+")


class PhraseRecordError(ValueError):
    """Raised when a caller-supplied phrase record cannot be used."""


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Document:
    """A loaded document. Immutable per decoration pass."""

    text: str
    content_hash: str = ""
    format: str = "plain"
    source_file: str | None = None

    def __post_init__(self) -> None:
        if self.format not in DOCUMENT_FORMATS:
            raise ValueError(
                f"format must be one of {sorted(DOCUMENT_FORMATS)}, got {self.format!r}"
            )
        if not self.content_hash:
            object.__setattr__(self, "content_hash", content_hash(self.text))

    @property
    def is_marked_up(self) -> bool:
        return self.format != "plain"


# ---------------------------------------------------------------------------
# Position / Match
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Position:
    """1-based line number and 0-based column of a phrase start."""

    line_no: int
    col_offset: int

    def __post_init__(self) -> None:
        if self.line_no < 1:
            raise ValueError(f"line_no must be >= 1, got {self.line_no}")
        if self.col_offset < 0:
            raise ValueError(f"col_offset must be non-negative, got {self.col_offset}")

    @property
    def formula_position(self) -> int:
        """Packed ``line * 100000 + col`` hint for single-number storage."""
        if self.col_offset >= FORMULA_LINE_STRIDE:
            raise ValueError(
                f"col_offset {self.col_offset} does not fit the packed hint"
            )
        return self.line_no * FORMULA_LINE_STRIDE + self.col_offset

    def as_tuple(self) -> tuple[int, int]:
        return (self.line_no, self.col_offset)


@dataclass(frozen=True, slots=True)
class Match:
    """A located phrase: ``text`` is ``document[start:end]``."""

    start: int
    end: int
    text: str
    tier: int  # cascade tier that found the start offset (1-4)

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"invalid match range [{self.start}, {self.end})")


# ---------------------------------------------------------------------------
# PhraseRecord
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PhraseRecord:
    """A saved phrase. ``text`` never changes; edits create a new record."""

    id: str
    text: str
    translation: str = ""
    tags: tuple[str, ...] = ()
    context: str = ""
    lang: str | None = None
    source_file: str | None = None
    content_hash: str | None = None
    line_no: int | None = None
    col_offset: int | None = None
    formula_position: int | None = None
    added_at: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise PhraseRecordError("phrase record requires a non-empty id")
        if not isinstance(self.text, str):
            raise PhraseRecordError(f"phrase {self.id!r}: text must be a string")

    @property
    def position(self) -> Position | None:
        """Saved (line, column) when both parts are present and valid."""
        if self.line_no is None or self.col_offset is None:
            return None
        if self.line_no < 1 or self.col_offset < 0:
            return None
        return Position(self.line_no, self.col_offset)

    def with_translation(
        self,
        translation: str,
        tags: tuple[str, ...] | None = None,
    ) -> PhraseRecord:
        """Return a copy with updated translation (and optionally tags)."""
        if tags is None:
            return replace(self, translation=translation)
        return replace(self, translation=translation, tags=clean_tags(tags))

    def with_position(self, position: Position | None) -> PhraseRecord:
        if position is None:
            return replace(self, line_no=None, col_offset=None)
        return replace(
            self, line_no=position.line_no, col_offset=position.col_offset,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PhraseRecord:
        """Build a record from a caller/storage dict.

        Args:
            data: Mapping with at least ``id`` and ``text``. Optional keys may
                be snake_case or camelCase.

        Returns:
            A validated PhraseRecord. Unknown keys are kept in ``extra``.

        Raises:
            PhraseRecordError: If id or text is missing, or a numeric hint
                is not an integer.
        """
        if not isinstance(data, dict):
            raise PhraseRecordError(f"phrase record must be an object, got {type(data).__name__}")
        raw_id = data.get("id")
        text = data.get("text")
        if raw_id is None or str(raw_id) == "":
            raise PhraseRecordError("phrase record requires a non-empty id")
        if not isinstance(text, str):
            raise PhraseRecordError(f"phrase {raw_id!r}: text must be a string")

        used: set[str] = {"id", "text"}

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in data:
                    used.add(key)
                    if data[key] is not None:
                        return data[key]
            return None

        raw_tags = pick("tags")
        tags = clean_tags(raw_tags) if isinstance(raw_tags, (list, tuple)) else ()
        record = cls(
            id=str(raw_id),
            text=text,
            translation=str(pick("translation") or ""),
            tags=tags,
            context=str(pick("context") or ""),
            lang=pick("lang"),
            source_file=pick("source_file", "sourceFile"),
            content_hash=pick("content_hash", "contentHash"),
            line_no=_opt_int(raw_id, "line_no", pick("line_no", "lineNo")),
            col_offset=_opt_int(raw_id, "col_offset", pick("col_offset", "colOffset")),
            formula_position=_opt_int(
                raw_id, "formula_position", pick("formula_position", "formulaPosition"),
            ),
            added_at=pick("added_at", "addedAt"),
        )
        extra = {k: v for k, v in data.items() if k not in used}
        if extra:
            record = replace(record, extra=extra)
        return record

    def to_dict(self) -> dict[str, Any]:
        """Serialize with snake_case keys; None-valued hints are omitted."""
        out: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "translation": self.translation,
            "tags": list(self.tags),
            "context": self.context,
        }
        optional = {
            "lang": self.lang,
            "source_file": self.source_file,
            "content_hash": self.content_hash,
            "line_no": self.line_no,
            "col_offset": self.col_offset,
            "formula_position": self.formula_position,
            "added_at": self.added_at,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        out.update(self.extra)
        return out


def clean_tags(tags: list[Any] | tuple[Any, ...]) -> tuple[str, ...]:
    """Strip leading '#' from tags and drop empties."""
    cleaned: list[str] = []
    for tag in tags:
        value = _TAG_PREFIX_RE.sub("", str(tag).strip())
        if value:
            cleaned.append(value)
    return tuple(cleaned)


def _opt_int(phrase_id: Any, name: str, value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise PhraseRecordError(f"phrase {phrase_id!r}: {name} must be an integer")
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    raise PhraseRecordError(f"phrase {phrase_id!r}: {name} must be an integer, got {value!r}")


def as_record(item: PhraseRecord | dict[str, Any]) -> PhraseRecord:
    """Accept either a PhraseRecord or a caller dict."""
    if isinstance(item, PhraseRecord):
        return item
    return PhraseRecord.from_dict(item)
