"""Choose the saved phrases that belong to a loaded document.

A record belongs to the document when it was saved from this exact version
(same content hash, either digest scheme) or from the same source file.
Records saved on an earlier version of the file are kept, and the decoration
pass re-locates them against the current text.
"""
from __future__ import annotations

from collections.abc import Iterable
from pathlib import PurePath
from typing import Any

from phrasemark.hashing import hash_matches
from phrasemark.phrase_types import Document, PhraseRecord, as_record


def select_phrases_for_document(
    document: Document,
    phrases: Iterable[PhraseRecord | dict[str, Any]],
) -> list[PhraseRecord]:
    """Return the records relevant to *document*, in input order."""
    records = [as_record(p) for p in phrases]
    if not document.text.strip():
        return []
    return [r for r in records if _belongs_to(r, document)]


def _belongs_to(record: PhraseRecord, document: Document) -> bool:
    if record.content_hash and (
        record.content_hash == document.content_hash
        or hash_matches(record.content_hash, document.text)
    ):
        return True
    return bool(
        document.source_file
        and record.source_file
        and same_source(record.source_file, document.source_file)
    )


def same_source(a: str, b: str) -> bool:
    """Compare source files by full path, or by file name if either is bare."""
    if a == b:
        return True
    pa, pb = PurePath(a), PurePath(b)
    if len(pa.parts) == 1 or len(pb.parts) == 1:
        return pa.name == pb.name
    return False
