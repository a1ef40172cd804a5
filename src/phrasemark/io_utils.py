"""I/O utilities for phrase records and documents.

orjson-backed JSON / JSONL reading and writing, phrase-record loading, and
encoding-safe text reading for documents.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any

import orjson

from phrasemark.phrase_types import PhraseRecord, PhraseRecordError


def load_json(path: Path) -> Any:
    """Load JSON from a file."""
    return orjson.loads(path.read_bytes())


def save_json(obj: Any, path: Path, *, pretty: bool = True) -> None:
    """Save an object as JSON with sorted keys."""
    path.parent.mkdir(parents=True, exist_ok=True)
    opts = (
        orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS
        if pretty
        else orjson.OPT_SORT_KEYS
    )
    path.write_bytes(orjson.dumps(obj, option=opts))


def load_jsonl(path: Path) -> list[dict[str, Any]]:
    """Load a JSON Lines file (one JSON object per line). Blank lines skipped."""
    records: list[dict[str, Any]] = []
    for line in path.read_bytes().split(b"\n"):
        line = line.strip()
        if line:
            records.append(orjson.loads(line))
    return records


def save_jsonl(records: list[dict[str, Any]], path: Path) -> None:
    """Save a list of dicts as a JSON Lines file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [orjson.dumps(r, option=orjson.OPT_SORT_KEYS) for r in records]
    path.write_bytes(b"\n".join(lines) + b"\n")


def load_phrase_records(path: Path) -> list[PhraseRecord]:
    """Load phrase records from JSON or JSONL.

    Accepts a JSON array of records, an object with a ``"phrases"`` array,
    or a ``.jsonl`` file with one record per line.

    Raises:
        PhraseRecordError: If the payload shape is wrong or a record is
            malformed.
    """
    if path.suffix == ".jsonl":
        rows: Any = load_jsonl(path)
    else:
        rows = load_json(path)
        if isinstance(rows, dict):
            rows = rows.get("phrases")
    if not isinstance(rows, list):
        raise PhraseRecordError(f"Invalid phrase payload in {path}")
    return [PhraseRecord.from_dict(r) for r in rows]


def save_phrase_records(records: list[PhraseRecord], path: Path) -> None:
    """Write records as JSONL (``.jsonl``) or a pretty JSON array."""
    rows = [r.to_dict() for r in records]
    if path.suffix == ".jsonl":
        save_jsonl(rows, path)
    else:
        save_json(rows, path, pretty=True)


def read_text_file(fpath: Path) -> str:
    """Read a document with encoding fallback: UTF-8 -> CP1252 -> replace.

    Line endings are preserved exactly (no universal-newline translation),
    since phrase positions are computed on the raw text.
    """
    raw = fpath.read_bytes()
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        try:
            return raw.decode("cp1252")
        except UnicodeDecodeError:
            return raw.decode("utf-8", errors="replace")
