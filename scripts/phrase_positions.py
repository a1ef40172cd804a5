#!/usr/bin/env python3
"""Stamp phrase records with positions against a document and list them.

For every record without a saved (line, column) the position is recorded
against the given document, together with the document's content hash and
a context snippet. Records are then emitted in reading order (positioned
first, by line and column; the rest newest first).

Usage:
    python3 scripts/phrase_positions.py --document book/chapter1.txt \
      --phrases phrases.json --output phrases.positioned.json
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

import orjson

from phrasemark.io_utils import load_phrase_records, read_text_file, save_phrase_records
from phrasemark.ordering import sort_phrases
from phrasemark.phrase_types import Document, PhraseRecord, PhraseRecordError
from phrasemark.position import context_around, record_position

log = logging.getLogger("phrase_positions")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Record phrase positions against a document."
    )
    parser.add_argument("--document", required=True, type=Path)
    parser.add_argument("--phrases", required=True, type=Path)
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write records here (.json or .jsonl); default: JSON to stdout",
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Recompute positions even for records that already have one",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def stamp_record(
    record: PhraseRecord,
    document: Document,
    *,
    refresh: bool = False,
) -> PhraseRecord:
    """Fill position, content hash and context for one record."""
    if record.position is not None and not refresh:
        return record
    position = record_position(record.text, document.text)
    if position is None:
        log.debug("phrase %s not in document, left without position", record.id)
        return record.with_position(None) if refresh else record
    stamped = record.with_position(position)
    context = stamped.context or context_around(record.text, document.text)
    return replace(stamped, content_hash=document.content_hash, context=context)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    for path in (args.document, args.phrases):
        if not path.exists():
            print(f"Error: file not found: {path}", file=sys.stderr)
            return 1

    document = Document(text=read_text_file(args.document), source_file=str(args.document))
    try:
        records = load_phrase_records(args.phrases)
    except (PhraseRecordError, orjson.JSONDecodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    stamped = [stamp_record(r, document, refresh=args.refresh) for r in records]
    ordered = sort_phrases(stamped, document.text)
    positioned = sum(1 for r in ordered if r.position is not None)
    log.info("%d of %d phrases have a position", positioned, len(ordered))

    if args.output is not None:
        save_phrase_records(ordered, args.output)
    else:
        sys.stdout.buffer.write(
            orjson.dumps([r.to_dict() for r in ordered], option=orjson.OPT_INDENT_2)
        )
        sys.stdout.buffer.write(b"\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
