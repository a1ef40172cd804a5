#!/usr/bin/env python3
"""Decorate a document with its saved phrases.

Reads a document and a phrase file (JSON array, ``{"phrases": [...]}`` or
JSONL), keeps the phrases saved from this document (same content hash, or
same source file when the document has changed), and writes the annotated
document. Summary messages go to stderr.

Usage:
    python3 scripts/decorate_document.py --document book/chapter1.md \
      --phrases phrases.jsonl --output chapter1.decorated.md \
      --index-out chapter1.anchors.json
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import orjson

from phrasemark.decorator import DecorationResult, decorate_document
from phrasemark.io_utils import load_phrase_records, read_text_file, save_json
from phrasemark.phrase_types import Document, PhraseRecordError
from phrasemark.selection import select_phrases_for_document

log = logging.getLogger("decorate_document")

_FORMAT_BY_SUFFIX = {
    ".md": "markdown",
    ".markdown": "markdown",
    ".html": "html",
    ".htm": "html",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Wrap saved phrases of a document in anchor markup."
    )
    parser.add_argument(
        "--document", required=True, type=Path, help="Document to decorate"
    )
    parser.add_argument(
        "--phrases", required=True, type=Path, help="Phrase records (.json or .jsonl)"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write decorated text here (default: stdout)",
    )
    parser.add_argument(
        "--index-out",
        type=Path,
        default=None,
        help="Optional JSON path for the anchor index of this pass",
    )
    parser.add_argument(
        "--format",
        choices=("plain", "markdown", "html"),
        default=None,
        help="Document format (default: from file suffix, else plain)",
    )
    parser.add_argument(
        "--join-lines-with-space",
        action="store_true",
        help="Join multi-line phrase fragments with a space (legacy output)",
    )
    parser.add_argument(
        "--all-phrases",
        action="store_true",
        help="Decorate every phrase in the file, not only this document's",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )
    return parser


def document_format(path: Path, explicit: str | None) -> str:
    if explicit:
        return explicit
    return _FORMAT_BY_SUFFIX.get(path.suffix.lower(), "plain")


def index_payload(result: DecorationResult) -> dict[str, object]:
    """JSON-ready view of a DecorationResult's index."""
    index = result.index
    return {
        "placed": list(result.placed),
        "skipped": list(result.skipped),
        "anchors": [
            {
                "phrase_id": span.phrase_id,
                "start": span.start,
                "end": span.end,
                "text": span.text,
                "has_marker": span.has_marker,
            }
            for span in index.spans
        ],
    }


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    if not args.document.exists():
        print(f"Error: document not found: {args.document}", file=sys.stderr)
        return 1
    if not args.phrases.exists():
        print(f"Error: phrase file not found: {args.phrases}", file=sys.stderr)
        return 1

    document = Document(
        text=read_text_file(args.document),
        format=document_format(args.document, args.format),
        source_file=str(args.document),
    )
    try:
        records = load_phrase_records(args.phrases)
    except (PhraseRecordError, orjson.JSONDecodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not args.all_phrases:
        selected = select_phrases_for_document(document, records)
        log.info("Selected %d of %d phrases for %s", len(selected), len(records), args.document)
        records = selected

    result = decorate_document(
        document, records, join_lines_with_space=args.join_lines_with_space,
    )
    log.info(
        "Decorated %d phrases, %d not found", len(result.placed), len(result.skipped),
    )
    for phrase_id in result.skipped:
        log.debug("not decorated: %s", phrase_id)

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_bytes(result.text.encode("utf-8"))
    else:
        sys.stdout.write(result.text)

    if args.index_out is not None:
        save_json(index_payload(result), args.index_out, pretty=True)
        log.info("Wrote anchor index to %s", args.index_out)
    return 0


if __name__ == "__main__":
    sys.exit(main())
