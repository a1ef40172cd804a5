"""Tests for phrasemark.phrase_types."""
from __future__ import annotations

import pytest

from phrasemark.hashing import content_hash
from phrasemark.phrase_types import (
    Document,
    Match,
    PhraseRecord,
    PhraseRecordError,
    Position,
    as_record,
    clean_tags,
)


class TestDocument:
    def test_hash_filled(self) -> None:
        doc = Document(text="hello")
        assert doc.content_hash == content_hash("hello")
        assert not doc.is_marked_up

    def test_explicit_hash_kept(self) -> None:
        assert Document(text="hello", content_hash="abc").content_hash == "abc"

    def test_bad_format(self) -> None:
        with pytest.raises(ValueError, match="format"):
            Document(text="x", format="pdf")


class TestPosition:
    def test_validation(self) -> None:
        with pytest.raises(ValueError):
            Position(0, 0)
        with pytest.raises(ValueError):
            Position(1, -1)

    def test_formula(self) -> None:
        assert Position(3, 12).formula_position == 300012


class TestMatch:
    def test_invalid_range(self) -> None:
        with pytest.raises(ValueError):
            Match(start=5, end=4, text="", tier=1)


class TestFromDict:
    def test_camel_case_keys(self) -> None:
        rec = PhraseRecord.from_dict({
            "id": "p1",
            "text": "cat sat",
            "lineNo": 2,
            "colOffset": 4,
            "formulaPosition": 200004,
            "contentHash": "deadbeef",
            "sourceFile": "book.txt",
            "addedAt": "2024-01-01T00:00:00",
            "tags": ["#animals", " ", "verbs"],
            "lang": "en",
        })
        assert rec.position == Position(2, 4)
        assert rec.formula_position == 200004
        assert rec.content_hash == "deadbeef"
        assert rec.source_file == "book.txt"
        assert rec.added_at == "2024-01-01T00:00:00"
        assert rec.tags == ("animals", "verbs")
        assert rec.extra == {}

    def test_snake_case_and_extra(self) -> None:
        rec = PhraseRecord.from_dict({
            "id": 42, "text": "x", "line_no": "3", "col_offset": 0.0, "starred": True,
        })
        assert rec.id == "42"
        assert rec.position == Position(3, 0)
        assert rec.extra == {"starred": True}
        assert rec.to_dict()["starred"] is True

    @pytest.mark.parametrize(
        "data",
        [
            {"text": "x"},
            {"id": "", "text": "x"},
            {"id": "p", "text": 5},
            {"id": "p"},
            {"id": "p", "text": "x", "lineNo": "two"},
            {"id": "p", "text": "x", "colOffset": True},
            ["not", "a", "dict"],
        ],
    )
    def test_malformed(self, data: object) -> None:
        with pytest.raises(PhraseRecordError):
            PhraseRecord.from_dict(data)  # type: ignore[arg-type]

    def test_invalid_saved_position_is_ignored(self) -> None:
        rec = PhraseRecord.from_dict({"id": "p", "text": "x", "lineNo": 0, "colOffset": 2})
        assert rec.position is None

    def test_to_dict_omits_missing_hints(self) -> None:
        out = PhraseRecord(id="p", text="x").to_dict()
        assert out == {"id": "p", "text": "x", "translation": "", "tags": [], "context": ""}

    def test_round_trip(self) -> None:
        rec = PhraseRecord(
            id="p", text="x", tags=("a",), line_no=1, col_offset=2, lang="de",
        )
        assert PhraseRecord.from_dict(rec.to_dict()) == rec


class TestUpdates:
    def test_with_translation(self) -> None:
        rec = PhraseRecord(id="p", text="Hund", tags=("keep",))
        updated = rec.with_translation("dog")
        assert updated.translation == "dog"
        assert updated.tags == ("keep",)
        assert updated.text == "Hund"
        retagged = rec.with_translation("dog", ("#noun", ""))
        assert retagged.tags == ("noun",)

    def test_with_position(self) -> None:
        rec = PhraseRecord(id="p", text="x").with_position(Position(4, 1))
        assert (rec.line_no, rec.col_offset) == (4, 1)
        cleared = rec.with_position(None)
        assert cleared.position is None


def test_clean_tags() -> None:
    assert clean_tags(["##a", "b", "", "  #c "]) == ("a", "b", "c")


def test_as_record_passthrough() -> None:
    rec = PhraseRecord(id="p", text="x")
    assert as_record(rec) is rec
    assert as_record({"id": "p", "text": "x"}) == rec
