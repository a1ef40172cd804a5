"""Tests for phrasemark.ordering."""
from __future__ import annotations

from typing import Any

import pytest

from phrasemark.ordering import (
    ordering_key,
    pack_position,
    reading_position,
    sort_phrases,
    stored_position,
    unpack_position,
)
from phrasemark.phrase_types import PhraseRecord


def _rec(phrase_id: str, text: str = "x", **kwargs: Any) -> PhraseRecord:
    return PhraseRecord(id=phrase_id, text=text, **kwargs)


class TestPackedHint:
    def test_pack(self) -> None:
        assert pack_position(1, 5) == 100005
        assert pack_position(2, 10) == 200010
        assert pack_position(1, 5) < pack_position(2, 10)

    def test_unpack(self) -> None:
        pos = unpack_position(200010)
        assert pos is not None
        assert pos.as_tuple() == (2, 10)
        assert unpack_position(99_999) is None

    def test_wide_column_cannot_be_packed(self) -> None:
        with pytest.raises(ValueError):
            pack_position(1, 150_000)


class TestReadingPosition:
    def test_line_col_preferred(self) -> None:
        rec = _rec("a", line_no=3, col_offset=1, formula_position=100000)
        pos = stored_position(rec)
        assert pos is not None
        assert pos.as_tuple() == (3, 1)

    def test_formula_fallback(self) -> None:
        pos = stored_position(_rec("a", formula_position=400007))
        assert pos is not None
        assert pos.as_tuple() == (4, 7)

    def test_document_fallback(self) -> None:
        rec = _rec("a", text="gamma")
        pos = reading_position(rec, "alpha\nbeta gamma")
        assert pos is not None
        assert pos.as_tuple() == (2, 5)

    def test_prefer_text_over_stale_hint(self) -> None:
        rec = _rec("a", text="gamma", line_no=9, col_offset=0)
        text = "alpha\nbeta gamma"
        assert reading_position(rec, text).as_tuple() == (9, 0)
        assert reading_position(rec, text, prefer_text=True).as_tuple() == (2, 5)
        moved_out = _rec("b", text="zeta", line_no=9, col_offset=0)
        assert reading_position(moved_out, text, prefer_text=True).as_tuple() == (9, 0)

    def test_unknown(self) -> None:
        assert reading_position(_rec("a", text="zeta"), "alpha") is None
        assert reading_position(_rec("a")) is None


class TestSortPhrases:
    def test_line_then_column(self) -> None:
        recs = [
            _rec("c", line_no=2, col_offset=10),
            _rec("a", line_no=1, col_offset=5),
            _rec("b", line_no=2, col_offset=3),
        ]
        assert [r.id for r in sort_phrases(recs)] == ["a", "b", "c"]

    def test_wide_column_still_orders_by_line(self) -> None:
        recs = [
            _rec("second", line_no=2, col_offset=0),
            _rec("first", line_no=1, col_offset=150_000),
        ]
        assert [r.id for r in sort_phrases(recs)] == ["first", "second"]

    def test_unpositioned_after_positioned_newest_first(self) -> None:
        recs = [
            _rec("old", added_at="2024-01-01T00:00:00"),
            _rec("pos", line_no=9, col_offset=0),
            _rec("new", added_at="2024-03-01T00:00:00"),
            _rec("undated"),
        ]
        assert [r.id for r in sort_phrases(recs)] == ["pos", "new", "old", "undated"]

    def test_bad_timestamp_sorts_like_missing(self) -> None:
        recs = [_rec("b", added_at="not a date"), _rec("a")]
        assert [r.id for r in sort_phrases(recs)] == ["a", "b"]

    def test_id_breaks_ties(self) -> None:
        recs = [_rec("z", line_no=1, col_offset=0), _rec("y", line_no=1, col_offset=0)]
        assert [r.id for r in sort_phrases(recs)] == ["y", "z"]

    def test_document_positions_used_when_given(self) -> None:
        doc = "one two three"
        recs = [_rec("t3", text="three"), _rec("t1", text="one"), _rec("t2", text="two")]
        assert [r.id for r in sort_phrases(recs, doc)] == ["t1", "t2", "t3"]

    def test_key_shape(self) -> None:
        key = ordering_key(_rec("a", line_no=1, col_offset=2))
        assert key[:3] == (0, 1, 2)
        assert ordering_key(_rec("b"))[0] == 1
