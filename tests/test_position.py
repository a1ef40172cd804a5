"""Tests for phrasemark.position."""
from __future__ import annotations

import pytest

from phrasemark.phrase_types import Position
from phrasemark.position import (
    context_around,
    line_col_to_offset,
    offset_to_line_col,
    record_position,
)


class TestOffsetToLineCol:
    @pytest.mark.parametrize(
        "text,offset,expected",
        [
            ("abc", 0, (1, 0)),
            ("abc\ndef", 4, (2, 0)),
            ("abc\ndef", 6, (2, 2)),
            ("abc\r\ndef", 5, (2, 0)),
            ("abc\rdef", 4, (2, 0)),
            ("a\n\nb", 3, (3, 0)),
        ],
    )
    def test_positions(self, text: str, offset: int, expected: tuple[int, int]) -> None:
        assert offset_to_line_col(text, offset).as_tuple() == expected

    def test_clamped(self) -> None:
        assert offset_to_line_col("ab\ncd", 99).as_tuple() == (2, 2)
        assert offset_to_line_col("ab", -3).as_tuple() == (1, 0)


class TestLineColToOffset:
    def test_inverse(self) -> None:
        text = "first\r\nsecond\nthird"
        for offset in range(len(text) + 1):
            if text[offset - 1:offset + 1] == "\r\n":
                continue
            pos = offset_to_line_col(text, offset)
            assert line_col_to_offset(text, pos) == offset

    def test_clamps_column_and_line(self) -> None:
        text = "ab\ncd"
        assert line_col_to_offset(text, Position(1, 50)) == 2
        assert line_col_to_offset(text, Position(9, 1)) == 4


class TestRecordPosition:
    def test_exact(self) -> None:
        doc = "Chapter 1\nThe cat sat on the mat."
        pos = record_position("cat sat", doc)
        assert pos is not None
        assert pos.as_tuple() == (2, 4)
        assert pos.formula_position == 200004

    def test_case_insensitive(self) -> None:
        pos = record_position("THE CAT", "x\nthe cat")
        assert pos is not None
        assert pos.as_tuple() == (2, 0)

    def test_not_found(self) -> None:
        assert record_position("dog", "The cat sat.") is None
        assert record_position("", "The cat sat.") is None

    def test_flexible_whitespace_not_used(self) -> None:
        assert record_position("cat sat", "cat\nsat") is None


class TestContextAround:
    def test_radius(self) -> None:
        doc = "0123456789target0123456789"
        assert context_around("target", doc, radius=3) == "789target012"

    def test_edges(self) -> None:
        assert context_around("ab", "abc", radius=50) == "abc"

    def test_missing(self) -> None:
        assert context_around("zz", "abc") == ""
