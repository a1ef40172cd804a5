"""Tests for phrasemark.anchors."""
from __future__ import annotations

import pytest

from phrasemark.anchors import (
    AnchorIndex,
    AnchorSpan,
    marker_for,
    parse_anchors,
    render_anchor,
    render_phrase,
    resolve_marker_in_markup,
    strip_annotations,
)


class TestRenderAnchor:
    def test_with_marker(self) -> None:
        assert render_anchor("abcd1234", "cat sat", "abcd") == (
            '<span class="phrase-anchor" data-phrase-id="abcd1234">cat sat'
            '<sup class="phrase-marker">abcd</sup></span>'
        )

    def test_without_marker(self) -> None:
        assert render_anchor("abcd1234", "cat") == (
            '<span class="phrase-anchor" data-phrase-id="abcd1234">cat</span>'
        )

    def test_id_attribute_escaped(self) -> None:
        assert 'data-phrase-id="a&quot;b"' in render_anchor('a"b', "x")

    def test_plain_id_is_byte_exact(self) -> None:
        phrase_id = "3f2b9c1e-77aa-4d0b-9e1f-0c5d8a6b2e47"
        assert render_anchor(phrase_id, "x", marker_for(phrase_id)) == (
            f'<span class="phrase-anchor" data-phrase-id="{phrase_id}">x'
            '<sup class="phrase-marker">3f2b</sup></span>'
        )

    def test_marker_for(self) -> None:
        assert marker_for("abcd1234") == "abcd"
        assert marker_for("ab") == "ab"
        assert marker_for("abcd1234", 6) == "abcd12"


class TestRenderPhrase:
    def test_single_line(self) -> None:
        pieces = render_phrase("p1", "hello", "p1")
        assert pieces is not None
        assert len(pieces) == 1
        assert pieces[0].fragment == "hello"
        assert pieces[0].has_marker

    def test_blank_text(self) -> None:
        assert render_phrase("p1", " \n ", "p1") is None

    def test_preserves_breaks_and_blank_lines(self) -> None:
        pieces = render_phrase("p1", "a\r\n\r\nb", "p1")
        assert pieces is not None
        raw = [p.markup for p in pieces if p.fragment is None]
        assert raw == ["\r\n", "\r\n"]
        assert [p.fragment for p in pieces if p.fragment is not None] == ["a", "b"]

    def test_join_with_space_drops_inner_breaks(self) -> None:
        pieces = render_phrase("p1", "a\n\nb", "p1", join_lines_with_space=True)
        assert pieces is not None
        raw = [p.markup for p in pieces if p.fragment is None]
        assert raw == [" "]

    def test_only_last_fragment_has_marker(self) -> None:
        pieces = render_phrase("p1", "a\nb\nc", "p1")
        assert pieces is not None
        anchors = [p for p in pieces if p.fragment is not None]
        assert [p.has_marker for p in anchors] == [False, False, True]
        assert sum("phrase-marker" in p.markup for p in anchors) == 1


class TestAnchorIndex:
    def _index(self) -> AnchorIndex:
        return AnchorIndex(spans=(
            AnchorSpan("abcd0001", 0, 10, "one", False),
            AnchorSpan("abcd0001", 11, 30, "two", True),
            AnchorSpan("zz99", 40, 60, "three", True),
            AnchorSpan("abcd0002", 70, 90, "four", True),
        ))

    def test_lookup(self) -> None:
        index = self._index()
        assert index.phrase_range("abcd0001") == (0, 30)
        assert index.phrase_range("missing") is None
        assert index.phrase_ids() == ["abcd0001", "zz99", "abcd0002"]
        assert len(index) == 3
        assert "zz99" in index
        assert "missing" not in index

    def test_marker_span(self) -> None:
        span = self._index().marker_span("abcd0001")
        assert span is not None
        assert span.text == "two"

    def test_resolve_marker_earliest_wins(self) -> None:
        index = self._index()
        assert index.resolve_marker("abcd") == "abcd0001"
        assert index.resolve_marker("zz99") == "zz99"
        assert index.resolve_marker("nope") is None

    def test_invalid_span(self) -> None:
        with pytest.raises(ValueError):
            AnchorSpan("x", 5, 2, "", False)


class TestParseAnchors:
    MARKUP = (
        'A <span class="phrase-anchor" data-phrase-id="ml123456">first line</span>\n'
        '<span class="phrase-anchor" data-phrase-id="ml123456">second line'
        '<sup class="phrase-marker">ml12</sup></span> and '
        '<span class="phrase-anchor" data-phrase-id="ml129999">more'
        '<sup class="phrase-marker">ml12</sup></span>.'
    )

    def test_fragments_in_order(self) -> None:
        anchors = parse_anchors(self.MARKUP)
        assert [(a.phrase_id, a.text, a.marker) for a in anchors] == [
            ("ml123456", "first line", None),
            ("ml123456", "second line", "ml12"),
            ("ml129999", "more", "ml12"),
        ]

    def test_resolve_in_markup(self) -> None:
        assert resolve_marker_in_markup(self.MARKUP, "ml12") == "ml123456"
        assert resolve_marker_in_markup(self.MARKUP, "none") is None

    def test_empty(self) -> None:
        assert parse_anchors("") == []
        assert parse_anchors("plain text") == []

    def test_strip_annotations(self) -> None:
        assert strip_annotations(self.MARKUP) == "A first line\nsecond line and more."
