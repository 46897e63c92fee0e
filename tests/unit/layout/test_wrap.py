"""Tests for the style-preserving greedy wrapper."""

from __future__ import annotations

import unittest

from wikiview.document.model import InlineSpan, StyleFlags, link, strong
from wikiview.layout.types import Fragment
from wikiview.layout.wrap import natural_width, tokenize, wrap_spans
from wikiview.text import display_width, hard_split, split_at_width


def _texts(rows) -> list[str]:
    return ["".join(fragment.text for fragment in row.fragments) for row in rows]


def _link_ids(_index, _span) -> int:
    return 0


class WrapTests(unittest.TestCase):
    def test_greedy_fill_breaks_on_whitespace(self) -> None:
        rows = wrap_spans([InlineSpan("the quick brown fox jumps")], 10)

        self.assertEqual(_texts(rows), ["the quick", "brown fox", "jumps"])

    def test_whitespace_runs_collapse(self) -> None:
        rows = wrap_spans([InlineSpan("  spaced    out  ")], 40)

        self.assertEqual(_texts(rows), ["spaced out"])

    def test_link_text_is_never_split_when_it_fits_a_line(self) -> None:
        spans = [InlineSpan("visit "), link("New York"), InlineSpan(" today")]

        rows = wrap_spans(spans, 10, link_id_for=_link_ids)

        self.assertEqual(_texts(rows), ["visit", "New York", "today"])
        self.assertEqual(rows[1].fragments, [Fragment("New York", link_id=0)])

    def test_over_wide_word_is_hard_split(self) -> None:
        rows = wrap_spans([InlineSpan("abcdefghij")], 4)

        self.assertEqual(_texts(rows), ["abcd", "efgh", "ij"])

    def test_over_wide_word_starts_after_existing_text(self) -> None:
        rows = wrap_spans([InlineSpan("ab cdefghij")], 4)

        self.assertEqual(_texts(rows), ["ab", "cdef", "ghij"])

    def test_adjacent_spans_join_into_one_word_and_keep_styles(self) -> None:
        rows = wrap_spans([strong("bold"), InlineSpan("ed")], 3)

        self.assertEqual(_texts(rows), ["bol", "ded"])
        self.assertEqual(rows[1].fragments, [Fragment("d", StyleFlags.STRONG), Fragment("ed")])

    def test_separator_space_takes_previous_style(self) -> None:
        rows = wrap_spans([strong("a"), InlineSpan(" b")], 10)

        self.assertEqual(rows[0].fragments, [Fragment("a ", StyleFlags.STRONG), Fragment("b")])

    def test_wide_characters_count_two_columns(self) -> None:
        rows = wrap_spans([InlineSpan("日本語")], 4)

        self.assertEqual(_texts(rows), ["日本", "語"])
        self.assertTrue(all(row.width <= 4 for row in rows))

    def test_rows_record_span_offsets(self) -> None:
        rows = wrap_spans([InlineSpan("one two"), InlineSpan(" three")], 7, block_id=4)

        self.assertEqual([(row.span_start, row.span_end) for row in rows], [(0, 1), (1, 2)])
        self.assertEqual({row.block_id for row in rows}, {4})

    def test_empty_spans_produce_no_rows(self) -> None:
        self.assertEqual(wrap_spans([InlineSpan(""), InlineSpan("   ")], 10), [])


class TokenizeTests(unittest.TestCase):
    def test_natural_width_counts_single_spaces(self) -> None:
        words = tokenize([InlineSpan("a  bb"), InlineSpan(" ccc")])

        self.assertEqual(natural_width(words), 8)

    def test_link_visible_text_is_one_word(self) -> None:
        words = tokenize([link("Isle  of Man")])

        self.assertEqual(len(words), 1)
        self.assertEqual(words[0][0].text, "Isle of Man")


class TextWidthTests(unittest.TestCase):
    def test_combining_marks_take_no_column(self) -> None:
        self.assertEqual(display_width("e\u0301"), 1)

    def test_split_always_makes_progress(self) -> None:
        self.assertEqual(split_at_width("日x", 1), ("日", "x"))
        self.assertEqual(hard_split("abcde", 2), ["ab", "cd", "e"])


if __name__ == "__main__":
    unittest.main()
