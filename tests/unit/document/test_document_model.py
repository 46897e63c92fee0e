"""Tests for document construction, block numbering and the table of contents."""

from __future__ import annotations

import unittest

from wikiview.document.model import (
    Document,
    Heading,
    LinkKind,
    LinkTarget,
    ListBlock,
    Paragraph,
    Section,
    StyleFlags,
    Table,
    build_document,
    bullet_list,
    emphasis,
    link,
    paragraph,
    section,
    strong,
    table,
)


def _sample() -> Document:
    return build_document(
        "Sample",
        [
            section("", paragraph("Lead ", strong("text"), ".")),
            section("History", paragraph("Founded."), bullet_list("one", ["two", "three"])),
            section("Early life", paragraph("Born."), level=3),
            section("Legacy", table(["a", "b"], ["c"])),
        ],
    )


class BuildDocumentTests(unittest.TestCase):
    def test_block_ids_follow_depth_first_order(self) -> None:
        doc = _sample()

        self.assertEqual([block.block_id for block in doc.blocks], list(range(len(doc.blocks))))
        kinds = [type(block).__name__ for block in doc.blocks]
        self.assertEqual(
            kinds,
            [
                "Heading",
                "Paragraph",
                "Heading",
                "Paragraph",
                "ListBlock",
                "Paragraph",
                "Paragraph",
                "Paragraph",
                "Heading",
                "Paragraph",
                "Heading",
                "Table",
                "Paragraph",
                "Paragraph",
                "Paragraph",
            ],
        )

    def test_list_items_keep_their_blocks(self) -> None:
        doc = _sample()
        block = doc.block(4)

        self.assertIsInstance(block, ListBlock)
        assert isinstance(block, ListBlock)
        self.assertFalse(block.ordered)
        self.assertEqual(len(block.items), 2)
        self.assertEqual(len(block.items[1]), 2)

    def test_document_rejects_ids_out_of_order(self) -> None:
        with self.assertRaises(ValueError):
            Document("Bad", "Bad", (Section(Heading(3, 2, ()), ()),))

    def test_block_lookup_rejects_negative_ids(self) -> None:
        with self.assertRaises(IndexError):
            _sample().block(-1)

    def test_title_defaults_to_identifier(self) -> None:
        self.assertEqual(build_document("Page", []).title, "Page")
        self.assertTrue(build_document("Page", []).is_empty)

    def test_table_column_count_uses_widest_row(self) -> None:
        block = _sample().block(11)

        self.assertIsInstance(block, Table)
        assert isinstance(block, Table)
        self.assertEqual(block.column_count, 2)


class SpanHelperTests(unittest.TestCase):
    def test_link_target_defaults_to_text(self) -> None:
        span = link("Python")

        self.assertEqual(span.link, LinkTarget("Python", LinkKind.INTERNAL))

    def test_link_keeps_explicit_target_kind_and_anchor(self) -> None:
        span = link("see here", "Snake", anchor="Venom", style=StyleFlags.EMPHASIS)

        self.assertEqual(span.link, LinkTarget("Snake", LinkKind.INTERNAL, "Venom"))
        self.assertEqual(span.style, StyleFlags.EMPHASIS)

    def test_style_helpers_set_flags(self) -> None:
        self.assertEqual(strong("a").style, StyleFlags.STRONG)
        self.assertEqual(emphasis("a").style, StyleFlags.EMPHASIS)

    def test_paragraph_accepts_plain_strings(self) -> None:
        block = paragraph("plain", strong("bold"))

        self.assertIsInstance(block, Paragraph)
        self.assertEqual([span.text for span in block.spans], ["plain", "bold"])

    def test_section_derives_anchor_from_title(self) -> None:
        self.assertEqual(section("Early life").anchor, "Early_life")
        self.assertIsNone(section("").anchor)


class TableOfContentsTests(unittest.TestCase):
    def test_toc_numbers_headings_relative_to_shallowest_level(self) -> None:
        doc = build_document(
            "Toc",
            [
                section("", paragraph("lead")),
                section("A", level=2),
                section("A1", level=3),
                section("A2", level=3),
                section("B", level=2),
                section("B1", level=3),
            ],
        )

        entries = doc.toc()

        self.assertEqual([entry.number for entry in entries], ["1", "1.1", "1.2", "2", "2.1"])
        self.assertEqual([entry.title for entry in entries], ["A", "A1", "A2", "B", "B1"])
        self.assertEqual(entries[0].block_id, 2)

    def test_toc_skips_lead_section_heading(self) -> None:
        doc = _sample()

        self.assertNotIn(0, [entry.block_id for entry in doc.toc()])

    def test_empty_document_has_empty_toc(self) -> None:
        self.assertEqual(build_document("Empty", []).toc(), [])

    def test_find_anchor_matches_anchor_then_title(self) -> None:
        doc = _sample()

        self.assertEqual(doc.find_anchor("Early_life"), 8)
        self.assertEqual(doc.find_anchor("#early life"), 8)
        self.assertEqual(doc.find_anchor("HISTORY"), 2)
        self.assertIsNone(doc.find_anchor("Nowhere"))
        self.assertIsNone(doc.find_anchor(""))


if __name__ == "__main__":
    unittest.main()
