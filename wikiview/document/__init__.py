"""Document model and the local page store."""

from __future__ import annotations

from .model import (
    Block,
    Document,
    Heading,
    InlineSpan,
    LinkKind,
    LinkTarget,
    ListBlock,
    Paragraph,
    Section,
    StyleFlags,
    Table,
    TocEntry,
    build_document,
    bullet_list,
    emphasis,
    heading,
    iter_blocks,
    link,
    monospace,
    numbered_list,
    paragraph,
    section,
    strong,
    table,
)
from .store import LocalPageStore, PageFetcher, document_from_json, page_slug

__all__ = [
    "Block",
    "Document",
    "Heading",
    "InlineSpan",
    "LinkKind",
    "LinkTarget",
    "ListBlock",
    "LocalPageStore",
    "PageFetcher",
    "Paragraph",
    "Section",
    "StyleFlags",
    "Table",
    "TocEntry",
    "build_document",
    "bullet_list",
    "document_from_json",
    "emphasis",
    "heading",
    "iter_blocks",
    "link",
    "monospace",
    "numbered_list",
    "page_slug",
    "paragraph",
    "section",
    "strong",
    "table",
]
