"""Local page store: decodes pre-parsed JSON pages into ``Document`` objects.

This is the fetch collaborator used by the CLI. A page named ``Foo bar`` lives
in ``<root>/Foo_bar.json``. Anything that goes wrong is reported as a
``FetchError`` so the viewer can keep showing the previous page.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from ..errors import FetchError, FetchErrorKind
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
    build_document,
)

logger = logging.getLogger(__name__)

_STYLE_NAMES = {
    "emphasis": StyleFlags.EMPHASIS,
    "italic": StyleFlags.EMPHASIS,
    "strong": StyleFlags.STRONG,
    "bold": StyleFlags.STRONG,
    "monospace": StyleFlags.MONOSPACE,
    "code": StyleFlags.MONOSPACE,
}


class PageFetcher(Protocol):
    def fetch(self, identifier: str) -> Document: ...


class _Malformed(Exception):
    pass


def page_slug(identifier: str) -> str:
    """Return the file stem used to store ``identifier``."""
    return identifier.strip().replace(" ", "_").replace("/", "_")


def _expect(condition: bool, message: str) -> None:
    if not condition:
        raise _Malformed(message)


def _decode_link(raw: Any) -> LinkTarget:
    if isinstance(raw, str):
        target, _, anchor = raw.partition("#")
        if not target:
            return LinkTarget(anchor, LinkKind.ANCHOR)
        return LinkTarget(target, LinkKind.INTERNAL, anchor or None)
    _expect(isinstance(raw, dict), "link must be a string or an object")
    try:
        kind = LinkKind(str(raw.get("kind", "internal")).lower())
    except ValueError as exc:
        raise _Malformed(f"unknown link kind {raw.get('kind')!r}") from exc
    target = raw.get("target")
    _expect(isinstance(target, str) and bool(target), "link target must be a non-empty string")
    anchor = raw.get("anchor")
    return LinkTarget(target, kind, anchor if isinstance(anchor, str) and anchor else None)


def _decode_span(raw: Any) -> InlineSpan:
    if isinstance(raw, str):
        return InlineSpan(raw)
    _expect(isinstance(raw, dict), "span must be a string or an object")
    text = raw.get("text")
    _expect(isinstance(text, str), "span text must be a string")
    style = StyleFlags.NONE
    raw_style = raw.get("style", [])
    if isinstance(raw_style, str):
        raw_style = [raw_style]
    _expect(isinstance(raw_style, list), "span style must be a list")
    for name in raw_style:
        flag = _STYLE_NAMES.get(str(name).lower())
        _expect(flag is not None, f"unknown span style {name!r}")
        style |= flag
    link = _decode_link(raw["link"]) if raw.get("link") is not None else None
    return InlineSpan(text, style, link)


def _decode_spans(raw: Any) -> tuple[InlineSpan, ...]:
    if isinstance(raw, (str, dict)):
        return (_decode_span(raw),)
    _expect(isinstance(raw, list), "spans must be a list")
    return tuple(_decode_span(item) for item in raw)


def _decode_blocks(raw: Any) -> tuple[Block, ...]:
    if isinstance(raw, (str, dict)):
        raw = [raw]
    _expect(isinstance(raw, list), "blocks must be a list")
    return tuple(_decode_block(item) for item in raw)


def _decode_block(raw: Any) -> Block:
    if isinstance(raw, str):
        return Paragraph(-1, (InlineSpan(raw),))
    _expect(isinstance(raw, dict), "block must be an object")
    kind = raw.get("type", "paragraph")
    if kind == "paragraph":
        return Paragraph(-1, _decode_spans(raw.get("spans", raw.get("text", []))))
    if kind == "heading":
        level = raw.get("level", 3)
        _expect(isinstance(level, int) and not isinstance(level, bool), "heading level must be an int")
        anchor = raw.get("anchor")
        return Heading(-1, max(1, level), _decode_spans(raw.get("spans", raw.get("text", []))), anchor)
    if kind == "list":
        items = raw.get("items", [])
        _expect(isinstance(items, list), "list items must be a list")
        return ListBlock(-1, bool(raw.get("ordered", False)), tuple(_decode_blocks(item) for item in items))
    if kind == "table":
        rows = raw.get("rows", [])
        _expect(isinstance(rows, list), "table rows must be a list")
        decoded_rows = []
        for row in rows:
            _expect(isinstance(row, list), "table row must be a list")
            decoded_rows.append(tuple(_decode_blocks(cell) for cell in row))
        return Table(-1, tuple(decoded_rows))
    raise _Malformed(f"unknown block type {kind!r}")


def _decode_section(raw: Any) -> Section:
    _expect(isinstance(raw, dict), "section must be an object")
    title = raw.get("title", "")
    level = raw.get("level", 2)
    _expect(isinstance(level, int) and not isinstance(level, bool), "section level must be an int")
    anchor = raw.get("anchor")
    if anchor is None and isinstance(title, str) and title.strip():
        anchor = title.strip().replace(" ", "_")
    heading = Heading(-1, max(1, level), _decode_spans(title) if title else (), anchor)
    return Section(heading, _decode_blocks(raw.get("blocks", [])))


def document_from_json(payload: Any, identifier: str) -> Document:
    """Build a ``Document`` from decoded JSON, raising ``FetchError`` when malformed."""
    try:
        _expect(isinstance(payload, dict), "page must be a JSON object")
        sections = payload.get("sections", [])
        _expect(isinstance(sections, list), "sections must be a list")
        title = payload.get("title", identifier)
        _expect(isinstance(title, str), "title must be a string")
        return build_document(identifier, [_decode_section(item) for item in sections], title=title)
    except _Malformed as exc:
        raise FetchError(FetchErrorKind.PARSE_ERROR, identifier, str(exc)) from exc


class LocalPageStore:
    """Fetch collaborator backed by a directory of JSON page files."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def path_for(self, identifier: str) -> Path:
        return self.root / f"{page_slug(identifier)}.json"

    def fetch(self, identifier: str) -> Document:
        path = self.path_for(identifier)
        if not path.is_file():
            raise FetchError(FetchErrorKind.NOT_FOUND, identifier)
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise FetchError(FetchErrorKind.PARSE_ERROR, identifier, str(exc)) from exc
        except OSError as exc:
            raise FetchError(FetchErrorKind.NETWORK_ERROR, identifier, str(exc)) from exc
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise FetchError(FetchErrorKind.PARSE_ERROR, identifier, str(exc)) from exc
        document = document_from_json(payload, identifier)
        logger.debug("loaded %s from %s (%d blocks)", identifier, path, len(document.blocks))
        return document


__all__ = ["LocalPageStore", "PageFetcher", "document_from_json", "page_slug"]
