"""Parsed page model consumed by the layout engine.

A ``Document`` is immutable once built. Every block carries a ``block_id``
equal to its position in a depth-first walk (section heading, then the
section's blocks, descending into list items and table cells), and
``Document.blocks`` is the arena those ids index into. Rendered lines refer
back to blocks by id only.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field, replace
from typing import Union


class StyleFlags(enum.Flag):
    """Abstract inline style attributes. Colors are chosen by the theme."""

    NONE = 0
    EMPHASIS = enum.auto()
    STRONG = enum.auto()
    MONOSPACE = enum.auto()


class LinkKind(enum.Enum):
    INTERNAL = "internal"
    ANCHOR = "anchor"
    EXTERNAL = "external"
    RED = "red"
    MEDIA = "media"


@dataclass(frozen=True)
class LinkTarget:
    """Opaque link destination: a page title, an in-page anchor or a URL."""

    target: str
    kind: LinkKind = LinkKind.INTERNAL
    anchor: str | None = None


@dataclass(frozen=True)
class InlineSpan:
    text: str
    style: StyleFlags = StyleFlags.NONE
    link: LinkTarget | None = None


@dataclass(frozen=True)
class Paragraph:
    block_id: int
    spans: tuple[InlineSpan, ...]


@dataclass(frozen=True)
class Heading:
    block_id: int
    level: int
    spans: tuple[InlineSpan, ...]
    anchor: str | None = None

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)


@dataclass(frozen=True)
class ListBlock:
    block_id: int
    ordered: bool
    items: tuple[tuple[Block, ...], ...]


@dataclass(frozen=True)
class Table:
    block_id: int
    rows: tuple[tuple[tuple[Block, ...], ...], ...]

    @property
    def column_count(self) -> int:
        return max((len(row) for row in self.rows), default=0)


Block = Union[Paragraph, ListBlock, Table, Heading]


@dataclass(frozen=True)
class Section:
    """One heading plus its body. An empty heading marks a lead section."""

    heading: Heading
    blocks: tuple[Block, ...]

    @property
    def level(self) -> int:
        return self.heading.level

    @property
    def title(self) -> tuple[InlineSpan, ...]:
        return self.heading.spans

    @property
    def anchor(self) -> str | None:
        return self.heading.anchor


@dataclass(frozen=True)
class TocEntry:
    number: str
    title: str
    level: int
    block_id: int
    anchor: str | None = None


def iter_blocks(block: Block) -> Iterator[Block]:
    """Yield ``block`` and every nested block in block-id order."""
    yield block
    if isinstance(block, ListBlock):
        for item in block.items:
            for child in item:
                yield from iter_blocks(child)
    elif isinstance(block, Table):
        for row in block.rows:
            for cell in row:
                for child in cell:
                    yield from iter_blocks(child)


@dataclass(frozen=True)
class Document:
    identifier: str
    title: str
    sections: tuple[Section, ...]
    blocks: tuple[Block, ...] = field(default=(), compare=False, repr=False)

    def __post_init__(self) -> None:
        arena: list[Block] = []
        for section in self.sections:
            arena.extend(iter_blocks(section.heading))
            for block in section.blocks:
                arena.extend(iter_blocks(block))
        for position, block in enumerate(arena):
            if block.block_id != position:
                raise ValueError(
                    f"block ids must follow document order: expected {position}, got {block.block_id}"
                )
        object.__setattr__(self, "blocks", tuple(arena))

    @property
    def is_empty(self) -> bool:
        return not self.sections

    def block(self, block_id: int) -> Block:
        if block_id < 0:
            raise IndexError(block_id)
        return self.blocks[block_id]

    def headings(self) -> Iterator[Heading]:
        for block in self.blocks:
            if isinstance(block, Heading) and block.text.strip():
                yield block

    def toc(self) -> list[TocEntry]:
        """Number every non-empty heading relative to the shallowest level."""
        headings = list(self.headings())
        if not headings:
            return []
        base_level = min(heading.level for heading in headings)
        counters: list[int] = []
        entries: list[TocEntry] = []
        for heading in headings:
            depth = max(0, heading.level - base_level)
            del counters[depth + 1 :]
            while len(counters) <= depth:
                counters.append(0)
            counters[depth] += 1
            entries.append(
                TocEntry(
                    number=".".join(str(count) for count in counters),
                    title=heading.text.strip(),
                    level=heading.level,
                    block_id=heading.block_id,
                    anchor=heading.anchor,
                )
            )
        return entries

    def find_anchor(self, anchor: str) -> int | None:
        """Return the heading block id for ``anchor``, matching ids before titles."""
        wanted = anchor.strip().lstrip("#")
        if not wanted:
            return None
        for heading in self.headings():
            if heading.anchor == wanted:
                return heading.block_id
        folded = wanted.replace("_", " ").casefold()
        for heading in self.headings():
            if heading.text.strip().casefold() == folded:
                return heading.block_id
        return None


# Construction helpers. Blocks built here carry a placeholder id of -1 until
# ``build_document`` renumbers the whole tree.

SpanLike = Union[str, InlineSpan]
BlockLike = Union[str, InlineSpan, Paragraph, ListBlock, Table, Heading]


def _spans(parts: Iterable[SpanLike]) -> tuple[InlineSpan, ...]:
    out: list[InlineSpan] = []
    for part in parts:
        out.append(InlineSpan(part) if isinstance(part, str) else part)
    return tuple(out)


def _blocks(content: BlockLike | Sequence[BlockLike]) -> tuple[Block, ...]:
    if isinstance(content, (str, InlineSpan)):
        return (paragraph(content),)
    if isinstance(content, (Paragraph, ListBlock, Table, Heading)):
        return (content,)
    out: list[Block] = []
    for item in content:
        out.extend(_blocks(item))
    return tuple(out)


def strong(text: str) -> InlineSpan:
    return InlineSpan(text, StyleFlags.STRONG)


def emphasis(text: str) -> InlineSpan:
    return InlineSpan(text, StyleFlags.EMPHASIS)


def monospace(text: str) -> InlineSpan:
    return InlineSpan(text, StyleFlags.MONOSPACE)


def link(
    text: str,
    target: str | None = None,
    kind: LinkKind = LinkKind.INTERNAL,
    *,
    anchor: str | None = None,
    style: StyleFlags = StyleFlags.NONE,
) -> InlineSpan:
    return InlineSpan(text, style, LinkTarget(target if target is not None else text, kind, anchor))


def paragraph(*parts: SpanLike) -> Paragraph:
    return Paragraph(-1, _spans(parts))


def heading(level: int, *parts: SpanLike, anchor: str | None = None) -> Heading:
    return Heading(-1, max(1, level), _spans(parts), anchor)


def bullet_list(*items: BlockLike | Sequence[BlockLike], ordered: bool = False) -> ListBlock:
    return ListBlock(-1, ordered, tuple(_blocks(item) for item in items))


def numbered_list(*items: BlockLike | Sequence[BlockLike]) -> ListBlock:
    return bullet_list(*items, ordered=True)


def table(*rows: Sequence[BlockLike | Sequence[BlockLike]]) -> Table:
    return Table(-1, tuple(tuple(_blocks(cell) for cell in row) for row in rows))


def section(
    title: str | Sequence[SpanLike],
    *blocks: BlockLike,
    level: int = 2,
    anchor: str | None = None,
) -> Section:
    parts = (title,) if isinstance(title, str) else tuple(title)
    if anchor is None and isinstance(title, str) and title.strip():
        anchor = title.strip().replace(" ", "_")
    return Section(heading(level, *parts, anchor=anchor), _blocks(blocks))


class _Numbering:
    def __init__(self) -> None:
        self.next_id = 0

    def take(self) -> int:
        block_id = self.next_id
        self.next_id += 1
        return block_id

    def block(self, block: Block) -> Block:
        block_id = self.take()
        if isinstance(block, ListBlock):
            items = tuple(tuple(self.block(child) for child in item) for item in block.items)
            return replace(block, block_id=block_id, items=items)
        if isinstance(block, Table):
            rows = tuple(
                tuple(tuple(self.block(child) for child in cell) for cell in row) for row in block.rows
            )
            return replace(block, block_id=block_id, rows=rows)
        return replace(block, block_id=block_id)


def build_document(identifier: str, sections: Iterable[Section], title: str | None = None) -> Document:
    """Assign position-derived block ids and freeze the document."""
    numbering = _Numbering()
    numbered: list[Section] = []
    for sec in sections:
        head = numbering.block(sec.heading)
        body = tuple(numbering.block(block) for block in sec.blocks)
        numbered.append(Section(head, body))
    return Document(identifier=identifier, title=title if title is not None else identifier, sections=tuple(numbered))
