"""Layout engine: turns a ``Document`` into terminal rows at a given width.

``layout`` is a pure function of its inputs. The walk is depth first over
sections, blocks and spans; every top-level block (including each section
heading) is separated from the next by exactly one blank line, and nothing
else is. Nested blocks inside list items and table cells stack without
separators.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ..document.model import (
    Block,
    Document,
    Heading,
    InlineSpan,
    ListBlock,
    Paragraph,
    StyleFlags,
    Table,
)
from ..errors import InvalidLayoutWidth
from ..text import clip_to_width, display_width
from .table import column_content_widths, layout_table
from .types import Fragment, FragmentKind, LayoutResult, LinkSlot, RenderedLine
from .wrap import WrappedRow, natural_width, tokenize, wrap_spans

logger = logging.getLogger(__name__)

BULLET = "• "
MAX_HEADING_MARKER = 6


def heading_marker(level: int) -> str:
    return "#" * max(1, min(level, MAX_HEADING_MARKER)) + " "


def list_markers(ordered: bool, count: int) -> list[str]:
    """Item markers for one list; ordinals are right-aligned to the widest one."""
    if not ordered:
        return [BULLET] * count
    widest = len(f"{count}.")
    return [f"{index}.".rjust(widest) + " " for index in range(1, count + 1)]


def _prepend(row: WrappedRow, fragment: Fragment) -> None:
    if not fragment.text:
        return
    if row.fragments:
        first = row.fragments[0]
        if (first.style, first.link_id, first.kind) == (fragment.style, fragment.link_id, fragment.kind):
            row.fragments[0] = Fragment(fragment.text + first.text, first.style, first.link_id, first.kind)
            return
    row.fragments.insert(0, fragment)


class _Layouter:
    """Walk state for one layout pass: only the link registry."""

    def __init__(self) -> None:
        self.link_spans: list[tuple[InlineSpan, int]] = []

    def _link_id_for(self, block_id: int) -> Callable[[int, InlineSpan], int | None]:
        def register(_span_index: int, span: InlineSpan) -> int | None:
            self.link_spans.append((span, block_id))
            return len(self.link_spans) - 1

        return register

    def indented(
        self,
        width: int,
        marker: str,
        build: Callable[[int], list[WrappedRow]],
        *,
        owner_id: int,
        keep_empty: bool = False,
    ) -> list[WrappedRow]:
        """Lay out ``build`` with a hanging indent equal to the marker width."""
        marker = clip_to_width(marker, max(0, width - 1))
        indent = display_width(marker)
        rows = build(width - indent)
        if not rows and keep_empty and marker:
            rows = [WrappedRow(block_id=owner_id)]
        for position, row in enumerate(rows):
            if position == 0:
                _prepend(row, Fragment(marker, kind=FragmentKind.MARKER))
            else:
                _prepend(row, Fragment(" " * indent, kind=FragmentKind.PADDING))
        return rows

    def paragraph(self, block: Paragraph, width: int) -> list[WrappedRow]:
        rows = wrap_spans(
            block.spans,
            width,
            block_id=block.block_id,
            link_id_for=self._link_id_for(block.block_id),
        )
        if rows:
            rows[0].starts.append(block.block_id)
        return rows

    def heading(self, block: Heading, width: int) -> list[WrappedRow]:
        def build(inner: int) -> list[WrappedRow]:
            return wrap_spans(
                block.spans,
                inner,
                kind=FragmentKind.HEADING,
                block_id=block.block_id,
                extra_style=StyleFlags.STRONG,
                link_id_for=self._link_id_for(block.block_id),
            )

        rows = self.indented(width, heading_marker(block.level), build, owner_id=block.block_id)
        if rows:
            rows[0].starts.append(block.block_id)
        return rows

    def list_block(self, block: ListBlock, width: int) -> list[WrappedRow]:
        rows: list[WrappedRow] = []
        markers = list_markers(block.ordered, len(block.items))
        for marker, item in zip(markers, block.items):
            rows.extend(
                self.indented(
                    width,
                    marker,
                    lambda inner, item=item: self.stack(item, inner),
                    owner_id=block.block_id,
                    keep_empty=True,
                )
            )
        if rows:
            rows[0].starts.insert(0, block.block_id)
        return rows

    def block(self, block: Block, width: int) -> list[WrappedRow]:
        if isinstance(block, Paragraph):
            return self.paragraph(block, width)
        if isinstance(block, Heading):
            return self.heading(block, width)
        if isinstance(block, ListBlock):
            return self.list_block(block, width)
        if isinstance(block, Table):
            return layout_table(block, width, self.stack, measure_blocks)
        raise TypeError(f"unsupported block type: {type(block).__name__}")

    def stack(self, blocks: Sequence[Block], width: int) -> list[WrappedRow]:
        rows: list[WrappedRow] = []
        for block in blocks:
            rows.extend(self.block(block, width))
        return rows


def measure_block(block: Block) -> int:
    """Width of ``block`` laid out without any wrapping."""
    if isinstance(block, Paragraph):
        return natural_width(tokenize(block.spans))
    if isinstance(block, Heading):
        text_width = natural_width(tokenize(block.spans))
        return display_width(heading_marker(block.level)) + text_width if text_width else 0
    if isinstance(block, ListBlock):
        markers = list_markers(block.ordered, len(block.items))
        return max(
            (display_width(marker) + measure_blocks(item) for marker, item in zip(markers, block.items)),
            default=0,
        )
    if isinstance(block, Table):
        widths = column_content_widths(block, measure_blocks)
        return sum(widths) + max(0, len(widths) - 1)
    raise TypeError(f"unsupported block type: {type(block).__name__}")


def measure_blocks(blocks: Sequence[Block]) -> int:
    return max((measure_block(block) for block in blocks), default=0)


def layout(document: Document, width: int) -> LayoutResult:
    """Lay out ``document`` into rows of at most ``width`` display columns."""
    if width < 1:
        raise InvalidLayoutWidth(width)

    layouter = _Layouter()
    groups: list[list[WrappedRow]] = []
    for sec in document.sections:
        groups.append(layouter.block(sec.heading, width))
        for block in sec.blocks:
            groups.append(layouter.block(block, width))

    lines: list[RenderedLine] = []
    block_first_line: dict[int, int] = {}
    for rows in groups:
        if not rows:
            continue
        if lines:
            lines.append(RenderedLine(len(lines), (), None))
        for row in rows:
            line_index = len(lines)
            for block_id in row.starts:
                block_first_line.setdefault(block_id, line_index)
            lines.append(
                RenderedLine(line_index, tuple(row.fragments), row.block_id, row.span_start, row.span_end)
            )

    toc_targets = {
        block_id: line_index
        for block_id, line_index in block_first_line.items()
        if isinstance(document.block(block_id), Heading)
    }

    # link_id -> [first_line, last_line, first_column]
    positions: dict[int, list[int]] = {}
    for line in lines:
        col = 0
        for fragment in line.fragments:
            if fragment.link_id is not None:
                span = positions.setdefault(fragment.link_id, [line.line_index, line.line_index, col])
                span[1] = line.line_index
            col += fragment.width
    slots = [
        LinkSlot(
            link_id=link_id,
            target=span.link,
            text=" ".join(span.text.split()),
            block_id=block_id,
            first_line=positions[link_id][0],
            last_line=positions[link_id][1],
        )
        for link_id, (span, block_id) in enumerate(layouter.link_spans)
        if link_id in positions and span.link is not None
    ]
    # Table cells register links column by column; selection follows reading order.
    slots.sort(key=lambda slot: (slot.first_line, positions[slot.link_id][2], slot.link_id))
    links = tuple(slots)

    logger.debug(
        "laid out %r at width %d: %d lines, %d links",
        document.identifier,
        width,
        len(lines),
        len(links),
    )
    return LayoutResult(
        width=width,
        lines=tuple(lines),
        toc_targets=toc_targets,
        links=links,
        block_first_line=block_first_line,
    )


class LayoutCache:
    """Per-width layouts of the current document; replaced documents flush it."""

    def __init__(self, max_widths: int = 8) -> None:
        self.max_widths = max(1, max_widths)
        self._document: Document | None = None
        self._by_width: dict[int, LayoutResult] = {}

    def get(self, document: Document, width: int) -> LayoutResult:
        if document is not self._document:
            if self._by_width:
                logger.debug("flushing %d cached layouts", len(self._by_width))
            self._document = document
            self._by_width = {}
        cached = self._by_width.get(width)
        if cached is not None:
            return cached
        result = layout(document, width)
        self._by_width[width] = result
        while len(self._by_width) > self.max_widths:
            del self._by_width[next(iter(self._by_width))]
        return result

    def clear(self) -> None:
        self._document = None
        self._by_width = {}


__all__ = [
    "BULLET",
    "LayoutCache",
    "heading_marker",
    "layout",
    "list_markers",
    "measure_block",
    "measure_blocks",
]
