"""Value types produced by the layout engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from ..document.model import LinkTarget, StyleFlags
from ..text import display_width


class FragmentKind(enum.Enum):
    TEXT = "text"
    HEADING = "heading"
    MARKER = "marker"
    PADDING = "padding"


@dataclass(frozen=True)
class Fragment:
    text: str
    style: StyleFlags = StyleFlags.NONE
    link_id: int | None = None
    kind: FragmentKind = FragmentKind.TEXT

    @property
    def decorative(self) -> bool:
        """Markers, indents and table padding are not page text."""
        return self.kind in (FragmentKind.MARKER, FragmentKind.PADDING)

    @property
    def width(self) -> int:
        return display_width(self.text)


@dataclass(frozen=True)
class RenderedLine:
    """One terminal row. ``block_id`` is ``None`` for separator lines."""

    line_index: int
    fragments: tuple[Fragment, ...]
    block_id: int | None
    span_start: int = 0
    span_end: int = 0

    @property
    def text(self) -> str:
        return "".join(fragment.text for fragment in self.fragments)

    @property
    def width(self) -> int:
        return sum(fragment.width for fragment in self.fragments)

    @property
    def is_blank(self) -> bool:
        return not self.fragments


@dataclass(frozen=True)
class LinkSlot:
    """One link span of the source document, located in the layout."""

    link_id: int
    target: LinkTarget
    text: str
    block_id: int
    first_line: int
    last_line: int


@dataclass(frozen=True)
class LayoutResult:
    width: int
    lines: tuple[RenderedLine, ...] = ()
    toc_targets: dict[int, int] = field(default_factory=dict)
    links: tuple[LinkSlot, ...] = ()
    block_first_line: dict[int, int] = field(default_factory=dict)

    def block_at_or_after(self, line_index: int) -> int | None:
        """Return the block id of ``line_index``, skipping forward past separators."""
        for line in self.lines[max(0, line_index) :]:
            if line.block_id is not None:
                return line.block_id
        for line in reversed(self.lines[: max(0, line_index)]):
            if line.block_id is not None:
                return line.block_id
        return None

    def block_line_range(self, block_id: int) -> tuple[int, int] | None:
        """Return first and last line of the contiguous rows built from ``block_id``."""
        first = self.block_first_line.get(block_id)
        if first is None:
            return None
        last = first
        while last + 1 < len(self.lines) and self.lines[last + 1].block_id == block_id:
            last += 1
        return first, last
