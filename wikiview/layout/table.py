"""Table column allocation and row composition."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from ..document.model import Block, Table
from ..text import clip_to_width, display_width
from .types import Fragment, FragmentKind
from .wrap import WrappedRow, append_fragment

CellLayout = Callable[[Sequence[Block], int], list[WrappedRow]]
CellMeasure = Callable[[Sequence[Block]], int]


def column_content_widths(table: Table, measure: CellMeasure) -> list[int]:
    """Widest single-line content per column; ragged rows count as empty cells."""
    widths = [0] * table.column_count
    for row in table.rows:
        for col, cell in enumerate(row):
            widths[col] = max(widths[col], measure(cell))
    return widths


def column_widths(table: Table, width: int, measure: CellMeasure) -> list[int]:
    """Allocate columns as ``min(content, width // columns)``, never below one.

    Once any column's content exceeds the even split the table is constrained
    and every column receives the even split.
    """
    count = table.column_count
    if count == 0:
        return []
    even = max(1, width // count)
    content = column_content_widths(table, measure)
    if any(value > even for value in content):
        return [even] * count
    return [max(1, min(value, even)) for value in content]


def _pad(fragments: list[Fragment], columns: int) -> None:
    if columns > 0:
        append_fragment(fragments, Fragment(" " * columns, kind=FragmentKind.PADDING))


def _clip_row(fragments: list[Fragment], width: int) -> list[Fragment]:
    out: list[Fragment] = []
    room = width
    for fragment in fragments:
        if room <= 0:
            break
        text = clip_to_width(fragment.text, room)
        if text:
            out.append(Fragment(text, fragment.style, fragment.link_id, fragment.kind))
            room -= display_width(text)
    return out


def layout_table(
    table: Table,
    width: int,
    layout_cell: CellLayout,
    measure: CellMeasure,
) -> list[WrappedRow]:
    """Lay out every row; cells wrap independently and short cells are padded."""
    widths = column_widths(table, width, measure)
    if not widths:
        return []
    count = len(widths)
    gap = 1 if sum(widths) + count - 1 <= width else 0

    out: list[WrappedRow] = []
    for row in table.rows:
        cells = list(row) + [()] * (count - len(row))
        cell_rows = [layout_cell(cell, widths[col]) for col, cell in enumerate(cells)]
        height = max(1, max(len(rows) for rows in cell_rows))
        for line_no in range(height):
            composed = WrappedRow(block_id=table.block_id)
            for col, rows in enumerate(cell_rows):
                if col > 0:
                    _pad(composed.fragments, gap)
                if line_no < len(rows):
                    piece = rows[line_no]
                    for fragment in piece.fragments:
                        append_fragment(composed.fragments, fragment)
                    composed.starts.extend(piece.starts)
                    _pad(composed.fragments, widths[col] - piece.width)
                else:
                    _pad(composed.fragments, widths[col])
            if sum(fragment.width for fragment in composed.fragments) > width:
                composed.fragments = _clip_row(composed.fragments, width)
            out.append(composed)
    if out:
        out[0].starts.insert(0, table.block_id)
    return out


__all__ = ["column_content_widths", "column_widths", "layout_table"]
