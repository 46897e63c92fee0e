"""Layout engine exports."""

from __future__ import annotations

from .engine import BULLET, LayoutCache, heading_marker, layout, list_markers, measure_block, measure_blocks
from .table import column_widths
from .types import Fragment, FragmentKind, LayoutResult, LinkSlot, RenderedLine

__all__ = [
    "BULLET",
    "Fragment",
    "FragmentKind",
    "LayoutCache",
    "LayoutResult",
    "LinkSlot",
    "RenderedLine",
    "column_widths",
    "heading_marker",
    "layout",
    "list_markers",
    "measure_block",
    "measure_blocks",
]
