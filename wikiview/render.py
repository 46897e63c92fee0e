"""Paint ``DrawFrame`` values into ANSI terminal rows.

The painter is the only place where abstract style flags become escape
sequences. It never mutates viewer state; ``compose_frame`` is pure and
``render_frame`` writes the composed rows to stdout in one call.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterable

from .document.model import Document, LinkKind, StyleFlags
from .layout.engine import layout
from .layout.types import Fragment, FragmentKind, RenderedLine
from .search import SearchMatch
from .text import char_display_width, clip_to_width, display_width
from .theme import PLAIN_THEME, UITheme
from .viewer.state import DrawFrame, Mode


def fragment_style(
    fragment: Fragment,
    theme: UITheme,
    *,
    selected_link_id: int | None = None,
    unavailable_link_ids: Iterable[int] = (),
) -> str:
    """Return the SGR prefix for one fragment."""
    if fragment.kind in (FragmentKind.MARKER, FragmentKind.PADDING):
        return theme.marker
    parts: list[str] = [theme.text]
    if fragment.kind is FragmentKind.HEADING:
        parts.append(theme.heading)
    if fragment.style & StyleFlags.STRONG:
        parts.append(theme.strong)
    if fragment.style & StyleFlags.EMPHASIS:
        parts.append(theme.emphasis)
    if fragment.style & StyleFlags.MONOSPACE:
        parts.append(theme.monospace)
    if fragment.link_id is not None:
        parts.append(theme.link_unavailable if fragment.link_id in unavailable_link_ids else theme.link)
        if fragment.link_id == selected_link_id:
            parts.append(theme.reverse)
    return "".join(parts)


def _hit_style(column: int, matches: Iterable[SearchMatch], current: SearchMatch | None, theme: UITheme) -> str | None:
    for match in matches:
        if match.column_start <= column < match.column_end:
            return theme.search_current if match == current else theme.search_hit
    return None


def paint_line(
    line: RenderedLine,
    theme: UITheme,
    *,
    max_cols: int | None = None,
    selected_link_id: int | None = None,
    matches: tuple[SearchMatch, ...] = (),
    current_match: SearchMatch | None = None,
    unavailable_link_ids: Iterable[int] = (),
) -> str:
    """Render one laid-out row as ANSI text of at most ``max_cols`` columns."""
    unavailable = frozenset(unavailable_link_ids)
    out: list[str] = []
    active = ""
    col = 0
    for fragment in line.fragments:
        if max_cols is not None and col >= max_cols:
            break
        base = fragment_style(
            fragment,
            theme,
            selected_link_id=selected_link_id,
            unavailable_link_ids=unavailable,
        )
        for ch in fragment.text:
            w = char_display_width(ch)
            if max_cols is not None and col + w > max_cols:
                col = max_cols
                break
            style = base
            if matches and not fragment.decorative:
                hit = _hit_style(col, matches, current_match, theme)
                if hit is not None:
                    style = hit
            if style != active:
                if active:
                    out.append(theme.reset)
                out.append(style)
                active = style
            out.append(ch)
            col += w
    if active:
        out.append(theme.reset)
    return "".join(out)


def build_status_line(left_text: str, width: int, right_text: str = "") -> str:
    """Left-align ``left_text`` and right-align ``right_text`` in ``width - 1`` columns."""
    usable = max(1, width - 1)
    if usable <= display_width(right_text):
        return clip_to_width(right_text, usable)
    left_limit = max(0, usable - display_width(right_text) - 1)
    left = clip_to_width(left_text, left_limit)
    gap = " " * (usable - display_width(left) - display_width(right_text))
    return f"{left}{gap}{right_text}"


def _title_row(frame: DrawFrame, theme: UITheme) -> str:
    arrows = ("<" if frame.can_go_back else " ") + (">" if frame.can_go_forward else " ")
    title = frame.title or "wikiview"
    if frame.loading:
        title += " (loading)"
    return theme.title_bar + build_status_line(f" {title}", frame.width, arrows) + theme.reset


def _status_row(frame: DrawFrame, theme: UITheme) -> str:
    if frame.mode is Mode.SEARCHING:
        count = f"{frame.match_count} matches" if frame.query else ""
        return build_status_line(f"/{frame.query}", frame.width, count)
    if frame.total_lines:
        last = min(frame.total_lines, frame.first_line + frame.height)
        position = f"{frame.first_line + 1}-{last}/{frame.total_lines} {frame.scroll_percent:5.1f}%"
    else:
        position = ""
    if frame.status:
        return theme.status_notice + build_status_line(frame.status, frame.width, position) + theme.reset
    return theme.status_bar + build_status_line("", frame.width, position) + theme.reset


def _contents_rows(frame: DrawFrame, theme: UITheme, panel_width: int) -> list[str]:
    inner = max(1, panel_width - 1)
    rows: list[str] = []
    header = clip_to_width(" Contents", inner)
    rows.append(theme.contents_border + "│" + theme.reset + theme.strong + header + theme.reset)
    selected = frame.contents_selected or 0
    # Keep the selected entry visible in the panel.
    visible = max(1, frame.height - 1)
    start = max(0, selected - visible + 1)
    for idx, entry in enumerate(frame.contents[start : start + visible], start=start):
        indent = "  " * max(0, entry.level - min(e.level for e in frame.contents))
        number = f"{entry.number} "
        title = clip_to_width(f" {indent}{number}{entry.title}", inner)
        style = theme.contents_selected if idx == selected else ""
        rows.append(theme.contents_border + "│" + theme.reset + style + title + (theme.reset if style else ""))
    return rows


def compose_frame(frame: DrawFrame, theme: UITheme) -> list[str]:
    """Return the terminal rows for ``frame``: title, page lines, status."""
    text_width = min(frame.text_width, frame.width)
    contents_rows: list[str] = []
    if text_width < frame.width:
        contents_rows = _contents_rows(frame, theme, frame.width - text_width)

    rows = [_title_row(frame, theme)]
    for row in range(frame.height):
        painted = ""
        plain_width = 0
        if row < len(frame.lines):
            line = frame.lines[row]
            painted = paint_line(
                line,
                theme,
                max_cols=text_width,
                selected_link_id=frame.selected_link_id,
                matches=frame.highlights.get(line.line_index, ()),
                current_match=frame.current_match,
                unavailable_link_ids=frame.unavailable_link_ids,
            )
            plain_width = display_width(clip_to_width(line.text, text_width))
        if contents_rows:
            painted += " " * max(0, text_width - plain_width)
            if row < len(contents_rows):
                painted += contents_rows[row]
            else:
                painted += theme.contents_border + "│" + theme.reset
        rows.append(painted)
    rows.append(_status_row(frame, theme))
    return rows


def render_frame(frame: DrawFrame, theme: UITheme) -> None:
    """Clear the screen and write one full frame."""
    out = ["\033[H\033[J", "\r\n".join(compose_frame(frame, theme))]
    os.write(sys.stdout.fileno(), "".join(out).encode("utf-8", errors="replace"))


def render_document_text(document: Document, width: int, theme: UITheme = PLAIN_THEME) -> str:
    """Lay out ``document`` at ``width`` and return it as printable text."""
    result = layout(document, width)
    unavailable = frozenset(slot.link_id for slot in result.links if slot.target.kind is LinkKind.RED)
    rows = [f"{theme.strong}{document.title}{theme.reset}", ""]
    rows.extend(paint_line(line, theme, unavailable_link_ids=unavailable) for line in result.lines)
    return "\n".join(rows) + "\n"


__all__ = [
    "build_status_line",
    "compose_frame",
    "fragment_style",
    "paint_line",
    "render_document_text",
    "render_frame",
]
