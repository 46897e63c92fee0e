"""Viewer state and the values exchanged with the surrounding application."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from ..document.model import Document, TocEntry
from ..layout.types import LayoutResult, RenderedLine
from ..navigation import HistoryEntry, NavigationHistory, ViewportSnapshot
from ..search import SearchMatch, SearchState

CONTENTS_MIN_WIDTH = 16
CONTENTS_MAX_WIDTH = 40
CONTENTS_MIN_TEXT_WIDTH = 20


def contents_panel_width(width: int) -> int:
    """Return the contents panel width for a screen ``width``; 0 when it does not fit."""
    panel = max(CONTENTS_MIN_WIDTH, min(CONTENTS_MAX_WIDTH, width // 3))
    return panel if width - panel >= CONTENTS_MIN_TEXT_WIDTH else 0


class Mode(enum.Enum):
    BROWSING = "browsing"
    SEARCHING = "searching"


class RequestKind(enum.Enum):
    LINK = "link"
    BACK = "back"
    FORWARD = "forward"


@dataclass(frozen=True)
class NavigationRequest:
    """Ask the application to fetch ``target`` and hand it to ``load_document``."""

    request_id: int
    target: str
    kind: RequestKind = RequestKind.LINK
    anchor: str | None = None

    @property
    def from_history(self) -> bool:
        return self.kind in (RequestKind.BACK, RequestKind.FORWARD)


@dataclass
class Viewport:
    first_visible_line_index: int = 0
    height: int = 24
    selected_link_index: int | None = None

    @property
    def last_visible_line_index(self) -> int:
        return self.first_visible_line_index + self.height - 1

    def contains(self, line_index: int) -> bool:
        return self.first_visible_line_index <= line_index <= self.last_visible_line_index

    def clamp(self, total_lines: int) -> None:
        max_first = max(0, total_lines - self.height)
        self.first_visible_line_index = max(0, min(self.first_visible_line_index, max_first))


@dataclass
class PendingHistoryMove:
    """A history pop waiting for its page; undone if the fetch fails."""

    kind: RequestKind
    entry: HistoryEntry


@dataclass
class ViewerState:
    """Everything the controller mutates. No other owner exists."""

    width: int = 80
    viewport: Viewport = field(default_factory=Viewport)
    document: Document | None = None
    layout: LayoutResult = field(default_factory=lambda: LayoutResult(width=80))
    search: SearchState = field(default_factory=SearchState)
    mode: Mode = Mode.BROWSING
    search_origin: int = 0
    history: NavigationHistory = field(default_factory=NavigationHistory)
    pending: NavigationRequest | None = None
    pending_history: PendingHistoryMove | None = None
    outbox: NavigationRequest | None = None
    next_request_id: int = 1
    status: str = ""
    contents_visible: bool = False
    contents_selected: int = 0

    @property
    def total_lines(self) -> int:
        return len(self.layout.lines)

    @property
    def text_width(self) -> int:
        """Width the page is laid out at: the screen minus an open contents panel."""
        if not self.contents_visible:
            return self.width
        return self.width - contents_panel_width(self.width)

    @property
    def identifier(self) -> str | None:
        return self.document.identifier if self.document is not None else None


@dataclass(frozen=True)
class ActionResult:
    handled: bool = True
    status: str = ""
    request: NavigationRequest | None = None
    quit: bool = False


@dataclass(frozen=True)
class DrawFrame:
    """What the painter needs after each operation."""

    title: str
    lines: tuple[RenderedLine, ...]
    first_line: int
    height: int
    width: int
    text_width: int
    total_lines: int
    selected_link_id: int | None = None
    highlights: dict[int, tuple[SearchMatch, ...]] = field(default_factory=dict)
    current_match: SearchMatch | None = None
    mode: Mode = Mode.BROWSING
    query: str = ""
    match_count: int = 0
    status: str = ""
    loading: bool = False
    can_go_back: bool = False
    can_go_forward: bool = False
    contents: tuple[TocEntry, ...] = ()
    contents_selected: int | None = None
    unavailable_link_ids: frozenset[int] = frozenset()

    @property
    def scroll_percent(self) -> float:
        max_first = max(0, self.total_lines - max(1, self.height))
        if max_first <= 0:
            return 0.0
        return (min(self.first_line, max_first) / max_first) * 100.0


__all__ = [
    "CONTENTS_MAX_WIDTH",
    "CONTENTS_MIN_TEXT_WIDTH",
    "CONTENTS_MIN_WIDTH",
    "ActionResult",
    "DrawFrame",
    "Mode",
    "NavigationRequest",
    "PendingHistoryMove",
    "RequestKind",
    "Viewport",
    "ViewerState",
    "ViewportSnapshot",
    "contents_panel_width",
]
