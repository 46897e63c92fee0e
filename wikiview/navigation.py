"""Navigation primitives: viewport snapshots and back/forward page history.

This module has no UI concerns. Entries name a page by identifier only;
documents themselves are re-requested from the fetcher when revisited.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import HistoryEmpty

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewportSnapshot:
    """Restorable viewport position for one page.

    At the same ``layout_width`` the raw line index is exact. At any other
    width the position is rebuilt from ``anchor_block_id`` plus
    ``anchor_offset`` rows into that block.
    """

    first_visible_line_index: int = 0
    anchor_block_id: int | None = None
    anchor_offset: int = 0
    selected_link_index: int | None = None
    layout_width: int | None = None

    def normalized(self) -> ViewportSnapshot:
        """Return a non-negative variant safe for history."""
        return ViewportSnapshot(
            first_visible_line_index=max(0, self.first_visible_line_index),
            anchor_block_id=self.anchor_block_id,
            anchor_offset=max(0, self.anchor_offset),
            selected_link_index=(
                self.selected_link_index
                if self.selected_link_index is None or self.selected_link_index >= 0
                else None
            ),
            layout_width=self.layout_width,
        )


@dataclass(frozen=True)
class HistoryEntry:
    document_identifier: str
    snapshot: ViewportSnapshot = ViewportSnapshot()


class NavigationHistory:
    """Back/forward stacks of visited pages.

    ``max_entries=None`` keeps every entry; a capacity drops the oldest entry
    of the overflowing stack and nothing else.
    """

    def __init__(self, max_entries: int | None = None) -> None:
        self.max_entries = None if max_entries is None else max(1, max_entries)
        self.back: list[HistoryEntry] = []
        self.forward: list[HistoryEntry] = []

    def _append(self, stack: list[HistoryEntry], entry: HistoryEntry) -> None:
        stack.append(HistoryEntry(entry.document_identifier, entry.snapshot.normalized()))
        if self.max_entries is None:
            return
        overflow = len(stack) - self.max_entries
        if overflow > 0:
            logger.debug("history capacity reached, dropping %d oldest entries", overflow)
            del stack[:overflow]

    @property
    def can_go_back(self) -> bool:
        return bool(self.back)

    @property
    def can_go_forward(self) -> bool:
        return bool(self.forward)

    def peek_back(self) -> HistoryEntry | None:
        return self.back[-1] if self.back else None

    def peek_forward(self) -> HistoryEntry | None:
        return self.forward[-1] if self.forward else None

    def push(self, entry: HistoryEntry) -> None:
        """Record a new navigation origin and clear forward history."""
        self._append(self.back, entry)
        self.forward.clear()

    def pop_back(self, current: HistoryEntry) -> HistoryEntry:
        """Pop the next back target and push ``current`` onto forward."""
        if not self.back:
            raise HistoryEmpty("no earlier page")
        target = self.back.pop()
        self._append(self.forward, current)
        return target

    def pop_forward(self, current: HistoryEntry) -> HistoryEntry:
        """Pop the next forward target and push ``current`` onto back."""
        if not self.forward:
            raise HistoryEmpty("no later page")
        target = self.forward.pop()
        self._append(self.back, current)
        return target

    def restore_back(self, target: HistoryEntry) -> None:
        """Undo a ``pop_back`` whose page could not be loaded."""
        if self.forward:
            self.forward.pop()
        self.back.append(target)

    def restore_forward(self, target: HistoryEntry) -> None:
        """Undo a ``pop_forward`` whose page could not be loaded."""
        if self.back:
            self.back.pop()
        self.forward.append(target)

    def clear(self) -> None:
        self.back.clear()
        self.forward.clear()


__all__ = ["HistoryEntry", "NavigationHistory", "ViewportSnapshot"]
