"""Viewport controller: the single writer of viewer state.

The controller owns the current document, its layout, the viewport, search
and history. Link activation and back/forward never block: they issue a
``NavigationRequest`` and keep showing the current page until the application
calls ``load_document`` (or ``report_fetch_failure``) with the matching
request id. Anything answering an older request is discarded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..document.model import Document, LinkKind, TocEntry
from ..errors import (
    FetchError,
    HistoryEmpty,
    NavigationNotice,
    NoLinkSelected,
    NoMoreLinks,
    UnknownTocTarget,
)
from ..layout.engine import LayoutCache
from ..layout.types import LayoutResult, LinkSlot
from ..navigation import HistoryEntry, NavigationHistory, ViewportSnapshot
from ..search import SearchMatch
from .commands import Command, CommandName
from .state import (
    ActionResult,
    DrawFrame,
    Mode,
    NavigationRequest,
    PendingHistoryMove,
    RequestKind,
    ViewerState,
    Viewport,
)

logger = logging.getLogger(__name__)


class ViewportController:
    """Apply commands and page loads to one ``ViewerState``."""

    def __init__(
        self,
        width: int = 80,
        height: int = 24,
        *,
        state: ViewerState | None = None,
        history: NavigationHistory | None = None,
        layout_cache: LayoutCache | None = None,
    ) -> None:
        if state is None:
            state = ViewerState(
                width=max(1, width),
                viewport=Viewport(height=max(1, height)),
                layout=LayoutResult(width=max(1, width)),
            )
        if history is not None:
            state.history = history
        self.state = state
        self._cache = layout_cache if layout_cache is not None else LayoutCache()
        self._handlers: dict[CommandName, Callable[[Command], NavigationRequest | None]] = {
            CommandName.SCROLL_UP: lambda _cmd: self._scroll_or_contents(-1),
            CommandName.SCROLL_DOWN: lambda _cmd: self._scroll_or_contents(1),
            CommandName.PAGE_UP: lambda _cmd: self._none(self.scroll(-self.viewport.height)),
            CommandName.PAGE_DOWN: lambda _cmd: self._none(self.scroll(self.viewport.height)),
            CommandName.HALF_PAGE_UP: lambda _cmd: self._none(self.scroll(-self._half_page())),
            CommandName.HALF_PAGE_DOWN: lambda _cmd: self._none(self.scroll(self._half_page())),
            CommandName.SCROLL_TOP: lambda _cmd: self._none(self.scroll_to(0)),
            CommandName.SCROLL_BOTTOM: lambda _cmd: self._none(self.scroll_to(self.state.total_lines)),
            CommandName.NEXT_LINK: lambda _cmd: self._none(self.select_next_link()),
            CommandName.PREVIOUS_LINK: lambda _cmd: self._none(self.select_previous_link()),
            CommandName.FIRST_LINK: lambda _cmd: self._none(self.select_first_link()),
            CommandName.LAST_LINK: lambda _cmd: self._none(self.select_last_link()),
            CommandName.ACTIVATE_LINK: lambda _cmd: self._activate_or_contents(),
            CommandName.START_SEARCH: lambda _cmd: self._none(self.start_search()),
            CommandName.SEARCH_INPUT: lambda cmd: self._none(self.search_input(cmd.text)),
            CommandName.SEARCH_BACKSPACE: lambda _cmd: self._none(self.search_backspace()),
            CommandName.CONFIRM_SEARCH: lambda _cmd: self._none(self.confirm_search()),
            CommandName.SEARCH_NEXT: lambda _cmd: self._none(self.search_next()),
            CommandName.SEARCH_PREVIOUS: lambda _cmd: self._none(self.search_previous()),
            CommandName.CANCEL_SEARCH: lambda _cmd: self._none(self.cancel_search()),
            CommandName.TOGGLE_CONTENTS: lambda _cmd: self._none(self.toggle_contents()),
            CommandName.JUMP_TO_TOC: lambda cmd: self._none(self.jump_to_toc_entry(cmd.block_id)),
            CommandName.GO_BACK: lambda _cmd: self.go_back(),
            CommandName.GO_FORWARD: lambda _cmd: self.go_forward(),
            CommandName.RESIZE: lambda cmd: self._none(self.resize(cmd.width, cmd.height)),
        }

    @staticmethod
    def _none(_value: object) -> None:
        return None

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def viewport(self) -> Viewport:
        return self.state.viewport

    @property
    def layout(self) -> LayoutResult:
        return self.state.layout

    @property
    def document(self) -> Document | None:
        return self.state.document

    @property
    def selected_link(self) -> LinkSlot | None:
        index = self.viewport.selected_link_index
        if index is None or not (0 <= index < len(self.layout.links)):
            return None
        return self.layout.links[index]

    def snapshot(self) -> ViewportSnapshot:
        """Capture the viewport so it can be restored later, even after a rewrap."""
        first = self.viewport.first_visible_line_index
        anchor = self.layout.block_at_or_after(first)
        offset = 0
        if anchor is not None:
            offset = max(0, first - self.layout.block_first_line.get(anchor, first))
        return ViewportSnapshot(
            first_visible_line_index=first,
            anchor_block_id=anchor,
            anchor_offset=offset,
            selected_link_index=self.viewport.selected_link_index,
            layout_width=self.layout.width,
        )

    def _current_entry(self) -> HistoryEntry | None:
        if self.state.document is None:
            return None
        return HistoryEntry(self.state.document.identifier, self.snapshot())

    # ------------------------------------------------------------------
    # Scrolling
    # ------------------------------------------------------------------

    def _half_page(self) -> int:
        return max(1, self.viewport.height // 2)

    def _set_first(self, line_index: int) -> None:
        self.viewport.first_visible_line_index = line_index
        self.viewport.clamp(self.state.total_lines)

    def scroll(self, delta_lines: int) -> bool:
        """Move the viewport by ``delta_lines`` and return whether it moved."""
        before = self.viewport.first_visible_line_index
        self._set_first(before + delta_lines)
        self._keep_selection_in_view()
        return self.viewport.first_visible_line_index != before

    def scroll_to(self, line_index: int) -> bool:
        return self.scroll(line_index - self.viewport.first_visible_line_index)

    def _keep_selection_in_view(self) -> None:
        """Move a selection that scrolled out of view onto a visible link, if any."""
        slot = self.selected_link
        if slot is None or self.viewport.contains(slot.first_line):
            return
        links = self.layout.links
        visible = [idx for idx, link in enumerate(links) if self.viewport.contains(link.first_line)]
        if not visible:
            return
        if slot.first_line < self.viewport.first_visible_line_index:
            self.viewport.selected_link_index = visible[0]
        else:
            self.viewport.selected_link_index = visible[-1]

    def _reveal(self, first_line: int, last_line: int) -> None:
        """Scroll the minimum needed so lines ``first_line..last_line`` are visible."""
        vp = self.viewport
        if first_line < vp.first_visible_line_index:
            self._set_first(first_line)
        elif last_line > vp.last_visible_line_index:
            self._set_first(min(first_line, last_line - vp.height + 1))

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def _select(self, index: int) -> LinkSlot:
        self.viewport.selected_link_index = index
        slot = self.layout.links[index]
        self._reveal(slot.first_line, slot.last_line)
        return slot

    def select_next_link(self) -> LinkSlot:
        """Select the next link in document order; no wrap-around."""
        links = self.layout.links
        current = self.viewport.selected_link_index
        if current is None:
            top = self.viewport.first_visible_line_index
            index = next((idx for idx, link in enumerate(links) if link.first_line >= top), None)
        else:
            index = current + 1 if current + 1 < len(links) else None
        if index is None:
            raise NoMoreLinks()
        return self._select(index)

    def select_previous_link(self) -> LinkSlot:
        """Select the previous link in document order; no wrap-around."""
        links = self.layout.links
        current = self.viewport.selected_link_index
        if current is None:
            bottom = self.viewport.last_visible_line_index
            index = next(
                (idx for idx in range(len(links) - 1, -1, -1) if links[idx].first_line <= bottom),
                None,
            )
        else:
            index = current - 1 if current > 0 else None
        if index is None:
            raise NoMoreLinks()
        return self._select(index)

    def select_first_link(self) -> LinkSlot:
        if not self.layout.links:
            raise NoMoreLinks()
        return self._select(0)

    def select_last_link(self) -> LinkSlot:
        if not self.layout.links:
            raise NoMoreLinks()
        return self._select(len(self.layout.links) - 1)

    def activate_selected_link(self) -> NavigationRequest | None:
        """Request the selected link's page; the document only changes on load."""
        slot = self.selected_link
        if slot is None:
            raise NoLinkSelected()
        target = slot.target
        if target.kind is LinkKind.ANCHOR:
            self.jump_to_anchor(target.target)
            return None
        if target.kind is LinkKind.INTERNAL:
            if target.anchor and target.target == self.state.identifier:
                self.jump_to_anchor(target.anchor)
                return None
            self._supersede_pending()
            return self._issue(RequestKind.LINK, target.target, anchor=target.anchor)
        if target.kind is LinkKind.EXTERNAL:
            self.state.status = f"external link: {target.target}"
        elif target.kind is LinkKind.RED:
            self.state.status = f"page '{target.target}' does not exist yet"
        else:
            logger.info("unsupported link kind %s for %r", target.kind.value, target.target)
            self.state.status = "this kind of link is not supported"
        return None

    # ------------------------------------------------------------------
    # Requests and page loads
    # ------------------------------------------------------------------

    def _issue(self, kind: RequestKind, target: str, *, anchor: str | None = None) -> NavigationRequest:
        state = self.state
        request = NavigationRequest(state.next_request_id, target, kind, anchor)
        state.next_request_id += 1
        state.pending = request
        state.outbox = request
        state.status = f"loading {target}..."
        logger.debug("issued request %d (%s) for %r", request.request_id, kind.value, target)
        return request

    def _rollback_history(self) -> None:
        move = self.state.pending_history
        if move is None:
            return
        if move.kind is RequestKind.BACK:
            self.state.history.restore_back(move.entry)
        else:
            self.state.history.restore_forward(move.entry)
        self.state.pending_history = None

    def _supersede_pending(self) -> None:
        """Forget the in-flight request; an unanswered history move is undone."""
        if self.state.pending is not None:
            logger.debug("request %d superseded", self.state.pending.request_id)
        self._rollback_history()
        self.state.pending = None
        self.state.outbox = None

    def request_page(self, identifier: str, *, anchor: str | None = None) -> NavigationRequest:
        """Ask for a page by identifier, as if a link to it were followed."""
        self._supersede_pending()
        return self._issue(RequestKind.LINK, identifier, anchor=anchor)

    def take_request(self) -> NavigationRequest | None:
        """Hand the newest unsent request to the application exactly once."""
        request = self.state.outbox
        self.state.outbox = None
        return request

    def is_stale(self, request_id: int) -> bool:
        pending = self.state.pending
        return pending is None or pending.request_id != request_id

    def load_document(
        self,
        document: Document,
        *,
        request_id: int | None = None,
        target_line: int | None = None,
        anchor: str | None = None,
    ) -> bool:
        """Show ``document``; return ``False`` when it answers a superseded request.

        Without ``request_id`` the load counts as a fresh navigation that
        supersedes anything in flight.
        """
        state = self.state
        request: NavigationRequest | None = None
        move: PendingHistoryMove | None = None
        if request_id is not None:
            if self.is_stale(request_id):
                logger.debug("discarding stale page %r for request %d", document.identifier, request_id)
                return False
            request = state.pending
            move = state.pending_history
        else:
            self._supersede_pending()

        if request is None or not request.from_history:
            current = self._current_entry()
            if current is not None:
                state.history.push(current)

        state.document = document
        state.layout = self._cache.get(document, state.text_width)
        state.search.clear()
        state.mode = Mode.BROWSING
        state.contents_selected = 0
        state.pending = None
        state.pending_history = None
        state.outbox = None
        state.status = ""
        self.viewport.selected_link_index = None
        self.viewport.first_visible_line_index = 0
        logger.info("showing %r (%d lines)", document.identifier, state.total_lines)

        if move is not None:
            self._restore(move.entry.snapshot)
        elif target_line is not None:
            self._set_first(target_line)
        else:
            wanted = anchor if anchor is not None else (request.anchor if request is not None else None)
            if wanted:
                try:
                    self.jump_to_anchor(wanted)
                except UnknownTocTarget:
                    logger.warning("no heading for anchor %r in %r", wanted, document.identifier)
        self.viewport.clamp(state.total_lines)
        return True

    def _restore(self, snapshot: ViewportSnapshot) -> None:
        layout = self.layout
        first = snapshot.first_visible_line_index
        if snapshot.layout_width != layout.width and snapshot.anchor_block_id is not None:
            span = layout.block_line_range(snapshot.anchor_block_id)
            if span is not None:
                first = span[0] + min(snapshot.anchor_offset, span[1] - span[0])
        self._set_first(first)
        index = snapshot.selected_link_index
        if index is not None and 0 <= index < len(layout.links):
            self.viewport.selected_link_index = index

    def report_fetch_failure(self, error: FetchError | str, request_id: int | None = None) -> bool:
        """Keep the current page and surface the failure; stale reports are ignored."""
        pending = self.state.pending
        if pending is None or (request_id is not None and request_id != pending.request_id):
            return False
        self._rollback_history()
        self.state.pending = None
        self.state.outbox = None
        self.state.status = f"could not load {pending.target}: {error}"
        logger.warning("fetch for %r failed: %s", pending.target, error)
        return True

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def _history_available(self, kind: RequestKind) -> bool:
        """Whether a move in ``kind`` direction exists once a pending move is undone."""
        history = self.state.history
        back, forward = len(history.back), len(history.forward)
        move = self.state.pending_history
        if move is not None and move.kind is RequestKind.BACK:
            back, forward = back + 1, max(0, forward - 1)
        elif move is not None:
            back, forward = max(0, back - 1), forward + 1
        return (back if kind is RequestKind.BACK else forward) > 0

    def _history_move(self, kind: RequestKind) -> NavigationRequest:
        history = self.state.history
        current = self._current_entry()
        if current is None:
            raise HistoryEmpty()
        if not self._history_available(kind):
            raise HistoryEmpty("no earlier page" if kind is RequestKind.BACK else "no later page")
        self._supersede_pending()
        if kind is RequestKind.BACK:
            target = history.pop_back(current)
        else:
            target = history.pop_forward(current)
        self.state.pending_history = PendingHistoryMove(kind, target)
        return self._issue(kind, target.document_identifier)

    def go_back(self) -> NavigationRequest:
        return self._history_move(RequestKind.BACK)

    def go_forward(self) -> NavigationRequest:
        return self._history_move(RequestKind.FORWARD)

    # ------------------------------------------------------------------
    # Table of contents
    # ------------------------------------------------------------------

    def jump_to_toc_entry(self, block_id: int | None) -> int:
        """Make the heading's first line the first visible line."""
        line = self.layout.toc_targets.get(block_id) if block_id is not None else None
        if line is None:
            raise UnknownTocTarget(block_id)
        self._set_first(line)
        self._keep_selection_in_view()
        return line

    def jump_to_anchor(self, anchor: str) -> int:
        document = self.state.document
        block_id = document.find_anchor(anchor) if document is not None else None
        if block_id is None:
            raise UnknownTocTarget(anchor)
        return self.jump_to_toc_entry(block_id)

    def contents(self) -> list[TocEntry]:
        if self.state.document is None:
            return []
        return [entry for entry in self.state.document.toc() if entry.block_id in self.layout.toc_targets]

    def toggle_contents(self) -> bool:
        """Open or close the contents panel; the page rewraps to the remaining width."""
        self._set_contents_visible(not self.state.contents_visible)
        return self.state.contents_visible

    def _set_contents_visible(self, visible: bool) -> None:
        self.state.contents_visible = visible
        if self._relayout():
            self.viewport.clamp(self.state.total_lines)
            self._keep_selection_in_view()

    def move_contents_selection(self, delta: int) -> int:
        entries = self.contents()
        if not entries:
            self.state.contents_selected = 0
            return 0
        self.state.contents_selected = (self.state.contents_selected + delta) % len(entries)
        return self.state.contents_selected

    def activate_contents_selection(self) -> int:
        entries = self.contents()
        if not entries:
            raise UnknownTocTarget("contents are empty")
        entry = entries[min(self.state.contents_selected, len(entries) - 1)]
        self._set_contents_visible(False)
        return self.jump_to_toc_entry(entry.block_id)

    def _scroll_or_contents(self, delta: int) -> None:
        if self.state.contents_visible:
            self.move_contents_selection(delta)
        else:
            self.scroll(delta)

    def _activate_or_contents(self) -> NavigationRequest | None:
        if self.state.contents_visible:
            self.activate_contents_selection()
            return None
        return self.activate_selected_link()

    # ------------------------------------------------------------------
    # Resize
    # ------------------------------------------------------------------

    def resize(self, width: int, height: int) -> bool:
        """Apply a terminal size; a repeated size is a no-op."""
        state = self.state
        width = max(1, width)
        height = max(1, height)
        changed = False
        if width != state.width:
            state.width = width
            self._relayout()
            changed = True
        if height != self.viewport.height:
            self.viewport.height = height
            changed = True
        if changed:
            self.viewport.clamp(state.total_lines)
            self._keep_selection_in_view()
        return changed

    def _relayout(self) -> bool:
        """Rewrap the page to the current text width, keeping the reading position.

        Search is cleared because line indices move; the selected link is
        kept by ``link_id``. Returns ``False`` when the width is unchanged.
        """
        state = self.state
        width = state.text_width
        if width == state.layout.width:
            return False
        before = self.snapshot()
        selected = self.selected_link
        if state.document is not None:
            state.layout = self._cache.get(state.document, width)
        else:
            state.layout = LayoutResult(width=width)
        state.search.clear()
        state.mode = Mode.BROWSING
        self.viewport.selected_link_index = None
        if selected is not None:
            self.viewport.selected_link_index = next(
                (idx for idx, link in enumerate(state.layout.links) if link.link_id == selected.link_id),
                None,
            )
        self._restore_anchor(before)
        return True

    def _restore_anchor(self, snapshot: ViewportSnapshot) -> None:
        first = 0
        if snapshot.anchor_block_id is not None:
            span = self.layout.block_line_range(snapshot.anchor_block_id)
            if span is not None:
                first = span[0] + min(snapshot.anchor_offset, span[1] - span[0])
        self._set_first(first)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def start_search(self) -> None:
        self.state.mode = Mode.SEARCHING
        self.state.search.clear()
        if self.state.contents_visible:
            self._set_contents_visible(False)
        self.state.search_origin = self.viewport.first_visible_line_index

    def _refresh_search(self, query: str) -> None:
        search = self.state.search
        search.update(self.layout.lines, query)
        if search.matches:
            match = search.next_match(from_line=self.state.search_origin)
            self._reveal(match.line_index, match.line_index)

    def search_input(self, text: str) -> None:
        if self.state.mode is not Mode.SEARCHING:
            self.start_search()
        self._refresh_search(self.state.search.query + text)

    def search_backspace(self) -> None:
        self._refresh_search(self.state.search.query[:-1])

    def confirm_search(self) -> None:
        self.state.mode = Mode.BROWSING
        if not self.state.search.query:
            self.state.search.clear()

    def cancel_search(self) -> None:
        self.state.mode = Mode.BROWSING
        self.state.search.clear()

    def _goto_match(self, match: SearchMatch) -> SearchMatch:
        if not self.viewport.contains(match.line_index):
            self._set_first(match.line_index)
        self._keep_selection_in_view()
        self.state.status = f"match {self.state.search.current_match_index + 1}/{len(self.state.search.matches)}"
        return match

    def search_next(self) -> SearchMatch:
        match = self.state.search.next_match(from_line=self.viewport.first_visible_line_index)
        return self._goto_match(match)

    def search_previous(self) -> SearchMatch:
        match = self.state.search.previous_match(from_line=self.viewport.last_visible_line_index)
        return self._goto_match(match)

    # ------------------------------------------------------------------
    # Command dispatch and output
    # ------------------------------------------------------------------

    def dispatch(self, command: Command) -> ActionResult:
        """Apply one command; expected notices become the status line."""
        if command.name is CommandName.QUIT:
            return ActionResult(quit=True)
        handler = self._handlers.get(command.name)
        if handler is None:
            return ActionResult(handled=False)
        try:
            request = handler(command)
        except NavigationNotice as notice:
            self.state.status = notice.status
            logger.debug("%s: %s", command.name.value, notice.status)
            return ActionResult(status=notice.status)
        return ActionResult(status=self.state.status, request=request)

    def clear_status(self) -> None:
        self.state.status = ""

    def frame(self) -> DrawFrame:
        state = self.state
        vp = self.viewport
        first = vp.first_visible_line_index
        lines = state.layout.lines[first : first + vp.height]
        highlights: dict[int, tuple[SearchMatch, ...]] = {}
        for line in lines:
            on_line = state.search.matches_on_line(line.line_index)
            if on_line:
                highlights[line.line_index] = tuple(on_line)
        slot = self.selected_link
        contents = tuple(self.contents()) if state.contents_visible else ()
        return DrawFrame(
            title=state.document.title if state.document is not None else "",
            lines=lines,
            first_line=first,
            height=vp.height,
            width=state.width,
            text_width=state.text_width,
            total_lines=state.total_lines,
            selected_link_id=slot.link_id if slot is not None else None,
            highlights=highlights,
            current_match=state.search.current,
            mode=state.mode,
            query=state.search.query,
            match_count=len(state.search.matches),
            status=state.status,
            loading=state.pending is not None,
            can_go_back=state.history.can_go_back,
            can_go_forward=state.history.can_go_forward,
            contents=contents,
            contents_selected=state.contents_selected if contents else None,
            unavailable_link_ids=frozenset(
                slot.link_id for slot in state.layout.links if slot.target.kind is LinkKind.RED
            ),
        )


__all__ = ["ViewportController"]
