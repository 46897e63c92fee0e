"""Main interactive event loop for the terminal UI.

Each iteration applies the terminal size, hands new navigation requests to
the fetch scheduler, applies finished fetches, repaints when something
changed and dispatches at most one key.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..keymap import KeyMap
from ..reader import read_key
from ..terminal import terminal_size
from ..viewer.controller import ViewportController
from ..viewer.state import DrawFrame
from .fetch import PageFetchScheduler

logger = logging.getLogger(__name__)

# Title bar and status bar.
CHROME_ROWS = 2


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    key_timeout_ms: int = 120
    status_seconds: float = 3.0


def apply_fetch_results(controller: ViewportController, scheduler: PageFetchScheduler) -> bool:
    """Feed finished fetches to the controller; return whether any was applied."""
    changed = False
    for result in scheduler.drain_results():
        request_id = result.request.request_id
        if result.document is not None:
            applied = controller.load_document(result.document, request_id=request_id)
        else:
            applied = controller.report_fetch_failure(result.error, request_id)
        if not applied:
            logger.debug("ignored result for superseded request %d", request_id)
        changed = changed or applied
    return changed


def run_main_loop(
    controller: ViewportController,
    stdin_fd: int,
    *,
    keymap: KeyMap,
    scheduler: PageFetchScheduler,
    render: Callable[[DrawFrame], None],
    timing: RuntimeLoopTiming = RuntimeLoopTiming(),
) -> None:
    """Run until a key bound to quit is pressed."""
    dirty = True
    shown_status = ""
    status_since = 0.0
    while True:
        columns, rows = terminal_size()
        if controller.resize(columns, max(1, rows - CHROME_ROWS)):
            dirty = True

        request = controller.take_request()
        if request is not None:
            scheduler.schedule(request)
            dirty = True
        if apply_fetch_results(controller, scheduler):
            dirty = True

        now = time.monotonic()
        status = controller.state.status
        if status != shown_status:
            shown_status = status
            status_since = now
        elif status and controller.state.pending is None and now - status_since >= timing.status_seconds:
            controller.clear_status()
            shown_status = ""
            dirty = True

        if dirty:
            render(controller.frame())
            dirty = False

        key = read_key(stdin_fd, timeout_ms=timing.key_timeout_ms)
        if not key:
            continue
        command = keymap.command_for(key, controller.state.mode)
        if command is None:
            continue
        result = controller.dispatch(command)
        if result.quit:
            break
        dirty = True


__all__ = ["CHROME_ROWS", "RuntimeLoopTiming", "apply_fetch_results", "run_main_loop"]
