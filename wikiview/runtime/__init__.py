"""Interactive runtime: background fetching and the input/render loop."""

from __future__ import annotations

from .fetch import FetchResult, PageFetchScheduler
from .loop import RuntimeLoopTiming, apply_fetch_results, run_main_loop

__all__ = [
    "FetchResult",
    "PageFetchScheduler",
    "RuntimeLoopTiming",
    "apply_fetch_results",
    "run_main_loop",
]
