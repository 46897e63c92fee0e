"""Background page fetch worker.

Fetching happens off the input/render loop on one daemon thread. Only the
newest request waits to be fetched: scheduling replaces any request that the
worker has not started yet, and the controller discards results for requests
it has since superseded.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from queue import Empty, Queue

from ..document.model import Document
from ..document.store import PageFetcher
from ..errors import FetchError, FetchErrorKind
from ..viewer.state import NavigationRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    """Completed fetch: exactly one of ``document`` and ``error`` is set."""

    request: NavigationRequest
    document: Document | None = None
    error: FetchError | None = None


class PageFetchScheduler:
    """Single-threaded latest-request-wins fetch scheduler."""

    def __init__(self, fetcher: PageFetcher) -> None:
        self._fetcher = fetcher
        self._lock = threading.Lock()
        self._pending: NavigationRequest | None = None
        self._running = False
        self._results: Queue[FetchResult] = Queue()

    def _fetch(self, request: NavigationRequest) -> FetchResult:
        try:
            document = self._fetcher.fetch(request.target)
        except FetchError as exc:
            return FetchResult(request, error=exc)
        except Exception as exc:
            logger.exception("fetcher crashed on %r", request.target)
            return FetchResult(request, error=FetchError(FetchErrorKind.NETWORK_ERROR, request.target, str(exc)))
        return FetchResult(request, document=document)

    def _worker(self) -> None:
        while True:
            with self._lock:
                request = self._pending
                self._pending = None
                if request is None:
                    self._running = False
                    return
            logger.debug("fetching %r for request %d", request.target, request.request_id)
            self._results.put(self._fetch(request))

    def schedule(self, request: NavigationRequest) -> None:
        """Queue ``request``, replacing any request not yet started."""
        with self._lock:
            if self._pending is not None:
                logger.debug("dropping unstarted request %d", self._pending.request_id)
            self._pending = request
            if self._running:
                return
            self._running = True

        worker = threading.Thread(
            target=self._worker,
            name="wikiview-page-fetch",
            daemon=True,
        )
        worker.start()

    def drain_results(self) -> list[FetchResult]:
        """Drain all completed fetch results."""
        out: list[FetchResult] = []
        while True:
            try:
                out.append(self._results.get_nowait())
            except Empty:
                break
        return out


__all__ = ["FetchResult", "PageFetchScheduler"]
