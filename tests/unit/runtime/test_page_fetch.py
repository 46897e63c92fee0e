"""Tests for the background page fetch scheduler."""

from __future__ import annotations

import threading
import time
import unittest

from wikiview.document.model import build_document, paragraph, section
from wikiview.errors import FetchError, FetchErrorKind
from wikiview.runtime.fetch import PageFetchScheduler
from wikiview.viewer.state import NavigationRequest


def _wait_for_results(
    scheduler: PageFetchScheduler,
    *,
    expected_count: int,
    timeout_seconds: float = 1.0,
) -> list:
    deadline = time.monotonic() + timeout_seconds
    out: list = []
    while time.monotonic() < deadline:
        out.extend(scheduler.drain_results())
        if len(out) >= expected_count:
            break
        time.sleep(0.01)
    return out


class _DictFetcher:
    def __init__(self, *names: str) -> None:
        self.pages = {name: build_document(name, [section("", paragraph(f"{name} body"))]) for name in names}
        self.calls: list[str] = []

    def fetch(self, identifier: str):
        self.calls.append(identifier)
        if identifier not in self.pages:
            raise FetchError(FetchErrorKind.NOT_FOUND, identifier)
        return self.pages[identifier]


class PageFetchSchedulerTests(unittest.TestCase):
    def test_schedule_fetches_in_background(self) -> None:
        fetcher = _DictFetcher("Alpha")
        scheduler = PageFetchScheduler(fetcher)

        scheduler.schedule(NavigationRequest(1, "Alpha"))

        results = _wait_for_results(scheduler, expected_count=1)
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].request.request_id, 1)
        self.assertEqual(results[0].document.identifier, "Alpha")
        self.assertIsNone(results[0].error)

    def test_fetch_error_is_reported_as_result(self) -> None:
        scheduler = PageFetchScheduler(_DictFetcher())

        scheduler.schedule(NavigationRequest(4, "Nowhere"))

        results = _wait_for_results(scheduler, expected_count=1)
        self.assertIsNone(results[0].document)
        self.assertEqual(results[0].error.kind, FetchErrorKind.NOT_FOUND)

    def test_unexpected_exception_becomes_network_error(self) -> None:
        class _Broken:
            def fetch(self, identifier: str):
                raise RuntimeError("socket closed")

        scheduler = PageFetchScheduler(_Broken())
        with self.assertLogs("wikiview.runtime.fetch", level="ERROR"):
            scheduler.schedule(NavigationRequest(2, "Alpha"))
            results = _wait_for_results(scheduler, expected_count=1)

        self.assertEqual(results[0].error.kind, FetchErrorKind.NETWORK_ERROR)
        self.assertIn("socket closed", str(results[0].error))

    def test_pending_requests_collapse_to_latest(self) -> None:
        first_started = threading.Event()
        allow_first_finish = threading.Event()
        fetcher = _DictFetcher("A", "B", "C")
        original_fetch = fetcher.fetch

        def fetch(identifier: str):
            if identifier == "A":
                first_started.set()
                allow_first_finish.wait(timeout=1.0)
            return original_fetch(identifier)

        fetcher.fetch = fetch
        scheduler = PageFetchScheduler(fetcher)

        scheduler.schedule(NavigationRequest(1, "A"))
        self.assertTrue(first_started.wait(timeout=1.0))
        scheduler.schedule(NavigationRequest(2, "B"))
        scheduler.schedule(NavigationRequest(3, "C"))
        allow_first_finish.set()

        results = _wait_for_results(scheduler, expected_count=2)
        self.assertEqual([result.request.request_id for result in results], [1, 3])
        self.assertEqual(fetcher.calls, ["A", "C"])

    def test_drain_results_is_empty_when_idle(self) -> None:
        self.assertEqual(PageFetchScheduler(_DictFetcher()).drain_results(), [])


if __name__ == "__main__":
    unittest.main()
