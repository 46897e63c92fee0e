"""Tests for the interactive main loop with terminal I/O patched out."""

from __future__ import annotations

import unittest
from unittest import mock

from wikiview.document.model import build_document, link, paragraph, section
from wikiview.errors import FetchError, FetchErrorKind
from wikiview.keymap import KeyMap
from wikiview.runtime import FetchResult, RuntimeLoopTiming, apply_fetch_results, run_main_loop
from wikiview.viewer.controller import ViewportController

WORDS = "alpha beta gamma delta epsilon zeta eta theta iota kappa"


def _long_page(identifier: str = "Long"):
    return build_document(identifier, [section("", *[paragraph(WORDS) for _ in range(10)])])


class _SyncScheduler:
    """Answers every request immediately from a dict of pages."""

    def __init__(self, *documents) -> None:
        self.pages = {document.identifier: document for document in documents}
        self.scheduled: list = []
        self._results: list[FetchResult] = []

    def schedule(self, request) -> None:
        self.scheduled.append(request)
        document = self.pages.get(request.target)
        if document is None:
            self._results.append(FetchResult(request, error=FetchError(FetchErrorKind.NOT_FOUND, request.target)))
        else:
            self._results.append(FetchResult(request, document=document))

    def drain_results(self) -> list[FetchResult]:
        out, self._results = self._results, []
        return out


def _run(controller: ViewportController, scheduler: _SyncScheduler, keys: list[str], size=(40, 8)) -> list:
    frames: list = []
    with (
        mock.patch("wikiview.runtime.loop.terminal_size", return_value=size),
        mock.patch("wikiview.runtime.loop.read_key", side_effect=keys) as read_key,
    ):
        run_main_loop(
            controller,
            0,
            keymap=KeyMap(),
            scheduler=scheduler,
            render=frames.append,
            timing=RuntimeLoopTiming(key_timeout_ms=0, status_seconds=0.0),
        )
    read_key.assert_called_with(0, timeout_ms=0)
    return frames


class RunMainLoopTests(unittest.TestCase):
    def test_requested_page_is_fetched_shown_and_scrolled(self) -> None:
        controller = ViewportController(40, 6)
        controller.request_page("Long")
        scheduler = _SyncScheduler(_long_page())

        frames = _run(controller, scheduler, ["j", "q"])

        self.assertEqual([request.target for request in scheduler.scheduled], ["Long"])
        self.assertEqual(frames[0].title, "Long")
        self.assertFalse(frames[0].loading)
        self.assertEqual(frames[-1].first_line, 1)

    def test_terminal_size_is_applied_minus_chrome(self) -> None:
        controller = ViewportController(80, 24)
        controller.load_document(_long_page())

        frames = _run(controller, _SyncScheduler(), ["q"], size=(30, 10))

        self.assertEqual((frames[0].width, frames[0].height), (30, 8))

    def test_link_activation_round_trips_through_scheduler(self) -> None:
        controller = ViewportController(40, 6)
        controller.load_document(build_document("Start", [section("", paragraph("go to ", link("Long")))]))
        scheduler = _SyncScheduler(_long_page())

        frames = _run(controller, scheduler, ["TAB", "ENTER_CR", "", "q"])

        self.assertEqual(controller.document.identifier, "Long")
        self.assertTrue(frames[-1].can_go_back)

    def test_failure_status_expires(self) -> None:
        controller = ViewportController(40, 6)
        controller.load_document(_long_page())
        controller.request_page("Missing")

        frames = _run(controller, _SyncScheduler(), ["", "q"])

        self.assertEqual(frames[0].status, "could not load Missing: not found for 'Missing'")
        self.assertEqual(frames[-1].status, "")
        self.assertEqual(controller.document.identifier, "Long")


class ApplyFetchResultsTests(unittest.TestCase):
    def test_superseded_results_are_ignored(self) -> None:
        controller = ViewportController(40, 6)
        stale = controller.request_page("Old")
        controller.request_page("New")
        scheduler = _SyncScheduler(_long_page("Old"))
        scheduler.schedule(stale)

        self.assertFalse(apply_fetch_results(controller, scheduler))
        self.assertIsNone(controller.document)


if __name__ == "__main__":
    unittest.main()
