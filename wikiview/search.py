"""In-page search over rendered lines.

Matching is a case-insensitive substring test (``str.casefold``, no regex)
over page text only: list markers, indents and table padding are skipped and
a match never spans across them. Columns are display columns of the rendered
row, so highlights line up with what is painted.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .errors import NoMatches
from .layout.types import RenderedLine
from .text import display_width

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchMatch:
    line_index: int
    column_start: int
    column_end: int


def _text_runs(line: RenderedLine) -> list[tuple[int, str]]:
    """Return ``(start_column, text)`` for each run of non-decorative fragments."""
    runs: list[tuple[int, str]] = []
    col = 0
    run_start = 0
    run: list[str] = []
    for fragment in line.fragments:
        if fragment.decorative:
            if run:
                runs.append((run_start, "".join(run)))
                run = []
            col += fragment.width
            continue
        if not run:
            run_start = col
        run.append(fragment.text)
        col += fragment.width
    if run:
        runs.append((run_start, "".join(run)))
    return runs


def _fold(text: str) -> tuple[str, list[int]]:
    """Casefold ``text`` keeping a map from folded index to source index."""
    folded: list[str] = []
    source: list[int] = []
    for idx, ch in enumerate(text):
        for out in ch.casefold():
            folded.append(out)
            source.append(idx)
    return "".join(folded), source


def search_line(line: RenderedLine, query: str) -> list[SearchMatch]:
    needle = query.casefold()
    if not needle:
        return []
    matches: list[SearchMatch] = []
    for run_start, text in _text_runs(line):
        folded, source = _fold(text)
        pos = folded.find(needle)
        while pos >= 0:
            first = source[pos]
            last = source[pos + len(needle) - 1] + 1
            start = run_start + display_width(text[:first])
            matches.append(SearchMatch(line.line_index, start, start + display_width(text[first:last])))
            pos = folded.find(needle, pos + len(needle))
    return matches


def search(lines: Sequence[RenderedLine], query: str) -> tuple[SearchMatch, ...]:
    """Return all matches ordered by ``(line_index, column_start)``."""
    if not query:
        return ()
    out: list[SearchMatch] = []
    for line in lines:
        out.extend(search_line(line, query))
    out.sort(key=lambda match: (match.line_index, match.column_start))
    return tuple(out)


@dataclass
class SearchState:
    """Query, its matches and the current match cursor."""

    query: str = ""
    matches: tuple[SearchMatch, ...] = ()
    current_match_index: int | None = None
    _matches_by_line: dict[int, list[SearchMatch]] = field(default_factory=dict, init=False, repr=False, compare=False)

    @property
    def active(self) -> bool:
        return bool(self.query)

    @property
    def current(self) -> SearchMatch | None:
        if self.current_match_index is None:
            return None
        return self.matches[self.current_match_index]

    def update(self, lines: Sequence[RenderedLine], query: str) -> None:
        """Re-run ``search`` for ``query``; the cursor is reset."""
        self.query = query
        self.matches = search(lines, query)
        self.current_match_index = None
        self._matches_by_line = {}
        for match in self.matches:
            self._matches_by_line.setdefault(match.line_index, []).append(match)
        logger.debug("search %r: %d matches", query, len(self.matches))

    def clear(self) -> None:
        self.query = ""
        self.matches = ()
        self.current_match_index = None
        self._matches_by_line = {}

    def matches_on_line(self, line_index: int) -> list[SearchMatch]:
        return self._matches_by_line.get(line_index, [])

    def next_match(self, from_line: int | None = None) -> SearchMatch:
        """Advance circularly; the match's ``line_index`` is the scroll target.

        With no current match the first match at or after ``from_line`` is
        chosen (the very first match when ``from_line`` is omitted).
        """
        if not self.matches:
            raise NoMatches()
        if self.current_match_index is None:
            index = 0
            if from_line is not None:
                index = next(
                    (pos for pos, match in enumerate(self.matches) if match.line_index >= from_line),
                    0,
                )
        else:
            index = (self.current_match_index + 1) % len(self.matches)
        self.current_match_index = index
        return self.matches[index]

    def previous_match(self, from_line: int | None = None) -> SearchMatch:
        """Step back circularly; mirrors ``next_match``."""
        if not self.matches:
            raise NoMatches()
        last = len(self.matches) - 1
        if self.current_match_index is None:
            index = last
            if from_line is not None:
                index = next(
                    (pos for pos in range(last, -1, -1) if self.matches[pos].line_index <= from_line),
                    last,
                )
        else:
            index = (self.current_match_index - 1) % len(self.matches)
        self.current_match_index = index
        return self.matches[index]


__all__ = ["SearchMatch", "SearchState", "search", "search_line"]
