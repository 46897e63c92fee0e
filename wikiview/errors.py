"""Error taxonomy shared by the layout engine, search, history and controller.

``InvalidLayoutWidth`` is a programming error and propagates. Everything
deriving from ``NavigationNotice`` is an expected outcome of a user action;
the controller's ``dispatch`` turns those into a status line instead.
"""

from __future__ import annotations

import enum


class WikiviewError(Exception):
    """Base class for all wikiview errors."""


class InvalidLayoutWidth(WikiviewError, ValueError):
    """Raised when layout is requested for a width below one column."""

    def __init__(self, width: int) -> None:
        super().__init__(f"layout width must be >= 1, got {width}")
        self.width = width


class NavigationNotice(WikiviewError):
    """Expected, non-fatal outcome that should surface as a status message."""

    status = "nothing to do"

    def __init__(self, status: str | None = None) -> None:
        if status is not None:
            self.status = status
        super().__init__(self.status)


class NoMoreLinks(NavigationNotice):
    status = "no more links"


class NoLinkSelected(NavigationNotice):
    status = "no link selected"


class NoMatches(NavigationNotice):
    status = "no matches"


class HistoryEmpty(NavigationNotice):
    status = "history is empty"


class UnknownTocTarget(NavigationNotice):
    status = "unknown contents entry"

    def __init__(self, block_id: object) -> None:
        super().__init__(f"unknown contents entry: {block_id}")
        self.block_id = block_id


class FetchErrorKind(enum.Enum):
    NOT_FOUND = "not found"
    NETWORK_ERROR = "network error"
    PARSE_ERROR = "parse error"


class FetchError(WikiviewError):
    """Failure reported by a page fetcher for one identifier."""

    def __init__(self, kind: FetchErrorKind, identifier: str, message: str = "") -> None:
        detail = f": {message}" if message else ""
        super().__init__(f"{kind.value} for {identifier!r}{detail}")
        self.kind = kind
        self.identifier = identifier
        self.message = message


__all__ = [
    "FetchError",
    "FetchErrorKind",
    "HistoryEmpty",
    "InvalidLayoutWidth",
    "NavigationNotice",
    "NoLinkSelected",
    "NoMatches",
    "NoMoreLinks",
    "UnknownTocTarget",
    "WikiviewError",
]
