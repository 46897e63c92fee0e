"""Display-width measurement and column-based splitting for plain text.

Layout and search work in terminal columns, not code points: combining marks
take no column and East Asian wide/fullwidth characters take two.
"""

from __future__ import annotations

import unicodedata


def char_display_width(ch: str) -> int:
    """Return terminal column width for one character."""
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    return sum(char_display_width(ch) for ch in text)


def split_at_width(text: str, max_cols: int) -> tuple[str, str]:
    """Split ``text`` so the head fits in ``max_cols`` columns.

    The head always takes at least one character when ``text`` is non-empty,
    so repeated splitting terminates even for a wide character in a one-column
    budget. Combining marks stay attached to the preceding character.
    """
    if not text:
        return "", ""
    col = 0
    cut = 0
    for idx, ch in enumerate(text):
        w = char_display_width(ch)
        if idx > 0 and col + w > max_cols:
            break
        col += w
        cut = idx + 1
    return text[:cut], text[cut:]


def hard_split(text: str, width: int) -> list[str]:
    """Break ``text`` into consecutive chunks of at most ``width`` columns."""
    chunks: list[str] = []
    rest = text
    while rest:
        head, rest = split_at_width(rest, max(1, width))
        chunks.append(head)
    return chunks


def clip_to_width(text: str, max_cols: int) -> str:
    """Trim plain text to at most ``max_cols`` display columns."""
    if max_cols <= 0:
        return ""
    out: list[str] = []
    col = 0
    for ch in text:
        w = char_display_width(ch)
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
    return "".join(out)

