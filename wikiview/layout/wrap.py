"""Style-preserving greedy word wrap for inline span runs.

Spans are cut into words on whitespace. Text from adjacent spans with no
whitespace between them forms one word, and a link's visible text is never
broken across lines unless it is wider than the line on its own. Words wider
than the line are hard-split at column boundaries.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from ..document.model import InlineSpan, StyleFlags
from ..text import display_width, split_at_width
from .types import Fragment, FragmentKind


@dataclass
class WrappedRow:
    """One output row before line indices are assigned."""

    fragments: list[Fragment] = field(default_factory=list)
    block_id: int | None = None
    span_start: int = 0
    span_end: int = 0
    starts: list[int] = field(default_factory=list)

    @property
    def width(self) -> int:
        return sum(fragment.width for fragment in self.fragments)


@dataclass(frozen=True)
class _Piece:
    text: str
    style: StyleFlags
    link_id: int | None
    span_index: int


def append_fragment(fragments: list[Fragment], fragment: Fragment) -> None:
    """Append, merging into the previous fragment when attributes match."""
    if not fragment.text:
        return
    if fragments:
        last = fragments[-1]
        if (last.style, last.link_id, last.kind) == (fragment.style, fragment.link_id, fragment.kind):
            fragments[-1] = Fragment(last.text + fragment.text, last.style, last.link_id, last.kind)
            return
    fragments.append(fragment)


def tokenize(
    spans: Sequence[InlineSpan],
    *,
    extra_style: StyleFlags = StyleFlags.NONE,
    link_id_for: Callable[[int, InlineSpan], int | None] = lambda _idx, _span: None,
) -> list[list[_Piece]]:
    """Group span text into words; each word is a list of styled pieces."""
    words: list[list[_Piece]] = []
    current: list[_Piece] = []

    def close_word() -> None:
        nonlocal current
        if current:
            words.append(current)
            current = []

    for span_index, span in enumerate(spans):
        style = span.style | extra_style
        if span.link is not None:
            visible = " ".join(span.text.split())
            if not visible:
                if span.text:
                    close_word()
                continue
            if span.text[:1].isspace():
                close_word()
            current.append(_Piece(visible, style, link_id_for(span_index, span), span_index))
            if span.text[-1:].isspace():
                close_word()
            continue

        text = span.text
        if not text:
            continue
        if text[:1].isspace():
            close_word()
        parts = text.split()
        for position, part in enumerate(parts):
            if position > 0:
                close_word()
            current.append(_Piece(part, style, None, span_index))
        if text[-1:].isspace():
            close_word()
    close_word()
    return words


def _word_width(word: list[_Piece]) -> int:
    return sum(display_width(piece.text) for piece in word)


def natural_width(words: list[list[_Piece]]) -> int:
    """Width of the words laid out on a single line."""
    if not words:
        return 0
    return sum(_word_width(word) for word in words) + len(words) - 1


def wrap_words(
    words: list[list[_Piece]],
    width: int,
    *,
    kind: FragmentKind = FragmentKind.TEXT,
    block_id: int | None = None,
) -> list[WrappedRow]:
    """Greedily fill rows of ``width`` columns with ``words``."""
    width = max(1, width)
    rows: list[WrappedRow] = []
    row = WrappedRow(block_id=block_id)
    col = 0
    spans_seen: list[int] = []

    def flush() -> None:
        nonlocal row, col, spans_seen
        if row.fragments:
            row.span_start = min(spans_seen)
            row.span_end = max(spans_seen) + 1
            rows.append(row)
        row = WrappedRow(block_id=block_id)
        col = 0
        spans_seen = []

    def put(piece: _Piece, text: str) -> None:
        nonlocal col
        append_fragment(row.fragments, Fragment(text, piece.style, piece.link_id, kind))
        spans_seen.append(piece.span_index)
        col += display_width(text)

    separator_style = StyleFlags.NONE
    for word in words:
        w = _word_width(word)
        if row.fragments and col + 1 + w <= width:
            append_fragment(row.fragments, Fragment(" ", separator_style, None, kind))
            col += 1
        elif row.fragments:
            flush()

        if col + w <= width:
            for piece in word:
                put(piece, piece.text)
        else:
            # Over-wide word: fill the row, flush, continue on the next one.
            for piece in word:
                rest = piece.text
                while rest:
                    room = width - col
                    head, tail = split_at_width(rest, room)
                    if col > 0 and display_width(head) > room:
                        flush()
                        continue
                    put(piece, head)
                    rest = tail
        separator_style = word[-1].style
    flush()
    return rows


def wrap_spans(
    spans: Sequence[InlineSpan],
    width: int,
    *,
    kind: FragmentKind = FragmentKind.TEXT,
    block_id: int | None = None,
    extra_style: StyleFlags = StyleFlags.NONE,
    link_id_for: Callable[[int, InlineSpan], int | None] = lambda _idx, _span: None,
) -> list[WrappedRow]:
    words = tokenize(spans, extra_style=extra_style, link_id_for=link_id_for)
    return wrap_words(words, width, kind=kind, block_id=block_id)


__all__ = [
    "WrappedRow",
    "append_fragment",
    "natural_width",
    "tokenize",
    "wrap_spans",
    "wrap_words",
]
