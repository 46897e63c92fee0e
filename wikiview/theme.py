"""UI theme definitions and selection helpers.

Themes map the abstract style flags and fragment kinds produced by the layout
engine onto ANSI sequences. Colors come from ``pygments.console`` so palettes
stay in the 16-color set every terminal understands.
"""

from __future__ import annotations

from dataclasses import dataclass

from pygments.console import codes

_REVERSE = "\033[7m"


def _sgr(*names: str) -> str:
    """Concatenate ``pygments.console`` codes by name."""
    return "".join(codes[name] for name in names)


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by the painter."""

    name: str
    reset: str
    reverse: str
    text: str
    emphasis: str
    strong: str
    monospace: str
    heading: str
    marker: str
    link: str
    link_unavailable: str
    search_hit: str
    search_current: str
    title_bar: str
    status_bar: str
    status_notice: str
    contents_border: str
    contents_selected: str


DEFAULT_THEME = UITheme(
    name="default",
    reset=codes["reset"],
    reverse=_REVERSE,
    text="",
    emphasis=codes["standout"],
    strong=codes["bold"],
    monospace=codes["green"],
    heading=_sgr("bold", "brightblue"),
    marker=codes["faint"],
    link=_sgr("underline", "cyan"),
    link_unavailable=_sgr("underline", "red"),
    search_hit=_sgr("reset", "black") + "\033[43m",
    search_current=_sgr("reset", "black") + "\033[103m",
    title_bar=_sgr("bold") + _REVERSE,
    status_bar=_REVERSE,
    status_notice=_sgr("bold", "yellow"),
    contents_border=codes["faint"],
    contents_selected=_sgr("bold", "cyan") + _REVERSE,
)

OCEAN_THEME = UITheme(
    name="ocean",
    reset=codes["reset"],
    reverse=_REVERSE,
    text=codes["brightcyan"],
    emphasis=_sgr("standout", "brightcyan"),
    strong=_sgr("bold", "white"),
    monospace=codes["brightgreen"],
    heading=_sgr("bold", "brightblue"),
    marker=codes["blue"],
    link=_sgr("underline", "brightblue"),
    link_unavailable=_sgr("underline", "magenta"),
    search_hit=_sgr("reset", "black") + "\033[46m",
    search_current=_sgr("reset", "black") + "\033[106m",
    title_bar=_sgr("bold", "blue") + _REVERSE,
    status_bar=codes["blue"] + _REVERSE,
    status_notice=_sgr("bold", "brightyellow"),
    contents_border=codes["blue"],
    contents_selected=_sgr("bold", "brightblue") + _REVERSE,
)

PLAIN_THEME = UITheme(
    name="plain",
    reset="",
    reverse="",
    text="",
    emphasis="",
    strong="",
    monospace="",
    heading="",
    marker="",
    link="",
    link_unavailable="",
    search_hit="",
    search_current="",
    title_bar="",
    status_bar="",
    status_notice="",
    contents_border="",
    contents_selected="",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> UITheme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "PLAIN_THEME",
    "UITheme",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
