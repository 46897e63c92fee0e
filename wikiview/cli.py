"""Command-line front door for wikiview.

Parses CLI options, configures logging and resolves the page store. Then
either prints one laid-out page (``--render``) or starts the interactive
viewer.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from .config import load_history_limit, load_key_bindings, load_pages_dir, load_theme_name, save_theme_name
from .document.store import LocalPageStore
from .errors import FetchError
from .keymap import KeyMap
from .navigation import NavigationHistory
from .render import render_document_text, render_frame
from .runtime.fetch import PageFetchScheduler
from .runtime.loop import CHROME_ROWS, run_main_loop
from .terminal import TerminalController, terminal_size
from .theme import UITheme, available_theme_names, resolve_theme
from .viewer.controller import ViewportController

DEFAULT_PAGE = "Main Page"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _default_render_width() -> int:
    """Resolve default render width from current terminal size."""
    return terminal_size()[0]


def configure_logging(log_file: Path | None, level_name: str, *, interactive: bool) -> None:
    """Route ``wikiview`` log records somewhere that does not corrupt the screen.

    Interactive sessions log only to ``log_file``; without one, records are
    dropped. ``--render`` logs to stderr when no file is given.
    """
    package_logger = logging.getLogger("wikiview")
    package_logger.setLevel(getattr(logging, level_name.upper(), logging.WARNING))
    if log_file is not None:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    elif interactive:
        handler = logging.NullHandler()
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)


def render_page(store: LocalPageStore, page: str, theme: UITheme, max_cols: int) -> str:
    """Fetch ``page`` and return its layout at ``max_cols`` as printable text."""
    return render_document_text(store.fetch(page), max_cols, theme)


def run_viewer(store: LocalPageStore, page: str, theme: UITheme) -> None:
    """Open ``page`` in the interactive viewer and block until quit."""
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    if not os.isatty(stdin_fd) or not os.isatty(stdout_fd):
        raise SystemExit("wikiview needs an interactive terminal; use --render to print a page.")

    columns, rows = terminal_size()
    controller = ViewportController(
        columns,
        max(1, rows - CHROME_ROWS),
        history=NavigationHistory(load_history_limit()),
    )
    controller.request_page(page)
    terminal = TerminalController(stdin_fd, stdout_fd)
    with terminal.raw_mode():
        run_main_loop(
            controller,
            stdin_fd,
            keymap=KeyMap(load_key_bindings()),
            scheduler=PageFetchScheduler(store),
            render=lambda frame: render_frame(frame, theme),
        )


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and launch wikiview on a page."""
    parser = argparse.ArgumentParser(description="Browse encyclopedia pages in the terminal.")
    parser.add_argument("page", nargs="?", default=None, help=f"Page title to open (default: {DEFAULT_PAGE!r}).")
    parser.add_argument(
        "--pages-dir",
        type=Path,
        default=None,
        help="Directory of JSON page files (default: config 'pages_dir', then the current directory).",
    )
    parser.add_argument(
        "--theme",
        default=None,
        help=f"UI theme name ({', '.join(available_theme_names())}); remembered for later runs.",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable color output.")
    parser.add_argument("--render", action="store_true", help="Print the laid-out page and exit.")
    parser.add_argument(
        "--max-cols",
        type=_positive_int,
        default=None,
        help="Column width for --render output (default: terminal width).",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Write log records to this file.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        type=str.upper,
        help="Minimum level of logged records (default: WARNING).",
    )
    args = parser.parse_args(argv)

    configure_logging(args.log_file, args.log_level, interactive=not args.render)

    pages_dir = args.pages_dir or load_pages_dir() or Path.cwd()
    if not pages_dir.is_dir():
        raise SystemExit(f"Pages directory not found: {pages_dir}")
    store = LocalPageStore(pages_dir)
    page = args.page or DEFAULT_PAGE

    if args.theme is not None:
        if args.theme.strip().lower() not in available_theme_names():
            raise SystemExit(f"Unknown theme {args.theme!r}; choose from {', '.join(available_theme_names())}.")
        save_theme_name(args.theme.strip().lower())
    theme = resolve_theme(args.theme or load_theme_name(), no_color=args.no_color)

    if args.render:
        max_cols = args.max_cols if args.max_cols is not None else _default_render_width()
        try:
            sys.stdout.write(render_page(store, page, theme, max_cols))
        except FetchError as exc:
            raise SystemExit(str(exc)) from exc
        return

    logger.info("starting viewer on %r from %s", page, pages_dir)
    run_viewer(store, page, theme)


if __name__ == "__main__":
    main()
