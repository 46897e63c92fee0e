"""Closed set of abstract commands the controller understands.

Key decoding and bindings live elsewhere; by the time input reaches the
controller it is one of these values.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass


class CommandName(str, enum.Enum):
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HALF_PAGE_UP = "half_page_up"
    HALF_PAGE_DOWN = "half_page_down"
    SCROLL_TOP = "scroll_top"
    SCROLL_BOTTOM = "scroll_bottom"
    NEXT_LINK = "next_link"
    PREVIOUS_LINK = "previous_link"
    FIRST_LINK = "first_link"
    LAST_LINK = "last_link"
    ACTIVATE_LINK = "activate_link"
    START_SEARCH = "start_search"
    SEARCH_INPUT = "search_input"
    SEARCH_BACKSPACE = "search_backspace"
    CONFIRM_SEARCH = "confirm_search"
    SEARCH_NEXT = "search_next"
    SEARCH_PREVIOUS = "search_previous"
    CANCEL_SEARCH = "cancel_search"
    TOGGLE_CONTENTS = "toggle_contents"
    JUMP_TO_TOC = "jump_to_toc"
    GO_BACK = "go_back"
    GO_FORWARD = "go_forward"
    RESIZE = "resize"
    QUIT = "quit"


@dataclass(frozen=True)
class Command:
    name: CommandName
    block_id: int | None = None
    width: int = 0
    height: int = 0
    text: str = ""


def jump_to_toc(block_id: int) -> Command:
    return Command(CommandName.JUMP_TO_TOC, block_id=block_id)


def resize(width: int, height: int) -> Command:
    return Command(CommandName.RESIZE, width=width, height=height)


def search_input(text: str) -> Command:
    return Command(CommandName.SEARCH_INPUT, text=text)


SCROLL_UP = Command(CommandName.SCROLL_UP)
SCROLL_DOWN = Command(CommandName.SCROLL_DOWN)
PAGE_UP = Command(CommandName.PAGE_UP)
PAGE_DOWN = Command(CommandName.PAGE_DOWN)
HALF_PAGE_UP = Command(CommandName.HALF_PAGE_UP)
HALF_PAGE_DOWN = Command(CommandName.HALF_PAGE_DOWN)
SCROLL_TOP = Command(CommandName.SCROLL_TOP)
SCROLL_BOTTOM = Command(CommandName.SCROLL_BOTTOM)
NEXT_LINK = Command(CommandName.NEXT_LINK)
PREVIOUS_LINK = Command(CommandName.PREVIOUS_LINK)
FIRST_LINK = Command(CommandName.FIRST_LINK)
LAST_LINK = Command(CommandName.LAST_LINK)
ACTIVATE_LINK = Command(CommandName.ACTIVATE_LINK)
START_SEARCH = Command(CommandName.START_SEARCH)
SEARCH_BACKSPACE = Command(CommandName.SEARCH_BACKSPACE)
CONFIRM_SEARCH = Command(CommandName.CONFIRM_SEARCH)
SEARCH_NEXT = Command(CommandName.SEARCH_NEXT)
SEARCH_PREVIOUS = Command(CommandName.SEARCH_PREVIOUS)
CANCEL_SEARCH = Command(CommandName.CANCEL_SEARCH)
TOGGLE_CONTENTS = Command(CommandName.TOGGLE_CONTENTS)
GO_BACK = Command(CommandName.GO_BACK)
GO_FORWARD = Command(CommandName.GO_FORWARD)
QUIT = Command(CommandName.QUIT)

# Commands a key binding may name directly (payload commands are excluded).
BINDABLE_COMMANDS: dict[str, Command] = {
    command.name.value: command
    for command in (
        SCROLL_UP,
        SCROLL_DOWN,
        PAGE_UP,
        PAGE_DOWN,
        HALF_PAGE_UP,
        HALF_PAGE_DOWN,
        SCROLL_TOP,
        SCROLL_BOTTOM,
        NEXT_LINK,
        PREVIOUS_LINK,
        FIRST_LINK,
        LAST_LINK,
        ACTIVATE_LINK,
        START_SEARCH,
        SEARCH_NEXT,
        SEARCH_PREVIOUS,
        CANCEL_SEARCH,
        TOGGLE_CONTENTS,
        GO_BACK,
        GO_FORWARD,
        QUIT,
    )
}
