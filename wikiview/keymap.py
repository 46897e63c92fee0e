"""Key-token to command bindings.

``read_key`` produces key tokens; ``KeyMap`` turns them into controller
commands depending on the current mode. Browsing bindings can be overridden
from config with a ``{"key token": "command name"}`` mapping.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from .viewer import commands
from .viewer.commands import BINDABLE_COMMANDS, Command
from .viewer.state import Mode


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single command."""

    combos: tuple[str, ...]
    command: Command


class KeyComboRegistry:
    """Small key lookup table with a key normalization step."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    @staticmethod
    def normalize(key: str) -> str:
        """Treat both Enter encodings as one key."""
        return "ENTER_CR" if key == "ENTER_LF" else key

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        """Register one binding, overwriting existing commands for same combos."""
        for combo in binding.combos:
            self._commands[self.normalize(combo)] = binding.command
        return self

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def lookup(self, key: str) -> Command | None:
        return self._commands.get(self.normalize(key))

    def keys_for(self, command: Command) -> tuple[str, ...]:
        return tuple(sorted(key for key, bound in self._commands.items() if bound == command))


DEFAULT_BINDINGS: tuple[KeyComboBinding, ...] = (
    KeyComboBinding(("j", "DOWN"), commands.SCROLL_DOWN),
    KeyComboBinding(("k", "UP"), commands.SCROLL_UP),
    KeyComboBinding((" ", "PAGE_DOWN", "CTRL_F"), commands.PAGE_DOWN),
    KeyComboBinding(("PAGE_UP", "CTRL_B"), commands.PAGE_UP),
    KeyComboBinding(("CTRL_D",), commands.HALF_PAGE_DOWN),
    KeyComboBinding(("CTRL_U",), commands.HALF_PAGE_UP),
    KeyComboBinding(("g", "HOME"), commands.SCROLL_TOP),
    KeyComboBinding(("G", "END"), commands.SCROLL_BOTTOM),
    KeyComboBinding(("TAB", "l", "RIGHT"), commands.NEXT_LINK),
    KeyComboBinding(("SHIFT_TAB", "h", "LEFT"), commands.PREVIOUS_LINK),
    KeyComboBinding(("[",), commands.FIRST_LINK),
    KeyComboBinding(("]",), commands.LAST_LINK),
    KeyComboBinding(("ENTER_CR",), commands.ACTIVATE_LINK),
    KeyComboBinding(("/",), commands.START_SEARCH),
    KeyComboBinding(("n",), commands.SEARCH_NEXT),
    KeyComboBinding(("N",), commands.SEARCH_PREVIOUS),
    KeyComboBinding(("ESC",), commands.CANCEL_SEARCH),
    KeyComboBinding(("c",), commands.TOGGLE_CONTENTS),
    KeyComboBinding(("b", "BACKSPACE", "ALT_LEFT"), commands.GO_BACK),
    KeyComboBinding(("f", "ALT_RIGHT"), commands.GO_FORWARD),
    KeyComboBinding(("q",), commands.QUIT),
)

SEARCH_BINDINGS: tuple[KeyComboBinding, ...] = (
    KeyComboBinding(("ENTER_CR",), commands.CONFIRM_SEARCH),
    KeyComboBinding(("ESC",), commands.CANCEL_SEARCH),
    KeyComboBinding(("BACKSPACE",), commands.SEARCH_BACKSPACE),
    KeyComboBinding(("DOWN",), commands.SCROLL_DOWN),
    KeyComboBinding(("UP",), commands.SCROLL_UP),
    KeyComboBinding(("PAGE_DOWN",), commands.PAGE_DOWN),
    KeyComboBinding(("PAGE_UP",), commands.PAGE_UP),
)


def _is_text_input(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class KeyMap:
    """Resolve key tokens to commands for browsing and searching modes."""

    def __init__(self, overrides: Mapping[str, str] | None = None) -> None:
        self.browsing = KeyComboRegistry().register_bindings(*DEFAULT_BINDINGS)
        self.searching = KeyComboRegistry().register_bindings(*SEARCH_BINDINGS)
        for key, name in (overrides or {}).items():
            command = BINDABLE_COMMANDS.get(name)
            if command is not None:
                self.browsing.register_binding(KeyComboBinding((key,), command))

    def command_for(self, key: str, mode: Mode = Mode.BROWSING) -> Command | None:
        """Return the command for ``key`` in ``mode``, or ``None`` when unbound."""
        if not key:
            return None
        if mode is Mode.SEARCHING:
            command = self.searching.lookup(key)
            if command is not None:
                return command
            if _is_text_input(key):
                return commands.search_input(key)
            return None
        return self.browsing.lookup(key)


__all__ = ["DEFAULT_BINDINGS", "KeyComboBinding", "KeyComboRegistry", "KeyMap", "SEARCH_BINDINGS"]
