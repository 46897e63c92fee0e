"""Tests for key-token to command bindings."""

from __future__ import annotations

import unittest

from wikiview.keymap import KeyComboBinding, KeyComboRegistry, KeyMap
from wikiview.viewer import commands
from wikiview.viewer.state import Mode


class KeyComboRegistryTests(unittest.TestCase):
    def test_later_binding_overwrites_earlier(self) -> None:
        registry = KeyComboRegistry().register_bindings(
            KeyComboBinding(("x", "y"), commands.SCROLL_DOWN),
            KeyComboBinding(("y",), commands.SCROLL_UP),
        )

        self.assertEqual(registry.lookup("x"), commands.SCROLL_DOWN)
        self.assertEqual(registry.lookup("y"), commands.SCROLL_UP)
        self.assertEqual(registry.keys_for(commands.SCROLL_DOWN), ("x",))

    def test_enter_encodings_are_one_key(self) -> None:
        registry = KeyComboRegistry().register_binding(KeyComboBinding(("ENTER_CR",), commands.ACTIVATE_LINK))

        self.assertEqual(registry.lookup("ENTER_LF"), commands.ACTIVATE_LINK)


class KeyMapTests(unittest.TestCase):
    def test_default_browsing_bindings(self) -> None:
        keymap = KeyMap()

        self.assertEqual(keymap.command_for("j"), commands.SCROLL_DOWN)
        self.assertEqual(keymap.command_for("PAGE_DOWN"), commands.PAGE_DOWN)
        self.assertEqual(keymap.command_for("TAB"), commands.NEXT_LINK)
        self.assertEqual(keymap.command_for("SHIFT_TAB"), commands.PREVIOUS_LINK)
        self.assertEqual(keymap.command_for("ENTER_LF"), commands.ACTIVATE_LINK)
        self.assertEqual(keymap.command_for("/"), commands.START_SEARCH)
        self.assertEqual(keymap.command_for("BACKSPACE"), commands.GO_BACK)
        self.assertEqual(keymap.command_for("q"), commands.QUIT)
        self.assertIsNone(keymap.command_for("z"))
        self.assertIsNone(keymap.command_for(""))

    def test_searching_mode_turns_printable_keys_into_input(self) -> None:
        keymap = KeyMap()

        self.assertEqual(keymap.command_for("q", Mode.SEARCHING), commands.search_input("q"))
        self.assertEqual(keymap.command_for("é", Mode.SEARCHING), commands.search_input("é"))
        self.assertEqual(keymap.command_for("BACKSPACE", Mode.SEARCHING), commands.SEARCH_BACKSPACE)
        self.assertEqual(keymap.command_for("ENTER_CR", Mode.SEARCHING), commands.CONFIRM_SEARCH)
        self.assertEqual(keymap.command_for("ESC", Mode.SEARCHING), commands.CANCEL_SEARCH)
        self.assertIsNone(keymap.command_for("CTRL_O", Mode.SEARCHING))

    def test_overrides_rebind_browsing_keys_only(self) -> None:
        keymap = KeyMap({"x": "quit", "q": "scroll_down", "w": "no_such_command"})

        self.assertEqual(keymap.command_for("x"), commands.QUIT)
        self.assertEqual(keymap.command_for("q"), commands.SCROLL_DOWN)
        self.assertIsNone(keymap.command_for("w"))
        self.assertEqual(keymap.command_for("x", Mode.SEARCHING), commands.search_input("x"))


if __name__ == "__main__":
    unittest.main()
