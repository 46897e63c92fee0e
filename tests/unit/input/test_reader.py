"""Tests for raw terminal byte decoding into key tokens."""

from __future__ import annotations

import os
import unittest

from wikiview import reader


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        reader._PENDING_BYTES.clear()
        self.read_fd, self.write_fd = os.pipe()

    def tearDown(self) -> None:
        os.close(self.read_fd)
        os.close(self.write_fd)
        reader._PENDING_BYTES.clear()

    def _keys(self, data: bytes, count: int) -> list[str]:
        os.write(self.write_fd, data)
        return [reader.read_key(self.read_fd, timeout_ms=50) for _ in range(count)]

    def test_plain_and_control_keys(self) -> None:
        self.assertEqual(self._keys(b"j\t\r\n\x7f\x04", 6), ["j", "TAB", "ENTER_CR", "ENTER_LF", "BACKSPACE", "CTRL_D"])

    def test_utf8_character_is_one_key(self) -> None:
        self.assertEqual(self._keys("é日".encode("utf-8"), 2), ["é", "日"])

    def test_arrow_and_tilde_sequences(self) -> None:
        data = b"\x1b[A\x1b[B\x1b[5~\x1b[6~\x1b[Z\x1bOH"
        self.assertEqual(self._keys(data, 6), ["UP", "DOWN", "PAGE_UP", "PAGE_DOWN", "SHIFT_TAB", "HOME"])

    def test_alt_arrows(self) -> None:
        self.assertEqual(self._keys(b"\x1b[1;3D\x1bf", 2), ["ALT_LEFT", "ALT_RIGHT"])

    def test_lone_escape_and_replayed_byte(self) -> None:
        self.assertEqual(self._keys(b"\x1bx", 2), ["ESC", "x"])

    def test_timeout_returns_empty_token(self) -> None:
        self.assertEqual(reader.read_key(self.read_fd, timeout_ms=0), "")


if __name__ == "__main__":
    unittest.main()
