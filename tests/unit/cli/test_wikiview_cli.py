"""CLI argument handling, ``--render`` output and viewer launch tests."""

from __future__ import annotations

import io
import json
import logging
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from wikiview import cli
from wikiview.theme import OCEAN_THEME, PLAIN_THEME

MAIN_PAGE = {
    "title": "Main Page",
    "sections": [
        {"title": "", "blocks": ["Welcome to the encyclopedia."]},
        {"title": "Featured", "blocks": [{"type": "list", "items": ["Cats", "Dogs"]}]},
    ],
}


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.root = Path(tmp.name)
        self.pages = self.root / "pages"
        self.pages.mkdir()
        (self.pages / "Main_Page.json").write_text(json.dumps(MAIN_PAGE), encoding="utf-8")
        self.config_path = self.root / "config.json"
        for patcher in (
            mock.patch("wikiview.config.CONFIG_PATH", self.config_path),
            mock.patch("wikiview.cli.configure_logging"),
        ):
            patcher.start()
            self.addCleanup(patcher.stop)

    def _render(self, *argv: str) -> str:
        stdout = io.StringIO()
        with mock.patch("sys.stdout", stdout), mock.patch("wikiview.cli.run_viewer") as run_viewer:
            cli.main(["--pages-dir", str(self.pages), "--render", "--no-color", *argv])
        run_viewer.assert_not_called()
        return stdout.getvalue()

    def test_render_prints_default_page(self) -> None:
        self.assertEqual(
            self._render("--max-cols", "40"),
            "Main Page\n\nWelcome to the encyclopedia.\n\n## Featured\n\n• Cats\n• Dogs\n",
        )

    def test_render_wraps_to_max_cols(self) -> None:
        output = self._render("--max-cols", "12")

        self.assertIn("Welcome to\nthe\nencyclopedia\n.\n", output)

    def test_render_uses_terminal_width_without_max_cols(self) -> None:
        with mock.patch("wikiview.cli._default_render_width", return_value=15):
            output = self._render()

        self.assertIn("Welcome to the\n", output)

    def test_render_missing_page_exits_with_message(self) -> None:
        with self.assertRaises(SystemExit) as raised:
            self._render("Nowhere")

        self.assertIn("not found", str(raised.exception.code))

    def test_missing_pages_dir_exits(self) -> None:
        with self.assertRaises(SystemExit):
            cli.main(["--pages-dir", str(self.root / "absent"), "--render"])

    def test_invalid_max_cols_is_rejected(self) -> None:
        with mock.patch("sys.stderr", io.StringIO()), self.assertRaises(SystemExit):
            cli.main(["--pages-dir", str(self.pages), "--render", "--max-cols", "0"])

    def test_interactive_mode_launches_viewer(self) -> None:
        with mock.patch("wikiview.cli.run_viewer") as run_viewer:
            cli.main(["--pages-dir", str(self.pages), "Cats", "--no-color"])

        run_viewer.assert_called_once()
        store, page, theme = run_viewer.call_args.args
        self.assertEqual(store.root, self.pages)
        self.assertEqual(page, "Cats")
        self.assertIs(theme, PLAIN_THEME)

    def test_theme_option_is_remembered(self) -> None:
        with mock.patch("wikiview.cli.run_viewer") as run_viewer:
            cli.main(["--pages-dir", str(self.pages), "--theme", "Ocean"])
        self.assertIs(run_viewer.call_args.args[2], OCEAN_THEME)

        with mock.patch("wikiview.cli.run_viewer") as run_viewer:
            cli.main(["--pages-dir", str(self.pages)])
        self.assertIs(run_viewer.call_args.args[2], OCEAN_THEME)
        self.assertEqual(json.loads(self.config_path.read_text(encoding="utf-8"))["theme"], "ocean")

    def test_unknown_theme_exits(self) -> None:
        with self.assertRaises(SystemExit):
            cli.main(["--pages-dir", str(self.pages), "--theme", "neon"])

    def test_pages_dir_falls_back_to_config(self) -> None:
        self.config_path.write_text(json.dumps({"pages_dir": str(self.pages)}), encoding="utf-8")

        with mock.patch("wikiview.cli.run_viewer") as run_viewer:
            cli.main([])

        self.assertEqual(run_viewer.call_args.args[0].root, self.pages)
        self.assertEqual(run_viewer.call_args.args[1], cli.DEFAULT_PAGE)

    def test_run_viewer_requires_a_terminal(self) -> None:
        with mock.patch("wikiview.cli.os.isatty", return_value=False), mock.patch("sys.stdin"), mock.patch("sys.stdout"):
            with self.assertRaises(SystemExit):
                cli.run_viewer(mock.Mock(), "Main Page", PLAIN_THEME)


class ConfigureLoggingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.logger = logging.getLogger("wikiview")
        saved_handlers = list(self.logger.handlers)
        saved_level = self.logger.level

        def restore() -> None:
            self.logger.handlers[:] = saved_handlers
            self.logger.setLevel(saved_level)

        self.addCleanup(restore)

    def test_log_file_receives_records(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            log_path = Path(tmp) / "wikiview.log"
            cli.configure_logging(log_path, "info", interactive=True)

            logging.getLogger("wikiview.test").info("hello log")
            for handler in self.logger.handlers:
                handler.flush()
                handler.close()

            self.assertIn("INFO wikiview.test: hello log", log_path.read_text(encoding="utf-8"))

    def test_interactive_without_file_discards_records(self) -> None:
        cli.configure_logging(None, "DEBUG", interactive=True)

        self.assertIsInstance(self.logger.handlers[-1], logging.NullHandler)
        self.assertEqual(self.logger.level, logging.DEBUG)


if __name__ == "__main__":
    unittest.main()
