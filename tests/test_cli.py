"""CLI startup, option precedence, and exit-status behavior tests.

Verifies how ``rgnav.cli.main`` validates stdin and wires the browser.
The interactive loop itself is patched out.
"""

from __future__ import annotations

import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from rgnav import cli
from rgnav.errors import TerminalUnavailableError
from rgnav.formatter import BatFormatter, PygmentsFormatter
from rgnav.ui_theme import DEFAULT_THEME, OCEAN_THEME


class _FakeTty(io.StringIO):
    def isatty(self) -> bool:
        return True


_PIPED = '{"data":{"path":{"text":"a.rs"},"line_number":3}}\n{"type":"summary"}\n'


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.config_path = Path(tmp.name) / "config.json"
        patcher = mock.patch("rgnav.config.CONFIG_PATH", self.config_path)
        patcher.start()
        self.addCleanup(patcher.stop)
        logging_patcher = mock.patch("rgnav.cli.configure_logging")
        logging_patcher.start()
        self.addCleanup(logging_patcher.stop)

    def test_interactive_stdin_exits_non_zero_with_message(self) -> None:
        with mock.patch("rgnav.cli.sys.stdin", _FakeTty()), mock.patch("rgnav.cli.browse") as browse_mock:
            with self.assertRaises(SystemExit) as ctx:
                cli.main([])

        browse_mock.assert_not_called()
        self.assertIn("No piped input detected", str(ctx.exception.code))

    def test_closed_stdin_exits_with_message(self) -> None:
        with mock.patch("rgnav.cli.sys.stdin", None), mock.patch("rgnav.cli.browse") as browse_mock:
            with self.assertRaises(SystemExit) as ctx:
                cli.main([])

        browse_mock.assert_not_called()
        self.assertIn("No piped input detected", str(ctx.exception.code))

    def test_piped_input_is_loaded_and_browsed_with_defaults(self) -> None:
        with mock.patch("rgnav.cli.sys.stdin", io.StringIO(_PIPED)), mock.patch("rgnav.cli.browse") as browse_mock:
            cli.main([])

        store, builder, theme = browse_mock.call_args.args
        self.assertEqual(store.labels(), ["a.rs:3"])
        self.assertIsInstance(builder.formatter, BatFormatter)
        self.assertEqual(builder.formatter.bat_command, "bat")
        self.assertIs(theme, DEFAULT_THEME)

    def test_config_values_apply_when_flags_are_absent(self) -> None:
        self.config_path.write_text(json.dumps({"formatter": "pygments", "theme": "ocean"}), encoding="utf-8")
        with mock.patch("rgnav.cli.sys.stdin", io.StringIO(_PIPED)), mock.patch("rgnav.cli.browse") as browse_mock:
            cli.main([])

        _store, builder, theme = browse_mock.call_args.args
        self.assertIsInstance(builder.formatter, PygmentsFormatter)
        self.assertIs(theme, OCEAN_THEME)

    def test_flags_override_config(self) -> None:
        self.config_path.write_text(json.dumps({"formatter": "pygments", "bat_command": "batcat"}), encoding="utf-8")
        with mock.patch("rgnav.cli.sys.stdin", io.StringIO(_PIPED)), mock.patch("rgnav.cli.browse") as browse_mock:
            cli.main(["--formatter", "bat", "--bat", "/opt/bat"])

        _store, builder, _theme = browse_mock.call_args.args
        self.assertIsInstance(builder.formatter, BatFormatter)
        self.assertEqual(builder.formatter.bat_command, "/opt/bat")

    def test_unknown_formatter_flag_is_rejected(self) -> None:
        with mock.patch("sys.stderr", io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                cli.main(["--formatter", "less"])
        self.assertEqual(ctx.exception.code, 2)

    def test_missing_controlling_terminal_exits_with_message(self) -> None:
        with mock.patch("rgnav.cli.sys.stdin", io.StringIO(_PIPED)), mock.patch(
            "rgnav.cli.open_controlling_tty", side_effect=TerminalUnavailableError("Cannot open terminal /dev/tty")
        ):
            with self.assertRaises(SystemExit) as ctx:
                cli.main([])
        self.assertIn("Cannot open terminal", str(ctx.exception.code))


class BrowseTests(unittest.TestCase):
    def test_browse_runs_loop_on_tty_and_closes_it(self) -> None:
        with mock.patch("rgnav.cli.open_controlling_tty", return_value=11), mock.patch(
            "rgnav.cli.TerminalController"
        ) as terminal_cls, mock.patch("rgnav.cli.run_main_loop") as loop_mock, mock.patch(
            "rgnav.cli.os.close"
        ) as close_mock:
            cli.browse(mock.sentinel.store, mock.sentinel.builder, DEFAULT_THEME)

        terminal_cls.assert_called_once_with(stdin_fd=11, stdout_fd=11)
        store, selection, builder, terminal, key_fd, sink = loop_mock.call_args.args
        self.assertIs(store, mock.sentinel.store)
        self.assertEqual(selection.index, 0)
        self.assertIs(builder, mock.sentinel.builder)
        self.assertIs(terminal, terminal_cls.return_value)
        self.assertEqual(key_fd, 11)
        self.assertEqual(sink.fd, 11)
        close_mock.assert_called_once_with(11)

    def test_browse_closes_tty_when_loop_fails(self) -> None:
        with mock.patch("rgnav.cli.open_controlling_tty", return_value=11), mock.patch(
            "rgnav.cli.TerminalController"
        ), mock.patch("rgnav.cli.run_main_loop", side_effect=RuntimeError("boom")), mock.patch(
            "rgnav.cli.os.close"
        ) as close_mock:
            with self.assertRaises(RuntimeError):
                cli.browse(mock.sentinel.store, mock.sentinel.builder, DEFAULT_THEME)
        close_mock.assert_called_once_with(11)


if __name__ == "__main__":
    unittest.main()
