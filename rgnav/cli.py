"""Command-line front door for rgnav.

Parses CLI options, drains the piped ``rg --json`` stream, and opens the
controlling terminal. Then dispatches into the interactive browser loop.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from . import config
from .errors import RgnavError
from .formatter import FORMATTER_NAMES, formatter_for_name
from .loop import run_main_loop
from .matches import MatchStore, read_piped_matches
from .preview import PreviewBuilder
from .render import FrameRenderer
from .selection import SelectionController
from .terminal import TerminalController, open_controlling_tty
from .ui_theme import UITheme, available_theme_names, resolve_theme

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rgnav",
        description="Browse `rg --json` results with a syntax-highlighted preview.",
        epilog="Example: rg --json TODO | rgnav",
    )
    parser.add_argument(
        "--formatter",
        choices=FORMATTER_NAMES,
        default=None,
        help="Preview formatter (default: config value, else bat).",
    )
    parser.add_argument("--bat", dest="bat_command", default=None, help="bat executable to run for previews.")
    parser.add_argument("--style", default=None, help="Pygments style name (for the pygments formatter).")
    parser.add_argument(
        "--theme",
        choices=available_theme_names(),
        default=None,
        help="UI theme name.",
    )
    parser.add_argument("--verbose", action="store_true", help="Log debug details to stderr.")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def browse(store: MatchStore, preview_builder: PreviewBuilder, theme: UITheme) -> None:
    """Open the controlling tty and run the browser loop on it."""
    tty_fd = open_controlling_tty()
    try:
        terminal = TerminalController(stdin_fd=tty_fd, stdout_fd=tty_fd)
        run_main_loop(
            store,
            SelectionController(),
            preview_builder,
            terminal,
            tty_fd,
            FrameRenderer(tty_fd, theme),
        )
    finally:
        os.close(tty_fd)


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and launch the browser on piped search results.

    Startup failures (interactive stdin, no controlling terminal) exit with a
    message and a non-zero status before the terminal is touched.
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    formatter_name = args.formatter or config.load_formatter_name()
    formatter = formatter_for_name(
        formatter_name,
        bat_command=args.bat_command or config.load_bat_command(),
        style=args.style or config.load_style_name(),
    )
    theme = resolve_theme(args.theme or config.load_theme_name())

    try:
        store = read_piped_matches(sys.stdin)
        logger.debug("browsing %d matches with %s previews", len(store), formatter_name)
        browse(store, PreviewBuilder(formatter), theme)
    except RgnavError as exc:
        raise SystemExit(str(exc)) from exc


if __name__ == "__main__":
    main()
