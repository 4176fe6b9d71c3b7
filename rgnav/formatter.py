"""Pretty-printers that turn a file line range into colorized bytes.

``BatFormatter`` shells out to ``bat``; ``PygmentsFormatter`` highlights in
process for machines without ``bat``. Both raise ``FormatterError`` on failure
and leave the fallback decision to the preview builder.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Protocol

from .errors import FormatterError


DEFAULT_BAT_COMMAND = "bat"
DEFAULT_STYLE = "monokai"
FORMATTER_NAMES: tuple[str, ...] = ("bat", "pygments")

_PYGMENTS_VALID_STYLES: set[str] = set()
_PYGMENTS_INVALID_STYLES: set[str] = set()


class Formatter(Protocol):
    def __call__(self, path: str, start_line: int, end_line: int) -> bytes: ...


def bat_command_args(bat_command: str, path: str, start_line: int, end_line: int) -> list[str]:
    """Build argv for a plain, unpaged, always-colored ``bat`` line-range print."""
    return [
        bat_command,
        "--style",
        "plain",
        "--paging",
        "never",
        "--color",
        "always",
        "--line-range",
        f"{start_line}:{end_line}",
        path,
    ]


class BatFormatter:
    def __init__(self, bat_command: str = DEFAULT_BAT_COMMAND) -> None:
        self.bat_command = bat_command

    def __call__(self, path: str, start_line: int, end_line: int) -> bytes:
        cmd = bat_command_args(self.bat_command, path, start_line, end_line)
        try:
            proc = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=False,
            )
        except OSError as exc:
            raise FormatterError(f"failed to run {self.bat_command}: {exc}") from exc
        if proc.returncode != 0:
            stderr_text = proc.stderr.decode("utf-8", errors="replace").strip()
            raise FormatterError(stderr_text or f"{self.bat_command} failed with exit code {proc.returncode}")
        return proc.stdout


def read_text(path: Path) -> str:
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


def _normalize_style(style: str) -> str:
    from pygments.styles import get_style_by_name
    from pygments.util import ClassNotFound

    if style in _PYGMENTS_VALID_STYLES:
        return style
    if style in _PYGMENTS_INVALID_STYLES:
        return DEFAULT_STYLE

    try:
        get_style_by_name(style)
    except ClassNotFound:
        _PYGMENTS_INVALID_STYLES.add(style)
        return DEFAULT_STYLE
    _PYGMENTS_VALID_STYLES.add(style)
    return style


class PygmentsFormatter:
    """Highlight the requested window with Pygments' 256-color terminal formatter."""

    def __init__(self, style: str = DEFAULT_STYLE) -> None:
        self.style = _normalize_style(style)
        self._formatter = None

    def _terminal_formatter(self):
        if self._formatter is None:
            from pygments.formatters import Terminal256Formatter

            self._formatter = Terminal256Formatter(style=self.style)
        return self._formatter

    def __call__(self, path: str, start_line: int, end_line: int) -> bytes:
        from pygments import highlight
        from pygments.lexers import TextLexer, get_lexer_for_filename
        from pygments.util import ClassNotFound

        target = Path(path)
        try:
            source = read_text(target)
        except OSError as exc:
            raise FormatterError(f"cannot read {path}: {exc}") from exc

        # Lex the whole file so multi-line constructs above the window keep their state.
        try:
            lexer = get_lexer_for_filename(target.name, source, stripnl=False, ensurenl=True)
        except ClassNotFound:
            lexer = TextLexer(stripnl=False, ensurenl=True)
        rendered = highlight(source, lexer, self._terminal_formatter())

        # Split on "\n" only; form feeds and other separators stay inside their line.
        lines = rendered.split("\n")
        window = lines[max(0, start_line - 1) : max(0, end_line)]
        return "\n".join(window).encode("utf-8", errors="replace")


def formatter_for_name(name: str, *, bat_command: str = DEFAULT_BAT_COMMAND, style: str = DEFAULT_STYLE) -> Formatter:
    if name == "bat":
        return BatFormatter(bat_command)
    if name == "pygments":
        return PygmentsFormatter(style)
    raise ValueError(f"unknown formatter {name!r} (expected one of: {', '.join(FORMATTER_NAMES)})")
