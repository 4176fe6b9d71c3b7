"""ANSI-aware text measurement and SGR-to-span conversion.

Clipping keeps escape sequences whole while counting only visible columns.
Conversion turns colorized formatter output into styled spans the renderer
can re-emit, so raw formatter bytes never reach the terminal directly.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, replace
from typing import Union

from .errors import AnsiParseError

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
TAB_STOP = 8

# Palette index 0-255, or a 24-bit RGB triple.
Color = Union[int, tuple[int, int, int]]


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    Tabs are expanded into spaces so clipping aligns with rendered terminal cells.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if ch == "\t":
            if col + w > max_cols:
                break
            out.append(" " * w)
            col += w
            i += 1
            continue
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
        i += 1

    # Keep trailing style resets that sit right after the last visible column.
    while i < n and text[i] == "\x1b":
        match = ANSI_ESCAPE_RE.match(text, i)
        if not match:
            break
        out.append(match.group(0))
        i = match.end()

    return "".join(out)


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def strip_ansi(text: str) -> str:
    """Drop well-formed escape sequences and neutralize any leftover control bytes."""
    return sanitize_terminal_text(ANSI_ESCAPE_RE.sub("", text))


@dataclass(frozen=True)
class TextStyle:
    fg: Color | None = None
    bg: Color | None = None
    bold: bool = False
    dim: bool = False
    italic: bool = False
    underline: bool = False
    reverse: bool = False
    strikethrough: bool = False

    @property
    def is_plain(self) -> bool:
        return self == PLAIN_STYLE


PLAIN_STYLE = TextStyle()


@dataclass(frozen=True)
class StyledSpan:
    text: str
    style: TextStyle = PLAIN_STYLE


StyledLine = tuple[StyledSpan, ...]


@dataclass(frozen=True)
class StyledText:
    """Render-ready text: one tuple of spans per line."""

    lines: tuple[StyledLine, ...] = ()

    @classmethod
    def plain(cls, text: str) -> StyledText:
        return cls(tuple((StyledSpan(line),) if line else () for line in _split_lines(text)))

    def plain_lines(self) -> list[str]:
        return ["".join(span.text for span in line) for line in self.lines]


def _split_lines(text: str) -> list[str]:
    if not text:
        return []
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    if text.endswith("\n"):
        lines.pop()
    return lines


def _checked_channel(value: int, sequence: str) -> int:
    if not 0 <= value <= 255:
        raise AnsiParseError(f"color component out of range in {sequence!r}")
    return value


def _extended_color(values: list[int], index: int, sequence: str) -> tuple[Color, int]:
    """Decode ``38;5;n`` / ``38;2;r;g;b`` starting at ``values[index]``.

    Returns the color and the number of parameters consumed.
    """
    if index + 1 >= len(values):
        raise AnsiParseError(f"incomplete extended color in {sequence!r}")
    mode = values[index + 1]
    if mode == 5:
        if index + 2 >= len(values):
            raise AnsiParseError(f"missing palette index in {sequence!r}")
        return _checked_channel(values[index + 2], sequence), 3
    if mode == 2:
        if index + 4 >= len(values):
            raise AnsiParseError(f"incomplete RGB color in {sequence!r}")
        rgb = tuple(_checked_channel(v, sequence) for v in values[index + 2 : index + 5])
        return (rgb[0], rgb[1], rgb[2]), 5
    raise AnsiParseError(f"unknown extended color mode {mode} in {sequence!r}")


def apply_sgr(style: TextStyle, params: str) -> TextStyle:
    """Return ``style`` updated by one SGR parameter string (the part between ``ESC[`` and ``m``)."""
    sequence = f"\x1b[{params}m"
    try:
        values = [int(part) if part else 0 for part in params.split(";")] if params else [0]
    except ValueError as exc:
        raise AnsiParseError(f"non-numeric SGR parameter in {sequence!r}") from exc

    i = 0
    while i < len(values):
        code = values[i]
        if code in (38, 48):
            color, consumed = _extended_color(values, i, sequence)
            style = replace(style, fg=color) if code == 38 else replace(style, bg=color)
            i += consumed
            continue
        if code == 0:
            style = PLAIN_STYLE
        elif code == 1:
            style = replace(style, bold=True)
        elif code == 2:
            style = replace(style, dim=True)
        elif code == 3:
            style = replace(style, italic=True)
        elif code == 4:
            style = replace(style, underline=True)
        elif code == 7:
            style = replace(style, reverse=True)
        elif code == 9:
            style = replace(style, strikethrough=True)
        elif code == 22:
            style = replace(style, bold=False, dim=False)
        elif code == 23:
            style = replace(style, italic=False)
        elif code == 24:
            style = replace(style, underline=False)
        elif code == 27:
            style = replace(style, reverse=False)
        elif code == 29:
            style = replace(style, strikethrough=False)
        elif 30 <= code <= 37:
            style = replace(style, fg=code - 30)
        elif code == 39:
            style = replace(style, fg=None)
        elif 40 <= code <= 47:
            style = replace(style, bg=code - 40)
        elif code == 49:
            style = replace(style, bg=None)
        elif 90 <= code <= 97:
            style = replace(style, fg=code - 90 + 8)
        elif 100 <= code <= 107:
            style = replace(style, bg=code - 100 + 8)
        # Blink, fonts, and other rarely used attributes are ignored.
        i += 1
    return style


def _parse_styled_line(line: str) -> StyledLine:
    spans: list[StyledSpan] = []
    chunk: list[str] = []
    style = PLAIN_STYLE
    i = 0
    n = len(line)
    while i < n:
        if line[i] != "\x1b":
            chunk.append(line[i])
            i += 1
            continue
        match = ANSI_ESCAPE_RE.match(line, i)
        if match is None:
            raise AnsiParseError(f"malformed escape sequence at column {i}")
        seq = match.group(0)
        if seq.endswith("m"):
            if chunk:
                spans.append(StyledSpan("".join(chunk), style))
                chunk = []
            style = apply_sgr(style, seq[2:-1])
        # Non-SGR CSI sequences (cursor movement, erase) have no meaning in a pane.
        i = match.end()
    if chunk:
        spans.append(StyledSpan("".join(chunk), style))
    return tuple(spans)


def ansi_to_styled_text(text: str) -> StyledText:
    """Convert colorized text into ``StyledText``.

    Each SGR sequence styles the characters that follow it until the next
    sequence or the end of the line; every line starts unstyled. Raises
    ``AnsiParseError`` for malformed escape data.
    """
    return StyledText(tuple(_parse_styled_line(line) for line in _split_lines(text)))


def _color_params(color: Color, base: int) -> str:
    if isinstance(color, tuple):
        r, g, b = color
        return f"{base + 8};2;{r};{g};{b}"
    if color < 8:
        return str(base + color)
    if color < 16:
        return str(base + 60 + color - 8)
    return f"{base + 8};5;{color}"


def style_to_sgr(style: TextStyle) -> str:
    """Return one SGR sequence that resets and then applies ``style``."""
    params = ["0"]
    if style.bold:
        params.append("1")
    if style.dim:
        params.append("2")
    if style.italic:
        params.append("3")
    if style.underline:
        params.append("4")
    if style.reverse:
        params.append("7")
    if style.strikethrough:
        params.append("9")
    if style.fg is not None:
        params.append(_color_params(style.fg, 30))
    if style.bg is not None:
        params.append(_color_params(style.bg, 40))
    return f"\x1b[{';'.join(params)}m"


def clip_styled_line(line: StyledLine, max_cols: int) -> tuple[list[StyledSpan], int]:
    """Clip spans to ``max_cols`` display columns.

    Returns the clipped spans and the number of columns they occupy. Tabs are
    expanded relative to the start of the line.
    """
    out: list[StyledSpan] = []
    col = 0
    for span in line:
        if col >= max_cols:
            break
        chars: list[str] = []
        for ch in span.text:
            w = char_display_width(ch, col)
            if col + w > max_cols:
                break
            chars.append(" " * w if ch == "\t" else ch)
            col += w
        else:
            if chars:
                out.append(StyledSpan("".join(chars), span.style))
            continue
        if chars:
            out.append(StyledSpan("".join(chars), span.style))
        break
    return out, col
