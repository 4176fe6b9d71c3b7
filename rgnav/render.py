"""Frame composition for the split results/preview view.

Builds a complete ANSI frame (two boxed panes and a status row) and writes it
in a single call. Preview spans are re-emitted as SGR sequences here, so the
only escape codes reaching the terminal are ones this module generates.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .ansi import StyledSpan, StyledText, char_display_width, clip_styled_line, sanitize_terminal_text, style_to_sgr
from .ui_theme import DEFAULT_THEME, UITheme

RESULTS_TITLE = "Search Results"
PREVIEW_TITLE = "Code Preview"
KEY_HINTS = "↑/↓ move  q quit"
LEFT_PANE_PERCENT = 30
MIN_PANE_WIDTH = 12
DEFAULT_TERMINAL_SIZE = (80, 24)


@dataclass(frozen=True)
class FrameGeometry:
    columns: int
    lines: int
    left_width: int
    right_width: int
    pane_rows: int

    @property
    def inner_rows(self) -> int:
        return max(0, self.pane_rows - 2)


def compute_geometry(columns: int, lines: int) -> FrameGeometry:
    """Split the screen 30/70 between the results list and the preview."""
    columns = max(2 * MIN_PANE_WIDTH, columns)
    lines = max(4, lines)
    left = max(MIN_PANE_WIDTH, (columns * LEFT_PANE_PERCENT) // 100)
    left = min(left, columns - MIN_PANE_WIDTH)
    return FrameGeometry(
        columns=columns,
        lines=lines,
        left_width=left,
        right_width=columns - left,
        pane_rows=lines - 1,
    )


def terminal_size(fd: int) -> tuple[int, int]:
    try:
        size = os.get_terminal_size(fd)
    except OSError:
        return DEFAULT_TERMINAL_SIZE
    return size.columns, size.lines


def clip_plain(text: str, max_cols: int) -> tuple[str, int]:
    out: list[str] = []
    col = 0
    for ch in text:
        w = char_display_width(ch, col)
        if col + w > max_cols:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
    return "".join(out), col


def _box_top(title: str, width: int, theme: UITheme) -> str:
    inner = max(0, width - 2)
    label, label_cols = clip_plain(f" {title} ", max(0, inner - 1))
    fill = "─" * max(0, inner - 1 - label_cols)
    return f"{theme.border}┌─{theme.reset}{theme.title}{label}{theme.reset}{theme.border}{fill}┐{theme.reset}"


def _box_bottom(width: int, theme: UITheme) -> str:
    return f"{theme.border}└{'─' * max(0, width - 2)}┘{theme.reset}"


def _box_row(content: str, content_cols: int, width: int, theme: UITheme) -> str:
    pad = " " * max(0, width - 2 - content_cols)
    return f"{theme.border}│{theme.reset}{content}{pad}{theme.border}│{theme.reset}"


def visible_list_start(selected: int | None, list_start: int, rows: int, count: int) -> int:
    """Scroll the list just enough to keep ``selected`` on screen."""
    if rows <= 0:
        return 0
    if selected is not None:
        if selected < list_start:
            list_start = selected
        elif selected >= list_start + rows:
            list_start = selected - rows + 1
    return max(0, min(list_start, max(0, count - rows)))


def _list_rows(
    labels: list[str],
    selected: int | None,
    list_start: int,
    geometry: FrameGeometry,
    theme: UITheme,
) -> list[str]:
    inner = max(0, geometry.left_width - 2)
    rows = [_box_top(RESULTS_TITLE, geometry.left_width, theme)]
    for offset in range(geometry.inner_rows):
        idx = list_start + offset
        if idx >= len(labels):
            rows.append(_box_row("", 0, geometry.left_width, theme))
            continue
        text, cols = clip_plain(sanitize_terminal_text(labels[idx]), inner)
        if idx == selected:
            text = f"{theme.selected}{text}{' ' * (inner - cols)}{theme.reset}"
            cols = inner
        rows.append(_box_row(text, cols, geometry.left_width, theme))
    rows.append(_box_bottom(geometry.left_width, theme))
    return rows


def _preview_rows(preview: StyledText | None, geometry: FrameGeometry, theme: UITheme) -> list[str]:
    inner = max(0, geometry.right_width - 2)
    lines = preview.lines if preview is not None else ()
    rows = [_box_top(PREVIEW_TITLE, geometry.right_width, theme)]
    for offset in range(geometry.inner_rows):
        if offset >= len(lines):
            rows.append(_box_row("", 0, geometry.right_width, theme))
            continue
        # Escape control bytes before clipping so the column count matches what is written.
        safe = tuple(StyledSpan(sanitize_terminal_text(span.text), span.style) for span in lines[offset])
        spans, cols = clip_styled_line(safe, inner)
        parts: list[str] = []
        styled = False
        for span in spans:
            if span.style.is_plain:
                if styled:
                    parts.append("\033[0m")
                    styled = False
            else:
                parts.append(style_to_sgr(span.style))
                styled = True
            parts.append(span.text)
        if styled:
            parts.append("\033[0m")
        rows.append(_box_row("".join(parts), cols, geometry.right_width, theme))
    rows.append(_box_bottom(geometry.right_width, theme))
    return rows


def build_status_line(left_text: str, width: int, right_text: str = KEY_HINTS) -> str:
    usable = max(1, width - 1)
    if usable <= len(right_text):
        return right_text[-usable:]
    left_limit = max(0, usable - len(right_text) - 1)
    left = left_text[:left_limit]
    gap = " " * (usable - len(left) - len(right_text))
    return f"{left}{gap}{right_text}"


def match_position_text(selected: int | None, count: int) -> str:
    if selected is None or count == 0:
        return " no matches"
    return f" {selected + 1}/{count}"


def compose_frame(
    labels: list[str],
    selected: int | None,
    preview: StyledText | None,
    geometry: FrameGeometry,
    list_start: int = 0,
    theme: UITheme = DEFAULT_THEME,
) -> str:
    """Return the full ANSI frame for one screen state."""
    left = _list_rows(labels, selected, list_start, geometry, theme)
    right = _preview_rows(preview, geometry, theme)
    out: list[str] = ["\033[H\033[J"]
    for row, (left_row, right_row) in enumerate(zip(left, right), start=1):
        out.append(f"\033[{row};1H{left_row}{right_row}")
    status = build_status_line(match_position_text(selected, len(labels)), geometry.columns)
    out.append(f"\033[{geometry.lines};1H{theme.status}{status}{theme.reset}")
    return "".join(out)


class FrameRenderer:
    """Rendering sink: paints labels, the selected row and a preview onto ``fd``."""

    def __init__(self, fd: int, theme: UITheme = DEFAULT_THEME) -> None:
        self.fd = fd
        self.theme = theme
        self.list_start = 0

    def size(self) -> tuple[int, int]:
        return terminal_size(self.fd)

    def draw(self, labels: list[str], selected: int | None, preview: StyledText | None) -> None:
        columns, lines = self.size()
        geometry = compute_geometry(columns, lines)
        self.list_start = visible_list_start(selected, self.list_start, geometry.inner_rows, len(labels))
        frame = compose_frame(labels, selected, preview, geometry, self.list_start, self.theme)
        os.write(self.fd, frame.encode("utf-8", errors="replace"))
