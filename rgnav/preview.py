"""Code preview around a selected match.

Computes the line window, asks the formatter for colorized output, clips it,
and converts escape sequences into styled spans. Any failure becomes a
fallback text; previews never end the browsing session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .ansi import StyledText, ansi_to_styled_text, clip_ansi_line, strip_ansi
from .errors import AnsiParseError, FormatterError
from .formatter import Formatter
from .matches import MatchRecord

logger = logging.getLogger(__name__)

PREVIEW_RADIUS = 15
# Raw output lines are clipped to this many visible columns before styling.
MAX_LINE_WIDTH = 80
ERROR_PREVIEW_TEXT = "Error loading preview"


@dataclass(frozen=True)
class PreviewWindow:
    start_line: int
    end_line: int

    @property
    def line_range(self) -> str:
        return f"{self.start_line}:{self.end_line}"


def preview_window(line_number: int, radius: int = PREVIEW_RADIUS) -> PreviewWindow:
    """Return the 1-based inclusive window around ``line_number``.

    The start is floored at line 1; the end is left unclamped and the
    formatter is expected to stop at end of file.
    """
    return PreviewWindow(start_line=max(1, line_number - radius), end_line=line_number + radius)


def truncate_lines(text: str, max_cols: int = MAX_LINE_WIDTH) -> str:
    return "\n".join(clip_ansi_line(line.rstrip("\r"), max_cols) for line in text.split("\n"))


class PreviewBuilder:
    def __init__(self, formatter: Formatter, max_line_width: int = MAX_LINE_WIDTH) -> None:
        self.formatter = formatter
        self.max_line_width = max_line_width

    def build(self, record: MatchRecord) -> StyledText:
        window = preview_window(record.line_number)
        try:
            output = self.formatter(record.path, window.start_line, window.end_line)
        except FormatterError as exc:
            logger.debug("preview of %s:%s failed: %s", record.path, window.line_range, exc)
            return StyledText.plain(ERROR_PREVIEW_TEXT)

        text = truncate_lines(output.decode("utf-8", errors="replace"), self.max_line_width)
        try:
            return ansi_to_styled_text(text)
        except AnsiParseError as exc:
            logger.debug("showing %s unstyled: %s", record.path, exc)
            return StyledText.plain(strip_ansi(text))
