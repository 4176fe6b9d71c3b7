"""Tests for escape-aware clipping and SGR-to-span conversion.

The preview pane relies on these to turn formatter colors into spans and to
bound long lines without cutting escape sequences in half.
"""

from __future__ import annotations

import unittest

from rgnav import ansi as ansi_mod
from rgnav.ansi import PLAIN_STYLE, StyledSpan, StyledText, TextStyle
from rgnav.errors import AnsiParseError


class ClipAnsiLineTests(unittest.TestCase):
    def test_escape_sequences_do_not_count_toward_width(self) -> None:
        text = "\x1b[31mabcdef\x1b[0m"
        self.assertEqual(ansi_mod.clip_ansi_line(text, 3), "\x1b[31mabc")

    def test_trailing_reset_after_last_visible_column_is_kept(self) -> None:
        text = "\x1b[31mabc\x1b[0mdef"
        self.assertEqual(ansi_mod.clip_ansi_line(text, 3), "\x1b[31mabc\x1b[0m")

    def test_never_splits_an_escape_sequence(self) -> None:
        text = "ab\x1b[38;5;208mcd"
        for width in range(0, 6):
            with self.subTest(width=width):
                clipped = ansi_mod.clip_ansi_line(text, width)
                # Any ESC kept must start a complete sequence.
                idx = clipped.find("\x1b")
                if idx != -1:
                    self.assertIsNotNone(ansi_mod.ANSI_ESCAPE_RE.match(clipped, idx))

    def test_tabs_expand_to_stops(self) -> None:
        self.assertEqual(ansi_mod.clip_ansi_line("a\tb", 20), "a       b")

    def test_wide_characters_use_two_columns(self) -> None:
        self.assertEqual(ansi_mod.clip_ansi_line("日本語", 5), "日本")


class AnsiToStyledTextTests(unittest.TestCase):
    def test_sgr_applies_until_next_sequence(self) -> None:
        styled = ansi_mod.ansi_to_styled_text("\x1b[1;31mfoo\x1b[0mbar")
        self.assertEqual(
            styled.lines,
            ((StyledSpan("foo", TextStyle(fg=1, bold=True)), StyledSpan("bar", PLAIN_STYLE)),),
        )

    def test_style_resets_at_end_of_line(self) -> None:
        styled = ansi_mod.ansi_to_styled_text("\x1b[32mgreen\nplain\n")
        self.assertEqual(len(styled.lines), 2)
        self.assertEqual(styled.lines[1], (StyledSpan("plain"),))

    def test_extended_colors(self) -> None:
        styled = ansi_mod.ansi_to_styled_text("\x1b[38;5;208;48;2;1;2;3mx")
        (span,) = styled.lines[0]
        self.assertEqual(span.style.fg, 208)
        self.assertEqual(span.style.bg, (1, 2, 3))

    def test_bright_colors_and_attribute_toggles(self) -> None:
        styled = ansi_mod.ansi_to_styled_text("\x1b[92;3;4mab\x1b[23;24;39mcd")
        first, second = styled.lines[0]
        self.assertEqual(first.style, TextStyle(fg=10, italic=True, underline=True))
        self.assertEqual(second.style, PLAIN_STYLE)

    def test_non_sgr_csi_sequences_are_dropped(self) -> None:
        styled = ansi_mod.ansi_to_styled_text("ab\x1b[Kcd")
        self.assertEqual(styled.plain_lines(), ["abcd"])

    def test_empty_sgr_means_reset(self) -> None:
        styled = ansi_mod.ansi_to_styled_text("\x1b[1mA\x1b[mB")
        self.assertEqual(styled.lines[0][1], StyledSpan("B", PLAIN_STYLE))

    def test_carriage_returns_are_stripped_from_line_ends(self) -> None:
        styled = ansi_mod.ansi_to_styled_text("one\r\ntwo\r\n")
        self.assertEqual(styled.plain_lines(), ["one", "two"])

    def test_malformed_escape_data_raises(self) -> None:
        for text in (
            "abc\x1b",
            "\x1b(Bxyz",
            "\x1b[38;5m",
            "\x1b[38;5;300m",
            "\x1b[38;2;1;2m",
            "\x1b[38;7;1m",
            "\x1b[?1m",
        ):
            with self.subTest(text=text):
                with self.assertRaises(AnsiParseError):
                    ansi_mod.ansi_to_styled_text(text)


class StyleToSgrTests(unittest.TestCase):
    def test_round_trips_through_apply_sgr(self) -> None:
        for style in (
            TextStyle(fg=3, bold=True),
            TextStyle(fg=12, bg=4, underline=True),
            TextStyle(fg=200, bg=(10, 20, 30), italic=True, reverse=True),
            TextStyle(dim=True, strikethrough=True),
        ):
            with self.subTest(style=style):
                sequence = ansi_mod.style_to_sgr(style)
                self.assertEqual(ansi_mod.apply_sgr(PLAIN_STYLE, sequence[2:-1]), style)

    def test_plain_style_is_a_bare_reset(self) -> None:
        self.assertEqual(ansi_mod.style_to_sgr(PLAIN_STYLE), "\x1b[0m")


class ClipStyledLineTests(unittest.TestCase):
    def test_clips_across_spans(self) -> None:
        red = TextStyle(fg=1)
        line = (StyledSpan("abc", red), StyledSpan("def"))
        spans, cols = ansi_mod.clip_styled_line(line, 4)
        self.assertEqual(spans, [StyledSpan("abc", red), StyledSpan("d")])
        self.assertEqual(cols, 4)

    def test_plain_text_helper_splits_lines(self) -> None:
        styled = StyledText.plain("Error loading preview")
        self.assertEqual(styled.plain_lines(), ["Error loading preview"])


if __name__ == "__main__":
    unittest.main()
