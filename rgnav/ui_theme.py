"""UI theme definitions and selection helpers.

Themes are UI-only ANSI palettes (borders, titles, selection, status row).
Syntax highlighting of the preview comes from the formatter, not the theme.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UITheme:
    """Semantic ANSI palette used by the frame renderer."""

    name: str
    border: str
    title: str
    selected: str
    status: str
    reset: str


DEFAULT_THEME = UITheme(
    name="default",
    border="\033[2m",
    title="\033[1m",
    selected="\033[1;37;44m",
    status="\033[2;38;5;250m",
    reset="\033[0m",
)

OCEAN_THEME = UITheme(
    name="ocean",
    border="\033[2;38;5;31m",
    title="\033[1;38;5;45m",
    selected="\033[1;38;5;231;48;5;24m",
    status="\033[2;38;5;110m",
    reset="\033[0m",
)

_THEMES: dict[str, UITheme] = {
    DEFAULT_THEME.name: DEFAULT_THEME,
    OCEAN_THEME.name: OCEAN_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to default."""
    if not name:
        return DEFAULT_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    return DEFAULT_THEME.name


def resolve_theme(name: str | None) -> UITheme:
    return _THEMES[normalize_theme_name(name)]


__all__ = [
    "UITheme",
    "DEFAULT_THEME",
    "OCEAN_THEME",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
]
