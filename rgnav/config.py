"""Read-only JSON config helpers.

Supplies defaults for the preview formatter, bat executable, Pygments style
and UI theme. All access is defensive: malformed or missing config falls back
to defaults. The file is never written.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

from .formatter import DEFAULT_BAT_COMMAND, DEFAULT_STYLE, FORMATTER_NAMES
from .ui_theme import available_theme_names

logger = logging.getLogger(__name__)

APP_NAME = "rgnav"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
DEFAULT_FORMATTER = "bat"


def load_config() -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.debug("ignoring config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _load_string(key: str) -> str | None:
    value = load_config().get(key)
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped if stripped else None


def load_formatter_name() -> str:
    """Return ``"bat"`` or ``"pygments"``; anything else falls back to bat."""
    value = _load_string("formatter")
    if value is None:
        return DEFAULT_FORMATTER
    value = value.lower()
    return value if value in FORMATTER_NAMES else DEFAULT_FORMATTER


def load_bat_command() -> str:
    return _load_string("bat_command") or DEFAULT_BAT_COMMAND


def load_style_name() -> str:
    """Pygments style for the in-process formatter."""
    return _load_string("style") or DEFAULT_STYLE


def load_theme_name() -> str | None:
    """Load UI theme name, returning ``None`` when unset or unknown."""
    value = _load_string("theme")
    if value is None:
        return None
    value = value.lower()
    return value if value in available_theme_names() else None
