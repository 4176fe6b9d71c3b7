"""Exception hierarchy shared across rgnav modules.

Startup failures subclass ``RgnavError`` so the CLI can report them uniformly.
Preview-time errors are absorbed by the preview builder and never escape it.
"""

from __future__ import annotations


class RgnavError(Exception):
    """Base class for fatal startup conditions reported by the CLI."""


class NoPipedInputError(RgnavError):
    """Standard input is an interactive terminal instead of a pipe."""


class TerminalUnavailableError(RgnavError):
    """No controlling terminal could be opened for keyboard and screen I/O."""


class FormatterError(Exception):
    """The preview formatter failed to start, exited non-zero, or could not read the file."""


class AnsiParseError(ValueError):
    """Colorized formatter output contained malformed escape data."""
