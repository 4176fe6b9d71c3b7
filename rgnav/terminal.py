"""Terminal control helpers for the TUI session.

Owns raw-mode lifecycle and alternate-screen switching on the controlling tty.
Standard input carries the piped search results, so keyboard input and frames
go through ``/dev/tty`` instead.
"""

from __future__ import annotations

import contextlib
import os
import termios
import tty

from .errors import TerminalUnavailableError

CONTROLLING_TTY_PATH = "/dev/tty"


def open_controlling_tty(path: str = CONTROLLING_TTY_PATH) -> int:
    """Open the controlling terminal for reading and writing."""
    try:
        return os.open(path, os.O_RDWR | os.O_NOCTTY)
    except OSError as exc:
        raise TerminalUnavailableError(f"Cannot open terminal {path}: {exc.strerror or exc}") from exc


class TerminalController:
    """Manage terminal mode transitions for one tty."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind input/output file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        try:
            self._saved_tty_state = termios.tcgetattr(stdin_fd)
        except termios.error as exc:
            raise TerminalUnavailableError(f"Cannot enter terminal mode: {exc}") from exc

    def enable_tui_mode(self) -> None:
        """Enter raw alternate-screen mode with the cursor hidden."""
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        os.write(self.stdout_fd, b"\x1b[?1049h\x1b[?25l")

    def disable_tui_mode(self) -> None:
        """Show the cursor, restore the main screen buffer and saved tty attributes."""
        os.write(self.stdout_fd, b"\x1b[0m\x1b[?25h\x1b[?1049l")
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def raw_mode(self):
        """Context manager that brackets code with TUI enter/exit calls."""
        try:
            self.enable_tui_mode()
            yield
        finally:
            self.disable_tui_mode()
