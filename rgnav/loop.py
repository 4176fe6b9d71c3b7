"""Main interactive event loop for the results browser.

Redraws when the selection or terminal size changes, then waits for a key
with a bounded poll. Exits on ``q`` or Escape; terminal mode is released by
the ``raw_mode`` context on every exit path.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Protocol

from .ansi import StyledText
from .input import read_key
from .matches import MatchStore
from .preview import PreviewBuilder
from .selection import SelectionController
from .terminal import TerminalController

POLL_TIMEOUT_MS = 200
QUIT_KEYS = frozenset({"q", "ESC"})


class RenderSink(Protocol):
    def size(self) -> tuple[int, int]: ...

    def draw(self, labels: list[str], selected: int | None, preview: StyledText | None) -> None: ...


class LoopState(enum.Enum):
    RUNNING = "running"
    EXITED = "exited"


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    poll_timeout_ms: int = POLL_TIMEOUT_MS


def apply_key(key: str, selection: SelectionController, length: int) -> tuple[LoopState, bool]:
    """Apply one key token.

    Returns the next loop state and whether the selection changed.
    """
    if key in QUIT_KEYS:
        return LoopState.EXITED, False
    if key == "UP":
        return LoopState.RUNNING, selection.move_up()
    if key == "DOWN":
        return LoopState.RUNNING, selection.move_down(length)
    return LoopState.RUNNING, False


def current_preview(
    store: MatchStore,
    selection: SelectionController,
    preview_builder: PreviewBuilder,
) -> tuple[int | None, StyledText | None]:
    index = selection.current(len(store))
    if index is None:
        return None, None
    record = store.get(index)
    if record is None:
        return None, None
    return index, preview_builder.build(record)


def run_main_loop(
    store: MatchStore,
    selection: SelectionController,
    preview_builder: PreviewBuilder,
    terminal: TerminalController,
    key_fd: int,
    sink: RenderSink,
    timing: RuntimeLoopTiming = RuntimeLoopTiming(),
) -> None:
    """Run the browser until a quit key is pressed."""
    labels = store.labels()
    length = len(store)
    state = LoopState.RUNNING
    dirty = True
    last_size: tuple[int, int] | None = None

    with terminal.raw_mode():
        while state is LoopState.RUNNING:
            size = sink.size()
            if size != last_size:
                last_size = size
                dirty = True

            if dirty:
                index, preview = current_preview(store, selection, preview_builder)
                sink.draw(labels, index, preview)
                dirty = False

            try:
                key = read_key(key_fd, timeout_ms=timing.poll_timeout_ms)
            except KeyboardInterrupt:
                continue
            if key == "":
                continue
            state, dirty = apply_key(key, selection, length)
