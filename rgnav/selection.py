"""Selected-row state for the match list.

Moves clamp at both ends; there is no wraparound.
"""

from __future__ import annotations


class SelectionController:
    def __init__(self, index: int = 0) -> None:
        self.index = max(0, index)

    def move_up(self) -> bool:
        """Select the previous row. Returns whether the index changed."""
        if self.index > 0:
            self.index -= 1
            return True
        return False

    def move_down(self, length: int) -> bool:
        """Select the next row of a list with ``length`` rows."""
        if self.index < length - 1:
            self.index += 1
            return True
        return False

    def current(self, length: int) -> int | None:
        if length <= 0:
            return None
        return min(self.index, length - 1)
