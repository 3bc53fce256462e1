from __future__ import annotations

import enum
import sys

from nib.pos import HasPosition
from nib.pos import Pos


class SelectMode(enum.Enum):
    NONE = enum.auto()
    RECTANGLE = enum.auto()


def _yx(pos: Pos) -> tuple[int, int]:
    return pos.y, pos.x


class Selection:
    def __init__(self) -> None:
        self.mode = SelectMode.NONE
        self.enabled = False
        self.anchor = self.focus = self.prev_focus = Pos(0, 0)
        self.updated = False
        # rows of a dropped selection which still show its highlight
        self._stale: tuple[int, int] | None = None

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}('
            f'anchor={self.anchor}, focus={self.focus}, mode={self.mode}, '
            f'enabled={self.enabled}'
            f')'
        )

    def start(self) -> Pos:
        return min(self.anchor, self.focus, key=_yx)

    def end(self) -> Pos:
        return max(self.anchor, self.focus, key=_yx)

    def select(self, at: HasPosition, mode: SelectMode) -> None:
        """begin a selection at `at` unless one is already in progress"""
        if self.enabled and self.mode is mode:
            return
        self.disable()
        self.mode = mode
        self.enabled = True
        self.anchor = self.focus = self.prev_focus = Pos.of(at)
        self.updated = True

    def update(self, at: HasPosition) -> None:
        pos = Pos.of(at)
        if self.enabled and pos != self.focus:
            self.focus = pos
            self.updated = True

    def disable(self) -> None:
        if self.enabled:
            start, end = self.start(), self.end()
            if self._stale is None:
                self._stale = (start.y, end.y)
            else:
                lo, hi = self._stale
                self._stale = (min(lo, start.y), max(hi, end.y))
            self.enabled = False
            self.updated = True

    def xrange(self, y: int) -> tuple[int, int] | None:
        """the selected `[start, end)` characters of row `y`

        `sys.maxsize` as the end means "through the end of the row".
        """
        if not self.enabled:
            return None

        start, end = self.start(), self.end()
        if not start.y <= y <= end.y:
            return None
        elif self.mode is SelectMode.RECTANGLE:
            return min(start.x, end.x), max(start.x, end.x)
        elif start.y == end.y:
            return start.x, end.x
        elif y == start.y:
            return start.x, sys.maxsize
        elif y == end.y:
            return 0, end.x
        else:
            return 0, sys.maxsize

    def row_updated(self, y: int) -> bool:
        if not self.updated:
            return False
        elif self._stale is not None and self._stale[0] <= y <= self._stale[1]:
            return True
        elif not self.enabled:
            return False

        start, end = self.start(), self.end()
        if start.y <= y <= end.y:
            return True
        # rows the focus moved back across lost their highlight
        lo, hi = sorted((self.prev_focus.y, self.focus.y))
        return lo <= y <= hi

    def clear_updated(self) -> None:
        self.updated = False
        self.prev_focus = self.focus
        self._stale = None
