from __future__ import annotations

import bisect
import functools
from typing import Any
from typing import Callable

from nib.buffer import Buffer
from nib.pos import HasPosition
from nib.pos import Pos


def _moved(func: Callable[..., None]) -> Callable[..., bool]:
    """make a movement return whether the position changed"""
    @functools.wraps(func)
    def _moved_inner(self: Cursor, *args: Any, **kwargs: Any) -> bool:
        before = self.pos
        func(self, *args, **kwargs)
        return self.pos != before
    return _moved_inner


class Cursor:
    """logical position in a buffer

    `y` may be one past the last row (the position to append a row) and `x`
    may be one past the last character of its row.
    """

    def __init__(self, x: int = 0, y: int = 0) -> None:
        self.x = x
        self.y = y

    def __repr__(self) -> str:
        return f'{type(self).__name__}(x={self.x}, y={self.y})'

    @property
    def pos(self) -> Pos:
        return Pos(self.x, self.y)

    def _row_len(self, buffer: Buffer) -> int:
        row = buffer.get(self.y)
        return len(row) if row is not None else 0

    def _clamp_x(self, buffer: Buffer) -> None:
        self.x = max(0, min(self.x, self._row_len(buffer)))

    def _clamp_y(self, buffer: Buffer) -> None:
        self.y = max(0, min(self.y, len(buffer)))

    def _move_render_to_x(self, buffer: Buffer, render_x: int) -> None:
        row = buffer.get(self.y)
        if row is not None:
            offsets = row.offsets()
            self.x = bisect.bisect_right(offsets, render_x) - 1

    def render(self, buffer: Buffer) -> Pos:
        """the on-screen column of the cursor"""
        row = buffer.get(self.y)
        if row is not None:
            return Pos(row.width_range(0, self.x), self.y)
        else:
            return Pos(0, len(buffer))

    # movement

    @_moved
    def move_left(self, buffer: Buffer) -> None:
        if self.x > 0:
            self.x -= 1
        elif self.y > 0:
            self.y -= 1
            self.x = self._row_len(buffer)

    @_moved
    def move_right(self, buffer: Buffer) -> None:
        if self.x < self._row_len(buffer):
            self.x += 1
        elif self.y < len(buffer):
            self.y += 1
            self.x = 0

    @_moved
    def move_up(self, buffer: Buffer) -> None:
        if self.y > 0:
            self.y -= 1
            self._clamp_x(buffer)

    @_moved
    def move_down(self, buffer: Buffer) -> None:
        if self.y < len(buffer):
            self.y += 1
            self._clamp_x(buffer)

    @_moved
    def move_up_render(self, buffer: Buffer) -> None:
        render_x, _ = self.render(buffer)
        self.move_up(buffer)
        self._move_render_to_x(buffer, render_x)

    @_moved
    def move_down_render(self, buffer: Buffer) -> None:
        render_x, _ = self.render(buffer)
        self.move_down(buffer)
        self._move_render_to_x(buffer, render_x)

    @_moved
    def move_up_screen(self, buffer: Buffer, height: int) -> None:
        self.y = max(0, self.y - height)
        self._clamp_x(buffer)

    @_moved
    def move_down_screen(self, buffer: Buffer, height: int) -> None:
        self.y += height
        self._clamp_y(buffer)
        self._clamp_x(buffer)

    @_moved
    def move_to_x0(self) -> None:
        self.x = 0

    @_moved
    def move_to_xmax(self, buffer: Buffer) -> None:
        self.x = self._row_len(buffer)

    @_moved
    def set(self, buffer: Buffer, at: HasPosition) -> None:
        self.y = at.y
        self._clamp_y(buffer)
        self.x = at.x
        self._clamp_x(buffer)
