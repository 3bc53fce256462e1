from __future__ import annotations

import sys

from nib.buffer import Buffer
from nib.pos import HasPosition
from nib.row import Row
from nib.selection import Selection
from nib.terminal import Color
from nib.terminal import Terminal

FILLER = '~'


def _render_x(row: Row, x: int) -> int:
    if x == sys.maxsize:
        # selected through the end of the row: include the line break
        return row.width() + 1
    elif x <= len(row):
        return row.width_range(0, x)
    else:
        # rectangles may reach past the end of short rows
        return row.width() + x - len(row)


class Screen:
    """the visible part of the buffer

    `left` / `top` are in render columns / rows of the buffer.  `draw` only
    repaints rows which were reported as changed since the last draw.
    """

    def __init__(self, width: int, height: int) -> None:
        self.left = self.top = 0
        self.width = width
        self.height = height
        self.updated = True
        self._highlight: tuple[int, int, int] | None = None
        self._highlight_rows: set[int] = set()

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}('
            f'left={self.left}, top={self.top}, '
            f'width={self.width}, height={self.height}'
            f')'
        )

    @property
    def right(self) -> int:
        return self.left + self.width - 1

    @property
    def bottom(self) -> int:
        return self.top + self.height - 1

    def force_update(self) -> None:
        self.updated = True

    def resize(self, width: int, height: int) -> None:
        self.width = max(1, width)
        self.height = max(1, height)
        self.updated = True

    def fit(self, buffer: Buffer, pos: HasPosition) -> bool:
        """scroll so the render position `pos` is visible"""
        before = (self.left, self.top)

        if pos.y < self.top:
            self.top = pos.y
        elif pos.y > self.bottom:
            self.top = pos.y - (self.height - 1)

        if pos.x < self.left:
            self.left = pos.x
        elif pos.x >= self.right:
            # keep room for the whole of a wide last character
            row = buffer.get(pos.y)
            if row is not None:
                char_width = max(1, row.last_char_width())
            else:
                char_width = 1
            self.left = max(0, pos.x - (self.width - char_width))

        if (self.left, self.top) != before:
            self.updated = True
            return True
        else:
            return False

    def move_up(self) -> bool:
        top = max(0, self.top - self.height)
        if top != self.top:
            self.top = top
            self.updated = True
            return True
        else:
            return False

    def move_down(self, buffer: Buffer) -> bool:
        if self.height >= len(buffer):
            return False
        top = min(self.top + self.height, len(buffer) - (self.height - 1))
        if top != self.top:
            self.top = top
            self.updated = True
            return True
        else:
            return False

    def highlight(self, y: int, x: int, width: int) -> None:
        """reverse-video `width` render columns of row `y` from `x`"""
        self.clear_highlight()
        self._highlight = (y, x, width)
        self._highlight_rows.add(y)

    def clear_highlight(self) -> None:
        if self._highlight is not None:
            self._highlight_rows.add(self._highlight[0])
            self._highlight = None

    def _reverse(self, terminal: Terminal, idx: int, x1: int, x2: int) -> None:
        x1, x2 = max(x1, self.left), min(x2, self.right + 1)
        if x1 < x2:
            terminal.reverse_video(x1 - self.left, idx, x2 - x1)

    def draw(
            self,
            buffer: Buffer,
            selection: Selection,
            terminal: Terminal,
    ) -> list[int]:
        """repaint the changed rows and return which rows were painted"""
        drawn = []
        for idx in range(self.height):
            y = self.top + idx
            if not (
                    self.updated or
                    buffer.row_updated(y) or
                    selection.row_updated(y) or
                    y in self._highlight_rows
            ):
                continue

            drawn.append(y)
            row = buffer.get(y)
            if row is None:
                terminal.write(0, idx, FILLER, Color.BLUE)
                continue

            line = row.slice_width(self.left, self.right + 1)
            terminal.write(0, idx, str(line))

            span = selection.xrange(y)
            if span is not None:
                x1, x2 = span
                self._reverse(
                    terminal, idx, _render_x(row, x1), _render_x(row, x2),
                )
            if self._highlight is not None and self._highlight[0] == y:
                _, x, width = self._highlight
                self._reverse(terminal, idx, x, x + width)

        self.updated = False
        self._highlight_rows.clear()
        buffer.clear_updated()
        selection.clear_updated()
        return drawn
