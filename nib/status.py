from __future__ import annotations

from nib.buffer import Buffer
from nib.pos import Pos
from nib.prompt import PromptResult
from nib.terminal import Terminal

HELP = '^Q:quit ^S:save ^F:find ^R:replace ^Z:undo'


class StatusBar:
    def draw(
            self,
            terminal: Terminal,
            y: int,
            width: int,
            buffer: Buffer,
            render: Pos,
    ) -> None:
        name = buffer.filename or '[no name]'
        modified = ' *' if buffer.modified else ''
        position = f'{render.y + 1}:{render.x + 1} '
        s = f' "{name}"{modified}'[:max(0, width - len(position) - 1)]
        line = f'{s.ljust(width - len(position))}{position}'
        terminal.write(0, y, line, reverse=True)


class Status:
    """transient messages on the bottom line"""

    def __init__(self) -> None:
        self._status = ''
        self._action_counter = -1

    @property
    def message(self) -> str:
        return self._status

    def update(self, status: str) -> None:
        self._status = status
        self._action_counter = 25

    def clear(self) -> None:
        self._status = ''

    def draw(self, terminal: Terminal, y: int, width: int) -> None:
        if self._status:
            status = f' {self._status} '
            x = (width - len(status)) // 2
            if x < 0:
                x = 0
                status = status.strip()[:width]
            terminal.write(0, y, f'{" " * x}{status}')
            terminal.reverse_video(x, y, len(status))
        else:
            terminal.write(0, y, HELP[:width])

    def tick(self) -> None:
        self._action_counter -= 1
        if self._action_counter < 0:
            self.clear()

    def cancelled(self) -> PromptResult:
        self.update('cancelled')
        return PromptResult.CANCELLED
