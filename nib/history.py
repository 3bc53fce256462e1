from __future__ import annotations

from typing import NamedTuple
from typing import Protocol
from typing import TYPE_CHECKING

from nib.pos import Pos
from nib.row import Row
from nib.selection import SelectMode

if TYPE_CHECKING:
    from nib.buffer import Buffer  # XXX: circular


class Operation(Protocol):
    """a recorded edit, calling it with the buffer undoes the edit"""

    def __call__(self, buffer: Buffer) -> None: ...


class Append(NamedTuple):
    at: Pos

    def __call__(self, buffer: Buffer) -> None:
        buffer.shrink_row(self.at, record=False)


class DeleteChar(NamedTuple):
    at: Pos
    ch: str

    def __call__(self, buffer: Buffer) -> None:
        at = Pos(self.at.x - 1, self.at.y)
        buffer.insert_char(at, self.ch, record=False)


class DeleteChars(NamedTuple):
    at: Pos
    rows: tuple[Row, ...]
    mode: SelectMode

    def __call__(self, buffer: Buffer) -> None:
        buffer.insert_chars(self.at, self.rows, self.mode, record=False)


class DeleteRow(NamedTuple):
    at: Pos
    row: Row

    def __call__(self, buffer: Buffer) -> None:
        buffer.insert_row(self.at, self.row, record=False)


class InsertChar(NamedTuple):
    at: Pos

    def __call__(self, buffer: Buffer) -> None:
        buffer.delete_char(Pos(self.at.x + 1, self.at.y), record=False)


class InsertChars(NamedTuple):
    at: Pos
    end: Pos
    mode: SelectMode

    def __call__(self, buffer: Buffer) -> None:
        buffer.delete_chars(self.at, self.end, self.mode, record=False)


class InsertRow(NamedTuple):
    at: Pos

    def __call__(self, buffer: Buffer) -> None:
        buffer.delete_row(self.at, record=False)


class Replace(NamedTuple):
    at: Pos
    length: int
    removed: Row

    def __call__(self, buffer: Buffer) -> None:
        buffer.replace(self.at, self.length, self.removed, record=False)


class ShrinkRow(NamedTuple):
    at: Pos
    row: Row

    def __call__(self, buffer: Buffer) -> None:
        buffer.append_row(self.at, self.row, record=False)


class SplitRow(NamedTuple):
    at: Pos

    def __call__(self, buffer: Buffer) -> None:
        buffer.squash_row(self.at, record=False)


class SquashRow(NamedTuple):
    at: Pos

    def __call__(self, buffer: Buffer) -> None:
        buffer.split_row(self.at, record=False)


class History:
    def __init__(self) -> None:
        self._entries: list[tuple[Pos, Operation]] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self._entries!r})'

    def record(self, at: Pos, op: Operation) -> None:
        self._entries.append((at, op))

    def rollback(self) -> tuple[Pos, Operation] | None:
        if self._entries:
            return self._entries.pop()
        else:
            return None

    def clear(self) -> None:
        self._entries.clear()
