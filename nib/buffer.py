from __future__ import annotations

from typing import Iterable
from typing import Iterator

from nib.error import EditorError
from nib.error import ErrorKind
from nib.history import Append
from nib.history import DeleteChar
from nib.history import DeleteChars
from nib.history import DeleteRow
from nib.history import History
from nib.history import InsertChar
from nib.history import InsertChars
from nib.history import InsertRow
from nib.history import Replace
from nib.history import ShrinkRow
from nib.history import SplitRow
from nib.history import SquashRow
from nib.pos import HasPosition
from nib.pos import Pos
from nib.row import Row
from nib.selection import SelectMode

Pending = tuple[tuple[Row, ...], SelectMode]


def _pad(piece: Row, length: int) -> Row:
    piece.append(' ' * (length - len(piece)))
    return piece


class Buffer:
    """the rows of the file being edited

    every mutator ignores positions it cannot apply to and returns `None` /
    `False` in that case.  successful mutations mark the touched rows for
    redraw and are recorded for `undo` unless called with `record=False`.
    """

    def __init__(
            self,
            rows: Iterable[Iterable[str]] = (),
            filename: str | None = None,
    ) -> None:
        self.rows = [Row(row) for row in rows]
        self.filename = filename
        self.modified = False
        self.updated: list[range] = []
        self.history = History()
        self.pending: Pending | None = None

    @classmethod
    def from_file(cls, filename: str) -> Buffer:
        try:
            with open(filename, encoding='UTF-8', newline='') as f:
                contents = f.read()
        except FileNotFoundError:
            return cls(filename=filename)
        except OSError as e:
            raise EditorError(ErrorKind.IO, f'{filename}: {e.strerror}')
        except UnicodeDecodeError as e:
            raise EditorError(ErrorKind.DECODE, f'{filename}: {e.reason}')

        lines = contents.split('\n')
        if lines[-1] == '':
            lines.pop()
        return cls(
            (line[:-1] if line.endswith('\r') else line for line in lines),
            filename,
        )

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}('
            f'{[str(row) for row in self.rows]!r}, '
            f'filename={self.filename!r}, modified={self.modified}'
            f')'
        )

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    def __getitem__(self, y: int) -> Row:
        return self.rows[y]

    def get(self, y: int) -> Row | None:
        if 0 <= y < len(self.rows):
            return self.rows[y]
        else:
            return None

    # redraw tracking

    def _updated(self, start: int, stop: int) -> None:
        self.updated.append(range(start, stop))
        self.modified = True

    def row_updated(self, y: int) -> bool:
        return any(y in r for r in self.updated)

    def clear_updated(self) -> None:
        self.updated.clear()

    # rows

    def append_row(
            self,
            at: HasPosition,
            text: Iterable[str],
            *,
            record: bool = True,
    ) -> Pos | None:
        row = self.get(at.y)
        if row is None:
            return None

        end = Pos(len(row), at.y)
        row.append(text)
        self._updated(at.y, at.y + 1)
        if record:
            self.history.record(Pos.of(at), Append(end))
        return end

    def insert_row(
            self,
            at: HasPosition,
            text: Iterable[str] = (),
            *,
            record: bool = True,
    ) -> bool:
        if not 0 <= at.y <= len(self.rows):
            return False

        self._updated(at.y, len(self.rows) + 1)
        self.rows.insert(at.y, Row(text))
        if record:
            self.history.record(Pos.of(at), InsertRow(Pos.of(at)))
        return True

    def delete_row(
            self,
            at: HasPosition,
            *,
            record: bool = True,
    ) -> Row | None:
        if not 0 <= at.y < len(self.rows):
            return None

        self._updated(at.y, len(self.rows))
        row = self.rows.pop(at.y)
        if record:
            self.history.record(Pos.of(at), DeleteRow(Pos.of(at), row.copy()))
        return row

    def shrink_row(
            self,
            at: HasPosition,
            *,
            record: bool = True,
    ) -> Row | None:
        """cut the row at `at.x`, the removed tail becomes `pending`"""
        row = self.get(at.y)
        tail = row.split_off(at.x) if row is not None else None
        if tail is None:
            return None

        self.pending = ((tail.copy(),), SelectMode.NONE)
        self._updated(at.y, at.y + 1)
        if record:
            self.history.record(Pos.of(at), ShrinkRow(Pos.of(at), tail.copy()))
        return tail

    def split_row(
            self,
            at: HasPosition,
            *,
            record: bool = True,
    ) -> Pos | None:
        row = self.get(at.y)
        tail = row.split_off(at.x) if row is not None else None
        if tail is None:
            return None

        self._updated(at.y, len(self.rows) + 1)
        self.rows.insert(at.y + 1, tail)
        next_at = Pos(0, at.y + 1)
        if record:
            self.history.record(Pos.of(at), SplitRow(next_at))
        return next_at

    def squash_row(
            self,
            at: HasPosition,
            *,
            record: bool = True,
    ) -> Pos | None:
        """join row `at.y` onto the end of the row above it"""
        if not 0 < at.y < len(self.rows):
            return None

        self._updated(at.y - 1, len(self.rows))
        row = self.rows.pop(at.y)
        prev = self.rows[at.y - 1]
        next_at = Pos(len(prev), at.y - 1)
        prev.append(row)
        if record:
            self.history.record(Pos.of(at), SquashRow(next_at))
        return next_at

    # characters

    def insert_char(
            self,
            at: HasPosition,
            ch: str,
            *,
            record: bool = True,
    ) -> bool:
        row = self.get(at.y)
        if row is None or not row.insert(at.x, ch):
            return False

        self._updated(at.y, at.y + 1)
        if record:
            self.history.record(Pos.of(at), InsertChar(Pos.of(at)))
        return True

    def delete_char(
            self,
            at: HasPosition,
            *,
            record: bool = True,
    ) -> str | None:
        """remove the character before `at` (backspace)"""
        row = self.get(at.y)
        if row is None or not 0 < at.x <= len(row):
            return None

        ch = row.remove(at.x - 1)
        assert ch is not None
        self._updated(at.y, at.y + 1)
        if record:
            self.history.record(Pos.of(at), DeleteChar(Pos.of(at), ch))
        return ch

    def replace(
            self,
            at: HasPosition,
            length: int,
            text: Iterable[str],
            *,
            record: bool = True,
    ) -> Row | None:
        chars = list(text)
        row = self.get(at.y)
        removed = row.replace(at.x, length, chars) if row is not None else None
        if removed is None:
            return None

        self._updated(at.y, at.y + 1)
        if record:
            op = Replace(Pos.of(at), len(chars), removed.copy())
            self.history.record(Pos.of(at), op)
        return removed

    # ranges

    def _delete_chars_none(self, start: Pos, end: Pos) -> list[Row]:
        if start.y == end.y:
            row = self.get(start.y)
            if row is None or not start.x < min(end.x, len(row)):
                return []
            piece = row.remove_range(start.x, end.x)
            return [piece] if piece is not None else []

        # walk upwards so the trailing fragment can be joined to the first row
        pieces = []
        tail = Row()
        for y in range(end.y, start.y - 1, -1):
            row = self.get(y)
            if row is None:
                continue
            elif y == start.y:
                piece = row.remove_range(start.x, len(row))
                if piece is not None:
                    pieces.append(piece)
                row.append(tail)
            elif y == end.y:
                piece = row.remove_range(0, end.x)
                if piece is not None:
                    pieces.append(piece)
                tail = self.rows.pop(y)
            else:
                pieces.append(self.rows.pop(y))
        pieces.reverse()
        return pieces

    def _delete_chars_rectangle(self, start: Pos, end: Pos) -> list[Row]:
        stop_y = min(end.y, len(self.rows) - 1)
        startx, endx = sorted((start.x, end.x))
        length = endx - startx
        if not 0 <= start.y <= stop_y or length == 0:
            return []

        pieces = []
        for row in self.rows[start.y:stop_y + 1]:
            if startx < len(row):
                piece = row.remove_range(startx, min(len(row), endx))
                assert piece is not None
                # short rows still contribute a full width piece
                pieces.append(_pad(piece, length))
            else:
                pieces.append(Row(' ' * length))
        return pieces

    def delete_chars(
            self,
            start: HasPosition,
            end: HasPosition,
            mode: SelectMode,
            *,
            record: bool = True,
    ) -> tuple[Row, ...] | None:
        """delete `start` through `end`, the removed rows become `pending`"""
        start, end = Pos.of(start), Pos.of(end)
        rows_before = len(self.rows)
        if mode is SelectMode.RECTANGLE:
            pieces = self._delete_chars_rectangle(start, end)
        else:
            pieces = self._delete_chars_none(start, end)
        if not pieces:
            return None

        removed = tuple(pieces)
        self.pending = (tuple(piece.copy() for piece in removed), mode)
        if len(removed) == 1:
            self._updated(start.y, start.y + 1)
        else:
            self._updated(start.y, rows_before)
        if record:
            if mode is SelectMode.RECTANGLE:
                at = Pos(min(start.x, end.x), start.y)
            else:
                at = start
            op = DeleteChars(at, tuple(p.copy() for p in removed), mode)
            self.history.record(at, op)
        return removed

    def _insert_chars_none(self, at: Pos, rows: tuple[Row, ...]) -> Pos | None:
        row = self.get(at.y)
        if row is None or not 0 <= at.x <= len(row):
            return None

        first = rows[0]
        if len(rows) == 1:
            row.insert_slice(at.x, first)
            self._updated(at.y, at.y + 1)
            return Pos(at.x + len(first), at.y)

        tail = row.split_off(at.x)
        assert tail is not None
        row.append(first)
        for y, middle in enumerate(rows[1:-1], at.y + 1):
            self.rows.insert(y, middle.copy())
        last = rows[-1].copy()
        last.append(tail)
        y = at.y + len(rows) - 1
        self.rows.insert(y, last)
        self._updated(at.y, len(self.rows))
        return Pos(len(rows[-1]), y)

    def _insert_chars_rectangle(
            self,
            at: Pos,
            rows: tuple[Row, ...],
    ) -> Pos | None:
        if not 0 <= at.y <= len(self.rows) or at.x < 0:
            return None

        for y, piece in enumerate(rows, at.y):
            row = self.get(y)
            if row is None:
                self.rows.insert(y, Row([*' ' * at.x, *piece]))
            elif len(row) < at.x:
                # short rows are padded out to the insertion column
                row.append(' ' * (at.x - len(row)))
                row.append(piece)
            else:
                row.insert_slice(at.x, piece)
        self._updated(at.y, at.y + len(rows))
        return Pos(at.x + len(rows[-1]), at.y + len(rows) - 1)

    def insert_chars(
            self,
            at: HasPosition,
            rows: Iterable[Row],
            mode: SelectMode,
            *,
            record: bool = True,
    ) -> Pos | None:
        """insert `rows` at `at`, returns the position after the insertion"""
        at, rows = Pos.of(at), tuple(rows)
        if mode is SelectMode.RECTANGLE:
            empty = not any(len(row) for row in rows)
        else:
            empty = len(rows) == 1 and not rows[0]
        if not rows or empty:
            return None
        elif mode is SelectMode.RECTANGLE:
            end = self._insert_chars_rectangle(at, rows)
        else:
            end = self._insert_chars_none(at, rows)
        if end is None:
            return None

        if record:
            self.history.record(at, InsertChars(at, end, mode))
        return end

    def get_range(
            self,
            start: HasPosition,
            end: HasPosition,
            mode: SelectMode,
    ) -> tuple[Row, ...] | None:
        rows = self.rows[start.y:end.y + 1]
        if not rows:
            return None

        pieces = []
        if mode is SelectMode.RECTANGLE:
            startx, endx = sorted((start.x, end.x))
            length = endx - startx
            for row in rows:
                pieces.append(_pad(Row(str(row)[startx:endx]), length))
        else:
            for y, row in enumerate(rows, start.y):
                startx = start.x if y == start.y else 0
                endx = end.x if y == end.y else len(row)
                pieces.append(Row(str(row)[startx:endx]))
        return tuple(pieces)

    def copy_pending(
            self,
            start: HasPosition,
            end: HasPosition,
            mode: SelectMode,
    ) -> bool:
        rows = self.get_range(start, end, mode)
        if rows is None:
            self.pending = None
            return False
        else:
            self.pending = (rows, mode)
            return True

    def paste_pending(
            self,
            at: HasPosition,
            *,
            record: bool = True,
    ) -> Pos | None:
        if self.pending is None:
            return None
        rows, mode = self.pending
        return self.insert_chars(at, rows, mode, record=record)

    # history

    def undo(self) -> Pos | None:
        """revert the last recorded edit, returns the position it was made"""
        entry = self.history.rollback()
        if entry is None:
            return None
        at, op = entry
        op(self)
        return at

    # search

    def find_at(self, at: HasPosition, keyword: str) -> Pos | None:
        if not keyword:
            return None

        for y in range(max(at.y, 0), len(self.rows)):
            x = str(self.rows[y]).find(keyword, at.x if y == at.y else 0)
            if x != -1:
                return Pos(x, y)
        return None

    def rfind_at(self, at: HasPosition, keyword: str) -> Pos | None:
        """search backwards, a match on the first row must end by `x + 1`"""
        if not keyword:
            return None

        for y in range(min(at.y, len(self.rows) - 1), -1, -1):
            if y == at.y:
                x = str(self.rows[y]).rfind(keyword, 0, at.x + 1)
            else:
                x = str(self.rows[y]).rfind(keyword)
            if x != -1:
                return Pos(x, y)
        return None

    # file

    def save(self) -> None:
        if self.filename is not None:
            self.save_as(self.filename)

    def save_as(self, filename: str) -> None:
        try:
            with open(filename, 'w', encoding='UTF-8', newline='') as f:
                for row in self.rows:
                    f.write(f'{row}\r\n')
        except OSError as e:
            raise EditorError(ErrorKind.IO, f'{filename}: {e.strerror}')
        self.modified = False
