from __future__ import annotations

import bisect
from typing import Iterable
from typing import Iterator

import wcwidth

TAB_STOP = 8


def char_width(c: str) -> int:
    # control characters and combining marks still take a cell when drawn
    return 2 if wcwidth.wcwidth(c) == 2 else 1


def _offsets(chars: Iterable[str]) -> list[int]:
    ret = [0]
    for c in chars:
        if c == '\t':
            ret.append(ret[-1] + (TAB_STOP - ret[-1] % TAB_STOP))
        else:
            ret.append(ret[-1] + char_width(c))
    return ret


class Row:
    """a single line of text, stored as a list of characters

    positions are character indices unless stated otherwise, widths are
    terminal cells (a tab advances to the next tab stop and wide characters
    take two cells).  mutators ignore out of range positions and report it
    by returning `None` / `False`.
    """

    def __init__(self, chars: Iterable[str] = ()) -> None:
        self._chars = list(chars)

    def __repr__(self) -> str:
        return f'{type(self).__name__}({str(self)!r})'

    def __str__(self) -> str:
        return ''.join(self._chars)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self._chars == other._chars

    def __len__(self) -> int:
        return len(self._chars)

    def __iter__(self) -> Iterator[str]:
        return iter(self._chars)

    def __getitem__(self, idx: int) -> str:
        return self._chars[idx]

    def copy(self) -> Row:
        return Row(self._chars)

    # mutation

    def append(self, chars: Iterable[str]) -> None:
        self._chars.extend(chars)

    def insert(self, index: int, ch: str) -> bool:
        if 0 <= index <= len(self._chars):
            self._chars.insert(index, ch)
            return True
        else:
            return False

    def insert_slice(self, index: int, chars: Iterable[str]) -> bool:
        if 0 <= index <= len(self._chars):
            self._chars[index:index] = list(chars)
            return True
        else:
            return False

    def remove(self, index: int) -> str | None:
        if 0 <= index < len(self._chars):
            return self._chars.pop(index)
        else:
            return None

    def remove_range(self, start: int, stop: int) -> Row | None:
        if 0 <= start <= stop <= len(self._chars):
            removed = Row(self._chars[start:stop])
            del self._chars[start:stop]
            return removed
        else:
            return None

    def replace(
            self,
            index: int,
            length: int,
            chars: Iterable[str],
    ) -> Row | None:
        removed = self.remove_range(index, index + length)
        if removed is not None:
            self._chars[index:index] = list(chars)
        return removed

    def split_off(self, at: int) -> Row | None:
        return self.remove_range(at, len(self._chars))

    def clear(self) -> None:
        del self._chars[:]

    # width

    def offsets(self) -> list[int]:
        """cumulative cell offset of each character position (len + 1)"""
        return _offsets(self._chars)

    def width(self) -> int:
        return self.offsets()[-1]

    def width_range(self, start: int, stop: int) -> int:
        # tab stops are relative to `start`
        return _offsets(self._chars[start:stop])[-1]

    def last_char_width(self) -> int:
        offsets = self.offsets()
        if len(offsets) == 1:
            return 0
        else:
            return offsets[-1] - offsets[-2]

    def render(self) -> Row:
        """copy of the row with tabs expanded to spaces"""
        offsets = self.offsets()
        ret = []
        for i, c in enumerate(self._chars):
            if c == '\t':
                ret.extend(' ' * (offsets[i + 1] - offsets[i]))
            else:
                ret.append(c)
        return Row(ret)

    def shrink_width(self, min_width: int) -> int:
        """remove characters from the front until at least `min_width` cells
        are gone.  returns the number of cells actually removed.
        """
        offsets = self.offsets()
        if offsets[-1] <= min_width:
            self.clear()
            return offsets[-1]

        idx = bisect.bisect_left(offsets, min_width)
        del self._chars[:idx]
        return offsets[idx]

    def truncate_width(self, max_width: int) -> int:
        """keep the longest prefix at most `max_width` cells wide.  returns
        the width that was kept.
        """
        offsets = self.offsets()
        idx = max(0, bisect.bisect_right(offsets, max_width) - 1)
        del self._chars[idx:]
        return offsets[idx]

    def slice_width(self, start: int, stop: int) -> Row:
        """the rendered cells `[start, stop)` of this row

        a wide character cut by either edge is replaced with spaces and the
        result is padded to exactly `stop - start` cells.
        """
        row = self.render()
        removed = row.shrink_width(start)
        if start < removed:
            row.insert_slice(0, ' ' * (removed - start))
        width = row.truncate_width(stop - start)
        row.append(' ' * (stop - start - width))
        return row
