from __future__ import annotations

from typing import NamedTuple
from typing import Protocol


class HasPosition(Protocol):
    @property
    def x(self) -> int: ...

    @property
    def y(self) -> int: ...


class Pos(NamedTuple):
    x: int
    y: int

    @classmethod
    def of(cls, at: HasPosition) -> Pos:
        return cls(at.x, at.y)
