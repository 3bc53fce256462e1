from __future__ import annotations

import enum
from typing import NamedTuple


class KeyEvent(enum.Enum):
    # text
    CHAR = enum.auto()
    BACKSPACE = enum.auto()
    DELETE = enum.auto()
    ENTER = enum.auto()
    # movement
    ARROW_UP = enum.auto()
    ARROW_DOWN = enum.auto()
    ARROW_LEFT = enum.auto()
    ARROW_RIGHT = enum.auto()
    HOME = enum.auto()
    END = enum.auto()
    PAGE_UP = enum.auto()
    PAGE_DOWN = enum.auto()
    # commands
    COPY = enum.auto()
    CUT = enum.auto()
    PASTE = enum.auto()
    KILL = enum.auto()
    UNDO = enum.auto()
    FIND = enum.auto()
    F3 = enum.auto()
    REPLACE = enum.auto()
    SAVE = enum.auto()
    EXIT = enum.auto()
    ESCAPE = enum.auto()
    # terminal
    RESIZE = enum.auto()
    UNKNOWN = enum.auto()


class KeyModifier(enum.Enum):
    NONE = enum.auto()
    SHIFT = enum.auto()
    SHIFT_ALT = enum.auto()


class Key(NamedTuple):
    event: KeyEvent
    modifier: KeyModifier = KeyModifier.NONE
    # the typed characters for `CHAR`, the key's name for `UNKNOWN`
    text: str = ''
