from __future__ import annotations

import contextlib
import curses
import enum
import os
import queue
import threading
from typing import Generator
from typing import Protocol

from nib.error import EditorError
from nib.error import ErrorKind
from nib.key_event import Key
from nib.key_event import KeyEvent
from nib.key_event import KeyModifier

# how long the edit loop blocks on the key reader before checking again
READ_TIMEOUT = .016

SEQUENCE_KEYNAME = {
    '\x1bOH': b'KEY_HOME',
    '\x1bOF': b'KEY_END',
    '\x1bOR': b'KEY_F(3)',
    '\x1b[1~': b'KEY_HOME',
    '\x1b[4~': b'KEY_END',
    '\x1b[1;2A': b'KEY_SR',
    '\x1b[1;2B': b'KEY_SF',
    '\x1b[1;2C': b'KEY_SRIGHT',
    '\x1b[1;2D': b'KEY_SLEFT',
    '\x1b[1;2H': b'KEY_SHOME',
    '\x1b[1;2F': b'KEY_SEND',
    '\x1b[1;2R': b'KEY_F(15)',  # Shift + F3
    '\x1b[5;2~': b'KEY_SPREVIOUS',
    '\x1b[6;2~': b'KEY_SNEXT',
    '\x1b[1;4A': b'kUP4',  # Shift + M-Up
    '\x1b[1;4B': b'kDN4',  # Shift + M-Down
    '\x1b[1;4C': b'kRIT4',  # Shift + M-Right
    '\x1b[1;4D': b'kLFT4',  # Shift + M-Left
    '\x1b[1;4H': b'kHOM4',  # Shift + M-Home
    '\x1b[1;4F': b'kEND4',  # Shift + M-End
}
KEYNAME_REWRITE = {
    # windows-curses: numeric pad arrow keys
    b'KEY_A2': b'KEY_UP',
    b'KEY_C2': b'KEY_DOWN',
    b'KEY_B3': b'KEY_RIGHT',
    b'KEY_B1': b'KEY_LEFT',
    b'PADSTOP': b'KEY_DC',
    b'KEY_A3': b'KEY_PPAGE',
    b'KEY_C3': b'KEY_NPAGE',
    b'KEY_A1': b'KEY_HOME',
    b'KEY_C1': b'KEY_END',
    # windows-curses: idk why these are different
    b'KEY_SUP': b'KEY_SR',
    b'KEY_SDOWN': b'KEY_SF',
    # macos: (sends this for backspace key, others interpret this as well)
    b'^?': b'KEY_BACKSPACE',
    b'^H': b'KEY_BACKSPACE',
    b'^D': b'KEY_DC',
    b'PADENTER': b'^M',  # Enter on numpad
}
_SHIFT, _SHIFT_ALT = KeyModifier.SHIFT, KeyModifier.SHIFT_ALT
KEYNAME_KEY = {
    # text
    b'KEY_BACKSPACE': Key(KeyEvent.BACKSPACE),
    b'KEY_DC': Key(KeyEvent.DELETE),
    b'^M': Key(KeyEvent.ENTER),
    b'^I': Key(KeyEvent.CHAR, text='\t'),
    # movement
    b'KEY_UP': Key(KeyEvent.ARROW_UP),
    b'^P': Key(KeyEvent.ARROW_UP),
    b'KEY_DOWN': Key(KeyEvent.ARROW_DOWN),
    b'^N': Key(KeyEvent.ARROW_DOWN),
    b'KEY_LEFT': Key(KeyEvent.ARROW_LEFT),
    b'KEY_RIGHT': Key(KeyEvent.ARROW_RIGHT),
    b'KEY_HOME': Key(KeyEvent.HOME),
    b'^A': Key(KeyEvent.HOME),
    b'KEY_END': Key(KeyEvent.END),
    b'^E': Key(KeyEvent.END),
    b'KEY_PPAGE': Key(KeyEvent.PAGE_UP),
    b'KEY_NPAGE': Key(KeyEvent.PAGE_DOWN),
    # selection
    b'KEY_SR': Key(KeyEvent.ARROW_UP, _SHIFT),
    b'KEY_SF': Key(KeyEvent.ARROW_DOWN, _SHIFT),
    b'KEY_SLEFT': Key(KeyEvent.ARROW_LEFT, _SHIFT),
    b'KEY_SRIGHT': Key(KeyEvent.ARROW_RIGHT, _SHIFT),
    b'KEY_SHOME': Key(KeyEvent.HOME, _SHIFT),
    b'KEY_SEND': Key(KeyEvent.END, _SHIFT),
    b'KEY_SPREVIOUS': Key(KeyEvent.PAGE_UP, _SHIFT),
    b'KEY_SNEXT': Key(KeyEvent.PAGE_DOWN, _SHIFT),
    b'kUP4': Key(KeyEvent.ARROW_UP, _SHIFT_ALT),
    b'kDN4': Key(KeyEvent.ARROW_DOWN, _SHIFT_ALT),
    b'kLFT4': Key(KeyEvent.ARROW_LEFT, _SHIFT_ALT),
    b'kRIT4': Key(KeyEvent.ARROW_RIGHT, _SHIFT_ALT),
    b'kHOM4': Key(KeyEvent.HOME, _SHIFT_ALT),
    b'kEND4': Key(KeyEvent.END, _SHIFT_ALT),
    # commands
    b'^C': Key(KeyEvent.COPY),
    b'^X': Key(KeyEvent.CUT),
    b'^V': Key(KeyEvent.PASTE),
    b'^K': Key(KeyEvent.KILL),
    b'^Z': Key(KeyEvent.UNDO),
    b'^F': Key(KeyEvent.FIND),
    b'KEY_F(3)': Key(KeyEvent.F3),
    b'KEY_F(15)': Key(KeyEvent.F3, _SHIFT),
    b'^R': Key(KeyEvent.REPLACE),
    b'^S': Key(KeyEvent.SAVE),
    b'^Q': Key(KeyEvent.EXIT),
    b'^[': Key(KeyEvent.ESCAPE),
    b'KEY_RESIZE': Key(KeyEvent.RESIZE),
}


class Color(enum.IntEnum):
    """color pairs, initialized in `make_stdscr`"""
    DEFAULT = 0
    BLUE = 1


class Terminal(Protocol):
    def size(self) -> tuple[int, int]: ...

    def write(
            self,
            x: int,
            y: int,
            text: str,
            color: Color = ...,
            reverse: bool = ...,
    ) -> None: ...

    def reverse_video(self, x: int, y: int, length: int) -> None: ...

    def set_cursor_position(self, x: int, y: int) -> None: ...

    def read_event(self) -> Key: ...

    def update_size(self) -> None: ...


def _get_wch_with_retry(stdscr: curses._CursesWindow) -> str | int:
    while True:
        try:
            return stdscr.get_wch()
        except curses.error:  # pragma: no cover (error during signals?)
            pass


class CursesTerminal:
    def __init__(self, stdscr: curses._CursesWindow) -> None:
        self.stdscr = stdscr
        self._buffered_input: int | str | None = None

    def size(self) -> tuple[int, int]:
        return curses.COLS, curses.LINES

    def update_size(self) -> None:
        curses.update_lines_cols()

    def write(
            self,
            x: int,
            y: int,
            text: str,
            color: Color = Color.DEFAULT,
            reverse: bool = False,
    ) -> None:
        """write `text` at `x`, clearing the rest of the line"""
        attr = curses.color_pair(color)
        if reverse:
            attr |= curses.A_REVERSE
        self.stdscr.insstr(y, x, text.ljust(curses.COLS - x), attr)

    def reverse_video(self, x: int, y: int, length: int) -> None:
        self.stdscr.chgat(y, x, length, curses.A_REVERSE)

    def set_cursor_position(self, x: int, y: int) -> None:
        self.stdscr.move(y, x)

    # input

    def _get_sequence_ss3(self, wch: str) -> str:
        try:
            c = self.stdscr.get_wch()
        except curses.error:
            return wch
        else:
            if isinstance(c, int) or c not in 'HFR':
                self._buffered_input = c
                return wch
            else:
                return f'{wch}{c}'

    def _get_sequence_bracketed(self, wch: str) -> str:
        for _ in range(3):  # [0-9]{1,2};
            try:
                c = self.stdscr.get_wch()
            except curses.error:
                return wch
            else:
                if isinstance(c, int):
                    self._buffered_input = c
                    return wch
                else:
                    wch += c
                    if c == ';':
                        break
        else:
            return wch  # unexpected input while searching for `;`

        for _ in range(2):  # [0-9].
            try:
                c = self.stdscr.get_wch()
            except curses.error:
                return wch
            else:
                if isinstance(c, int):
                    self._buffered_input = c
                    return wch
                else:
                    wch += c

        return wch

    def _get_sequence(self, wch: str) -> str:
        self.stdscr.nodelay(True)
        try:
            c = self.stdscr.get_wch()
        except curses.error:
            return wch
        else:
            if isinstance(c, int):  # M-BSpace
                return f'{wch}({c})'
            elif c == 'O':
                return self._get_sequence_ss3(f'{wch}O')
            elif c == '[':
                return self._get_sequence_bracketed(f'{wch}[')
            else:
                return f'{wch}{c}'
        finally:
            self.stdscr.nodelay(False)

    def _get_string(self, wch: str) -> str:
        self.stdscr.nodelay(True)
        try:
            while True:
                try:
                    c = self.stdscr.get_wch()
                    if isinstance(c, str) and c.isprintable():
                        wch += c
                    else:
                        self._buffered_input = c
                        break
                except curses.error:
                    break
        finally:
            self.stdscr.nodelay(False)
        return wch

    def _keyname(self, wch: int | str) -> bytes:
        if isinstance(wch, str) and wch == '\x1b':
            wch = self._get_sequence(wch)
            if len(wch) == 2:
                return f'M-{wch[1]}'.encode()
            elif len(wch) > 1:
                return SEQUENCE_KEYNAME.get(wch, b'unknown')

        key = wch if isinstance(wch, int) else ord(wch)
        keyname = curses.keyname(key)
        return KEYNAME_REWRITE.get(keyname, keyname)

    def get_key(self) -> Key:
        """read and decode the next key, blocking until there is one"""
        if self._buffered_input is not None:
            wch, self._buffered_input = self._buffered_input, None
        else:
            wch = _get_wch_with_retry(self.stdscr)

        if isinstance(wch, str) and 0xd800 <= ord(wch[0]) <= 0xdfff:
            raise EditorError(ErrorKind.DECODE, f'lone surrogate: {wch!r}')
        elif isinstance(wch, str) and wch.isprintable():
            return Key(KeyEvent.CHAR, text=self._get_string(wch))

        keyname = self._keyname(wch)
        key = KEYNAME_KEY.get(keyname)
        if key is None:
            return Key(KeyEvent.UNKNOWN, text=keyname.decode())
        else:
            return key

    def _read_worker(self, channel: queue.Queue[Key | Exception]) -> None:
        try:
            channel.put(self.get_key())
        except Exception as e:
            channel.put(e)

    def read_event(self) -> Key:
        """read the next key on a worker thread

        the edit loop only waits on the channel in short slices so signals
        are still delivered while no key arrives.
        """
        channel: queue.Queue[Key | Exception] = queue.Queue(maxsize=1)
        worker = threading.Thread(
            target=self._read_worker, args=(channel,), daemon=True,
        )
        worker.start()
        while True:
            try:
                ret = channel.get(timeout=READ_TIMEOUT)
            except queue.Empty:
                continue
            if isinstance(ret, Exception):
                raise ret
            return ret


def _init_screen() -> curses._CursesWindow:
    # set the escape delay so curses does not pause waiting for sequences
    if hasattr(curses, 'set_escdelay'):
        curses.set_escdelay(25)
    else:  # pragma: no cover (old curses)
        os.environ.setdefault('ESCDELAY', '25')

    stdscr = curses.initscr()
    curses.noecho()
    curses.cbreak()
    # <enter> is not transformed into '\n' so it can be differentiated from ^J
    curses.nonl()
    # ^S / ^Q / ^Z / ^\ are passed through
    curses.raw()
    stdscr.keypad(True)

    with contextlib.suppress(curses.error):
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(Color.BLUE, curses.COLOR_BLUE, -1)
    return stdscr


@contextlib.contextmanager
def make_stdscr() -> Generator[curses._CursesWindow, None, None]:
    """essentially `curses.wrapper` with errors from the terminal wrapped"""
    try:
        stdscr = _init_screen()
    except curses.error as e:
        raise EditorError(ErrorKind.TERMINAL, str(e))
    try:
        yield stdscr
    finally:
        curses.endwin()
