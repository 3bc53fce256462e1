from __future__ import annotations

import contextlib
import enum
import functools
from typing import Any
from typing import Callable
from typing import Generator
from typing import NamedTuple
from typing import TypeVar
from typing import cast

from nib.buffer import Buffer
from nib.cursor import Cursor
from nib.error import EditorError
from nib.error import ErrorKind
from nib.find import Find
from nib.find import Replace
from nib.key_event import Key
from nib.key_event import KeyEvent
from nib.key_event import KeyModifier
from nib.perf import Perf
from nib.pos import Pos
from nib.prompt import Prompt
from nib.prompt import PromptResult
from nib.screen import Screen
from nib.selection import Selection
from nib.selection import SelectMode
from nib.status import Status
from nib.status import StatusBar
from nib.terminal import Terminal

TCallable = TypeVar('TCallable', bound=Callable[..., Any])

_NONE = KeyModifier.NONE
_SHIFT = KeyModifier.SHIFT
_SHIFT_ALT = KeyModifier.SHIFT_ALT


class EditResult(enum.Enum):
    EXIT = enum.auto()


class Layout(NamedTuple):
    width: int
    # rows available for text
    height: int
    status_y: int | None
    message_y: int

    @classmethod
    def make(cls, width: int, lines: int) -> Layout:
        if lines > 2:
            return cls(width, lines - 2, lines - 2, lines - 1)
        elif lines > 1:
            return cls(width, 1, None, 1)
        else:
            return cls(width, 1, None, 0)


def clear_selection(func: TCallable) -> TCallable:
    @functools.wraps(func)
    def clear_selection_inner(
            self: Editor, *args: Any, **kwargs: Any,
    ) -> Any:
        ret = func(self, *args, **kwargs)
        self.selection.disable()
        return ret
    return cast(TCallable, clear_selection_inner)


def _selecting(mode: SelectMode) -> Callable[[TCallable], TCallable]:
    def selecting_decorator(func: TCallable) -> TCallable:
        @functools.wraps(func)
        def selecting_inner(self: Editor, *args: Any, **kwargs: Any) -> Any:
            with self.select(mode):
                return func(self, *args, **kwargs)
        return cast(TCallable, selecting_inner)
    return selecting_decorator


keep_selection = _selecting(SelectMode.NONE)
keep_rectangle = _selecting(SelectMode.RECTANGLE)


class Editor:
    def __init__(self, terminal: Terminal, buffer: Buffer, perf: Perf) -> None:
        self.terminal = terminal
        self.buffer = buffer
        self.perf = perf
        self.cursor = Cursor()
        self.selection = Selection()
        self.status = Status()
        self.status_bar = StatusBar()
        self.layout = Layout.make(*terminal.size())
        self.screen = Screen(self.layout.width, self.layout.height)
        # rows repainted since the last key was read
        self.drawn: list[int] = []

    def __repr__(self) -> str:
        return (
            f'{type(self).__name__}('
            f'buffer={self.buffer!r}, cursor={self.cursor!r}, '
            f'screen={self.screen!r}'
            f')'
        )

    # terminal

    def draw(self) -> None:
        render = self.cursor.render(self.buffer)
        self.screen.fit(self.buffer, render)
        self.drawn.extend(
            self.screen.draw(self.buffer, self.selection, self.terminal),
        )
        if self.layout.status_y is not None:
            self.status_bar.draw(
                self.terminal, self.layout.status_y, self.layout.width,
                self.buffer, render,
            )
        if self.layout.message_y >= self.layout.height:
            self.status.draw(
                self.terminal, self.layout.message_y, self.layout.width,
            )
        else:
            # the only row shows messages over the text until they clear
            if self.status.message:
                self.status.draw(
                    self.terminal, self.layout.message_y, self.layout.width,
                )
            self.screen.force_update()
        self.terminal.set_cursor_position(
            render.x - self.screen.left, render.y - self.screen.top,
        )

    def get_key(self) -> Key:
        self.perf.end(len(self.drawn))
        self.drawn = []
        try:
            key = self.terminal.read_event()
        except EditorError:
            self.perf.start('error')
            raise
        self.perf.start(key.event.name.lower())
        return key

    def resize(self) -> None:
        self.terminal.update_size()
        self.layout = Layout.make(*self.terminal.size())
        self.screen.resize(self.layout.width, self.layout.height)

    # prompts

    def quick_prompt(
            self,
            prompt: str,
            opt_strs: tuple[str, ...],
    ) -> str | PromptResult:
        opts = {opt[0] for opt in opt_strs}
        while True:
            self.draw()

            y, width = self.layout.message_y, self.layout.width
            s = f'{prompt} [{", ".join(opt_strs)}]?'
            if len(s) < width - 1:
                x = len(s) + 1
            else:
                s = f'{s[:width - 1]}…'
                x = width - 1
            self.terminal.write(0, y, s, reverse=True)
            self.terminal.set_cursor_position(x, y)

            key = self.get_key()
            if key.event is KeyEvent.RESIZE:
                self.resize()
            elif key.event in {KeyEvent.COPY, KeyEvent.ESCAPE}:
                return self.status.cancelled()
            elif key.event is KeyEvent.CHAR and key.text.lower() in opts:
                return key.text.lower()

    def prompt(
            self,
            prompt: str,
            *,
            allow_empty: bool = False,
            default: str = '',
    ) -> str | PromptResult:
        self.status.clear()
        ret = Prompt(self, prompt, default).run()
        if not allow_empty and not ret:
            return self.status.cancelled()
        else:
            return ret

    # selection

    @contextlib.contextmanager
    def select(self, mode: SelectMode) -> Generator[None, None, None]:
        self.selection.select(self.cursor, mode)
        try:
            yield
        finally:
            self.selection.update(self.cursor)

    def _delete_selection(self) -> None:
        start, end = self.selection.start(), self.selection.end()
        mode = self.selection.mode
        self.selection.disable()
        if self.buffer.delete_chars(start, end, mode) is not None:
            if mode is SelectMode.RECTANGLE:
                start = Pos(min(start.x, end.x), start.y)
            self.cursor.set(self.buffer, start)

    # movement

    def up(self) -> None:
        self.cursor.move_up_render(self.buffer)

    def down(self) -> None:
        self.cursor.move_down_render(self.buffer)

    def left(self) -> None:
        self.cursor.move_left(self.buffer)

    def right(self) -> None:
        self.cursor.move_right(self.buffer)

    def home(self) -> None:
        self.cursor.move_to_x0()

    def end(self) -> None:
        self.cursor.move_to_xmax(self.buffer)

    def page_up(self) -> None:
        self.screen.move_up()
        self.cursor.move_up_screen(self.buffer, self.screen.height)

    def page_down(self) -> None:
        self.screen.move_down(self.buffer)
        self.cursor.move_down_screen(self.buffer, self.screen.height)

    MOVEMENT = {
        KeyEvent.ARROW_UP: up,
        KeyEvent.ARROW_DOWN: down,
        KeyEvent.ARROW_LEFT: left,
        KeyEvent.ARROW_RIGHT: right,
        KeyEvent.HOME: home,
        KeyEvent.END: end,
        KeyEvent.PAGE_UP: page_up,
        KeyEvent.PAGE_DOWN: page_down,
    }

    # editing

    @clear_selection
    def text(self, s: str) -> None:
        if self.cursor.y == len(self.buffer):
            self.buffer.insert_row(self.cursor)
        for c in s:
            self.buffer.insert_char(self.cursor, c)
            self.cursor.move_right(self.buffer)

    @clear_selection
    def enter(self) -> None:
        if self.cursor.y == len(self.buffer):
            self.buffer.insert_row(self.cursor)
            self.cursor.move_down(self.buffer)
        else:
            at = self.buffer.split_row(self.cursor)
            assert at is not None
            self.cursor.set(self.buffer, at)

    @clear_selection
    def backspace(self) -> None:
        if self.selection.enabled:
            self._delete_selection()
        elif self.cursor.x > 0:
            if self.buffer.delete_char(self.cursor) is not None:
                self.cursor.move_left(self.buffer)
        elif 0 < self.cursor.y < len(self.buffer):
            at = self.buffer.squash_row(self.cursor)
            assert at is not None
            self.cursor.set(self.buffer, at)
        else:
            # the append position has nothing to join
            self.cursor.move_left(self.buffer)

    @clear_selection
    def delete(self) -> None:
        if self.selection.enabled:
            self._delete_selection()
            return

        before = self.cursor.pos
        if (
                self.cursor.move_right(self.buffer) and
                self.cursor.y < len(self.buffer)
        ):
            self.backspace()
        else:
            self.cursor.set(self.buffer, before)

    @clear_selection
    def kill(self) -> None:
        row = self.buffer.get(self.cursor.y)
        if row is None:
            return
        elif not row:
            self.buffer.delete_row(self.cursor)
            self.cursor.set(self.buffer, self.cursor.pos)
        elif self.cursor.x < len(row):
            self.buffer.shrink_row(self.cursor)

    @clear_selection
    def copy(self) -> None:
        if self.selection.enabled:
            start, end = self.selection.start(), self.selection.end()
            mode = self.selection.mode
            if self.buffer.copy_pending(start, end, mode):
                self.status.update('copied')

    @clear_selection
    def cut(self) -> None:
        if self.selection.enabled:
            self._delete_selection()

    @clear_selection
    def paste(self) -> None:
        end = self.buffer.paste_pending(self.cursor)
        if end is not None:
            self.cursor.set(self.buffer, end)

    @clear_selection
    def undo(self) -> None:
        at = self.buffer.undo()
        if at is None:
            self.status.update('nothing to undo!')
        else:
            self.cursor.set(self.buffer, at)

    # commands

    @clear_selection
    def find(self) -> None:
        self.status.clear()
        Find(self).run()

    @clear_selection
    def replace(self) -> None:
        self.status.clear()
        Replace(self).run()

    @clear_selection
    def save(self) -> PromptResult | None:
        if self.buffer.filename is None:
            filename = self.prompt('enter filename')
            if filename is PromptResult.CANCELLED:
                return PromptResult.CANCELLED
            else:
                self.buffer.filename = filename

        try:
            self.buffer.save()
        except EditorError as e:
            self.status.update(f'cannot save file: {e}')
            return PromptResult.CANCELLED

        num_lines = len(self.buffer)
        lines = 'lines' if num_lines != 1 else 'line'
        self.status.update(f'saved! ({num_lines} {lines} written)')
        return None

    @clear_selection
    def quit(self) -> EditResult | None:
        if self.buffer.modified:
            response = self.quick_prompt(
                'file is modified - save', ('yes', 'no'),
            )
            if response == 'y':
                if self.save() is not PromptResult.CANCELLED:
                    return EditResult.EXIT
                else:
                    return None
            elif response == 'n':
                return EditResult.EXIT
            else:
                assert response is PromptResult.CANCELLED
                return None
        return EditResult.EXIT

    @clear_selection
    def escape(self) -> None:
        """drop the selection"""

    DISPATCH = {
        **{(ev, _NONE): clear_selection(f) for ev, f in MOVEMENT.items()},
        **{(ev, _SHIFT): keep_selection(f) for ev, f in MOVEMENT.items()},
        **{(ev, _SHIFT_ALT): keep_rectangle(f) for ev, f in MOVEMENT.items()},
        # editing
        (KeyEvent.ENTER, _NONE): enter,
        (KeyEvent.BACKSPACE, _NONE): backspace,
        (KeyEvent.DELETE, _NONE): delete,
        (KeyEvent.KILL, _NONE): kill,
        (KeyEvent.COPY, _NONE): copy,
        (KeyEvent.CUT, _NONE): cut,
        (KeyEvent.PASTE, _NONE): paste,
        (KeyEvent.UNDO, _NONE): undo,
        # commands
        (KeyEvent.FIND, _NONE): find,
        (KeyEvent.F3, _NONE): find,
        (KeyEvent.F3, _SHIFT): find,
        (KeyEvent.REPLACE, _NONE): replace,
        (KeyEvent.SAVE, _NONE): save,
        (KeyEvent.EXIT, _NONE): quit,
        (KeyEvent.ESCAPE, _NONE): escape,
        (KeyEvent.RESIZE, _NONE): resize,
    }

    def handle_key(self, key: Key) -> EditResult | None:
        if key.event is KeyEvent.CHAR:
            self.text(key.text)
        elif (key.event, key.modifier) in Editor.DISPATCH:
            ret = Editor.DISPATCH[key.event, key.modifier](self)
            if isinstance(ret, EditResult):
                return ret
        else:
            self.status.update(f'unknown key: {key.text or key.event.name}')
        return None

    def run(self) -> None:
        while True:
            self.status.tick()
            self.draw()

            try:
                key = self.get_key()
            except EditorError as e:
                # undecodable input is reported, everything else is fatal
                if e.kind is not ErrorKind.DECODE:
                    raise
                self.status.update(str(e))
                continue

            if self.handle_key(key) is EditResult.EXIT:
                return
