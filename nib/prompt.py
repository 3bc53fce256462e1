from __future__ import annotations

import enum
from typing import Callable
from typing import TYPE_CHECKING

from nib.key_event import Key
from nib.key_event import KeyEvent
from nib.key_event import KeyModifier

if TYPE_CHECKING:
    from nib.editor import Editor  # XXX: circular

PromptResult = enum.Enum('PromptResult', 'CANCELLED')

OnChange = Callable[[str], None]
OnKey = Callable[[Key, str], 'str | PromptResult | None']


class Prompt:
    """single line input on the message line

    `on_change` is called with the text after every edit, `on_key` with
    keys the prompt does not handle itself.  `on_key` ends the prompt by
    returning something other than `None`.
    """

    def __init__(
            self,
            editor: Editor,
            prompt: str,
            default: str = '',
            *,
            on_change: OnChange | None = None,
            on_key: OnKey | None = None,
    ) -> None:
        self._editor = editor
        self._prompt = prompt
        self._s = default
        self._x = len(default)
        self._on_change = on_change
        self._on_key = on_key

    def _render_prompt(self) -> None:
        y, width = self._editor.layout.message_y, self._editor.layout.width
        if width < 7:
            prompt_s = ''
        elif len(self._prompt) > width - 6:
            prompt_s = f'{self._prompt[:width - 7]}…: '
        else:
            prompt_s = f'{self._prompt}: '
        avail = width - len(prompt_s)
        start = max(0, self._x - avail + 1)
        line = self._s[start:start + avail]
        terminal = self._editor.terminal
        terminal.write(0, y, f'{prompt_s}{line}', reverse=True)
        terminal.set_cursor_position(len(prompt_s) + self._x - start, y)

    def _right(self) -> None:
        self._x = min(len(self._s), self._x + 1)

    def _left(self) -> None:
        self._x = max(0, self._x - 1)

    def _home(self) -> None:
        self._x = 0

    def _end(self) -> None:
        self._x = len(self._s)

    def _backspace(self) -> None:
        if self._x > 0:
            self._s = self._s[:self._x - 1] + self._s[self._x:]
            self._x -= 1

    def _delete(self) -> None:
        if self._x < len(self._s):
            self._s = self._s[:self._x] + self._s[self._x + 1:]

    def _cut_to_end(self) -> None:
        self._s = self._s[:self._x]

    def _resize(self) -> None:
        self._editor.resize()

    def _cancel(self) -> PromptResult:
        return self._editor.status.cancelled()

    def _submit(self) -> str:
        return self._s

    DISPATCH = {
        # movement
        KeyEvent.ARROW_RIGHT: _right,
        KeyEvent.ARROW_LEFT: _left,
        KeyEvent.HOME: _home,
        KeyEvent.END: _end,
        # editing
        KeyEvent.BACKSPACE: _backspace,
        KeyEvent.DELETE: _delete,
        KeyEvent.KILL: _cut_to_end,
        # misc
        KeyEvent.RESIZE: _resize,
        KeyEvent.ENTER: _submit,
        KeyEvent.ESCAPE: _cancel,
        KeyEvent.COPY: _cancel,
    }

    def _c(self, c: str) -> None:
        self._s = self._s[:self._x] + c + self._s[self._x:]
        self._x += len(c)

    def run(self) -> PromptResult | str:
        while True:
            self._editor.draw()
            self._render_prompt()

            before = self._s
            key = self._editor.get_key()
            if key.event is KeyEvent.CHAR:
                self._c(key.text)
            elif (
                    key.modifier is KeyModifier.NONE and
                    key.event in Prompt.DISPATCH
            ):
                ret = Prompt.DISPATCH[key.event](self)
                if ret is not None:
                    return ret
            elif self._on_key is not None:
                ret = self._on_key(key, self._s)
                if ret is not None:
                    return ret

            if self._on_change is not None and self._s != before:
                self._on_change(self._s)
