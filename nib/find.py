from __future__ import annotations

from typing import TYPE_CHECKING

from nib.cursor import Cursor
from nib.key_event import Key
from nib.key_event import KeyEvent
from nib.key_event import KeyModifier
from nib.pos import Pos
from nib.prompt import Prompt
from nib.prompt import PromptResult

if TYPE_CHECKING:
    from nib.editor import Editor  # XXX: circular

# keys which accept the current match and then move the cursor
ACCEPT_MOVES = frozenset((
    KeyEvent.ARROW_UP,
    KeyEvent.ARROW_DOWN,
    KeyEvent.PAGE_UP,
    KeyEvent.PAGE_DOWN,
))


def mark_match(editor: Editor, at: Pos, keyword: str) -> None:
    """move the cursor to a match and highlight it

    the viewport is scrolled so the whole keyword is visible when it fits.
    """
    buffer, screen = editor.buffer, editor.screen
    editor.cursor.set(buffer, at)

    row = buffer[at.y]
    x1 = row.width_range(0, at.x)
    x2 = row.width_range(0, at.x + len(keyword))
    if 0 < x2 - x1 < screen.width:
        last = row.width_range(0, at.x + len(keyword) - 1)
        screen.fit(buffer, Pos(last, at.y))
    screen.fit(buffer, editor.cursor.render(buffer))
    screen.highlight(at.y, x1, x2 - x1)


class Find:
    """incremental search, started with ^F"""

    def __init__(self, editor: Editor) -> None:
        self._editor = editor
        self.source = editor.cursor.pos

    def _search(self, keyword: str) -> None:
        editor = self._editor
        if not keyword:
            editor.screen.clear_highlight()
            editor.cursor.set(editor.buffer, Pos(0, 0))
            return

        at = editor.buffer.find_at(editor.cursor, keyword)
        if at is None:
            editor.screen.clear_highlight()
        else:
            mark_match(editor, at, keyword)

    def _step(self, keyword: str, *, reverse: bool) -> None:
        editor = self._editor
        buffer = editor.buffer
        probe = Cursor(editor.cursor.x, editor.cursor.y)
        if reverse:
            probe.move_left(buffer)
            at = buffer.rfind_at(probe, keyword)
        else:
            probe.move_right(buffer)
            at = buffer.find_at(probe, keyword)
        if at is not None:
            mark_match(editor, at, keyword)

    def _on_key(self, key: Key, keyword: str) -> str | None:
        if key.event is KeyEvent.F3:
            self._step(keyword, reverse=key.modifier is KeyModifier.SHIFT)
            return None
        elif key.event in ACCEPT_MOVES:
            self._editor.MOVEMENT[key.event](self._editor)
            return keyword
        else:
            return None

    def run(self) -> bool:
        """returns whether the cursor moved"""
        editor = self._editor
        ret = Prompt(
            editor, 'find', on_change=self._search, on_key=self._on_key,
        ).run()
        editor.screen.clear_highlight()
        if ret is PromptResult.CANCELLED:
            editor.cursor.set(editor.buffer, self.source)
        return editor.cursor.pos != self.source


class Replace:
    """prompt for a keyword and its replacement then confirm each match"""

    def __init__(self, editor: Editor) -> None:
        self._editor = editor
        self.source = editor.cursor.pos
        self._wrapped = False

    def _next_match(self, at: Pos, keyword: str) -> Pos | None:
        buffer = self._editor.buffer
        ret = buffer.find_at(at, keyword)
        if ret is None and not self._wrapped:
            self._wrapped = True
            ret = buffer.find_at(Pos(0, 0), keyword)
        # after wrapping around the search ends where it started
        if (
                ret is not None and
                self._wrapped and
                (ret.y, ret.x) >= (self.source.y, self.source.x)
        ):
            return None
        return ret

    def run(self) -> None:
        editor = self._editor
        buffer, cursor = editor.buffer, editor.cursor

        keyword = editor.prompt('replace')
        if keyword is PromptResult.CANCELLED:
            return
        replacement = editor.prompt('replace with', allow_empty=True)
        if replacement is PromptResult.CANCELLED:
            return

        at = self._next_match(cursor.pos, keyword)
        if at is None:
            editor.status.update('no matches')
            return

        count = 0
        last = None
        while at is not None:
            mark_match(editor, at, keyword)
            res = editor.quick_prompt('replace', ('yes', 'no'))
            if res is PromptResult.CANCELLED:
                break
            elif res == 'y':
                buffer.replace(at, len(keyword), replacement)
                count += 1
                last = at
                # continue after the replacement so it is not matched again
                at = self._next_match(
                    Pos(at.x + len(replacement), at.y), keyword,
                )
            else:
                at = self._next_match(Pos(at.x + 1, at.y), keyword)

        editor.screen.clear_highlight()
        cursor.set(buffer, last if last is not None else self.source)
        if res is not PromptResult.CANCELLED:
            occurrences = 'occurrence' if count == 1 else 'occurrences'
            editor.status.update(f'replaced {count} {occurrences}')
