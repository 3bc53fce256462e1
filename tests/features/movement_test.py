from __future__ import annotations

import pytest

from testing.runner import and_exit


@pytest.fixture
def thirty_lines(tmpdir):
    f = tmpdir.join('f')
    f.write('\n'.join(f'line_{i}' for i in range(30)))
    return f


def test_arrow_keys(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        h.await_cursor_position(x=0, y=0)
        h.press('Down')
        h.await_cursor_position(x=0, y=1)
        h.press('End')
        h.await_cursor_position(x=6, y=1)
        h.press('Right')
        h.await_cursor_position(x=0, y=2)
        h.press('Left')
        h.await_cursor_position(x=6, y=1)
        h.press('Home')
        h.await_cursor_position(x=0, y=1)
        h.press('Up')
        h.await_cursor_position(x=0, y=0)


def test_emacs_movement_keys(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        h.press('^N')
        h.press('^E')
        h.await_cursor_position(x=6, y=1)
        h.press('^A')
        h.await_cursor_position(x=0, y=1)
        h.press('^P')
        h.await_cursor_position(x=0, y=0)


def test_movement_at_edges(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        h.press('Left')
        h.press('Up')
        h.await_cursor_position(x=0, y=0)
        for _ in range(11):
            h.press('Down')
        # one past the last row
        h.await_cursor_position(x=0, y=10)
        h.press('Right')
        h.await_cursor_position(x=0, y=10)


def test_vertical_movement_keeps_column_on_short_rows(run, tmpdir):
    f = tmpdir.join('f')
    f.write('hello world\nhi\n')

    with run(str(f)) as h, and_exit(h):
        h.press('End')
        h.press('Down')
        h.await_cursor_position(x=2, y=1)


def test_vertical_movement_by_rendered_column(run, tmpdir):
    f = tmpdir.join('f')
    f.write('\tx\nabcdefghij\n')

    with run(str(f)) as h, and_exit(h):
        h.press('Right')
        h.await_cursor_position(x=8, y=0)
        h.press('Down')
        h.await_cursor_position(x=8, y=1)


def test_scrolls_down_one_row_at_a_time(run, thirty_lines):
    with run(str(thirty_lines)) as h, and_exit(h):
        for _ in range(21):
            h.press('Down')
        h.await_cursor_position(x=0, y=21)
        h.assert_screen_line_equals(0, 'line_0')
        h.press('Down')
        h.await_cursor_position(x=0, y=21)
        h.assert_screen_line_equals(0, 'line_1')
        h.assert_cursor_line_equals('line_22')


def test_scrolls_up(run, thirty_lines):
    with run(str(thirty_lines)) as h, and_exit(h):
        for _ in range(25):
            h.press('Down')
        for _ in range(25):
            h.press('Up')
        h.await_cursor_position(x=0, y=0)
        h.assert_screen_line_equals(0, 'line_0')


def test_page_down_and_up(run, thirty_lines):
    with run(str(thirty_lines)) as h, and_exit(h):
        h.press('PageDown')
        h.assert_screen_line_equals(0, 'line_9')
        h.assert_cursor_line_equals('line_22')
        h.await_cursor_position(x=0, y=13)
        h.press('PageUp')
        h.assert_screen_line_equals(0, 'line_0')
        h.await_cursor_position(x=0, y=0)


def test_page_down_short_buffer(run, ten_lines):
    with run(str(ten_lines)) as h, and_exit(h):
        h.press('PageDown')
        h.assert_screen_line_equals(0, 'line_0')
        h.await_cursor_position(x=0, y=10)


def test_horizontal_scrolling(run, tmpdir):
    f = tmpdir.join('f')
    f.write(f'{"a" * 100}b\n')

    with run(str(f)) as h, and_exit(h):
        h.press('End')
        h.await_cursor_position(x=79, y=0)
        h.assert_cursor_line_equals(f'{"a" * 78}b')
        h.press('Home')
        h.await_cursor_position(x=0, y=0)
        h.assert_cursor_line_equals('a' * 80)
