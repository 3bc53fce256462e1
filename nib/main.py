from __future__ import annotations

import argparse
import signal
import sys
from typing import Sequence

from nib.buffer import Buffer
from nib.editor import Editor
from nib.error import EditorError
from nib.perf import perf_log
from nib.terminal import CursesTerminal
from nib.terminal import make_stdscr


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument('filename', nargs='?')
    parser.add_argument('--perf-log')
    args = parser.parse_args(argv)

    # load before taking over the terminal so errors are readable
    try:
        if args.filename is None:
            buffer = Buffer()
        else:
            buffer = Buffer.from_file(args.filename)
    except EditorError as e:
        print(f'nib: {e}', file=sys.stderr)
        return 1

    # ignore backgrounding signals, ^Z is undo
    if sys.platform != 'win32':  # pragma: win32 no cover  # pragma: no branch
        signal.signal(signal.SIGTSTP, signal.SIG_IGN)

    try:
        with perf_log(args.perf_log) as perf, make_stdscr() as stdscr:
            Editor(CursesTerminal(stdscr), buffer, perf).run()
    except EditorError as e:
        print(f'nib: {e}', file=sys.stderr)
        return 1
    else:
        return 0


if __name__ == '__main__':
    raise SystemExit(main())
