from __future__ import annotations

import contextlib
import cProfile
import time
from typing import Generator
from typing import NamedTuple


class KeyTiming(NamedTuple):
    event: str
    duration: float
    rows: int

    def line(self) -> str:
        return f'{int(self.duration * 1e6)}\t{self.rows}\t{self.event}\n'


class Perf:
    """per key timings, only collected when a perf log was requested

    each timing also counts the rows repainted while handling the key
    """

    def __init__(self) -> None:
        self._prof: cProfile.Profile | None = None
        self._records: list[KeyTiming] = []
        self._current: tuple[str, float] | None = None

    def start(self, name: str) -> None:
        if self._prof is None:
            return
        assert self._current is None, self._current
        self._current = (name, time.perf_counter())
        self._prof.enable()

    def end(self, rows: int = 0) -> None:
        if self._prof is None:
            return
        assert self._current is not None
        self._prof.disable()
        name, started = self._current
        duration = time.perf_counter() - started
        self._records.append(KeyTiming(name, duration, rows))
        self._current = None

    def init_profiling(self) -> None:
        self._prof = cProfile.Profile()
        self.start('startup')

    def save_profiles(self, filename: str) -> None:
        assert self._prof is not None
        self._prof.dump_stats(f'{filename}.pstats')
        with open(filename, 'w', encoding='UTF-8') as f:
            f.write('μs\trows\tevent\n')
            f.writelines(record.line() for record in self._records)


@contextlib.contextmanager
def perf_log(filename: str | None) -> Generator[Perf, None, None]:
    perf = Perf()
    if filename is not None:
        perf.init_profiling()
    try:
        yield perf
    finally:
        if filename is not None:
            perf.end()
            perf.save_profiles(filename)
