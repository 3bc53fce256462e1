from __future__ import annotations

import enum

ErrorKind = enum.Enum('ErrorKind', 'IO DECODE TERMINAL')


class EditorError(RuntimeError):
    def __init__(self, kind: ErrorKind, msg: str) -> None:
        super().__init__(msg)
        self.kind = kind

    def __str__(self) -> str:
        return f'{self.kind.name.lower()} error: {self.args[0]}'
