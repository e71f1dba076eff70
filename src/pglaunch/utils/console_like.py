from __future__ import annotations

import sys
from typing import Protocol

from rich.console import ConsoleRenderable


class ConsoleLike(Protocol):
    def print(self, msg: ConsoleRenderable | str | None = None) -> None: ...

    def info(self, msg: str) -> None: ...

    def warn(self, msg: str) -> None: ...

    def error(self, msg: str) -> None: ...

    def ok(self, msg: str) -> None: ...

    def detail(self, line: str) -> None: ...


class StderrConsole:
    """Minimal console fallback.

    Keeps infrastructure code usable without importing the CLI console.
    Writes to stderr so stdout stays reserved for command data.
    """

    def print(self, msg: ConsoleRenderable | str | None = None) -> None:
        print(msg if msg is not None else "", file=sys.stderr)

    def info(self, msg: str) -> None:
        print(msg, file=sys.stderr)

    def warn(self, msg: str) -> None:
        print(msg, file=sys.stderr)

    def error(self, msg: str) -> None:
        print(msg, file=sys.stderr)

    def ok(self, msg: str) -> None:
        print(msg, file=sys.stderr)

    def detail(self, line: str) -> None:
        print(f"    {line}", file=sys.stderr)


def coalesce_console(console: ConsoleLike | None) -> ConsoleLike:
    return console if console is not None else StderrConsole()
