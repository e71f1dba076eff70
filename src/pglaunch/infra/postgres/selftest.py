"""Container self-test.

``setup`` seeds a small table; ``run`` checks the seeded rows survived and
that the database accepts writes. Each check has its own exit code.
"""

from __future__ import annotations

from dataclasses import dataclass

from pglaunch.infra.errors import SelfTestFailure
from pglaunch.utils.console_like import ConsoleLike, coalesce_console

from .executors import SqlExecutor

SETUP_STATEMENTS = (
    "CREATE TABLE Standard (id INTEGER, name VARCHAR(200), PRIMARY KEY(id))",
    "INSERT INTO Standard (id, name) VALUES (1, 'Brian')",
    "INSERT INTO Standard (id, name) VALUES (2, 'Søren')",
    "INSERT INTO Standard (id, name) VALUES (3, 'Jagadish')",
)

INSERT_STATEMENT = "INSERT INTO Standard (id, name) VALUES (4, 'Jacob')"
COUNT_QUERY = "SELECT count(id) FROM Standard"


@dataclass(frozen=True)
class SelfTestCheck:
    """A query whose rows, joined by spaces, must equal expected."""

    label: str
    query: str
    expected: str
    exit_code: int


PRELOADED_CHECKS = (
    SelfTestCheck("preloaded data length", COUNT_QUERY, "3", 1),
    SelfTestCheck(
        "preloaded data id column", "SELECT id FROM Standard ORDER BY id", "1 2 3", 2
    ),
    SelfTestCheck(
        "preloaded data name column",
        "SELECT name FROM Standard ORDER BY name",
        "Brian Jagadish Søren",
        3,
    ),
)
INSERT_CHECK = SelfTestCheck("data insert", COUNT_QUERY, "4", 4)


class SelfTest:
    def __init__(self, executor: SqlExecutor, console: ConsoleLike | None = None) -> None:
        self._executor = executor
        self._console = coalesce_console(console)

    def setup(self) -> None:
        for statement in SETUP_STATEMENTS:
            self._console.info(statement)
            self._executor.execute(statement)

    def check(self, check: SelfTestCheck) -> str:
        """Run one check.

        Raises:
            SelfTestFailure: With the check's exit code on mismatch
        """
        result = " ".join(self._executor.query(check.query))
        self._console.info(f"Testing {check.label}... {result}")
        if result != check.expected:
            raise SelfTestFailure(check.label, check.expected, result, check.exit_code)
        return result

    def run(self) -> None:
        for check in PRELOADED_CHECKS:
            self.check(check)
        self._executor.execute(INSERT_STATEMENT)
        self.check(INSERT_CHECK)
        self._console.ok("Self-test passed")
