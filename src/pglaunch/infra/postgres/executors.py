"""SQL executors.

Two ways to run a statement against the cluster:

- ``SingleUserExecutor`` drives ``postgres --single`` and is used while the
  server is not running yet (container start-up).
- ``PsqlExecutor`` drives ``psql`` against a reachable server.

Both stop on the first error and surface the tool's exit code.
"""

from __future__ import annotations

import re
from typing import Protocol

from pglaunch.infra.constants import ClusterPaths
from pglaunch.infra.shell import CommandRunner

from .connection import ConnectionDescriptor

# Tuple line printed by single-user mode, e.g.
#   1: datname = "postgres"	(typeid = 19, len = 64, typmod = -1, byval = f)
_SINGLE_USER_VALUE = re.compile(r'\d+: \w+ = "(.*?)"\s*\(typeid')


class SqlExecutor(Protocol):
    def execute(self, sql: str) -> str:
        """Run a statement and return its raw output."""
        ...

    def query(self, sql: str) -> list[str]:
        """Run a query and return one string per row (first column)."""
        ...


class PsqlExecutor:
    """Run SQL through psql against a connection descriptor."""

    def __init__(self, runner: CommandRunner, descriptor: ConnectionDescriptor) -> None:
        self._runner = runner
        self._descriptor = descriptor.require()

    def base_cmd(self) -> list[str]:
        d = self._descriptor
        return [
            "psql",
            "-v",
            "ON_ERROR_STOP=on",
            *d.client_args(),
            str(d.name),
        ]

    def execute(self, sql: str) -> str:
        return self._runner.run_checked(
            [*self.base_cmd(), "-q", "-c", sql], env=self._descriptor.client_env()
        )

    def query(self, sql: str) -> list[str]:
        output = self._runner.run_checked(
            [*self.base_cmd(), "-q", "-t", "-P", "format=unaligned", "-c", sql],
            env=self._descriptor.client_env(),
        )
        return [line.rstrip() for line in output.splitlines() if line.strip()]

    def stream(self, sql: str, *extra: str) -> None:
        """Run a statement with psql writing straight to our stdout."""
        self._runner.run(
            [*self.base_cmd(), "-q", "-c", sql, *extra],
            env=self._descriptor.client_env(),
            capture_output=False,
            check=True,
        )

    def interactive(self) -> int:
        """Open an interactive psql session and return its exit status."""
        result = self._runner.run(
            self.base_cmd(),
            env=self._descriptor.client_env(),
            capture_output=False,
        )
        return result.returncode


class SingleUserExecutor:
    """Run SQL through ``postgres --single`` with the statement on stdin."""

    def __init__(
        self,
        runner: CommandRunner,
        paths: ClusterPaths,
        database: str | None = None,
    ) -> None:
        self._runner = runner
        self._paths = paths
        self._database = database

    def base_cmd(self) -> list[str]:
        cmd = [
            str(self._paths.postgres_bin),
            "--single",
            "-c",
            f"config_file={self._paths.postgresql_conf}",
        ]
        if self._database:
            cmd.append(self._database)
        return cmd

    def execute(self, sql: str) -> str:
        return self._runner.run_checked(self.base_cmd(), input=sql)

    def query(self, sql: str) -> list[str]:
        return _SINGLE_USER_VALUE.findall(self.execute(sql))
