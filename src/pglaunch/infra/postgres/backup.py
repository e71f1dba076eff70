"""PostgreSQL export and import.

Export runs pg_dump in custom format, either to stdout or to a dump file
that can be uploaded with an HTTP PUT. Import loads a dump from stdin or a
URL and restores it with pg_restore.
"""

from __future__ import annotations

import math
import shlex
import shutil
import sys
from pathlib import Path
from typing import BinaryIO

from pglaunch.infra.constants import DUMP_FILE
from pglaunch.infra.errors import PreconditionError
from pglaunch.infra.shell import CommandRunner
from pglaunch.utils.console_like import ConsoleLike, coalesce_console

from .connection import ConnectionDescriptor

STDIO_TARGET = "-"
PLPGSQL_COMMENT = "COMMENT - EXTENSION plpgsql"


SIZE_UNITS = ("K", "M", "G", "T", "P")


def human_size(num_bytes: int) -> str:
    """Format a byte count the way ``du -h`` does (e.g. 4.0K, 12M).

    Sizes are rounded up, with one decimal below 10.
    """
    if num_bytes < 1024:
        return f"{num_bytes}B"

    size = num_bytes / 1024
    unit = 0
    while math.ceil(size) >= 1024 and unit < len(SIZE_UNITS) - 1:
        size /= 1024
        unit += 1

    tenths = math.ceil(size * 10)
    if tenths < 100:
        return f"{tenths / 10:.1f}{SIZE_UNITS[unit]}"
    return f"{math.ceil(size)}{SIZE_UNITS[unit]}"


class PostgresBackup:
    """Exports and imports one database using pg_dump/pg_restore."""

    def __init__(
        self,
        runner: CommandRunner,
        descriptor: ConnectionDescriptor,
        console: ConsoleLike | None = None,
        dump_file: Path = DUMP_FILE,
    ) -> None:
        self._runner = runner
        self._descriptor = descriptor.require()
        self._console = coalesce_console(console)
        self.dump_file = dump_file

    @property
    def list_file(self) -> Path:
        return self.dump_file.with_name(self.dump_file.name + ".list")

    def export_dump(
        self,
        target: str | None = None,
        *,
        verbose: bool = True,
        extra_opts: str | None = None,
    ) -> Path | None:
        """Dump the database.

        Args:
            target: "-" writes the dump to stdout; a URL uploads the dump
                    file there after writing it; None only writes the file
            verbose: Pass --verbose to pg_dump
            extra_opts: Additional pg_dump options (shell-style string)

        Returns:
            Path of the dump file, or None when streamed to stdout
        """
        d = self._descriptor
        to_stdout = target == STDIO_TARGET

        cmd = ["pg_dump", "-Fc"]
        if verbose:
            cmd.append("--verbose")
        cmd += d.client_args()
        cmd += shlex.split(extra_opts or "")
        if not to_stdout:
            cmd += ["--file", str(self.dump_file)]
        cmd.append(str(d.name))

        if to_stdout:
            self._runner.run(cmd, env=d.client_env(), capture_output=False, check=True)
            return None

        self._runner.run_streaming(cmd, env=d.client_env(), on_output=self._console.detail)
        size = human_size(self.dump_file.stat().st_size)
        self._console.info(f"Exported database size is {size}")

        if target:
            self.upload(target)
        return self.dump_file

    def upload(self, url: str) -> None:
        """PUT the dump file to url."""
        self._console.info("Uploading database dump")
        self._runner.run_checked(
            [
                "curl",
                "-0",
                "-s",
                "-o",
                "/dev/null",
                "-X",
                "PUT",
                "-T",
                str(self.dump_file),
                url,
            ]
        )

    def fetch(self, source: str | None, stdin: BinaryIO | None = None) -> None:
        """Place the dump to import at dump_file.

        Raises:
            PreconditionError: If no source was given
        """
        if source == STDIO_TARGET:
            stream = stdin if stdin is not None else sys.stdin.buffer
            with open(self.dump_file, "wb") as f:
                shutil.copyfileobj(stream, f)
        elif source:
            self._runner.run_checked(["curl", "-s", source, "-o", str(self.dump_file)])
        else:
            raise PreconditionError(
                "Nothing to import", details="Pass '-' to read stdin or a dump URL."
            )

    def write_restore_list(self) -> Path:
        """Write the dump's table of contents minus the plpgsql comment."""
        toc = self._runner.run_checked(["pg_restore", "-l", str(self.dump_file)])
        kept = [line for line in toc.splitlines() if PLPGSQL_COMMENT not in line]
        self.list_file.write_text("\n".join(kept) + "\n")
        return self.list_file

    def import_dump(
        self,
        source: str | None,
        *,
        import_opts: str | None = None,
        stdin: BinaryIO | None = None,
    ) -> None:
        """Fetch a dump and restore it into the database.

        Args:
            source: "-" reads the dump from stdin, otherwise a URL to fetch
            import_opts: pg_restore options replacing the defaults
            stdin: Stream used for "-" (defaults to sys.stdin)
        """
        d = self._descriptor
        self.fetch(source, stdin)
        list_file = self.write_restore_list()

        if import_opts:
            opts = shlex.split(import_opts)
        else:
            opts = ["-Fc", "--no-owner", "--no-acl", "--verbose", "-L", str(list_file)]

        size = human_size(self.dump_file.stat().st_size)
        self._console.info(f"Importing database size of {size}")

        self._runner.run_streaming(
            [
                "pg_restore",
                *d.client_args(),
                "-d",
                str(d.name),
                *opts,
                str(self.dump_file),
            ],
            env=d.client_env(),
            on_output=self._console.detail,
        )
