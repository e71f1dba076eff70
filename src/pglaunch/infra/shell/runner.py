"""Command runner for executing external tools.

Every PostgreSQL operation is delegated to a vendor binary; this module is
the single place where those processes are started.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import IO, NoReturn

from loguru import logger

from pglaunch.infra.errors import ExternalToolError

from .types import CommandResult

# Exit status a shell reports for a missing executable
COMMAND_NOT_FOUND = 127


class CommandRunner:
    """Low-level command executor with consistent result handling.

    Extra environment variables are layered over the current process
    environment, so secrets such as ``PGPASSWORD`` never appear on the
    command line.
    """

    def __init__(self, cwd: Path | None = None) -> None:
        """Initialize the command runner.

        Args:
            cwd: Working directory for child processes (defaults to the
                 current directory)
        """
        self.cwd = cwd

    def _env(self, env: Mapping[str, str | None] | None) -> dict[str, str] | None:
        if not env:
            return None
        return {k: v for k, v in {**os.environ, **env}.items() if v is not None}

    def run(
        self,
        cmd: Sequence[str],
        *,
        env: Mapping[str, str | None] | None = None,
        input: str | None = None,
        capture_output: bool = True,
        stdin: IO[bytes] | int | None = None,
        check: bool = False,
    ) -> CommandResult:
        """Execute a command and return a structured result.

        Args:
            cmd: Command and arguments as a sequence
            env: Extra environment variables for the child
            input: Text fed to the child's stdin
            capture_output: Whether to capture stdout/stderr; when False the
                child inherits this process's streams
            stdin: Explicit stdin for the child (ignored when input is given)
            check: Raise ExternalToolError on non-zero exit

        Returns:
            CommandResult with success status, output, and return code

        Raises:
            ExternalToolError: If check=True and the command fails
        """
        logger.debug(f"Running: {shlex.join(cmd)}")
        try:
            result = subprocess.run(
                list(cmd),
                cwd=self.cwd,
                env=self._env(env),
                input=input,
                stdin=None if input is not None else stdin,
                capture_output=capture_output,
                text=True,
            )
        except FileNotFoundError as e:
            raise ExternalToolError(cmd, COMMAND_NOT_FOUND, str(e)) from e
        logger.debug(f"Exit: {result.returncode}")

        if check and result.returncode != 0:
            raise ExternalToolError(cmd, result.returncode, result.stderr)

        return CommandResult(
            success=result.returncode == 0,
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            returncode=result.returncode,
        )

    def run_checked(
        self,
        cmd: Sequence[str],
        *,
        env: Mapping[str, str | None] | None = None,
        input: str | None = None,
    ) -> str:
        """Execute a command and return stdout, raising on failure.

        Raises:
            ExternalToolError: If the command exits with non-zero code
        """
        return self.run(cmd, env=env, input=input, check=True).stdout

    def run_streaming(
        self,
        cmd: Sequence[str],
        *,
        env: Mapping[str, str | None] | None = None,
        on_output: Callable[[str], None] | None = None,
        check: bool = True,
    ) -> CommandResult:
        """Execute a command with real-time output streaming.

        stderr is merged into stdout and each non-empty line is handed to
        on_output as it arrives.

        Raises:
            ExternalToolError: If check=True and the command fails
        """
        logger.debug(f"Running: {shlex.join(cmd)}")
        try:
            process = subprocess.Popen(
                list(cmd),
                cwd=self.cwd,
                env=self._env(env),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except FileNotFoundError as e:
            raise ExternalToolError(cmd, COMMAND_NOT_FOUND, str(e)) from e

        stdout_lines: list[str] = []
        if process.stdout:
            for line in iter(process.stdout.readline, ""):
                line = line.rstrip("\n")
                if line:
                    stdout_lines.append(line)
                    if on_output:
                        on_output(line)

        returncode = process.wait()
        logger.debug(f"Exit: {returncode}")

        output = "\n".join(stdout_lines)
        if check and returncode != 0:
            raise ExternalToolError(cmd, returncode, output)

        return CommandResult(
            success=returncode == 0,
            stdout=output,
            stderr="",
            returncode=returncode,
        )

    def replace_process(
        self, cmd: Sequence[str], *, env: Mapping[str, str | None] | None = None
    ) -> NoReturn:
        """Replace the current process with cmd (never returns)."""
        logger.debug(f"Exec: {shlex.join(cmd)}")
        if self.cwd is not None:
            os.chdir(self.cwd)
        try:
            os.execvpe(cmd[0], list(cmd), self._env(env) or dict(os.environ))
        except OSError as e:
            raise ExternalToolError(cmd, COMMAND_NOT_FOUND, str(e)) from e
