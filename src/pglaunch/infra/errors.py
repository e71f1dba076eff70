"""Error types raised by the infrastructure layer.

Infrastructure code raises these; the CLI boundary turns them into a
formatted message and a process exit code.
"""

from __future__ import annotations

from collections.abc import Sequence


class LaunchError(Exception):
    """Base class for failures that terminate a command."""

    exit_code: int = 1

    def __init__(
        self, message: str, details: str | None = None, exit_code: int | None = None
    ) -> None:
        self.message = message
        self.details = details
        if exit_code is not None:
            self.exit_code = exit_code
        super().__init__(message)


class ExternalToolError(LaunchError):
    """A delegated external process exited with a non-zero status."""

    def __init__(
        self, cmd: Sequence[str], returncode: int, stderr: str | None = None
    ) -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        super().__init__(
            f"{self.cmd[0]} failed with exit code {returncode}",
            details=stderr.strip() if stderr and stderr.strip() else None,
            # Signals come back negative from subprocess; shells report 128+N
            exit_code=returncode if returncode > 0 else 128 - returncode,
        )


class PreconditionError(LaunchError):
    """A required input or resource is missing."""


class InvalidConnectionURL(PreconditionError):
    """A connection URL could not be parsed."""


class MissingConnectionField(PreconditionError):
    """A connection descriptor lacks fields required to connect."""

    def __init__(self, fields: Sequence[str]) -> None:
        self.fields = list(fields)
        super().__init__(
            f"Missing database connection: {', '.join(self.fields)} not set",
            details="Set DATABASE_URL or the matching DATABASE_* variables.",
        )


class DatabaseNotFound(PreconditionError):
    """The requested database does not exist."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No such database: {name}", exit_code=1)


class RoleNotFound(PreconditionError):
    """The requested role does not exist."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"No such user: {name}", exit_code=2)


class SelfTestFailure(LaunchError):
    """A self-test check returned an unexpected result."""

    def __init__(self, check: str, expected: str, actual: str, exit_code: int) -> None:
        self.check = check
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Self-test failed: {check}",
            details=f"expected {expected!r}, got {actual!r}",
            exit_code=exit_code,
        )
