"""Shell command abstractions for the PostgreSQL vendor tools.

Usage:
    from pglaunch.infra.shell import CommandRunner

    runner = CommandRunner()
    runner.run_checked(["psql", "--version"])
"""

from .runner import CommandRunner
from .types import CommandResult

__all__ = ["CommandRunner", "CommandResult"]
