"""CLI context and dependency container."""

from __future__ import annotations

from dataclasses import dataclass

import click
import typer

from pglaunch.cli.shared.console import CLIConsole, console
from pglaunch.infra.constants import ClusterPaths
from pglaunch.infra.postgres import DbSettings, get_settings
from pglaunch.infra.shell import CommandRunner
from pglaunch.utils.log_config import configure_logging


@dataclass(frozen=True)
class CLIContext:
    """Runtime dependencies for CLI commands."""

    console: CLIConsole
    settings: DbSettings
    runner: CommandRunner
    paths: ClusterPaths


def build_cli_context() -> CLIContext:
    """Build a fresh CLIContext from the process environment."""
    settings = get_settings()
    configure_logging(settings.debug)
    return CLIContext(
        console=console,
        settings=settings,
        runner=CommandRunner(),
        paths=ClusterPaths(),
    )


def get_cli_context(ctx: typer.Context | None = None) -> CLIContext:
    """Return the CLIContext from Typer, falling back to a new instance."""
    context = ctx or click.get_current_context(silent=True)
    if context and isinstance(context.obj, CLIContext):
        return context.obj
    cli_context = build_cli_context()
    if context:
        context.obj = cli_context
    return cli_context
