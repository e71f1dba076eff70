"""Server lifecycle and shell access."""

import typer

from pglaunch.cli.shared.console import with_error_handling
from pglaunch.infra.postgres import PostgresCluster, resolve_connection

from .shared import QuietOption, command_context

# Optional command families this image supports
EXTENSIONS = ("import/export", "create-database", "self-test")


@with_error_handling
def start_server(quiet: QuietOption = False) -> None:
    """Run a fresh database server (container entrypoint)."""
    context = command_context(quiet)
    settings = context.settings

    app_db = None
    if not settings.server_only:
        app_db = resolve_connection(settings).require("user", "name")

    cluster = PostgresCluster(
        context.runner, settings, context.paths, context.console
    )
    cluster.boot(app_db)


@with_error_handling
def run_bash(ctx: typer.Context, quiet: QuietOption = False) -> None:
    """Run bash with the remaining arguments."""
    context = command_context(quiet)
    result = context.runner.run(["bash", *ctx.args], capture_output=False)
    if result.returncode:
        raise typer.Exit(result.returncode)


def list_extensions(quiet: QuietOption = False) -> None:
    """List the optional command families supported by this image."""
    # -q is accepted by every command; there is nothing to silence here
    for name in EXTENSIONS:
        typer.echo(name)
