"""Export and import of the application database."""

from typing import Annotated

import typer

from pglaunch.cli.shared.console import with_error_handling
from pglaunch.infra.postgres import PostgresBackup

from .shared import QuietOption, command_context, resolve


@with_error_handling
def export_database(
    target: Annotated[
        str | None,
        typer.Argument(
            metavar="[-|URL]",
            help="'-' streams the dump to stdout; a URL receives an HTTP PUT of the dump",
            show_default=False,
        ),
    ] = None,
    quiet: QuietOption = False,
) -> None:
    """Export the database as a pg_dump custom-format archive."""
    context = command_context(quiet)
    backup = PostgresBackup(context.runner, resolve(context), context.console)
    backup.export_dump(
        target, verbose=not quiet, extra_opts=context.settings.export_opts
    )


@with_error_handling
def import_database(
    source: Annotated[
        str | None,
        typer.Argument(
            metavar="-|URL",
            help="'-' reads the dump from stdin; otherwise a URL to download",
            show_default=False,
        ),
    ] = None,
    quiet: QuietOption = False,
) -> None:
    """Import a pg_dump custom-format archive into the database."""
    context = command_context(quiet)
    backup = PostgresBackup(context.runner, resolve(context), context.console)
    backup.import_dump(source, import_opts=context.settings.import_opts)
