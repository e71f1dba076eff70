"""Diagnostic access to the database: URL, connection test, console, SQL."""

from typing import Annotated

import typer

from pglaunch.cli.shared.console import with_error_handling
from pglaunch.infra.postgres import PsqlExecutor
from pglaunch.infra.postgres import sql as statements

from .shared import AdminOption, QuietOption, UrlArgument, command_context, resolve


@with_error_handling
def show_url(
    target: UrlArgument = None,
    admin: AdminOption = False,
    quiet: QuietOption = False,
) -> None:
    """Print a URL that can be used to connect to the database."""
    context = command_context(quiet)
    typer.echo(resolve(context, target, admin).to_url())


@with_error_handling
def check_connection(
    target: UrlArgument = None,
    admin: AdminOption = False,
    quiet: QuietOption = False,
) -> None:
    """Test the connection to the database."""
    context = command_context(quiet)
    descriptor = resolve(context, target, admin)
    context.console.info(
        f"Testing connection to {descriptor.to_url(include_password=False)}"
    )
    PsqlExecutor(context.runner, descriptor).stream("SELECT 1")
    context.console.ok("Connection OK")


@with_error_handling
def open_console(
    target: UrlArgument = None,
    admin: AdminOption = False,
    quiet: QuietOption = False,
) -> None:
    """Open an SQL console."""
    context = command_context(quiet)
    code = PsqlExecutor(context.runner, resolve(context, target, admin)).interactive()
    if code:
        raise typer.Exit(code)


@with_error_handling
def run_sql(
    first: Annotated[
        str,
        typer.Argument(metavar="[URL] QUERY", help="Optional URL, then the query"),
    ],
    second: Annotated[str | None, typer.Argument(hidden=True)] = None,
    admin: AdminOption = False,
    quiet: QuietOption = False,
) -> None:
    """Run a query and print the result as CSV with a header row."""
    if second is None:
        target, query = None, first
    else:
        target, query = first, second

    context = command_context(quiet)
    executor = PsqlExecutor(context.runner, resolve(context, target, admin))
    executor.stream(statements.copy_to_csv(query))


@with_error_handling
def list_databases(quiet: QuietOption = False) -> None:
    """List all databases of the server, one per line."""
    context = command_context(quiet)
    executor = PsqlExecutor(context.runner, resolve(context, admin=True))
    executor.stream(statements.LIST_DATABASES, "-t", "-P", "format=unaligned")
