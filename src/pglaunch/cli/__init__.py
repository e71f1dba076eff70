"""Main CLI application module.

This module provides the container entrypoint. Each invocation runs exactly
one command:

- run: Prepare the cluster and start the server
- url / test / console / sql: Diagnostic access
- create-database / drop-database / list-databases: Role and database lifecycle
- export / import: pg_dump and pg_restore transfers
- self-test-setup / self-test: Image self-test
- extensions / bash: Introspection and shell access
"""

import sys
from collections.abc import Sequence

import click
import typer

from pglaunch.utils.log_config import configure_logging

from .commands import (
    check_connection,
    create_database,
    drop_database,
    export_database,
    import_database,
    list_databases,
    list_extensions,
    open_console,
    run_bash,
    run_self_test,
    run_sql,
    setup_self_test,
    show_url,
    start_server,
)

PROG_NAME = "pglaunch"

# Create the main CLI application
app = typer.Typer(
    help="PostgreSQL container entrypoint",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# Server lifecycle
app.command("run")(start_server)
app.command(
    "bash",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)(run_bash)
app.command("extensions")(list_extensions)

# Diagnostic access
app.command("url")(show_url)
app.command("test")(check_connection)
app.command("console")(open_console)
app.command("sql")(run_sql)

# Databases
app.command("create-database")(create_database)
app.command("drop-database")(drop_database)
app.command("list-databases")(list_databases)

# Transfers
app.command("export")(export_database)
app.command("import")(import_database)

# Self-test
app.command("self-test-setup")(setup_self_test)
app.command("self-test")(run_self_test)


def main(argv: Sequence[str] | None = None) -> int:
    """Run one command and return the process exit code.

    Missing or unknown commands and other usage errors print usage and
    return 1.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    configure_logging()

    if not args:
        app(args=["--help"], prog_name=PROG_NAME, standalone_mode=False)
        return 1

    try:
        rv = app(args=args, prog_name=PROG_NAME, standalone_mode=False)
    except click.exceptions.UsageError as e:
        e.show()
        return 1
    except click.exceptions.Abort:
        return 130
    return rv if isinstance(rv, int) else 0


def entrypoint() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    entrypoint()
