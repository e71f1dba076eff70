"""Application role and database lifecycle on a running server."""

from typing import Annotated

import typer

from pglaunch.cli.shared.console import with_error_handling
from pglaunch.infra.constants import DEFAULT_PORT
from pglaunch.infra.postgres import DatabaseProvisioner, PsqlExecutor, resolve_connection

from .shared import QuietOption, command_context, resolve


@with_error_handling
def create_database(
    proxy: Annotated[
        bool,
        typer.Option(
            "--proxy",
            "-p",
            help="Afterwards forward DATABASE_PORT to the server with socat",
        ),
    ] = False,
    quiet: QuietOption = False,
) -> None:
    """Create (or update) the application user and database."""
    context = command_context(quiet)
    admin = resolve(context, admin=True)
    app_db = resolve_connection(context.settings).require("user", "name")

    provisioner = DatabaseProvisioner(
        PsqlExecutor(context.runner, admin), context.console
    )
    provisioner.create_database(
        str(app_db.name), str(app_db.user), app_db.password or ""
    )

    if proxy:
        listen_port = context.settings.port or DEFAULT_PORT
        context.console.info(
            f"Starting proxy :{listen_port} -> {admin.host}:{admin.port}"
        )
        context.runner.run(
            [
                "socat",
                f"TCP4-LISTEN:{listen_port},fork,reuseaddr",
                f"TCP4:{admin.host}:{admin.port}",
            ],
            capture_output=False,
            check=True,
        )


@with_error_handling
def drop_database(quiet: QuietOption = False) -> None:
    """Drop the application database and user.

    Exits 1 when the database does not exist and 2 when the user does not.
    """
    context = command_context(quiet)
    admin = resolve(context, admin=True)
    app_db = resolve_connection(context.settings).require("user", "name")

    provisioner = DatabaseProvisioner(
        PsqlExecutor(context.runner, admin), context.console
    )
    provisioner.drop_database(str(app_db.name), str(app_db.user))
