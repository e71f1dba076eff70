"""Role and database provisioning.

Creates or updates the application role and database, and drops them again.
Works with any SqlExecutor so the same logic runs in single-user mode at
container start and through psql against a live server.
"""

from __future__ import annotations

from pglaunch.infra.errors import DatabaseNotFound, RoleNotFound
from pglaunch.utils.console_like import ConsoleLike, coalesce_console

from . import sql
from .executors import SqlExecutor


class DatabaseProvisioner:
    """Creates and drops the application role and database."""

    def __init__(
        self, executor: SqlExecutor, console: ConsoleLike | None = None
    ) -> None:
        self._executor = executor
        self._console = coalesce_console(console)

    def has_database(self, name: str) -> bool:
        return name in self._executor.query(sql.select_database(name))

    def has_user(self, name: str) -> bool:
        return name in self._executor.query(sql.select_user(name))

    def _run(self, statement: str) -> None:
        output = self._executor.execute(statement)
        for line in output.splitlines():
            if line.strip():
                self._console.detail(line)

    def ensure_role(self, user: str, password: str) -> None:
        """Create the login role, or reset its password if it exists."""
        if not self.has_user(user):
            self._console.info(f"Creating user: {user}")
            self._run(sql.create_role(user, password))
        else:
            self._console.info(f"Update user: {user}")
            self._run(sql.alter_user_password(user, password))

    def ensure_database(self, name: str, owner: str) -> None:
        """Create the database owned by owner unless it already exists."""
        if self.has_database(name):
            self._console.info(f"Database {name} already exists")
            return
        self._console.info(f"Creating database: {name}")
        self._run(sql.create_database(name, owner))

    def create_database(self, name: str, user: str, password: str) -> None:
        """Provision role then database."""
        self.ensure_role(user, password)
        self.ensure_database(name, user)

    def drop_database(self, name: str, user: str) -> None:
        """Drop the database, then its role.

        Raises:
            DatabaseNotFound: If the database does not exist (nothing dropped)
            RoleNotFound: If the role does not exist (database already dropped)
        """
        if not self.has_database(name):
            raise DatabaseNotFound(name)
        self._console.info(f"Dropping database: {name}")
        self._run(sql.drop_database(name))

        if not self.has_user(user):
            raise RoleNotFound(user)
        self._console.info(f"Dropping user: {user}")
        self._run(sql.drop_user(user))
