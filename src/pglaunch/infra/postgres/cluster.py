"""PostgreSQL cluster bootstrap.

Prepares the on-disk cluster at container start: volume ownership, locale,
cluster creation via pg_createcluster, admin password, extensions and the
application role/database, then hands the process over to the server.
"""

from __future__ import annotations

import os
import shutil
import signal
import tempfile
from pathlib import Path
from types import FrameType
from typing import NoReturn

from pglaunch.infra.constants import (
    ADMIN_DATABASE,
    CREATECLUSTER_BIN,
    LISTEN_ALL_SETTING,
    LOCALE_GEN_BIN,
    OWN_VOLUME_BIN,
    PG_HBA_REMOTE_RULE,
    TEMPLATE_DATABASE,
    ClusterPaths,
)
from pglaunch.infra.errors import PreconditionError
from pglaunch.infra.shell import CommandRunner
from pglaunch.utils.console_like import ConsoleLike, coalesce_console

from . import sql
from .connection import ConnectionDescriptor, DbSettings
from .executors import SingleUserExecutor
from .provision import DatabaseProvisioner


def _exit_on_signal(signum: int, frame: FrameType | None) -> NoReturn:
    """Turn a termination signal into SystemExit so cleanup handlers run."""
    raise SystemExit(128 + signum)


class PostgresCluster:
    """Manages the local cluster owned by this container."""

    def __init__(
        self,
        runner: CommandRunner,
        settings: DbSettings,
        paths: ClusterPaths | None = None,
        console: ConsoleLike | None = None,
    ) -> None:
        self._runner = runner
        self._settings = settings
        self._console = coalesce_console(console)
        self.paths = paths or ClusterPaths()

    def _single(self, database: str) -> SingleUserExecutor:
        return SingleUserExecutor(self._runner, self.paths, database)

    def _stream(self, cmd: list[str]) -> None:
        self._runner.run_streaming(cmd, on_output=self._console.detail)

    def exists(self) -> bool:
        return self.paths.data_dir.is_dir()

    def own_volume(self) -> None:
        self._stream(["sudo", OWN_VOLUME_BIN])

    def ensure_locale(self) -> None:
        """Generate the requested locale if the system lacks it."""
        locale = self._settings.locale
        available = self._runner.run_checked(["locale", "-a"])
        if locale not in available:
            self._console.info(f"Generating locale: {locale}")
            self._stream(["sudo", LOCALE_GEN_BIN, locale])

    def create(self) -> None:
        """Create the cluster and open it for remote md5 connections.

        A partially created cluster is removed before the error propagates.
        """
        s = self._settings
        if not s.admin_password:
            raise PreconditionError(
                "DATABASE_ADMIN_PASSWORD is required to create a new cluster"
            )

        self._console.info(f"Creating cluster {self.paths.version}/{self.paths.cluster}")
        try:
            fd, pwfile = tempfile.mkstemp(prefix="pwroot")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(s.admin_password + "\n")
                self._stream(
                    [
                        CREATECLUSTER_BIN,
                        "-u",
                        "postgres",
                        f"--locale={s.locale}",
                        self.paths.version,
                        self.paths.cluster,
                        "--",
                        "-U",
                        s.admin_user,
                        f"--pwfile={pwfile}",
                    ]
                )
            finally:
                Path(pwfile).unlink(missing_ok=True)

            with open(self.paths.pg_hba_conf, "a") as f:
                f.write(PG_HBA_REMOTE_RULE + "\n")
            with open(self.paths.postgresql_conf, "a") as f:
                f.write(LISTEN_ALL_SETTING + "\n")
        except BaseException:
            self.cleanup()
            raise

    def cleanup(self) -> None:
        """Remove the cluster's config and data directories."""
        self._console.warn("Cleaning up cluster...")
        for path in (self.paths.config_dir, self.paths.data_dir):
            if path.exists():
                shutil.rmtree(path)
        self._console.info("Cleaning up done")

    def update_admin_password(self) -> None:
        s = self._settings
        if not s.admin_password:
            self._console.warn("DATABASE_ADMIN_PASSWORD not set, keeping admin password")
            return
        self._console.info(f"Update user: {s.admin_user}")
        self._single(ADMIN_DATABASE).execute(
            sql.alter_user_password(s.admin_user, s.admin_password)
        )

    def create_extensions(self) -> None:
        names = self._settings.extension_names
        if not names:
            return
        self._console.info(f"Creating extensions: {', '.join(names)}")
        executor = self._single(TEMPLATE_DATABASE)
        for name in names:
            executor.execute(sql.create_extension(name))

    def ensure(self) -> None:
        """Bring the on-disk cluster to the configured state."""
        self.own_volume()
        self.ensure_locale()
        if not self.exists():
            self.create()
        else:
            self.update_admin_password()
        self.create_extensions()

    def provision(self, app: ConnectionDescriptor) -> None:
        """Create the application role and database in single-user mode."""
        app.require("user", "name")
        DatabaseProvisioner(self._single(ADMIN_DATABASE), self._console).create_database(
            str(app.name), str(app.user), app.password or ""
        )

    def remove_pid(self) -> None:
        self.paths.pid_file.unlink(missing_ok=True)

    def server_cmd(self) -> list[str]:
        return [str(self.paths.postgres_bin), "-c", f"config_file={self.paths.postgresql_conf}"]

    def boot(self, app: ConnectionDescriptor | None = None) -> NoReturn:
        """Prepare the cluster and replace this process with the server.

        Args:
            app: Application database to provision; None runs the server only
        """
        # SIGTERM (docker stop) must unwind through the cleanup below
        previous = signal.signal(signal.SIGTERM, _exit_on_signal)
        try:
            self.ensure()
            if app is not None:
                self.provision(app)
        except BaseException:
            self.remove_pid()
            raise
        finally:
            signal.signal(signal.SIGTERM, previous or signal.SIG_DFL)
        self._console.ok("Starting PostgreSQL server")
        self._runner.replace_process(self.server_cmd())
