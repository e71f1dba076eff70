"""PostgreSQL operations delegated to the vendor tools.

This package provides the connection model plus Python wrappers around
psql, postgres single-user mode, pg_createcluster, pg_dump and pg_restore,
used by the CLI commands.
"""

from .backup import PostgresBackup
from .cluster import PostgresCluster
from .connection import (
    ConnectionDescriptor,
    DbSettings,
    get_settings,
    resolve_connection,
)
from .executors import PsqlExecutor, SingleUserExecutor, SqlExecutor
from .provision import DatabaseProvisioner
from .selftest import SelfTest

__all__ = [
    "ConnectionDescriptor",
    "DbSettings",
    "get_settings",
    "resolve_connection",
    "SqlExecutor",
    "PsqlExecutor",
    "SingleUserExecutor",
    "DatabaseProvisioner",
    "PostgresCluster",
    "PostgresBackup",
    "SelfTest",
]
