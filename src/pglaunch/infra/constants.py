"""Cluster constants and paths.

This module centralizes the fixed paths, binaries and defaults used when
operating the PostgreSQL container.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

POSTGRES_VERSION = "9.3"
CLUSTER_NAME = "main"

DEFAULT_SCHEME = "postgres"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5432
DEFAULT_LOCALE = "en_US.UTF-8"
DEFAULT_ADMIN_USER = "postgres"
ADMIN_DATABASE = "postgres"
TEMPLATE_DATABASE = "template1"

# DATABASE_EXTENSIONS value meaning "no extensions"
OPTIONAL_EXTENSIONS = "optional"

DUMP_FILE = Path("/tmp/database.dump")

OWN_VOLUME_BIN = "/usr/local/bin/own-volume"
LOCALE_GEN_BIN = "/usr/sbin/locale-gen"
CREATECLUSTER_BIN = "/usr/bin/pg_createcluster"

PG_HBA_REMOTE_RULE = "host all all 0.0.0.0/0 md5"
LISTEN_ALL_SETTING = "listen_addresses='*'"


@dataclass(frozen=True)
class ClusterPaths:
    """Filesystem layout of a Debian-style PostgreSQL cluster.

    Attributes:
        version: PostgreSQL major version
        root: Base directory holding data and config trees
        lib_root: Directory holding per-version server binaries
    """

    version: str = POSTGRES_VERSION
    cluster: str = CLUSTER_NAME
    root: Path = Path("/var/lib/postgresql")
    lib_root: Path = Path("/usr/lib/postgresql")

    @property
    def data_dir(self) -> Path:
        return self.root / self.version / self.cluster

    @property
    def config_dir(self) -> Path:
        return self.root / "etc" / self.version / self.cluster

    @property
    def postgres_bin(self) -> Path:
        return self.lib_root / self.version / "bin" / "postgres"

    @property
    def postgresql_conf(self) -> Path:
        return self.config_dir / "postgresql.conf"

    @property
    def pg_hba_conf(self) -> Path:
        return self.config_dir / "pg_hba.conf"

    @property
    def pid_file(self) -> Path:
        return self.data_dir / "postmaster.pid"
