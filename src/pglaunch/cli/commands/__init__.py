"""CLI command implementations grouped by concern.

- server: run, bash, extensions
- access: url, test, console, sql, list-databases
- databases: create-database, drop-database
- transfer: export, import
- selftest: self-test-setup, self-test
"""

from .access import check_connection, list_databases, open_console, run_sql, show_url
from .databases import create_database, drop_database
from .selftest import run_self_test, setup_self_test
from .server import list_extensions, run_bash, start_server
from .transfer import export_database, import_database

__all__ = [
    "start_server",
    "run_bash",
    "list_extensions",
    "show_url",
    "check_connection",
    "open_console",
    "run_sql",
    "list_databases",
    "create_database",
    "drop_database",
    "export_database",
    "import_database",
    "setup_self_test",
    "run_self_test",
]
