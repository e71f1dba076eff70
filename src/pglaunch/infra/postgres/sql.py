"""SQL statement templates.

The statements are passed verbatim to psql or to single-user mode, so names
and passwords are quoted here rather than bound as parameters.
"""

from __future__ import annotations


def quote_ident(name: str) -> str:
    """Quote an identifier, doubling embedded double quotes."""
    return '"' + name.replace('"', '""') + '"'


def quote_literal(value: str) -> str:
    """Quote a string literal, doubling embedded single quotes."""
    return "'" + value.replace("'", "''") + "'"


def select_database(name: str) -> str:
    return f"SELECT datname FROM pg_database WHERE datname={quote_literal(name)}"


def select_user(name: str) -> str:
    return f"SELECT usename FROM pg_user WHERE usename={quote_literal(name)}"


def create_role(user: str, password: str) -> str:
    return (
        f"CREATE ROLE {quote_ident(user)} WITH LOGIN "
        f"PASSWORD {quote_literal(password)} VALID UNTIL 'infinity'"
    )


def alter_user_password(user: str, password: str) -> str:
    return f"ALTER USER {quote_ident(user)} WITH PASSWORD {quote_literal(password)};"


def create_database(name: str, owner: str) -> str:
    return f"CREATE DATABASE {quote_ident(name)} OWNER={quote_ident(owner)}"


def drop_database(name: str) -> str:
    return f"DROP DATABASE {quote_ident(name)}"


def drop_user(user: str) -> str:
    return f"DROP USER {quote_ident(user)}"


def create_extension(name: str) -> str:
    return f"CREATE EXTENSION IF NOT EXISTS {quote_ident(name)}"


def copy_to_csv(query: str) -> str:
    """Wrap a query so psql streams its result as CSV with a header row."""
    return f"COPY ({query}) TO STDOUT with CSV HEADER"


LIST_DATABASES = "SELECT datname FROM pg_database ORDER BY datname"
