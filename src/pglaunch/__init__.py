"""pglaunch: PostgreSQL container entrypoint."""

__version__ = "0.1.0"
