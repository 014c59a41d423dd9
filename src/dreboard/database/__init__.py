"""Database layer for dreboard application."""

from dreboard.database.base import Database
from dreboard.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
