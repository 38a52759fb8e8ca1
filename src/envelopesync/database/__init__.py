"""Database layer for envelopesync application."""

from envelopesync.database.base import Database
from envelopesync.database.factories import create_database, create_sqlite_database

__all__ = ["Database", "create_database", "create_sqlite_database"]
