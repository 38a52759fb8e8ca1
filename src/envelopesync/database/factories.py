"""Database factory functions for creating database instances.

Backend selection lives here and nowhere else; domain services receive a
ready ``Database``.
"""

import os
from pathlib import Path
from typing import Optional

from envelopesync.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks ENVELOPESYNC_DB_PATH
            environment variable, then defaults to ~/.envelopesync/envelopesync.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("ENVELOPESYNC_DB_PATH")

    if database_path is None:
        # Default to ~/.envelopesync/envelopesync.db
        home = Path.home()
        db_dir = home / ".envelopesync"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "envelopesync.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)


def create_database(
    database_url: Optional[str] = None, database_path: Optional[str] = None
) -> SQLAlchemyDatabase:
    """Create the configured database instance.

    An explicit path wins, then an explicit URL, then ENVELOPESYNC_DATABASE_URL
    (any SQLAlchemy URL, e.g. PostgreSQL or MariaDB), then the SQLite default.
    """
    if database_path is not None:
        return create_sqlite_database(database_path)

    if database_url is None:
        database_url = os.environ.get("ENVELOPESYNC_DATABASE_URL")

    if database_url:
        return SQLAlchemyDatabase(database_url)
    return create_sqlite_database()
