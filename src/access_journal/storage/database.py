"""Database configuration and session management.

This module provides the SQLAlchemy engine and session management for the
SQLite file backing a persistent cache. Connections run in WAL mode with
explicit BEGIN statements, so a session that has read from the database keeps
a stable snapshot until it ends, while other connections keep writing.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from access_journal.storage.base_model import Base


class DatabaseConfig:
    """Database configuration.

    Attributes:
        path: Location of the SQLite database file
        echo: Whether to log SQL statements (default: False)
        busy_timeout_ms: How long SQLite waits on a locked database (default: 60000)
    """

    def __init__(
        self,
        path: Path,
        echo: bool = False,
        busy_timeout_ms: int = 60_000,
    ):
        self.path = path
        self.echo = echo
        self.busy_timeout_ms = busy_timeout_ms

    @property
    def url(self) -> str:
        """SQLAlchemy URL of the database file."""
        return f"sqlite:///{self.path}"


class Database:
    """Database connection and session manager.

    Example:
        >>> db = Database(DatabaseConfig(path=Path("/tmp/journal.db")))
        >>> db.create_tables()
        >>> with db.session() as session:
        ...     session.execute(select(IndexedEntryModel))
    """

    def __init__(self, config: DatabaseConfig):
        """Initialize database with configuration.

        Args:
            config: Database configuration
        """
        self.config = config
        self.engine = create_engine(
            config.url,
            echo=config.echo,
            connect_args={
                "check_same_thread": False,
                "timeout": config.busy_timeout_ms / 1000,
            },
        )
        event.listen(self.engine, "connect", _on_connect)
        event.listen(self.engine, "begin", _on_begin)
        self.session_factory = sessionmaker(self.engine, expire_on_commit=False)

    def create_tables(self) -> None:
        """Create all tables defined in ORM models."""
        from access_journal.storage import models  # noqa: F401

        Base.metadata.create_all(self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Create a new database session that commits on success.

        Yields:
            Database session
        """
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Close database engine and pooled connections.

        Connections currently checked out (open snapshots) stay usable until
        they are returned.
        """
        self.engine.dispose()


def _on_connect(dbapi_connection: Any, connection_record: Any) -> None:
    # Let SQLAlchemy, not the sqlite3 module, decide where transactions begin
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
    finally:
        cursor.close()


def _on_begin(conn: Any) -> None:
    conn.exec_driver_sql("BEGIN")
