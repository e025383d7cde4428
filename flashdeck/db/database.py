"""
SQLite storage handle for a flashdeck collection.

Wraps a SQLAlchemy engine and session factory for one collection file.
The special path ``:memory:`` opens an ephemeral store that lives as long
as the handle.
"""

from __future__ import annotations

from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from loguru import logger
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from flashdeck.db.models import Base
from flashdeck.errors import StorageError

MEMORY_PATH = ":memory:"


def _enable_foreign_keys(dbapi_conn, _record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class SqliteStorage:
    """Owns the engine and session factory for one collection."""

    def __init__(self, engine: Engine, path: str):
        self.engine = engine
        self.path = path
        self.SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    @classmethod
    def open_or_create(cls, path: str | Path) -> SqliteStorage:
        """
        Open a collection file, creating it (and its directory) if missing.

        Args:
            path: Collection file path, or ":memory:" for an ephemeral store

        Raises:
            StorageError: If the database cannot be opened
        """
        path = str(path)
        try:
            if path == MEMORY_PATH:
                # One shared connection so every session sees the same database
                engine = create_engine(
                    "sqlite://",
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                )
            else:
                Path(path).expanduser().parent.mkdir(parents=True, exist_ok=True)
                engine = create_engine(f"sqlite:///{Path(path).expanduser()}")
            event.listen(engine, "connect", _enable_foreign_keys)
            # Fail now rather than on first query
            with engine.connect():
                pass
        except (SQLAlchemyError, OSError) as e:
            raise StorageError(f"Could not open collection at {path}: {e}") from e

        logger.debug(f"Opened collection storage at {path}")
        return cls(engine, path)

    def init_schema(self) -> None:
        """Create collection tables. Safe to call on an existing collection."""
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise StorageError(f"Schema initialization failed: {e}") from e
        logger.debug("Collection schema initialized")

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations."""
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:  # Intentionally broad - rollback on any error before re-raising
            session.rollback()
            raise
        finally:
            session.close()

    def close(self) -> None:
        """Release all pooled connections."""
        self.engine.dispose()
        logger.debug(f"Closed collection storage at {self.path}")
