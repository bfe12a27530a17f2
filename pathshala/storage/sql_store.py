"""
SQL-backed record store.

Persists each key as one row of the ``record_entries`` table:

    key TEXT PRIMARY KEY | value TEXT (JSON) | updated_at TIMESTAMP

SQLAlchemy work is blocking, so each call runs in a worker thread via
asyncio.to_thread. Database location defaults to ~/.pathshala/records.db.
"""

from __future__ import annotations

import asyncio
from collections.abc import Generator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from loguru import logger
from sqlalchemy import DateTime, String, Text, create_engine, delete, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from pathshala.core.models import local_now
from pathshala.storage.record_store import DEFAULT_TIMEOUT_SECONDS, RecordStore


class Base(DeclarativeBase):
    pass


class RecordEntry(Base):
    """One stored key and its serialised value."""

    __tablename__ = "record_entries"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=local_now)


class SqlRecordStore(RecordStore):
    """
    Record store over any SQLAlchemy database (SQLite by default).

    Call ``init()`` (or use ``async with``) before the first operation.
    """

    def __init__(self, database_url: str, timeout: float | None = DEFAULT_TIMEOUT_SECONDS):
        """
        Args:
            database_url: SQLAlchemy URL, e.g. sqlite:////home/me/.pathshala/records.db
            timeout: Seconds allowed per database call
        """
        super().__init__(timeout=timeout)
        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    # ----- lifecycle ----------------------------------------------------------

    async def init(self) -> None:
        """Create the engine and the table if needed."""
        if self._engine is not None:
            return
        await asyncio.to_thread(self._open)
        logger.info(f"SqlRecordStore initialized at {self.database_url}")

    def _open(self) -> None:
        url = make_url(self.database_url)
        engine_args: dict = {"pool_pre_ping": True}
        if url.get_backend_name() == "sqlite":
            engine_args["connect_args"] = {"check_same_thread": False}
            if url.database and url.database != ":memory:":
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            else:
                # worker threads must share the single in-memory connection
                engine_args["poolclass"] = StaticPool
        engine = create_engine(url, **engine_args)
        Base.metadata.create_all(bind=engine)
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    async def close(self) -> None:
        if self._engine is None:
            return
        engine, self._engine, self._session_factory = self._engine, None, None
        await asyncio.to_thread(engine.dispose)

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Provide a transactional scope around a series of operations."""
        if self._session_factory is None:
            raise RuntimeError("SqlRecordStore used before init()")
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:  # Intentionally broad - rollback on any error before re-raising
            session.rollback()
            raise
        finally:
            session.close()

    # ----- raw operations -----------------------------------------------------

    def _read_sync(self, key: str) -> str | None:
        with self.session_scope() as session:
            return session.scalar(select(RecordEntry.value).where(RecordEntry.key == key))

    def _write_sync(self, key: str, value: str) -> None:
        with self.session_scope() as session:
            entry = session.get(RecordEntry, key)
            if entry is None:
                session.add(RecordEntry(key=key, value=value, updated_at=local_now()))
            else:
                entry.value = value
                entry.updated_at = local_now()

    def _delete_sync(self, key: str) -> None:
        with self.session_scope() as session:
            session.execute(delete(RecordEntry).where(RecordEntry.key == key))

    def _clear_sync(self) -> None:
        with self.session_scope() as session:
            session.execute(delete(RecordEntry))

    async def _read_raw(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read_sync, key)

    async def _write_raw(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write_sync, key, value)

    async def _delete_raw(self, key: str) -> None:
        await asyncio.to_thread(self._delete_sync, key)

    async def _clear_raw(self) -> None:
        await asyncio.to_thread(self._clear_sync)
