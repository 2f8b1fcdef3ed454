"""
clinicxz/relational.py

This module is responsible for:
1) creating the engine for the SQLite file (async, aiosqlite driver)
2) handing out sessions for INSERT/SELECT work
3) creating the tables and the bootstrap login (initialize)

One ClinicDatabase is shared for the life of the process (get_database);
tests build their own and pass it to the repositories.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import event, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from clinicxz import config
from clinicxz.errors import StorageFault
from clinicxz.models import Base, User

logger = logging.getLogger(__name__)


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def _on_connect(dbapi_connection, connection_record) -> None:
    # SQLite only honours ON DELETE CASCADE with this pragma, per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()
    # built-in lower() folds ASCII only; name search needs "Ä" == "ä"
    dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)


class ClinicDatabase:
    """Engine + session factory for one SQLite database."""

    def __init__(self, url: Optional[str] = None, echo: Optional[bool] = None) -> None:
        self.url = url or config.DATABASE_URL
        self.engine = create_async_engine(self.url, echo=config.ECHO_SQL if echo is None else echo)
        event.listen(self.engine.sync_engine, "connect", _on_connect)
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)

    async def initialize(self) -> None:
        """
        Create all tables (if missing), switch to WAL and make sure a login exists.
        Safe to call on every start. Errors are not caught here: startup should fail loudly.
        """
        async with self.engine.connect() as conn:
            mode = (await conn.exec_driver_sql("PRAGMA journal_mode=WAL")).scalar()
            logger.debug("journal_mode=%s", mode)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with self.sessionmaker() as session:
            async with session.begin():
                users = await session.scalar(select(func.count()).select_from(User))
                if users == 0:
                    session.add(
                        User(username=config.BOOTSTRAP_USERNAME, hashed_password=config.BOOTSTRAP_PASSWORD)
                    )
                    logger.info("Created bootstrap user %r", config.BOOTSTRAP_USERNAME)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        One session inside one transaction: commit on success, rollback on error.
        Engine errors come out as StorageFault; our own errors pass through.
        """
        try:
            async with self.sessionmaker() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as exc:
            logger.exception("Storage failure")
            raise StorageFault(str(exc)) from exc

    async def dispose(self) -> None:
        await self.engine.dispose()


_database: Optional[ClinicDatabase] = None


def get_database() -> ClinicDatabase:
    """The process-wide database, created on first use."""
    global _database
    if _database is None:
        _database = ClinicDatabase()
    return _database


async def init_db() -> ClinicDatabase:
    db = get_database()
    await db.initialize()
    return db


async def close_db() -> None:
    global _database
    if _database is not None:
        await _database.dispose()
        _database = None


class Repository:
    """Base for the repositories: holds the injected (or shared) database."""

    def __init__(self, db: Optional[ClinicDatabase] = None) -> None:
        self.db = db or get_database()
