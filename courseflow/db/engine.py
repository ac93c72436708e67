"""SQLAlchemy engine, session factory and transaction scope.

Used only when DATABASE_URL is configured; otherwise the platform is built on
the in-memory repositories.  The engine is constructed explicitly (no module
state) so tests can point it at an in-memory SQLite database.

Every repository call runs in exactly one transaction via ``transaction()``,
which also translates driver failures into the domain taxonomy:

  IntegrityError  -> Conflict          (unique constraint, FK violation)
  other DBAPIError -> StoreUnavailable (connection lost, timeout, ...)

An in-memory SQLite database lives on a single connection shared by every
thread.  A rollback on that connection would undo whatever another thread
has flushed but not yet committed, so transactions against such an engine
run one at a time.
"""

from __future__ import annotations

import datetime
import logging
import threading
import weakref
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager, nullcontext

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from courseflow.core.errors import Conflict, StoreUnavailable

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all table models."""


_shared_connection_locks: weakref.WeakKeyDictionary[Engine, threading.RLock] = (
    weakref.WeakKeyDictionary()
)
_shared_connection_guard = threading.Lock()


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(database_url: str, *, echo: bool = False) -> Engine:
    if database_url.startswith("sqlite") and ":memory:" in database_url:
        # One shared connection so every session sees the same database.
        engine = create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(database_url, echo=echo, pool_pre_ping=True)
    if engine.dialect.name == "sqlite":
        # SQLite ignores ON DELETE CASCADE unless asked per connection.
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(engine, expire_on_commit=False)


def serialized(session_factory: sessionmaker[Session]) -> AbstractContextManager:
    """Exclusive access to the bound engine when it has one shared connection.

    A no-op for pooled engines.  Reentrant within a thread.
    """
    engine = session_factory.kw.get("bind")
    if not isinstance(engine, Engine) or not isinstance(engine.pool, StaticPool):
        return nullcontext()
    with _shared_connection_guard:
        lock = _shared_connection_locks.get(engine)
        if lock is None:
            lock = _shared_connection_locks[engine] = threading.RLock()
    return lock


def init_schema(engine: Engine) -> None:
    # Import for side effect: registers the tables on Base.metadata.
    from courseflow.db import tables  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("Database schema ready  tables=%d", len(Base.metadata.tables))


def ping(session_factory: sessionmaker[Session]) -> bool:
    try:
        with serialized(session_factory), session_factory() as session:
            session.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError:
        logger.warning("Database ping failed", exc_info=True)
        return False


@contextmanager
def transaction(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    """Commit on success, roll back on exception."""
    try:
        with serialized(session_factory), session_factory.begin() as session:
            yield session
    except IntegrityError as e:
        logger.warning("Integrity violation: %s", e.orig)
        raise Conflict("conflicting write rejected by the store") from e
    except DBAPIError as e:
        logger.error("Store failure: %s", e.orig)
        raise StoreUnavailable("store unavailable") from e


def as_utc(value: datetime.datetime) -> datetime.datetime:
    # SQLite drops tzinfo on the way back; everything we write is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.UTC)
    return value
