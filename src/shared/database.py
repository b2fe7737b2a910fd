"""SQLAlchemy engine, session factory and unit of work.

Every state-changing operation runs inside ``unit_of_work()``: one session,
one transaction, committed on a clean exit and rolled back on any exception.
Storage errors are logged and re-raised as ``StorageFailure``; domain errors
propagate unchanged after the rollback.
"""

from contextlib import contextmanager

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from shared.config import get_settings
from shared.exceptions import StorageFailure

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    pass


_engine: Engine | None = None
_session_factory: sessionmaker | None = None

# Marks the connection of a unit of work; see _begin
_WRITE_OPTION = "glowmart_unit_of_work"


def _configure_sqlite_connection(dbapi_connection, connection_record):
    # Hand transaction control to SQLAlchemy; see _begin
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _begin(conn):
    # Units of work take the write lock up front so concurrent writers queue
    # on the busy timeout instead of deadlocking when upgrading a read lock.
    # Reads stay deferred so they are not queued behind open writers.
    if conn.get_execution_options().get(_WRITE_OPTION):
        conn.exec_driver_sql("BEGIN IMMEDIATE")
    else:
        conn.exec_driver_sql("BEGIN")


def create_db_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False, "timeout": 30}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, **kwargs)
        event.listen(engine, "connect", _configure_sqlite_connection)
        event.listen(engine, "begin", _begin)
        return engine

    return create_engine(url, pool_pre_ping=True)


def configure_database(url: str | None = None) -> Engine:
    """(Re)bind the module-level engine and session factory."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()

    _engine = create_db_engine(url or get_settings().database_url)
    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        configure_database()
    return _engine


def get_session_factory() -> sessionmaker:
    if _session_factory is None:
        configure_database()
    return _session_factory


@contextmanager
def unit_of_work():
    """Yield a session whose work is committed atomically or not at all."""
    session: Session = get_session_factory()()
    try:
        with session.begin():
            session.connection(execution_options={_WRITE_OPTION: True})
            yield session
    except SQLAlchemyError as exc:
        logger.error("Unit of work rolled back after storage error", error=str(exc))
        raise StorageFailure("The data store could not complete the operation") from exc
    finally:
        session.close()


@contextmanager
def read_session():
    """Yield a session for read-only queries."""
    session: Session = get_session_factory()()
    try:
        yield session
    except SQLAlchemyError as exc:
        logger.error("Read failed with storage error", error=str(exc))
        raise StorageFailure("The data store could not complete the query") from exc
    finally:
        session.close()
