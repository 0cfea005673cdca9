"""Engine and session factory construction.

PostgreSQL is the production store: READ COMMITTED plus explicit row
locks, with ``lock_timeout`` and ``statement_timeout`` bounding every
wait.  SQLite is supported for development and tests; it has a single
writer, so every transaction starts with ``BEGIN IMMEDIATE`` and waits at most
``busy_timeout`` for the write lock.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pos.infrastructure.persistence.orm import Base

logger = logging.getLogger(__name__)


def build_engine(
    database_url: str,
    timeout_seconds: float = 5.0,
    pool_size: int = 10,
    max_overflow: int = 5,
    echo: bool = False,
) -> Engine:
    url = make_url(database_url)
    timeout_ms = int(timeout_seconds * 1000)

    if url.get_backend_name() == "sqlite":
        engine = _build_sqlite_engine(database_url, url.database, timeout_seconds, echo)
    elif url.get_backend_name() == "postgresql":
        engine = create_engine(
            database_url,
            echo=echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_timeout=timeout_seconds,
            isolation_level="READ COMMITTED",
            connect_args={
                "connect_timeout": max(1, int(timeout_seconds)),
                "options": f"-c lock_timeout={timeout_ms} -c statement_timeout={timeout_ms}",
            },
        )
    else:
        engine = create_engine(
            database_url,
            echo=echo,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_pre_ping=True,
            pool_timeout=timeout_seconds,
        )

    logger.info(
        "engine_initialized",
        extra={
            "dialect": url.get_backend_name(),
            "timeout_seconds": timeout_seconds,
            "echo": echo,
        },
    )
    return engine


def _build_sqlite_engine(
    database_url: str,
    database: str | None,
    timeout_seconds: float,
    echo: bool,
) -> Engine:
    in_memory = not database or database == ":memory:"
    kwargs = {}
    if not in_memory:
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    else:
        # one shared connection, otherwise each checkout sees an empty database
        kwargs["poolclass"] = StaticPool

    engine = create_engine(
        database_url,
        echo=echo,
        connect_args={"timeout": timeout_seconds, "check_same_thread": False},
        **kwargs,
    )
    busy_ms = int(timeout_seconds * 1000)

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, _connection_record) -> None:
        # let SQLAlchemy emit BEGIN itself (see _on_begin)
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute(f"PRAGMA busy_timeout={busy_ms}")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(connection) -> None:
        connection.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


def create_schema(engine: Engine) -> None:
    """Create every table that does not exist yet."""
    Base.metadata.create_all(engine)
    logger.info("schema_created", extra={"tables": sorted(Base.metadata.tables)})


# --- Timestamp normalisation --------------------------------------------------
#
# SQLite drops tzinfo on the way in and returns naive values on the way
# out; PostgreSQL returns aware values.  Everything is bound as UTC and
# read back as aware UTC so comparisons never mix the two.


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
