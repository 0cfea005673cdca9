"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

import threading

from sqlalchemy.engine import Engine

from pos.infrastructure.config import Settings, get_settings
from pos.infrastructure.persistence.database import build_engine, create_session_factory
from pos.infrastructure.persistence.sql_unit_of_work import SqlAlchemyUnitOfWork

# One engine (and connection pool) per database URL for the process.
_engines: dict[str, Engine] = {}
_lock = threading.Lock()


def engine(settings: Settings | None = None) -> Engine:
    settings = settings or get_settings()
    with _lock:
        cached = _engines.get(settings.database_url)
        if cached is None:
            cached = build_engine(
                settings.database_url,
                timeout_seconds=settings.store_timeout_seconds,
                pool_size=settings.pool_size,
                max_overflow=settings.max_overflow,
                echo=settings.echo_sql,
            )
            _engines[settings.database_url] = cached
        return cached


def unit_of_work(settings: Settings | None = None) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(create_session_factory(engine(settings)))


def reset() -> None:
    """Dispose cached engines and forget cached settings."""
    with _lock:
        for cached in _engines.values():
            cached.dispose()
        _engines.clear()
    get_settings.cache_clear()
