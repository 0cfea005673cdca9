"""Unit of work over a SQLAlchemy session.

One ``with`` block is one database transaction.  Store errors raised
inside it are translated to domain exceptions on the way out: lock and
connection timeouts become ``TransientStoreError`` (safe to retry, the
transaction was rolled back), constraint violations become
``ConflictError``.  A connection lost during COMMIT itself is not
transient: the server may already have applied the transaction, so it
becomes ``CommitOutcomeUnknownError``.
"""

from __future__ import annotations

import logging

from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session, sessionmaker

from pos.domain.exceptions import (
    CommitOutcomeUnknownError,
    ConflictError,
    DomainException,
    TransientStoreError,
)
from pos.domain.repository.unit_of_work import UnitOfWork
from pos.infrastructure.persistence.sql_product_repository import SqlProductRepository
from pos.infrastructure.persistence.sql_sale_repository import SqlSaleRepository
from pos.infrastructure.persistence.sql_sequence_generator import SqlSequenceGenerator

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(UnitOfWork):

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._session: Session | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise RuntimeError("Unit of work is already active")
        self._session = self._session_factory()
        self.products = SqlProductRepository(self._session)
        self.sales = SqlSaleRepository(self._session)
        self.sequences = SqlSequenceGenerator(self._session)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.rollback()
        finally:
            self._session.close()
            self._session = None
        translated = _translate(exc)
        if translated is not None:
            raise translated from exc

    def commit(self) -> None:
        try:
            # pending writes fail here, before COMMIT is sent
            self._session.flush()
        except sa_exc.SQLAlchemyError as exc:
            self._session.rollback()
            raise _translate(exc) or exc

        try:
            self._session.commit()
        except sa_exc.SQLAlchemyError as exc:
            self._session.rollback()
            if isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated:
                logger.error("commit_outcome_unknown", extra={"error": str(exc.orig)})
                raise CommitOutcomeUnknownError(
                    f"Connection lost while committing; check the store before retrying: {exc.orig}"
                ) from exc
            raise _translate(exc) or exc

    def rollback(self) -> None:
        if self._session is not None:
            self._session.rollback()


def _translate(exc: BaseException | None) -> DomainException | None:
    """Map a store error to its domain exception; None leaves it alone."""
    if exc is None or isinstance(exc, DomainException):
        return None
    if isinstance(exc, sa_exc.IntegrityError):
        logger.warning("store_failure", extra={"kind": "conflict", "error": str(exc.orig)})
        return ConflictError(f"Store constraint violated: {exc.orig}")
    if isinstance(exc, (sa_exc.OperationalError, sa_exc.TimeoutError)) or (
        isinstance(exc, sa_exc.DBAPIError) and exc.connection_invalidated
    ):
        detail = getattr(exc, "orig", None) or exc
        logger.warning("store_failure", extra={"kind": "transient", "error": str(detail)})
        return TransientStoreError(f"Store temporarily unavailable: {detail}")
    return None
