"""Store errors surfacing through the SQL unit of work."""

from __future__ import annotations

import sqlite3
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import exc as sa_exc
from sqlalchemy.orm import Session

from pos.application.create_sale import CreateSaleHandler
from pos.application.dto import SaleItemSpec
from pos.application.retry import run_with_retry
from pos.domain.exceptions import CommitOutcomeUnknownError, ConflictError, TransientStoreError
from pos.domain.repository.sale_repository import SaleFilter
from pos.infrastructure.persistence.database import build_engine, create_session_factory
from pos.infrastructure.persistence.orm import ProductRow
from pos.infrastructure.persistence.sql_unit_of_work import SqlAlchemyUnitOfWork


@pytest.fixture
def db_path(tmp_path):
    # same file the ``engine`` fixture opens
    return tmp_path / "pos.db"


@pytest.fixture
def impatient_uow(db_path, engine):
    """Unit of work factory that gives up on a locked store after 0.2s."""
    fast = build_engine(f"sqlite:///{db_path}", timeout_seconds=0.2)
    factory = create_session_factory(fast)
    yield lambda: SqlAlchemyUnitOfWork(factory)
    fast.dispose()


class TestLockTimeout:

    def test_locked_store_is_transient_and_changes_nothing(
        self, db_path, impatient_uow, make_uow, seed_products
    ):
        milk = seed_products(("MILK", "1.00", 5))["MILK"]

        blocker = sqlite3.connect(db_path, isolation_level=None)
        blocker.execute("BEGIN IMMEDIATE")
        try:
            with pytest.raises(TransientStoreError) as info:
                CreateSaleHandler(impatient_uow()).handle(
                    [SaleItemSpec(milk.id, 2)], payment_method="cash"
                )
            assert info.value.retryable is True
        finally:
            blocker.execute("ROLLBACK")
            blocker.close()

        with make_uow() as uow:
            assert uow.products.get_by_id(milk.id).stock == 5
            assert uow.sales.count(SaleFilter()) == 0

    def test_same_sale_succeeds_once_lock_is_released(self, db_path, impatient_uow, seed_products):
        milk = seed_products(("MILK", "1.00", 5))["MILK"]

        blocker = sqlite3.connect(db_path, isolation_level=None)
        blocker.execute("BEGIN IMMEDIATE")
        with pytest.raises(TransientStoreError):
            CreateSaleHandler(impatient_uow()).handle([SaleItemSpec(milk.id, 2)], payment_method="cash")
        blocker.execute("ROLLBACK")
        blocker.close()

        dto = CreateSaleHandler(impatient_uow()).handle([SaleItemSpec(milk.id, 2)], payment_method="cash")
        assert dto.sale_number == "SALE-000001"


class TestCommitFailures:

    def test_constraint_violation_on_commit_is_conflict(self, make_uow, seed_products):
        seed_products(("MILK", "1.00", 5))

        with make_uow() as uow:
            # bypass the repository so the duplicate only surfaces at commit
            uow._session.add(ProductRow(id=str(uuid4()), sku="MILK", name="Other", price=Decimal("2.00")))
            with pytest.raises(ConflictError, match="constraint"):
                uow.commit()

        with make_uow() as uow:
            assert [p.name for p in uow.products.list_all()] == ["Product MILK"]

    def test_lost_connection_during_commit_is_not_retried(self, make_uow, seed_products, monkeypatch):
        milk = seed_products(("MILK", "1.00", 5))["MILK"]
        attempts = []

        def _drop_connection(session):
            attempts.append(session)
            raise sa_exc.OperationalError(
                "COMMIT", None, Exception("server closed the connection unexpectedly"),
                connection_invalidated=True,
            )

        monkeypatch.setattr(Session, "commit", _drop_connection)
        with pytest.raises(CommitOutcomeUnknownError) as info:
            run_with_retry(
                lambda: CreateSaleHandler(make_uow()).handle(
                    [SaleItemSpec(milk.id, 2)], payment_method="cash"
                ),
                attempts=3,
                backoff_seconds=0,
            )
        monkeypatch.undo()

        assert len(attempts) == 1
        assert info.value.retryable is False
        with make_uow() as uow:
            assert uow.products.get_by_id(milk.id).stock == 5
