"""Fixtures for tests against a real SQLite database file."""

from __future__ import annotations

import pytest

from pos.domain.model.product import Product
from pos.domain.model.value_objects import Money
from pos.infrastructure.persistence.database import (
    build_engine,
    create_schema,
    create_session_factory,
)
from pos.infrastructure.persistence.sql_unit_of_work import SqlAlchemyUnitOfWork


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'pos.db'}", timeout_seconds=10)
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def make_uow(session_factory):
    """Each call returns a fresh unit of work (one per thread in concurrency tests)."""
    return lambda: SqlAlchemyUnitOfWork(session_factory)


@pytest.fixture
def seed_products(make_uow):
    def _seed(*products: tuple[str, str, int]) -> dict[str, Product]:
        """Insert (sku, price, stock) products; returns them keyed by sku."""
        created: dict[str, Product] = {}
        with make_uow() as uow:
            for sku, price, stock in products:
                product = Product.create(
                    sku=sku, name=f"Product {sku}", price=Money.of(price), stock=stock,
                    category="General",
                )
                uow.products.add(product)
                created[sku] = product
            uow.commit()
        return created

    return _seed
