"""SQL-backed implementation of ProductRepository."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pos.domain.exceptions import ConflictError
from pos.domain.model.product import Product
from pos.domain.model.value_objects import Money
from pos.domain.repository.product_repository import ProductRepository
from pos.infrastructure.persistence.database import as_utc
from pos.infrastructure.persistence.orm import ProductRow

logger = logging.getLogger(__name__)


class SqlProductRepository(ProductRepository):
    """Reads and writes products through the unit of work's session.

    Reads use ``populate_existing`` so a product fetched after an
    ``adjust_stock`` in the same transaction reflects the new stock.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, product_id: str) -> Product | None:
        row = self._session.execute(
            select(ProductRow)
            .where(ProductRow.id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return _to_domain(row) if row else None

    def get_by_sku(self, sku: str) -> Product | None:
        row = self._session.execute(
            select(ProductRow)
            .where(ProductRow.sku == sku.strip())
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return _to_domain(row) if row else None

    def list_all(self, active_only: bool = False) -> list[Product]:
        stmt = select(ProductRow).order_by(ProductRow.name, ProductRow.sku)
        if active_only:
            stmt = stmt.where(ProductRow.is_active.is_(True))
        rows = self._session.execute(
            stmt.execution_options(populate_existing=True)
        ).scalars()
        return [_to_domain(r) for r in rows]

    def count_active(self, max_stock: int | None = None) -> int:
        stmt = select(func.count(ProductRow.id)).where(ProductRow.is_active.is_(True))
        if max_stock is not None:
            stmt = stmt.where(ProductRow.stock <= max_stock)
        return self._session.execute(stmt).scalar_one()

    def list_low_stock(self, threshold: int) -> list[Product]:
        rows = self._session.execute(
            select(ProductRow)
            .where(ProductRow.is_active.is_(True), ProductRow.stock <= threshold)
            .order_by(ProductRow.stock, ProductRow.name, ProductRow.sku)
            .execution_options(populate_existing=True)
        ).scalars()
        return [_to_domain(r) for r in rows]

    def is_active(self, product_id: str) -> bool | None:
        return self._session.execute(
            select(ProductRow.is_active).where(ProductRow.id == product_id)
        ).scalar_one_or_none()

    def add(self, product: Product) -> None:
        row = ProductRow(
            id=product.id,
            sku=product.sku,
            name=product.name,
            description=product.description,
            category=product.category,
            barcode=product.barcode,
            price=product.price.amount,
            stock=product.stock,
            is_active=product.is_active,
            created_at=as_utc(product.created_at),
            updated_at=as_utc(product.updated_at),
        )
        try:
            with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError as exc:
            raise ConflictError(f"SKU '{product.sku}' already exists") from exc

    def update_details(self, product: Product) -> None:
        self._session.execute(
            update(ProductRow)
            .where(ProductRow.id == product.id)
            .values(
                name=product.name,
                description=product.description,
                category=product.category,
                barcode=product.barcode,
                price=product.price.amount,
                is_active=product.is_active,
                updated_at=as_utc(product.updated_at),
            )
            .execution_options(synchronize_session=False)
        )

    def adjust_stock(
        self,
        product_id: str,
        delta: int,
        min_resulting_stock: int | None = 0,
    ) -> bool:
        # Single conditional UPDATE: the check and the write happen under
        # the row's write lock, so two concurrent decrements cannot both
        # pass the check against the same old value.
        stmt = (
            update(ProductRow)
            .where(ProductRow.id == product_id)
            .values(
                stock=ProductRow.stock + delta,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if min_resulting_stock is not None:
            stmt = stmt.where(ProductRow.stock + delta >= min_resulting_stock)

        applied = self._session.execute(stmt).rowcount == 1
        logger.debug(
            "stock_update_attempted",
            extra={"product_id": product_id, "delta": delta, "applied": applied},
        )
        return applied


def _to_domain(row: ProductRow) -> Product:
    return Product(
        id=row.id,
        sku=row.sku,
        name=row.name,
        price=Money(row.price),
        stock=row.stock,
        is_active=row.is_active,
        category=row.category,
        description=row.description,
        barcode=row.barcode,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )
