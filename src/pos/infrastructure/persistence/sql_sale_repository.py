"""SQL-backed implementation of SaleRepository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import ColumnElement, Select, func, literal_column, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from pos.domain.exceptions import ConflictError
from pos.domain.model.sale import PaymentMethod, Sale, SaleLineItem
from pos.domain.model.sale_status import SaleStatus
from pos.domain.model.value_objects import Money, Quantity
from pos.domain.repository.sale_repository import SaleFilter, SaleRepository
from pos.domain.service.sales_statistics import (
    CategorySales,
    ChartBucket,
    PeriodSummary,
    ProductSales,
)
from pos.infrastructure.persistence.database import as_utc
from pos.infrastructure.persistence.orm import ProductRow, SaleItemRow, SaleRow


class SqlSaleRepository(SaleRepository):

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, sale: Sale) -> None:
        row = SaleRow(
            sale_number=sale.sale_number,
            subtotal=sale.subtotal.amount,
            tax=sale.tax.amount,
            discount=sale.discount.amount,
            total=sale.total.amount,
            payment_method=sale.payment_method.value,
            status=sale.status.value,
            customer_name=sale.customer_name,
            customer_phone=sale.customer_phone,
            notes=sale.notes,
            created_at=as_utc(sale.created_at),
            updated_at=as_utc(sale.updated_at),
            items=[
                SaleItemRow(
                    position=position,
                    product_id=item.product_id,
                    product_name=item.product_name,
                    sku=item.sku,
                    quantity=item.quantity.value,
                    unit_price=item.unit_price.amount,
                    line_total=item.line_total.amount,
                )
                for position, item in enumerate(sale.items)
            ],
        )
        try:
            with self._session.begin_nested():
                self._session.add(row)
        except IntegrityError as exc:
            raise ConflictError(f"Sale number {sale.sale_number} is already taken") from exc
        sale.id = row.id

    def get_by_id(self, sale_id: int, for_update: bool = False) -> Sale | None:
        stmt = self._base_query().where(SaleRow.id == sale_id)
        if for_update:
            # no-op on SQLite, where BEGIN IMMEDIATE already holds the write lock
            stmt = stmt.with_for_update(of=SaleRow)
        row = self._session.execute(stmt).scalar_one_or_none()
        return _to_domain(row) if row else None

    def get_by_sale_number(self, sale_number: str) -> Sale | None:
        row = self._session.execute(
            self._base_query().where(SaleRow.sale_number == sale_number)
        ).scalar_one_or_none()
        return _to_domain(row) if row else None

    def search(self, sale_filter: SaleFilter) -> list[Sale]:
        stmt = _apply_filter(self._base_query(), sale_filter).order_by(
            SaleRow.created_at.desc(), SaleRow.id.desc()
        )
        if sale_filter.limit is not None:
            stmt = stmt.offset(sale_filter.offset).limit(sale_filter.limit)
        rows = self._session.execute(stmt).scalars().all()
        return [_to_domain(r) for r in rows]

    def count(self, sale_filter: SaleFilter) -> int:
        stmt = _apply_filter(select(func.count(SaleRow.id)), sale_filter)
        return self._session.execute(stmt).scalar_one()

    def update_status(self, sale: Sale, expected_status: SaleStatus) -> None:
        result = self._session.execute(
            update(SaleRow)
            .where(SaleRow.id == sale.id, SaleRow.status == expected_status.value)
            .values(status=sale.status.value, updated_at=as_utc(sale.updated_at))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConflictError(
                f"Sale {sale.sale_number} was modified concurrently "
                f"(expected status '{expected_status.value}')"
            )

    def update_notes(self, sale: Sale) -> None:
        self._session.execute(
            update(SaleRow)
            .where(SaleRow.id == sale.id)
            .values(notes=sale.notes, updated_at=as_utc(sale.updated_at))
            .execution_options(synchronize_session=False)
        )

    # --- Reporting ------------------------------------------------------------

    def summarize_completed(self, start: datetime, end: datetime) -> PeriodSummary:
        window = _completed_between(start, end)
        total_sales, revenue = self._session.execute(
            select(func.count(SaleRow.id), func.sum(SaleRow.total)).where(*window)
        ).one()
        total_items = self._session.execute(
            select(func.sum(SaleItemRow.quantity))
            .select_from(SaleItemRow)
            .join(SaleRow, SaleRow.id == SaleItemRow.sale_id)
            .where(*window)
        ).scalar_one()
        return PeriodSummary(
            total_sales=total_sales,
            total_revenue=_sum_money(revenue),
            total_items=int(total_items or 0),
        )

    def top_products(self, start: datetime, end: datetime, limit: int = 5) -> list[ProductSales]:
        quantity = func.sum(SaleItemRow.quantity).label("quantity")
        stmt = (
            select(ProductRow.id, ProductRow.name, ProductRow.sku, quantity, func.sum(SaleItemRow.line_total))
            .select_from(SaleItemRow)
            .join(SaleRow, SaleRow.id == SaleItemRow.sale_id)
            .join(ProductRow, ProductRow.id == SaleItemRow.product_id)
            .where(*_completed_between(start, end))
            .group_by(ProductRow.id, ProductRow.name, ProductRow.sku)
            .order_by(quantity.desc(), ProductRow.name)
            .limit(limit)
        )
        return [
            ProductSales(
                product_id=product_id,
                name=name,
                sku=sku,
                total_quantity=int(units),
                total_revenue=_sum_money(revenue),
            )
            for product_id, name, sku, units, revenue in self._session.execute(stmt)
        ]

    def completed_per_period(
        self,
        start: datetime,
        end: datetime,
        granularity: str,
    ) -> list[ChartBucket]:
        bucket = self._bucket_key(granularity).label("bucket")
        stmt = (
            select(bucket, func.count(SaleRow.id), func.sum(SaleRow.total))
            .where(*_completed_between(start, end))
            .group_by(bucket)
            .order_by(bucket)
        )
        buckets = []
        for key, total_sales, revenue in self._session.execute(stmt):
            parts = [int(p) for p in key.split("-")]
            buckets.append(
                ChartBucket(
                    year=parts[0],
                    month=parts[1],
                    day=parts[2] if len(parts) == 3 else None,
                    total_sales=total_sales,
                    total_revenue=_sum_money(revenue),
                )
            )
        return buckets

    def sales_by_category(self, start: datetime, end: datetime) -> list[CategorySales]:
        revenue = func.sum(SaleItemRow.line_total).label("revenue")
        stmt = (
            select(
                ProductRow.category,
                func.sum(SaleItemRow.quantity),
                revenue,
                func.count(SaleItemRow.id),
            )
            .select_from(SaleItemRow)
            .join(SaleRow, SaleRow.id == SaleItemRow.sale_id)
            .join(ProductRow, ProductRow.id == SaleItemRow.product_id)
            .where(*_completed_between(start, end))
            .group_by(ProductRow.category)
            .order_by(revenue.desc(), ProductRow.category)
        )
        return [
            CategorySales(
                category=category,
                total_quantity=int(units),
                total_revenue=_sum_money(total),
                sales_count=lines,
            )
            for category, units, total, lines in self._session.execute(stmt)
        ]

    def _bucket_key(self, granularity: str) -> ColumnElement:
        """``YYYY-MM-DD`` or ``YYYY-MM`` of the UTC creation time."""
        day = granularity == "day"
        if self._session.get_bind().dialect.name == "sqlite":
            # stored as naive UTC text
            fmt = "'%Y-%m-%d'" if day else "'%Y-%m'"
            return func.strftime(literal_column(fmt), SaleRow.created_at)
        # literal formats keep the SELECT and GROUP BY expressions identical
        fmt = "'YYYY-MM-DD'" if day else "'YYYY-MM'"
        return func.to_char(
            func.timezone(literal_column("'UTC'"), SaleRow.created_at),
            literal_column(fmt),
        )

    @staticmethod
    def _base_query() -> Select:
        return (
            select(SaleRow)
            .options(selectinload(SaleRow.items))
            .execution_options(populate_existing=True)
        )


def _apply_filter(stmt: Select, sale_filter: SaleFilter) -> Select:
    if sale_filter.status is not None:
        stmt = stmt.where(SaleRow.status == sale_filter.status.value)
    if sale_filter.start is not None:
        stmt = stmt.where(SaleRow.created_at >= as_utc(sale_filter.start))
    if sale_filter.end is not None:
        stmt = stmt.where(SaleRow.created_at <= as_utc(sale_filter.end))
    return stmt


def _completed_between(start: datetime, end: datetime) -> tuple[ColumnElement[bool], ...]:
    return (
        SaleRow.status == SaleStatus.COMPLETED.value,
        SaleRow.created_at >= as_utc(start),
        SaleRow.created_at <= as_utc(end),
    )


def _money(value: Decimal) -> Money:
    return Money(Decimal(value))


def _sum_money(value) -> Money:
    # SUM over no rows is NULL; SQLite may add float noise below the cent
    return Money(Decimal(str(value or 0))).quantized()


def _to_domain(row: SaleRow) -> Sale:
    return Sale(
        id=row.id,
        sale_number=row.sale_number,
        items=tuple(
            SaleLineItem(
                product_id=item.product_id,
                product_name=item.product_name,
                sku=item.sku,
                quantity=Quantity(item.quantity),
                unit_price=_money(item.unit_price),
            )
            for item in row.items
        ),
        subtotal=_money(row.subtotal),
        tax=_money(row.tax),
        discount=_money(row.discount),
        total=_money(row.total),
        payment_method=PaymentMethod(row.payment_method),
        status=SaleStatus(row.status),
        customer_name=row.customer_name,
        customer_phone=row.customer_phone,
        notes=row.notes,
        created_at=as_utc(row.created_at),
        updated_at=as_utc(row.updated_at),
    )
