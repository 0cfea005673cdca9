"""In-memory fake repositories for testing.

These implement the same abstract interfaces as the SQL repositories
but keep everything in a dict. No database, no side effects.

Reads hand out copies, like a real store does, so a test can only
observe what was actually written.  ``FakeUnitOfWork`` snapshots every
store on ``__enter__`` and restores the snapshot on rollback.
"""

from __future__ import annotations

import copy
import dataclasses
from datetime import datetime

from pos.domain.exceptions import ConflictError
from pos.domain.model.product import Product
from pos.domain.model.sale import Sale
from pos.domain.model.sale_status import SaleStatus
from pos.domain.repository.product_repository import ProductRepository
from pos.domain.repository.sale_repository import SaleFilter, SaleRepository
from pos.domain.repository.sequence_generator import SequenceGenerator
from pos.domain.repository.unit_of_work import UnitOfWork
from pos.domain.service import sales_statistics as stats


class FakeProductRepository(ProductRepository):

    def __init__(self, products: list[Product] | None = None) -> None:
        self._store: dict[str, Product] = {}
        for p in products or []:
            self._store[p.id] = dataclasses.replace(p)

    def get_by_id(self, product_id: str) -> Product | None:
        product = self._store.get(product_id)
        return dataclasses.replace(product) if product else None

    def get_by_sku(self, sku: str) -> Product | None:
        for p in self._store.values():
            if p.sku == sku:
                return dataclasses.replace(p)
        return None

    def list_all(self, active_only: bool = False) -> list[Product]:
        products = sorted(self._store.values(), key=lambda p: (p.name, p.sku))
        return [dataclasses.replace(p) for p in products if p.is_active or not active_only]

    def count_active(self, max_stock: int | None = None) -> int:
        return sum(
            1 for p in self._store.values()
            if p.is_active and (max_stock is None or p.stock <= max_stock)
        )

    def list_low_stock(self, threshold: int) -> list[Product]:
        return stats.low_stock(self.list_all(active_only=True), threshold)

    def is_active(self, product_id: str) -> bool | None:
        product = self._store.get(product_id)
        return product.is_active if product else None

    def add(self, product: Product) -> None:
        if any(p.sku == product.sku for p in self._store.values()):
            raise ConflictError(f"SKU '{product.sku}' already exists")
        self._store[product.id] = dataclasses.replace(product)

    def update_details(self, product: Product) -> None:
        stored = self._store[product.id]
        self._store[product.id] = dataclasses.replace(product, stock=stored.stock)

    def adjust_stock(
        self,
        product_id: str,
        delta: int,
        min_resulting_stock: int | None = 0,
    ) -> bool:
        product = self._store.get(product_id)
        if product is None:
            return False
        if min_resulting_stock is not None and product.stock + delta < min_resulting_stock:
            return False
        product.stock += delta
        return True

    # --- Test helpers ---------------------------------------------------------

    def remove(self, product_id: str) -> None:
        """Simulate a product vanishing from the store."""
        del self._store[product_id]


class FakeSaleRepository(SaleRepository):
    """Reports are computed with the in-memory aggregations over the
    stored sales, resolving products through ``products``."""

    def __init__(self, products: FakeProductRepository | None = None) -> None:
        self._store: dict[int, Sale] = {}
        self._next_id = 1
        self._products = products or FakeProductRepository()

    def add(self, sale: Sale) -> None:
        if any(s.sale_number == sale.sale_number for s in self._store.values()):
            raise ConflictError(f"Sale number {sale.sale_number} is already taken")
        sale.id = self._next_id
        self._next_id += 1
        self._store[sale.id] = dataclasses.replace(sale)

    def get_by_id(self, sale_id: int, for_update: bool = False) -> Sale | None:
        sale = self._store.get(sale_id)
        return dataclasses.replace(sale) if sale else None

    def get_by_sale_number(self, sale_number: str) -> Sale | None:
        for s in self._store.values():
            if s.sale_number == sale_number:
                return dataclasses.replace(s)
        return None

    def search(self, sale_filter: SaleFilter) -> list[Sale]:
        matches = sorted(
            self._matching(sale_filter),
            key=lambda s: (s.created_at, s.id),
            reverse=True,
        )
        if sale_filter.limit is not None:
            matches = matches[sale_filter.offset:sale_filter.offset + sale_filter.limit]
        return [dataclasses.replace(s) for s in matches]

    def count(self, sale_filter: SaleFilter) -> int:
        return len(self._matching(sale_filter))

    def update_status(self, sale: Sale, expected_status: SaleStatus) -> None:
        stored = self._store.get(sale.id)
        if stored is None or stored.status is not expected_status:
            raise ConflictError(f"Sale {sale.sale_number} was modified concurrently")
        stored.status = sale.status
        stored.updated_at = sale.updated_at

    def update_notes(self, sale: Sale) -> None:
        stored = self._store[sale.id]
        stored.notes = sale.notes
        stored.updated_at = sale.updated_at

    def summarize_completed(self, start: datetime, end: datetime) -> stats.PeriodSummary:
        return stats.summarize(self._completed(start, end))

    def top_products(self, start: datetime, end: datetime, limit: int = 5) -> list[stats.ProductSales]:
        return stats.top_products(self._completed(start, end), self._catalog(), limit=limit)

    def completed_per_period(
        self,
        start: datetime,
        end: datetime,
        granularity: str,
    ) -> list[stats.ChartBucket]:
        return stats.bucket_sales(self._completed(start, end), granularity)

    def sales_by_category(self, start: datetime, end: datetime) -> list[stats.CategorySales]:
        return stats.sales_by_category(self._completed(start, end), self._catalog())

    def _completed(self, start: datetime, end: datetime) -> list[Sale]:
        return self._matching(SaleFilter(status=SaleStatus.COMPLETED, start=start, end=end, limit=None))

    def _catalog(self) -> dict[str, Product]:
        return {p.id: p for p in self._products.list_all()}

    def _matching(self, sale_filter: SaleFilter) -> list[Sale]:
        return [
            s for s in self._store.values()
            if (sale_filter.status is None or s.status is sale_filter.status)
            and (sale_filter.start is None or s.created_at >= sale_filter.start)
            and (sale_filter.end is None or s.created_at <= sale_filter.end)
        ]

    # --- Test helpers ---------------------------------------------------------

    def put(self, sale: Sale) -> Sale:
        """Store a sale as-is (e.g. with a back-dated ``created_at``)."""
        if sale.id is None:
            sale.id = self._next_id
            self._next_id += 1
        self._store[sale.id] = dataclasses.replace(sale)
        return sale


class FakeSequenceGenerator(SequenceGenerator):

    def __init__(self) -> None:
        self._values: dict[str, int] = {}

    def next_value(self, sequence_name: str) -> int:
        self._values[sequence_name] = self._values.get(sequence_name, 0) + 1
        return self._values[sequence_name]

    def current(self, sequence_name: str) -> int:
        return self._values.get(sequence_name, 0)


class FakeUnitOfWork(UnitOfWork):

    def __init__(self, products: list[Product] | None = None) -> None:
        self.products = FakeProductRepository(products)
        self.sales = FakeSaleRepository(self.products)
        self.sequences = FakeSequenceGenerator()
        self.commits = 0
        self.rollbacks = 0
        self._snapshot: dict | None = None

    def __enter__(self) -> FakeUnitOfWork:
        self._snapshot = self._take_snapshot()
        return self

    def commit(self) -> None:
        self.commits += 1
        self._snapshot = self._take_snapshot()

    def rollback(self) -> None:
        self.rollbacks += 1
        if self._snapshot is not None:
            self.products._store = copy.deepcopy(self._snapshot["products"])
            self.sales._store = copy.deepcopy(self._snapshot["sales"])
            self.sales._next_id = self._snapshot["next_sale_id"]
            self.sequences._values = dict(self._snapshot["sequences"])

    def _take_snapshot(self) -> dict:
        return {
            "products": copy.deepcopy(self.products._store),
            "sales": copy.deepcopy(self.sales._store),
            "next_sale_id": self.sales._next_id,
            "sequences": dict(self.sequences._values),
        }
