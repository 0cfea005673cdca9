"""Abstract repository for Sale aggregate (the sale ledger).

Sales are inserted once and never deleted.  After insertion only the
status (compare-and-set) and the notes can be written.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from pos.domain.exceptions import ValidationError
from pos.domain.model.sale import Sale
from pos.domain.model.sale_status import SaleStatus
from pos.domain.service.sales_statistics import (
    CategorySales,
    ChartBucket,
    PeriodSummary,
    ProductSales,
)


@dataclass(frozen=True)
class SaleFilter:
    """Criteria for listing sales, newest first.

    ``start``/``end`` are inclusive bounds on ``created_at``.  ``limit=None``
    returns every match.
    """

    status: SaleStatus | None = None
    start: datetime | None = None
    end: datetime | None = None
    page: int = 1
    limit: int | None = 10

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValidationError("Page must be at least 1")
        if self.limit is not None and self.limit < 1:
            raise ValidationError("Limit must be at least 1")
        if self.start and self.end and self.start > self.end:
            raise ValidationError("Start date must not be after end date")

    @property
    def offset(self) -> int:
        if self.limit is None:
            return 0
        return (self.page - 1) * self.limit


class SaleRepository(ABC):

    @abstractmethod
    def add(self, sale: Sale) -> None:
        """Insert a new sale and assign its ``id``.

        Raises ConflictError if the sale number is already taken.
        """

    @abstractmethod
    def get_by_id(self, sale_id: int, for_update: bool = False) -> Sale | None:
        """Return a sale by its ID, or None if not found.

        ``for_update`` locks the sale row until the unit of work ends.
        """

    @abstractmethod
    def get_by_sale_number(self, sale_number: str) -> Sale | None:
        """Return a sale by its sale number, or None if not found."""

    @abstractmethod
    def search(self, sale_filter: SaleFilter) -> list[Sale]:
        """Return one page of sales matching the filter, newest first."""

    @abstractmethod
    def count(self, sale_filter: SaleFilter) -> int:
        """Return the number of sales matching the filter (ignores paging)."""

    @abstractmethod
    def update_status(self, sale: Sale, expected_status: SaleStatus) -> None:
        """Write ``sale.status`` only if the stored status is still
        ``expected_status``; raise ConflictError otherwise."""

    @abstractmethod
    def update_notes(self, sale: Sale) -> None:
        """Write ``sale.notes``."""

    # --- Reporting ------------------------------------------------------------
    #
    # Aggregations over COMPLETED sales created within [start, end], computed
    # by the store so no sale is loaded to answer them.

    @abstractmethod
    def summarize_completed(self, start: datetime, end: datetime) -> PeriodSummary:
        """Number of sales, revenue and units sold."""

    @abstractmethod
    def top_products(self, start: datetime, end: datetime, limit: int = 5) -> list[ProductSales]:
        """Best sellers by units sold, then by name.

        Lines whose product no longer exists are skipped.
        """

    @abstractmethod
    def completed_per_period(
        self,
        start: datetime,
        end: datetime,
        granularity: str,
    ) -> list[ChartBucket]:
        """Sales and revenue per UTC ``day`` or ``month``, oldest first."""

    @abstractmethod
    def sales_by_category(self, start: datetime, end: datetime) -> list[CategorySales]:
        """Units, revenue and line count per product category, highest revenue first."""
