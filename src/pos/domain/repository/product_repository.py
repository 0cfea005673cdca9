"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (SQL, in-memory)
live in the infrastructure layer and in the test fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from pos.domain.model.product import Product


class ProductRepository(ABC):

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found.

        Always reads the current stored state (never a stale cached copy),
        so a product listed twice in one sale sees its own decrement.
        """

    @abstractmethod
    def get_by_sku(self, sku: str) -> Product | None:
        """Return a product by its SKU, or None if not found."""

    @abstractmethod
    def list_all(self, active_only: bool = False) -> list[Product]:
        """Return products in the catalog ordered by name."""

    @abstractmethod
    def is_active(self, product_id: str) -> bool | None:
        """Return the active flag, or None if the product does not exist."""

    @abstractmethod
    def add(self, product: Product) -> None:
        """Persist a new product; raise ConflictError on a duplicate SKU."""

    @abstractmethod
    def update_details(self, product: Product) -> None:
        """Persist descriptive fields, price and active flag.

        Never writes ``stock``: stock only moves through ``adjust_stock``.
        """

    @abstractmethod
    def adjust_stock(
        self,
        product_id: str,
        delta: int,
        min_resulting_stock: int | None = 0,
    ) -> bool:
        """Atomically add ``delta`` to the product's stock.

        The change is applied only if the product exists and, when
        ``min_resulting_stock`` is not None, only if the resulting stock is
        at least that value.  Returns True if the change was applied.
        """

    @abstractmethod
    def count_active(self, max_stock: int | None = None) -> int:
        """Count active products, only those with ``stock <= max_stock`` if given."""

    @abstractmethod
    def list_low_stock(self, threshold: int) -> list[Product]:
        """Active products with ``stock <= threshold``, lowest stock first."""
