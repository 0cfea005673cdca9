"""Product aggregate.

Products live independently of sales. Descriptive fields, price and the
active flag belong to catalog management; ``stock`` is only ever moved by
the sale and cancellation flows through ``ProductRepository.adjust_stock``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4

from pos.domain.exceptions import ValidationError
from pos.domain.model.value_objects import Money


@dataclass
class Product:
    """A product in the catalog, with its stock counter.

    Invariants:
    - ``stock`` is never negative
    - ``sku`` is unique across the catalog (enforced by the repository)
    """

    id: str
    sku: str
    name: str
    price: Money
    stock: int
    is_active: bool = True
    category: str = ""
    description: str = ""
    barcode: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    # --- Factory (used for NEW products only) ---------------------------------

    @staticmethod
    def create(
        sku: str,
        name: str,
        price: Money,
        stock: int,
        category: str = "",
        description: str = "",
        barcode: str | None = None,
    ) -> Product:
        if not sku or not sku.strip():
            raise ValidationError("Product SKU is required")
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if not isinstance(stock, int) or stock < 0:
            raise ValidationError("Initial stock must be a non-negative integer")
        _check_whole_cents(price)
        return Product(
            id=str(uuid4()),
            sku=sku.strip(),
            name=name.strip(),
            price=price,
            stock=stock,
            category=category.strip(),
            description=description.strip(),
            barcode=barcode,
        )

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing sales because sales capture a
        price snapshot at creation time.
        """
        _check_whole_cents(new_price)
        self.price = new_price
        self.updated_at = datetime.now(timezone.utc)

    def deactivate(self) -> None:
        """Soft-delete: the product can no longer be sold.

        Stock of a deactivated product can still be restored by a
        cancellation.
        """
        if not self.is_active:
            raise ValidationError(f"Product '{self.name}' is already inactive")
        self.is_active = False
        self.updated_at = datetime.now(timezone.utc)


def _check_whole_cents(price: Money) -> None:
    # the store keeps two decimal places and would round anything finer
    if price.quantized() != price:
        raise ValidationError(f"Price {price.amount} has fractions of a cent")
