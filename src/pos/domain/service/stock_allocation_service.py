"""Domain service: Stock Allocation.

This service coordinates the cross-aggregate operation of taking stock
for a new sale or giving it back when a sale is cancelled.  It lives in
the domain layer because the logic is a core business rule, not just
orchestration.

Every stock change goes through ``ProductRepository.adjust_stock``, an
atomic conditional update ("decrement by N only if current >= N"), so a
stale read can never lead to overselling.  All changes happen inside the
caller's unit of work; if anything fails the whole scope is rolled back.
"""

from __future__ import annotations

import logging

from pos.domain.exceptions import (
    EntityNotFoundError,
    InconsistentStateError,
    InsufficientStockError,
    ProductInactiveError,
)
from pos.domain.model.product import Product
from pos.domain.model.sale import Sale
from pos.domain.model.value_objects import Quantity
from pos.domain.repository.product_repository import ProductRepository

logger = logging.getLogger(__name__)


class StockAllocationService:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def allocate(self, product_id: str, quantity: Quantity) -> Product:
        """Validate and decrement stock for one line item.

        Returns the product as loaded *before* the decrement, whose current
        price becomes the line's price snapshot.
        """
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product not found: {product_id}")
        if not product.is_active:
            raise ProductInactiveError(product.id, product.name)

        qty = quantity.value
        if product.stock < qty:
            raise InsufficientStockError(product.id, product.name, qty, product.stock)

        # The stock may have moved since we read it; the conditional update
        # is the real guard.
        if not self._product_repo.adjust_stock(product.id, -qty, min_resulting_stock=0):
            current = self._product_repo.get_by_id(product.id)
            available = current.stock if current is not None else 0
            raise InsufficientStockError(product.id, product.name, qty, available)

        logger.debug(
            "stock_adjusted",
            extra={"product_id": product.id, "delta": -qty},
        )
        return product

    def restore_for_sale(self, sale: Sale) -> None:
        """Give back exactly the quantities a sale consumed.

        Deactivated products are restored too; deactivation is not
        deletion.  A product that no longer exists at all cannot be
        reconciled automatically.
        """
        for line in sale.items:
            qty = line.quantity.value
            restored = self._product_repo.adjust_stock(
                line.product_id, qty, min_resulting_stock=None
            )
            if not restored:
                raise InconsistentStateError(
                    f"Cannot restore stock for sale {sale.sale_number}: "
                    f"product '{line.product_name}' ({line.product_id}) no longer exists"
                )
            logger.debug(
                "stock_adjusted",
                extra={"product_id": line.product_id, "delta": qty},
            )
