"""Application service: Create Sale use case.

Orchestrates the flow between the product store, the sequence generator
and the sale ledger inside ONE unit of work:

1. For each item, in the order supplied: load the product, check it is
   active and has enough stock, and decrement its stock right away (a
   product listed twice sees its own earlier decrement).
2. Snapshot each line at the product's current price.
3. Compute ``total = subtotal + tax - discount``; negative is rejected.
4. Reserve a sale number and persist the sale.
5. Commit.

Any failure leaves the ``with`` block without a commit, so no stock
change and no sale record is ever observed by anyone else.
"""

from __future__ import annotations

import logging

from pos.application.dto import CustomerInfo, SaleDTO, SaleItemSpec, sale_to_dto
from pos.domain.exceptions import DomainException, ValidationError
from pos.domain.model.sale import (
    DEFAULT_SALE_PREFIX,
    SALE_SEQUENCE,
    PaymentMethod,
    Sale,
    SaleLineItem,
    compute_totals,
    format_sale_number,
)
from pos.domain.model.sale_status import SaleStatus
from pos.domain.model.value_objects import Money, Quantity
from pos.domain.repository.unit_of_work import UnitOfWork
from pos.domain.service.stock_allocation_service import StockAllocationService

logger = logging.getLogger(__name__)


class CreateSaleHandler:

    def __init__(self, uow: UnitOfWork, sale_number_prefix: str = DEFAULT_SALE_PREFIX) -> None:
        self._uow = uow
        self._prefix = sale_number_prefix

    def handle(
        self,
        item_specs: list[SaleItemSpec],
        payment_method: str | PaymentMethod,
        discount: str | int | Money = "0",
        tax: str | int | Money = "0",
        customer: CustomerInfo | None = None,
        notes: str | None = None,
        status: str | SaleStatus = SaleStatus.COMPLETED,
    ) -> SaleDTO:
        """Create a sale, deducting stock for every item atomically."""
        # Input checks that need no store access happen before the scope opens.
        if not item_specs:
            raise ValidationError("Sale must have at least one item")
        quantities = [Quantity(spec.quantity) for spec in item_specs]
        method = PaymentMethod.parse(payment_method)
        tax_money = tax if isinstance(tax, Money) else Money.of(tax)
        discount_money = discount if isinstance(discount, Money) else Money.of(discount)
        initial_status = SaleStatus.parse(status)
        if initial_status is SaleStatus.CANCELLED:
            raise ValidationError("A new sale cannot start out cancelled")
        customer = customer or CustomerInfo()

        try:
            with self._uow as uow:
                stock = StockAllocationService(uow.products)
                line_items: list[SaleLineItem] = []

                for spec, qty in zip(item_specs, quantities):
                    product = stock.allocate(spec.product_id, qty)
                    line_items.append(
                        SaleLineItem(
                            product_id=product.id,
                            product_name=product.name,
                            sku=product.sku,
                            quantity=qty,
                            unit_price=product.price,  # <-- price snapshot
                        )
                    )

                # Reject a negative total before a sale number is consumed.
                compute_totals(line_items, tax_money, discount_money)

                sale_number = format_sale_number(
                    uow.sequences.next_value(SALE_SEQUENCE), self._prefix
                )
                sale = Sale.create(
                    sale_number=sale_number,
                    items=line_items,
                    payment_method=method,
                    tax=tax_money,
                    discount=discount_money,
                    customer_name=customer.name,
                    customer_phone=customer.phone,
                    notes=notes,
                    status=initial_status,
                )
                uow.sales.add(sale)
                dto = sale_to_dto(sale, uow.products)
                uow.commit()
        except DomainException as exc:
            logger.info(
                "sale_rejected",
                extra={"code": exc.code, "reason": str(exc), "items": len(item_specs)},
            )
            raise

        logger.info(
            "sale_created",
            extra={
                "sale_id": dto.id,
                "sale_number": dto.sale_number,
                "total": dto.total,
                "items": len(dto.items),
            },
        )
        return dto
