"""Application service: Cancel Sale use case.

Cancellation is the compensating action for a sale: it gives back exactly
the stock the sale consumed and moves the sale to CANCELLED, both in one
unit of work.  A sale is never deleted.

Cancelling an already-cancelled sale is rejected with ConflictError and
changes nothing.  The status write is compare-and-set, so two concurrent
cancellations cannot both commit; the loser's stock restorations are
rolled back with it.
"""

from __future__ import annotations

import logging

from pos.application.dto import SaleDTO, sale_to_dto
from pos.domain.exceptions import ConflictError, EntityNotFoundError
from pos.domain.model.sale import Sale
from pos.domain.model.sale_status import SaleStatus
from pos.domain.repository.unit_of_work import UnitOfWork
from pos.domain.service.stock_allocation_service import StockAllocationService

logger = logging.getLogger(__name__)


def cancel_in_scope(uow: UnitOfWork, sale: Sale) -> None:
    """Restore stock and transition to CANCELLED inside an open unit of work.

    The caller owns the scope and decides whether to commit.
    """
    if sale.status is SaleStatus.CANCELLED:
        raise ConflictError(f"Sale {sale.sale_number} is already cancelled")

    StockAllocationService(uow.products).restore_for_sale(sale)
    previous = sale.transition_to(SaleStatus.CANCELLED)
    uow.sales.update_status(sale, expected_status=previous)


class CancelSaleHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, sale_id: int) -> SaleDTO:
        with self._uow as uow:
            sale = uow.sales.get_by_id(sale_id, for_update=True)
            if sale is None:
                raise EntityNotFoundError(f"Sale #{sale_id} not found")

            cancel_in_scope(uow, sale)
            dto = sale_to_dto(sale, uow.products)
            uow.commit()

        logger.info(
            "sale_cancelled",
            extra={"sale_id": sale_id, "sale_number": dto.sale_number},
        )
        return dto
