"""Application service: Update Sale use case (status and/or notes).

There is no unchecked status write.  A request for CANCELLED runs the full
compensating cancellation (stock restored in the same unit of work); any
other change must be allowed by the sale lifecycle rules.
"""

from __future__ import annotations

import logging

from pos.application.cancel_sale import cancel_in_scope
from pos.application.dto import SaleDTO, sale_to_dto
from pos.domain.exceptions import EntityNotFoundError, ValidationError
from pos.domain.model.sale_status import SaleStatus
from pos.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class UpdateSaleHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        sale_id: int,
        status: str | SaleStatus | None = None,
        notes: str | None = None,
    ) -> SaleDTO:
        if status is None and notes is None:
            raise ValidationError("Nothing to update: give a status and/or notes")
        target = SaleStatus.parse(status) if status is not None else None

        with self._uow as uow:
            sale = uow.sales.get_by_id(sale_id, for_update=True)
            if sale is None:
                raise EntityNotFoundError(f"Sale #{sale_id} not found")

            previous = sale.status
            if target is SaleStatus.CANCELLED:
                cancel_in_scope(uow, sale)
            elif target is not None and target is not sale.status:
                sale.transition_to(target)
                uow.sales.update_status(sale, expected_status=previous)

            if notes is not None:
                sale.update_notes(notes)
                uow.sales.update_notes(sale)

            dto = sale_to_dto(sale, uow.products)
            uow.commit()

        if sale.status is not previous:
            logger.info(
                "sale_status_changed",
                extra={
                    "sale_id": sale_id,
                    "from_status": previous.value,
                    "to_status": sale.status.value,
                },
            )
        return dto
