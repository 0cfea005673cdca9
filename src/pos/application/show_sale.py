"""Application service: Show Sale use case (query)."""

from __future__ import annotations

from pos.application.dto import SaleDTO, sale_to_dto
from pos.domain.exceptions import EntityNotFoundError
from pos.domain.repository.unit_of_work import UnitOfWork


class ShowSaleHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, sale_id: int) -> SaleDTO:
        with self._uow as uow:
            sale = uow.sales.get_by_id(sale_id)
            if sale is None:
                raise EntityNotFoundError(f"Sale #{sale_id} not found")
            return sale_to_dto(sale, uow.products)

    def handle_by_number(self, sale_number: str) -> SaleDTO:
        with self._uow as uow:
            sale = uow.sales.get_by_sale_number(sale_number.strip().upper())
            if sale is None:
                raise EntityNotFoundError(f"Sale {sale_number} not found")
            return sale_to_dto(sale, uow.products)
