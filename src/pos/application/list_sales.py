"""Application service: List Sales use case (query)."""

from __future__ import annotations

import math
from datetime import datetime

from pos.application.dto import SalePageDTO, sale_to_dto
from pos.domain.model.sale_status import SaleStatus
from pos.domain.repository.sale_repository import SaleFilter
from pos.domain.repository.unit_of_work import UnitOfWork


class ListSalesHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        status: str | SaleStatus | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> SalePageDTO:
        sale_filter = SaleFilter(
            status=SaleStatus.parse(status) if status is not None else None,
            start=start,
            end=end,
            page=page,
            limit=limit,
        )
        with self._uow as uow:
            sales = uow.sales.search(sale_filter)
            total = uow.sales.count(sale_filter)
            dtos = [sale_to_dto(sale, uow.products) for sale in sales]

        return SalePageDTO(
            sales=dtos,
            page=page,
            pages=math.ceil(total / limit),
            total=total,
        )
