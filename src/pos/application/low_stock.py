"""Application service: Low Stock use case (read-only query)."""

from __future__ import annotations

from pos.application.dto import ProductDTO, product_to_dto
from pos.domain.exceptions import ValidationError
from pos.domain.repository.unit_of_work import UnitOfWork


class LowStockHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, threshold: int = 10) -> list[ProductDTO]:
        if threshold < 0:
            raise ValidationError("Threshold cannot be negative")
        with self._uow as uow:
            products = uow.products.list_low_stock(threshold)
        return [product_to_dto(p) for p in products]
