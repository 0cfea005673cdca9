"""Application service: List Products use case (query)."""

from __future__ import annotations

from pos.application.dto import ProductDTO, product_to_dto
from pos.domain.repository.unit_of_work import UnitOfWork


class ListProductsHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, include_inactive: bool = False) -> list[ProductDTO]:
        with self._uow as uow:
            products = uow.products.list_all(active_only=not include_inactive)
        return [product_to_dto(p) for p in products]
