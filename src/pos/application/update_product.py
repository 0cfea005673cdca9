"""Application services: Update Product price / Deactivate Product."""

from __future__ import annotations

from pos.application.dto import ProductDTO, product_to_dto
from pos.domain.exceptions import EntityNotFoundError
from pos.domain.model.value_objects import Money
from pos.domain.repository.unit_of_work import UnitOfWork


class UpdateProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: str, new_price: str) -> ProductDTO:
        """Update a product's price.

        This does NOT affect any existing sales; they captured a
        price snapshot at creation time.
        """
        with self._uow as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

            product.update_price(Money.of(new_price))
            uow.products.update_details(product)
            uow.commit()
        return product_to_dto(product)


class DeactivateProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(self, product_id: str) -> ProductDTO:
        """Soft-delete a product; its stock and past sales are untouched."""
        with self._uow as uow:
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise EntityNotFoundError(f"Product with ID '{product_id}' not found")

            product.deactivate()
            uow.products.update_details(product)
            uow.commit()
        return product_to_dto(product)
