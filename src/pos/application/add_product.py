"""Application service: Add Product use case."""

from __future__ import annotations

import logging

from pos.application.dto import ProductDTO, product_to_dto
from pos.domain.exceptions import ConflictError
from pos.domain.model.product import Product
from pos.domain.model.value_objects import Money
from pos.domain.repository.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class AddProductHandler:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def handle(
        self,
        sku: str,
        name: str,
        price: str,
        stock: int = 0,
        category: str = "",
        description: str = "",
        barcode: str | None = None,
    ) -> ProductDTO:
        """Register a new product with its initial stock."""
        product = Product.create(
            sku=sku,
            name=name,
            price=Money.of(price),
            stock=stock,
            category=category,
            description=description,
            barcode=barcode,
        )

        with self._uow as uow:
            if uow.products.get_by_sku(product.sku) is not None:
                raise ConflictError(f"SKU '{product.sku}' already exists")
            uow.products.add(product)
            uow.commit()

        logger.info("product_added", extra={"product_id": product.id, "sku": product.sku})
        return product_to_dto(product)
