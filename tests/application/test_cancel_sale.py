"""Integration tests for the CancelSale use case."""

import pytest

from pos.application.cancel_sale import CancelSaleHandler
from pos.application.create_sale import CreateSaleHandler
from pos.application.dto import SaleItemSpec
from pos.domain.exceptions import ConflictError, EntityNotFoundError, InconsistentStateError
from pos.domain.model.product import Product
from pos.domain.model.sale_status import SaleStatus
from pos.domain.model.value_objects import Money
from tests.fakes import FakeUnitOfWork


def _setup() -> tuple[CancelSaleHandler, FakeUnitOfWork, int]:
    """A store with one completed sale of 2x A and 1x B."""
    uow = FakeUnitOfWork([
        Product(id="A", sku="SKU-A", name="Alpha", price=Money.of("100.00"), stock=5),
        Product(id="B", sku="SKU-B", name="Beta", price=Money.of("50.00"), stock=2),
    ])
    dto = CreateSaleHandler(uow).handle(
        [SaleItemSpec("A", 2), SaleItemSpec("B", 1)], payment_method="cash"
    )
    return CancelSaleHandler(uow), uow, dto.id


class TestCancelSale:

    def test_restores_stock_and_marks_cancelled(self):
        handler, uow, sale_id = _setup()
        dto = handler.handle(sale_id)
        assert dto.status == "cancelled"
        assert uow.products.get_by_id("A").stock == 5
        assert uow.products.get_by_id("B").stock == 2
        assert uow.sales.get_by_id(sale_id).status is SaleStatus.CANCELLED

    def test_sale_record_is_kept(self):
        handler, uow, sale_id = _setup()
        handler.handle(sale_id)
        saved = uow.sales.get_by_id(sale_id)
        assert saved.total == Money.of("250.00")
        assert len(saved.items) == 2

    def test_cancel_twice_is_conflict_and_changes_nothing(self):
        handler, uow, sale_id = _setup()
        handler.handle(sale_id)
        with pytest.raises(ConflictError, match="already cancelled"):
            handler.handle(sale_id)
        assert uow.products.get_by_id("A").stock == 5
        assert uow.products.get_by_id("B").stock == 2

    def test_cancel_pending_sale(self):
        uow = FakeUnitOfWork([
            Product(id="A", sku="SKU-A", name="Alpha", price=Money.of("1.00"), stock=3),
        ])
        dto = CreateSaleHandler(uow).handle([SaleItemSpec("A", 3)], payment_method="cash", status="pending")
        CancelSaleHandler(uow).handle(dto.id)
        assert uow.products.get_by_id("A").stock == 3

    def test_unknown_sale(self):
        handler, _, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="Sale #999 not found"):
            handler.handle(999)

    def test_deactivated_product_stock_still_restored(self):
        handler, uow, sale_id = _setup()
        product = uow.products.get_by_id("A")
        product.deactivate()
        uow.products.update_details(product)

        handler.handle(sale_id)
        assert uow.products.get_by_id("A").stock == 5

    def test_missing_product_is_inconsistent_and_rolls_back(self):
        handler, uow, sale_id = _setup()
        uow.products.remove("B")

        with pytest.raises(InconsistentStateError, match="Beta"):
            handler.handle(sale_id)
        # A's restoration was rolled back with the rest of the scope
        assert uow.products.get_by_id("A").stock == 3
        assert uow.sales.get_by_id(sale_id).status is SaleStatus.COMPLETED
