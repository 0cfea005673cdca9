"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass

from pos.domain.model.product import Product
from pos.domain.model.sale import Sale
from pos.domain.repository.product_repository import ProductRepository


@dataclass(frozen=True)
class SaleItemSpec:
    """Input: what the customer is buying (product ID + quantity)."""

    product_id: str
    quantity: int


@dataclass(frozen=True)
class CustomerInfo:
    """Input: optional customer details recorded on the sale."""

    name: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class SaleLineItemDTO:
    """Output: a single line item as displayed to the user."""

    product_id: str
    product_name: str
    sku: str
    quantity: int
    unit_price: str  # formatted, e.g. "100.00"
    line_total: str


@dataclass(frozen=True)
class SaleDTO:
    """Output: a complete sale as displayed to the user."""

    id: int
    sale_number: str
    status: str
    payment_method: str
    items: list[SaleLineItemDTO]
    subtotal: str
    tax: str
    discount: str
    total: str
    customer_name: str | None
    customer_phone: str | None
    notes: str | None
    created_at: str
    updated_at: str


@dataclass(frozen=True)
class SalePageDTO:
    """Output: one page of a sale listing."""

    sales: list[SaleDTO]
    page: int
    pages: int
    total: int


@dataclass(frozen=True)
class ProductDTO:
    id: str
    sku: str
    name: str
    category: str
    price: str
    stock: int
    is_active: bool


# --- Mapping ------------------------------------------------------------------


def sale_to_dto(sale: Sale, product_repo: ProductRepository) -> SaleDTO:
    """Map a sale, resolving each line's product for display.

    The current catalog name and SKU are shown when the product still
    exists; otherwise the snapshot taken at sale time is used.  Prices
    always come from the snapshot.
    """
    items: list[SaleLineItemDTO] = []
    for item in sale.items:
        product = product_repo.get_by_id(item.product_id)
        items.append(
            SaleLineItemDTO(
                product_id=item.product_id,
                product_name=product.name if product else item.product_name,
                sku=product.sku if product else item.sku,
                quantity=item.quantity.value,
                unit_price=str(item.unit_price),
                line_total=str(item.line_total),
            )
        )
    return SaleDTO(
        id=sale.id,  # type: ignore[arg-type]
        sale_number=sale.sale_number,
        status=sale.status.value,
        payment_method=sale.payment_method.value,
        items=items,
        subtotal=str(sale.subtotal),
        tax=str(sale.tax),
        discount=str(sale.discount),
        total=str(sale.total),
        customer_name=sale.customer_name,
        customer_phone=sale.customer_phone,
        notes=sale.notes,
        created_at=sale.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        updated_at=sale.updated_at.strftime("%Y-%m-%d %H:%M UTC"),
    )


def product_to_dto(product: Product) -> ProductDTO:
    return ProductDTO(
        id=product.id,
        sku=product.sku,
        name=product.name,
        category=product.category,
        price=str(product.price),
        stock=product.stock,
        is_active=product.is_active,
    )
