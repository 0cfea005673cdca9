"""CLI commands for the Product catalog."""

from __future__ import annotations

import click

from pos.application.add_product import AddProductHandler
from pos.application.list_products import ListProductsHandler
from pos.application.update_product import DeactivateProductHandler, UpdateProductHandler
from pos.domain.exceptions import DomainException
from pos.infrastructure.bootstrap import unit_of_work


@click.command("add")
@click.option("--sku", required=True, help="Unique stock-keeping unit.")
@click.option("--name", required=True, help="Product name.")
@click.option("--price", required=True, help="Price (e.g. 15.00).")
@click.option("--stock", default=0, show_default=True, type=int, help="Initial stock.")
@click.option("--category", default="", help="Category used by reports.")
@click.option("--description", default="", help="Free-text description.")
@click.option("--barcode", default=None, help="Barcode, if any.")
def product_add(
    sku: str,
    name: str,
    price: str,
    stock: int,
    category: str,
    description: str,
    barcode: str | None,
) -> None:
    """Add a new product to the catalog."""
    handler = AddProductHandler(unit_of_work())

    try:
        product = handler.handle(
            sku=sku,
            name=name,
            price=price,
            stock=stock,
            category=category,
            description=description,
            barcode=barcode,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product.id} '{product.name}' added at {product.price} (stock={product.stock})")


@click.command("list")
@click.option("--all", "include_inactive", is_flag=True, default=False, help="Include inactive products.")
def product_list(include_inactive: bool) -> None:
    """List products in the catalog."""
    try:
        products = ListProductsHandler(unit_of_work()).handle(include_inactive=include_inactive)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"{'ID':<36} {'SKU':<12} {'Name':<20} {'Price':>10} {'Stock':>6}  Active")
    click.echo("-" * 94)
    for p in products:
        click.echo(
            f"{p.id:<36} {p.sku:<12} {p.name:<20} {p.price:>10} {p.stock:>6}  "
            f"{'yes' if p.is_active else 'no'}"
        )


@click.command("update")
@click.option("--id", "product_id", required=True, help="Product ID.")
@click.option("--price", required=True, help="New price (e.g. 29.99).")
def product_update(product_id: str, price: str) -> None:
    """Update a product's price (existing sales keep their price)."""
    handler = UpdateProductHandler(unit_of_work())

    try:
        product = handler.handle(product_id=product_id, new_price=price)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product.id} price updated to {product.price}")


@click.command("deactivate")
@click.option("--id", "product_id", required=True, help="Product ID.")
def product_deactivate(product_id: str) -> None:
    """Deactivate a product so it can no longer be sold."""
    handler = DeactivateProductHandler(unit_of_work())

    try:
        product = handler.handle(product_id=product_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Product {product.id} '{product.name}' deactivated.")
