import click

from pos.infrastructure.cli.db_commands import db_init
from pos.infrastructure.cli.product_commands import (
    product_add,
    product_deactivate,
    product_list,
    product_update,
)
from pos.infrastructure.cli.report_commands import (
    report_categories,
    report_chart,
    report_dashboard,
    report_low_stock,
)
from pos.infrastructure.cli.sale_commands import (
    sale_cancel,
    sale_create,
    sale_list,
    sale_show,
    sale_update,
)
from pos.infrastructure.config import get_settings
from pos.infrastructure.logging_config import configure_logging


@click.group()
@click.option("--log-level", default=None, help="Log level (overrides POS_LOG_LEVEL).")
@click.option("--log-json", is_flag=True, default=False, help="Emit logs as JSON lines.")
def cli(log_level: str | None, log_json: bool) -> None:
    """POS — Point of Sale backend"""
    settings = get_settings()
    try:
        configure_logging(
            log_level or settings.log_level,
            json_output=log_json or settings.log_json,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--log-level")


@cli.group()
def db() -> None:
    """Manage the database."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def sale() -> None:
    """Record and manage sales."""


@cli.group()
def report() -> None:
    """Read-only sales reports."""


# Register subcommands
db.add_command(db_init)
product.add_command(product_add)
product.add_command(product_deactivate)
product.add_command(product_list)
product.add_command(product_update)
sale.add_command(sale_cancel)
sale.add_command(sale_create)
sale.add_command(sale_list)
sale.add_command(sale_show)
sale.add_command(sale_update)
report.add_command(report_categories)
report.add_command(report_chart)
report.add_command(report_dashboard)
report.add_command(report_low_stock)
