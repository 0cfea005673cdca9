"""End-to-end tests for the ``pos`` command line."""

from __future__ import annotations

import pytest
from click.testing import CliRunner

from pos.infrastructure import bootstrap
from pos.infrastructure.cli.main import cli
from pos.infrastructure.logging_config import reset_logging


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("POS_DATABASE_URL", f"sqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("POS_LOG_LEVEL", "WARNING")
    bootstrap.reset()
    runner = CliRunner()
    result = runner.invoke(cli, ["db", "init"])
    assert result.exit_code == 0, result.output
    yield runner
    bootstrap.reset()
    reset_logging()


def _invoke(runner: CliRunner, *args: str):
    return runner.invoke(cli, list(args))


def _add_product(runner: CliRunner, sku: str, price: str, stock: int) -> str:
    result = _invoke(runner, "product", "add", "--sku", sku, "--name", f"Item {sku}",
                     "--price", price, "--stock", str(stock), "--category", "General")
    assert result.exit_code == 0, result.output
    with bootstrap.unit_of_work() as uow:
        return uow.products.get_by_sku(sku).id


class TestProductCommands:

    def test_add_and_list(self, runner):
        _add_product(runner, "MILK", "1.99", 12)
        result = _invoke(runner, "product", "list")
        assert result.exit_code == 0
        assert "MILK" in result.output
        assert "1.99" in result.output

    def test_duplicate_sku_fails(self, runner):
        _add_product(runner, "MILK", "1.99", 12)
        result = _invoke(runner, "product", "add", "--sku", "MILK", "--name", "x", "--price", "1")
        assert result.exit_code != 0
        assert "already exists" in result.output

    def test_update_and_deactivate(self, runner):
        product_id = _add_product(runner, "MILK", "1.99", 12)
        result = _invoke(runner, "product", "update", "--id", product_id, "--price", "2.49")
        assert result.exit_code == 0
        assert "2.49" in result.output

        result = _invoke(runner, "product", "deactivate", "--id", product_id)
        assert result.exit_code == 0
        assert "MILK" not in _invoke(runner, "product", "list").output
        assert "MILK" in _invoke(runner, "product", "list", "--all").output


class TestSaleCommands:

    def test_create_show_cancel(self, runner):
        a = _add_product(runner, "A", "100.00", 5)
        b = _add_product(runner, "B", "50.00", 2)

        result = _invoke(runner, "sale", "create", "--items", f"{a}:2,{b}:1", "--payment", "cash")
        assert result.exit_code == 0, result.output
        assert "SALE-000001" in result.output
        assert "250.00" in result.output

        result = _invoke(runner, "sale", "show", "--number", "SALE-000001")
        assert result.exit_code == 0
        assert "status=completed" in result.output

        result = _invoke(runner, "sale", "cancel", "--id", "1")
        assert result.exit_code == 0, result.output
        with bootstrap.unit_of_work() as uow:
            assert uow.products.get_by_id(a).stock == 5
            assert uow.products.get_by_id(b).stock == 2

        result = _invoke(runner, "sale", "cancel", "--id", "1")
        assert result.exit_code != 0
        assert "already cancelled" in result.output

    def test_insufficient_stock_reported(self, runner):
        a = _add_product(runner, "A", "100.00", 1)
        result = _invoke(runner, "sale", "create", "--items", f"{a}:2", "--payment", "card")
        assert result.exit_code != 0
        assert "Insufficient stock" in result.output

    def test_bad_items_format(self, runner):
        result = _invoke(runner, "sale", "create", "--items", "nonsense", "--payment", "cash")
        assert result.exit_code != 0
        assert "Invalid item format" in result.output

    def test_list_and_update(self, runner):
        a = _add_product(runner, "A", "1.00", 10)
        for _ in range(3):
            _invoke(runner, "sale", "create", "--items", f"{a}:1", "--payment", "upi", "--status", "pending")

        result = _invoke(runner, "sale", "update", "--id", "2", "--status", "completed", "--notes", "paid")
        assert result.exit_code == 0, result.output

        result = _invoke(runner, "sale", "list", "--status", "pending")
        assert result.exit_code == 0
        assert "SALE-000001" in result.output
        assert "SALE-000002" not in result.output
        assert "2 sales" in result.output

    def test_show_requires_one_selector(self, runner):
        result = _invoke(runner, "sale", "show")
        assert result.exit_code != 0


class TestReportCommands:

    def test_reports_run(self, runner):
        a = _add_product(runner, "A", "10.00", 8)
        _invoke(runner, "sale", "create", "--items", f"{a}:2", "--payment", "cash")

        dashboard = _invoke(runner, "report", "dashboard")
        assert dashboard.exit_code == 0, dashboard.output
        assert "20.00" in dashboard.output

        for args in (["report", "chart", "--period", "year"], ["report", "categories"]):
            result = _invoke(runner, *args)
            assert result.exit_code == 0, result.output
            assert "20.00" in result.output

        low = _invoke(runner, "report", "low-stock")
        assert low.exit_code == 0
        assert "A" in low.output
