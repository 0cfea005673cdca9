"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from pos.domain.exceptions import ValidationError
from pos.domain.model.value_objects import Money, Quantity


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")

    def test_of_factory_from_string(self):
        m = Money.of("25.99")
        assert m.amount == Decimal("25.99")

    def test_of_factory_from_int(self):
        m = Money.of(10)
        assert m.amount == Decimal("10")

    def test_of_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("ten")

    def test_non_decimal_rejected(self):
        with pytest.raises(ValidationError, match="must be a Decimal"):
            Money(10.5)

    def test_non_finite_rejected(self):
        with pytest.raises(ValidationError, match="finite"):
            Money(Decimal("NaN"))

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_addition(self):
        result = Money.of("10") + Money.of("5.50")
        assert result == Money.of("15.50")

    def test_subtraction(self):
        result = Money.of("10") - Money.of("3")
        assert result == Money.of("7")

    def test_subtraction_going_negative_rejected(self):
        with pytest.raises(ValidationError, match="negative amount"):
            Money.of("5") - Money.of("10")

    def test_multiplication_by_int(self):
        result = Money.of("7.50") * 3
        assert result == Money.of("22.50")

    def test_multiplication_by_float_rejected(self):
        with pytest.raises(TypeError):
            Money.of("7.50") * 1.5

    def test_quantized_rounds_half_up(self):
        assert Money.of("2.345").quantized().amount == Decimal("2.35")
        assert Money.of("2.344").quantized().amount == Decimal("2.34")

    def test_str_formatting(self):
        assert str(Money.of("15")) == "15.00"
        assert str(Money.of("9.5")) == "9.50"

    def test_comparison_operators(self):
        assert Money.of("5") < Money.of("10")
        assert Money.of("10") > Money.of("5")
        assert Money.of("10") >= Money.of("10")
        assert Money.of("10") <= Money.of("10")

    def test_equality_ignores_trailing_zeros(self):
        assert Money.of("7") == Money.of("7.00")

    def test_zero(self):
        assert Money.zero().amount == Decimal("0")


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_positive(self):
        assert Quantity(3).value == 3

    @pytest.mark.parametrize("value", [0, -1])
    def test_non_positive_rejected(self, value):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(value)

    @pytest.mark.parametrize("value", [1.5, "2", True])
    def test_non_integer_rejected(self, value):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(value)

    def test_str(self):
        assert str(Quantity(4)) == "4"
