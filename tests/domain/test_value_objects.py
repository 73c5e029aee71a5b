"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from storefront.domain.exceptions import ValidationError
from storefront.domain.model.value_objects import Money, Quantity, is_valid_postal_code


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "INR"

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_factory_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("abc")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_addition_and_multiplication(self):
        assert Money.of("10") + Money.of("5.50") == Money.of("15.50")
        assert Money.of("7.50") * 3 == Money.of("22.50")

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "INR") + Money(Decimal("5"), "USD")

    def test_portion_rounds_half_up_to_whole_units(self):
        assert Money.of("1000").portion(Decimal("0.18")) == Money.of("180")
        assert Money.of("2.50").portion(Decimal("1")) == Money.of("3")
        assert Money.of("999").portion(Decimal("0.18")) == Money.of("180")  # 179.82

    def test_str_formatting(self):
        assert str(Money.of("1300")) == "₹1,300.00"


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_valid_quantity(self):
        assert Quantity(5).value == 5

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="at least 1"):
            Quantity(0)

    def test_non_integer_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(1.5)

    def test_addition(self):
        assert Quantity(2) + Quantity(3) == Quantity(5)


# ── Postal code ──────────────────────────────────────────────────────────────


class TestPostalCode:

    @pytest.mark.parametrize("code", ["110001", "560001"])
    def test_six_digits_valid(self, code):
        assert is_valid_postal_code(code)

    @pytest.mark.parametrize(
        "code", ["", "56000", "1100011", "56OO01", "5600 1", None, "١١٠٠٠١", "560001\n"]
    )
    def test_everything_else_invalid(self, code):
        assert not is_valid_postal_code(code)
