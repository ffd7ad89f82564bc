"""Tests for exact-decimal money handling."""

from decimal import Decimal

import pytest

from src.services.order_service import price_order
from src.services.business_rules import InvalidInputError
from src.utils.money import InvalidMoneyError, Money


def test_parse_accepts_strings_integers_and_decimals():
    assert Money.parse("500.00").to_decimal() == Decimal("500.00")
    assert Money.parse("33.3").to_fixed2() == "33.30"
    assert Money.parse(120).to_fixed2() == "120.00"
    assert Money.parse(Decimal("60.5")).to_fixed2() == "60.50"


def test_parse_rejects_floats():
    with pytest.raises(InvalidMoneyError):
        Money.parse(0.1)


def test_parse_rejects_sub_cent_precision():
    with pytest.raises(InvalidMoneyError):
        Money.parse("10.005")


@pytest.mark.parametrize("value", ["", "abc", None, "NaN", True])
def test_parse_rejects_garbage(value):
    with pytest.raises(InvalidMoneyError):
        Money.parse(value)


def test_repeated_addition_does_not_drift():
    """0.10 added ten times is exactly 1.00; binary floats would not be."""
    total = Money.sum(Money.parse("0.10") for _ in range(10))

    assert total == Money.parse("1.00")
    assert str(total) == "1.00"


def test_multiplication_by_quantity():
    assert Money.parse("33.33") * 3 == Money.parse("99.99")
    assert 2 * Money.parse("500.00") == Money.parse("1000.00")


def test_multiplication_by_float_is_refused():
    with pytest.raises(TypeError):
        Money.parse("10.00") * 1.5


def test_price_order_computes_subtotal_and_total():
    pricing = price_order(Money.parse("500.00"), 2, Money.parse("60.00"))

    assert pricing.subtotal.to_fixed2() == "1000.00"
    assert pricing.shipping_fee.to_fixed2() == "60.00"
    assert pricing.total.to_fixed2() == "1060.00"
    assert pricing.total == pricing.subtotal + pricing.shipping_fee


def test_price_order_is_exact_for_repeating_fractions():
    pricing = price_order(Money.parse("33.33"), 3, Money.parse("0.00"))

    assert pricing.subtotal.to_fixed2() == "99.99"
    assert pricing.total.to_fixed2() == "99.99"


@pytest.mark.parametrize("quantity", [0, -1, True, "2"])
def test_price_order_rejects_invalid_quantity(quantity):
    with pytest.raises(InvalidInputError):
        price_order(Money.parse("10.00"), quantity, Money.parse("60.00"))


def test_price_order_accepts_largest_quantity():
    pricing = price_order(Money.parse("500.00"), 10000, Money.parse("60.00"))

    assert pricing.total.to_fixed2() == "5000060.00"


def test_price_order_rejects_quantity_above_maximum():
    with pytest.raises(InvalidInputError) as exc_info:
        price_order(Money.parse("10.00"), 10**20, Money.parse("60.00"))
    assert exc_info.value.code == "INVALID_QUANTITY"


def test_price_order_rejects_total_that_does_not_fit_the_ledger():
    """Amounts are stored as Numeric(10, 2), so totals cap at 99,999,999.99."""
    assert price_order(Money.parse("9999999.99"), 10, Money.parse("0.09")).total.to_fixed2() == "99999999.99"

    with pytest.raises(InvalidInputError) as exc_info:
        price_order(Money.parse("9999999.99"), 10, Money.parse("0.10"))
    assert exc_info.value.code == "ORDER_TOTAL_TOO_LARGE"
