"""合計計算のテスト"""
import logging
from decimal import Decimal

import pytest

from invoicecraft.domain.exceptions import ValidationError
from invoicecraft.domain.services.total_calculator import compute_totals
from invoicecraft.domain.value_objects.line_item import LineItem, to_decimal


def _items(*pairs):
    return [
        LineItem(product_id=f"prod-{index}", quantity=quantity, unit_price=unit_price)
        for index, (quantity, unit_price) in enumerate(pairs, start=1)
    ]


def test_compute_totals_with_tax_and_discount():
    """小計 10,000,000 / 税 11% / 値引き 500,000"""
    totals = compute_totals(_items((10, 1000000)), tax_percent=11, discount_value=500000)

    assert totals.subtotal == Decimal("10000000")
    assert totals.tax_amount == Decimal("1100000")
    assert totals.discount_value == Decimal("500000")
    assert totals.total == Decimal("10600000")


def test_compute_totals_two_lines():
    totals = compute_totals(
        _items((1, 5000000), (2, 2500000)), tax_percent=11, discount_value=500000, underpayment_value=0
    )

    assert totals.subtotal == Decimal("10000000")
    assert totals.tax_amount == Decimal("1100000")
    assert totals.total == Decimal("10600000")


def test_compute_totals_adds_underpayment():
    totals = compute_totals(
        _items((2, 150000), (1, 200000)), tax_percent=0, discount_value=50000, underpayment_value=75000
    )

    assert totals.subtotal == Decimal("500000")
    assert totals.tax_amount == Decimal("0")
    assert totals.total == Decimal("525000")


def test_compute_totals_rounds_tax_to_whole_unit():
    """税額は整数単位に四捨五入する"""
    totals = compute_totals(_items((1, 1005)), tax_percent=11)

    assert totals.tax_amount == Decimal("111")
    assert totals.total == Decimal("1116")


def test_compute_totals_empty_items():
    totals = compute_totals([], tax_percent=11)

    assert totals.subtotal == Decimal("0")
    assert totals.tax_amount == Decimal("0")
    assert totals.total == Decimal("0")


def test_compute_totals_is_deterministic():
    items = _items((3, 33333), (7, 1250))

    assert compute_totals(items, 11, 1000) == compute_totals(items, 11, 1000)


@pytest.mark.parametrize("kwargs", [
    {"tax_percent": -1},
    {"tax_percent": 101},
    {"discount_value": -1},
    {"underpayment_value": -10},
    {"tax_percent": "abc"},
])
def test_compute_totals_rejects_out_of_range_values(kwargs):
    with pytest.raises(ValidationError):
        compute_totals(_items((1, 1000)), **kwargs)


def test_compute_totals_discount_larger_than_total_is_logged(caplog):
    """値引きが小計+税額を超えてもエラーにせず警告する"""
    with caplog.at_level(logging.WARNING):
        totals = compute_totals(_items((1, 1000)), tax_percent=0, discount_value=1500)

    assert totals.total == Decimal("-500")
    assert "値引き額が小計と税額の合計を超えています" in caplog.text


def test_line_item_total_is_derived():
    item = LineItem(product_id="prod-1", quantity=3, unit_price="1,500")

    assert item.unit_price == Decimal("1500")
    assert item.total == Decimal("4500")


@pytest.mark.parametrize("text, expected", [
    ("1,000,000", Decimal("1000000")),
    ("1,500.50", Decimal("1500.50")),
    (" 250000 ", Decimal("250000")),
])
def test_to_decimal_accepts_thousands_separators(text, expected):
    assert to_decimal(text, "amount") == expected


@pytest.mark.parametrize("text", ["1,5", "12,34,567", "1,0000", ",500", "1.000,50"])
def test_to_decimal_rejects_ambiguous_separators(text):
    """小数点としてのカンマは桁区切りとして解釈しない"""
    with pytest.raises(ValidationError):
        to_decimal(text, "amount")


@pytest.mark.parametrize("quantity, unit_price", [(0, 100), (-1, 100), (1.5, 100), (1, -1), (True, 100)])
def test_line_item_rejects_invalid_values(quantity, unit_price):
    with pytest.raises(ValidationError):
        LineItem(product_id="prod-1", quantity=quantity, unit_price=unit_price)
