"""明細編集のテスト"""
from decimal import Decimal

import pytest

from invoicecraft.domain.exceptions import ValidationError
from invoicecraft.domain.services.line_item_editor import LineItemEditor
from invoicecraft.domain.value_objects.line_item import LineItem


def test_add_same_product_merges_quantity_and_takes_last_price():
    """同じ商品は1行にまとめ、単価は後から指定したものになる"""
    editor = LineItemEditor()

    first = editor.add_or_merge_item("prod-1", 2, 100)
    second = editor.add_or_merge_item("prod-1", 3, 120)

    assert first == second == 0
    assert len(editor) == 1
    item = editor.items[0]
    assert item.quantity == 5
    assert item.unit_price == Decimal("120")
    assert item.total == Decimal("600")


def test_merge_keeps_entry_id():
    editor = LineItemEditor([LineItem(product_id="prod-1", quantity=1, unit_price=10, entry_id="item-7")])

    editor.add_or_merge_item("prod-1", 1, 10)

    assert editor.items[0].entry_id == "item-7"
    assert editor.items[0].quantity == 2


def test_add_different_products_appends_rows():
    editor = LineItemEditor()

    editor.add_or_merge_item("prod-1", 1, 100)
    index = editor.add_or_merge_item("prod-2", 4, 25)

    assert index == 1
    assert [item.product_id for item in editor.items] == ["prod-1", "prod-2"]
    assert editor.compute_totals().subtotal == Decimal("200")


def test_update_quantity_below_one_leaves_items_unchanged():
    editor = LineItemEditor()
    editor.add_or_merge_item("prod-1", 5, 120)
    before = editor.items

    with pytest.raises(ValidationError):
        editor.update_quantity(0, 0)

    assert editor.items == before


def test_update_quantity_and_unit_price_recompute_total():
    editor = LineItemEditor()
    editor.add_or_merge_item("prod-1", 1, 100)

    editor.update_quantity(0, 4)
    updated = editor.update_unit_price(0, "250")

    assert updated.total == Decimal("1000")
    assert editor.items[0] == updated


def test_update_unit_price_rejects_negative():
    editor = LineItemEditor()
    editor.add_or_merge_item("prod-1", 1, 100)

    with pytest.raises(ValidationError):
        editor.update_unit_price(0, -5)

    assert editor.items[0].unit_price == Decimal("100")


def test_remove_item():
    editor = LineItemEditor()
    editor.add_or_merge_item("prod-1", 1, 100)
    editor.add_or_merge_item("prod-2", 1, 200)

    removed = editor.remove_item(0)

    assert removed.product_id == "prod-1"
    assert [item.product_id for item in editor.items] == ["prod-2"]


@pytest.mark.parametrize("index", [-1, 1, True])
def test_index_out_of_range(index):
    editor = LineItemEditor()
    editor.add_or_merge_item("prod-1", 1, 100)

    with pytest.raises(ValidationError):
        editor.remove_item(index)


def test_add_rejects_invalid_quantity_without_changing_items():
    editor = LineItemEditor()

    with pytest.raises(ValidationError):
        editor.add_or_merge_item("prod-1", 0, 100)

    assert len(editor) == 0
