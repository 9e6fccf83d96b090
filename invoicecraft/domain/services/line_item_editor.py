"""請求書明細の編集ステートマシン"""
import logging
from dataclasses import replace
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from invoicecraft.domain.exceptions import ValidationError
from invoicecraft.domain.services.total_calculator import compute_totals
from invoicecraft.domain.value_objects.invoice_totals import InvoiceTotals
from invoicecraft.domain.value_objects.line_item import LineItem, to_quantity, to_unit_price

logger = logging.getLogger(__name__)


class LineItemEditor:
    """1つの請求書の編集セッション中だけ明細リストを保持する

    同じ商品を追加した場合は行を増やさずに既存行へ数量を加算し、
    単価は最後に指定されたものを採用する。
    商品IDがカタログに存在するかどうかは呼び出し側で確認する。
    """

    def __init__(self, items: Iterable[LineItem] = ()):
        self._items: List[LineItem] = list(items)

    @property
    def items(self) -> Tuple[LineItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def find_index(self, product_id: str) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.product_id == product_id:
                return index
        return None

    def add_or_merge_item(self, product_id: str, quantity, unit_price) -> int:
        """商品を追加する（同じ商品があれば数量を加算して単価を更新）

        Args:
            product_id: 商品ID
            quantity: 追加する数量（1以上）
            unit_price: 単価（0以上）

        Returns:
            int: 追加または更新した行のインデックス

        Raises:
            ValidationError: 数量・単価が範囲外の場合
        """
        if not product_id:
            raise ValidationError("商品IDが空です")
        quantity = to_quantity(quantity)
        unit_price = to_unit_price(unit_price)

        index = self.find_index(product_id)
        if index is None:
            self._items.append(
                LineItem(product_id=product_id, quantity=quantity, unit_price=unit_price)
            )
            logger.debug(f"明細を追加しました: {product_id} x {quantity}")
            return len(self._items) - 1

        current = self._items[index]
        self._items[index] = replace(
            current, quantity=current.quantity + quantity, unit_price=unit_price
        )
        logger.debug(
            f"既存の明細に数量を加算しました: {product_id} "
            f"{current.quantity} -> {current.quantity + quantity}"
        )
        return index

    def update_quantity(self, index: int, quantity) -> LineItem:
        """数量を変更して金額を再計算する

        Raises:
            ValidationError: 数量が1未満、またはインデックスが範囲外の場合
        """
        self._check_index(index)
        quantity = to_quantity(quantity)
        self._items[index] = replace(self._items[index], quantity=quantity)
        return self._items[index]

    def update_unit_price(self, index: int, unit_price) -> LineItem:
        """単価を変更して金額を再計算する

        Raises:
            ValidationError: 単価が負の値、またはインデックスが範囲外の場合
        """
        self._check_index(index)
        unit_price = to_unit_price(unit_price)
        self._items[index] = replace(self._items[index], unit_price=unit_price)
        return self._items[index]

    def remove_item(self, index: int) -> LineItem:
        """明細を削除する"""
        self._check_index(index)
        return self._items.pop(index)

    def compute_totals(
        self,
        tax_percent=Decimal("0"),
        discount_value=Decimal("0"),
        underpayment_value=Decimal("0"),
    ) -> InvoiceTotals:
        return compute_totals(self._items, tax_percent, discount_value, underpayment_value)

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self._items):
            raise ValidationError(f"明細のインデックスが範囲外です: {index}")
