"""請求書明細の値オブジェクト"""
import re
import uuid
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from invoicecraft.domain.exceptions import ValidationError


# 3桁区切りのカンマ（例: 1,000,000 や 1,500.50）
_GROUPED_NUMBER = re.compile(r"^[+-]?\d{1,3}(,\d{3})+(\.\d+)?$")


def gen_entry_id() -> str:
    return uuid.uuid4().hex


def to_decimal(value, field_name: str) -> Decimal:
    """数値をDecimalに変換する（float は文字列経由で変換する）

    文字列のカンマは3桁区切りとしてのみ受け付ける。"1,5" のような
    小数点としてのカンマは解釈せずにエラーにする。

    Args:
        value: 変換対象の値
        field_name: エラーメッセージ用のフィールド名

    Returns:
        Decimal: 変換された数値

    Raises:
        ValidationError: 数値に変換できない場合
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} が数値ではありません: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if "," in text:
            if not _GROUPED_NUMBER.match(text):
                raise ValidationError(f"{field_name} の桁区切りが不正です: {value!r}")
            text = text.replace(",", "")
        try:
            result = Decimal(text)
        except InvalidOperation as e:
            raise ValidationError(f"{field_name} を数値に変換できません: {value!r}") from e
    else:
        raise ValidationError(f"{field_name} が数値ではありません: {value!r}")

    if not result.is_finite():
        raise ValidationError(f"{field_name} が有限の数値ではありません: {value!r}")
    return result


def to_quantity(value) -> int:
    """数量を整数に変換する（1未満はエラー）"""
    if isinstance(value, bool):
        raise ValidationError(f"数量が整数ではありません: {value!r}")
    if isinstance(value, int):
        quantity = value
    else:
        number = to_decimal(value, "quantity")
        if number != number.to_integral_value():
            raise ValidationError(f"数量が整数ではありません: {value!r}")
        quantity = int(number)

    if quantity < 1:
        raise ValidationError(f"数量は1以上である必要があります: {quantity}")
    return quantity


def to_unit_price(value) -> Decimal:
    """単価をDecimalに変換する（負の値はエラー）"""
    unit_price = to_decimal(value, "unit_price")
    if unit_price < 0:
        raise ValidationError(f"単価が負の値です: {unit_price}")
    return unit_price


@dataclass(frozen=True)
class LineItem:
    """請求書の明細1行を表す値オブジェクト

    total は常に unit_price * quantity から算出され、直接は設定できない。
    """

    product_id: str
    quantity: int
    unit_price: Decimal
    entry_id: str = field(default_factory=gen_entry_id)
    total: Decimal = field(init=False)

    def __post_init__(self):
        """バリデーションと合計の算出"""
        if not self.product_id:
            raise ValidationError("商品IDが空です")

        object.__setattr__(self, "quantity", to_quantity(self.quantity))
        object.__setattr__(self, "unit_price", to_unit_price(self.unit_price))
        object.__setattr__(self, "total", self.unit_price * self.quantity)
