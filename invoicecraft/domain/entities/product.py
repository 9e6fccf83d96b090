"""商品エンティティ"""
from dataclasses import dataclass
from decimal import Decimal

from invoicecraft.domain.exceptions import ValidationError
from invoicecraft.domain.value_objects.line_item import to_unit_price


class ProductUnit:
    """商品単位の定数"""
    PCS = "pcs"
    BOXES = "boxes"

    ALL = (PCS, BOXES)


@dataclass(frozen=True)
class Product:
    """商品カタログの1件を表すエンティティ"""

    id: str
    name: str
    unit_price: Decimal
    unit: str = ProductUnit.PCS

    def __post_init__(self):
        """バリデーション"""
        if not self.id:
            raise ValidationError("商品IDが空です")

        if not self.name:
            raise ValidationError(f"商品名が空です: {self.id}")

        object.__setattr__(self, "unit_price", to_unit_price(self.unit_price))

        if self.unit not in ProductUnit.ALL:
            raise ValidationError(f"商品単位が不正です: {self.unit}")
