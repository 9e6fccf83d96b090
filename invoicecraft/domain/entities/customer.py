"""顧客エンティティ"""
from dataclasses import dataclass

from invoicecraft.domain.exceptions import ValidationError


@dataclass(frozen=True)
class Customer:
    """顧客を表すエンティティ

    address は改行を含むことがあり、そのまま保持する。
    """

    id: str
    name: str
    email: str = ""
    address: str = ""
    phone: str = ""

    def __post_init__(self):
        """バリデーション"""
        if not self.id:
            raise ValidationError("顧客IDが空です")

        if not self.name:
            raise ValidationError(f"顧客名が空です: {self.id}")
