"""商品リポジトリのインターフェース"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional

from invoicecraft.domain.entities.product import Product, ProductUnit


class IProductRepository(ABC):
    """商品リポジトリのインターフェース"""

    @abstractmethod
    async def list_products(self) -> List[Product]:
        """全商品を取得する（同じIDは後の行が優先）"""
        pass

    @abstractmethod
    async def get_product(self, product_id: str) -> Optional[Product]:
        """商品を取得する

        Returns:
            Optional[Product]: 見つからない場合は None
        """
        pass

    @abstractmethod
    async def create_product(
        self, name: str, unit_price: Decimal, unit: str = ProductUnit.PCS
    ) -> Product:
        """商品を登録する（IDは採番される）"""
        pass

    @abstractmethod
    async def update_product(self, product: Product) -> Product:
        """商品を更新する

        Raises:
            NotFoundError: 商品が存在しない場合
        """
        pass

    @abstractmethod
    async def delete_product(self, product_id: str) -> None:
        """商品を削除する

        Raises:
            NotFoundError: 商品が存在しない場合
        """
        pass
