"""顧客リポジトリのインターフェース"""
from abc import ABC, abstractmethod
from typing import List, Optional

from invoicecraft.domain.entities.customer import Customer


class ICustomerRepository(ABC):
    """顧客リポジトリのインターフェース"""

    @abstractmethod
    async def list_customers(self) -> List[Customer]:
        """全顧客を取得する"""
        pass

    @abstractmethod
    async def get_customer(self, customer_id: str) -> Optional[Customer]:
        """顧客を取得する

        Args:
            customer_id: 顧客ID

        Returns:
            Optional[Customer]: 見つからない場合は None
        """
        pass

    @abstractmethod
    async def create_customer(
        self, name: str, email: str = "", address: str = "", phone: str = ""
    ) -> Customer:
        """顧客を登録する（IDは採番される）"""
        pass

    @abstractmethod
    async def update_customer(self, customer: Customer) -> Customer:
        """顧客を更新する

        Raises:
            NotFoundError: 顧客が存在しない場合
        """
        pass

    @abstractmethod
    async def delete_customer(self, customer_id: str) -> None:
        """顧客を削除する

        Raises:
            NotFoundError: 顧客が存在しない場合
        """
        pass
