"""会社プロフィールリポジトリのインターフェース"""
from abc import ABC, abstractmethod

from invoicecraft.domain.entities.company_profile import CompanyProfile


class ICompanyProfileRepository(ABC):
    """会社プロフィールリポジトリのインターフェース"""

    @abstractmethod
    async def get_company_profile(self) -> CompanyProfile:
        """会社プロフィールを取得する（未登録の項目は既定値）"""
        pass

    @abstractmethod
    async def save_company_profile(self, profile: CompanyProfile) -> None:
        """会社プロフィールを保存する"""
        pass
