"""会社プロフィールエンティティ"""
from dataclasses import dataclass

from invoicecraft.domain.value_objects.render_context import RenderContext


@dataclass(frozen=True)
class CompanyProfile:
    """請求書に印字する自社情報（読み取り専用）"""

    name: str = ""
    address: str = ""
    logo_url: str = ""
    currency: str = "IDR"
    language: str = "id"

    def render_context(self) -> RenderContext:
        return RenderContext(currency=self.currency, language=self.language)
