"""描画時の通貨・言語を表す値オブジェクト"""
from dataclasses import dataclass

SUPPORTED_LANGUAGES = ("en", "id")


@dataclass(frozen=True)
class RenderContext:
    """通貨コードと表示言語

    画面表示・PDF・画像のすべてで同じコンテキストを引数として渡す。
    """

    currency: str = "IDR"
    language: str = "id"

    def __post_init__(self):
        """未対応の言語は英語として扱う"""
        object.__setattr__(self, "currency", (self.currency or "IDR").upper())
        if self.language not in SUPPORTED_LANGUAGES:
            object.__setattr__(self, "language", "en")
