"""アプリケーション設定を表す値オブジェクト"""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ImageFormat:
    """画像フォーマットの定数"""
    PNG = "png"
    JPEG = "jpeg"


class ApplicationConfig(BaseModel):
    """アプリケーション設定の値オブジェクト"""

    # ログ設定
    log_level: str = Field(default="INFO", description="ログレベル")

    # Googleスプレッドシート設定
    spreadsheet_id: str = Field(..., description="GoogleスプレッドシートID")

    # Gemini設定
    gemini_api_key: Optional[str] = Field(default=None, description="Gemini APIキー")
    gemini_model: str = Field(default="gemini-2.5-flash", description="Geminiモデル名")

    # 請求書設定
    default_tax_percent: Decimal = Field(default=Decimal("11"), description="税率トグルON時の税率(%)")

    # 出力設定
    image_format: str = Field(default=ImageFormat.PNG, description="画像フォーマット")
    image_font_regular: Optional[str] = Field(default=None, description="画像描画用フォント（通常）")
    image_font_bold: Optional[str] = Field(default=None, description="画像描画用フォント（太字）")
    output_dir: str = Field(default="exports", description="エクスポート先ディレクトリ")

    @field_validator("spreadsheet_id")
    @classmethod
    def validate_spreadsheet_id(cls, v: str) -> str:
        """スプレッドシートIDのバリデーション"""
        if not v or not v.strip():
            raise ValueError("スプレッドシートIDが空です")
        return v.strip()

    @field_validator("default_tax_percent")
    @classmethod
    def validate_default_tax_percent(cls, v: Decimal) -> Decimal:
        """税率のバリデーション"""
        if v < 0 or v > 100:
            raise ValueError(f"税率は0〜100の範囲である必要があります: {v}")
        return v

    @field_validator("image_format")
    @classmethod
    def validate_image_format(cls, v: str) -> str:
        """画像フォーマットのバリデーション"""
        v = v.lower()
        if v == "jpg":
            v = ImageFormat.JPEG
        valid_formats = [ImageFormat.PNG, ImageFormat.JPEG]
        if v not in valid_formats:
            raise ValueError(f"画像フォーマットは {valid_formats} のいずれかである必要があります")
        return v

    class Config:
        frozen = True
