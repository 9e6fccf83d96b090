"""エクスポート結果の値オブジェクト"""
from pydantic import BaseModel, Field


class PdfExportResult(BaseModel):
    """PDFエクスポート結果"""

    pdf_base64: str = Field(..., description="base64エンコードされた1ページのPDF")

    class Config:
        frozen = True


class ImageExportResult(BaseModel):
    """画像エクスポート結果"""

    image_url: str = Field(..., description="data URL 形式の画像")
    format: str = Field(..., description="png または jpeg")

    class Config:
        frozen = True
