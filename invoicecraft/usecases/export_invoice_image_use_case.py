"""請求書を画像にエクスポートするユースケース"""
import logging

from invoicecraft.domain.value_objects.export_results import ImageExportResult
from invoicecraft.infrastructure.image_renderer.pillow_invoice_renderer import PillowInvoiceRenderer
from invoicecraft.usecases.build_invoice_document_use_case import BuildInvoiceDocumentUseCase

logger = logging.getLogger(__name__)


class ExportInvoiceImageUseCase:
    """請求書のプレビュー画像を data URL で返すユースケース"""

    def __init__(self, build_document: BuildInvoiceDocumentUseCase, renderer: PillowInvoiceRenderer):
        self.build_document = build_document
        self.renderer = renderer

    async def execute(self, invoice_id: str) -> ImageExportResult:
        """画像を生成する

        Raises:
            NotFoundError: 請求書が存在しない場合（画像は生成しない）
        """
        logger.info(f"画像エクスポートを開始します: {invoice_id} ({self.renderer.image_format})")

        logger.info("ステップ1: 請求書データを取得中...")
        document = await self.build_document.execute(invoice_id)

        logger.info("ステップ2: 画像を描画中...")
        image_url = self.renderer.render_data_url(document)

        logger.info(f"処理完了: 請求書 {document.invoice_number} の画像を生成しました")
        return ImageExportResult(image_url=image_url, format=self.renderer.image_format)
