"""請求書をPDFにエクスポートするユースケース"""
import base64
import logging

from invoicecraft.domain.repositories.invoice_renderer import IInvoiceRenderer
from invoicecraft.domain.value_objects.export_results import PdfExportResult
from invoicecraft.usecases.build_invoice_document_use_case import BuildInvoiceDocumentUseCase

logger = logging.getLogger(__name__)


class ExportInvoicePdfUseCase:
    """請求書を1ページのPDFに描画してbase64で返すユースケース"""

    def __init__(self, build_document: BuildInvoiceDocumentUseCase, renderer: IInvoiceRenderer):
        self.build_document = build_document
        self.renderer = renderer

    async def execute(self, invoice_id: str) -> PdfExportResult:
        """PDFを生成する

        Raises:
            NotFoundError: 請求書が存在しない場合（PDFは生成しない）
        """
        logger.info(f"PDFエクスポートを開始します: {invoice_id}")

        logger.info("ステップ1: 請求書データを取得中...")
        document = await self.build_document.execute(invoice_id)

        logger.info("ステップ2: PDFを描画中...")
        pdf_bytes = self.renderer.render(document)

        logger.info(f"処理完了: 請求書 {document.invoice_number} のPDFを生成しました")
        return PdfExportResult(pdf_base64=base64.b64encode(pdf_bytes).decode("ascii"))
