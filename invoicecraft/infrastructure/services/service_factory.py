"""サービスの初期化を行うファクトリ"""
import logging
from pathlib import Path
from typing import Optional

from invoicecraft.domain.value_objects.application_config import ApplicationConfig
from invoicecraft.domain.value_objects.credentials import GoogleSheetsCredentials
from invoicecraft.infrastructure.ai.gemini_reminder_service import GeminiReminderService
from invoicecraft.infrastructure.google_sheets.oauth_helper import OAuthHelper
from invoicecraft.infrastructure.google_sheets.sheets_client import SheetsClient
from invoicecraft.infrastructure.google_sheets.spreadsheet_service import GoogleSheetsService
from invoicecraft.infrastructure.image_renderer.pillow_invoice_renderer import PillowInvoiceRenderer
from invoicecraft.infrastructure.pdf_renderer.reportlab_invoice_renderer import ReportlabInvoiceRenderer
from invoicecraft.infrastructure.services.logo_loader import LogoLoader
from invoicecraft.usecases.build_invoice_document_use_case import BuildInvoiceDocumentUseCase
from invoicecraft.usecases.export_invoice_image_use_case import ExportInvoiceImageUseCase
from invoicecraft.usecases.export_invoice_pdf_use_case import ExportInvoicePdfUseCase
from invoicecraft.usecases.get_dashboard_stats_use_case import GetDashboardStatsUseCase
from invoicecraft.usecases.mark_overdue_invoices_use_case import MarkOverdueInvoicesUseCase
from invoicecraft.usecases.suggest_payment_reminder_use_case import SuggestPaymentReminderUseCase


class ServiceFactory:
    """設定からリポジトリとユースケースを組み立てるファクトリ"""

    def __init__(self, logger: logging.Logger, config: ApplicationConfig, project_root: Path) -> None:
        """初期化

        Args:
            logger: ロガー
            config: アプリケーション設定
            project_root: 認証情報ファイルの相対パスの基準ディレクトリ
        """
        self.logger = logger
        self.config = config
        self.project_root = project_root

    def create_spreadsheet_service(self, google_credentials: GoogleSheetsCredentials) -> GoogleSheetsService:
        """スプレッドシートサービスを作成"""
        oauth_helper = OAuthHelper(google_credentials, project_root=self.project_root)
        client = SheetsClient(self.config.spreadsheet_id, oauth_helper)
        self.logger.info("スプレッドシートサービスを初期化しました")
        return GoogleSheetsService(client)

    def create_reminder_service(self) -> Optional[GeminiReminderService]:
        """Geminiサービスを作成（APIキーが無い場合はNone）"""
        if not self.config.gemini_api_key:
            return None
        return GeminiReminderService(self.config.gemini_api_key, self.config.gemini_model)

    def create_image_renderer(self, image_format: Optional[str] = None) -> PillowInvoiceRenderer:
        return PillowInvoiceRenderer(
            image_format=image_format or self.config.image_format,
            font_regular=self.config.image_font_regular,
            font_bold=self.config.image_font_bold,
        )

    def create_build_document_use_case(self, sheets: GoogleSheetsService) -> BuildInvoiceDocumentUseCase:
        return BuildInvoiceDocumentUseCase(
            invoice_repository=sheets,
            customer_repository=sheets,
            product_repository=sheets,
            company_profile_repository=sheets,
            logo_loader=LogoLoader(),
        )

    def create_export_pdf_use_case(self, sheets: GoogleSheetsService) -> ExportInvoicePdfUseCase:
        return ExportInvoicePdfUseCase(self.create_build_document_use_case(sheets), ReportlabInvoiceRenderer())

    def create_export_image_use_case(
        self, sheets: GoogleSheetsService, image_format: Optional[str] = None
    ) -> ExportInvoiceImageUseCase:
        return ExportInvoiceImageUseCase(
            self.create_build_document_use_case(sheets), self.create_image_renderer(image_format)
        )

    def create_reminder_use_case(self, sheets: GoogleSheetsService) -> SuggestPaymentReminderUseCase:
        return SuggestPaymentReminderUseCase(
            invoice_repository=sheets,
            customer_repository=sheets,
            company_profile_repository=sheets,
            reminder_repository=self.create_reminder_service(),
        )

    def create_mark_overdue_use_case(self, sheets: GoogleSheetsService) -> MarkOverdueInvoicesUseCase:
        return MarkOverdueInvoicesUseCase(sheets)

    def create_dashboard_stats_use_case(self, sheets: GoogleSheetsService) -> GetDashboardStatsUseCase:
        return GetDashboardStatsUseCase(sheets)
