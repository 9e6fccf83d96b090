"""設定の読み込みを行うサービス"""
import logging
import os
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from invoicecraft.domain.value_objects.application_config import ApplicationConfig, ImageFormat
from invoicecraft.domain.value_objects.credentials import GoogleSheetsCredentials


class ConfigLoader:
    """環境変数から設定を読み込むサービス"""

    def __init__(self, project_root: Path) -> None:
        """初期化

        Args:
            project_root: プロジェクトルートディレクトリ
        """
        self.project_root = project_root
        self.logger = logging.getLogger(__name__)

    def load_config(self) -> ApplicationConfig:
        """アプリケーション設定を読み込む

        Returns:
            ApplicationConfig: アプリケーション設定

        Raises:
            ValueError: 必須の設定が無い、または設定値が無効な場合
        """
        load_dotenv(self.project_root / ".env")

        spreadsheet_id = os.getenv("GOOGLE_SPREADSHEET_ID")
        if not spreadsheet_id:
            raise ValueError("GOOGLE_SPREADSHEET_ID を環境変数に設定してください")

        try:
            config = ApplicationConfig(
                log_level=os.getenv("LOG_LEVEL", "INFO"),
                spreadsheet_id=spreadsheet_id,
                gemini_api_key=os.getenv("GEMINI_API_KEY") or None,
                gemini_model=os.getenv("GEMINI_MODEL") or "gemini-2.5-flash",
                default_tax_percent=self._parse_tax_percent(os.getenv("DEFAULT_TAX_PERCENT")),
                image_format=self._parse_image_format(os.getenv("IMAGE_FORMAT")),
                image_font_regular=os.getenv("IMAGE_FONT_REGULAR") or None,
                image_font_bold=os.getenv("IMAGE_FONT_BOLD") or None,
                output_dir=os.getenv("OUTPUT_DIR") or "exports",
            )
        except ValueError as e:
            raise ValueError(f"設定値が無効です: {str(e)}")

        if not config.gemini_api_key:
            self.logger.info("GEMINI_API_KEY が未設定のため、リマインダー文面は既定の文面を使用します")
        return config

    def load_credentials(self) -> GoogleSheetsCredentials:
        """Google Sheetsの認証情報を環境変数から読み込む"""
        load_dotenv(self.project_root / ".env")

        return GoogleSheetsCredentials(
            service_account_file=os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE") or None,
            credentials_file=os.getenv("GOOGLE_CREDENTIALS_FILE", "credentials.json"),
            token_file=os.getenv("GOOGLE_TOKEN_FILE", "token.json"),
        )

    def _parse_tax_percent(self, value: Optional[str]) -> Decimal:
        """税率をパースする

        Args:
            value: 環境変数の値

        Returns:
            Decimal: パースされた値、無効な場合は11
        """
        default = Decimal("11")
        if not value:
            return default

        try:
            parsed = Decimal(value.strip())
        except InvalidOperation:
            self.logger.warning(f"DEFAULT_TAX_PERCENT の値が無効です: {value}。{default}% を使用します。")
            return default

        if not parsed.is_finite() or parsed < 0 or parsed > 100:
            self.logger.warning(f"DEFAULT_TAX_PERCENT の値が範囲外です: {value}。{default}% を使用します。")
            return default
        return parsed

    def _parse_image_format(self, value: Optional[str]) -> str:
        """画像フォーマットをパースする

        Args:
            value: 環境変数の値

        Returns:
            str: png または jpeg、無効な場合は png
        """
        if not value:
            return ImageFormat.PNG

        normalized = value.strip().lower()
        if normalized == "jpg":
            normalized = ImageFormat.JPEG
        if normalized not in (ImageFormat.PNG, ImageFormat.JPEG):
            self.logger.warning(f"IMAGE_FORMAT の値が無効です: {value}。png を使用します。")
            return ImageFormat.PNG
        return normalized
