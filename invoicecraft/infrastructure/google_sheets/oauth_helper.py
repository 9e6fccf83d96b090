"""Google API 認証ヘルパー"""
import json
import logging
from pathlib import Path
from typing import List, Optional

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from invoicecraft.domain.value_objects.credentials import GoogleSheetsCredentials

logger = logging.getLogger(__name__)


class OAuthHelper:
    """サービスアカウントまたはOAuth 2.0で認証情報を取得するヘルパークラス"""

    # Google Sheets APIのスコープ
    SCOPES = ['https://www.googleapis.com/auth/spreadsheets']

    def __init__(
        self,
        google_credentials: GoogleSheetsCredentials,
        scopes: Optional[List[str]] = None,
        project_root: Optional[Path] = None,
    ):
        """認証ヘルパーを初期化する

        Args:
            google_credentials: 認証情報ファイルの設定
            scopes: 使用するスコープのリスト（デフォルトはSCOPES）
            project_root: 相対パスの基準ディレクトリ（デフォルトはカレントディレクトリ）
        """
        self.project_root = project_root or Path.cwd()
        self.service_account_file = (
            self._resolve_path(google_credentials.service_account_file)
            if google_credentials.uses_service_account
            else None
        )
        self.credentials_file = self._resolve_path(google_credentials.credentials_file)
        self.token_file = self._resolve_path(google_credentials.token_file)
        self.scopes = scopes or self.SCOPES

    def _resolve_path(self, file_path: str) -> Path:
        """相対パスの場合はプロジェクトルートからのパスとして解決する"""
        path = Path(file_path)
        if path.is_absolute():
            return path
        return self.project_root / path

    def get_credentials(self):
        """認証情報を取得する

        サービスアカウントのJSONが設定されていればそれを使う。
        それ以外は保存済みトークンを使い、無効ならブラウザで認証フローを実行する。

        Returns:
            認証情報（google.auth の Credentials）

        Raises:
            FileNotFoundError: 認証情報ファイルが見つからない場合
        """
        if self.service_account_file is not None:
            return self._service_account_credentials()

        if not self.credentials_file.exists():
            raise FileNotFoundError(
                f"OAuth認証情報ファイルが見つかりません: {self.credentials_file.resolve()}\n"
                f"Google Cloud Console で Google Sheets API を有効化し、"
                f"「デスクトップアプリ」の OAuth クライアント ID のJSONをこの場所に配置してください。\n"
                f"サービスアカウントを使う場合は GOOGLE_SERVICE_ACCOUNT_FILE を設定してください。"
            )

        creds = self._load_saved_token()
        if creds is not None and creds.valid:
            return creds

        creds = self._refresh(creds) or self._authorize()
        self._save_token(creds)
        return creds

    def _service_account_credentials(self):
        if not self.service_account_file.exists():
            raise FileNotFoundError(
                f"サービスアカウントのJSONファイルが見つかりません: {self.service_account_file.resolve()}"
            )
        logger.info(f"サービスアカウントで認証します: {self.service_account_file.name}")
        return service_account.Credentials.from_service_account_file(
            str(self.service_account_file), scopes=self.scopes
        )

    def _load_saved_token(self) -> Optional[Credentials]:
        if not self.token_file.exists():
            return None
        try:
            return Credentials.from_authorized_user_file(str(self.token_file), self.scopes)
        except (ValueError, json.JSONDecodeError) as e:
            logger.warning(f"保存済みトークンを読み込めません: {e}")
            return None

    def _refresh(self, creds: Optional[Credentials]) -> Optional[Credentials]:
        """期限切れのトークンをリフレッシュする（できない場合は None）"""
        if creds is None or not creds.expired or not creds.refresh_token:
            return None
        try:
            creds.refresh(Request())
        except RefreshError as e:
            logger.warning(f"トークンのリフレッシュに失敗したため再認証します: {e}")
            return None
        logger.info("トークンをリフレッシュしました")
        return creds

    def _authorize(self) -> Credentials:
        logger.info("ブラウザでGoogleアカウントにログインしてください（OAuth認証フロー）")
        flow = InstalledAppFlow.from_client_secrets_file(str(self.credentials_file), self.scopes)
        return flow.run_local_server(port=0)

    def _save_token(self, creds: Credentials) -> None:
        self.token_file.parent.mkdir(parents=True, exist_ok=True)
        self.token_file.write_text(creds.to_json(), encoding="utf-8")
        logger.info(f"トークンを保存しました: {self.token_file}")
