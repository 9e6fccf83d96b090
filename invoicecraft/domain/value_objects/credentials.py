"""認証情報を表す値オブジェクト"""
from typing import Optional

from pydantic import BaseModel, Field


class GoogleSheetsCredentials(BaseModel):
    """Google Sheets認証情報の値オブジェクト

    service_account_file が設定されていればサービスアカウント認証、
    なければOAuth 2.0（デスクトップアプリ）認証を使う。
    """

    service_account_file: Optional[str] = Field(default=None, description="サービスアカウントJSONファイルパス")
    credentials_file: str = Field(default="credentials.json", description="OAuth認証情報JSONファイルパス")
    token_file: str = Field(default="token.json", description="トークン保存先ファイルパス")

    @property
    def uses_service_account(self) -> bool:
        return bool(self.service_account_file)

    class Config:
        frozen = True
