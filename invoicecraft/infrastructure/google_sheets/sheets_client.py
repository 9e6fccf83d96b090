"""Google Sheets API の薄いクライアント"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from invoicecraft.domain.exceptions import ExternalServiceError
from invoicecraft.infrastructure.google_sheets.oauth_helper import OAuthHelper

logger = logging.getLogger(__name__)

# 一時的なエラーとしてリトライするHTTPステータス
RETRYABLE_STATUSES = (429, 500, 502, 503, 504)


def _is_retryable_error(error: BaseException) -> bool:
    if not isinstance(error, HttpError):
        return False
    return getattr(error.resp, "status", None) in RETRYABLE_STATUSES


def column_letter(column_number: int) -> str:
    """列番号（1始まり）をA1表記の列名に変換する（1 → A, 27 → AA）"""
    if column_number < 1:
        raise ValueError(f"列番号は1以上である必要があります: {column_number}")
    letters = ""
    while column_number > 0:
        column_number, remainder = divmod(column_number - 1, 26)
        letters = chr(65 + remainder) + letters
    return letters


class SheetsClient:
    """1つのスプレッドシートに対する行単位の読み書きを行うクライアント

    1行目をヘッダー行として扱い、データは2行目以降に置く。
    存在しないシートは最初のアクセス時にヘッダー行付きで作成する。
    """

    def __init__(self, spreadsheet_id: str, oauth_helper: Optional[OAuthHelper] = None):
        """クライアントを初期化する

        Args:
            spreadsheet_id: スプレッドシートID
            oauth_helper: 認証ヘルパー
        """
        self.spreadsheet_id = spreadsheet_id
        self.oauth_helper = oauth_helper
        self.service = None
        self._sheet_ids: Optional[Dict[str, int]] = None
        self._authenticate()

    def _authenticate(self) -> None:
        """Google Sheets API を認証する"""
        logger.info("Google Sheets API の認証を開始します...")

        try:
            creds = self.oauth_helper.get_credentials()
            self.service = build('sheets', 'v4', credentials=creds, cache_discovery=False)
            logger.info("Google Sheets API の認証が完了しました")
        except Exception as e:
            logger.error(f"Google Sheets API の認証に失敗しました: {e}")
            raise

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception(_is_retryable_error),
        reraise=True,
    )
    def _execute(self, request) -> Dict[str, Any]:
        return request.execute()

    def _call(self, action: str, request) -> Dict[str, Any]:
        if not self.service:
            raise RuntimeError("Google Sheetsサービスが初期化されていません")
        try:
            return self._execute(request)
        except HttpError as error:
            logger.error(f"{action}中にエラーが発生しました: {error}")
            raise ExternalServiceError(f"{action}に失敗しました: {error}") from error

    def _load_sheet_ids(self) -> Dict[str, int]:
        if self._sheet_ids is None:
            spreadsheet = self._call(
                "シート一覧の取得",
                self.service.spreadsheets().get(
                    spreadsheetId=self.spreadsheet_id,
                    fields="sheets(properties(sheetId,title))",
                ),
            )
            self._sheet_ids = {
                sheet["properties"]["title"]: sheet["properties"]["sheetId"]
                for sheet in spreadsheet.get("sheets", [])
            }
        return self._sheet_ids

    def ensure_sheet(self, sheet_name: str, headers: Sequence[str]) -> int:
        """シートが無ければヘッダー行付きで作成し、シートIDを返す"""
        sheet_ids = self._load_sheet_ids()
        if sheet_name in sheet_ids:
            return sheet_ids[sheet_name]

        logger.info(f"シートが存在しないため作成します: {sheet_name}")
        response = self._call(
            f"シート {sheet_name} の作成",
            self.service.spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={"requests": [{"addSheet": {"properties": {"title": sheet_name}}}]},
            ),
        )
        sheet_id = response["replies"][0]["addSheet"]["properties"]["sheetId"]
        sheet_ids[sheet_name] = sheet_id
        self._write_header(sheet_name, headers)
        return sheet_id

    def _write_header(self, sheet_name: str, headers: Sequence[str]) -> None:
        self._call(
            f"シート {sheet_name} のヘッダー書き込み",
            self.service.spreadsheets().values().update(
                spreadsheetId=self.spreadsheet_id,
                range=f"{sheet_name}!A1:{column_letter(len(headers))}1",
                valueInputOption="RAW",
                body={"values": [list(headers)]},
            ),
        )

    def get_values(self, sheet_name: str, headers: Sequence[str]) -> List[List[Any]]:
        """シートの全行をヘッダー行込みで取得する

        空のシートにはヘッダー行を書き込む。

        Args:
            sheet_name: シート名
            headers: シートを作成する場合のヘッダー

        Returns:
            List[List[Any]]: 1要素目がヘッダー行の2次元リスト
        """
        self.ensure_sheet(sheet_name, headers)
        result = self._call(
            f"シート {sheet_name} の読み込み",
            self.service.spreadsheets().values().get(
                spreadsheetId=self.spreadsheet_id,
                range=sheet_name,
                valueRenderOption="UNFORMATTED_VALUE",
            ),
        )
        values = result.get("values", [])
        if not values or not any(values[0]):
            self._write_header(sheet_name, headers)
            return [list(headers)] + values[1:]
        logger.debug(f"シート {sheet_name} を読み込みました: {len(values) - 1} 行")
        return values

    def append_rows(self, sheet_name: str, headers: Sequence[str], rows: List[List[Any]]) -> None:
        """シートの末尾に行を追加する"""
        if not rows:
            return
        self.ensure_sheet(sheet_name, headers)
        result = self._call(
            f"シート {sheet_name} への追加",
            self.service.spreadsheets().values().append(
                spreadsheetId=self.spreadsheet_id,
                range=f"{sheet_name}!A1",
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": rows},
            ),
        )
        logger.info(
            f"シート {sheet_name} に {len(rows)} 行追加しました "
            f"(更新セル数: {result.get('updates', {}).get('updatedCells', 0)})"
        )

    def update_row(self, sheet_name: str, row_number: int, values: List[Any]) -> None:
        """指定行（1始まり）を上書きする"""
        if row_number < 2:
            raise ValueError(f"ヘッダー行は更新できません: {row_number}")
        last_column = column_letter(max(len(values), 1))
        self._call(
            f"シート {sheet_name} の {row_number} 行目の更新",
            self.service.spreadsheets().values().update(
                spreadsheetId=self.spreadsheet_id,
                range=f"{sheet_name}!A{row_number}:{last_column}{row_number}",
                valueInputOption="RAW",
                body={"values": [values]},
            ),
        )

    def delete_rows(self, sheet_name: str, headers: Sequence[str], row_numbers: Sequence[int]) -> None:
        """指定行（1始まり）をまとめて削除する

        行番号がずれないように下の行から順に削除リクエストを並べる。
        """
        if not row_numbers:
            return
        sheet_id = self.ensure_sheet(sheet_name, headers)
        requests = [
            {
                "deleteDimension": {
                    "range": {
                        "sheetId": sheet_id,
                        "dimension": "ROWS",
                        "startIndex": row_number - 1,
                        "endIndex": row_number,
                    }
                }
            }
            for row_number in sorted(set(row_numbers), reverse=True)
        ]
        self._call(
            f"シート {sheet_name} の行削除",
            self.service.spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={"requests": requests},
            ),
        )
        logger.info(f"シート {sheet_name} から {len(requests)} 行削除しました")

    def put_values(self, sheet_name: str, headers: Sequence[str], rows: List[List[Any]]) -> None:
        """ヘッダー行以外を消去して指定の行で置き換える"""
        self.ensure_sheet(sheet_name, headers)
        self._call(
            f"シート {sheet_name} の消去",
            self.service.spreadsheets().values().clear(
                spreadsheetId=self.spreadsheet_id,
                range=f"{sheet_name}!A2:{column_letter(len(headers))}",
                body={},
            ),
        )
        if rows:
            self._call(
                f"シート {sheet_name} への書き込み",
                self.service.spreadsheets().values().update(
                    spreadsheetId=self.spreadsheet_id,
                    range=f"{sheet_name}!A2",
                    valueInputOption="RAW",
                    body={"values": rows},
                ),
            )
