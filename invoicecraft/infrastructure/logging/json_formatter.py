"""1行1JSONのログフォーマッタ"""
import json
import logging
import traceback
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict

import tomli

DEFAULT_VERSION = "0.1.0"
SERVICE_NAME = "invoicecraft"

# LogRecord の属性名 → 出力するキー名
RECORD_FIELDS = (
    ("name", "logger"),
    ("module", "module"),
    ("funcName", "function"),
    ("lineno", "line"),
)


def _to_json(value: Any) -> Any:
    """金額はDecimalのまま文字列に、日付はISO形式にする"""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


class JSONFormatter(logging.Formatter):
    """ログレコードをJSON文字列に変換する

    extra={"context": {...}} で渡した辞書は context キーに出力する。
    """

    def __init__(self, version: str, service: str = SERVICE_NAME):
        super().__init__()
        self.version = version
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self.service,
            "version": self.version,
            "message": record.getMessage(),
        }
        for attribute, key in RECORD_FIELDS:
            entry[key] = getattr(record, attribute, None)

        context = getattr(record, "context", None)
        if isinstance(context, dict) and context:
            entry["context"] = context

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_traceback = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_traceback),
            }

        return json.dumps(entry, ensure_ascii=False, default=_to_json)


def get_version(project_root: Path) -> str:
    """pyproject.toml の project.version を返す（読めない場合は 0.1.0）"""
    pyproject_path = project_root / "pyproject.toml"
    if not pyproject_path.is_file():
        return DEFAULT_VERSION
    try:
        data = tomli.loads(pyproject_path.read_text(encoding="utf-8"))
    except (OSError, tomli.TOMLDecodeError):
        return DEFAULT_VERSION
    return data.get("project", {}).get("version", DEFAULT_VERSION)
