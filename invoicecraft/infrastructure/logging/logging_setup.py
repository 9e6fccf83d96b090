"""ログ出力の初期化"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List

from invoicecraft.infrastructure.logging.json_formatter import JSONFormatter, get_version

# 外部ライブラリのうち WARNING 未満を出さないロガー
NOISY_LOGGERS = (
    "googleapiclient.discovery_cache",
    "google_auth_oauthlib",
    "urllib3",
    "PIL",
)


class LoggingSetup:

    @staticmethod
    def setup(log_level: str, project_root: Path, log_to_file: bool = True) -> Path:
        """標準出力と logs/invoicecraft_<日時>.log にJSON形式で出力する

        Args:
            log_level: ログレベル名（大文字小文字は問わない）
            project_root: logs ディレクトリを作る場所
            log_to_file: False の場合は標準出力のみ

        Returns:
            Path: ログファイルのパス
        """
        formatter = JSONFormatter(version=get_version(project_root))
        log_file = project_root / "logs" / f"invoicecraft_{datetime.now():%Y%m%d_%H%M%S}.log"

        handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
        if log_to_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
        for handler in handlers:
            handler.setFormatter(formatter)

        logging.basicConfig(
            level=getattr(logging, log_level.upper(), logging.INFO),
            handlers=handlers,
            force=True,
        )
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        logging.getLogger(__name__).info(
            "ログ出力を初期化しました",
            extra={"context": {"log_file": str(log_file) if log_to_file else None, "level": log_level}},
        )
        return log_file
