"""会社ロゴの取得"""
import logging
from pathlib import Path
from typing import Optional

import requests

logger = logging.getLogger(__name__)


class LogoLoader:
    """ロゴURL（http(s) またはローカルパス）から画像のバイト列を取得する

    取得に失敗した場合はロゴなしで描画できるよう None を返す。
    """

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    def load(self, logo_url: str) -> Optional[bytes]:
        if not logo_url:
            return None

        if logo_url.startswith(("http://", "https://")):
            try:
                response = requests.get(logo_url, timeout=self.timeout)
                response.raise_for_status()
                logger.debug(f"ロゴを取得しました: {logo_url} ({len(response.content)} bytes)")
                return response.content
            except requests.RequestException as e:
                logger.warning(f"ロゴの取得に失敗しました: {logo_url} ({e})")
                return None

        path = Path(logo_url)
        if not path.is_file():
            logger.warning(f"ロゴファイルが見つかりません: {logo_url}")
            return None
        return path.read_bytes()
