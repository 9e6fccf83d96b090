"""ドメイン例外"""


class InvoiceCraftError(Exception):
    """アプリケーション共通の基底例外"""


class ValidationError(InvoiceCraftError, ValueError):
    """入力値が範囲外、または必須項目が欠けている場合の例外"""


class NotFoundError(InvoiceCraftError, LookupError):
    """請求書・顧客・商品のIDが解決できない場合の例外"""


class ExternalServiceError(InvoiceCraftError, RuntimeError):
    """スプレッドシートやAIなど外部サービスの呼び出しに失敗した場合の例外"""
