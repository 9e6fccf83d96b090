"""請求書レンダラーのインターフェース"""
from abc import ABC, abstractmethod

from invoicecraft.domain.value_objects.invoice_document import InvoiceDocument


class IInvoiceRenderer(ABC):
    """InvoiceDocument をバイト列に描画するレンダラー"""

    @abstractmethod
    def render(self, document: InvoiceDocument) -> bytes:
        """ドキュメントを描画する

        途中で失敗した場合は例外を送出し、部分的な出力は返さない。
        """
        pass
