"""請求書リポジトリのインターフェース"""
from abc import ABC, abstractmethod
from typing import List, Optional

from invoicecraft.domain.entities.invoice import Invoice, InvoiceDraft
from invoicecraft.domain.value_objects.invoice_totals import InvoiceTotals


class IInvoiceRepository(ABC):
    """請求書リポジトリのインターフェース"""

    @abstractmethod
    async def list_invoices(self) -> List[Invoice]:
        """全請求書を明細付きで取得する"""
        pass

    @abstractmethod
    async def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        """請求書を明細付きで取得する

        Args:
            invoice_id: 請求書ID

        Returns:
            Optional[Invoice]: 見つからない場合は None
        """
        pass

    @abstractmethod
    async def create_invoice(self, draft: InvoiceDraft, totals: InvoiceTotals) -> Invoice:
        """請求書を登録する

        請求書IDと請求書番号はリポジトリで採番する。

        Args:
            draft: 検証済みのドラフト
            totals: ドラフトの明細から計算した金額

        Returns:
            Invoice: 登録された請求書
        """
        pass

    @abstractmethod
    async def update_invoice(self, invoice: Invoice) -> Invoice:
        """請求書と明細を置き換える

        Raises:
            NotFoundError: 請求書が存在しない場合
        """
        pass

    @abstractmethod
    async def update_invoice_status(self, invoice_id: str, status: str) -> None:
        """請求書のステータスだけを更新する（明細は変更しない）

        Raises:
            NotFoundError: 請求書が存在しない場合
            ValidationError: ステータスが不正な場合
        """
        pass

    @abstractmethod
    async def delete_invoice(self, invoice_id: str) -> None:
        """請求書と明細を削除する

        Raises:
            NotFoundError: 請求書が存在しない場合
        """
        pass
