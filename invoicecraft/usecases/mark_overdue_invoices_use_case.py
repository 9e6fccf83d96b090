"""支払期限を過ぎた請求書を期限超過にするユースケース"""
import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional

from invoicecraft.domain.entities.invoice import Invoice, InvoiceStatus
from invoicecraft.domain.repositories.invoice_repository import IInvoiceRepository

logger = logging.getLogger(__name__)


def is_overdue(invoice: Invoice, today: date) -> bool:
    """未払いで支払期限が今日より前なら期限超過"""
    return invoice.status == InvoiceStatus.UNPAID and invoice.due_date < today


class MarkOverdueInvoicesUseCase:
    """未払いのまま支払期限を過ぎた請求書のステータスを Overdue に更新するユースケース"""

    def __init__(self, invoice_repository: IInvoiceRepository):
        self.invoice_repository = invoice_repository

    async def execute(self, today: Optional[date] = None) -> List[Invoice]:
        """期限超過の請求書を更新する

        Args:
            today: 基準日（省略時は今日）

        Returns:
            List[Invoice]: ステータスを更新した請求書
        """
        today = today or date.today()
        logger.info(f"期限超過の請求書を確認します (基準日: {today.isoformat()})")

        invoices = await self.invoice_repository.list_invoices()
        targets = [invoice for invoice in invoices if is_overdue(invoice, today)]
        if not targets:
            logger.info("期限超過の請求書はありません")
            return []

        updated = []
        for invoice in targets:
            await self.invoice_repository.update_invoice_status(invoice.id, InvoiceStatus.OVERDUE)
            saved = replace(invoice, status=InvoiceStatus.OVERDUE)
            logger.info(f"請求書を期限超過にしました: {saved.invoice_number} (支払期限: {saved.due_date})")
            updated.append(saved)

        logger.info(f"処理完了: {len(updated)} 件の請求書を期限超過にしました")
        return updated
