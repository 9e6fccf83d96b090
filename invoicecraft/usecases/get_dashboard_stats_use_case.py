"""ダッシュボードの集計を行うユースケース"""
import logging
from dataclasses import dataclass
from decimal import Decimal

from invoicecraft.domain.entities.invoice import InvoiceStatus
from invoicecraft.domain.repositories.invoice_repository import IInvoiceRepository
from invoicecraft.domain.services.total_calculator import invoice_totals

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardStats:
    """売上と未回収額の集計"""

    total_revenue: Decimal
    pending_amount: Decimal
    paid_count: int
    pending_count: int
    invoice_count: int


class GetDashboardStatsUseCase:
    """支払済みの売上合計と、未払い・期限超過の未回収額を集計するユースケース"""

    def __init__(self, invoice_repository: IInvoiceRepository):
        self.invoice_repository = invoice_repository

    async def execute(self) -> DashboardStats:
        """支払済み・未回収の金額を集計する（金額は明細から再計算する）"""
        invoices = await self.invoice_repository.list_invoices()
        totals = {invoice.id: invoice_totals(invoice).total for invoice in invoices}

        paid = [invoice for invoice in invoices if invoice.status == InvoiceStatus.PAID]
        pending = [
            invoice for invoice in invoices
            if invoice.status in (InvoiceStatus.UNPAID, InvoiceStatus.OVERDUE)
        ]

        stats = DashboardStats(
            total_revenue=sum((totals[invoice.id] for invoice in paid), Decimal("0")),
            pending_amount=sum((totals[invoice.id] for invoice in pending), Decimal("0")),
            paid_count=len(paid),
            pending_count=len(pending),
            invoice_count=len(invoices),
        )
        logger.info(
            "ダッシュボードを集計しました",
            extra={"context": {
                "total_revenue": str(stats.total_revenue),
                "pending_amount": str(stats.pending_amount),
                "invoice_count": stats.invoice_count,
            }},
        )
        return stats
