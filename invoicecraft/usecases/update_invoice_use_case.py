"""請求書を更新するユースケース"""
import logging

from invoicecraft.domain.entities.invoice import Invoice, InvoiceDraft
from invoicecraft.domain.exceptions import NotFoundError, ValidationError
from invoicecraft.domain.repositories.customer_repository import ICustomerRepository
from invoicecraft.domain.repositories.invoice_repository import IInvoiceRepository
from invoicecraft.usecases.create_invoice_use_case import validate_draft

logger = logging.getLogger(__name__)


class UpdateInvoiceUseCase:
    """既存の請求書を編集中のドラフトの内容で置き換えるユースケース"""

    def __init__(
        self,
        invoice_repository: IInvoiceRepository,
        customer_repository: ICustomerRepository,
    ):
        self.invoice_repository = invoice_repository
        self.customer_repository = customer_repository

    async def execute(self, draft: InvoiceDraft) -> Invoice:
        """請求書を更新する

        請求書IDと請求書番号は変更しない。

        Raises:
            ValidationError: ドラフトが保存できない状態、または請求書IDが無い場合
            NotFoundError: 請求書または顧客が存在しない場合
        """
        if not draft.invoice_id:
            raise ValidationError("更新する請求書のIDが指定されていません")

        logger.info(f"請求書の更新を開始します: {draft.invoice_id}")

        # ステップ1: 既存の請求書を取得
        logger.info("ステップ1: 既存の請求書を取得中...")
        existing = await self.invoice_repository.get_invoice(draft.invoice_id)
        if existing is None:
            raise NotFoundError(f"請求書が見つかりません: {draft.invoice_id}")

        # ステップ2: 検証と金額計算
        logger.info("ステップ2: ドラフトを検証中...")
        totals = await validate_draft(draft, self.customer_repository)

        # ステップ3: 保存
        logger.info("ステップ3: 請求書を保存中...")
        invoice = Invoice(
            id=existing.id,
            invoice_number=existing.invoice_number,
            customer_id=draft.customer_id,
            line_items=draft.line_items,
            subtotal=totals.subtotal,
            tax_percent=totals.tax_percent,
            discount_value=totals.discount_value,
            underpayment_value=totals.underpayment_value,
            total=totals.total,
            status=draft.status,
            invoice_date=draft.invoice_date,
            due_date=draft.due_date,
            notes=draft.notes,
            customer_relationship=draft.customer_relationship,
            payment_history=draft.payment_history,
        )
        updated = await self.invoice_repository.update_invoice(invoice)

        logger.info(f"処理完了: 請求書 {updated.invoice_number} ({updated.id}) を更新しました")
        return updated
