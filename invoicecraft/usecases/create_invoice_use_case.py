"""請求書を登録するユースケース"""
import logging

from invoicecraft.domain.entities.invoice import Invoice, InvoiceDraft
from invoicecraft.domain.exceptions import NotFoundError
from invoicecraft.domain.repositories.customer_repository import ICustomerRepository
from invoicecraft.domain.repositories.invoice_repository import IInvoiceRepository
from invoicecraft.domain.services.total_calculator import compute_totals
from invoicecraft.domain.value_objects.invoice_totals import InvoiceTotals

logger = logging.getLogger(__name__)


async def validate_draft(draft: InvoiceDraft, customer_repository: ICustomerRepository) -> InvoiceTotals:
    """ドラフトを検証し、保存する金額を計算する

    Raises:
        ValidationError: 必須項目の欠落、明細なし、日付の逆転、金額が範囲外の場合
        NotFoundError: 顧客が存在しない場合
    """
    draft.validate_for_save()

    customer = await customer_repository.get_customer(draft.customer_id)
    if customer is None:
        raise NotFoundError(f"顧客が見つかりません: {draft.customer_id}")

    return compute_totals(
        draft.line_items,
        draft.tax_percent,
        draft.discount_value,
        draft.underpayment_value,
    )


class CreateInvoiceUseCase:
    """編集中のドラフトを新しい請求書として登録するユースケース"""

    def __init__(
        self,
        invoice_repository: IInvoiceRepository,
        customer_repository: ICustomerRepository,
    ):
        self.invoice_repository = invoice_repository
        self.customer_repository = customer_repository

    async def execute(self, draft: InvoiceDraft) -> Invoice:
        """請求書を登録する

        検証に失敗した場合は何も保存しない。

        Args:
            draft: 編集中の請求書

        Returns:
            Invoice: 登録された請求書（ID・請求書番号は採番済み）

        Raises:
            ValidationError: ドラフトが保存できない状態の場合
            NotFoundError: 顧客が存在しない場合
        """
        logger.info(f"請求書の登録を開始します: 顧客 {draft.customer_id}, 明細 {len(draft.line_items)} 件")

        # ステップ1: 検証と金額計算
        logger.info("ステップ1: ドラフトを検証中...")
        totals = await validate_draft(draft, self.customer_repository)
        logger.info(f"金額を計算しました: 小計 {totals.subtotal}, 合計 {totals.total}")

        # ステップ2: 保存
        logger.info("ステップ2: 請求書を保存中...")
        invoice = await self.invoice_repository.create_invoice(draft, totals)

        logger.info(f"処理完了: 請求書 {invoice.invoice_number} ({invoice.id}) を登録しました")
        return invoice
