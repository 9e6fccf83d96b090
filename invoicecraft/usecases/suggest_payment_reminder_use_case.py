"""支払いリマインダーの文面を提案するユースケース"""
import asyncio
import logging
from typing import Optional

from invoicecraft.domain.exceptions import NotFoundError
from invoicecraft.domain.repositories.company_profile_repository import ICompanyProfileRepository
from invoicecraft.domain.repositories.customer_repository import ICustomerRepository
from invoicecraft.domain.repositories.invoice_repository import IInvoiceRepository
from invoicecraft.domain.repositories.reminder_suggestion_repository import IReminderSuggestionRepository
from invoicecraft.domain.services.formatting import Formatter
from invoicecraft.domain.services.reminder_message import build_default_reminder
from invoicecraft.domain.value_objects.reminder import ReminderRequest, ReminderSuggestion

logger = logging.getLogger(__name__)


class SuggestPaymentReminderUseCase:
    """既定のリマインダー文面を作り、生成AIで顧客に合わせて調整するユースケース"""

    def __init__(
        self,
        invoice_repository: IInvoiceRepository,
        customer_repository: ICustomerRepository,
        company_profile_repository: ICompanyProfileRepository,
        reminder_repository: Optional[IReminderSuggestionRepository] = None,
    ):
        self.invoice_repository = invoice_repository
        self.customer_repository = customer_repository
        self.company_profile_repository = company_profile_repository
        self.reminder_repository = reminder_repository

    async def execute(self, invoice_id: str, current_message: Optional[str] = None) -> ReminderSuggestion:
        """リマインダー文面を提案する

        生成AIが設定されていない場合は既定の文面をそのまま返す。

        Args:
            invoice_id: 請求書ID
            current_message: 調整元の文面（省略時は既定の文面）

        Returns:
            ReminderSuggestion: 調整後の文面と理由

        Raises:
            NotFoundError: 請求書または顧客が存在しない場合
            ExternalServiceError: 生成AIの呼び出しに失敗した場合
        """
        logger.info(f"リマインダー文面の作成を開始します: {invoice_id}")

        # ステップ1: 請求書と顧客を取得
        logger.info("ステップ1: 請求書と顧客を取得中...")
        invoice, company_profile = await asyncio.gather(
            self.invoice_repository.get_invoice(invoice_id),
            self.company_profile_repository.get_company_profile(),
        )
        if invoice is None:
            raise NotFoundError(f"請求書が見つかりません: {invoice_id}")

        customer = await self.customer_repository.get_customer(invoice.customer_id)
        if customer is None:
            raise NotFoundError(f"顧客が見つかりません: {invoice.customer_id}")

        # ステップ2: 既定の文面を作成
        logger.info("ステップ2: リマインダー文面を作成中...")
        message = current_message or build_default_reminder(
            invoice, customer, Formatter(company_profile.render_context())
        )

        if self.reminder_repository is None:
            logger.info("生成AIが設定されていないため既定の文面を返します")
            return ReminderSuggestion(adjusted_reminder_message=message, reasoning="")

        # ステップ3: 生成AIで調整
        logger.info("ステップ3: 生成AIで文面を調整中...")
        suggestion = await self.reminder_repository.suggest(
            ReminderRequest(
                customer_id=customer.id,
                invoice_id=invoice.id,
                payment_history=invoice.payment_history,
                customer_relationship=invoice.customer_relationship,
                current_reminder_message=message,
            )
        )

        logger.info(f"処理完了: 請求書 {invoice.invoice_number} のリマインダー文面を作成しました")
        return suggestion
