"""請求書の作成・編集セッション"""
import asyncio
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from invoicecraft.domain.entities.customer import Customer
from invoicecraft.domain.entities.invoice import Invoice, InvoiceDraft, InvoiceStatus
from invoicecraft.domain.entities.product import Product
from invoicecraft.domain.exceptions import NotFoundError, ValidationError
from invoicecraft.domain.repositories.customer_repository import ICustomerRepository
from invoicecraft.domain.repositories.invoice_repository import IInvoiceRepository
from invoicecraft.domain.repositories.product_repository import IProductRepository
from invoicecraft.domain.services.line_item_editor import LineItemEditor
from invoicecraft.domain.value_objects.invoice_totals import InvoiceTotals
from invoicecraft.domain.value_objects.line_item import LineItem, to_decimal
from invoicecraft.usecases.create_invoice_use_case import CreateInvoiceUseCase
from invoicecraft.usecases.update_invoice_use_case import UpdateInvoiceUseCase

logger = logging.getLogger(__name__)


def _non_negative(value, field_name: str) -> Decimal:
    amount = to_decimal(value, field_name)
    if amount < 0:
        raise ValidationError(f"{field_name} が負の値です: {amount}")
    return amount


class InvoiceEditingSession:
    """1つの請求書フォームの編集状態を保持する

    明細の編集は LineItemEditor に任せ、商品と顧客の存在確認はここで行う。
    集計は summary() を呼ぶたびに明細から計算し直す。
    """

    def __init__(
        self,
        invoice_repository: IInvoiceRepository,
        customer_repository: ICustomerRepository,
        customers: List[Customer],
        products: List[Product],
        default_tax_percent: Decimal = Decimal("11"),
        invoice: Optional[Invoice] = None,
    ):
        self.invoice_repository = invoice_repository
        self.customer_repository = customer_repository
        self.customers: Dict[str, Customer] = {customer.id: customer for customer in customers}
        self.products: Dict[str, Product] = {product.id: product for product in products}
        self.default_tax_percent = to_decimal(default_tax_percent, "default_tax_percent")

        draft = InvoiceDraft.from_invoice(invoice) if invoice else InvoiceDraft()
        self.invoice_id = draft.invoice_id
        self.customer_id = draft.customer_id
        self.editor = LineItemEditor(draft.line_items)
        self.tax_percent = draft.tax_percent
        self.discount_value = draft.discount_value
        self.underpayment_value = draft.underpayment_value
        self.status = draft.status
        self.invoice_date = draft.invoice_date
        self.due_date = draft.due_date
        self.notes = draft.notes
        self.customer_relationship = draft.customer_relationship
        self.payment_history = draft.payment_history

    @classmethod
    async def start(
        cls,
        invoice_repository: IInvoiceRepository,
        customer_repository: ICustomerRepository,
        product_repository: IProductRepository,
        default_tax_percent: Decimal = Decimal("11"),
        invoice_id: Optional[str] = None,
    ) -> "InvoiceEditingSession":
        """顧客・商品（編集時は請求書も）を読み込んでセッションを開始する

        Raises:
            NotFoundError: 編集する請求書が存在しない場合
        """
        if invoice_id:
            customers, products, invoice = await asyncio.gather(
                customer_repository.list_customers(),
                product_repository.list_products(),
                invoice_repository.get_invoice(invoice_id),
            )
            if invoice is None:
                raise NotFoundError(f"請求書が見つかりません: {invoice_id}")
        else:
            customers, products = await asyncio.gather(
                customer_repository.list_customers(),
                product_repository.list_products(),
            )
            invoice = None

        logger.info(
            f"請求書の編集セッションを開始しました: {invoice_id or '新規'} "
            f"(顧客 {len(customers)} 件, 商品 {len(products)} 件)"
        )
        return cls(
            invoice_repository,
            customer_repository,
            customers,
            products,
            default_tax_percent=default_tax_percent,
            invoice=invoice,
        )

    @property
    def is_new(self) -> bool:
        return self.invoice_id is None

    @property
    def line_items(self):
        return self.editor.items

    @property
    def tax_enabled(self) -> bool:
        return self.tax_percent > 0

    def select_customer(self, customer_id: str) -> Customer:
        customer = self.customers.get(customer_id)
        if customer is None:
            raise NotFoundError(f"顧客が見つかりません: {customer_id}")
        self.customer_id = customer_id
        return customer

    def add_product(self, product_id: str, quantity=1, unit_price=None) -> int:
        """カタログの商品を明細に追加する（単価の省略時は商品の単価）

        Raises:
            NotFoundError: 商品がカタログに無い場合
            ValidationError: 数量・単価が範囲外の場合
        """
        product = self.products.get(product_id)
        if product is None:
            raise NotFoundError(f"商品が見つかりません: {product_id}")
        if unit_price is None:
            unit_price = product.unit_price
        return self.editor.add_or_merge_item(product_id, quantity, unit_price)

    def update_quantity(self, index: int, quantity) -> LineItem:
        return self.editor.update_quantity(index, quantity)

    def update_unit_price(self, index: int, unit_price) -> LineItem:
        return self.editor.update_unit_price(index, unit_price)

    def remove_item(self, index: int) -> LineItem:
        return self.editor.remove_item(index)

    def set_tax_enabled(self, enabled: bool) -> None:
        """税率トグル（ONで既定の税率、OFFで0%）"""
        self.tax_percent = self.default_tax_percent if enabled else Decimal("0")

    def set_discount(self, value) -> None:
        self.discount_value = _non_negative(value, "discount_value")

    def set_underpayment(self, value) -> None:
        self.underpayment_value = _non_negative(value, "underpayment_value")

    def set_status(self, status: str) -> None:
        if status not in InvoiceStatus.ALL:
            raise ValidationError(f"請求書ステータスが不正です: {status}")
        self.status = status

    def set_dates(self, invoice_date: Optional[date], due_date: Optional[date]) -> None:
        self.invoice_date = invoice_date
        self.due_date = due_date

    def summary(self) -> InvoiceTotals:
        """画面に表示する集計（小計・税額・値引き・不足額・合計）"""
        return self.editor.compute_totals(self.tax_percent, self.discount_value, self.underpayment_value)

    def to_draft(self) -> InvoiceDraft:
        return InvoiceDraft(
            customer_id=self.customer_id,
            line_items=self.editor.items,
            tax_percent=self.tax_percent,
            discount_value=self.discount_value,
            underpayment_value=self.underpayment_value,
            status=self.status,
            invoice_date=self.invoice_date,
            due_date=self.due_date,
            notes=self.notes,
            customer_relationship=self.customer_relationship,
            payment_history=self.payment_history,
            invoice_id=self.invoice_id,
        )

    async def save(self) -> Invoice:
        """新規なら登録、既存なら更新する

        Raises:
            ValidationError: 保存できない状態の場合（何も保存しない）
            NotFoundError: 顧客または請求書が存在しない場合
        """
        draft = self.to_draft()
        if self.is_new:
            invoice = await CreateInvoiceUseCase(self.invoice_repository, self.customer_repository).execute(draft)
        else:
            invoice = await UpdateInvoiceUseCase(self.invoice_repository, self.customer_repository).execute(draft)

        self.invoice_id = invoice.id
        self.editor = LineItemEditor(invoice.line_items)
        return invoice
