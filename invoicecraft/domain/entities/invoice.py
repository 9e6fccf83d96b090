"""請求書エンティティ"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple

from invoicecraft.domain.exceptions import ValidationError
from invoicecraft.domain.value_objects.line_item import LineItem, to_decimal


class InvoiceStatus:
    """請求書ステータスの定数"""
    PAID = "Paid"
    UNPAID = "Unpaid"
    OVERDUE = "Overdue"

    ALL = (PAID, UNPAID, OVERDUE)


def _validate_dates(invoice_date: Optional[date], due_date: Optional[date]) -> None:
    if invoice_date and due_date and due_date < invoice_date:
        raise ValidationError(
            f"支払期限が請求日より前です: {due_date} < {invoice_date}"
        )


@dataclass(frozen=True)
class Invoice:
    """保存済みの請求書を表すエンティティ

    明細はタプルで保持するため、請求書のコピーは明細も含めて値として複製される。
    """

    id: str
    invoice_number: str
    customer_id: str
    line_items: Tuple[LineItem, ...]
    subtotal: Decimal
    tax_percent: Decimal
    discount_value: Decimal
    underpayment_value: Decimal
    total: Decimal
    status: str
    invoice_date: date
    due_date: date
    notes: str = ""
    customer_relationship: str = ""
    payment_history: str = ""

    def __post_init__(self):
        """バリデーション"""
        object.__setattr__(self, "line_items", tuple(self.line_items))
        for name in ("subtotal", "tax_percent", "discount_value", "underpayment_value", "total"):
            object.__setattr__(self, name, to_decimal(getattr(self, name), name))

        if self.status not in InvoiceStatus.ALL:
            raise ValidationError(f"請求書ステータスが不正です: {self.status}")

        _validate_dates(self.invoice_date, self.due_date)

    @property
    def notes_lines(self) -> Tuple[str, ...]:
        if not self.notes:
            return ()
        return tuple(self.notes.split("\n"))


@dataclass
class InvoiceDraft:
    """編集中（未保存）の請求書フォームの状態"""

    customer_id: str = ""
    line_items: Tuple[LineItem, ...] = ()
    tax_percent: Decimal = Decimal("0")
    discount_value: Decimal = Decimal("0")
    underpayment_value: Decimal = Decimal("0")
    status: str = InvoiceStatus.UNPAID
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    notes: str = ""
    customer_relationship: str = ""
    payment_history: str = ""
    invoice_id: Optional[str] = field(default=None)

    def validate_for_save(self) -> None:
        """保存前のバリデーション

        Raises:
            ValidationError: 必須項目の欠落、明細なし、日付の逆転がある場合
        """
        if not self.customer_id:
            raise ValidationError("顧客が選択されていません")

        if not self.line_items:
            raise ValidationError("明細が1件以上必要です")

        if self.invoice_date is None:
            raise ValidationError("請求日が設定されていません")

        if self.due_date is None:
            raise ValidationError("支払期限が設定されていません")

        if self.status not in InvoiceStatus.ALL:
            raise ValidationError(f"請求書ステータスが不正です: {self.status}")

        _validate_dates(self.invoice_date, self.due_date)

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceDraft":
        """保存済みの請求書から編集用のドラフトを作る"""
        return cls(
            customer_id=invoice.customer_id,
            line_items=invoice.line_items,
            tax_percent=invoice.tax_percent,
            discount_value=invoice.discount_value,
            underpayment_value=invoice.underpayment_value,
            status=invoice.status,
            invoice_date=invoice.invoice_date,
            due_date=invoice.due_date,
            notes=invoice.notes,
            customer_relationship=invoice.customer_relationship,
            payment_history=invoice.payment_history,
            invoice_id=invoice.id,
        )
