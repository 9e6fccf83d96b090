"""請求書の合計計算"""
import logging
from decimal import Decimal
from typing import Sequence

from invoicecraft.domain.entities.invoice import Invoice
from invoicecraft.domain.exceptions import ValidationError
from invoicecraft.domain.services.formatting import round_to_unit
from invoicecraft.domain.value_objects.invoice_totals import InvoiceTotals
from invoicecraft.domain.value_objects.line_item import LineItem, to_decimal

logger = logging.getLogger(__name__)

_HUNDRED = Decimal("100")


def compute_totals(
    line_items: Sequence[LineItem],
    tax_percent=Decimal("0"),
    discount_value=Decimal("0"),
    underpayment_value=Decimal("0"),
) -> InvoiceTotals:
    """明細と調整項目から小計・税額・合計を算出する

    副作用はなく、同じ入力に対して常に同じ結果を返す。
    明細の total は再計算せずにそのまま合算する。

    Args:
        line_items: 明細のリスト
        tax_percent: 税率(%)、0〜100
        discount_value: 値引き額（合計から差し引く）
        underpayment_value: 前回までの未払い繰越額（合計に加算する）

    Returns:
        InvoiceTotals: 集計結果

    Raises:
        ValidationError: 税率・値引き・未払い繰越が範囲外の場合
    """
    tax = to_decimal(tax_percent, "tax_percent")
    discount = to_decimal(discount_value, "discount_value")
    underpayment = to_decimal(underpayment_value, "underpayment_value")

    if tax < 0 or tax > _HUNDRED:
        raise ValidationError(f"税率は0〜100の範囲である必要があります: {tax}")

    if discount < 0:
        raise ValidationError(f"値引き額が負の値です: {discount}")

    if underpayment < 0:
        raise ValidationError(f"未払い繰越額が負の値です: {underpayment}")

    subtotal = sum((item.total for item in line_items), Decimal("0"))
    tax_amount = round_to_unit(subtotal * tax / _HUNDRED)
    total = subtotal + tax_amount - discount + underpayment

    if total < 0:
        logger.warning(
            "値引き額が小計と税額の合計を超えています",
            extra={"context": {"subtotal": str(subtotal), "tax_amount": str(tax_amount), "discount": str(discount)}},
        )

    return InvoiceTotals(
        subtotal=subtotal,
        tax_percent=tax,
        tax_amount=tax_amount,
        discount_value=discount,
        underpayment_value=underpayment,
        total=total,
    )


def invoice_totals(invoice: Invoice) -> InvoiceTotals:
    """保存済みの請求書の金額を明細から再計算する

    シートに保存された subtotal / total は表示や集計に使わない。
    再計算結果と異なる場合は警告を出す。
    """
    totals = compute_totals(
        invoice.line_items,
        invoice.tax_percent,
        invoice.discount_value,
        invoice.underpayment_value,
    )
    if totals.subtotal != invoice.subtotal or totals.total != invoice.total:
        logger.warning(
            "保存済みの金額と再計算結果が一致しません。再計算結果を使用します",
            extra={"context": {
                "invoice_id": invoice.id,
                "stored_subtotal": str(invoice.subtotal),
                "stored_total": str(invoice.total),
                "subtotal": str(totals.subtotal),
                "total": str(totals.total),
            }},
        )
    return totals
