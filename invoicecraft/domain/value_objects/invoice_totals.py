"""請求書の集計結果を表す値オブジェクト"""
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    """小計・税額・値引き・未払い繰越・合計"""

    subtotal: Decimal
    tax_percent: Decimal
    tax_amount: Decimal
    discount_value: Decimal
    underpayment_value: Decimal
    total: Decimal
