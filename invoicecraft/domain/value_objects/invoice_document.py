"""PDF・画像の両レンダラーが共有する請求書ドキュメントモデル"""
from dataclasses import dataclass
from typing import Optional, Tuple

from invoicecraft.domain.value_objects.invoice_totals import InvoiceTotals

# 明細テーブルの列幅（コンテンツ幅に対する割合）: 品名 / 数量 / 単価 / 金額
COLUMN_RATIOS: Tuple[float, float, float, float] = (0.5, 0.15, 0.2, 0.15)


@dataclass(frozen=True)
class DocumentLabels:
    """ドキュメント上の見出し文言"""

    title: str
    status: str
    invoice_date: str
    due_date: str
    bill_to: str
    item: str
    quantity: str
    unit_price: str
    total: str
    notes: str
    footer: str
    more_items: str

    @property
    def table_headers(self) -> Tuple[str, str, str, str]:
        return (self.item, self.quantity, self.unit_price, self.total)


@dataclass(frozen=True)
class DocumentRow:
    """明細テーブルの1行（すべて整形済み文字列）"""

    name: str
    quantity: str
    unit_price: str
    total: str

    @property
    def cells(self) -> Tuple[str, str, str, str]:
        return (self.name, self.quantity, self.unit_price, self.total)


@dataclass(frozen=True)
class SummaryLine:
    """集計欄の1行"""

    label: str
    value: str
    emphasized: bool = False


@dataclass(frozen=True)
class InvoiceDocument:
    """描画に必要な情報をすべて整形済みで保持するドキュメント"""

    labels: DocumentLabels
    company_name: str
    company_address_lines: Tuple[str, ...]
    invoice_number: str
    status: str
    invoice_date: str
    due_date: str
    customer_name: str
    customer_address_lines: Tuple[str, ...]
    customer_email: str
    customer_phone: str
    rows: Tuple[DocumentRow, ...]
    summary: Tuple[SummaryLine, ...]
    grand_total: SummaryLine
    notes_lines: Tuple[str, ...]
    totals: InvoiceTotals
    logo: Optional[bytes] = None

    @property
    def summary_lines(self) -> Tuple[SummaryLine, ...]:
        """合計行を含む集計欄の全行"""
        return self.summary + (self.grand_total,)
