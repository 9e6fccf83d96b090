"""請求書データから描画用ドキュメントを組み立てる

PDFと画像のレンダラーはここで作られた InvoiceDocument の文字列だけを描画する。
"""
import logging
from typing import Dict, Mapping, Optional

from invoicecraft.domain.entities.company_profile import CompanyProfile
from invoicecraft.domain.entities.customer import Customer
from invoicecraft.domain.entities.invoice import Invoice
from invoicecraft.domain.entities.product import Product
from invoicecraft.domain.services.formatting import Formatter
from invoicecraft.domain.services.total_calculator import invoice_totals
from invoicecraft.domain.value_objects.invoice_document import (
    DocumentLabels,
    DocumentRow,
    InvoiceDocument,
    SummaryLine,
)
from invoicecraft.domain.value_objects.render_context import RenderContext

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

LABELS: Dict[str, Dict[str, str]] = {
    "en": {
        "title": "Invoice",
        "status": "Status:",
        "invoice_date": "Invoice Date:",
        "due_date": "Due Date:",
        "bill_to": "Bill To:",
        "item": "Item",
        "quantity": "Quantity",
        "unit_price": "Unit Price",
        "total": "Total",
        "notes": "Notes",
        "footer": "Thank you for your business!",
        "more_items": "...and {count} more items",
        "subtotal": "Subtotal",
        "tax": "Tax ({percent}%)",
        "discount": "Discount",
        "underpayment": "Underpayment",
    },
    "id": {
        "title": "Faktur",
        "status": "Status:",
        "invoice_date": "Tanggal Faktur:",
        "due_date": "Jatuh Tempo:",
        "bill_to": "Tagihan Kepada:",
        "item": "Barang",
        "quantity": "Jumlah",
        "unit_price": "Harga Satuan",
        "total": "Total",
        "notes": "Catatan",
        "footer": "Terima kasih atas kepercayaan Anda!",
        "more_items": "...dan {count} item lainnya",
        "subtotal": "Subtotal",
        "tax": "Pajak ({percent}%)",
        "discount": "Diskon",
        "underpayment": "Kurang Bayar",
    },
}


def _split_lines(text: str) -> tuple:
    if not text:
        return ()
    return tuple(text.replace("\r\n", "\n").split("\n"))


class InvoicePresenter:
    """請求書・顧客・商品・会社情報から InvoiceDocument を作る"""

    def present(
        self,
        invoice: Invoice,
        customer: Optional[Customer],
        products: Mapping[str, Product],
        company_profile: CompanyProfile,
        logo: Optional[bytes] = None,
        context: Optional[RenderContext] = None,
    ) -> InvoiceDocument:
        """描画用ドキュメントを組み立てる

        顧客や商品が削除済みで見つからない場合は "N/A" を表示する。
        金額はすべて invoice_totals の再計算結果から整形する。

        Args:
            invoice: 請求書
            customer: 顧客（見つからない場合は None）
            products: 商品IDから商品へのマッピング
            company_profile: 会社プロフィール
            logo: ロゴ画像のバイト列
            context: 通貨・言語（省略時は会社プロフィールから決定）

        Returns:
            InvoiceDocument: 描画用ドキュメント
        """
        context = context or company_profile.render_context()
        fmt = Formatter(context)
        text = LABELS[context.language]

        totals = invoice_totals(invoice)

        rows = []
        for item in invoice.line_items:
            product = products.get(item.product_id)
            if product is None:
                logger.warning(f"明細の商品が見つかりません: {item.product_id} (請求書: {invoice.id})")
            rows.append(
                DocumentRow(
                    name=product.name if product else NOT_AVAILABLE,
                    quantity=str(item.quantity),
                    unit_price=fmt.currency(item.unit_price),
                    total=fmt.currency(item.total),
                )
            )

        summary = [
            SummaryLine(label=text["subtotal"], value=fmt.currency(totals.subtotal)),
            SummaryLine(
                label=text["tax"].format(percent=fmt.percent(totals.tax_percent)),
                value=fmt.currency(totals.tax_amount),
            ),
        ]
        if totals.discount_value > 0:
            summary.append(
                SummaryLine(label=text["discount"], value=f"- {fmt.currency(totals.discount_value)}")
            )
        if totals.underpayment_value > 0:
            summary.append(
                SummaryLine(label=text["underpayment"], value=fmt.currency(totals.underpayment_value))
            )

        if customer is None:
            logger.warning(f"請求書の顧客が見つかりません: {invoice.customer_id} (請求書: {invoice.id})")

        return InvoiceDocument(
            labels=DocumentLabels(
                title=text["title"],
                status=text["status"],
                invoice_date=text["invoice_date"],
                due_date=text["due_date"],
                bill_to=text["bill_to"],
                item=text["item"],
                quantity=text["quantity"],
                unit_price=text["unit_price"],
                total=text["total"],
                notes=text["notes"],
                footer=text["footer"],
                more_items=text["more_items"],
            ),
            company_name=company_profile.name,
            company_address_lines=_split_lines(company_profile.address),
            invoice_number=invoice.invoice_number,
            status=invoice.status,
            invoice_date=fmt.date(invoice.invoice_date),
            due_date=fmt.date(invoice.due_date),
            customer_name=customer.name if customer else NOT_AVAILABLE,
            customer_address_lines=_split_lines(customer.address) if customer else (),
            customer_email=customer.email if customer else "",
            customer_phone=customer.phone if customer else "",
            rows=tuple(rows),
            summary=tuple(summary),
            grand_total=SummaryLine(label=text["total"], value=fmt.currency(totals.total), emphasized=True),
            notes_lines=invoice.notes_lines,
            totals=totals,
            logo=logo,
        )
