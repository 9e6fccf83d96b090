"""支払いリマインダーの既定文面"""
from invoicecraft.domain.entities.customer import Customer
from invoicecraft.domain.entities.invoice import Invoice
from invoicecraft.domain.services.formatting import Formatter
from invoicecraft.domain.services.total_calculator import invoice_totals


def build_default_reminder(
    invoice: Invoice,
    customer: Customer,
    formatter: Formatter,
    sender_name: str = "InvoiceCraft Team",
) -> str:
    """顧客に送る既定のリマインダー文面を作る

    金額はPDF・画像と同じく明細からの再計算結果を使う。
    """
    total = invoice_totals(invoice).total
    return (
        f"Hi {customer.name},\n\n"
        f"This is a friendly reminder that invoice #{invoice.invoice_number} "
        f"for {formatter.currency(total)} was due on {formatter.date(invoice.due_date)}.\n\n"
        f"Please let us know if you have any questions.\n\n"
        f"Best,\n{sender_name}"
    )
