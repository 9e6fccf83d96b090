"""値オブジェクト"""
from invoicecraft.domain.value_objects.credentials import GoogleSheetsCredentials
from invoicecraft.domain.value_objects.invoice_totals import InvoiceTotals
from invoicecraft.domain.value_objects.line_item import LineItem
from invoicecraft.domain.value_objects.render_context import RenderContext

__all__ = ["GoogleSheetsCredentials", "InvoiceTotals", "LineItem", "RenderContext"]
