"""GoogleSheetsServiceのテスト"""
from dataclasses import replace
from datetime import date
from decimal import Decimal
from unittest.mock import Mock

import pytest

from invoicecraft.domain.entities.company_profile import CompanyProfile
from invoicecraft.domain.entities.customer import Customer
from invoicecraft.domain.entities.invoice import InvoiceDraft, InvoiceStatus
from invoicecraft.domain.exceptions import ExternalServiceError, NotFoundError, ValidationError
from invoicecraft.domain.services.total_calculator import compute_totals
from invoicecraft.domain.value_objects.line_item import LineItem
from invoicecraft.infrastructure.google_sheets.row_schemas import HEADERS, SheetName
from invoicecraft.infrastructure.google_sheets.spreadsheet_service import (
    GoogleSheetsService,
    next_invoice_number,
    next_sequential_id,
)
from invoicecraft.usecases.mark_overdue_invoices_use_case import MarkOverdueInvoicesUseCase

INVOICE_HEADERS = list(HEADERS[SheetName.INVOICES])
ITEM_HEADERS = list(HEADERS[SheetName.INVOICE_ITEMS])


def _sheets():
    return {
        SheetName.CUSTOMERS: [
            list(HEADERS[SheetName.CUSTOMERS]),
            ["cus-1", "PT Maju Jaya", "finance@majujaya.co.id", "Jl. Sudirman No. 1", "021-555-0101"],
            ["cus-2", "CV Sinar", "", "", ""],
        ],
        SheetName.PRODUCTS: [
            ["id", "name", "unitPrice"],
            ["prod-1", "Konsultasi", 1000000],
            ["prod-2", "Lisensi", 250000],
            ["prod-1", "Konsultasi Senior", 1500000],
        ],
        SheetName.INVOICES: [
            INVOICE_HEADERS,
            ["inv-1", "2024-001", "cus-1", 10000000, 11, 500000, 0, 10600000, "Unpaid",
             "2024-07-01", "2024-07-15", "2024-07-01", "", "", ""],
        ],
        SheetName.INVOICE_ITEMS: [
            ITEM_HEADERS,
            ["item-1", "inv-1", "prod-1", 10, 1000000, 10000000],
        ],
        SheetName.COMPANY_PROFILE: [
            ["key", "value"],
            ["name", "InvoiceCraft Studio"],
            ["currency", "idr"],
            ["language", "en"],
        ],
    }


@pytest.fixture
def mock_client():
    client = Mock()
    sheets = _sheets()
    client.get_values.side_effect = lambda sheet_name, headers: sheets[sheet_name]
    return client


@pytest.fixture
def service(mock_client):
    return GoogleSheetsService(mock_client)


@pytest.fixture
def sheets():
    return _sheets()


@pytest.fixture
def stateful_client(sheets):
    """書き込みを sheets に反映するクライアントのモック"""
    client = Mock()
    client.get_values.side_effect = lambda sheet_name, headers: [list(row) for row in sheets[sheet_name]]
    client.append_rows.side_effect = lambda sheet_name, headers, rows: sheets[sheet_name].extend(rows)

    def update_row(sheet_name, row_number, values):
        sheets[sheet_name][row_number - 1] = values

    def delete_rows(sheet_name, headers, row_numbers):
        for row_number in sorted(set(row_numbers), reverse=True):
            del sheets[sheet_name][row_number - 1]

    client.update_row.side_effect = update_row
    client.delete_rows.side_effect = delete_rows
    return client


def _fail_item_append(sheets):
    def append_rows(sheet_name, headers, rows):
        if sheet_name == SheetName.INVOICE_ITEMS:
            raise ExternalServiceError("シート InvoiceItems への追加に失敗しました")
        sheets[sheet_name].extend(rows)
    return append_rows


def _invoice_row(sheets, row_number=2):
    return dict(zip(INVOICE_HEADERS, sheets[SheetName.INVOICES][row_number - 1]))


def _item_ids(sheets):
    return [row[0] for row in sheets[SheetName.INVOICE_ITEMS][1:]]


def test_next_sequential_id():
    assert next_sequential_id("cus", ["cus-1", "cus-9", "cus-10", "legacy", None]) == "cus-11"
    assert next_sequential_id("cus", []) == "cus-1"


def test_next_invoice_number_is_per_year():
    numbers = ["2023-007", "2024-001", "2024-012", "INV-99"]

    assert next_invoice_number(2024, numbers) == "2024-013"
    assert next_invoice_number(2025, numbers) == "2025-001"


@pytest.mark.asyncio
async def test_list_customers(service):
    customers = await service.list_customers()

    assert [customer.id for customer in customers] == ["cus-1", "cus-2"]
    assert customers[0].email == "finance@majujaya.co.id"


@pytest.mark.asyncio
async def test_get_customer_missing_returns_none(service):
    assert await service.get_customer("cus-404") is None


@pytest.mark.asyncio
async def test_create_customer_appends_row(service, mock_client):
    customer = await service.create_customer("PT Baru", email="hello@baru.id")

    assert customer.id == "cus-3"
    mock_client.append_rows.assert_called_once_with(
        SheetName.CUSTOMERS,
        HEADERS[SheetName.CUSTOMERS],
        [["cus-3", "PT Baru", "hello@baru.id", "", ""]],
    )


@pytest.mark.asyncio
async def test_update_missing_customer(service):
    with pytest.raises(NotFoundError):
        await service.update_customer(Customer(id="cus-404", name="Ghost"))


@pytest.mark.asyncio
async def test_list_products_deduplicates_by_id(service):
    """同じIDの商品は後の行を使う"""
    products = await service.list_products()

    assert [product.id for product in products] == ["prod-1", "prod-2"]
    assert products[0].name == "Konsultasi Senior"
    assert products[0].unit_price == Decimal("1500000")
    assert products[0].unit == "pcs"


@pytest.mark.asyncio
async def test_get_invoice_with_line_items(service):
    invoice = await service.get_invoice("inv-1")

    assert invoice.invoice_number == "2024-001"
    assert invoice.total == Decimal("10600000")
    assert invoice.line_items == (
        LineItem(product_id="prod-1", quantity=10, unit_price=Decimal("1000000"), entry_id="item-1"),
    )


@pytest.mark.asyncio
async def test_get_invoice_missing_returns_none(service):
    assert await service.get_invoice("inv-404") is None


@pytest.mark.asyncio
async def test_create_invoice_assigns_ids(service, mock_client):
    items = (
        LineItem(product_id="prod-1", quantity=2, unit_price=Decimal("1000000")),
        LineItem(product_id="prod-2", quantity=1, unit_price=Decimal("250000")),
    )
    draft = InvoiceDraft(
        customer_id="cus-2",
        line_items=items,
        tax_percent=Decimal("11"),
        invoice_date=date(2024, 9, 1),
        due_date=date(2024, 9, 30),
    )

    invoice = await service.create_invoice(draft, compute_totals(items, Decimal("11")))

    assert invoice.id == "inv-2"
    assert invoice.invoice_number == "2024-002"
    assert [item.entry_id for item in invoice.line_items] == ["item-2", "item-3"]
    assert invoice.total == Decimal("2497500")

    invoice_call, item_call = mock_client.append_rows.call_args_list
    sheet_name, _, rows = invoice_call.args
    assert sheet_name == SheetName.INVOICES
    row = dict(zip(INVOICE_HEADERS, rows[0]))
    assert row["invoiceNumber"] == "2024-002"
    assert row["subtotal"] == 2250000
    assert row["tax"] == 11
    assert row["total"] == 2497500
    assert row["invoiceDate"] == "2024-09-01"

    sheet_name, _, rows = item_call.args
    assert sheet_name == SheetName.INVOICE_ITEMS
    assert rows == [
        ["item-2", "inv-2", "prod-1", 2, 1000000, 2000000],
        ["item-3", "inv-2", "prod-2", 1, 250000, 250000],
    ]


@pytest.mark.asyncio
async def test_update_invoice_replaces_line_items(service, mock_client, test_invoice):
    updated = replace(
        test_invoice,
        status=InvoiceStatus.PAID,
        line_items=(LineItem(product_id="prod-2", quantity=3, unit_price=Decimal("250000")),),
    )

    saved = await service.update_invoice(updated)

    row_number_call = mock_client.update_row.call_args
    assert row_number_call.args[0] == SheetName.INVOICES
    assert row_number_call.args[1] == 2
    row = dict(zip(INVOICE_HEADERS, row_number_call.args[2]))
    assert row["status"] == "Paid"
    assert row["createdAt"] == "2024-07-01"

    mock_client.delete_rows.assert_called_once_with(
        SheetName.INVOICE_ITEMS, HEADERS[SheetName.INVOICE_ITEMS], [2]
    )
    assert saved.line_items[0].entry_id == "item-2"


@pytest.mark.asyncio
async def test_update_invoice_writes_new_items_before_removing_old(sheets, stateful_client, test_invoice):
    service = GoogleSheetsService(stateful_client)
    updated = replace(
        test_invoice,
        status=InvoiceStatus.PAID,
        line_items=(LineItem(product_id="prod-2", quantity=3, unit_price=Decimal("250000")),),
    )

    saved = await service.update_invoice(updated)

    assert _item_ids(sheets) == ["item-2"]
    assert _invoice_row(sheets)["status"] == "Paid"
    method_names = [name for name, _, _ in stateful_client.mock_calls if name != "get_values"]
    assert method_names == ["append_rows", "update_row", "delete_rows"]
    assert [item.entry_id for item in saved.line_items] == ["item-2"]


@pytest.mark.asyncio
async def test_update_invoice_keeps_old_items_when_item_append_fails(sheets, stateful_client, test_invoice):
    """明細の追加に失敗した場合は請求書の行も古い明細も変わらない"""
    stateful_client.append_rows.side_effect = _fail_item_append(sheets)
    service = GoogleSheetsService(stateful_client)

    with pytest.raises(ExternalServiceError):
        await service.update_invoice(replace(test_invoice, status=InvoiceStatus.PAID))

    assert _invoice_row(sheets)["status"] == "Unpaid"
    assert _item_ids(sheets) == ["item-1"]
    stateful_client.update_row.assert_not_called()
    stateful_client.delete_rows.assert_not_called()


@pytest.mark.asyncio
async def test_update_invoice_removes_added_items_when_invoice_row_fails(sheets, stateful_client, test_invoice):
    stateful_client.update_row.side_effect = ExternalServiceError("シート Invoices の 2 行目の更新に失敗しました")
    service = GoogleSheetsService(stateful_client)
    updated = replace(
        test_invoice,
        line_items=(LineItem(product_id="prod-2", quantity=3, unit_price=Decimal("250000")),),
    )

    with pytest.raises(ExternalServiceError):
        await service.update_invoice(updated)

    assert _item_ids(sheets) == ["item-1"]
    invoice = await service.get_invoice("inv-1")
    assert [item.entry_id for item in invoice.line_items] == ["item-1"]


@pytest.mark.asyncio
async def test_update_invoice_status_rewrites_only_invoice_row(sheets, stateful_client):
    service = GoogleSheetsService(stateful_client)

    await service.update_invoice_status("inv-1", InvoiceStatus.OVERDUE)

    row = _invoice_row(sheets)
    assert row["status"] == "Overdue"
    assert row["total"] == 10600000
    assert row["createdAt"] == "2024-07-01"
    assert _item_ids(sheets) == ["item-1"]
    stateful_client.append_rows.assert_not_called()
    stateful_client.delete_rows.assert_not_called()


@pytest.mark.asyncio
async def test_update_invoice_status_errors(service):
    with pytest.raises(NotFoundError):
        await service.update_invoice_status("inv-404", InvoiceStatus.PAID)

    with pytest.raises(ValidationError):
        await service.update_invoice_status("inv-1", "Cancelled")


@pytest.mark.asyncio
async def test_mark_overdue_keeps_line_items(sheets, stateful_client):
    """期限超過の更新では明細を書き直さない（明細の追加が失敗する状態でも成功する）"""
    stateful_client.append_rows.side_effect = _fail_item_append(sheets)
    service = GoogleSheetsService(stateful_client)

    updated = await MarkOverdueInvoicesUseCase(service).execute(today=date(2024, 8, 1))

    assert [invoice.id for invoice in updated] == ["inv-1"]
    assert _invoice_row(sheets)["status"] == "Overdue"
    assert _item_ids(sheets) == ["item-1"]
    invoice = await service.get_invoice("inv-1")
    assert invoice.status == InvoiceStatus.OVERDUE
    assert [item.entry_id for item in invoice.line_items] == ["item-1"]


@pytest.mark.asyncio
async def test_update_missing_invoice(service, make_invoice):
    with pytest.raises(NotFoundError):
        await service.update_invoice(make_invoice(id="inv-404"))


@pytest.mark.asyncio
async def test_delete_invoice_removes_items(service, mock_client):
    await service.delete_invoice("inv-1")

    assert mock_client.delete_rows.call_args_list[0].args == (
        SheetName.INVOICES, HEADERS[SheetName.INVOICES], [2]
    )
    assert mock_client.delete_rows.call_args_list[1].args == (
        SheetName.INVOICE_ITEMS, HEADERS[SheetName.INVOICE_ITEMS], [2]
    )


@pytest.mark.asyncio
async def test_delete_missing_product(service):
    with pytest.raises(NotFoundError):
        await service.delete_product("prod-404")


@pytest.mark.asyncio
async def test_get_company_profile(service):
    profile = await service.get_company_profile()

    assert profile.name == "InvoiceCraft Studio"
    assert profile.address == ""
    assert profile.render_context().currency == "IDR"
    assert profile.language == "en"


@pytest.mark.asyncio
async def test_save_company_profile(service, mock_client):
    await service.save_company_profile(CompanyProfile(name="Studio", currency="USD", language="en"))

    sheet_name, _, rows = mock_client.put_values.call_args.args
    assert sheet_name == SheetName.COMPANY_PROFILE
    assert ["name", "Studio"] in rows
    assert ["currency", "USD"] in rows
