"""請求書の登録・更新ユースケースのテスト"""
from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from invoicecraft.domain.entities.invoice import InvoiceDraft, InvoiceStatus
from invoicecraft.domain.exceptions import NotFoundError, ValidationError
from invoicecraft.domain.value_objects.line_item import LineItem
from invoicecraft.usecases.create_invoice_use_case import CreateInvoiceUseCase
from invoicecraft.usecases.update_invoice_use_case import UpdateInvoiceUseCase


@pytest.fixture
def draft() -> InvoiceDraft:
    return InvoiceDraft(
        customer_id="cus-1",
        line_items=(LineItem(product_id="prod-1", quantity=10, unit_price=Decimal("1000000")),),
        tax_percent=Decimal("11"),
        discount_value=Decimal("500000"),
        invoice_date=date(2024, 7, 1),
        due_date=date(2024, 7, 15),
    )


@pytest.mark.asyncio
async def test_create_invoice(draft, mock_repositories, test_invoice):
    """金額を計算してから保存する"""
    invoice_repository = mock_repositories["invoice"]
    invoice_repository.create_invoice.return_value = test_invoice
    use_case = CreateInvoiceUseCase(invoice_repository, mock_repositories["customer"])

    result = await use_case.execute(draft)

    assert result is test_invoice
    invoice_repository.create_invoice.assert_awaited_once()
    saved_draft, totals = invoice_repository.create_invoice.await_args.args
    assert saved_draft is draft
    assert totals.subtotal == Decimal("10000000")
    assert totals.tax_amount == Decimal("1100000")
    assert totals.total == Decimal("10600000")


@pytest.mark.asyncio
@pytest.mark.parametrize("changes", [
    {"line_items": ()},
    {"customer_id": ""},
    {"invoice_date": None},
    {"due_date": date(2024, 6, 30)},
    {"status": "Draft"},
    {"tax_percent": Decimal("150")},
])
async def test_create_invoice_rejects_invalid_draft(draft, mock_repositories, changes):
    """検証に失敗した場合は何も保存しない"""
    invoice_repository = mock_repositories["invoice"]
    use_case = CreateInvoiceUseCase(invoice_repository, mock_repositories["customer"])

    with pytest.raises(ValidationError):
        await use_case.execute(replace(draft, **changes))

    invoice_repository.create_invoice.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_invoice_unknown_customer(draft, mock_repositories):
    mock_repositories["customer"].get_customer.return_value = None
    use_case = CreateInvoiceUseCase(mock_repositories["invoice"], mock_repositories["customer"])

    with pytest.raises(NotFoundError):
        await use_case.execute(draft)

    mock_repositories["invoice"].create_invoice.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_invoice_keeps_id_and_number(draft, mock_repositories, test_invoice):
    invoice_repository = mock_repositories["invoice"]
    invoice_repository.update_invoice.side_effect = lambda invoice: invoice
    use_case = UpdateInvoiceUseCase(invoice_repository, mock_repositories["customer"])

    updated = await use_case.execute(
        replace(draft, invoice_id="inv-1", status=InvoiceStatus.PAID, discount_value=Decimal("0"))
    )

    assert updated.id == "inv-1"
    assert updated.invoice_number == test_invoice.invoice_number
    assert updated.status == InvoiceStatus.PAID
    assert updated.total == Decimal("11100000")


@pytest.mark.asyncio
async def test_update_invoice_requires_id(draft, mock_repositories):
    use_case = UpdateInvoiceUseCase(mock_repositories["invoice"], mock_repositories["customer"])

    with pytest.raises(ValidationError):
        await use_case.execute(draft)


@pytest.mark.asyncio
async def test_update_invoice_not_found(draft, mock_repositories):
    mock_repositories["invoice"].get_invoice.return_value = None
    use_case = UpdateInvoiceUseCase(mock_repositories["invoice"], mock_repositories["customer"])

    with pytest.raises(NotFoundError):
        await use_case.execute(replace(draft, invoice_id="inv-404"))

    mock_repositories["invoice"].update_invoice.assert_not_awaited()
