"""期限超過の判定とダッシュボード集計のテスト"""
from datetime import date
from decimal import Decimal

import pytest

from invoicecraft.domain.entities.invoice import InvoiceStatus
from invoicecraft.domain.value_objects.line_item import LineItem
from invoicecraft.usecases.get_dashboard_stats_use_case import GetDashboardStatsUseCase
from invoicecraft.usecases.mark_overdue_invoices_use_case import MarkOverdueInvoicesUseCase, is_overdue


def test_is_overdue(make_invoice):
    invoice = make_invoice(due_date=date(2024, 7, 15))

    assert is_overdue(invoice, date(2024, 7, 16))
    assert not is_overdue(invoice, date(2024, 7, 15))
    assert not is_overdue(make_invoice(status=InvoiceStatus.PAID), date(2025, 1, 1))


@pytest.mark.asyncio
async def test_mark_overdue_updates_only_unpaid_past_due(mock_repositories, make_invoice):
    invoice_repository = mock_repositories["invoice"]
    invoice_repository.list_invoices.return_value = [
        make_invoice(id="inv-1"),
        make_invoice(id="inv-2", status=InvoiceStatus.PAID),
        make_invoice(id="inv-3", due_date=date(2024, 8, 31)),
        make_invoice(id="inv-4", status=InvoiceStatus.OVERDUE),
    ]

    updated = await MarkOverdueInvoicesUseCase(invoice_repository).execute(today=date(2024, 8, 1))

    assert [invoice.id for invoice in updated] == ["inv-1"]
    assert updated[0].status == InvoiceStatus.OVERDUE
    invoice_repository.update_invoice_status.assert_awaited_once_with("inv-1", InvoiceStatus.OVERDUE)
    invoice_repository.update_invoice.assert_not_awaited()


@pytest.mark.asyncio
async def test_mark_overdue_nothing_to_do(mock_repositories):
    updated = await MarkOverdueInvoicesUseCase(mock_repositories["invoice"]).execute(today=date(2024, 7, 1))

    assert updated == []
    mock_repositories["invoice"].update_invoice_status.assert_not_awaited()


def _simple_invoice(make_invoice, invoice_id, status, amount, stored_total=None):
    """税・値引きなしで明細1行の請求書"""
    return make_invoice(
        id=invoice_id,
        status=status,
        line_items=(LineItem(product_id="prod-1", quantity=1, unit_price=amount),),
        tax_percent=Decimal("0"),
        discount_value=Decimal("0"),
        underpayment_value=Decimal("0"),
        subtotal=Decimal(amount),
        total=Decimal(amount) if stored_total is None else stored_total,
    )


@pytest.mark.asyncio
async def test_dashboard_stats(mock_repositories, make_invoice):
    mock_repositories["invoice"].list_invoices.return_value = [
        _simple_invoice(make_invoice, "inv-1", InvoiceStatus.PAID, "1000"),
        _simple_invoice(make_invoice, "inv-2", InvoiceStatus.PAID, "2500"),
        _simple_invoice(make_invoice, "inv-3", InvoiceStatus.UNPAID, "400"),
        _simple_invoice(make_invoice, "inv-4", InvoiceStatus.OVERDUE, "600"),
    ]

    stats = await GetDashboardStatsUseCase(mock_repositories["invoice"]).execute()

    assert stats.total_revenue == Decimal("3500")
    assert stats.pending_amount == Decimal("1000")
    assert stats.paid_count == 2
    assert stats.pending_count == 2
    assert stats.invoice_count == 4


@pytest.mark.asyncio
async def test_dashboard_stats_uses_recomputed_totals(mock_repositories, make_invoice):
    """保存済みの total が明細と食い違っていても明細からの合計で集計する"""
    mock_repositories["invoice"].list_invoices.return_value = [
        _simple_invoice(make_invoice, "inv-1", InvoiceStatus.PAID, "1000", stored_total=Decimal("999999")),
        _simple_invoice(make_invoice, "inv-2", InvoiceStatus.UNPAID, "400", stored_total=Decimal("0")),
    ]

    stats = await GetDashboardStatsUseCase(mock_repositories["invoice"]).execute()

    assert stats.total_revenue == Decimal("1000")
    assert stats.pending_amount == Decimal("400")
