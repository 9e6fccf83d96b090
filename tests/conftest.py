"""pytest共通設定"""
from dataclasses import replace
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from invoicecraft.domain.entities.company_profile import CompanyProfile
from invoicecraft.domain.entities.customer import Customer
from invoicecraft.domain.entities.invoice import Invoice, InvoiceStatus
from invoicecraft.domain.entities.product import Product, ProductUnit
from invoicecraft.domain.value_objects.line_item import LineItem


@pytest.fixture
def test_customer() -> Customer:
    """テスト用の顧客"""
    return Customer(
        id="cus-1",
        name="PT Maju Jaya",
        email="finance@majujaya.co.id",
        address="Jl. Sudirman No. 1\nJakarta Pusat",
        phone="021-555-0101",
    )


@pytest.fixture
def test_products() -> list:
    """テスト用の商品カタログ"""
    return [
        Product(id="prod-1", name="Konsultasi", unit_price=Decimal("1000000")),
        Product(id="prod-2", name="Lisensi Software", unit_price=Decimal("250000"), unit=ProductUnit.BOXES),
    ]


@pytest.fixture
def test_company_profile() -> CompanyProfile:
    """テスト用の会社プロフィール（英語表示）"""
    return CompanyProfile(
        name="InvoiceCraft Studio",
        address="Jl. Gatot Subroto 5\nJakarta Selatan",
        currency="IDR",
        language="en",
    )


@pytest.fixture
def test_invoice() -> Invoice:
    """小計 10,000,000 / 税 11% / 値引き 500,000 の請求書"""
    return Invoice(
        id="inv-1",
        invoice_number="2024-001",
        customer_id="cus-1",
        line_items=(LineItem(product_id="prod-1", quantity=10, unit_price=Decimal("1000000"), entry_id="item-1"),),
        subtotal=Decimal("10000000"),
        tax_percent=Decimal("11"),
        discount_value=Decimal("500000"),
        underpayment_value=Decimal("0"),
        total=Decimal("10600000"),
        status=InvoiceStatus.UNPAID,
        invoice_date=date(2024, 7, 1),
        due_date=date(2024, 7, 15),
        notes="Transfer ke BCA 123456\nTerima kasih",
    )


@pytest.fixture
def make_invoice(test_invoice):
    """請求書の一部の項目を差し替えて作るファクトリ"""
    def _make(**overrides) -> Invoice:
        return replace(test_invoice, **overrides)
    return _make


@pytest.fixture
def mock_repositories(test_invoice, test_customer, test_products, test_company_profile):
    """各リポジトリのモック（同じデータを返す）"""
    invoice_repository = AsyncMock()
    invoice_repository.get_invoice.return_value = test_invoice
    invoice_repository.list_invoices.return_value = [test_invoice]

    customer_repository = AsyncMock()
    customer_repository.get_customer.return_value = test_customer
    customer_repository.list_customers.return_value = [test_customer]

    product_repository = AsyncMock()
    product_repository.list_products.return_value = test_products

    company_profile_repository = AsyncMock()
    company_profile_repository.get_company_profile.return_value = test_company_profile

    return {
        "invoice": invoice_repository,
        "customer": customer_repository,
        "product": product_repository,
        "company_profile": company_profile_repository,
    }
