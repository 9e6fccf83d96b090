"""Googleスプレッドシートを保存先とするリポジトリ実装"""
import logging
import re
from collections import OrderedDict
from dataclasses import replace
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from invoicecraft.domain.entities.company_profile import CompanyProfile
from invoicecraft.domain.entities.customer import Customer
from invoicecraft.domain.entities.invoice import Invoice, InvoiceDraft, InvoiceStatus
from invoicecraft.domain.entities.product import Product, ProductUnit
from invoicecraft.domain.exceptions import ExternalServiceError, NotFoundError, ValidationError
from invoicecraft.domain.repositories.company_profile_repository import ICompanyProfileRepository
from invoicecraft.domain.repositories.customer_repository import ICustomerRepository
from invoicecraft.domain.repositories.invoice_repository import IInvoiceRepository
from invoicecraft.domain.repositories.product_repository import IProductRepository
from invoicecraft.domain.value_objects.invoice_totals import InvoiceTotals
from invoicecraft.domain.value_objects.line_item import LineItem
from invoicecraft.infrastructure.google_sheets.row_schemas import (
    HEADERS,
    CustomerRow,
    InvoiceItemRow,
    InvoiceRow,
    ProductRow,
    SheetName,
    customer_record,
    invoice_item_record,
    invoice_record,
    parse_row,
    product_record,
    records_from_values,
    values_from_record,
)
from invoicecraft.infrastructure.google_sheets.sheets_client import SheetsClient

logger = logging.getLogger(__name__)

Record = Tuple[int, Dict[str, Any]]


def next_sequential_id(prefix: str, existing_ids: Iterable[Any]) -> str:
    """``prefix-N`` 形式のIDのうち最大の番号 + 1 のIDを返す"""
    pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)$")
    highest = 0
    for existing_id in existing_ids:
        match = pattern.match(str(existing_id or ""))
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}-{highest + 1}"


def next_invoice_number(year: int, existing_numbers: Iterable[Any]) -> str:
    """``YYYY-NNN`` 形式の請求書番号のうち、同じ年の最大番号 + 1 を返す"""
    pattern = re.compile(rf"^{year}-(\d+)$")
    highest = 0
    for number in existing_numbers:
        match = pattern.match(str(number or ""))
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{year}-{highest + 1:03d}"


class GoogleSheetsService(
    ICustomerRepository, IProductRepository, IInvoiceRepository, ICompanyProfileRepository
):
    """顧客・商品・請求書・会社プロフィールをスプレッドシートに保存するサービス

    シートごとに1行目をヘッダー行とし、列はヘッダー名で対応付ける。
    同時に複数の利用者が書き込むことは想定しない。
    """

    def __init__(self, client: SheetsClient):
        """サービスを初期化する

        Args:
            client: スプレッドシートクライアント
        """
        self.client = client

    def _read(self, sheet_name: str) -> Tuple[List[Any], List[Record]]:
        values = self.client.get_values(sheet_name, HEADERS[sheet_name])
        return values[0], records_from_values(values)

    def _find(self, records: List[Record], record_id: str) -> Optional[Record]:
        for row_number, record in records:
            if str(record.get("id") or "") == record_id:
                return row_number, record
        return None

    # 顧客

    async def list_customers(self) -> List[Customer]:
        _, records = self._read(SheetName.CUSTOMERS)
        return [
            parse_row(CustomerRow, record, SheetName.CUSTOMERS, row_number).to_domain()
            for row_number, record in records
        ]

    async def get_customer(self, customer_id: str) -> Optional[Customer]:
        _, records = self._read(SheetName.CUSTOMERS)
        found = self._find(records, customer_id)
        if found is None:
            return None
        row_number, record = found
        return parse_row(CustomerRow, record, SheetName.CUSTOMERS, row_number).to_domain()

    async def create_customer(
        self, name: str, email: str = "", address: str = "", phone: str = ""
    ) -> Customer:
        headers, records = self._read(SheetName.CUSTOMERS)
        customer = Customer(
            id=next_sequential_id("cus", (record.get("id") for _, record in records)),
            name=name,
            email=email,
            address=address,
            phone=phone,
        )
        self.client.append_rows(
            SheetName.CUSTOMERS,
            HEADERS[SheetName.CUSTOMERS],
            [values_from_record(customer_record(customer), headers)],
        )
        logger.info(f"顧客を登録しました: {customer.id} ({customer.name})")
        return customer

    async def update_customer(self, customer: Customer) -> Customer:
        headers, records = self._read(SheetName.CUSTOMERS)
        found = self._find(records, customer.id)
        if found is None:
            raise NotFoundError(f"顧客が見つかりません: {customer.id}")
        row_number, record = found
        merged = {**record, **customer_record(customer)}
        self.client.update_row(SheetName.CUSTOMERS, row_number, values_from_record(merged, headers))
        logger.info(f"顧客を更新しました: {customer.id}")
        return customer

    async def delete_customer(self, customer_id: str) -> None:
        await self._delete_by_id(SheetName.CUSTOMERS, customer_id, "顧客")

    # 商品

    async def list_products(self) -> List[Product]:
        _, records = self._read(SheetName.PRODUCTS)
        products: "OrderedDict[str, Product]" = OrderedDict()
        for row_number, record in records:
            product = parse_row(ProductRow, record, SheetName.PRODUCTS, row_number).to_domain()
            if product.id in products:
                logger.warning(f"商品IDが重複しています。後の行を使用します: {product.id} ({row_number} 行目)")
            products[product.id] = product
        return list(products.values())

    async def get_product(self, product_id: str) -> Optional[Product]:
        for product in await self.list_products():
            if product.id == product_id:
                return product
        return None

    async def create_product(
        self, name: str, unit_price: Decimal, unit: str = ProductUnit.PCS
    ) -> Product:
        headers, records = self._read(SheetName.PRODUCTS)
        product = Product(
            id=next_sequential_id("prod", (record.get("id") for _, record in records)),
            name=name,
            unit_price=unit_price,
            unit=unit,
        )
        self.client.append_rows(
            SheetName.PRODUCTS,
            HEADERS[SheetName.PRODUCTS],
            [values_from_record(product_record(product), headers)],
        )
        logger.info(f"商品を登録しました: {product.id} ({product.name})")
        return product

    async def update_product(self, product: Product) -> Product:
        headers, records = self._read(SheetName.PRODUCTS)
        matches = [(row_number, record) for row_number, record in records
                   if str(record.get("id") or "") == product.id]
        if not matches:
            raise NotFoundError(f"商品が見つかりません: {product.id}")
        row_number, record = matches[-1]
        merged = {**record, **product_record(product)}
        self.client.update_row(SheetName.PRODUCTS, row_number, values_from_record(merged, headers))
        logger.info(f"商品を更新しました: {product.id}")
        return product

    async def delete_product(self, product_id: str) -> None:
        await self._delete_by_id(SheetName.PRODUCTS, product_id, "商品")

    # 請求書

    def _line_items_by_invoice(self, records: List[Record]) -> Dict[str, List[LineItem]]:
        items: Dict[str, List[LineItem]] = {}
        for row_number, record in records:
            row = parse_row(InvoiceItemRow, record, SheetName.INVOICE_ITEMS, row_number)
            items.setdefault(row.invoice_id, []).append(row.to_domain())
        return items

    async def list_invoices(self) -> List[Invoice]:
        _, invoice_records = self._read(SheetName.INVOICES)
        _, item_records = self._read(SheetName.INVOICE_ITEMS)
        items = self._line_items_by_invoice(item_records)
        return [
            parse_row(InvoiceRow, record, SheetName.INVOICES, row_number).to_domain(
                items.get(str(record.get("id") or ""), [])
            )
            for row_number, record in invoice_records
        ]

    async def get_invoice(self, invoice_id: str) -> Optional[Invoice]:
        _, invoice_records = self._read(SheetName.INVOICES)
        found = self._find(invoice_records, invoice_id)
        if found is None:
            return None
        row_number, record = found
        _, item_records = self._read(SheetName.INVOICE_ITEMS)
        items = self._line_items_by_invoice(
            [(n, r) for n, r in item_records if str(r.get("invoiceId") or "") == invoice_id]
        )
        return parse_row(InvoiceRow, record, SheetName.INVOICES, row_number).to_domain(
            items.get(invoice_id, [])
        )

    async def create_invoice(self, draft: InvoiceDraft, totals: InvoiceTotals) -> Invoice:
        headers, records = self._read(SheetName.INVOICES)
        invoice = Invoice(
            id=next_sequential_id("inv", (record.get("id") for _, record in records)),
            invoice_number=next_invoice_number(
                draft.invoice_date.year, (record.get("invoiceNumber") for _, record in records)
            ),
            customer_id=draft.customer_id,
            line_items=draft.line_items,
            subtotal=totals.subtotal,
            tax_percent=totals.tax_percent,
            discount_value=totals.discount_value,
            underpayment_value=totals.underpayment_value,
            total=totals.total,
            status=draft.status,
            invoice_date=draft.invoice_date,
            due_date=draft.due_date,
            notes=draft.notes,
            customer_relationship=draft.customer_relationship,
            payment_history=draft.payment_history,
        )
        self.client.append_rows(
            SheetName.INVOICES,
            HEADERS[SheetName.INVOICES],
            [values_from_record(invoice_record(invoice), headers)],
        )
        invoice = self._append_line_items(invoice)
        logger.info(f"請求書を登録しました: {invoice.id} (番号: {invoice.invoice_number})")
        return invoice

    async def update_invoice(self, invoice: Invoice) -> Invoice:
        """請求書の行を上書きし、明細を置き換える

        新しい明細を追加してから請求書の行を更新し、最後に古い明細を削除する。
        途中で失敗した場合も古い明細は残る。
        """
        headers, records = self._read(SheetName.INVOICES)
        found = self._find(records, invoice.id)
        if found is None:
            raise NotFoundError(f"請求書が見つかりません: {invoice.id}")
        row_number, record = found

        _, item_records = self._read(SheetName.INVOICE_ITEMS)
        old_item_ids = {
            str(item_record.get("id") or "")
            for _, item_record in item_records
            if str(item_record.get("invoiceId") or "") == invoice.id
        }

        saved = self._append_line_items(invoice)
        merged = {**record, **invoice_record(saved, created_at=record.get("createdAt") or None)}
        try:
            self.client.update_row(SheetName.INVOICES, row_number, values_from_record(merged, headers))
        except ExternalServiceError:
            logger.error(f"請求書の行の更新に失敗したため、追加した明細を削除します: {invoice.id}")
            self._delete_line_items(invoice.id, {item.entry_id for item in saved.line_items})
            raise

        self._delete_line_items(invoice.id, old_item_ids)
        logger.info(f"請求書を更新しました: {saved.id} (明細 {len(saved.line_items)} 件)")
        return saved

    async def update_invoice_status(self, invoice_id: str, status: str) -> None:
        """請求書の行のステータス列だけを書き換える（明細には触れない）"""
        if status not in InvoiceStatus.ALL:
            raise ValidationError(f"請求書ステータスが不正です: {status}")
        headers, records = self._read(SheetName.INVOICES)
        found = self._find(records, invoice_id)
        if found is None:
            raise NotFoundError(f"請求書が見つかりません: {invoice_id}")
        row_number, record = found
        self.client.update_row(
            SheetName.INVOICES, row_number, values_from_record({**record, "status": status}, headers)
        )
        logger.info(f"請求書のステータスを更新しました: {invoice_id} ({status})")

    async def delete_invoice(self, invoice_id: str) -> None:
        await self._delete_by_id(SheetName.INVOICES, invoice_id, "請求書")
        self._delete_line_items(invoice_id)

    def _append_line_items(self, invoice: Invoice) -> Invoice:
        """明細に item-N のIDを振って追加し、IDを反映した請求書を返す"""
        item_headers, item_records = self._read(SheetName.INVOICE_ITEMS)
        existing_ids = [record.get("id") for _, record in item_records]
        saved_items = []
        rows = []
        for item in invoice.line_items:
            item_id = next_sequential_id("item", existing_ids)
            existing_ids.append(item_id)
            saved_items.append(replace(item, entry_id=item_id))
            rows.append(values_from_record(invoice_item_record(item_id, invoice.id, item), item_headers))
        self.client.append_rows(SheetName.INVOICE_ITEMS, HEADERS[SheetName.INVOICE_ITEMS], rows)
        return replace(invoice, line_items=tuple(saved_items))

    def _delete_line_items(self, invoice_id: str, item_ids: Optional[Set[str]] = None) -> None:
        """請求書の明細行を削除する（item_ids を指定した場合はそのIDの行だけ）"""
        _, item_records = self._read(SheetName.INVOICE_ITEMS)
        row_numbers = [
            row_number for row_number, record in item_records
            if str(record.get("invoiceId") or "") == invoice_id
            and (item_ids is None or str(record.get("id") or "") in item_ids)
        ]
        self.client.delete_rows(SheetName.INVOICE_ITEMS, HEADERS[SheetName.INVOICE_ITEMS], row_numbers)

    async def _delete_by_id(self, sheet_name: str, record_id: str, label: str) -> None:
        _, records = self._read(sheet_name)
        row_numbers = [
            row_number for row_number, record in records
            if str(record.get("id") or "") == record_id
        ]
        if not row_numbers:
            raise NotFoundError(f"{label}が見つかりません: {record_id}")
        self.client.delete_rows(sheet_name, HEADERS[sheet_name], row_numbers)
        logger.info(f"{label}を削除しました: {record_id}")

    # 会社プロフィール

    async def get_company_profile(self) -> CompanyProfile:
        _, records = self._read(SheetName.COMPANY_PROFILE)
        values = {
            str(record.get("key")): record.get("value")
            for _, record in records
            if record.get("key")
        }
        defaults = CompanyProfile()
        return CompanyProfile(
            name=str(values.get("name") or defaults.name),
            address=str(values.get("address") or defaults.address),
            logo_url=str(values.get("logoUrl") or defaults.logo_url),
            currency=str(values.get("currency") or defaults.currency),
            language=str(values.get("language") or defaults.language),
        )

    async def save_company_profile(self, profile: CompanyProfile) -> None:
        rows = [
            ["name", profile.name],
            ["address", profile.address],
            ["logoUrl", profile.logo_url],
            ["currency", profile.currency],
            ["language", profile.language],
        ]
        self.client.put_values(SheetName.COMPANY_PROFILE, HEADERS[SheetName.COMPANY_PROFILE], rows)
        logger.info("会社プロフィールを保存しました")
