"""スプレッドシートの行とドメインオブジェクトの相互変換

行はヘッダー名で読み書きするため、列の順序が異なる古いシートもそのまま扱える。
"""
import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from invoicecraft.domain.entities.customer import Customer
from invoicecraft.domain.entities.invoice import Invoice, InvoiceStatus
from invoicecraft.domain.entities.product import Product, ProductUnit
from invoicecraft.domain.exceptions import ValidationError
from invoicecraft.domain.services.formatting import parse_iso_date, round_to_unit
from invoicecraft.domain.value_objects.line_item import LineItem, to_decimal

logger = logging.getLogger(__name__)


class SheetName:
    """シート名の定数"""
    CUSTOMERS = "Customers"
    PRODUCTS = "Products"
    INVOICES = "Invoices"
    INVOICE_ITEMS = "InvoiceItems"
    COMPANY_PROFILE = "CompanyProfile"


HEADERS: Dict[str, Tuple[str, ...]] = {
    SheetName.CUSTOMERS: ("id", "name", "email", "address", "phone"),
    SheetName.PRODUCTS: ("id", "name", "unit", "unitPrice"),
    SheetName.INVOICES: (
        "id", "invoiceNumber", "customerId", "subtotal", "tax", "discount",
        "underpayment", "total", "status", "invoiceDate", "dueDate", "createdAt",
        "notes", "customerRelationship", "paymentHistory",
    ),
    SheetName.INVOICE_ITEMS: ("id", "invoiceId", "productId", "quantity", "unitPrice", "total"),
    SheetName.COMPANY_PROFILE: ("key", "value"),
}

# スプレッドシートのシリアル値の起点日
_SERIAL_EPOCH = date(1899, 12, 30)


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _money(value: Any, default: Optional[Decimal] = None) -> Optional[Decimal]:
    if value is None or value == "":
        return default
    return to_decimal(value, "amount")


def _sheet_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return _SERIAL_EPOCH + timedelta(days=int(value))
    return parse_iso_date(value)


class CustomerRow(BaseModel):
    """Customers シートの1行"""

    id: str
    name: str
    email: str = ""
    address: str = ""
    phone: str = ""

    @field_validator("id", "name", "email", "address", "phone", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text(v)

    def to_domain(self) -> Customer:
        return Customer(id=self.id, name=self.name, email=self.email, address=self.address, phone=self.phone)


class ProductRow(BaseModel):
    """Products シートの1行"""

    id: str
    name: str
    unit: str = ProductUnit.PCS
    unit_price: Decimal = Field(default=Decimal("0"), alias="unitPrice")

    @field_validator("id", "name", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("unit", mode="before")
    @classmethod
    def default_unit(cls, v: Any) -> str:
        return _text(v) or ProductUnit.PCS

    @field_validator("unit_price", mode="before")
    @classmethod
    def coerce_unit_price(cls, v: Any) -> Decimal:
        return _money(v, Decimal("0"))

    def to_domain(self) -> Product:
        return Product(id=self.id, name=self.name, unit_price=self.unit_price, unit=self.unit)

    class Config:
        populate_by_name = True


class InvoiceItemRow(BaseModel):
    """InvoiceItems シートの1行

    unitPrice 列が無い古い行は total / quantity を整数単位に丸めて単価とする。
    """

    id: str
    invoice_id: str = Field(alias="invoiceId")
    product_id: str = Field(alias="productId")
    quantity: int
    unit_price: Optional[Decimal] = Field(default=None, alias="unitPrice")
    total: Optional[Decimal] = None

    @field_validator("id", "invoice_id", "product_id", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v: Any) -> Any:
        if isinstance(v, float) and v.is_integer():
            return int(v)
        return v

    @field_validator("unit_price", "total", mode="before")
    @classmethod
    def coerce_money(cls, v: Any) -> Optional[Decimal]:
        return _money(v)

    def to_domain(self) -> LineItem:
        unit_price = self.unit_price
        if unit_price is None:
            if self.total is None or self.quantity <= 0:
                raise ValidationError(f"明細の単価を決定できません: {self.id}")
            unit_price = round_to_unit(self.total / self.quantity)
        item = LineItem(
            product_id=self.product_id,
            quantity=self.quantity,
            unit_price=unit_price,
            entry_id=self.id,
        )
        if self.total is not None and self.total != item.total:
            logger.warning(
                f"明細の保存済み金額が数量×単価と一致しません: {self.id} "
                f"({self.total} != {item.total})"
            )
        return item


class InvoiceRow(BaseModel):
    """Invoices シートの1行

    invoiceDate 列が無い古い行は createdAt を請求日として扱う。
    """

    id: str
    invoice_number: str = Field(alias="invoiceNumber")
    customer_id: str = Field(alias="customerId")
    subtotal: Decimal = Decimal("0")
    tax: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    underpayment: Decimal = Decimal("0")
    total: Decimal = Decimal("0")
    status: str = InvoiceStatus.UNPAID
    invoice_date: Optional[date] = Field(default=None, alias="invoiceDate")
    due_date: date = Field(alias="dueDate")
    created_at: Optional[date] = Field(default=None, alias="createdAt")
    notes: str = ""
    customer_relationship: str = Field(default="", alias="customerRelationship")
    payment_history: str = Field(default="", alias="paymentHistory")

    @field_validator(
        "id", "invoice_number", "customer_id", "notes",
        "customer_relationship", "payment_history", mode="before",
    )
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("status", mode="before")
    @classmethod
    def coerce_status(cls, v: Any) -> str:
        return _text(v) or InvoiceStatus.UNPAID

    @field_validator("subtotal", "tax", "discount", "underpayment", "total", mode="before")
    @classmethod
    def coerce_money(cls, v: Any) -> Decimal:
        return _money(v, Decimal("0"))

    @field_validator("invoice_date", "due_date", "created_at", mode="before")
    @classmethod
    def coerce_date(cls, v: Any) -> Optional[date]:
        return _sheet_date(v)

    def to_domain(self, line_items: Sequence[LineItem]) -> Invoice:
        invoice_date = self.invoice_date or self.created_at
        if invoice_date is None:
            raise ValidationError(f"請求日がありません: {self.id}")
        if self.invoice_date is None and invoice_date > self.due_date:
            logger.warning(
                f"作成日が支払期限より後のため支払期限を請求日として扱います: {self.id}"
            )
            invoice_date = self.due_date

        return Invoice(
            id=self.id,
            invoice_number=self.invoice_number,
            customer_id=self.customer_id,
            line_items=tuple(line_items),
            subtotal=self.subtotal,
            tax_percent=self.tax,
            discount_value=self.discount,
            underpayment_value=self.underpayment,
            total=self.total,
            status=self.status,
            invoice_date=invoice_date,
            due_date=self.due_date,
            notes=self.notes,
            customer_relationship=self.customer_relationship,
            payment_history=self.payment_history,
        )


RowModel = TypeVar("RowModel", bound=BaseModel)


def records_from_values(values: List[List[Any]]) -> List[Tuple[int, Dict[str, Any]]]:
    """ヘッダー行付きの2次元リストを (行番号, ヘッダー名→値) のリストに変換する

    行番号はシート上の1始まりの番号。空行は読み飛ばす。
    """
    if not values:
        return []
    headers = [_text(header).strip() for header in values[0]]
    records = []
    for offset, row in enumerate(values[1:], start=2):
        if not any(cell not in (None, "") for cell in row):
            continue
        record = {
            header: (row[index] if index < len(row) else None)
            for index, header in enumerate(headers)
            if header
        }
        records.append((offset, record))
    return records


def values_from_record(record: Dict[str, Any], headers: Sequence[Any]) -> List[Any]:
    """ヘッダー行の並びに合わせて1行分の値リストを作る（未知の列は空文字）"""
    return ["" if record.get(_text(header).strip()) is None else record.get(_text(header).strip())
            for header in headers]


def parse_row(model: Type[RowModel], record: Dict[str, Any], sheet_name: str, row_number: int) -> RowModel:
    """1行を行スキーマで検証する

    Raises:
        ValidationError: 必須列の欠落や型の不一致がある場合
    """
    try:
        return model.model_validate(record)
    except PydanticValidationError as e:
        raise ValidationError(f"{sheet_name} シートの {row_number} 行目が不正です: {e}") from e


def invoice_record(invoice: Invoice, created_at: Optional[str] = None) -> Dict[str, Any]:
    """請求書をInvoicesシートの1行分のレコードにする"""
    return {
        "id": invoice.id,
        "invoiceNumber": invoice.invoice_number,
        "customerId": invoice.customer_id,
        "subtotal": _number(invoice.subtotal),
        "tax": _number(invoice.tax_percent),
        "discount": _number(invoice.discount_value),
        "underpayment": _number(invoice.underpayment_value),
        "total": _number(invoice.total),
        "status": invoice.status,
        "invoiceDate": invoice.invoice_date.isoformat(),
        "dueDate": invoice.due_date.isoformat(),
        "createdAt": created_at or date.today().isoformat(),
        "notes": invoice.notes,
        "customerRelationship": invoice.customer_relationship,
        "paymentHistory": invoice.payment_history,
    }


def invoice_item_record(item_id: str, invoice_id: str, item: LineItem) -> Dict[str, Any]:
    """明細をInvoiceItemsシートの1行分のレコードにする"""
    return {
        "id": item_id,
        "invoiceId": invoice_id,
        "productId": item.product_id,
        "quantity": item.quantity,
        "unitPrice": _number(item.unit_price),
        "total": _number(item.total),
    }


def customer_record(customer: Customer) -> Dict[str, Any]:
    return {
        "id": customer.id,
        "name": customer.name,
        "email": customer.email,
        "address": customer.address,
        "phone": customer.phone,
    }


def product_record(product: Product) -> Dict[str, Any]:
    return {
        "id": product.id,
        "name": product.name,
        "unit": product.unit,
        "unitPrice": _number(product.unit_price),
    }


def _number(value: Decimal) -> Any:
    """Decimal をシートに書き込める数値にする（整数ならint）"""
    if value == value.to_integral_value():
        return int(value)
    return float(value)
