"""金額・日付の表示用フォーマット

画面表示・PDF・画像のすべてがこのモジュールの関数を使う。
"""
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from invoicecraft.domain.exceptions import ValidationError
from invoicecraft.domain.value_objects.line_item import to_decimal
from invoicecraft.domain.value_objects.render_context import RenderContext


@dataclass(frozen=True)
class CurrencyFormat:
    """通貨記号と桁区切り文字"""

    symbol: str
    grouping: str


CURRENCY_FORMATS = {
    "IDR": CurrencyFormat(symbol="Rp", grouping="."),
    "USD": CurrencyFormat(symbol="$", grouping=","),
    "JPY": CurrencyFormat(symbol="¥", grouping=","),
}

MONTH_ABBREVIATIONS = {
    "en": ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
    "id": ("Jan", "Feb", "Mar", "Apr", "Mei", "Jun", "Jul", "Agu", "Sep", "Okt", "Nov", "Des"),
}

_WHOLE_UNIT = Decimal("1")


def round_to_unit(amount) -> Decimal:
    """金額を整数単位に四捨五入する（補助単位は扱わない）"""
    return to_decimal(amount, "amount").quantize(_WHOLE_UNIT, rounding=ROUND_HALF_UP)


def format_currency(amount, currency: str = "IDR") -> str:
    """金額を「通貨記号 + 桁区切り + 小数なし」で整形する

    Args:
        amount: 金額
        currency: 通貨コード

    Returns:
        str: 整形済み文字列（例: ``Rp 10.600.000``）
    """
    fmt = CURRENCY_FORMATS.get(currency.upper(), CurrencyFormat(symbol=currency.upper(), grouping=","))
    value = round_to_unit(amount)
    grouped = f"{abs(int(value)):,}".replace(",", fmt.grouping)
    sign = "-" if value < 0 else ""
    return f"{sign}{fmt.symbol} {grouped}"


def format_percent(percent) -> str:
    """税率表示用（11 → "11", 12.50 → "12.5"）"""
    value = to_decimal(percent, "percent")
    if value == value.to_integral_value():
        return str(int(value))
    return format(value.normalize(), "f")


def parse_iso_date(value: Union[str, date]) -> date:
    """ISO形式の日付文字列をdateに変換する

    Raises:
        ValidationError: 日付として解釈できない場合
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as e:
        raise ValidationError(f"日付を解釈できません: {value!r}") from e


def format_date(value: Union[str, date], language: str = "en") -> str:
    """日付を ``dd-Mon-yyyy`` 形式で整形する（月名は言語に合わせる）"""
    parsed = parse_iso_date(value)
    months = MONTH_ABBREVIATIONS.get(language, MONTH_ABBREVIATIONS["en"])
    return f"{parsed.day:02d}-{months[parsed.month - 1]}-{parsed.year:04d}"


class Formatter:
    """RenderContext を束ねたフォーマッタ"""

    def __init__(self, context: RenderContext):
        self.context = context

    def currency(self, amount) -> str:
        return format_currency(amount, self.context.currency)

    def date(self, value: Union[str, date]) -> str:
        return format_date(value, self.context.language)

    def percent(self, percent) -> str:
        return format_percent(percent)
