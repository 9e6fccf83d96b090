"""Pillow で請求書のプレビュー画像を描画するレンダラー"""
import base64
import io
import logging
from typing import Dict, List, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from invoicecraft.domain.repositories.invoice_renderer import IInvoiceRenderer
from invoicecraft.domain.value_objects.application_config import ImageFormat
from invoicecraft.domain.value_objects.invoice_document import COLUMN_RATIOS, InvoiceDocument
from invoicecraft.infrastructure.image_renderer.box_layout import (
    Align,
    Box,
    BoxLayout,
    Direction,
    Justify,
    Placed,
    Style,
    line_height,
)

logger = logging.getLogger(__name__)

IMAGE_WIDTH = 1200
IMAGE_HEIGHT = 630

# 画像に載せる明細の最大行数
MAX_VISIBLE_ROWS = 3

TEXT_COLOR = "#1f2937"
MUTED_COLOR = "#6b7280"
BORDER_COLOR = "#e5e7eb"
ROW_BORDER_COLOR = "#f3f4f6"
TABLE_HEADER_BACKGROUND = "#f9fafb"

REGULAR = "regular"
BOLD = "bold"


def _text(text: str, size: float, font: str = REGULAR, color: str = TEXT_COLOR,
          **style) -> Box:
    return Box(style=Style(font=font, font_size=size, color=color, **style), text=text)


def _table_row(cells: Tuple[str, ...], size: float, font: str, color: str, **style) -> Box:
    """明細テーブルの1行（1列目は左寄せ、2列目以降は右寄せ）"""
    return Box(
        style=Style(direction=Direction.ROW, padding=(10, 10, 10, 10), **style),
        children=[
            _text(cell, size, font, color, basis=ratio, text_align="left" if index == 0 else "right")
            for index, (cell, ratio) in enumerate(zip(cells, COLUMN_RATIOS))
        ],
    )


def _summary_row(label: str, value: str, size: float, font: str = REGULAR, **style) -> Box:
    return Box(
        style=Style(direction=Direction.ROW, justify=Justify.SPACE_BETWEEN, **style),
        children=[_text(label, size, font), _text(value, size, font)],
    )


class PillowInvoiceRenderer(IInvoiceRenderer):
    """1200x630 の画像に請求書の要約を描画するレンダラー

    明細は先頭3行だけ表示し、残りは件数のみ表示する。
    """

    def __init__(
        self,
        image_format: str = ImageFormat.PNG,
        font_regular: Optional[str] = None,
        font_bold: Optional[str] = None,
    ):
        """レンダラーを初期化する

        Args:
            image_format: png または jpeg
            font_regular: 通常フォントのTTFパス（省略時はPillowの既定フォント）
            font_bold: 太字フォントのTTFパス（省略時は通常フォント）
        """
        if image_format not in (ImageFormat.PNG, ImageFormat.JPEG):
            raise ValueError(f"画像フォーマットは png または jpeg である必要があります: {image_format}")
        self.image_format = image_format
        self.font_paths = {REGULAR: font_regular, BOLD: font_bold or font_regular}
        self._fonts: Dict[Tuple[str, float], ImageFont.ImageFont] = {}

    def _font(self, name: str, size: float):
        key = (name, size)
        if key not in self._fonts:
            path = self.font_paths.get(name)
            if path:
                self._fonts[key] = ImageFont.truetype(path, int(size))
            else:
                self._fonts[key] = ImageFont.load_default(size=size)
        return self._fonts[key]

    def _measure_text(self, text: str, font: str, size: float) -> float:
        return self._font(font, size).getlength(text)

    def _load_logo(self, logo: Optional[bytes]) -> Optional[Image.Image]:
        if not logo:
            return None
        try:
            with Image.open(io.BytesIO(logo)) as image:
                return image.convert("RGBA").resize((60, 60))
        except Exception as e:
            logger.warning(f"ロゴ画像を読み込めないためロゴなしで描画します: {e}")
            return None

    def build_tree(self, document: InvoiceDocument) -> Box:
        """ドキュメントからボックスの木を組み立てる"""
        labels = document.labels

        company_children: List[Box] = []
        logo = self._load_logo(document.logo)
        if logo is not None:
            company_children.append(
                Box(style=Style(width=80, height=60, padding=(0, 20, 0, 0)), image=logo)
            )
        company_children.append(
            Box(children=[
                _text(document.company_name, 24, BOLD),
                _text("\n".join(document.company_address_lines), 14, color=MUTED_COLOR),
            ])
        )

        header = Box(
            style=Style(
                direction=Direction.ROW,
                justify=Justify.SPACE_BETWEEN,
                align=Align.START,
                padding=(0, 0, 20, 0),
                border_bottom=(2, BORDER_COLOR),
            ),
            children=[
                Box(style=Style(direction=Direction.ROW, align=Align.START), children=company_children),
                Box(style=Style(align=Align.END), children=[
                    _text(labels.title.upper(), 40, BOLD, text_align="right"),
                    _text(f"#{document.invoice_number}", 16, color=MUTED_COLOR, text_align="right"),
                ]),
            ],
        )

        bill_to = Box(
            style=Style(direction=Direction.ROW, justify=Justify.SPACE_BETWEEN,
                        align=Align.START, margin_top=24),
            children=[
                Box(children=[
                    _text(labels.bill_to.rstrip(":").upper(), 14, BOLD, MUTED_COLOR),
                    _text(document.customer_name, 20, BOLD, margin_top=4),
                    _text("\n".join(document.customer_address_lines), 14, color=MUTED_COLOR),
                ]),
                Box(style=Style(width=260), children=[
                    _summary_row(labels.invoice_date, document.invoice_date, 14),
                    _summary_row(labels.due_date, document.due_date, 14, margin_top=8),
                    _summary_row(labels.status, document.status, 14, margin_top=8),
                ]),
            ],
        )

        table_rows = [
            _table_row(
                tuple(header.upper() for header in labels.table_headers),
                12, BOLD, MUTED_COLOR, background=TABLE_HEADER_BACKGROUND,
            )
        ]
        for index, row in enumerate(document.rows[:MAX_VISIBLE_ROWS]):
            table_rows.append(
                _table_row(row.cells, 14, REGULAR, TEXT_COLOR,
                           border_top=(1, ROW_BORDER_COLOR) if index else None)
            )
        hidden = len(document.rows) - MAX_VISIBLE_ROWS
        if hidden > 0:
            table_rows.append(
                Box(style=Style(padding=(10, 10, 10, 10), border_top=(1, ROW_BORDER_COLOR)), children=[
                    _text(labels.more_items.format(count=hidden), 12, color=MUTED_COLOR),
                ])
            )
        table = Box(style=Style(margin_top=24, grow=1), children=table_rows)

        summary_lines = [
            _summary_row(line.label, line.value, 14, padding=(4, 0, 4, 0))
            for line in document.summary
        ]
        summary_lines.append(
            _summary_row(
                document.grand_total.label, document.grand_total.value, 18, BOLD,
                padding=(8, 0, 8, 0), margin_top=4, border_top=(2, BORDER_COLOR),
            )
        )
        summary = Box(
            style=Style(direction=Direction.ROW, justify=Justify.END, margin_top=12),
            children=[Box(style=Style(width=320), children=summary_lines)],
        )

        return Box(
            style=Style(padding=(40, 40, 40, 40), background="#ffffff"),
            children=[header, bill_to, table, summary],
        )

    def layout(self, document: InvoiceDocument) -> List[Placed]:
        """ボックスの木を組み立てて座標を割り当てる"""
        tree = self.build_tree(document)
        placed = BoxLayout(self._measure_text).layout(tree, IMAGE_WIDTH, IMAGE_HEIGHT)
        content_bottom = max(node.bottom for node in placed if node.box is not tree)
        if content_bottom > IMAGE_HEIGHT:
            logger.warning(
                f"請求書画像の内容が画像の高さを超えています: {document.invoice_number} "
                f"({content_bottom:.0f}px > {IMAGE_HEIGHT}px)"
            )
        return placed

    def render(self, document: InvoiceDocument) -> bytes:
        """ドキュメントを画像のバイト列に描画する"""
        image = Image.new("RGB", (IMAGE_WIDTH, IMAGE_HEIGHT), "#ffffff")
        draw = ImageDraw.Draw(image)

        for node in self.layout(document):
            self._paint(image, draw, node)

        buffer = io.BytesIO()
        image.save(buffer, format=self.image_format.upper())
        image_bytes = buffer.getvalue()
        logger.info(
            f"請求書画像を生成しました: {document.invoice_number} "
            f"({self.image_format}, {len(image_bytes)} bytes)"
        )
        return image_bytes

    def render_data_url(self, document: InvoiceDocument) -> str:
        """画像を data URL 形式で返す"""
        encoded = base64.b64encode(self.render(document)).decode("ascii")
        return f"data:image/{self.image_format};base64,{encoded}"

    def _paint(self, image: Image.Image, draw: ImageDraw.ImageDraw, node: Placed) -> None:
        box, style = node.box, node.box.style
        left, top = round(node.x), round(node.y)
        right, bottom = round(node.x + node.width), round(node.y + node.height)

        if style.background and right > left and bottom > top:
            draw.rectangle((left, top, right - 1, bottom - 1), fill=style.background)
        if style.border_top:
            thickness, color = style.border_top
            draw.rectangle((left, top, right - 1, top + thickness - 1), fill=color)
        if style.border_bottom:
            thickness, color = style.border_bottom
            draw.rectangle((left, bottom - thickness, right - 1, bottom - 1), fill=color)

        if box.image is not None:
            pad_top, _, _, pad_left = style.padding
            image.paste(box.image, (left + round(pad_left), top + round(pad_top)), box.image)

        if box.text:
            font = self._font(style.font, style.font_size)
            pad_top, pad_right, _, pad_left = style.padding
            y = node.y + pad_top
            for line in box.text.split("\n"):
                if style.text_align == "right":
                    x = node.x + node.width - pad_right - font.getlength(line)
                else:
                    x = node.x + pad_left
                draw.text((x, y), line, font=font, fill=style.color)
                y += line_height(style)
