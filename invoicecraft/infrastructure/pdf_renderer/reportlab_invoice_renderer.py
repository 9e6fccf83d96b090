"""reportlab で請求書を1ページのPDFに描画するレンダラー"""
import io
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from reportlab.lib.colors import Color
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from invoicecraft.domain.repositories.invoice_renderer import IInvoiceRenderer
from invoicecraft.domain.value_objects.invoice_document import COLUMN_RATIOS, InvoiceDocument

logger = logging.getLogger(__name__)

RGB = Tuple[float, float, float]

FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"

# フォントサイズ
FONT_SIZE = 10
HEADER_FONT_SIZE = 24
SUB_HEADER_FONT_SIZE = 12
SMALL_FONT_SIZE = 8

MARGIN = 50
LOGO_HEIGHT = 80

BLACK: RGB = (0, 0, 0)
DARK: RGB = (0.1, 0.1, 0.1)
MUTED: RGB = (0.3, 0.3, 0.3)
GREY: RGB = (0.5, 0.5, 0.5)
TABLE_HEADER_FILL: RGB = (0.95, 0.95, 0.95)


@dataclass(frozen=True)
class TextOp:
    text: str
    x: float
    y: float
    font: str = FONT
    size: float = FONT_SIZE
    color: RGB = BLACK


@dataclass(frozen=True)
class RectOp:
    x: float
    y: float
    width: float
    height: float
    color: RGB


@dataclass(frozen=True)
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    thickness: float = 1
    color: RGB = BLACK


@dataclass(frozen=True)
class ImageOp:
    image: ImageReader
    x: float
    y: float
    width: float
    height: float


DrawOp = Union[TextOp, RectOp, LineOp, ImageOp]


def _text_width(text: str, font: str, size: float) -> float:
    return stringWidth(text, font, size)


def _load_logo(logo: Optional[bytes]) -> Optional[Tuple[ImageReader, float, float]]:
    """ロゴを読み込み、高さ80ptに縮尺した寸法を返す（読めない場合は None）"""
    if not logo:
        return None
    try:
        reader = ImageReader(io.BytesIO(logo))
        image_width, image_height = reader.getSize()
    except Exception as e:
        logger.warning(f"ロゴ画像を読み込めないためロゴなしで描画します: {e}")
        return None
    if not image_height:
        return None
    scale = LOGO_HEIGHT / image_height
    return reader, image_width * scale, LOGO_HEIGHT


class ReportlabInvoiceRenderer(IInvoiceRenderer):
    """A4 1ページに絶対座標で請求書を描画するレンダラー

    明細が多い場合も改ページは行わない。
    """

    def __init__(self, page_size: Tuple[float, float] = A4):
        self.page_size = page_size

    def layout(self, document: InvoiceDocument) -> List[DrawOp]:
        """描画命令のリストを作る

        座標はPDFの座標系（左下原点、単位はpt）。

        Args:
            document: 描画するドキュメント

        Returns:
            List[DrawOp]: 描画順に並んだ描画命令
        """
        width, height = self.page_size
        content_width = width - 2 * MARGIN
        labels = document.labels
        ops: List[DrawOp] = []

        def right_aligned(text: str, x_end: float, y: float, font: str = FONT,
                          size: float = FONT_SIZE, color: RGB = BLACK) -> None:
            ops.append(TextOp(text, x_end - _text_width(text, font, size), y, font, size, color))

        y = height - MARGIN

        # ヘッダー右側: タイトルと請求書番号
        right_y = y
        right_aligned(labels.title, width - MARGIN, right_y, BOLD_FONT, HEADER_FONT_SIZE)
        right_y -= 30
        right_aligned(f"#{document.invoice_number}", width - MARGIN, right_y, color=GREY)
        right_y -= 20

        # ヘッダー左側: ロゴと会社情報
        left_x = MARGIN
        logo = _load_logo(document.logo)
        logo_height = 0
        if logo is not None:
            reader, logo_width, logo_height = logo
            ops.append(ImageOp(reader, left_x, y - logo_height + 10, logo_width, logo_height))
            left_x += logo_width + 15

        left_y = y
        if document.company_name:
            ops.append(TextOp(document.company_name, left_x, left_y, BOLD_FONT, SUB_HEADER_FONT_SIZE))
        left_y -= 15
        for line in document.company_address_lines:
            ops.append(TextOp(line, left_x, left_y, color=MUTED))
            left_y -= 15

        meta = (
            (labels.status, document.status),
            (labels.invoice_date, document.invoice_date),
            (labels.due_date, document.due_date),
        )
        for label, value in meta:
            ops.append(TextOp(label, width - MARGIN - 150, right_y, BOLD_FONT))
            right_aligned(value, width - MARGIN, right_y, color=MUTED)
            right_y -= 20

        y = min(y - logo_height - 20, left_y, right_y) - 20

        # 請求先
        ops.append(TextOp(labels.bill_to, MARGIN, y, BOLD_FONT))
        y -= 15
        ops.append(TextOp(document.customer_name, MARGIN, y, color=DARK))
        y -= 15
        for line in document.customer_address_lines:
            ops.append(TextOp(line, MARGIN, y, size=SMALL_FONT_SIZE, color=MUTED))
            y -= 12
        y -= 3
        for contact in (document.customer_email, document.customer_phone):
            if contact:
                ops.append(TextOp(contact, MARGIN, y, size=SMALL_FONT_SIZE, color=MUTED))
            y -= 12

        y -= 38

        # 明細テーブル
        column_ends = []
        position = MARGIN
        for ratio in COLUMN_RATIOS:
            position += content_width * ratio
            column_ends.append(position)

        table_top = y
        ops.append(RectOp(MARGIN, table_top - 20, content_width, 30, TABLE_HEADER_FILL))
        self._table_row(ops, labels.table_headers, column_ends, table_top - 5, BOLD_FONT)
        y -= 45

        for row in document.rows:
            self._table_row(ops, row.cells, column_ends, y, FONT)
            y -= 25

        y -= 20

        # 集計欄
        summary_label_x = width / 2 + 50
        summary_value_end = width - MARGIN
        for line in document.summary:
            ops.append(TextOp(line.label, summary_label_x, y))
            right_aligned(line.value, summary_value_end, y)
            y -= 20

        y -= 5
        ops.append(LineOp(summary_label_x, y, width - MARGIN, y))
        y -= 20

        grand_total = document.grand_total
        ops.append(TextOp(grand_total.label, summary_label_x, y, BOLD_FONT, SUB_HEADER_FONT_SIZE))
        right_aligned(grand_total.value, summary_value_end, y, BOLD_FONT, SUB_HEADER_FONT_SIZE)
        y -= 40

        # 備考
        if document.notes_lines:
            ops.append(TextOp(labels.notes, MARGIN, y, BOLD_FONT))
            y -= 15
            for line in document.notes_lines:
                ops.append(TextOp(line, MARGIN, y, size=SMALL_FONT_SIZE, color=MUTED))
                y -= 12

        if y < MARGIN:
            logger.warning(
                f"請求書の内容がページに収まりません: {document.invoice_number} "
                f"(明細 {len(document.rows)} 件)"
            )

        # フッター
        footer_width = _text_width(labels.footer, FONT, SMALL_FONT_SIZE)
        ops.append(TextOp(labels.footer, (width - footer_width) / 2, MARGIN / 2,
                          size=SMALL_FONT_SIZE, color=GREY))
        return ops

    def _table_row(self, ops: List[DrawOp], cells: Tuple[str, ...], column_ends: List[float],
                   y: float, font: str) -> None:
        """1列目は左寄せ、2列目以降は列の右端から10pt内側に右寄せする"""
        for index, cell in enumerate(cells):
            if index == 0:
                x = MARGIN + 10
            else:
                x = column_ends[index] - _text_width(cell, font, FONT_SIZE) - 10
            ops.append(TextOp(cell, x, y, font))

    def render(self, document: InvoiceDocument) -> bytes:
        """ドキュメントをPDFのバイト列に描画する"""
        ops = self.layout(document)

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=self.page_size)
        pdf.setTitle(f"{document.labels.title} {document.invoice_number}")

        for op in ops:
            if isinstance(op, TextOp):
                pdf.setFont(op.font, op.size)
                pdf.setFillColor(Color(*op.color))
                pdf.drawString(op.x, op.y, op.text)
            elif isinstance(op, RectOp):
                pdf.setFillColor(Color(*op.color))
                pdf.rect(op.x, op.y, op.width, op.height, stroke=0, fill=1)
            elif isinstance(op, LineOp):
                pdf.setStrokeColor(Color(*op.color))
                pdf.setLineWidth(op.thickness)
                pdf.line(op.x1, op.y1, op.x2, op.y2)
            elif isinstance(op, ImageOp):
                pdf.drawImage(op.image, op.x, op.y, width=op.width, height=op.height, mask="auto")

        pdf.showPage()
        pdf.save()

        pdf_bytes = buffer.getvalue()
        logger.info(
            f"PDFを生成しました: {document.invoice_number} "
            f"(明細 {len(document.rows)} 件, {len(pdf_bytes)} bytes)"
        )
        return pdf_bytes
