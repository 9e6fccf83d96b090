"""画像レンダラー用の小さなフレックスボックス風レイアウトエンジン

ボックスの木を受け取り、各ボックスの絶対座標（左上原点、単位px）を求める。
文字の寸法は呼び出し側が渡す measure_text で測る。
"""
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

Edges = Tuple[float, float, float, float]  # 上, 右, 下, 左
Border = Tuple[float, str]  # 太さ, 色
MeasureText = Callable[[str, str, float], float]

LINE_HEIGHT = 1.2


class Direction:
    """並べる向きの定数"""
    ROW = "row"
    COLUMN = "column"


class Justify:
    """主軸方向の配置の定数"""
    START = "start"
    END = "end"
    SPACE_BETWEEN = "space-between"


class Align:
    """交差軸方向の配置の定数"""
    START = "start"
    END = "end"
    STRETCH = "stretch"


@dataclass(frozen=True)
class Style:
    direction: str = Direction.COLUMN
    padding: Edges = (0, 0, 0, 0)
    margin_top: float = 0
    width: Optional[float] = None
    height: Optional[float] = None
    basis: Optional[float] = None
    grow: float = 0
    justify: str = Justify.START
    align: str = Align.STRETCH
    text_align: str = "left"
    background: Optional[str] = None
    border_top: Optional[Border] = None
    border_bottom: Optional[Border] = None
    font: str = "regular"
    font_size: float = 14
    color: str = "#1f2937"


@dataclass
class Box:
    """レイアウトの1ノード

    text を持つボックスは葉として扱い、改行ごとに1行で描く。
    image を持つボックスは style.width / style.height の大きさで描く。
    basis は親の行ボックスの内側の幅に対する割合。
    """

    style: Style = field(default_factory=Style)
    children: List["Box"] = field(default_factory=list)
    text: Optional[str] = None
    image: Any = None

    def texts(self) -> List[str]:
        """木に含まれる文字列を描画順に返す"""
        found = [self.text] if self.text is not None else []
        for child in self.children:
            found.extend(child.texts())
        return found


@dataclass(frozen=True)
class Placed:
    box: Box
    x: float
    y: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.y + self.height


def line_height(style: Style) -> float:
    return style.font_size * LINE_HEIGHT


class BoxLayout:
    """ボックスの木に座標を割り当てる"""

    def __init__(self, measure_text: MeasureText):
        self.measure_text = measure_text

    def layout(self, root: Box, width: float, height: float) -> List[Placed]:
        """ルートを (0, 0) から width x height に配置する

        Returns:
            List[Placed]: 親から子の順（描画順）に並んだ配置結果
        """
        placed: List[Placed] = []
        self._arrange(root, 0, 0, width, height, placed)
        return placed

    def measure(self, box: Box, max_width: float) -> Tuple[float, float]:
        """ボックスの希望サイズ (幅, 高さ) を求める"""
        style = box.style
        top, right, bottom, left = style.padding

        if box.text is not None:
            lines = box.text.split("\n")
            text_width = max(self.measure_text(line, style.font, style.font_size) for line in lines)
            width = style.width if style.width is not None else text_width + left + right
            height = len(lines) * line_height(style) + top + bottom
            return width, style.height if style.height is not None else height

        if box.image is not None or not box.children:
            return (
                style.width if style.width is not None else left + right,
                style.height if style.height is not None else top + bottom,
            )

        outer_width = style.width if style.width is not None else max_width
        inner_width = max(outer_width - left - right, 0)

        if style.direction == Direction.ROW:
            widths = self._row_widths(box.children, inner_width)
            content_height = max(
                child.style.margin_top + self.measure(child, child_width)[1]
                for child, child_width in zip(box.children, widths)
            )
            content_width = sum(widths)
        else:
            sizes = [self.measure(child, inner_width) for child in box.children]
            content_height = sum(child.style.margin_top + h for child, (_, h) in zip(box.children, sizes))
            content_width = max(w for w, _ in sizes)

        width = style.width if style.width is not None else content_width + left + right
        height = style.height if style.height is not None else content_height + top + bottom
        return width, height

    def _row_widths(self, children: List[Box], inner_width: float) -> List[float]:
        widths = []
        for child in children:
            if child.style.basis is not None:
                widths.append(inner_width * child.style.basis)
            elif child.style.width is not None:
                widths.append(child.style.width)
            else:
                widths.append(self.measure(child, inner_width)[0])

        free = inner_width - sum(widths)
        total_grow = sum(child.style.grow for child in children)
        if free > 0 and total_grow > 0:
            widths = [
                width + free * child.style.grow / total_grow
                for child, width in zip(children, widths)
            ]
        return widths

    def _arrange(self, box: Box, x: float, y: float, width: float, height: float,
                 placed: List[Placed]) -> None:
        placed.append(Placed(box, x, y, width, height))
        if not box.children:
            return

        style = box.style
        top, right, bottom, left = style.padding
        inner_x, inner_y = x + left, y + top
        inner_width = max(width - left - right, 0)
        inner_height = max(height - top - bottom, 0)

        if style.direction == Direction.ROW:
            self._arrange_row(box, inner_x, inner_y, inner_width, inner_height, placed)
        else:
            self._arrange_column(box, inner_x, inner_y, inner_width, inner_height, placed)

    def _arrange_row(self, box: Box, x: float, y: float, width: float, height: float,
                     placed: List[Placed]) -> None:
        children = box.children
        widths = self._row_widths(children, width)
        free = max(width - sum(widths), 0)

        gap = 0.0
        cursor = x
        if box.style.justify == Justify.END:
            cursor = x + free
        elif box.style.justify == Justify.SPACE_BETWEEN and len(children) > 1:
            gap = free / (len(children) - 1)

        for child, child_width in zip(children, widths):
            child_y = y + child.style.margin_top
            if box.style.align == Align.STRETCH:
                child_height = height - child.style.margin_top
            else:
                child_height = self.measure(child, child_width)[1]
            self._arrange(child, cursor, child_y, child_width, child_height, placed)
            cursor += child_width + gap

    def _arrange_column(self, box: Box, x: float, y: float, width: float, height: float,
                        placed: List[Placed]) -> None:
        children = box.children
        sizes = []
        for child in children:
            child_width, child_height = self.measure(child, width)
            if box.style.align == Align.STRETCH and child.style.width is None:
                child_width = width
            sizes.append([min(child_width, width), child_height])

        used = sum(child.style.margin_top + size[1] for child, size in zip(children, sizes))
        free = height - used
        total_grow = sum(child.style.grow for child in children)
        if free > 0 and total_grow > 0:
            for child, size in zip(children, sizes):
                size[1] += free * child.style.grow / total_grow

        cursor = y
        for child, (child_width, child_height) in zip(children, sizes):
            cursor += child.style.margin_top
            child_x = x
            if box.style.align == Align.END:
                child_x = x + width - child_width
            self._arrange(child, child_x, cursor, child_width, child_height, placed)
            cursor += child_height
