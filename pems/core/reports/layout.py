"""
Bố cục trang PDF cố định (A4, đơn vị mm, gốc tọa độ ở góc trên bên trái).

Nội dung được xếp từ trên xuống dưới thành các khối có nhãn với chiều cao cố
định; nếu phần còn lại của trang không đủ cho khối tiếp theo thì ngắt trang.
"""
import logging
import textwrap
from io import BytesIO
from typing import Any, Dict, List, Optional, Sequence, Tuple

import matplotlib
matplotlib.use("Agg")
import matplotlib.image as mpimg
from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import Rectangle

from config.report_config import REPORT_LAYOUT

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4
PT_TO_MM = 0.3528
ROW_HEIGHT_MM = 7


def _rgb(color: Sequence[int]) -> Tuple[float, float, float]:
    return tuple(c / 255 for c in color)


class ReportLayout:
    """
    Tập hợp các trang của một báo cáo và các hàm vẽ khối nội dung.
    """

    def __init__(self, settings: Optional[Dict[str, Any]] = None):
        self.settings = dict(REPORT_LAYOUT, **(settings or {}))
        self.page_width, self.page_height = self.settings["page_size_mm"]
        self.pages: List[Figure] = []
        self.cursor = 0.0

    @property
    def page(self) -> Figure:
        if not self.pages:
            self.new_page()
        return self.pages[-1]

    @property
    def remaining(self) -> float:
        """Khoảng trống (mm) còn lại trên trang hiện tại."""
        return self.page_height - self.settings["bottom_margin_mm"] - self.cursor

    def new_page(self) -> Figure:
        figure = Figure(figsize=(self.page_width / MM_PER_INCH, self.page_height / MM_PER_INCH))
        self.pages.append(figure)
        self._header(figure)
        self.cursor = self.settings["content_top_mm"]
        return figure

    def ensure_space(self, height: float) -> None:
        if not self.pages or height > self.remaining:
            self.new_page()

    def advance(self, height: float) -> None:
        self.cursor += height

    # Chuyển tọa độ mm (góc trên trái) sang tọa độ figure (góc dưới trái, 0..1)
    def _fx(self, x: float) -> float:
        return x / self.page_width

    def _fy(self, y: float) -> float:
        return 1 - y / self.page_height

    def _rect(self, x: float, y: float, w: float, h: float) -> List[float]:
        return [self._fx(x), self._fy(y + h), w / self.page_width, h / self.page_height]

    def _header(self, figure: Figure) -> None:
        s = self.settings
        figure.text(self._fx(10), self._fy(20), s["title"], fontsize=20, fontweight="bold", va="baseline")
        figure.text(self._fx(10), self._fy(27), s["subtitle"], fontsize=12, va="baseline")
        figure.add_artist(Line2D(
            [self._fx(10), self._fx(200)], [self._fy(36), self._fy(36)],
            transform=figure.transFigure, color="black", linewidth=0.6
        ))

    def text(self, x: float, y: float, value: str, size: float = 10, bold: bool = False) -> None:
        self.page.text(self._fx(x), self._fy(y), value, fontsize=size,
                       fontweight="bold" if bold else "normal", va="baseline")

    def labeled_box(self, x: float, y: float, w: float, h: float, label: str) -> None:
        """Khung có dải nhãn màu ở phía trên."""
        s = self.settings
        figure = self.page
        figure.add_artist(Rectangle(
            (self._fx(x), self._fy(y + h)), w / self.page_width, h / self.page_height,
            transform=figure.transFigure, fill=False, edgecolor=_rgb(s["border_color"]), linewidth=1
        ))
        strip = s["label_height_mm"]
        figure.add_artist(Rectangle(
            (self._fx(x), self._fy(y + strip)), w / self.page_width, strip / self.page_height,
            transform=figure.transFigure, facecolor=_rgb(s["label_fill"]), edgecolor="none"
        ))
        self.text(x + 2, y + 6, label, size=10, bold=True)

    def table(self, x: float, y: float, w: float, title: str, rows: Sequence[Tuple[str, str]]) -> float:
        """
        Bảng hai cột có tiêu đề.

        Returns:
            Chiều cao đã dùng (mm)
        """
        height = self.settings["label_height_mm"] + ROW_HEIGHT_MM * len(rows)
        self.labeled_box(x, y, w, height, title)

        figure = self.page
        row_y = y + self.settings["label_height_mm"]
        for label, value in rows:
            figure.add_artist(Line2D(
                [self._fx(x), self._fx(x + w)], [self._fy(row_y), self._fy(row_y)],
                transform=figure.transFigure, color=_rgb(self.settings["border_color"]), linewidth=0.6
            ))
            self.text(x + 2, row_y + 5, label, size=9, bold=True)
            self.text(x + w * 0.5, row_y + 5, str(value), size=9)
            row_y += ROW_HEIGHT_MM
        return height

    def paragraphs(self, x: float, y: float, width: float, paragraphs: Sequence[str],
                   size: Optional[float] = None) -> float:
        """
        Các đoạn văn tự xuống dòng trong độ rộng cho trước.

        Returns:
            Chiều cao đã dùng (mm)
        """
        size = size or self.settings["paragraph_font_size"]
        line_height = size * PT_TO_MM * self.settings["line_height_factor"]
        # Độ rộng trung bình của một ký tự xấp xỉ nửa cỡ chữ
        chars_per_line = max(int(width / (size * 0.5 * PT_TO_MM)), 20)

        current = y
        for paragraph in paragraphs:
            for line in textwrap.wrap(paragraph, chars_per_line) or [""]:
                self.text(x, current, line, size=size)
                current += line_height
            current += line_height * 0.5
        return current - y

    def image(self, x: float, y: float, w: float, h: float, png: bytes) -> None:
        axes = self.page.add_axes(self._rect(x, y, w, h))
        axes.imshow(mpimg.imread(BytesIO(png), format="png"), aspect="auto")
        axes.axis("off")

    def save(self) -> bytes:
        """Ghi tất cả các trang ra một file PDF."""
        buffer = BytesIO()
        metadata = {"Title": self.settings["title"], "Author": self.settings["author"]}
        with PdfPages(buffer, metadata=metadata) as pdf:
            for figure in self.pages:
                pdf.savefig(figure)
        for figure in self.pages:
            figure.clear()
        logger.debug(f"Saved report with {len(self.pages)} pages")
        return buffer.getvalue()
