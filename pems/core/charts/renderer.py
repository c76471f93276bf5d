"""
Vẽ ChartSpec bằng matplotlib (backend Agg) và xuất ra PNG.

Mỗi slot (vị trí hiển thị) giữ tối đa một figure. Khi dữ liệu thay đổi mà
loại biểu đồ và kích thước giữ nguyên, figure cũ được vẽ lại tại chỗ thay vì
tạo mới. Figure phải được giải phóng bằng dispose() hoặc close().

render_data_url() giữ khóa trong suốt lượt vẽ và xuất ảnh nên có thể gọi từ
nhiều thread (asyncio.to_thread) trên cùng một renderer.
"""
import base64
import logging
import math
import threading
from io import BytesIO
from typing import Dict, Optional, Tuple

import matplotlib
matplotlib.use("Agg")
import numpy as np
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from pems.core.charts.specs import ChartSpec, ChartType

logger = logging.getLogger(__name__)

DPI = 100
MAX_TICKS = 12


class _Slot:
    def __init__(self, figure: Figure, canvas: FigureCanvasAgg, chart_type: ChartType,
                 size: Tuple[int, int]):
        self.figure = figure
        self.canvas = canvas
        self.chart_type = chart_type
        self.size = size
        self.renders = 0


class ChartRenderer:
    """
    Quản lý vòng đời figure theo slot.
    """

    def __init__(self):
        self._slots: Dict[str, _Slot] = {}
        self._lock = threading.Lock()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    @property
    def slots(self):
        return list(self._slots)

    def figure(self, slot: str) -> Optional[Figure]:
        entry = self._slots.get(slot)
        return entry.figure if entry else None

    def render(self, slot: str, spec: ChartSpec, size: Tuple[int, int]) -> Figure:
        """
        Vẽ spec vào slot.

        Args:
            slot: Tên slot, ví dụ "dashboard.ammonia"
            spec: Định nghĩa biểu đồ
            size: Kích thước ảnh (rộng, cao) theo pixel

        Returns:
            Figure của slot
        """
        entry = self._slots.get(slot)
        if entry is not None and (entry.chart_type != spec.chart_type or entry.size != tuple(size)):
            self.dispose(slot)
            entry = None

        if entry is None:
            width, height = size
            figure = Figure(figsize=(width / DPI, height / DPI), dpi=DPI)
            entry = _Slot(figure, FigureCanvasAgg(figure), spec.chart_type, tuple(size))
            self._slots[slot] = entry
            logger.debug(f"Created chart figure for slot {slot} ({width}x{height})")
        else:
            entry.figure.clear()

        self._draw(entry.figure, spec)
        entry.renders += 1
        return entry.figure

    def to_png(self, slot: str) -> bytes:
        """Đọc ảnh PNG của slot sau khi đã hoàn tất lượt vẽ."""
        entry = self._slots.get(slot)
        if entry is None:
            raise KeyError(f"No chart rendered in slot {slot}")

        # Agg vẽ đồng bộ: draw() xong là pixel đã sẵn sàng
        entry.canvas.draw()
        buffer = BytesIO()
        entry.canvas.print_png(buffer)
        return buffer.getvalue()

    def to_data_url(self, slot: str) -> str:
        encoded = base64.b64encode(self.to_png(slot)).decode("ascii")
        return f"data:image/png;base64,{encoded}"

    def render_data_url(self, slot: str, spec: ChartSpec, size: Tuple[int, int]) -> str:
        """Vẽ spec vào slot rồi xuất data URL trong cùng một lượt giữ khóa."""
        with self._lock:
            self.render(slot, spec, size)
            return self.to_data_url(slot)

    def dispose(self, slot: str) -> None:
        entry = self._slots.pop(slot, None)
        if entry is not None:
            entry.figure.clear()
            logger.debug(f"Disposed chart figure for slot {slot}")

    def close(self) -> None:
        with self._lock:
            for slot in list(self._slots):
                self.dispose(slot)

    def _draw(self, figure: Figure, spec: ChartSpec) -> None:
        ax = figure.add_subplot(111)
        positions = np.arange(len(spec.labels))

        if spec.chart_type == ChartType.LINE:
            for dataset in spec.datasets:
                values = np.array([np.nan if v is None else v for v in dataset.data], dtype=float)
                ax.plot(positions, values, color=dataset.color, alpha=dataset.alpha,
                        linewidth=2, marker="o", markersize=3, label=dataset.label)
                if dataset.fill:
                    ax.fill_between(positions, values, spec.y_axis.min,
                                    where=~np.isnan(values), color=dataset.color, alpha=0.15)
        else:
            count = max(len(spec.datasets), 1)
            width = 0.8 / count
            for index, dataset in enumerate(spec.datasets):
                present = [(i, v) for i, v in enumerate(dataset.data) if v is not None]
                if not present:
                    continue
                xs, heights = zip(*present)
                offset = (index - (count - 1) / 2) * width
                ax.bar(np.array(xs) + offset, heights, width=width, color=dataset.color,
                       alpha=dataset.alpha, label=dataset.label)

        step = max(1, math.ceil(len(spec.labels) / MAX_TICKS))
        ax.set_xticks(positions[::step])
        ax.set_xticklabels(spec.labels[::step], fontsize=8)
        ax.set_xlim(-0.5, max(len(spec.labels) - 0.5, 0.5))
        ax.set_ylim(spec.y_axis.min, spec.y_axis.max)
        ax.grid(True, alpha=0.3)

        if spec.title:
            ax.set_title(spec.title, fontsize=10)
        if spec.x_title:
            ax.set_xlabel(spec.x_title, fontsize=8)
        if spec.y_title:
            ax.set_ylabel(spec.y_title, fontsize=8)
        if len(spec.datasets) > 1:
            ax.legend(fontsize=8)
        if not spec.has_data:
            ax.text(0.5, 0.5, "No data available", transform=ax.transAxes,
                    ha="center", va="center", color="#6c757d")

        figure.tight_layout()


def rasterize(spec: ChartSpec, size: Tuple[int, int]) -> bytes:
    """Vẽ một lần và trả về PNG, figure được giải phóng ngay sau đó."""
    with ChartRenderer() as renderer:
        renderer.render("raster", spec, size)
        return renderer.to_png("raster")


def rasterize_data_url(spec: ChartSpec, size: Tuple[int, int]) -> str:
    return "data:image/png;base64," + base64.b64encode(rasterize(spec, size)).decode("ascii")
