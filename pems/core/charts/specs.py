"""
Dựng định nghĩa biểu đồ (nhãn, dataset, giới hạn trục Y) từ chuỗi đã gom.
"""
from datetime import tzinfo
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from config.thresholds_config import Y_AXIS_POLICY
from pems.core.data.models import BucketedSeries, Metric, Reading


class ChartTarget(str, Enum):
    INTERACTIVE = "interactive"
    STATIC = "static"


class ChartType(str, Enum):
    LINE = "line"
    BAR = "bar"


class Dataset(BaseModel):
    label: str
    data: List[Optional[float]]
    color: str
    alpha: float = 1.0
    fill: bool = False


class AxisBounds(BaseModel):
    min: float
    max: float


class ChartSpec(BaseModel):
    """Định nghĩa biểu đồ, độc lập với thư viện vẽ."""
    chart_type: ChartType
    title: str = ""
    labels: List[str] = Field(default_factory=list)
    datasets: List[Dataset] = Field(default_factory=list)
    y_axis: AxisBounds
    x_title: str = ""
    y_title: str = ""
    target: ChartTarget = ChartTarget.INTERACTIVE

    @property
    def has_data(self) -> bool:
        return any(v is not None for ds in self.datasets for v in ds.data)


METRIC_STYLE = {
    Metric.AMMONIA: {"label": "Ammonia", "unit": "ppm", "color": "#008000"},
    Metric.TEMPERATURE: {"label": "Temperature", "unit": "°C", "color": "#ff9500"},
}
MINI_CHART_COLORS = {
    Metric.AMMONIA: "#198754",
    Metric.TEMPERATURE: "#ffc107",
}


def y_axis_bounds(metric: Metric, values: List[Optional[float]]) -> AxisBounds:
    """
    Giới hạn trục Y theo đại lượng.

    Amoniac: trần thấp (1) khi mọi giá trị quan sát được đều <= 1, tức là
    chưa có dữ liệu thực; ngược lại dùng trần cố định. Nhiệt độ: dải cố định.
    """
    policy = Y_AXIS_POLICY[metric.value]
    if metric == Metric.AMMONIA:
        observed = [v for v in values if v is not None]
        ceiling = policy["low_ceiling"] if max(observed, default=0) <= policy["low_ceiling"] else policy["ceiling"]
        return AxisBounds(min=policy["min"], max=ceiling)
    return AxisBounds(min=policy["min"], max=policy["max"])


def _axis_title(metric: Metric) -> str:
    style = METRIC_STYLE[metric]
    return f"{style['label']} ({style['unit']})"


def build_trend_chart(metric: Metric, series: BucketedSeries,
                      target: ChartTarget = ChartTarget.INTERACTIVE,
                      title: Optional[str] = None) -> ChartSpec:
    """
    Biểu đồ đường theo ngày (hoặc theo điểm thời gian) của một đại lượng.

    Args:
        metric: Đại lượng
        series: Chuỗi đã gom
        target: Hiển thị trực tiếp hay xuất ảnh tĩnh
        title: Tiêu đề (mặc định "Monthly Avg")

    Returns:
        ChartSpec dạng line
    """
    style = METRIC_STYLE[metric]
    values = series.values
    return ChartSpec(
        chart_type=ChartType.LINE,
        title=title or "Monthly Avg",
        labels=series.labels,
        datasets=[Dataset(label=_axis_title(metric), data=values, color=style["color"], fill=True)],
        y_axis=y_axis_bounds(metric, values),
        x_title="Date",
        y_title=_axis_title(metric),
        target=target
    )


def build_hourly_chart(metric: Metric, series: BucketedSeries,
                       target: ChartTarget = ChartTarget.INTERACTIVE,
                       title: Optional[str] = None) -> ChartSpec:
    """Biểu đồ cột trung bình theo giờ trong ngày."""
    style = METRIC_STYLE[metric]
    values = series.values
    return ChartSpec(
        chart_type=ChartType.BAR,
        title=title or "Hourly Avg",
        labels=series.labels,
        datasets=[Dataset(label=_axis_title(metric), data=values, color=style["color"], alpha=0.6)],
        y_axis=y_axis_bounds(metric, values),
        x_title="Hour of Day",
        y_title=_axis_title(metric),
        target=target
    )


def build_mini_chart(metric: Metric, readings: List[Reading], tz: Optional[tzinfo] = None) -> ChartSpec:
    """Biểu đồ mini của các bản ghi gần nhất, nhãn là giờ:phút."""
    def label(reading: Reading) -> str:
        ts = reading.timestamp.astimezone(tz) if tz and reading.timestamp.tzinfo else reading.timestamp
        return ts.strftime("%H:%M")

    values = [r.value for r in readings]
    return ChartSpec(
        chart_type=ChartType.LINE,
        title="",
        labels=[label(r) for r in readings],
        datasets=[Dataset(label=_axis_title(metric), data=values, color=MINI_CHART_COLORS[metric])],
        y_axis=y_axis_bounds(metric, values),
        target=ChartTarget.INTERACTIVE
    )
