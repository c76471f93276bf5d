"""
Tạo báo cáo PDF theo tháng cho một chuồng hoặc cả chi nhánh.
"""
import asyncio
import calendar
import logging
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from config.report_config import CHART_SIZES, DEFAULT_PARAGRAPHS
from pems.core.analytics.aggregation import (
    aggregate_daily,
    aggregate_hourly,
    merge_series,
    series_stats
)
from pems.core.charts.renderer import rasterize
from pems.core.charts.specs import ChartTarget, build_hourly_chart, build_trend_chart
from pems.core.data.models import BucketedSeries, ChannelConfig, Metric
from pems.core.data.telemetry_service import TelemetryService
from pems.core.reports.layout import ReportLayout
from pems.infrastructure.exceptions import ConfigurationError, ReportGenerationError

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"
UNITS = {Metric.AMMONIA: "ppm", Metric.TEMPERATURE: "°C"}


class ReportTableData(BaseModel):
    """Thông tin do người dùng nhập cho báo cáo."""
    name: Optional[str] = None
    livestock_count: str = NOT_AVAILABLE
    livestock_age: str = NOT_AVAILABLE
    paragraphs: List[str] = Field(default_factory=lambda: list(DEFAULT_PARAGRAPHS))
    monthly_discussion: str = ""
    ammonia_discussion: str = ""
    temperature_discussion: str = ""


class ReportData(BaseModel):
    """Các chuỗi đã gom dùng để vẽ báo cáo."""
    name: str
    year: int
    month: int
    monthly: Dict[Metric, BucketedSeries]
    hourly: Dict[Metric, Optional[BucketedSeries]]


def report_filename(name: str, year: int, month: int) -> str:
    return f"{name} - {calendar.month_name[month]} {year} Report.pdf"


def observation_period(year: int, month: int) -> str:
    last_day = calendar.monthrange(year, month)[1]
    month_name = calendar.month_name[month]
    return f"{month_name} 1, {year} - {month_name} {last_day}, {year}"


def _format_average(series: BucketedSeries, metric: Metric) -> str:
    average, _, _ = series_stats(series)
    return NOT_AVAILABLE if average is None else f"{average:.1f} {UNITS[metric]}"


def _format_peak(series: Optional[BucketedSeries], metric: Metric) -> str:
    if series is None:
        return NOT_AVAILABLE
    _, peak, label = series_stats(series)
    return NOT_AVAILABLE if peak is None else f"{label} ({peak:.1f} {UNITS[metric]})"


class ReportBuilder:
    """
    Lấy dữ liệu tháng của các channel, gom nhóm và dựng file PDF.
    """

    def __init__(self, telemetry: TelemetryService, chart_sizes: Optional[Dict[str, Tuple[int, int]]] = None):
        """
        Khởi tạo builder.

        Args:
            telemetry: TelemetryService dùng để lấy dữ liệu
            chart_sizes: Kích thước ảnh biểu đồ (mặc định từ report_config)
        """
        self.telemetry = telemetry
        self.chart_sizes = chart_sizes or CHART_SIZES

    async def _channel_series(self, channel: ChannelConfig, year: int, month: int):
        days_in_month = calendar.monthrange(year, month)[1]
        prefix = calendar.month_abbr[month]

        daily_ammonia, daily_temp, hourly_ammonia, hourly_temp = await asyncio.gather(
            self.telemetry.fetch_month_daily(channel, channel.ammonia_field, year, month),
            self.telemetry.fetch_month_daily(channel, channel.temp_field, year, month),
            self.telemetry.fetch_month_hourly(channel, channel.ammonia_field, year, month),
            self.telemetry.fetch_month_hourly(channel, channel.temp_field, year, month)
        )
        return {
            "monthly": {
                Metric.AMMONIA: aggregate_daily(daily_ammonia, days_in_month, prefix),
                Metric.TEMPERATURE: aggregate_daily(daily_temp, days_in_month, prefix),
            },
            "hourly": {
                Metric.AMMONIA: aggregate_hourly(hourly_ammonia),
                Metric.TEMPERATURE: aggregate_hourly(hourly_temp),
            }
        }

    async def _usable_series(self, channel: ChannelConfig, year: int, month: int) -> Optional[Dict]:
        try:
            return await self._channel_series(channel, year, month)
        except ConfigurationError as e:
            logger.warning(f"Skipping {channel.firestore_id} in report: {e.message}")
            return None

    async def collect(self, channels: List[ChannelConfig], year: int, month: int,
                      name: Optional[str] = None) -> ReportData:
        """
        Lấy và gom dữ liệu của tất cả channel có cảm biến.

        Raises:
            ReportGenerationError: Nếu không có channel có cảm biến, hoặc không
                có dữ liệu tháng cho amoniac hay nhiệt độ. Chuồng cấu hình sai
                bị bỏ qua; lỗi chỉ khi không còn chuồng nào dùng được
        """
        sensors = [c for c in channels if c.has_sensor]
        if not sensors:
            raise ReportGenerationError("No poultry house with an installed sensor was selected.")

        results = await asyncio.gather(*(self._usable_series(c, year, month) for c in sensors))
        per_channel = [series for series in results if series is not None]
        if not per_channel:
            raise ReportGenerationError(
                "None of the selected poultry houses has a usable sensor configuration.",
                details={"skipped": [c.firestore_id for c in sensors]}
            )

        monthly = {}
        hourly = {}
        for metric in Metric:
            monthly[metric] = merge_series([series["monthly"][metric] for series in per_channel])
            merged_hourly = merge_series([series["hourly"][metric] for series in per_channel])
            hourly[metric] = None if merged_hourly.is_empty else merged_hourly

        if monthly[Metric.AMMONIA].is_empty or monthly[Metric.TEMPERATURE].is_empty:
            logger.warning(f"No monthly data for {year}-{month:02d} across {len(sensors)} channels")
            raise ReportGenerationError(
                "No monthly data available.",
                details={"year": year, "month": month}
            )

        if name is None:
            name = sensors[0].branch if len(sensors) > 1 else sensors[0].name
        return ReportData(name=name, year=year, month=month, monthly=monthly, hourly=hourly)

    def compose(self, data: ReportData, table: ReportTableData) -> bytes:
        """
        Dựng file PDF hai trang từ dữ liệu đã gom.

        Trang 1: bảng thông tin, phân tích mô tả, biểu đồ tháng.
        Trang 2: biểu đồ trung bình theo giờ của từng đại lượng.
        """
        layout = ReportLayout()
        layout.new_page()

        monthly_png = {
            metric: rasterize(
                build_trend_chart(metric, data.monthly[metric], ChartTarget.STATIC),
                self.chart_sizes["report_monthly"]
            )
            for metric in Metric
        }

        y = layout.cursor
        left = layout.table(10, y, 90, "Poultry Information", [
            ("Name", table.name or data.name),
            ("Observation Period", observation_period(data.year, data.month)),
            ("Livestock Count", table.livestock_count),
            ("Livestock Age", table.livestock_age),
        ])
        right = layout.table(110, y, 80, "Environment Information", [
            ("Avg. Temperature Level", _format_average(data.monthly[Metric.TEMPERATURE], Metric.TEMPERATURE)),
            ("Avg. Ammonia Level", _format_average(data.monthly[Metric.AMMONIA], Metric.AMMONIA)),
            ("Peak Temperature Detected", _format_peak(data.hourly[Metric.TEMPERATURE], Metric.TEMPERATURE)),
            ("Peak Ammonia Detected", _format_peak(data.hourly[Metric.AMMONIA], Metric.AMMONIA)),
        ])
        layout.advance(max(left, right) + 6)

        layout.ensure_space(70)
        y = layout.cursor
        layout.labeled_box(10, y, 190, 70, "Descriptive Analysis")
        layout.paragraphs(12, y + 14, 186, table.paragraphs)
        layout.advance(76)

        layout.ensure_space(50)
        y = layout.cursor
        for x, metric in ((10, Metric.AMMONIA), (108, Metric.TEMPERATURE)):
            layout.labeled_box(x, y, 93, 50, metric.value.capitalize())
            layout.image(x + 1.5, y + 9, 90, 40, monthly_png[metric])
        layout.advance(56)

        self._discussion(layout, table.monthly_discussion)

        for metric, discussion in ((Metric.AMMONIA, table.ammonia_discussion),
                                   (Metric.TEMPERATURE, table.temperature_discussion)):
            layout.ensure_space(60)
            y = layout.cursor
            layout.labeled_box(10, y, 190, 60, f"{metric.value.capitalize()} Trend")
            series = data.hourly[metric]
            if series is not None:
                png = rasterize(
                    build_hourly_chart(metric, series, ChartTarget.STATIC),
                    self.chart_sizes["report_hourly"]
                )
                layout.image(15, y + 15, 180, 40, png)
            layout.advance(66)
            self._discussion(layout, discussion)

        return layout.save()

    def _discussion(self, layout: ReportLayout, text: str) -> None:
        layout.ensure_space(40)
        y = layout.cursor
        layout.labeled_box(10, y, 190, 40, "Discussion")
        if text:
            layout.paragraphs(12, y + 14, 186, [text])
        layout.advance(46)

    async def build(self, channels: List[ChannelConfig], year: int, month: int,
                    table: Optional[ReportTableData] = None) -> Tuple[str, bytes]:
        """
        Tạo báo cáo.

        Args:
            channels: Một channel hoặc toàn bộ channel của chi nhánh
            year: Năm
            month: Tháng (1-12)
            table: Thông tin bổ sung cho bảng và các đoạn văn

        Returns:
            (tên file, nội dung PDF)
        """
        table = table or ReportTableData()
        data = await self.collect(channels, year, month, name=table.name)
        pdf = await asyncio.to_thread(self.compose, data, table)
        filename = report_filename(data.name, year, month)
        logger.info(f"Generated report {filename} ({len(pdf)} bytes)")
        return filename, pdf
