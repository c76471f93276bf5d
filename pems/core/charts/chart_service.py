"""
Biểu đồ cho trang phân tích: xu hướng N ngày, trung bình theo giờ, trung bình theo ngày của tháng.
"""
import asyncio
import calendar
import logging
from typing import Any, Dict

from config.report_config import CHART_SIZES
from pems.core.analytics.aggregation import aggregate_daily, aggregate_hourly
from pems.core.charts.renderer import ChartRenderer
from pems.core.charts.specs import ChartSpec, build_hourly_chart, build_trend_chart
from pems.core.data.models import BucketedSeries, ChannelConfig, Metric, SeriesPoint
from pems.core.data.telemetry_service import TelemetryService

logger = logging.getLogger(__name__)


class ChartService:

    def __init__(self, telemetry: TelemetryService, renderer: ChartRenderer):
        self.telemetry = telemetry
        self.renderer = renderer

    async def _output(self, slot: str, spec: ChartSpec) -> Dict[str, Any]:
        image = await asyncio.to_thread(self.renderer.render_data_url, slot, spec, CHART_SIZES["inline"])
        return {"spec": spec.model_dump(mode="json"), "image": image}

    async def trend(self, channel: ChannelConfig, metric: Metric, days: int = 1) -> Dict[str, Any]:
        """Biểu đồ đường các số đo (đã trung bình phía server) của N ngày gần nhất."""
        readings = await self.telemetry.fetch_recent(channel, channel.field_for(metric), days)
        time_format = "%H:%M" if days <= 1 else "%b %d %H:%M"
        series = BucketedSeries(points=[
            SeriesPoint(label=r.timestamp.astimezone(self.telemetry.tz).strftime(time_format), value=r.value)
            for r in readings
        ])
        title = "Daily Trend" if days <= 1 else f"Last {days} Days"
        return await self._output(f"analytics.trend.{metric.value}", build_trend_chart(metric, series, title=title))

    async def hourly(self, channel: ChannelConfig, metric: Metric, days: int = 1) -> Dict[str, Any]:
        """Biểu đồ cột trung bình theo giờ UTC từ số đo thô."""
        readings = await self.telemetry.fetch_recent(channel, channel.field_for(metric), days, averaged=False)
        series = aggregate_hourly(readings)
        return await self._output(f"analytics.hourly.{metric.value}", build_hourly_chart(metric, series))

    async def insights(self, channel: ChannelConfig, year: int, month: int) -> Dict[str, Any]:
        """Trung bình theo ngày của cả tháng cho hai đại lượng."""
        days_in_month = calendar.monthrange(year, month)[1]
        ammonia, temperature = await asyncio.gather(
            self.telemetry.fetch_month_daily(channel, channel.ammonia_field, year, month),
            self.telemetry.fetch_month_daily(channel, channel.temp_field, year, month)
        )

        prefix = calendar.month_abbr[month]
        charts = {}
        for metric, readings in ((Metric.AMMONIA, ammonia), (Metric.TEMPERATURE, temperature)):
            series = aggregate_daily(readings, days_in_month, prefix)
            charts[metric.value] = await self._output(
                f"analytics.insights.{metric.value}", build_trend_chart(metric, series)
            )
        return charts
