"""
Dựng dữ liệu cho dashboard: số đo mới nhất, trạng thái, biểu đồ mini,
tổng kết trong ngày và bảng tổng quan của chi nhánh.
"""
import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from config.report_config import CHART_SIZES
from config.thresholds_config import DISPLAY_RANGES
from pems.core.analytics.classifier import (
    HealthOverview,
    build_health_overview,
    classify_metric,
    device_status
)
from pems.core.analytics.summary import performance_summary
from pems.core.charts.renderer import ChartRenderer
from pems.core.charts.specs import build_mini_chart
from pems.core.data.models import ChannelConfig, DeviceStatus, LatestReadings, Metric
from pems.core.data.telemetry_service import TelemetryService
from pems.core.monitoring.state import DashboardSnapshot, DashboardState, SelectionToken
from pems.infrastructure.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class DashboardService:
    """
    Tổng hợp dữ liệu dashboard từ Firestore và ThingSpeak.
    """

    def __init__(self, telemetry: TelemetryService, channels, alerts,
                 renderer: Optional[ChartRenderer] = None, state: Optional[DashboardState] = None,
                 offline_after: timedelta = timedelta(minutes=15)):
        """
        Khởi tạo service.

        Args:
            telemetry: TelemetryService
            channels: ChannelRepository
            alerts: AlertRepository
            renderer: ChartRenderer giữ figure của biểu đồ mini
            state: Trạng thái dashboard dùng chung
            offline_after: Ngưỡng coi thiết bị là offline
        """
        self.telemetry = telemetry
        self.channels = channels
        self.alerts = alerts
        self.renderer = renderer or ChartRenderer()
        self.state = state or DashboardState()
        self.offline_after = offline_after

    async def get_channel(self, branch: str, firestore_id: str) -> ChannelConfig:
        return await asyncio.to_thread(self.channels.get_channel, branch, firestore_id)

    def status_of(self, channel: ChannelConfig, latest: LatestReadings,
                  now: Optional[datetime] = None) -> DeviceStatus:
        now = now or datetime.now(timezone.utc)
        last_seen = latest.timestamp
        if last_seen is not None and last_seen.tzinfo is None:
            last_seen = last_seen.replace(tzinfo=timezone.utc)
        return device_status(channel, last_seen, now, self.offline_after)

    async def latest(self, channel: ChannelConfig) -> Dict:
        """Số đo mới nhất kèm trạng thái theo ngưỡng."""
        if not channel.has_sensor:
            return {"state": "no_sensor", "firestore_id": channel.firestore_id}

        latest = await self.telemetry.fetch_latest(channel)
        return {
            "state": "ok",
            "firestore_id": channel.firestore_id,
            "latest": latest,
            "ammonia_status": classify_metric(latest.ammonia, Metric.AMMONIA),
            "temp_status": classify_metric(latest.temperature, Metric.TEMPERATURE),
            "device_status": self.status_of(channel, latest),
            "display_ranges": DISPLAY_RANGES
        }

    async def build_snapshot(self, token: SelectionToken) -> DashboardSnapshot:
        """
        Dựng snapshot cho lựa chọn của token.

        Các truy vấn độc lập được chạy đồng thời; mỗi truy vấn tự trả về giá
        trị rỗng khi lỗi nên một truy vấn hỏng không ảnh hưởng truy vấn khác.
        """
        channel = await self.get_channel(token.branch, token.firestore_id)
        if not channel.has_sensor:
            return DashboardSnapshot(
                branch=channel.branch,
                firestore_id=channel.firestore_id,
                name=channel.name,
                state="no_sensor",
                device_status=DeviceStatus.NOT_INSTALLED,
                refreshed_at=datetime.now(timezone.utc)
            )

        latest, recent, today = await asyncio.gather(
            self.telemetry.fetch_latest(channel),
            self.telemetry.fetch_recent_feed(channel),
            self.telemetry.fetch_today(channel)
        )

        mini_charts = {}
        for metric in Metric:
            spec = build_mini_chart(metric, recent.for_metric(metric), self.telemetry.tz)
            slot = f"mini.{metric.value}"
            image = await asyncio.to_thread(self.renderer.render_data_url, slot, spec, CHART_SIZES["mini"])
            mini_charts[metric.value] = {"spec": spec.model_dump(mode="json"), "image": image}

        return DashboardSnapshot(
            branch=channel.branch,
            firestore_id=channel.firestore_id,
            name=channel.name,
            latest=latest,
            ammonia_status=classify_metric(latest.ammonia, Metric.AMMONIA),
            temp_status=classify_metric(latest.temperature, Metric.TEMPERATURE),
            device_status=self.status_of(channel, latest),
            summary=performance_summary(today.ammonia, today.temperature),
            mini_charts=mini_charts,
            display_ranges=DISPLAY_RANGES,
            refreshed_at=datetime.now(timezone.utc)
        )

    async def _overview_status(self, channel: ChannelConfig, now: datetime) -> DeviceStatus:
        # Chuồng cấu hình sai chỉ ảnh hưởng dòng của chính nó
        try:
            latest = await self.telemetry.fetch_latest(channel)
        except ConfigurationError as e:
            logger.warning(f"Skipping status of {channel.firestore_id}: {e.message}")
            return DeviceStatus.MISCONFIGURED
        return self.status_of(channel, latest, now)

    async def health_overview(self, branch: str) -> HealthOverview:
        """
        Bảng sức khỏe của mọi chuồng trong chi nhánh.

        Trạng thái amoniac/nhiệt độ dựa trên việc có cảnh báo hay không,
        không dựa trên số đo hiện tại.
        """
        channels, alerts = await asyncio.gather(
            asyncio.to_thread(self.channels.list_channels, branch),
            asyncio.to_thread(self.alerts.list_alerts, branch)
        )

        sensors = [c for c in channels if c.has_sensor]
        now = datetime.now(timezone.utc)
        statuses = await asyncio.gather(*(self._overview_status(c, now) for c in sensors))
        statuses = {channel.firestore_id: s for channel, s in zip(sensors, statuses)}
        return build_health_overview(channels, alerts, statuses)
