"""
Lớp lấy dữ liệu telemetry: dựng truy vấn ThingSpeak theo cửa sổ thời gian
và chuẩn hóa phản hồi thành danh sách Reading.

Lỗi mạng hoặc HTTP không bao giờ được ném ra ngoài: truy vấn "N ngày" trả về
danh sách rỗng, truy vấn theo tháng trả về đủ số ngày với giá trị None.
Chỉ lỗi cấu hình (channel chưa có cảm biến, field không hợp lệ) mới raise.
"""
import calendar
import logging
import math
import re
from datetime import date, datetime, time, timezone
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from pems.adapters.cloud.thingspeak import ThingSpeakClient
from pems.core.data.models import ChannelConfig, LatestReadings, Metric, MetricReadings, Reading
from pems.infrastructure.exceptions import ConfigurationError, SensorNotInstalledError

logger = logging.getLogger(__name__)

FIELD_PATTERN = re.compile(r"^field([1-8])$")
THINGSPEAK_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def field_number(field: str) -> int:
    """
    Chuyển field selector ("field3") thành số thứ tự field.

    Raises:
        ConfigurationError: Nếu field selector không hợp lệ
    """
    match = FIELD_PATTERN.match(str(field or "").strip())
    if not match:
        raise ConfigurationError(f"Invalid field configuration: {field!r}", details={"field": field})
    return int(match.group(1))


def parse_timestamp(raw: Any) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparsable ThingSpeak timestamp: {raw!r}")
        return None


def parse_value(raw: Any) -> Optional[float]:
    """Chuyển giá trị field thành float, None nếu rỗng, không parse được hoặc NaN."""
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_feeds(payload: Optional[Dict[str, Any]], field: str) -> List[Reading]:
    """
    Lấy các số đo hợp lệ của một field từ phản hồi ThingSpeak.

    Args:
        payload: JSON dạng {"feeds": [{"created_at": ..., "fieldN": ...}, ...]}
        field: Tên field, ví dụ "field3"

    Returns:
        Danh sách Reading, đã loại bỏ giá trị không hợp lệ
    """
    readings = []
    for feed in (payload or {}).get("feeds") or []:
        timestamp = parse_timestamp(feed.get("created_at"))
        value = parse_value(feed.get(field))
        if timestamp is not None and value is not None:
            readings.append(Reading(timestamp=timestamp, value=value))
    return readings


class TelemetryService:
    """
    Truy vấn dữ liệu của một channel theo các cửa sổ thời gian khác nhau.
    """

    def __init__(self, client: ThingSpeakClient, config: Optional[Dict[str, Any]] = None):
        """
        Khởi tạo service.

        Args:
            client: ThingSpeakClient dùng chung
            config: Cấu hình 'thingspeak' từ ConfigLoader
        """
        self.client = client
        self.config = config or {}
        self.tz = ZoneInfo(self.config.get("timezone", "Asia/Manila"))
        self.results_cap = self.config.get("results_cap", 8000)
        self.average_by_days = self.config.get("average_by_days", {1: 10, 7: 60})
        self.average_long_window = self.config.get("average_long_window", 1440)

    def _require_sensor(self, channel: ChannelConfig) -> None:
        if not channel.has_sensor:
            raise SensorNotInstalledError(
                f"No sensor installed for {channel.name or channel.firestore_id}",
                firestore_id=channel.firestore_id
            )
        if not channel.channel_id:
            raise ConfigurationError(
                f"Channel {channel.firestore_id} has no ThingSpeak channel id",
                details={"firestore_id": channel.firestore_id}
            )

    def average_for_days(self, days: int) -> int:
        """Khoảng trung bình phía server (phút) theo số ngày của cửa sổ."""
        for limit in sorted(self.average_by_days):
            if days <= limit:
                return self.average_by_days[limit]
        return self.average_long_window

    async def fetch_recent(self, channel: ChannelConfig, field: str, days: int,
                           averaged: bool = True) -> List[Reading]:
        """
        Lấy số đo của N ngày gần nhất.

        Args:
            channel: Cấu hình channel
            field: Field selector
            days: Số ngày
            averaged: Yêu cầu ThingSpeak trung bình trước theo số ngày

        Returns:
            Danh sách Reading (rỗng nếu lỗi)
        """
        self._require_sensor(channel)
        number = field_number(field)

        params = {"days": days, "results": self.results_cap}
        if averaged:
            params["average"] = self.average_for_days(days)

        payload = await self.client.fetch_field_feed(
            channel.channel_id, number, channel.read_api_key, **params
        )
        readings = parse_feeds(payload, field)
        logger.debug(f"Fetched {len(readings)} readings of {field} for channel {channel.channel_id}")
        return readings

    def month_days(self, year: int, month: int) -> List[date]:
        days_in_month = calendar.monthrange(year, month)[1]
        return [date(year, month, day) for day in range(1, days_in_month + 1)]

    def densify_month(self, readings: List[Reading], year: int, month: int) -> List[Reading]:
        """
        Trả về đúng một Reading cho mỗi ngày trong tháng, None cho ngày không có dữ liệu.

        Ngày của số đo được xét theo múi giờ báo cáo.
        """
        by_day: Dict[date, List[float]] = {}
        for reading in readings:
            ts = reading.timestamp
            if ts.tzinfo is None:
                ts = ts.replace(tzinfo=self.tz)
            by_day.setdefault(ts.astimezone(self.tz).date(), []).append(reading.value)

        dense = []
        for day in self.month_days(year, month):
            values = [v for v in by_day.get(day, []) if v is not None]
            value = round(sum(values) / len(values), 2) if values else None
            dense.append(Reading(
                timestamp=datetime.combine(day, time.min, tzinfo=self.tz),
                value=value
            ))
        return dense

    async def fetch_month_daily(self, channel: ChannelConfig, field: str,
                                year: int, month: int) -> List[Reading]:
        """
        Lấy trung bình theo ngày của một tháng, đã được lấp đầy.

        Returns:
            Danh sách đúng bằng số ngày của tháng (toàn None nếu lỗi)
        """
        self._require_sensor(channel)
        number = field_number(field)
        days = self.month_days(year, month)

        payload = await self.client.fetch_field_feed(
            channel.channel_id, number, channel.read_api_key,
            start=datetime.combine(days[0], time.min).strftime(THINGSPEAK_TIME_FORMAT),
            end=datetime.combine(days[-1], time(23, 59, 59)).strftime(THINGSPEAK_TIME_FORMAT),
            timezone=str(self.tz),
            average=self.config.get("monthly_daily_average", 1440)
        )
        return self.densify_month(parse_feeds(payload, field), year, month)

    async def fetch_month_hourly(self, channel: ChannelConfig, field: str,
                                 year: int, month: int) -> List[Reading]:
        """Lấy trung bình theo giờ của cả tháng (cửa sổ UTC)."""
        self._require_sensor(channel)
        number = field_number(field)
        days = self.month_days(year, month)

        payload = await self.client.fetch_field_feed(
            channel.channel_id, number, channel.read_api_key,
            start=datetime.combine(days[0], time.min).strftime(THINGSPEAK_TIME_FORMAT),
            end=datetime.combine(days[-1], time(23, 59, 59)).strftime(THINGSPEAK_TIME_FORMAT),
            timezone="UTC",
            average=self.config.get("monthly_hourly_average", 60),
            results=self.results_cap
        )
        return parse_feeds(payload, field)

    def _split_metrics(self, channel: ChannelConfig,
                       payload: Optional[Dict[str, Any]]) -> MetricReadings:
        return MetricReadings(
            ammonia=parse_feeds(payload, channel.field_for(Metric.AMMONIA)),
            temperature=parse_feeds(payload, channel.field_for(Metric.TEMPERATURE))
        )

    async def fetch_recent_feed(self, channel: ChannelConfig, results: Optional[int] = None) -> MetricReadings:
        """Lấy N bản ghi gần nhất của channel (biểu đồ mini)."""
        self._require_sensor(channel)
        for metric in Metric:
            field_number(channel.field_for(metric))

        payload = await self.client.fetch_channel_feeds(
            channel.channel_id, channel.read_api_key,
            results=results or self.config.get("mini_chart_results", 48)
        )
        return self._split_metrics(channel, payload)

    async def fetch_today(self, channel: ChannelConfig, now: Optional[datetime] = None) -> MetricReadings:
        """
        Lấy toàn bộ bản ghi trong ngày hiện tại theo múi giờ báo cáo.
        """
        self._require_sensor(channel)
        now = (now or datetime.now(timezone.utc)).astimezone(self.tz)
        today = now.date()

        payload = await self.client.fetch_channel_feeds(
            channel.channel_id, channel.read_api_key,
            start=datetime.combine(today, time.min).strftime(THINGSPEAK_TIME_FORMAT),
            end=datetime.combine(today, time(23, 59, 59)).strftime(THINGSPEAK_TIME_FORMAT),
            timezone=str(self.tz)
        )
        return self._split_metrics(channel, payload)

    async def fetch_latest(self, channel: ChannelConfig) -> LatestReadings:
        """Lấy số đo mới nhất của cả hai đại lượng (None nếu lỗi)."""
        self._require_sensor(channel)
        entry = await self.client.fetch_last_entry(channel.channel_id, channel.read_api_key)
        if not entry:
            return LatestReadings()

        return LatestReadings(
            ammonia=parse_value(entry.get(channel.field_for(Metric.AMMONIA))),
            temperature=parse_value(entry.get(channel.field_for(Metric.TEMPERATURE))),
            timestamp=parse_timestamp(entry.get("created_at"))
        )
