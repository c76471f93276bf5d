"""
Phân loại trạng thái theo ngưỡng và tổng hợp sức khỏe của chi nhánh.

Có hai quy tắc độc lập:
- classify: so một số đo với ngưỡng (badge trực tiếp trên dashboard).
- overview_status: dựa trên việc có cảnh báo hay không (bảng tổng quan).
"""
import logging
import math
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from config.thresholds_config import THRESHOLD_BANDS
from pems.core.data.models import (
    Alert,
    ChannelConfig,
    DeviceStatus,
    Metric,
    Status,
    ThresholdBand
)

logger = logging.getLogger(__name__)

AMMONIA_BAND = ThresholdBand(**THRESHOLD_BANDS["ammonia"])
TEMPERATURE_BAND = ThresholdBand(**THRESHOLD_BANDS["temperature"])

BANDS = {
    Metric.AMMONIA: AMMONIA_BAND,
    Metric.TEMPERATURE: TEMPERATURE_BAND,
}


def classify(value: Optional[float], band: ThresholdBand) -> Status:
    """
    So một số đo với ngưỡng. Các phép so sánh đều chặt (giá trị phải vượt ngưỡng).

    Args:
        value: Số đo (None hoặc NaN nếu không có)
        band: Ngưỡng của đại lượng

    Returns:
        Status tương ứng; mức nguy hiểm luôn được kiểm tra trước mức cảnh báo
    """
    if value is None or math.isnan(value):
        return Status.NOT_APPLICABLE

    if value > band.danger_high or (band.danger_low is not None and value < band.danger_low):
        return Status.DANGER

    if value > band.warn_high or (band.warn_low is not None and value < band.warn_low):
        return Status.WARNING

    return Status.SAFE


def classify_metric(value: Optional[float], metric: Metric) -> Status:
    return classify(value, BANDS[metric])


def overview_status(channel: ChannelConfig, alerts: Iterable[Alert], metric: Metric) -> Status:
    """Warning nếu channel có bất kỳ cảnh báo nào của đại lượng, ngược lại Safe."""
    if not channel.has_sensor:
        return Status.NOT_APPLICABLE

    for alert in alerts:
        if alert.firestore_id == channel.firestore_id and alert.concerns(metric):
            return Status.WARNING
    return Status.SAFE


def device_status(channel: ChannelConfig, last_seen: Optional[datetime], now: datetime,
                  offline_after: timedelta = timedelta(minutes=15)) -> DeviceStatus:
    """
    Xác định trạng thái kết nối từ thời điểm gửi dữ liệu gần nhất.

    Args:
        channel: Cấu hình channel
        last_seen: Thời điểm của bản ghi mới nhất (None nếu chưa từng có)
        now: Thời điểm hiện tại (cùng kiểu aware/naive với last_seen)
        offline_after: Quá khoảng này thì coi là offline

    Returns:
        DeviceStatus
    """
    if not channel.has_sensor:
        return DeviceStatus.NOT_INSTALLED
    if last_seen is None:
        return DeviceStatus.NO_DATA
    if now - last_seen <= offline_after:
        return DeviceStatus.ONLINE
    return DeviceStatus.OFFLINE


class HealthRow(BaseModel):
    """Một dòng trong bảng tổng quan sức khỏe của chi nhánh."""
    firestore_id: str
    name: str
    branch: str
    has_sensor: bool
    ammonia_status: Status
    temp_status: Status
    device_status: DeviceStatus


class HealthOverview(BaseModel):
    rows: List[HealthRow]
    online_count: int
    total_count: int
    overall_health: Status


def build_health_overview(channels: List[ChannelConfig], alerts: List[Alert],
                          device_statuses: Dict[str, DeviceStatus]) -> HealthOverview:
    """
    Tổng hợp bảng sức khỏe cho các chuồng của một chi nhánh.

    Args:
        channels: Các channel thuộc chi nhánh
        alerts: Danh sách cảnh báo hiện tại
        device_statuses: Trạng thái kết nối theo firestore_id

    Returns:
        HealthOverview với các dòng sắp xếp theo tên
    """
    rows = []
    for channel in channels:
        if channel.has_sensor:
            status = device_statuses.get(channel.firestore_id, DeviceStatus.NO_DATA)
        else:
            status = DeviceStatus.NOT_INSTALLED
        rows.append(HealthRow(
            firestore_id=channel.firestore_id,
            name=channel.name,
            branch=channel.branch,
            has_sensor=channel.has_sensor,
            ammonia_status=overview_status(channel, alerts, Metric.AMMONIA),
            temp_status=overview_status(channel, alerts, Metric.TEMPERATURE),
            device_status=status
        ))

    rows.sort(key=lambda row: row.name.lower())
    has_warning = any(
        Status.WARNING in (row.ammonia_status, row.temp_status) for row in rows
    )

    return HealthOverview(
        rows=rows,
        online_count=sum(1 for row in rows if row.device_status == DeviceStatus.ONLINE),
        total_count=len(rows),
        overall_health=Status.WARNING if has_warning else Status.SAFE
    )
