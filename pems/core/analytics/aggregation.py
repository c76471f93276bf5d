"""
Gom nhóm số đo theo giờ trong ngày hoặc theo ngày trong tháng.

Mọi hàm ở đây là hàm thuần: không sửa dữ liệu đầu vào và luôn trả về
chuỗi đủ độ dài, ô không có dữ liệu mang giá trị None.
"""
import math
from datetime import timezone
from typing import Iterable, List, Optional, Sequence, Tuple

from pems.core.data.models import BucketedSeries, Reading, SeriesPoint

HOURS_PER_DAY = 24
DECIMALS = 2


def hour_label(hour: int) -> str:
    return f"{hour:02d}:00"


def _valid(value: Optional[float]) -> bool:
    return value is not None and not math.isnan(value)


def _mean(values: Sequence[float]) -> Optional[float]:
    """Trung bình các giá trị hợp lệ, chia cho số phần tử hợp lệ."""
    valid = [v for v in values if _valid(v)]
    if not valid:
        return None
    return round(sum(valid) / len(valid), DECIMALS)


def _utc_hour(reading: Reading) -> int:
    ts = reading.timestamp
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).hour


def aggregate_hourly(readings: Iterable[Reading]) -> BucketedSeries:
    """
    Gom số đo theo giờ UTC (0-23) và lấy trung bình mỗi giờ.

    Args:
        readings: Danh sách số đo thô hoặc đã được trung bình theo giờ

    Returns:
        BucketedSeries gồm đúng 24 điểm, nhãn "00:00".."23:00"
    """
    buckets: List[List[float]] = [[] for _ in range(HOURS_PER_DAY)]
    for reading in readings:
        if _valid(reading.value):
            buckets[_utc_hour(reading)].append(reading.value)

    return BucketedSeries(points=[
        SeriesPoint(label=hour_label(hour), value=_mean(values))
        for hour, values in enumerate(buckets)
    ])


def aggregate_daily(readings: Iterable[Reading], days_in_month: int,
                    label_prefix: Optional[str] = None) -> BucketedSeries:
    """
    Gom số đo theo ngày trong tháng.

    Ngày của số đo được lấy theo múi giờ của chính timestamp (ThingSpeak trả
    về timestamp kèm offset của múi giờ đã yêu cầu).

    Args:
        readings: Danh sách số đo trong tháng
        days_in_month: Số ngày của tháng
        label_prefix: Tiền tố nhãn, ví dụ "May" cho nhãn "May 01"

    Returns:
        BucketedSeries gồm đúng days_in_month điểm theo thứ tự ngày
    """
    if days_in_month < 1:
        raise ValueError(f"days_in_month must be positive, got {days_in_month}")

    buckets: List[List[float]] = [[] for _ in range(days_in_month)]
    for reading in readings:
        day = reading.timestamp.day
        if _valid(reading.value) and 1 <= day <= days_in_month:
            buckets[day - 1].append(reading.value)

    def label(day: int) -> str:
        return f"{label_prefix} {day:02d}" if label_prefix else str(day)

    return BucketedSeries(points=[
        SeriesPoint(label=label(index + 1), value=_mean(values))
        for index, values in enumerate(buckets)
    ])


def merge_series(series_list: Sequence[BucketedSeries]) -> BucketedSeries:
    """
    Gộp chuỗi của nhiều thiết bị (toàn chi nhánh).

    Mỗi ô là trung bình các giá trị khác None của các thiết bị; ô chỉ là None
    khi mọi thiết bị đều không có dữ liệu ở ô đó.

    Args:
        series_list: Chuỗi đã gom của từng thiết bị, cùng độ dài và nhãn

    Returns:
        BucketedSeries đã gộp
    """
    if not series_list:
        raise ValueError("merge_series needs at least one series")

    length = len(series_list[0])
    if any(len(series) != length for series in series_list):
        raise ValueError("All series must have the same number of buckets")

    labels = series_list[0].labels
    return BucketedSeries(points=[
        SeriesPoint(
            label=labels[index],
            value=_mean([series.points[index].value for series in series_list])
        )
        for index in range(length)
    ])


def series_stats(series: BucketedSeries) -> Tuple[Optional[float], Optional[float], Optional[str]]:
    """
    Tính trung bình và giá trị đỉnh của một chuỗi.

    Returns:
        (trung bình, giá trị đỉnh, nhãn của ô đỉnh), đều là None nếu chuỗi rỗng
    """
    present = [p for p in series.points if p.value is not None]
    if not present:
        return None, None, None
    peak = max(present, key=lambda p: p.value)
    return _mean([p.value for p in present]), peak.value, peak.label
