"""
Tổng kết trong ngày: giá trị cao nhất và thấp nhất của mỗi đại lượng.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from pems.core.data.models import Reading

TIME_FORMAT = "%I:%M %p"
NO_TIME = "--"


class Extreme(BaseModel):
    """Một giá trị cực trị đã được định dạng để hiển thị."""
    value: str
    time: str = NO_TIME


class PerformanceSummary(BaseModel):
    highest_ammonia: Extreme = Field(default_factory=lambda: Extreme(value="-- ppm"))
    lowest_ammonia: Extreme = Field(default_factory=lambda: Extreme(value="-- ppm"))
    highest_temperature: Extreme = Field(default_factory=lambda: Extreme(value="-- °C"))
    lowest_temperature: Extreme = Field(default_factory=lambda: Extreme(value="-- °C"))


def format_value(value: Optional[float], unit: str) -> str:
    """Định dạng một số đo với một chữ số thập phân, "--" nếu không có."""
    if value is None:
        return f"-- {unit}"
    return f"{value:.1f} {unit}"


def _extremes(readings: List[Reading], unit: str):
    valid = [r for r in readings if r.is_valid]
    if not valid:
        return Extreme(value=format_value(None, unit)), Extreme(value=format_value(None, unit))

    # Giữ lần xuất hiện đầu tiên khi có nhiều giá trị bằng nhau
    highest = valid[0]
    lowest = valid[0]
    for reading in valid[1:]:
        if reading.value > highest.value:
            highest = reading
        if reading.value < lowest.value:
            lowest = reading

    return (
        Extreme(value=format_value(highest.value, unit), time=highest.timestamp.strftime(TIME_FORMAT)),
        Extreme(value=format_value(lowest.value, unit), time=lowest.timestamp.strftime(TIME_FORMAT))
    )


def performance_summary(ammonia: List[Reading], temperature: List[Reading]) -> PerformanceSummary:
    """
    Tính tổng kết trong ngày từ các số đo của hai đại lượng.

    Args:
        ammonia: Số đo amoniac trong ngày
        temperature: Số đo nhiệt độ trong ngày

    Returns:
        PerformanceSummary, các ô không có dữ liệu giữ giá trị mặc định
    """
    highest_ammonia, lowest_ammonia = _extremes(ammonia, "ppm")
    highest_temp, lowest_temp = _extremes(temperature, "°C")
    return PerformanceSummary(
        highest_ammonia=highest_ammonia,
        lowest_ammonia=lowest_ammonia,
        highest_temperature=highest_temp,
        lowest_temperature=lowest_temp
    )
