"""
Cấu hình intervals cho các tác vụ định kỳ của dashboard.
"""
from typing import Dict, Optional

TASK_INTERVALS = {
    # Làm mới dữ liệu của channel đang được chọn
    "dashboard_poll": 30,
}

# Giới hạn tối thiểu cho mỗi loại task
MIN_INTERVALS = {
    "dashboard_poll": 5,
}

# Thiết bị được coi là offline nếu không gửi dữ liệu trong khoảng này (phút)
DEVICE_OFFLINE_AFTER_MINUTES = 15


def validate_interval(task_type: str, interval: int,
                      min_intervals: Optional[Dict[str, int]] = None) -> int:
    """
    Kiểm tra và điều chỉnh interval cho phù hợp với giới hạn tối thiểu.

    Args:
        task_type: Loại task
        interval: Giá trị interval mong muốn (giây)
        min_intervals: Bảng giới hạn tối thiểu (mặc định MIN_INTERVALS)

    Returns:
        Interval đã được điều chỉnh (nếu cần)
    """
    min_interval = (min_intervals or MIN_INTERVALS).get(task_type, 5)
    if interval < min_interval:
        return min_interval
    return interval
