"""
Cấu hình cho ThingSpeak REST API.
"""
import os

THINGSPEAK_CONFIG = {
    "base_url": os.getenv("THINGSPEAK_BASE_URL", "https://api.thingspeak.com"),
    "timeout": 15,
    "max_tries": 3,

    # Số bản ghi tối đa cho truy vấn "N ngày gần nhất"
    "results_cap": 8000,

    # Số bản ghi cho biểu đồ mini trên dashboard
    "mini_chart_results": 48,

    # Khoảng trung bình phía server (phút) theo số ngày
    "average_by_days": {
        1: 10,
        7: 60,
    },
    "average_long_window": 1440,

    # Trung bình cho truy vấn theo tháng
    "monthly_daily_average": 1440,
    "monthly_hourly_average": 60,
}

# Field mặc định khi channel không khai báo
DEFAULT_FIELDS = {
    "ammonia": "field3",
    "temperature": "field1",
}

# Múi giờ cố định cho truy vấn theo tháng
REPORT_TIMEZONE = os.getenv("REPORT_TIMEZONE", "Asia/Manila")
