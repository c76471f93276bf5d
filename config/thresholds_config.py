"""
Ngưỡng cảnh báo cho amoniac và nhiệt độ.
"""

# Ngưỡng cảnh báo (so sánh chặt, giá trị phải vượt qua ngưỡng)
THRESHOLD_BANDS = {
    "ammonia": {
        "danger_high": 25,
        "warn_high": 10,
    },
    "temperature": {
        "danger_high": 28,
        "danger_low": 20,
        "warn_high": 26,
        "warn_low": 22,
    },
}

# Văn bản hiển thị trên dashboard
DISPLAY_RANGES = {
    "ammonia": "Normal Range: 0-20ppm",
    "temperature": "Ideal Range: 20-28°C",
}

# Mức amoniac "lý tưởng" trong văn bản khuyến nghị (khác với warn_high = 10)
AMMONIA_ADVICE_IDEAL_PPM = (15, 20)

# Giới hạn trục Y của biểu đồ
Y_AXIS_POLICY = {
    "ammonia": {
        "min": 0,
        "low_ceiling": 1,
        "ceiling": 30,
    },
    "temperature": {
        "min": 10,
        "max": 40,
    },
}
