"""
Cấu hình bố cục báo cáo PDF và kích thước ảnh biểu đồ.
"""

# Kích thước ảnh biểu đồ (pixel)
CHART_SIZES = {
    "inline": (600, 300),
    "report_monthly": (600, 300),
    "report_hourly": (1500, 400),
    "mini": (300, 120),
}

REPORT_LAYOUT = {
    "page_size_mm": (210, 297),
    "bottom_margin_mm": 10,
    "content_top_mm": 45,
    "title": "PEMS Report",
    "subtitle": "Descriptive Analysis of Ammonia & Temperature Sensor Data",
    "author": "PEMS System",
    "label_fill": (144, 238, 144),
    "border_color": (204, 255, 204),
    "label_height_mm": 8,
    "paragraph_font_size": 10,
    "line_height_factor": 1.4,
}

# Đoạn văn mặc định của phần "Descriptive Analysis"
DEFAULT_PARAGRAPHS = (
    "Over the analyzed period, sensor data was collected. Specific trends in ammonia "
    "and temperature levels are detailed in the charts above.",
    "Average concentrations and peak times provide insights into the environmental "
    "conditions within the poultry house. Further analysis may be required to correlate "
    "these with external factors or operational changes.",
    "Continuous monitoring is recommended to ensure optimal conditions and timely "
    "intervention if parameters deviate from desired ranges.",
)
