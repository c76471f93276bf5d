from .specs import (
    ChartSpec,
    ChartTarget,
    ChartType,
    Dataset,
    AxisBounds,
    y_axis_bounds,
    build_trend_chart,
    build_hourly_chart,
    build_mini_chart
)
from .renderer import ChartRenderer, rasterize, rasterize_data_url
from .chart_service import ChartService

__all__ = [
    "ChartSpec",
    "ChartTarget",
    "ChartType",
    "Dataset",
    "AxisBounds",
    "y_axis_bounds",
    "build_trend_chart",
    "build_hourly_chart",
    "build_mini_chart",
    "ChartRenderer",
    "rasterize",
    "rasterize_data_url",
    "ChartService"
]
