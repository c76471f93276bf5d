from .aggregation import aggregate_hourly, aggregate_daily, merge_series, series_stats
from .classifier import (
    AMMONIA_BAND,
    TEMPERATURE_BAND,
    classify,
    classify_metric,
    overview_status,
    device_status,
    build_health_overview
)
from .summary import performance_summary, PerformanceSummary
from .advice import prescriptive_advice, Advice

__all__ = [
    "aggregate_hourly",
    "aggregate_daily",
    "merge_series",
    "series_stats",
    "AMMONIA_BAND",
    "TEMPERATURE_BAND",
    "classify",
    "classify_metric",
    "overview_status",
    "device_status",
    "build_health_overview",
    "performance_summary",
    "PerformanceSummary",
    "prescriptive_advice",
    "Advice"
]
