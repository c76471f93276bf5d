from .models import (
    Metric,
    Status,
    DeviceStatus,
    AlertType,
    Reading,
    SeriesPoint,
    BucketedSeries,
    ThresholdBand,
    ChannelConfig,
    Alert,
    LatestReadings,
    MetricReadings
)

__all__ = [
    "Metric",
    "Status",
    "DeviceStatus",
    "AlertType",
    "Reading",
    "SeriesPoint",
    "BucketedSeries",
    "ThresholdBand",
    "ChannelConfig",
    "Alert",
    "LatestReadings",
    "MetricReadings"
]
