"""
Models dữ liệu cho số đo cảm biến, chuỗi thời gian và cấu hình channel.
"""
import math
from typing import Dict, Any, Optional, List
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, Field, field_validator

class Metric(str, Enum):
    """Các đại lượng được giám sát."""
    AMMONIA = "ammonia"
    TEMPERATURE = "temperature"

class Status(str, Enum):
    """Trạng thái sau khi so với ngưỡng."""
    DANGER = "Danger"
    WARNING = "Warning"
    SAFE = "Safe"
    NOT_APPLICABLE = "N/A"

class DeviceStatus(str, Enum):
    """Trạng thái kết nối của thiết bị."""
    ONLINE = "Online"
    OFFLINE = "Offline"
    NO_DATA = "No Data"
    NOT_INSTALLED = "Not Installed"
    MISCONFIGURED = "Misconfigured"

class AlertType(str, Enum):
    """Loại cảnh báo được ghi nhận."""
    AMMONIA = "ammonia"
    TEMPERATURE = "temperature"
    BOTH = "both"
    INFO = "info"
    GENERAL = "general"

class Reading(BaseModel):
    """Một số đo của một field trong feed."""
    timestamp: datetime
    value: Optional[float] = None

    @field_validator('value', mode='before')
    @classmethod
    def drop_nan(cls, value):
        """NaN được lưu như "không có dữ liệu", không bao giờ là 0."""
        if value is not None and isinstance(value, float) and math.isnan(value):
            return None
        return value

    @property
    def is_valid(self) -> bool:
        return self.value is not None

class SeriesPoint(BaseModel):
    """Một ô (bucket) của chuỗi: nhãn và giá trị trung bình hoặc None."""
    label: str
    value: Optional[float] = None

class BucketedSeries(BaseModel):
    """Chuỗi theo thứ tự thời gian, mỗi ô lịch một điểm."""
    points: List[SeriesPoint] = Field(default_factory=list)

    @property
    def labels(self) -> List[str]:
        return [p.label for p in self.points]

    @property
    def values(self) -> List[Optional[float]]:
        return [p.value for p in self.points]

    @property
    def is_empty(self) -> bool:
        """True nếu không có ô nào có dữ liệu."""
        return all(p.value is None for p in self.points)

    def __len__(self) -> int:
        return len(self.points)

class ThresholdBand(BaseModel):
    """Ngưỡng nguy hiểm và cảnh báo của một đại lượng."""
    danger_high: float
    warn_high: float
    danger_low: Optional[float] = None
    warn_low: Optional[float] = None

class ChannelConfig(BaseModel):
    """Cấu hình một thiết bị (channel ThingSpeak) trong một chuồng."""
    branch: str
    firestore_id: str
    name: str = ""
    channel_id: Optional[str] = None
    read_api_key: Optional[str] = None
    ammonia_field: str = "field3"
    temp_field: str = "field1"
    has_sensor: bool = True

    def field_for(self, metric: Metric) -> str:
        """Lấy field selector tương ứng với đại lượng."""
        return self.ammonia_field if metric == Metric.AMMONIA else self.temp_field

class Alert(BaseModel):
    """Một lần vượt ngưỡng đã được ghi nhận."""
    type: str
    message: str = ""
    timestamp: Optional[datetime] = None
    branch: str
    firestore_id: str
    house_name: str = ""
    # Phần tử gốc trong mảng alerts, dùng khi xóa
    original_payload: Dict[str, Any] = Field(default_factory=dict)

    def concerns(self, metric: Metric) -> bool:
        """True nếu cảnh báo liên quan tới đại lượng (kể cả loại "both")."""
        return (self.type or "").lower() in (metric.value, AlertType.BOTH.value)

class LatestReadings(BaseModel):
    """Số đo mới nhất của một channel."""
    ammonia: Optional[float] = None
    temperature: Optional[float] = None
    timestamp: Optional[datetime] = None

class MetricReadings(BaseModel):
    """Số đo của cả hai đại lượng trong cùng một truy vấn feed."""
    ammonia: List[Reading] = Field(default_factory=list)
    temperature: List[Reading] = Field(default_factory=list)

    def for_metric(self, metric: Metric) -> List[Reading]:
        return self.ammonia if metric == Metric.AMMONIA else self.temperature
