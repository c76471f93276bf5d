"""
Trạng thái của dashboard: chuồng đang được chọn và dữ liệu đang hiển thị.

Mỗi lần đổi lựa chọn, bộ đếm thế hệ (generation) tăng lên. Kết quả của một
truy vấn chỉ được ghi vào trạng thái nếu token của nó vẫn thuộc thế hệ hiện tại,
nhờ vậy phản hồi đến muộn của lựa chọn cũ không ghi đè lựa chọn mới.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from pems.core.analytics.summary import PerformanceSummary
from pems.core.data.models import DeviceStatus, LatestReadings, Status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionToken:
    generation: int
    branch: str
    firestore_id: str


class DashboardSnapshot(BaseModel):
    """Dữ liệu hiển thị cho chuồng đang chọn."""
    branch: str
    firestore_id: str
    name: str = ""
    state: str = "ok"
    latest: LatestReadings = Field(default_factory=LatestReadings)
    ammonia_status: Status = Status.NOT_APPLICABLE
    temp_status: Status = Status.NOT_APPLICABLE
    device_status: DeviceStatus = DeviceStatus.NO_DATA
    summary: PerformanceSummary = Field(default_factory=PerformanceSummary)
    mini_charts: Dict[str, Any] = Field(default_factory=dict)
    display_ranges: Dict[str, str] = Field(default_factory=dict)
    refreshed_at: Optional[datetime] = None


class DashboardState:
    """
    Trạng thái dùng chung của dashboard, truyền tường minh cho các thành phần.
    """

    def __init__(self):
        self._generation = 0
        self._token: Optional[SelectionToken] = None
        self.snapshot: Optional[DashboardSnapshot] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def selection(self) -> Optional[SelectionToken]:
        return self._token

    def select(self, branch: str, firestore_id: str) -> SelectionToken:
        """Đổi chuồng đang chọn và bỏ dữ liệu của lựa chọn cũ."""
        self._generation += 1
        self._token = SelectionToken(self._generation, branch, firestore_id)
        self.snapshot = None
        logger.info(f"Dashboard selection changed to {branch}/{firestore_id} (generation {self._generation})")
        return self._token

    def is_current(self, token: SelectionToken) -> bool:
        return self._token is not None and token.generation == self._generation

    def commit(self, token: SelectionToken, snapshot: DashboardSnapshot) -> bool:
        """
        Ghi kết quả nếu token còn hiệu lực.

        Returns:
            False nếu kết quả đã cũ và bị bỏ qua
        """
        if not self.is_current(token):
            logger.debug(f"Discarded stale dashboard result of generation {token.generation}")
            return False
        self.snapshot = snapshot
        return True
