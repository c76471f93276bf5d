"""
Đọc và xóa cảnh báo lưu trong mảng alerts của từng chuồng.
"""
import hashlib
import json
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from config.firestore_config import FIRESTORE_STRUCTURE
from pems.core.data.models import Alert
from pems.infrastructure.exceptions import ResourceNotFoundError

logger = logging.getLogger(__name__)


def alert_id(payload: Dict[str, Any]) -> str:
    """Định danh ổn định của một phần tử alert, tính từ chính nội dung của nó."""
    encoded = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha1(encoded.encode("utf-8")).hexdigest()[:16]


def _timestamp(raw: Any) -> Optional[datetime]:
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, str):
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


class AlertRepository:
    """
    Cảnh báo do thiết bị/backend tạo ra; ở đây chỉ đọc và xóa.
    """

    def __init__(self, client, channel_repository, structure: Optional[Dict[str, str]] = None):
        self.client = client
        self.channels = channel_repository
        self.structure = structure or FIRESTORE_STRUCTURE

    def _alerts_path(self, firestore_id: str) -> str:
        return f"{self.structure['with_sensor_path']}.{firestore_id}.{self.structure['alerts_field']}"

    def _house(self, data: Dict[str, Any], firestore_id: str) -> Dict[str, Any]:
        houses = data
        for part in self.structure["with_sensor_path"].split("."):
            houses = (houses or {}).get(part) or {}
        return houses.get(firestore_id) or {}

    def list_alerts(self, branch: Optional[str] = None) -> List[Alert]:
        """
        Lấy tất cả cảnh báo, mới nhất trước.

        Returns:
            Danh sách Alert, mỗi Alert giữ phần tử gốc trong original_payload
        """
        collection = self.structure["branches_collection"]
        documents = (
            [(branch, self.client.get_document(collection, branch, default={}))]
            if branch else self.client.list_documents(collection)
        )

        alerts = []
        for branch_id, data in documents:
            for channel in self.channels.channels_from_document(branch_id, data):
                if not channel.has_sensor:
                    continue
                house = self._house(data, channel.firestore_id)
                for payload in house.get(self.structure["alerts_field"]) or []:
                    if not isinstance(payload, dict):
                        continue
                    alerts.append(Alert(
                        type=str(payload.get("type") or "general"),
                        message=str(payload.get("message") or ""),
                        timestamp=_timestamp(payload.get("timestamp")),
                        branch=branch_id,
                        firestore_id=channel.firestore_id,
                        house_name=channel.name,
                        original_payload=payload
                    ))

        alerts.sort(key=lambda a: a.timestamp.timestamp() if a.timestamp else float("-inf"), reverse=True)
        logger.debug(f"Loaded {len(alerts)} alerts")
        return alerts

    def delete_alert(self, alert: Alert) -> None:
        """
        Xóa đúng phần tử gốc của cảnh báo khỏi mảng alerts.

        Args:
            alert: Cảnh báo đã đọc từ list_alerts (mang original_payload)
        """
        self.client.array_remove(
            self.structure["branches_collection"],
            alert.branch,
            self._alerts_path(alert.firestore_id),
            alert.original_payload
        )
        logger.info(f"Deleted alert of type {alert.type} from {alert.branch}/{alert.firestore_id}")

    def delete_alert_by_id(self, branch: str, firestore_id: str, target_id: str) -> Alert:
        """
        Đọc lại mảng alerts và xóa phần tử có id tương ứng.

        Raises:
            ResourceNotFoundError: Nếu không còn phần tử nào khớp
        """
        for alert in self.list_alerts(branch):
            if alert.firestore_id == firestore_id and alert_id(alert.original_payload) == target_id:
                self.delete_alert(alert)
                return alert
        raise ResourceNotFoundError(f"Alert {target_id} not found", "alert", target_id)
