"""
Đọc cấu hình channel (chuồng) của tất cả chi nhánh từ Firestore.
"""
import logging
from typing import Any, Dict, List, Optional

from config.firestore_config import FIRESTORE_STRUCTURE, HOUSE_FIELDS
from config.thingspeak_config import DEFAULT_FIELDS
from pems.core.data.models import ChannelConfig
from pems.infrastructure.exceptions import ResourceNotFoundError

logger = logging.getLogger(__name__)


def _nested(data: Dict[str, Any], dotted: str) -> Dict[str, Any]:
    current = data
    for part in dotted.split("."):
        current = current.get(part) if isinstance(current, dict) else None
        if current is None:
            return {}
    return current if isinstance(current, dict) else {}


class ChannelRepository:
    """
    Nguồn ChannelConfig. Mỗi document của collection chi nhánh chứa hai map:
    chuồng có cảm biến và chuồng chưa lắp cảm biến.
    """

    def __init__(self, client, structure: Optional[Dict[str, str]] = None,
                 fields: Optional[Dict[str, str]] = None):
        self.client = client
        self.structure = structure or FIRESTORE_STRUCTURE
        self.fields = fields or HOUSE_FIELDS

    def _to_channel(self, branch: str, firestore_id: str, house: Dict[str, Any],
                    has_sensor: bool) -> ChannelConfig:
        f = self.fields
        channel_id = house.get(f["channel_id"])
        return ChannelConfig(
            branch=branch,
            firestore_id=firestore_id,
            name=house.get(f["name"]) or firestore_id,
            channel_id=str(channel_id) if channel_id not in (None, "") else None,
            read_api_key=house.get(f["read_api_key"]) or None,
            ammonia_field=house.get(f["ammonia_field"]) or DEFAULT_FIELDS["ammonia"],
            temp_field=house.get(f["temp_field"]) or DEFAULT_FIELDS["temperature"],
            has_sensor=has_sensor
        )

    def channels_from_document(self, branch: str, data: Dict[str, Any]) -> List[ChannelConfig]:
        channels = []
        for firestore_id, house in _nested(data, self.structure["with_sensor_path"]).items():
            channels.append(self._to_channel(branch, firestore_id, house or {}, has_sensor=True))
        for firestore_id, house in _nested(data, self.structure["without_sensor_path"]).items():
            channels.append(self._to_channel(branch, firestore_id, house or {}, has_sensor=False))
        return channels

    def list_channels(self, branch: Optional[str] = None) -> List[ChannelConfig]:
        """
        Lấy danh sách channel.

        Args:
            branch: Chỉ lấy channel của chi nhánh này (None để lấy tất cả)

        Returns:
            Danh sách ChannelConfig sắp xếp theo chi nhánh và tên
        """
        collection = self.structure["branches_collection"]
        if branch:
            data = self.client.get_document(collection, branch)
            if data is None:
                raise ResourceNotFoundError(f"Branch {branch} not found", "branch", branch)
            documents = [(branch, data)]
        else:
            documents = self.client.list_documents(collection)

        channels = []
        for branch_id, data in documents:
            channels.extend(self.channels_from_document(branch_id, data))

        channels.sort(key=lambda c: (c.branch, c.name.lower()))
        logger.info(f"Loaded {len(channels)} channels from Firestore")
        return channels

    def get_channel(self, branch: str, firestore_id: str) -> ChannelConfig:
        for channel in self.list_channels(branch):
            if channel.firestore_id == firestore_id:
                return channel
        raise ResourceNotFoundError(
            f"Poultry house {firestore_id} not found in branch {branch}",
            "channel", firestore_id
        )
