"""
Danh sách admin, lưu trong một document với khóa là email đã mã hóa.
"""
import logging
from typing import Any, Dict, List, Optional

from firebase_admin import firestore

from config.firestore_config import FIRESTORE_STRUCTURE
from pems.infrastructure.database.keys import decode_email, encode_email
from pems.infrastructure.exceptions import ResourceNotFoundError, ValidationError

logger = logging.getLogger(__name__)


class AdminRepository:

    def __init__(self, client, structure: Optional[Dict[str, str]] = None):
        self.client = client
        structure = structure or FIRESTORE_STRUCTURE
        self.collection = structure["admins_collection"]
        self.document = structure["admins_document"]

    def _entries(self) -> Dict[str, Any]:
        return self.client.get_document(self.collection, self.document, default={}) or {}

    def list_admins(self) -> List[Dict[str, Any]]:
        admins = []
        for key, value in self._entries().items():
            entry = dict(value) if isinstance(value, dict) else {}
            entry["email"] = decode_email(key)
            admins.append(entry)
        admins.sort(key=lambda a: a["email"])
        return admins

    def add_admin(self, email: str) -> Dict[str, Any]:
        try:
            key = encode_email(email.strip().lower())
        except ValueError as e:
            raise ValidationError(str(e), field="email") from e

        self.client.merge(self.collection, self.document, {
            key: {"dateAdded": firestore.SERVER_TIMESTAMP, "deviceTokens": []}
        })
        logger.info(f"Added admin {decode_email(key)}")
        return {"email": decode_email(key)}

    def remove_admin(self, email: str) -> None:
        try:
            key = encode_email(email.strip().lower())
        except ValueError as e:
            raise ValidationError(str(e), field="email") from e

        if key not in self._entries():
            raise ResourceNotFoundError(f"Admin {email} not found", "admin", email)

        self.client.delete_key(self.collection, self.document, key)
        logger.info(f"Removed admin {email}")
