"""
Lớp tiện ích để thao tác với Cloud Firestore.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from firebase_admin import firestore

from pems.infrastructure.exceptions import DataAccessError

logger = logging.getLogger(__name__)

class FirestoreClient:
    """
    Lớp cung cấp các tiện ích đọc/ghi document trên Firestore.
    """

    def __init__(self, db):
        """
        Khởi tạo client.

        Args:
            db: Firestore client (từ get_firestore_client)
        """
        self.db = db

    def _document(self, collection: str, doc_id: str):
        return self.db.collection(collection).document(doc_id)

    def get_document(self, collection: str, doc_id: str,
                     default: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """
        Đọc một document.

        Args:
            collection: Tên collection
            doc_id: ID của document
            default: Giá trị trả về nếu document không tồn tại

        Returns:
            Dữ liệu của document
        """
        try:
            snapshot = self._document(collection, doc_id).get()
        except Exception as e:
            logger.error(f"Firestore get error at {collection}/{doc_id}: {str(e)}")
            raise DataAccessError(f"Cannot read {collection}/{doc_id}", source="firestore") from e

        if not snapshot.exists:
            return default
        return snapshot.to_dict()

    def list_documents(self, collection: str) -> List[Tuple[str, Dict[str, Any]]]:
        """
        Đọc tất cả document trong một collection.

        Returns:
            Danh sách (doc_id, dữ liệu)
        """
        try:
            return [(doc.id, doc.to_dict() or {}) for doc in self.db.collection(collection).stream()]
        except Exception as e:
            logger.error(f"Firestore list error at {collection}: {str(e)}")
            raise DataAccessError(f"Cannot list {collection}", source="firestore") from e

    def merge(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """
        Ghi gộp dữ liệu vào document (tạo mới nếu chưa có).

        Khóa của data được hiểu là tên field, không phải field path.
        """
        try:
            self._document(collection, doc_id).set(data, merge=True)
            logger.debug(f"Data merged at {collection}/{doc_id}")
        except Exception as e:
            logger.error(f"Firestore merge error at {collection}/{doc_id}: {str(e)}")
            raise DataAccessError(f"Cannot write {collection}/{doc_id}", source="firestore") from e

    def delete_key(self, collection: str, doc_id: str, key: str) -> None:
        """Xóa một field cấp cao nhất của document."""
        self.merge(collection, doc_id, {key: firestore.DELETE_FIELD})

    def array_remove(self, collection: str, doc_id: str, field_path: str, element: Any) -> None:
        """
        Xóa một phần tử khỏi field dạng mảng.

        Firestore so sánh theo giá trị, nên element phải là phần tử gốc đã đọc ra.

        Args:
            collection: Tên collection
            doc_id: ID của document
            field_path: Đường dẫn field, ví dụ "houses.withSensor.h1.alerts"
            element: Phần tử cần xóa
        """
        try:
            self._document(collection, doc_id).update({field_path: firestore.ArrayRemove([element])})
            logger.debug(f"Array element removed at {collection}/{doc_id}:{field_path}")
        except Exception as e:
            logger.error(f"Firestore array_remove error at {collection}/{doc_id}:{field_path}: {str(e)}")
            raise DataAccessError(f"Cannot update {collection}/{doc_id}", source="firestore") from e

    def document(self, collection: str, doc_id: str):
        """Tham chiếu tới một document (dùng để lưu reference hoặc ghi theo batch)."""
        return self._document(collection, doc_id)

    def reference_exists(self, ref) -> bool:
        """
        Kiểm tra document mà một reference trỏ tới có tồn tại hay không.

        Returns:
            False nếu document không tồn tại hoặc không đọc được
        """
        try:
            return ref.get().exists
        except Exception as e:
            logger.warning(f"Cannot resolve Firestore reference {getattr(ref, 'path', ref)}: {str(e)}")
            return False

    def batch(self):
        """Tạo WriteBatch mới; các thao tác chỉ được ghi khi commit."""
        return self.db.batch()

    def commit(self, batch, description: str = "batch") -> None:
        """
        Ghi tất cả thao tác của batch trong một lần (nguyên tử).

        Args:
            batch: WriteBatch từ batch()
            description: Mô tả ngắn dùng khi ghi log
        """
        try:
            batch.commit()
            logger.debug(f"Committed Firestore {description}")
        except Exception as e:
            logger.error(f"Firestore commit error ({description}): {str(e)}")
            raise DataAccessError(f"Cannot commit {description}", source="firestore") from e
