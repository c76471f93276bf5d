"""
Quản lý worker: mỗi worker là một document trong collection người dùng,
id là số điện thoại, trường "branch" là mảng reference tới chi nhánh.

Mỗi chi nhánh giữ lại mảng "workers" gồm reference tới các worker của nó;
hai phía luôn được ghi cùng nhau trong một batch.
"""
import logging
from typing import Any, Dict, List, Optional

from firebase_admin import firestore

from config.firestore_config import FIRESTORE_STRUCTURE
from pems.infrastructure.exceptions import (
    ResourceConflictError,
    ResourceNotFoundError,
    ValidationError
)

logger = logging.getLogger(__name__)

UNKNOWN_BRANCH = "Unknown Branch"
NO_BRANCH = "No branch assigned"


class WorkerRepository:
    """
    CRUD cho worker, đồng bộ với mảng workers của các chi nhánh.
    """

    def __init__(self, client, structure: Optional[Dict[str, str]] = None):
        """
        Khởi tạo repository.

        Args:
            client: FirestoreClient
            structure: Cấu trúc Firestore (mặc định từ firestore_config)
        """
        self.client = client
        structure = structure or FIRESTORE_STRUCTURE
        self.collection = structure["workers_collection"]
        self.admins_document = structure["admins_document"]
        self.branches_collection = structure["branches_collection"]
        self.workers_field = structure["branch_workers_field"]

    def _worker_ref(self, phone_number: str):
        return self.client.document(self.collection, phone_number)

    def _branch_ref(self, branch: str):
        return self.client.document(self.branches_collection, branch)

    def _require_fields(self, name: str, phone_number: str, branch: str) -> None:
        for field, value in (("name", name), ("phone_number", phone_number), ("branch", branch)):
            if not value or not str(value).strip():
                raise ValidationError("Name, phone number, and branch are required for workers.", field=field)
        if "/" in phone_number or phone_number == self.admins_document:
            raise ValidationError(f"Invalid phone number: {phone_number!r}", field="phone_number")

    def _require_branch(self, branch: str) -> None:
        if self.client.get_document(self.branches_collection, branch) is None:
            raise ResourceNotFoundError(f"Branch {branch} not found", "branch", branch)

    def _require_free(self, phone_number: str) -> None:
        if self.client.get_document(self.collection, phone_number) is not None:
            raise ResourceConflictError(
                f'A worker with the phone number "{phone_number}" already exists.',
                "worker", phone_number
            )

    def _branch_name(self, ref) -> str:
        return ref.id if self.client.reference_exists(ref) else UNKNOWN_BRANCH

    def list_workers(self) -> List[Dict[str, Any]]:
        """
        Lấy danh sách worker (bỏ qua document Admins).

        Returns:
            Danh sách dict gồm id, name, contact, branches, dateAdded, deviceTokens
        """
        workers = []
        for doc_id, data in self.client.list_documents(self.collection):
            if doc_id == self.admins_document:
                continue
            branches = [self._branch_name(ref) for ref in data.get("branch") or []]
            workers.append({
                "id": doc_id,
                "name": data.get("name") or "N/A",
                "contact": doc_id,
                "branches": branches or [NO_BRANCH],
                "dateAdded": data.get("dateAdded"),
                "deviceTokens": list(data.get("deviceTokens") or []),
            })
        workers.sort(key=lambda w: w["name"].lower())
        return workers

    def create_worker(self, name: str, phone_number: str, branch: str) -> Dict[str, Any]:
        """
        Tạo worker và thêm vào mảng workers của chi nhánh trong cùng một batch.

        Raises:
            ValidationError: Thiếu thông tin
            ResourceConflictError: Số điện thoại đã được dùng
            ResourceNotFoundError: Chi nhánh không tồn tại
        """
        self._require_fields(name, phone_number, branch)
        self._require_free(phone_number)
        self._require_branch(branch)

        worker_ref = self._worker_ref(phone_number)
        branch_ref = self._branch_ref(branch)

        batch = self.client.batch()
        batch.set(worker_ref, {
            "name": name,
            "branch": [branch_ref],
            "dateAdded": firestore.SERVER_TIMESTAMP,
            "deviceTokens": []
        })
        batch.update(branch_ref, {self.workers_field: firestore.ArrayUnion([worker_ref])})
        self.client.commit(batch, f"create worker {phone_number}")

        logger.info(f"Created worker {phone_number} in branch {branch}")
        return {"id": phone_number, "name": name, "branches": [branch]}

    def delete_worker(self, phone_number: str) -> None:
        """Xóa worker và gỡ reference của nó khỏi mọi chi nhánh đã gán."""
        data = self.client.get_document(self.collection, phone_number)
        if data is None or phone_number == self.admins_document:
            raise ResourceNotFoundError("Worker not found.", "worker", phone_number)

        worker_ref = self._worker_ref(phone_number)
        batch = self.client.batch()
        for branch_ref in data.get("branch") or []:
            batch.update(branch_ref, {self.workers_field: firestore.ArrayRemove([worker_ref])})
        batch.delete(worker_ref)
        self.client.commit(batch, f"delete worker {phone_number}")

        logger.info(f"Deleted worker {phone_number}")

    def update_worker(self, original_phone_number: str, name: str,
                      phone_number: str, branch: str) -> Dict[str, Any]:
        """
        Cập nhật tên, số điện thoại và chi nhánh của worker.

        Đổi số điện thoại nghĩa là tạo document mới (giữ các trường cũ) và xóa
        document cũ. Chi nhánh được thay thế: worker chỉ thuộc một chi nhánh
        sau khi cập nhật.

        Args:
            original_phone_number: Id hiện tại của worker
            name: Tên mới
            phone_number: Số điện thoại mới (có thể trùng số cũ)
            branch: Chi nhánh mới

        Returns:
            Thông tin worker sau khi cập nhật
        """
        self._require_fields(name, phone_number, branch)
        old_data = self.client.get_document(self.collection, original_phone_number)
        if old_data is None or original_phone_number == self.admins_document:
            raise ResourceNotFoundError("Original worker not found.", "worker", original_phone_number)
        self._require_branch(branch)

        old_ref = self._worker_ref(original_phone_number)
        old_branch_refs = list(old_data.get("branch") or [])
        new_branch_ref = self._branch_ref(branch)
        batch = self.client.batch()

        if phone_number != original_phone_number:
            self._require_free(phone_number)
            new_ref = self._worker_ref(phone_number)

            batch.set(new_ref, dict(old_data, name=name, branch=[new_branch_ref]))
            batch.delete(old_ref)
            for ref in old_branch_refs:
                batch.update(ref, {self.workers_field: firestore.ArrayRemove([old_ref])})
            batch.update(new_branch_ref, {self.workers_field: firestore.ArrayUnion([new_ref])})
        else:
            batch.update(old_ref, {"name": name, "branch": [new_branch_ref]})

            old_paths = [ref.path for ref in old_branch_refs]
            if new_branch_ref.path not in old_paths:
                batch.update(new_branch_ref, {self.workers_field: firestore.ArrayUnion([old_ref])})
            for ref in old_branch_refs:
                if ref.path != new_branch_ref.path:
                    batch.update(ref, {self.workers_field: firestore.ArrayRemove([old_ref])})

        self.client.commit(batch, f"update worker {original_phone_number}")
        logger.info(f"Updated worker {original_phone_number} -> {phone_number} (branch {branch})")
        return {"id": phone_number, "name": name, "branches": [branch]}
