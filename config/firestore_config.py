"""
Cấu trúc dữ liệu trên Cloud Firestore.
"""

FIRESTORE_STRUCTURE = {
    # Mỗi document là một chi nhánh (branch)
    "branches_collection": "poultryHouses",
    "with_sensor_path": "houses.withSensor",
    "without_sensor_path": "houses.withoutSensor",
    "alerts_field": "alerts",

    # Collection người dùng: mỗi worker là một document (id là số điện thoại),
    # riêng document "Admins" chứa danh sách admin với key là email đã mã hóa
    "workers_collection": "poultryWorkers",
    "admins_collection": "poultryWorkers",
    "admins_document": "Admins",
    "branch_workers_field": "workers",
}

# Tên các trường trong cấu hình của một chuồng
HOUSE_FIELDS = {
    "name": "Name",
    "channel_id": "ID",
    "read_api_key": "ReadAPI",
    "ammonia_field": "AmmoniaField",
    "temp_field": "TempField",
}
