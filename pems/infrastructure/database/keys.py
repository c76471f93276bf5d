"""
Mã hóa email thành khóa document hợp lệ.

Firestore dùng "." làm dấu phân tách field path, vì vậy email được lưu với
"." thay bằng ",". Email hợp lệ không chứa "," nên cặp hàm là song ánh.
"""


def encode_email(email: str) -> str:
    if not email:
        raise ValueError("Email must not be empty")
    if "," in email:
        raise ValueError(f"Email cannot contain ',': {email!r}")
    return email.replace(".", ",")


def decode_email(key: str) -> str:
    if not key:
        raise ValueError("Encoded key must not be empty")
    if "." in key:
        raise ValueError(f"Encoded key cannot contain '.': {key!r}")
    return key.replace(",", ".")
