"""
Định nghĩa các exception tùy chỉnh cho ứng dụng.
"""
from fastapi import HTTPException, status
from typing import Any, Dict, Optional

class BaseServiceException(Exception):
    """Base exception cho tất cả các service exception."""

    def __init__(
        self,
        message: str,
        error_code: str = "internal_error",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(message)

class ConfigurationError(BaseServiceException):
    """Exception khi cấu hình channel hoặc ứng dụng không hợp lệ."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="configuration_error",
            details=details
        )

class SensorNotInstalledError(BaseServiceException):
    """Exception khi channel chưa được lắp cảm biến."""

    def __init__(
        self,
        message: str,
        firestore_id: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["firestore_id"] = firestore_id
        super().__init__(
            message=message,
            error_code="sensor_not_installed",
            details=details
        )

class DataAccessError(BaseServiceException):
    """Exception khi gặp lỗi truy cập dữ liệu."""

    def __init__(
        self,
        message: str,
        source: str,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["source"] = source
        super().__init__(
            message=message,
            error_code="data_access_error",
            details=details
        )

class ValidationError(BaseServiceException):
    """Exception khi gặp lỗi validation."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(
            message=message,
            error_code="validation_error",
            details=details
        )

class ResourceNotFoundError(BaseServiceException):
    """Exception khi không tìm thấy tài nguyên."""

    def __init__(
        self,
        message: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(
            message=message,
            error_code="resource_not_found",
            details=details
        )

class ResourceConflictError(BaseServiceException):
    """Exception khi tài nguyên đã tồn tại (ví dụ: trùng số điện thoại)."""

    def __init__(
        self,
        message: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        details = details or {}
        details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(
            message=message,
            error_code="resource_conflict",
            details=details
        )

class ReportGenerationError(BaseServiceException):
    """Exception khi không thể tạo báo cáo (ví dụ: không có dữ liệu)."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_code="report_generation_error",
            details=details
        )

def service_exception_handler(exc: BaseServiceException) -> HTTPException:
    """
    Chuyển đổi service exception thành HTTP exception.

    Args:
        exc: Service exception

    Returns:
        HTTPException: HTTP exception tương ứng
    """
    status_code_map = {
        "configuration_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
        "sensor_not_installed": status.HTTP_409_CONFLICT,
        "data_access_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
        "validation_error": status.HTTP_400_BAD_REQUEST,
        "resource_not_found": status.HTTP_404_NOT_FOUND,
        "resource_conflict": status.HTTP_409_CONFLICT,
        "report_generation_error": status.HTTP_422_UNPROCESSABLE_ENTITY,
    }

    status_code = status_code_map.get(exc.error_code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail={
            "message": exc.message,
            "error_code": exc.error_code,
            "details": exc.details
        }
    )
