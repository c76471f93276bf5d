"""
Định nghĩa các dependency cho FastAPI.
"""
import functools
import logging
from fastapi import HTTPException, status
from typing import Callable

from pems.infrastructure.exceptions import BaseServiceException, service_exception_handler
from pems.infrastructure import get_service_factory as factory_getter

logger = logging.getLogger(__name__)

def get_service_factory():
    """Dependency để lấy ServiceFactory."""
    return factory_getter()

def get_channel_repository():
    return factory_getter().create_channel_repository()

def get_alert_repository():
    return factory_getter().create_alert_repository()

def get_admin_repository():
    return factory_getter().create_admin_repository()

def get_worker_repository():
    return factory_getter().create_worker_repository()

def get_dashboard_service():
    return factory_getter().create_dashboard_service()

def get_dashboard_poller():
    return factory_getter().create_dashboard_poller()

def get_chart_service():
    return factory_getter().create_chart_service()

def get_report_builder():
    return factory_getter().create_report_builder()

def handle_exceptions(func: Callable) -> Callable:
    """
    Decorator để xử lý exception từ service.

    Args:
        func: Route handler (async) cần wrap

    Returns:
        Function đã được wrap, giữ nguyên signature cho FastAPI
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except BaseServiceException as exc:
            logger.error(f"Service exception: {exc.message}")
            raise service_exception_handler(exc)
        except HTTPException:
            raise
        except Exception as exc:
            logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={
                    "message": "An unexpected error occurred",
                    "error": str(exc)
                }
            )

    return wrapper
