"""
Thiết lập hệ thống logging.
"""
import logging
import sys
from logging.handlers import RotatingFileHandler
import os

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

def setup_logging(log_dir: str = None, level: str = None):
    """
    Thiết lập cấu hình logging cho ứng dụng.

    Args:
        log_dir: Thư mục chứa file log (mặc định lấy từ LOG_DIR hoặc "logs")
        level: Mức log (mặc định lấy từ LOG_LEVEL hoặc INFO)
    """
    log_dir = log_dir or os.getenv("LOG_DIR", "logs")
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level, logging.INFO))

    # Tránh thêm handler trùng khi gọi lại (reload, test)
    if any(getattr(h, "_pems_handler", False) for h in logger.handlers):
        return

    formatter = logging.Formatter(LOG_FORMAT)

    # Handler log vào file, với rotation
    file_handler = RotatingFileHandler(
        os.path.join(log_dir, "pems_dashboard.log"),
        maxBytes=10485760,  # 10MB
        backupCount=5
    )
    file_handler.setFormatter(formatter)
    file_handler._pems_handler = True

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler._pems_handler = True

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    # Thư viện vẽ biểu đồ log rất nhiều ở mức DEBUG
    logging.getLogger("matplotlib").setLevel(logging.WARNING)

    logger.info("Logging system initialized")
