"""
Bộ tải cấu hình tập trung cho ứng dụng.
"""
import os
import logging
from typing import Any, Dict, Optional
from dotenv import load_dotenv

from config.intervals_config import validate_interval

logger = logging.getLogger(__name__)

class ConfigLoader:
    """
    Bộ tải và quản lý cấu hình tập trung.
    """

    def __init__(self, load_env: bool = True, env_file: Optional[str] = None):
        """
        Khởi tạo bộ tải cấu hình.

        Args:
            load_env: Tự động tải biến môi trường từ .env
            env_file: Đường dẫn đến tệp .env
        """
        self.config = {}

        if load_env:
            load_dotenv(dotenv_path=env_file)

        self._load_all_configs()

    def _load_all_configs(self) -> None:
        """Tải tất cả các module cấu hình trong package config."""
        from config.thingspeak_config import THINGSPEAK_CONFIG, DEFAULT_FIELDS, REPORT_TIMEZONE
        self.config['thingspeak'] = dict(THINGSPEAK_CONFIG)
        self.config['thingspeak']['default_fields'] = DEFAULT_FIELDS
        self.config['thingspeak']['timezone'] = REPORT_TIMEZONE

        from config.thresholds_config import (
            THRESHOLD_BANDS, DISPLAY_RANGES, AMMONIA_ADVICE_IDEAL_PPM, Y_AXIS_POLICY
        )
        self.config['thresholds'] = {
            'bands': THRESHOLD_BANDS,
            'display_ranges': DISPLAY_RANGES,
            'ammonia_advice_ideal_ppm': AMMONIA_ADVICE_IDEAL_PPM,
            'y_axis': Y_AXIS_POLICY
        }

        from config.intervals_config import (
            TASK_INTERVALS, MIN_INTERVALS, DEVICE_OFFLINE_AFTER_MINUTES
        )
        self.config['intervals'] = {
            'task_intervals': TASK_INTERVALS,
            'min_intervals': MIN_INTERVALS,
            'device_offline_after_minutes': DEVICE_OFFLINE_AFTER_MINUTES
        }

        from config.firestore_config import FIRESTORE_STRUCTURE, HOUSE_FIELDS
        self.config['firestore'] = {
            'structure': FIRESTORE_STRUCTURE,
            'house_fields': HOUSE_FIELDS
        }

        from config.report_config import CHART_SIZES, REPORT_LAYOUT, DEFAULT_PARAGRAPHS
        self.config['report'] = {
            'chart_sizes': CHART_SIZES,
            'layout': REPORT_LAYOUT,
            'default_paragraphs': DEFAULT_PARAGRAPHS
        }

        logger.info(f"Loaded configuration modules: {', '.join(self.config.keys())}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Lấy giá trị cấu hình theo khóa.

        Args:
            key: Khóa cấu hình (ví dụ: 'thresholds.bands.ammonia')
            default: Giá trị mặc định nếu không tìm thấy

        Returns:
            Giá trị cấu hình
        """
        if not key:
            return default

        current = self.config
        for part in key.split('.'):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def get_firebase_credentials_path(self) -> str:
        """
        Lấy đường dẫn đến tệp thông tin đăng nhập Firebase.

        Returns:
            Đường dẫn đến tệp credentials
        """
        return os.getenv('FIREBASE_CREDENTIALS_PATH', './config/firebase-credentials.json')

    def get_thingspeak_settings(self) -> Dict[str, Any]:
        """
        Lấy thông số kết nối ThingSpeak.

        Returns:
            Dict chứa base_url, timeout và max_tries
        """
        return {
            'base_url': self.get('thingspeak.base_url'),
            'timeout': self.get('thingspeak.timeout', 15),
            'max_tries': self.get('thingspeak.max_tries', 3)
        }

    def get_interval(self, task_type: str, default: int = 30) -> int:
        """
        Lấy interval cho một loại task cụ thể.

        Thứ tự ưu tiên: biến môi trường `{TASK}_INTERVAL`, sau đó
        intervals_config.py, cuối cùng là giá trị mặc định.

        Args:
            task_type: Loại task (dashboard_poll)
            default: Giá trị mặc định nếu không tìm thấy

        Returns:
            Interval tính bằng giây
        """
        env_key = f"{task_type.upper()}_INTERVAL"
        env_value = os.getenv(env_key)

        if env_value:
            try:
                interval = int(env_value)
                adjusted = validate_interval(task_type, interval, self.get('intervals.min_intervals'))

                if adjusted != interval:
                    logger.warning(
                        f"Interval from env {env_key}={interval}s is below minimum {adjusted}s. "
                        f"Using minimum value."
                    )
                return adjusted

            except ValueError:
                logger.warning(f"Invalid interval value in environment variable {env_key}: {env_value}")

        config_interval = self.get(f'intervals.task_intervals.{task_type}')
        if config_interval is not None:
            return validate_interval(task_type, config_interval, self.get('intervals.min_intervals'))

        logger.debug(f"No interval configured for task '{task_type}', using default: {default}s")
        return default
