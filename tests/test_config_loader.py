import os
import unittest
from unittest.mock import patch

from config.intervals_config import validate_interval
from pems.infrastructure.config import ConfigLoader
from pems.infrastructure.exceptions import (
    ReportGenerationError,
    ResourceNotFoundError,
    SensorNotInstalledError,
    service_exception_handler
)


class TestConfigLoader(unittest.TestCase):
    """Test cases for ConfigLoader."""

    def setUp(self):
        self.loader = ConfigLoader(load_env=False)

    def test_dotted_get(self):
        self.assertEqual(self.loader.get("thingspeak.results_cap"), 8000)
        self.assertEqual(self.loader.get("thresholds.bands.ammonia.warn_high"), 10)
        self.assertEqual(self.loader.get("firestore.structure.branches_collection"), "poultryHouses")
        self.assertEqual(self.loader.get("missing.key", "fallback"), "fallback")
        self.assertIsNone(self.loader.get(""))

    def test_interval_from_config(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("DASHBOARD_POLL_INTERVAL", None)
            self.assertEqual(self.loader.get_interval("dashboard_poll"), 30)
        self.assertEqual(self.loader.get_interval("unknown_task", 12), 12)

    def test_interval_env_override(self):
        with patch.dict(os.environ, {"DASHBOARD_POLL_INTERVAL": "45"}):
            self.assertEqual(self.loader.get_interval("dashboard_poll"), 45)
        with patch.dict(os.environ, {"DASHBOARD_POLL_INTERVAL": "1"}):
            self.assertEqual(self.loader.get_interval("dashboard_poll"), 5)
        with patch.dict(os.environ, {"DASHBOARD_POLL_INTERVAL": "soon"}):
            self.assertEqual(self.loader.get_interval("dashboard_poll"), 30)

    def test_thingspeak_settings(self):
        settings = self.loader.get_thingspeak_settings()
        self.assertEqual(settings["timeout"], 15)
        self.assertEqual(settings["max_tries"], 3)

    def test_validate_interval(self):
        self.assertEqual(validate_interval("dashboard_poll", 2), 5)
        self.assertEqual(validate_interval("dashboard_poll", 60), 60)
        self.assertEqual(validate_interval("dashboard_poll", 8, {"dashboard_poll": 10}), 10)

    def test_interval_uses_loaded_minimums(self):
        self.loader.config["intervals"] = dict(
            self.loader.config["intervals"], min_intervals={"dashboard_poll": 40}
        )
        with patch.dict(os.environ, {"DASHBOARD_POLL_INTERVAL": "35"}):
            self.assertEqual(self.loader.get_interval("dashboard_poll"), 40)
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("DASHBOARD_POLL_INTERVAL", None)
            self.assertEqual(self.loader.get_interval("dashboard_poll"), 40)


class TestServiceExceptions(unittest.TestCase):

    def test_status_mapping(self):
        self.assertEqual(service_exception_handler(ResourceNotFoundError("x", "channel", "h1")).status_code, 404)
        self.assertEqual(service_exception_handler(SensorNotInstalledError("x", "h1")).status_code, 409)
        self.assertEqual(service_exception_handler(ReportGenerationError("x")).status_code, 422)

    def test_detail_payload(self):
        exc = service_exception_handler(SensorNotInstalledError("No sensor", "h2"))
        self.assertEqual(exc.detail["error_code"], "sensor_not_installed")
        self.assertEqual(exc.detail["details"], {"firestore_id": "h2"})


if __name__ == '__main__':
    unittest.main()
