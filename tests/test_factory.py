import unittest
from unittest.mock import MagicMock, patch

from pems.infrastructure.factory import ServiceFactory


class TestServiceFactory(unittest.IsolatedAsyncioTestCase):
    """Test cases for service wiring."""

    def setUp(self):
        ServiceFactory.reset()
        self.patcher = patch("pems.infrastructure.factory.get_firestore_client", return_value=MagicMock())
        self.patcher.start()
        self.factory = ServiceFactory()

    def tearDown(self):
        self.patcher.stop()
        ServiceFactory.reset()

    def test_singleton(self):
        self.assertIs(ServiceFactory(), self.factory)

    def test_services_are_cached(self):
        self.assertIs(self.factory.create_chart_renderer(), self.factory.create_chart_renderer())
        telemetry = self.factory.create_telemetry_service()
        self.assertIs(self.factory.create_chart_service().telemetry, telemetry)
        self.assertIs(self.factory.create_report_builder().telemetry, telemetry)
        firestore_client = self.factory.create_firestore_client()
        self.assertIs(self.factory.create_worker_repository().client, firestore_client)

    def test_poller_shares_dashboard_state(self):
        poller = self.factory.create_dashboard_poller()
        dashboard = self.factory.create_dashboard_service()

        self.assertIs(poller.state, dashboard.state)
        self.assertEqual(poller.interval, self.factory.config_loader.get_interval("dashboard_poll", 30))

    async def test_shutdown_closes_resources(self):
        self.factory.init_all_services()
        renderer = self.factory.create_chart_renderer()
        renderer.close = MagicMock()

        await self.factory.shutdown()

        renderer.close.assert_called_once()
        self.assertIsNone(self.factory.create_thingspeak_client().session)


if __name__ == '__main__':
    unittest.main()
