"""
Factory để khởi tạo các thành phần chính của ứng dụng.
"""
import logging
from datetime import timedelta

from .config.config_loader import ConfigLoader
from .database import (
    AdminRepository,
    AlertRepository,
    ChannelRepository,
    FirestoreClient,
    WorkerRepository,
    get_firestore_client
)
from pems.adapters.cloud.thingspeak import ThingSpeakClient
from pems.core.charts import ChartRenderer, ChartService
from pems.core.data.telemetry_service import TelemetryService
from pems.core.monitoring import DashboardPoller, DashboardService, DashboardState
from pems.core.reports import ReportBuilder

logger = logging.getLogger(__name__)

class ServiceFactory:
    """
    Factory để khởi tạo và quản lý các service dependencies.
    """

    _instance = None

    def __new__(cls):
        """Singleton pattern."""
        if cls._instance is None:
            cls._instance = super(ServiceFactory, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Khởi tạo factory nếu chưa được khởi tạo."""
        if self._initialized:
            return

        logger.info("Initializing ServiceFactory")
        self.config_loader = ConfigLoader()
        self.services = {}
        self._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Bỏ instance hiện tại (dùng trong test)."""
        cls._instance = None

    def get_config_loader(self) -> ConfigLoader:
        return self.config_loader

    def _get(self, key: str, builder):
        if key not in self.services:
            self.services[key] = builder()
            logger.info(f"Created service: {key}")
        return self.services[key]

    def create_thingspeak_client(self) -> ThingSpeakClient:
        """
        Tạo và trả về ThingSpeakClient dùng chung.

        Returns:
            ThingSpeakClient instance
        """
        settings = self.config_loader.get_thingspeak_settings()
        return self._get('thingspeak_client', lambda: ThingSpeakClient(**settings))

    def create_telemetry_service(self) -> TelemetryService:
        return self._get('telemetry_service', lambda: TelemetryService(
            self.create_thingspeak_client(),
            self.config_loader.get('thingspeak', {})
        ))

    def create_firestore_client(self) -> FirestoreClient:
        """
        Tạo FirestoreClient (khởi tạo Firebase nếu chưa có).

        Returns:
            FirestoreClient instance
        """
        return self._get('firestore_client', lambda: FirestoreClient(get_firestore_client()))

    def create_channel_repository(self) -> ChannelRepository:
        return self._get('channel_repository', lambda: ChannelRepository(
            self.create_firestore_client(),
            self.config_loader.get('firestore.structure'),
            self.config_loader.get('firestore.house_fields')
        ))

    def create_alert_repository(self) -> AlertRepository:
        return self._get('alert_repository', lambda: AlertRepository(
            self.create_firestore_client(),
            self.create_channel_repository(),
            self.config_loader.get('firestore.structure')
        ))

    def create_admin_repository(self) -> AdminRepository:
        return self._get('admin_repository', lambda: AdminRepository(
            self.create_firestore_client(),
            self.config_loader.get('firestore.structure')
        ))

    def create_worker_repository(self) -> WorkerRepository:
        return self._get('worker_repository', lambda: WorkerRepository(
            self.create_firestore_client(),
            self.config_loader.get('firestore.structure')
        ))

    def create_chart_renderer(self) -> ChartRenderer:
        return self._get('chart_renderer', ChartRenderer)

    def create_chart_service(self) -> ChartService:
        return self._get('chart_service', lambda: ChartService(
            self.create_telemetry_service(),
            self.create_chart_renderer()
        ))

    def create_report_builder(self) -> ReportBuilder:
        return self._get('report_builder', lambda: ReportBuilder(
            self.create_telemetry_service(),
            self.config_loader.get('report.chart_sizes')
        ))

    def create_dashboard_service(self) -> DashboardService:
        offline_after = self.config_loader.get('intervals.device_offline_after_minutes', 15)
        return self._get('dashboard_service', lambda: DashboardService(
            self.create_telemetry_service(),
            self.create_channel_repository(),
            self.create_alert_repository(),
            renderer=self.create_chart_renderer(),
            state=DashboardState(),
            offline_after=timedelta(minutes=offline_after)
        ))

    def create_dashboard_poller(self) -> DashboardPoller:
        """
        Tạo poller làm mới chuồng đang chọn theo chu kỳ 'dashboard_poll'.

        Returns:
            DashboardPoller instance
        """
        def build():
            service = self.create_dashboard_service()
            interval = self.config_loader.get_interval('dashboard_poll', 30)
            return DashboardPoller(service.state, service.build_snapshot, interval)
        return self._get('dashboard_poller', build)

    def init_all_services(self) -> None:
        """Khởi tạo tất cả các service."""
        self.create_firestore_client()
        self.create_dashboard_poller()
        self.create_chart_service()
        self.create_report_builder()
        self.create_admin_repository()
        self.create_worker_repository()
        logger.info("All services initialized")

    async def shutdown(self) -> None:
        """Dừng poller, đóng phiên HTTP và giải phóng figure."""
        poller = self.services.get('dashboard_poller')
        if poller is not None:
            await poller.stop()
        client = self.services.get('thingspeak_client')
        if client is not None:
            await client.close()
        renderer = self.services.get('chart_renderer')
        if renderer is not None:
            renderer.close()
        logger.info("All services shut down")
