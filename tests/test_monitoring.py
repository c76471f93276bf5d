import asyncio
import threading
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

from pems.core.data.models import (
    Alert,
    ChannelConfig,
    DeviceStatus,
    LatestReadings,
    MetricReadings,
    Reading,
    Status
)
from pems.core.data.telemetry_service import TelemetryService
from pems.core.monitoring import (
    DashboardPoller,
    DashboardService,
    DashboardSnapshot,
    DashboardState
)


def snapshot_for(token):
    return DashboardSnapshot(branch=token.branch, firestore_id=token.firestore_id)


class TestDashboardState(unittest.TestCase):
    """Test cases for the selection generation guard."""

    def test_stale_result_is_discarded(self):
        state = DashboardState()
        old = state.select("north", "h1")
        new = state.select("north", "h2")

        self.assertFalse(state.commit(old, snapshot_for(old)))
        self.assertIsNone(state.snapshot)
        self.assertTrue(state.commit(new, snapshot_for(new)))
        self.assertEqual(state.snapshot.firestore_id, "h2")

    def test_select_clears_snapshot(self):
        state = DashboardState()
        token = state.select("north", "h1")
        state.commit(token, snapshot_for(token))
        state.select("north", "h1")
        self.assertIsNone(state.snapshot)
        self.assertEqual(state.generation, 2)


class TestDashboardPoller(unittest.IsolatedAsyncioTestCase):
    """Test cases for the periodic refresh loop."""

    async def test_no_selection_does_nothing(self):
        refresh = AsyncMock()
        poller = DashboardPoller(DashboardState(), refresh)
        self.assertFalse(await poller.refresh_now())
        refresh.assert_not_called()

    async def test_late_response_of_previous_selection_is_dropped(self):
        gate = asyncio.Event()

        async def refresh(token):
            if token.firestore_id == "slow":
                await gate.wait()
            return snapshot_for(token)

        state = DashboardState()
        poller = DashboardPoller(state, refresh)
        state.select("north", "slow")
        pending = asyncio.create_task(poller.refresh_now())
        await asyncio.sleep(0)

        snapshot = await poller.select("north", "fast")
        gate.set()

        self.assertFalse(await pending)
        self.assertEqual(snapshot.firestore_id, "fast")
        self.assertEqual(state.snapshot.firestore_id, "fast")

    async def test_failed_refresh_keeps_loop_alive(self):
        refresh = AsyncMock(side_effect=RuntimeError("network"))
        state = DashboardState()
        state.select("north", "h1")
        poller = DashboardPoller(state, refresh)
        self.assertFalse(await poller.refresh_now())
        self.assertIsNone(state.snapshot)

    async def test_start_and_stop(self):
        refresh = AsyncMock(side_effect=snapshot_for)
        state = DashboardState()
        state.select("north", "h1")
        poller = DashboardPoller(state, refresh, interval=0.01)

        poller.start()
        self.assertTrue(poller.running)
        await asyncio.sleep(0.05)
        await poller.stop()

        self.assertFalse(poller.running)
        self.assertGreaterEqual(refresh.await_count, 1)
        self.assertEqual(state.snapshot.firestore_id, "h1")


class TestDashboardService(unittest.IsolatedAsyncioTestCase):
    """Test cases for dashboard data assembly."""

    def setUp(self):
        self.house = ChannelConfig(branch="north", firestore_id="h1", name="House 1", channel_id="1")
        self.empty = ChannelConfig(branch="north", firestore_id="h2", name="House 2", has_sensor=False)
        now = datetime.now(timezone.utc)

        self.telemetry = MagicMock()
        self.telemetry.tz = timezone.utc
        self.telemetry.fetch_latest = AsyncMock(return_value=LatestReadings(
            ammonia=12.0, temperature=24.0, timestamp=now - timedelta(minutes=2)
        ))
        self.telemetry.fetch_recent_feed = AsyncMock(return_value=MetricReadings(
            ammonia=[Reading(timestamp=now, value=12.0)],
            temperature=[Reading(timestamp=now, value=24.0)]
        ))
        self.telemetry.fetch_today = AsyncMock(return_value=MetricReadings(
            ammonia=[Reading(timestamp=now, value=12.0)]
        ))

        self.channels = MagicMock()
        self.channels.get_channel.return_value = self.house
        self.channels.list_channels.return_value = [self.house, self.empty]
        self.alerts = MagicMock()
        self.alerts.list_alerts.return_value = [
            Alert(type="ammonia", branch="north", firestore_id="h1")
        ]

        self.renderer = MagicMock()
        self.renderer.render_data_url.return_value = "data:image/png;base64,AAAA"
        self.service = DashboardService(self.telemetry, self.channels, self.alerts, renderer=self.renderer)

    async def test_build_snapshot(self):
        token = self.service.state.select("north", "h1")
        snapshot = await self.service.build_snapshot(token)

        self.assertEqual(snapshot.state, "ok")
        self.assertEqual(snapshot.ammonia_status, Status.WARNING)
        self.assertEqual(snapshot.temp_status, Status.SAFE)
        self.assertEqual(snapshot.device_status, DeviceStatus.ONLINE)
        self.assertEqual(snapshot.summary.highest_ammonia.value, "12.0 ppm")
        self.assertEqual(snapshot.summary.highest_temperature.value, "-- °C")
        self.assertEqual(set(snapshot.mini_charts), {"ammonia", "temperature"})
        rendered_slots = [c.args[0] for c in self.renderer.render_data_url.call_args_list]
        self.assertEqual(rendered_slots, ["mini.ammonia", "mini.temperature"])

    async def test_mini_charts_render_in_worker_thread(self):
        threads = []

        def render_data_url(slot, spec, size):
            threads.append(threading.get_ident())
            return "data:image/png;base64,AAAA"
        self.renderer.render_data_url.side_effect = render_data_url

        await self.service.build_snapshot(self.service.state.select("north", "h1"))

        self.assertEqual(len(threads), 2)
        self.assertNotIn(threading.get_ident(), threads)

    async def test_snapshot_without_sensor(self):
        self.channels.get_channel.return_value = self.empty
        token = self.service.state.select("north", "h2")
        snapshot = await self.service.build_snapshot(token)

        self.assertEqual(snapshot.state, "no_sensor")
        self.assertEqual(snapshot.device_status, DeviceStatus.NOT_INSTALLED)
        self.telemetry.fetch_latest.assert_not_called()

    async def test_latest(self):
        result = await self.service.latest(self.house)
        self.assertEqual(result["state"], "ok")
        self.assertEqual(result["ammonia_status"], Status.WARNING)

        result = await self.service.latest(self.empty)
        self.assertEqual(result["state"], "no_sensor")

    async def test_health_overview(self):
        overview = await self.service.health_overview("north")

        self.assertEqual(overview.total_count, 2)
        self.assertEqual(overview.online_count, 1)
        self.assertEqual(overview.overall_health, Status.WARNING)
        self.telemetry.fetch_latest.assert_awaited_once_with(self.house)

    async def test_health_overview_keeps_misconfigured_house(self):
        broken = ChannelConfig(branch="north", firestore_id="h3", name="House 3", channel_id=None)
        self.channels.list_channels.return_value = [self.house, broken]
        checker = TelemetryService(MagicMock())
        reading = self.telemetry.fetch_latest.return_value

        async def fetch_latest(channel):
            checker._require_sensor(channel)
            return reading
        self.telemetry.fetch_latest = AsyncMock(side_effect=fetch_latest)

        with self.assertLogs("pems.core.monitoring.dashboard", level="WARNING"):
            overview = await self.service.health_overview("north")

        statuses = {row.firestore_id: row.device_status for row in overview.rows}
        self.assertEqual(statuses, {"h1": DeviceStatus.ONLINE, "h3": DeviceStatus.MISCONFIGURED})
        self.assertEqual(overview.online_count, 1)
        self.assertEqual(overview.total_count, 2)

    def test_offline_after_threshold(self):
        now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        stale = LatestReadings(timestamp=datetime(2024, 5, 1, 11, 0))
        self.assertEqual(self.service.status_of(self.house, stale, now), DeviceStatus.OFFLINE)


if __name__ == '__main__':
    unittest.main()
