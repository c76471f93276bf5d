import unittest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from pems.core.data.models import ChannelConfig, Metric, Reading
from pems.core.data.telemetry_service import TelemetryService
from pems.core.reports import (
    ReportBuilder,
    ReportTableData,
    observation_period,
    report_filename
)
from pems.infrastructure.exceptions import ReportGenerationError


def daily(year, month, days, value):
    return [
        Reading(timestamp=datetime(year, month, day, tzinfo=timezone.utc), value=value)
        for day in range(1, days + 1)
    ]


def hourly(year, month, value):
    return [
        Reading(timestamp=datetime(year, month, 1, hour, tzinfo=timezone.utc), value=value + hour)
        for hour in range(24)
    ]


class TestReportHelpers(unittest.TestCase):

    def test_filename(self):
        self.assertEqual(report_filename("House 1", 2024, 5), "House 1 - May 2024 Report.pdf")

    def test_observation_period(self):
        self.assertEqual(observation_period(2024, 2), "February 1, 2024 - February 29, 2024")


class TestReportBuilder(unittest.IsolatedAsyncioTestCase):
    """Test cases for monthly PDF report generation."""

    def setUp(self):
        self.telemetry = MagicMock()
        self.telemetry.fetch_month_daily = AsyncMock(
            side_effect=lambda channel, field, year, month: daily(
                year, month, 31, 5.0 if field == channel.ammonia_field else 25.0
            )
        )
        self.telemetry.fetch_month_hourly = AsyncMock(
            side_effect=lambda channel, field, year, month: hourly(
                year, month, 2.0 if field == channel.ammonia_field else 20.0
            )
        )
        self.builder = ReportBuilder(self.telemetry)
        self.house = ChannelConfig(branch="north", firestore_id="h1", name="House 1", channel_id="1")
        self.other = ChannelConfig(branch="north", firestore_id="h2", name="House 2", channel_id="2")

    async def test_collect_single_channel(self):
        data = await self.builder.collect([self.house], 2024, 5)

        self.assertEqual(data.name, "House 1")
        self.assertEqual(len(data.monthly[Metric.AMMONIA]), 31)
        self.assertEqual(data.monthly[Metric.TEMPERATURE].values[0], 25.0)
        self.assertEqual(len(data.hourly[Metric.AMMONIA]), 24)
        self.assertEqual(self.telemetry.fetch_month_daily.await_count, 2)

    async def test_collect_branch_merges_and_uses_branch_name(self):
        no_sensor = ChannelConfig(branch="north", firestore_id="h3", name="House 3", has_sensor=False)
        data = await self.builder.collect([self.house, self.other, no_sensor], 2024, 5)

        self.assertEqual(data.name, "north")
        self.assertEqual(self.telemetry.fetch_month_daily.await_count, 4)
        self.assertEqual(data.monthly[Metric.AMMONIA].values[10], 5.0)

    async def test_no_sensor_channels_raise(self):
        empty = ChannelConfig(branch="north", firestore_id="h3", has_sensor=False)
        with self.assertRaises(ReportGenerationError):
            await self.builder.collect([empty], 2024, 5)

    async def test_missing_monthly_data_raises(self):
        self.telemetry.fetch_month_daily = AsyncMock(
            side_effect=lambda channel, field, year, month: [
                Reading(timestamp=r.timestamp, value=None) for r in daily(year, month, 31, 0.0)
            ] if field == channel.ammonia_field else daily(year, month, 31, 25.0)
        )
        with self.assertRaises(ReportGenerationError) as ctx:
            await self.builder.collect([self.house], 2024, 5)
        self.assertEqual(ctx.exception.message, "No monthly data available.")

    async def test_missing_hourly_data_is_allowed(self):
        self.telemetry.fetch_month_hourly = AsyncMock(return_value=[])
        data = await self.builder.collect([self.house], 2024, 5)
        self.assertIsNone(data.hourly[Metric.AMMONIA])

    def require_channel_id(self):
        checker = TelemetryService(MagicMock())
        for name in ("fetch_month_daily", "fetch_month_hourly"):
            original = getattr(self.telemetry, name).side_effect

            def checked(channel, field, year, month, original=original):
                checker._require_sensor(channel)
                return original(channel, field, year, month)
            setattr(self.telemetry, name, AsyncMock(side_effect=checked))

    async def test_misconfigured_house_is_skipped(self):
        self.require_channel_id()
        broken = ChannelConfig(branch="north", firestore_id="h9", name="House 9", channel_id=None)

        with self.assertLogs("pems.core.reports.report_builder", level="WARNING") as logs:
            data = await self.builder.collect([self.house, broken], 2024, 5)

        self.assertEqual(data.name, "north")
        self.assertEqual(data.monthly[Metric.AMMONIA].values[0], 5.0)
        self.assertIn("h9", logs.output[0])

    async def test_only_misconfigured_houses_raise(self):
        self.require_channel_id()
        broken = ChannelConfig(branch="north", firestore_id="h9", name="House 9", channel_id=None)
        with self.assertRaises(ReportGenerationError) as ctx:
            await self.builder.collect([broken], 2024, 5)
        self.assertEqual(ctx.exception.details["skipped"], ["h9"])

    async def test_build_returns_pdf(self):
        table = ReportTableData(livestock_count="1200", monthly_discussion="Stable month.")
        filename, pdf = await self.builder.build([self.house], 2024, 5, table)

        self.assertEqual(filename, "House 1 - May 2024 Report.pdf")
        self.assertTrue(pdf.startswith(b"%PDF"))

    async def test_table_name_overrides_file_name(self):
        filename, _ = await self.builder.build(
            [self.house], 2024, 5, ReportTableData(name="Custom")
        )
        self.assertEqual(filename, "Custom - May 2024 Report.pdf")


if __name__ == '__main__':
    unittest.main()
