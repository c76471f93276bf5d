import threading
import unittest
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

from pems.core.charts import (
    ChartRenderer,
    ChartService,
    ChartTarget,
    ChartType,
    build_hourly_chart,
    build_mini_chart,
    build_trend_chart,
    rasterize,
    y_axis_bounds
)
from pems.core.data.models import BucketedSeries, ChannelConfig, Metric, Reading, SeriesPoint

PNG_SIGNATURE = b"\x89PNG"


def series(values, prefix="May"):
    return BucketedSeries(points=[
        SeriesPoint(label=f"{prefix} {i + 1:02d}", value=v) for i, v in enumerate(values)
    ])


class TestChartSpecs(unittest.TestCase):
    """Test cases for chart definitions."""

    def test_ammonia_low_ceiling_without_real_data(self):
        self.assertEqual(y_axis_bounds(Metric.AMMONIA, [None, 0.0, 0.5]).max, 1)
        self.assertEqual(y_axis_bounds(Metric.AMMONIA, []).max, 1)

    def test_ammonia_fixed_ceiling_with_data(self):
        bounds = y_axis_bounds(Metric.AMMONIA, [0.5, 4.0])
        self.assertEqual((bounds.min, bounds.max), (0, 30))

    def test_temperature_fixed_range(self):
        bounds = y_axis_bounds(Metric.TEMPERATURE, [45.0])
        self.assertEqual((bounds.min, bounds.max), (10, 40))

    def test_trend_chart_keeps_gaps(self):
        spec = build_trend_chart(Metric.TEMPERATURE, series([24.0, None, 25.0]), ChartTarget.STATIC)

        self.assertEqual(spec.chart_type, ChartType.LINE)
        self.assertEqual(spec.title, "Monthly Avg")
        self.assertEqual(spec.labels, ["May 01", "May 02", "May 03"])
        self.assertEqual(spec.datasets[0].data, [24.0, None, 25.0])
        self.assertEqual(spec.datasets[0].color, "#ff9500")
        self.assertEqual(spec.target, ChartTarget.STATIC)

    def test_hourly_chart(self):
        spec = build_hourly_chart(Metric.AMMONIA, series([None] * 24, prefix="h"))
        self.assertEqual(spec.chart_type, ChartType.BAR)
        self.assertEqual(spec.datasets[0].alpha, 0.6)
        self.assertFalse(spec.has_data)

    def test_mini_chart_labels_in_local_time(self):
        manila = timezone(timedelta(hours=8))
        readings = [Reading(timestamp=datetime(2024, 5, 1, 1, 5, tzinfo=timezone.utc), value=3.0)]
        spec = build_mini_chart(Metric.AMMONIA, readings, manila)
        self.assertEqual(spec.labels, ["09:05"])
        self.assertEqual(spec.datasets[0].data, [3.0])


class TestChartRenderer(unittest.TestCase):
    """Test cases for figure lifecycle per slot."""

    def setUp(self):
        self.renderer = ChartRenderer()
        self.spec = build_trend_chart(Metric.AMMONIA, series([2.0, None, 3.5]))

    def tearDown(self):
        self.renderer.close()

    def test_same_slot_reuses_figure(self):
        first = self.renderer.render("dashboard.ammonia", self.spec, (300, 120))
        updated = build_trend_chart(Metric.AMMONIA, series([5.0, 6.0, 7.0]))
        second = self.renderer.render("dashboard.ammonia", updated, (300, 120))

        self.assertIs(first, second)
        self.assertEqual(self.renderer.slots, ["dashboard.ammonia"])

    def test_size_or_type_change_replaces_figure(self):
        first = self.renderer.render("slot", self.spec, (300, 120))
        resized = self.renderer.render("slot", self.spec, (600, 300))
        self.assertIsNot(first, resized)

        bar = build_hourly_chart(Metric.AMMONIA, series([1.0] * 24, prefix="h"))
        replaced = self.renderer.render("slot", bar, (600, 300))
        self.assertIsNot(resized, replaced)
        self.assertEqual(len(self.renderer.slots), 1)

    def test_png_export(self):
        self.renderer.render("slot", self.spec, (300, 120))
        self.assertTrue(self.renderer.to_png("slot").startswith(PNG_SIGNATURE))
        self.assertTrue(self.renderer.to_data_url("slot").startswith("data:image/png;base64,"))

    def test_unknown_slot(self):
        with self.assertRaises(KeyError):
            self.renderer.to_png("missing")

    def test_close_disposes_all_slots(self):
        self.renderer.render("a", self.spec, (300, 120))
        self.renderer.render("b", self.spec, (300, 120))
        self.renderer.close()
        self.assertEqual(self.renderer.slots, [])
        self.assertIsNone(self.renderer.figure("a"))

    def test_render_data_url_from_threads(self):
        specs = [build_trend_chart(Metric.AMMONIA, series([float(i), 2.0])) for i in range(6)]
        with ThreadPoolExecutor(max_workers=3) as pool:
            urls = list(pool.map(lambda spec: self.renderer.render_data_url("shared", spec, (300, 120)), specs))

        self.assertTrue(all(url.startswith("data:image/png;base64,") for url in urls))
        self.assertEqual(self.renderer.slots, ["shared"])

    def test_rasterize_empty_chart(self):
        spec = build_trend_chart(Metric.TEMPERATURE, series([None, None]), ChartTarget.STATIC)
        self.assertTrue(rasterize(spec, (600, 300)).startswith(PNG_SIGNATURE))

class TestChartService(unittest.IsolatedAsyncioTestCase):
    """Test cases for analytics charts."""

    def setUp(self):
        self.render_threads = []
        self.renderer = MagicMock()

        def render_data_url(slot, spec, size):
            self.render_threads.append(threading.get_ident())
            return "data:image/png;base64,AAAA"
        self.renderer.render_data_url.side_effect = render_data_url

        self.telemetry = MagicMock()
        self.telemetry.tz = timezone.utc
        now = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)
        self.telemetry.fetch_recent = AsyncMock(return_value=[
            Reading(timestamp=now, value=4.0),
            Reading(timestamp=now + timedelta(hours=1), value=6.0),
        ])
        self.service = ChartService(self.telemetry, self.renderer)
        self.channel = ChannelConfig(branch="north", firestore_id="h1", channel_id="1")

    async def test_trend_renders_off_the_event_loop(self):
        result = await self.service.trend(self.channel, Metric.AMMONIA, days=1)

        self.assertEqual(result["image"], "data:image/png;base64,AAAA")
        self.assertEqual(result["spec"]["labels"], ["08:00", "09:00"])
        self.assertEqual(len(self.render_threads), 1)
        self.assertNotEqual(self.render_threads[0], threading.get_ident())
        slot = self.renderer.render_data_url.call_args.args[0]
        self.assertEqual(slot, "analytics.trend.ammonia")



if __name__ == '__main__':
    unittest.main()
