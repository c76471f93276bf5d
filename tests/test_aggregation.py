import math
import unittest
from datetime import datetime, timedelta, timezone

from pems.core.analytics.aggregation import (
    aggregate_daily,
    aggregate_hourly,
    merge_series,
    series_stats
)
from pems.core.data.models import BucketedSeries, Reading, SeriesPoint


def reading(ts, value):
    return Reading(timestamp=ts, value=value)


class TestAggregateHourly(unittest.TestCase):
    """Test cases for hour-of-day bucketing."""

    def test_empty_input_yields_24_nulls(self):
        series = aggregate_hourly([])
        self.assertEqual(len(series), 24)
        self.assertEqual(series.labels[0], "00:00")
        self.assertEqual(series.labels[-1], "23:00")
        self.assertTrue(all(v is None for v in series.values))

    def test_groups_by_utc_hour_and_averages(self):
        base = datetime(2024, 5, 1, 5, 0, tzinfo=timezone.utc)
        readings = [
            reading(base, 10.0),
            reading(base + timedelta(minutes=30), 11.0),
            reading(base + timedelta(days=1, minutes=10), 12.5),
            reading(base.replace(hour=13), 30.0),
        ]
        series = aggregate_hourly(readings)

        self.assertAlmostEqual(series.values[5], 11.17)
        self.assertEqual(series.values[13], 30.0)
        self.assertIsNone(series.values[6])

    def test_uses_utc_not_local_offset(self):
        manila = timezone(timedelta(hours=8))
        # 09:00 in Manila is 01:00 UTC
        series = aggregate_hourly([reading(datetime(2024, 5, 1, 9, 0, tzinfo=manila), 4.0)])
        self.assertEqual(series.values[1], 4.0)
        self.assertIsNone(series.values[9])

    def test_nan_only_bucket_is_null_not_zero(self):
        ts = datetime(2024, 5, 1, 2, 0, tzinfo=timezone.utc)
        series = aggregate_hourly([reading(ts, float("nan")), reading(ts, None)])
        self.assertIsNone(series.values[2])

    def test_does_not_mutate_input(self):
        ts = datetime(2024, 5, 1, 2, 0, tzinfo=timezone.utc)
        readings = [reading(ts, 1.0)]
        aggregate_hourly(readings)
        self.assertEqual(len(readings), 1)
        self.assertEqual(readings[0].value, 1.0)


class TestAggregateDaily(unittest.TestCase):
    """Test cases for day-of-month bucketing."""

    def test_full_length_with_sparse_data(self):
        readings = [
            reading(datetime(2024, 2, day, 12, 0, tzinfo=timezone.utc), float(day))
            for day in (1, 10, 29)
        ]
        series = aggregate_daily(readings, 29, "Feb")

        self.assertEqual(len(series), 29)
        self.assertEqual(series.labels[0], "Feb 01")
        self.assertEqual(series.values[0], 1.0)
        self.assertEqual(series.values[9], 10.0)
        self.assertEqual(series.values[28], 29.0)
        self.assertEqual(sum(1 for v in series.values if v is None), 26)

    def test_plain_labels_without_prefix(self):
        series = aggregate_daily([], 30)
        self.assertEqual(series.labels[:3], ["1", "2", "3"])

    def test_ignores_days_outside_month(self):
        series = aggregate_daily([reading(datetime(2024, 1, 31, tzinfo=timezone.utc), 5.0)], 30)
        self.assertTrue(series.is_empty)

    def test_rejects_non_positive_length(self):
        with self.assertRaises(ValueError):
            aggregate_daily([], 0)


class TestMergeSeries(unittest.TestCase):
    """Test cases for multi-device merge."""

    def series(self, values):
        return BucketedSeries(points=[
            SeriesPoint(label=f"{i:02d}:00", value=v) for i, v in enumerate(values)
        ])

    def test_null_only_when_every_device_is_null(self):
        a = self.series([None, 4.0, None])
        b = self.series([10.0, 6.0, None])
        merged = merge_series([a, b])
        self.assertEqual(merged.values, [10.0, 5.0, None])

    def test_divides_by_valid_contributors_only(self):
        merged = merge_series([self.series([3.0]), self.series([None]), self.series([5.0])])
        self.assertEqual(merged.values, [4.0])

    def test_length_mismatch_is_rejected(self):
        with self.assertRaises(ValueError):
            merge_series([self.series([1.0]), self.series([1.0, 2.0])])

    def test_empty_list_is_rejected(self):
        with self.assertRaises(ValueError):
            merge_series([])


class TestSeriesStats(unittest.TestCase):

    def test_stats(self):
        series = BucketedSeries(points=[
            SeriesPoint(label="a", value=2.0),
            SeriesPoint(label="b", value=None),
            SeriesPoint(label="c", value=6.0),
        ])
        self.assertEqual(series_stats(series), (4.0, 6.0, "c"))

    def test_empty(self):
        self.assertEqual(series_stats(BucketedSeries()), (None, None, None))


if __name__ == '__main__':
    unittest.main()
