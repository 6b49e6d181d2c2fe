import math
from dataclasses import replace

import pytest

from trackview.analyzer import aggregate, format_summary
from trackview.distance import FEET_PER_METER
from trackview.models import TrackMetrics
from trackview.track import annotate_track


class TestAggregate:
    def test_fewer_than_two_points(self, make_points):
        for points in ([], make_points([0])):
            metrics = aggregate(annotate_track(points))
            assert metrics.total_distance_mi is None
            assert metrics.total_elevation_gain_ft is None
            assert metrics.average_pace_min_per_mi is None
            assert not metrics.available

    def test_total_distance(self, mile_track):
        metrics = aggregate(annotate_track(mile_track))
        assert metrics.total_distance_mi == pytest.approx(4.0)

    def test_average_pace(self, mile_track):
        # 480 s per mile
        metrics = aggregate(annotate_track(mile_track))
        assert metrics.average_pace_min_per_mi == pytest.approx(8.0)

    def test_elevation_gain_ignores_descents(self, make_points):
        points = make_points([0, 1, 2, 3], elevations=[100.0, 110.0, 105.0, 120.0])
        metrics = aggregate(annotate_track(points))
        assert metrics.total_elevation_gain_ft == pytest.approx(25.0 * FEET_PER_METER)

    def test_downhill_has_no_gain(self, make_points):
        points = make_points([0, 1, 2], elevations=[120.0, 100.0, 80.0])
        metrics = aggregate(annotate_track(points))
        assert metrics.total_elevation_gain_ft == 0.0

    def test_missing_elevation_skipped(self, make_points):
        points = make_points([0, 1, 2, 3], elevations=[100.0, None, 130.0, 140.0])
        metrics = aggregate(annotate_track(points))
        # Only the 130 -> 140 segment has both elevations
        assert metrics.total_elevation_gain_ft == pytest.approx(10.0 * FEET_PER_METER)
        assert metrics.total_distance_mi == pytest.approx(3.0)

    def test_nan_elevation_skipped(self, make_points):
        points = make_points([0, 1, 2], elevations=[100.0, math.nan, 110.0])
        metrics = aggregate(annotate_track(points))
        assert metrics.total_elevation_gain_ft == 0.0

    def test_zero_distance_is_unavailable(self, make_points):
        points = make_points([0, 0, 0], elevations=[100.0, 105.0, 110.0])
        points[1] = replace(points[1], time=points[0].time.replace(minute=2))
        points[2] = replace(points[2], time=points[0].time.replace(minute=5))
        metrics = aggregate(annotate_track(points))
        assert metrics.total_distance_mi is None
        assert metrics.total_elevation_gain_ft is None
        assert metrics.average_pace_min_per_mi is None
        assert not metrics.available
        assert format_summary(metrics) == {"distance": "--", "elevation": "--", "pace": "--"}


class TestFormatSummary:
    def test_available(self, mile_track):
        summary = format_summary(aggregate(annotate_track(mile_track)))
        assert summary == {"distance": "4.00", "elevation": "0", "pace": "8:00"}

    def test_unavailable_shows_placeholder(self, make_points):
        summary = format_summary(aggregate(annotate_track(make_points([0]))))
        assert summary == {"distance": "--", "elevation": "--", "pace": "--"}
        assert not any("nan" in value.lower() for value in summary.values())

    def test_pace_seconds_padded(self):
        metrics = TrackMetrics(total_distance_mi=5.0, total_elevation_gain_ft=12.4, average_pace_min_per_mi=7.1)
        summary = format_summary(metrics)
        assert summary["pace"] == "7:06"
        assert summary["elevation"] == "12"

    def test_zero_distance(self):
        metrics = TrackMetrics(total_distance_mi=0.0, total_elevation_gain_ft=0.0, average_pace_min_per_mi=None)
        assert format_summary(metrics)["pace"] == "--"
