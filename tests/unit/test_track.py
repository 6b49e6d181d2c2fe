import pytest

from trackview.analyzer import aggregate
from trackview.track import annotate_track


class TestAnnotateTrack:
    def test_empty(self):
        assert annotate_track([]) == []

    def test_single_point(self, make_points):
        result = annotate_track(make_points([0]))
        assert len(result) == 1
        assert result[0].cumulative_distance_mi == 0.0

    def test_first_point_zero_and_non_decreasing(self, fine_track):
        result = annotate_track(fine_track)
        assert result[0].cumulative_distance_mi == 0.0
        distances = [pt.cumulative_distance_mi for pt in result]
        assert all(b >= a for a, b in zip(distances, distances[1:]))

    def test_length_preserved(self, fine_track):
        assert len(annotate_track(fine_track)) == len(fine_track)

    def test_mile_distances(self, mile_track):
        result = annotate_track(mile_track)
        for i, pt in enumerate(result):
            assert pt.cumulative_distance_mi == pytest.approx(i)

    def test_input_not_mutated(self, mile_track):
        annotate_track(mile_track)
        assert all(pt.cumulative_distance_mi is None for pt in mile_track)

    def test_idempotent(self, fine_track):
        first = [pt.cumulative_distance_mi for pt in annotate_track(fine_track)]
        second = [pt.cumulative_distance_mi for pt in annotate_track(fine_track)]
        assert first == second

    def test_reannotating_annotated_track(self, fine_track):
        once = annotate_track(fine_track)
        twice = annotate_track(once)
        assert [p.cumulative_distance_mi for p in once] == [p.cumulative_distance_mi for p in twice]

    def test_stationary_points(self, make_points):
        result = annotate_track(make_points([0, 0, 0.5, 0.5]))
        assert [pt.cumulative_distance_mi for pt in result] == pytest.approx([0, 0, 0.5, 0.5])

    def test_final_distance_matches_aggregate(self, fine_track):
        track = annotate_track(fine_track)
        metrics = aggregate(track)
        assert track[-1].cumulative_distance_mi == pytest.approx(metrics.total_distance_mi, rel=1e-6)
