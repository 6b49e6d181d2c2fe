import math
import os

import pytest

from trackview.parser import extract_from_extension, parse_gpx, parse_point_features

SAMPLE_GPX_PATH = os.path.join(
    os.path.dirname(__file__), "..", "functional", "data", "sample_run.gpx"
)


def _feature(coords, **properties):
    return {"type": "Feature", "geometry": {"type": "Point", "coordinates": coords}, "properties": properties}


def _collection(*features):
    return {"type": "FeatureCollection", "features": list(features)}


class TestExtractFromExtension:
    def test_heart_rate(self):
        xml = "<gpxtpx:TrackPointExtension><gpxtpx:hr>142</gpxtpx:hr></gpxtpx:TrackPointExtension>"
        assert extract_from_extension(xml, "hr") == 142

    def test_missing_tag(self):
        xml = "<gpxtpx:TrackPointExtension><gpxtpx:cad>88</gpxtpx:cad></gpxtpx:TrackPointExtension>"
        assert extract_from_extension(xml, "hr") is None

    def test_empty(self):
        assert extract_from_extension("", "hr") is None


class TestParsePointFeatures:
    def test_parse_sample(self, make_collection, mile_track):
        points = parse_point_features(make_collection(mile_track))
        assert len(points) == 5
        assert points[0].lat == pytest.approx(mile_track[0].lat)
        assert points[0].lon == pytest.approx(mile_track[0].lon)
        assert points[0].elevation == pytest.approx(250.0)
        assert points[0].time == mile_track[0].time
        assert points[2].heart_rate == 140
        assert points[0].cumulative_distance_mi is None

    def test_coordinates_are_lon_lat(self):
        points = parse_point_features(_collection(_feature([-91.92, 44.87], ele=250, time="2024-06-15T08:00:00Z")))
        assert points[0].lat == 44.87
        assert points[0].lon == -91.92

    def test_malformed_points_dropped(self):
        collection = _collection(
            _feature([-91.92, 44.87], ele=250, time="2024-06-15T08:00:00Z"),
            _feature([], ele=250, time="2024-06-15T08:00:05Z"),
            _feature([-91.92, None], ele=250, time="2024-06-15T08:00:10Z"),
            _feature([-91.92, 44.88], ele=250),
            _feature([-91.92, 44.88], ele=250, time="yesterday"),
            _feature(["nan", 44.88], ele=250, time="2024-06-15T08:00:15Z"),
            "not a feature",
            _feature([-91.92, 44.89], ele=255, time="2024-06-15T08:00:20Z"),
        )
        points = parse_point_features(collection)
        assert [p.lat for p in points] == [44.87, 44.89]

    def test_missing_elevation_kept(self):
        points = parse_point_features(_collection(_feature([-91.92, 44.87], time="2024-06-15T08:00:00Z")))
        assert len(points) == 1
        assert points[0].elevation is None

    def test_non_numeric_elevation(self):
        points = parse_point_features(_collection(_feature([-91.92, 44.87], ele="high", time="2024-06-15T08:00:00Z")))
        assert points[0].elevation is None

    def test_naive_time_assumed_utc(self):
        points = parse_point_features(_collection(_feature([-91.92, 44.87], ele=1, time="2024-06-15T08:00:00")))
        assert points[0].time.utcoffset().total_seconds() == 0

    def test_empty_collection(self):
        assert parse_point_features(_collection()) == []

    def test_not_a_feature_collection(self):
        with pytest.raises(ValueError):
            parse_point_features({"type": "Feature"})
        with pytest.raises(ValueError):
            parse_point_features([])


GPX_WITH_HR = """<?xml version="1.0"?>
<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1"
     xmlns:gpxtpx="http://www.garmin.com/xmlschemas/TrackPointExtension/v1">
  <trk><trkseg>
    <trkpt lat="44.8765" lon="-91.9207">
      <ele>250.0</ele>
      <time>2024-06-15T08:00:00Z</time>
      <extensions><gpxtpx:TrackPointExtension><gpxtpx:hr>131</gpxtpx:hr></gpxtpx:TrackPointExtension></extensions>
    </trkpt>
    <trkpt lat="44.8775" lon="-91.9207">
      <ele>252.0</ele>
      <time>2024-06-15T08:00:30Z</time>
    </trkpt>
    <trkpt lat="44.8785" lon="-91.9207">
      <ele>253.0</ele>
    </trkpt>
  </trkseg></trk>
</gpx>"""


class TestParseGpx:
    def test_parse_with_heart_rate(self, tmp_path):
        path = tmp_path / "run.gpx"
        path.write_text(GPX_WITH_HR)
        points = parse_gpx(str(path))
        assert len(points) == 2
        assert points[0].heart_rate == 131
        assert points[1].heart_rate is None
        assert points[0].elevation == pytest.approx(250.0)
        assert points[0].time.tzinfo is not None

    def test_file_not_found(self):
        with pytest.raises(FileNotFoundError):
            parse_gpx("/nonexistent/path/file.gpx")

    def test_sample_file(self):
        points = parse_gpx(SAMPLE_GPX_PATH)
        assert len(points) > 2
        assert all(not math.isnan(p.lat) for p in points)
