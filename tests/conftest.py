import math
from datetime import datetime, timedelta, timezone

import pytest

from trackview.distance import EARTH_RADIUS_KM, KM_PER_MILE
from trackview.models import GeoPoint

BASE_TIME = datetime(2024, 6, 15, 8, 0, 0, tzinfo=timezone.utc)

# Degrees of latitude spanning one mile along a meridian
MILE_DEG = math.degrees(KM_PER_MILE / EARTH_RADIUS_KM)


def points_at_miles(distances_mi, seconds_per_mile=480.0, elevations=None, heart_rates=None):
    """Points due north of a fixed start at the given distances in miles.

    Timestamps follow a constant pace (default 8:00 min/mi).
    """
    points = []
    for i, d in enumerate(distances_mi):
        points.append(
            GeoPoint(
                lat=44.8765 + d * MILE_DEG,
                lon=-91.9207,
                elevation=elevations[i] if elevations is not None else 250.0,
                time=BASE_TIME + timedelta(seconds=d * seconds_per_mile),
                heart_rate=heart_rates[i] if heart_rates is not None else None,
            )
        )
    return points


def to_feature_collection(points):
    """GeoJSON point collection in the route export format."""
    features = []
    for pt in points:
        properties = {"ele": pt.elevation, "time": pt.time.isoformat().replace("+00:00", "Z")}
        if pt.heart_rate is not None:
            properties["gpxtpx_TrackPointExtension"] = (
                f"<gpxtpx:TrackPointExtension><gpxtpx:hr>{pt.heart_rate}</gpxtpx:hr>"
                "</gpxtpx:TrackPointExtension>"
            )
        features.append({
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [pt.lon, pt.lat]},
            "properties": properties,
        })
    return {"type": "FeatureCollection", "features": features}


@pytest.fixture
def mile_track():
    """Five points at 0, 1, 2, 3 and 4 miles, 8:00 min/mi."""
    return points_at_miles([0, 1, 2, 3, 4], heart_rates=[120, 130, 140, 150, 160])


@pytest.fixture
def fine_track():
    """2.5 miles sampled every 0.05 mi at 8:00 min/mi, gently rolling."""
    distances = [i * 0.05 for i in range(51)]
    elevations = [250.0 + 5.0 * math.sin(i / 4) for i in range(51)]
    return points_at_miles(distances, elevations=elevations)


@pytest.fixture
def make_points():
    return points_at_miles


@pytest.fixture
def make_collection():
    return to_feature_collection
