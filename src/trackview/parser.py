"""Normalise raw trackpoint payloads into GeoPoints.

Two inputs are accepted: the GeoJSON point collection produced by the route
export (one Point feature per trackpoint) and plain GPX files.
"""

import logging
import math
import re
from datetime import datetime, timezone

import gpxpy

from trackview.models import GeoPoint

logger = logging.getLogger(__name__)

# Property carrying the raw Garmin TrackPointExtension XML in exported GeoJSON
EXTENSION_PROPERTY = "gpxtpx_TrackPointExtension"


def extract_from_extension(xml: str, tag: str) -> int | None:
    """Extract an integer value from a <gpxtpx:TAG> element, e.g. heart rate."""
    if not xml:
        return None
    match = re.search(rf"<gpxtpx:{re.escape(tag)}>(\d+)</gpxtpx:{re.escape(tag)}>", xml)
    return int(match.group(1)) if match else None


def _parse_time(value) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _as_float(value) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return result if math.isfinite(result) else None


def _point_from_feature(feature: dict) -> GeoPoint | None:
    geometry = feature.get("geometry") or {}
    coords = geometry.get("coordinates") or []
    if len(coords) < 2:
        return None
    lon = _as_float(coords[0])
    lat = _as_float(coords[1])
    if lat is None or lon is None:
        return None

    properties = feature.get("properties") or {}
    time = _parse_time(properties.get("time"))
    if time is None:
        return None

    return GeoPoint(
        lat=lat,
        lon=lon,
        elevation=_as_float(properties.get("ele")),
        time=time,
        heart_rate=extract_from_extension(properties.get(EXTENSION_PROPERTY) or "", "hr"),
    )


def parse_point_features(collection: dict) -> list[GeoPoint]:
    """Convert a GeoJSON point FeatureCollection into GeoPoints.

    Features without usable coordinates or timestamp are dropped; a missing
    elevation is kept as None so the point still contributes distance.

    Raises:
        ValueError: If the payload is not a FeatureCollection.
    """
    if not isinstance(collection, dict) or collection.get("type") != "FeatureCollection":
        raise ValueError("Expected a GeoJSON FeatureCollection")

    features = collection.get("features") or []
    points: list[GeoPoint] = []
    dropped = 0
    for feature in features:
        point = _point_from_feature(feature) if isinstance(feature, dict) else None
        if point is None:
            dropped += 1
            continue
        points.append(point)

    if dropped:
        logger.debug("Dropped %d malformed trackpoints of %d", dropped, len(features))
    return points


def _heart_rate_from_extensions(extensions) -> int | None:
    for ext in extensions or []:
        for element in ext.iter():
            tag = element.tag.rsplit("}", 1)[-1]
            if tag == "hr" and element.text:
                try:
                    return int(element.text.strip())
                except ValueError:
                    return None
    return None


def parse_gpx(filepath: str) -> list[GeoPoint]:
    """Parse a GPX file and return a list of GeoPoints."""
    with open(filepath, "r") as f:
        gpx = gpxpy.parse(f)

    points: list[GeoPoint] = []
    dropped = 0
    for track in gpx.tracks:
        for segment in track.segments:
            for pt in segment.points:
                if pt.time is None:
                    dropped += 1
                    continue
                time = pt.time if pt.time.tzinfo else pt.time.replace(tzinfo=timezone.utc)
                points.append(
                    GeoPoint(
                        lat=pt.latitude,
                        lon=pt.longitude,
                        elevation=pt.elevation,
                        time=time,
                        heart_rate=_heart_rate_from_extensions(pt.extensions),
                    )
                )

    if dropped:
        logger.debug("Dropped %d GPX trackpoints without a timestamp", dropped)
    return points
