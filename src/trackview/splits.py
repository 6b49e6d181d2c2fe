from trackview.distance import miles_to_km, point_distance_km
from trackview.formatters import format_duration
from trackview.models import GeoPoint, MileSplit


def segment_miles(track: list[GeoPoint]) -> list[MileSplit]:
    """Detect each whole-mile crossing and time the mile since the previous one.

    The first mile is timed from the first point. When a single segment
    spans several whole miles each crossing is still reported, the extra
    ones with zero duration since they share the crossing point.
    """
    if len(track) < 2:
        return []

    splits: list[MileSplit] = []
    distance_km = 0.0
    mile_number = 1
    last_crossing = track[0].time

    for i in range(1, len(track)):
        curr = track[i]
        distance_km += point_distance_km(track[i - 1], curr)

        while distance_km >= miles_to_km(mile_number):
            splits.append(
                MileSplit(
                    mile_number=mile_number,
                    split_duration_sec=(curr.time - last_crossing).total_seconds(),
                    lat=curr.lat,
                    lon=curr.lon,
                )
            )
            last_crossing = curr.time
            mile_number += 1

    return splits


def format_split(split: MileSplit) -> str:
    """Popup text for a mile marker."""
    return f"<b>Mile {split.mile_number}: {format_duration(split.split_duration_sec)}</b>"
