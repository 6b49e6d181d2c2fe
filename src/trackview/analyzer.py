import math

from trackview.distance import FEET_PER_METER, km_to_miles, point_distance_km
from trackview.formatters import format_pace
from trackview.models import GeoPoint, TrackMetrics

UNAVAILABLE = "--"


def _elevation_delta(prev: GeoPoint, curr: GeoPoint) -> float | None:
    if prev.elevation is None or curr.elevation is None:
        return None
    delta = curr.elevation - prev.elevation
    return delta if math.isfinite(delta) else None


def _unavailable() -> TrackMetrics:
    return TrackMetrics(
        total_distance_mi=None,
        total_elevation_gain_ft=None,
        average_pace_min_per_mi=None,
    )


def aggregate(track: list[GeoPoint]) -> TrackMetrics:
    """Compute total distance, elevation gain and average pace for a track.

    Total distance is summed from pairwise segment distances independently of
    the annotated cumulative values. Only positive elevation deltas count
    toward gain; segments with a missing elevation are skipped. Tracks with
    fewer than two points or zero total distance are degenerate and report
    every metric as unavailable.
    """
    if len(track) < 2:
        return _unavailable()

    total_km = 0.0
    elevation_gain_m = 0.0
    for i in range(1, len(track)):
        total_km += point_distance_km(track[i - 1], track[i])
        delta = _elevation_delta(track[i - 1], track[i])
        if delta is not None and delta > 0:
            elevation_gain_m += delta

    if total_km <= 0:
        return _unavailable()

    total_mi = km_to_miles(total_km)
    elapsed_min = (track[-1].time - track[0].time).total_seconds() / 60
    if elapsed_min >= 0:
        average_pace = elapsed_min / total_mi
    else:
        average_pace = None

    return TrackMetrics(
        total_distance_mi=total_mi,
        total_elevation_gain_ft=elevation_gain_m * FEET_PER_METER,
        average_pace_min_per_mi=average_pace,
    )


def format_summary(metrics: TrackMetrics) -> dict[str, str]:
    """Display strings for the summary panel; unavailable metrics show '--'."""
    distance = metrics.total_distance_mi
    gain = metrics.total_elevation_gain_ft
    return {
        "distance": f"{distance:.2f}" if distance is not None else UNAVAILABLE,
        "elevation": f"{round(gain)}" if gain is not None else UNAVAILABLE,
        "pace": format_pace(metrics.average_pace_min_per_mi) or UNAVAILABLE,
    }
