"""Per-segment pace with GPS noise rejection and time-window smoothing."""

from trackview.distance import KM_PER_MILE, point_distance_km
from trackview.models import GeoPoint, PaceParams, PaceSample, PaceSeries


def _segment_pace(prev: GeoPoint, curr: GeoPoint) -> float | None:
    """Pace in min/mi over one segment, or None for a zero-length segment."""
    segment_km = point_distance_km(prev, curr)
    if segment_km <= 0:
        return None
    elapsed_min = (curr.time - prev.time).total_seconds() / 60
    return elapsed_min / segment_km * KM_PER_MILE


def smooth_pace(samples: list[PaceSample], window_s: float) -> list[PaceSample]:
    """Trailing moving average over a time window.

    For each sample, averages every earlier-or-equal sample whose timestamp is
    within window_s seconds of it, walking backward until the window is
    exceeded. The first sample passes through unchanged.
    """
    if not samples:
        return []

    smoothed = [samples[0]]
    for i in range(1, len(samples)):
        base_time = samples[i].time
        total = 0.0
        count = 0
        for j in range(i, -1, -1):
            if (base_time - samples[j].time).total_seconds() > window_s:
                break
            total += samples[j].pace_min_per_mi
            count += 1
        smoothed.append(
            PaceSample(
                cumulative_distance_mi=samples[i].cumulative_distance_mi,
                pace_min_per_mi=total / count,
                time=base_time,
            )
        )
    return smoothed


def build_pace_series(track: list[GeoPoint], params: PaceParams | None = None) -> PaceSeries:
    """Build raw and smoothed pace series from an annotated track.

    A segment only yields a sample when min_pace < pace < max_pace; anything
    else is GPS jitter (near-zero distance or time) and is dropped from both
    series, so indices follow the filtered samples rather than the points.
    """
    if params is None:
        params = PaceParams()

    raw: list[PaceSample] = []
    for i in range(1, len(track)):
        prev, curr = track[i - 1], track[i]
        pace = _segment_pace(prev, curr)
        if pace is None or not (params.min_pace < pace < params.max_pace):
            continue
        raw.append(
            PaceSample(
                cumulative_distance_mi=curr.cumulative_distance_mi or 0.0,
                pace_min_per_mi=pace,
                time=curr.time,
            )
        )

    return PaceSeries(raw=raw, smoothed=smooth_pace(raw, params.smoothing_window_s))
