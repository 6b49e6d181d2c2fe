"""Formatting utilities for display."""

import html
import math
from datetime import datetime

from trackview.distance import FEET_PER_METER
from trackview.models import GeoPoint


def format_pace(minutes: float | None) -> str | None:
    """Format a pace in minutes as M:SS, or None if the pace is unusable."""
    if minutes is None or not math.isfinite(minutes) or minutes < 0:
        return None
    whole = math.floor(minutes)
    secs = round((minutes - whole) * 60)
    if secs == 60:
        whole += 1
        secs = 0
    return f"{whole}:{secs:02d}"


def format_duration(seconds: float) -> str:
    """Format a split duration in seconds as M:SS."""
    return format_pace(seconds / 60) or "0:00"


def format_time_of_day(dt: datetime) -> str:
    """Clock time of a timestamp in the local timezone."""
    return dt.astimezone().strftime("%H:%M:%S")


def format_elevation_ft(elevation_m: float | None) -> str:
    if elevation_m is None:
        return "n/a"
    return f"{elevation_m * FEET_PER_METER:.0f}"


def format_point_popup(point: GeoPoint, include_distance: bool = False) -> str:
    """HTML popup content describing one trackpoint."""
    lines = []
    if include_distance and point.cumulative_distance_mi is not None:
        lines.append(f"<b>Distance:</b> {point.cumulative_distance_mi:.2f} mi")
    heart_rate = str(point.heart_rate) if point.heart_rate is not None else "n/a"
    lines.append(f"<b>Elevation:</b> {html.escape(format_elevation_ft(point.elevation))} ft")
    lines.append(f"<b>Time:</b> {html.escape(format_time_of_day(point.time))}")
    lines.append(f"<b>Heart Rate:</b> {html.escape(heart_rate)} bpm")
    return "<br>".join(lines)
