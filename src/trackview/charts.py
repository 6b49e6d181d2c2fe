"""Chart series for the elevation and pace views, plus a static PNG rendering."""

import io
from dataclasses import dataclass, field

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for server
import matplotlib.pyplot as plt

from trackview.distance import FEET_PER_METER
from trackview.models import GeoPoint, PaceSeries

ELEVATION_COLOR = '#4bc0c0'
PACE_COLOR = 'orange'

# Pace axis limits (min/mi); faster pace plots higher
PACE_AXIS_FAST = 6
PACE_AXIS_SLOW = 10


@dataclass
class ChartSeries:
    labels: list[str] = field(default_factory=list)  # distance in miles, 2 decimals
    values: list[float | None] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"labels": self.labels, "values": self.values}


def distance_label(distance_mi: float) -> str:
    return f"{distance_mi:.2f}"


def elevation_series(track: list[GeoPoint]) -> ChartSeries:
    """Elevation in feet against cumulative miles, one entry per segment end."""
    series = ChartSeries()
    for pt in track[1:]:
        series.labels.append(distance_label(pt.cumulative_distance_mi or 0.0))
        series.values.append(pt.elevation * FEET_PER_METER if pt.elevation is not None else None)
    return series


def pace_chart_series(pace: PaceSeries) -> ChartSeries:
    """Smoothed pace against the distance of each kept sample."""
    return ChartSeries(
        labels=[distance_label(s.cumulative_distance_mi) for s in pace.smoothed],
        values=[s.pace_min_per_mi for s in pace.smoothed],
    )


def _label_values(series: ChartSeries) -> tuple[list[float], list[float]]:
    xs, ys = [], []
    for label, value in zip(series.labels, series.values):
        if value is None:
            continue
        xs.append(float(label))
        ys.append(value)
    return xs, ys


def render_charts_png(elevation: ChartSeries, pace: ChartSeries, total_distance_mi: float | None = None) -> bytes:
    """Render elevation and pace charts stacked on a shared distance axis.

    Returns:
        PNG image bytes.
    """
    fig, (ax_elev, ax_pace) = plt.subplots(2, 1, figsize=(10, 6), sharex=True)
    try:
        xs, ys = _label_values(elevation)
        if xs:
            ax_elev.fill_between(xs, ys, min(ys), color=ELEVATION_COLOR, alpha=0.2)
            ax_elev.plot(xs, ys, color=ELEVATION_COLOR, linewidth=1.5)
        ax_elev.set_ylabel('Elevation (ft)')

        xs, ys = _label_values(pace)
        if xs:
            ax_pace.plot(xs, ys, color=PACE_COLOR, linewidth=1.5)
        ax_pace.set_ylim(PACE_AXIS_SLOW, PACE_AXIS_FAST)
        ax_pace.set_ylabel('Pace (min/mi)')
        ax_pace.set_xlabel('Distance (mi)')

        if total_distance_mi:
            ax_pace.set_xlim(0, max(1, round(total_distance_mi)))
        for ax in (ax_elev, ax_pace):
            ax.spines['top'].set_visible(False)
            ax.spines['right'].set_visible(False)
            ax.grid(True, alpha=0.3)

        fig.tight_layout()
        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=100)
        return buf.getvalue()
    finally:
        plt.close(fig)
