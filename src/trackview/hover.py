"""Synchronized hover across the map cursor and the two charts.

Every view reports pointer activity as "pointer at distance d on view V" or
"pointer left view V". The coordinator resolves that to a trackpoint, moves
the map cursor there and highlights the matching label on every other chart.
Chart libraries raise their own hover callbacks when a highlight is set
programmatically, so each transition runs under a re-entrancy flag and any
transition arriving while it is held is dropped.
"""

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Protocol

from trackview.distance import planar_distance_sq
from trackview.formatters import format_point_popup
from trackview.models import GeoPoint, HoverState

logger = logging.getLogger(__name__)

MAP_VIEW = "map"

# Maximum gap (miles) between hovered distance and a chart label to highlight it
DEFAULT_MATCH_TOLERANCE = 0.01


class MapCursor(Protocol):
    def show(self, lat: float, lon: float, popup_html: str) -> None: ...

    def hide(self) -> None: ...


class ChartView(Protocol):
    labels: Sequence[str]

    def set_highlight(self, index: int) -> None: ...

    def clear_highlight(self) -> None: ...


def nearest_index_by_distance(track: Sequence[GeoPoint], distance_mi: float) -> int | None:
    """Index of the point whose cumulative distance is closest; first one wins ties."""
    best_index = None
    best_gap = None
    for i, pt in enumerate(track):
        gap = abs((pt.cumulative_distance_mi or 0.0) - distance_mi)
        if best_gap is None or gap < best_gap:
            best_index, best_gap = i, gap
    return best_index


def nearest_index_by_position(track: Sequence[GeoPoint], lat: float, lon: float) -> int | None:
    """Index of the point closest to (lat, lon) by squared planar distance."""
    best_index = None
    best_dist = None
    for i, pt in enumerate(track):
        dist = planar_distance_sq(pt.lat, pt.lon, lat, lon)
        if best_dist is None or dist < best_dist:
            best_index, best_dist = i, dist
    return best_index


def find_label_index(labels: Sequence[str], distance_mi: float, tolerance: float) -> int | None:
    """First label whose numeric value lies within tolerance of distance_mi."""
    for i, label in enumerate(labels):
        try:
            value = float(label)
        except (TypeError, ValueError):
            continue
        if abs(value - distance_mi) < tolerance:
            return i
    return None


class HoverSyncCoordinator:
    """Owns the shared hover state for one display session."""

    def __init__(
        self,
        track: Sequence[GeoPoint],
        map_cursor: MapCursor,
        charts: Mapping[str, ChartView],
        tolerance: float = DEFAULT_MATCH_TOLERANCE,
    ):
        if MAP_VIEW in charts:
            raise ValueError(f"'{MAP_VIEW}' is reserved for the map view")
        self.track = track
        self.map_cursor = map_cursor
        self.charts = dict(charts)
        self.tolerance = tolerance
        self.state = HoverState()
        self.closed = False

    def _accepts(self, source: str) -> bool:
        if self.closed:
            logger.debug("Ignoring %s event on closed coordinator", source)
            return False
        if self.state.is_syncing:
            logger.debug("Dropping re-entrant %s event", source)
            return False
        if source != MAP_VIEW and source not in self.charts:
            logger.debug("Ignoring event from unknown view %s", source)
            return False
        return True

    def hover(self, source: str, distance_mi: float) -> None:
        """Pointer entered or moved on a view at the given distance along track."""
        if not self._accepts(source):
            return

        self.state.is_syncing = True
        try:
            self.state.active_distance_mi = distance_mi
            index = nearest_index_by_distance(self.track, distance_mi)
            if index is None:
                self.map_cursor.hide()
            else:
                point = self.track[index]
                self.map_cursor.show(
                    point.lat, point.lon, format_point_popup(point, include_distance=source == MAP_VIEW)
                )

            for name, chart in self.charts.items():
                if name == source:
                    continue
                match = find_label_index(chart.labels, distance_mi, self.tolerance)
                if match is None:
                    chart.clear_highlight()
                else:
                    chart.set_highlight(match)
        finally:
            self.state.is_syncing = False

    def hover_map(self, lat: float, lon: float) -> None:
        """Pointer moved over the map; resolve the nearest trackpoint's distance."""
        if self.closed or self.state.is_syncing:
            return
        index = nearest_index_by_position(self.track, lat, lon)
        if index is None:
            return
        self.hover(MAP_VIEW, self.track[index].cumulative_distance_mi or 0.0)

    def leave(self, source: str) -> None:
        """Pointer left a view. A no-op when nothing is active."""
        if not self._accepts(source):
            return
        if not self.state.is_active:
            return
        self._go_idle()

    def _go_idle(self) -> None:
        self.state.is_syncing = True
        try:
            self.state.active_distance_mi = None
            self.map_cursor.hide()
            for chart in self.charts.values():
                chart.clear_highlight()
        finally:
            self.state.is_syncing = False

    def close(self) -> None:
        """Force Idle and stop reacting to events; called before charts are destroyed."""
        if self.closed:
            return
        if self.state.is_active:
            self._go_idle()
        self.state = HoverState()
        self.closed = True


def external_tooltip_handler(coordinator: HoverSyncCoordinator, source: str) -> Callable[[Mapping[str, Any]], None]:
    """Adapter for charts that report hover through an external tooltip renderer.

    The callback receives the tooltip context; an opacity of 0 or no data
    points means the pointer left the chart, otherwise the first data point's
    label is the hovered distance.
    """

    def on_tooltip(context: Mapping[str, Any]) -> None:
        tooltip = context.get("tooltip") or {}
        data_points = tooltip.get("data_points") or []
        if tooltip.get("opacity", 0) == 0 or not data_points:
            coordinator.leave(source)
            return
        try:
            distance = float(data_points[0]["label"])
        except (KeyError, TypeError, ValueError):
            coordinator.leave(source)
            return
        coordinator.hover(source, distance)

    return on_tooltip


def on_hover_handler(
    coordinator: HoverSyncCoordinator, source: str, labels: Sequence[str]
) -> Callable[[Sequence[Mapping[str, Any]]], None]:
    """Adapter for charts that report hover as a list of active elements."""

    def on_hover(active_elements: Sequence[Mapping[str, Any]]) -> None:
        if not active_elements:
            coordinator.leave(source)
            return
        index = active_elements[0].get("index")
        if index is None or not 0 <= index < len(labels):
            coordinator.leave(source)
            return
        try:
            distance = float(labels[index])
        except (TypeError, ValueError):
            coordinator.leave(source)
            return
        coordinator.hover(source, distance)

    return on_hover
