"""Display session lifecycle and route switching.

A DisplaySession holds everything derived from one route: the annotated
track, its metrics and series, the two charts and the hover coordinator.
Switching routes tears the old session down completely before the new one
is built; RouteViewer tracks a generation number so that a fetch belonging
to a route the user has since abandoned never lands on screen.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from trackview.analyzer import aggregate
from trackview.charts import ChartSeries, elevation_series, pace_chart_series
from trackview.fetch import RouteLoadError, RouteSource
from trackview.hover import (
    DEFAULT_MATCH_TOLERANCE,
    HoverSyncCoordinator,
    MapCursor,
    external_tooltip_handler,
    on_hover_handler,
)
from trackview.models import GeoPoint, MileSplit, PaceParams, PaceSeries, TrackMetrics
from trackview.pace import build_pace_series
from trackview.parser import parse_point_features
from trackview.splits import format_split, segment_miles
from trackview.track import annotate_track

logger = logging.getLogger(__name__)

ELEVATION_CHART = "elevation"
PACE_CHART = "pace"

# Chart hover mechanisms: an external tooltip renderer or a direct hover event
TOOLTIP = "tooltip"
HOVER = "hover"


class MapView(MapCursor, Protocol):
    def draw_route(self, tracks: dict) -> None: ...

    def add_mile_marker(self, lat: float, lon: float, label: str, popup_html: str) -> None: ...

    def clear(self) -> None: ...


class RenderedChart(Protocol):
    labels: Sequence[str]
    hover_mechanism: str

    def set_highlight(self, index: int) -> None: ...

    def clear_highlight(self) -> None: ...

    def bind_pointer(self, callback: Callable[[Any], None]) -> None: ...

    def bind_leave(self, callback: Callable[[], None]) -> None: ...

    def unbind_leave(self) -> None: ...

    def destroy(self) -> None: ...


ChartFactory = Callable[[str, ChartSeries], RenderedChart]


@dataclass
class DisplaySession:
    route_id: str
    track: list[GeoPoint]
    metrics: TrackMetrics
    pace: PaceSeries
    splits: list[MileSplit]
    map_view: MapView
    charts: dict[str, RenderedChart] = field(default_factory=dict)
    coordinator: HoverSyncCoordinator | None = None
    closed: bool = False

    @classmethod
    def build(
        cls,
        route_id: str,
        points: list[GeoPoint],
        tracks: dict,
        map_view: MapView,
        chart_factory: ChartFactory,
        params: PaceParams | None = None,
        tolerance: float = DEFAULT_MATCH_TOLERANCE,
    ) -> "DisplaySession":
        track = annotate_track(points)
        pace = build_pace_series(track, params)
        session = cls(
            route_id=route_id,
            track=track,
            metrics=aggregate(track),
            pace=pace,
            splits=segment_miles(track),
            map_view=map_view,
        )

        try:
            map_view.draw_route(tracks)
            for split in session.splits:
                map_view.add_mile_marker(split.lat, split.lon, str(split.mile_number), format_split(split))

            session.charts[ELEVATION_CHART] = chart_factory(ELEVATION_CHART, elevation_series(track))
            session.charts[PACE_CHART] = chart_factory(PACE_CHART, pace_chart_series(pace))
            coordinator = HoverSyncCoordinator(track, map_view, session.charts, tolerance=tolerance)
            session.coordinator = coordinator

            for name, chart in session.charts.items():
                if chart.hover_mechanism == TOOLTIP:
                    chart.bind_pointer(external_tooltip_handler(coordinator, name))
                elif chart.hover_mechanism == HOVER:
                    chart.bind_pointer(on_hover_handler(coordinator, name, chart.labels))
                else:
                    raise ValueError(f"Unknown hover mechanism: {chart.hover_mechanism}")
                chart.bind_leave(lambda name=name: coordinator.leave(name))
        except Exception:
            # Leave nothing from a half-built session on the shared map
            session.teardown()
            raise
        return session

    def teardown(self) -> None:
        """Release the session; safe to call more than once."""
        if self.closed:
            return
        if self.coordinator is not None:
            self.coordinator.close()
        for chart in self.charts.values():
            chart.unbind_leave()
            chart.destroy()
        self.charts = {}
        self.map_view.clear()
        self.closed = True


class RouteViewer:
    """Shows one route at a time, discarding results of abandoned loads."""

    def __init__(
        self,
        source: RouteSource,
        map_view: MapView,
        chart_factory: ChartFactory,
        params: PaceParams | None = None,
        tolerance: float = DEFAULT_MATCH_TOLERANCE,
    ):
        self.source = source
        self.map_view = map_view
        self.chart_factory = chart_factory
        self.params = params
        self.tolerance = tolerance
        self.session: DisplaySession | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def _teardown(self) -> None:
        if self.session is not None:
            self.session.teardown()
            self.session = None

    async def select_route(self, route_id: str) -> DisplaySession | None:
        """Switch to a route; returns None if another selection superseded it.

        Raises:
            RouteLoadError: If the payloads for the current selection fail to load.
        """
        self._generation += 1
        generation = self._generation
        self._teardown()

        try:
            payload = await self.source.load_async(route_id)
        except RouteLoadError:
            if generation != self._generation:
                logger.info("Discarding failed load of superseded route %s", route_id)
                return None
            logger.warning("Failed to load route %s", route_id)
            raise

        if generation != self._generation:
            logger.info("Discarding stale result for route %s", route_id)
            return None

        points = parse_point_features(payload.points)
        self.session = DisplaySession.build(
            route_id,
            points,
            payload.tracks,
            self.map_view,
            self.chart_factory,
            params=self.params,
            tolerance=self.tolerance,
        )
        return self.session

    def close(self) -> None:
        self._generation += 1
        self._teardown()
