import math
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class GeoPoint:
    lat: float
    lon: float
    elevation: float | None  # meters
    time: datetime
    heart_rate: int | None = None  # bpm
    cumulative_distance_mi: float | None = None  # set by annotate_track


@dataclass
class TrackMetrics:
    """Aggregate metrics for one track. None marks a metric as unavailable."""

    total_distance_mi: float | None
    total_elevation_gain_ft: float | None
    average_pace_min_per_mi: float | None

    @property
    def available(self) -> bool:
        return self.total_distance_mi is not None

    @property
    def pace_minutes_seconds(self) -> tuple[int, float] | None:
        """Split average pace into whole minutes and residual seconds."""
        pace = self.average_pace_min_per_mi
        if pace is None or not math.isfinite(pace):
            return None
        minutes = math.floor(pace)
        return minutes, (pace - minutes) * 60


@dataclass
class PaceSample:
    cumulative_distance_mi: float
    pace_min_per_mi: float
    time: datetime  # timestamp of the segment's end point


@dataclass
class PaceSeries:
    raw: list[PaceSample] = field(default_factory=list)
    smoothed: list[PaceSample] = field(default_factory=list)


@dataclass
class MileSplit:
    mile_number: int
    split_duration_sec: float
    lat: float  # crossing trackpoint
    lon: float


@dataclass
class HoverState:
    active_distance_mi: float | None = None
    is_syncing: bool = False

    @property
    def is_active(self) -> bool:
        return self.active_distance_mi is not None


@dataclass
class PaceParams:
    min_pace: float = 3.0  # min/mi; samples at or below are GPS noise
    max_pace: float = 20.0  # min/mi; samples at or above are GPS noise
    smoothing_window_s: float = 15.0  # trailing window for the moving average
