"""Distance primitives and unit constants.

Every km/mi conversion in the package goes through KM_PER_MILE so that the
annotated cumulative distance, the aggregate total and the mile splits agree.
"""

from __future__ import annotations
import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from trackview.models import GeoPoint

# Earth's mean radius in kilometers
EARTH_RADIUS_KM = 6371.0

KM_PER_MILE = 1.609
FEET_PER_METER = 3.28084


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate great-circle distance between two points using Haversine formula.

    Args:
        lat1, lon1: First point coordinates in degrees
        lat2, lon2: Second point coordinates in degrees

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    # Rounding can push a fractionally above 1 for antipodal points
    c = 2 * math.asin(math.sqrt(min(1.0, a)))

    return EARTH_RADIUS_KM * c


def point_distance_km(p1: GeoPoint, p2: GeoPoint) -> float:
    """Haversine distance between two GeoPoints in kilometers."""
    return haversine_km(p1.lat, p1.lon, p2.lat, p2.lon)


def km_to_miles(km: float) -> float:
    return km / KM_PER_MILE


def miles_to_km(miles: float) -> float:
    return miles * KM_PER_MILE


def planar_distance_sq(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Squared planar distance in degrees.

    Only meaningful for ranking nearby candidates, e.g. finding the trackpoint
    closest to a pointer position on the map.
    """
    return (lat1 - lat2) ** 2 + (lon1 - lon2) ** 2
