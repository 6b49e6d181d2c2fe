from dataclasses import replace

from trackview.distance import km_to_miles, point_distance_km
from trackview.models import GeoPoint


def annotate_track(points: list[GeoPoint]) -> list[GeoPoint]:
    """Attach cumulative distance in miles to every point.

    Single left-to-right pass: the first point is at 0.0 and each later point
    adds the haversine distance from its predecessor. Returns new GeoPoint
    instances, leaving the input untouched, so annotating the same sequence
    twice yields identical output.
    """
    annotated: list[GeoPoint] = []
    cumulative = 0.0
    for i, pt in enumerate(points):
        if i > 0:
            cumulative += km_to_miles(point_distance_km(points[i - 1], pt))
        annotated.append(replace(pt, cumulative_distance_mi=cumulative))
    return annotated
