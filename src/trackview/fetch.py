"""Loading of route payloads from a local directory or an HTTP server.

A route is two GeoJSON documents under ``{base}/{route_id}/``: the line
geometry drawn on the map (tracks.geojson) and the per-trackpoint collection
(track_points.geojson).
"""

import asyncio
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path

import requests

logger = logging.getLogger(__name__)

TRACKS_FILE = "tracks.geojson"
TRACK_POINTS_FILE = "track_points.geojson"
REQUEST_TIMEOUT = 30

ROUTE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class RouteLoadError(RuntimeError):
    """Raised when a route payload cannot be fetched or decoded."""


class RouteNotFoundError(RouteLoadError):
    """Raised when the route payload does not exist at its location."""


@dataclass
class RoutePayload:
    route_id: str
    tracks: dict  # line geometry FeatureCollection
    points: dict  # trackpoint FeatureCollection


def is_url(location: str) -> bool:
    return location.startswith(("http://", "https://"))


def fetch_geojson(location: str) -> dict:
    """Fetch and decode one GeoJSON document from a URL or file path.

    Raises:
        RouteNotFoundError: If the document does not exist.
        RouteLoadError: If the document is unreachable or not JSON.
    """
    if is_url(location):
        try:
            response = requests.get(location, timeout=REQUEST_TIMEOUT)
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                raise RouteNotFoundError(f"Route not found: {location}") from e
            raise RouteLoadError(f"Failed to fetch {location}: {e}") from e
        except requests.RequestException as e:
            raise RouteLoadError(f"Failed to fetch {location}: {e}") from e
        except ValueError as e:
            raise RouteLoadError(f"Invalid JSON from {location}: {e}") from e

    try:
        with open(location, "r") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise RouteNotFoundError(f"Route file not found: {location}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise RouteLoadError(f"Failed to read {location}: {e}") from e


class RouteSource:
    """Resolves route ids to payload locations under a base directory or URL."""

    def __init__(self, base: str):
        self.base = base.rstrip("/")

    def location(self, route_id: str, filename: str) -> str:
        if not ROUTE_ID_PATTERN.match(route_id):
            raise ValueError(f"Invalid route id: {route_id!r}")
        if is_url(self.base):
            return f"{self.base}/{route_id}/{filename}"
        return str(Path(self.base) / route_id / filename)

    def load(self, route_id: str) -> RoutePayload:
        tracks = fetch_geojson(self.location(route_id, TRACKS_FILE))
        points = fetch_geojson(self.location(route_id, TRACK_POINTS_FILE))
        return RoutePayload(route_id=route_id, tracks=tracks, points=points)

    async def load_async(self, route_id: str) -> RoutePayload:
        """Fetch both payloads concurrently and wait for both."""
        logger.debug("Fetching route %s from %s", route_id, self.base)
        tracks, points = await asyncio.gather(
            asyncio.to_thread(fetch_geojson, self.location(route_id, TRACKS_FILE)),
            asyncio.to_thread(fetch_geojson, self.location(route_id, TRACK_POINTS_FILE)),
        )
        return RoutePayload(route_id=route_id, tracks=tracks, points=points)
