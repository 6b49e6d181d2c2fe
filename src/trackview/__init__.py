"""trackview - GPS track metrics with synchronized map and chart hover."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("trackview")
except PackageNotFoundError:
    __version__ = "0.0.0"

__version_date__ = "2026-10-17"
