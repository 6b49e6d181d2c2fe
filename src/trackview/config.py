"""Configuration loading for trackview.

Settings come from JSON files merged in order, later files overriding:
1. ~/.config/trackview/trackview.json (global)
2. ./trackview.json (local)
"""

import json
from pathlib import Path

from trackview.models import PaceParams

CONFIG_DIR = Path.home() / ".config" / "trackview"
CONFIG_PATH = CONFIG_DIR / "trackview.json"
LOCAL_CONFIG_PATH = Path("trackview.json")

DEFAULTS = {
    "min_pace": 3.0,  # min/mi
    "max_pace": 20.0,  # min/mi
    "smoothing_window": 15.0,  # seconds
    "match_tolerance": 0.01,  # miles
    "routes_base": "routes",
}


def load_config() -> dict:
    """Load configuration from config files.

    Returns:
        Dict with merged config values, empty dict if no files exist.
    """
    config = {}
    for config_path in [CONFIG_PATH, LOCAL_CONFIG_PATH]:
        if config_path.exists():
            try:
                with config_path.open() as f:
                    config.update(json.load(f))
            except (json.JSONDecodeError, OSError):
                continue
    return config


def get_setting(config: dict | None, key: str):
    if config is None:
        config = {}
    return config.get(key, DEFAULTS[key])


def build_pace_params(config: dict | None = None) -> PaceParams:
    """Build PaceParams from config, falling back to DEFAULTS."""
    return PaceParams(
        min_pace=float(get_setting(config, "min_pace")),
        max_pace=float(get_setting(config, "max_pace")),
        smoothing_window_s=float(get_setting(config, "smoothing_window")),
    )
