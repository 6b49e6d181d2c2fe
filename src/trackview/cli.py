import argparse
import json
import logging
import sys

from trackview.analyzer import aggregate, format_summary
from trackview.config import DEFAULTS, build_pace_params, load_config
from trackview.formatters import format_duration
from trackview.pace import build_pace_series
from trackview.parser import parse_gpx, parse_point_features
from trackview.splits import segment_miles
from trackview.track import annotate_track


def build_parser(config: dict | None = None) -> argparse.ArgumentParser:
    """Build argument parser with defaults from config file."""
    if config is None:
        config = {}

    def get_default(key: str) -> float:
        return config.get(key, DEFAULTS[key])

    parser = argparse.ArgumentParser(
        description="Summarize a GPS track: distance, elevation gain, pace and mile splits."
    )
    parser.add_argument("track_file", help="Path to a GPX file or a GeoJSON trackpoint collection")
    parser.add_argument(
        "--min-pace",
        type=float,
        default=get_default("min_pace"),
        help=f"Discard segment paces at or below this many min/mi (default: {DEFAULTS['min_pace']})",
    )
    parser.add_argument(
        "--max-pace",
        type=float,
        default=get_default("max_pace"),
        help=f"Discard segment paces at or above this many min/mi (default: {DEFAULTS['max_pace']})",
    )
    parser.add_argument(
        "--smoothing-window",
        type=float,
        default=get_default("smoothing_window"),
        help=f"Pace smoothing window in seconds (default: {DEFAULTS['smoothing_window']})",
    )
    parser.add_argument(
        "--splits",
        action="store_true",
        help="Print per-mile split times",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def load_points(path: str):
    """Load trackpoints from a GPX file or a GeoJSON point collection."""
    if path.lower().endswith(".gpx"):
        return parse_gpx(path)
    with open(path, "r") as f:
        return parse_point_features(json.load(f))


def main(argv: list[str] | None = None) -> None:
    config = load_config()
    parser = build_parser(config)
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    params = build_pace_params({
        "min_pace": args.min_pace,
        "max_pace": args.max_pace,
        "smoothing_window": args.smoothing_window,
    })

    try:
        points = load_points(args.track_file)
    except FileNotFoundError:
        print(f"Error: File not found: {args.track_file}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error parsing track file: {e}", file=sys.stderr)
        sys.exit(1)

    if len(points) < 2:
        print("Error: Track contains fewer than 2 valid trackpoints.", file=sys.stderr)
        sys.exit(1)

    track = annotate_track(points)
    metrics = aggregate(track)
    summary = format_summary(metrics)
    pace = build_pace_series(track, params)

    print("=== Track Summary ===")
    print(
        f"Config: min_pace={params.min_pace} max_pace={params.max_pace} "
        f"smoothing_window={params.smoothing_window_s}s"
    )
    print(f"Points:         {len(track)}")
    print(f"Distance:       {summary['distance']} mi")
    print(f"Elevation Gain: {summary['elevation']} ft")
    print(f"Avg Pace:       {summary['pace']} /mi")
    print(f"Pace Samples:   {len(pace.raw)} of {len(track) - 1} segments")

    if args.splits:
        splits = segment_miles(track)
        print("")
        print("=== Mile Splits ===")
        if not splits:
            print("Track is shorter than one mile.")
        for split in splits:
            print(f"Mile {split.mile_number:>3}: {format_duration(split.split_duration_sec)}")


if __name__ == "__main__":
    main()
