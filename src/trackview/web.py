"""Simple web interface for trackview."""

import logging
import os

from flask import Flask, Response, jsonify, render_template_string, request

from trackview import __version__, __version_date__
from trackview.analyzer import aggregate, format_summary
from trackview.cache import RouteCache
from trackview.charts import ChartSeries, elevation_series, pace_chart_series, render_charts_png
from trackview.config import build_pace_params, get_setting, load_config
from trackview.fetch import RouteLoadError, RouteNotFoundError, RouteSource
from trackview.formatters import format_duration
from trackview.models import PaceParams
from trackview.pace import build_pace_series
from trackview.parser import parse_point_features
from trackview.splits import segment_miles
from trackview.track import annotate_track

logger = logging.getLogger(__name__)

app = Flask(__name__)

_route_cache = RouteCache()


def get_source() -> RouteSource:
    """Route source from TRACKVIEW_ROUTES, else the routes_base config setting."""
    base = os.environ.get("TRACKVIEW_ROUTES") or get_setting(load_config(), "routes_base")
    return RouteSource(base)


def params_from_request() -> PaceParams:
    """Pace parameters from query args, defaulting to config.

    Raises:
        ValueError: If a parameter is not a number.
    """
    config = load_config()
    overrides = dict(config)
    for key in ("min_pace", "max_pace", "smoothing_window"):
        value = request.args.get(key)
        if value is not None and value != "":
            overrides[key] = float(value)
    return build_pace_params(overrides)


def build_route_report(route_id: str, tracks: dict, points_collection: dict, params: PaceParams) -> dict:
    """Compute every derived view of a route as a JSON-serializable dict."""
    track = annotate_track(parse_point_features(points_collection))
    metrics = aggregate(track)
    pace = build_pace_series(track, params)
    splits = segment_miles(track)
    return {
        "route_id": route_id,
        "tracks": tracks,
        "summary": format_summary(metrics),
        "metrics": {
            "total_distance_mi": metrics.total_distance_mi,
            "total_elevation_gain_ft": metrics.total_elevation_gain_ft,
            "average_pace_min_per_mi": metrics.average_pace_min_per_mi,
        },
        "points": [
            {
                "lat": pt.lat,
                "lon": pt.lon,
                "elevation": pt.elevation,
                "time": pt.time.isoformat(),
                "heart_rate": pt.heart_rate,
                "distance_mi": pt.cumulative_distance_mi,
            }
            for pt in track
        ],
        "elevation_chart": elevation_series(track).to_dict(),
        "pace_chart": pace_chart_series(pace).to_dict(),
        "splits": [
            {
                "mile": s.mile_number,
                "duration_sec": s.split_duration_sec,
                "pace": format_duration(s.split_duration_sec),
                "lat": s.lat,
                "lon": s.lon,
            }
            for s in splits
        ],
    }


def get_route_report(route_id: str, params: PaceParams) -> dict:
    """Load and analyze a route, using the LRU cache."""
    cached = _route_cache.get(route_id, params)
    if cached is not None:
        return cached
    payload = get_source().load(route_id)
    report = build_route_report(route_id, payload.tracks, payload.points, params)
    _route_cache.set(route_id, params, report)
    return report


def _error_status(e: Exception) -> int:
    if isinstance(e, RouteNotFoundError):
        return 404
    if isinstance(e, RouteLoadError):
        return 502
    return 400


@app.route("/api/route/<route_id>")
def api_route(route_id: str):
    """Return metrics, chart series and splits for a route as JSON."""
    try:
        params = params_from_request()
        report = get_route_report(route_id, params)
    except (RouteLoadError, ValueError) as e:
        logger.warning("Route %s failed: %s", route_id, e)
        return jsonify({"error": str(e)}), _error_status(e)
    return jsonify(report)


@app.route("/chart/<route_id>.png")
def chart_png(route_id: str):
    """Static elevation and pace chart for clients without JavaScript."""
    try:
        params = params_from_request()
        report = get_route_report(route_id, params)
    except (RouteLoadError, ValueError) as e:
        return jsonify({"error": str(e)}), _error_status(e)

    elevation = ChartSeries(**report["elevation_chart"])
    pace = ChartSeries(**report["pace_chart"])
    png = render_charts_png(elevation, pace, report["metrics"]["total_distance_mi"])
    return Response(png, mimetype="image/png")


@app.route("/cache-stats")
def cache_stats():
    return jsonify(_route_cache.stats().to_dict())


@app.route("/cache-clear", methods=["GET", "POST"])
def cache_clear():
    cleared = _route_cache.clear()
    return jsonify({"cleared": cleared})


INDEX_TEMPLATE = """<!doctype html>
<html>
<head>
  <meta charset="utf-8">
  <title>Route Viewer</title>
  <style>
    body { font-family: sans-serif; max-width: 960px; margin: 2em auto; }
    .stats span { margin-right: 2em; }
    table { border-collapse: collapse; }
    td, th { padding: 2px 10px; text-align: right; }
  </style>
</head>
<body>
  <h1>Route Viewer</h1>
  <form method="get">
    <input type="text" name="route" value="{{ route_id }}" placeholder="Route id">
    <button type="submit">Show</button>
  </form>
  {% if error %}<p class="error">{{ error }}</p>{% endif %}
  {% if summary %}
  <div class="stats">
    <span>Distance: <b>{{ summary.distance }}</b> mi</span>
    <span>Elevation: <b>{{ summary.elevation }}</b> ft</span>
    <span>Pace: <b>{{ summary.pace }}</b> /mi</span>
  </div>
  <img src="/chart/{{ route_id }}.png" alt="Elevation and pace charts">
  {% if splits %}
  <table>
    <tr><th>Mile</th><th>Split</th></tr>
    {% for s in splits %}<tr><td>{{ s.mile }}</td><td>{{ s.pace }}</td></tr>{% endfor %}
  </table>
  {% endif %}
  {% endif %}
  <footer><small>trackview {{ version }} ({{ version_date }})</small></footer>
</body>
</html>
"""


@app.route("/")
def index():
    route_id = request.args.get("route", "").strip()
    summary = None
    splits = []
    error = None
    if route_id:
        try:
            report = get_route_report(route_id, params_from_request())
            summary = report["summary"]
            splits = report["splits"]
        except (RouteLoadError, ValueError) as e:
            error = str(e)

    return render_template_string(
        INDEX_TEMPLATE,
        route_id=route_id,
        summary=summary,
        splits=splits,
        error=error,
        version=__version__,
        version_date=__version_date__,
    )


def main():
    """Run the web server."""
    port = int(os.environ.get("PORT", 5050))
    print("Starting trackview web server...")
    print(f"Open http://localhost:{port} in your browser")
    app.run(host="0.0.0.0", port=port, debug=True)


if __name__ == "__main__":
    main()
