"""
Dashboard -- read-only JSON feed of the current trends.

Serves whatever the last job run stored in post_trends:
  - GET /api/trends             all languages, best first
  - GET /api/trends?language=ja one language
  - GET /health                 store reachability

Usage:
    python dashboard.py                  # runs on http://localhost:5000
    python dashboard.py --port 8080      # custom port
"""

import argparse
import logging
import sqlite3

from flask import Flask, jsonify, request

import config
from trend_radar.collector import StoreUnavailableError
from trend_radar.sink import TrendResultSink

app = Flask(__name__)

logger = logging.getLogger(__name__)


@app.route("/api/trends")
def api_trends():
    """Return the stored trend feed."""
    language = request.args.get("language") or None
    limit = request.args.get("limit", None, type=int)
    if limit is not None and limit <= 0:
        return jsonify({"error": "limit must be a positive integer"}), 400

    try:
        trends = TrendResultSink().load(language=language, limit=limit)
    except StoreUnavailableError as e:
        logger.error(f"Trend feed read failed: {e}")
        return jsonify({"error": "Trend store unavailable"}), 503

    return jsonify({"trends": trends, "count": len(trends)})


@app.route("/health")
def health():
    try:
        TrendResultSink().load(limit=1)
    except StoreUnavailableError as e:
        return jsonify({"status": "error", "detail": str(e)}), 503
    return jsonify({"status": "ok"})


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--port", type=int, default=5000)
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, config.LOG_LEVEL, logging.INFO))

    # Run database migrations to ensure all tables exist
    try:
        from database_migrations import run_trend_migrations
        run_trend_migrations()
    except sqlite3.Error as e:
        logging.warning(f"Migration check: {e}")

    print(f"\n  Trend Feed Dashboard")
    print(f"  Running at: http://localhost:{args.port}")
    print(f"  Database: {config.DB_PATH}\n")

    app.run(host="0.0.0.0", port=args.port, debug=args.debug)
