"""
Global configuration for the Trend Word Job.

Everything here is environment-driven (.env supported) with defaults
that match the production schedule: a 48h recent window compared
against the 48h before it, top 10 trends per language.
"""

import logging
import os
from pathlib import Path
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv()

# ── Paths ──
PROJECT_ROOT = Path(__file__).parent
DATA_DIR = PROJECT_ROOT / "data"
DB_PATH = Path(os.getenv("TREND_DB_PATH", str(DATA_DIR / "trends.db")))

# Ensure data directory exists
DATA_DIR.mkdir(exist_ok=True)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.lower() in ("1", "true", "yes")


# ── Windows ──
RECENT_WINDOW_HOURS = int(os.getenv("RECENT_WINDOW_HOURS", "48"))
TOTAL_WINDOW_HOURS = int(os.getenv("TOTAL_WINDOW_HOURS", "96"))

# ── Output ──
TOP_TRENDS_LIMIT = int(os.getenv("TOP_TRENDS_LIMIT", "10"))

# Languages are scored independently; empty means one unpartitioned run
TREND_LANGUAGES = [
    lang.strip() for lang in os.getenv("TREND_LANGUAGES", "en,ja").split(",")
    if lang.strip()
]

# ── Enrichment (verified post counts) ──
ENRICH_POST_COUNTS = _env_bool("ENRICH_POST_COUNTS", True)
ENRICH_MAX_WORKERS = int(os.getenv("ENRICH_MAX_WORKERS", "8"))

# ── SQLite ──
SQLITE_BUSY_TIMEOUT_MS = int(os.getenv("SQLITE_BUSY_TIMEOUT_MS", "5000"))

# ── Logging ──
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def validate_settings(recent_hours=None, total_hours=None, limit=None):
    """
    Check window and output settings before a run.

    Raises:
        ValueError: if the windows are non-positive, the recent window
            does not fit strictly inside the total span, or the limit
            is not positive.
    """
    recent_hours = RECENT_WINDOW_HOURS if recent_hours is None else recent_hours
    total_hours = TOTAL_WINDOW_HOURS if total_hours is None else total_hours
    limit = TOP_TRENDS_LIMIT if limit is None else limit

    if recent_hours <= 0 or total_hours <= 0:
        raise ValueError(
            f"Window hours must be positive (recent={recent_hours}, total={total_hours})"
        )
    if recent_hours >= total_hours:
        raise ValueError(
            f"Recent window ({recent_hours}h) must be shorter than the "
            f"total span ({total_hours}h)"
        )
    if limit <= 0:
        raise ValueError(f"TOP_TRENDS_LIMIT must be positive, got {limit}")
