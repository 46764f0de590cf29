"""
Trend Word Job -- Main Orchestrator

Runs one batch over the current snapshot of word occurrences:
  1. Collect occurrence records for the last 96 hours (per language)
  2. Count the recent and older windows (time-weighted)
  3. Score every phrase and collapse overlapping phrases
  4. Verify post counts for the final top trends
  5. Replace the stored trend feed

Usage:
  python main.py                                   # settings from .env
  python main.py --languages en --limit 20
  python main.py --now 2026-10-19T12:00:00+00:00 --dry-run
"""

import argparse
import logging
import sys
import time
from datetime import datetime, timezone

import config
from database_migrations import run_trend_migrations
from trend_radar.collector import OccurrenceCollector, StoreUnavailableError, parse_ts
from trend_radar.engine import TrendScoringEngine
from trend_radar.models import as_utc
from trend_radar.sink import PostCountEnricher, TrendResultSink


def setup_logging():
    """Configure console logging with timestamps."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def parse_args(argv=None):
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        description="Trend Word Job -- ranks trending words and phrases"
    )
    parser.add_argument(
        "--now",
        default=None,
        help="Reference time as ISO 8601 (default: current UTC time)",
    )
    parser.add_argument(
        "--languages",
        default=None,
        help="Comma-separated languages to score (default: TREND_LANGUAGES)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Trends to keep per language (default: TOP_TRENDS_LIMIT)",
    )
    parser.add_argument(
        "--no-enrich",
        action="store_true",
        help="Skip post count verification, store weighted counts instead",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Compute and log trends without writing them",
    )
    return parser.parse_args(argv)


def run_job(now=None, languages=None, limit=None, enrich=None, dry_run=False, db_path=None):
    """
    Run the full trend job.

    Can be called from CLI (main()) or from a scheduler.
    Args:
        now: Reference instant, naive values taken as UTC (default: current UTC time)
        languages: Languages to score independently; empty list = one run over all records
        limit: Trends kept per language
        enrich: Verify post counts against the posts table
        dry_run: Skip writing results
    Returns a dict with job results.

    Raises:
        StoreUnavailableError: a store query failed; stored trends are untouched.
    """
    logger = logging.getLogger("trend_job")
    start_time = time.time()

    now = as_utc(now) if now else datetime.now(timezone.utc)
    languages = config.TREND_LANGUAGES if languages is None else languages
    limit = config.TOP_TRENDS_LIMIT if limit is None else limit
    enrich = config.ENRICH_POST_COUNTS if enrich is None else enrich
    db_path = db_path or config.DB_PATH

    config.validate_settings(limit=limit)

    logger.info("=" * 60)
    logger.info("TREND WORD JOB")
    logger.info("=" * 60)

    engine = TrendScoringEngine(
        recent_hours=config.RECENT_WINDOW_HOURS,
        total_hours=config.TOTAL_WINDOW_HOURS,
        limit=limit,
    )
    recent, older = engine.windows(now)
    logger.info(f"Recent window: {recent.start.isoformat()} -> {recent.end.isoformat()}")
    logger.info(f"Older window:  {older.start.isoformat()} -> {older.end.isoformat()}")

    # ── 1-3. Collect + Score ──
    logger.info("")
    logger.info("--- SCORING PHASE ---")
    collector = OccurrenceCollector(db_path=db_path)
    trends = []
    for language in (languages or [None]):
        records = collector.fetch_span(recent, older, language=language)
        trends.extend(engine.rank_windows(records, recent, older, language=language))

    # ── 4. Enrichment ──
    if enrich and trends:
        logger.info("")
        logger.info("--- POST COUNT PHASE ---")
        trends = PostCountEnricher(db_path=db_path).enrich(trends, cutoff=recent.start)
    elif not enrich:
        logger.warning("Post count verification disabled, storing weighted counts")

    for trend in trends:
        logger.info(
            f"  [{trend.language or '-'}] {trend.phrase!r} "
            f"score={trend.trend_score:.4f} posts={trend.post_count}"
        )

    # ── 5. Store ──
    written = 0
    if dry_run:
        logger.info("Dry run, stored trends left unchanged")
    else:
        written = TrendResultSink(db_path=db_path).replace(trends, computed_at=now)

    duration = time.time() - start_time
    logger.info("")
    logger.info("=" * 60)
    logger.info(f"Job complete in {duration:.1f}s | Trends: {len(trends)} | Written: {written}")
    logger.info("=" * 60)

    return {
        "trends": [t.to_dict() for t in trends],
        "written": written,
        "duration": duration,
        "now": now.isoformat(),
    }


def main(argv=None):
    setup_logging()
    args = parse_args(argv)
    logger = logging.getLogger("trend_job")

    languages = None
    if args.languages is not None:
        languages = [l.strip() for l in args.languages.split(",") if l.strip()]

    try:
        now = parse_ts(args.now) if args.now else None
        run_trend_migrations()
        run_job(
            now=now,
            languages=languages,
            limit=args.limit,
            enrich=False if args.no_enrich else None,
            dry_run=args.dry_run,
        )
    except ValueError as e:
        logger.error(f"Invalid settings: {e}")
        sys.exit(2)
    except StoreUnavailableError as e:
        logger.error(f"Job failed, stored trends unchanged: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
