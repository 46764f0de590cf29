"""
Trend output -- verified post counts and the persisted feed.

PostCountEnricher replaces the weighted counts of the final trends with
the number of posts that actually contain every word of the phrase.
TrendResultSink swaps the whole post_trends table for the new run in a
single transaction; previous results are superseded, never merged.
"""

import dataclasses
import logging
import sqlite3
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from typing import Dict, List, Optional

import config
from trend_radar.collector import StoreUnavailableError, connect, format_ts
from trend_radar.models import RankedTrend

logger = logging.getLogger(__name__)


class PostCountEnricher:
    """Counts recent posts containing every token of a phrase."""

    def __init__(self, db_path=None, max_workers: Optional[int] = None):
        self.db_path = db_path or config.DB_PATH
        self.max_workers = max_workers or config.ENRICH_MAX_WORKERS

    def count_posts(self, tokens: List[str], cutoff: datetime) -> int:
        """
        Posts with created_at > cutoff whose text contains all tokens.

        Matching is a literal substring match per token after Unicode
        case folding, so "café" matches "CAFÉ".
        """
        sql = "SELECT COUNT(*) FROM posts WHERE julianday(created_at) > julianday(?)"
        params = [format_ts(cutoff)]
        for token in tokens:
            sql += " AND instr(casefold(text), ?) > 0"
            params.append(token.casefold())

        try:
            conn = connect(self.db_path)
            try:
                row = conn.execute(sql, params).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreUnavailableError("post count query", e) from e

        return int(row[0]) if row else 0

    def enrich(self, trends: List[RankedTrend], cutoff: datetime) -> List[RankedTrend]:
        """
        Return copies of the trends with post_count set from the post store.

        Queries run concurrently; order of the input list is kept.
        """
        if not trends:
            return []

        counts: Dict[tuple, int] = {}
        max_workers = min(self.max_workers, len(trends))
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = {
                executor.submit(self.count_posts, trend.tokens, cutoff):
                    (trend.language, trend.phrase)
                for trend in trends
            }
            for future in as_completed(futures):
                counts[futures[future]] = future.result()

        return [
            dataclasses.replace(trend, post_count=counts[(trend.language, trend.phrase)])
            for trend in trends
        ]


class TrendResultSink:
    """
    Owns the post_trends table the feed reads from.
    """

    def __init__(self, db_path=None):
        self.db_path = db_path or config.DB_PATH

    def replace(self, trends: List[RankedTrend], computed_at: Optional[datetime] = None) -> int:
        """
        Replace all stored trends with this run's trends. Returns rows written.
        """
        computed_at = format_ts(computed_at or datetime.now(timezone.utc))

        try:
            conn = connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreUnavailableError("trend write", e) from e

        try:
            with conn:
                conn.execute("DELETE FROM post_trends")
                conn.executemany("""
                    INSERT INTO post_trends
                        (word, post_count, language, trend_score, created_at)
                    VALUES (?, ?, ?, ?, ?)
                """, [
                    (t.phrase, t.post_count or 0, t.language, t.trend_score, computed_at)
                    for t in trends
                ])
        except sqlite3.Error as e:
            raise StoreUnavailableError("trend write", e) from e
        finally:
            conn.close()

        logger.info(f"  Stored {len(trends)} trends")
        return len(trends)

    def load(self, language: Optional[str] = None, limit: Optional[int] = None) -> List[Dict]:
        """Stored trends, best first, optionally for one language."""
        sql = """
            SELECT word, post_count, language, trend_score, created_at
            FROM post_trends
        """
        params = []
        if language:
            sql += " WHERE language = ?"
            params.append(language)
        sql += " ORDER BY trend_score DESC, id ASC"
        if limit:
            sql += " LIMIT ?"
            params.append(int(limit))

        try:
            conn = connect(self.db_path)
            try:
                rows = conn.execute(sql, params).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreUnavailableError("trend read", e) from e

        return [
            {
                "phrase": row["word"],
                "post_count": row["post_count"],
                "language": row["language"],
                "trend_score": row["trend_score"],
                "computed_at": row["created_at"],
            }
            for row in rows
        ]
