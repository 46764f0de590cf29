"""
Trend Scoring Engine -- records in, ranked deduplicated trends out.

Pure computation over a snapshot of records: partition into windows,
count both windows, score, resolve overlaps, truncate. Languages are
independent partitions and never see each other's counts.
"""

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from trend_radar.counter import count_window
from trend_radar.models import OccurrenceRecord, RankedTrend, TimeWindow
from trend_radar.resolver import resolve_overlaps
from trend_radar.scorer import TrendScorer
from trend_radar.windows import build_windows, partition_records

logger = logging.getLogger(__name__)


class TrendScoringEngine:
    """Ranks trending phrases for one reference instant."""

    def __init__(self, recent_hours: int = 48, total_hours: int = 96, limit: int = 10):
        self.recent_hours = recent_hours
        self.total_hours = total_hours
        self.limit = limit
        self.scorer = TrendScorer()

    def windows(self, now: datetime):
        return build_windows(now, self.recent_hours, self.total_hours)

    def rank(self, records: Iterable[OccurrenceRecord], now: datetime,
             language: Optional[str] = None) -> List[RankedTrend]:
        """Top trends for a single partition."""
        recent, older = self.windows(now)
        return self.rank_windows(records, recent, older, language)

    def rank_windows(self, records: Iterable[OccurrenceRecord], recent: TimeWindow,
                     older: TimeWindow, language: Optional[str] = None) -> List[RankedTrend]:
        recent_records, older_records = partition_records(records, recent, older)

        # Both windows are independent reductions
        with ThreadPoolExecutor(max_workers=2) as executor:
            recent_future = executor.submit(count_window, recent_records, recent)
            older_future = executor.submit(count_window, older_records, older)
            recent_counts = recent_future.result()
            older_counts = older_future.result()

        candidates = self.scorer.score(recent_counts, older_counts)
        resolved = resolve_overlaps(candidates)
        top = resolved[:self.limit]

        logger.info(
            f"  {language or 'all'}: {len(recent_records)} recent / "
            f"{len(older_records)} older records -> {len(candidates)} candidates, "
            f"{len(resolved)} after dedup, {len(top)} kept"
        )
        return [RankedTrend.from_candidate(c, language=language) for c in top]

    def rank_by_language(self, records: Iterable[OccurrenceRecord],
                         now: datetime) -> Dict[Optional[str], List[RankedTrend]]:
        """Group records by language and rank each group on its own."""
        groups = defaultdict(list)
        for record in records:
            groups[record.language].append(record)

        return {
            language: self.rank(group, now, language=language)
            for language, group in groups.items()
        }
