"""
Trend Scorer -- compares recent vs. older weighted counts per phrase.

Score combines relative growth with absolute volume, then squashes the
result into [0, 1] with an arctangent:

    relative = (recent - older) / (older + 1)
    absolute = log(recent + 1) / log(max_count + 1)
    score    = (atan(relative * absolute) / (pi/2) + 1) / 2

Flat phrases land on 0.5, growth pushes toward 1, decline toward 0.
The absolute factor keeps one-off phrases from outranking real volume.
"""

import logging
import math
from typing import List

from trend_radar.models import TrendCandidate, WindowCounts

logger = logging.getLogger(__name__)


class TrendScorer:
    """
    Scores every phrase seen in either window.
    """

    def score(self, recent: WindowCounts, older: WindowCounts) -> List[TrendCandidate]:
        """
        Build one candidate per phrase observed in either window.

        Returns an empty list when neither window has any data.
        """
        max_count = self._compute_max_count(recent, older)
        if max_count <= 0:
            return []

        candidates = []
        for key in sorted(recent.keys() | older.keys()):
            if not key.strip():
                continue

            recent_count = recent.total_for(key)
            older_count = older.total_for(key)
            if recent_count == 0 and older_count == 0:
                continue

            candidates.append(TrendCandidate(
                phrase=key,
                recent_count=recent_count,
                older_count=older_count,
                trend_score=compute_trend_score(recent_count, older_count, max_count),
            ))

        logger.debug(f"Scored {len(candidates)} candidates (max_count={max_count:.2f})")
        return candidates

    def _compute_max_count(self, recent: WindowCounts, older: WindowCounts) -> float:
        """Largest single weight across all four mappings, 0 if all are empty."""
        return max(recent.max_weight(), older.max_weight(), 0.0)


def compute_trend_score(recent_count: float, older_count: float, max_count: float) -> float:
    """Bounded trend score in [0, 1]; 0.5 when the counts are equal."""
    relative_increase = (recent_count - older_count) / (older_count + 1)
    if max_count > 0:
        absolute_factor = math.log(recent_count + 1) / math.log(max_count + 1)
    else:
        absolute_factor = 0.0
    return _squash(relative_increase * absolute_factor)


def _squash(x: float) -> float:
    """Map any real number onto [0, 1] via arctangent."""
    return (math.atan(x) / (math.pi / 2) + 1) / 2
