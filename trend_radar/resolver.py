"""
Overlap Resolver -- collapses near-duplicate trends.

"election", "election day" and "election day results" tend to score high
together. Walking candidates in score order, a phrase whose text contains
(or is contained in) an already accepted phrase of a different length is
dropped unless it scores higher, in which case it replaces the one it
overlaps. Containment is a raw substring check, so "cat" also overlaps
"concatenate ideas".
"""

from typing import Dict, List

from trend_radar.models import TrendCandidate, token_count


def phrases_overlap(a: str, b: str) -> bool:
    """True when phrases of different token counts subsume one another."""
    if token_count(a) == token_count(b):
        return False
    shorter, longer = (a, b) if token_count(a) < token_count(b) else (b, a)
    return shorter in longer


def resolve_overlaps(candidates: List[TrendCandidate]) -> List[TrendCandidate]:
    """
    Rank candidates by score and drop subsumed duplicates.

    The result is ordered by descending score. It is not truncated.
    """
    ranked = sorted(candidates, key=lambda c: c.trend_score, reverse=True)

    accepted: Dict[str, TrendCandidate] = {}
    for candidate in ranked:
        if candidate.phrase in accepted:
            continue

        overlapping = [
            existing for existing in accepted.values()
            if phrases_overlap(existing.phrase, candidate.phrase)
        ]
        if any(existing.trend_score >= candidate.trend_score for existing in overlapping):
            continue

        for existing in overlapping:
            del accepted[existing.phrase]
        accepted[candidate.phrase] = candidate

    return list(accepted.values())
