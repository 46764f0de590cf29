"""
Weighted Counter -- turns one window's records into weighted frequencies.

Each record contributes a time weight to every word it carries, and a
multiplied weight to its bigram (x4) or trigram (x8). The weight decays
linearly across the window from 1.5 at the start edge to 1.0 at the end
edge, so earlier records in a window count slightly more than later ones.
"""

from typing import Dict, Iterable

from trend_radar.models import OccurrenceRecord, TimeWindow, WindowCounts

BIGRAM_MULTIPLIER = 4
TRIGRAM_MULTIPLIER = 8
MAX_EDGE_BONUS = 0.5


def time_weight(record: OccurrenceRecord, window: TimeWindow) -> float:
    """Weight in [1.0, 1.5] from the record's position inside the window."""
    elapsed = (record.created_at - window.start).total_seconds()
    normalized = min(max(elapsed / window.seconds, 0.0), 1.0)
    return 1 + (1 - normalized) * MAX_EDGE_BONUS


def count_window(records: Iterable[OccurrenceRecord], window: TimeWindow) -> WindowCounts:
    """Fold a window's records into a fresh WindowCounts."""
    word_counts: Dict[str, float] = {}
    phrase_counts: Dict[str, float] = {}

    for record in records:
        tokens = record.tokens()
        if not tokens:
            continue

        weight = time_weight(record, window)
        for token in tokens:
            word_counts[token] = word_counts.get(token, 0.0) + weight

        if len(tokens) >= 2:
            bigram = " ".join(tokens[:2])
            phrase_counts[bigram] = phrase_counts.get(bigram, 0.0) + weight * BIGRAM_MULTIPLIER
        if len(tokens) == 3:
            trigram = " ".join(tokens)
            phrase_counts[trigram] = phrase_counts.get(trigram, 0.0) + weight * TRIGRAM_MULTIPLIER

    return WindowCounts(word_counts=word_counts, phrase_counts=phrase_counts)


def merge_counts(a: WindowCounts, b: WindowCounts) -> WindowCounts:
    """Key-wise sum of two partial counts. Neither input is modified."""
    return WindowCounts(
        word_counts=_add(a.word_counts, b.word_counts),
        phrase_counts=_add(a.phrase_counts, b.phrase_counts),
    )


def _add(left: Dict[str, float], right: Dict[str, float]) -> Dict[str, float]:
    merged = dict(left)
    for key, value in right.items():
        merged[key] = merged.get(key, 0.0) + value
    return merged
