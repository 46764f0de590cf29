"""
Data model shared by every stage of the trend pipeline.

All types are frozen; stages return new values instead of mutating
shared structures, so the two windows can be counted side by side.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional


def as_utc(ts: datetime) -> datetime:
    """Convert to an aware UTC datetime. Naive values are taken as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def normalize_token(token: Optional[str]) -> str:
    """Lower-case and trim a token. None becomes the empty string."""
    if token is None:
        return ""
    return token.strip().lower()


def phrase_tokens(phrase: str) -> List[str]:
    """Split a normalized phrase key back into its tokens."""
    return [t for t in phrase.split(" ") if t]


def token_count(phrase: str) -> int:
    return len(phrase.split(" "))


@dataclass(frozen=True)
class OccurrenceRecord:
    """One word (plus optional follow-up words) extracted from a post."""
    word: str
    created_at: datetime
    word2: Optional[str] = None
    word3: Optional[str] = None
    language: Optional[str] = None   # partition key, e.g. "en", "ja"

    def __post_init__(self):
        object.__setattr__(self, "created_at", as_utc(self.created_at))

    def tokens(self) -> List[str]:
        """
        Normalized tokens that form this record's longest phrase.

        Empty when the primary word is blank. A third word without a
        second one is ignored.
        """
        first = normalize_token(self.word)
        if not first:
            return []
        tokens = [first]
        second = normalize_token(self.word2)
        if second:
            tokens.append(second)
            third = normalize_token(self.word3)
            if third:
                tokens.append(third)
        return tokens


@dataclass(frozen=True)
class TimeWindow:
    """Half-open interval [start, end)."""
    start: datetime
    end: datetime

    def __post_init__(self):
        object.__setattr__(self, "start", as_utc(self.start))
        object.__setattr__(self, "end", as_utc(self.end))
        if not self.start < self.end:
            raise ValueError(
                f"Window start must be before end ({self.start} >= {self.end})"
            )

    @property
    def seconds(self) -> float:
        return (self.end - self.start).total_seconds()

    def contains(self, ts: datetime) -> bool:
        return self.start <= ts < self.end


@dataclass(frozen=True)
class WindowCounts:
    """Weighted frequencies for one window: single words and multi-word phrases."""
    word_counts: Dict[str, float] = field(default_factory=dict)
    phrase_counts: Dict[str, float] = field(default_factory=dict)

    def total_for(self, key: str) -> float:
        return self.word_counts.get(key, 0.0) + self.phrase_counts.get(key, 0.0)

    def max_weight(self) -> float:
        values = list(self.word_counts.values()) + list(self.phrase_counts.values())
        return max(values, default=0.0)

    def keys(self):
        return set(self.word_counts) | set(self.phrase_counts)


@dataclass(frozen=True)
class TrendCandidate:
    phrase: str
    recent_count: float
    older_count: float
    trend_score: float


@dataclass(frozen=True)
class RankedTrend:
    """A deduplicated trend ready for the feed."""
    phrase: str
    recent_count: float
    older_count: float
    trend_score: float
    language: Optional[str] = None
    post_count: Optional[int] = None

    @classmethod
    def from_candidate(cls, candidate: TrendCandidate,
                       language: Optional[str] = None) -> "RankedTrend":
        return cls(
            phrase=candidate.phrase,
            recent_count=candidate.recent_count,
            older_count=candidate.older_count,
            trend_score=candidate.trend_score,
            language=language,
            post_count=int(round(candidate.recent_count)),
        )

    @property
    def tokens(self) -> List[str]:
        return phrase_tokens(self.phrase)

    def to_dict(self) -> Dict:
        return {
            "phrase": self.phrase,
            "language": self.language,
            "post_count": self.post_count,
            "trend_score": round(self.trend_score, 6),
            "recent_count": round(self.recent_count, 4),
            "older_count": round(self.older_count, 4),
        }
