"""
Tests for the trend scoring pipeline: windows, weighted counts, scores,
and overlap resolution. Pure computation, no database needed.

Run: python test_trend_scoring.py
"""

import math
import os
import sys
import unittest
from datetime import datetime, timedelta, timezone

# Ensure the project root is on the path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from trend_radar.counter import count_window, merge_counts, time_weight
from trend_radar.engine import TrendScoringEngine
from trend_radar.models import (
    OccurrenceRecord, RankedTrend, TimeWindow, TrendCandidate, WindowCounts,
    phrase_tokens,
)
from trend_radar.resolver import phrases_overlap, resolve_overlaps
from trend_radar.scorer import TrendScorer, compute_trend_score
from trend_radar.windows import build_windows, partition_records

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
RECENT_MID = NOW - timedelta(hours=24)
OLDER_MID = NOW - timedelta(hours=72)


def _rec(word, at, word2=None, word3=None, language=None):
    return OccurrenceRecord(word=word, word2=word2, word3=word3,
                            created_at=at, language=language)


def _cand(phrase, score):
    return TrendCandidate(phrase=phrase, recent_count=1.0, older_count=0.0,
                          trend_score=score)


# ═══════════════════════════════════════════════════════════════════════
# Windows
# ═══════════════════════════════════════════════════════════════════════

class TestWindows(unittest.TestCase):

    def test_windows_are_adjacent(self):
        recent, older = build_windows(NOW)
        self.assertEqual(recent.end, NOW)
        self.assertEqual(recent.start, NOW - timedelta(hours=48))
        self.assertEqual(older.end, recent.start)
        self.assertEqual(older.start, NOW - timedelta(hours=96))

    def test_naive_now_taken_as_utc(self):
        naive_now = NOW.replace(tzinfo=None)
        self.assertEqual(build_windows(naive_now), build_windows(NOW))
        self.assertEqual(build_windows(naive_now)[0].end.tzinfo, timezone.utc)

    def test_offset_now_converted_to_utc(self):
        tokyo = timezone(timedelta(hours=9))
        recent, _ = build_windows(NOW.astimezone(tokyo))
        self.assertEqual(recent.end, NOW)
        self.assertEqual(recent.end.utcoffset(), timedelta(0))

    def test_invalid_window_rejected(self):
        with self.assertRaises(ValueError):
            TimeWindow(start=NOW, end=NOW)
        with self.assertRaises(ValueError):
            TimeWindow(start=NOW, end=NOW - timedelta(hours=1))

    def test_partition_is_half_open(self):
        recent, older = build_windows(NOW)
        at_now = _rec("a", NOW)
        at_boundary = _rec("b", NOW - timedelta(hours=48))
        at_older_start = _rec("c", NOW - timedelta(hours=96))
        too_old = _rec("d", NOW - timedelta(hours=96, seconds=1))

        recent_records, older_records = partition_records(
            [at_now, at_boundary, at_older_start, too_old], recent, older
        )
        self.assertEqual(recent_records, [at_boundary])
        self.assertEqual(older_records, [at_older_start])

    def test_empty_window_counts_as_zero(self):
        recent, older = build_windows(NOW)
        counts = count_window([], recent)
        self.assertEqual(counts.word_counts, {})
        self.assertEqual(counts.phrase_counts, {})
        self.assertEqual(counts.max_weight(), 0.0)


# ═══════════════════════════════════════════════════════════════════════
# Weighted counter
# ═══════════════════════════════════════════════════════════════════════

class TestWeightedCounter(unittest.TestCase):

    def setUp(self):
        self.recent, self.older = build_windows(NOW)

    def test_weight_decays_from_start_to_end(self):
        """Earlier in the window weighs more (1.5 at start, 1.0 at end)."""
        start = time_weight(_rec("a", self.recent.start), self.recent)
        mid = time_weight(_rec("a", RECENT_MID), self.recent)
        near_end = time_weight(_rec("a", NOW - timedelta(seconds=1)), self.recent)

        self.assertAlmostEqual(start, 1.5)
        self.assertAlmostEqual(mid, 1.25)
        self.assertGreater(start, mid)
        self.assertGreater(mid, near_end)

    def test_weight_bounds_inside_window(self):
        for minutes in range(0, 48 * 60, 37):
            ts = self.recent.start + timedelta(minutes=minutes)
            weight = time_weight(_rec("a", ts), self.recent)
            self.assertGreaterEqual(weight, 1.0)
            self.assertLessEqual(weight, 1.5)

    def test_weight_clamped_outside_window(self):
        before = time_weight(_rec("a", self.recent.start - timedelta(hours=5)), self.recent)
        after = time_weight(_rec("a", NOW + timedelta(hours=5)), self.recent)
        self.assertAlmostEqual(before, 1.5)
        self.assertAlmostEqual(after, 1.0)

    def test_trigram_contributions(self):
        counts = count_window(
            [_rec("Election", RECENT_MID, word2="Day", word3="Results")], self.recent
        )
        self.assertEqual(counts.word_counts, {
            "election": 1.25, "day": 1.25, "results": 1.25,
        })
        self.assertEqual(counts.phrase_counts, {
            "election day": 5.0,
            "election day results": 10.0,
        })

    def test_keys_are_trimmed_and_lowercased(self):
        counts = count_window([
            _rec("  Election ", RECENT_MID),
            _rec("ELECTION", RECENT_MID),
        ], self.recent)
        self.assertEqual(counts.word_counts, {"election": 2.5})

    def test_word3_without_word2_is_ignored(self):
        counts = count_window([_rec("storm", RECENT_MID, word3="warning")], self.recent)
        self.assertEqual(counts.word_counts, {"storm": 1.25})
        self.assertEqual(counts.phrase_counts, {})

    def test_blank_word_is_inert(self):
        """A whitespace-only word contributes nothing, even with word2 set."""
        counts = count_window([
            _rec("   ", RECENT_MID),
            _rec("", RECENT_MID, word2="day"),
        ], self.recent)
        self.assertEqual(counts.word_counts, {})
        self.assertEqual(counts.phrase_counts, {})

    def test_merge_adds_keywise_without_mutating(self):
        a = WindowCounts(word_counts={"x": 1.0}, phrase_counts={"x y": 4.0})
        b = WindowCounts(word_counts={"x": 2.0, "z": 1.0}, phrase_counts={})
        merged = merge_counts(a, b)

        self.assertEqual(merged.word_counts, {"x": 3.0, "z": 1.0})
        self.assertEqual(merged.phrase_counts, {"x y": 4.0})
        self.assertEqual(a.word_counts, {"x": 1.0})
        self.assertEqual(b.word_counts, {"x": 2.0, "z": 1.0})

    def test_chunked_counts_match_single_pass(self):
        records = [
            _rec("rain", self.recent.start + timedelta(hours=h), word2="storm")
            for h in range(0, 48, 3)
        ]
        whole = count_window(records, self.recent)
        halves = merge_counts(
            count_window(records[:7], self.recent),
            count_window(records[7:], self.recent),
        )
        for key, value in whole.word_counts.items():
            self.assertAlmostEqual(halves.word_counts[key], value)
        for key, value in whole.phrase_counts.items():
            self.assertAlmostEqual(halves.phrase_counts[key], value)


# ═══════════════════════════════════════════════════════════════════════
# Scorer
# ═══════════════════════════════════════════════════════════════════════

class TestScorer(unittest.TestCase):

    def test_equal_counts_score_half(self):
        self.assertEqual(compute_trend_score(7.5, 7.5, 20.0), 0.5)

    def test_score_bounds(self):
        for recent in (0, 0.5, 1, 10, 1e3, 1e9):
            for older in (0, 1, 10, 1e3, 1e9):
                score = compute_trend_score(recent, older, max(recent, older, 1))
                self.assertGreaterEqual(score, 0.0)
                self.assertLessEqual(score, 1.0)

    def test_growth_scores_above_half_decline_below(self):
        self.assertGreater(compute_trend_score(20, 2, 20), 0.5)
        self.assertLess(compute_trend_score(2, 20, 20), 0.5)

    def test_monotonic_in_recent_count(self):
        older, max_count = 5.0, 200.0
        previous = compute_trend_score(older, older, max_count)
        recent = older
        while recent <= max_count:
            score = compute_trend_score(recent, older, max_count)
            self.assertGreaterEqual(score, previous)
            previous = score
            recent += 2.5

    def test_absolute_factor_suppresses_rare_phrases(self):
        """Same relative growth, more volume -> higher score."""
        rare = compute_trend_score(2, 0, 100)
        common = compute_trend_score(50, 0, 100)
        self.assertGreater(common, rare)

    def test_zero_max_count_gives_neutral_score(self):
        self.assertEqual(compute_trend_score(0, 0, 0), 0.5)

    def test_no_data_yields_no_candidates(self):
        self.assertEqual(TrendScorer().score(WindowCounts(), WindowCounts()), [])

    def test_recent_and_older_sum_both_mappings(self):
        recent = WindowCounts(word_counts={"a b": 1.0}, phrase_counts={"a b": 4.0})
        older = WindowCounts(word_counts={"a b": 2.0})
        [candidate] = TrendScorer().score(recent, older)
        self.assertEqual(candidate.recent_count, 5.0)
        self.assertEqual(candidate.older_count, 2.0)

    def test_phrase_only_in_older_window_is_kept(self):
        recent = WindowCounts(word_counts={"new": 3.0})
        older = WindowCounts(word_counts={"old": 3.0})
        phrases = {c.phrase for c in TrendScorer().score(recent, older)}
        self.assertEqual(phrases, {"new", "old"})


# ═══════════════════════════════════════════════════════════════════════
# Overlap resolver
# ═══════════════════════════════════════════════════════════════════════

class TestOverlapResolver(unittest.TestCase):

    def test_higher_scoring_longer_phrase_wins(self):
        result = resolve_overlaps([
            _cand("election", 0.8),
            _cand("election day", 0.9),
        ])
        self.assertEqual([c.phrase for c in result], ["election day"])

    def test_higher_scoring_shorter_phrase_wins(self):
        result = resolve_overlaps([
            _cand("election day results", 0.7),
            _cand("election", 0.95),
        ])
        self.assertEqual([c.phrase for c in result], ["election"])

    def test_equal_token_counts_never_overlap(self):
        result = resolve_overlaps([_cand("cat", 0.9), _cand("cats", 0.8)])
        self.assertEqual([c.phrase for c in result], ["cat", "cats"])

    def test_raw_substring_containment(self):
        """Containment is by raw string, not by whole tokens."""
        self.assertTrue(phrases_overlap("cat", "concatenate ideas"))
        result = resolve_overlaps([
            _cand("concatenate ideas", 0.9),
            _cand("cat", 0.6),
        ])
        self.assertEqual([c.phrase for c in result], ["concatenate ideas"])

    def test_tie_keeps_already_accepted_phrase(self):
        result = resolve_overlaps([_cand("rain", 0.7), _cand("heavy rain", 0.7)])
        self.assertEqual([c.phrase for c in result], ["rain"])

    def test_duplicate_phrase_keeps_first(self):
        result = resolve_overlaps([_cand("rain", 0.6), _cand("rain", 0.9)])
        self.assertEqual(len(result), 1)
        self.assertEqual(result[0].trend_score, 0.9)

    def test_output_sorted_descending_with_stable_ties(self):
        result = resolve_overlaps([
            _cand("alpha", 0.6), _cand("beta", 0.9),
            _cand("gamma", 0.6), _cand("delta", 0.7),
        ])
        self.assertEqual([c.phrase for c in result], ["beta", "delta", "alpha", "gamma"])

    def test_no_overlap_and_idempotent(self):
        candidates = [
            _cand("election", 0.81), _cand("election day", 0.9),
            _cand("election day results", 0.85), _cand("day", 0.7),
            _cand("storm", 0.75), _cand("storm warning", 0.6),
            _cand("warning", 0.65), _cand("tokyo", 0.55),
        ]
        once = resolve_overlaps(candidates)
        for a in once:
            for b in once:
                if a is not b:
                    self.assertFalse(phrases_overlap(a.phrase, b.phrase),
                                     f"{a.phrase!r} overlaps {b.phrase!r}")
        self.assertEqual(resolve_overlaps(once), once)
        self.assertEqual([c.phrase for c in once], ["election day", "storm", "warning", "tokyo"])


# ═══════════════════════════════════════════════════════════════════════
# Engine scenarios
# ═══════════════════════════════════════════════════════════════════════

class TestEngineScenarios(unittest.TestCase):

    def setUp(self):
        self.engine = TrendScoringEngine(limit=10)

    def test_scenario_a_single_word_growth(self):
        records = [_rec("election", RECENT_MID) for _ in range(10)]
        records += [_rec("election", OLDER_MID) for _ in range(2)]

        recent, older = build_windows(NOW)
        recent_records, older_records = partition_records(records, recent, older)
        self.assertAlmostEqual(count_window(recent_records, recent).word_counts["election"], 12.5)
        self.assertAlmostEqual(count_window(older_records, older).word_counts["election"], 2.5)

        [trend] = self.engine.rank(records, NOW)
        self.assertEqual(trend.phrase, "election")
        self.assertAlmostEqual(trend.recent_count, 12.5)
        self.assertAlmostEqual(trend.older_count, 2.5)
        relative = (12.5 - 2.5) / 3.5
        self.assertAlmostEqual(relative, 2.857, places=3)
        expected = (math.atan(relative) / (math.pi / 2) + 1) / 2
        self.assertAlmostEqual(trend.trend_score, expected)
        self.assertGreater(trend.trend_score, 0.5)

    def test_scenario_b_bigram_replaces_unigram(self):
        records = [_rec("election", RECENT_MID, word2="day") for _ in range(5)]

        recent, _ = build_windows(NOW)
        counts = count_window(records, recent)
        self.assertAlmostEqual(counts.phrase_counts["election day"], 25.0)

        trends = self.engine.rank(records, NOW)
        self.assertEqual([t.phrase for t in trends], ["election day"])
        self.assertAlmostEqual(trends[0].recent_count, 25.0)

    def test_scenario_c_empty_input(self):
        self.assertEqual(self.engine.rank([], NOW), [])

    def test_scenario_d_blank_word(self):
        self.assertEqual(self.engine.rank([_rec("   ", RECENT_MID)], NOW), [])

    def test_naive_and_aware_inputs_mix(self):
        """Naive timestamps are read as UTC instead of failing comparisons."""
        naive_mid = RECENT_MID.replace(tzinfo=None)
        records = [_rec("rain", naive_mid) for _ in range(2)] + [_rec("rain", RECENT_MID)]
        [trend] = self.engine.rank(records, NOW.replace(tzinfo=None))
        self.assertAlmostEqual(trend.recent_count, 3.75)
        self.assertEqual(records[0].created_at, RECENT_MID)

    def test_deterministic(self):
        records = []
        for i, word in enumerate(["rain", "storm", "tokyo", "osaka", "typhoon"]):
            records += [_rec(word, RECENT_MID - timedelta(hours=i)) for _ in range(i + 1)]
            records += [_rec(word, OLDER_MID, word2="news") for _ in range(5 - i)]
        first = self.engine.rank(records, NOW)
        second = self.engine.rank(list(records), NOW)
        self.assertEqual(first, second)

    def test_truncates_to_limit(self):
        records = []
        for i in range(15):
            records += [_rec(f"word{i:02d}x", RECENT_MID) for _ in range(i + 1)]
        trends = self.engine.rank(records, NOW)
        self.assertEqual(len(trends), 10)
        scores = [t.trend_score for t in trends]
        self.assertEqual(scores, sorted(scores, reverse=True))

    def test_languages_are_independent(self):
        records = [_rec("rain", RECENT_MID, language="en") for _ in range(3)]
        records += [_rec("rain", OLDER_MID, language="ja") for _ in range(3)]
        by_language = self.engine.rank_by_language(records, NOW)

        [en] = by_language["en"]
        [ja] = by_language["ja"]
        self.assertEqual(en.older_count, 0.0)
        self.assertEqual(ja.recent_count, 0.0)
        self.assertGreater(en.trend_score, 0.5)
        self.assertEqual(en.language, "en")

    def test_weighted_count_used_as_default_post_count(self):
        [trend] = self.engine.rank([_rec("rain", RECENT_MID) for _ in range(3)], NOW)
        self.assertEqual(trend.post_count, 4)  # round(3.75)


class TestPhraseTokens(unittest.TestCase):

    def test_tokens_for_query_building(self):
        self.assertEqual(phrase_tokens("election day results"), ["election", "day", "results"])
        trend = RankedTrend(phrase="heavy rain", recent_count=1, older_count=0,
                            trend_score=0.6)
        self.assertEqual(trend.tokens, ["heavy", "rain"])


if __name__ == '__main__':
    unittest.main(verbosity=2)
