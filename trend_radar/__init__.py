"""
Trend Radar -- finds words and short phrases that are trending right now.

Compares the last 48 hours against the 48 hours before, weighting each
occurrence by its position in its window, and favors phrases that grow
in relative terms while carrying real volume.

Components:
  collector.py  -- Range queries over word occurrence records
  windows.py    -- Recent/older window construction and record partitioning
  counter.py    -- Time-weighted word/bigram/trigram counts per window
  scorer.py     -- Bounded trend score per phrase
  resolver.py   -- Collapses overlapping phrases, keeps the best scorer
  engine.py     -- Runs the stages above per language
  sink.py       -- Verified post counts + replacement of stored trends
"""
