"""Splits a run into the recent window and the older window before it."""

from datetime import datetime, timedelta
from typing import Iterable, List, Tuple

from trend_radar.models import OccurrenceRecord, TimeWindow, as_utc


def build_windows(now: datetime, recent_hours: int = 48,
                  total_hours: int = 96) -> Tuple[TimeWindow, TimeWindow]:
    """
    Return (recent, older) for a reference instant.

    recent = [now - recent_hours, now)
    older  = [now - total_hours, now - recent_hours)

    A naive `now` is taken as UTC.
    """
    now = as_utc(now)
    boundary = now - timedelta(hours=recent_hours)
    recent = TimeWindow(start=boundary, end=now)
    older = TimeWindow(start=now - timedelta(hours=total_hours), end=boundary)
    return recent, older


def partition_records(records: Iterable[OccurrenceRecord], recent: TimeWindow,
                      older: TimeWindow) -> Tuple[List[OccurrenceRecord], List[OccurrenceRecord]]:
    """Split records by window membership. Records outside both are dropped."""
    recent_records = []
    older_records = []
    for record in records:
        if recent.contains(record.created_at):
            recent_records.append(record)
        elif older.contains(record.created_at):
            older_records.append(record)
    return recent_records, older_records
