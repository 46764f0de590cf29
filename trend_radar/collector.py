"""
Occurrence Collector -- reads word occurrence records from the store.

Posts are split into words upstream; each row of post_trend_words holds
one word plus up to two following words and the post's timestamp. This
module only reads. Rows are streamed from the cursor, so there is no cap
on how many records a window can hold.
"""

import logging
import sqlite3
from datetime import datetime
from typing import Iterator, List, Optional

import config
from trend_radar.models import OccurrenceRecord, TimeWindow, as_utc

logger = logging.getLogger(__name__)


class StoreUnavailableError(RuntimeError):
    """A store query failed. Nothing was written; the run can be retried."""

    def __init__(self, operation: str, cause: Exception):
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause


def _casefold(value):
    return value.casefold() if isinstance(value, str) else value


def connect(db_path=None) -> sqlite3.Connection:
    """
    Open a connection with row access by name and a busy timeout.

    Registers casefold(text) since SQLite's lower() and LIKE only fold ASCII.
    """
    conn = sqlite3.connect(str(db_path or config.DB_PATH))
    conn.row_factory = sqlite3.Row
    conn.create_function("casefold", 1, _casefold, deterministic=True)
    conn.execute(f"PRAGMA busy_timeout = {int(config.SQLITE_BUSY_TIMEOUT_MS)}")
    return conn


class OccurrenceCollector:
    """
    Range queries over post_trend_words.
    """

    def __init__(self, db_path=None):
        self.db_path = db_path or config.DB_PATH

    def iter_records(self, start: datetime, end: datetime,
                     language: Optional[str] = None) -> Iterator[OccurrenceRecord]:
        """Yield every record with start <= created_at < end."""
        sql = """
            SELECT word, word2, word3, language, created_at
            FROM post_trend_words
            WHERE julianday(created_at) >= julianday(?)
              AND julianday(created_at) < julianday(?)
        """
        params = [format_ts(start), format_ts(end)]
        if language:
            sql += " AND language = ?"
            params.append(language)

        try:
            conn = connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreUnavailableError("occurrence query", e) from e

        try:
            for row in conn.execute(sql, params):
                yield OccurrenceRecord(
                    word=row["word"] or "",
                    word2=row["word2"],
                    word3=row["word3"],
                    language=row["language"],
                    created_at=parse_ts(row["created_at"]),
                )
        except sqlite3.Error as e:
            raise StoreUnavailableError("occurrence query", e) from e
        finally:
            conn.close()

    def fetch_span(self, recent: TimeWindow, older: TimeWindow,
                   language: Optional[str] = None) -> List[OccurrenceRecord]:
        """All records covering both windows, oldest window start to now."""
        records = list(self.iter_records(older.start, recent.end, language))
        logger.info(
            f"  Collected {len(records)} occurrence records"
            + (f" for '{language}'" if language else "")
        )
        return records


def format_ts(ts: datetime) -> str:
    """Serialize a datetime as an ISO 8601 UTC string."""
    return as_utc(ts).isoformat()


def parse_ts(ts_str: str) -> datetime:
    """Parse an ISO 8601 timestamp string to a UTC datetime."""
    ts_str = ts_str.replace("Z", "+00:00")
    try:
        dt = datetime.fromisoformat(ts_str)
    except ValueError:
        # Fallback: SQLite's own "YYYY-MM-DD HH:MM:SS" format
        dt = datetime.strptime(ts_str[:19], "%Y-%m-%d %H:%M:%S")
    return as_utc(dt)
