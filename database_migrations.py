"""
Database migrations for the Trend Word Job.

Creates the occurrence, post and trend tables plus their time indexes.
Safe to run multiple times (idempotent).
"""

import sqlite3
import logging
import config

logger = logging.getLogger(__name__)


def run_trend_migrations(db_path=None):
    """
    Create all tables the job reads from and writes to.
    Safe to call multiple times - only creates tables if they don't exist.
    """
    db_path = db_path or config.DB_PATH
    conn = sqlite3.connect(str(db_path))

    logger.info("Running trend table migrations...")

    try:
        conn.executescript("""
            -- One row per word extracted from a post, with up to two following words
            CREATE TABLE IF NOT EXISTS post_trend_words (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                word TEXT NOT NULL,
                word2 TEXT,
                word3 TEXT,
                language TEXT,
                created_at TEXT NOT NULL
            );

            -- Raw posts, used to verify post counts of final trends
            CREATE TABLE IF NOT EXISTS posts (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                text TEXT NOT NULL,
                language TEXT,
                created_at TEXT NOT NULL
            );

            -- Current feed, fully replaced by every run
            CREATE TABLE IF NOT EXISTS post_trends (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                word TEXT NOT NULL,
                post_count INTEGER NOT NULL DEFAULT 0,
                language TEXT,
                trend_score REAL,
                created_at TEXT NOT NULL
            );
        """)

        # Indexes for the range queries
        conn.executescript("""
            CREATE INDEX IF NOT EXISTS idx_trend_words_created
            ON post_trend_words(created_at);

            CREATE INDEX IF NOT EXISTS idx_trend_words_lang_created
            ON post_trend_words(language, created_at);

            CREATE INDEX IF NOT EXISTS idx_posts_created
            ON posts(created_at);
        """)
        conn.commit()
    finally:
        conn.close()

    logger.info("Trend table migrations complete")
