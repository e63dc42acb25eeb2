"""
SQLite schema for persisted speculation scores.

One row per card in ``speculation_scores``; re-scoring a card replaces its
row (see ``ScoreRepository.upsert``). Dimension details are stored as JSON so
the table does not change when a scorer gains a diagnostic.

``apply_schema()`` is idempotent.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

_DDL_SPECULATION_SCORES = """
CREATE TABLE IF NOT EXISTS speculation_scores (
    card_id              TEXT    PRIMARY KEY,
    card_name            TEXT    NOT NULL DEFAULT '',
    total_score          INTEGER NOT NULL CHECK (total_score BETWEEN 0 AND 100),
    rating               TEXT    NOT NULL,
    recommendation       TEXT    NOT NULL,
    volatility_score     REAL    NOT NULL,
    growth_score         REAL    NOT NULL,
    scarcity_score       REAL    NOT NULL,
    sentiment_score      REAL    NOT NULL,
    macro_score          REAL    NOT NULL,
    degraded_dimensions  TEXT    NOT NULL DEFAULT '[]',
    details_json         TEXT    NOT NULL DEFAULT '{}',
    summary              TEXT    NOT NULL DEFAULT '',
    computed_at          TEXT,
    updated_at           TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
CREATE INDEX IF NOT EXISTS idx_speculation_scores_total
    ON speculation_scores (total_score DESC);
CREATE INDEX IF NOT EXISTS idx_speculation_scores_rating
    ON speculation_scores (rating);
"""

_ALL_DDL: list[str] = [_DDL_SPECULATION_SCORES]

ALL_TABLE_NAMES: list[str] = ["speculation_scores"]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Create every table and index that does not exist yet."""
    for ddl in _ALL_DDL:
        for statement in (s.strip() for s in ddl.split(";")):
            if statement:
                conn.execute(statement)
    conn.commit()
    logger.info("Schema applied: %d table(s) verified.", len(ALL_TABLE_NAMES))


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
