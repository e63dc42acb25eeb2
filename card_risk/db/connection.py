"""
SQLite access for persisted speculation scores.

Two entry points:

``get_connection(db_path, ...)``
    Bare connection context manager. Rows come back as ``sqlite3.Row``; the
    transaction commits when the block exits cleanly and rolls back if it
    raises.

``open_score_db(database_config)``
    What the CLI uses: ``get_connection`` driven by the ``[database]`` config
    section, with the score schema applied before the connection is handed
    out, so ``batch --persist`` and ``top`` work on a fresh file.

Usage::

    with open_score_db(config.database) as conn:
        ScoreRepository(conn).upsert(score)
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterator

from card_risk.db.schema import apply_schema

if TYPE_CHECKING:
    from card_risk.config import DatabaseConfig

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
) -> Iterator[sqlite3.Connection]:
    """Yield a connection to ``db_path``; commit on success, roll back on error.

    Args:
        db_path: Database file. Missing parent directories are created.
            ``":memory:"`` gives a private throwaway database.
        wal_mode: Use the WAL journal so readers are not blocked by the
            batch writer. Ignored for in-memory databases.
        busy_timeout_ms: How long to wait on a locked database.

    Raises:
        sqlite3.OperationalError: If the file cannot be opened, or stays
            locked past ``busy_timeout_ms``.
    """
    on_disk = db_path != MEMORY_DB
    if on_disk:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row
    conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
    if wal_mode and on_disk:
        conn.execute("PRAGMA journal_mode = WAL;")
    logger.debug("Opened %s (wal=%s)", db_path, wal_mode and on_disk)

    try:
        yield conn
    except Exception:
        conn.rollback()
        raise
    else:
        conn.commit()
    finally:
        conn.close()


@contextmanager
def open_score_db(
    database: "DatabaseConfig",
    db_path: str | None = None,
) -> Iterator[sqlite3.Connection]:
    """Open the configured score database with its schema in place.

    Args:
        database: The ``[database]`` section of ``AppConfig``.
        db_path: Overrides ``database.db_path`` (the ``--db-path`` CLI flag).
    """
    with get_connection(
        db_path or database.db_path,
        wal_mode=database.wal_mode,
        busy_timeout_ms=database.busy_timeout_ms,
    ) as conn:
        apply_schema(conn)
        yield conn
