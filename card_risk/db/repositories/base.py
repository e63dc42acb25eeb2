"""
Base repository: explicit SQL over a caller-managed ``sqlite3.Connection``.

Repositories never open, commit or close connections; the ``get_connection``
/ ``open_score_db`` context owns the transaction. Subclasses set ``table``
and get ``count()`` plus JSON column helpers for free.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any, ClassVar, Optional

logger = logging.getLogger(__name__)

Params = tuple[Any, ...] | dict[str, Any]


class BaseRepository:
    """Query helpers shared by the score repositories.

    Attributes:
        conn: The active ``sqlite3.Connection`` (rows are ``sqlite3.Row``).
    """

    table: ClassVar[str]

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def execute(self, sql: str, params: Params = ()) -> sqlite3.Cursor:
        logger.debug("%s SQL: %s | params: %s", self.table, " ".join(sql.split()), params)
        return self.conn.execute(sql, params)

    def fetchone(self, sql: str, params: Params = ()) -> Optional[sqlite3.Row]:
        return self.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: Params = ()) -> list[sqlite3.Row]:
        return self.execute(sql, params).fetchall()

    def count(self) -> int:
        """Number of rows in ``table``."""
        row = self.fetchone(f"SELECT COUNT(*) AS n FROM {self.table};")
        return int(row["n"]) if row is not None else 0

    @staticmethod
    def to_json(value: Any) -> str:
        """Serialise a column value with stable key order."""
        return json.dumps(value, sort_keys=True, default=str)

    @staticmethod
    def from_json(text: Optional[str], default: Any = None) -> Any:
        return json.loads(text) if text else default
