"""SQLite-backed store of seen scores with per-player, per-mode retention."""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from pathlib import Path
from threading import Lock
from typing import Any

from scorebot.core.logging import get_logger
from scorebot.shared.exceptions import ConflictError, StoreError
from scorebot.shared.models import DedupRecord

logger = get_logger(__name__)

DEFAULT_RETENTION = 10

SCHEMA = """
CREATE TABLE IF NOT EXISTS scores (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    score_id INTEGER NOT NULL,
    gamemode TEXT NOT NULL,
    created_at TEXT NOT NULL,
    UNIQUE (user_id, score_id, gamemode)
);
CREATE INDEX IF NOT EXISTS idx_scores_partition ON scores (user_id, gamemode, id);
"""


class ScoreStore:
    """Durable set of (player, mode, score) triples already notified.

    Ids come from an AUTOINCREMENT column, so they grow across the whole
    store and are never reused after pruning. Newest-first ordering within
    a partition is ordering by id.

    Usage:
        with ScoreStore("data/scores.sqlite") as store:
            if not store.exists(user_id, "osu", score_id):
                store.insert(user_id, "osu", score_id)
            store.prune(user_id, "osu")
    """

    def __init__(self, db_path: str | Path) -> None:
        """Initialize store with database file path.

        Args:
            db_path: Path to SQLite file; parent directories are created
        """
        self.db_path = Path(db_path)
        self.lock = Lock()
        self.conn: sqlite3.Connection | None = None

    def __enter__(self) -> ScoreStore:
        self.open()
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: Any) -> None:
        self.close()

    def open(self) -> None:
        """Open the database and create the schema if missing.

        Raises:
            StoreError: If the file cannot be opened or initialised
        """
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.executescript(SCHEMA)
            conn.commit()
        except (sqlite3.Error, OSError) as e:
            logger.error("store.open.failed", path=str(self.db_path), error=str(e))
            raise StoreError(f"Failed to open score store {self.db_path}: {e}") from e

        self.conn = conn
        logger.info("store.opened", path=str(self.db_path), records=self.count())

    def close(self) -> None:
        """Close the database connection if open."""
        if self.conn is not None:
            self.conn.close()
            self.conn = None
            logger.info("store.closed", path=str(self.db_path))

    def _require_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise StoreError("Score store not opened")
        return self.conn

    def exists(self, user_id: int, mode: str, score_id: int) -> bool:
        """Check whether a score triple has been recorded.

        Args:
            user_id: Owning player id
            mode: Game mode wire name (osu, taiko, fruits, mania)
            score_id: Upstream score id

        Returns:
            True if the exact triple is present
        """
        conn = self._require_conn()
        with self.lock:
            row = conn.execute(
                "SELECT 1 FROM scores WHERE user_id = ? AND score_id = ? AND gamemode = ?",
                (user_id, score_id, mode),
            ).fetchone()
        return row is not None

    def insert(self, user_id: int, mode: str, score_id: int) -> DedupRecord:
        """Record a newly seen score.

        Args:
            user_id: Owning player id
            mode: Game mode wire name
            score_id: Upstream score id

        Returns:
            The created record, carrying its store-wide id

        Raises:
            ConflictError: If the triple is already recorded
            StoreError: On any other database failure
        """
        conn = self._require_conn()
        with self.lock:
            try:
                cursor = conn.execute(
                    "INSERT INTO scores (user_id, score_id, gamemode, created_at) VALUES (?, ?, ?, ?)",
                    (user_id, score_id, mode, datetime.now(UTC).isoformat()),
                )
                conn.commit()
            except sqlite3.IntegrityError as e:
                conn.rollback()
                raise ConflictError(
                    f"Score {score_id} already recorded for user {user_id} in {mode}"
                ) from e
            except sqlite3.Error as e:
                conn.rollback()
                raise StoreError(f"Failed to insert score {score_id}: {e}") from e

        record_id = cursor.lastrowid
        if record_id is None:
            raise StoreError(f"Insert of score {score_id} returned no row id")

        logger.debug(
            "store.score.inserted",
            record_id=record_id,
            user_id=user_id,
            mode=mode,
            score_id=score_id,
        )
        return DedupRecord(id=record_id, user_id=user_id, score_id=score_id, mode=mode)

    def list_partition(self, user_id: int, mode: str) -> list[DedupRecord]:
        """List every record for a player and mode, newest first."""
        conn = self._require_conn()
        with self.lock:
            rows = conn.execute(
                "SELECT id, user_id, score_id, gamemode FROM scores "
                "WHERE user_id = ? AND gamemode = ? ORDER BY id DESC",
                (user_id, mode),
            ).fetchall()
        return [
            DedupRecord(id=row["id"], user_id=row["user_id"], score_id=row["score_id"], mode=row["gamemode"])
            for row in rows
        ]

    def prune(self, user_id: int, mode: str, keep: int = DEFAULT_RETENTION) -> int:
        """Delete all but the ``keep`` newest records for a player and mode.

        Running it again on an already-pruned partition deletes nothing.

        Args:
            user_id: Player id
            mode: Game mode wire name
            keep: Number of newest records to retain

        Returns:
            Number of records deleted

        Raises:
            ValueError: If keep is negative
        """
        if keep < 0:
            raise ValueError(f"keep must be non-negative, got {keep}")

        records = self.list_partition(user_id, mode)
        stale_ids = [record.id for record in records[keep:]]
        if not stale_ids:
            return 0

        conn = self._require_conn()
        with self.lock:
            try:
                conn.executemany("DELETE FROM scores WHERE id = ?", [(record_id,) for record_id in stale_ids])
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise StoreError(f"Failed to prune scores for user {user_id} in {mode}: {e}") from e

        logger.debug(
            "store.partition.pruned",
            user_id=user_id,
            mode=mode,
            deleted=len(stale_ids),
            kept=keep,
        )
        return len(stale_ids)

    def count(self, user_id: int | None = None, mode: str | None = None) -> int:
        """Count records, optionally restricted to a player and/or mode."""
        conn = self._require_conn()
        clauses: list[str] = []
        params: list[Any] = []
        if user_id is not None:
            clauses.append("user_id = ?")
            params.append(user_id)
        if mode is not None:
            clauses.append("gamemode = ?")
            params.append(mode)

        query = "SELECT COUNT(*) FROM scores"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)

        with self.lock:
            row = conn.execute(query, params).fetchone()
        return int(row[0])
