"""
History Store - Per-identity usage statistics and pin status.

Each front-end keeps its own namespace ("apps", "dmenu", "clip") in one
SQLite database. The whole namespace is read into memory once at startup;
the ranker only ever reads from that copy, and only the selection path
writes. Every write is a single SQLite transaction, so a crash mid-write
leaves the last committed state on disk.

If the database can't be opened or read, the store logs the failure and
carries on in memory with an empty history instead of aborting startup.
"""

import sqlite3
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterator, Optional

from loguru import logger

from .frecency import FrecencyCalculator


@dataclass(frozen=True)
class HistoryRecord:
    """Usage state for one identity."""
    use_count: int = 0
    last_used: Optional[float] = None
    pinned: bool = False


class MemoryHistoryStore:
    """
    In-memory history with the full store interface.

    Used directly when history is disabled, and as the fake store in tests.
    """

    def __init__(self, namespace: str = "apps"):
        self.namespace = namespace
        self._records: dict[str, HistoryRecord] = {}

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __len__(self) -> int:
        return len(self._records)

    def get(self, identity: str) -> Optional[HistoryRecord]:
        return self._records.get(identity)

    def records(self) -> Iterator[tuple[str, HistoryRecord]]:
        """Iterate (identity, record) pairs in insertion order."""
        return iter(list(self._records.items()))

    def record_use(self, identity: str, now: Optional[float] = None) -> HistoryRecord:
        """
        Count one selection of an identity.

        Args:
            identity: Candidate identity (desktop id, line text, row id)
            now: Timestamp of the selection (defaults to time.time())

        Returns:
            The updated record
        """
        if now is None:
            now = time.time()
        current = self._records.get(identity, HistoryRecord())
        record = replace(current, use_count=current.use_count + 1, last_used=now)
        self._records[identity] = record
        return record

    def set_pinned(self, identity: str, pinned: bool) -> HistoryRecord:
        current = self._records.get(identity, HistoryRecord())
        record = replace(current, pinned=bool(pinned))
        self._records[identity] = record
        return record

    def toggle_pin(self, identity: str) -> bool:
        """Flip the pin flag. Returns the new state."""
        current = self._records.get(identity)
        pinned = not (current is not None and current.pinned)
        self.set_pinned(identity, pinned)
        return pinned

    def forget(self, identity: str) -> None:
        self._records.pop(identity, None)

    def clear_all(self) -> None:
        self._records.clear()

    def total_uses(self) -> int:
        return sum(record.use_count for record in self._records.values())

    def get_top(
        self,
        limit: int = 12,
        min_uses: int = 1,
        now: Optional[float] = None,
        calculator: Optional[FrecencyCalculator] = None,
    ) -> list[tuple[str, float, HistoryRecord]]:
        """
        Get the most frecent identities.

        Args:
            limit: Maximum number of entries to return
            min_uses: Minimum use count to include an entry
            now: Reference time for the recency decay
            calculator: Frecency parameters (defaults apply if None)

        Returns:
            List of (identity, frecency, record), highest frecency first
        """
        calculator = calculator or FrecencyCalculator()
        if now is None:
            now = time.time()

        results = [
            (identity, calculator.boost(record, now), record)
            for identity, record in self._records.items()
            if record.use_count >= min_uses
        ]
        results.sort(key=lambda x: x[1], reverse=True)
        return results[:limit]

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


class HistoryStore(MemoryHistoryStore):
    """
    SQLite-backed history.

    Reads go to the in-memory copy loaded at construction; writes update
    that copy first and are then committed to disk. When the database is
    unusable the store is `degraded` and behaves like MemoryHistoryStore.
    """

    def __init__(self, db_path: Path, namespace: str = "apps"):
        super().__init__(namespace)
        self.db_path = Path(db_path)
        self.degraded = False
        self._conn: Optional[sqlite3.Connection] = None

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._init_database()
            self._load()
        except (sqlite3.Error, OSError):
            logger.exception(
                f"History database at {self.db_path} is unusable, continuing with empty history"
            )
            self._fall_back()
            return

        logger.debug(
            f"HistoryStore[{namespace}] loaded {len(self._records)} records from {self.db_path}"
        )

    def _init_database(self):
        """Create database schema if it doesn't exist."""
        with self._conn:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS history (
                    namespace TEXT NOT NULL,
                    identity TEXT NOT NULL,
                    use_count INTEGER NOT NULL DEFAULT 0,
                    last_used REAL,
                    pinned INTEGER NOT NULL DEFAULT 0,
                    created_at REAL,
                    PRIMARY KEY (namespace, identity)
                )
            """)
            self._conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_frecency
                ON history(namespace, last_used DESC, use_count DESC)
            """)

    def _load(self):
        rows = self._conn.execute(
            """
            SELECT identity, use_count, last_used, pinned
            FROM history
            WHERE namespace = ?
            ORDER BY created_at, rowid
            """,
            (self.namespace,),
        ).fetchall()

        self._records = {
            identity: HistoryRecord(
                use_count=int(use_count or 0),
                last_used=float(last_used) if last_used is not None else None,
                pinned=bool(pinned),
            )
            for identity, use_count, last_used, pinned in rows
        }

    def _fall_back(self):
        self.degraded = True
        self._records = {}
        if self._conn is not None:
            try:
                self._conn.close()
            except sqlite3.Error as e:
                logger.debug(f"Ignoring error closing {self.db_path}: {e}")
        self._conn = None

    def _write(self, sql: str, params: tuple, action: str) -> bool:
        """Run one write in its own transaction. Returns False on failure."""
        if self._conn is None:
            return False
        try:
            with self._conn:
                self._conn.execute(sql, params)
        except sqlite3.Error:
            logger.exception(f"Failed to {action}")
            return False
        return True

    def record_use(self, identity: str, now: Optional[float] = None) -> HistoryRecord:
        record = super().record_use(identity, now)
        self._write(
            """
            INSERT INTO history (namespace, identity, use_count, last_used, pinned, created_at)
            VALUES (?, ?, 1, ?, 0, ?)
            ON CONFLICT(namespace, identity) DO UPDATE SET
                use_count = use_count + 1,
                last_used = excluded.last_used
            """,
            (self.namespace, identity, record.last_used, record.last_used),
            f"record use of {identity}",
        )
        logger.debug(f"Recorded use of {identity} ({record.use_count})")
        return record

    def set_pinned(self, identity: str, pinned: bool) -> HistoryRecord:
        record = super().set_pinned(identity, pinned)
        self._write(
            """
            INSERT INTO history (namespace, identity, use_count, last_used, pinned, created_at)
            VALUES (?, ?, 0, NULL, ?, ?)
            ON CONFLICT(namespace, identity) DO UPDATE SET
                pinned = excluded.pinned
            """,
            (self.namespace, identity, int(record.pinned), time.time()),
            f"set pin on {identity}",
        )
        return record

    def forget(self, identity: str) -> None:
        super().forget(identity)
        self._write(
            "DELETE FROM history WHERE namespace = ? AND identity = ?",
            (self.namespace, identity),
            f"forget {identity}",
        )

    def clear_all(self) -> None:
        super().clear_all()
        self._write(
            "DELETE FROM history WHERE namespace = ?",
            (self.namespace,),
            f"clear {self.namespace} history",
        )

    def flush(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.commit()
        except sqlite3.Error:
            logger.exception(f"Failed to flush history to {self.db_path}")

    def close(self) -> None:
        if self._conn is None:
            return
        self.flush()
        self._conn.close()
        self._conn = None
