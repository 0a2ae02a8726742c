"""
Module: queue.py
Description: SQLite offline queue for undelivered telemetry events.

Provides async operations for persisting, selecting, and retiring
pending events in a local SQLite database with proper error handling
and logging.

Key Components:
- EventQueueStore: single-writer store over one aiosqlite connection
- Queue cap: enqueue() evicts the oldest rows beyond max_queue_size
- Retry ceiling: select_eligible() skips rows at max_retry_count,
  purge_exhausted() deletes them
- Error handling: statement failures are logged and rolled back, the
  call returns its empty value instead of raising

Dependencies: aiosqlite, sqlite3, pydantic
"""

import asyncio
import sqlite3
import time
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import aiosqlite
from pydantic import ValidationError

from event_relay.exceptions import StorageInitializationError, StorageNotInitializedError
from event_relay.models.event import QueuedEvent, TelemetryEvent
from event_relay.models.response import QueueStats
from event_relay.utils.logger import get_logger

logger = get_logger(__name__)

MAX_QUEUE_SIZE = 500
MAX_RETRY_COUNT = 5

QUEUE_TABLE = "event_queue"

QUEUE_SCHEMA = f"""
    CREATE TABLE IF NOT EXISTS {QUEUE_TABLE} (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        event_json TEXT NOT NULL,
        created_at INTEGER NOT NULL,
        retry_count INTEGER NOT NULL DEFAULT 0
    );
    CREATE INDEX IF NOT EXISTS idx_{QUEUE_TABLE}_created ON {QUEUE_TABLE}(created_at ASC);
"""

EventLike = Union[TelemetryEvent, Mapping[str, Any]]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


class EventQueueStore:
    """
    Durable queue of events waiting for delivery.

    All statements go through one connection and every public operation
    holds ``_lock`` for its whole transaction, so the store behaves as a
    single writer no matter how many tasks call into it.

    Attributes:
        db_path: Path of the SQLite database file
        max_queue_size: Maximum number of rows kept after any enqueue
        max_retry_count: Retry count at which a row is no longer eligible

    Example:
        >>> store = EventQueueStore("./data/telemetry.db")
        >>> await store.initialize()
        >>> await store.enqueue([TelemetryEvent(event="app_opened")])
        1
        >>> rows = await store.select_eligible(50)
    """

    def __init__(
        self,
        db_path: Union[str, Path],
        max_queue_size: int = MAX_QUEUE_SIZE,
        max_retry_count: int = MAX_RETRY_COUNT,
        clock: Optional[Callable[[], int]] = None
    ):
        """
        Initialize the store (no I/O happens until initialize()).

        Args:
            db_path: Path of the SQLite database file
            max_queue_size: Queue cap enforced on every enqueue
            max_retry_count: Retry ceiling
            clock: Callable returning the current time in epoch milliseconds

        Raises:
            ValueError: If db_path is empty or a limit is not positive
        """
        if not db_path:
            raise ValueError("db_path must be a non-empty path")
        if max_queue_size < 1:
            raise ValueError("max_queue_size must be positive")
        if max_retry_count < 1:
            raise ValueError("max_retry_count must be positive")

        self.db_path = Path(db_path)
        self.max_queue_size = max_queue_size
        self.max_retry_count = max_retry_count
        self._clock = clock or _now_ms
        self._connection: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._connection is not None

    async def initialize(self) -> None:
        """
        Create (or open) the database file and its schema.

        Enables WAL journaling so committed inserts survive an abrupt
        process exit. Idempotent: calling it on an already-open store or
        an existing database is harmless.

        Raises:
            StorageInitializationError: If the directory or file cannot be
                created or opened
        """
        async with self._lock:
            if self._connection is not None:
                return

            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                connection = await aiosqlite.connect(str(self.db_path))
            except (OSError, sqlite3.Error) as e:
                logger.error(
                    "Cannot open event queue database",
                    db_path=str(self.db_path),
                    error=str(e),
                    error_type=type(e).__name__
                )
                raise StorageInitializationError(
                    f"Cannot open event queue database at {self.db_path}: {e}"
                ) from e

            try:
                await connection.execute("PRAGMA journal_mode=WAL")
                await connection.executescript(QUEUE_SCHEMA)
                await connection.commit()
            except sqlite3.Error as e:
                await connection.close()
                logger.error(
                    "Cannot create event queue schema",
                    db_path=str(self.db_path),
                    error=str(e)
                )
                raise StorageInitializationError(
                    f"Cannot create event queue schema in {self.db_path}: {e}"
                ) from e

            self._connection = connection

        logger.info(
            "Event queue store initialized",
            db_path=str(self.db_path),
            max_queue_size=self.max_queue_size,
            max_retry_count=self.max_retry_count
        )

    async def close(self) -> None:
        """Close the underlying connection. Safe to call twice."""
        async with self._lock:
            if self._connection is None:
                return
            await self._connection.close()
            self._connection = None

        logger.info("Event queue store closed", db_path=str(self.db_path))

    async def __aenter__(self) -> "EventQueueStore":
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise StorageNotInitializedError(
                "Event queue store is not open; call initialize() first"
            )
        return self._connection

    async def _rollback(self, connection: aiosqlite.Connection) -> None:
        try:
            await connection.rollback()
        except sqlite3.Error as e:
            logger.error("Event queue rollback failed", error=str(e))

    @staticmethod
    def _serialize(event: EventLike) -> str:
        if not isinstance(event, TelemetryEvent):
            event = TelemetryEvent.model_validate(event)
        return event.model_dump_json()

    async def enqueue(self, events: Sequence[EventLike]) -> int:
        """
        Persist events for later delivery.

        Each event is serialized on its own; an event that cannot be
        serialized is logged and dropped without failing the batch. The
        inserts and the eviction of rows beyond the queue cap commit in a
        single transaction.

        Args:
            events: TelemetryEvent models or plain event dictionaries

        Returns:
            Number of rows persisted (0 if the write failed)

        Raises:
            StorageNotInitializedError: If the store is not open
        """
        rows: List[Tuple[str, int]] = []
        for index, event in enumerate(events):
            try:
                rows.append((self._serialize(event), self._clock()))
            except (ValidationError, ValueError, TypeError) as e:
                logger.error(
                    "Dropping event that cannot be serialized",
                    index=index,
                    error=str(e),
                    error_type=type(e).__name__
                )

        if not rows:
            return 0

        async with self._lock:
            connection = self._require_connection()
            try:
                await connection.executemany(
                    f"INSERT INTO {QUEUE_TABLE} (event_json, created_at) VALUES (?, ?)",
                    rows
                )
                cursor = await connection.execute(
                    f"""
                    DELETE FROM {QUEUE_TABLE} WHERE id IN (
                        SELECT id FROM {QUEUE_TABLE}
                        ORDER BY created_at ASC, id ASC
                        LIMIT MAX(0, (SELECT COUNT(*) FROM {QUEUE_TABLE}) - ?)
                    )
                    """,
                    (self.max_queue_size,)
                )
                evicted = cursor.rowcount
                await connection.commit()
            except sqlite3.Error as e:
                await self._rollback(connection)
                logger.error(
                    "Failed to queue events",
                    row_count=len(rows),
                    error=str(e),
                    error_type=type(e).__name__
                )
                return 0

        if evicted > 0:
            logger.warning(
                "Queue cap reached, evicted oldest events",
                evicted=evicted,
                max_queue_size=self.max_queue_size
            )

        logger.info("Events queued for retry", row_count=len(rows))
        return len(rows)

    async def select_eligible(self, limit: int) -> List[QueuedEvent]:
        """
        Read the oldest rows still under the retry ceiling.

        Args:
            limit: Maximum number of rows to return

        Returns:
            Rows ordered oldest first; empty on storage failure

        Raises:
            StorageNotInitializedError: If the store is not open
        """
        if limit <= 0:
            return []

        async with self._lock:
            connection = self._require_connection()
            try:
                cursor = await connection.execute(
                    f"""
                    SELECT id, event_json, created_at, retry_count FROM {QUEUE_TABLE}
                    WHERE retry_count < ?
                    ORDER BY created_at ASC, id ASC
                    LIMIT ?
                    """,
                    (self.max_retry_count, limit)
                )
                records = await cursor.fetchall()
                await cursor.close()
            except sqlite3.Error as e:
                logger.error("Failed to read queued events", error=str(e))
                return []

        return [
            QueuedEvent(id=row[0], event_json=row[1], created_at=row[2], retry_count=row[3])
            for row in records
        ]

    async def _update_ids(self, sql: str, ids: Iterable[int], params: Tuple = ()) -> int:
        """Run one statement with an ``id IN (...)`` clause and commit it."""
        id_list = sorted(set(ids))
        if not id_list:
            return 0

        async with self._lock:
            connection = self._require_connection()
            try:
                cursor = await connection.execute(
                    sql.format(ids=_placeholders(len(id_list))),
                    (*params, *id_list)
                )
                affected = cursor.rowcount
                await connection.commit()
            except sqlite3.Error as e:
                await self._rollback(connection)
                logger.error(
                    "Event queue update failed",
                    row_count=len(id_list),
                    error=str(e),
                    error_type=type(e).__name__
                )
                return 0

        return affected

    async def delete(self, ids: Iterable[int]) -> int:
        """Delete exactly the given rows; returns the number removed."""
        return await self._update_ids(
            f"DELETE FROM {QUEUE_TABLE} WHERE id IN ({{ids}})",
            ids
        )

    async def increment_retry(self, ids: Iterable[int]) -> int:
        """Add one to retry_count of exactly the given rows."""
        return await self._update_ids(
            f"UPDATE {QUEUE_TABLE} SET retry_count = retry_count + 1 WHERE id IN ({{ids}})",
            ids
        )

    async def purge_exhausted(self, ids: Iterable[int]) -> int:
        """Delete the rows among ``ids`` that reached the retry ceiling."""
        return await self._update_ids(
            f"DELETE FROM {QUEUE_TABLE} WHERE retry_count >= ? AND id IN ({{ids}})",
            ids,
            (self.max_retry_count,)
        )

    async def count(self) -> int:
        """Number of rows currently queued (0 on storage failure)."""
        async with self._lock:
            connection = self._require_connection()
            try:
                cursor = await connection.execute(f"SELECT COUNT(*) FROM {QUEUE_TABLE}")
                row = await cursor.fetchone()
                await cursor.close()
            except sqlite3.Error as e:
                logger.error("Failed to count queued events", error=str(e))
                return 0

        return row[0] if row else 0

    async def stats(self) -> QueueStats:
        """Snapshot of queue size, retry state and age range."""
        async with self._lock:
            connection = self._require_connection()
            try:
                cursor = await connection.execute(
                    f"""
                    SELECT
                        COUNT(*),
                        COALESCE(SUM(CASE WHEN retry_count < ? THEN 1 ELSE 0 END), 0),
                        MIN(created_at),
                        MAX(created_at)
                    FROM {QUEUE_TABLE}
                    """,
                    (self.max_retry_count,)
                )
                row = await cursor.fetchone()
                await cursor.close()
            except sqlite3.Error as e:
                logger.error("Failed to read queue stats", error=str(e))
                return QueueStats()

        total, eligible, oldest, newest = row
        return QueueStats(
            total=total,
            eligible=eligible,
            exhausted=total - eligible,
            oldest_created_at=oldest,
            newest_created_at=newest
        )
