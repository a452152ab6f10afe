"""
SQLite-based cache store.

Persists provider responses keyed by fingerprint, with an expiry time per
entry, plus an append-only log of maintenance runs. Every operation opens
its own short-lived connection, so concurrent callers never share state;
SQLite serializes writers and ``INSERT OR REPLACE`` keeps one row per
fingerprint.

This layer raises ``CacheError`` on any storage failure. Callers that must
not fail use ``ResponseCache`` instead.
"""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, Optional

from tripcache.core.exceptions import CacheError
from tripcache.core.models import (
    CacheEntry,
    CacheStats,
    MaintenanceOperation,
    SweepRecord,
)


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _to_epoch(value: datetime) -> float:
    return value.timestamp()


def _from_epoch(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


class CacheStore:
    """Durable table of cached provider responses."""

    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        db_path: Optional[Path] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """Initialize the store.

        Args:
            db_path: Path to SQLite database file. Defaults to ~/.tripcache/cache.db
            timeout: Seconds a connection waits on a locked database.
        """
        if db_path is None:
            db_path = Path.home() / ".tripcache" / "cache.db"

        self.db_path = Path(db_path)
        self.timeout = timeout

        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CacheError("initialization", f"cannot create {self.db_path.parent}: {e}")
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the cache database schema."""
        try:
            with self._connection() as conn:
                conn.execute("PRAGMA journal_mode=WAL")
                conn.executescript("""
                    CREATE TABLE IF NOT EXISTS cache_entries (
                        fingerprint TEXT PRIMARY KEY,
                        provider_endpoint TEXT NOT NULL,
                        parameters TEXT NOT NULL,
                        payload TEXT NOT NULL,
                        created_at REAL NOT NULL,
                        expires_at REAL NOT NULL
                    );

                    CREATE INDEX IF NOT EXISTS idx_cache_expires
                    ON cache_entries(expires_at);

                    CREATE INDEX IF NOT EXISTS idx_cache_endpoint
                    ON cache_entries(provider_endpoint);

                    CREATE TABLE IF NOT EXISTS maintenance_log (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        timestamp REAL NOT NULL,
                        operation TEXT NOT NULL,
                        deleted_count INTEGER NOT NULL,
                        duration_ms REAL NOT NULL
                    );

                    CREATE INDEX IF NOT EXISTS idx_log_operation_time
                    ON maintenance_log(operation, timestamp);
                """)
        except sqlite3.Error as e:
            raise CacheError("initialization", str(e))

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection context manager.

        Yields:
            sqlite3.Connection that commits on success and rolls back on error.
        """
        try:
            conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        except sqlite3.Error as e:
            raise CacheError("connect", str(e))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise CacheError("database operation", str(e))
        finally:
            conn.close()

    def get_entry(self, fingerprint: str) -> Optional[CacheEntry]:
        """Fetch the stored entry for a fingerprint, expired or not.

        Args:
            fingerprint: Cache fingerprint.

        Returns:
            CacheEntry or None if nothing is stored.
        """
        try:
            with self._connection() as conn:
                row = conn.execute(
                    """
                    SELECT fingerprint, provider_endpoint, parameters, payload,
                           created_at, expires_at
                    FROM cache_entries
                    WHERE fingerprint = ?
                    """,
                    (fingerprint,),
                ).fetchone()

            if row is None:
                return None

            return CacheEntry(
                fingerprint=row["fingerprint"],
                provider_endpoint=row["provider_endpoint"],
                parameters=json.loads(row["parameters"]),
                payload=json.loads(row["payload"]),
                created_at=_from_epoch(row["created_at"]),
                expires_at=_from_epoch(row["expires_at"]),
            )

        except (sqlite3.Error, json.JSONDecodeError) as e:
            raise CacheError("get", str(e))

    def upsert(self, entry: CacheEntry) -> None:
        """Insert the entry, replacing any row with the same fingerprint.

        Args:
            entry: Entry to store. Its payload must be JSON-serializable.
        """
        try:
            payload_json = json.dumps(entry.payload)
            parameters_json = json.dumps(entry.parameters, sort_keys=True)
        except (TypeError, ValueError) as e:
            raise CacheError("set", f"payload is not JSON-serializable: {e}")

        try:
            with self._connection() as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO cache_entries
                    (fingerprint, provider_endpoint, parameters, payload,
                     created_at, expires_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        entry.fingerprint,
                        entry.provider_endpoint,
                        parameters_json,
                        payload_json,
                        _to_epoch(entry.created_at),
                        _to_epoch(entry.expires_at),
                    ),
                )
        except sqlite3.Error as e:
            raise CacheError("set", str(e))

    def delete(self, fingerprint: str) -> bool:
        """Delete a specific cache entry.

        Returns:
            True if entry was deleted, False if not found.
        """
        try:
            with self._connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM cache_entries WHERE fingerprint = ?",
                    (fingerprint,),
                )
                return cursor.rowcount > 0

        except sqlite3.Error as e:
            raise CacheError("delete", str(e))

    def evict(self, fingerprint: str, now: datetime) -> bool:
        """Delete one entry only if it is still expired at ``now``.

        A concurrent writer may have refreshed the row since it was read;
        the expiry condition keeps that fresh row alive.

        Returns:
            True if an expired row was removed.
        """
        try:
            with self._connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM cache_entries WHERE fingerprint = ? AND expires_at <= ?",
                    (fingerprint, _to_epoch(now)),
                )
                return cursor.rowcount > 0

        except sqlite3.Error as e:
            raise CacheError("evict", str(e))

    def delete_expired(self, now: datetime) -> int:
        """Remove every entry whose expiry is at or before ``now``.

        Returns:
            Number of entries removed.
        """
        try:
            with self._connection() as conn:
                cursor = conn.execute(
                    "DELETE FROM cache_entries WHERE expires_at <= ?",
                    (_to_epoch(now),),
                )
                return cursor.rowcount

        except sqlite3.Error as e:
            raise CacheError("sweep", str(e))

    def delete_all(self) -> int:
        """Remove every entry regardless of expiry.

        Returns:
            Number of entries removed.
        """
        try:
            with self._connection() as conn:
                cursor = conn.execute("DELETE FROM cache_entries")
                return cursor.rowcount

        except sqlite3.Error as e:
            raise CacheError("flush", str(e))

    def count(self, endpoint: Optional[str] = None) -> int:
        """Count stored rows, optionally for one endpoint."""
        try:
            with self._connection() as conn:
                if endpoint is None:
                    row = conn.execute("SELECT COUNT(*) FROM cache_entries").fetchone()
                else:
                    row = conn.execute(
                        "SELECT COUNT(*) FROM cache_entries WHERE provider_endpoint = ?",
                        (endpoint,),
                    ).fetchone()
                return row[0]

        except sqlite3.Error as e:
            raise CacheError("count", str(e))

    def append_log(self, record: SweepRecord) -> None:
        """Append a maintenance record."""
        try:
            with self._connection() as conn:
                conn.execute(
                    """
                    INSERT INTO maintenance_log
                    (timestamp, operation, deleted_count, duration_ms)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        _to_epoch(record.timestamp),
                        record.operation.value,
                        record.deleted_count,
                        record.duration_ms,
                    ),
                )
        except sqlite3.Error as e:
            raise CacheError("maintenance log", str(e))

    def last_log(
        self,
        operation: MaintenanceOperation = MaintenanceOperation.SWEEP,
    ) -> Optional[SweepRecord]:
        """Return the most recent maintenance record of a given kind."""
        try:
            with self._connection() as conn:
                row = conn.execute(
                    """
                    SELECT timestamp, operation, deleted_count, duration_ms
                    FROM maintenance_log
                    WHERE operation = ?
                    ORDER BY timestamp DESC, id DESC
                    LIMIT 1
                    """,
                    (operation.value,),
                ).fetchone()

            if row is None:
                return None

            return SweepRecord(
                timestamp=_from_epoch(row["timestamp"]),
                operation=MaintenanceOperation(row["operation"]),
                deleted_count=row["deleted_count"],
                duration_ms=row["duration_ms"],
            )

        except sqlite3.Error as e:
            raise CacheError("maintenance log", str(e))

    def stats(self, now: datetime) -> CacheStats:
        """Get cache statistics.

        Args:
            now: Reference time deciding which entries count as expired.

        Returns:
            CacheStats with totals and per-endpoint counts.
        """
        now_epoch = _to_epoch(now)
        try:
            with self._connection() as conn:
                rows = conn.execute(
                    """
                    SELECT
                        provider_endpoint,
                        COUNT(*) AS total,
                        SUM(CASE WHEN expires_at > ? THEN 1 ELSE 0 END) AS active
                    FROM cache_entries
                    GROUP BY provider_endpoint
                    ORDER BY provider_endpoint
                    """,
                    (now_epoch,),
                ).fetchall()

        except sqlite3.Error as e:
            raise CacheError("stats", str(e))

        by_endpoint = {row["provider_endpoint"]: row["total"] for row in rows}
        active_by_endpoint = {
            row["provider_endpoint"]: row["active"] for row in rows if row["active"]
        }
        total = sum(by_endpoint.values())
        active = sum(active_by_endpoint.values())

        return CacheStats(
            total=total,
            active=active,
            expired=total - active,
            by_endpoint=by_endpoint,
            active_by_endpoint=active_by_endpoint,
            db_path=str(self.db_path),
            db_size_bytes=self.db_path.stat().st_size if self.db_path.exists() else 0,
            last_sweep=self.last_log(MaintenanceOperation.SWEEP),
        )
