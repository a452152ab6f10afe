"""
Cache maintenance: expiry sweeps, full flushes and statistics.

Each sweep or flush appends a record to the maintenance log. Writing that
record is best-effort; the operation's own outcome does not depend on it.
"""

import time
from datetime import timedelta
from typing import Optional

import structlog

from tripcache.cache.response import Clock, DEFAULT_TTL
from tripcache.cache.sqlite import CacheStore, utc_now
from tripcache.core.exceptions import CacheError
from tripcache.core.models import (
    CacheResult,
    CacheStats,
    MaintenanceOperation,
    ScheduledSweep,
    SweepRecord,
)

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_SWEEP_INTERVAL = DEFAULT_TTL


class CacheMaintenance:
    """Bulk operations on the cache store."""

    def __init__(
        self,
        store: CacheStore,
        sweep_interval: timedelta = DEFAULT_SWEEP_INTERVAL,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.sweep_interval = sweep_interval
        self.clock = clock

    def sweep_expired(self) -> CacheResult:
        """Delete all expired entries in one statement.

        Returns:
            CacheResult whose value is the number of entries removed.
        """
        return self._run(MaintenanceOperation.SWEEP, lambda: self.store.delete_expired(self.clock()))

    def flush_all(self) -> CacheResult:
        """Delete every entry regardless of expiry.

        Returns:
            CacheResult whose value is the number of entries removed.
        """
        return self._run(MaintenanceOperation.FLUSH, self.store.delete_all)

    def run_scheduled_sweep(self, interval: Optional[timedelta] = None) -> ScheduledSweep:
        """Sweep only if the last recorded sweep is older than the interval.

        A missing or unreadable maintenance log counts as "never swept".

        Args:
            interval: Minimum time between sweeps; defaults to ``sweep_interval``.
        """
        if interval is None:
            interval = self.sweep_interval

        try:
            last = self.store.last_log(MaintenanceOperation.SWEEP)
        except CacheError as e:
            logger.warning("maintenance_log_read_failed", error=str(e))
            last = None

        since_last = self.clock() - last.timestamp if last else None

        if since_last is not None and since_last < interval:
            logger.info(
                "cache_sweep_skipped",
                days_since_last=round(since_last.total_seconds() / 86400, 2),
                interval_days=round(interval.total_seconds() / 86400, 2),
            )
            return ScheduledSweep(ran=False, interval=interval, since_last=since_last)

        result = self.sweep_expired()
        return ScheduledSweep(ran=True, interval=interval, since_last=since_last, result=result)

    def stats(self) -> CacheStats:
        """Return cache statistics.

        Raises:
            CacheError: If the store cannot be read.
        """
        return self.store.stats(self.clock())

    def _run(self, operation: MaintenanceOperation, action) -> CacheResult:
        started = time.perf_counter()
        try:
            deleted = action()
        except CacheError as e:
            logger.error(f"cache_{operation.value}_failed", error=str(e))
            return CacheResult.failure(e)
        duration_ms = (time.perf_counter() - started) * 1000

        logger.info(
            f"cache_{operation.value}",
            deleted_count=deleted,
            duration_ms=round(duration_ms, 2),
        )

        record = SweepRecord(
            timestamp=self.clock(),
            operation=operation,
            deleted_count=deleted,
            duration_ms=duration_ms,
        )
        try:
            self.store.append_log(record)
        except CacheError as e:
            logger.warning("maintenance_log_write_failed", operation=operation.value, error=str(e))

        return CacheResult.success(deleted)
