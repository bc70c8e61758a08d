"""
Performance metrics for backend calls made by the search coordinator.

Tracks timing and outcome of every HTTP operation (nearby, featured,
advanced search, payment history, store hydration):
- Operation timing (min, max, avg, p50, p95)
- Outcome counters (success, failure, cancelled)

Example:
    >>> from rez_pay_search.core.metrics import metrics
    >>>
    >>> async with metrics.timer("stores.nearby"):
    ...     await client.get_nearby_stores(location)
    >>>
    >>> metrics.get_stats("stores.nearby")["avg_ms"]
"""

import asyncio
import logging
import time
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Deque, Dict, List, Optional

from ..config import configuracion
from .exceptions import SearchCancelledError

logger = logging.getLogger(__name__)

# Superseded searches are expected; they are not failures.
_CANCELLATION_ERRORS = (asyncio.CancelledError, SearchCancelledError)


@dataclass
class MetricData:
    """Container for metric data points."""
    operation: str
    duration_ms: float
    outcome: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OperationStats:
    """Statistics for a single operation."""
    operation: str
    total_calls: int = 0
    success_calls: int = 0
    failure_calls: int = 0
    cancelled_calls: int = 0
    total_duration_ms: float = 0.0
    min_duration_ms: Optional[float] = None
    max_duration_ms: Optional[float] = None
    durations: List[float] = field(default_factory=list)

    def add_sample(self, duration_ms: float, outcome: str) -> None:
        """Add a performance sample."""
        self.total_calls += 1
        if outcome == "success":
            self.success_calls += 1
        elif outcome == "cancelled":
            self.cancelled_calls += 1
        else:
            self.failure_calls += 1

        self.total_duration_ms += duration_ms
        self.durations.append(duration_ms)

        if self.min_duration_ms is None or duration_ms < self.min_duration_ms:
            self.min_duration_ms = duration_ms
        if self.max_duration_ms is None or duration_ms > self.max_duration_ms:
            self.max_duration_ms = duration_ms

    def get_stats(self) -> Dict[str, Any]:
        """Get computed statistics."""
        avg = self.total_duration_ms / self.total_calls if self.total_calls > 0 else 0

        sorted_durations = sorted(self.durations)
        n = len(sorted_durations)
        p50 = sorted_durations[n // 2] if n > 0 else 0
        p95 = sorted_durations[min(int(n * 0.95), n - 1)] if n > 0 else 0

        return {
            "operation": self.operation,
            "total_calls": self.total_calls,
            "success_calls": self.success_calls,
            "failure_calls": self.failure_calls,
            "cancelled_calls": self.cancelled_calls,
            "avg_ms": round(avg, 2),
            "min_ms": round(self.min_duration_ms or 0, 2),
            "max_ms": round(self.max_duration_ms or 0, 2),
            "p50_ms": round(p50, 2),
            "p95_ms": round(p95, 2),
        }


class PerformanceMetrics:
    """
    Performance metrics tracking system.

    The coordinator lives as long as the screen does, so the raw history
    is bounded by `max_history`.
    """

    def __init__(self, enabled: bool = True, max_history: int = 500):
        self.operations: Dict[str, OperationStats] = {}
        self.history: Deque[MetricData] = deque(maxlen=max_history)
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        """Enable metrics collection."""
        self._enabled = True
        logger.info("✅ Metrics collection enabled")

    def disable(self) -> None:
        """Disable metrics collection."""
        self._enabled = False
        logger.info("⏸️ Metrics collection disabled")

    def record(
        self,
        operation: str,
        duration_ms: float,
        outcome: str = "success",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Record a performance metric.

        Args:
            operation: Operation name
            duration_ms: Duration in milliseconds
            outcome: "success", "failure" or "cancelled"
            metadata: Optional metadata about the operation
        """
        if not self._enabled:
            return

        if operation not in self.operations:
            self.operations[operation] = OperationStats(operation=operation)
        self.operations[operation].add_sample(duration_ms, outcome)

        self.history.append(
            MetricData(
                operation=operation,
                duration_ms=duration_ms,
                outcome=outcome,
                metadata=metadata or {},
            )
        )

    @asynccontextmanager
    async def timer(
        self,
        operation: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AsyncIterator[None]:
        """
        Context manager for timing operations.

        Example:
            >>> async with metrics.timer("stores.featured"):
            ...     response = await http.get("/stores/featured")
        """
        if not self._enabled:
            yield
            return

        start_time = time.perf_counter()
        outcome = "success"

        try:
            yield
        except _CANCELLATION_ERRORS:
            outcome = "cancelled"
            raise
        except Exception as e:
            outcome = "failure"
            logger.warning(f"⚠️ Operation '{operation}' failed: {e}")
            raise
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.record(operation, duration_ms, outcome, metadata)

    def get_stats(self, operation: str) -> Optional[Dict[str, Any]]:
        """Get statistics for a specific operation, or None if never recorded."""
        if operation not in self.operations:
            return None
        return self.operations[operation].get_stats()

    def get_all_stats(self) -> Dict[str, Dict[str, Any]]:
        """Get statistics for all operations."""
        return {op: stats.get_stats() for op, stats in self.operations.items()}

    def reset(self, operation: Optional[str] = None) -> None:
        """Reset one operation, or everything when `operation` is None."""
        if operation:
            self.operations.pop(operation, None)
            kept = [m for m in self.history if m.operation != operation]
            self.history.clear()
            self.history.extend(kept)
            logger.debug(f"Reset metrics for operation: {operation}")
        else:
            self.operations.clear()
            self.history.clear()
            logger.debug("Reset all metrics")


# Global metrics instance
metrics = PerformanceMetrics(enabled=configuracion.metrics_enabled)
