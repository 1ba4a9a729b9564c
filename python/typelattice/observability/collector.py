# Copyright Rand Arete @ Ananke 2025
# Licensed under the Apache License, Version 2.0
"""Central metrics collection for typelattice queries."""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

from ..core.errors import TypeAlgebraError
from .metrics import OperationMetrics, QueryProbe

logger = logging.getLogger(__name__)


@dataclass
class MetricsCollector:
    """Central collector for query metrics.

    Thread-safe collector that aggregates per-operation metrics and
    notifies alert callbacks when a query fails.

    Attributes:
        slow_query_ms: Queries slower than this trigger a "slow_query" alert
    """

    slow_query_ms: float = 100.0

    _operations: Dict[str, OperationMetrics] = field(default_factory=dict)

    # Thread safety
    _lock: threading.Lock = field(default_factory=threading.Lock)

    # Callbacks for real-time alerts
    _alert_callbacks: List[Callable[[str, Dict[str, Any]], None]] = field(
        default_factory=list
    )

    def record_query(
        self,
        operation: str,
        latency_ms: float,
        disjuncts: Optional[int] = None,
        error: Optional[str] = None,
    ) -> None:
        """Record one completed or failed query.

        Args:
            operation: Public operation name
            latency_ms: Wall time of the query in milliseconds
            disjuncts: Size of the resulting solution set, if any
            error: Error class name if the query raised
        """
        with self._lock:
            if operation not in self._operations:
                self._operations[operation] = OperationMetrics(operation)
            self._operations[operation].record(latency_ms, disjuncts, error)

            if error is not None:
                self._trigger_alert(
                    "query_failed", {"operation": operation, "error": error}
                )
            elif latency_ms > self.slow_query_ms:
                self._trigger_alert(
                    "slow_query",
                    {"operation": operation, "latency_ms": round(latency_ms, 3)},
                )

    @contextmanager
    def track(self, operation: str) -> Iterator[QueryProbe]:
        """Time a query and record it, including typelattice errors it raises."""
        probe = QueryProbe(operation)
        start = time.perf_counter()
        try:
            yield probe
        except TypeAlgebraError as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.record_query(operation, elapsed_ms, error=type(e).__name__)
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000
        self.record_query(operation, elapsed_ms, disjuncts=probe.disjuncts)

    def register_alert_callback(
        self, callback: Callable[[str, Dict[str, Any]], None]
    ) -> None:
        """Register a callback for alerts.

        Args:
            callback: Function(alert_type, data) to call on alerts
        """
        with self._lock:
            self._alert_callbacks.append(callback)

    def _trigger_alert(self, alert_type: str, data: Dict[str, Any]) -> None:
        """Trigger alert callbacks (called with lock held)."""
        for callback in self._alert_callbacks:
            try:
                callback(alert_type, data)
            except Exception as e:
                logger.warning(f"Alert callback error: {e}")

    def get_operation(self, operation: str) -> Optional[OperationMetrics]:
        """Get metrics for one operation."""
        with self._lock:
            return self._operations.get(operation)

    def get_operations(self) -> Dict[str, OperationMetrics]:
        """Get per-operation metrics."""
        with self._lock:
            return dict(self._operations)

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics.

        Returns:
            Dictionary with aggregate statistics
        """
        with self._lock:
            return {
                "operations": {k: v.to_dict() for k, v in self._operations.items()},
                "total_queries": sum(m.count for m in self._operations.values()),
                "total_failures": sum(
                    m.failure_count for m in self._operations.values()
                ),
            }

    def reset(self) -> None:
        """Reset all metrics."""
        with self._lock:
            self._operations.clear()


# Global collector instance
_global_collector: Optional[MetricsCollector] = None
_global_lock = threading.Lock()


def get_global_collector() -> MetricsCollector:
    """Get or create the global metrics collector."""
    global _global_collector
    with _global_lock:
        if _global_collector is None:
            _global_collector = MetricsCollector()
        return _global_collector


def set_global_collector(collector: MetricsCollector) -> None:
    """Set the global metrics collector."""
    global _global_collector
    with _global_lock:
        _global_collector = collector
