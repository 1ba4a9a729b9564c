# Copyright Rand Arete @ Ananke 2025
# Licensed under the Apache License, Version 2.0
"""Metric data structures for typelattice query observability."""

from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class OperationMetrics:
    """Metrics for one public operation (relate, downgrade, shift, ...).

    Attributes:
        operation: Operation name
        latencies_ms: Latency observations in milliseconds
        disjuncts: Solution set sizes observed for relation queries
        failures: Count of raised errors by error class name
    """

    operation: str
    latencies_ms: List[float] = field(default_factory=list)
    disjuncts: List[int] = field(default_factory=list)
    failures: Dict[str, int] = field(default_factory=dict)

    def record(
        self,
        latency_ms: float,
        disjuncts: Optional[int] = None,
        error: Optional[str] = None,
    ) -> None:
        """Record one query."""
        self.latencies_ms.append(latency_ms)
        if disjuncts is not None:
            self.disjuncts.append(disjuncts)
        if error is not None:
            self.failures[error] = self.failures.get(error, 0) + 1

    @property
    def count(self) -> int:
        """Number of queries."""
        return len(self.latencies_ms)

    @property
    def failure_count(self) -> int:
        return sum(self.failures.values())

    @property
    def failure_rate(self) -> float:
        """Fraction of queries that raised."""
        return self.failure_count / self.count if self.count else 0.0

    @property
    def total_ms(self) -> float:
        return sum(self.latencies_ms)

    @property
    def mean_ms(self) -> float:
        """Mean latency in milliseconds."""
        return statistics.mean(self.latencies_ms) if self.latencies_ms else 0.0

    @property
    def p99_ms(self) -> float:
        """99th percentile latency."""
        if not self.latencies_ms:
            return 0.0
        sorted_vals = sorted(self.latencies_ms)
        idx = int(len(sorted_vals) * 0.99)
        return sorted_vals[min(idx, len(sorted_vals) - 1)]

    @property
    def max_disjuncts(self) -> int:
        return max(self.disjuncts) if self.disjuncts else 0

    @property
    def mean_disjuncts(self) -> float:
        return statistics.mean(self.disjuncts) if self.disjuncts else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Export metrics as dictionary."""
        return {
            "operation": self.operation,
            "count": self.count,
            "failures": dict(self.failures),
            "failure_rate": round(self.failure_rate, 4),
            "total_ms": round(self.total_ms, 3),
            "mean_ms": round(self.mean_ms, 3),
            "p99_ms": round(self.p99_ms, 3),
            "mean_disjuncts": round(self.mean_disjuncts, 2),
            "max_disjuncts": self.max_disjuncts,
        }


@dataclass
class QueryProbe:
    """Per-query scratch record filled in while a query runs.

    Attributes:
        operation: Operation name
        disjuncts: Size of the resulting solution set, when there is one
    """

    operation: str
    disjuncts: Optional[int] = None
