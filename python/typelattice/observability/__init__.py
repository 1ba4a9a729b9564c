# Copyright Rand Arete @ Ananke 2025
# Licensed under the Apache License, Version 2.0
"""Observability for typelattice queries.

Key Components:
- metrics: Per-operation query metrics
- collector: Thread-safe MetricsCollector and the global collector
- exporter: Log, callback and Prometheus exporters
"""

from .collector import MetricsCollector, get_global_collector, set_global_collector
from .exporter import (
    CallbackExporter,
    LogExporter,
    MetricsExporter,
    PrometheusExporter,
)
from .metrics import OperationMetrics, QueryProbe

__all__ = [
    "MetricsCollector",
    "get_global_collector",
    "set_global_collector",
    "CallbackExporter",
    "LogExporter",
    "MetricsExporter",
    "PrometheusExporter",
    "OperationMetrics",
    "QueryProbe",
]
