# Copyright Rand Arete @ Ananke 2025
# Licensed under the Apache License, Version 2.0
"""Metrics exporters for query metrics."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, Optional

from .collector import MetricsCollector

logger = logging.getLogger(__name__)


class MetricsExporter(ABC):
    """Base class for metrics exporters."""

    @abstractmethod
    def export(self, collector: MetricsCollector) -> None:
        """Export metrics from the collector."""
        pass

    @abstractmethod
    def export_alert(self, alert_type: str, data: Dict[str, Any]) -> None:
        """Export an alert."""
        pass

    def attach(self, collector: MetricsCollector) -> None:
        """Forward the collector's alerts to this exporter."""
        collector.register_alert_callback(self.export_alert)


@dataclass
class LogExporter(MetricsExporter):
    """Write query metrics and alerts to the ``typelattice`` loggers.

    The json format logs the summary on a single line with sorted keys. The
    text format logs one line per operation, busiest operation first.

    Attributes:
        log_level: Level for metric summaries
        alert_level: Level for alerts
        format: 'json' or 'text'
        skip_empty: Log nothing when no query has been recorded
    """

    log_level: int = logging.INFO
    alert_level: int = logging.WARNING
    format: str = "json"
    skip_empty: bool = True

    def export(self, collector: MetricsCollector) -> None:
        summary = collector.get_summary()
        if self.skip_empty and not summary.get("total_queries"):
            return

        if self.format == "json":
            message = json.dumps(summary, sort_keys=True)
        else:
            message = "\n" + self._format_text(summary)
        logger.log(self.log_level, f"Query metrics: {message}")

    def export_alert(self, alert_type: str, data: Dict[str, Any]) -> None:
        if self.format == "json":
            message = json.dumps({"alert": alert_type, **data}, sort_keys=True)
        else:
            message = _describe_alert(alert_type, data)
        logger.log(self.alert_level, f"Query alert: {message}")

    def _format_text(self, summary: Dict[str, Any]) -> str:
        lines = [
            f"Queries: {summary.get('total_queries', 0)} "
            f"(failures: {summary.get('total_failures', 0)})"
        ]
        operations = sorted(
            summary.get("operations", {}).items(),
            key=lambda item: (-item[1].get("count", 0), item[0]),
        )
        for operation, metrics in operations:
            lines.append(
                f"  {operation}: count={metrics.get('count', 0)}, "
                f"mean={metrics.get('mean_ms', 0):.3f}ms, "
                f"p99={metrics.get('p99_ms', 0):.3f}ms, "
                f"max_disjuncts={metrics.get('max_disjuncts', 0)}"
            )
            failures = metrics.get("failures", {})
            if failures:
                kinds = ", ".join(f"{k}={v}" for k, v in sorted(failures.items()))
                lines.append(f"    failures: {kinds}")
        return "\n".join(lines)


def _describe_alert(alert_type: str, data: Dict[str, Any]) -> str:
    operation = data.get("operation", "query")
    if alert_type == "query_failed":
        return f"{operation} raised {data.get('error')}"
    if alert_type == "slow_query":
        return f"{operation} took {data.get('latency_ms')}ms"
    return f"{alert_type}: {data}"


@dataclass
class CallbackExporter(MetricsExporter):
    """Hand query metrics to caller-supplied callbacks.

    A failing callback is logged and never propagates into the query that
    triggered it.

    Attributes:
        summary_callback: Called with the whole summary
        operation_callback: Called with (operation, metrics) for each operation
        alert_callback: Called with (alert_type, data)
        alert_types: Alert types to forward; None forwards all of them
    """

    summary_callback: Optional[Callable[[Dict[str, Any]], None]] = None
    operation_callback: Optional[Callable[[str, Dict[str, Any]], None]] = None
    alert_callback: Optional[Callable[[str, Dict[str, Any]], None]] = None
    alert_types: Optional[FrozenSet[str]] = None

    def export(self, collector: MetricsCollector) -> None:
        if self.summary_callback is None and self.operation_callback is None:
            return
        summary = collector.get_summary()
        if self.summary_callback is not None:
            _call_safely("summary", self.summary_callback, summary)
        if self.operation_callback is not None:
            for operation, metrics in summary.get("operations", {}).items():
                _call_safely("operation", self.operation_callback, operation, metrics)

    def export_alert(self, alert_type: str, data: Dict[str, Any]) -> None:
        if self.alert_callback is None:
            return
        if self.alert_types is not None and alert_type not in self.alert_types:
            return
        _call_safely("alert", self.alert_callback, alert_type, data)


def _call_safely(kind: str, callback: Callable[..., None], *args: Any) -> None:
    try:
        callback(*args)
    except Exception as e:
        logger.warning(f"Query metrics {kind} callback failed: {e}")


class PrometheusExporter(MetricsExporter):
    """Export metrics to Prometheus.

    Supports both pull mode (HTTP endpoint) and push mode (Pushgateway).
    Requires the ``prometheus_client`` package (optional dependency).

    Attributes:
        namespace: Metric name prefix (default: "typelattice")
        push_gateway: Optional Pushgateway URL for push mode
        job_name: Job name for Pushgateway (default: "typelattice")
    """

    def __init__(
        self,
        namespace: str = "typelattice",
        push_gateway: Optional[str] = None,
        job_name: str = "typelattice",
    ) -> None:
        try:
            import prometheus_client
        except ImportError:
            raise ImportError(
                "prometheus_client is required for PrometheusExporter. "
                "Install with: pip install prometheus-client"
            )

        self._pc = prometheus_client
        self.namespace = namespace
        self.push_gateway = push_gateway
        self.job_name = job_name

        self._registry = prometheus_client.CollectorRegistry()
        self._build_metrics()

    def _build_metrics(self) -> None:
        pc = self._pc
        ns = self.namespace
        reg = self._registry

        self._queries = pc.Gauge(
            f"{ns}_queries",
            "Queries recorded per operation",
            ["operation"],
            registry=reg,
        )
        self._failures = pc.Gauge(
            f"{ns}_query_failures",
            "Failed queries per operation and error kind",
            ["operation", "error"],
            registry=reg,
        )
        self._latency_mean = pc.Gauge(
            f"{ns}_query_latency_mean_ms",
            "Mean query latency in milliseconds",
            ["operation"],
            registry=reg,
        )
        self._latency_p99 = pc.Gauge(
            f"{ns}_query_latency_p99_ms",
            "P99 query latency in milliseconds",
            ["operation"],
            registry=reg,
        )
        self._disjuncts_max = pc.Gauge(
            f"{ns}_solution_disjuncts_max",
            "Largest solution set produced per operation",
            ["operation"],
            registry=reg,
        )

    def export(self, collector: MetricsCollector) -> None:
        summary = collector.get_summary()

        for operation, metrics in summary.get("operations", {}).items():
            self._queries.labels(operation=operation).set(metrics.get("count", 0))
            self._latency_mean.labels(operation=operation).set(
                metrics.get("mean_ms", 0)
            )
            self._latency_p99.labels(operation=operation).set(
                metrics.get("p99_ms", 0)
            )
            self._disjuncts_max.labels(operation=operation).set(
                metrics.get("max_disjuncts", 0)
            )
            for error, count in metrics.get("failures", {}).items():
                self._failures.labels(operation=operation, error=error).set(count)

        if self.push_gateway:
            try:
                self._pc.push_to_gateway(
                    self.push_gateway,
                    job=self.job_name,
                    registry=self._registry,
                )
            except Exception as e:
                logger.warning(f"Prometheus push failed: {e}")

    def export_alert(self, alert_type: str, data: Dict[str, Any]) -> None:
        # Alerts are derived from metric thresholds in Alertmanager.
        logger.debug(f"Prometheus alert (use Alertmanager rules): {alert_type}: {data}")

    @property
    def registry(self) -> Any:
        """Access the Prometheus registry for custom HTTP server setup."""
        return self._registry
