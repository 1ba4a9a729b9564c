# Copyright Rand Arete @ Ananke 2025
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""Unit tests for query metrics, alerts and exporters."""

import logging
import sys
from unittest.mock import patch

import pytest

from typelattice.core.config import EngineConfig
from typelattice.core.errors import MalformedRelationInput, NoNominalPath
from typelattice.core.types import wildcard
from typelattice.hierarchy import shift, upgrade
from typelattice.observability.collector import (
    MetricsCollector,
    get_global_collector,
    set_global_collector,
)
from typelattice.observability.exporter import (
    CallbackExporter,
    LogExporter,
    PrometheusExporter,
)
from typelattice.observability.metrics import OperationMetrics
from typelattice.solver.relation import RelationEngine

from ..hierarchy import build_sample_hierarchy


class TestOperationMetrics:
    """Tests for per-operation aggregates."""

    def test_empty(self):
        metrics = OperationMetrics("relate")
        assert metrics.count == 0
        assert metrics.failure_rate == 0.0
        assert metrics.mean_ms == 0.0
        assert metrics.p99_ms == 0.0
        assert metrics.max_disjuncts == 0

    def test_record(self):
        metrics = OperationMetrics("relate")
        metrics.record(1.0, disjuncts=2)
        metrics.record(3.0, disjuncts=4)
        metrics.record(5.0, error="TooComplex")
        assert metrics.count == 3
        assert metrics.failure_count == 1
        assert metrics.failures == {"TooComplex": 1}
        assert metrics.mean_ms == pytest.approx(3.0)
        assert metrics.p99_ms == 5.0
        assert metrics.total_ms == pytest.approx(9.0)
        assert metrics.max_disjuncts == 4
        assert metrics.mean_disjuncts == pytest.approx(3.0)

    def test_to_dict(self):
        metrics = OperationMetrics("shift")
        metrics.record(2.0)
        data = metrics.to_dict()
        assert data["operation"] == "shift"
        assert data["count"] == 1
        assert data["failures"] == {}
        assert data["mean_ms"] == 2.0


class TestCollector:
    """Tests for the metrics collector."""

    def test_engine_queries_are_tracked(self, collector):
        sample = build_sample_hierarchy(collector=collector)
        assert sample.engine.is_subtype(sample.dog, sample.animal)
        sample.engine.relate(sample.dog, sample.animal)

        assert collector.get_operation("is_subtype").count == 1
        relate = collector.get_operation("relate")
        assert relate.count == 1
        assert relate.disjuncts == [1]

    def test_failures_are_tracked(self, collector):
        sample = build_sample_hierarchy(collector=collector)
        with pytest.raises(MalformedRelationInput):
            sample.engine.relate(wildcard(), sample.dog)
        assert collector.get_operation("relate").failures == {
            "MalformedRelationInput": 1
        }

    def test_navigation_is_tracked(self, collector):
        sample = build_sample_hierarchy(collector=collector)
        upgrade(sample.collection[sample.string], sample.list_kind, sample.engine)
        with pytest.raises(NoNominalPath):
            shift(sample.dog, sample.number, sample.engine)

        operations = collector.get_operations()
        assert operations["upgrade"].count == 1
        assert operations["relate"].count == 1
        assert operations["shift"].failures == {"NoNominalPath": 1}

    def test_untracked_engine(self, sample):
        assert sample.engine.collector is None
        assert sample.engine.is_subtype(sample.dog, sample.animal)

    def test_collect_metrics_attaches_global(self, sample):
        previous = get_global_collector()
        fresh = MetricsCollector()
        set_global_collector(fresh)
        try:
            engine = RelationEngine(
                sample.registry, EngineConfig(collect_metrics=True)
            )
            assert engine.collector is fresh
            engine.is_subtype(sample.dog, sample.animal)
            assert fresh.get_operation("is_subtype").count == 1
        finally:
            set_global_collector(previous)

    def test_summary_and_reset(self, collector):
        collector.record_query("relate", 1.0, disjuncts=1)
        collector.record_query("relate", 2.0, error="TooComplex")
        collector.record_query("shift", 1.0)

        summary = collector.get_summary()
        assert summary["total_queries"] == 3
        assert summary["total_failures"] == 1
        assert set(summary["operations"]) == {"relate", "shift"}

        collector.reset()
        assert collector.get_summary()["total_queries"] == 0

    def test_failure_alert(self, collector):
        alerts = []
        collector.register_alert_callback(
            lambda kind, data: alerts.append((kind, data))
        )
        collector.record_query("relate", 1.0, error="TooComplex")
        assert alerts == [
            ("query_failed", {"operation": "relate", "error": "TooComplex"})
        ]

    def test_slow_query_alert(self):
        collector = MetricsCollector(slow_query_ms=1.0)
        alerts = []
        collector.register_alert_callback(lambda kind, data: alerts.append(kind))
        collector.record_query("shift", 0.5)
        collector.record_query("shift", 5.0)
        assert alerts == ["slow_query"]

    def test_failing_callback_is_logged(self, collector, caplog):
        def broken(kind, data):
            raise RuntimeError("boom")

        collector.register_alert_callback(broken)
        with caplog.at_level(logging.WARNING):
            collector.record_query("relate", 1.0, error="TooComplex")
        assert "Alert callback error: boom" in caplog.text
        assert collector.get_operation("relate").failure_count == 1


class TestLogExporter:
    """Tests for the logging exporter."""

    def test_json(self, collector, caplog):
        collector.record_query("relate", 2.0, disjuncts=3)
        with caplog.at_level(logging.INFO):
            LogExporter().export(collector)
        assert "Query metrics: {" in caplog.text
        assert '"total_queries": 1' in caplog.text

    def test_text(self, collector, caplog):
        collector.record_query("relate", 2.0, disjuncts=3)
        collector.record_query("relate", 2.0, error="TooComplex")
        with caplog.at_level(logging.INFO):
            LogExporter(format="text").export(collector)
        assert "Queries: 2 (failures: 1)" in caplog.text
        assert "relate: count=2" in caplog.text
        assert "max_disjuncts=3" in caplog.text
        assert "failures: TooComplex=1" in caplog.text

    def test_text_lists_busiest_operation_first(self, collector, caplog):
        collector.record_query("downgrade", 1.0)
        collector.record_query("relate", 1.0)
        collector.record_query("relate", 1.0)
        with caplog.at_level(logging.INFO):
            LogExporter(format="text").export(collector)
        assert caplog.text.index("relate:") < caplog.text.index("downgrade:")

    def test_empty_collector_is_skipped(self, collector, caplog):
        with caplog.at_level(logging.INFO):
            LogExporter().export(collector)
        assert caplog.records == []

        with caplog.at_level(logging.INFO):
            LogExporter(skip_empty=False).export(collector)
        assert '"total_queries": 0' in caplog.text

    def test_attached_alerts(self, collector, caplog):
        LogExporter().attach(collector)
        with caplog.at_level(logging.WARNING):
            collector.record_query("shift", 1.0, error="NoNominalPath")
        assert "Query alert:" in caplog.text
        assert '"alert": "query_failed"' in caplog.text

    def test_text_alerts(self, caplog):
        collector = MetricsCollector(slow_query_ms=1.0)
        LogExporter(format="text").attach(collector)
        with caplog.at_level(logging.WARNING):
            collector.record_query("relate", 1.0, error="TooComplex")
            collector.record_query("shift", 5.0)
        assert "Query alert: relate raised TooComplex" in caplog.text
        assert "Query alert: shift took 5.0ms" in caplog.text


class TestCallbackExporter:
    """Tests for the callback exporter."""

    def test_callbacks(self, collector):
        summaries, alerts = [], []
        exporter = CallbackExporter(
            summary_callback=summaries.append,
            alert_callback=lambda kind, data: alerts.append(kind),
        )
        exporter.attach(collector)
        collector.record_query("relate", 1.0, error="TooComplex")
        exporter.export(collector)
        assert summaries[0]["total_failures"] == 1
        assert alerts == ["query_failed"]

    def test_operation_callback(self, collector):
        seen = {}
        collector.record_query("relate", 1.0)
        collector.record_query("shift", 1.0, error="NoNominalPath")
        CallbackExporter(
            operation_callback=lambda op, metrics: seen.update({op: metrics["count"]})
        ).export(collector)
        assert seen == {"relate": 1, "shift": 1}

    def test_alert_filter(self):
        collector = MetricsCollector(slow_query_ms=1.0)
        alerts = []
        CallbackExporter(
            alert_callback=lambda kind, data: alerts.append(kind),
            alert_types=frozenset({"slow_query"}),
        ).attach(collector)
        collector.record_query("relate", 1.0, error="TooComplex")
        collector.record_query("shift", 5.0)
        assert alerts == ["slow_query"]

    def test_failing_callback_is_logged(self, collector, caplog):
        def broken(summary):
            raise RuntimeError("boom")

        with caplog.at_level(logging.WARNING):
            CallbackExporter(summary_callback=broken).export(collector)
        assert "Query metrics summary callback failed: boom" in caplog.text


class TestPrometheusExporter:
    """Tests for the Prometheus exporter."""

    def test_missing_dependency(self):
        with patch.dict(sys.modules, {"prometheus_client": None}):
            with pytest.raises(ImportError, match="prometheus_client is required"):
                PrometheusExporter()

    def test_export(self, collector):
        pytest.importorskip("prometheus_client")
        collector.record_query("relate", 2.0, disjuncts=3)
        collector.record_query("relate", 4.0, error="TooComplex")

        exporter = PrometheusExporter(namespace="tl_test")
        exporter.export(collector)

        registry = exporter.registry
        queries = registry.get_sample_value("tl_test_queries", {"operation": "relate"})
        assert queries == 2
        assert (
            registry.get_sample_value(
                "tl_test_query_failures",
                {"operation": "relate", "error": "TooComplex"},
            )
            == 1
        )
        assert (
            registry.get_sample_value(
                "tl_test_solution_disjuncts_max", {"operation": "relate"}
            )
            == 3
        )
