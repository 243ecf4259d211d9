"""
Unit Tests for Logging and Metrics Utilities
"""
import json
import logging

import pytest

from schema_analyzer.schema import TableWalker
from schema_analyzer.sources import SnapshotField, SnapshotTable
from schema_analyzer.utils import (
    AnalyzerMetrics,
    clear_context,
    get_logger,
    get_metrics_collector,
    get_run_id,
    log_context,
    log_operation,
    set_run_id,
)
from schema_analyzer.utils.logging import StructuredFormatter


@pytest.fixture
def metrics():
    collector = get_metrics_collector()
    collector.reset()
    yield collector
    collector.reset()


class TestLogContext:
    """Tests for thread-local log context"""

    def teardown_method(self):
        clear_context()

    def test_set_and_clear_run_id(self):
        run_id = set_run_id()
        assert get_run_id() == run_id
        clear_context()
        assert get_run_id() is None

    def test_nested_context_restored(self):
        """Inner context values are reverted on exit"""
        with log_context(run_id="run-1", table_name="Projects"):
            with log_context(table_name="Tasks"):
                assert get_run_id() == "run-1"
            assert get_run_id() == "run-1"
        assert get_run_id() is None

    def test_structured_formatter_includes_context(self):
        record = logging.LogRecord("schema_analyzer", logging.WARNING, __file__, 1,
                                   "Field skipped", None, None)
        record.extra_fields = {"scope": "field"}

        with log_context(run_id="run-2", table_name="Tasks"):
            entry = json.loads(StructuredFormatter().format(record))

        assert entry["message"] == "Field skipped"
        assert entry["run_id"] == "run-2"
        assert entry["table_name"] == "Tasks"
        assert entry["scope"] == "field"

    def test_log_operation_reraises(self, caplog):
        logger = get_logger("schema_analyzer.test")
        with caplog.at_level(logging.INFO):
            with pytest.raises(KeyError):
                with log_operation(logger, "lookup", base_id="app1") as ctx:
                    ctx["tables"] = 1
                    raise KeyError("tblMissing")

        assert ctx["status"] == "error"
        assert ctx["error_type"] == "KeyError"
        assert "Failed lookup" in caplog.text


class TestMetrics:
    """Tests for the metrics collector"""

    def test_singleton(self):
        assert get_metrics_collector() is get_metrics_collector()

    def test_skipped_item_labels(self, metrics):
        AnalyzerMetrics.record_skipped_item("field", "MalformedFieldError")
        AnalyzerMetrics.record_skipped_item("field", "MalformedFieldError")

        assert metrics.get_counter(
            "items_skipped_total", {"scope": "field", "error_type": "MalformedFieldError"}
        ) == 2.0
        assert metrics.get_counter("items_skipped_total", {"scope": "view"}) == 0.0

    def test_disabled_collector(self, metrics):
        metrics.disable()
        try:
            AnalyzerMetrics.record_run(0.1, 2, 1)
            assert metrics.get_metrics()["gauges"] == {}
        finally:
            metrics.enable()

    @pytest.mark.asyncio
    async def test_walk_records_metrics(self, metrics):
        """A walk counts tables, fields and contained failures"""
        table = SnapshotTable(id="tbl1", name="T", fields=[
            SnapshotField(id="fldA", name="A", type="email"),
            SnapshotField(id="fldB", name=None, type="email"),
        ])
        await TableWalker().walk(table)

        data = metrics.get_metrics()
        assert data["counters"]["tables_analyzed_total"] == 1.0
        assert data["counters"]["fields_analyzed_total"] == 1.0
        assert data["counters"]["items_skipped_total{error_type=MalformedFieldError,scope=field}"] == 1.0
        assert data["timers"]["table_walk_duration"]["count"] == 1
        assert json.loads(metrics.export_json())["counters"]
