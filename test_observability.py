"""
Observability Validation Test

This test validates the observability stack:
1. Metrics collection works (request/retry/cache/auth/sync run metrics)
2. Structured logging with correlation IDs works
3. Sync run logs carry the provider, entity type and run id

Pass criteria: every log line of a sync run can be traced back to its run.
"""

import asyncio
import json
import logging

import pytest


def test_observability_imports():
    """Verify all observability modules import correctly."""
    from core.observability import (
        MetricsCollector, get_metrics,
        get_logger, configure_logging, CorrelationContext,
        get_correlation_context, with_correlation,
    )
    assert MetricsCollector is not None
    assert get_metrics is not None
    assert CorrelationContext is not None


class CapturingHandler(logging.Handler):
    """Formats at emit time, while the correlation context is still set."""

    def __init__(self):
        super().__init__()
        from core.observability.logging import StructuredFormatter
        self.setFormatter(StructuredFormatter())
        self.lines = []

    def emit(self, record):
        self.lines.append(json.loads(self.format(record)))


@pytest.fixture
def captured_logs():
    handler = CapturingHandler()
    root = logging.getLogger()
    root.addHandler(handler)
    yield handler.lines
    root.removeHandler(handler)


class TestMetricsCollector:
    """Test the metrics collection system."""

    def test_singleton_instance(self):
        """MetricsCollector returns same instance."""
        from core.observability.metrics import MetricsCollector, get_metrics
        assert MetricsCollector.instance() is MetricsCollector.instance()
        assert get_metrics() is MetricsCollector.instance()

    def test_request_metrics_tracking(self):
        """Track request outcomes, retries, cache lookups and auth exchanges."""
        from core.observability.metrics import get_metrics
        mc = get_metrics()

        mc.record_request("sap", succeeded=True)
        mc.record_request("sap", succeeded=False)
        mc.record_retry("sap")
        mc.record_retry("oracle")
        mc.record_cache_lookup("sap", hit=True)
        mc.record_cache_lookup("sap", hit=False)
        mc.record_auth_exchange("oracle")

        requests = mc.get_summary()["requests"]
        assert (requests["succeeded"], requests["failed"]) == (1, 1)
        assert requests["retries"] == 2
        assert (requests["cache_hits"], requests["cache_misses"]) == (1, 1)
        assert requests["auth_exchanges"] == 1
        assert requests["by_provider"]["sap"]["retries"] == 1
        assert requests["by_provider"]["oracle"]["auth_exchanges"] == 1

    def test_sync_run_tracking(self):
        """Track run outcomes per direction and entity type."""
        from core.observability.metrics import get_metrics
        mc = get_metrics()

        mc.record_sync_run_started("from_erp", "vendors")
        mc.record_sync_run_started("to_erp", "inspections")
        mc.record_sync_run_finished("from_erp", "vendors", "completed", records_succeeded=25)
        mc.record_sync_run_finished("to_erp", "inspections", "partially_failed",
                                    records_succeeded=19, records_failed=1)

        syncs = mc.get_summary()["syncs"]
        assert syncs["runs_started"] == 2
        assert syncs["runs_completed"] == 1
        assert syncs["runs_partially_failed"] == 1
        assert (syncs["records_succeeded"], syncs["records_failed"]) == (44, 1)
        assert syncs["by_stream"]["to_erp.inspections"]["partially_failed"] == 1
        assert syncs["by_stream"]["from_erp.vendors"]["failed"] == 0

    def test_reset_clears_counters(self):
        from core.observability.metrics import get_metrics
        mc = get_metrics()
        mc.record_retry("sap")
        mc.record_sync_run_started("from_erp", "vendors")
        mc.reset()

        summary = mc.get_summary()
        assert summary["requests"]["retries"] == 0
        assert summary["requests"]["by_provider"] == {}
        assert summary["syncs"]["runs_started"] == 0


class TestCorrelatedLogging:
    """Test structured logging with correlation IDs."""

    def test_correlation_context_creation(self):
        """Create correlation context with all fields."""
        from core.observability.logging import CorrelationContext

        ctx = CorrelationContext(
            provider="sap",
            entity_type="vendors",
            direction="from_erp",
            sync_run_id="run-123",
            workflow_id="wf-abc",
        )

        assert ctx.provider == "sap"
        assert ctx.to_dict() == {
            "provider": "sap",
            "entity_type": "vendors",
            "direction": "from_erp",
            "sync_run_id": "run-123",
            "workflow_id": "wf-abc",
        }

    def test_context_var_isolation(self):
        """Context is restored on exit and nested contexts merge."""
        from core.observability.logging import get_correlation_context, with_correlation

        assert get_correlation_context().provider is None

        with with_correlation(provider="oracle", sync_run_id="run-1"):
            with with_correlation(record_id="S-1"):
                inner = get_correlation_context()
                assert (inner.provider, inner.sync_run_id, inner.record_id) == ("oracle", "run-1", "S-1")
            assert get_correlation_context().record_id is None

        assert get_correlation_context().provider is None

    def test_context_is_isolated_per_task(self):
        from core.observability.logging import get_correlation_context, with_correlation

        async def run_in(provider):
            with with_correlation(provider=provider):
                await asyncio.sleep(0)
                return get_correlation_context().provider

        async def run():
            return await asyncio.gather(run_in("sap"), run_in("oracle"))

        assert asyncio.run(run()) == ["sap", "oracle"]

    def test_structured_formatter_json_output(self):
        """StructuredFormatter outputs valid JSON with extra fields."""
        from core.observability.logging import StructuredFormatter, with_correlation

        formatter = StructuredFormatter()

        with with_correlation(provider="sap", sync_run_id="run-9"):
            record = logging.LogRecord(
                name="test",
                level=logging.INFO,
                pathname="test.py",
                lineno=10,
                msg="Fetched %d vendors",
                args=(3,),
                exc_info=None,
            )
            record.extra_fields = {"new_count": 3}

            data = json.loads(formatter.format(record))

        assert data["message"] == "Fetched 3 vendors"
        assert data["level"] == "INFO"
        assert data["provider"] == "sap"
        assert data["sync_run_id"] == "run-9"
        assert data["new_count"] == 3

    def test_human_readable_formatter_shows_correlation(self):
        from core.observability.logging import HumanReadableFormatter, with_correlation

        record = logging.LogRecord("sync", logging.WARNING, "x.py", 1, "Skipped", (), None)
        with with_correlation(provider="synthetic", entity_type="inspections"):
            line = HumanReadableFormatter().format(record)

        assert "[synthetic/inspections]" in line
        assert line.endswith("Skipped")

    def test_credentials_are_redacted(self):
        from core.observability.logging import StructuredFormatter

        record = logging.LogRecord("connectors", logging.INFO, "x.py", 1, "Token exchange", (), None)
        record.extra_fields = {
            "grant_type": "password",
            "password": "hunter2",
            "headers": {"Authorization": "Bearer t1", "Accept": "application/json"},
        }
        data = json.loads(StructuredFormatter().format(record))

        assert data["grant_type"] == "password"
        assert data["password"] == "***"
        assert data["headers"] == {"Authorization": "***", "Accept": "application/json"}

    def test_filter_captures_context_at_emit_time(self):
        from core.observability.logging import CorrelationFilter, HumanReadableFormatter, with_correlation

        record = logging.LogRecord("sync", logging.INFO, "x.py", 1, "Reconciled", (), None)
        with with_correlation(provider="oracle", sync_run_id="abcdef123456", record_id="S-1"):
            CorrelationFilter().filter(record)

        line = HumanReadableFormatter().format(record)
        assert "[oracle/abcdef12/rec:S-1]" in line

    def test_logger_accepts_extra_fields(self, captured_logs):
        from core.observability.logging import get_logger, with_correlation
        logger = get_logger("connectors.test")

        with with_correlation(provider="sap"):
            logger.warning("Slow response", extra_fields={"elapsed_ms": 2300})

        [line] = [l for l in captured_logs if l["logger"] == "connectors.test"]
        assert line["elapsed_ms"] == 2300
        assert line["provider"] == "sap"
        assert line["level"] == "WARNING"


class TestSyncRunTracing:
    """A sync run's log lines all carry its correlation IDs."""

    def test_run_logs_carry_run_id(self, settings, captured_logs):
        from sync.orchestrator import ERPSyncOrchestrator
        from sync.repository import InMemoryDomainRepository

        orchestrator = ERPSyncOrchestrator(settings, InMemoryDomainRepository())
        result = asyncio.run(orchestrator.sync_vendors_from_erp({"limit": 3}))

        run_lines = [line for line in captured_logs if line["logger"] == "sync.orchestrator"]
        assert run_lines
        for line in run_lines:
            assert line["sync_run_id"] == result.run.run_id
            assert line["provider"] == "synthetic"
            assert line["entity_type"] == "vendors"
            assert line["direction"] == "from_erp"

        summary = run_lines[-1]
        assert summary["total_count"] == 3
        assert summary["failure_count"] == 0
