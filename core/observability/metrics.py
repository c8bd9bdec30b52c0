"""
Metrics Collection for ERP Integration

Collects counters for:
- Outbound requests per provider (succeeded, failed, retries)
- Cache effectiveness (hits, misses)
- Authentication exchanges per provider
- Sync runs and records by direction and outcome

Metrics are in-memory only; a scrape endpoint can read ``get_summary()``.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Dict, Optional


# =============================================================================
# Metric Data Classes
# =============================================================================

@dataclass
class RequestMetrics:
    """Metrics for outbound ERP requests."""
    succeeded: int = 0
    failed: int = 0
    retries: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    auth_exchanges: int = 0

    # By provider
    by_provider: Dict[str, Dict[str, int]] = field(default_factory=lambda: defaultdict(lambda: {
        "succeeded": 0, "failed": 0, "retries": 0, "cache_hits": 0, "cache_misses": 0, "auth_exchanges": 0,
    }))


@dataclass
class SyncMetrics:
    """Metrics for sync runs."""
    runs_started: int = 0
    runs_completed: int = 0
    runs_partially_failed: int = 0
    runs_failed: int = 0
    runs_cancelled: int = 0
    records_succeeded: int = 0
    records_failed: int = 0

    # By "<direction>.<entity_type>"
    by_stream: Dict[str, Dict[str, int]] = field(default_factory=lambda: defaultdict(lambda: {
        "started": 0, "completed": 0, "partially_failed": 0, "failed": 0, "cancelled": 0,
    }))


# =============================================================================
# Metrics Collector (Singleton)
# =============================================================================

class MetricsCollector:
    """
    Thread-safe metrics collector for ERP integration.

    Usage:
        metrics = MetricsCollector.instance()
        metrics.record_request("sap", succeeded=True)
        metrics.record_sync_run_finished("inbound", "vendors", "completed", 12, 0)
    """

    _instance: Optional["MetricsCollector"] = None
    _lock = Lock()

    def __init__(self):
        self.requests = RequestMetrics()
        self.syncs = SyncMetrics()
        self._lock = Lock()

    @classmethod
    def instance(cls) -> "MetricsCollector":
        """Get singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def reset(self):
        """Clear all counters (tests and process restarts)."""
        with self._lock:
            self.requests = RequestMetrics()
            self.syncs = SyncMetrics()

    # =========================================================================
    # Request Metrics
    # =========================================================================

    def record_request(self, provider: str, succeeded: bool):
        """Record the final outcome of a request (after retries)."""
        key = "succeeded" if succeeded else "failed"
        with self._lock:
            setattr(self.requests, key, getattr(self.requests, key) + 1)
            self.requests.by_provider[provider][key] += 1

    def record_retry(self, provider: str):
        with self._lock:
            self.requests.retries += 1
            self.requests.by_provider[provider]["retries"] += 1

    def record_cache_lookup(self, provider: str, hit: bool):
        key = "cache_hits" if hit else "cache_misses"
        with self._lock:
            setattr(self.requests, key, getattr(self.requests, key) + 1)
            self.requests.by_provider[provider][key] += 1

    def record_auth_exchange(self, provider: str):
        with self._lock:
            self.requests.auth_exchanges += 1
            self.requests.by_provider[provider]["auth_exchanges"] += 1

    # =========================================================================
    # Sync Metrics
    # =========================================================================

    def record_sync_run_started(self, direction: str, entity_type: str):
        with self._lock:
            self.syncs.runs_started += 1
            self.syncs.by_stream[f"{direction}.{entity_type}"]["started"] += 1

    def record_sync_run_finished(
        self,
        direction: str,
        entity_type: str,
        status: str,
        records_succeeded: int = 0,
        records_failed: int = 0,
    ):
        """Record a finished run.

        Args:
            status: completed, partially_failed, failed or cancelled
        """
        with self._lock:
            attr = f"runs_{status}"
            setattr(self.syncs, attr, getattr(self.syncs, attr) + 1)
            self.syncs.by_stream[f"{direction}.{entity_type}"][status] += 1
            self.syncs.records_succeeded += records_succeeded
            self.syncs.records_failed += records_failed

    # =========================================================================
    # Summary
    # =========================================================================

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics."""
        with self._lock:
            return {
                "requests": {
                    "succeeded": self.requests.succeeded,
                    "failed": self.requests.failed,
                    "retries": self.requests.retries,
                    "cache_hits": self.requests.cache_hits,
                    "cache_misses": self.requests.cache_misses,
                    "auth_exchanges": self.requests.auth_exchanges,
                    "by_provider": {k: dict(v) for k, v in self.requests.by_provider.items()},
                },
                "syncs": {
                    "runs_started": self.syncs.runs_started,
                    "runs_completed": self.syncs.runs_completed,
                    "runs_partially_failed": self.syncs.runs_partially_failed,
                    "runs_failed": self.syncs.runs_failed,
                    "runs_cancelled": self.syncs.runs_cancelled,
                    "records_succeeded": self.syncs.records_succeeded,
                    "records_failed": self.syncs.records_failed,
                    "by_stream": {k: dict(v) for k, v in self.syncs.by_stream.items()},
                },
            }


# =============================================================================
# Module-level convenience functions
# =============================================================================

def get_metrics() -> MetricsCollector:
    """Get the global metrics collector."""
    return MetricsCollector.instance()
