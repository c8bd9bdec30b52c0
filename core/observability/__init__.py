"""
Observability Module for ERP Integration

Provides:
- Structured logging with correlation IDs (provider, entity type, sync run)
- Metrics collection (requests, retries, cache, auth exchanges, sync runs)
"""

from core.observability.metrics import (
    MetricsCollector,
    get_metrics,
)

from core.observability.logging import (
    get_logger,
    configure_logging,
    CorrelationContext,
    get_correlation_context,
    with_correlation,
    redact,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "get_metrics",
    # Logging
    "get_logger",
    "configure_logging",
    "CorrelationContext",
    "get_correlation_context",
    "with_correlation",
    "redact",
]
