"""
Structured Logging with Correlation IDs

Every log line emitted inside ``with_correlation`` carries:
- provider: The ERP adapter handling the call (sap, oracle, synthetic)
- entity_type / direction: What is being synchronised, and which way
- sync_run_id: Links logs to a single sync run
- record_id: The record being reconciled, when there is one
- workflow_id / activity_name: The Temporal execution that started the run

Usage:
    from core.observability.logging import get_logger, with_correlation

    logger = get_logger(__name__)

    with with_correlation(provider="sap", sync_run_id="run-123"):
        logger.info("Fetched vendors", extra_fields={"count": 12})
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Optional, Union

# Values under these keys never reach a log sink
SECRET_KEYS = frozenset({
    "password",
    "client_secret",
    "access_token",
    "refresh_token",
    "token",
    "sessionid",
    "authorization",
    "cookie",
})

REDACTED = "***"


# =============================================================================
# Correlation Context
# =============================================================================

@dataclass(frozen=True)
class CorrelationContext:
    """Correlation IDs for the code currently running."""
    provider: Optional[str] = None
    entity_type: Optional[str] = None
    direction: Optional[str] = None
    sync_run_id: Optional[str] = None
    phase: Optional[str] = None
    record_id: Optional[str] = None
    workflow_id: Optional[str] = None
    activity_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}

    def merge(self, **kwargs) -> "CorrelationContext":
        """New context with ``kwargs`` layered over the set values."""
        data = self.to_dict()
        data.update({k: v for k, v in kwargs.items() if v is not None})
        return CorrelationContext(**data)


_correlation_context: ContextVar[CorrelationContext] = ContextVar(
    "correlation_context",
    default=CorrelationContext(),
)


def get_correlation_context() -> CorrelationContext:
    return _correlation_context.get()


@contextmanager
def with_correlation(**kwargs):
    """
    Set correlation IDs for the enclosed block.

    Contexts nest: inner blocks inherit outer values and may add to them.
    Each asyncio task sees its own context.

    Usage:
        with with_correlation(provider="oracle", entity_type="vendors"):
            logger.info("Processing")  # Will include provider and entity_type
    """
    token = _correlation_context.set(get_correlation_context().merge(**kwargs))
    try:
        yield _correlation_context.get()
    finally:
        _correlation_context.reset(token)


def redact(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``fields`` with credential values masked (one level of nesting)."""
    clean: Dict[str, Any] = {}
    for key, value in fields.items():
        if key.lower() in SECRET_KEYS:
            clean[key] = REDACTED
        elif isinstance(value, dict):
            clean[key] = {k: REDACTED if k.lower() in SECRET_KEYS else v for k, v in value.items()}
        else:
            clean[key] = value
    return clean


# =============================================================================
# Filters and Formatters
# =============================================================================

class CorrelationFilter(logging.Filter):
    """Stamps the active correlation context onto each record as it is emitted.

    Handlers that format later (queues, buffers) still see the IDs that were
    active when the log call was made.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation"):
            record.correlation = get_correlation_context().to_dict()
        return True


def _correlation_of(record: logging.LogRecord) -> Dict[str, Any]:
    correlation = getattr(record, "correlation", None)
    if correlation is None:
        correlation = get_correlation_context().to_dict()
    return correlation


class StructuredFormatter(logging.Formatter):
    """
    One JSON object per line.

    Output format:
    {
        "timestamp": "2024-01-09T12:00:00.000Z",
        "level": "INFO",
        "logger": "sync.orchestrator",
        "message": "from_erp vendors sync completed",
        "provider": "sap",
        "sync_run_id": "3f2a...",
        "total_count": 4
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(_correlation_of(record))
        log_data.update(redact(getattr(record, "extra_fields", None) or {}))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Single-line format for terminals.

    Output format:
    2024-01-09 12:00:00 [INFO ] sync.orchestrator [sap/vendors/3f2a9c1e]: from_erp vendors sync completed
    """

    def format(self, record: logging.LogRecord) -> str:
        ctx = _correlation_of(record)
        parts = [ctx[key] for key in ("provider", "entity_type") if key in ctx]
        if "sync_run_id" in ctx:
            parts.append(ctx["sync_run_id"][:8])
        if "record_id" in ctx:
            parts.append(f"rec:{ctx['record_id']}")

        correlation = "/".join(parts) if parts else "-"
        timestamp = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S")
        msg = f"{timestamp} [{record.levelname:5}] {record.name} [{correlation}]: {record.getMessage()}"

        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)
        return msg


# =============================================================================
# Logger with Correlation Support
# =============================================================================

class CorrelatedLogger(logging.LoggerAdapter):
    """
    Logger accepting an ``extra_fields`` dict on every call.

    Extra fields end up as top-level keys in JSON output:
        logger.info("Synced", extra_fields={"new_count": 3})
    """

    def __init__(self, logger: logging.Logger):
        super().__init__(logger, {})

    def process(self, msg, kwargs):
        extra_fields = kwargs.pop("extra_fields", None) or {}
        extra = dict(kwargs.get("extra") or {})
        extra["extra_fields"] = extra_fields
        kwargs["extra"] = extra
        return msg, kwargs


# =============================================================================
# Setup
# =============================================================================

_loggers: Dict[str, CorrelatedLogger] = {}
_configured = False
_handler: Optional[logging.Handler] = None

APP_LOGGERS = ("connectors", "sync", "core", "activities", "workflows", "workers")


def configure_logging(
    level: Union[int, str, None] = None,
    json_format: Optional[bool] = None,
    include_temporal: bool = True,
    force: bool = False,
):
    """
    Install one stdout handler on the root logger.

    Later calls are no-ops unless ``force`` is set, which replaces the
    handler installed earlier (e.g. by the first ``get_logger`` call).

    Args:
        level: Level or level name; defaults to LOG_LEVEL, then INFO
        json_format: JSON lines instead of human-readable; defaults to
            LOG_FORMAT == "json"
        include_temporal: Also set the Temporal SDK loggers to INFO
        force: Reconfigure even if logging is already set up
    """
    global _configured, _handler

    if _configured and not force:
        return

    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    if json_format is None:
        json_format = os.getenv("LOG_FORMAT", "").lower() == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationFilter())
    handler.setFormatter(StructuredFormatter() if json_format else HumanReadableFormatter())

    root = logging.getLogger()
    if _handler is not None:
        root.removeHandler(_handler)
    root.setLevel(level)
    root.addHandler(handler)
    _handler = handler

    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(level)

    # Quieter third-party loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    if include_temporal:
        logging.getLogger("temporalio").setLevel(logging.INFO)

    _configured = True


def get_logger(name: str) -> CorrelatedLogger:
    """
    Get a correlated logger for the given name (typically __name__).

    Configures logging with defaults on first use.
    """
    if name not in _loggers:
        if not _configured:
            configure_logging()
        _loggers[name] = CorrelatedLogger(logging.getLogger(name))
    return _loggers[name]
