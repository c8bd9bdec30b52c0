"""ERP Sync - Bidirectional reconciliation between the domain and an ERP.

Usage:
    from sync import ERPSyncOrchestrator, InMemoryDomainRepository
    from core.config import load_settings

    orchestrator = ERPSyncOrchestrator(load_settings(), InMemoryDomainRepository())
    result = await orchestrator.sync_vendors_from_erp({"limit": 100})
    print(result.new_count, result.updated_count, result.failure_count)
"""

from sync.cancellation import CancellationToken, SyncCancelledError
from sync.matching import MatchResult, MatchType, RecordMatcher
from sync.models import (
    InboundSyncResult,
    InvalidTransitionError,
    OutboundSyncResult,
    SyncDirection,
    SyncRecordError,
    SyncRun,
    SyncRunStatus,
)
from sync.orchestrator import ERPSyncOrchestrator
from sync.repository import DomainRepository, InMemoryDomainRepository

__all__ = [
    # Orchestrator
    "ERPSyncOrchestrator",
    # Repository
    "DomainRepository",
    "InMemoryDomainRepository",
    # Matching
    "RecordMatcher",
    "MatchResult",
    "MatchType",
    # Runs and results
    "SyncDirection",
    "SyncRun",
    "SyncRunStatus",
    "SyncRecordError",
    "OutboundSyncResult",
    "InboundSyncResult",
    "InvalidTransitionError",
    # Cancellation
    "CancellationToken",
    "SyncCancelledError",
]
