"""Activity definitions module."""

from activities.erp_sync import (
    ERPSyncActivities,
    SyncToERPInput,
    SyncFromERPInput,
)

__all__ = [
    # ERP sync activities
    "ERPSyncActivities",
    "SyncToERPInput",
    "SyncFromERPInput",
]
