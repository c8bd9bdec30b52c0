"""Cooperative cancellation for sync runs.

The orchestrator checks the token before each phase and between records.
Whatever was already written stays written; the run ends in CANCELLED.
"""

from typing import Optional


class SyncCancelledError(Exception):
    """The sync run was cancelled through its CancellationToken."""

    def __init__(self, message: str = "Sync run cancelled", phase: Optional[str] = None):
        super().__init__(message)
        self.phase = phase


class CancellationToken:
    """Flag shared between the caller and a running sync.

    Usage:
        token = CancellationToken()
        task = asyncio.create_task(orchestrator.sync_from_erp("vendors", cancellation=token))
        token.cancel("operator request")
    """

    def __init__(self):
        self._cancelled = False
        self.reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self, reason: Optional[str] = None) -> None:
        self._cancelled = True
        self.reason = reason

    def raise_if_cancelled(self, phase: Optional[str] = None) -> None:
        if self._cancelled:
            message = "Sync run cancelled"
            if self.reason:
                message += f": {self.reason}"
            raise SyncCancelledError(message, phase=phase)
