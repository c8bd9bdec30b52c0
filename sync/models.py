"""Sync run state machine and result models.

A run moves through::

    IDLE -> FETCHING -> TRANSLATING -> RECONCILING -> COMPLETED | PARTIALLY_FAILED

A systemic failure in any phase ends the run in FAILED; a cancelled run
ends in CANCELLED. Per-record failures never leave the happy path; they only
turn COMPLETED into PARTIALLY_FAILED.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel, Field

from core.models.domain import EntityType


class SyncDirection(str, Enum):
    """Which way records flow."""
    TO_ERP = "to_erp"       # Domain -> ERP (outbound)
    FROM_ERP = "from_erp"   # ERP -> domain (inbound)


class SyncRunStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    TRANSLATING = "translating"
    RECONCILING = "reconciling"
    COMPLETED = "completed"
    PARTIALLY_FAILED = "partially_failed"
    FAILED = "failed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES: FrozenSet[SyncRunStatus] = frozenset({
    SyncRunStatus.COMPLETED,
    SyncRunStatus.PARTIALLY_FAILED,
    SyncRunStatus.FAILED,
    SyncRunStatus.CANCELLED,
})

_ABORT = {SyncRunStatus.FAILED, SyncRunStatus.CANCELLED}

ALLOWED_TRANSITIONS: Dict[SyncRunStatus, FrozenSet[SyncRunStatus]] = {
    SyncRunStatus.IDLE: frozenset({SyncRunStatus.FETCHING} | _ABORT),
    SyncRunStatus.FETCHING: frozenset({SyncRunStatus.TRANSLATING} | _ABORT),
    SyncRunStatus.TRANSLATING: frozenset({SyncRunStatus.RECONCILING} | _ABORT),
    SyncRunStatus.RECONCILING: frozenset(
        {SyncRunStatus.COMPLETED, SyncRunStatus.PARTIALLY_FAILED} | _ABORT
    ),
}


class InvalidTransitionError(RuntimeError):
    """A run was asked to move to a state it cannot reach."""
    pass


class PhaseTransition(BaseModel):
    status: SyncRunStatus
    at: datetime


class SyncRun(BaseModel):
    """One execution of an inbound or outbound sync.

    Attributes:
        run_id: Unique run identifier (also the log correlation id)
        direction: Outbound or inbound
        entity_type: Entity type being synchronised
        provider: Active adapter name
        status: Current state
        history: Every state entered, with timestamps
        error: Message of the systemic failure that ended the run
    """
    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    direction: SyncDirection
    entity_type: EntityType
    provider: str
    status: SyncRunStatus = SyncRunStatus.IDLE
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    history: List[PhaseTransition] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def transition(self, status: SyncRunStatus, now: datetime) -> None:
        """Move to ``status``.

        Raises:
            InvalidTransitionError: If the move is not allowed from the
                current state
        """
        if status not in ALLOWED_TRANSITIONS.get(self.status, frozenset()):
            raise InvalidTransitionError(f"Sync run cannot go from {self.status.value} to {status.value}")
        if self.started_at is None:
            self.started_at = now
        self.status = status
        self.history.append(PhaseTransition(status=status, at=now))
        if status in TERMINAL_STATUSES:
            self.completed_at = now

    def finish(self, failure_count: int, now: datetime) -> None:
        """End a run that reached reconciliation."""
        status = SyncRunStatus.PARTIALLY_FAILED if failure_count else SyncRunStatus.COMPLETED
        self.transition(status, now)

    def fail(self, error: str, now: datetime) -> None:
        self.error = error
        self.transition(SyncRunStatus.FAILED, now)


# =============================================================================
# Results
# =============================================================================

class SyncRecordError(BaseModel):
    """One record that could not be synchronised."""
    item: str = Field(..., description="Record identifier (domain id, business code or external key)")
    error: str


class SyncResult(BaseModel):
    """Fields shared by inbound and outbound results."""
    run: SyncRun
    total_count: int = 0
    failure_count: int = 0
    errors: List[SyncRecordError] = Field(default_factory=list)

    @property
    def entity_type(self) -> EntityType:
        return self.run.entity_type

    @property
    def status(self) -> SyncRunStatus:
        return self.run.status

    def record_failure(self, item: str, error: str) -> None:
        self.failure_count += 1
        self.errors.append(SyncRecordError(item=item, error=error))


class OutboundSyncResult(SyncResult):
    """Outcome of pushing domain records to the ERP.

    ``success_count + failure_count == total_count`` once the run finished.
    ``warnings`` lists records that reached the ERP but could not be stamped
    as synced in the repository.
    """
    success_count: int = 0
    new_count: int = 0
    updated_count: int = 0
    warnings: List[str] = Field(default_factory=list)


class InboundSyncResult(SyncResult):
    """Outcome of reconciling ERP records into the domain repository."""
    new_count: int = 0
    updated_count: int = 0
