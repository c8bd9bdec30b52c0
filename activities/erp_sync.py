"""
ERP Sync Activities

Temporal activities wrapping the sync orchestrator:
- sync_to_erp: push domain records of one entity type to the ERP
- sync_from_erp: reconcile ERP records of one entity type into the domain
- test_erp_connection: check the active adapter accepts its credentials

Activities are methods of ``ERPSyncActivities`` so one orchestrator (and its
connector, token and cache) is shared by every activity run in a worker.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from temporalio import activity

from core.observability.logging import get_logger, with_correlation
from sync.orchestrator import ERPSyncOrchestrator

logger = get_logger(__name__)


# =============================================================================
# Activity Input Models
# =============================================================================

@dataclass
class SyncToERPInput:
    """Input for sync_to_erp activity"""
    entity_type: str
    query: Optional[Dict[str, Any]] = None


@dataclass
class SyncFromERPInput:
    """Input for sync_from_erp activity"""
    entity_type: str
    params: Optional[Dict[str, Any]] = None


def _result_payload(result) -> Dict[str, Any]:
    """JSON-ready result with the run status lifted to the top level."""
    payload = result.model_dump(mode="json")
    payload["entity_type"] = result.entity_type.value
    payload["status"] = result.status.value
    return payload


# =============================================================================
# Activities
# =============================================================================

class ERPSyncActivities:
    """Activity implementations bound to one orchestrator.

    Usage:
        activities = ERPSyncActivities(orchestrator)
        Worker(client, task_queue=TASK_QUEUE_ERP_SYNC, workflows=[ERPSyncWorkflow],
               activities=[activities.sync_to_erp, activities.sync_from_erp,
                           activities.test_erp_connection])
    """

    def __init__(self, orchestrator: ERPSyncOrchestrator):
        self.orchestrator = orchestrator

    @activity.defn(name="sync_to_erp")
    async def sync_to_erp(self, input: SyncToERPInput) -> Dict[str, Any]:
        """Push domain records to the active ERP.

        Args:
            input: Entity type and optional repository filter

        Returns:
            OutboundSyncResult as a JSON-ready dict

        Raises:
            ERPAuthenticationError: Credentials were rejected (not retried)
            UnsupportedEntityTypeError: Unknown entity type (not retried)
        """
        info = activity.info()
        with with_correlation(workflow_id=info.workflow_id, activity_name=info.activity_type):
            logger.info(f"Activity sync_to_erp started for {input.entity_type} (attempt {info.attempt})")
            result = await self.orchestrator.sync_to_erp(input.entity_type, input.query)
            return _result_payload(result)

    @activity.defn(name="sync_from_erp")
    async def sync_from_erp(self, input: SyncFromERPInput) -> Dict[str, Any]:
        """Reconcile ERP records into the domain repository.

        Args:
            input: Entity type and optional adapter read params

        Returns:
            InboundSyncResult as a JSON-ready dict
        """
        info = activity.info()
        with with_correlation(workflow_id=info.workflow_id, activity_name=info.activity_type):
            logger.info(f"Activity sync_from_erp started for {input.entity_type} (attempt {info.attempt})")
            result = await self.orchestrator.sync_from_erp(input.entity_type, input.params)
            return _result_payload(result)

    @activity.defn(name="test_erp_connection")
    async def test_erp_connection(self) -> bool:
        return await self.orchestrator.test_connection()
