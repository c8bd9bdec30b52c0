"""
ERP Sync Workflow

Runs one sync direction for one entity type as a durable Temporal workflow:
TO_ERP -> sync_to_erp activity
FROM_ERP -> sync_from_erp activity

Transient ERP failures are retried by the connector first and then by the
activity retry policy. Authentication and unsupported-entity failures are
not retried.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ApplicationError

with workflow.unsafe.imports_passed_through():
    from activities.erp_sync import ERPSyncActivities, SyncFromERPInput, SyncToERPInput
    from sync.models import SyncDirection


TASK_QUEUE_ERP_SYNC = "erp-sync"

DIRECTION_TO_ERP = SyncDirection.TO_ERP.value
DIRECTION_FROM_ERP = SyncDirection.FROM_ERP.value


@dataclass
class ERPSyncWorkflowInput:
    """Input for ERP sync workflow.

    Attributes:
        direction: "to_erp" (outbound) or "from_erp" (inbound)
        entity_type: Entity type or alias (vendors, inspections, ...)
        query: Repository filter for outbound runs
        params: Adapter read params for inbound runs
    """
    direction: str
    entity_type: str
    query: Optional[Dict[str, Any]] = None
    params: Optional[Dict[str, Any]] = None


@workflow.defn
class ERPSyncWorkflow:
    """Workflow running one ERP sync."""

    @workflow.run
    async def run(self, input: ERPSyncWorkflowInput) -> dict:
        """Execute ERP sync workflow.

        Args:
            input: Direction, entity type and filters

        Returns:
            dict with the sync result (counts, errors, run status)
        """
        workflow.logger.info(f"Starting ERP sync {input.direction} for {input.entity_type}")

        activity_options = {
            "start_to_close_timeout": timedelta(minutes=10),
            "retry_policy": RetryPolicy(
                maximum_attempts=3,
                initial_interval=timedelta(seconds=5),
                maximum_interval=timedelta(minutes=2),
                backoff_coefficient=2.0,
                # Won't self-heal
                non_retryable_error_types=[
                    "ERPAuthenticationError",
                    "UnsupportedEntityTypeError",
                    "CapabilityNotImplementedError",
                ],
            ),
        }

        if input.direction == DIRECTION_TO_ERP:
            result = await workflow.execute_activity_method(
                ERPSyncActivities.sync_to_erp,
                SyncToERPInput(entity_type=input.entity_type, query=input.query),
                **activity_options,
            )
        elif input.direction == DIRECTION_FROM_ERP:
            result = await workflow.execute_activity_method(
                ERPSyncActivities.sync_from_erp,
                SyncFromERPInput(entity_type=input.entity_type, params=input.params),
                **activity_options,
            )
        else:
            raise ApplicationError(f"Unknown sync direction: {input.direction}", non_retryable=True)

        workflow.logger.info(
            f"ERP sync {input.direction} for {input.entity_type} finished: {result.get('status')}"
        )
        return result
