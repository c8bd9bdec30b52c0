"""Worker for ERP sync workflows.

Polls the ``erp-sync`` task queue and executes ERPSyncWorkflow and the
ERP sync activities against the provider selected by ``ERP_PROVIDER``.

The worker builds an in-memory domain repository, which suits local
development and demos; deployments pass their own repository to
``run_worker``.

Run with --provider to override ERP_PROVIDER for one process.
"""

import argparse
import asyncio
from typing import Optional

from temporalio.worker import Worker

from activities.erp_sync import ERPSyncActivities
from core.config import SUPPORTED_PROVIDERS, load_settings
from core.observability.logging import configure_logging, get_logger
from sync.orchestrator import ERPSyncOrchestrator
from sync.repository import DomainRepository, InMemoryDomainRepository
from temporal_client import get_temporal_client
from workflows.erp_sync_workflow import ERPSyncWorkflow, TASK_QUEUE_ERP_SYNC

logger = get_logger(__name__)


async def run_worker(
    provider: Optional[str] = None,
    repository: Optional[DomainRepository] = None,
    task_queue: str = TASK_QUEUE_ERP_SYNC,
):
    """Start a worker listening on the ERP sync task queue.

    Args:
        provider: Adapter to use instead of settings.active_provider
        repository: Domain repository (in-memory when omitted)
        task_queue: Task queue to poll

    Raises:
        Exception: If connection to Temporal fails
    """
    settings = load_settings()
    if provider:
        settings.active_provider = provider

    orchestrator = ERPSyncOrchestrator(settings, repository or InMemoryDomainRepository())
    activities = ERPSyncActivities(orchestrator)

    try:
        client = await get_temporal_client()
        logger.info(f"Connected to Temporal namespace: {client.namespace}")

        worker = Worker(
            client,
            task_queue=task_queue,
            workflows=[ERPSyncWorkflow],
            activities=[
                activities.sync_to_erp,
                activities.sync_from_erp,
                activities.test_erp_connection,
            ],
        )
        logger.info(f"Worker created for queue '{task_queue}' using provider '{orchestrator.provider}'")

        logger.info("Worker running... (Ctrl+C to stop)")
        await worker.run()

    except KeyboardInterrupt:
        logger.info("Worker interrupted by user")
    except Exception as e:
        logger.error(f"Worker error: {e}", exc_info=True)
        raise
    finally:
        await orchestrator.close()
        logger.info("ERP connector closed")


def main():
    """Entry point for worker with CLI args."""
    parser = argparse.ArgumentParser(description="ERP Sync Temporal Worker")
    parser.add_argument(
        "--provider", "-p",
        choices=list(SUPPORTED_PROVIDERS),
        default=None,
        help="ERP provider (default: ERP_PROVIDER or synthetic)"
    )
    parser.add_argument(
        "--queue", "-q",
        default=TASK_QUEUE_ERP_SYNC,
        help=f"Task queue to poll (default: {TASK_QUEUE_ERP_SYNC})"
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit structured JSON logs"
    )

    args = parser.parse_args()
    configure_logging(json_format=args.json_logs or None, force=True)
    asyncio.run(run_worker(provider=args.provider, task_queue=args.queue))


if __name__ == "__main__":
    main()
