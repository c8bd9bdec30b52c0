"""ERP Sync Orchestrator.

Moves records between the domain repository and the active ERP adapter.

Outbound (domain -> ERP):
    find records -> translate each via the ACL -> adapter ``sync_to_erp``
    -> stamp pushed records as synced

Inbound (ERP -> domain):
    adapter ``sync_from_erp`` -> translate each via the ACL -> match
    (source id, code, name+email) -> update the match or create a record

A failed fetch aborts the run. Failures of individual records during
translation or reconciliation are recorded and the batch continues; the run
then ends PARTIALLY_FAILED instead of COMPLETED.
"""

import asyncio
from collections import defaultdict
from contextlib import AsyncExitStack
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from connectors.erp_base import ERPConnector, create_connector
from connectors.errors import TranslationError
from core.cache import CacheBackend, InMemoryCache
from core.config import ERPSettings
from core.models.domain import DomainRecord, EntityType
from core.observability.logging import get_logger, with_correlation
from core.observability.metrics import get_metrics
from sync.cancellation import CancellationToken, SyncCancelledError
from sync.matching import RecordMatcher
from sync.models import (
    InboundSyncResult,
    OutboundSyncResult,
    SyncDirection,
    SyncRun,
    SyncRunStatus,
)
from sync.repository import DomainRepository

logger = get_logger(__name__)

# Fields an inbound update never copies from the ERP record
_UPDATE_EXCLUDE = {"id", "erp_synced", "last_synced_at"}


class ERPSyncOrchestrator:
    """Bidirectional sync between the domain repository and one ERP.

    The connector is chosen once, from ``settings.active_provider``, unless
    one is passed in.

    Usage:
        orchestrator = ERPSyncOrchestrator(load_settings(), repository)
        outbound = await orchestrator.sync_suppliers_to_erp({"status": "active"})
        inbound = await orchestrator.sync_vendors_from_erp({"limit": 100})
    """

    def __init__(
        self,
        settings: ERPSettings,
        repository: DomainRepository,
        cache: Optional[CacheBackend] = None,
        connector: Optional[ERPConnector] = None,
        concurrency: int = 1,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize orchestrator.

        Args:
            settings: Global ERP settings (selects the active provider)
            repository: Domain record storage
            cache: Read cache shared with the connector (in-memory by default)
            connector: Pre-built connector; overrides ``active_provider``
            concurrency: Records reconciled at once (1 = sequential)
            clock: Returns the current UTC time (injectable for tests)
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        self.settings = settings
        self.repository = repository
        self.cache = cache if cache is not None else InMemoryCache()
        self.connector = connector or create_connector(settings.get_active_config(), cache=self.cache)
        self.matcher = RecordMatcher(repository)
        self.concurrency = concurrency
        self._clock = clock or datetime.utcnow

    @property
    def provider(self) -> str:
        return self.connector.provider_name

    def _now(self) -> datetime:
        return self._clock()

    async def close(self) -> None:
        await self.connector.close()

    # =========================================================================
    # Outbound: domain -> ERP
    # =========================================================================

    async def sync_to_erp(
        self,
        entity_type: Any,
        query: Optional[Mapping[str, Any]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> OutboundSyncResult:
        """Push domain records matching ``query`` to the ERP.

        Args:
            entity_type: Entity type or alias (e.g. "suppliers")
            query: Repository filter; all records when omitted
            cancellation: Optional token checked between phases and records

        Returns:
            OutboundSyncResult; ``errors`` holds ``{item, error}`` per failure

        Raises:
            ERPError: Systemic failure (e.g. authentication exhausted)
            SyncCancelledError: The run was cancelled
        """
        entity_type = EntityType.parse(entity_type)
        cancellation = cancellation or CancellationToken()
        run = SyncRun(direction=SyncDirection.TO_ERP, entity_type=entity_type, provider=self.provider)
        result = OutboundSyncResult(run=run)

        with with_correlation(
            provider=self.provider,
            entity_type=entity_type.value,
            direction=run.direction.value,
            sync_run_id=run.run_id,
        ):
            get_metrics().record_sync_run_started(run.direction.value, entity_type.value)
            try:
                self._enter(run, SyncRunStatus.FETCHING, cancellation)
                records = await self.repository.find(entity_type, query or {})
                result.total_count = len(records)
                logger.info(f"Found {len(records)} {entity_type.value} to push to {self.provider}")

                self._enter(run, SyncRunStatus.TRANSLATING, cancellation)
                payloads, sent = self._translate_outbound(entity_type, records, result, cancellation)

                self._enter(run, SyncRunStatus.RECONCILING, cancellation)
                if payloads:
                    await self._push(entity_type, payloads, sent, result)
            except SyncCancelledError:
                self._abort(run, result, cancelled=True)
                raise
            except Exception as e:
                logger.error(f"Outbound {entity_type.value} sync failed: {e}")
                self._abort(run, result, error=str(e))
                raise

            self._complete(run, result, result.success_count)
        return result

    def _translate_outbound(
        self,
        entity_type: EntityType,
        records: List[DomainRecord],
        result: OutboundSyncResult,
        cancellation: CancellationToken,
    ) -> Tuple[List[Dict[str, Any]], List[DomainRecord]]:
        payloads: List[Dict[str, Any]] = []
        sent: List[DomainRecord] = []
        for record in records:
            cancellation.raise_if_cancelled(SyncRunStatus.TRANSLATING.value)
            try:
                payloads.append(self.connector.acl.to_external(entity_type, record))
                sent.append(record)
            except TranslationError as e:
                logger.warning(f"Skipping {entity_type.value} {record.identifier()}: {e}")
                result.record_failure(record.identifier(), str(e))
        return payloads, sent

    async def _push(
        self,
        entity_type: EntityType,
        payloads: List[Dict[str, Any]],
        sent: List[DomainRecord],
        result: OutboundSyncResult,
    ) -> None:
        pushed = await self.connector.sync_to_erp(entity_type, payloads)
        result.new_count = pushed.new_count
        result.updated_count = pushed.updated_count
        for error in pushed.errors:
            result.record_failure(sent[error.index].identifier(), error.error)

        failed = pushed.failed_indexes
        succeeded = [record for index, record in enumerate(sent) if index not in failed]
        result.success_count = len(succeeded)
        # synced_items lists the external keys of successes in batch order
        keys = list(pushed.synced_items) + [None] * (len(succeeded) - len(pushed.synced_items))
        now = self._now()
        for record, key in zip(succeeded, keys):
            await self._stamp_pushed(entity_type, record, key, now, result)

    async def _stamp_pushed(
        self,
        entity_type: EntityType,
        record: DomainRecord,
        key: Optional[str],
        now: datetime,
        result: OutboundSyncResult,
    ) -> None:
        if record.id is None:
            return
        patch: Dict[str, Any] = {
            "erp_synced": True,
            "last_synced_at": now,
            "source_system": self.provider,
        }
        if key is not None:
            patch["source_id"] = key
        elif record.source_system != self.provider:
            patch["source_id"] = None
        try:
            await self.repository.update_matching(entity_type, {"id": record.id}, patch)
        except Exception as e:
            logger.warning(f"{entity_type.value} {record.identifier()} synced but not stamped: {e}")
            result.warnings.append(f"{record.identifier()}: {e}")

    # =========================================================================
    # Inbound: ERP -> domain
    # =========================================================================

    async def sync_from_erp(
        self,
        entity_type: Any,
        params: Optional[Dict[str, Any]] = None,
        cancellation: Optional[CancellationToken] = None,
    ) -> InboundSyncResult:
        """Reconcile ERP records into the domain repository.

        Args:
            entity_type: Entity type or alias (e.g. "vendors")
            params: Adapter read params (filter, limit, offset, ...)
            cancellation: Optional token checked between phases and records

        Returns:
            InboundSyncResult with new/updated/failure counts

        Raises:
            ERPError: The fetch failed (nothing is reconciled)
            SyncCancelledError: The run was cancelled
        """
        entity_type = EntityType.parse(entity_type)
        cancellation = cancellation or CancellationToken()
        run = SyncRun(direction=SyncDirection.FROM_ERP, entity_type=entity_type, provider=self.provider)
        result = InboundSyncResult(run=run)

        with with_correlation(
            provider=self.provider,
            entity_type=entity_type.value,
            direction=run.direction.value,
            sync_run_id=run.run_id,
        ):
            get_metrics().record_sync_run_started(run.direction.value, entity_type.value)
            try:
                self._enter(run, SyncRunStatus.FETCHING, cancellation)
                fetched = await self.connector.sync_from_erp(entity_type, params or {})
                result.total_count = fetched.total_count
                logger.info(f"Fetched {fetched.total_count} {entity_type.value} from {self.provider}")

                self._enter(run, SyncRunStatus.TRANSLATING, cancellation)
                translated = self._translate_inbound(entity_type, fetched.records, result, cancellation)

                self._enter(run, SyncRunStatus.RECONCILING, cancellation)
                await self._reconcile_all(entity_type, translated, result, cancellation)
            except SyncCancelledError:
                self._abort(run, result, cancelled=True)
                raise
            except Exception as e:
                logger.error(f"Inbound {entity_type.value} sync failed: {e}")
                self._abort(run, result, error=str(e))
                raise

            self._complete(run, result, result.new_count + result.updated_count)
        return result

    def _translate_inbound(
        self,
        entity_type: EntityType,
        records: List[Dict[str, Any]],
        result: InboundSyncResult,
        cancellation: CancellationToken,
    ) -> List[DomainRecord]:
        translated: List[DomainRecord] = []
        for index, raw in enumerate(records):
            cancellation.raise_if_cancelled(SyncRunStatus.TRANSLATING.value)
            try:
                record = self.connector.acl.to_domain(entity_type, raw)
            except TranslationError as e:
                item = self.connector.acl.external_key(entity_type, raw) or f"record {index}"
                logger.warning(f"Skipping {entity_type.value} {item}: {e}")
                result.record_failure(item, str(e))
                continue
            if record is not None:
                translated.append(record)
        return translated

    async def _reconcile_all(
        self,
        entity_type: EntityType,
        records: List[DomainRecord],
        result: InboundSyncResult,
        cancellation: CancellationToken,
    ) -> None:
        semaphore = asyncio.Semaphore(self.concurrency)
        key_locks: Dict[Tuple[str, ...], asyncio.Lock] = defaultdict(asyncio.Lock)

        async def reconcile(record: DomainRecord) -> None:
            # Records sharing a match key reconcile one after another; locks
            # are taken in sorted order while holding the semaphore.
            async with semaphore, AsyncExitStack() as held:
                for key in self.matcher.match_keys(record):
                    await held.enter_async_context(key_locks[key])
                cancellation.raise_if_cancelled(SyncRunStatus.RECONCILING.value)
                with with_correlation(record_id=record.identifier()):
                    try:
                        await self._reconcile_one(entity_type, record, result)
                    except SyncCancelledError:
                        raise
                    except Exception as e:
                        logger.warning(f"Failed to reconcile {entity_type.value} {record.identifier()}: {e}")
                        result.record_failure(record.identifier(), str(e))

        if self.concurrency == 1:
            for record in records:
                await reconcile(record)
        else:
            await asyncio.gather(*(reconcile(record) for record in records))

    async def _reconcile_one(
        self,
        entity_type: EntityType,
        incoming: DomainRecord,
        result: InboundSyncResult,
    ) -> None:
        match = await self.matcher.match(entity_type, incoming)
        now = self._now()

        if match.matched:
            patch = incoming.model_dump(exclude=_UPDATE_EXCLUDE, exclude_none=True)
            patch.update(erp_synced=True, last_synced_at=now)
            await self.repository.update_matching(entity_type, {"id": match.record.id}, patch)
            result.updated_count += 1
            logger.debug(f"Updated {match.record.identifier()} (matched by {match.match_type.value})")
        else:
            record = incoming.model_copy(update={
                "id": None,
                "source_system": incoming.source_system or self.provider,
                "erp_synced": True,
                "last_synced_at": now,
            })
            created = await self.repository.create(entity_type, record)
            result.new_count += 1
            logger.debug(f"Created {created.identifier()}")

    # =========================================================================
    # Run Bookkeeping
    # =========================================================================

    def _enter(self, run: SyncRun, status: SyncRunStatus, cancellation: CancellationToken) -> None:
        cancellation.raise_if_cancelled(run.status.value)
        run.transition(status, self._now())
        logger.debug(f"Sync run {run.run_id} entered {status.value}")

    def _abort(self, run: SyncRun, result, error: Optional[str] = None, cancelled: bool = False) -> None:
        if cancelled:
            run.transition(SyncRunStatus.CANCELLED, self._now())
        else:
            run.fail(error or "unknown error", self._now())
        get_metrics().record_sync_run_finished(
            run.direction.value,
            run.entity_type.value,
            run.status.value,
            records_failed=result.failure_count,
        )

    def _complete(self, run: SyncRun, result, succeeded: int) -> None:
        run.finish(result.failure_count, self._now())
        get_metrics().record_sync_run_finished(
            run.direction.value,
            run.entity_type.value,
            run.status.value,
            records_succeeded=succeeded,
            records_failed=result.failure_count,
        )
        logger.info(
            f"{run.direction.value} {run.entity_type.value} sync {run.status.value}",
            extra_fields={
                "total_count": result.total_count,
                "failure_count": result.failure_count,
                "duration_ms": int((run.completed_at - run.started_at).total_seconds() * 1000),
            },
        )

    # =========================================================================
    # Named Syncs
    # =========================================================================

    async def sync_suppliers_to_erp(self, query: Optional[Mapping[str, Any]] = None) -> OutboundSyncResult:
        return await self.sync_to_erp(EntityType.VENDORS, query)

    async def sync_inspections_to_erp(self, query: Optional[Mapping[str, Any]] = None) -> OutboundSyncResult:
        return await self.sync_to_erp(EntityType.INSPECTIONS, query)

    async def sync_vendors_from_erp(self, params: Optional[Dict[str, Any]] = None) -> InboundSyncResult:
        return await self.sync_from_erp(EntityType.VENDORS, params)

    async def sync_inventory_from_erp(self, params: Optional[Dict[str, Any]] = None) -> InboundSyncResult:
        return await self.sync_from_erp(EntityType.INVENTORY, params)

    async def sync_purchase_orders_from_erp(self, params: Optional[Dict[str, Any]] = None) -> InboundSyncResult:
        return await self.sync_from_erp(EntityType.PURCHASE_ORDERS, params)

    async def sync_production_orders_from_erp(self, params: Optional[Dict[str, Any]] = None) -> InboundSyncResult:
        return await self.sync_from_erp(EntityType.PRODUCTION_ORDERS, params)

    # =========================================================================
    # Connector Passthroughs
    # =========================================================================

    async def test_connection(self) -> bool:
        return await self.connector.test_connection()

    async def get_inventory(self, params: Optional[Dict[str, Any]] = None):
        return await self.connector.get_inventory(params)

    async def get_purchase_orders(self, params: Optional[Dict[str, Any]] = None):
        return await self.connector.get_purchase_orders(params)

    async def get_vendors(self, params: Optional[Dict[str, Any]] = None):
        return await self.connector.get_vendors(params)

    async def get_production_orders(self, params: Optional[Dict[str, Any]] = None):
        return await self.connector.get_production_orders(params)

    async def get_quality_inspections(self, params: Optional[Dict[str, Any]] = None):
        return await self.connector.get_quality_inspections(params)

    async def create_purchase_order(self, order):
        return await self.connector.create_purchase_order(order)

    async def update_purchase_order(self, key: str, order):
        return await self.connector.update_purchase_order(key, order)

    async def create_vendor(self, vendor):
        return await self.connector.create_vendor(vendor)

    async def update_vendor(self, key: str, vendor):
        return await self.connector.update_vendor(key, vendor)

    async def create_quality_inspection(self, inspection):
        return await self.connector.create_quality_inspection(inspection)

    async def update_quality_inspection(self, key: str, inspection):
        return await self.connector.update_quality_inspection(key, inspection)
