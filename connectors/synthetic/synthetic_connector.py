"""Synthetic ERP connector.

Implements ERPConnector against a seeded in-memory dataset for offline
development and resilience testing. No network calls are made.

Behaviour:
- Every call sleeps ``delay_ms`` (custom setting, 200 by default)
- Reads support ``filter`` (case-insensitive substring), ``limit``/``offset``,
  ``status``, ``supplier_code`` and ``vendor_type``
- ``sync_to_erp`` succeeds for ``floor(n * success_ratio)`` records; the
  failing positions are drawn from the seeded generator and report
  "Simulated sync error". Successful records are upserted into the dataset.
"""

import asyncio
import math
import random
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from connectors.auth import AuthToken
from connectors.erp_base import ERPConnector, SyncToERPResult, register_connector
from connectors.errors import ERPClientError, ERPNotFoundError
from connectors.synthetic.synthetic_data import DEFAULT_SEED, SyntheticDataset
from connectors.synthetic.synthetic_mappers import (
    INSPECTION_STATUS,
    PRODUCTION_ORDER_STATUS,
    PURCHASE_ORDER_STATUS,
    SOURCE_SYSTEM,
    SYNTHETIC_ACL,
    VENDOR_STATUS,
)
from core.cache import CacheBackend
from core.config import ERPProviderConfig
from core.models.domain import EntityType
from core.observability.logging import get_logger

logger = get_logger(__name__)

SIMULATED_ERROR = "Simulated sync error"

# Attribute holding the supplier code per collection
SUPPLIER_ATTRIBUTES: Dict[EntityType, str] = {
    EntityType.VENDORS: "code",
    EntityType.INVENTORY: "supplier",
    EntityType.PURCHASE_ORDERS: "vendor",
    EntityType.INSPECTIONS: "supplierCode",
}

STATUS_TABLES = {
    EntityType.VENDORS: VENDOR_STATUS,
    EntityType.PURCHASE_ORDERS: PURCHASE_ORDER_STATUS,
    EntityType.INSPECTIONS: INSPECTION_STATUS,
    EntityType.PRODUCTION_ORDERS: PRODUCTION_ORDER_STATUS,
}


@register_connector("synthetic")
class SyntheticConnector(ERPConnector):
    """Connector backed by a per-instance SyntheticDataset.

    Usage:
        config = load_settings().get_provider_config("synthetic")
        async with SyntheticConnector(config) as erp:
            vendors = await erp.get_vendors({"filter": "apex", "limit": 10})
    """

    provider_name = SOURCE_SYSTEM
    acl = SYNTHETIC_ACL

    def __init__(
        self,
        config: ERPProviderConfig,
        cache: Optional[CacheBackend] = None,
        http_client: Optional[Any] = None,
        dataset: Optional[SyntheticDataset] = None,
    ):
        super().__init__(config, cache=cache, http_client=http_client)
        settings = config.custom_settings
        seed = int(settings.get("seed", DEFAULT_SEED))
        self.delay_ms = float(settings.get("delay_ms", 200))
        self.success_ratio = float(settings.get("success_ratio", 0.95))
        if not 0.0 <= self.success_ratio <= 1.0:
            raise ValueError(f"success_ratio must be between 0 and 1, got {self.success_ratio}")

        self.dataset = dataset or SyntheticDataset(seed=seed)
        self._failure_rng = random.Random(seed)

    async def _simulate_delay(self) -> None:
        if self.delay_ms > 0:
            await asyncio.sleep(self.delay_ms / 1000)

    async def authenticate(self) -> AuthToken:
        await self._simulate_delay()
        logger.info("Synthetic ERP authentication successful (simulated)")
        return AuthToken(token="synthetic", expires_at=datetime.max, token_type="Synthetic")

    # =========================================================================
    # Reads
    # =========================================================================

    async def fetch_raw(self, entity_type: EntityType, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        await self._simulate_delay()

        match: Dict[str, Any] = {}
        if entity_type == EntityType.VENDORS and params.get("vendor_type"):
            match["type"] = params["vendor_type"]
        if params.get("supplier_code") and entity_type in SUPPLIER_ATTRIBUTES:
            match[SUPPLIER_ATTRIBUTES[entity_type]] = params["supplier_code"]
        if params.get("status") and entity_type in STATUS_TABLES:
            match["status"] = STATUS_TABLES[entity_type].to_external(params["status"])

        limit = params.get("limit")
        records = self.dataset.query(
            entity_type,
            text=params.get("filter"),
            match=match,
            limit=int(limit) if limit is not None else None,
            offset=int(params.get("offset") or 0),
        )
        logger.info(f"Synthetic ERP: retrieved {len(records)} {entity_type.value}")
        return records

    # =========================================================================
    # Writes
    # =========================================================================

    async def _create_external(self, entity_type: EntityType, payload: Dict[str, Any]) -> Dict[str, Any]:
        await self._simulate_delay()
        try:
            created = self.dataset.create(entity_type, payload)
        except ValueError as e:
            raise ERPClientError(str(e), status_code=409)
        logger.info(f"Synthetic ERP: created {entity_type.value} {self.acl.external_key(entity_type, created)}")
        return created

    async def _update_external(self, entity_type: EntityType, key: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        await self._simulate_delay()
        try:
            updated = self.dataset.update(entity_type, key, payload)
        except KeyError:
            raise ERPNotFoundError(f"{entity_type.value} {key} not found", status_code=404)
        logger.info(f"Synthetic ERP: updated {entity_type.value} {key}")
        return updated

    async def _exists_external(self, entity_type: EntityType, key: str) -> bool:
        return (entity_type, key) in self.dataset

    # =========================================================================
    # Bulk Operations
    # =========================================================================

    async def sync_to_erp(self, entity_type: Any, records: List[Dict[str, Any]]) -> SyncToERPResult:
        """Simulate a bulk push with a fixed success ratio."""
        entity_type = EntityType.parse(entity_type)
        self._check_writable(entity_type)
        await self._simulate_delay()

        total = len(records)
        result = SyncToERPResult(entity_type=entity_type, total_count=total)
        success_count = math.floor(Decimal(str(self.success_ratio)) * total)
        failing = set(self._failure_rng.sample(range(total), total - success_count))

        for index, record in enumerate(records):
            key = self.acl.external_key(entity_type, record)
            if index in failing:
                result.record_failure(index, key, SIMULATED_ERROR)
                continue
            stored, created = self.dataset.upsert(entity_type, record)
            result.record_success(self.acl.external_key(entity_type, stored), created)

        logger.info(
            f"Synthetic ERP: synced {result.success_count} of {total} {entity_type.value}",
            extra_fields={"new_count": result.new_count, "updated_count": result.updated_count},
        )
        return result
