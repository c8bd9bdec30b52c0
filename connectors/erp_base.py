"""ERP Connector Base - Provider-agnostic connector contract.

This module defines the capability contract every ERP adapter implements,
plus the shared request execution (read caching, retry, timeout) and the
authenticated-request path used by adapters with a token lifecycle.

DESIGN PRINCIPLE:
- The sync orchestrator depends ONLY on ERPConnector
- Read operations return DOMAIN models (Supplier, Inspection, ...)
- Bulk operations exchange external-shaped dicts that only the
  adapter's Anti-Corruption Layer understands
- No SAP/Oracle field names leak through this interface

Optional capabilities raise CapabilityNotImplementedError so a missing
operation fails fast instead of silently doing nothing.
"""

import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, List, Optional, Type

from pydantic import BaseModel, Field

from connectors.acl import AntiCorruptionLayer
from connectors.auth import AuthToken, TokenManager
from connectors.errors import (
    CapabilityNotImplementedError,
    ERPAuthenticationError,
    ERPError,
    ERPNotFoundError,
    ERPTimeoutError,
    is_retryable,
)
from connectors.http_client import ERPHttpClient
from core.cache import CacheBackend
from core.config import ERPProviderConfig
from core.models.domain import (
    DomainRecord,
    EntityType,
    Inspection,
    InventoryItem,
    ProductionOrder,
    PurchaseOrder,
    Supplier,
)
from core.observability.logging import get_logger
from core.observability.metrics import get_metrics

logger = get_logger(__name__)

READ_METHODS = frozenset({"GET", "HEAD"})


# =============================================================================
# Request Execution Settings
# =============================================================================

@dataclass
class RetryPolicy:
    """Retry behaviour for retryable failures.

    ``retry_attempts`` counts additional attempts after the first one, so a
    call that keeps failing is attempted ``retry_attempts + 1`` times.
    """
    retry_attempts: int = 3
    delay_seconds: float = 1.0
    backoff: float = 1.0
    max_delay: float = 60.0

    @property
    def max_attempts(self) -> int:
        return self.retry_attempts + 1

    def get_delay(self, attempt: int, error: Optional[BaseException] = None) -> float:
        """Delay before the attempt following ``attempt`` (1-based)."""
        delay = min(self.delay_seconds * (self.backoff ** (attempt - 1)), self.max_delay)
        retry_after = getattr(error, "retry_after", None)
        if retry_after:
            delay = max(delay, min(retry_after, self.max_delay))
        return delay


@dataclass
class RequestOptions:
    """Per-call overrides for ``execute_request``. None means use config."""
    use_cache: bool = True
    cache_ttl_seconds: Optional[float] = None
    retry_attempts: Optional[int] = None
    retry_delay_seconds: Optional[float] = None
    timeout_seconds: Optional[float] = None


# =============================================================================
# Bulk Operation Results
# =============================================================================

class SyncItemError(BaseModel):
    """One failed record in a bulk push."""
    index: int = Field(..., description="Position of the record in the submitted batch")
    item: Optional[str] = Field(None, description="External key of the record, if known")
    error: str


class SyncToERPResult(BaseModel):
    """Outcome of ``sync_to_erp``."""
    entity_type: EntityType
    total_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    new_count: int = 0
    updated_count: int = 0
    synced_items: List[Optional[str]] = Field(default_factory=list)
    errors: List[SyncItemError] = Field(default_factory=list)

    def record_success(self, key: Optional[str], created: bool) -> None:
        self.success_count += 1
        if created:
            self.new_count += 1
        else:
            self.updated_count += 1
        self.synced_items.append(key)

    def record_failure(self, index: int, key: Optional[str], error: str) -> None:
        self.failure_count += 1
        self.errors.append(SyncItemError(index=index, item=key, error=error))

    @property
    def failed_indexes(self) -> FrozenSet[int]:
        return frozenset(e.index for e in self.errors)


class SyncFromERPResult(BaseModel):
    """Raw external records fetched by ``sync_from_erp``."""
    entity_type: EntityType
    records: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.records)


# =============================================================================
# Abstract Connector Interface
# =============================================================================

class ERPConnector(ABC):
    """Abstract base class for ERP connectors.

    Subclasses set ``provider_name`` and ``acl`` and override the raw
    capability hooks they support:

    - ``fetch_raw`` for reads
    - ``_create_external`` / ``_update_external`` / ``_exists_external``
      for writes and outbound sync

    Implementations:
    - connectors/sap/sap_connector.py
    - connectors/oracle/oracle_connector.py
    - connectors/synthetic/synthetic_connector.py
    """

    provider_name: str = ""
    acl: AntiCorruptionLayer
    writable_entities: FrozenSet[EntityType] = frozenset({
        EntityType.VENDORS,
        EntityType.INSPECTIONS,
        EntityType.PURCHASE_ORDERS,
    })

    def __init__(
        self,
        config: ERPProviderConfig,
        cache: Optional[CacheBackend] = None,
        http_client: Optional[Any] = None,
    ):
        """Initialize connector.

        Args:
            config: Resolved provider configuration
            cache: Shared TTL cache for read calls (None disables caching)
            http_client: Transport with ``request()``/``close()``; defaults to
                an ``ERPHttpClient`` on ``config.base_url``
        """
        self.config = config
        self.cache = cache
        self.http_client = http_client or ERPHttpClient(
            config.base_url,
            timeout_seconds=config.timeout_seconds or 30.0,
        )
        self.retry_policy = RetryPolicy(
            retry_attempts=config.retry_attempts if config.retry_attempts is not None else 3,
            delay_seconds=config.retry_delay_seconds if config.retry_delay_seconds is not None else 1.0,
            backoff=config.retry_backoff or 1.0,
        )

    def _not_implemented(self, operation: str) -> CapabilityNotImplementedError:
        return CapabilityNotImplementedError(
            f"{operation} not implemented for {self.provider_name or type(self).__name__}"
        )

    # =========================================================================
    # Connection Management
    # =========================================================================

    async def authenticate(self) -> Optional[AuthToken]:
        """Obtain (or reuse) credentials for the ERP."""
        raise self._not_implemented("authenticate")

    async def test_connection(self) -> bool:
        """Check the ERP accepts our credentials.

        Returns:
            True if authentication succeeded
        """
        try:
            await self.authenticate()
            return True
        except ERPError as e:
            logger.warning(f"{self.provider_name} connection test failed: {e}")
            return False

    async def close(self) -> None:
        await self.http_client.close()

    async def __aenter__(self) -> "ERPConnector":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # =========================================================================
    # Reads (return domain models)
    # =========================================================================

    async def get_inventory(self, params: Optional[Dict[str, Any]] = None) -> List[InventoryItem]:
        return await self._read_domain(EntityType.INVENTORY, params)

    async def get_purchase_orders(self, params: Optional[Dict[str, Any]] = None) -> List[PurchaseOrder]:
        return await self._read_domain(EntityType.PURCHASE_ORDERS, params)

    async def get_vendors(self, params: Optional[Dict[str, Any]] = None) -> List[Supplier]:
        return await self._read_domain(EntityType.VENDORS, params)

    async def get_production_orders(self, params: Optional[Dict[str, Any]] = None) -> List[ProductionOrder]:
        return await self._read_domain(EntityType.PRODUCTION_ORDERS, params)

    async def get_quality_inspections(self, params: Optional[Dict[str, Any]] = None) -> List[Inspection]:
        return await self._read_domain(EntityType.INSPECTIONS, params)

    async def _read_domain(self, entity_type: EntityType, params: Optional[Dict[str, Any]]) -> List[DomainRecord]:
        raw = await self.fetch_raw(entity_type, params or {})
        return self.acl.batch_to_domain(entity_type, raw)

    async def fetch_raw(self, entity_type: EntityType, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        """Fetch external-shaped records.

        Generic params: ``filter``, ``limit``, ``offset``; entity-specific:
        ``status``, ``supplier_code``, ``vendor_type``.
        """
        raise self._not_implemented(f"Reading {entity_type.value}")

    # =========================================================================
    # Writes (accept and return domain models)
    # =========================================================================

    async def create_purchase_order(self, order: PurchaseOrder) -> PurchaseOrder:
        return await self._write_domain(EntityType.PURCHASE_ORDERS, order)

    async def update_purchase_order(self, key: str, order: PurchaseOrder) -> PurchaseOrder:
        return await self._write_domain(EntityType.PURCHASE_ORDERS, order, key)

    async def create_vendor(self, vendor: Supplier) -> Supplier:
        return await self._write_domain(EntityType.VENDORS, vendor)

    async def update_vendor(self, key: str, vendor: Supplier) -> Supplier:
        return await self._write_domain(EntityType.VENDORS, vendor, key)

    async def create_quality_inspection(self, inspection: Inspection) -> Inspection:
        return await self._write_domain(EntityType.INSPECTIONS, inspection)

    async def update_quality_inspection(self, key: str, inspection: Inspection) -> Inspection:
        return await self._write_domain(EntityType.INSPECTIONS, inspection, key)

    async def _write_domain(
        self,
        entity_type: EntityType,
        record: DomainRecord,
        key: Optional[str] = None,
    ) -> DomainRecord:
        self._check_writable(entity_type)
        payload = self.acl.to_external(entity_type, record)
        if key is None:
            response = await self._create_external(entity_type, payload)
        else:
            response = await self._update_external(entity_type, key, payload)
        # Updates commonly answer 204 No Content
        return self.acl.to_domain(entity_type, response or payload)

    def _check_writable(self, entity_type: EntityType) -> None:
        if entity_type not in self.writable_entities:
            raise self._not_implemented(f"Writing {entity_type.value}")

    async def _create_external(self, entity_type: EntityType, payload: Dict[str, Any]) -> Dict[str, Any]:
        raise self._not_implemented(f"Creating {entity_type.value}")

    async def _update_external(self, entity_type: EntityType, key: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        raise self._not_implemented(f"Updating {entity_type.value}")

    async def _exists_external(self, entity_type: EntityType, key: str) -> bool:
        raise self._not_implemented(f"Looking up {entity_type.value}")

    # =========================================================================
    # Bulk Operations
    # =========================================================================

    async def sync_to_erp(self, entity_type: Any, records: List[Dict[str, Any]]) -> SyncToERPResult:
        """Push external-shaped records, creating or updating each one.

        A record whose external key is unknown to the ERP (lookup raises
        ERPNotFoundError) is created; otherwise it is updated. Failures are
        collected per record. Authentication failures abort the batch.
        """
        entity_type = EntityType.parse(entity_type)
        self._check_writable(entity_type)
        result = SyncToERPResult(entity_type=entity_type, total_count=len(records))

        for index, record in enumerate(records):
            key = self.acl.external_key(entity_type, record)
            try:
                if key is not None and await self._exists_external(entity_type, key):
                    await self._update_external(entity_type, key, record)
                    result.record_success(key, created=False)
                else:
                    await self._create_external(entity_type, record)
                    result.record_success(key, created=True)
            except ERPAuthenticationError:
                raise
            except ERPError as e:
                logger.warning(
                    f"Failed to sync {entity_type.value} record {key or index} to {self.provider_name}: {e}"
                )
                result.record_failure(index, key, str(e))

        logger.info(
            f"Synced {result.success_count}/{result.total_count} {entity_type.value} to {self.provider_name}",
            extra_fields={"new_count": result.new_count, "updated_count": result.updated_count},
        )
        return result

    async def sync_from_erp(self, entity_type: Any, params: Optional[Dict[str, Any]] = None) -> SyncFromERPResult:
        """Fetch external-shaped records for inbound reconciliation."""
        entity_type = EntityType.parse(entity_type)
        records = await self.fetch_raw(entity_type, params or {})
        return SyncFromERPResult(entity_type=entity_type, records=records)

    # =========================================================================
    # Shared Request Execution
    # =========================================================================

    def cache_key(self, method: str, endpoint: str, params: Optional[Dict[str, Any]]) -> str:
        """Deterministic key: adapter, method, endpoint and sorted params."""
        serialized = json.dumps(params or {}, sort_keys=True, default=str)
        return f"erp:{self.provider_name}:{method.upper()}:{endpoint}:{serialized}"

    def _caching_applies(self, method: str, options: RequestOptions) -> bool:
        return (
            method in READ_METHODS
            and self.cache is not None
            and bool(self.config.cache_enabled)
            and options.use_cache
        )

    async def execute_request(
        self,
        endpoint: str,
        method: str = "GET",
        payload: Any = None,
        params: Optional[Dict[str, Any]] = None,
        options: Optional[RequestOptions] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """Execute one logical request with caching and retry.

        Args:
            endpoint: Path relative to the provider base URL
            method: HTTP method
            payload: JSON body
            params: Query parameters (part of the cache key)
            options: Per-call overrides
            headers: Extra headers (auth); not part of the cache key

        Returns:
            Decoded response body

        Raises:
            ERPError: The last error once retries are exhausted, or the first
                non-retryable error
        """
        method = method.upper()
        options = options or RequestOptions()
        metrics = get_metrics()

        use_cache = self._caching_applies(method, options)
        key = self.cache_key(method, endpoint, params) if use_cache else None
        if use_cache:
            cached = await self.cache.get(key)
            metrics.record_cache_lookup(self.provider_name, hit=cached is not None)
            if cached is not None:
                logger.debug(f"Cache hit for {method} {endpoint}")
                return cached

        retry_policy = self.retry_policy
        if options.retry_attempts is not None or options.retry_delay_seconds is not None:
            retry_policy = RetryPolicy(
                retry_attempts=options.retry_attempts if options.retry_attempts is not None else retry_policy.retry_attempts,
                delay_seconds=options.retry_delay_seconds if options.retry_delay_seconds is not None else retry_policy.delay_seconds,
                backoff=retry_policy.backoff,
                max_delay=retry_policy.max_delay,
            )
        timeout = options.timeout_seconds or self.config.timeout_seconds or 30.0

        attempt = 0
        while True:
            attempt += 1
            try:
                result = await self._send_with_timeout(method, endpoint, payload, params, headers, timeout)
                break
            except ERPError as e:
                if attempt >= retry_policy.max_attempts or not is_retryable(e):
                    metrics.record_request(self.provider_name, succeeded=False)
                    raise
                delay = retry_policy.get_delay(attempt, e)
                logger.warning(
                    f"{method} {endpoint} failed (attempt {attempt}/{retry_policy.max_attempts}), "
                    f"retrying in {delay}s: {e}"
                )
                metrics.record_retry(self.provider_name)
                await asyncio.sleep(delay)

        metrics.record_request(self.provider_name, succeeded=True)
        if use_cache:
            ttl = options.cache_ttl_seconds
            if ttl is None:
                ttl = self.config.cache_ttl_seconds if self.config.cache_ttl_seconds is not None else 300
            await self.cache.set(key, result, ttl)
        return result

    async def _send_with_timeout(
        self,
        method: str,
        endpoint: str,
        payload: Any,
        params: Optional[Dict[str, Any]],
        headers: Optional[Dict[str, str]],
        timeout: float,
    ) -> Any:
        try:
            return await asyncio.wait_for(
                self.http_client.request(
                    method,
                    endpoint,
                    params=params,
                    json=payload,
                    headers=headers,
                    timeout=timeout,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise ERPTimeoutError(f"{method} {endpoint} timed out after {timeout}s") from e


# =============================================================================
# Token-Authenticated Connectors (SAP, Oracle)
# =============================================================================

class AuthenticatedERPConnector(ERPConnector):
    """Connector with a token lifecycle and a REST-style resource layout.

    Subclasses provide the credential exchange, the auth headers, and the
    query dialect:

    - ``_exchange_credentials()`` -> AuthToken
    - ``_auth_headers(token)`` -> headers
    - ``_build_query(entity_type, params)`` -> query params
    - ``_unwrap_items(entity_type, data)`` -> list of external records
    - ``_record_path(entity_type, key)`` -> single-resource path
    """

    update_method: str = "PATCH"

    def __init__(
        self,
        config: ERPProviderConfig,
        cache: Optional[CacheBackend] = None,
        http_client: Optional[Any] = None,
        clock=None,
    ):
        super().__init__(config, cache=cache, http_client=http_client)
        self.token_manager = TokenManager(
            exchange=self._counted_exchange,
            provider=self.provider_name,
            clock=clock,
        )

    async def _counted_exchange(self) -> AuthToken:
        token = await self._exchange_credentials()
        get_metrics().record_auth_exchange(self.provider_name)
        return token

    @abstractmethod
    async def _exchange_credentials(self) -> AuthToken:
        """Run the provider's credential exchange."""
        pass

    @abstractmethod
    def _auth_headers(self, token: AuthToken) -> Dict[str, str]:
        pass

    @abstractmethod
    def _build_query(self, entity_type: EntityType, params: Dict[str, Any]) -> Dict[str, Any]:
        pass

    @abstractmethod
    def _unwrap_items(self, entity_type: EntityType, data: Any) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def _record_path(self, entity_type: EntityType, key: str) -> str:
        pass

    def _endpoint(self, entity_type: EntityType) -> str:
        try:
            return self.config.endpoint(entity_type.value)
        except KeyError:
            raise self._not_implemented(f"Reading {entity_type.value}")

    async def authenticate(self) -> AuthToken:
        return await self.token_manager.get_token()

    async def authorized_request(
        self,
        endpoint: str,
        method: str = "GET",
        payload: Any = None,
        params: Optional[Dict[str, Any]] = None,
        options: Optional[RequestOptions] = None,
    ) -> Any:
        """Execute a request with a valid token.

        A 401/403 invalidates the token; the request is retried once after
        re-authenticating. A second rejection drops the token and propagates.
        """
        token = await self.token_manager.get_token()
        try:
            return await self.execute_request(
                endpoint, method, payload, params, options, headers=self._auth_headers(token)
            )
        except ERPAuthenticationError:
            logger.warning(f"{self.provider_name} rejected token for {method} {endpoint}, re-authenticating")
            token = await self.token_manager.refresh(stale=token)
            try:
                return await self.execute_request(
                    endpoint, method, payload, params, options, headers=self._auth_headers(token)
                )
            except ERPAuthenticationError:
                self.token_manager.invalidate()
                raise

    async def fetch_raw(self, entity_type: EntityType, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        endpoint = self._endpoint(entity_type)
        data = await self.authorized_request(endpoint, "GET", params=self._build_query(entity_type, params))
        return self._unwrap_items(entity_type, data)

    async def _create_external(self, entity_type: EntityType, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.authorized_request(self._endpoint(entity_type), "POST", payload=payload)

    async def _update_external(self, entity_type: EntityType, key: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self.authorized_request(
            self._record_path(entity_type, key), self.update_method, payload=payload
        )

    async def _exists_external(self, entity_type: EntityType, key: str) -> bool:
        try:
            await self.authorized_request(
                self._record_path(entity_type, key), "GET", options=RequestOptions(use_cache=False)
            )
            return True
        except ERPNotFoundError:
            return False


# =============================================================================
# Connector Factory
# =============================================================================

_connector_registry: Dict[str, Type[ERPConnector]] = {}


def register_connector(provider: str):
    """Decorator to register a connector implementation."""
    def decorator(cls):
        _connector_registry[provider] = cls
        return cls
    return decorator


def create_connector(
    config: ERPProviderConfig,
    cache: Optional[CacheBackend] = None,
    http_client: Optional[Any] = None,
) -> ERPConnector:
    """Create a connector instance from configuration.

    Args:
        config: Resolved provider config (``provider`` selects the class)
        cache: Shared TTL cache
        http_client: Optional transport override

    Returns:
        Configured connector instance

    Raises:
        ValueError: If the provider is not registered
    """
    provider = config.provider.lower()

    if provider not in _connector_registry:
        available = list(_connector_registry.keys())
        raise ValueError(
            f"Unknown connector type: {provider}. "
            f"Available: {available}"
        )

    return _connector_registry[provider](config, cache=cache, http_client=http_client)


def list_available_connectors() -> List[str]:
    """List all registered connector types."""
    return list(_connector_registry.keys())
