"""ERP Connectors - Pluggable ERP system integrations.

This package contains the provider-agnostic connector contract and the
concrete adapters (SAP Business One, Oracle ERP Cloud, synthetic).

Domain models are ERP-neutral. This package handles:
- ERP-specific authentication and token lifecycle
- Query dialects (OData, Oracle REST ``q``)
- Data transformation through each adapter's Anti-Corruption Layer
- Read caching, retry and timeouts

Key Design Principle:
- The sync orchestrator depends ONLY on the ERPConnector interface
- Reads return domain models; bulk operations exchange external dicts
  understood only by the adapter's ACL
- No SAP/Oracle-specific types leak through the interface

To add a new ERP:
1. Create a new folder (e.g., dynamics/)
2. Implement ERPConnector (or AuthenticatedERPConnector)
3. Register using @register_connector decorator
4. Import the package below so registration runs
"""

from connectors.erp_base import (
    # Core interface
    ERPConnector,
    AuthenticatedERPConnector,
    RetryPolicy,
    RequestOptions,

    # Bulk results
    SyncItemError,
    SyncToERPResult,
    SyncFromERPResult,

    # Factory functions
    create_connector,
    register_connector,
    list_available_connectors,
)
from connectors.acl import AntiCorruptionLayer, CodeTable, EntityMapper
from connectors.auth import AuthState, AuthToken, TokenManager
from connectors.errors import (
    ERPError,
    ERPNetworkError,
    ERPTimeoutError,
    ERPServerError,
    ERPRateLimitError,
    ERPClientError,
    ERPNotFoundError,
    ERPAuthenticationError,
    TranslationError,
    CapabilityNotImplementedError,
    UnsupportedEntityTypeError,
    is_retryable,
)

# Adapter packages register themselves on import
from connectors.sap import SAPConnector
from connectors.oracle import OracleConnector
from connectors.synthetic import SyntheticConnector

__all__ = [
    # Core interface
    "ERPConnector",
    "AuthenticatedERPConnector",
    "RetryPolicy",
    "RequestOptions",

    # Bulk results
    "SyncItemError",
    "SyncToERPResult",
    "SyncFromERPResult",

    # Anti-corruption layer
    "AntiCorruptionLayer",
    "CodeTable",
    "EntityMapper",

    # Authentication
    "AuthState",
    "AuthToken",
    "TokenManager",

    # Errors
    "ERPError",
    "ERPNetworkError",
    "ERPTimeoutError",
    "ERPServerError",
    "ERPRateLimitError",
    "ERPClientError",
    "ERPNotFoundError",
    "ERPAuthenticationError",
    "TranslationError",
    "CapabilityNotImplementedError",
    "UnsupportedEntityTypeError",
    "is_retryable",

    # Adapters
    "SAPConnector",
    "OracleConnector",
    "SyntheticConnector",

    # Factory
    "create_connector",
    "register_connector",
    "list_available_connectors",
]
