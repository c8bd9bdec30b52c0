"""Oracle ERP Cloud connector.

Implements ERPConnector against the Oracle Fusion SCM REST API.

Authentication: OAuth2 password grant against ``/auth/oauth2/v1/token`` with
scope ``https://<instance_id>.erp.cloud``. The access token is sent as a
Bearer header and expires after ``expires_in`` seconds.

Query dialect (Oracle REST framework):
- ``q``: caller ``filter`` plus ``Field='value'`` clauses joined with ``;``
- ``limit`` / ``offset`` (defaults 100 / 0)
- ``onlyData=true`` to drop HATEOAS links
- Results are under ``items``; single records live at ``<resource>/<id>``;
  updates use PUT
"""

from typing import Any, Dict, List

from connectors.auth import AuthToken
from connectors.erp_base import AuthenticatedERPConnector, register_connector
from connectors.errors import ERPAuthenticationError
from connectors.oracle.oracle_mappers import (
    INSPECTION_STATUS,
    ORACLE_ACL,
    PURCHASE_ORDER_STATUS,
    SOURCE_SYSTEM,
    SUPPLIER_STATUS,
    WORK_ORDER_STATUS,
)
from core.models.domain import EntityType
from core.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_LIMIT = 100

# Supplier-code filter attribute per resource
SUPPLIER_ATTRIBUTES: Dict[EntityType, str] = {
    EntityType.VENDORS: "supplierNumber",
    EntityType.INVENTORY: "supplierNumber",
    EntityType.PURCHASE_ORDERS: "supplierId",
    EntityType.INSPECTIONS: "supplierNumber",
}

# (status attribute, code table) per resource
STATUS_ATTRIBUTES = {
    EntityType.VENDORS: ("status", SUPPLIER_STATUS),
    EntityType.PURCHASE_ORDERS: ("status", PURCHASE_ORDER_STATUS),
    EntityType.INSPECTIONS: ("status", INSPECTION_STATUS),
    EntityType.PRODUCTION_ORDERS: ("workOrderStatusCode", WORK_ORDER_STATUS),
}


def q_clause(attribute: str, value: Any) -> str:
    """One ``attribute='value'`` term of an Oracle ``q`` expression."""
    return f"{attribute}='{str(value).replace(chr(39), chr(39) * 2)}'"


@register_connector("oracle")
class OracleConnector(AuthenticatedERPConnector):
    """Oracle ERP Cloud REST connector.

    Usage:
        config = load_settings().get_provider_config("oracle")
        async with OracleConnector(config, cache=InMemoryCache()) as oracle:
            suppliers = await oracle.get_vendors({"vendor_type": "MANUFACTURER"})
    """

    provider_name = SOURCE_SYSTEM
    acl = ORACLE_ACL
    update_method = "PUT"

    # =========================================================================
    # Authentication
    # =========================================================================

    async def _exchange_credentials(self) -> AuthToken:
        credentials = self.config.credentials
        instance_id = self.config.custom_settings.get("instance_id", "")
        data = await self.http_client.request(
            "POST",
            self.config.endpoint("token"),
            data={
                "grant_type": "password",
                "client_id": credentials.get("client_id", ""),
                "client_secret": credentials.get("client_secret", ""),
                "username": credentials.get("username", ""),
                "password": credentials.get("password", ""),
                "scope": f"https://{instance_id}.erp.cloud",
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=self.config.timeout_seconds,
        )
        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise ERPAuthenticationError("Oracle token response did not contain an access_token")

        logger.info(f"Oracle access token obtained for instance {instance_id}")
        return AuthToken.from_lifetime(
            access_token,
            lifetime_seconds=float(data.get("expires_in") or 3600),
            now=self.token_manager.now(),
            token_type=data.get("token_type") or "Bearer",
        )

    def _auth_headers(self, token: AuthToken) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token.token}"}

    # =========================================================================
    # Query Dialect
    # =========================================================================

    def _build_query(self, entity_type: EntityType, params: Dict[str, Any]) -> Dict[str, Any]:
        clauses: List[str] = []
        if params.get("filter"):
            clauses.append(str(params["filter"]))

        if entity_type == EntityType.VENDORS and params.get("vendor_type"):
            clauses.append(q_clause("supplierType", params["vendor_type"]))

        supplier_code = params.get("supplier_code")
        if supplier_code and entity_type in SUPPLIER_ATTRIBUTES:
            clauses.append(q_clause(SUPPLIER_ATTRIBUTES[entity_type], supplier_code))

        status = params.get("status")
        if status and entity_type in STATUS_ATTRIBUTES:
            attribute, table = STATUS_ATTRIBUTES[entity_type]
            clauses.append(q_clause(attribute, table.to_external(status)))

        query: Dict[str, Any] = {
            "limit": int(params["limit"]) if params.get("limit") is not None else DEFAULT_LIMIT,
            "offset": int(params.get("offset") or 0),
            "onlyData": "true",
        }
        if clauses:
            query["q"] = ";".join(clauses)
        return query

    def _unwrap_items(self, entity_type: EntityType, data: Any) -> List[Dict[str, Any]]:
        if isinstance(data, dict):
            return list(data.get("items") or [])
        return []

    def _record_path(self, entity_type: EntityType, key: str) -> str:
        return f"{self._endpoint(entity_type)}/{key}"
