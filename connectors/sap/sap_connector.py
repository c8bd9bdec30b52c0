"""SAP Business One connector.

Implements ERPConnector against the SAP Business One Service Layer.

Authentication: POST /b1s/v1/Login with CompanyDB/UserName/Password returns
a SessionId, sent back as the ``B1SESSION`` cookie. Sessions time out after
``session_timeout_minutes`` (30 by default) of the Service Layer config.

Query dialect (OData v4):
- ``$select``: every field of the SAP model for the entity
- ``$filter``: caller ``filter`` plus entity filters joined with `` and ``
  (vendors default to ``CardType eq 'S'``)
- ``$top`` / ``$skip`` from ``limit`` / ``offset``
- Results are under ``value``; single records live at ``Entity('key')``
  or ``Entity(123)``; updates use PATCH
"""

from typing import Any, Dict, List

from connectors.auth import AuthToken
from connectors.erp_base import AuthenticatedERPConnector, register_connector
from connectors.errors import ERPAuthenticationError
from connectors.sap.sap_mappers import (
    INSPECTION_STATUS,
    PRODUCTION_ORDER_STATUS,
    PURCHASE_ORDER_STATUS,
    SAP_ACL,
    SOURCE_SYSTEM,
)
from connectors.sap.sap_models import (
    SAPBusinessPartner,
    SAPItem,
    SAPProductionOrder,
    SAPPurchaseOrder,
    SAPQualityInspection,
    select_fields,
)
from core.models.domain import EntityType
from core.observability.logging import get_logger

logger = get_logger(__name__)


SELECT_FIELDS: Dict[EntityType, str] = {
    EntityType.VENDORS: select_fields(SAPBusinessPartner),
    EntityType.INVENTORY: select_fields(SAPItem),
    EntityType.PURCHASE_ORDERS: select_fields(SAPPurchaseOrder),
    EntityType.INSPECTIONS: select_fields(SAPQualityInspection),
    EntityType.PRODUCTION_ORDERS: select_fields(SAPProductionOrder),
}

# Supplier-code filter field per entity
SUPPLIER_FIELDS: Dict[EntityType, str] = {
    EntityType.VENDORS: "CardCode",
    EntityType.INVENTORY: "Mainsupplier",
    EntityType.PURCHASE_ORDERS: "CardCode",
    EntityType.INSPECTIONS: "U_VendorCode",
}

# (status field, code table) per entity
STATUS_FIELDS = {
    EntityType.PURCHASE_ORDERS: ("DocumentStatus", PURCHASE_ORDER_STATUS),
    EntityType.INSPECTIONS: ("U_Status", INSPECTION_STATUS),
    EntityType.PRODUCTION_ORDERS: ("ProductionOrderStatus", PRODUCTION_ORDER_STATUS),
}

# Entities keyed by a string code rather than a numeric DocEntry
STRING_KEYED = frozenset({EntityType.VENDORS, EntityType.INVENTORY})


def odata_literal(value: Any) -> str:
    """Quote a value for an OData filter expression."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return "'" + str(value).replace("'", "''") + "'"


@register_connector("sap")
class SAPConnector(AuthenticatedERPConnector):
    """SAP Business One Service Layer connector.

    Usage:
        config = load_settings().get_provider_config("sap")
        async with SAPConnector(config, cache=InMemoryCache()) as sap:
            vendors = await sap.get_vendors({"limit": 50})
    """

    provider_name = SOURCE_SYSTEM
    acl = SAP_ACL
    update_method = "PATCH"

    # =========================================================================
    # Authentication
    # =========================================================================

    async def _exchange_credentials(self) -> AuthToken:
        credentials = self.config.credentials
        data = await self.http_client.request(
            "POST",
            self.config.endpoint("login"),
            json={
                "CompanyDB": credentials.get("company_db", ""),
                "UserName": credentials.get("username", ""),
                "Password": credentials.get("password", ""),
            },
            timeout=self.config.timeout_seconds,
        )
        session_id = data.get("SessionId") if isinstance(data, dict) else None
        if not session_id:
            raise ERPAuthenticationError("SAP login response did not contain a SessionId")

        timeout_minutes = data.get("SessionTimeout") or self.config.custom_settings.get("session_timeout_minutes", 30)
        logger.info(f"SAP session established for company {credentials.get('company_db')}")
        return AuthToken.from_lifetime(
            session_id,
            lifetime_seconds=float(timeout_minutes) * 60,
            now=self.token_manager.now(),
            token_type="B1SESSION",
        )

    def _auth_headers(self, token: AuthToken) -> Dict[str, str]:
        return {"Cookie": f"B1SESSION={token.token}"}

    # =========================================================================
    # Query Dialect
    # =========================================================================

    def _build_query(self, entity_type: EntityType, params: Dict[str, Any]) -> Dict[str, Any]:
        clauses: List[str] = []
        if params.get("filter"):
            clauses.append(f"({params['filter']})")

        if entity_type == EntityType.VENDORS:
            clauses.append(f"CardType eq {odata_literal(params.get('vendor_type') or 'S')}")

        supplier_code = params.get("supplier_code")
        if supplier_code and entity_type in SUPPLIER_FIELDS:
            clauses.append(f"{SUPPLIER_FIELDS[entity_type]} eq {odata_literal(supplier_code)}")

        status = params.get("status")
        if status and entity_type in STATUS_FIELDS:
            field_name, table = STATUS_FIELDS[entity_type]
            clauses.append(f"{field_name} eq {odata_literal(table.to_external(status))}")

        query: Dict[str, Any] = {"$select": SELECT_FIELDS[entity_type]}
        if clauses:
            query["$filter"] = " and ".join(clauses)
        if params.get("limit") is not None:
            query["$top"] = int(params["limit"])
        if params.get("offset"):
            query["$skip"] = int(params["offset"])
        return query

    def _unwrap_items(self, entity_type: EntityType, data: Any) -> List[Dict[str, Any]]:
        if isinstance(data, dict):
            return list(data.get("value") or [])
        return []

    def _record_path(self, entity_type: EntityType, key: str) -> str:
        endpoint = self._endpoint(entity_type)
        if entity_type in STRING_KEYED or not str(key).isdigit():
            return f"{endpoint}({odata_literal(key)})"
        return f"{endpoint}({key})"

    async def logout(self) -> None:
        """End the Service Layer session if one is open."""
        token = self.token_manager.token
        if token is None:
            return
        await self.http_client.request(
            "POST",
            self.config.endpoint("logout"),
            headers=self._auth_headers(token),
        )
        self.token_manager.invalidate()

