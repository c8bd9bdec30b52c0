"""SAP Business One Connector Package.

Implements the ERPConnector interface for the SAP Business One Service Layer.
"""

from connectors.sap.sap_connector import SAPConnector
from connectors.sap.sap_mappers import SAP_ACL
from connectors.sap.sap_models import (
    SAPBusinessPartner,
    SAPItem,
    SAPPurchaseOrder,
    SAPDocumentLine,
    SAPQualityInspection,
    SAPProductionOrder,
)

__all__ = [
    # Connector
    "SAPConnector",
    # Anti-corruption layer
    "SAP_ACL",
    # Models
    "SAPBusinessPartner",
    "SAPItem",
    "SAPPurchaseOrder",
    "SAPDocumentLine",
    "SAPQualityInspection",
    "SAPProductionOrder",
]
