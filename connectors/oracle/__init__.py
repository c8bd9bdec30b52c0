"""Oracle ERP Cloud Connector Package.

Implements the ERPConnector interface for the Oracle Fusion SCM REST API.
"""

from connectors.oracle.oracle_connector import OracleConnector
from connectors.oracle.oracle_mappers import ORACLE_ACL
from connectors.oracle.oracle_models import (
    OracleSupplier,
    OracleAddress,
    OracleContact,
    OracleItem,
    OraclePurchaseOrder,
    OraclePurchaseOrderLine,
    OracleQualityInspection,
    OracleWorkOrder,
)

__all__ = [
    # Connector
    "OracleConnector",
    # Anti-corruption layer
    "ORACLE_ACL",
    # Models
    "OracleSupplier",
    "OracleAddress",
    "OracleContact",
    "OracleItem",
    "OraclePurchaseOrder",
    "OraclePurchaseOrderLine",
    "OracleQualityInspection",
    "OracleWorkOrder",
]
