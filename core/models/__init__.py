"""Core data models - ERP-neutral domain types.

This package contains the domain entities exchanged with ERP systems.
They are intentionally independent of any specific ERP's field names.
"""

from core.models.values import (
    DecimalValue,
    IntValue,
    DateValue,
    StrValue,
)

from core.models.domain import (
    # Entity types
    EntityType,
    UnsupportedEntityTypeError,
    DOMAIN_MODELS,
    SYNC_METADATA_FIELDS,
    model_for,

    # Base
    DomainRecord,

    # Entities
    Address,
    Supplier,
    Inspection,
    PurchaseOrder,
    PurchaseOrderLine,
    InventoryItem,
    ProductionOrder,

    # Codes
    SupplierStatus,
    SupplierType,
    InspectionType,
    InspectionStatus,
    InspectionResult,
    PurchaseOrderStatus,
    ProductionOrderStatus,
    Priority,
)

__all__ = [
    # Values
    "DecimalValue",
    "IntValue",
    "DateValue",
    "StrValue",

    # Entity types
    "EntityType",
    "UnsupportedEntityTypeError",
    "DOMAIN_MODELS",
    "SYNC_METADATA_FIELDS",
    "model_for",

    # Entities
    "DomainRecord",
    "Address",
    "Supplier",
    "Inspection",
    "PurchaseOrder",
    "PurchaseOrderLine",
    "InventoryItem",
    "ProductionOrder",

    # Codes
    "SupplierStatus",
    "SupplierType",
    "InspectionType",
    "InspectionStatus",
    "InspectionResult",
    "PurchaseOrderStatus",
    "ProductionOrderStatus",
    "Priority",
]
