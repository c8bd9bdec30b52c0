"""Domain models for ERP-synchronised entities.

These are the canonical shapes the rest of the application works with.
Provider-specific shapes never leave the connector/ACL boundary; every
adapter translates into and out of these models.

Absent-field policy: every optional business field has an explicit default
declared here (``None`` for free text, ``0`` for quantities, the documented
enum member for status codes). Mappers drop absent source values so that
these defaults apply instead of silently omitting fields.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from core.models.values import DateValue, DecimalValue, IntValue


# =============================================================================
# Entity Types
# =============================================================================

class UnsupportedEntityTypeError(ValueError):
    """Raised when an entity type name is not one of the synchronised types."""
    pass


class EntityType(str, Enum):
    """Entity types exchanged with ERP systems."""
    VENDORS = "vendors"
    INSPECTIONS = "inspections"
    PURCHASE_ORDERS = "purchase_orders"
    INVENTORY = "inventory"
    PRODUCTION_ORDERS = "production_orders"

    @classmethod
    def parse(cls, value: Any) -> "EntityType":
        """Resolve an entity type from its value or a legacy alias.

        Raises:
            UnsupportedEntityTypeError: If the name is unknown
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            if value in _ENTITY_ALIASES:
                return _ENTITY_ALIASES[value]
            try:
                return cls(value)
            except ValueError:
                pass
        raise UnsupportedEntityTypeError(f"Unsupported entity type: {value!r}")


_ENTITY_ALIASES: Dict[str, EntityType] = {
    "suppliers": EntityType.VENDORS,
    "vendor": EntityType.VENDORS,
    "qualityInspections": EntityType.INSPECTIONS,
    "quality_inspections": EntityType.INSPECTIONS,
    "purchaseOrders": EntityType.PURCHASE_ORDERS,
    "productionOrders": EntityType.PRODUCTION_ORDERS,
    "workOrders": EntityType.PRODUCTION_ORDERS,
}


# =============================================================================
# Code Enumerations
# =============================================================================

class SupplierStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class SupplierType(str, Enum):
    MANUFACTURER = "manufacturer"
    DISTRIBUTOR = "distributor"
    SERVICE = "service"


class InspectionType(str, Enum):
    INCOMING = "incoming"
    IN_PROCESS = "in_process"
    FINAL = "final"
    SUPPLIER = "supplier"


class InspectionStatus(str, Enum):
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InspectionResult(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    PENDING = "pending"


class PurchaseOrderStatus(str, Enum):
    DRAFT = "draft"
    OPEN = "open"
    APPROVED = "approved"
    RECEIVED = "received"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class ProductionOrderStatus(str, Enum):
    PLANNED = "planned"
    RELEASED = "released"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CLOSED = "closed"
    CANCELLED = "cancelled"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# =============================================================================
# Base Record
# =============================================================================

SYNC_METADATA_FIELDS: FrozenSet[str] = frozenset({
    "id",
    "source_system",
    "source_id",
    "last_synced_at",
    "erp_synced",
})


class DomainRecord(BaseModel):
    """Base for all synchronised domain records.

    ``(source_system, source_id)`` identifies the external counterpart once
    set. ``code_field`` names the business key used for matching.
    """

    model_config = ConfigDict(populate_by_name=True)

    entity_type: ClassVar[EntityType]
    code_field: ClassVar[str]

    id: Optional[str] = None
    source_system: Optional[str] = None
    source_id: Optional[str] = None
    last_synced_at: Optional[datetime] = None
    erp_synced: bool = False

    @property
    def business_code(self) -> Optional[str]:
        return getattr(self, self.code_field)

    def business_fields(self) -> Dict[str, Any]:
        """Populated fields excluding sync metadata."""
        return self.model_dump(exclude=set(SYNC_METADATA_FIELDS), exclude_none=True)

    def identifier(self) -> str:
        """Best human-readable identifier for error reports."""
        return self.id or self.business_code or self.source_id or "<unidentified>"


# =============================================================================
# Vendors / Suppliers
# =============================================================================

class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class Supplier(DomainRecord):
    """A vendor that supplies goods or services."""
    entity_type: ClassVar[EntityType] = EntityType.VENDORS
    code_field: ClassVar[str] = "code"

    code: Optional[str] = None
    name: Optional[str] = None
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    mobile_phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[Address] = None
    supplier_type: Optional[SupplierType] = None
    status: SupplierStatus = SupplierStatus.ACTIVE
    tax_id: Optional[str] = None
    payment_terms: Optional[str] = None
    notes: Optional[str] = None


# =============================================================================
# Quality Inspections
# =============================================================================

class Inspection(DomainRecord):
    """A quality inspection of received, in-process or finished goods."""
    entity_type: ClassVar[EntityType] = EntityType.INSPECTIONS
    code_field: ClassVar[str] = "inspection_number"

    inspection_number: Optional[str] = None
    inspection_type: InspectionType = InspectionType.INCOMING
    item_code: Optional[str] = None
    item_description: Optional[str] = None
    supplier_code: Optional[str] = None
    inspector: Optional[str] = None
    inspection_date: DateValue = None
    status: InspectionStatus = InspectionStatus.DRAFT
    result: InspectionResult = InspectionResult.PENDING
    quantity: IntValue = 0
    sample_size: IntValue = 0
    defect_count: IntValue = 0
    notes: Optional[str] = None


# =============================================================================
# Purchase Orders
# =============================================================================

class PurchaseOrderLine(BaseModel):
    item_code: Optional[str] = None
    description: Optional[str] = None
    quantity: DecimalValue = Decimal("0")
    unit_price: DecimalValue = Decimal("0")

    @property
    def line_total(self) -> Decimal:
        return (self.quantity or Decimal("0")) * (self.unit_price or Decimal("0"))


class PurchaseOrder(DomainRecord):
    """A purchase order issued to a supplier."""
    entity_type: ClassVar[EntityType] = EntityType.PURCHASE_ORDERS
    code_field: ClassVar[str] = "order_number"

    order_number: Optional[str] = None
    supplier_code: Optional[str] = None
    supplier_name: Optional[str] = None
    order_date: DateValue = None
    due_date: DateValue = None
    status: PurchaseOrderStatus = PurchaseOrderStatus.DRAFT
    currency: Optional[str] = None
    notes: Optional[str] = None
    lines: List[PurchaseOrderLine] = Field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))


# =============================================================================
# Inventory
# =============================================================================

class InventoryItem(DomainRecord):
    """Stock position of a single item."""
    entity_type: ClassVar[EntityType] = EntityType.INVENTORY
    code_field: ClassVar[str] = "item_code"

    item_code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    unit_of_measure: Optional[str] = None
    quantity_on_hand: DecimalValue = Decimal("0")
    quantity_on_order: DecimalValue = Decimal("0")
    quantity_committed: DecimalValue = Decimal("0")
    reorder_point: DecimalValue = Decimal("0")
    unit_cost: DecimalValue = None
    supplier_code: Optional[str] = None
    location: Optional[str] = None


# =============================================================================
# Production Orders
# =============================================================================

class ProductionOrder(DomainRecord):
    """A work order producing a quantity of an item."""
    entity_type: ClassVar[EntityType] = EntityType.PRODUCTION_ORDERS
    code_field: ClassVar[str] = "order_number"

    order_number: Optional[str] = None
    item_code: Optional[str] = None
    item_description: Optional[str] = None
    planned_quantity: DecimalValue = Decimal("0")
    status: ProductionOrderStatus = ProductionOrderStatus.PLANNED
    priority: Priority = Priority.MEDIUM
    start_date: DateValue = None
    due_date: DateValue = None
    location: Optional[str] = None
    notes: Optional[str] = None


DOMAIN_MODELS: Dict[EntityType, Type[DomainRecord]] = {
    EntityType.VENDORS: Supplier,
    EntityType.INSPECTIONS: Inspection,
    EntityType.PURCHASE_ORDERS: PurchaseOrder,
    EntityType.INVENTORY: InventoryItem,
    EntityType.PRODUCTION_ORDERS: ProductionOrder,
}


def model_for(entity_type: Any) -> Type[DomainRecord]:
    """Get the domain model class for an entity type (or alias)."""
    return DOMAIN_MODELS[EntityType.parse(entity_type)]
