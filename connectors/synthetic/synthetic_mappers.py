"""Synthetic <-> domain mappers.

The synthetic dialect keys every record by its business code, so the
translated ``source_id`` is that code (vendor ``SUP0001`` has source id
``SUP0001``).
"""

from typing import Any, Dict

from connectors.acl import AntiCorruptionLayer, CodeTable, EntityMapper, key_str, present
from connectors.synthetic.synthetic_models import (
    SyntheticAddress,
    SyntheticInspection,
    SyntheticInventoryItem,
    SyntheticOrderItem,
    SyntheticProductionOrder,
    SyntheticPurchaseOrder,
    SyntheticVendor,
)
from core.models.domain import (
    Address,
    EntityType,
    Inspection,
    InspectionResult,
    InspectionStatus,
    InspectionType,
    InventoryItem,
    Priority,
    ProductionOrder,
    ProductionOrderStatus,
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
    Supplier,
    SupplierStatus,
    SupplierType,
)

SOURCE_SYSTEM = "synthetic"


# =============================================================================
# Code Tables
# =============================================================================

VENDOR_STATUS = CodeTable(
    "synthetic.vendor_status",
    SupplierStatus,
    {
        SupplierStatus.ACTIVE: "active",
        SupplierStatus.INACTIVE: "inactive",
        SupplierStatus.PENDING: "pending",
    },
    default=SupplierStatus.ACTIVE,
)

VENDOR_TYPE = CodeTable(
    "synthetic.vendor_type",
    SupplierType,
    {
        SupplierType.MANUFACTURER: "manufacturer",
        SupplierType.DISTRIBUTOR: "distributor",
        SupplierType.SERVICE: "service",
    },
    default=None,
)

INSPECTION_TYPE = CodeTable(
    "synthetic.inspection_type",
    InspectionType,
    {
        InspectionType.INCOMING: "incoming",
        InspectionType.IN_PROCESS: "in-process",
        InspectionType.FINAL: "final",
        InspectionType.SUPPLIER: "supplier",
    },
    default=InspectionType.INCOMING,
)

INSPECTION_STATUS = CodeTable(
    "synthetic.inspection_status",
    InspectionStatus,
    {
        InspectionStatus.DRAFT: "draft",
        InspectionStatus.IN_PROGRESS: "in_progress",
        InspectionStatus.COMPLETED: "completed",
        InspectionStatus.CANCELLED: "cancelled",
    },
    default=InspectionStatus.DRAFT,
)

INSPECTION_RESULT = CodeTable(
    "synthetic.inspection_result",
    InspectionResult,
    {
        InspectionResult.PASSED: "passed",
        InspectionResult.FAILED: "failed",
        InspectionResult.PENDING: "pending",
    },
    default=InspectionResult.PENDING,
)

# Open orders are "submitted" in the synthetic vocabulary
PURCHASE_ORDER_STATUS = CodeTable(
    "synthetic.purchase_order_status",
    PurchaseOrderStatus,
    {
        PurchaseOrderStatus.DRAFT: "draft",
        PurchaseOrderStatus.OPEN: "submitted",
        PurchaseOrderStatus.APPROVED: "approved",
        PurchaseOrderStatus.RECEIVED: "received",
        PurchaseOrderStatus.CLOSED: "closed",
        PurchaseOrderStatus.CANCELLED: "cancelled",
    },
    default=PurchaseOrderStatus.DRAFT,
)

PRODUCTION_ORDER_STATUS = CodeTable(
    "synthetic.production_order_status",
    ProductionOrderStatus,
    {
        ProductionOrderStatus.PLANNED: "planned",
        ProductionOrderStatus.RELEASED: "released",
        ProductionOrderStatus.IN_PROGRESS: "in_progress",
        ProductionOrderStatus.COMPLETED: "completed",
        ProductionOrderStatus.CLOSED: "closed",
        ProductionOrderStatus.CANCELLED: "cancelled",
    },
    default=ProductionOrderStatus.PLANNED,
)

PRIORITY = CodeTable(
    "synthetic.priority",
    Priority,
    {
        Priority.LOW: "low",
        Priority.MEDIUM: "medium",
        Priority.HIGH: "high",
        Priority.URGENT: "urgent",
    },
    default=Priority.MEDIUM,
)


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(by_alias=True, exclude_none=True)


# =============================================================================
# Vendors
# =============================================================================

def vendor_to_domain(raw: Dict[str, Any]) -> Supplier:
    vendor = SyntheticVendor.model_validate(raw)
    address = None
    if vendor.address is not None:
        fields = present(
            street=vendor.address.street,
            city=vendor.address.city,
            state=vendor.address.state,
            zip_code=vendor.address.zipCode,
            country=vendor.address.country,
        )
        address = Address(**fields) if fields else None

    return Supplier(**present(
        code=vendor.code,
        name=vendor.name,
        contact_person=vendor.contactName,
        email=vendor.email,
        phone=vendor.phone,
        mobile_phone=vendor.mobilePhone,
        website=vendor.website,
        address=address,
        supplier_type=VENDOR_TYPE.to_domain(vendor.type),
        status=VENDOR_STATUS.to_domain(vendor.status),
        tax_id=vendor.taxId,
        payment_terms=vendor.paymentTerms,
        notes=vendor.notes,
        source_system=SOURCE_SYSTEM,
        source_id=vendor.code,
    ))


def vendor_to_external(supplier: Supplier) -> Dict[str, Any]:
    address = None
    if supplier.address is not None:
        address = SyntheticAddress(
            street=supplier.address.street,
            city=supplier.address.city,
            state=supplier.address.state,
            zipCode=supplier.address.zip_code,
            country=supplier.address.country,
        )
    return _dump(SyntheticVendor(
        code=supplier.code,
        name=supplier.name,
        contactName=supplier.contact_person,
        email=supplier.email,
        phone=supplier.phone,
        mobilePhone=supplier.mobile_phone,
        address=address,
        website=supplier.website,
        type=VENDOR_TYPE.to_external(supplier.supplier_type),
        status=VENDOR_STATUS.to_external(supplier.status),
        taxId=supplier.tax_id,
        paymentTerms=supplier.payment_terms,
        notes=supplier.notes,
    ))


# =============================================================================
# Inventory
# =============================================================================

def inventory_to_domain(raw: Dict[str, Any]) -> InventoryItem:
    item = SyntheticInventoryItem.model_validate(raw)
    return InventoryItem(**present(
        item_code=item.itemCode,
        name=item.name,
        description=item.description,
        category=item.category,
        unit_of_measure=item.uom,
        quantity_on_hand=item.quantity,
        quantity_on_order=item.onOrder,
        quantity_committed=item.committed,
        reorder_point=item.reorderPoint,
        unit_cost=item.unitCost,
        supplier_code=item.supplier,
        location=item.location,
        source_system=SOURCE_SYSTEM,
        source_id=item.itemCode,
    ))


def inventory_to_external(item: InventoryItem) -> Dict[str, Any]:
    return _dump(SyntheticInventoryItem(
        itemCode=item.item_code,
        name=item.name,
        description=item.description,
        category=item.category,
        uom=item.unit_of_measure,
        quantity=item.quantity_on_hand,
        onOrder=item.quantity_on_order,
        committed=item.quantity_committed,
        reorderPoint=item.reorder_point,
        unitCost=item.unit_cost,
        supplier=item.supplier_code,
        location=item.location,
    ))


# =============================================================================
# Purchase Orders
# =============================================================================

def purchase_order_to_domain(raw: Dict[str, Any]) -> PurchaseOrder:
    po = SyntheticPurchaseOrder.model_validate(raw)
    lines = [
        PurchaseOrderLine(**present(
            item_code=item.itemCode,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unitPrice,
        ))
        for item in po.items or []
    ]
    return PurchaseOrder(**present(
        order_number=po.poNumber,
        supplier_code=po.vendor,
        supplier_name=po.vendorName,
        order_date=po.date,
        due_date=po.dueDate,
        status=PURCHASE_ORDER_STATUS.to_domain(po.status),
        currency=po.currency,
        notes=po.notes,
        lines=lines,
        source_system=SOURCE_SYSTEM,
        source_id=po.poNumber,
    ))


def purchase_order_to_external(order: PurchaseOrder) -> Dict[str, Any]:
    return _dump(SyntheticPurchaseOrder(
        poNumber=order.order_number,
        vendor=order.supplier_code,
        vendorName=order.supplier_name,
        date=order.order_date,
        dueDate=order.due_date,
        status=PURCHASE_ORDER_STATUS.to_external(order.status),
        total=order.total,
        currency=order.currency,
        notes=order.notes,
        items=[
            SyntheticOrderItem(
                itemCode=line.item_code,
                description=line.description,
                quantity=line.quantity,
                unitPrice=line.unit_price,
                totalPrice=line.line_total,
            )
            for line in order.lines
        ],
    ))


# =============================================================================
# Quality Inspections
# =============================================================================

def inspection_to_domain(raw: Dict[str, Any]) -> Inspection:
    row = SyntheticInspection.model_validate(raw)
    return Inspection(**present(
        inspection_number=row.inspectionNumber,
        inspection_type=INSPECTION_TYPE.to_domain(row.type),
        item_code=row.itemCode,
        item_description=row.itemDescription,
        supplier_code=row.supplierCode,
        inspector=row.inspector,
        inspection_date=row.date,
        status=INSPECTION_STATUS.to_domain(row.status),
        result=INSPECTION_RESULT.to_domain(row.result),
        quantity=row.quantity,
        sample_size=row.sampleSize,
        defect_count=row.defects,
        notes=row.notes,
        source_system=SOURCE_SYSTEM,
        source_id=row.inspectionNumber,
    ))


def inspection_to_external(inspection: Inspection) -> Dict[str, Any]:
    return _dump(SyntheticInspection(
        inspectionNumber=inspection.inspection_number,
        type=INSPECTION_TYPE.to_external(inspection.inspection_type),
        itemCode=inspection.item_code,
        itemDescription=inspection.item_description,
        supplierCode=inspection.supplier_code,
        quantity=inspection.quantity,
        sampleSize=inspection.sample_size,
        inspector=inspection.inspector,
        date=inspection.inspection_date,
        result=INSPECTION_RESULT.to_external(inspection.result),
        status=INSPECTION_STATUS.to_external(inspection.status),
        notes=inspection.notes,
        defects=inspection.defect_count,
    ))


# =============================================================================
# Production Orders
# =============================================================================

def production_order_to_domain(raw: Dict[str, Any]) -> ProductionOrder:
    wo = SyntheticProductionOrder.model_validate(raw)
    return ProductionOrder(**present(
        order_number=wo.orderNumber,
        item_code=wo.itemCode,
        item_description=wo.itemDescription,
        planned_quantity=wo.quantity,
        status=PRODUCTION_ORDER_STATUS.to_domain(wo.status),
        priority=PRIORITY.to_domain(wo.priority),
        start_date=wo.startDate,
        due_date=wo.endDate,
        location=wo.location,
        notes=wo.notes,
        source_system=SOURCE_SYSTEM,
        source_id=wo.orderNumber,
    ))


def production_order_to_external(order: ProductionOrder) -> Dict[str, Any]:
    return _dump(SyntheticProductionOrder(
        orderNumber=order.order_number,
        itemCode=order.item_code,
        itemDescription=order.item_description,
        quantity=order.planned_quantity,
        status=PRODUCTION_ORDER_STATUS.to_external(order.status),
        priority=PRIORITY.to_external(order.priority),
        startDate=order.start_date,
        endDate=order.due_date,
        location=order.location,
        notes=order.notes,
    ))


# External key per entity; the dataset indexes records by these fields
KEY_FIELDS: Dict[EntityType, str] = {
    EntityType.VENDORS: "code",
    EntityType.INVENTORY: "itemCode",
    EntityType.PURCHASE_ORDERS: "poNumber",
    EntityType.INSPECTIONS: "inspectionNumber",
    EntityType.PRODUCTION_ORDERS: "orderNumber",
}


def _key_of(entity_type: EntityType):
    field_name = KEY_FIELDS[entity_type]
    return lambda raw: key_str(raw.get(field_name))


SYNTHETIC_ACL = AntiCorruptionLayer(
    SOURCE_SYSTEM,
    {
        EntityType.VENDORS: EntityMapper(
            vendor_to_domain, vendor_to_external, _key_of(EntityType.VENDORS)
        ),
        EntityType.INVENTORY: EntityMapper(
            inventory_to_domain, inventory_to_external, _key_of(EntityType.INVENTORY)
        ),
        EntityType.PURCHASE_ORDERS: EntityMapper(
            purchase_order_to_domain, purchase_order_to_external, _key_of(EntityType.PURCHASE_ORDERS)
        ),
        EntityType.INSPECTIONS: EntityMapper(
            inspection_to_domain, inspection_to_external, _key_of(EntityType.INSPECTIONS)
        ),
        EntityType.PRODUCTION_ORDERS: EntityMapper(
            production_order_to_domain, production_order_to_external, _key_of(EntityType.PRODUCTION_ORDERS)
        ),
    },
)
