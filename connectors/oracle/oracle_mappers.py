"""Oracle <-> domain mappers.

Pure functions, one pair per entity type, plus the Oracle code tables.
``ORACLE_ACL`` bundles them for the connector.

Supplier email falls back to the first contact's email when the supplier
record itself carries none.
"""

from typing import Any, Dict, Optional

from connectors.acl import AntiCorruptionLayer, CodeTable, EntityMapper, key_str, present
from connectors.oracle.oracle_models import (
    OracleAddress,
    OracleItem,
    OraclePurchaseOrder,
    OraclePurchaseOrderLine,
    OracleQualityInspection,
    OracleSupplier,
    OracleWorkOrder,
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

SOURCE_SYSTEM = "oracle"


# =============================================================================
# Code Tables
# =============================================================================

SUPPLIER_STATUS = CodeTable(
    "oracle.supplier_status",
    SupplierStatus,
    {
        SupplierStatus.ACTIVE: "ACTIVE",
        SupplierStatus.INACTIVE: "INACTIVE",
        SupplierStatus.PENDING: "PENDING_APPROVAL",
    },
    default=SupplierStatus.PENDING,
    aliases={"Y": SupplierStatus.ACTIVE, "N": SupplierStatus.INACTIVE},
)

SUPPLIER_TYPE = CodeTable(
    "oracle.supplier_type",
    SupplierType,
    {
        SupplierType.MANUFACTURER: "MANUFACTURER",
        SupplierType.DISTRIBUTOR: "DISTRIBUTOR",
        SupplierType.SERVICE: "SERVICES",
    },
    default=None,
)

INSPECTION_TYPE = CodeTable(
    "oracle.inspection_type",
    InspectionType,
    {
        InspectionType.INCOMING: "RECEIVING",
        InspectionType.IN_PROCESS: "IN_PROCESS",
        InspectionType.FINAL: "FINAL",
        InspectionType.SUPPLIER: "SUPPLIER_AUDIT",
    },
    default=InspectionType.INCOMING,
)

INSPECTION_STATUS = CodeTable(
    "oracle.inspection_status",
    InspectionStatus,
    {
        InspectionStatus.DRAFT: "DRAFT",
        InspectionStatus.IN_PROGRESS: "IN_PROGRESS",
        InspectionStatus.COMPLETED: "COMPLETED",
        InspectionStatus.CANCELLED: "CANCELLED",
    },
    default=InspectionStatus.DRAFT,
)

INSPECTION_RESULT = CodeTable(
    "oracle.inspection_result",
    InspectionResult,
    {
        InspectionResult.PASSED: "PASSED",
        InspectionResult.FAILED: "FAILED",
        InspectionResult.PENDING: "PENDING",
    },
    default=InspectionResult.PENDING,
    aliases={"PASS": InspectionResult.PASSED, "FAIL": InspectionResult.FAILED},
)

PURCHASE_ORDER_STATUS = CodeTable(
    "oracle.purchase_order_status",
    PurchaseOrderStatus,
    {
        PurchaseOrderStatus.DRAFT: "DRAFT",
        PurchaseOrderStatus.OPEN: "OPEN",
        PurchaseOrderStatus.APPROVED: "APPROVED",
        PurchaseOrderStatus.RECEIVED: "RECEIVED",
        PurchaseOrderStatus.CLOSED: "CLOSED",
        PurchaseOrderStatus.CANCELLED: "CANCELLED",
    },
    default=PurchaseOrderStatus.DRAFT,
)

WORK_ORDER_STATUS = CodeTable(
    "oracle.work_order_status",
    ProductionOrderStatus,
    {
        ProductionOrderStatus.PLANNED: "UNRELEASED",
        ProductionOrderStatus.RELEASED: "RELEASED",
        ProductionOrderStatus.IN_PROGRESS: "IN_PROCESS",
        ProductionOrderStatus.COMPLETED: "COMPLETED",
        ProductionOrderStatus.CLOSED: "CLOSED",
        ProductionOrderStatus.CANCELLED: "CANCELED",
    },
    default=ProductionOrderStatus.PLANNED,
)

# Oracle ranks 1 (most urgent) to 4
WORK_ORDER_PRIORITY = CodeTable(
    "oracle.work_order_priority",
    Priority,
    {
        Priority.URGENT: 1,
        Priority.HIGH: 2,
        Priority.MEDIUM: 3,
        Priority.LOW: 4,
    },
    default=Priority.MEDIUM,
)


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(by_alias=True, exclude_none=True)


def _own_key(record) -> Optional[str]:
    """External key carried by a record that originated in Oracle."""
    return record.source_id if record.source_system == SOURCE_SYSTEM else None


# =============================================================================
# Suppliers
# =============================================================================

def supplier_to_domain(raw: Dict[str, Any]) -> Supplier:
    supplier = OracleSupplier.model_validate(raw)
    email = supplier.email
    if not email and supplier.contacts:
        email = supplier.contacts[0].email

    address = None
    if supplier.address is not None:
        fields = present(
            street=supplier.address.addressLine1,
            city=supplier.address.city,
            state=supplier.address.state,
            zip_code=supplier.address.postalCode,
            country=supplier.address.country,
        )
        address = Address(**fields) if fields else None

    return Supplier(**present(
        code=supplier.supplierNumber,
        name=supplier.supplierName,
        contact_person=supplier.contactName,
        email=email,
        phone=supplier.phoneNumber,
        mobile_phone=supplier.mobileNumber,
        website=supplier.url,
        address=address,
        supplier_type=SUPPLIER_TYPE.to_domain(supplier.supplierType),
        # Missing status means an active supplier; unknown codes are pending
        status=SUPPLIER_STATUS.to_domain(supplier.status) if supplier.status else SupplierStatus.ACTIVE,
        tax_id=supplier.taxpayerId,
        payment_terms=supplier.paymentTerms,
        notes=supplier.notes,
        source_system=SOURCE_SYSTEM,
        source_id=supplier.id or supplier.supplierNumber,
    ))


def supplier_to_external(vendor: Supplier) -> Dict[str, Any]:
    address = None
    if vendor.address is not None:
        address = OracleAddress(
            addressLine1=vendor.address.street,
            city=vendor.address.city,
            state=vendor.address.state,
            postalCode=vendor.address.zip_code,
            country=vendor.address.country,
        )
    return _dump(OracleSupplier(
        id=_own_key(vendor),
        supplierNumber=vendor.code,
        supplierName=vendor.name,
        contactName=vendor.contact_person,
        email=vendor.email,
        phoneNumber=vendor.phone,
        mobileNumber=vendor.mobile_phone,
        url=vendor.website,
        address=address,
        supplierType=SUPPLIER_TYPE.to_external(vendor.supplier_type),
        status=SUPPLIER_STATUS.to_external(vendor.status),
        taxpayerId=vendor.tax_id,
        paymentTerms=vendor.payment_terms,
        notes=vendor.notes,
    ))


# =============================================================================
# Items
# =============================================================================

def item_to_domain(raw: Dict[str, Any]) -> InventoryItem:
    item = OracleItem.model_validate(raw)
    return InventoryItem(**present(
        item_code=item.itemNumber,
        name=item.itemDescription,
        description=item.longDescription,
        category=item.itemCategory,
        unit_of_measure=item.primaryUomCode,
        quantity_on_hand=item.onhandQuantity,
        quantity_on_order=item.onOrderQuantity,
        quantity_committed=item.reservedQuantity,
        reorder_point=item.minimumQuantity,
        unit_cost=item.itemCost,
        supplier_code=item.supplierNumber,
        location=item.subinventoryCode,
        source_system=SOURCE_SYSTEM,
        source_id=item.itemId or item.itemNumber,
    ))


def item_to_external(item: InventoryItem) -> Dict[str, Any]:
    return _dump(OracleItem(
        itemId=_own_key(item),
        itemNumber=item.item_code,
        itemDescription=item.name,
        longDescription=item.description,
        itemCategory=item.category,
        primaryUomCode=item.unit_of_measure,
        onhandQuantity=item.quantity_on_hand,
        onOrderQuantity=item.quantity_on_order,
        reservedQuantity=item.quantity_committed,
        minimumQuantity=item.reorder_point,
        itemCost=item.unit_cost,
        supplierNumber=item.supplier_code,
        subinventoryCode=item.location,
    ))


# =============================================================================
# Purchase Orders
# =============================================================================

def purchase_order_to_domain(raw: Dict[str, Any]) -> PurchaseOrder:
    po = OraclePurchaseOrder.model_validate(raw)
    lines = [
        PurchaseOrderLine(**present(
            item_code=line.itemId,
            description=line.description,
            quantity=line.quantity,
            unit_price=line.price,
        ))
        for line in po.lines or []
    ]
    return PurchaseOrder(**present(
        order_number=po.orderNumber,
        supplier_code=po.supplierId,
        supplier_name=po.supplierName,
        order_date=po.orderDate,
        due_date=po.scheduledDate,
        status=PURCHASE_ORDER_STATUS.to_domain(po.status),
        currency=po.currencyCode,
        notes=po.notes,
        lines=lines,
        source_system=SOURCE_SYSTEM,
        source_id=po.id or po.orderNumber,
    ))


def purchase_order_to_external(order: PurchaseOrder) -> Dict[str, Any]:
    return _dump(OraclePurchaseOrder(
        id=_own_key(order),
        orderNumber=order.order_number,
        supplierId=order.supplier_code,
        supplierName=order.supplier_name,
        orderDate=order.order_date,
        scheduledDate=order.due_date,
        status=PURCHASE_ORDER_STATUS.to_external(order.status),
        currencyCode=order.currency,
        notes=order.notes,
        lines=[
            OraclePurchaseOrderLine(
                itemId=line.item_code,
                description=line.description,
                quantity=line.quantity,
                price=line.unit_price,
            )
            for line in order.lines
        ],
    ))


# =============================================================================
# Quality Inspections
# =============================================================================

def inspection_to_domain(raw: Dict[str, Any]) -> Inspection:
    row = OracleQualityInspection.model_validate(raw)
    return Inspection(**present(
        inspection_number=row.inspectionNumber,
        inspection_type=INSPECTION_TYPE.to_domain(row.inspectionType),
        item_code=row.itemNumber,
        item_description=row.itemDescription,
        supplier_code=row.supplierNumber,
        inspector=row.inspectorName,
        inspection_date=row.inspectionDate,
        status=INSPECTION_STATUS.to_domain(row.status),
        result=INSPECTION_RESULT.to_domain(row.result),
        quantity=row.quantity,
        sample_size=row.sampleSize,
        defect_count=row.defectCount,
        notes=row.comments,
        source_system=SOURCE_SYSTEM,
        source_id=row.id or row.inspectionNumber,
    ))


def inspection_to_external(inspection: Inspection) -> Dict[str, Any]:
    return _dump(OracleQualityInspection(
        id=_own_key(inspection),
        inspectionNumber=inspection.inspection_number,
        inspectionType=INSPECTION_TYPE.to_external(inspection.inspection_type),
        itemNumber=inspection.item_code,
        itemDescription=inspection.item_description,
        supplierNumber=inspection.supplier_code,
        inspectorName=inspection.inspector,
        inspectionDate=inspection.inspection_date,
        status=INSPECTION_STATUS.to_external(inspection.status),
        result=INSPECTION_RESULT.to_external(inspection.result),
        quantity=inspection.quantity,
        sampleSize=inspection.sample_size,
        defectCount=inspection.defect_count,
        comments=inspection.notes,
    ))


# =============================================================================
# Work Orders
# =============================================================================

def work_order_to_domain(raw: Dict[str, Any]) -> ProductionOrder:
    wo = OracleWorkOrder.model_validate(raw)
    return ProductionOrder(**present(
        order_number=wo.workOrderNumber,
        item_code=wo.itemNumber,
        item_description=wo.itemDescription,
        planned_quantity=wo.plannedQuantity,
        status=WORK_ORDER_STATUS.to_domain(wo.workOrderStatusCode),
        priority=WORK_ORDER_PRIORITY.to_domain(wo.workOrderPriority),
        start_date=wo.plannedStartDate,
        due_date=wo.plannedCompletionDate,
        location=wo.organizationCode,
        notes=wo.workOrderDescription,
        source_system=SOURCE_SYSTEM,
        source_id=wo.workOrderId or wo.workOrderNumber,
    ))


def work_order_to_external(order: ProductionOrder) -> Dict[str, Any]:
    return _dump(OracleWorkOrder(
        workOrderId=_own_key(order),
        workOrderNumber=order.order_number,
        itemNumber=order.item_code,
        itemDescription=order.item_description,
        plannedQuantity=order.planned_quantity,
        workOrderStatusCode=WORK_ORDER_STATUS.to_external(order.status),
        workOrderPriority=WORK_ORDER_PRIORITY.to_external(order.priority),
        plannedStartDate=order.start_date,
        plannedCompletionDate=order.due_date,
        organizationCode=order.location,
        workOrderDescription=order.notes,
    ))


ORACLE_ACL = AntiCorruptionLayer(
    SOURCE_SYSTEM,
    {
        EntityType.VENDORS: EntityMapper(
            supplier_to_domain, supplier_to_external, lambda raw: key_str(raw.get("id"))
        ),
        EntityType.INVENTORY: EntityMapper(
            item_to_domain, item_to_external, lambda raw: key_str(raw.get("itemId"))
        ),
        EntityType.PURCHASE_ORDERS: EntityMapper(
            purchase_order_to_domain, purchase_order_to_external, lambda raw: key_str(raw.get("id"))
        ),
        EntityType.INSPECTIONS: EntityMapper(
            inspection_to_domain, inspection_to_external, lambda raw: key_str(raw.get("id"))
        ),
        EntityType.PRODUCTION_ORDERS: EntityMapper(
            work_order_to_domain, work_order_to_external, lambda raw: key_str(raw.get("workOrderId"))
        ),
    },
)
