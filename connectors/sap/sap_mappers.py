"""SAP <-> domain mappers.

Pure functions, one pair per entity type, plus the SAP code tables.
``SAP_ACL`` bundles them for the connector.
"""

from typing import Any, Dict, Optional

from connectors.acl import AntiCorruptionLayer, CodeTable, EntityMapper, key_str, present
from connectors.sap.sap_models import (
    SAPBusinessPartner,
    SAPDocumentLine,
    SAPItem,
    SAPProductionOrder,
    SAPPurchaseOrder,
    SAPQualityInspection,
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

SOURCE_SYSTEM = "sap"


# =============================================================================
# Code Tables
# =============================================================================

# (Valid, Frozen) flag pairs on the business partner
SUPPLIER_STATUS = CodeTable(
    "sap.supplier_status",
    SupplierStatus,
    {
        SupplierStatus.ACTIVE: ("tYES", "tNO"),
        SupplierStatus.INACTIVE: ("tNO", "tYES"),
        SupplierStatus.PENDING: ("tNO", "tNO"),
    },
    default=SupplierStatus.ACTIVE,
)

SUPPLIER_TYPE = CodeTable(
    "sap.supplier_type",
    SupplierType,
    {
        SupplierType.MANUFACTURER: "MFR",
        SupplierType.DISTRIBUTOR: "DST",
        SupplierType.SERVICE: "SVC",
    },
    default=None,
)

INSPECTION_TYPE = CodeTable(
    "sap.inspection_type",
    InspectionType,
    {
        InspectionType.INCOMING: "IQC",
        InspectionType.IN_PROCESS: "IPQC",
        InspectionType.FINAL: "FQC",
        InspectionType.SUPPLIER: "SQA",
    },
    default=InspectionType.INCOMING,
)

INSPECTION_STATUS = CodeTable(
    "sap.inspection_status",
    InspectionStatus,
    {
        InspectionStatus.DRAFT: "Draft",
        InspectionStatus.IN_PROGRESS: "InProcess",
        InspectionStatus.COMPLETED: "Completed",
        InspectionStatus.CANCELLED: "Canceled",
    },
    default=InspectionStatus.DRAFT,
)

INSPECTION_RESULT = CodeTable(
    "sap.inspection_result",
    InspectionResult,
    {
        InspectionResult.PASSED: "Accepted",
        InspectionResult.FAILED: "Rejected",
        InspectionResult.PENDING: "Pending",
    },
    default=InspectionResult.PENDING,
)

PURCHASE_ORDER_STATUS = CodeTable(
    "sap.purchase_order_status",
    PurchaseOrderStatus,
    {
        PurchaseOrderStatus.DRAFT: "bost_Draft",
        PurchaseOrderStatus.OPEN: "bost_Open",
        PurchaseOrderStatus.APPROVED: "bost_Approved",
        PurchaseOrderStatus.RECEIVED: "bost_Delivered",
        PurchaseOrderStatus.CLOSED: "bost_Close",
        PurchaseOrderStatus.CANCELLED: "bost_Cancelled",
    },
    default=PurchaseOrderStatus.DRAFT,
    aliases={"bost_Paid": PurchaseOrderStatus.CLOSED},
)

PRODUCTION_ORDER_STATUS = CodeTable(
    "sap.production_order_status",
    ProductionOrderStatus,
    {
        ProductionOrderStatus.PLANNED: "boposPlanned",
        ProductionOrderStatus.RELEASED: "boposReleased",
        ProductionOrderStatus.IN_PROGRESS: "boposInProcess",
        ProductionOrderStatus.COMPLETED: "boposCompleted",
        ProductionOrderStatus.CLOSED: "boposClosed",
        ProductionOrderStatus.CANCELLED: "boposCancelled",
    },
    default=ProductionOrderStatus.PLANNED,
)

PRIORITY = CodeTable(
    "sap.priority",
    Priority,
    {
        Priority.LOW: 25,
        Priority.MEDIUM: 50,
        Priority.HIGH: 75,
        Priority.URGENT: 100,
    },
    default=Priority.MEDIUM,
)


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(by_alias=True, exclude_none=True)


def _own_key(record) -> Optional[str]:
    """External key carried by a record that originated in SAP."""
    return record.source_id if record.source_system == SOURCE_SYSTEM else None


# =============================================================================
# Vendors (BusinessPartners)
# =============================================================================

def vendor_to_domain(raw: Dict[str, Any]) -> Supplier:
    bp = SAPBusinessPartner.model_validate(raw)
    address = present(street=bp.Address, city=bp.City, state=bp.BillToState, zip_code=bp.ZipCode, country=bp.Country)
    flags = (bp.Valid, bp.Frozen) if bp.Valid or bp.Frozen else None
    return Supplier(**present(
        code=bp.CardCode,
        name=bp.CardName,
        contact_person=bp.ContactPerson,
        email=bp.EmailAddress,
        phone=bp.Phone1,
        mobile_phone=bp.Cellular,
        website=bp.Website,
        address=Address(**address) if address else None,
        supplier_type=SUPPLIER_TYPE.to_domain(bp.U_SupplierType),
        status=SUPPLIER_STATUS.to_domain(flags),
        tax_id=bp.FederalTaxID,
        payment_terms=bp.U_PaymentTerms,
        notes=bp.FreeText,
        source_system=SOURCE_SYSTEM,
        source_id=key_str(bp.CardCode),
    ))


def vendor_to_external(vendor: Supplier) -> Dict[str, Any]:
    address = vendor.address or Address()
    valid, frozen = SUPPLIER_STATUS.to_external(vendor.status)
    return _dump(SAPBusinessPartner(
        CardCode=vendor.code,
        CardName=vendor.name,
        CardType="S",
        ContactPerson=vendor.contact_person,
        EmailAddress=vendor.email,
        Phone1=vendor.phone,
        Cellular=vendor.mobile_phone,
        Website=vendor.website,
        Address=address.street,
        City=address.city,
        BillToState=address.state,
        ZipCode=address.zip_code,
        Country=address.country,
        FederalTaxID=vendor.tax_id,
        FreeText=vendor.notes,
        Valid=valid,
        Frozen=frozen,
        U_SupplierType=SUPPLIER_TYPE.to_external(vendor.supplier_type),
        U_PaymentTerms=vendor.payment_terms,
    ))


# =============================================================================
# Inventory (Items)
# =============================================================================

def inventory_to_domain(raw: Dict[str, Any]) -> InventoryItem:
    item = SAPItem.model_validate(raw)
    return InventoryItem(**present(
        item_code=item.ItemCode,
        name=item.ItemName,
        description=item.User_Text,
        category=item.U_Category,
        unit_of_measure=item.InventoryUOM,
        quantity_on_hand=item.QuantityOnStock,
        quantity_on_order=item.QuantityOrderedFromVendors,
        quantity_committed=item.QuantityOrderedByCustomers,
        reorder_point=item.MinInventory,
        unit_cost=item.AvgStdPrice,
        supplier_code=item.Mainsupplier,
        location=item.DefaultWarehouse,
        source_system=SOURCE_SYSTEM,
        source_id=key_str(item.ItemCode),
    ))


def inventory_to_external(item: InventoryItem) -> Dict[str, Any]:
    return _dump(SAPItem(
        ItemCode=item.item_code,
        ItemName=item.name,
        User_Text=item.description,
        U_Category=item.category,
        InventoryUOM=item.unit_of_measure,
        QuantityOnStock=item.quantity_on_hand,
        QuantityOrderedFromVendors=item.quantity_on_order,
        QuantityOrderedByCustomers=item.quantity_committed,
        MinInventory=item.reorder_point,
        AvgStdPrice=item.unit_cost,
        Mainsupplier=item.supplier_code,
        DefaultWarehouse=item.location,
    ))


# =============================================================================
# Purchase Orders
# =============================================================================

def purchase_order_to_domain(raw: Dict[str, Any]) -> PurchaseOrder:
    po = SAPPurchaseOrder.model_validate(raw)
    lines = [
        PurchaseOrderLine(**present(
            item_code=line.ItemCode,
            description=line.ItemDescription,
            quantity=line.Quantity,
            unit_price=line.Price,
        ))
        for line in po.DocumentLines or []
    ]
    return PurchaseOrder(**present(
        order_number=po.DocNum,
        supplier_code=po.CardCode,
        supplier_name=po.CardName,
        order_date=po.DocDate,
        due_date=po.DocDueDate,
        status=PURCHASE_ORDER_STATUS.to_domain(po.DocumentStatus),
        currency=po.DocCurrency,
        notes=po.Comments,
        lines=lines,
        source_system=SOURCE_SYSTEM,
        source_id=po.DocEntry,
    ))


def purchase_order_to_external(order: PurchaseOrder) -> Dict[str, Any]:
    return _dump(SAPPurchaseOrder(
        DocEntry=_own_key(order),
        DocNum=order.order_number,
        CardCode=order.supplier_code,
        CardName=order.supplier_name,
        DocDate=order.order_date,
        DocDueDate=order.due_date,
        DocumentStatus=PURCHASE_ORDER_STATUS.to_external(order.status),
        DocCurrency=order.currency,
        Comments=order.notes,
        DocumentLines=[
            SAPDocumentLine(
                ItemCode=line.item_code,
                ItemDescription=line.description,
                Quantity=line.quantity,
                Price=line.unit_price,
            )
            for line in order.lines
        ],
    ))


# =============================================================================
# Quality Inspections (user table)
# =============================================================================

def inspection_to_domain(raw: Dict[str, Any]) -> Inspection:
    row = SAPQualityInspection.model_validate(raw)
    return Inspection(**present(
        inspection_number=row.U_InspectionNo,
        inspection_type=INSPECTION_TYPE.to_domain(row.U_InspectionType),
        item_code=row.U_ItemCode,
        item_description=row.U_ItemDescription,
        supplier_code=row.U_VendorCode,
        inspector=row.U_Inspector,
        inspection_date=row.U_Date,
        status=INSPECTION_STATUS.to_domain(row.U_Status),
        result=INSPECTION_RESULT.to_domain(row.U_Result),
        quantity=row.U_Quantity,
        sample_size=row.U_SampleSize,
        defect_count=row.U_Defects,
        notes=row.U_Comments,
        source_system=SOURCE_SYSTEM,
        source_id=row.DocEntry,
    ))


def inspection_to_external(inspection: Inspection) -> Dict[str, Any]:
    return _dump(SAPQualityInspection(
        DocEntry=_own_key(inspection),
        U_InspectionNo=inspection.inspection_number,
        U_InspectionType=INSPECTION_TYPE.to_external(inspection.inspection_type),
        U_ItemCode=inspection.item_code,
        U_ItemDescription=inspection.item_description,
        U_VendorCode=inspection.supplier_code,
        U_Inspector=inspection.inspector,
        U_Date=inspection.inspection_date,
        U_Status=INSPECTION_STATUS.to_external(inspection.status),
        U_Result=INSPECTION_RESULT.to_external(inspection.result),
        U_Quantity=inspection.quantity,
        U_SampleSize=inspection.sample_size,
        U_Defects=inspection.defect_count,
        U_Comments=inspection.notes,
    ))


# =============================================================================
# Production Orders
# =============================================================================

def production_order_to_domain(raw: Dict[str, Any]) -> ProductionOrder:
    po = SAPProductionOrder.model_validate(raw)
    return ProductionOrder(**present(
        order_number=po.DocumentNumber,
        item_code=po.ItemNo,
        item_description=po.ProductDescription,
        planned_quantity=po.PlannedQuantity,
        status=PRODUCTION_ORDER_STATUS.to_domain(po.ProductionOrderStatus),
        priority=PRIORITY.to_domain(po.Priority),
        start_date=po.StartDate,
        due_date=po.DueDate,
        location=po.Warehouse,
        notes=po.Remarks,
        source_system=SOURCE_SYSTEM,
        source_id=po.AbsoluteEntry,
    ))


def production_order_to_external(order: ProductionOrder) -> Dict[str, Any]:
    return _dump(SAPProductionOrder(
        AbsoluteEntry=_own_key(order),
        DocumentNumber=order.order_number,
        ItemNo=order.item_code,
        ProductDescription=order.item_description,
        PlannedQuantity=order.planned_quantity,
        ProductionOrderStatus=PRODUCTION_ORDER_STATUS.to_external(order.status),
        Priority=PRIORITY.to_external(order.priority),
        StartDate=order.start_date,
        DueDate=order.due_date,
        Warehouse=order.location,
        Remarks=order.notes,
    ))


SAP_ACL = AntiCorruptionLayer(
    SOURCE_SYSTEM,
    {
        EntityType.VENDORS: EntityMapper(
            vendor_to_domain, vendor_to_external, lambda raw: key_str(raw.get("CardCode"))
        ),
        EntityType.INVENTORY: EntityMapper(
            inventory_to_domain, inventory_to_external, lambda raw: key_str(raw.get("ItemCode"))
        ),
        EntityType.PURCHASE_ORDERS: EntityMapper(
            purchase_order_to_domain, purchase_order_to_external, lambda raw: key_str(raw.get("DocEntry"))
        ),
        EntityType.INSPECTIONS: EntityMapper(
            inspection_to_domain, inspection_to_external, lambda raw: key_str(raw.get("DocEntry"))
        ),
        EntityType.PRODUCTION_ORDERS: EntityMapper(
            production_order_to_domain, production_order_to_external, lambda raw: key_str(raw.get("AbsoluteEntry"))
        ),
    },
)
