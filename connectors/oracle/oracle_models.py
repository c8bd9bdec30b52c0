"""Oracle ERP Cloud (Fusion SCM REST) data models.

These are Oracle-specific models that map to the REST resource payloads.
They are separate from the domain models in /core/models/ and never leave
the Oracle adapter.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.models.values import DateValue, DecimalValue, IntValue, StrValue


class OracleBaseModel(BaseModel):
    """Base model for Oracle REST resources."""

    model_config = ConfigDict(populate_by_name=True)


# =============================================================================
# Suppliers
# =============================================================================

class OracleAddress(OracleBaseModel):
    addressLine1: Optional[str] = Field(None, alias="addressLine1")
    city: Optional[str] = Field(None, alias="city")
    state: Optional[str] = Field(None, alias="state")
    postalCode: Optional[str] = Field(None, alias="postalCode")
    country: Optional[str] = Field(None, alias="country")


class OracleContact(OracleBaseModel):
    name: Optional[str] = Field(None, alias="name")
    email: Optional[str] = Field(None, alias="email")
    phone: Optional[str] = Field(None, alias="phone")


class OracleSupplier(OracleBaseModel):
    """Oracle Supplier.

    Maps to: /fscmRestApi/resources/<version>/suppliers
    """
    id: StrValue = Field(None, alias="id")
    supplierNumber: Optional[str] = Field(None, alias="supplierNumber")
    supplierName: Optional[str] = Field(None, alias="supplierName")
    contactName: Optional[str] = Field(None, alias="contactName")
    email: Optional[str] = Field(None, alias="email")
    phoneNumber: Optional[str] = Field(None, alias="phoneNumber")
    mobileNumber: Optional[str] = Field(None, alias="mobileNumber")
    url: Optional[str] = Field(None, alias="url")
    address: Optional[OracleAddress] = Field(None, alias="address")
    supplierType: Optional[str] = Field(None, alias="supplierType")
    status: Optional[str] = Field(None, alias="status")
    taxpayerId: Optional[str] = Field(None, alias="taxpayerId")
    paymentTerms: Optional[str] = Field(None, alias="paymentTerms")
    notes: Optional[str] = Field(None, alias="notes")
    contacts: Optional[List[OracleContact]] = Field(None, alias="contacts")


# =============================================================================
# Items
# =============================================================================

class OracleItem(OracleBaseModel):
    """Oracle inventory item.

    Maps to: /fscmRestApi/resources/<version>/itemsV2
    """
    itemId: StrValue = Field(None, alias="itemId")
    itemNumber: Optional[str] = Field(None, alias="itemNumber")
    itemDescription: Optional[str] = Field(None, alias="itemDescription")
    longDescription: Optional[str] = Field(None, alias="longDescription")
    itemCategory: Optional[str] = Field(None, alias="itemCategory")
    primaryUomCode: Optional[str] = Field(None, alias="primaryUomCode")
    onhandQuantity: DecimalValue = Field(None, alias="onhandQuantity")
    onOrderQuantity: DecimalValue = Field(None, alias="onOrderQuantity")
    reservedQuantity: DecimalValue = Field(None, alias="reservedQuantity")
    minimumQuantity: DecimalValue = Field(None, alias="minimumQuantity")
    itemCost: DecimalValue = Field(None, alias="itemCost")
    supplierNumber: Optional[str] = Field(None, alias="supplierNumber")
    subinventoryCode: Optional[str] = Field(None, alias="subinventoryCode")


# =============================================================================
# Purchase Orders
# =============================================================================

class OraclePurchaseOrderLine(OracleBaseModel):
    itemId: Optional[str] = Field(None, alias="itemId")
    description: Optional[str] = Field(None, alias="description")
    quantity: DecimalValue = Field(None, alias="quantity")
    price: DecimalValue = Field(None, alias="price")


class OraclePurchaseOrder(OracleBaseModel):
    """Oracle Purchase Order.

    Maps to: /fscmRestApi/resources/<version>/purchaseOrders
    """
    id: StrValue = Field(None, alias="id")
    orderNumber: Optional[str] = Field(None, alias="orderNumber")
    supplierId: Optional[str] = Field(None, alias="supplierId")
    supplierName: Optional[str] = Field(None, alias="supplierName")
    orderDate: DateValue = Field(None, alias="orderDate")
    scheduledDate: DateValue = Field(None, alias="scheduledDate")
    status: Optional[str] = Field(None, alias="status")
    currencyCode: Optional[str] = Field(None, alias="currencyCode")
    notes: Optional[str] = Field(None, alias="notes")
    lines: Optional[List[OraclePurchaseOrderLine]] = Field(None, alias="lines")


# =============================================================================
# Quality Inspections
# =============================================================================

class OracleQualityInspection(OracleBaseModel):
    """Oracle Quality inspection.

    Maps to: /fscmRestApi/resources/<version>/qualityInspections
    """
    id: StrValue = Field(None, alias="id")
    inspectionNumber: Optional[str] = Field(None, alias="inspectionNumber")
    inspectionType: Optional[str] = Field(None, alias="inspectionType")
    itemNumber: Optional[str] = Field(None, alias="itemNumber")
    itemDescription: Optional[str] = Field(None, alias="itemDescription")
    supplierNumber: Optional[str] = Field(None, alias="supplierNumber")
    inspectorName: Optional[str] = Field(None, alias="inspectorName")
    inspectionDate: DateValue = Field(None, alias="inspectionDate")
    status: Optional[str] = Field(None, alias="status")
    result: Optional[str] = Field(None, alias="result")
    quantity: IntValue = Field(None, alias="quantity")
    sampleSize: IntValue = Field(None, alias="sampleSize")
    defectCount: IntValue = Field(None, alias="defectCount")
    comments: Optional[str] = Field(None, alias="comments")


# =============================================================================
# Work Orders
# =============================================================================

class OracleWorkOrder(OracleBaseModel):
    """Oracle Manufacturing work order.

    Maps to: /fscmRestApi/resources/<version>/workOrders
    """
    workOrderId: StrValue = Field(None, alias="workOrderId")
    workOrderNumber: Optional[str] = Field(None, alias="workOrderNumber")
    itemNumber: Optional[str] = Field(None, alias="itemNumber")
    itemDescription: Optional[str] = Field(None, alias="itemDescription")
    plannedQuantity: DecimalValue = Field(None, alias="plannedQuantity")
    workOrderStatusCode: Optional[str] = Field(None, alias="workOrderStatusCode")
    workOrderPriority: IntValue = Field(None, alias="workOrderPriority")
    plannedStartDate: DateValue = Field(None, alias="plannedStartDate")
    plannedCompletionDate: DateValue = Field(None, alias="plannedCompletionDate")
    organizationCode: Optional[str] = Field(None, alias="organizationCode")
    workOrderDescription: Optional[str] = Field(None, alias="workOrderDescription")
