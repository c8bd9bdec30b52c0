"""Synthetic ERP record shapes.

The synthetic back end speaks a flat camelCase dialect close to what a
small hosted ERP would expose. Records are keyed by their business code
(``code``, ``itemCode``, ``poNumber``, ``inspectionNumber``,
``orderNumber``); ``id`` is a running number assigned by the dataset.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.models.values import DateValue, DecimalValue, IntValue, StrValue


class SyntheticBaseModel(BaseModel):
    """Base model for synthetic records. Unknown keys are ignored."""

    model_config = ConfigDict(populate_by_name=True)


class SyntheticAddress(SyntheticBaseModel):
    street: Optional[str] = Field(None, alias="street")
    city: Optional[str] = Field(None, alias="city")
    state: Optional[str] = Field(None, alias="state")
    zipCode: Optional[str] = Field(None, alias="zipCode")
    country: Optional[str] = Field(None, alias="country")


class SyntheticVendor(SyntheticBaseModel):
    id: IntValue = Field(None, alias="id")
    code: StrValue = Field(None, alias="code")
    name: Optional[str] = Field(None, alias="name")
    contactName: Optional[str] = Field(None, alias="contactName")
    email: Optional[str] = Field(None, alias="email")
    phone: Optional[str] = Field(None, alias="phone")
    mobilePhone: Optional[str] = Field(None, alias="mobilePhone")
    address: Optional[SyntheticAddress] = Field(None, alias="address")
    website: Optional[str] = Field(None, alias="website")
    type: Optional[str] = Field(None, alias="type")
    status: Optional[str] = Field(None, alias="status")
    taxId: StrValue = Field(None, alias="taxId")
    paymentTerms: Optional[str] = Field(None, alias="paymentTerms")
    notes: Optional[str] = Field(None, alias="notes")


class SyntheticInventoryItem(SyntheticBaseModel):
    id: IntValue = Field(None, alias="id")
    itemCode: StrValue = Field(None, alias="itemCode")
    name: Optional[str] = Field(None, alias="name")
    description: Optional[str] = Field(None, alias="description")
    category: Optional[str] = Field(None, alias="category")
    uom: Optional[str] = Field(None, alias="uom")
    quantity: DecimalValue = Field(None, alias="quantity")
    onOrder: DecimalValue = Field(None, alias="onOrder")
    committed: DecimalValue = Field(None, alias="committed")
    reorderPoint: DecimalValue = Field(None, alias="reorderPoint")
    unitCost: DecimalValue = Field(None, alias="unitCost")
    supplier: Optional[str] = Field(None, alias="supplier")
    location: Optional[str] = Field(None, alias="location")


class SyntheticOrderItem(SyntheticBaseModel):
    itemCode: Optional[str] = Field(None, alias="itemCode")
    description: Optional[str] = Field(None, alias="description")
    quantity: DecimalValue = Field(None, alias="quantity")
    unitPrice: DecimalValue = Field(None, alias="unitPrice")
    totalPrice: DecimalValue = Field(None, alias="totalPrice")


class SyntheticPurchaseOrder(SyntheticBaseModel):
    id: IntValue = Field(None, alias="id")
    poNumber: StrValue = Field(None, alias="poNumber")
    vendor: Optional[str] = Field(None, alias="vendor")
    vendorName: Optional[str] = Field(None, alias="vendorName")
    date: DateValue = Field(None, alias="date")
    dueDate: DateValue = Field(None, alias="dueDate")
    status: Optional[str] = Field(None, alias="status")
    total: DecimalValue = Field(None, alias="total")
    currency: Optional[str] = Field(None, alias="currency")
    items: Optional[List[SyntheticOrderItem]] = Field(None, alias="items")
    notes: Optional[str] = Field(None, alias="notes")


class SyntheticInspection(SyntheticBaseModel):
    id: IntValue = Field(None, alias="id")
    inspectionNumber: StrValue = Field(None, alias="inspectionNumber")
    type: Optional[str] = Field(None, alias="type")
    itemCode: Optional[str] = Field(None, alias="itemCode")
    itemDescription: Optional[str] = Field(None, alias="itemDescription")
    supplierCode: Optional[str] = Field(None, alias="supplierCode")
    supplierName: Optional[str] = Field(None, alias="supplierName")
    quantity: IntValue = Field(None, alias="quantity")
    sampleSize: IntValue = Field(None, alias="sampleSize")
    inspector: Optional[str] = Field(None, alias="inspector")
    date: DateValue = Field(None, alias="date")
    result: Optional[str] = Field(None, alias="result")
    status: Optional[str] = Field(None, alias="status")
    notes: Optional[str] = Field(None, alias="notes")
    defects: IntValue = Field(None, alias="defects")


class SyntheticProductionOrder(SyntheticBaseModel):
    id: IntValue = Field(None, alias="id")
    orderNumber: StrValue = Field(None, alias="orderNumber")
    itemCode: Optional[str] = Field(None, alias="itemCode")
    itemDescription: Optional[str] = Field(None, alias="itemDescription")
    quantity: DecimalValue = Field(None, alias="quantity")
    status: Optional[str] = Field(None, alias="status")
    priority: Optional[str] = Field(None, alias="priority")
    startDate: DateValue = Field(None, alias="startDate")
    endDate: DateValue = Field(None, alias="endDate")
    location: Optional[str] = Field(None, alias="location")
    notes: Optional[str] = Field(None, alias="notes")
