"""SAP Business One Service Layer data models.

These are SAP-specific models that map to the Service Layer (OData v4)
schema. They are separate from the domain models in /core/models/ and never
leave the SAP adapter.

Quality inspections live in a user-defined table, hence the ``U_`` fields.
"""

from typing import List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field

from core.models.values import DateValue, DecimalValue, IntValue, StrValue


# =============================================================================
# SAP Service Layer Models
# =============================================================================

class SAPBaseModel(BaseModel):
    """Base model for SAP Service Layer entities."""

    model_config = ConfigDict(populate_by_name=True)


class SAPBusinessPartner(SAPBaseModel):
    """SAP Business Partner (vendors have CardType 'S').

    Maps to: /b1s/v1/BusinessPartners
    """
    CardCode: Optional[str] = Field(None, alias="CardCode")
    CardName: Optional[str] = Field(None, alias="CardName")
    CardType: Optional[str] = Field(None, alias="CardType")
    ContactPerson: Optional[str] = Field(None, alias="ContactPerson")
    EmailAddress: Optional[str] = Field(None, alias="EmailAddress")
    Phone1: Optional[str] = Field(None, alias="Phone1")
    Cellular: Optional[str] = Field(None, alias="Cellular")
    Website: Optional[str] = Field(None, alias="Website")
    Address: Optional[str] = Field(None, alias="Address")
    City: Optional[str] = Field(None, alias="City")
    BillToState: Optional[str] = Field(None, alias="BillToState")
    ZipCode: Optional[str] = Field(None, alias="ZipCode")
    Country: Optional[str] = Field(None, alias="Country")
    FederalTaxID: Optional[str] = Field(None, alias="FederalTaxID")
    FreeText: Optional[str] = Field(None, alias="FreeText")
    Valid: Optional[str] = Field(None, alias="Valid")
    Frozen: Optional[str] = Field(None, alias="Frozen")
    U_SupplierType: Optional[str] = Field(None, alias="U_SupplierType")
    U_PaymentTerms: Optional[str] = Field(None, alias="U_PaymentTerms")


class SAPItem(SAPBaseModel):
    """SAP Item master data with stock figures.

    Maps to: /b1s/v1/Items
    """
    ItemCode: Optional[str] = Field(None, alias="ItemCode")
    ItemName: Optional[str] = Field(None, alias="ItemName")
    User_Text: Optional[str] = Field(None, alias="User_Text")
    U_Category: Optional[str] = Field(None, alias="U_Category")
    InventoryUOM: Optional[str] = Field(None, alias="InventoryUOM")
    QuantityOnStock: DecimalValue = Field(None, alias="QuantityOnStock")
    QuantityOrderedFromVendors: DecimalValue = Field(None, alias="QuantityOrderedFromVendors")
    QuantityOrderedByCustomers: DecimalValue = Field(None, alias="QuantityOrderedByCustomers")
    MinInventory: DecimalValue = Field(None, alias="MinInventory")
    AvgStdPrice: DecimalValue = Field(None, alias="AvgStdPrice")
    Mainsupplier: Optional[str] = Field(None, alias="Mainsupplier")
    DefaultWarehouse: Optional[str] = Field(None, alias="DefaultWarehouse")


class SAPDocumentLine(SAPBaseModel):
    """Marketing document line."""
    ItemCode: Optional[str] = Field(None, alias="ItemCode")
    ItemDescription: Optional[str] = Field(None, alias="ItemDescription")
    Quantity: DecimalValue = Field(None, alias="Quantity")
    Price: DecimalValue = Field(None, alias="Price")


class SAPPurchaseOrder(SAPBaseModel):
    """SAP Purchase Order document.

    Maps to: /b1s/v1/PurchaseOrders
    """
    DocEntry: StrValue = Field(None, alias="DocEntry")
    DocNum: StrValue = Field(None, alias="DocNum")
    CardCode: Optional[str] = Field(None, alias="CardCode")
    CardName: Optional[str] = Field(None, alias="CardName")
    DocDate: DateValue = Field(None, alias="DocDate")
    DocDueDate: DateValue = Field(None, alias="DocDueDate")
    DocumentStatus: Optional[str] = Field(None, alias="DocumentStatus")
    DocCurrency: Optional[str] = Field(None, alias="DocCurrency")
    Comments: Optional[str] = Field(None, alias="Comments")
    DocumentLines: Optional[List[SAPDocumentLine]] = Field(None, alias="DocumentLines")


class SAPQualityInspection(SAPBaseModel):
    """Quality inspection row in the U_QUALITY_INSPECTIONS user table.

    Maps to: /b1s/v1/U_QUALITY_INSPECTIONS
    """
    DocEntry: StrValue = Field(None, alias="DocEntry")
    U_InspectionNo: Optional[str] = Field(None, alias="U_InspectionNo")
    U_InspectionType: Optional[str] = Field(None, alias="U_InspectionType")
    U_ItemCode: Optional[str] = Field(None, alias="U_ItemCode")
    U_ItemDescription: Optional[str] = Field(None, alias="U_ItemDescription")
    U_VendorCode: Optional[str] = Field(None, alias="U_VendorCode")
    U_Inspector: Optional[str] = Field(None, alias="U_Inspector")
    U_Date: DateValue = Field(None, alias="U_Date")
    U_Status: Optional[str] = Field(None, alias="U_Status")
    U_Result: Optional[str] = Field(None, alias="U_Result")
    U_Quantity: IntValue = Field(None, alias="U_Quantity")
    U_SampleSize: IntValue = Field(None, alias="U_SampleSize")
    U_Defects: IntValue = Field(None, alias="U_Defects")
    U_Comments: Optional[str] = Field(None, alias="U_Comments")


class SAPProductionOrder(SAPBaseModel):
    """SAP Production Order.

    Maps to: /b1s/v1/ProductionOrders
    """
    AbsoluteEntry: StrValue = Field(None, alias="AbsoluteEntry")
    DocumentNumber: StrValue = Field(None, alias="DocumentNumber")
    ItemNo: Optional[str] = Field(None, alias="ItemNo")
    ProductDescription: Optional[str] = Field(None, alias="ProductDescription")
    PlannedQuantity: DecimalValue = Field(None, alias="PlannedQuantity")
    ProductionOrderStatus: Optional[str] = Field(None, alias="ProductionOrderStatus")
    Priority: IntValue = Field(None, alias="Priority")
    StartDate: DateValue = Field(None, alias="StartDate")
    DueDate: DateValue = Field(None, alias="DueDate")
    Warehouse: Optional[str] = Field(None, alias="Warehouse")
    Remarks: Optional[str] = Field(None, alias="Remarks")


def select_fields(model: Type[SAPBaseModel]) -> str:
    """OData ``$select`` value listing every field of an SAP model."""
    return ",".join(field.alias or name for name, field in model.model_fields.items())
