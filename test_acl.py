"""
Tests for the Anti-Corruption Layer: mapper round trips for every adapter,
code tables, null handling and translation failures.
"""

from datetime import date
from decimal import Decimal

import pytest


def sample_records():
    """One fully populated domain record per entity type."""
    from core.models.domain import (
        Address, EntityType, Inspection, InspectionResult, InspectionStatus, InspectionType,
        InventoryItem, Priority, ProductionOrder, ProductionOrderStatus, PurchaseOrder,
        PurchaseOrderLine, PurchaseOrderStatus, Supplier, SupplierStatus, SupplierType,
    )
    return {
        EntityType.VENDORS: Supplier(
            code="SUP0042",
            name="Ironclad Metals",
            contact_person="Riley Novak",
            email="riley@ironclad.example.com",
            phone="555-201-3344",
            mobile_phone="555-201-9999",
            website="https://ironclad.example.com",
            address=Address(street="12 Mill Ave", city="Akron", state="OH", zip_code="44301", country="US"),
            supplier_type=SupplierType.DISTRIBUTOR,
            status=SupplierStatus.PENDING,
            tax_id="123456789",
            payment_terms="Net 45",
            notes="Preferred for castings",
        ),
        EntityType.INVENTORY: InventoryItem(
            item_code="ITEM0007",
            name="Brass Flange",
            description="Brass flange for hydraulics",
            category="Hydraulics",
            unit_of_measure="EA",
            quantity_on_hand=Decimal("120"),
            quantity_on_order=Decimal("30"),
            quantity_committed=Decimal("12"),
            reorder_point=Decimal("25"),
            unit_cost=Decimal("14.75"),
            supplier_code="SUP0042",
            location="WAREHOUSE-B",
        ),
        EntityType.PURCHASE_ORDERS: PurchaseOrder(
            order_number="PO00017",
            supplier_code="SUP0042",
            supplier_name="Ironclad Metals",
            order_date=date(2024, 5, 2),
            due_date=date(2024, 6, 15),
            status=PurchaseOrderStatus.APPROVED,
            currency="USD",
            notes="Rush",
            lines=[
                PurchaseOrderLine(item_code="ITEM0007", description="Brass Flange",
                                  quantity=Decimal("10"), unit_price=Decimal("14.75")),
                PurchaseOrderLine(item_code="ITEM0008", description="Steel Valve",
                                  quantity=Decimal("2"), unit_price=Decimal("99.5")),
            ],
        ),
        EntityType.INSPECTIONS: Inspection(
            inspection_number="QC00003",
            inspection_type=InspectionType.IN_PROCESS,
            item_code="ITEM0007",
            item_description="Brass Flange",
            supplier_code="SUP0042",
            inspector="Dana Chen",
            inspection_date=date(2024, 5, 20),
            status=InspectionStatus.COMPLETED,
            result=InspectionResult.FAILED,
            quantity=50,
            sample_size=8,
            defect_count=3,
            notes="Burrs on edge",
        ),
        EntityType.PRODUCTION_ORDERS: ProductionOrder(
            order_number="WO00005",
            item_code="ITEM0007",
            item_description="Brass Flange",
            planned_quantity=Decimal("400"),
            status=ProductionOrderStatus.RELEASED,
            priority=Priority.HIGH,
            start_date=date(2024, 5, 28),
            due_date=date(2024, 6, 20),
            location="PLANT-A",
            notes="Second shift",
        ),
    }


def all_acls():
    from connectors.oracle.oracle_mappers import ORACLE_ACL
    from connectors.sap.sap_mappers import SAP_ACL
    from connectors.synthetic.synthetic_mappers import SYNTHETIC_ACL
    return [SAP_ACL, ORACLE_ACL, SYNTHETIC_ACL]


def code_tables(module):
    from connectors.acl import CodeTable
    return [value for value in vars(module).values() if isinstance(value, CodeTable)]


class TestRoundTrip:
    """to_domain(to_external(x)) preserves every business field."""

    @pytest.mark.parametrize("source_system", ["sap", "oracle", "synthetic"])
    def test_every_entity_survives_round_trip(self, source_system):
        acl = next(a for a in all_acls() if a.source_system == source_system)
        for entity_type, record in sample_records().items():
            external = acl.to_external(entity_type, record)
            back = acl.to_domain(entity_type, external)

            assert back.business_fields() == record.business_fields(), entity_type
            assert back.source_system == source_system

    def test_repository_dicts_are_accepted(self):
        from connectors.synthetic.synthetic_mappers import SYNTHETIC_ACL
        external = SYNTHETIC_ACL.to_external("vendors", {"code": "SUP0001", "name": "Apex", "status": "inactive"})
        assert external == {"code": "SUP0001", "name": "Apex", "status": "inactive"}


class TestNullHandling:

    def test_null_in_null_out(self):
        for acl in all_acls():
            assert acl.to_domain("vendors", None) is None
            assert acl.to_external("vendors", None) is None

    def test_absent_fields_take_documented_defaults(self):
        from connectors.sap.sap_mappers import SAP_ACL
        from core.models.domain import InspectionResult, InspectionStatus, InspectionType

        inspection = SAP_ACL.to_domain("inspections", {"U_InspectionNo": "QC1"})
        assert inspection.inspection_type == InspectionType.INCOMING
        assert inspection.status == InspectionStatus.DRAFT
        assert inspection.result == InspectionResult.PENDING
        assert inspection.quantity == 0
        assert inspection.notes is None

    def test_absent_values_are_not_emitted(self):
        from connectors.oracle.oracle_mappers import ORACLE_ACL
        from core.models.domain import Supplier
        external = ORACLE_ACL.to_external("vendors", Supplier(code="S-1"))
        assert external == {"supplierNumber": "S-1", "status": "ACTIVE"}

    def test_batch_skips_null_entries(self):
        from connectors.synthetic.synthetic_mappers import SYNTHETIC_ACL
        records = SYNTHETIC_ACL.batch_to_domain("inventory", [None, {"itemCode": "ITEM0001"}])
        assert [r.item_code for r in records] == ["ITEM0001"]


class TestCodeTables:

    @pytest.mark.parametrize("module_name", [
        "connectors.sap.sap_mappers",
        "connectors.oracle.oracle_mappers",
        "connectors.synthetic.synthetic_mappers",
    ])
    def test_tables_are_exhaustive_and_bijective(self, module_name):
        import importlib
        tables = code_tables(importlib.import_module(module_name))
        assert tables
        for table in tables:
            assert len(table.external_codes()) == len(table.enum_cls), table.name
            for member in table.enum_cls:
                assert table.to_domain(table.to_external(member)) == member, table.name

    def test_unknown_code_uses_default(self):
        from connectors.oracle.oracle_mappers import SUPPLIER_STATUS, SUPPLIER_TYPE
        from core.models.domain import SupplierStatus
        assert SUPPLIER_STATUS.to_domain("ON_HOLD") == SupplierStatus.PENDING
        assert SUPPLIER_TYPE.to_domain("CONTRACTOR") is None

    def test_aliases_are_inbound_only(self):
        from connectors.sap.sap_mappers import PURCHASE_ORDER_STATUS
        from core.models.domain import PurchaseOrderStatus
        assert PURCHASE_ORDER_STATUS.to_domain("bost_Paid") == PurchaseOrderStatus.CLOSED
        assert PURCHASE_ORDER_STATUS.to_external(PurchaseOrderStatus.CLOSED) == "bost_Close"

    def test_synthetic_open_orders_are_submitted(self):
        from connectors.synthetic.synthetic_mappers import PURCHASE_ORDER_STATUS
        from core.models.domain import PurchaseOrderStatus
        assert PURCHASE_ORDER_STATUS.to_external(PurchaseOrderStatus.OPEN) == "submitted"

    def test_incomplete_table_rejected(self):
        from connectors.acl import CodeTable
        from core.models.domain import Priority
        with pytest.raises(ValueError, match="missing entries"):
            CodeTable("partial", Priority, {Priority.LOW: "L"}, default=Priority.LOW)

    def test_duplicate_code_rejected(self):
        from connectors.acl import CodeTable
        from core.models.domain import InspectionResult
        with pytest.raises(ValueError, match="more than once"):
            CodeTable("dup", InspectionResult, {m: "X" for m in InspectionResult}, default=None)


class TestTranslationErrors:

    def test_malformed_record_raises_translation_error(self):
        from connectors.errors import TranslationError
        from connectors.sap.sap_mappers import SAP_ACL
        with pytest.raises(TranslationError) as exc:
            SAP_ACL.to_domain("purchase_orders", {"DocEntry": 5, "DocDate": "not-a-date"})
        assert exc.value.entity_type == "purchase_orders"
        assert "'5'" in str(exc.value)

    def test_entity_without_mapper(self):
        from connectors.acl import AntiCorruptionLayer
        from connectors.errors import TranslationError
        acl = AntiCorruptionLayer("empty", {})
        assert not acl.supports("vendors")
        with pytest.raises(TranslationError):
            acl.to_domain("vendors", {})

    def test_external_key_of_unkeyed_record(self):
        from connectors.sap.sap_mappers import SAP_ACL
        assert SAP_ACL.external_key("purchase_orders", {"DocNum": 1}) is None
        assert SAP_ACL.external_key("purchase_orders", {"DocEntry": 12}) == "12"


class TestEntityTypes:

    def test_aliases_resolve(self):
        from core.models.domain import EntityType
        assert EntityType.parse("suppliers") == EntityType.VENDORS
        assert EntityType.parse("qualityInspections") == EntityType.INSPECTIONS
        assert EntityType.parse("workOrders") == EntityType.PRODUCTION_ORDERS

    def test_unknown_entity_type(self):
        from core.models.domain import EntityType, UnsupportedEntityTypeError
        with pytest.raises(UnsupportedEntityTypeError):
            EntityType.parse("widgets")
