"""
Tests for the synthetic ERP connector: seeded data, read filters, writes
and the simulated success ratio.
"""

import asyncio

import pytest


def synthetic(config_overrides=None, **settings):
    from connectors.synthetic import SyntheticConnector
    from core.config import ERPProviderConfig
    custom = {"seed": 12345, "delay_ms": 0, "success_ratio": 0.95}
    custom.update(settings)
    config = ERPProviderConfig(provider="synthetic", custom_settings=custom, **(config_overrides or {}))
    return SyntheticConnector(config)


class TestSyntheticDataset:

    def test_default_counts_and_codes(self):
        from connectors.synthetic import SyntheticDataset
        from core.models.domain import EntityType
        dataset = SyntheticDataset()

        assert dataset.count(EntityType.VENDORS) == 25
        assert dataset.count(EntityType.INVENTORY) == 50
        assert dataset.count(EntityType.PURCHASE_ORDERS) == 30
        assert dataset.count(EntityType.PRODUCTION_ORDERS) == 20
        assert dataset.count(EntityType.INSPECTIONS) == 40

        assert dataset.get(EntityType.VENDORS, "SUP0001")["id"] == 1
        assert dataset.get(EntityType.INVENTORY, "ITEM0000")["id"] == 1
        assert (EntityType.PURCHASE_ORDERS, "PO00030") in dataset
        assert (EntityType.INSPECTIONS, "QC00041") not in dataset

    def test_same_seed_same_data(self):
        from connectors.synthetic import SyntheticDataset
        from core.models.domain import EntityType
        a = SyntheticDataset(seed=7)
        b = SyntheticDataset(seed=7)
        c = SyntheticDataset(seed=8)

        assert a.query(EntityType.VENDORS) == b.query(EntityType.VENDORS)
        assert a.query(EntityType.VENDORS) != c.query(EntityType.VENDORS)

    def test_query_returns_copies(self):
        from connectors.synthetic import SyntheticDataset
        from core.models.domain import EntityType
        dataset = SyntheticDataset()
        rows = dataset.query(EntityType.VENDORS, limit=1)
        rows[0]["name"] = "Changed"
        assert dataset.get(EntityType.VENDORS, "SUP0001")["name"] != "Changed"

    def test_offset_applies_with_limit(self):
        from connectors.synthetic import SyntheticDataset
        from core.models.domain import EntityType
        dataset = SyntheticDataset()
        page = dataset.query(EntityType.VENDORS, limit=5, offset=10)
        assert [r["code"] for r in page] == [f"SUP{n:04d}" for n in range(11, 16)]

    def test_offset_alone_skips_records(self):
        from connectors.synthetic import SyntheticDataset
        from core.models.domain import EntityType
        rows = SyntheticDataset().query(EntityType.VENDORS, offset=20)
        assert [r["code"] for r in rows] == [f"SUP{n:04d}" for n in range(21, 26)]

    def test_purchase_order_totals_match_lines(self):
        from connectors.synthetic import SyntheticDataset
        from core.models.domain import EntityType
        for order in SyntheticDataset().query(EntityType.PURCHASE_ORDERS):
            assert 1 <= len(order["items"]) <= 5
            assert order["total"] == pytest.approx(sum(i["totalPrice"] for i in order["items"]), abs=0.011)

    def test_create_assigns_id_and_code(self):
        from connectors.synthetic import SyntheticDataset
        from core.models.domain import EntityType
        dataset = SyntheticDataset()
        created = dataset.create(EntityType.VENDORS, {"name": "New Vendor"})
        assert created["id"] == 26
        assert created["code"] == "SUP0026"

    def test_update_keeps_identity(self):
        from connectors.synthetic import SyntheticDataset
        from core.models.domain import EntityType
        dataset = SyntheticDataset()
        updated = dataset.update(EntityType.VENDORS, "SUP0003", {"id": 99, "code": "X", "name": "Renamed"})
        assert (updated["id"], updated["code"], updated["name"]) == (3, "SUP0003", "Renamed")

        with pytest.raises(KeyError):
            dataset.update(EntityType.VENDORS, "SUP9999", {})


class TestSyntheticReads:

    def test_vendors_translate_with_code_as_source_id(self):
        connector = synthetic()
        vendors = asyncio.run(connector.get_vendors())

        assert len(vendors) == 25
        first = vendors[0]
        assert first.code == "SUP0001"
        assert (first.source_system, first.source_id) == ("synthetic", "SUP0001")
        assert first.email.endswith(".example.com")

    def test_text_filter_is_case_insensitive(self):
        connector = synthetic()
        vendors = asyncio.run(connector.get_vendors({"filter": "SUP000"}))
        assert [v.code for v in vendors] == [f"SUP000{n}" for n in range(1, 10)]

    def test_limit(self):
        connector = synthetic()
        assert len(asyncio.run(connector.get_inventory({"limit": 10}))) == 10

    def test_offset_without_limit_skips_leading_records(self):
        connector = synthetic()
        vendors = asyncio.run(connector.get_vendors({"offset": 10}))
        assert len(vendors) == 15
        assert vendors[0].code == "SUP0011"

    def test_status_filter_uses_code_table(self):
        from core.models.domain import PurchaseOrderStatus
        connector = synthetic()
        orders = asyncio.run(connector.get_purchase_orders({"status": "open"}))
        assert orders
        assert all(o.status == PurchaseOrderStatus.OPEN for o in orders)

    def test_supplier_code_filter(self):
        connector = synthetic()
        inspections = asyncio.run(connector.get_quality_inspections({"supplier_code": "SUP0002"}))
        assert inspections
        assert {i.supplier_code for i in inspections} == {"SUP0002"}

    def test_vendor_type_filter(self):
        from core.models.domain import SupplierType
        connector = synthetic()
        vendors = asyncio.run(connector.get_vendors({"vendor_type": "service"}))
        assert all(v.supplier_type == SupplierType.SERVICE for v in vendors)

    def test_connection_always_succeeds(self):
        connector = synthetic()
        assert asyncio.run(connector.test_connection()) is True

    def test_invalid_success_ratio(self):
        with pytest.raises(ValueError):
            synthetic(success_ratio=1.5)


class TestSyntheticWrites:

    def test_create_and_update_vendor(self):
        from core.models.domain import Supplier, SupplierStatus
        connector = synthetic()

        async def run():
            created = await connector.create_vendor(Supplier(name="Harbor Supply", email="hi@harbor.example.com"))
            updated = await connector.update_vendor(
                created.code, created.model_copy(update={"status": SupplierStatus.INACTIVE})
            )
            return created, updated

        created, updated = asyncio.run(run())
        assert created.code == "SUP0026"
        assert updated.status == SupplierStatus.INACTIVE
        assert connector.dataset.get(created.entity_type, "SUP0026")["status"] == "inactive"

    def test_duplicate_create_conflicts(self):
        from connectors.errors import ERPClientError
        from core.models.domain import Supplier
        connector = synthetic()
        with pytest.raises(ERPClientError) as exc:
            asyncio.run(connector.create_vendor(Supplier(code="SUP0001", name="Clash")))
        assert exc.value.status_code == 409

    def test_update_unknown_record(self):
        from connectors.errors import ERPNotFoundError
        from core.models.domain import Inspection
        connector = synthetic()
        with pytest.raises(ERPNotFoundError):
            asyncio.run(connector.update_quality_inspection("QC99999", Inspection()))


class TestSimulatedSync:

    def inspections(self, count):
        from connectors.synthetic.synthetic_mappers import SYNTHETIC_ACL
        from core.models.domain import Inspection
        return [
            SYNTHETIC_ACL.to_external("inspections", Inspection(inspection_number=f"QC9{n:04d}", quantity=n))
            for n in range(count)
        ]

    def test_twenty_inspections_at_95_percent(self):
        connector = synthetic()
        result = asyncio.run(connector.sync_to_erp("inspections", self.inspections(20)))

        assert result.total_count == 20
        assert result.success_count == 19
        assert result.failure_count == 1
        assert result.new_count == 19
        assert result.errors[0].error == "Simulated sync error"

    def test_success_count_is_floored(self):
        connector = synthetic()
        result = asyncio.run(connector.sync_to_erp("inspections", self.inspections(7)))
        # floor(7 * 0.95) = 6
        assert (result.success_count, result.failure_count) == (6, 1)

    def test_failures_are_reproducible_for_a_seed(self):
        first = asyncio.run(synthetic().sync_to_erp("inspections", self.inspections(40)))
        second = asyncio.run(synthetic().sync_to_erp("inspections", self.inspections(40)))
        assert first.failed_indexes == second.failed_indexes
        assert len(first.failed_indexes) == 2

    def test_successes_are_upserted(self):
        connector = synthetic(success_ratio=1.0)
        records = [
            {"code": "SUP0001", "name": "Renamed Vendor"},
            {"code": "SUP0100", "name": "Brand New"},
        ]
        result = asyncio.run(connector.sync_to_erp("vendors", records))

        assert (result.updated_count, result.new_count) == (1, 1)
        assert result.synced_items == ["SUP0001", "SUP0100"]
        assert connector.dataset.get(result.entity_type, "SUP0001")["name"] == "Renamed Vendor"

    def test_zero_ratio_fails_everything(self):
        connector = synthetic(success_ratio=0.0)
        result = asyncio.run(connector.sync_to_erp("vendors", [{"code": "SUP0001"}]))
        assert result.failure_count == 1
        assert result.success_count == 0

    def test_empty_batch(self):
        result = asyncio.run(synthetic().sync_to_erp("vendors", []))
        assert result.total_count == 0
        assert result.errors == []
