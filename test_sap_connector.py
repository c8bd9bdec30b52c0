"""
Tests for the SAP Business One connector: session auth, OData query dialect
and create-or-update pushes.
"""

import asyncio

import pytest

from conftest import FakeClock, FakeHttpClient

LOGIN = "/b1s/v1/Login"
PARTNERS = "/b1s/v1/BusinessPartners"
ITEMS = "/b1s/v1/Items"


def sap_connector(config, handler, clock=None):
    from connectors.sap import SAPConnector
    from core.cache import InMemoryCache
    http = FakeHttpClient(handler)
    return SAPConnector(config, cache=InMemoryCache(), http_client=http, clock=clock or FakeClock()), http


def session_handler(routes, sessions=("s1", "s2", "s3")):
    """Login hands out sessions in order; other paths are looked up in routes."""
    issued = list(sessions)

    def handler(method, path, **kwargs):
        if path == LOGIN:
            return {"SessionId": issued.pop(0), "SessionTimeout": 30}
        route = routes[(method, path)]
        return route(**kwargs) if callable(route) else route

    return handler


class TestSAPQueryDialect:

    def test_vendor_query_defaults_to_supplier_card_type(self, sap_config):
        from core.models.domain import EntityType
        connector, _ = sap_connector(sap_config, session_handler({}))

        query = connector._build_query(EntityType.VENDORS, {"limit": 10, "offset": 20})
        assert query["$filter"] == "CardType eq 'S'"
        assert query["$top"] == 10
        assert query["$skip"] == 20
        assert "CardCode" in query["$select"].split(",")

    def test_filters_joined_with_and(self, sap_config):
        from core.models.domain import EntityType
        connector, _ = sap_connector(sap_config, session_handler({}))

        query = connector._build_query(
            EntityType.PURCHASE_ORDERS,
            {"filter": "DocTotal gt 100", "supplier_code": "V'1", "status": "open"},
        )
        assert query["$filter"] == "(DocTotal gt 100) and CardCode eq 'V''1' and DocumentStatus eq 'bost_Open'"
        assert "$top" not in query

    def test_inspection_status_uses_user_field(self, sap_config):
        from core.models.domain import EntityType
        connector, _ = sap_connector(sap_config, session_handler({}))
        query = connector._build_query(EntityType.INSPECTIONS, {"status": "completed"})
        assert query["$filter"] == "U_Status eq 'Completed'"

    def test_record_paths(self, sap_config):
        from core.models.domain import EntityType
        connector, _ = sap_connector(sap_config, session_handler({}))
        assert connector._record_path(EntityType.VENDORS, "V100") == "/b1s/v1/BusinessPartners('V100')"
        assert connector._record_path(EntityType.PURCHASE_ORDERS, "42") == "/b1s/v1/PurchaseOrders(42)"


class TestSAPSession:

    def test_reads_send_session_cookie_and_translate(self, sap_config):
        from core.models.domain import SupplierStatus, SupplierType
        routes = {("GET", PARTNERS): {"value": [{
            "CardCode": "V100",
            "CardName": "Acme Metals",
            "EmailAddress": "ap@acme.example.com",
            "City": "Dayton",
            "Valid": "tNO",
            "Frozen": "tYES",
            "U_SupplierType": "MFR",
        }]}}
        connector, http = sap_connector(sap_config, session_handler(routes))

        vendors = asyncio.run(connector.get_vendors({"limit": 5}))

        assert len(vendors) == 1
        vendor = vendors[0]
        assert vendor.code == "V100"
        assert vendor.status == SupplierStatus.INACTIVE
        assert vendor.supplier_type == SupplierType.MANUFACTURER
        assert vendor.address.city == "Dayton"
        assert (vendor.source_system, vendor.source_id) == ("sap", "V100")

        login = http.calls_to(LOGIN)[0]
        assert login["json"] == {"CompanyDB": "SBODEMO", "UserName": "manager", "Password": "secret"}
        read = http.calls_to(PARTNERS)[0]
        assert read["headers"]["Cookie"] == "B1SESSION=s1"
        assert read["params"]["$top"] == 5

    def test_session_reused_until_timeout(self, sap_config):
        clock = FakeClock()
        routes = {("GET", ITEMS): {"value": []}}
        connector, http = sap_connector(sap_config, session_handler(routes), clock=clock)

        async def run():
            await connector.get_inventory({"limit": 1})
            await connector.get_inventory({"limit": 2})
            clock.advance(minutes=31)
            await connector.get_inventory({"limit": 3})

        asyncio.run(run())
        assert len(http.calls_to(LOGIN)) == 2
        assert http.calls_to(ITEMS)[-1]["headers"]["Cookie"] == "B1SESSION=s2"

    def test_rejected_session_reauthenticates_once(self, sap_config):
        from connectors.errors import error_for_status

        def items(headers, **kwargs):
            if headers["Cookie"] == "B1SESSION=s1":
                raise error_for_status(401, url=ITEMS)
            return {"value": [{"ItemCode": "A1", "QuantityOnStock": "12.5"}]}

        connector, http = sap_connector(sap_config, session_handler({("GET", ITEMS): items}))
        inventory = asyncio.run(connector.get_inventory())

        assert inventory[0].item_code == "A1"
        assert str(inventory[0].quantity_on_hand) == "12.5"
        assert len(http.calls_to(LOGIN)) == 2
        assert len(http.calls_to(ITEMS)) == 2

    def test_second_rejection_propagates(self, sap_config):
        from connectors.auth import AuthState
        from connectors.errors import ERPAuthenticationError, error_for_status

        def items(**kwargs):
            raise error_for_status(401, url=ITEMS)

        connector, http = sap_connector(sap_config, session_handler({("GET", ITEMS): items}))
        with pytest.raises(ERPAuthenticationError):
            asyncio.run(connector.get_inventory())
        assert len(http.calls_to(LOGIN)) == 2
        assert len(http.calls_to(ITEMS)) == 2
        assert connector.token_manager.token is None
        assert connector.token_manager.state == AuthState.EXPIRED

    def test_login_without_session_id(self, sap_config):
        connector, _ = sap_connector(sap_config, lambda method, path, **kwargs: {})
        assert asyncio.run(connector.test_connection()) is False

    def test_logout_invalidates_session(self, sap_config):
        from connectors.auth import AuthState
        routes = {("POST", "/b1s/v1/Logout"): {}}
        connector, http = sap_connector(sap_config, session_handler(routes))

        async def run():
            await connector.authenticate()
            await connector.logout()

        asyncio.run(run())
        assert connector.token_manager.state == AuthState.EXPIRED
        assert http.calls_to("/b1s/v1/Logout")[0]["headers"]["Cookie"] == "B1SESSION=s1"


class TestSAPWrites:

    def test_sync_to_erp_creates_unknown_and_updates_known(self, sap_config):
        from connectors.errors import error_for_status

        def lookup(**kwargs):
            raise error_for_status(404, url="lookup")

        routes = {
            ("GET", "/b1s/v1/BusinessPartners('V1')"): {"CardCode": "V1"},
            ("GET", "/b1s/v1/BusinessPartners('V2')"): lookup,
            ("PATCH", "/b1s/v1/BusinessPartners('V1')"): {},
            ("POST", PARTNERS): {"CardCode": "V2"},
        }
        connector, http = sap_connector(sap_config, session_handler(routes))

        result = asyncio.run(connector.sync_to_erp("suppliers", [
            {"CardCode": "V1", "CardName": "Known"},
            {"CardCode": "V2", "CardName": "New"},
        ]))

        assert (result.success_count, result.updated_count, result.new_count) == (2, 1, 1)
        assert result.failure_count == 0
        assert http.calls_to(PARTNERS)[0]["json"]["CardName"] == "New"

    def test_sync_to_erp_isolates_record_failures(self, sap_config):
        from connectors.errors import error_for_status

        def create(json, **kwargs):
            if json["U_InspectionNo"] == "QC2":
                raise error_for_status(400, url="create")
            return {"DocEntry": 7}

        routes = {("POST", "/b1s/v1/U_QUALITY_INSPECTIONS"): create}
        connector, _ = sap_connector(sap_config, session_handler(routes))

        result = asyncio.run(connector.sync_to_erp("inspections", [
            {"U_InspectionNo": "QC1"},
            {"U_InspectionNo": "QC2"},
        ]))

        assert result.success_count == 1
        assert result.failure_count == 1
        assert result.errors[0].index == 1

    def test_create_vendor_translates_both_ways(self, sap_config):
        from core.models.domain import Supplier, SupplierStatus

        def create(json, **kwargs):
            return {**json, "CardCode": "V9"}

        connector, http = sap_connector(sap_config, session_handler({("POST", PARTNERS): create}))
        created = asyncio.run(connector.create_vendor(
            Supplier(name="Bolt Co", email="sales@bolt.example.com", status=SupplierStatus.PENDING)
        ))

        sent = http.calls_to(PARTNERS)[0]["json"]
        assert sent["CardType"] == "S"
        assert (sent["Valid"], sent["Frozen"]) == ("tNO", "tNO")
        assert created.code == "V9"
        assert created.status == SupplierStatus.PENDING

    def test_production_orders_are_read_only(self, sap_config):
        from connectors.errors import CapabilityNotImplementedError
        connector, _ = sap_connector(sap_config, session_handler({}))
        with pytest.raises(CapabilityNotImplementedError):
            asyncio.run(connector.sync_to_erp("production_orders", []))
