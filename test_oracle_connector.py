"""
Tests for the Oracle ERP Cloud connector: OAuth token exchange, REST query
dialect and PUT updates.
"""

import asyncio

import pytest

from conftest import FakeClock, FakeHttpClient

TOKEN = "/auth/oauth2/v1/token"
SUPPLIERS = "/fscmRestApi/resources/11.13.18.05/suppliers"
WORK_ORDERS = "/fscmRestApi/resources/11.13.18.05/workOrders"


def oracle_connector(config, handler, clock=None):
    from connectors.oracle import OracleConnector
    from core.cache import InMemoryCache
    http = FakeHttpClient(handler)
    return OracleConnector(config, cache=InMemoryCache(), http_client=http, clock=clock or FakeClock()), http


def token_handler(routes, expires_in=3600):
    issued = []

    def handler(method, path, **kwargs):
        if path == TOKEN:
            issued.append(1)
            return {"access_token": f"t{len(issued)}", "token_type": "Bearer", "expires_in": expires_in}
        route = routes[(method, path)]
        return route(**kwargs) if callable(route) else route

    return handler


class TestOracleQueryDialect:

    def test_default_paging_and_only_data(self, oracle_config):
        from core.models.domain import EntityType
        connector, _ = oracle_connector(oracle_config, token_handler({}))

        query = connector._build_query(EntityType.INVENTORY, {})
        assert query == {"limit": 100, "offset": 0, "onlyData": "true"}

    def test_q_clauses_joined_with_semicolon(self, oracle_config):
        from core.models.domain import EntityType
        connector, _ = oracle_connector(oracle_config, token_handler({}))

        query = connector._build_query(EntityType.VENDORS, {
            "vendor_type": "MANUFACTURER",
            "supplier_code": "S-1",
            "status": "pending",
            "limit": 25,
            "offset": 50,
        })
        assert query["q"] == "supplierType='MANUFACTURER';supplierNumber='S-1';status='PENDING_APPROVAL'"
        assert (query["limit"], query["offset"]) == (25, 50)

    def test_work_order_status_attribute(self, oracle_config):
        from core.models.domain import EntityType
        connector, _ = oracle_connector(oracle_config, token_handler({}))
        query = connector._build_query(EntityType.PRODUCTION_ORDERS, {"status": "cancelled"})
        assert query["q"] == "workOrderStatusCode='CANCELED'"

    def test_record_path(self, oracle_config):
        from core.models.domain import EntityType
        connector, _ = oracle_connector(oracle_config, token_handler({}))
        assert connector._record_path(EntityType.VENDORS, "300100") == f"{SUPPLIERS}/300100"


class TestOracleAuth:

    def test_password_grant_and_bearer_header(self, oracle_config):
        routes = {("GET", SUPPLIERS): {"items": [{
            "id": 300100,
            "supplierNumber": "S-1",
            "supplierName": "Acme Metals",
            "status": "ACTIVE",
            "contacts": [{"name": "Pat", "email": "pat@acme.example.com"}],
        }]}}
        connector, http = oracle_connector(oracle_config, token_handler(routes))

        suppliers = asyncio.run(connector.get_vendors())

        grant = http.calls_to(TOKEN)[0]
        assert grant["data"]["grant_type"] == "password"
        assert grant["data"]["scope"] == "https://acme.erp.cloud"
        assert grant["headers"]["Content-Type"] == "application/x-www-form-urlencoded"
        assert http.calls_to(SUPPLIERS)[0]["headers"]["Authorization"] == "Bearer t1"

        supplier = suppliers[0]
        assert supplier.source_id == "300100"
        assert supplier.email == "pat@acme.example.com"

    def test_token_refreshed_after_expires_in(self, oracle_config):
        clock = FakeClock()
        routes = {("GET", SUPPLIERS): {"items": []}}
        connector, http = oracle_connector(oracle_config, token_handler(routes, expires_in=60), clock=clock)

        async def run():
            await connector.get_vendors({"limit": 1})
            clock.advance(seconds=59)
            await connector.get_vendors({"limit": 2})
            clock.advance(seconds=1)
            await connector.get_vendors({"limit": 3})

        asyncio.run(run())
        assert len(http.calls_to(TOKEN)) == 2

    def test_concurrent_requests_share_one_token_exchange(self, oracle_config):
        async def slow_token():
            await asyncio.sleep(0.01)
            return {"access_token": "t1", "expires_in": 3600}

        def handler(method, path, params=None, **kwargs):
            if path == TOKEN:
                return slow_token()
            return {"items": []}

        connector, http = oracle_connector(oracle_config, handler)

        async def run():
            await asyncio.gather(*(connector.get_vendors({"offset": n}) for n in range(5)))

        asyncio.run(run())
        assert len(http.calls_to(TOKEN)) == 1
        assert len(http.calls_to(SUPPLIERS)) == 5

    def test_missing_access_token(self, oracle_config):
        from connectors.errors import ERPAuthenticationError
        connector, _ = oracle_connector(oracle_config, lambda method, path, **kwargs: {"error": "invalid_grant"})
        with pytest.raises(ERPAuthenticationError):
            asyncio.run(connector.authenticate())


class TestOracleWrites:

    def test_update_uses_put(self, oracle_config):
        from core.models.domain import Supplier

        def update(json, **kwargs):
            return {**json, "id": 300100}

        routes = {("PUT", f"{SUPPLIERS}/300100"): update}
        connector, http = oracle_connector(oracle_config, token_handler(routes))

        vendor = Supplier(code="S-1", name="Acme Metals", source_system="oracle", source_id="300100")
        updated = asyncio.run(connector.update_vendor("300100", vendor))

        sent = http.calls_to(f"{SUPPLIERS}/300100")[0]["json"]
        assert sent["supplierNumber"] == "S-1"
        assert sent["status"] == "ACTIVE"
        assert updated.source_id == "300100"

    def test_work_orders_translate_priority(self, oracle_config):
        from core.models.domain import Priority, ProductionOrderStatus
        routes = {("GET", WORK_ORDERS): {"items": [{
            "workOrderId": 9,
            "workOrderNumber": "WO-9",
            "workOrderStatusCode": "IN_PROCESS",
            "workOrderPriority": 1,
            "plannedQuantity": "40",
        }]}}
        connector, _ = oracle_connector(oracle_config, token_handler(routes))

        order = asyncio.run(connector.get_production_orders())[0]
        assert order.status == ProductionOrderStatus.IN_PROGRESS
        assert order.priority == Priority.URGENT
        assert order.source_id == "9"
