"""Shared pytest fixtures for the ERP integration tests."""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

import pytest


class FakeHttpClient:
    """Scripted stand-in for ERPHttpClient.

    ``handler(method, path, **kwargs)`` decides the response for each call;
    it may return a value, raise an ERPError or be a coroutine function.
    Every call is recorded in ``calls``.
    """

    def __init__(self, handler: Callable[..., Any]):
        self.handler = handler
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        call = {
            "method": method,
            "path": path,
            "params": params,
            "json": json,
            "data": data,
            "headers": headers or {},
            "timeout": timeout,
        }
        self.calls.append(call)
        result = self.handler(method, path, **{k: v for k, v in call.items() if k not in ("method", "path")})
        if asyncio.iscoroutine(result):
            result = await result
        return result

    def calls_to(self, path: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["path"] == path]

    async def close(self) -> None:
        self.closed = True


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 6, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def reset_metrics():
    """Start every test with empty counters."""
    from core.observability.metrics import MetricsCollector
    MetricsCollector.instance().reset()
    yield


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def synthetic_config():
    """Synthetic provider config without simulated latency."""
    from core.config import ERPProviderConfig
    return ERPProviderConfig(
        provider="synthetic",
        retry_attempts=0,
        retry_delay_seconds=0,
        cache_enabled=False,
        custom_settings={"seed": 12345, "delay_ms": 0, "success_ratio": 0.95},
    )


@pytest.fixture
def sap_config():
    from core.config import ERPProviderConfig, SAP_DEFAULT_ENDPOINTS
    return ERPProviderConfig(
        provider="sap",
        base_url="https://sap.example.com:50000",
        credentials={"company_db": "SBODEMO", "username": "manager", "password": "secret"},
        endpoints=dict(SAP_DEFAULT_ENDPOINTS),
        timeout_seconds=5,
        retry_attempts=2,
        retry_delay_seconds=0,
        retry_backoff=1.0,
        cache_enabled=True,
        cache_ttl_seconds=60,
        custom_settings={"session_timeout_minutes": 30},
    )


@pytest.fixture
def oracle_config():
    from core.config import ERPProviderConfig, ORACLE_DEFAULT_ENDPOINTS
    return ERPProviderConfig(
        provider="oracle",
        base_url="https://erp.example.oraclecloud.com",
        credentials={
            "client_id": "client",
            "client_secret": "shh",
            "username": "integration",
            "password": "secret",
        },
        endpoints=dict(ORACLE_DEFAULT_ENDPOINTS),
        timeout_seconds=5,
        retry_attempts=2,
        retry_delay_seconds=0,
        retry_backoff=1.0,
        cache_enabled=True,
        cache_ttl_seconds=60,
        custom_settings={"instance_id": "acme"},
    )


@pytest.fixture
def settings(synthetic_config):
    from core.config import ERPSettings
    return ERPSettings(active_provider="synthetic", providers={"synthetic": synthetic_config})
