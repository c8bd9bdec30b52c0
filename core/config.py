"""ERP integration configuration.

Per-provider settings (base URL, credentials, endpoint map, timeout, retry
and cache options) plus global defaults and the active provider selector.

Configuration is read from environment variables. A ``.env`` file at the
repository root is loaded first if it exists:

    ERP_PROVIDER=sap                 # sap | oracle | synthetic
    ERP_TIMEOUT_SECONDS=30
    ERP_RETRY_ATTEMPTS=3
    ERP_RETRY_DELAY_SECONDS=1.0
    ERP_CACHE_ENABLED=true
    ERP_CACHE_TTL_SECONDS=300
    SAP_BASE_URL / SAP_COMPANY_DB / SAP_USERNAME / SAP_PASSWORD
    ORACLE_BASE_URL / ORACLE_CLIENT_ID / ORACLE_CLIENT_SECRET /
        ORACLE_USERNAME / ORACLE_PASSWORD / ORACLE_INSTANCE_ID
    SYNTHETIC_SEED / SYNTHETIC_DELAY_MS / SYNTHETIC_SUCCESS_RATIO
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


SUPPORTED_PROVIDERS = ("sap", "oracle", "synthetic")


# =============================================================================
# Default Endpoint Maps
# =============================================================================

SAP_DEFAULT_ENDPOINTS: Dict[str, str] = {
    "login": "/b1s/v1/Login",
    "logout": "/b1s/v1/Logout",
    "vendors": "/b1s/v1/BusinessPartners",
    "inventory": "/b1s/v1/Items",
    "purchase_orders": "/b1s/v1/PurchaseOrders",
    "production_orders": "/b1s/v1/ProductionOrders",
    "inspections": "/b1s/v1/U_QUALITY_INSPECTIONS",
}

ORACLE_DEFAULT_ENDPOINTS: Dict[str, str] = {
    "token": "/auth/oauth2/v1/token",
    "vendors": "/fscmRestApi/resources/11.13.18.05/suppliers",
    "inventory": "/fscmRestApi/resources/11.13.18.05/itemsV2",
    "purchase_orders": "/fscmRestApi/resources/11.13.18.05/purchaseOrders",
    "production_orders": "/fscmRestApi/resources/11.13.18.05/workOrders",
    "inspections": "/fscmRestApi/resources/11.13.18.05/qualityInspections",
}


# =============================================================================
# Models
# =============================================================================

class ERPProviderConfig(BaseModel):
    """Configuration for one ERP provider.

    Timeout, retry and cache options left as None inherit the global
    defaults when resolved through ``ERPSettings.get_provider_config``.
    """

    provider: str
    base_url: str = ""
    credentials: Dict[str, str] = Field(default_factory=dict)
    endpoints: Dict[str, str] = Field(default_factory=dict)

    timeout_seconds: Optional[float] = None
    retry_attempts: Optional[int] = Field(default=None, ge=0)
    retry_delay_seconds: Optional[float] = Field(default=None, ge=0)
    retry_backoff: Optional[float] = Field(default=None, ge=1)
    cache_enabled: Optional[bool] = None
    cache_ttl_seconds: Optional[float] = None

    # Adapter-specific extras (synthetic seed/latency, Oracle instance id)
    custom_settings: Dict[str, Any] = Field(default_factory=dict)

    def endpoint(self, name: str) -> str:
        """Get a configured endpoint path.

        Raises:
            KeyError: If no endpoint is configured under that name
        """
        try:
            return self.endpoints[name]
        except KeyError:
            raise KeyError(f"No '{name}' endpoint configured for provider '{self.provider}'")


class ERPSettings(BaseModel):
    """Global ERP configuration: defaults plus the active provider."""

    active_provider: str = "synthetic"
    timeout_seconds: float = 30.0
    retry_attempts: int = Field(default=3, ge=0)
    retry_delay_seconds: float = Field(default=1.0, ge=0)
    retry_backoff: float = Field(default=1.0, ge=1)
    cache_enabled: bool = True
    cache_ttl_seconds: float = 300.0
    providers: Dict[str, ERPProviderConfig] = Field(default_factory=dict)

    def get_provider_config(self, name: Optional[str] = None) -> ERPProviderConfig:
        """Resolve a provider config with global defaults filled in.

        Args:
            name: Provider name; defaults to the active provider

        Raises:
            ValueError: If the provider is unknown or not configured
        """
        name = name or self.active_provider
        if name not in SUPPORTED_PROVIDERS:
            raise ValueError(
                f"Unknown ERP provider: {name}. Supported: {list(SUPPORTED_PROVIDERS)}"
            )
        config = self.providers.get(name)
        if config is None:
            raise ValueError(f"ERP provider '{name}' is not configured")

        defaults = {
            "timeout_seconds": self.timeout_seconds,
            "retry_attempts": self.retry_attempts,
            "retry_delay_seconds": self.retry_delay_seconds,
            "retry_backoff": self.retry_backoff,
            "cache_enabled": self.cache_enabled,
            "cache_ttl_seconds": self.cache_ttl_seconds,
        }
        updates = {k: v for k, v in defaults.items() if getattr(config, k) is None}
        return config.model_copy(update=updates)

    def get_active_config(self) -> ERPProviderConfig:
        return self.get_provider_config(self.active_provider)


# =============================================================================
# Environment Loading
# =============================================================================

def _env_bool(value: Optional[str], default: Optional[bool]) -> Optional[bool]:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(value: Optional[str], cast, default=None):
    if value is None or value == "":
        return default
    return cast(value)


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
) -> ERPSettings:
    """Build ERP settings from environment variables.

    Args:
        env: Mapping to read instead of ``os.environ`` (no .env loading)
        env_file: Explicit .env path; defaults to the repository root .env

    Returns:
        ERPSettings with sap, oracle and synthetic providers configured
    """
    if env is None:
        env_path = env_file or Path(__file__).resolve().parents[1] / ".env"
        if env_path.exists():
            load_dotenv(env_path)
        env = os.environ

    sap = ERPProviderConfig(
        provider="sap",
        base_url=env.get("SAP_BASE_URL", ""),
        credentials={
            "company_db": env.get("SAP_COMPANY_DB", ""),
            "username": env.get("SAP_USERNAME", ""),
            "password": env.get("SAP_PASSWORD", ""),
        },
        endpoints=dict(SAP_DEFAULT_ENDPOINTS),
        timeout_seconds=_env_number(env.get("SAP_TIMEOUT_SECONDS"), float),
        custom_settings={
            "session_timeout_minutes": _env_number(env.get("SAP_SESSION_TIMEOUT_MINUTES"), int, 30),
        },
    )

    oracle = ERPProviderConfig(
        provider="oracle",
        base_url=env.get("ORACLE_BASE_URL", ""),
        credentials={
            "client_id": env.get("ORACLE_CLIENT_ID", ""),
            "client_secret": env.get("ORACLE_CLIENT_SECRET", ""),
            "username": env.get("ORACLE_USERNAME", ""),
            "password": env.get("ORACLE_PASSWORD", ""),
        },
        endpoints=dict(ORACLE_DEFAULT_ENDPOINTS),
        timeout_seconds=_env_number(env.get("ORACLE_TIMEOUT_SECONDS"), float),
        custom_settings={
            "instance_id": env.get("ORACLE_INSTANCE_ID", ""),
        },
    )

    synthetic = ERPProviderConfig(
        provider="synthetic",
        custom_settings={
            "seed": _env_number(env.get("SYNTHETIC_SEED"), int, 12345),
            "delay_ms": _env_number(env.get("SYNTHETIC_DELAY_MS"), int, 200),
            "success_ratio": _env_number(env.get("SYNTHETIC_SUCCESS_RATIO"), float, 0.95),
        },
    )

    return ERPSettings(
        active_provider=env.get("ERP_PROVIDER", "synthetic").strip().lower(),
        timeout_seconds=_env_number(env.get("ERP_TIMEOUT_SECONDS"), float, 30.0),
        retry_attempts=_env_number(env.get("ERP_RETRY_ATTEMPTS"), int, 3),
        retry_delay_seconds=_env_number(env.get("ERP_RETRY_DELAY_SECONDS"), float, 1.0),
        retry_backoff=_env_number(env.get("ERP_RETRY_BACKOFF"), float, 1.0),
        cache_enabled=_env_bool(env.get("ERP_CACHE_ENABLED"), True),
        cache_ttl_seconds=_env_number(env.get("ERP_CACHE_TTL_SECONDS"), float, 300.0),
        providers={"sap": sap, "oracle": oracle, "synthetic": synthetic},
    )
