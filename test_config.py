"""
Tests for ERP settings loading and provider resolution.
"""

import pytest


class TestLoadSettings:
    """Settings come from an environment mapping."""

    def test_defaults(self):
        from core.config import load_settings
        settings = load_settings(env={})

        assert settings.active_provider == "synthetic"
        assert settings.retry_attempts == 3
        assert settings.cache_enabled is True
        assert settings.cache_ttl_seconds == 300.0
        assert set(settings.providers) == {"sap", "oracle", "synthetic"}

        synthetic = settings.get_active_config()
        assert synthetic.custom_settings == {"seed": 12345, "delay_ms": 200, "success_ratio": 0.95}

    def test_environment_overrides(self):
        from core.config import load_settings
        settings = load_settings(env={
            "ERP_PROVIDER": " SAP ",
            "ERP_RETRY_ATTEMPTS": "5",
            "ERP_CACHE_ENABLED": "false",
            "SAP_BASE_URL": "https://sap.example.com:50000",
            "SAP_COMPANY_DB": "SBODEMO",
            "SAP_TIMEOUT_SECONDS": "12.5",
        })

        config = settings.get_active_config()
        assert config.provider == "sap"
        assert config.base_url == "https://sap.example.com:50000"
        assert config.credentials["company_db"] == "SBODEMO"
        assert config.timeout_seconds == 12.5
        assert config.retry_attempts == 5
        assert config.cache_enabled is False
        assert config.endpoint("login") == "/b1s/v1/Login"

    def test_oracle_instance_id(self):
        from core.config import load_settings
        settings = load_settings(env={"ORACLE_INSTANCE_ID": "acme"})
        assert settings.get_provider_config("oracle").custom_settings["instance_id"] == "acme"


class TestProviderResolution:
    """Provider configs inherit unset options from the globals."""

    def test_provider_values_win_over_globals(self):
        from core.config import ERPProviderConfig, ERPSettings
        settings = ERPSettings(
            retry_attempts=3,
            timeout_seconds=30,
            providers={"sap": ERPProviderConfig(provider="sap", retry_attempts=0)},
        )

        config = settings.get_provider_config("sap")
        assert config.retry_attempts == 0
        assert config.timeout_seconds == 30

    def test_unknown_provider(self):
        from core.config import ERPSettings
        with pytest.raises(ValueError, match="Unknown ERP provider"):
            ERPSettings().get_provider_config("netsuite")

    def test_unconfigured_provider(self):
        from core.config import ERPSettings
        with pytest.raises(ValueError, match="not configured"):
            ERPSettings(active_provider="oracle").get_active_config()

    def test_missing_endpoint(self):
        from core.config import ERPProviderConfig
        with pytest.raises(KeyError):
            ERPProviderConfig(provider="sap").endpoint("vendors")

    def test_negative_retry_attempts_rejected(self):
        from pydantic import ValidationError
        from core.config import ERPProviderConfig
        with pytest.raises(ValidationError):
            ERPProviderConfig(provider="sap", retry_attempts=-1)
