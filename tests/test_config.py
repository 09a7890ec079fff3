"""Tests for configuration loading."""

import pytest
from pydantic import ValidationError

from msgdispatch.config import Settings, clear_settings_cache, get_settings


class TestSettings:
    """Tests for Settings defaults and validation."""

    def test_dispatch_defaults(self):
        settings = Settings(delivery_url="https://hooks.example.com/send", delivery_auth_key="k")

        assert settings.dispatch_batch_size == 2
        assert settings.dispatch_interval_seconds == 120.0
        assert settings.dispatch_cycle_timeout_seconds == 30.0
        assert settings.dispatch_status_write_attempts == 3
        assert settings.dispatch_status_write_delay_ms == 100
        assert settings.dedup_ttl_seconds == 3600
        assert settings.seed_message_count == 20
        assert settings.seed_recipient == "+905551111111"

    def test_auth_key_is_secret(self):
        settings = Settings(delivery_url="https://hooks.example.com/send", delivery_auth_key="hunter2")

        assert "hunter2" not in repr(settings)
        assert settings.delivery_auth_key.get_secret_value() == "hunter2"

    def test_log_level_normalized(self):
        settings = Settings(
            delivery_url="https://hooks.example.com/send",
            delivery_auth_key="k",
            log_level="debug",
        )
        assert settings.log_level == "DEBUG"

    @pytest.mark.parametrize("environment", ["local", "dev", "stg", "prod"])
    def test_known_environments(self, environment: str):
        settings = Settings(
            delivery_url="https://hooks.example.com/send",
            delivery_auth_key="k",
            environment=environment,
        )
        assert settings.environment == environment

    def test_unknown_environment_rejected(self):
        with pytest.raises(ValidationError, match="environment must be one of"):
            Settings(
                delivery_url="https://hooks.example.com/send",
                delivery_auth_key="k",
                environment="staging",
            )

    def test_batch_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            Settings(
                delivery_url="https://hooks.example.com/send",
                delivery_auth_key="k",
                dispatch_batch_size=0,
            )

    def test_delivery_url_required(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("MSGDISPATCH_DELIVERY_URL", raising=False)

        with pytest.raises(ValidationError):
            Settings(_env_file=None, delivery_auth_key="k")  # type: ignore[call-arg]


class TestGetSettings:
    """Tests for the cached settings accessor."""

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MSGDISPATCH_DISPATCH_BATCH_SIZE", "5")
        monkeypatch.setenv("MSGDISPATCH_DISPATCH_INTERVAL_SECONDS", "10")
        clear_settings_cache()

        settings = get_settings()

        assert settings.dispatch_batch_size == 5
        assert settings.dispatch_interval_seconds == 10.0
        clear_settings_cache()

    def test_is_cached_until_cleared(self, monkeypatch: pytest.MonkeyPatch):
        clear_settings_cache()
        first = get_settings()

        monkeypatch.setenv("MSGDISPATCH_SERVICE_NAME", "other")
        assert get_settings() is first

        clear_settings_cache()
        second = get_settings()
        assert second is not first
        assert second.service_name == "other"
        clear_settings_cache()
