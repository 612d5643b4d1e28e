"""Tests for BrainClientConfig."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from brainclient import BrainClientConfig, LogLevel, load_config_from_env


class TestBrainClientConfig:
    """Tests for BrainClientConfig model."""

    def test_create_default_config(self) -> None:
        """Test creating a BrainClientConfig with defaults."""
        config = BrainClientConfig()
        assert config.base_url is None
        assert config.api_key is None
        assert config.service_secret is None
        assert config.timeout == 10.0
        assert config.proxy_timeout == 30.0
        assert config.capabilities.cache_ttl == 3600
        assert config.capabilities.auto_register is True
        assert config.heartbeat.interval_minutes == 5
        assert config.log_level == LogLevel.INFO
        assert config.is_configured is False
        assert config.proxy_configured is False

    def test_base_url_trailing_slash_stripped(self) -> None:
        config = BrainClientConfig(base_url="https://brain.example.com/", api_key="brain_abc")
        assert config.base_url == "https://brain.example.com"
        assert config.is_configured is True

    def test_base_url_requires_http_scheme(self) -> None:
        with pytest.raises(ValueError, match="Base URL must start with"):
            BrainClientConfig(base_url="brain.example.com")

    def test_blank_credentials_are_none(self) -> None:
        """Blank strings from the environment count as missing."""
        config = BrainClientConfig(base_url="https://brain.example.com", api_key="  ", service_secret="")
        assert config.api_key is None
        assert config.service_secret is None
        assert config.is_configured is False

    def test_proxy_configured(self) -> None:
        config = BrainClientConfig(base_url="https://brain.example.com", service_secret="brn_svc_x")
        assert config.proxy_configured is True
        assert config.is_configured is False

    def test_timeouts_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            BrainClientConfig(timeout=0)
        with pytest.raises(ValueError):
            BrainClientConfig(proxy_timeout=-1)

    def test_log_level_from_string(self) -> None:
        config = BrainClientConfig(log_level="debug")
        assert config.log_level == LogLevel.DEBUG

    def test_log_level_invalid(self) -> None:
        with pytest.raises(ValueError, match="Invalid log level"):
            BrainClientConfig(log_level="INVALID")

    def test_redis_url_validation(self) -> None:
        for url in ["redis://localhost:6379/0", "rediss://localhost:6379/0", "unix:///tmp/redis.sock"]:
            assert BrainClientConfig(redis_url=url).redis_url == url
        for url in ["http://localhost:6379", "localhost:6379"]:
            with pytest.raises(ValueError, match="Redis URL must start with"):
                BrainClientConfig(redis_url=url)

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValueError):
            BrainClientConfig(unknown_field="x")


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env."""

    def test_defaults_with_empty_env(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            config = load_config_from_env()
        assert config.base_url is None
        assert config.is_configured is False
        assert config.events == {}
        assert config.capabilities.declared == {}

    def test_all_brain_variables(self) -> None:
        env = {
            "BRAIN_BASE_URL": "https://brain.example.com/",
            "BRAIN_API_KEY": "brain_key",
            "BRAIN_SERVICE_SECRET": "brn_svc_secret",
            "BRAIN_TIMEOUT": "7.5",
            "BRAIN_PROXY_TIMEOUT": "45",
            "BRAIN_CACHE_TTL": "120",
            "BRAIN_AUTO_REGISTER": "false",
            "BRAIN_CHECK_ON_BOOT": "0",
            "BRAIN_HEARTBEAT_ENABLED": "no",
            "BRAIN_HEARTBEAT_INTERVAL": "15",
            "BRAIN_SITE_NAME": "Shop",
            "BRAIN_ENVIRONMENT": "staging",
            "BRAIN_SITE_URL": "https://shop.example.com",
            "BRAIN_EVENTS": '{"order.completed": "An order was paid"}',
            "BRAIN_CAPABILITIES": '{"seo_snapshot": "1.0", "uptime": {"version": "2.0"}}',
            "LOG_LEVEL": "WARNING",
            "LOG_JSON": "true",
            "REDIS_URL": "redis://localhost:6379/1",
        }
        with patch.dict(os.environ, env, clear=True):
            config = load_config_from_env()

        assert config.base_url == "https://brain.example.com"
        assert config.api_key == "brain_key"
        assert config.service_secret == "brn_svc_secret"
        assert config.timeout == 7.5
        assert config.proxy_timeout == 45.0
        assert config.capabilities.cache_ttl == 120
        assert config.capabilities.auto_register is False
        assert config.capabilities.check_on_boot is False
        assert config.capabilities.declared == {"seo_snapshot": "1.0", "uptime": {"version": "2.0"}}
        assert config.heartbeat.enabled is False
        assert config.heartbeat.interval_minutes == 15
        assert config.heartbeat.site_name == "Shop"
        assert config.heartbeat.environment == "staging"
        assert config.heartbeat.site_url == "https://shop.example.com"
        assert config.events == {"order.completed": "An order was paid"}
        assert config.log_level == LogLevel.WARNING
        assert config.log_json is True
        assert config.redis_url == "redis://localhost:6379/1"

    def test_explicit_environ_mapping(self) -> None:
        """An explicit mapping is read instead of os.environ."""
        with patch.dict(os.environ, {"BRAIN_API_KEY": "from_os"}, clear=True):
            config = load_config_from_env({"BRAIN_API_KEY": "from_mapping"})
        assert config.api_key == "from_mapping"

    def test_invalid_json_object(self) -> None:
        with pytest.raises(ValueError, match="BRAIN_EVENTS must be a JSON object"):
            load_config_from_env({"BRAIN_EVENTS": "[1, 2]"})
        with pytest.raises(ValueError, match="BRAIN_CAPABILITIES must be a JSON object"):
            load_config_from_env({"BRAIN_CAPABILITIES": "{not json"})
