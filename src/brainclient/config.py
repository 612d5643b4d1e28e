"""Configuration contract for the Brain Nucleus client.

This module provides Pydantic-validated configuration models for everything
the client needs: hub location and credentials, request timeouts, capability
caching, heartbeat scheduling and the static custom-event declarations.

Host applications build a BrainClientConfig themselves (from their own
settings layer) or call ``load_config_from_env()``. Client code never reads
os.environ directly; all settings come through this model.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CapabilitySettings(BaseModel):
    """Capability discovery and registration settings.

    ``declared`` maps a data type name to either a version string
    (``{"seo_snapshot": "1.0"}``) or an options object
    (``{"seo_snapshot": {"version": "2.0", "status": "pending"}}``).
    """

    model_config = {"extra": "forbid"}

    cache_ttl: int = Field(
        default=3600,
        gt=0,
        description="TTL in seconds for cached hub config and data type schemas",
    )
    auto_register: bool = Field(
        default=True,
        description="Register declared capabilities with the hub on boot",
    )
    check_on_boot: bool = Field(
        default=True,
        description="Run the capability check when the host application boots",
    )
    declared: dict[str, Union[str, dict[str, Any]]] = Field(
        default_factory=dict,
        description="Capabilities this client can produce",
    )


class HeartbeatSettings(BaseModel):
    """Periodic health ping settings."""

    model_config = {"extra": "forbid"}

    enabled: bool = Field(default=True, description="Send periodic health.ping events")
    interval_minutes: int = Field(default=5, gt=0, description="Minutes between heartbeats")
    site_name: str = Field(default="Unknown", description="Reported site name")
    environment: str = Field(default="production", description="Reported environment")
    site_url: Optional[str] = Field(default=None, description="Reported public URL")


class BrainClientConfig(BaseModel):
    """Configuration for a Brain Nucleus client instance.

    One instance describes one hub + credential set. Construct one client per
    configuration and pass it to the code that needs it.
    """

    base_url: Optional[str] = Field(
        default=None,
        description="Base URL of the Brain Nucleus instance (e.g. https://brain.example.com)",
    )
    api_key: Optional[str] = Field(
        default=None,
        description="API key for events, config and schema calls",
    )
    service_secret: Optional[str] = Field(
        default=None,
        description="Service secret for proxy calls",
    )

    # Timeouts
    timeout: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for event, config and schema requests",
    )
    proxy_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Default timeout in seconds for proxied service calls",
    )

    capabilities: CapabilitySettings = Field(default_factory=CapabilitySettings)
    heartbeat: HeartbeatSettings = Field(default_factory=HeartbeatSettings)

    events: dict[str, str] = Field(
        default_factory=dict,
        description="Custom event types (event_type -> description) synced to the hub",
    )

    # Logging
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_json: bool = Field(default=False, description="Use JSON log format")

    # Shared cache backend
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis URL for a shared cache store (e.g. redis://localhost:6379/0)",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Strip trailing slashes and require an http(s) scheme."""
        if v is None or not v.strip():
            return None
        v = v.strip().rstrip("/")
        if not v.startswith(("http://", "https://")):
            raise ValueError("Base URL must start with http:// or https://")
        return v

    @field_validator("api_key", "service_secret")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate Redis URL format."""
        if v is None:
            return v
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("Redis URL must start with redis://, rediss://, or unix://")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    @property
    def is_configured(self) -> bool:
        """Whether base URL and API key are both present."""
        return bool(self.base_url and self.api_key)

    @property
    def proxy_configured(self) -> bool:
        """Whether base URL and service secret are both present."""
        return bool(self.base_url and self.service_secret)

    model_config = {
        "extra": "forbid",  # Prevent accidental extra fields
    }


_TRUTHY = ("true", "1", "yes", "on")


def _env_bool(env: dict[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_json_object(env: dict[str, str], name: str) -> dict[str, Any]:
    raw = env.get(name, "").strip()
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"{name} must be a JSON object: {e}")
    if not isinstance(value, dict):
        raise ValueError(f"{name} must be a JSON object, got {type(value).__name__}")
    return value


def load_config_from_env(environ: Optional[dict[str, str]] = None) -> BrainClientConfig:
    """Load client configuration from environment variables.

    This is the ONLY place where the environment is read for client settings.

    Environment variables:
    - BRAIN_BASE_URL: Base URL of the hub
    - BRAIN_API_KEY: API key for events/config/schema calls
    - BRAIN_SERVICE_SECRET: Service secret for proxy calls
    - BRAIN_TIMEOUT: Event request timeout in seconds (default: 10)
    - BRAIN_PROXY_TIMEOUT: Proxy request timeout in seconds (default: 30)
    - BRAIN_CACHE_TTL: Config/schema cache TTL in seconds (default: 3600)
    - BRAIN_AUTO_REGISTER: Register declared capabilities on boot (default: true)
    - BRAIN_CHECK_ON_BOOT: Run capability check on boot (default: true)
    - BRAIN_CAPABILITIES: JSON object of declared capabilities
    - BRAIN_HEARTBEAT_ENABLED: Send periodic heartbeats (default: true)
    - BRAIN_HEARTBEAT_INTERVAL: Minutes between heartbeats (default: 5)
    - BRAIN_SITE_NAME / BRAIN_ENVIRONMENT / BRAIN_SITE_URL: Heartbeat metadata
    - BRAIN_EVENTS: JSON object of custom event_type -> description
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - REDIS_URL: Redis URL for a shared cache store

    Args:
        environ: Mapping to read instead of os.environ (tests).

    Returns:
        BrainClientConfig with values from the environment or defaults.
    """
    if environ is None:
        import os

        environ = dict(os.environ)
    env = environ

    capabilities = CapabilitySettings(
        cache_ttl=int(env.get("BRAIN_CACHE_TTL", "3600")),
        auto_register=_env_bool(env, "BRAIN_AUTO_REGISTER", True),
        check_on_boot=_env_bool(env, "BRAIN_CHECK_ON_BOOT", True),
        declared=_env_json_object(env, "BRAIN_CAPABILITIES"),
    )

    heartbeat = HeartbeatSettings(
        enabled=_env_bool(env, "BRAIN_HEARTBEAT_ENABLED", True),
        interval_minutes=int(env.get("BRAIN_HEARTBEAT_INTERVAL", "5")),
        site_name=env.get("BRAIN_SITE_NAME", "Unknown"),
        environment=env.get("BRAIN_ENVIRONMENT", "production"),
        site_url=env.get("BRAIN_SITE_URL") or None,
    )

    return BrainClientConfig(
        base_url=env.get("BRAIN_BASE_URL"),
        api_key=env.get("BRAIN_API_KEY"),
        service_secret=env.get("BRAIN_SERVICE_SECRET"),
        timeout=float(env.get("BRAIN_TIMEOUT", "10")),
        proxy_timeout=float(env.get("BRAIN_PROXY_TIMEOUT", "30")),
        capabilities=capabilities,
        heartbeat=heartbeat,
        events={str(k): str(v) for k, v in _env_json_object(env, "BRAIN_EVENTS").items()},
        log_level=env.get("LOG_LEVEL", "INFO"),
        log_json=_env_bool(env, "LOG_JSON", False),
        redis_url=env.get("REDIS_URL") or None,
    )


__all__ = [
    "BrainClientConfig",
    "CapabilitySettings",
    "HeartbeatSettings",
    "LogLevel",
    "load_config_from_env",
]
