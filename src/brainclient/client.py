"""BrainClient: one object wiring transport, cache, events, catalog and proxy.

Usage:
    from brainclient import BrainClient, load_config_from_env

    client = BrainClient.from_config(load_config_from_env())
    client.send("order.completed", {"order_id": "ORD-1"}, {"severity": "info"})

    # In code paths that must never fail on missing configuration:
    client = BrainClient.best_effort(load_config_from_env())
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from .cache import CacheStore, MemoryCacheStore, create_cache_store
from .capabilities import CapabilityRegistry
from .catalog import HubCatalog
from .config import BrainClientConfig
from .events import EventDispatcher
from .exceptions import ConfigurationError
from .heartbeat import HeartbeatReport, HeartbeatService
from .models import CapabilityEntry, DataTypeSchema, EventReceipt, HubConfig, RegistrationResult, VersionInfo
from .proxy import ServiceProxy
from .result import Result
from .tasks import TaskSubmitter, ThreadPoolTaskSubmitter
from .transport import HttpTransport
from .validation import LocalValidator

logger = logging.getLogger(__name__)

_NOT_CONFIGURED = "Brain client not configured. Set BRAIN_BASE_URL and BRAIN_API_KEY."
_PROXY_NOT_CONFIGURED = "Brain service proxy not configured. Set BRAIN_BASE_URL and BRAIN_SERVICE_SECRET."


class _UnconfiguredProxy(ServiceProxy):
    """Proxy handed out by a best-effort client without a service secret."""

    def __init__(self) -> None:
        super().__init__("", "", transport=None)  # type: ignore[arg-type]

    def call(self, method: str, target_service: str, path: str, body: Optional[Mapping[str, Any]] = None) -> Result[Any]:
        logger.warning("Brain proxy call to %s skipped: service secret not configured", target_service)
        return Result.failure(ConfigurationError(_PROXY_NOT_CONFIGURED))


class BrainClient:
    """Client for one hub + credential set.

    Construct with ``from_config`` (raises on missing configuration) or
    ``best_effort`` (returns a disabled client whose operations fail with
    ConfigurationError without touching the network). There is no global
    instance: build one and pass it where it is needed.
    """

    def __init__(
        self,
        config: BrainClientConfig,
        *,
        cache: Optional[CacheStore] = None,
        submitter: Optional[TaskSubmitter] = None,
        transport: Optional[HttpTransport] = None,
        strict: bool = True,
    ) -> None:
        self.config = config
        self.strict = strict
        self.enabled = config.is_configured
        self._owns_transport = transport is None
        self._owns_submitter = submitter is None
        self.transport = transport or HttpTransport(timeout=config.timeout)
        self.cache = cache if cache is not None else self._default_cache(config, strict)
        self.registry = CapabilityRegistry(self.cache)

        self.events: Optional[EventDispatcher] = None
        self.catalog: Optional[HubCatalog] = None
        self.validator: Optional[LocalValidator] = None
        self.heartbeat: Optional[HeartbeatService] = None
        if self.enabled:
            self.events = EventDispatcher(
                config.base_url,
                config.api_key,
                self.transport,
                submitter=submitter,
                timeout=config.timeout,
            )
            self.catalog = HubCatalog(
                config.base_url,
                config.api_key,
                self.transport,
                self.cache,
                self.registry,
                cache_ttl=config.capabilities.cache_ttl,
                timeout=config.timeout,
            )
            self.validator = LocalValidator(self.catalog)
            self.heartbeat = HeartbeatService(config, self.events, self.catalog, self.registry, self.cache)

        self._proxy: Optional[ServiceProxy] = None
        if config.proxy_configured:
            self._proxy = ServiceProxy(
                config.base_url,
                config.service_secret,
                self.transport,
                timeout=config.proxy_timeout,
            )

    @staticmethod
    def _default_cache(config: BrainClientConfig, strict: bool) -> CacheStore:
        try:
            return create_cache_store(config.redis_url)
        except ConfigurationError as e:
            if strict:
                raise
            logger.warning("Falling back to in-memory Brain cache: %s", e)
            return MemoryCacheStore()

    @classmethod
    def from_config(cls, config: BrainClientConfig, **kwargs: Any) -> "BrainClient":
        """Build a client, raising ConfigurationError if base URL or API key is missing."""
        if not config.is_configured:
            raise ConfigurationError(_NOT_CONFIGURED)
        return cls(config, strict=True, **kwargs)

    @classmethod
    def best_effort(cls, config: BrainClientConfig, **kwargs: Any) -> "BrainClient":
        """Build a client that never raises for missing configuration."""
        if not config.is_configured:
            logger.warning("%s Events will be skipped.", _NOT_CONFIGURED)
        return cls(config, strict=False, **kwargs)

    def _disabled(self, operation: str) -> Result[Any]:
        logger.warning("Brain %s skipped: client not configured", operation)
        return Result.failure(ConfigurationError(_NOT_CONFIGURED))

    # ---- Events ------------------------------------------------------------

    def send(
        self,
        event_type: str,
        payload: Mapping[str, Any],
        options: Optional[Mapping[str, Any]] = None,
    ) -> Result[EventReceipt]:
        if self.events is None:
            return self._disabled("event send")
        return self.events.send(event_type, payload, options)

    def send_async(
        self,
        event_type: str,
        payload: Mapping[str, Any],
        options: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if self.events is None:
            logger.debug("Brain async event %s skipped: client not configured", event_type)
            return
        self.events.send_async(event_type, payload, options)

    def check_version(self) -> Result[VersionInfo]:
        if self.events is None:
            return self._disabled("version check")
        return self.events.check_version()

    # ---- Catalog -----------------------------------------------------------

    def get_config(self) -> Optional[HubConfig]:
        if self.catalog is None:
            return None
        return self.catalog.get_config()

    def get_schema(self, data_type: str) -> Optional[DataTypeSchema]:
        if self.catalog is None:
            return None
        return self.catalog.get_schema(data_type)

    def register_capabilities(
        self,
        capabilities: Iterable[Union[CapabilityEntry, Mapping[str, Any]]],
    ) -> Result[RegistrationResult]:
        if self.catalog is None:
            return self._disabled("capability registration")
        return self.catalog.register_capabilities(capabilities)

    @property
    def capabilities(self) -> CapabilityRegistry:
        return self.registry

    # ---- Data types --------------------------------------------------------

    def validate(self, data_type: str, data: Mapping[str, Any]) -> dict[str, str]:
        if self.validator is None:
            return {"_schema": "Schema not found for data type"}
        return self.validator.validate(data_type, data)

    def send_data(self, data_type: str, data: Mapping[str, Any]) -> Result[Any]:
        if self.validator is None:
            return self._disabled("data send")
        return self.validator.send_data(data_type, data)

    # ---- Service proxy -----------------------------------------------------

    @property
    def proxy(self) -> ServiceProxy:
        """Gateway to other services; requires a service secret."""
        if self._proxy is not None:
            return self._proxy
        if self.strict:
            raise ConfigurationError(_PROXY_NOT_CONFIGURED)
        return _UnconfiguredProxy()

    # ---- Lifecycle ---------------------------------------------------------

    def run_heartbeat(self, sync_events: bool = False) -> HeartbeatReport:
        if self.heartbeat is None:
            logger.warning("Brain heartbeat skipped: client not configured")
            return HeartbeatReport(skipped=True)
        return self.heartbeat.run(sync_events=sync_events)

    def check_capabilities(self) -> None:
        if self.heartbeat is not None and self.config.capabilities.check_on_boot:
            self.heartbeat.check_capabilities()

    def close(self) -> None:
        if self.events is not None and self._owns_submitter:
            submitter = self.events._submitter
            if isinstance(submitter, ThreadPoolTaskSubmitter):
                submitter.shutdown()
        if self._owns_transport:
            self.transport.close()

    def __enter__(self) -> "BrainClient":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


__all__ = ["BrainClient"]
