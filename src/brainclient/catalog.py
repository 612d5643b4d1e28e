"""Hub catalog: cached hub config, data type schemas and capability registration."""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from pydantic import ValidationError

from .cache import CacheStore
from .capabilities import CapabilityRegistry
from .exceptions import DispatchError, InvalidInputError
from .logging import log_failure
from .models import CapabilityEntry, DataTypeSchema, HubConfig, RegistrationResult
from .result import Result
from .transport import API_KEY_HEADER, HttpTransport

logger = logging.getLogger(__name__)

CONFIG_PATH = "/api/v1/client/config"
CAPABILITIES_PATH = "/api/v1/client/capabilities"
SCHEMA_PATH = "/api/v1/data-types/{data_type}/schema"

DEFAULT_CACHE_TTL = 3600


def config_cache_key(api_key: str) -> str:
    """Cache key for the hub config of one API key (the key itself is never stored)."""
    digest = hashlib.sha256(api_key.encode("utf-8")).hexdigest()[:16]
    return f"brain_config_{digest}"


def schema_cache_key(data_type: str) -> str:
    return f"brain_schema_{data_type}"


class HubCatalog:
    """Read-through view of what the hub advertises for this client.

    Config and schemas are fetched at most once per TTL window per cache
    store (see ``CacheStore.remember``). Failed fetches return None and are
    not cached.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        transport: HttpTransport,
        cache: CacheStore,
        registry: CapabilityRegistry,
        cache_ttl: float = DEFAULT_CACHE_TTL,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.transport = transport
        self.cache = cache
        self.registry = registry
        self.cache_ttl = cache_ttl
        self.timeout = timeout
        self._config_key = config_cache_key(api_key)

    def _headers(self) -> dict[str, str]:
        return {API_KEY_HEADER: self.api_key}

    def _fetch(self, path: str, operation: str, **context: Any) -> Optional[dict[str, Any]]:
        result = self.transport.request(
            "GET",
            f"{self.base_url}{path}",
            headers=self._headers(),
            timeout=self.timeout,
        )
        if not result.ok:
            log_failure(logger, operation, result.error, level=logging.WARNING, **context)
            return None
        if not isinstance(result.value, dict):
            logger.warning("%s returned a non-object body: %s", operation, type(result.value).__name__)
            return None
        return result.value

    def get_config(self) -> Optional[HubConfig]:
        """Hub config (data types, endpoints, required flags), or None when unavailable."""

        def fetch() -> Optional[dict[str, Any]]:
            data = self._fetch(CONFIG_PATH, "Brain config fetch")
            if data is None:
                return None
            try:
                return HubConfig.model_validate(data).model_dump(mode="json")
            except ValidationError as e:
                logger.warning("Brain config response is malformed: %s", e)
                return None

        cached = self.cache.remember(self._config_key, self.cache_ttl, fetch)
        return HubConfig.model_validate(cached) if cached is not None else None

    def get_schema(self, data_type: str) -> Optional[DataTypeSchema]:
        """Published JSON schema for ``data_type``, or None when unavailable."""
        if not isinstance(data_type, str) or not data_type.strip():
            logger.warning("Brain schema fetch skipped: empty data type")
            return None

        def fetch() -> Optional[dict[str, Any]]:
            data = self._fetch(
                SCHEMA_PATH.format(data_type=data_type),
                "Brain schema fetch",
                data_type=data_type,
            )
            if data is None:
                return None
            try:
                schema = DataTypeSchema.model_validate({"data_type": data_type, **data})
            except ValidationError as e:
                logger.warning("Brain schema for %s is malformed: %s", data_type, e)
                return None
            return schema.model_dump(mode="json", by_alias=True)

        cached = self.cache.remember(schema_cache_key(data_type), self.cache_ttl, fetch)
        return DataTypeSchema.model_validate(cached) if cached is not None else None

    def register_capabilities(
        self,
        capabilities: Iterable[Union[CapabilityEntry, Mapping[str, Any]]],
    ) -> Result[RegistrationResult]:
        """Declare capabilities to the hub.

        On success the cached hub config is dropped (the hub's view of this
        client changed) and the returned per-capability results are merged
        into the local registry.
        """
        try:
            entries = [
                c if isinstance(c, CapabilityEntry) else CapabilityEntry.model_validate(dict(c))
                for c in capabilities
            ]
        except (ValidationError, TypeError, ValueError) as e:
            logger.warning("Brain capability registration rejected: %s", e)
            return Result.failure(InvalidInputError(f"Invalid capability: {e}"))

        result = self.transport.request(
            "POST",
            f"{self.base_url}{CAPABILITIES_PATH}",
            headers=self._headers(),
            body={"capabilities": [e.model_dump(mode="json") for e in entries]},
            timeout=self.timeout,
        )
        if not result.ok:
            log_failure(logger, "Brain capability registration", result.error, count=len(entries))
            return Result.failure(
                DispatchError(f"Capability registration failed: {result.error.message}", cause=result.error)
            )

        data = result.value if isinstance(result.value, dict) else {}
        try:
            registration = RegistrationResult.model_validate(data)
        except ValidationError as e:
            logger.warning("Brain capability registration response is malformed: %s", e)
            registration = RegistrationResult()

        self.invalidate()
        if not self.registry.register(registration.results):
            logger.warning("Brain capabilities registered with the hub but the local registry was not updated")
        logger.info("Registered %d Brain capabilities", registration.registered)
        return Result.success(registration)

    def resolve_endpoint(self, data_type: str) -> Optional[str]:
        config = self.get_config()
        return config.endpoint_for(data_type) if config is not None else None

    def required_data_types(self) -> list[str]:
        config = self.get_config()
        return config.required_types() if config is not None else []

    def invalidate(self) -> None:
        """Drop the cached hub config; the next ``get_config`` re-fetches."""
        self.cache.forget(self._config_key)


__all__ = [
    "HubCatalog",
    "config_cache_key",
    "schema_cache_key",
    "CONFIG_PATH",
    "CAPABILITIES_PATH",
    "SCHEMA_PATH",
]
