"""Capability registry: the data types this client has declared to the hub.

The registry is persisted in the CacheStore under one well-known key with a
30-day retention, so it survives process restarts when the store does
(RedisCacheStore). Every mutation is a read-modify-write under the store's
per-key lock; reads always go to the store, so registries in different
processes sharing one store see each other's writes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from .cache import CacheStore
from .models import CapabilityEntry, CapabilityStatus

logger = logging.getLogger(__name__)

CAPABILITIES_KEY = "brain_client_capabilities"
CAPABILITIES_RETENTION = 30 * 24 * 3600  # 30 days


class CapabilityRegistry:
    """Local view of this client's capabilities, keyed by data type.

    Entries are plain dicts as reported by the hub (``data_type``,
    ``version``, ``status`` plus any extra keys).
    """

    def __init__(
        self,
        cache: CacheStore,
        key: str = CAPABILITIES_KEY,
        retention: float = CAPABILITIES_RETENTION,
    ) -> None:
        self._cache = cache
        self._key = key
        self._retention = retention

    def _load(self) -> dict[str, dict[str, Any]]:
        cached = self._cache.get(self._key)
        return cached if isinstance(cached, dict) else {}

    def _save(self, capabilities: dict[str, dict[str, Any]]) -> None:
        self._cache.put(self._key, capabilities, self._retention)

    def has_capability(self, name: str) -> bool:
        """True only when the capability exists with status ``active``."""
        capability = self.get_capability(name)
        if capability is None:
            return False
        return capability.get("status", CapabilityStatus.PENDING.value) == CapabilityStatus.ACTIVE.value

    def get_capability(self, name: str) -> Optional[dict[str, Any]]:
        return self._load().get(name)

    def get_all(self) -> dict[str, dict[str, Any]]:
        return self._load()

    def register(self, capabilities: Iterable[Union[Mapping[str, Any], CapabilityEntry]]) -> bool:
        """Merge capabilities by ``data_type`` (last write wins).

        Entries not present in ``capabilities`` are kept; entries without a
        ``data_type`` are ignored. Returns False if the store could not be
        locked or written.
        """
        incoming: list[dict[str, Any]] = []
        for capability in capabilities:
            if isinstance(capability, CapabilityEntry):
                capability = capability.model_dump(mode="json")
            if isinstance(capability, Mapping) and capability.get("data_type"):
                incoming.append(dict(capability))

        try:
            with self._cache.lock(self._key):
                current = self._load()
                for capability in incoming:
                    current[str(capability["data_type"])] = capability
                self._save(current)
        except Exception as e:
            logger.warning("Brain capability registry update failed: %s", e)
            return False
        return True

    def update_status(self, name: str, status: Union[CapabilityStatus, str]) -> bool:
        """Set the status of an existing capability.

        Returns False if the capability is unknown or the store failed.
        """
        value = status.value if isinstance(status, CapabilityStatus) else str(status)
        try:
            with self._cache.lock(self._key):
                current = self._load()
                if name not in current:
                    return False
                current[name]["status"] = value
                self._save(current)
        except Exception as e:
            logger.warning("Brain capability status update failed for %s: %s", name, e)
            return False
        return True

    def clear(self) -> bool:
        try:
            with self._cache.lock(self._key):
                self._cache.forget(self._key)
        except Exception as e:
            logger.warning("Brain capability registry clear failed: %s", e)
            return False
        return True


def capabilities_from_config(declared: Mapping[str, Any]) -> list[CapabilityEntry]:
    """Convert configured capability declarations to entries.

    Accepts ``{"seo_snapshot": "1.0"}`` (version string) or
    ``{"seo_snapshot": {"version": "2.0", "status": "pending", ...}}``.
    """
    entries: list[CapabilityEntry] = []
    for name, declaration in declared.items():
        if isinstance(declaration, str):
            entries.append(CapabilityEntry(data_type=name, version=declaration, status=CapabilityStatus.READY))
        elif isinstance(declaration, Mapping):
            data = {"version": "1.0", "status": CapabilityStatus.READY.value, **declaration, "data_type": name}
            entries.append(CapabilityEntry.model_validate(data))
        else:
            logger.warning("Ignoring capability %s with unsupported declaration %r", name, declaration)
    return entries


__all__ = [
    "CapabilityRegistry",
    "capabilities_from_config",
    "CAPABILITIES_KEY",
    "CAPABILITIES_RETENTION",
]
