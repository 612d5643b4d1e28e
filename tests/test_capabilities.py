"""Tests for CapabilityRegistry."""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

from brainclient import (
    BrainClient,
    CapabilityEntry,
    CapabilityRegistry,
    CapabilityStatus,
    HubCatalog,
    MemoryCacheStore,
)
from brainclient.cache import RedisCacheStore
from brainclient.capabilities import CAPABILITIES_KEY, capabilities_from_config

from conftest import API_KEY, BASE_URL

REGISTERED = {"registered": 1, "results": [{"data_type": "seo_snapshot", "version": "1.0", "status": "active"}]}


def unreachable_redis_store() -> RedisCacheStore:
    redis_client = MagicMock()
    redis_client.get.return_value = None
    redis_client.lock.return_value.acquire.side_effect = ConnectionError("redis down")
    return RedisCacheStore(client=redis_client)


class TestCapabilityRegistry:
    """Tests for the persisted capability map."""

    def test_has_capability_only_when_active(self, cache) -> None:
        registry = CapabilityRegistry(cache)
        registry.register(
            [
                {"data_type": "seo_snapshot", "version": "1.0", "status": "active"},
                {"data_type": "uptime", "version": "1.0", "status": "pending"},
                {"data_type": "backups", "version": "1.0"},
            ]
        )
        assert registry.has_capability("seo_snapshot") is True
        assert registry.has_capability("uptime") is False
        assert registry.has_capability("backups") is False
        assert registry.has_capability("unknown") is False

    def test_register_merges_and_keeps_absent(self, cache) -> None:
        registry = CapabilityRegistry(cache)
        registry.register([{"data_type": "a", "status": "pending"}, {"data_type": "b", "status": "ready"}])
        registry.register([{"data_type": "a", "status": "active"}])
        assert registry.get_capability("a")["status"] == "active"
        assert registry.get_capability("b")["status"] == "ready"
        assert set(registry.get_all()) == {"a", "b"}

    def test_entries_without_data_type_ignored(self, cache) -> None:
        registry = CapabilityRegistry(cache)
        registry.register([{"status": "active"}, {"data_type": "", "status": "active"}, "junk"])
        assert registry.get_all() == {}

    def test_accepts_capability_entries(self, cache) -> None:
        registry = CapabilityRegistry(cache)
        registry.register([CapabilityEntry(data_type="seo_snapshot", status=CapabilityStatus.ACTIVE)])
        assert registry.has_capability("seo_snapshot") is True

    def test_update_status(self, cache) -> None:
        registry = CapabilityRegistry(cache)
        registry.register([{"data_type": "a", "status": "ready"}])
        assert registry.update_status("a", CapabilityStatus.ACTIVE) is True
        assert registry.has_capability("a") is True
        assert registry.update_status("missing", "active") is False
        assert registry.get_capability("missing") is None

    def test_clear(self, cache) -> None:
        registry = CapabilityRegistry(cache)
        registry.register([{"data_type": "a", "status": "active"}])
        registry.clear()
        assert registry.get_all() == {}

    def test_instances_share_store(self, cache) -> None:
        """Writes through one registry are visible to another on the same store."""
        first = CapabilityRegistry(cache)
        second = CapabilityRegistry(cache)
        first.register([{"data_type": "a", "status": "active"}])
        assert second.has_capability("a") is True

    def test_persisted_with_retention(self) -> None:
        now = [0.0]
        cache = MemoryCacheStore(clock=lambda: now[0])
        CapabilityRegistry(cache).register([{"data_type": "a", "status": "active"}])
        now[0] += 29 * 24 * 3600
        assert cache.get(CAPABILITIES_KEY) is not None
        now[0] += 2 * 24 * 3600
        assert cache.get(CAPABILITIES_KEY) is None

    def test_concurrent_registrations_not_lost(self, cache) -> None:
        registry = CapabilityRegistry(cache)

        def register(i: int) -> None:
            registry.register([{"data_type": f"type_{i}", "status": "ready"}])

        threads = [threading.Thread(target=register, args=(i,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(registry.get_all()) == 20


class TestRegistryStoreFailures:
    """Lock or store failures are logged and reported, never raised."""

    def test_register_reports_failure(self, caplog) -> None:
        registry = CapabilityRegistry(unreachable_redis_store())
        assert registry.register([{"data_type": "a", "status": "active"}]) is False
        assert "redis down" in caplog.text

    def test_update_status_and_clear_report_failure(self) -> None:
        registry = CapabilityRegistry(unreachable_redis_store())
        assert registry.update_status("a", CapabilityStatus.ACTIVE) is False
        assert registry.clear() is False

    def test_register_succeeds_on_healthy_store(self, cache) -> None:
        registry = CapabilityRegistry(cache)
        assert registry.register([{"data_type": "a", "status": "active"}]) is True
        assert registry.clear() is True

    def test_lock_timeout_reported(self) -> None:
        redis_client = MagicMock()
        redis_client.get.return_value = None
        redis_client.lock.return_value.acquire.return_value = False
        registry = CapabilityRegistry(RedisCacheStore(client=redis_client))
        assert registry.register([{"data_type": "a", "status": "active"}]) is False

    def test_catalog_registration_still_returns_result(self, hub, transport, caplog) -> None:
        hub.on("POST", "/api/v1/client/capabilities", 200, REGISTERED)
        store = unreachable_redis_store()
        catalog = HubCatalog(BASE_URL, API_KEY, transport, store, CapabilityRegistry(store))

        result = catalog.register_capabilities([{"data_type": "seo_snapshot", "version": "1.0"}])

        assert result.ok
        assert result.value.registered == 1
        assert "local registry was not updated" in caplog.text

    def test_client_registration_still_returns_result(self, hub, transport, config) -> None:
        hub.on("POST", "/api/v1/client/capabilities", 200, REGISTERED)
        client = BrainClient.from_config(config, transport=transport, cache=unreachable_redis_store())

        result = client.register_capabilities([{"data_type": "seo_snapshot", "version": "1.0"}])

        assert result.ok
        client.close()


class TestCapabilitiesFromConfig:
    """Tests for converting configured declarations."""

    def test_version_string(self) -> None:
        entries = capabilities_from_config({"seo_snapshot": "2.1"})
        assert entries[0].model_dump() == {"data_type": "seo_snapshot", "version": "2.1", "status": "ready"}

    def test_options_object_merged_with_defaults(self) -> None:
        entries = capabilities_from_config({"uptime": {"status": "pending", "interval": 60}})
        data = entries[0].model_dump()
        assert data == {"data_type": "uptime", "version": "1.0", "status": "pending", "interval": 60}

    def test_unsupported_declaration_skipped(self) -> None:
        assert capabilities_from_config({"bad": 3}) == []
