"""Heartbeat, custom event sync and the boot-time capability check.

Everything here runs at the edges of the host application (scheduler ticks,
process boot), so no public entry point raises: failures are logged and
reported.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
import platform
import socket
from dataclasses import dataclass
from typing import Optional

from .cache import CacheStore
from .capabilities import CapabilityRegistry, capabilities_from_config
from .catalog import HubCatalog
from .config import BrainClientConfig
from .events import EventDispatcher
from .models import EventReceipt
from .result import Result
from .version import CLIENT_VERSION

logger = logging.getLogger(__name__)

HEARTBEAT_EVENT = "health.ping"
HEARTBEAT_LOCK_KEY = "brain_heartbeat_lock"
EVENTS_SYNCED_TTL = 24 * 3600


@dataclass
class HeartbeatReport:
    """Outcome of one heartbeat run."""

    heartbeat_sent: bool = False
    events_synced: int = 0
    skipped: bool = False


def events_synced_key(events: dict[str, str]) -> str:
    digest = hashlib.md5(json.dumps(events, sort_keys=True).encode("utf-8")).hexdigest()
    return f"brain_events_synced_{digest}"


class HeartbeatService:
    """Sends ``health.ping`` events and keeps hub-side declarations in sync."""

    def __init__(
        self,
        config: BrainClientConfig,
        dispatcher: EventDispatcher,
        catalog: HubCatalog,
        registry: CapabilityRegistry,
        cache: CacheStore,
    ) -> None:
        self.config = config
        self.dispatcher = dispatcher
        self.catalog = catalog
        self.registry = registry
        self.cache = cache

    def heartbeat_payload(self) -> dict:
        settings = self.config.heartbeat
        return {
            "site": settings.site_name,
            "environment": settings.environment,
            "url": settings.site_url,
            "metadata": {
                "python_version": platform.python_version(),
                "platform": platform.platform(),
                "hostname": socket.gethostname() or "unknown",
                "client_version": CLIENT_VERSION,
            },
        }

    def send_heartbeat(self) -> Result[EventReceipt]:
        return self.dispatcher.send(HEARTBEAT_EVENT, self.heartbeat_payload())

    def sync_custom_events(self, force: bool = False) -> int:
        """Register configured custom events once per distinct event set.

        Returns:
            Number of event types the hub accepted in this call.
        """
        events = self.config.events
        if not events:
            return 0

        key = events_synced_key(events)
        if not force and self.cache.has(key):
            logger.debug("Brain custom events already synced (%s)", key)
            return 0

        synced = 0
        for event_type, description in events.items():
            if self.dispatcher.register_event_type(event_type, description).ok:
                synced += 1
        self.cache.put(key, True, EVENTS_SYNCED_TTL)
        logger.info("Synced %d/%d Brain custom events", synced, len(events))
        return synced

    def run(self, sync_events: bool = False) -> HeartbeatReport:
        """Send one heartbeat and sync custom events. Never raises.

        Args:
            sync_events: Re-register custom events even if already synced.
        """
        report = HeartbeatReport()
        try:
            report.heartbeat_sent = self.send_heartbeat().ok
            if not report.heartbeat_sent:
                logger.warning("Brain heartbeat was not delivered")
            report.events_synced = self.sync_custom_events(force=sync_events)
        except Exception as e:
            logger.error("Brain heartbeat failed: %s", e, exc_info=True)
        return report

    def check_capabilities(self) -> None:
        """Boot hook: warn about missing required types, then auto-register.

        Never raises.
        """
        try:
            hub_config = self.catalog.get_config()
            if hub_config is None:
                logger.warning("Brain config not available for capability check")
                return
            missing = [name for name in hub_config.required_types() if not self.registry.has_capability(name)]
            if missing:
                logger.warning(
                    "Brain client missing required capabilities: %s",
                    ", ".join(missing),
                    extra={"missing_capabilities": missing},
                )

            if not self.config.capabilities.auto_register:
                return
            entries = capabilities_from_config(self.config.capabilities.declared)
            if not entries:
                return
            result = self.catalog.register_capabilities(entries)
            if not result.ok:
                logger.warning("Brain capability auto-registration failed: %s", result.error)
        except Exception as e:
            logger.error("Brain capability check failed: %s", e, exc_info=True)

    def _tick(self, interval_seconds: float) -> HeartbeatReport:
        # Lock expires before the next tick so exactly one instance runs per interval.
        if not self.cache.add(HEARTBEAT_LOCK_KEY, True, max(interval_seconds * 0.9, 1.0)):
            logger.debug("Brain heartbeat skipped: another instance holds %s", HEARTBEAT_LOCK_KEY)
            return HeartbeatReport(skipped=True)
        return self.run()

    def start_heartbeat_loop(self, interval_minutes: Optional[float] = None) -> Optional[asyncio.Task]:
        """Run heartbeats every ``interval_minutes`` on the running event loop.

        Each run happens in a worker thread. Cancel the returned task to stop.
        Returns None without scheduling anything when heartbeats are disabled.
        """
        if not self.config.heartbeat.enabled:
            logger.info("Brain heartbeat disabled; loop not started")
            return None
        minutes = interval_minutes if interval_minutes is not None else self.config.heartbeat.interval_minutes
        if minutes <= 0:
            raise ValueError("interval_minutes must be positive")
        interval = minutes * 60

        async def _heartbeat():
            """Periodically report liveness to the hub."""
            try:
                while True:
                    try:
                        report = await asyncio.to_thread(self._tick, interval)
                        logger.debug("Heartbeat: %s", report)
                    except Exception as e:
                        logger.warning("Brain heartbeat tick failed: %s", e)
                    await asyncio.sleep(interval)
            except asyncio.CancelledError:
                logger.info("Brain heartbeat loop stopped")
                raise

        task = asyncio.create_task(_heartbeat())
        logger.info("Brain heartbeat loop started (every %s min)", minutes)
        return task


__all__ = [
    "HeartbeatService",
    "HeartbeatReport",
    "HEARTBEAT_EVENT",
    "HEARTBEAT_LOCK_KEY",
    "events_synced_key",
]
