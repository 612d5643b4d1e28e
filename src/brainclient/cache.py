"""Cache stores for hub config, schemas and client capability state.

``CacheStore`` is the get/put/forget/TTL capability the client depends on.
Its ``remember()`` is a get-or-compute with single-flight coalescing:
concurrent callers missing the same key wait for one in-flight compute and
share its result, so at most one upstream fetch happens per key per expiry
window within a process.

Two implementations:
- MemoryCacheStore: process-local, thread-safe (default).
- RedisCacheStore: shared across processes/hosts, JSON-encoded values.

Values must be JSON-compatible (dicts, lists, strings, numbers, booleans).
``None`` is never cached: a compute returning ``None`` (a failed fetch) is
retried by the next caller.
"""

from __future__ import annotations

import copy
import json
import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, ContextManager, Iterator, Optional

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class _Flight:
    """One in-flight compute shared by every waiter on the same key."""

    __slots__ = ("done", "value", "error")

    def __init__(self) -> None:
        self.done = threading.Event()
        self.value: Any = None
        self.error: Optional[BaseException] = None


class CacheStore(ABC):
    """Key/value store with TTLs, per-key locks and single-flight fill."""

    def __init__(self) -> None:
        self._flights: dict[str, _Flight] = {}
        self._flights_lock = threading.Lock()

    @abstractmethod
    def get(self, key: str) -> Any:
        """Return the cached value or None when absent/expired."""

    @abstractmethod
    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """Store ``value``; ``ttl`` in seconds, None = no expiry."""

    @abstractmethod
    def add(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        """Store only if absent. Returns True when this call stored it."""

    @abstractmethod
    def forget(self, key: str) -> None:
        """Drop ``key`` (no-op when absent)."""

    @abstractmethod
    def lock(self, key: str, timeout: float = 10.0) -> ContextManager[None]:
        """Exclusive lock for a read-modify-write sequence on ``key``."""

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def remember(self, key: str, ttl: Optional[float], compute: Callable[[], Any]) -> Any:
        """Get ``key`` or compute, cache and return it.

        Concurrent misses on the same key are coalesced into one ``compute``
        call. If the compute raises, every waiter sees the same exception.
        """
        value = self.get(key)
        if value is not None:
            return value

        with self._flights_lock:
            flight = self._flights.get(key)
            leader = flight is None
            if leader:
                flight = _Flight()
                self._flights[key] = flight

        if not leader:
            flight.done.wait()
            if flight.error is not None:
                raise flight.error
            return copy.deepcopy(flight.value)

        try:
            # A previous leader may have filled the key between our miss and
            # registering this flight.
            value = self.get(key)
            if value is None:
                value = compute()
                if value is not None:
                    self.put(key, value, ttl)
            flight.value = value
            return value
        except BaseException as e:
            flight.error = e
            raise
        finally:
            with self._flights_lock:
                self._flights.pop(key, None)
            flight.done.set()


class MemoryCacheStore(CacheStore):
    """Process-local store. Values are deep-copied in and out."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__()
        self._clock = clock
        self._data: dict[str, tuple[Any, Optional[float]]] = {}
        self._data_lock = threading.Lock()
        self._key_locks: dict[str, threading.RLock] = {}

    def _live(self, key: str) -> Any:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._data[key]
            return None
        return value

    def _expiry(self, ttl: Optional[float]) -> Optional[float]:
        return None if ttl is None else self._clock() + ttl

    def get(self, key: str) -> Any:
        with self._data_lock:
            return copy.deepcopy(self._live(key))

    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        with self._data_lock:
            self._data[key] = (copy.deepcopy(value), self._expiry(ttl))

    def add(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        with self._data_lock:
            if self._live(key) is not None:
                return False
            self._data[key] = (copy.deepcopy(value), self._expiry(ttl))
            return True

    def forget(self, key: str) -> None:
        with self._data_lock:
            self._data.pop(key, None)

    @contextmanager
    def lock(self, key: str, timeout: float = 10.0) -> Iterator[None]:
        with self._data_lock:
            key_lock = self._key_locks.setdefault(key, threading.RLock())
        if not key_lock.acquire(timeout=timeout):
            raise TimeoutError(f"Could not lock cache key {key!r} within {timeout}s")
        try:
            yield
        finally:
            key_lock.release()

    def clear(self) -> None:
        with self._data_lock:
            self._data.clear()


class RedisCacheStore(CacheStore):
    """Redis-backed store shared by every process using the same Redis.

    Read/write failures degrade to cache misses with a warning so a Redis
    outage never breaks event delivery. Locks use redis-py's ``Lock``.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        client: Any = None,
        prefix: str = "brainclient:",
    ) -> None:
        super().__init__()
        if client is None:
            if not url:
                raise ConfigurationError("RedisCacheStore needs a redis URL or client")
            try:
                import redis
            except ImportError:
                raise ConfigurationError(
                    "RedisCacheStore requires the 'redis' package (pip install brain-nucleus-client[redis])"
                )
            client = redis.Redis.from_url(url, decode_responses=True)
        self._redis = client
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    @staticmethod
    def _ex(ttl: Optional[float]) -> Optional[int]:
        return None if ttl is None else max(1, math.ceil(ttl))

    def get(self, key: str) -> Any:
        try:
            raw = self._redis.get(self._key(key))
        except Exception as e:
            logger.warning("Brain cache read failed for %s: %s", key, e)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("Invalid cached value for %s: %s", key, e)
            return None

    def put(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        try:
            self._redis.set(self._key(key), json.dumps(value), ex=self._ex(ttl))
        except Exception as e:
            logger.warning("Brain cache write failed for %s: %s", key, e)

    def add(self, key: str, value: Any, ttl: Optional[float] = None) -> bool:
        try:
            return bool(self._redis.set(self._key(key), json.dumps(value), ex=self._ex(ttl), nx=True))
        except Exception as e:
            logger.warning("Brain cache write failed for %s: %s", key, e)
            return False

    def forget(self, key: str) -> None:
        try:
            self._redis.delete(self._key(key))
        except Exception as e:
            logger.warning("Brain cache delete failed for %s: %s", key, e)

    @contextmanager
    def lock(self, key: str, timeout: float = 10.0) -> Iterator[None]:
        redis_lock = self._redis.lock(
            self._key(f"{key}:lock"),
            timeout=max(timeout, 1.0),
            blocking_timeout=timeout,
        )
        if not redis_lock.acquire():
            raise TimeoutError(f"Could not lock cache key {key!r} within {timeout}s")
        try:
            yield
        finally:
            redis_lock.release()


def create_cache_store(redis_url: Optional[str] = None) -> CacheStore:
    """Redis store when a URL is configured, otherwise a process-local one."""
    if redis_url:
        return RedisCacheStore(url=redis_url)
    return MemoryCacheStore()


__all__ = [
    "CacheStore",
    "MemoryCacheStore",
    "RedisCacheStore",
    "create_cache_store",
]
