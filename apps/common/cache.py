"""
Read-through cache store for the storefront core

Provides cache-aside reads with TTL, single-key deletes and pattern deletes
over a pluggable key/value backend:
- Redis (redis-py client) for production
- Any Django cache alias (django-redis supports key scanning)

Every backend interaction is fail-open. Internally each call returns
Ok/Err(CacheBackendError); the public methods decide how to degrade, so a
cache outage costs latency but never correctness.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

import redis
from django.conf import settings
from django.core.cache import caches
from django.utils.module_loading import import_string

from apps.common.types import CacheKey, CacheTTL, Err, Ok, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_RETRIES = 3
SCAN_BATCH_SIZE = 100  # COUNT hint per SCAN round-trip
HEALTH_CHECK_KEY = "health:ping"


class CacheBackendError(Exception):
    """Any failure talking to the cache backend"""

    def __init__(self, operation: str, key: str, cause: BaseException | None = None) -> None:
        self.operation = operation
        self.key = key
        self.cause = cause
        super().__init__(f"cache {operation} failed for '{key}': {cause!r}")


class CacheBackend(Protocol):
    """Minimal key/value client contract used by CacheStore"""

    supports_scan: bool

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes, ttl: int) -> None: ...

    def delete(self, *keys: str) -> int: ...

    def scan(self, pattern: str) -> Iterator[str]: ...

    def close(self) -> None: ...


# ===============================================================================
# BACKENDS
# ===============================================================================


class RedisCacheBackend:
    """
    Redis backend over a shared redis-py client.

    The client owns a thread-safe connection pool; socket timeouts and
    connect timeouts come from OPTIONS and are not re-implemented here.
    """

    supports_scan = True

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> RedisCacheBackend:
        options = dict(config.get("OPTIONS", {}))
        return cls(redis.Redis.from_url(config["LOCATION"], **options))

    def get(self, key: str) -> bytes | None:
        return self._client.get(key)  # type: ignore[no-any-return]

    def set(self, key: str, value: bytes, ttl: int) -> None:
        self._client.set(key, value, ex=ttl)

    def delete(self, *keys: str) -> int:
        return int(self._client.delete(*keys))

    def scan(self, pattern: str) -> Iterator[str]:
        # SCAN, never KEYS: iteration must not block the server
        for key in self._client.scan_iter(match=pattern, count=SCAN_BATCH_SIZE):
            yield key.decode("utf-8") if isinstance(key, bytes) else key

    def close(self) -> None:
        self._client.close()


class DjangoCacheBackend:
    """
    Backend over a configured Django cache alias.

    Pattern scans need a cache that exposes iter_keys (django-redis);
    on other caches supports_scan is False and scans match nothing.
    """

    def __init__(self, alias: str = "default") -> None:
        self._cache = caches[alias]
        self.supports_scan = hasattr(self._cache, "iter_keys")

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> DjangoCacheBackend:
        return cls(config.get("ALIAS", "default"))

    def get(self, key: str) -> bytes | None:
        return self._cache.get(key)  # type: ignore[no-any-return]

    def set(self, key: str, value: bytes, ttl: int) -> None:
        self._cache.set(key, value, timeout=ttl)

    def delete(self, *keys: str) -> int:
        return sum(1 for key in keys if self._cache.delete(key))

    def scan(self, pattern: str) -> Iterator[str]:
        if self.supports_scan:
            yield from self._cache.iter_keys(pattern, itersize=SCAN_BATCH_SIZE)

    def close(self) -> None:
        self._cache.close()


# ===============================================================================
# CACHE STORE
# ===============================================================================


@dataclass(frozen=True)
class CacheLookup:
    """Outcome of a successful backend read"""

    hit: bool
    value: Any = None


class CacheStore:
    """
    Fail-open read-through cache.

    Usage:
        store = CacheStore(RedisCacheBackend(client), key_prefix="storefront")
        flags = store.get_or_compute("settings:bundle:product_card_", 60, load_flags)
        store.delete_pattern("settings:*")

    Concurrent misses may both compute and both populate; the last write
    wins. Every write is a blind SET or DEL, so no locking is needed.
    """

    def __init__(self, backend: CacheBackend, *, retries: int = DEFAULT_RETRIES, key_prefix: str = "") -> None:
        self._backend = backend
        self._retries = max(1, retries)
        self._key_prefix = key_prefix

    @property
    def backend(self) -> CacheBackend:
        return self._backend

    def _make_key(self, key: CacheKey) -> str:
        return f"{self._key_prefix}:{key}" if self._key_prefix else key

    def _call(self, operation: str, key: str, func: Callable[[], T]) -> Result[T, CacheBackendError]:
        """Run one backend call with bounded retry; never raises."""
        last_error: Exception | None = None
        for attempt in range(1, self._retries + 1):
            try:
                return Ok(func())
            except Exception as e:  # noqa: BLE001 - client errors are not a closed set
                last_error = e
                logger.debug("🔄 [Cache] %s attempt %d/%d failed for %s: %s", operation, attempt, self._retries, key, e)
        return Err(CacheBackendError(operation, key, last_error))

    # Result-returning internals ------------------------------------------------

    def read(self, key: CacheKey) -> Result[CacheLookup, CacheBackendError]:
        full_key = self._make_key(key)
        result = self._call("get", key, lambda: self._backend.get(full_key))
        if result.is_err():
            return result

        raw = result.unwrap()
        if raw is None:
            return Ok(CacheLookup(hit=False))
        try:
            return Ok(CacheLookup(hit=True, value=json.loads(raw)))
        except (ValueError, UnicodeDecodeError) as e:
            return Err(CacheBackendError("decode", key, e))

    def write(self, key: CacheKey, value: Any, ttl: CacheTTL) -> Result[None, CacheBackendError]:
        try:
            payload = json.dumps(value, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as e:
            return Err(CacheBackendError("encode", key, e))

        full_key = self._make_key(key)
        return self._call("set", key, lambda: self._backend.set(full_key, payload, ttl))

    def remove(self, key: CacheKey) -> Result[int, CacheBackendError]:
        full_key = self._make_key(key)
        return self._call("delete", key, lambda: self._backend.delete(full_key))

    def remove_pattern(self, pattern: str) -> Result[int, CacheBackendError]:
        if not self._backend.supports_scan:
            logger.warning(
                "⚠️ [Cache] %s cannot scan keys, %s expires by TTL", type(self._backend).__name__, pattern
            )
            return Ok(0)

        full_pattern = self._make_key(pattern)
        scanned = self._call("scan", pattern, lambda: list(self._backend.scan(full_pattern)))
        if scanned.is_err():
            return scanned

        keys = scanned.unwrap()
        if not keys:
            return Ok(0)
        # one batched DEL for every matched key
        return self._call("delete", pattern, lambda: self._backend.delete(*keys))

    # Fail-open public API ------------------------------------------------------

    def get_or_compute(self, key: CacheKey, ttl: CacheTTL, compute: Callable[[], T]) -> T:
        """
        Return the cached value for key, or compute, populate and return it.

        compute runs exactly once on a miss or on any backend read error;
        its own exceptions propagate. Populate failures are logged only.
        """
        lookup = self.read(key)
        if lookup.is_ok():
            found = lookup.unwrap()
            if found.hit:
                logger.debug("✅ [Cache] Hit: %s", key)
                return found.value  # type: ignore[no-any-return]
            logger.debug("⚡ [Cache] Miss: %s", key)
        else:
            logger.warning("⚠️ [Cache] Read failed, computing through: %s", lookup.unwrap_err())

        value = compute()

        stored = self.write(key, value, ttl)
        if stored.is_err():
            logger.warning("⚠️ [Cache] Populate failed: %s", stored.unwrap_err())
        return value

    def delete(self, key: CacheKey) -> int:
        """Delete one key; returns 0 or 1, and 0 on backend error."""
        result = self.remove(key)
        if result.is_err():
            logger.error("🔥 [Cache] Error clearing key %s: %s", key, result.unwrap_err())
            return 0
        deleted = result.unwrap()
        logger.debug("🧹 [Cache] Cleared key: %s (deleted: %d)", key, deleted)
        return deleted

    def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob; returns the count, 0 on backend error."""
        result = self.remove_pattern(pattern)
        if result.is_err():
            logger.error("🔥 [Cache] Error clearing pattern %s: %s", pattern, result.unwrap_err())
            return 0
        deleted = result.unwrap()
        if deleted:
            logger.info("🧹 [Cache] Cleared pattern: %s (deleted: %d keys)", pattern, deleted)
        else:
            logger.debug("🧹 [Cache] No keys found for pattern: %s", pattern)
        return deleted

    def ping(self) -> bool:
        """Report whether the backend answers a read."""
        return self.read(HEALTH_CHECK_KEY).is_ok()

    def close(self) -> None:
        try:
            self._backend.close()
        except Exception as e:  # noqa: BLE001 - shutdown must not raise
            logger.warning("⚠️ [Cache] Error closing backend: %s", e)


def build_cache_store(config: dict[str, Any] | None = None) -> CacheStore:
    """
    Build a CacheStore from the SETTINGS_CACHE setting.

    SETTINGS_CACHE = {
        "BACKEND": "apps.common.cache.RedisCacheBackend",
        "LOCATION": "redis://localhost:6379/0",
        "OPTIONS": {"socket_timeout": 5, "socket_connect_timeout": 5},
        "RETRIES": 3,
        "KEY_PREFIX": "storefront",
    }
    """
    if config is None:
        config = settings.SETTINGS_CACHE

    backend_cls = import_string(config["BACKEND"])
    backend = backend_cls.from_config(config)
    logger.info("⚙️ [Cache] Using %s backend", backend_cls.__name__)
    return CacheStore(
        backend,
        retries=config.get("RETRIES", DEFAULT_RETRIES),
        key_prefix=config.get("KEY_PREFIX", ""),
    )
