"""
In-memory cache backend for tests

Implements the CacheBackend contract with glob scans, TTL expiry against a
controllable clock, call counters and failure injection.
"""

from __future__ import annotations

import fnmatch
from collections import Counter
from collections.abc import Iterator
from typing import Any


class InMemoryCacheBackend:
    """
    Test double for apps.common.cache.CacheBackend

    Usage:
        backend = InMemoryCacheBackend()
        backend.fail_operations = {"get"}   # every get raises
        backend.fail_all = True             # every operation raises
        backend.advance(61)                 # expire 60s entries
    """

    supports_scan = True

    def __init__(self) -> None:
        self.data: dict[str, tuple[bytes, float | None]] = {}
        self.calls: Counter[str] = Counter()
        self.fail_all = False
        self.fail_operations: set[str] = set()
        self.failures_remaining: dict[str, int] = {}
        self.now = 0.0
        self.closed = False

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> InMemoryCacheBackend:
        return cls()

    def reset(self) -> None:
        self.data.clear()
        self.calls.clear()
        self.fail_all = False
        self.fail_operations = set()
        self.failures_remaining = {}
        self.now = 0.0
        self.closed = False

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def _check(self, operation: str) -> None:
        self.calls[operation] += 1
        if self.fail_all or operation in self.fail_operations:
            raise ConnectionError(f"cache unavailable during {operation}")
        remaining = self.failures_remaining.get(operation, 0)
        if remaining:
            self.failures_remaining[operation] = remaining - 1
            raise ConnectionError(f"transient failure during {operation}")

    def _live(self, key: str) -> bool:
        entry = self.data.get(key)
        if entry is None:
            return False
        expires_at = entry[1]
        if expires_at is not None and expires_at <= self.now:
            del self.data[key]
            return False
        return True

    def get(self, key: str) -> bytes | None:
        self._check("get")
        return self.data[key][0] if self._live(key) else None

    def set(self, key: str, value: bytes, ttl: int) -> None:
        self._check("set")
        self.data[key] = (value, self.now + ttl if ttl else None)

    def delete(self, *keys: str) -> int:
        self._check("delete")
        deleted = 0
        for key in keys:
            if self._live(key):
                del self.data[key]
                deleted += 1
        return deleted

    def scan(self, pattern: str) -> Iterator[str]:
        self._check("scan")
        return iter([key for key in list(self.data) if self._live(key) and fnmatch.fnmatchcase(key, pattern)])

    def close(self) -> None:
        self.calls["close"] += 1
        self.closed = True

    def keys(self) -> list[str]:
        return sorted(key for key in list(self.data) if self._live(key))
