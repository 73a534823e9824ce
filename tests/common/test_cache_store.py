"""
Tests for the fail-open read-through cache store
"""

from django.core.cache import caches
from django.test import SimpleTestCase

from apps.common.cache import CacheBackendError, CacheStore, DjangoCacheBackend, build_cache_store
from tests.mocks.cache_backend import InMemoryCacheBackend


class CountingLoader:
    """Compute function that records how often it ran"""

    def __init__(self, value):
        self.value = value
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.value


class CacheStoreReadThroughTests(SimpleTestCase):
    """⚡ get_or_compute hit/miss behaviour"""

    def setUp(self):
        self.backend = InMemoryCacheBackend()
        self.store = CacheStore(self.backend, key_prefix="test")

    def test_hit_avoids_recompute(self):
        loader = CountingLoader({"showBrand": True})

        first = self.store.get_or_compute("settings:bundle", 60, loader)
        second = self.store.get_or_compute("settings:bundle", 60, loader)

        self.assertEqual(first, {"showBrand": True})
        self.assertEqual(second, {"showBrand": True})
        self.assertEqual(loader.calls, 1)

    def test_recompute_after_ttl_expiry(self):
        loader = CountingLoader("Garrit & Wulf")

        self.store.get_or_compute("settings:site_name", 60, loader)
        self.backend.advance(61)
        self.store.get_or_compute("settings:site_name", 60, loader)

        self.assertEqual(loader.calls, 2)

    def test_recompute_after_delete(self):
        loader = CountingLoader("Garrit & Wulf")

        self.store.get_or_compute("settings:site_name", 60, loader)
        self.assertEqual(self.store.delete("settings:site_name"), 1)
        self.store.get_or_compute("settings:site_name", 60, loader)

        self.assertEqual(loader.calls, 2)

    def test_keys_are_prefixed(self):
        self.store.get_or_compute("settings:site_name", 60, lambda: "x")
        self.assertEqual(self.backend.keys(), ["test:settings:site_name"])

    def test_falsy_values_are_cached(self):
        loader = CountingLoader(False)

        self.assertIs(self.store.get_or_compute("settings:flag", 60, loader), False)
        self.assertIs(self.store.get_or_compute("settings:flag", 60, loader), False)
        self.assertEqual(loader.calls, 1)

    def test_compute_errors_propagate_and_nothing_is_cached(self):
        def broken():
            raise RuntimeError("database down")

        with self.assertRaises(RuntimeError):
            self.store.get_or_compute("settings:site_name", 60, broken)
        self.assertEqual(self.backend.keys(), [])

    def test_corrupt_cached_payload_is_recomputed(self):
        self.backend.data["test:settings:site_name"] = (b"not json", None)
        loader = CountingLoader("fresh")

        self.assertEqual(self.store.get_or_compute("settings:site_name", 60, loader), "fresh")
        self.assertEqual(loader.calls, 1)


class CacheStoreFailOpenTests(SimpleTestCase):
    """🛡️ Backend outages degrade to computing through"""

    def setUp(self):
        self.backend = InMemoryCacheBackend()
        self.store = CacheStore(self.backend, retries=3)

    def test_always_failing_backend_computes_every_time(self):
        self.backend.fail_all = True
        loader = CountingLoader("value")

        for _ in range(3):
            self.assertEqual(self.store.get_or_compute("k", 60, loader), "value")

        self.assertEqual(loader.calls, 3)

    def test_deletes_report_zero_when_backend_fails(self):
        self.backend.fail_all = True

        self.assertEqual(self.store.delete("k"), 0)
        self.assertEqual(self.store.delete_pattern("settings:*"), 0)

    def test_populate_failure_still_returns_value(self):
        self.backend.fail_operations = {"set"}

        self.assertEqual(self.store.get_or_compute("k", 60, lambda: 42), 42)

    def test_transient_failure_is_retried(self):
        self.backend.failures_remaining = {"get": 2}
        self.backend.set("k", b'"cached"', 60)
        loader = CountingLoader("computed")

        self.assertEqual(self.store.get_or_compute("k", 60, loader), "cached")
        self.assertEqual(loader.calls, 0)
        self.assertEqual(self.backend.calls["get"], 3)

    def test_retries_are_bounded(self):
        self.backend.fail_operations = {"get"}

        result = self.store.read("k")

        self.assertTrue(result.is_err())
        self.assertIsInstance(result.unwrap_err(), CacheBackendError)
        self.assertEqual(result.unwrap_err().operation, "get")
        self.assertEqual(self.backend.calls["get"], 3)

    def test_ping_reflects_backend_health(self):
        self.assertTrue(self.store.ping())
        self.backend.fail_all = True
        self.assertFalse(self.store.ping())

    def test_close_never_raises(self):
        def broken_close():
            raise ConnectionError("already closed")

        self.backend.close = broken_close
        self.store.close()


class CacheStorePatternDeleteTests(SimpleTestCase):
    """🧹 delete_pattern removes matching keys only"""

    def setUp(self):
        self.backend = InMemoryCacheBackend()
        self.store = CacheStore(self.backend, key_prefix="test")
        for key in ("product_card_showBrand", "product_card_showOrigin", "site_name"):
            self.store.get_or_compute(key, 60, lambda: True)

    def test_pattern_delete_leaves_other_keys(self):
        deleted = self.store.delete_pattern("product_card_*")

        self.assertEqual(deleted, 2)
        self.assertEqual(self.backend.keys(), ["test:site_name"])

    def test_pattern_delete_without_matches(self):
        self.assertEqual(self.store.delete_pattern("seo_*"), 0)
        self.assertEqual(len(self.backend.keys()), 3)

    def test_missing_key_delete_returns_zero(self):
        self.assertEqual(self.store.delete("unknown"), 0)


class BuildCacheStoreTests(SimpleTestCase):
    """⚙️ Backend selection from configuration"""

    def test_builds_configured_backend(self):
        store = build_cache_store(
            {"BACKEND": "tests.mocks.cache_backend.InMemoryCacheBackend", "RETRIES": 2, "KEY_PREFIX": "shop"}
        )

        self.assertIsInstance(store.backend, InMemoryCacheBackend)
        store.get_or_compute("a", 60, lambda: 1)
        self.assertEqual(store.backend.keys(), ["shop:a"])

    def test_django_backend_without_scan_fails_open(self):
        caches["default"].clear()
        store = build_cache_store({"BACKEND": "apps.common.cache.DjangoCacheBackend", "ALIAS": "default"})

        self.assertIsInstance(store.backend, DjangoCacheBackend)
        self.assertFalse(store.backend.supports_scan)
        self.assertEqual(list(store.backend.scan("django:*")), [])
        self.assertEqual(store.get_or_compute("django:k", 60, lambda: "v"), "v")
        self.assertEqual(store.get_or_compute("django:k", 60, lambda: "other"), "v")
        # locmem cannot scan keys
        with self.assertLogs("apps.common.cache", level="WARNING") as logs:
            self.assertEqual(store.delete_pattern("django:*"), 0)
        self.assertIn("cannot scan keys", logs.output[0])
        self.assertEqual(store.delete("django:k"), 1)
