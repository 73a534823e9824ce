"""
Test settings for the storefront core
Fast, isolated testing environment.
"""

from .base import *  # noqa: F403

# ===============================================================================
# TEST FLAGS
# ===============================================================================

DEBUG = False
ALLOWED_HOSTS = ["testserver", "localhost"]

# ===============================================================================
# TEST DATABASE (In-memory for speed)
# ===============================================================================

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# ===============================================================================
# TEST CACHE
# ===============================================================================

CACHES = {
    "default": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "test-cache",
    }
}
SESSION_ENGINE = "django.contrib.sessions.backends.db"

# In-process backend double with SCAN support and failure injection
SETTINGS_CACHE = {
    "BACKEND": "tests.mocks.cache_backend.InMemoryCacheBackend",
    "RETRIES": 3,
    "KEY_PREFIX": "test",
}
SETTINGS_CACHE_TIMEOUT = 60

# Fixed key for tests only
SETTINGS_ENCRYPTION_KEY = "0123456789abcdef" * 4

# ===============================================================================
# FAST PASSWORD HASHING
# ===============================================================================

PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# ===============================================================================
# MINIMAL LOGGING
# ===============================================================================

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "null": {
            "class": "logging.NullHandler",
        },
    },
    "root": {
        "handlers": ["null"],
    },
}
