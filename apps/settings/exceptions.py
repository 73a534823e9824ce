"""
Settings exceptions

ConfigurationError is fatal at startup. InvalidEnvelopeError is recovered by
the resolver. PersistentStoreError and UnrecognizedSettingFormatError always
propagate to the caller.
"""

from __future__ import annotations

from typing import Any

from django.core.exceptions import ImproperlyConfigured


class ConfigurationError(ImproperlyConfigured):
    """Encryption key absent or malformed"""


class InvalidEnvelopeError(ValueError):
    """Value is not a decryptable ivHex:cipherTextHex envelope"""


class PersistentStoreError(Exception):
    """The persistent settings store failed to read or write"""

    def __init__(self, operation: str, key: str | None = None, cause: BaseException | None = None) -> None:
        self.operation = operation
        self.key = key
        self.cause = cause
        target = f" '{key}'" if key else ""
        super().__init__(f"Settings store {operation}{target} failed: {cause}")


class UnrecognizedSettingFormatError(ValueError):
    """Stored value matches neither the canonical form nor any known legacy shape"""

    def __init__(self, key: str, value: Any, expected: str) -> None:
        self.key = key
        self.value = value
        self.expected = expected
        super().__init__(f"Setting '{key}' holds {type(value).__name__} value not decodable as {expected}")
