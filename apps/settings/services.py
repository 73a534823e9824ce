"""
Storefront settings service layer
Typed accessors over the settings table with read-through caching,
transparent encryption of sensitive values and legacy format decoding.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from django.apps import apps as django_apps
from django.conf import settings

from apps.common.cache import CacheStore, build_cache_store
from apps.common.decorators import monitor_performance
from apps.common.types import Err, Ok, Result, SettingKey, SettingValue

from .codecs import PRODUCT_CARD_PREFIX, decode_setting, encode_setting, is_canonical
from .encryption import SettingsCipher, is_sensitive_field, looks_like_envelope
from .exceptions import InvalidEnvelopeError, UnrecognizedSettingFormatError
from .store import DjangoSettingsStore, SettingsStore, default_category_for

if TYPE_CHECKING:
    from apps.users.models import User

logger = logging.getLogger(__name__)

# Product card display flags, stored as product_card_<flag>
PRODUCT_CARD_FLAGS: tuple[str, ...] = (
    "showPartNumber",
    "showSku",
    "showBrand",
    "showOrigin",
    "showCategory",
    "showDescription",
    "showTags",
    "showPrice",
    "showComparePrice",
    "showDiscountBadge",
    "showStockStatus",
)

DEFAULT_CURRENCY: dict[str, str] = {"code": "AED", "symbol": "AED", "position": "before"}
DEFAULT_CONTACT_INFO: dict[str, str] = {
    "email": "info@garritwulf.com",
    "phone": "+971502345678",
    "whatsapp": "+971502345678",
}

MASKED_VALUE = "********"


@dataclass
class SettingUpdateError:
    """🚨 Why one entry of a bulk update was rejected"""

    key: str
    message: str
    code: str


class SettingsService:
    """
    ⚙️ Settings resolver

    Cache layout (all under the store's key prefix):
        settings:<key>                 one decoded, decrypted value
        settings:bundle:<prefix>       aggregate of every key with that prefix
        settings:category:<CAT|all>    category listing

    Writes reach the database first and only then invalidate, so a failed
    write leaves the previous cached values in place.
    """

    CACHE_PREFIX: ClassVar[str] = "settings"
    CACHE_TIMEOUT: ClassVar[int] = 60
    BUNDLE_PREFIXES: ClassVar[tuple[str, ...]] = (PRODUCT_CARD_PREFIX,)
    PREFETCH_KEYS: ClassVar[tuple[str, ...]] = ("ecommerce_enabled", "currency", "contact_info")

    def __init__(
        self,
        store: SettingsStore,
        cache_store: CacheStore,
        cipher: SettingsCipher,
        *,
        cache_timeout: int | None = None,
    ) -> None:
        self.store = store
        self.cache = cache_store
        self.cipher = cipher
        self.cache_timeout = cache_timeout if cache_timeout is not None else self.CACHE_TIMEOUT

    # Cache keys ----------------------------------------------------------------

    @classmethod
    def _get_cache_key(cls, key: SettingKey) -> str:
        return f"{cls.CACHE_PREFIX}:{key}"

    @classmethod
    def _get_bundle_cache_key(cls, prefix: str) -> str:
        return f"{cls.CACHE_PREFIX}:bundle:{prefix}"

    @classmethod
    def _get_category_cache_key(cls, category: str | None) -> str:
        return f"{cls.CACHE_PREFIX}:category:{category or 'all'}"

    # Value transforms ----------------------------------------------------------

    def _reveal(self, key: SettingKey, value: Any) -> Any:
        """Decrypt a sensitive value; rows not yet migrated are returned raw."""
        if not is_sensitive_field(key) or not isinstance(value, str) or not value:
            return value
        try:
            return self.cipher.decrypt(value)
        except InvalidEnvelopeError as e:
            if looks_like_envelope(value):
                logger.error("🔥 [Settings] Failed to decrypt %s, returning stored value: %s", key, e)
            else:
                logger.warning("⚠️ [Settings] %s is stored in plaintext, run encrypt_sensitive_settings", key)
            return value

    def _protect(self, key: SettingKey, value: Any) -> Any:
        if not is_sensitive_field(key) or value is None:
            return value
        plaintext = value if isinstance(value, str) else json.dumps(value)
        return self.cipher.encrypt(plaintext)

    def _resolve(self, key: SettingKey, stored: Any) -> SettingValue:
        return decode_setting(key, self._reveal(key, stored))

    # Reads ---------------------------------------------------------------------

    def _load_setting(self, key: SettingKey) -> SettingValue:
        stored = self.store.find(key)
        if stored is None:
            logger.debug("⚡ [Settings] No stored value for key: %s", key)
            return None
        return self._resolve(key, stored.value)

    @monitor_performance()
    def get_setting(self, key: SettingKey, default: Any = None) -> SettingValue:
        """
        🔍 Get a setting value through the cache

        Args:
            key: Setting key (e.g., 'ecommerce_enabled')
            default: Returned when the setting is absent

        Raises:
            PersistentStoreError: If the settings table cannot be read
            UnrecognizedSettingFormatError: If a typed key holds an unknown shape
        """
        value = self.cache.get_or_compute(
            self._get_cache_key(key), self.cache_timeout, lambda: self._load_setting(key)
        )
        return default if value is None else value

    def get_boolean_setting(self, key: SettingKey, default: bool = False) -> bool:
        value = self.get_setting(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "on", "yes")
        return bool(value)

    def _load_product_card_settings(self) -> dict[str, bool]:
        stored = {row.key: row.value for row in self.store.find_many_by_key_prefix(PRODUCT_CARD_PREFIX)}
        flags: dict[str, bool] = {}
        for flag in PRODUCT_CARD_FLAGS:
            key = f"{PRODUCT_CARD_PREFIX}{flag}"
            value = decode_setting(key, stored.get(key))
            # absent means visible
            flags[flag] = True if value is None else bool(value)
        return flags

    @monitor_performance()
    def get_product_card_settings(self) -> dict[str, bool]:
        """🃏 Product card display flags; missing flags default to True"""
        return self.cache.get_or_compute(
            self._get_bundle_cache_key(PRODUCT_CARD_PREFIX),
            self.cache_timeout,
            self._load_product_card_settings,
        )

    def _load_settings(self, category: str | None) -> dict[str, SettingValue]:
        rows = self.store.find_by_category(category) if category else self.store.find_all()
        return {row.key: self._resolve(row.key, row.value) for row in rows}

    @monitor_performance()
    def get_settings(self, category: str | None = None) -> dict[str, SettingValue]:
        """
        📂 All settings, or the settings of one category

        Values are decrypted; callers exposing them must mask sensitive keys
        (see masked()).
        """
        settings_map = self.cache.get_or_compute(
            self._get_category_cache_key(category),
            self.cache_timeout,
            lambda: self._load_settings(category),
        )
        logger.debug("📂 [Settings] Retrieved %d settings for category: %s", len(settings_map), category or "all")
        return settings_map

    @staticmethod
    def masked(settings_map: Mapping[str, SettingValue]) -> dict[str, SettingValue]:
        return {
            key: (MASKED_VALUE if is_sensitive_field(key) and value not in (None, "") else value)
            for key, value in settings_map.items()
        }

    def is_ecommerce_enabled(self) -> bool:
        """🛒 Whether pricing, stock and cart features are shown (default off)"""
        return self.get_boolean_setting("ecommerce_enabled", default=False)

    def get_currency_settings(self) -> dict[str, str]:
        value = self.get_setting("currency")
        return value if isinstance(value, dict) else dict(DEFAULT_CURRENCY)

    def get_contact_info(self) -> dict[str, str]:
        value = self.get_setting("contact_info")
        return value if isinstance(value, dict) else dict(DEFAULT_CONTACT_INFO)

    def prefetch_settings(self) -> int:
        """🔥 Warm the cache for commonly read keys; returns how many were loaded"""
        warmed = 0
        for key in self.PREFETCH_KEYS:
            try:
                self.get_setting(key)
                warmed += 1
            except Exception as e:
                logger.error("🔥 [Settings] Error prefetching %s: %s", key, e)
        return warmed

    # Writes --------------------------------------------------------------------

    def _invalidate(self, changed: Iterable[tuple[SettingKey, str | None]]) -> None:
        """
        Delete the cache entries derived from each (key, category) pair.

        Aggregate keys are deleted by name so invalidation works on backends
        that cannot scan; the pattern sweep then catches the listing of a
        category a row moved out of.
        """
        cache_keys = {self._get_category_cache_key(None)}
        for key, category in changed:
            cache_keys.add(self._get_cache_key(key))
            cache_keys.add(self._get_category_cache_key(category))
            cache_keys.update(
                self._get_bundle_cache_key(prefix) for prefix in self.BUNDLE_PREFIXES if key.startswith(prefix)
            )

        for cache_key in sorted(cache_keys):
            self.cache.delete(cache_key)
        self.cache.delete_pattern(f"{self.CACHE_PREFIX}:category:*")

    @monitor_performance()
    def set_setting(
        self,
        key: SettingKey,
        value: Any,
        category: str | None = None,
        updated_by: User | None = None,
    ) -> None:
        """
        🔧 Persist a setting, then invalidate every cache entry derived from it

        Raises:
            PersistentStoreError: If the write fails; nothing is invalidated
            UnrecognizedSettingFormatError: If a typed key gets an undecodable value
        """
        stored_value = self._protect(key, encode_setting(key, value))
        stored = self.store.upsert(key, stored_value, category or default_category_for(key), updated_by)
        self._invalidate([(key, stored.category)])

        if is_sensitive_field(key):
            logger.info("🔒 [Settings] Updated sensitive setting %s", key)
        else:
            logger.info("⚡ [Settings] Updated %s = %s", key, value)

    def _validate_update(self, key: Any, value: Any) -> SettingUpdateError | None:
        if not isinstance(key, str) or not key.strip():
            return SettingUpdateError(key=str(key), message="Setting key must be a non-empty string", code="invalid_key")
        try:
            encode_setting(key, value)
        except UnrecognizedSettingFormatError as e:
            return SettingUpdateError(key=key, message=str(e), code="invalid_value")
        return None

    @monitor_performance()
    def bulk_update_settings(
        self, updates: Mapping[str, Any], updated_by: User | None = None
    ) -> Result[int, list[SettingUpdateError]]:
        """
        📦 Write several settings in one transaction, then invalidate their cache entries

        Every entry is validated first; nothing is written if any entry is invalid.

        Raises:
            PersistentStoreError: If the transaction fails
        """
        errors = [error for key, value in updates.items() if (error := self._validate_update(key, value))]
        if errors:
            logger.warning("⚠️ [Settings] Bulk update rejected: %d invalid entries", len(errors))
            return Err(errors)

        changed: list[tuple[SettingKey, str | None]] = []
        with self.store.atomic():
            for key, value in updates.items():
                stored_value = self._protect(key, encode_setting(key, value))
                stored = self.store.upsert(key, stored_value, default_category_for(key), updated_by)
                changed.append((key, stored.category))

        self._invalidate(changed)
        logger.info("✅ [Settings] Bulk updated %d settings", len(updates))
        return Ok(len(updates))

    @monitor_performance()
    def clear_settings_cache(self) -> int:
        """🧹 Drop every cached settings entry; persisted data is untouched"""
        cleared = self.cache.delete_pattern(f"{self.CACHE_PREFIX}:*")
        logger.info("🧹 [Settings] Cleared %d cached settings", cleared)
        return cleared

    # Explicit migrations -------------------------------------------------------

    def encrypt_plaintext_settings(self, *, dry_run: bool = False) -> list[SettingKey]:
        """
        🔒 Re-encrypt sensitive rows that are still stored in plaintext

        Returns the keys that were (or, with dry_run, would be) migrated.
        """
        migrated: list[SettingKey] = []
        migrated_rows: list[tuple[SettingKey, str | None]] = []
        with self.store.atomic():
            for row in self.store.find_all():
                if not is_sensitive_field(row.key) or row.value in (None, ""):
                    continue
                if isinstance(row.value, str) and self._is_decryptable(row.value):
                    continue
                migrated.append(row.key)
                migrated_rows.append((row.key, row.category))
                if not dry_run:
                    self.store.upsert(row.key, self._protect(row.key, row.value), row.category)

        if migrated and not dry_run:
            self._invalidate(migrated_rows)
        logger.info("🔒 [Settings] Plaintext sensitive settings %s: %d", "found" if dry_run else "encrypted", len(migrated))
        return migrated

    def _is_decryptable(self, value: str) -> bool:
        try:
            self.cipher.decrypt(value)
        except InvalidEnvelopeError:
            return False
        return True

    def normalize_legacy_settings(self, *, dry_run: bool = False) -> list[SettingKey]:
        """
        🧹 Write canonical forms back for rows holding legacy encodings

        Raises:
            UnrecognizedSettingFormatError: If a typed row matches no known shape
        """
        normalized: list[SettingKey] = []
        normalized_rows: list[tuple[SettingKey, str | None]] = []
        with self.store.atomic():
            for row in self.store.find_all():
                if is_sensitive_field(row.key) or row.value is None or is_canonical(row.key, row.value):
                    continue
                normalized.append(row.key)
                normalized_rows.append((row.key, row.category))
                if not dry_run:
                    self.store.upsert(row.key, encode_setting(row.key, row.value), row.category)

        if normalized and not dry_run:
            self._invalidate(normalized_rows)
        logger.info("🧹 [Settings] Legacy settings %s: %d", "found" if dry_run else "normalized", len(normalized))
        return normalized

    def seed_defaults(self, defaults: Iterable[tuple[SettingKey, Any]]) -> list[SettingKey]:
        """Create the given settings when absent; existing rows are left alone."""
        created: list[SettingKey] = []
        for key, value in defaults:
            if self.store.find(key) is None:
                self.set_setting(key, value)
                created.append(key)
        return created

    # Lifecycle -----------------------------------------------------------------

    def health(self) -> dict[str, Any]:
        return {
            "encryption": self.cipher.encryption_status(),
            "cache": {"available": self.cache.ping(), "timeout": self.cache_timeout},
        }

    def close(self) -> None:
        self.cache.close()


def build_settings_service() -> SettingsService:
    """
    Construct the process-wide settings service with its dependencies.

    Raises:
        ConfigurationError: If SETTINGS_ENCRYPTION_KEY is absent or malformed
    """
    cipher = SettingsCipher.from_settings()
    cache_store = build_cache_store(settings.SETTINGS_CACHE)
    return SettingsService(
        DjangoSettingsStore(),
        cache_store,
        cipher,
        cache_timeout=getattr(settings, "SETTINGS_CACHE_TIMEOUT", SettingsService.CACHE_TIMEOUT),
    )


def get_settings_service() -> SettingsService:
    """The service built at startup by SettingsConfig.ready()"""
    return django_apps.get_app_config("settings").service  # type: ignore[no-any-return, attr-defined]
