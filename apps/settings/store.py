"""
Persistent settings store
The source of truth behind the settings cache; database errors surface as
PersistentStoreError.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from django.db import DatabaseError, transaction

from apps.common.types import SettingKey

from .exceptions import PersistentStoreError
from .models import Setting, SettingCategory

if TYPE_CHECKING:
    from apps.users.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredSetting:
    """Row snapshot returned by the store; value is exactly what is persisted"""

    key: SettingKey
    value: Any
    category: str

    @classmethod
    def from_model(cls, setting: Setting) -> StoredSetting:
        return cls(key=setting.key, value=setting.value, category=setting.category)


class SettingsStore(Protocol):
    def find(self, key: SettingKey) -> StoredSetting | None: ...

    def upsert(
        self, key: SettingKey, value: Any, category: str | None = None, updated_by: User | None = None
    ) -> StoredSetting: ...

    def find_many_by_key_prefix(self, prefix: str) -> list[StoredSetting]: ...

    def find_by_category(self, category: str) -> list[StoredSetting]: ...

    def find_all(self) -> list[StoredSetting]: ...

    def atomic(self) -> Any: ...


class DjangoSettingsStore:
    """🗄️ Settings store backed by the Setting model"""

    def find(self, key: SettingKey) -> StoredSetting | None:
        try:
            setting = Setting.objects.filter(key=key).first()
        except DatabaseError as e:
            raise PersistentStoreError("read", key, e) from e
        return StoredSetting.from_model(setting) if setting else None

    def upsert(
        self, key: SettingKey, value: Any, category: str | None = None, updated_by: User | None = None
    ) -> StoredSetting:
        defaults: dict[str, Any] = {"value": value}
        if category:
            defaults["category"] = category
        # system rewrites keep the last editor
        if updated_by is not None:
            defaults["updated_by"] = updated_by
        try:
            setting, created = Setting.objects.update_or_create(key=key, defaults=defaults)
        except DatabaseError as e:
            raise PersistentStoreError("write", key, e) from e

        logger.debug("🗄️ [Settings Store] %s %s", "Created" if created else "Updated", key)
        return StoredSetting.from_model(setting)

    def find_many_by_key_prefix(self, prefix: str) -> list[StoredSetting]:
        return self._query(Setting.objects.filter(key__startswith=prefix), f"{prefix}*")

    def find_by_category(self, category: str) -> list[StoredSetting]:
        return self._query(Setting.objects.filter(category=category), f"category:{category}")

    def find_all(self) -> list[StoredSetting]:
        return self._query(Setting.objects.all(), "all")

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """One database transaction around several upserts"""
        try:
            with transaction.atomic():
                yield
        except DatabaseError as e:
            raise PersistentStoreError("transaction", None, e) from e

    def _query(self, queryset: Any, label: str) -> list[StoredSetting]:
        try:
            return [StoredSetting.from_model(setting) for setting in queryset.order_by("key")]
        except DatabaseError as e:
            raise PersistentStoreError("read", label, e) from e


def default_category_for(key: SettingKey) -> str | None:
    """Category implied by the key naming convention, if any"""
    prefixes = (
        ("product_card_", SettingCategory.PRODUCT_CARD),
        ("email_", SettingCategory.EMAIL),
        ("payment_", SettingCategory.PAYMENT),
        ("social_", SettingCategory.SOCIAL),
        ("seo_", SettingCategory.SEO),
        ("shipping_", SettingCategory.SHIPPING),
        ("contact_", SettingCategory.CONTACT),
    )
    for prefix, category in prefixes:
        if key.startswith(prefix):
            return str(category)
    return None
