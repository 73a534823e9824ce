"""
Typed decoding of stored setting values

Each declared key has a kind. Decoding tries the canonical form first, then
each known legacy shape in a fixed order, and raises
UnrecognizedSettingFormatError when nothing matches. Keys with no declared
kind pass through unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from apps.common.types import SettingKey

from .exceptions import UnrecognizedSettingFormatError

PRODUCT_CARD_PREFIX = "product_card_"

_MISSING = object()


@dataclass(frozen=True)
class LegacyShape:
    """A historical encoding of a value, with its decoder"""

    name: str
    decode: Callable[[Any], Any]  # returns _MISSING when the shape does not match


@dataclass(frozen=True)
class SettingKind:
    name: str
    canonical: Callable[[Any], Any]
    legacy: tuple[LegacyShape, ...] = ()

    def decode(self, key: SettingKey, value: Any) -> Any:
        decoded = self.canonical(value)
        if decoded is not _MISSING:
            return decoded
        for shape in self.legacy:
            decoded = shape.decode(value)
            if decoded is not _MISSING:
                return decoded
        raise UnrecognizedSettingFormatError(key, value, self.name)


def _canonical_boolean(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    return _MISSING


def _enabled_wrapper(value: Any) -> Any:
    # {"enabled": true} written by the first admin console
    if isinstance(value, dict) and isinstance(value.get("enabled"), bool):
        return value["enabled"]
    return _MISSING


BOOLEAN = SettingKind(
    name="boolean",
    canonical=_canonical_boolean,
    legacy=(LegacyShape("enabled-wrapper", _enabled_wrapper),),
)

# Exact keys take precedence over prefixes
KEY_KINDS: dict[SettingKey, SettingKind] = {
    "ecommerce_enabled": BOOLEAN,
}
PREFIX_KINDS: tuple[tuple[str, SettingKind], ...] = ((PRODUCT_CARD_PREFIX, BOOLEAN),)


def kind_for(key: SettingKey) -> SettingKind | None:
    if key in KEY_KINDS:
        return KEY_KINDS[key]
    for prefix, kind in PREFIX_KINDS:
        if key.startswith(prefix):
            return kind
    return None


def decode_setting(key: SettingKey, value: Any) -> Any:
    """
    Normalize a stored value to its canonical shape.

    None (absent) is returned as None for every key.
    """
    if value is None:
        return None
    kind = kind_for(key)
    if kind is None:
        return value
    return kind.decode(key, value)


def encode_setting(key: SettingKey, value: Any) -> Any:
    """Canonical persisted form; declared booleans are stored as "true"/"false"."""
    kind = kind_for(key)
    if kind is BOOLEAN and value is not None:
        return "true" if kind.decode(key, value) else "false"
    return value


def is_canonical(key: SettingKey, value: Any) -> bool:
    """Whether value is already in its persisted canonical form."""
    return encode_setting(key, value) == value
