"""
Shared type system for the storefront core
Rust-inspired Result pattern and the type aliases used across apps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

# Type variables for generic Result
T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type

# ===============================================================================
# RESULT TYPES
# ===============================================================================


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Success result containing a value"""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the success value"""
        return self.value

    def unwrap_err(self) -> Any:
        """Raises an exception since this is success, not error - provides consistent API"""
        raise ValueError(f"Called unwrap_err on Ok: {self.value}")


@dataclass(frozen=True)
class Err(Generic[E]):
    """Error result containing an error value"""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> Any:
        """Raises an exception - check is_ok() first"""
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_err(self) -> E:
        """Get the error value"""
        return self.error


# Result type alias
Result = Ok[T] | Err[E]

# ===============================================================================
# CACHE TYPES
# ===============================================================================

CacheKey = str
CacheTTL = int  # Time to live in seconds

# ===============================================================================
# SETTINGS TYPES
# ===============================================================================

SettingKey = str  # e.g. "email_smtp_password", "product_card_showBrand"
SettingValue = str | int | float | bool | list[Any] | dict[str, Any] | None
PermissionString = str  # "<resource>.<action>" or "<resource>.*"
