"""
Role-based permission resolution for the admin console

Permission strings are "<resource>.<action>"; "<resource>.*" grants every
action on a resource. A user's effective set is their explicit permissions
when they have any, otherwise their role's default set. The two are never
merged.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.common.types import PermissionString

if TYPE_CHECKING:
    from .models import User


class Role(models.TextChoices):
    SUPER_ADMIN = "SUPER_ADMIN", _("Super Admin")
    ADMIN = "ADMIN", _("Admin")
    STAFF = "STAFF", _("Staff")
    CONTENT_EDITOR = "CONTENT_EDITOR", _("Content Editor")
    VIEWER = "VIEWER", _("Viewer")


# ===============================================================================
# RESOURCES & ACTIONS
# ===============================================================================

RESOURCES: tuple[str, ...] = (
    "products",
    "categories",
    "pages",
    "menu",
    "media",
    "users",
    "settings",
    "messages",
    "collections",
    "homepage",
    "dashboard",
)

RESOURCE_ACTIONS: dict[str, tuple[str, ...]] = {
    "products": ("view", "create", "edit", "delete", "publish"),
    "categories": ("view", "create", "edit", "delete"),
    "pages": ("view", "create", "edit", "delete", "publish"),
    "menu": ("view", "create", "edit", "delete"),
    "media": ("view", "upload", "delete"),
    "users": ("view", "create", "edit", "delete", "manage_roles", "edit_permissions"),
    "settings": ("view", "edit"),
    "messages": ("view", "delete"),
    "collections": ("view", "create", "edit", "delete"),
    "homepage": ("view", "edit"),
    "dashboard": (
        "view",
        "message_center",
        "engagement_overview",
        "product_insights",
        "search_analytics",
        "statistics",
        "recent_activity",
    ),
}


def create_permission(resource: str, action: str) -> PermissionString:
    return f"{resource}.{action}"


def create_wildcard(resource: str) -> PermissionString:
    return f"{resource}.*"


PERMISSIONS: frozenset[PermissionString] = frozenset(
    [create_permission(resource, action) for resource, actions in RESOURCE_ACTIONS.items() for action in actions]
    + [create_wildcard(resource) for resource in RESOURCES]
)

# ===============================================================================
# ROLE HIERARCHY & DEFAULTS
# ===============================================================================

ROLE_LEVELS: dict[str, int] = {
    Role.SUPER_ADMIN: 100,
    Role.ADMIN: 50,
    Role.STAFF: 20,
    Role.CONTENT_EDITOR: 15,
    Role.VIEWER: 10,
}

ROLE_PERMISSIONS: dict[str, frozenset[PermissionString]] = {
    Role.SUPER_ADMIN: frozenset(create_wildcard(resource) for resource in RESOURCES),
    Role.ADMIN: frozenset(
        {
            "products.*",
            "categories.*",
            "pages.*",
            "menu.*",
            "media.*",
            "users.view",
            "users.create",
            "users.edit",
            "users.delete",
            # not users.manage_roles
            "messages.*",
            "collections.*",
            "homepage.*",
            "dashboard.view",
            "dashboard.message_center",
            "dashboard.engagement_overview",
            "dashboard.product_insights",
            "dashboard.search_analytics",
            "dashboard.statistics",
            "dashboard.recent_activity",
        }
    ),
    Role.STAFF: frozenset(
        {
            "products.view",
            "products.edit",
            "categories.view",
            "pages.view",
            "pages.edit",
            "menu.view",
            "media.view",
            "media.upload",
            "users.view",
            "users.edit",
            "messages.view",
            "homepage.view",
            "homepage.edit",
            "dashboard.view",
            "dashboard.message_center",
            "dashboard.statistics",
            "dashboard.recent_activity",
        }
    ),
    Role.CONTENT_EDITOR: frozenset(
        {
            "products.view",
            "products.create",
            "products.edit",
            "categories.view",
            "pages.view",
            "pages.create",
            "pages.edit",
            "menu.view",
            "media.view",
            "media.upload",
            "messages.view",
            "homepage.view",
            "homepage.edit",
            "dashboard.view",
            "dashboard.message_center",
            "dashboard.recent_activity",
        }
    ),
    Role.VIEWER: frozenset(
        {
            "products.view",
            "categories.view",
            "pages.view",
            "menu.view",
            "media.view",
            "messages.view",
            "homepage.view",
            "dashboard.view",
            "dashboard.statistics",
            "collections.view",
        }
    ),
}

PERMISSION_DESCRIPTIONS: dict[PermissionString, str] = {
    "products.view": "View products list and details",
    "products.create": "Create new products",
    "products.edit": "Edit existing products",
    "products.delete": "Delete products permanently",
    "products.publish": "Publish or unpublish products",
    "products.*": "All product permissions",
    "categories.view": "View product categories",
    "categories.create": "Create new categories",
    "categories.edit": "Edit existing categories",
    "categories.delete": "Delete categories",
    "categories.*": "All category permissions",
    "pages.view": "View CMS pages",
    "pages.create": "Create new pages",
    "pages.edit": "Edit existing pages",
    "pages.delete": "Delete pages",
    "pages.publish": "Publish or unpublish pages",
    "pages.*": "All page permissions",
    "menu.view": "View menu items",
    "menu.create": "Create new menu items",
    "menu.edit": "Edit menu items",
    "menu.delete": "Delete menu items",
    "menu.*": "All menu permissions",
    "media.view": "View media library",
    "media.upload": "Upload new media files",
    "media.delete": "Delete media files",
    "media.*": "All media permissions",
    "users.view": "View user list",
    "users.create": "Create new users",
    "users.edit": "Edit user accounts",
    "users.delete": "Delete users",
    "users.manage_roles": "Assign and change user roles (Super Admin only)",
    "users.edit_permissions": "Edit user permissions (Super Admin only)",
    "users.*": "All user management permissions",
    "settings.view": "View system settings",
    "settings.edit": "Modify system settings",
    "settings.*": "All settings permissions",
    "messages.view": "View customer messages",
    "messages.delete": "Delete messages",
    "messages.*": "All message permissions",
    "collections.view": "View product collections",
    "collections.create": "Create new collections",
    "collections.edit": "Edit collections",
    "collections.delete": "Delete collections",
    "collections.*": "All collection permissions",
    "homepage.view": "View homepage content and sections",
    "homepage.edit": "Edit homepage content and layout",
    "homepage.*": "All homepage CMS permissions",
    "dashboard.view": "Access admin dashboard and overview",
    "dashboard.message_center": "View and manage message center on dashboard",
    "dashboard.engagement_overview": "View engagement analytics and charts",
    "dashboard.product_insights": "View top products and performance insights",
    "dashboard.search_analytics": "View search analytics and trends",
    "dashboard.statistics": "View statistics cards (users, products, categories)",
    "dashboard.recent_activity": "View recent activity and products",
    "dashboard.*": "All dashboard permissions",
}

# Roles allowed to manage any user and assign any role
UNRESTRICTED_ROLES: frozenset[str] = frozenset({Role.SUPER_ADMIN, Role.ADMIN})

# ===============================================================================
# RESOLUTION
# ===============================================================================


def get_role_level(role: str) -> int:
    """Unknown roles rank as VIEWER"""
    return ROLE_LEVELS.get(role, ROLE_LEVELS[Role.VIEWER])


def get_default_permissions(role: str) -> frozenset[PermissionString]:
    return ROLE_PERMISSIONS.get(role, ROLE_PERMISSIONS[Role.VIEWER])


def effective_permissions(role: str, custom: Iterable[PermissionString] | None) -> frozenset[PermissionString]:
    """
    Resolve the permission set used for authorization.

    Explicit grants replace the role defaults entirely; a VIEWER granted only
    "homepage.edit" loses "products.view". An empty grant list means "use the
    role defaults".
    """
    custom_set = frozenset(custom or ())
    if custom_set:
        return custom_set
    return get_default_permissions(role)


def matches_permission(granted: PermissionString, required: PermissionString) -> bool:
    if granted == required:
        return True
    if granted.endswith(".*"):
        return required.startswith(granted[:-1])
    return False


def is_valid_permission(permission: Any) -> bool:
    """Known permission strings plus any "<resource>.*" wildcard"""
    if not isinstance(permission, str):
        return False
    return permission in PERMISSIONS or (permission.endswith(".*") and len(permission) > 2)  # noqa: PLR2004


def user_effective_permissions(user: User | None) -> frozenset[PermissionString]:
    if user is None or not user.is_authenticated:
        return frozenset()
    return effective_permissions(user.role, user.permissions)


def has_permission(user: User | None, permission: PermissionString) -> bool:
    """SUPER_ADMIN holds every permission; everyone else is checked against the effective set."""
    if user is None or not user.is_authenticated:
        return False
    if user.role == Role.SUPER_ADMIN:
        return True
    return any(matches_permission(granted, permission) for granted in user_effective_permissions(user))


def has_any_permission(user: User | None, permissions: Iterable[PermissionString]) -> bool:
    return any(has_permission(user, permission) for permission in permissions)


def has_all_permissions(user: User | None, permissions: Iterable[PermissionString]) -> bool:
    return all(has_permission(user, permission) for permission in permissions)


def can_manage_user(actor: User | None, target: User) -> bool:
    """SUPER_ADMIN and ADMIN manage anyone; others only strictly lower levels."""
    if actor is None or not actor.is_authenticated:
        return False
    if actor.role in UNRESTRICTED_ROLES:
        return True
    return get_role_level(actor.role) > get_role_level(target.role)


def can_assign_role(actor: User | None, role: str) -> bool:
    if actor is None or not actor.is_authenticated:
        return False
    if actor.role in UNRESTRICTED_ROLES:
        return True
    return get_role_level(actor.role) > get_role_level(role)
