"""
User permission services for the admin console
Validated, hierarchy-checked and audited changes to roles and permission grants.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from django.db import transaction

from apps.audit.models import RBACLog
from apps.audit.services import RBACChange, log_rbac_change
from apps.common.decorators import monitor_performance
from apps.common.types import Err, Ok, Result

from .permissions import (
    Role,
    can_assign_role,
    can_manage_user,
    get_role_level,
    has_permission,
    is_valid_permission,
    user_effective_permissions,
)

if TYPE_CHECKING:
    from .models import User

logger = logging.getLogger(__name__)


@dataclass
class PermissionChangeError:
    """🚨 Why a role or permission change was refused"""

    code: str  # "forbidden" or "invalid"
    message: str
    invalid_permissions: list[Any] = field(default_factory=list)


def permission_summary(user: User) -> dict[str, Any]:
    """Serializable view of a user's role and permissions"""
    return {
        "id": user.pk,
        "email": user.email,
        "role": user.role,
        "role_level": user.role_level,
        "permissions": list(user.permissions or []),
        "effective_permissions": sorted(user_effective_permissions(user)),
    }


class UserPermissionService:
    """🔐 Role and permission management"""

    @classmethod
    @monitor_performance()
    def update_permissions(
        cls, actor: User, target: User, permissions: Any
    ) -> Result[User, PermissionChangeError]:
        """
        Replace the target's explicit permission grants.

        An empty list hands the target back to the role defaults.
        """
        if not has_permission(actor, "users.edit_permissions"):
            return Err(PermissionChangeError("forbidden", "Missing required permission: users.edit_permissions"))
        if not can_manage_user(actor, target):
            return Err(PermissionChangeError("forbidden", "Cannot manage users at same or higher role level"))
        if not isinstance(permissions, list):
            return Err(PermissionChangeError("invalid", "Permissions must be an array"))

        invalid = [permission for permission in permissions if not is_valid_permission(permission)]
        if invalid:
            return Err(PermissionChangeError("invalid", "Invalid permissions", invalid_permissions=invalid))

        old_permissions = list(target.permissions or [])
        # keep order, drop duplicates
        new_permissions = list(dict.fromkeys(permissions))

        with transaction.atomic():
            target.permissions = new_permissions
            target.save(update_fields=["permissions", "updated_at"])

        log_rbac_change(
            RBACChange(
                actor=actor,
                target=target,
                action=RBACLog.PERMISSION_CHANGE,
                old_value={"permissions": old_permissions},
                new_value={"permissions": new_permissions},
            )
        )
        logger.info("🔐 [Users] %s updated permissions of %s (%d grants)", actor.email, target.email, len(new_permissions))
        return Ok(target)

    @classmethod
    @monitor_performance()
    def update_role(cls, actor: User, target: User, role: Any) -> Result[User, PermissionChangeError]:
        """
        Change the target's role and reset explicit grants, so the new role's
        defaults apply.
        """
        if not has_permission(actor, "users.manage_roles"):
            return Err(PermissionChangeError("forbidden", "Missing required permission: users.manage_roles"))
        if not isinstance(role, str) or role not in Role.values:
            return Err(PermissionChangeError("invalid", "Invalid role"))
        if actor.pk == target.pk:
            return Err(PermissionChangeError("forbidden", "Cannot change your own role"))
        if not can_manage_user(actor, target):
            return Err(PermissionChangeError("forbidden", "Cannot manage users at same or higher role level"))
        if not can_assign_role(actor, role):
            return Err(PermissionChangeError("forbidden", f"Cannot assign role {role}"))

        old_value = {
            "role": target.role,
            "role_level": target.role_level,
            "permissions": list(target.permissions or []),
        }

        with transaction.atomic():
            target.role = role
            target.permissions = []
            target.save(update_fields=["role", "permissions", "updated_at"])

        log_rbac_change(
            RBACChange(
                actor=actor,
                target=target,
                action=RBACLog.ROLE_CHANGE,
                old_value=old_value,
                new_value={"role": role, "role_level": get_role_level(role), "permissions": []},
            )
        )
        logger.info("🔐 [Users] %s changed role of %s: %s -> %s", actor.email, target.email, old_value["role"], role)
        return Ok(target)
