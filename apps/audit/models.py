"""
Audit models for the storefront admin console
Append-only record of permission and role changes.
"""

from __future__ import annotations

import uuid
from typing import ClassVar

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class RBACLog(models.Model):
    """Immutable record of one permission or role change."""

    PERMISSION_CHANGE = "PERMISSION_CHANGE"
    ROLE_CHANGE = "ROLE_CHANGE"

    ACTION_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        (PERMISSION_CHANGE, "Permission Change"),
        (ROLE_CHANGE, "Role Change"),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    # Who changed whom; emails survive user deletion
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="rbac_actions"
    )
    actor_email = models.EmailField(_("Actor email"))
    target = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="rbac_changes"
    )
    target_email = models.EmailField(_("Target email"))

    action = models.CharField(max_length=30, choices=ACTION_CHOICES, db_index=True)
    old_value = models.JSONField(null=True, blank=True)
    new_value = models.JSONField(null=True, blank=True)
    metadata = models.JSONField(default=dict, blank=True)
    request_id = models.CharField(max_length=36, blank=True, db_index=True)

    class Meta:
        db_table = "audit_rbac_log"
        verbose_name = _("RBAC Log")
        verbose_name_plural = _("RBAC Logs")
        ordering: ClassVar[tuple[str, ...]] = ("-timestamp",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["actor", "-timestamp"], name="audit_rbac_actor_ts_idx"),
            models.Index(fields=["target", "-timestamp"], name="audit_rbac_target_ts_idx"),
        )

    def __str__(self) -> str:
        return f"{self.action}: {self.actor_email} -> {self.target_email}"
