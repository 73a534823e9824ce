"""
Audit services for the storefront admin console
RBAC change logging; a failure to log never aborts the change being logged.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from django.db import DatabaseError, transaction
from django.db.models import Q, QuerySet

from apps.common.logging import get_request_id

from .models import RBACLog

if TYPE_CHECKING:
    from apps.users.models import User

logger = logging.getLogger(__name__)

DEFAULT_LOG_LIMIT = 50


class AuditJSONEncoder(json.JSONEncoder):
    """
    JSON encoder for audit values and metadata.

    Handles UUID, datetime, Decimal, sets and model instances.
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, uuid.UUID):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return str(obj)  # Preserve precision as string
        if isinstance(obj, (set, frozenset)):
            return sorted(obj)
        if hasattr(obj, "pk"):  # Django model instance
            return f"{obj.__class__.__name__}(pk={obj.pk})"
        return super().default(obj)


def serialize_value(value: Any) -> Any:
    """Make a value safe for JSONField storage"""
    if value is None:
        return None
    return json.loads(json.dumps(value, cls=AuditJSONEncoder, ensure_ascii=False))


@dataclass
class RBACChange:
    """📝 One permission or role change to record"""

    actor: User
    target: User
    action: str
    old_value: Any = None
    new_value: Any = None
    metadata: dict[str, Any] = field(default_factory=dict)


def log_rbac_change(change: RBACChange) -> RBACLog | None:
    """
    🔐 Record a permission or role change

    Returns the log row, or None when it could not be written; the error is
    logged and swallowed so the change itself still stands.
    """
    try:
        # savepoint: a failed insert must not poison the caller's transaction
        with transaction.atomic():
            entry = RBACLog.objects.create(
                actor=change.actor,
                actor_email=change.actor.email,
                target=change.target,
                target_email=change.target.email,
                action=change.action,
                old_value=serialize_value(change.old_value),
                new_value=serialize_value(change.new_value),
                metadata=serialize_value(change.metadata) or {},
                request_id=get_request_id() or "",
            )
    except (DatabaseError, TypeError, ValueError) as e:
        logger.error("🔥 [Audit] Failed to log RBAC change %s for %s: %s", change.action, change.target.email, e)
        return None

    logger.info("🔐 [Audit] %s: %s -> %s", change.action, change.actor.email, change.target.email)
    return entry


def get_rbac_logs(user: User, limit: int = DEFAULT_LOG_LIMIT) -> QuerySet[RBACLog]:
    """Most recent changes made by or to the user"""
    return RBACLog.objects.filter(Q(actor=user) | Q(target=user)).order_by("-timestamp")[:limit]


def get_all_rbac_logs(limit: int = 100) -> QuerySet[RBACLog]:
    return RBACLog.objects.order_by("-timestamp")[:limit]
