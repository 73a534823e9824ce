"""
View and service decorators for the storefront core
Permission checks for JSON endpoints and slow-operation monitoring.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse

logger = logging.getLogger(__name__)


def permission_required(permission: str) -> Callable[[Callable[..., HttpResponse]], Callable[..., HttpResponse]]:
    """
    Require an authenticated user holding the given permission string.

    Answers with JSON 401/403 instead of redirecting, since every guarded
    view is an API endpoint.
    """

    def decorator(view_func: Callable[..., HttpResponse]) -> Callable[..., HttpResponse]:
        @functools.wraps(view_func)
        def wrapper(request: HttpRequest, *args: Any, **kwargs: Any) -> HttpResponse:
            from apps.users.permissions import has_permission  # noqa: PLC0415

            user = request.user
            if not user.is_authenticated:
                return JsonResponse({"success": False, "error": "Authentication required"}, status=401)
            if not has_permission(user, permission):
                logger.warning("🚫 [Auth] %s denied %s on %s", user.email, permission, request.path)
                return JsonResponse({"success": False, "error": "Insufficient permissions"}, status=403)
            return view_func(request, *args, **kwargs)

        return wrapper

    return decorator


def monitor_performance(
    max_duration_seconds: float = 5.0, alert_threshold: float = 2.0
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    Monitor method performance and alert on slow operations
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.monotonic()
            try:
                return func(*args, **kwargs)
            except Exception as e:
                duration = time.monotonic() - start_time
                logger.error("🔥 [Performance] Failed operation %s after %.2fs: %s", func.__name__, duration, e)
                raise
            finally:
                duration = time.monotonic() - start_time
                if duration > max_duration_seconds:
                    logger.error("🐢 [Performance] Extremely slow operation %s: %.2fs", func.__name__, duration)
                elif duration > alert_threshold:
                    logger.warning("⚠️ [Performance] Slow operation %s: %.2fs", func.__name__, duration)

        return wrapper

    return decorator
