"""
Storefront Settings Views

JSON endpoints over the settings service: the public product card flags
used by the storefront, and the admin console settings API.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, ClassVar

from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.http import require_http_methods

from apps.common.decorators import permission_required

from .encryption import is_sensitive_field
from .exceptions import PersistentStoreError, UnrecognizedSettingFormatError
from .models import SettingCategory
from .services import MASKED_VALUE, get_settings_service

if TYPE_CHECKING:
    from django.http import HttpRequest

logger = logging.getLogger(__name__)

NO_STORE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _no_store(response: JsonResponse) -> JsonResponse:
    for header, value in NO_STORE_HEADERS.items():
        response[header] = value
    return response


def _parse_json_body(request: HttpRequest) -> dict[str, Any] | None:
    try:
        data = json.loads(request.body or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


# ===============================================================================
# PUBLIC STOREFRONT API
# ===============================================================================


@require_http_methods(["GET"])
def product_card_settings_api(request: HttpRequest) -> JsonResponse:
    """
    🃏 Product card display flags for the storefront

    Example response:
    {
        "success": true,
        "data": {"showBrand": true, "showOrigin": false, ...}
    }

    Responses are never cached by browsers or proxies, so an admin change is
    visible on the next request (server side staleness is bounded by the TTL).
    """
    try:
        flags = get_settings_service().get_product_card_settings()
    except (PersistentStoreError, UnrecognizedSettingFormatError) as e:
        logger.error("💥 [Settings API] Error getting product card settings: %s", e)
        return _no_store(JsonResponse({"success": False, "error": "Failed to fetch product card settings"}, status=500))

    return _no_store(JsonResponse({"success": True, "data": flags}))


@require_http_methods(["GET"])
def settings_health_check(request: HttpRequest) -> JsonResponse:
    """🩺 Encryption self-test and cache availability"""
    health = get_settings_service().health()
    healthy = bool(health["encryption"].get("encryption_working"))
    return JsonResponse(
        {
            "success": healthy,
            "status": "healthy" if healthy else "unhealthy",
            "encryption": {k: v for k, v in health["encryption"].items() if k != "sensitive_tokens"},
            # a cache outage degrades latency only
            "cache": health["cache"],
        },
        status=200 if healthy else 503,
    )


# ===============================================================================
# ADMIN SETTINGS API
# ===============================================================================


class SettingsAPIView(View):
    """
    ⚙️ Admin console settings API

    GET /app/settings/api/                 all settings (?category=EMAIL to filter)
    GET /app/settings/api/<key>/           one setting
    PUT /app/settings/api/                 bulk update {"settings": {key: value}}
    PUT /app/settings/api/<key>/           single update {"value": ..., "category": ...}

    Sensitive values are always masked in responses.
    """

    http_method_names: ClassVar[list[str]] = ["get", "put"]

    @method_decorator(permission_required("settings.view"))
    def get(self, request: HttpRequest, key: str | None = None) -> JsonResponse:
        service = get_settings_service()
        try:
            if key:
                value = service.get_setting(key)
                if value is None:
                    return JsonResponse({"success": False, "error": f'Setting "{key}" not found'}, status=404)
                shown = MASKED_VALUE if is_sensitive_field(key) and value != "" else value
                return JsonResponse({"success": True, "data": {"key": key, "value": shown}})

            category = request.GET.get("category") or None
            if category is not None:
                category = category.upper()
                if category not in SettingCategory.values:
                    return JsonResponse({"success": False, "error": f'Unknown category "{category}"'}, status=400)

            settings_map = service.masked(service.get_settings(category))
            return JsonResponse({"success": True, "data": settings_map, "count": len(settings_map)})

        except (PersistentStoreError, UnrecognizedSettingFormatError) as e:
            logger.error("💥 [Settings API] Error getting settings: %s", e)
            return JsonResponse({"success": False, "error": "Failed to retrieve settings"}, status=500)

    @method_decorator(permission_required("settings.edit"))
    def put(self, request: HttpRequest, key: str | None = None) -> JsonResponse:
        data = _parse_json_body(request)
        if data is None:
            return JsonResponse({"success": False, "error": "Invalid JSON in request body"}, status=400)

        if key:
            return self._update_one(request, key, data)
        return self._update_many(request, data)

    def _update_one(self, request: HttpRequest, key: str, data: dict[str, Any]) -> JsonResponse:
        if "value" not in data:
            return JsonResponse({"success": False, "error": "Missing value"}, status=400)

        category = data.get("category")
        if category is not None and category not in SettingCategory.values:
            return JsonResponse({"success": False, "error": f'Unknown category "{category}"'}, status=400)

        try:
            get_settings_service().set_setting(key, data["value"], category=category, updated_by=request.user)
        except UnrecognizedSettingFormatError as e:
            return JsonResponse({"success": False, "error": str(e)}, status=400)
        except PersistentStoreError as e:
            logger.error("💥 [Settings API] Error updating %s: %s", key, e)
            return JsonResponse({"success": False, "error": "Failed to update setting"}, status=500)

        logger.info("✅ [Settings API] %s updated %s", request.user.email, key)
        return JsonResponse({"success": True, "message": f'Setting "{key}" updated'})

    def _update_many(self, request: HttpRequest, data: dict[str, Any]) -> JsonResponse:
        updates = data.get("settings")
        if not isinstance(updates, dict) or not updates:
            return JsonResponse({"success": False, "error": "Expected a non-empty settings object"}, status=400)

        try:
            result = get_settings_service().bulk_update_settings(updates, updated_by=request.user)
        except PersistentStoreError as e:
            logger.error("💥 [Settings API] Error in bulk update: %s", e)
            return JsonResponse({"success": False, "error": "Failed to update settings"}, status=500)

        if result.is_err():
            errors = [{"key": error.key, "message": error.message, "code": error.code} for error in result.unwrap_err()]
            return JsonResponse({"success": False, "error": "Invalid settings", "errors": errors}, status=400)

        logger.info("✅ [Settings API] %s bulk updated %d settings", request.user.email, result.unwrap())
        return JsonResponse({"success": True, "updated": result.unwrap()})


@require_http_methods(["POST"])
@permission_required("settings.edit")
def clear_cache_api(request: HttpRequest) -> JsonResponse:
    """🧹 Force-refresh: drop every cached setting without touching stored values"""
    cleared = get_settings_service().clear_settings_cache()
    logger.info("🧹 [Settings API] %s cleared the settings cache (%d keys)", request.user.email, cleared)
    return JsonResponse({"success": True, "cleared": cleared})
