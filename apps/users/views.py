# ===============================================================================
# USER PERMISSION API VIEWS 🔐
# ===============================================================================

import logging
from typing import cast

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response

from .models import User
from .services import PermissionChangeError, UserPermissionService, permission_summary

logger = logging.getLogger(__name__)

NO_STORE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def _error_response(error: PermissionChangeError) -> Response:
    http_status = status.HTTP_403_FORBIDDEN if error.code == "forbidden" else status.HTTP_400_BAD_REQUEST
    body: dict[str, object] = {"success": False, "error": error.message}
    if error.invalid_permissions:
        body["invalid_permissions"] = error.invalid_permissions
    return Response(body, status=http_status)


@api_view(["GET"])
@permission_classes([IsAuthenticated])
def my_permissions_api(request: Request) -> Response:
    """
    Current user's role, level and effective permissions.
    Never cached, since permissions can change at any time.
    """
    user = cast(User, request.user)
    return Response({"success": True, "data": permission_summary(user)}, headers=NO_STORE_HEADERS)


@api_view(["PATCH"])
@permission_classes([IsAuthenticated])
def update_user_permissions_api(request: Request, user_id: int) -> Response:
    """
    Replace a user's explicit permission grants.
    Body: {"permissions": ["products.view", "pages.*"]}
    """
    actor = cast(User, request.user)
    target = get_object_or_404(User, pk=user_id)

    result = UserPermissionService.update_permissions(actor, target, request.data.get("permissions"))
    if result.is_err():
        error = result.unwrap_err()
        logger.warning("🚫 [Users API] Permission update on %s refused: %s", target.email, error.message)
        return _error_response(error)

    return Response(
        {"success": True, "message": "Permissions updated successfully", "data": permission_summary(result.unwrap())}
    )


@api_view(["PATCH"])
@permission_classes([IsAuthenticated])
def update_user_role_api(request: Request, user_id: int) -> Response:
    """
    Change a user's role; explicit grants are reset to the role defaults.
    Body: {"role": "STAFF"}
    """
    actor = cast(User, request.user)
    target = get_object_or_404(User, pk=user_id)

    result = UserPermissionService.update_role(actor, target, request.data.get("role"))
    if result.is_err():
        error = result.unwrap_err()
        logger.warning("🚫 [Users API] Role update on %s refused: %s", target.email, error.message)
        return _error_response(error)

    return Response(
        {"success": True, "message": "Role updated successfully", "data": permission_summary(result.unwrap())}
    )
