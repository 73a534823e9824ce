"""
Request middleware for the storefront core
"""

from __future__ import annotations

import uuid
from collections.abc import Callable

from django.http import HttpRequest, HttpResponse

from .logging import clear_request_context, set_request_context, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware:
    """Add unique request ID for tracing and audit logs"""

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        request_id = str(uuid.uuid4())
        request.META["REQUEST_ID"] = request_id
        set_request_id(request_id)

        user = getattr(request, "user", None)
        if user is not None and user.is_authenticated:
            set_request_context(user_id=user.pk, user_email=user.email)

        try:
            response = self.get_response(request)
        finally:
            clear_request_context()

        response[REQUEST_ID_HEADER] = request_id
        return response
