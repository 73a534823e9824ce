"""
Request-correlated logging for the storefront core

RequestIDFilter copies the current request id (set by RequestIDMiddleware)
onto every log record, so one request can be followed across modules.

Usage (LOGGING dict):
    "filters": {"add_request_id": {"()": "apps.common.logging.RequestIDFilter"}}
"""

from __future__ import annotations

import logging
import threading
from typing import Any

# Thread-local storage for request context
_request_context = threading.local()


def set_request_id(request_id: str) -> None:
    """Set the current request ID in thread-local storage."""
    _request_context.request_id = request_id


def get_request_id() -> str | None:
    """Get the current request ID from thread-local storage."""
    return getattr(_request_context, "request_id", None)


def set_request_context(**kwargs: Any) -> None:
    """Attach extra fields (user_id, user_email) to the current request context."""
    for name, value in kwargs.items():
        setattr(_request_context, name, value)


def clear_request_context() -> None:
    _request_context.__dict__.clear()


class RequestIDFilter(logging.Filter):
    """Add request_id and user context to log records"""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = getattr(_request_context, "request_id", None) or "-"
        if not hasattr(record, "user_id"):
            record.user_id = getattr(_request_context, "user_id", None)
        if not hasattr(record, "user_email"):
            record.user_email = getattr(_request_context, "user_email", None)
        return True
