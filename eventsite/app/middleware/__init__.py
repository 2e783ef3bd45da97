"""Middleware package for the event site."""

from eventsite.app.middleware.auth import (
    get_current_user,
    require_admin,
    require_roles,
    require_staff,
)
from eventsite.app.middleware.request_id import RequestIdMiddleware, get_request_id

__all__ = [
    "get_current_user",
    "require_admin",
    "require_roles",
    "require_staff",
    "RequestIdMiddleware",
    "get_request_id",
]
