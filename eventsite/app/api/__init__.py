"""API endpoints package for the event site."""

from eventsite.app.api.admin import router as admin_router
from eventsite.app.api.auth import router as auth_router
from eventsite.app.api.me import router as me_router
from eventsite.app.api.staff import router as staff_router

__all__ = [
    "admin_router",
    "auth_router",
    "me_router",
    "staff_router",
]
