"""Database package for the event site.

This package provides:
- Database models (Attendee, RedemptionLog) and the Role/Item enumerations
- Asynchronous session management
- CRUD operations for all models
- FastAPI dependency injection support
"""

from eventsite.app.db.base import Base
from eventsite.app.db.models import Attendee, Item, RedemptionLog, Role
from eventsite.app.db.async_session import (
    close_async_engine,
    get_async_engine,
    get_async_session,
    get_async_session_maker,
    get_db,
)
from eventsite.app.db.dependencies import SessionDep

__all__ = [
    # Base
    "Base",
    # Models
    "Attendee",
    "Item",
    "RedemptionLog",
    "Role",
    # Session (async)
    "close_async_engine",
    "get_async_engine",
    "get_async_session",
    "get_async_session_maker",
    "get_db",
    # FastAPI Dependencies
    "SessionDep",
]
