"""Response models shared by the attendee, staff and admin routers."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from eventsite.app.db.models import Role


class AttendeePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    employee_id: str
    email: str
    name: str
    role: Role
    quota_indomie: int
    quota_beer: int
    checked_in: bool
    last_redeem_ts: Optional[datetime]


class AttendeeAdmin(AttendeePublic):
    created_at: datetime
    updated_at: datetime


def normalize_email(value: str) -> str:
    """Trim and lower-case an email, rejecting obviously malformed input."""
    value = value.strip().lower()
    # Lightweight validation without adding extra dependencies.
    local, _, domain = value.partition("@")
    if not local or not domain or "@" in domain or " " in value:
        raise ValueError("invalid email")
    return value


def strip_required(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("value cannot be empty")
    return value
