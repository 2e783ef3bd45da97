import math
from typing import Any, Optional

from fastapi import APIRouter, Body, Query
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import IntegrityError

from eventsite.app.api.schemas import AttendeeAdmin, normalize_email, strip_required
from eventsite.app.core.config import settings
from eventsite.app.core.logging import get_log_context, get_logger
from eventsite.app.db.crud import (
    count_redemptions_for_attendee,
    create_attendee,
    delete_attendee,
    get_attendee_by_id,
    search_attendees,
    update_attendee,
)
from eventsite.app.db.dependencies import SessionDep
from eventsite.app.db.models import Role
from eventsite.app.exceptions import (
    AttendeeNotFoundError,
    ConflictError,
    InvalidInputError,
)
from eventsite.app.middleware.auth import AdminUser

router = APIRouter()
logger = get_logger(__name__)

PATCHABLE_FIELDS = (
    "employee_id",
    "email",
    "name",
    "role",
    "quota_indomie",
    "quota_beer",
    "checked_in",
)

# Alternate spellings accepted by PATCH; the canonical key wins when both are sent.
PATCH_ALIASES = {
    "indomie_quota": "quota_indomie",
    "beer_quota": "quota_beer",
    "checkin": "checked_in",
}

# Quotas live in 32-bit integer columns; offsets are 64-bit.
MAX_QUOTA = 2**31 - 1
MAX_OFFSET = 2**63 - 1


class AttendeeCreate(BaseModel):
    employee_id: str = Field(..., min_length=1, max_length=64)
    email: str = Field(..., min_length=3, max_length=320)
    name: str = Field(..., min_length=1, max_length=200)
    role: Role = Role.ATTENDEE
    quota_indomie: Optional[int] = Field(None, ge=0, le=MAX_QUOTA)
    quota_beer: Optional[int] = Field(None, ge=0, le=MAX_QUOTA)
    checked_in: bool = False

    @field_validator("employee_id", "name")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return strip_required(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)


def _parse_positive_int(raw: Optional[str], default: int) -> int:
    try:
        value = int(raw) if raw is not None else default
    except ValueError:
        return default
    return value if value >= 1 else default


def _parse_quota(field: str, value: Any) -> int:
    if isinstance(value, bool):
        raise InvalidInputError(f"{field} must be a non-negative integer")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            raise InvalidInputError(f"{field} must be a non-negative integer")
    if not isinstance(value, int) or not 0 <= value <= MAX_QUOTA:
        raise InvalidInputError(f"{field} must be a non-negative integer")
    return value


def _parse_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field} must be a non-empty string")
    return value.strip()


def parse_attendee_patch(body: dict[str, Any]) -> dict[str, Any]:
    """Reduce a PATCH body to validated column changes.

    Unknown keys are ignored.

    Raises:
        InvalidInputError: If no patchable key is present or a value is invalid
    """
    raw: dict[str, Any] = {}
    for key, value in body.items():
        field = PATCH_ALIASES.get(key, key)
        if field not in PATCHABLE_FIELDS:
            continue
        if key != field and field in body:
            continue
        raw[field] = value

    if not raw:
        raise InvalidInputError("No updatable fields provided")

    changes: dict[str, Any] = {}
    for field, value in raw.items():
        if field == "email":
            if not isinstance(value, str):
                raise InvalidInputError("email must be a string")
            try:
                changes[field] = normalize_email(value)
            except ValueError:
                raise InvalidInputError("email is invalid")
        elif field in ("employee_id", "name"):
            changes[field] = _parse_text(field, value)
        elif field == "role":
            try:
                changes[field] = Role(value)
            except ValueError:
                raise InvalidInputError(f"Unknown role: {value!r}")
        elif field in ("quota_indomie", "quota_beer"):
            changes[field] = _parse_quota(field, value)
        else:
            changes[field] = bool(value)
    return changes


@router.get("")
async def list_attendees(
    session: SessionDep,
    search: Optional[str] = Query(None),
    q: Optional[str] = Query(None),
    page: Optional[str] = Query(None),
    page_size: Optional[str] = Query(None, alias="pageSize"),
) -> dict:
    """List attendees with search and pagination."""
    term = (search if search is not None else q or "").strip()
    size = min(
        _parse_positive_int(page_size, settings.admin_page_size_default),
        settings.admin_page_size_max,
    )
    page_num = min(_parse_positive_int(page, 1), MAX_OFFSET // size + 1)

    attendees, total = await search_attendees(session, term, page_num, size)
    total_pages = max(1, math.ceil(total / size))

    return {
        "data": [AttendeeAdmin.model_validate(a) for a in attendees],
        "meta": {
            "total": total,
            "page": page_num,
            "pageSize": size,
            "totalPages": total_pages,
            "hasNext": page_num < total_pages,
            "hasPrev": page_num > 1,
            "search": term or None,
        },
    }


@router.post("", status_code=201)
async def create_new_attendee(
    data: AttendeeCreate,
    session: SessionDep,
    user: AdminUser,
) -> dict:
    """Create a new attendee."""
    try:
        attendee = await create_attendee(
            session,
            employee_id=data.employee_id,
            email=data.email,
            name=data.name,
            role=data.role,
            quota_indomie=(
                settings.default_quota_indomie
                if data.quota_indomie is None
                else data.quota_indomie
            ),
            quota_beer=(
                settings.default_quota_beer
                if data.quota_beer is None
                else data.quota_beer
            ),
            checked_in=data.checked_in,
        )
    except IntegrityError:
        raise ConflictError("Employee ID or email already exists")

    logger.info(
        "Attendee created",
        extra=get_log_context(employee_id=attendee.employee_id, actor=user.actor),
    )
    return {"data": AttendeeAdmin.model_validate(attendee)}


@router.get("/{attendee_id}")
async def get_attendee(attendee_id: str, session: SessionDep) -> dict:
    """Get attendee details."""
    attendee = await get_attendee_by_id(session, attendee_id)
    if attendee is None:
        raise AttendeeNotFoundError()
    return {"data": AttendeeAdmin.model_validate(attendee)}


@router.patch("/{attendee_id}")
async def patch_attendee(
    attendee_id: str,
    session: SessionDep,
    user: AdminUser,
    body: dict[str, Any] = Body(...),
) -> dict:
    """Update whitelisted attendee fields."""
    changes = parse_attendee_patch(body)

    try:
        attendee = await update_attendee(session, attendee_id, changes)
    except IntegrityError:
        raise ConflictError("Employee ID or email already exists")
    if attendee is None:
        raise AttendeeNotFoundError()

    logger.info(
        "Attendee updated",
        extra=get_log_context(
            employee_id=attendee.employee_id,
            actor=user.actor,
            fields=sorted(changes),
        ),
    )
    return {"data": AttendeeAdmin.model_validate(attendee)}


@router.delete("/{attendee_id}")
async def delete_existing_attendee(
    attendee_id: str,
    session: SessionDep,
    user: AdminUser,
) -> dict:
    """Delete an attendee that has no redemption history."""
    attendee = await get_attendee_by_id(session, attendee_id)
    if attendee is None:
        raise AttendeeNotFoundError()

    if await count_redemptions_for_attendee(session, attendee_id) > 0:
        raise ConflictError("Attendee has redemption logs and cannot be deleted")

    employee_id = attendee.employee_id
    try:
        await delete_attendee(session, attendee_id)
    except IntegrityError:
        # A redemption landed after the history check
        raise ConflictError("Attendee has redemption logs and cannot be deleted")

    logger.info(
        "Attendee deleted",
        extra=get_log_context(employee_id=employee_id, actor=user.actor),
    )
    return {"success": True}
