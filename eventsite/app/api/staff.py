"""Booth endpoints: redemption and check-in (staff or admin)."""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field, field_validator

from eventsite.app.api.schemas import AttendeePublic, strip_required
from eventsite.app.core.logging import get_log_context, get_logger
from eventsite.app.db.crud import check_in_attendee, redeem_item
from eventsite.app.db.dependencies import SessionDep
from eventsite.app.db.models import Item
from eventsite.app.exceptions import AttendeeNotFoundError, RedemptionRejectedError
from eventsite.app.middleware.auth import StaffUser
from eventsite.app.middleware.request_id import get_request_id

router = APIRouter(tags=["staff"])
logger = get_logger(__name__)


class RedeemRequest(BaseModel):
    employee_id: str = Field(..., min_length=1, max_length=64)
    item: Item
    booth_id: str = Field(..., min_length=1, max_length=100)

    @field_validator("employee_id", "booth_id")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return strip_required(v)


class RedeemResponse(BaseModel):
    employee_id: str
    quota_indomie: int
    quota_beer: int
    last_redeem_ts: Optional[datetime]


class CheckinRequest(BaseModel):
    employee_id: str = Field(..., min_length=1, max_length=64)

    @field_validator("employee_id")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return strip_required(v)


@router.post("/redeem", response_model=RedeemResponse)
async def redeem(
    data: RedeemRequest,
    user: StaffUser,
    session: SessionDep,
    request: Request,
) -> RedeemResponse:
    """Consume one unit of the attendee's quota for the item.

    Unknown attendees and exhausted quotas get the same 400 response.
    """
    log_context = get_log_context(
        request_id=get_request_id(request),
        employee_id=data.employee_id,
        actor=user.actor,
        item=data.item.value,
        booth_id=data.booth_id,
    )

    attendee = await redeem_item(
        session,
        employee_id=data.employee_id,
        item=data.item,
        booth_id=data.booth_id,
        scanned_by=user.actor,
    )
    if attendee is None:
        logger.info("Redemption rejected", extra=log_context)
        raise RedemptionRejectedError()

    logger.info("Redemption committed", extra=log_context)
    return RedeemResponse(
        employee_id=attendee.employee_id,
        quota_indomie=attendee.quota_indomie,
        quota_beer=attendee.quota_beer,
        last_redeem_ts=attendee.last_redeem_ts,
    )


@router.post("/checkin", response_model=AttendeePublic)
async def checkin(
    data: CheckinRequest,
    user: StaffUser,
    session: SessionDep,
) -> AttendeePublic:
    """Mark the attendee as arrived."""
    attendee = await check_in_attendee(session, data.employee_id)
    if attendee is None:
        raise AttendeeNotFoundError("Not found")

    logger.info(
        "Attendee checked in",
        extra=get_log_context(employee_id=attendee.employee_id, actor=user.actor),
    )
    return AttendeePublic.model_validate(attendee)
