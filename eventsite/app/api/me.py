"""Endpoints for the logged-in attendee."""

from fastapi import APIRouter, Query, Response

from eventsite.app.api.schemas import AttendeePublic
from eventsite.app.db.crud import get_attendee_by_id
from eventsite.app.db.dependencies import SessionDep
from eventsite.app.exceptions import AuthenticationError
from eventsite.app.middleware.auth import CurrentUser
from eventsite.app.services.qr import render_qr

router = APIRouter(prefix="/me", tags=["me"])

NO_STORE = {"Cache-Control": "no-store"}


@router.get("", response_model=AttendeePublic)
async def get_me(
    user: CurrentUser,
    session: SessionDep,
    response: Response,
) -> AttendeePublic:
    """Current quotas and check-in state of the session's attendee."""
    attendee = await get_attendee_by_id(session, user.sub)
    if attendee is None:
        # Deleted after the session was issued
        raise AuthenticationError()

    response.headers.update(NO_STORE)
    return AttendeePublic.model_validate(attendee)


@router.get("/qr")
async def get_my_qr(
    user: CurrentUser,
    format: str = Query("png"),
) -> Response:
    """QR code encoding the session's employee ID, scanned at the booths."""
    content, media_type = render_qr(user.employee_id, format)
    return Response(content=content, media_type=media_type, headers=NO_STORE)
