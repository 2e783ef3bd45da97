"""Login and logout.

Login is a convenience gate for a one-day event: an attendee proves who they
are with the email and employee ID printed on the roster, no password.
"""

from fastapi import APIRouter, Response
from pydantic import BaseModel, Field, field_validator

from eventsite.app.api.schemas import normalize_email, strip_required
from eventsite.app.core.config import settings
from eventsite.app.core.logging import get_logger
from eventsite.app.core.security import SessionUser, issue_session_token
from eventsite.app.db.crud import find_attendee_for_login
from eventsite.app.db.dependencies import SessionDep
from eventsite.app.db.models import Role
from eventsite.app.exceptions import AuthenticationError

router = APIRouter(tags=["auth"])
logger = get_logger(__name__)

# Landing page per role; keyed by every Role member.
ROLE_REDIRECTS = {
    Role.ADMIN: "/admin",
    Role.STAFF: "/staff",
    Role.ATTENDEE: "/my",
}


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    employee_id: str = Field(..., min_length=1, max_length=64)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("employee_id")
    @classmethod
    def validate_employee_id(cls, v: str) -> str:
        return strip_required(v)


class LoginResponse(BaseModel):
    redirect: str
    role: Role


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_ttl_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    response: Response,
    session: SessionDep,
) -> LoginResponse:
    """Match email + employee ID against the roster and issue a session."""
    attendee = await find_attendee_for_login(session, data.email, data.employee_id)
    if attendee is None:
        logger.warning("Login rejected", extra={"employee_id": data.employee_id})
        raise AuthenticationError("Invalid credentials")

    user = SessionUser(
        sub=attendee.id,
        employee_id=attendee.employee_id,
        email=attendee.email,
        role=attendee.role,
        name=attendee.name,
    )
    set_session_cookie(response, issue_session_token(user))

    logger.info(
        "Login succeeded",
        extra={"employee_id": attendee.employee_id, "role": attendee.role.value},
    )
    return LoginResponse(redirect=ROLE_REDIRECTS[attendee.role], role=attendee.role)


@router.post("/logout")
async def logout(response: Response) -> dict:
    """Clear the session cookie."""
    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )
    return {"success": True}
