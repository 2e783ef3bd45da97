from typing import Annotated, Callable

from fastapi import Depends, Request

from eventsite.app.core.config import settings
from eventsite.app.core.security import SessionUser, decode_session_token
from eventsite.app.db.models import Role
from eventsite.app.exceptions import AuthenticationError, PermissionDeniedError


def get_bearer_token(request: Request) -> str | None:
    """Extract Bearer token from Authorization header.

    Args:
        request: The incoming request

    Returns:
        The token string if present, None otherwise
    """
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth.replace("Bearer ", "", 1).strip()


def get_session_token(request: Request) -> str | None:
    """Return the session token from the cookie, or from a Bearer header
    for non-browser clients."""
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    return get_bearer_token(request)


def get_current_user(request: Request) -> SessionUser:
    """Verify the session credential carried by the request.

    Args:
        request: The incoming request

    Returns:
        The verified session claims

    Raises:
        AuthenticationError: 401 if the credential is missing, forged or expired
    """
    user = decode_session_token(get_session_token(request))
    if user is None:
        raise AuthenticationError()
    request.state.session_user = user
    return user


def require_roles(*roles: Role) -> Callable[[SessionUser], SessionUser]:
    """Build a dependency admitting only sessions whose role is in `roles`.

    Raises:
        AuthenticationError: 401 if there is no valid session
        PermissionDeniedError: 403 if the role is not allowed
    """
    allowed = frozenset(roles)

    def dependency(user: Annotated[SessionUser, Depends(get_current_user)]) -> SessionUser:
        if user.role not in allowed:
            raise PermissionDeniedError()
        return user

    return dependency


require_admin = require_roles(Role.ADMIN)
require_staff = require_roles(Role.STAFF, Role.ADMIN)

CurrentUser = Annotated[SessionUser, Depends(get_current_user)]
StaffUser = Annotated[SessionUser, Depends(require_staff)]
AdminUser = Annotated[SessionUser, Depends(require_admin)]
