"""Signed session credentials.

Sessions are self-contained HS256 tokens: nothing is stored server-side, each
request is authenticated by verifying the signature and expiry of the token
it carries.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import BaseModel, ValidationError

from eventsite.app.core.config import settings
from eventsite.app.db.models import Role

ALGORITHM = "HS256"


class SessionUser(BaseModel):
    """Claims carried by a session token."""

    sub: str
    employee_id: str = ""
    email: str
    role: Role
    name: Optional[str] = None

    @property
    def actor(self) -> str:
        """Identity recorded as `scanned_by` on redemption logs."""
        return self.email or self.employee_id


def _get_secret_key() -> str:
    secret = settings.session_secret.strip()
    if not secret:
        raise RuntimeError("SESSION_SECRET not set")
    return secret


def issue_session_token(
    user: SessionUser,
    ttl_seconds: Optional[int] = None,
    now: Optional[datetime] = None,
) -> str:
    """Sign a session token for the given user.

    Args:
        user: Session claims
        ttl_seconds: Lifetime override, defaults to settings.session_ttl_seconds
        now: Issue time override (tests)

    Returns:
        Encoded token string
    """
    issued_at = now or datetime.now(timezone.utc)
    ttl = ttl_seconds if ttl_seconds is not None else settings.session_ttl_seconds

    payload = user.model_dump(mode="json", exclude_none=True)
    payload["iat"] = issued_at
    payload["exp"] = issued_at + timedelta(seconds=ttl)
    return jwt.encode(payload, _get_secret_key(), algorithm=ALGORITHM)


def decode_session_token(token: str | None) -> SessionUser | None:
    """Verify a session token.

    Returns:
        SessionUser if the signature, expiry and claims are valid, None otherwise
    """
    if not token:
        return None
    try:
        payload = jwt.decode(
            token,
            _get_secret_key(),
            algorithms=[ALGORITHM],
            leeway=settings.session_clock_tolerance_seconds,
            options={"require": ["exp", "sub"]},
        )
    except jwt.PyJWTError:
        return None

    try:
        return SessionUser.model_validate(payload)
    except ValidationError:
        return None
