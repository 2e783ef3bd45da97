import asyncio
from typing import Any, Callable

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from eventsite.app.core.config import settings
from eventsite.app.core.security import SessionUser, issue_session_token
from eventsite.app.db.async_session import enable_sqlite_foreign_keys, get_db
from eventsite.app.db.base import Base
from eventsite.app.db.models import Attendee, Role
from eventsite.app.main import create_app

TEST_SESSION_SECRET = "test-session-secret-0123456789abcdef"


def sqlite_url_from_absolute_path(path: str) -> str:
    # SQLAlchemy expects 4 slashes for absolute paths. The path already starts
    # with '/', so strip it when appending after '////'.
    return f"sqlite+aiosqlite:////{path.lstrip('/')}"


@pytest.fixture(autouse=True)
def session_secret(monkeypatch) -> str:
    monkeypatch.setattr(settings, "session_secret", TEST_SESSION_SECRET)
    return TEST_SESSION_SECRET


@pytest.fixture
def engine(tmp_path) -> AsyncEngine:
    db_path = tmp_path / "eventsite_test.db"
    # NullPool: connections never outlive the event loop that opened them.
    engine = create_async_engine(
        sqlite_url_from_absolute_path(str(db_path)), poolclass=NullPool
    )
    enable_sqlite_foreign_keys(engine)

    async def init_db() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(init_db())
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
def session_maker(engine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest.fixture
def app(session_maker):
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def run_db(session_maker) -> Callable:
    """Run `fn(session)` in a fresh session on its own event loop."""

    def run(fn: Callable) -> Any:
        async def _run():
            async with session_maker() as session:
                return await fn(session)

        return asyncio.run(_run())

    return run


@pytest.fixture
def seed(run_db) -> Callable[..., Attendee]:
    """Insert an attendee and return it (detached, attributes loaded)."""

    def _seed(
        employee_id: str,
        email: str | None = None,
        name: str | None = None,
        role: Role = Role.ATTENDEE,
        quota_indomie: int = 1,
        quota_beer: int = 3,
        checked_in: bool = False,
    ) -> Attendee:
        async def insert(session):
            attendee = Attendee(
                employee_id=employee_id,
                email=email or f"{employee_id.lower()}@example.com",
                name=name or f"Attendee {employee_id}",
                role=role,
                quota_indomie=quota_indomie,
                quota_beer=quota_beer,
                checked_in=checked_in,
            )
            session.add(attendee)
            await session.commit()
            return attendee

        return run_db(insert)

    return _seed


def auth_headers(attendee: Attendee) -> dict[str, str]:
    """Bearer header carrying a valid session for `attendee`."""
    token = issue_session_token(
        SessionUser(
            sub=attendee.id,
            employee_id=attendee.employee_id,
            email=attendee.email,
            role=attendee.role,
            name=attendee.name,
        )
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def staff(seed) -> Attendee:
    return seed("S001", email="staff@example.com", name="Booth Staff", role=Role.STAFF)


@pytest.fixture
def admin(seed) -> Attendee:
    return seed("A001", email="admin@example.com", name="Event Admin", role=Role.ADMIN)


@pytest.fixture
def staff_headers(staff) -> dict[str, str]:
    return auth_headers(staff)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return auth_headers(admin)


@pytest.fixture
def headers_for() -> Callable[[Attendee], dict[str, str]]:
    return auth_headers
