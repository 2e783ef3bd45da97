"""Attendee CRUD operations."""
from typing import Any, List, Optional, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from eventsite.app.db.models import Attendee, Role


async def get_attendee_by_id(
    session: AsyncSession,
    attendee_id: str
) -> Optional[Attendee]:
    """Get an attendee by its opaque ID.

    Args:
        session: Database session from FastAPI dependency
        attendee_id: The attendee ID

    Returns:
        Attendee object if found, None otherwise
    """
    result = await session.execute(
        select(Attendee).where(Attendee.id == attendee_id)
    )
    return result.scalar_one_or_none()


async def get_attendee_by_employee_id(
    session: AsyncSession,
    employee_id: str
) -> Optional[Attendee]:
    """Get an attendee by employee ID."""
    result = await session.execute(
        select(Attendee).where(Attendee.employee_id == employee_id)
    )
    return result.scalar_one_or_none()


async def find_attendee_for_login(
    session: AsyncSession,
    email: str,
    employee_id: str
) -> Optional[Attendee]:
    """Match login credentials against the attendee table.

    The email comparison is case-insensitive, the employee ID must match
    exactly.

    Args:
        session: Database session from FastAPI dependency
        email: Email address as typed by the user
        employee_id: Employee ID as typed by the user

    Returns:
        Attendee object if both fields match the same row, None otherwise
    """
    result = await session.execute(
        select(Attendee).where(
            func.lower(Attendee.email) == email.strip().lower(),
            Attendee.employee_id == employee_id,
        )
    )
    return result.scalars().first()


async def search_attendees(
    session: AsyncSession,
    search: str = "",
    page: int = 1,
    page_size: int = 20
) -> Tuple[List[Attendee], int]:
    """Search attendees with offset pagination.

    Args:
        session: Database session from FastAPI dependency
        search: Substring matched against employee ID, email and name
        page: 1-based page number
        page_size: Rows per page

    Returns:
        Tuple of (attendees on the page, total matching rows)
    """
    conditions = []
    if search:
        conditions.append(
            or_(
                Attendee.employee_id.contains(search, autoescape=True),
                Attendee.email.icontains(search, autoescape=True),
                Attendee.name.icontains(search, autoescape=True),
            )
        )

    total_result = await session.execute(
        select(func.count()).select_from(Attendee).where(*conditions)
    )
    total = total_result.scalar_one()

    result = await session.execute(
        select(Attendee)
        .where(*conditions)
        .order_by(Attendee.created_at.asc(), Attendee.id.asc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return list(result.scalars().all()), total


async def create_attendee(
    session: AsyncSession,
    employee_id: str,
    email: str,
    name: str,
    role: Role,
    quota_indomie: int,
    quota_beer: int,
    checked_in: bool = False,
    auto_commit: bool = True
) -> Attendee:
    """Create an attendee.

    Raises:
        IntegrityError: If the employee ID or email is already taken
    """
    attendee = Attendee(
        employee_id=employee_id,
        email=email,
        name=name,
        role=role,
        quota_indomie=quota_indomie,
        quota_beer=quota_beer,
        checked_in=checked_in,
    )
    session.add(attendee)
    # Flush to surface unique conflicts here rather than at request teardown.
    await session.flush()
    if auto_commit:
        await session.commit()
    return attendee


async def update_attendee(
    session: AsyncSession,
    attendee_id: str,
    changes: dict[str, Any],
    auto_commit: bool = True
) -> Optional[Attendee]:
    """Apply already-validated field changes to an attendee.

    Returns:
        The updated attendee, or None if not found

    Raises:
        IntegrityError: If the change collides with another attendee
    """
    attendee = await get_attendee_by_id(session, attendee_id)
    if attendee is None:
        return None

    for field, value in changes.items():
        setattr(attendee, field, value)

    await session.flush()
    if auto_commit:
        await session.commit()
    await session.refresh(attendee)
    return attendee


async def delete_attendee(
    session: AsyncSession,
    attendee_id: str,
    auto_commit: bool = True
) -> bool:
    """Delete an attendee.

    Returns:
        True if deleted, False if not found
    """
    attendee = await get_attendee_by_id(session, attendee_id)
    if attendee is None:
        return False

    await session.delete(attendee)
    await session.flush()
    if auto_commit:
        await session.commit()
    return True


async def check_in_attendee(
    session: AsyncSession,
    employee_id: str,
    auto_commit: bool = True
) -> Optional[Attendee]:
    """Mark an attendee as checked in.

    Checking in twice is not an error.

    Returns:
        The updated attendee, or None if the employee ID is unknown
    """
    result = await session.execute(
        update(Attendee)
        .where(Attendee.employee_id == employee_id)
        .values(checked_in=True)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return None

    result = await session.execute(
        select(Attendee)
        .where(Attendee.employee_id == employee_id)
        .execution_options(populate_existing=True)
    )
    attendee = result.scalar_one()
    if auto_commit:
        await session.commit()
    return attendee


async def upsert_attendee(
    session: AsyncSession,
    employee_id: str,
    email: str,
    name: str,
    role: Role,
    default_quota_indomie: int,
    default_quota_beer: int,
    auto_commit: bool = True
) -> bool:
    """Insert an attendee or update identity fields of an existing one.

    Quotas and check-in state of an existing attendee are left untouched;
    the default quotas only apply to newly created rows.

    Returns:
        True if a new attendee was created, False if one was updated
    """
    attendee = await get_attendee_by_employee_id(session, employee_id)
    created = attendee is None
    if created:
        attendee = Attendee(
            employee_id=employee_id,
            quota_indomie=default_quota_indomie,
            quota_beer=default_quota_beer,
        )
        session.add(attendee)

    attendee.email = email
    attendee.name = name
    attendee.role = role

    await session.flush()
    if auto_commit:
        await session.commit()
    return created
