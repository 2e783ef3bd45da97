"""Redemption CRUD operations."""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from eventsite.app.db.models import Attendee, Item, RedemptionLog

# Each redeemable item draws from exactly one quota column.
QUOTA_COLUMNS = {
    Item.INDOMIE: Attendee.quota_indomie,
    Item.BEER: Attendee.quota_beer,
}


async def redeem_item(
    session: AsyncSession,
    employee_id: str,
    item: Item,
    booth_id: str,
    scanned_by: str,
    auto_commit: bool = True,
) -> Attendee | None:
    """Atomically consume one unit of an attendee's quota and audit it.

    The decrement is a single conditional UPDATE (``quota > 0`` in the
    WHERE clause), so two booths scanning the same attendee at once can
    never both succeed on the last unit: the database serialises the row
    update and the loser matches zero rows.

    Args:
        session: Database session from FastAPI dependency
        employee_id: Employee ID read from the attendee's QR code
        item: Item being redeemed
        booth_id: Free-text station identifier
        scanned_by: Identity of the staff/admin performing the scan
        auto_commit: Whether to commit (or roll back) the transaction. Set
                     to False to control transaction boundaries manually.

    Returns:
        The attendee with updated quotas, or None if no attendee with that
        employee ID has remaining quota for the item. No log row is written
        in that case.
    """
    quota_column = QUOTA_COLUMNS[item]
    now = datetime.now(timezone.utc)

    result = await session.execute(
        update(Attendee)
        .where(Attendee.employee_id == employee_id, quota_column > 0)
        .values(**{quota_column.key: quota_column - 1, "last_redeem_ts": now})
        .execution_options(synchronize_session=False)
    )

    if result.rowcount == 0:
        # Unknown attendee or exhausted quota
        if auto_commit:
            await session.rollback()
        return None

    result = await session.execute(
        select(Attendee)
        .where(Attendee.employee_id == employee_id)
        .execution_options(populate_existing=True)
    )
    attendee = result.scalar_one_or_none()
    if attendee is None:
        if auto_commit:
            await session.rollback()
        return None

    session.add(
        RedemptionLog(
            ts=now,
            attendee_id=attendee.id,
            item=item,
            delta=-1,
            booth_id=booth_id,
            scanned_by=scanned_by,
        )
    )

    if auto_commit:
        await session.commit()
    else:
        await session.flush()

    return attendee


async def list_redemption_logs(
    session: AsyncSession,
    item: Item | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[RedemptionLog]:
    """Get redemption logs, newest first, with their attendees loaded.

    Args:
        session: Database session from FastAPI dependency
        item: Only logs for this item
        start: Only logs with ts >= start
        end: Only logs with ts <= end

    Returns:
        List of redemption logs
    """
    query = select(RedemptionLog).options(joinedload(RedemptionLog.attendee))
    if item is not None:
        query = query.where(RedemptionLog.item == item)
    if start is not None:
        query = query.where(RedemptionLog.ts >= start)
    if end is not None:
        query = query.where(RedemptionLog.ts <= end)

    result = await session.execute(
        query.order_by(RedemptionLog.ts.desc(), RedemptionLog.id.desc())
    )
    return list(result.scalars().all())


async def count_redemptions_for_attendee(
    session: AsyncSession,
    attendee_id: str,
) -> int:
    result = await session.execute(
        select(func.count())
        .select_from(RedemptionLog)
        .where(RedemptionLog.attendee_id == attendee_id)
    )
    return result.scalar_one()
