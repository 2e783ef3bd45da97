"""Parallel redemptions against the same attendee must never overdraw."""

import asyncio

from sqlalchemy import func, select

from eventsite.app.db.crud import get_attendee_by_employee_id, redeem_item
from eventsite.app.db.models import Item, RedemptionLog


def _redeem_in_parallel(session_maker, employee_id: str, attempts: int) -> list:
    async def attempt(i: int):
        async with session_maker() as session:
            return await redeem_item(
                session,
                employee_id=employee_id,
                item=Item.BEER,
                booth_id=f"B{i}",
                scanned_by="staff@example.com",
            )

    async def run():
        return await asyncio.gather(*(attempt(i) for i in range(attempts)))

    return asyncio.run(run())


def test_parallel_redemptions_on_last_unit(session_maker, seed, run_db) -> None:
    seed("E200", quota_beer=1)

    results = _redeem_in_parallel(session_maker, "E200", attempts=8)

    assert sum(r is not None for r in results) == 1

    async def state(session):
        attendee = await get_attendee_by_employee_id(session, "E200")
        count = await session.execute(select(func.count()).select_from(RedemptionLog))
        return attendee.quota_beer, count.scalar_one()

    assert run_db(state) == (0, 1)


def test_parallel_redemptions_never_exceed_quota(session_maker, seed, run_db) -> None:
    seed("E201", quota_beer=3)

    results = _redeem_in_parallel(session_maker, "E201", attempts=10)

    assert sum(r is not None for r in results) == 3

    async def state(session):
        attendee = await get_attendee_by_employee_id(session, "E201")
        count = await session.execute(select(func.count()).select_from(RedemptionLog))
        return attendee.quota_beer, count.scalar_one()

    assert run_db(state) == (0, 3)
