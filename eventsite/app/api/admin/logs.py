from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Query, Request, Response

from eventsite.app.db.crud import list_redemption_logs
from eventsite.app.db.dependencies import SessionDep
from eventsite.app.db.models import Item
from eventsite.app.exceptions import InvalidInputError
from eventsite.app.services.log_export import logs_to_csv, serialize_log

router = APIRouter()


def _parse_item(raw: Optional[str]) -> Optional[Item]:
    if not raw:
        return None
    try:
        return Item(raw)
    except ValueError:
        raise InvalidInputError(f"Unknown item: {raw!r}")


def _parse_datetime(name: str, raw: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    if not raw:
        return None
    try:
        value = datetime.fromisoformat(raw.strip())
    except ValueError:
        raise InvalidInputError(f"Invalid '{name}' date: {raw!r}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def wants_csv(request: Request, format: Optional[str]) -> bool:
    if format == "csv":
        return True
    return "text/csv" in request.headers.get("accept", "")


@router.get("")
async def export_logs(
    request: Request,
    session: SessionDep,
    item: Optional[str] = Query(None),
    start: Optional[str] = Query(None, alias="from"),
    end: Optional[str] = Query(None, alias="to"),
    format: Optional[str] = Query(None),
):
    """Redemption logs, newest first, as JSON or a CSV download."""
    logs = await list_redemption_logs(
        session,
        item=_parse_item(item),
        start=_parse_datetime("from", start),
        end=_parse_datetime("to", end),
    )

    if wants_csv(request, format):
        return Response(
            content=logs_to_csv(logs),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="logs.csv"'},
        )
    return [serialize_log(log) for log in logs]
