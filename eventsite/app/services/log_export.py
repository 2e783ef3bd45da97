"""Redemption log export (JSON rows and CSV)."""

import csv
import io
from datetime import datetime, timezone
from typing import Any, Iterable

from eventsite.app.db.models import RedemptionLog

LOG_CSV_HEADER = [
    "ts",
    "employee_id",
    "item",
    "delta",
    "booth_id",
    "scanned_by",
    "name",
    "email",
]


def format_ts(ts: datetime) -> str:
    """Format a timestamp as ISO-8601 UTC with milliseconds, e.g.
    ``2025-08-01T09:30:00.123Z``. Naive values are taken to be UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def serialize_log(log: RedemptionLog) -> dict[str, Any]:
    """Flatten a log row and its attendee into an export row."""
    return {
        "ts": format_ts(log.ts),
        "employee_id": log.attendee.employee_id,
        "item": log.item.value,
        "delta": log.delta,
        "booth_id": log.booth_id,
        "scanned_by": log.scanned_by,
        "name": log.attendee.name,
        "email": log.attendee.email,
    }


def logs_to_csv(logs: Iterable[RedemptionLog]) -> str:
    """Render logs as CSV.

    The header row is bare; every data value is quoted with embedded
    quotes doubled.
    """
    buffer = io.StringIO()
    buffer.write(",".join(LOG_CSV_HEADER) + "\n")

    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for log in logs:
        row = serialize_log(log)
        writer.writerow([row[column] for column in LOG_CSV_HEADER])
    return buffer.getvalue()
