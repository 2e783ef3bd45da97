"""Tests for log export formatting helpers."""

from datetime import datetime, timedelta, timezone

from eventsite.app.db.models import Attendee, Item, RedemptionLog
from eventsite.app.services.log_export import format_ts, logs_to_csv


def test_format_ts_utc_millis() -> None:
    ts = datetime(2025, 8, 1, 9, 30, 5, 987654, tzinfo=timezone.utc)
    assert format_ts(ts) == "2025-08-01T09:30:05.987Z"


def test_format_ts_converts_offsets() -> None:
    wib = timezone(timedelta(hours=7))
    assert format_ts(datetime(2025, 8, 1, 16, 0, tzinfo=wib)) == "2025-08-01T09:00:00.000Z"


def test_format_ts_naive_is_utc() -> None:
    assert format_ts(datetime(2025, 8, 1, 9, 0)) == "2025-08-01T09:00:00.000Z"


def test_logs_to_csv_quotes_every_value() -> None:
    attendee = Attendee(employee_id="E1", name="Line\nBreak", email="e1@example.com")
    log = RedemptionLog(
        ts=datetime(2025, 8, 1, tzinfo=timezone.utc),
        item=Item.INDOMIE,
        delta=-1,
        booth_id="K",
        scanned_by="E9",
    )
    log.attendee = attendee

    output = logs_to_csv([log])
    assert output == (
        "ts,employee_id,item,delta,booth_id,scanned_by,name,email\n"
        '"2025-08-01T00:00:00.000Z","E1","indomie","-1","K","E9","Line\nBreak","e1@example.com"\n'
    )
