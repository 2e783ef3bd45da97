"""Tests for the roster CSV import."""

import pytest
from sqlalchemy import select

from eventsite.app.db.models import Attendee, Role
from eventsite.app.services.attendee_import import (
    import_attendees,
    map_row,
    normalize_key,
    parse_role,
    read_attendee_csv,
)


def _all_attendees(run_db) -> dict[str, Attendee]:
    async def fetch(session):
        result = await session.execute(select(Attendee))
        return {a.employee_id: a for a in result.scalars().all()}

    return run_db(fetch)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("\ufeffEmployee ID", "employee_id"),
        ("  Full   Name ", "full_name"),
        ("EMAIL", "email"),
    ],
)
def test_normalize_key(raw, expected) -> None:
    assert normalize_key(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("admin", Role.ADMIN),
        (" Staff ", Role.STAFF),
        ("attendee", Role.ATTENDEE),
        ("manager", Role.ATTENDEE),
        ("", Role.ATTENDEE),
        (None, Role.ATTENDEE),
    ],
)
def test_parse_role(raw, expected) -> None:
    assert parse_role(raw) == expected


def test_map_row_accepts_aliases() -> None:
    row = map_row(
        {"Employee No": " E1 ", "Email Address": "a@example.com", "Fullname": "Ayu", "Roles": "staff"}
    )
    assert row.employee_id == "E1"
    assert row.email == "a@example.com"
    assert row.name == "Ayu"
    assert row.role == Role.STAFF


def test_read_csv_strips_bom() -> None:
    data = "\ufeffemployee_id,email,name\nE1,a@example.com,Ayu\n".encode("utf-8")
    assert read_attendee_csv(data) == [
        {"employee_id": "E1", "email": "a@example.com", "name": "Ayu"}
    ]


def test_import_creates_and_skips(run_db) -> None:
    records = read_attendee_csv(
        (
            "Employee ID,Email,Full Name,Role\n"
            "E1,Ayu@Example.com,Ayu,staff\n"
            "E2,budi@example.com,Budi,\n"
            ",nobody@example.com,Nobody,\n"
            "E3,,No Email,\n"
            "E4,noname@example.com,,\n"
        ).encode("utf-8")
    )

    summary = run_db(lambda session: import_attendees(session, records))

    assert (summary.processed, summary.imported, summary.skipped) == (5, 2, 3)
    assert summary.reasons == {
        "missing_employee_id": 1,
        "missing_email": 1,
        "missing_name": 1,
    }
    assert str(summary) == "Processed 5, Imported/updated 2, Skipped 3"

    attendees = _all_attendees(run_db)
    assert set(attendees) == {"E1", "E2"}
    assert attendees["E1"].email == "ayu@example.com"
    assert attendees["E1"].role == Role.STAFF
    assert attendees["E1"].quota_indomie == 1
    assert attendees["E1"].quota_beer == 3
    assert attendees["E2"].role == Role.ATTENDEE


def test_import_updates_identity_but_keeps_quotas(seed, run_db) -> None:
    seed("E10", email="old@example.com", name="Old", quota_indomie=0, quota_beer=1, checked_in=True)

    records = [{"employee_id": "E10", "email": "new@example.com", "name": "New", "role": "admin"}]
    summary = run_db(lambda session: import_attendees(session, records))
    assert summary.imported == 1

    attendee = _all_attendees(run_db)["E10"]
    assert attendee.email == "new@example.com"
    assert attendee.name == "New"
    assert attendee.role == Role.ADMIN
    assert attendee.quota_indomie == 0
    assert attendee.quota_beer == 1
    assert attendee.checked_in is True


def test_import_skips_conflicting_email_and_continues(seed, run_db) -> None:
    seed("E20", email="shared@example.com")

    records = [
        {"employee_id": "E21", "email": "shared@example.com", "name": "Clash"},
        {"employee_id": "E22", "email": "fine@example.com", "name": "Fine"},
    ]
    summary = run_db(lambda session: import_attendees(session, records))

    assert summary.imported == 1
    assert summary.reasons == {"IntegrityError": 1}
    assert set(_all_attendees(run_db)) == {"E20", "E22"}
