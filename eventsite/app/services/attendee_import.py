"""Bulk attendee import from CSV exports of the HR roster.

Roster files come from spreadsheets, so headers vary ("Employee No",
"Full Name", a UTF-8 BOM on the first column, ...). Rows are matched on
employee ID: existing attendees get their email, name and role refreshed,
new ones are created with the default quotas.
"""

import csv
import io
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventsite.app.core.config import settings
from eventsite.app.core.logging import get_logger
from eventsite.app.db.crud import upsert_attendee
from eventsite.app.db.models import Role

logger = get_logger(__name__)

EMPLOYEE_ID_KEYS = ("employee_id", "employeeid", "employee_no", "employee_number", "id")
EMAIL_KEYS = ("email", "email_address")
NAME_KEYS = ("name", "full_name", "fullname")
ROLE_KEYS = ("role", "roles")


@dataclass
class ImportRow:
    employee_id: Optional[str]
    email: Optional[str]
    name: Optional[str]
    role: Role


@dataclass
class ImportSummary:
    processed: int = 0
    imported: int = 0
    skipped: int = 0
    reasons: Counter = field(default_factory=Counter)

    def skip(self, reason: str) -> None:
        self.skipped += 1
        self.reasons[reason] += 1

    def __str__(self) -> str:
        return (
            f"Processed {self.processed}, Imported/updated {self.imported}, "
            f"Skipped {self.skipped}"
        )


def normalize_key(key: str) -> str:
    key = key.lstrip("\ufeff").strip().lower()
    return re.sub(r"\s+", "_", key)


def parse_role(value: Any) -> Role:
    """Map a roster role cell to a Role. Anything unrecognised is an attendee."""
    text = str(value or "").strip().lower()
    if text == Role.ADMIN.value:
        return Role.ADMIN
    if text == Role.STAFF.value:
        return Role.STAFF
    return Role.ATTENDEE


def _first(row: dict[str, Any], keys: Iterable[str]) -> Optional[str]:
    for key in keys:
        value = row.get(key)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def map_row(raw: dict[str, Any]) -> ImportRow:
    row = {
        normalize_key(k): v.strip() if isinstance(v, str) else v
        for k, v in raw.items()
        if k is not None
    }
    return ImportRow(
        employee_id=_first(row, EMPLOYEE_ID_KEYS),
        email=_first(row, EMAIL_KEYS),
        name=_first(row, NAME_KEYS),
        role=parse_role(_first(row, ROLE_KEYS)),
    )


def read_attendee_csv(data: bytes) -> list[dict[str, Any]]:
    """Parse roster CSV bytes into dict rows. A leading BOM is dropped."""
    text = data.decode("utf-8-sig")
    reader = csv.DictReader(io.StringIO(text), skipinitialspace=True)
    return list(reader)


async def import_attendees(
    session: AsyncSession,
    records: Iterable[dict[str, Any]],
) -> ImportSummary:
    """Upsert roster records by employee ID.

    Each row is committed on its own so a bad row (e.g. an email already
    used by a different employee) only skips that row.
    """
    summary = ImportSummary()

    for raw in records:
        summary.processed += 1
        row = map_row(raw)

        if not row.employee_id:
            summary.skip("missing_employee_id")
            continue
        if not row.email:
            summary.skip("missing_email")
            continue
        if not row.name:
            summary.skip("missing_name")
            continue

        try:
            await upsert_attendee(
                session,
                employee_id=row.employee_id,
                email=row.email.lower(),
                name=row.name,
                role=row.role,
                default_quota_indomie=settings.default_quota_indomie,
                default_quota_beer=settings.default_quota_beer,
            )
        except IntegrityError as exc:
            await session.rollback()
            logger.warning(
                f"Skipping roster row: {exc.orig}",
                extra={"employee_id": row.employee_id},
            )
            summary.skip(type(exc).__name__)
            continue

        summary.imported += 1

    logger.info(str(summary), extra={"reasons": dict(summary.reasons)})
    return summary
