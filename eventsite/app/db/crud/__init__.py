"""CRUD operations package.

- attendee.py: Attendee lookups, admin CRUD, check-in and import upserts
- redemption.py: The redemption transaction and the audit log
"""

# Attendee operations
from eventsite.app.db.crud.attendee import (
    check_in_attendee,
    create_attendee,
    delete_attendee,
    find_attendee_for_login,
    get_attendee_by_employee_id,
    get_attendee_by_id,
    search_attendees,
    update_attendee,
    upsert_attendee,
)

# Redemption operations
from eventsite.app.db.crud.redemption import (
    QUOTA_COLUMNS,
    count_redemptions_for_attendee,
    list_redemption_logs,
    redeem_item,
)

__all__ = [
    # Attendee operations
    "check_in_attendee",
    "create_attendee",
    "delete_attendee",
    "find_attendee_for_login",
    "get_attendee_by_employee_id",
    "get_attendee_by_id",
    "search_attendees",
    "update_attendee",
    "upsert_attendee",
    # Redemption operations
    "QUOTA_COLUMNS",
    "count_redemptions_for_attendee",
    "list_redemption_logs",
    "redeem_item",
]
