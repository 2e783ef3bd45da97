import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Boolean,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventsite.app.db.base import Base


class Role(str, enum.Enum):
    ATTENDEE = "attendee"
    STAFF = "staff"
    ADMIN = "admin"


class Item(str, enum.Enum):
    INDOMIE = "indomie"
    BEER = "beer"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _enum_column(enum_cls: type[enum.Enum]) -> Enum:
    # Persist the lower-case values, not the member names.
    return Enum(
        enum_cls,
        native_enum=False,
        length=16,
        values_callable=lambda cls: [member.value for member in cls],
        validate_strings=True,
    )


class Attendee(Base):
    __tablename__ = "attendees"
    __table_args__ = (
        CheckConstraint("quota_indomie >= 0", name="ck_attendees_quota_indomie"),
        CheckConstraint("quota_beer >= 0", name="ck_attendees_quota_beer"),
        Index("idx_attendees_created", "created_at"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=_new_id)
    employee_id: Mapped[str] = mapped_column(String(64), unique=True)
    email: Mapped[str] = mapped_column(String(320), unique=True)
    name: Mapped[str] = mapped_column(String(200))
    role: Mapped[Role] = mapped_column(_enum_column(Role), default=Role.ATTENDEE)
    quota_indomie: Mapped[int] = mapped_column(Integer, default=0)
    quota_beer: Mapped[int] = mapped_column(Integer, default=0)
    checked_in: Mapped[bool] = mapped_column(Boolean, default=False)
    last_redeem_ts: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    redemptions: Mapped[list["RedemptionLog"]] = relationship(
        back_populates="attendee", passive_deletes="all"
    )

    def __repr__(self) -> str:
        return f"<Attendee(employee_id={self.employee_id!r}, role={self.role.value})>"


class RedemptionLog(Base):
    """Audit row written once per successful redemption. Never updated."""

    __tablename__ = "redemption_logs"
    __table_args__ = (
        Index("idx_redemption_logs_ts", "ts"),
        Index("idx_redemption_logs_attendee", "attendee_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ts: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    attendee_id: Mapped[str] = mapped_column(
        ForeignKey("attendees.id", ondelete="RESTRICT")
    )
    item: Mapped[Item] = mapped_column(_enum_column(Item))
    delta: Mapped[int] = mapped_column(Integer, default=-1)
    booth_id: Mapped[str] = mapped_column(String(100))
    scanned_by: Mapped[str] = mapped_column(String(320))

    attendee: Mapped[Attendee] = relationship(back_populates="redemptions")
