"""Booking model — a tattoo request or a scheduled appointment."""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from inkbook.database import Base, UUIDPrimaryKeyMixin


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Booking(UUIDPrimaryKeyMixin, Base):
    """One row per client/artist engagement.

    A row without ``appointment_date`` is still a request; once the artist
    sets a date it is an appointment. ``version`` is bumped on every write
    and checked by the ORM on update, so concurrent edits fail instead of
    silently overwriting each other.
    """

    __tablename__ = "bookings"

    client_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    artist_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        default="pending",
        index=True,
    )  # pending, expired, scheduled, rescheduled, cancelled, completed
    subject: Mapped[str] = mapped_column(Text, nullable=False)

    # Request details
    tattoo_style: Mapped[str | None] = mapped_column(String(100), nullable=True)
    body_area: Mapped[str | None] = mapped_column(String(100), nullable=True)
    size_category: Mapped[str | None] = mapped_column(String(50), nullable=True)
    color_preferences: Mapped[str | None] = mapped_column(String(50), nullable=True)
    meaning: Mapped[str | None] = mapped_column(Text, nullable=True)
    budget_min: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    budget_max: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    reference_images: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    # Appointment details (wall-clock time in the business timezone)
    appointment_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    appointment_duration: Mapped[int | None] = mapped_column(Integer, nullable=True)  # minutes
    deposit_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    total_amount: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    artist_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(default=_utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(default=_utcnow, server_default=func.now())
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        Index("ix_bookings_pair_status", "client_id", "artist_id", "status"),
        Index("ix_bookings_appointment_date", "appointment_date"),
        Index("ix_bookings_created_at", "created_at"),
    )

    @property
    def kind(self) -> str:
        """``appointment`` once a date is set, ``request`` before."""
        return "appointment" if self.appointment_date is not None else "request"

    def participant_role(self, user_id: uuid.UUID) -> str | None:
        if user_id == self.client_id:
            return "client"
        if user_id == self.artist_id:
            return "artist"
        return None

    def other_participant(self, user_id: uuid.UUID) -> uuid.UUID:
        return self.artist_id if user_id == self.client_id else self.client_id

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, client_id={self.client_id}, artist_id={self.artist_id}, status={self.status})>"
        )
