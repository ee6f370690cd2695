"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator, model_validator

from inkbook.config import settings
from inkbook.models.booking import Booking

# ---------------------------------------------------------------------------
# Shared validators
# ---------------------------------------------------------------------------


def _check_duration(value: int | None) -> int | None:
    if value is None:
        return value
    lo, hi, step = settings.appointment_min_duration, settings.appointment_max_duration, settings.appointment_slot_minutes
    if not lo <= value <= hi or value % step:
        raise ValueError(f"duration must be a multiple of {step} minutes between {lo} and {hi}")
    return value


def _check_slot(value: time | None) -> time | None:
    if value is None:
        return value
    if value.second or value.microsecond or value.minute % settings.appointment_slot_minutes:
        raise ValueError(f"time must fall on a {settings.appointment_slot_minutes}-minute slot")
    if not settings.appointment_first_slot <= value <= settings.appointment_last_slot:
        raise ValueError(
            f"time must be between {settings.appointment_first_slot:%H:%M} and {settings.appointment_last_slot:%H:%M}"
        )
    return value


DurationMinutes = Annotated[int, AfterValidator(_check_duration)]
SlotTime = Annotated[time, AfterValidator(_check_slot)]

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingRequestCreate(BaseModel):
    """Schema for a client's tattoo request to an artist."""

    artist_id: uuid.UUID
    subject: str = Field(..., min_length=1, max_length=2000)
    tattoo_style: str | None = Field(None, max_length=100)
    body_area: str | None = Field(None, max_length=100)
    size_category: str | None = Field(None, max_length=50)
    color_preferences: str | None = Field(None, max_length=50)
    meaning: str | None = Field(None, max_length=2000)
    budget_min: Decimal | None = Field(None, ge=0)
    budget_max: Decimal | None = Field(None, ge=0)
    reference_images: list[str] | None = Field(None, max_length=10)

    @field_validator("subject")
    @classmethod
    def _strip_subject(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("subject must not be blank")
        return value

    @model_validator(mode="after")
    def check_budget(self) -> "BookingRequestCreate":
        """If both bounds are provided, validate budget_min <= budget_max."""
        if self.budget_min is not None and self.budget_max is not None and self.budget_min > self.budget_max:
            raise ValueError("budget_min must not exceed budget_max")
        return self


class AppointmentCreate(BaseModel):
    """Schema for an artist scheduling an appointment. Only notes are optional."""

    client_id: uuid.UUID
    subject: str = Field(..., min_length=1, max_length=2000)
    appointment_date: date
    appointment_time: SlotTime
    appointment_duration: DurationMinutes
    total_amount: Decimal = Field(..., gt=0)
    deposit_amount: Decimal = Field(..., gt=0)
    artist_notes: str | None = Field(None, max_length=2000)

    @field_validator("subject")
    @classmethod
    def _strip_subject(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("subject must not be blank")
        return value

    @model_validator(mode="after")
    def check_amounts(self) -> "AppointmentCreate":
        """The deposit is part of the total price."""
        if self.deposit_amount > self.total_amount:
            raise ValueError("deposit_amount must not exceed total_amount")
        return self

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.appointment_date, self.appointment_time)


class AppointmentUpdate(BaseModel):
    """Schema for an artist editing an appointment. All fields optional.

    ``expected_version`` lets the caller assert it edits the row it last read.
    """

    appointment_date: date | None = None
    appointment_time: SlotTime | None = None
    appointment_duration: DurationMinutes | None = None
    total_amount: Decimal | None = Field(None, gt=0)
    deposit_amount: Decimal | None = Field(None, gt=0)
    artist_notes: str | None = Field(None, max_length=2000)
    expected_version: int | None = Field(None, ge=1)

    @model_validator(mode="after")
    def check_required_not_cleared(self) -> "AppointmentUpdate":
        """Only ``artist_notes`` may be cleared with an explicit null."""
        cleared = [
            name
            for name in ("appointment_date", "appointment_time", "appointment_duration", "total_amount", "deposit_amount")
            if name in self.model_fields_set and getattr(self, name) is None
        ]
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self


class CancelRequest(BaseModel):
    """Optional body for cancellation."""

    expected_version: int | None = Field(None, ge=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class RequestDetails(BaseModel):
    """What the client asked for."""

    tattoo_style: str | None = None
    body_area: str | None = None
    size_category: str | None = None
    color_preferences: str | None = None
    meaning: str | None = None
    budget_min: Decimal | None = None
    budget_max: Decimal | None = None
    reference_images: list[str] | None = None

    model_config = ConfigDict(from_attributes=True)


class AppointmentDetails(BaseModel):
    """What the artist scheduled."""

    appointment_date: datetime
    appointment_duration: int | None = None
    deposit_amount: Decimal | None = None
    total_amount: Decimal | None = None
    artist_notes: str | None = None

    model_config = ConfigDict(from_attributes=True)


class BookingResponse(BaseModel):
    """Standard booking response.

    ``kind`` tags the variant: ``appointment`` rows carry an
    ``appointment`` block, ``request`` rows carry ``appointment: null``.
    The original request details stay attached in both cases.
    """

    id: uuid.UUID
    client_id: uuid.UUID
    artist_id: uuid.UUID
    status: str
    subject: str
    kind: Literal["request", "appointment"]
    request: RequestDetails
    appointment: AppointmentDetails | None = None
    created_at: datetime
    updated_at: datetime
    version: int

    @classmethod
    def from_booking(cls, booking: Booking) -> "BookingResponse":
        return cls(
            id=booking.id,
            client_id=booking.client_id,
            artist_id=booking.artist_id,
            status=booking.status,
            subject=booking.subject,
            kind=booking.kind,
            request=RequestDetails.model_validate(booking),
            appointment=AppointmentDetails.model_validate(booking) if booking.kind == "appointment" else None,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
            version=booking.version,
        )


class BookingListResponse(BaseModel):
    """Paginated list of bookings."""

    items: list[BookingResponse]
    total: int


class StatusDisplayResponse(BaseModel):
    """How the progress tracker renders a booking for one viewer."""

    label: str
    icon: str
    tone: str
    clickable: bool


class BookingStatusResponse(BaseModel):
    """Latest booking between the caller and another user, with UI flags."""

    booking: BookingResponse | None = None
    role: Literal["client", "artist"] | None = None
    is_pending_expired: bool = False
    has_active_booking: bool = False
    show_progress_tracker: bool = False
    show_pinned_action: bool = True
    display: StatusDisplayResponse | None = None


class CancelResponse(BaseModel):
    """Outcome of a cancel call. Repeated or unknown cancels are not errors."""

    booking_id: uuid.UUID
    outcome: Literal["cancelled", "already_cancelled", "not_found"]
    booking: BookingResponse | None = None
