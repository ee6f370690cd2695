"""Booking service — the user-triggered lifecycle transitions.

Every status change goes through ``inkbook.domain.booking_state.transition``.
Functions raise the exceptions in ``inkbook.core.exceptions``; they flush but
never commit, the request session commits on success.
"""

import logging
import uuid
from datetime import datetime, timedelta

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from inkbook.config import settings
from inkbook.core.clock import Clock
from inkbook.core.exceptions import (
    ConflictError,
    NotFoundError,
    OwnershipError,
    StoreError,
    ValidationError,
)
from inkbook.domain.booking_state import (
    ACTIVE_STATUSES,
    BookingStatus,
    TransitionContext,
    Trigger,
    can_edit_appointment,
    is_stale_request,
    transition,
)
from inkbook.domain.status_display import is_clickable, shows_progress_tracker, status_display
from inkbook.models.booking import Booking
from inkbook.models.user import User
from inkbook.schemas.booking import AppointmentCreate, AppointmentUpdate, BookingRequestCreate

logger = logging.getLogger(__name__)

_REQUEST_FIELDS = (
    "tattoo_style",
    "body_area",
    "size_category",
    "color_preferences",
    "meaning",
    "budget_min",
    "budget_max",
    "reference_images",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _flush(db: AsyncSession, booking: Booking, failure_detail: str) -> Booking:
    """Flush pending changes and reload the row, mapping store errors."""
    try:
        await db.flush()
        await db.refresh(booking)
    except StaleDataError as e:
        logger.warning("Booking %s changed concurrently", booking.id)
        raise ConflictError() from e
    except SQLAlchemyError as e:
        logger.exception("Store write failed for booking %s", booking.id)
        raise StoreError(failure_detail) from e
    return booking


def _set_status(booking: Booking, trigger: Trigger, now: datetime, context: TransitionContext | None = None) -> None:
    previous = booking.status
    booking.status = transition(previous, trigger, context).value
    booking.updated_at = now
    logger.info("Booking %s: %s -> %s (%s)", booking.id, previous, booking.status, trigger.value)


def _check_version(booking: Booking, expected_version: int | None) -> None:
    if expected_version is not None and expected_version != booking.version:
        raise ConflictError()


async def _get_active_user(db: AsyncSession, user_id: uuid.UUID, role: str) -> User:
    user = await db.get(User, user_id)
    if user is None or not user.is_active or user.role != role:
        raise NotFoundError(role.capitalize(), str(user_id))
    return user


def _between(user_a: uuid.UUID, user_b: uuid.UUID):
    return or_(
        and_(Booking.client_id == user_a, Booking.artist_id == user_b),
        and_(Booking.client_id == user_b, Booking.artist_id == user_a),
    )


async def find_latest_booking_between(
    db: AsyncSession,
    user_a: uuid.UUID,
    user_b: uuid.UUID,
) -> Booking | None:
    """Most recent booking between two users, in either role."""
    result = await db.execute(
        select(Booking).where(_between(user_a, user_b)).order_by(Booking.created_at.desc()).limit(1)
    )
    return result.scalar_one_or_none()


async def find_pending_booking(
    db: AsyncSession,
    client_id: uuid.UUID,
    artist_id: uuid.UUID,
) -> Booking | None:
    """Most recent pending booking for the pair; newest wins if several exist."""
    result = await db.execute(
        select(Booking)
        .where(
            Booking.client_id == client_id,
            Booking.artist_id == artist_id,
            Booking.status == BookingStatus.PENDING.value,
        )
        .order_by(Booking.created_at.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_booking(db: AsyncSession, user: User, booking_id: uuid.UUID) -> Booking:
    """Fetch a booking the user takes part in.

    Raises ``NotFoundError`` for unknown ids and ``OwnershipError`` for
    bookings between other users.
    """
    booking = await db.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError("Booking", str(booking_id))
    if booking.participant_role(user.id) is None:
        raise OwnershipError()
    return booking


async def list_appointments(
    db: AsyncSession,
    user: User,
    status_filter: BookingStatus | str | None = None,
    skip: int = 0,
    limit: int = 20,
) -> tuple[list[Booking], int]:
    """Bookings the user takes part in, newest first, without open requests."""
    conditions = [
        or_(Booking.client_id == user.id, Booking.artist_id == user.id),
        Booking.status != BookingStatus.PENDING.value,
    ]
    if status_filter is not None:
        status_filter = BookingStatus(status_filter)
        if status_filter is BookingStatus.PENDING:
            raise ValidationError("Open requests are not listed as appointments")
        conditions.append(Booking.status == status_filter.value)

    total_result = await db.execute(select(func.count()).select_from(Booking).where(*conditions))
    total = total_result.scalar_one()

    result = await db.execute(
        select(Booking).where(*conditions).order_by(Booking.created_at.desc()).offset(skip).limit(limit)
    )
    return list(result.scalars().all()), total


async def get_booking_status_between(
    db: AsyncSession,
    user: User,
    participant_id: uuid.UUID,
    clock: Clock,
) -> dict:
    """Latest booking with ``participant_id`` plus the flags the chat view needs."""
    booking = await find_latest_booking_between(db, user.id, participant_id)
    if booking is None:
        return {"booking": None, "show_pinned_action": True}

    role = booking.participant_role(user.id)
    now = clock.now()
    pending_expired = is_stale_request(booking.status, booking.created_at, booking.appointment_date, now)
    has_active = booking.status not in (BookingStatus.EXPIRED, BookingStatus.CANCELLED) and not pending_expired
    completed_long_ago = booking.status == BookingStatus.COMPLETED and booking.updated_at < now - timedelta(
        days=settings.completed_tracker_days
    )
    show_tracker = (
        booking.status != BookingStatus.EXPIRED
        and not pending_expired
        and not completed_long_ago
        and shows_progress_tracker(booking.status, role)
    )
    display = status_display(booking.status, role)

    return {
        "booking": booking,
        "role": role,
        "is_pending_expired": pending_expired,
        "has_active_booking": has_active,
        "show_progress_tracker": show_tracker,
        "show_pinned_action": not has_active or not show_tracker,
        "display": {
            "label": display.label,
            "icon": display.icon,
            "tone": display.tone,
            "clickable": is_clickable(booking.status, role),
        },
    }


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


async def create_booking_request(
    db: AsyncSession,
    client: User,
    body: BookingRequestCreate,
    clock: Clock,
) -> Booking:
    """Client sends a tattoo request; the booking starts as ``pending``.

    A pair may only have one active booking. A pending request that already
    outlived the expiry window is expired here instead of blocking.
    """
    if client.role != "client":
        raise OwnershipError("Only clients can send booking requests")
    if body.artist_id == client.id:
        raise ValidationError("You cannot send a booking request to yourself")
    await _get_active_user(db, body.artist_id, "artist")

    now = clock.now()
    result = await db.execute(
        select(Booking).where(
            Booking.client_id == client.id,
            Booking.artist_id == body.artist_id,
            Booking.status.in_([s.value for s in ACTIVE_STATUSES]),
        )
    )
    for existing in result.scalars().all():
        if is_stale_request(existing.status, existing.created_at, existing.appointment_date, now):
            context = TransitionContext(
                now=now, created_at=existing.created_at, appointment_date=existing.appointment_date
            )
            _set_status(existing, Trigger.EXPIRE, now, context)
            continue
        raise ConflictError("You already have an active booking with this artist")

    booking = Booking(
        client_id=client.id,
        artist_id=body.artist_id,
        status=BookingStatus.PENDING.value,
        subject=body.subject,
        created_at=now,
        updated_at=now,
        **body.model_dump(include=set(_REQUEST_FIELDS)),
    )
    db.add(booking)
    await _flush(db, booking, "Could not send booking request. Please try again.")
    logger.info("Client %s requested booking %s with artist %s", client.id, booking.id, body.artist_id)
    return booking


async def schedule_appointment(
    db: AsyncSession,
    artist: User,
    body: AppointmentCreate,
    clock: Clock,
) -> Booking:
    """Artist fixes date, price and deposit for a client.

    Reuses the pair's pending request when there is one, so a request and
    its appointment stay a single row; otherwise the booking starts directly
    as ``scheduled``.
    """
    if artist.role != "artist":
        raise OwnershipError("Only artists can schedule appointments")
    if body.client_id == artist.id:
        raise ValidationError("You cannot schedule an appointment with yourself")
    if body.appointment_date < clock.today():
        raise ValidationError("Appointment date cannot be in the past")
    await _get_active_user(db, body.client_id, "client")

    now = clock.now()
    appointment = {
        "subject": body.subject,
        "appointment_date": body.starts_at,
        "appointment_duration": body.appointment_duration,
        "deposit_amount": body.deposit_amount,
        "total_amount": body.total_amount,
        "artist_notes": body.artist_notes,
    }

    booking = await find_pending_booking(db, body.client_id, artist.id)
    if booking is not None:
        _set_status(booking, Trigger.SCHEDULE, now)
        for field, value in appointment.items():
            setattr(booking, field, value)
    else:
        booking = Booking(
            client_id=body.client_id,
            artist_id=artist.id,
            status=BookingStatus.SCHEDULED.value,
            created_at=now,
            updated_at=now,
            **appointment,
        )
        db.add(booking)

    await _flush(db, booking, "Could not send appointment. Please try again.")
    logger.info("Artist %s scheduled booking %s for %s", artist.id, booking.id, booking.appointment_date)
    return booking


async def cancel_booking(
    db: AsyncSession,
    user: User,
    booking_id: uuid.UUID,
    clock: Clock,
    expected_version: int | None = None,
) -> tuple[str, Booking | None]:
    """Cancel on behalf of either participant.

    Returns ``(outcome, booking)`` where outcome is ``cancelled``,
    ``already_cancelled`` or ``not_found``; the last two are no-ops.
    """
    booking = await db.get(Booking, booking_id)
    if booking is None:
        return "not_found", None
    if booking.participant_role(user.id) is None:
        raise OwnershipError()
    if booking.status == BookingStatus.CANCELLED:
        return "already_cancelled", booking

    _check_version(booking, expected_version)
    _set_status(booking, Trigger.CANCEL, clock.now())
    await _flush(db, booking, "Could not cancel booking. Please try again.")
    return "cancelled", booking


async def edit_appointment(
    db: AsyncSession,
    artist: User,
    booking_id: uuid.UUID,
    body: AppointmentUpdate,
    clock: Clock,
) -> tuple[Booking, bool]:
    """Owning artist edits a future appointment.

    Moving the date or time is a reschedule and flips the status in the same
    write. Returns ``(booking, rescheduled)``.
    """
    booking = await db.get(Booking, booking_id)
    if booking is None:
        raise NotFoundError("Booking", str(booking_id))
    if booking.artist_id != artist.id:
        raise OwnershipError("Only the artist who owns this booking can edit it")
    _check_version(booking, body.expected_version)

    local_now = clock.local_now()
    if not can_edit_appointment(booking.status, booking.appointment_date, local_now):
        raise ValidationError("This appointment can no longer be edited")

    updates = body.model_dump(exclude_unset=True, exclude={"expected_version"})
    new_date = updates.pop("appointment_date", None) or booking.appointment_date.date()
    new_time = updates.pop("appointment_time", None) or booking.appointment_date.time()

    # Compare as plain strings so seconds or tz noise never count as a move.
    moved = (new_date.isoformat(), new_time.strftime("%H:%M")) != (
        booking.appointment_date.strftime("%Y-%m-%d"),
        booking.appointment_date.strftime("%H:%M"),
    )
    starts_at = datetime.combine(new_date, new_time)
    if moved and starts_at <= local_now:
        raise ValidationError("The new appointment time must be in the future")

    deposit = updates.get("deposit_amount", booking.deposit_amount)
    total = updates.get("total_amount", booking.total_amount)
    if deposit is not None and total is not None and deposit > total:
        raise ValidationError("deposit_amount must not exceed total_amount")

    changes = {field: value for field, value in updates.items() if getattr(booking, field) != value}
    if not changes and not moved:
        return booking, False

    now = clock.now()
    for field, value in changes.items():
        setattr(booking, field, value)
    if moved:
        booking.appointment_date = starts_at
        _set_status(booking, Trigger.RESCHEDULE, now)
    booking.updated_at = now

    await _flush(db, booking, "Could not update appointment. Please try again.")
    return booking, moved
