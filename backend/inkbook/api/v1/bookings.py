"""Bookings API router — requests, appointments, cancellation.

Ownership rule: a user can only see or change bookings where they are the
client or the artist. Structured chat messages go out after the booking
change has committed.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inkbook.api.deps import get_clock, get_current_active_user, get_db, get_session_factory
from inkbook.core.clock import Clock
from inkbook.domain.booking_state import BookingStatus
from inkbook.models.user import User
from inkbook.schemas.booking import (
    AppointmentCreate,
    AppointmentUpdate,
    BookingListResponse,
    BookingRequestCreate,
    BookingResponse,
    BookingStatusResponse,
    CancelRequest,
    CancelResponse,
)
from inkbook.services import booking_service, messaging

router = APIRouter(prefix="/api/v1/bookings", tags=["bookings"])


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/requests",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a tattoo request to an artist",
)
async def create_booking_request(
    body: BookingRequestCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    """Create a ``pending`` booking from the current client to an artist.

    Rejected with 409 while the pair already has an active booking.
    """
    booking = await booking_service.create_booking_request(db, current_user, body, clock)
    response = BookingResponse.from_booking(booking)
    await db.commit()

    background_tasks.add_task(
        messaging.send_structured_message,
        session_factory,
        current_user.id,
        booking.artist_id,
        messaging.booking_payload(messaging.BOOKING_REQUEST, booking.id),
    )
    return response


@router.post(
    "/appointments",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule an appointment with a client",
)
async def schedule_appointment(
    body: AppointmentCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    """Schedule an appointment as the current artist.

    Turns the client's pending request into the appointment when one
    exists; otherwise creates a new ``scheduled`` booking.
    """
    booking = await booking_service.schedule_appointment(db, current_user, body, clock)
    response = BookingResponse.from_booking(booking)
    await db.commit()

    background_tasks.add_task(
        messaging.send_structured_message,
        session_factory,
        current_user.id,
        booking.client_id,
        messaging.booking_payload(messaging.APPOINTMENT_SCHEDULED, booking.id),
    )
    return response


@router.get(
    "",
    response_model=BookingListResponse,
    summary="List the current user's appointments",
)
async def list_appointments(
    status_filter: BookingStatus | None = Query(None, alias="status", description="Filter by booking status"),
    skip: int = Query(0, ge=0, description="Pagination offset"),
    limit: int = Query(20, ge=1, le=100, description="Pagination limit"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> BookingListResponse:
    """Return bookings where the user is client or artist, excluding open requests."""
    items, total = await booking_service.list_appointments(db, current_user, status_filter, skip, limit)
    return BookingListResponse(items=[BookingResponse.from_booking(b) for b in items], total=total)


@router.get(
    "/with/{participant_id}",
    response_model=BookingStatusResponse,
    summary="Latest booking with another user",
)
async def get_booking_status(
    participant_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_active_user),
) -> BookingStatusResponse:
    """Return the latest booking between the current user and ``participant_id``.

    Includes the progress-tracker flags the conversation view renders.
    """
    data = await booking_service.get_booking_status_between(db, current_user, participant_id, clock)
    booking = data.pop("booking")
    return BookingStatusResponse(
        booking=BookingResponse.from_booking(booking) if booking is not None else None,
        **data,
    )


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get booking detail",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    """Retrieve a single booking. 404 if unknown, 403 for other users' bookings."""
    booking = await booking_service.get_booking(db, current_user, booking_id)
    return BookingResponse.from_booking(booking)


@router.patch(
    "/{booking_id}/appointment",
    response_model=BookingResponse,
    summary="Edit appointment details",
)
async def edit_appointment(
    booking_id: uuid.UUID,
    body: AppointmentUpdate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    """Partially update a future appointment as its artist.

    Changing the date or time marks the booking ``rescheduled``.
    """
    booking, moved = await booking_service.edit_appointment(db, current_user, booking_id, body, clock)
    response = BookingResponse.from_booking(booking)
    await db.commit()

    if moved:
        background_tasks.add_task(
            messaging.send_structured_message,
            session_factory,
            current_user.id,
            booking.client_id,
            messaging.booking_payload(messaging.APPOINTMENT_RESCHEDULED, booking.id),
        )
    return response


@router.post(
    "/{booking_id}/cancel",
    response_model=CancelResponse,
    summary="Cancel a booking",
)
async def cancel_booking(
    booking_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    body: CancelRequest | None = None,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    clock: Clock = Depends(get_clock),
    current_user: User = Depends(get_current_active_user),
) -> CancelResponse:
    """Cancel as client or artist. Repeating the call is a no-op, not an error."""
    expected_version = body.expected_version if body is not None else None
    outcome, booking = await booking_service.cancel_booking(
        db, current_user, booking_id, clock, expected_version=expected_version
    )
    response = CancelResponse(
        booking_id=booking_id,
        outcome=outcome,
        booking=BookingResponse.from_booking(booking) if booking is not None else None,
    )
    await db.commit()

    if outcome == "cancelled":
        background_tasks.add_task(
            messaging.send_structured_message,
            session_factory,
            current_user.id,
            booking.other_participant(current_user.id),
            messaging.booking_payload(messaging.APPOINTMENT_CANCELLED, booking.id),
        )
    return response
