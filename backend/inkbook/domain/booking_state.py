"""Booking state machine.

Every status change — interactive or swept — goes through ``transition``,
so this table is the single source of legal edges::

    pending ──schedule──▶ scheduled ──reschedule──▶ rescheduled
       │                      │                          │
       ├──expire──▶ expired   ├──cancel──▶ cancelled ◀───┤
       └──cancel──▶ cancelled └──complete─▶ completed ◀──┘

``rescheduled`` only tells the other participant that the date moved; it
behaves like ``scheduled`` everywhere else.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum

from inkbook.config import settings
from inkbook.core.exceptions import TransitionError


class BookingStatus(str, Enum):
    PENDING = "pending"
    EXPIRED = "expired"
    SCHEDULED = "scheduled"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Trigger(str, Enum):
    SCHEDULE = "schedule"
    EXPIRE = "expire"
    RESCHEDULE = "reschedule"
    CANCEL = "cancel"
    COMPLETE = "complete"


TERMINAL_STATUSES = frozenset({BookingStatus.EXPIRED, BookingStatus.CANCELLED, BookingStatus.COMPLETED})
APPOINTMENT_STATUSES = frozenset({BookingStatus.SCHEDULED, BookingStatus.RESCHEDULED})
ACTIVE_STATUSES = frozenset({BookingStatus.PENDING}) | APPOINTMENT_STATUSES

TRANSITIONS: dict[Trigger, dict[BookingStatus, BookingStatus]] = {
    Trigger.SCHEDULE: {
        BookingStatus.PENDING: BookingStatus.SCHEDULED,
    },
    Trigger.EXPIRE: {
        BookingStatus.PENDING: BookingStatus.EXPIRED,
    },
    Trigger.RESCHEDULE: {
        BookingStatus.SCHEDULED: BookingStatus.RESCHEDULED,
        BookingStatus.RESCHEDULED: BookingStatus.RESCHEDULED,
    },
    Trigger.CANCEL: {
        BookingStatus.PENDING: BookingStatus.CANCELLED,
        BookingStatus.SCHEDULED: BookingStatus.CANCELLED,
        BookingStatus.RESCHEDULED: BookingStatus.CANCELLED,
    },
    Trigger.COMPLETE: {
        BookingStatus.SCHEDULED: BookingStatus.COMPLETED,
        BookingStatus.RESCHEDULED: BookingStatus.COMPLETED,
    },
}


@dataclass(frozen=True)
class TransitionContext:
    """Facts the time-based guards need.

    ``now`` and ``created_at`` are naive UTC; ``today`` and
    ``appointment_date`` are in the business timezone.
    """

    now: datetime | None = None
    today: date | None = None
    created_at: datetime | None = None
    appointment_date: datetime | None = None
    expiry_days: int = field(default_factory=lambda: settings.request_expiry_days)


def expiry_cutoff(now: datetime, expiry_days: int | None = None) -> datetime:
    """Requests created strictly before this instant are stale."""
    days = settings.request_expiry_days if expiry_days is None else expiry_days
    return now - timedelta(days=days)


def completion_cutoff(today: date) -> datetime:
    """Appointments dated strictly before this instant (today's midnight) are past."""
    return datetime.combine(today, time.min)


def is_stale_request(
    status: str,
    created_at: datetime,
    appointment_date: datetime | None,
    now: datetime,
    expiry_days: int | None = None,
) -> bool:
    """True for a pending request with no date that outlived the expiry window."""
    return (
        status == BookingStatus.PENDING
        and appointment_date is None
        and created_at < expiry_cutoff(now, expiry_days)
    )


def is_past_appointment(appointment_date: datetime | None, today: date) -> bool:
    """Date-only comparison; the hour of the appointment is ignored."""
    return appointment_date is not None and appointment_date < completion_cutoff(today)


def _guard_expire(ctx: TransitionContext | None) -> str | None:
    if ctx is None or ctx.now is None or ctx.created_at is None:
        return "creation time and current time are required"
    if ctx.appointment_date is not None:
        return "request already has an appointment date"
    if ctx.created_at >= expiry_cutoff(ctx.now, ctx.expiry_days):
        return f"request is younger than {ctx.expiry_days} days"
    return None


def _guard_complete(ctx: TransitionContext | None) -> str | None:
    if ctx is None or ctx.today is None:
        return "current date is required"
    if ctx.appointment_date is None:
        return "appointment has no date"
    if not is_past_appointment(ctx.appointment_date, ctx.today):
        return "appointment date has not passed yet"
    return None


_GUARDS = {
    Trigger.EXPIRE: _guard_expire,
    Trigger.COMPLETE: _guard_complete,
}


def transition(
    current: str,
    trigger: str,
    context: TransitionContext | None = None,
) -> BookingStatus:
    """Return the status ``trigger`` leads to from ``current``.

    Raises:
        TransitionError: If the edge does not exist or its guard fails.
    """
    current = BookingStatus(current)
    trigger = Trigger(trigger)

    target = TRANSITIONS[trigger].get(current)
    if target is None:
        raise TransitionError(current.value, trigger.value)

    guard = _GUARDS.get(trigger)
    if guard is not None:
        reason = guard(context)
        if reason is not None:
            raise TransitionError(current.value, trigger.value, reason)

    return target


def sources_for(trigger: str) -> frozenset[BookingStatus]:
    """Statuses from which ``trigger`` is a legal edge."""
    return frozenset(TRANSITIONS[Trigger(trigger)])


def target_of(trigger: str) -> BookingStatus:
    """The single status a bulk ``trigger`` moves rows to."""
    targets = set(TRANSITIONS[Trigger(trigger)].values())
    if len(targets) != 1:
        raise ValueError(f"Trigger {trigger!r} has no single target status")
    return targets.pop()


def allowed_triggers(status: str) -> list[Trigger]:
    status = BookingStatus(status)
    return [trigger for trigger, edges in TRANSITIONS.items() if status in edges]


def is_terminal(status: str) -> bool:
    return BookingStatus(status) in TERMINAL_STATUSES


def is_active(status: str) -> bool:
    return BookingStatus(status) in ACTIVE_STATUSES


def can_edit_appointment(status: str, appointment_date: datetime | None, local_now: datetime) -> bool:
    """Edit eligibility window: scheduled/rescheduled with a date still ahead."""
    return (
        BookingStatus(status) in APPOINTMENT_STATUSES
        and appointment_date is not None
        and appointment_date > local_now
    )
