"""Sweep jobs — time-based booking transitions run by an external scheduler.

Both jobs are single predicate-scoped UPDATEs and safe to re-run: a row they
move leaves the predicate, so a second run with the same clock touches
nothing. Source statuses come from the state machine, so terminal rows are
never matched.
"""

import logging
from collections.abc import Awaitable, Callable

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from inkbook.core.clock import Clock
from inkbook.domain.booking_state import (
    Trigger,
    completion_cutoff,
    expiry_cutoff,
    sources_for,
    target_of,
)
from inkbook.models.booking import Booking

logger = logging.getLogger(__name__)

SweepJob = Callable[[AsyncSession, Clock], Awaitable[int]]


async def expire_stale_requests(db: AsyncSession, clock: Clock) -> int:
    """Expire pending requests with no appointment date older than the expiry window."""
    now = clock.now()
    stmt = (
        update(Booking)
        .where(
            Booking.status.in_([s.value for s in sources_for(Trigger.EXPIRE)]),
            Booking.appointment_date.is_(None),
            Booking.created_at < expiry_cutoff(now),
        )
        .values(status=target_of(Trigger.EXPIRE).value, updated_at=now, version=Booking.version + 1)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return result.rowcount or 0


async def complete_past_appointments(db: AsyncSession, clock: Clock) -> int:
    """Complete appointments whose date is before today; the hour is ignored."""
    now = clock.now()
    stmt = (
        update(Booking)
        .where(
            Booking.status.in_([s.value for s in sources_for(Trigger.COMPLETE)]),
            Booking.appointment_date.is_not(None),
            Booking.appointment_date < completion_cutoff(clock.today()),
        )
        .values(status=target_of(Trigger.COMPLETE).value, updated_at=now, version=Booking.version + 1)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return result.rowcount or 0


JOBS: dict[str, SweepJob] = {
    "completed": complete_past_appointments,
    "expired": expire_stale_requests,
}


async def _run_job(
    session_factory: async_sessionmaker[AsyncSession],
    job: SweepJob,
    clock: Clock,
) -> int:
    async with session_factory() as db:
        try:
            count = await job(db, clock)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
    return count


async def process_bookings(
    session_factory: async_sessionmaker[AsyncSession],
    clock: Clock,
    jobs: tuple[str, ...] = ("completed", "expired"),
) -> dict:
    """Run the named sweep jobs, each in its own transaction.

    A failing job is logged and reported; the remaining jobs still run.
    """
    timestamp = clock.utcnow()
    counts: dict[str, int] = {}
    errors: list[str] = []

    for name in jobs:
        try:
            counts[name] = await _run_job(session_factory, JOBS[name], clock)
        except Exception as e:
            logger.exception("Booking sweep '%s' failed", name)
            errors.append(str(e))

    result: dict = {"timestamp": timestamp}
    for name in jobs:
        if name in counts:
            result[f"{name}_count"] = counts[name]

    if errors:
        result.update(success=False, error=errors[0])
        logger.error("Booking sweep failed: %s", result)
        return result

    total = sum(counts.values())
    parts = []
    if "completed" in counts:
        parts.append(f"completed {counts['completed']} appointments (scheduled/rescheduled)")
    if "expired" in counts:
        parts.append(f"expired {counts['expired']} bookings")
    result.update(
        success=True,
        total_processed=total,
        message="Successfully " + " and ".join(parts),
    )
    logger.info("Booking sweep result: %s", result)
    return result
