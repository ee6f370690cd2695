"""Tests for the expiry and completion sweeps."""

from datetime import datetime, time, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from inkbook.services import sweep_service
from inkbook.services.sweep_service import complete_past_appointments, expire_stale_requests, process_bookings


async def _reload(db_session, *bookings):
    for booking in bookings:
        await db_session.refresh(booking)


# ---------------------------------------------------------------------------
# expire_stale_requests
# ---------------------------------------------------------------------------


class TestExpireStaleRequests:
    async def test_window_boundary(self, db_session, test_client_user, test_artist, clock, make_booking):
        now = clock.now()
        stale = await make_booking(test_client_user, test_artist, created_at=now - timedelta(days=15, seconds=1))
        fresh = await make_booking(test_client_user, test_artist, created_at=now - timedelta(days=14, hours=23))

        count = await expire_stale_requests(db_session, clock)
        await _reload(db_session, stale, fresh)

        assert count == 1
        assert stale.status == "expired"
        assert stale.updated_at == now
        assert stale.version == 2
        assert fresh.status == "pending"
        assert fresh.version == 1

    async def test_only_pending_without_date(self, db_session, test_client_user, test_artist, clock, make_booking):
        old = clock.now() - timedelta(days=30)
        dated = await make_booking(
            test_client_user, test_artist, created_at=old, appointment_date=datetime(2026, 4, 1, 12, 0)
        )
        scheduled = await make_booking(
            test_client_user, test_artist, status="scheduled", created_at=old,
            appointment_date=datetime(2026, 4, 2, 12, 0),
        )
        cancelled = await make_booking(test_client_user, test_artist, status="cancelled", created_at=old)

        assert await expire_stale_requests(db_session, clock) == 0
        await _reload(db_session, dated, scheduled, cancelled)
        assert (dated.status, scheduled.status, cancelled.status) == ("pending", "scheduled", "cancelled")

    async def test_second_run_is_a_noop(self, db_session, test_client_user, test_artist, clock, make_booking):
        await make_booking(test_client_user, test_artist, created_at=clock.now() - timedelta(days=40))
        assert await expire_stale_requests(db_session, clock) == 1
        assert await expire_stale_requests(db_session, clock) == 0


# ---------------------------------------------------------------------------
# complete_past_appointments
# ---------------------------------------------------------------------------


class TestCompletePastAppointments:
    async def test_day_boundary(self, db_session, test_client_user, test_artist, clock, make_booking):
        today = clock.today()
        yesterday_late = await make_booking(
            test_client_user, test_artist, status="scheduled",
            appointment_date=datetime.combine(today - timedelta(days=1), time(23, 59)),
        )
        today_early = await make_booking(
            test_client_user, test_artist, status="scheduled",
            appointment_date=datetime.combine(today, time(0, 1)),
        )

        count = await complete_past_appointments(db_session, clock)
        await _reload(db_session, yesterday_late, today_early)

        assert count == 1
        assert yesterday_late.status == "completed"
        assert yesterday_late.updated_at == clock.now()
        assert today_early.status == "scheduled"

    async def test_rescheduled_completes_too(self, db_session, test_client_user, test_artist, clock, make_booking):
        moved = await make_booking(
            test_client_user, test_artist, status="rescheduled",
            appointment_date=clock.local_now() - timedelta(days=3),
        )
        assert await complete_past_appointments(db_session, clock) == 1
        await _reload(db_session, moved)
        assert moved.status == "completed"

    @pytest.mark.parametrize("status", ["cancelled", "expired", "completed", "pending"])
    async def test_other_statuses_untouched(
        self, db_session, test_client_user, test_artist, clock, make_booking, status
    ):
        booking = await make_booking(
            test_client_user, test_artist, status=status, appointment_date=clock.local_now() - timedelta(days=5)
        )
        assert await complete_past_appointments(db_session, clock) == 0
        await _reload(db_session, booking)
        assert booking.status == status
        assert booking.version == 1

    async def test_second_run_is_a_noop(self, db_session, test_client_user, test_artist, clock, make_booking):
        await make_booking(
            test_client_user, test_artist, status="scheduled", appointment_date=clock.local_now() - timedelta(days=2)
        )
        assert await complete_past_appointments(db_session, clock) == 1
        assert await complete_past_appointments(db_session, clock) == 0


# ---------------------------------------------------------------------------
# process_bookings
# ---------------------------------------------------------------------------


class TestProcessBookings:
    async def test_success_summary(
        self, db_session, session_factory, test_client_user, test_artist, clock, make_booking, make_user
    ):
        other_artist = await make_user("artist")
        await make_booking(test_client_user, test_artist, created_at=clock.now() - timedelta(days=20))
        await make_booking(
            test_client_user, other_artist, status="scheduled", appointment_date=clock.local_now() - timedelta(days=1)
        )
        await make_booking(
            test_client_user, other_artist, status="rescheduled", appointment_date=clock.local_now() - timedelta(days=4)
        )

        result = await process_bookings(session_factory, clock)

        assert result["success"] is True
        assert result["completed_count"] == 2
        assert result["expired_count"] == 1
        assert result["total_processed"] == 3
        assert result["message"] == (
            "Successfully completed 2 appointments (scheduled/rescheduled) and expired 1 bookings"
        )
        assert result["timestamp"] == clock.utcnow()
        assert "error" not in result

    async def test_empty_run(self, session_factory, clock):
        result = await process_bookings(session_factory, clock)
        assert result["success"] is True
        assert result["total_processed"] == 0

    async def test_single_job(self, session_factory, test_client_user, test_artist, clock, make_booking):
        await make_booking(test_client_user, test_artist, created_at=clock.now() - timedelta(days=20))
        result = await process_bookings(session_factory, clock, ("expired",))
        assert result["expired_count"] == 1
        assert "completed_count" not in result
        assert result["message"] == "Successfully expired 1 bookings"

    async def test_failing_job_does_not_block_the_other(
        self, db_session, session_factory, test_client_user, test_artist, clock, make_booking
    ):
        stale = await make_booking(test_client_user, test_artist, created_at=clock.now() - timedelta(days=20))

        async def _broken(db, clock):
            raise OperationalError("UPDATE bookings", {}, Exception("connection reset"))

        with patch.dict(sweep_service.JOBS, {"completed": _broken}):
            result = await process_bookings(session_factory, clock)

        assert result["success"] is False
        assert "connection reset" in result["error"]
        assert result["expired_count"] == 1
        assert "completed_count" not in result
        assert "message" not in result

        await db_session.refresh(stale)
        assert stale.status == "expired"
