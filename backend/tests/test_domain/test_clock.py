"""Tests for the clock abstraction."""

from datetime import date, datetime, timezone

from inkbook.core.clock import Clock, FixedClock, get_clock, system_clock


def test_fixed_clock_reads_naive_as_utc():
    clock = FixedClock(datetime(2026, 3, 11, 10, 0), tz_name="UTC")
    assert clock.utcnow() == datetime(2026, 3, 11, 10, 0, tzinfo=timezone.utc)
    assert clock.now() == datetime(2026, 3, 11, 10, 0)
    assert clock.now().tzinfo is None


def test_local_now_uses_business_timezone():
    clock = FixedClock(datetime(2026, 3, 11, 10, 0), tz_name="Europe/Zagreb")
    assert clock.local_now() == datetime(2026, 3, 11, 11, 0)
    assert clock.local_now().tzinfo is None


def test_today_can_differ_from_utc_date():
    """Late evening UTC is already tomorrow east of Greenwich."""
    clock = FixedClock(datetime(2026, 3, 11, 23, 30), tz_name="Asia/Tokyo")
    assert clock.now().date() == date(2026, 3, 11)
    assert clock.today() == date(2026, 3, 12)


def test_aware_instant_is_kept():
    instant = datetime(2026, 7, 1, 12, 0, tzinfo=timezone.utc)
    assert FixedClock(instant, tz_name="UTC").utcnow() is instant


def test_system_clock_is_live():
    clock = Clock("UTC")
    before = datetime.now(timezone.utc)
    assert clock.utcnow() >= before
    assert get_clock() is system_clock
