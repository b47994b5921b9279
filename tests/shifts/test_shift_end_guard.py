from __future__ import annotations

import logging
from datetime import date, datetime, time

import pytest

from src.attendance_finalization.attendance_finalization.common.clock import FixedClock
from src.attendance_finalization.attendance_finalization.shifts.guard import ShiftEndGuard, shift_bounds, shift_end_day
from src.attendance_finalization.attendance_finalization.shifts.model import Shift

DAY = date(2025, 1, 6)


def _guard(now: datetime, buffer_minutes: int = 30) -> ShiftEndGuard:
    return ShiftEndGuard(FixedClock(now), buffer_minutes=buffer_minutes)


def test_past_day_has_always_ended():
    guard = _guard(datetime(2025, 1, 7, 0, 5))
    assert guard.has_shift_ended(time(23, 59), DAY) is True


def test_future_day_has_never_ended():
    guard = _guard(datetime(2025, 1, 5, 23, 0))
    assert guard.has_shift_ended(time(6, 0), DAY) is False


@pytest.mark.parametrize(
    "now, expected",
    [
        (datetime(2025, 1, 6, 17, 0), False),
        (datetime(2025, 1, 6, 17, 29, 59), False),
        (datetime(2025, 1, 6, 17, 30), True),
        (datetime(2025, 1, 6, 20, 0), True),
    ],
)
def test_same_day_honours_buffer(now, expected):
    assert _guard(now).has_shift_ended(time(17, 0), DAY) is expected


def test_explicit_buffer_overrides_default():
    guard = _guard(datetime(2025, 1, 6, 17, 5))
    assert guard.has_shift_ended(time(17, 0), DAY) is False
    assert guard.has_shift_ended(time(17, 0), DAY, buffer_minutes=0) is True


def test_accepts_time_strings():
    guard = _guard(datetime(2025, 1, 6, 17, 31))
    assert guard.has_shift_ended("17:00", DAY) is True
    assert guard.has_shift_ended("17:00:00", DAY) is True


@pytest.mark.parametrize("bad", ["5pm", "17", "ab:cd", 1700, None])
def test_malformed_time_is_not_ended(bad, caplog):
    guard = _guard(datetime(2025, 1, 6, 23, 0))
    with caplog.at_level(logging.WARNING):
        assert guard.has_shift_ended(bad, DAY) is False
    assert "Malformed shift end time" in caplog.text


def test_overnight_shift_ends_next_day():
    night = Shift(shift_id=2, shift_name="Night", start_time=time(22, 0), end_time=time(6, 0))

    assert shift_end_day(night, DAY) == date(2025, 1, 7)
    start, end = shift_bounds(night, DAY)
    assert start == datetime(2025, 1, 6, 22, 0)
    assert end == datetime(2025, 1, 7, 6, 0)

    # 23:00 on the start day: the shift is still running
    assert _guard(datetime(2025, 1, 6, 23, 0)).has_shift_ended_for(night, DAY) is False
    assert _guard(datetime(2025, 1, 7, 6, 15)).has_shift_ended_for(night, DAY) is False
    assert _guard(datetime(2025, 1, 7, 6, 30)).has_shift_ended_for(night, DAY) is True


def test_day_shift_ends_same_day():
    day_shift = Shift(shift_id=1, shift_name="Day", start_time=time(9, 0), end_time=time(17, 0))
    assert shift_end_day(day_shift, DAY) == DAY
    assert _guard(datetime(2025, 1, 6, 17, 45)).has_shift_ended_for(day_shift, DAY) is True


def test_malformed_shift_is_not_ended(caplog):
    broken = Shift(shift_id=9, shift_name="Broken", start_time="09:00", end_time="late")
    with caplog.at_level(logging.WARNING):
        assert _guard(datetime(2025, 1, 8, 12, 0)).has_shift_ended_for(broken, DAY) is False
    assert "Malformed times on shift 9" in caplog.text
