from __future__ import annotations

from datetime import date, datetime, time, timedelta

import pytest
from mysql.connector import errors as mysql_errors

from src.attendance_finalization.attendance_finalization.attendance.model import AttendanceRecord, BreakSession
from src.attendance_finalization.attendance_finalization.attendance.mysql_attendance_repository import (
    MySQLAttendanceRepository,
)
from src.attendance_finalization.attendance_finalization.company_calendar.mysql_calendar_repository import (
    MySQLCalendarRules,
    parse_weekend_days,
)
from src.attendance_finalization.attendance_finalization.core.enums import FinalState, LiveState
from src.attendance_finalization.attendance_finalization.database.mysql_base import (
    load_json_list,
    normalize_mysql_time,
    shift_time_or_raw,
)

DAY = date(2025, 1, 6)


class FakeCursor:
    def __init__(self, conn):
        self._conn = conn
        self.rowcount = 0
        self.lastrowid = None

    def execute(self, sql, params=()):
        self._conn.executed.append((" ".join(sql.split()), params))
        if self._conn.raise_on_execute is not None:
            raise self._conn.raise_on_execute
        self.rowcount = self._conn.rowcount
        self.lastrowid = self._conn.lastrowid

    def fetchone(self):
        return self._conn.rows[0] if self._conn.rows else None

    def fetchall(self):
        return list(self._conn.rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self):
        self.executed = []
        self.rows = []
        self.rowcount = 0
        self.lastrowid = 1
        self.raise_on_execute = None
        self.commits = 0
        self.rollbacks = 0

    def cursor(self, dictionary=True):
        return FakeCursor(self)

    def commit(self):
        self.commits += 1

    def rollback(self):
        self.rollbacks += 1

    def close(self):
        pass


class FakeConnectionFactory:
    def __init__(self):
        self.conn = FakeConnection()

    def connect(self):
        return self.conn


@pytest.mark.parametrize(
    "value, expected",
    [
        (time(9, 30), time(9, 30)),
        (timedelta(hours=17, minutes=15), time(17, 15)),
        ("08:05:09", time(8, 5, 9)),
        ("22:00", time(22, 0)),
        (None, None),
    ],
)
def test_normalize_mysql_time(value, expected):
    assert normalize_mysql_time(value) == expected


def test_unparseable_shift_time_kept_raw():
    assert shift_time_or_raw("late") == "late"
    assert shift_time_or_raw(timedelta(hours=6)) == time(6, 0)


def test_load_json_list():
    assert load_json_list('[{"breakIn": null}]') == [{"breakIn": None}]
    assert load_json_list(b"[]") == []
    assert load_json_list("{not json") == []
    assert load_json_list(None) == []


def test_parse_weekend_days():
    assert parse_weekend_days("5,6") == (5, 6)
    assert parse_weekend_days([6]) == (6,)
    assert parse_weekend_days("") == ()


def test_find_maps_row_to_record():
    factory = FakeConnectionFactory()
    factory.conn.rows = [
        {
            "record_id": 11,
            "employee_id": 4,
            "work_date": DAY,
            "status": "on_break",
            "clock_in": datetime(2025, 1, 6, 9, 0),
            "clock_out": None,
            "break_sessions": '[{"breakIn": "2025-01-06T12:00:00", "breakOut": null, "durationMinutes": 0}]',
            "work_hours": None,
            "late_minutes": 0,
            "is_late": 0,
            "early_exit_minutes": 0,
            "overtime_minutes": 0,
            "status_reason": None,
            "correction_requested": 0,
            "shift_id": 1,
        }
    ]

    rec = MySQLAttendanceRepository(factory).find(4, DAY)

    assert rec.status is LiveState.ON_BREAK
    assert rec.break_sessions == (BreakSession(break_in=datetime(2025, 1, 6, 12, 0)),)
    assert rec.has_open_clock_in is True


def test_save_with_expected_status_guards_the_update():
    factory = FakeConnectionFactory()
    factory.conn.rowcount = 0
    rec = AttendanceRecord(record_id=11, employee_id=4, work_date=DAY, status=FinalState.INCOMPLETE)

    saved = MySQLAttendanceRepository(factory).save(rec, expected_status=LiveState.IN_PROGRESS)

    sql, params = factory.conn.executed[-1]
    assert saved is False
    assert sql.endswith("WHERE record_id=%s AND status=%s")
    assert params[-2:] == (11, "in_progress")


def test_create_duplicate_returns_none():
    factory = FakeConnectionFactory()
    factory.conn.raise_on_execute = mysql_errors.IntegrityError(msg="Duplicate entry")

    created = MySQLAttendanceRepository(factory).create(employee_id=4, work_date=DAY, status=FinalState.ABSENT)

    assert created is None
    assert factory.conn.rollbacks == 1


def test_working_day_uses_rule_or_default_weekend():
    factory = FakeConnectionFactory()
    calendar = MySQLCalendarRules(factory, default_weekend_days=(5, 6))

    assert calendar.is_working_day(date(2025, 1, 11)) is False

    factory.conn.rows = [{"weekend_days": "6"}]
    assert calendar.is_working_day(date(2025, 1, 11)) is True
    assert calendar.is_working_day(date(2025, 1, 12)) is False
