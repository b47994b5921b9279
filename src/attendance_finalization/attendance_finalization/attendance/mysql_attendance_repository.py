from __future__ import annotations

import json
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.enums import FinalState, RecordStatus, parse_status
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json_list
from .model import AttendanceRecord, BreakSession
from .repository import AttendanceRecordStore

_COLUMNS = """
    record_id, employee_id, work_date, status, clock_in, clock_out, break_sessions,
    work_hours, late_minutes, is_late, early_exit_minutes, overtime_minutes,
    status_reason, correction_requested, shift_id
"""


def _parse_ts(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _to_break_sessions(raw) -> tuple[BreakSession, ...]:
    return tuple(
        BreakSession(
            break_in=_parse_ts(s.get("breakIn")),
            break_out=_parse_ts(s.get("breakOut")),
            duration_minutes=int(s.get("durationMinutes") or 0),
        )
        for s in load_json_list(raw)
        if isinstance(s, dict)
    )


def _dump_break_sessions(sessions: Sequence[BreakSession]) -> str:
    return json.dumps(
        [
            {
                "breakIn": s.break_in.isoformat() if s.break_in else None,
                "breakOut": s.break_out.isoformat() if s.break_out else None,
                "durationMinutes": int(s.duration_minutes),
            }
            for s in sessions
        ]
    )


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        status=parse_status(r["status"]),
        clock_in=r.get("clock_in"),
        clock_out=r.get("clock_out"),
        break_sessions=_to_break_sessions(r.get("break_sessions")),
        work_hours=float(r.get("work_hours") or 0),
        late_minutes=int(r.get("late_minutes") or 0),
        is_late=bool(r.get("is_late")),
        early_exit_minutes=int(r.get("early_exit_minutes") or 0),
        overtime_minutes=int(r.get("overtime_minutes") or 0),
        status_reason=r.get("status_reason"),
        correction_requested=bool(r.get("correction_requested")),
        shift_id=int(r["shift_id"]) if r.get("shift_id") is not None else None,
    )


class MySQLAttendanceRepository(AttendanceRecordStore):
    """attendance_records has a UNIQUE KEY on (employee_id, work_date)."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: FinalState,
        status_reason: Optional[str] = None,
        shift_id: Optional[int] = None,
    ) -> Optional[AttendanceRecord]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        employee_id, work_date, status, status_reason, shift_id,
                        clock_in, clock_out, break_sessions, work_hours,
                        late_minutes, is_late, early_exit_minutes, overtime_minutes,
                        correction_requested
                    )
                    VALUES(%s,%s,%s,%s,%s,NULL,NULL,'[]',0,0,0,0,0,0)
                    """,
                    (int(employee_id), work_date, status.value, status_reason, shift_id),
                )
                record_id = int(cur.lastrowid)
        except mysql_errors.IntegrityError:
            return None

        return AttendanceRecord(
            record_id=record_id,
            employee_id=int(employee_id),
            work_date=work_date,
            status=status,
            status_reason=status_reason,
            shift_id=shift_id,
        )

    def save(self, record: AttendanceRecord, *, expected_status: Optional[RecordStatus] = None) -> bool:
        params: list[object] = [
            record.status.value,
            record.clock_in,
            record.clock_out,
            _dump_break_sessions(record.break_sessions),
            record.work_hours,
            int(record.late_minutes),
            int(record.is_late),
            int(record.early_exit_minutes),
            int(record.overtime_minutes),
            record.status_reason,
            int(record.correction_requested),
            record.shift_id,
            int(record.record_id),
        ]
        guard = ""
        if expected_status is not None:
            guard = " AND status=%s"
            params.append(expected_status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET status=%s, clock_in=%s, clock_out=%s, break_sessions=%s, work_hours=%s,
                    late_minutes=%s, is_late=%s, early_exit_minutes=%s, overtime_minutes=%s,
                    status_reason=%s, correction_requested=%s, shift_id=%s
                WHERE record_id=%s{guard}
                """,
                tuple(params),
            )
            return cur.rowcount > 0

    def list_open_clock_ins(self, work_date: date, *, statuses: Iterable[RecordStatus]) -> Sequence[AttendanceRecord]:
        values = [s.value for s in statuses]
        if not values:
            return []
        placeholders = ",".join(["%s"] * len(values))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE work_date=%s
                  AND clock_in IS NOT NULL
                  AND clock_out IS NULL
                  AND status IN ({placeholders})
                ORDER BY employee_id
                """,
                (work_date, *values),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_by_status(self, work_date: date, status: RecordStatus) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS n FROM attendance_records WHERE work_date=%s AND status=%s",
                (work_date, status.value),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def count_open_clock_ins(self, work_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n
                FROM attendance_records
                WHERE work_date=%s AND clock_in IS NOT NULL AND clock_out IS NULL
                """,
                (work_date,),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0
