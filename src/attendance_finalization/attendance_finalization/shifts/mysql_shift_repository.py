from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.constants import DEFAULT_FULL_DAY_HOURS, DEFAULT_HALF_DAY_HOURS
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, shift_time_or_raw
from .model import EmployeeShiftAssignment, Shift
from .repository import ShiftAssignmentRepository, ShiftRepository


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT shift_id, shift_name, shift_start_time, shift_end_time,
                       full_day_hours, half_day_hours, grace_period_minutes
                FROM shifts
                WHERE shift_id=%s
                """,
                (int(shift_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Shift(
                shift_id=int(r["shift_id"]),
                shift_name=r["shift_name"],
                start_time=shift_time_or_raw(r["shift_start_time"]),
                end_time=shift_time_or_raw(r["shift_end_time"]),
                full_day_hours=float(r.get("full_day_hours") or DEFAULT_FULL_DAY_HOURS),
                half_day_hours=float(r.get("half_day_hours") or DEFAULT_HALF_DAY_HOURS),
                grace_period_minutes=int(r.get("grace_period_minutes") or 0),
            )


class MySQLShiftAssignmentRepository(ShiftAssignmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_covering(self, *, employee_id: int, work_date: date) -> Sequence[EmployeeShiftAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT assignment_id, employee_id, shift_id, effective_date, end_date, is_active
                FROM employee_shifts
                WHERE employee_id=%s
                  AND is_active=1
                  AND effective_date <= %s
                  AND (end_date IS NULL OR end_date >= %s)
                ORDER BY effective_date DESC, assignment_id DESC
                """,
                (int(employee_id), work_date, work_date),
            )
            return [
                EmployeeShiftAssignment(
                    assignment_id=int(r["assignment_id"]),
                    employee_id=int(r["employee_id"]),
                    shift_id=int(r["shift_id"]),
                    effective_date=r["effective_date"],
                    end_date=r.get("end_date"),
                    is_active=bool(r.get("is_active", True)),
                )
                for r in fetchall(cur)
            ]
