from __future__ import annotations

from datetime import date

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import LeaveLookup


class MySQLLeaveLookup(LeaveLookup):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def has_approved_leave(self, employee_id: int, day: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT 1 AS found
                FROM leave_requests
                WHERE employee_id=%s AND status='APPROVED'
                  AND start_date <= %s AND end_date >= %s
                LIMIT 1
                """,
                (int(employee_id), day, day),
            )
            return fetchone(cur) is not None
