from __future__ import annotations

from datetime import date
from typing import Iterable, Tuple

from ..core.constants import DEFAULT_WEEKEND_DAYS
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .repository import CalendarRules


def parse_weekend_days(value) -> Tuple[int, ...]:
    """'5,6' -> (5, 6). Weekday numbers follow date.weekday() (Monday=0)."""
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(int(v) for v in value)
    return tuple(int(p) for p in str(value).split(",") if p.strip())


class MySQLCalendarRules(CalendarRules):
    """Holidays from `holidays`, weekly off days from the active `working_rules` row.

    Without an applicable working rule the configured default weekend is used.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, default_weekend_days: Iterable[int] = DEFAULT_WEEKEND_DAYS):
        self._conn_factory = conn_factory
        self._default_weekend_days = tuple(default_weekend_days)

    def is_holiday(self, day: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM holidays WHERE holiday_date=%s AND is_active=1 LIMIT 1",
                (day,),
            )
            return fetchone(cur) is not None

    def is_working_day(self, day: date) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT weekend_days
                FROM working_rules
                WHERE is_active=1
                  AND effective_from <= %s
                  AND (effective_to IS NULL OR effective_to >= %s)
                ORDER BY effective_from DESC
                LIMIT 1
                """,
                (day, day),
            )
            r = fetchone(cur)

        weekend = parse_weekend_days(r["weekend_days"]) if r else self._default_weekend_days
        return day.weekday() not in weekend
