from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional, Union

from ..core.constants import DEFAULT_FULL_DAY_HOURS, DEFAULT_HALF_DAY_HOURS


@dataclass(frozen=True)
class Shift:
    """Domain entity: a scheduled daily working window.

    end_time earlier than start_time means the shift ends on the next calendar day.
    Times come from storage as time objects; a raw string survives only when the
    stored value could not be parsed.
    """

    shift_id: int
    shift_name: str
    start_time: Union[time, str]
    end_time: Union[time, str]
    full_day_hours: float = DEFAULT_FULL_DAY_HOURS
    half_day_hours: float = DEFAULT_HALF_DAY_HOURS
    grace_period_minutes: int = 0


@dataclass(frozen=True)
class EmployeeShiftAssignment:
    assignment_id: int
    employee_id: int
    shift_id: int
    effective_date: date
    end_date: Optional[date] = None
    is_active: bool = True

    def covers(self, day: date) -> bool:
        if not self.is_active or self.effective_date > day:
            return False
        return self.end_date is None or self.end_date >= day
