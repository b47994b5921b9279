from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import RecordStatus


@dataclass(frozen=True)
class BreakSession:
    break_in: Optional[datetime]
    break_out: Optional[datetime] = None
    duration_minutes: int = 0

    @property
    def is_closed(self) -> bool:
        return self.break_in is not None and self.break_out is not None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: the single attendance record of one employee on one local date.

    Records are immutable values; finalization builds an updated copy with
    dataclasses.replace and hands it to the store.
    """

    record_id: int
    employee_id: int
    work_date: date
    status: RecordStatus
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    break_sessions: Tuple[BreakSession, ...] = ()
    work_hours: float = 0.0
    late_minutes: int = 0
    is_late: bool = False
    early_exit_minutes: int = 0
    overtime_minutes: int = 0
    status_reason: Optional[str] = None
    correction_requested: bool = False
    shift_id: Optional[int] = None

    @property
    def has_open_clock_in(self) -> bool:
        return self.clock_in is not None and self.clock_out is None
