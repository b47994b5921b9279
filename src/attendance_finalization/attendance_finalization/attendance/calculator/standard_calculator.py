from __future__ import annotations

import logging
from datetime import timedelta
from typing import Tuple

from ...common.datetime_utils import whole_minutes
from ...core.constants import DEFAULT_FULL_DAY_HOURS, DEFAULT_HALF_DAY_HOURS
from ...core.enums import FinalState
from ...shifts.guard import shift_bounds
from ...shifts.model import Shift
from ..model import AttendanceRecord
from .base import AttendanceMetrics, MetricsCalculator

logger = logging.getLogger(__name__)


def _fmt_hours(value: float) -> str:
    return f"{value:g}"


class StandardMetricsCalculator(MetricsCalculator):
    """Standard rule: (out - in) - closed breaks, not below 0.

    Late minutes count from shift start + grace; early exit and overtime compare
    clock_out with the scheduled shift end. Open breaks are ignored.
    """

    def compute(self, record: AttendanceRecord, shift: Shift) -> AttendanceMetrics:
        if record.clock_in is None or record.clock_out is None:
            raise ValueError("metrics need both clock_in and clock_out")

        span = record.clock_out - record.clock_in
        breaks = sum(
            (s.break_out - s.break_in for s in record.break_sessions if s.is_closed),
            timedelta(),
        )
        worked_minutes = whole_minutes(span - breaks)

        late_minutes = early_exit_minutes = overtime_minutes = 0
        try:
            start, end = shift_bounds(shift, record.work_date)
        except (TypeError, ValueError):
            logger.warning(
                "Shift %s has malformed times; late/early/overtime left at 0 for record %s",
                shift.shift_id,
                record.record_id,
            )
        else:
            late_threshold = start + timedelta(minutes=int(shift.grace_period_minutes or 0))
            if record.clock_in > late_threshold:
                late_minutes = whole_minutes(record.clock_in - late_threshold)
            if record.clock_out < end:
                early_exit_minutes = whole_minutes(end - record.clock_out)
            elif record.clock_out > end:
                overtime_minutes = whole_minutes(record.clock_out - end)

        return AttendanceMetrics(
            worked_minutes=worked_minutes,
            break_minutes=whole_minutes(breaks),
            work_hours=round(worked_minutes / 60, 2),
            late_minutes=late_minutes,
            is_late=late_minutes > 0,
            early_exit_minutes=early_exit_minutes,
            overtime_minutes=overtime_minutes,
        )

    def classify(self, metrics: AttendanceMetrics, shift: Shift) -> Tuple[FinalState, str]:
        full_day = float(shift.full_day_hours or DEFAULT_FULL_DAY_HOURS)
        half_day = float(shift.half_day_hours or DEFAULT_HALF_DAY_HOURS)
        hours = metrics.work_hours

        if hours >= full_day:
            return FinalState.PRESENT, f"Worked {_fmt_hours(hours)} hours (≥ {_fmt_hours(full_day)} required for full day)"
        if hours >= half_day:
            return (
                FinalState.HALF_DAY,
                f"Worked {_fmt_hours(hours)} hours (≥ {_fmt_hours(half_day)} for half day, < {_fmt_hours(full_day)} for full day)",
            )
        return FinalState.ABSENT, f"Insufficient hours: {hours:.2f}/{_fmt_hours(half_day)} minimum required"
