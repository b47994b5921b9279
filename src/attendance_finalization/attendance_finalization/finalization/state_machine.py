from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Optional

from ..attendance.calculator.base import MetricsCalculator
from ..attendance.calculator.standard_calculator import StandardMetricsCalculator
from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRecordStore
from ..core.constants import INVALID_CLOCK_OUT_REASON, MISSING_CLOCK_OUT_REASON, NO_CLOCK_IN_REASON
from ..core.enums import FinalState, NotificationKind, TransitionOutcome, is_terminal
from ..employees.model import Employee
from ..notifications.notifier import Notifier
from ..shifts.guard import ShiftEndGuard
from ..shifts.model import Shift
from .model import TransitionResult

logger = logging.getLogger(__name__)


def needs_leave_check(record: Optional[AttendanceRecord]) -> bool:
    """Leave only matters when nothing was clocked for the day."""
    return record is None or (record.clock_in is None and record.clock_out is None)


class AttendanceStateMachine:
    """Decides and writes the final status of one employee's day.

    Rules are evaluated in order and the first match wins:

    1. no shift                         -> skipped: no shift
    2. shift end + buffer not reached   -> skipped: shift active
    3. record already final (not incomplete) -> skipped: already finalized
    4. nothing clocked: on leave -> skipped: on leave, otherwise absent
    5. clock-in without clock-out       -> incomplete
    6. clock-out without clock-in       -> absent (data anomaly)
    7. both clocks                      -> present / half_day / absent via `complete`

    Only FinalState values are ever written. Writes are conditional on the status
    read, so a concurrent finalizer turns the second write into a no-op.
    """

    def __init__(
        self,
        records: AttendanceRecordStore,
        guard: ShiftEndGuard,
        notifier: Notifier,
        *,
        calculator: Optional[MetricsCalculator] = None,
    ):
        self._records = records
        self._guard = guard
        self._notifier = notifier
        self._calculator = calculator or StandardMetricsCalculator()

    def finalize(
        self,
        employee: Employee,
        work_date: date,
        record: Optional[AttendanceRecord],
        shift: Optional[Shift],
        is_on_leave: bool,
    ) -> TransitionResult:
        employee_id = employee.employee_id

        if shift is None:
            logger.debug("Employee %s: no shift on %s", employee_id, work_date)
            return TransitionResult(employee_id, work_date, TransitionOutcome.SKIPPED_NO_SHIFT)

        if not self._guard.has_shift_ended_for(shift, work_date):
            logger.debug("Employee %s: shift %s not finished yet on %s", employee_id, shift.shift_id, work_date)
            return TransitionResult(employee_id, work_date, TransitionOutcome.SKIPPED_SHIFT_ACTIVE)

        if record is not None and is_terminal(record.status):
            logger.debug("Employee %s: already finalized (status: %s)", employee_id, record.status.value)
            return TransitionResult(
                employee_id,
                work_date,
                TransitionOutcome.SKIPPED_ALREADY_FINALIZED,
                status=record.status,
                reason=record.status_reason,
                record=record,
            )

        if needs_leave_check(record):
            if is_on_leave:
                logger.debug("Employee %s: on approved leave on %s", employee_id, work_date)
                return TransitionResult(employee_id, work_date, TransitionOutcome.SKIPPED_ON_LEAVE)
            return self._mark_absent(employee, work_date, record, shift)

        if record.clock_out is None:
            return self._mark_incomplete(employee, record)

        if record.clock_in is None:
            return self._correct_invalid(record)

        return self.complete(record, shift)

    def complete(self, record: AttendanceRecord, shift: Shift, *, auto_clock_out: bool = False) -> TransitionResult:
        """Final status from worked hours; also the last writer of derived metrics.

        `record` carries both clocks; its status must still be the stored one.
        """
        metrics = self._calculator.compute(record, shift)
        status, reason = self._calculator.classify(metrics, shift)
        if auto_clock_out:
            reason = f"Auto clock-out at scheduled shift end {record.clock_out:%H:%M}. {reason}"

        updated = replace(
            record,
            status=status,
            status_reason=reason,
            work_hours=metrics.work_hours,
            late_minutes=metrics.late_minutes,
            is_late=metrics.is_late,
            early_exit_minutes=metrics.early_exit_minutes,
            overtime_minutes=metrics.overtime_minutes,
            shift_id=record.shift_id or shift.shift_id,
        )
        if not self._records.save(updated, expected_status=record.status):
            return self._lost_race(record)

        logger.debug(
            "Employee %s: %s on %s (%sh, late %sm)",
            record.employee_id,
            status.value,
            record.work_date,
            metrics.work_hours,
            metrics.late_minutes,
        )
        return TransitionResult(
            record.employee_id, record.work_date, TransitionOutcome.COMPLETED, status=status, reason=reason, record=updated
        )

    def _mark_absent(
        self,
        employee: Employee,
        work_date: date,
        record: Optional[AttendanceRecord],
        shift: Shift,
    ) -> TransitionResult:
        if record is None:
            created = self._records.create(
                employee_id=employee.employee_id,
                work_date=work_date,
                status=FinalState.ABSENT,
                status_reason=NO_CLOCK_IN_REASON,
                shift_id=shift.shift_id,
            )
            if created is None:
                return self._lost_race_on_create(employee.employee_id, work_date)
            updated = created
        else:
            updated = replace(record, status=FinalState.ABSENT, status_reason=NO_CLOCK_IN_REASON, work_hours=0.0)
            if not self._records.save(updated, expected_status=record.status):
                return self._lost_race(record)

        logger.debug("Employee %s: marked absent on %s (no clock-in)", employee.employee_id, work_date)
        self._notifier.notify(employee, work_date, NO_CLOCK_IN_REASON, NotificationKind.ABSENT)
        return TransitionResult(
            employee.employee_id,
            work_date,
            TransitionOutcome.MARKED_ABSENT,
            status=FinalState.ABSENT,
            reason=NO_CLOCK_IN_REASON,
            record=updated,
        )

    def _mark_incomplete(self, employee: Employee, record: AttendanceRecord) -> TransitionResult:
        if record.status is FinalState.INCOMPLETE and record.status_reason == MISSING_CLOCK_OUT_REASON:
            return TransitionResult(
                record.employee_id,
                record.work_date,
                TransitionOutcome.MARKED_INCOMPLETE,
                status=FinalState.INCOMPLETE,
                reason=MISSING_CLOCK_OUT_REASON,
                record=record,
            )

        updated = replace(record, status=FinalState.INCOMPLETE, status_reason=MISSING_CLOCK_OUT_REASON)
        if not self._records.save(updated, expected_status=record.status):
            return self._lost_race(record)

        logger.debug("Employee %s: marked incomplete on %s (no clock-out)", record.employee_id, record.work_date)
        self._notifier.notify(employee, record.work_date, "Clock-out missing", NotificationKind.CORRECTION_REQUIRED)
        return TransitionResult(
            record.employee_id,
            record.work_date,
            TransitionOutcome.MARKED_INCOMPLETE,
            status=FinalState.INCOMPLETE,
            reason=MISSING_CLOCK_OUT_REASON,
            record=updated,
        )

    def _correct_invalid(self, record: AttendanceRecord) -> TransitionResult:
        logger.warning(
            "Employee %s: record %s on %s has a clock-out (%s) without clock-in; marking absent",
            record.employee_id,
            record.record_id,
            record.work_date,
            record.clock_out,
        )
        updated = replace(
            record,
            status=FinalState.ABSENT,
            status_reason=INVALID_CLOCK_OUT_REASON,
            clock_out=None,
            work_hours=0.0,
            early_exit_minutes=0,
            overtime_minutes=0,
        )
        if not self._records.save(updated, expected_status=record.status):
            return self._lost_race(record)

        return TransitionResult(
            record.employee_id,
            record.work_date,
            TransitionOutcome.CORRECTED_INVALID,
            status=FinalState.ABSENT,
            reason=INVALID_CLOCK_OUT_REASON,
            record=updated,
        )

    def _lost_race(self, record: AttendanceRecord) -> TransitionResult:
        logger.info(
            "Employee %s: record %s on %s changed concurrently; leaving it to the other writer",
            record.employee_id,
            record.record_id,
            record.work_date,
        )
        return TransitionResult(record.employee_id, record.work_date, TransitionOutcome.SKIPPED_CONCURRENT_UPDATE)

    def _lost_race_on_create(self, employee_id: int, work_date: date) -> TransitionResult:
        logger.info("Employee %s: record on %s created concurrently; not marking absent", employee_id, work_date)
        return TransitionResult(employee_id, work_date, TransitionOutcome.SKIPPED_CONCURRENT_UPDATE)
