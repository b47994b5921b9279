from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from ..attendance.model import AttendanceRecord, BreakSession
from ..attendance.repository import AttendanceRecordStore
from ..common.clock import Clock
from ..common.datetime_utils import whole_minutes
from ..core.constants import DEFAULT_AUTO_CLOCK_OUT_BUFFER_MINUTES
from ..core.enums import FinalState, LiveState, NotificationKind
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from ..notifications.notifier import Notifier
from ..shifts.guard import shift_bounds
from ..shifts.resolver import ShiftResolver
from .model import ReconcileResult, TransitionResult
from .state_machine import AttendanceStateMachine

logger = logging.getLogger(__name__)

RECONCILABLE_STATUSES = (LiveState.IN_PROGRESS, LiveState.ON_BREAK, FinalState.INCOMPLETE)


class MissedClockOutReconciler:
    """Closes forgotten clock-outs at the scheduled shift end.

    Once shift end + buffer has passed, clock_out is set to the shift end (not
    the time of the run) and the record is completed through the state machine.
    """

    def __init__(
        self,
        records: AttendanceRecordStore,
        resolver: ShiftResolver,
        state_machine: AttendanceStateMachine,
        employees: EmployeeDirectory,
        notifier: Notifier,
        clock: Clock,
        *,
        buffer_minutes: int = DEFAULT_AUTO_CLOCK_OUT_BUFFER_MINUTES,
    ):
        self._records = records
        self._resolver = resolver
        self._state_machine = state_machine
        self._employees = employees
        self._notifier = notifier
        self._clock = clock
        self._buffer = timedelta(minutes=int(buffer_minutes))

    def reconcile_open_clock_ins(self, work_date: date) -> ReconcileResult:
        result = ReconcileResult()
        open_records = self._records.list_open_clock_ins(work_date, statuses=RECONCILABLE_STATUSES)
        if not open_records:
            return result

        logger.info("Reconciling %d open clock-in(s) for %s", len(open_records), work_date.isoformat())
        for record in open_records:
            try:
                transition = self.reconcile_record(record)
            except Exception:
                result.errors += 1
                logger.exception(
                    "Auto clock-out failed for employee %s (record %s) on %s",
                    record.employee_id,
                    record.record_id,
                    work_date.isoformat(),
                )
                continue
            if transition is not None:
                result.transitions.append(transition)

        logger.info(
            "Reconciled %s: %d auto-finalized, %d error(s)",
            work_date.isoformat(),
            result.auto_finalized,
            result.errors,
        )
        return result

    def reconcile_record(
        self,
        record: AttendanceRecord,
        *,
        employee: Optional[Employee] = None,
    ) -> Optional[TransitionResult]:
        """Auto clock-out one record; None when it is not due (or not eligible)."""
        if record.clock_in is None or record.clock_out is not None:
            return None
        if record.status not in RECONCILABLE_STATUSES:
            return None

        shift = self._resolver.resolve_shift(record.employee_id, record.work_date)
        if shift is None:
            logger.debug("Employee %s: no shift on %s, open clock-in left alone", record.employee_id, record.work_date)
            return None

        try:
            _, shift_end = shift_bounds(shift, record.clock_in.date())
        except (TypeError, ValueError):
            logger.warning(
                "Shift %s has malformed times (%r-%r); record %s not auto clocked-out",
                shift.shift_id,
                shift.start_time,
                shift.end_time,
                record.record_id,
            )
            return None

        if self._clock.now() < shift_end + self._buffer:
            return None

        if shift_end <= record.clock_in:
            logger.warning(
                "Employee %s clocked in at %s, after scheduled shift end %s; record %s left for correction",
                record.employee_id,
                record.clock_in,
                shift_end,
                record.record_id,
            )
            return None

        closed = replace(record, clock_out=shift_end, break_sessions=_close_open_breaks(record.break_sessions, shift_end))
        transition = self._state_machine.complete(closed, shift, auto_clock_out=True)
        if transition.outcome.is_noop:
            return transition

        logger.info(
            "Employee %s: auto clock-out at %s on %s -> %s",
            record.employee_id,
            shift_end.strftime("%H:%M"),
            record.work_date.isoformat(),
            transition.status.value,
        )
        employee = employee or self._employees.get_by_id(record.employee_id)
        if employee is None:
            logger.warning("Employee %s not found; auto clock-out notice not sent", record.employee_id)
        else:
            self._notifier.notify(employee, record.work_date, transition.reason, NotificationKind.AUTO_CLOCK_OUT)
        return transition


def _close_open_breaks(sessions: Tuple[BreakSession, ...], end: datetime) -> Tuple[BreakSession, ...]:
    """Breaks still open at the auto clock-out end there."""
    closed = []
    for s in sessions:
        if s.break_in is not None and s.break_out is None:
            break_out = max(s.break_in, end)
            s = replace(s, break_out=break_out, duration_minutes=whole_minutes(break_out - s.break_in))
        closed.append(s)
    return tuple(closed)
