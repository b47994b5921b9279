from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterator, List, Optional, Set, Tuple, Union

from ..attendance.repository import AttendanceRecordStore
from ..common.clock import Clock
from ..common.datetime_utils import daterange
from ..company_calendar.repository import CalendarRules
from ..core.constants import NOT_CLOCKED_IN_REASON
from ..core.enums import FinalState, LiveState, TransitionOutcome, is_terminal
from ..core.exceptions import CalendarLookupError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeDirectory
from ..leave.repository import LeaveLookup
from ..shifts.guard import ShiftEndGuard, shift_end_day
from ..shifts.resolver import ShiftResolver
from .model import DaySkipped, FinalizationStats, TransitionResult
from .reconciler import MissedClockOutReconciler
from .state_machine import AttendanceStateMachine, needs_leave_check

logger = logging.getLogger(__name__)

DayResult = Union[FinalizationStats, DaySkipped]


class FinalizationOrchestrator:
    """Batch driver for one calendar day.

    Calendar gates first, then the missed clock-out pass, then every active
    employee through the state machine. A failure for one employee is counted
    and logged; only a calendar lookup failure aborts the run.
    """

    def __init__(
        self,
        *,
        calendar: CalendarRules,
        employees: EmployeeDirectory,
        leave: LeaveLookup,
        records: AttendanceRecordStore,
        resolver: ShiftResolver,
        guard: ShiftEndGuard,
        state_machine: AttendanceStateMachine,
        reconciler: MissedClockOutReconciler,
        clock: Clock,
    ):
        self._calendar = calendar
        self._employees = employees
        self._leave = leave
        self._records = records
        self._resolver = resolver
        self._guard = guard
        self._state_machine = state_machine
        self._reconciler = reconciler
        self._clock = clock

        # work_date -> (lock, callers holding or waiting on it)
        self._locks: Dict[date, Tuple[threading.Lock, int]] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _date_lock(self, work_date: date) -> Iterator[None]:
        """Serialise runs for one date; the entry is dropped once nobody needs it."""
        with self._locks_guard:
            lock, users = self._locks.get(work_date, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._locks[work_date] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                lock, users = self._locks[work_date]
                if users <= 1:
                    del self._locks[work_date]
                else:
                    self._locks[work_date] = (lock, users - 1)

    def _calendar_skip(self, work_date: date) -> Optional[str]:
        try:
            if self._calendar.is_holiday(work_date):
                return "holiday"
            if not self._calendar.is_working_day(work_date):
                return "weekend"
        except CalendarLookupError:
            raise
        except Exception as exc:
            raise CalendarLookupError(f"Calendar lookup failed for {work_date.isoformat()}: {exc}") from exc
        return None

    def finalize_day(self, work_date: Optional[date] = None) -> DayResult:
        work_date = work_date or self._clock.today()

        skip_reason = self._calendar_skip(work_date)
        if skip_reason is not None:
            logger.info("Skipping finalization for %s (%s)", work_date.isoformat(), skip_reason)
            return DaySkipped(work_date, skip_reason)

        with self._date_lock(work_date):
            return self._run_day(work_date)

    def _run_day(self, work_date: date) -> FinalizationStats:
        logger.info("Starting attendance finalization for %s", work_date.isoformat())
        stats = FinalizationStats()

        handled: Set[int] = set()
        try:
            reconciled = self._reconciler.reconcile_open_clock_ins(work_date)
        except Exception:
            stats.errors += 1
            logger.exception("Missed clock-out pass failed for %s", work_date.isoformat())
        else:
            stats.errors += reconciled.errors
            stats.auto_finalized += reconciled.auto_finalized
            for transition in reconciled.transitions:
                if transition.outcome.is_noop:
                    continue
                stats.processed += 1
                stats.tally(transition)
                handled.add(transition.employee_id)

        for employee in self._employees.list_active_employees():
            if employee.employee_id in handled:
                continue
            try:
                result = self._finalize_one(employee, work_date)
            except Exception:
                stats.errors += 1
                logger.exception(
                    "Finalization failed for employee %s (%s) on %s",
                    employee.employee_id,
                    employee.full_name,
                    work_date.isoformat(),
                )
                continue
            stats.processed += 1
            stats.tally(result)

        if stats.errors:
            logger.warning(
                "Finalization for %s finished with %d error(s): %s",
                work_date.isoformat(),
                stats.errors,
                stats.as_dict(),
            )
        else:
            logger.info("Finalization for %s complete: %s", work_date.isoformat(), stats.as_dict())
        return stats

    def _finalize_one(self, employee: Employee, work_date: date) -> TransitionResult:
        shift = self._resolver.resolve_shift(employee.employee_id, work_date)
        record = self._records.find(employee.employee_id, work_date)
        on_leave = needs_leave_check(record) and shift is not None and self._leave.has_approved_leave(
            employee.employee_id, work_date
        )
        return self._state_machine.finalize(employee, work_date, record, shift, on_leave)

    def finalize_employee(self, employee_id: int, work_date: Optional[date] = None) -> TransitionResult:
        """Finalize a single employee; the reconciler runs for their record first."""
        work_date = work_date or self._clock.today()
        employee = self._employees.get_by_id(employee_id)
        if employee is None:
            raise ValidationError(f"Employee {employee_id} not found")

        skip_reason = self._calendar_skip(work_date)
        if skip_reason == "holiday":
            return TransitionResult(employee_id, work_date, TransitionOutcome.SKIPPED_HOLIDAY)
        if skip_reason == "weekend":
            return TransitionResult(employee_id, work_date, TransitionOutcome.SKIPPED_NON_WORKING_DAY)

        with self._date_lock(work_date):
            record = self._records.find(employee_id, work_date)
            if record is not None:
                reconciled = self._reconciler.reconcile_record(record, employee=employee)
                if reconciled is not None and not reconciled.outcome.is_noop:
                    return reconciled
            result = self._finalize_one(employee, work_date)

        logger.info(
            "Manual finalization of employee %s on %s: %s",
            employee_id,
            work_date.isoformat(),
            result.outcome.value,
        )
        return result

    def finalize_range(self, start: date, end: date) -> List[DayResult]:
        """Backfill: `finalize_day` for each date from start to end inclusive."""
        if end < start:
            raise ValidationError("end date must not be before start date")
        return [self.finalize_day(day) for day in daterange(start, end)]

    def not_clocked_in(self, work_date: Optional[date] = None) -> List[dict]:
        """Active employees with no clock-in yet and no approved leave. Writes nothing."""
        work_date = work_date or self._clock.today()
        if self._calendar_skip(work_date) is not None:
            return []

        missing: List[dict] = []
        for employee in self._employees.list_active_employees():
            record = self._records.find(employee.employee_id, work_date)
            if record is not None and (record.clock_in is not None or is_terminal(record.status)):
                continue
            if self._leave.has_approved_leave(employee.employee_id, work_date):
                continue
            missing.append(
                {
                    "employeeId": employee.employee_id,
                    "employeeName": employee.full_name,
                    "action": "NOT_CLOCKED_IN",
                    "reason": NOT_CLOCKED_IN_REASON,
                }
            )

        logger.info("%d employee(s) have not clocked in on %s", len(missing), work_date.isoformat())
        return missing

    def day_status(self, work_date: Optional[date] = None) -> dict:
        work_date = work_date or self._clock.today()
        skip_reason = self._calendar_skip(work_date)
        if skip_reason is not None:
            return {
                "date": work_date.isoformat(),
                "isHoliday": skip_reason == "holiday",
                "isWorkingDay": skip_reason != "weekend",
                "needsFinalization": False,
                "reason": skip_reason,
            }

        incomplete = self._records.count_by_status(work_date, FinalState.INCOMPLETE)
        pending_clock_out = self._records.count_open_clock_ins(work_date)
        return {
            "date": work_date.isoformat(),
            "isHoliday": False,
            "isWorkingDay": True,
            "needsFinalization": incomplete > 0 or pending_clock_out > 0,
            "incompleteRecords": incomplete,
            "pendingClockOut": pending_clock_out,
        }

    def employee_status(self, employee_id: int, work_date: Optional[date] = None) -> dict:
        work_date = work_date or self._clock.today()
        employee = self._employees.get_by_id(employee_id)
        if employee is None:
            raise ValidationError(f"Employee {employee_id} not found")

        shift = self._resolver.resolve_shift(employee_id, work_date)
        record = self._records.find(employee_id, work_date)

        shift_finished = False
        shift_end_time = None
        if shift is not None:
            shift_finished = self._guard.has_shift_ended_for(shift, work_date)
            shift_end_time = str(shift.end_time)[:5] if isinstance(shift.end_time, str) else shift.end_time.strftime("%H:%M")

        status = record.status if record is not None else None
        return {
            "employeeId": employee_id,
            "date": work_date.isoformat(),
            "hasRecord": record is not None,
            "hasShift": shift is not None,
            "status": status.value if status is not None else None,
            "statusReason": record.status_reason if record is not None else None,
            "isFinalized": status is not None and is_terminal(status),
            "isLive": isinstance(status, LiveState),
            "shiftFinished": shift_finished,
            "shiftEndTime": shift_end_time,
            "shiftEndDate": _end_day_or_none(shift, work_date),
            "clockIn": record.clock_in.isoformat() if record is not None and record.clock_in else None,
            "clockOut": record.clock_out.isoformat() if record is not None and record.clock_out else None,
            "workHours": record.work_hours if record is not None else 0.0,
        }


def _end_day_or_none(shift, work_date: date) -> Optional[str]:
    if shift is None:
        return None
    try:
        return shift_end_day(shift, work_date).isoformat()
    except (TypeError, ValueError):
        return None
