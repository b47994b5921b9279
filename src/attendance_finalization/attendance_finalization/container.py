from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRecordStore
from .common.clock import Clock, SystemClock
from .company_calendar.mysql_calendar_repository import MySQLCalendarRules
from .company_calendar.repository import CalendarRules
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeDirectory
from .employees.repository import EmployeeDirectory
from .finalization.orchestrator import FinalizationOrchestrator
from .finalization.reconciler import MissedClockOutReconciler
from .finalization.scheduler import FinalizationScheduler
from .finalization.settings import FinalizationSettings
from .finalization.state_machine import AttendanceStateMachine
from .leave.mysql_leave_repository import MySQLLeaveLookup
from .leave.repository import LeaveLookup
from .notifications.dispatcher import NotificationDispatcher
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.notifier import InAppNotifier, Notifier
from .shifts.guard import ShiftEndGuard
from .shifts.mysql_shift_repository import MySQLShiftAssignmentRepository, MySQLShiftRepository
from .shifts.repository import ShiftAssignmentRepository, ShiftRepository
from .shifts.resolver import ShiftResolver


@dataclass(frozen=True)
class Container:
    settings: FinalizationSettings
    clock: Clock

    records: AttendanceRecordStore
    employees: EmployeeDirectory

    dispatcher: NotificationDispatcher
    guard: ShiftEndGuard
    resolver: ShiftResolver
    state_machine: AttendanceStateMachine
    reconciler: MissedClockOutReconciler
    orchestrator: FinalizationOrchestrator
    scheduler: FinalizationScheduler


def assemble(
    *,
    settings: FinalizationSettings,
    clock: Clock,
    calendar: CalendarRules,
    employees: EmployeeDirectory,
    leave: LeaveLookup,
    records: AttendanceRecordStore,
    shifts: ShiftRepository,
    assignments: ShiftAssignmentRepository,
    notifier: Notifier,
    dispatcher: Optional[NotificationDispatcher] = None,
) -> Container:
    """Wire the finalization services on top of any repository implementations."""
    dispatcher = dispatcher or NotificationDispatcher(notifier, max_workers=settings.notification_workers)
    guard = ShiftEndGuard(clock, buffer_minutes=settings.shift_end_buffer_minutes)
    resolver = ShiftResolver(assignments, shifts)
    state_machine = AttendanceStateMachine(records, guard, dispatcher)
    reconciler = MissedClockOutReconciler(
        records,
        resolver,
        state_machine,
        employees,
        dispatcher,
        clock,
        buffer_minutes=settings.auto_clock_out_buffer_minutes,
    )
    orchestrator = FinalizationOrchestrator(
        calendar=calendar,
        employees=employees,
        leave=leave,
        records=records,
        resolver=resolver,
        guard=guard,
        state_machine=state_machine,
        reconciler=reconciler,
        clock=clock,
    )
    scheduler = FinalizationScheduler(
        orchestrator,
        interval_minutes=settings.interval_minutes,
        timezone=settings.timezone,
    )

    return Container(
        settings=settings,
        clock=clock,
        records=records,
        employees=employees,
        dispatcher=dispatcher,
        guard=guard,
        resolver=resolver,
        state_machine=state_machine,
        reconciler=reconciler,
        orchestrator=orchestrator,
        scheduler=scheduler,
    )


def build_container(*, db_config: dict, finalization_config: Optional[dict] = None) -> Container:
    settings = FinalizationSettings.from_dict(finalization_config)
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble(
        settings=settings,
        clock=SystemClock(settings.timezone),
        calendar=MySQLCalendarRules(conn, default_weekend_days=settings.weekend_days),
        employees=MySQLEmployeeDirectory(conn),
        leave=MySQLLeaveLookup(conn),
        records=MySQLAttendanceRepository(conn),
        shifts=MySQLShiftRepository(conn),
        assignments=MySQLShiftAssignmentRepository(conn),
        notifier=InAppNotifier(MySQLNotificationRepository(conn)),
    )
