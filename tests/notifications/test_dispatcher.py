from __future__ import annotations

import logging
import threading
from datetime import date

from src.attendance_finalization.attendance_finalization.core.enums import NotificationKind
from src.attendance_finalization.attendance_finalization.employees.model import Employee
from src.attendance_finalization.attendance_finalization.notifications.dispatcher import NotificationDispatcher
from src.attendance_finalization.attendance_finalization.notifications.model import Notification
from src.attendance_finalization.attendance_finalization.notifications.notifier import InAppNotifier
from tests.fakes import ImmediateExecutor, RecordingNotifier

DAY = date(2025, 1, 6)
EMPLOYEE = Employee(employee_id=3, full_name="Sam Ortiz", user_id=33)


class FakeNotificationRepo:
    def __init__(self):
        self.created: list[Notification] = []

    def create(self, notification):
        self.created.append(notification)
        return len(self.created)


class BlockingNotifier:
    def __init__(self):
        self.release = threading.Event()
        self.done = threading.Event()

    def notify(self, employee, work_date, reason, kind):
        self.release.wait(timeout=5)
        self.done.set()


class RejectingExecutor(ImmediateExecutor):
    def submit(self, fn, /, *args, **kwargs):
        raise RuntimeError("cannot schedule new futures after shutdown")


def test_delivers_through_notifier():
    notifier = RecordingNotifier()
    dispatcher = NotificationDispatcher(notifier, executor=ImmediateExecutor())

    dispatcher.notify(EMPLOYEE, DAY, "No clock-in recorded", NotificationKind.ABSENT)

    assert notifier.sent == [(3, DAY, NotificationKind.ABSENT, "No clock-in recorded")]


def test_duplicates_are_suppressed_per_kind():
    notifier = RecordingNotifier()
    dispatcher = NotificationDispatcher(notifier, executor=ImmediateExecutor())

    dispatcher.notify(EMPLOYEE, DAY, "No clock-in recorded", NotificationKind.ABSENT)
    dispatcher.notify(EMPLOYEE, DAY, "No clock-in recorded", NotificationKind.ABSENT)
    dispatcher.notify(EMPLOYEE, DAY, "Clock-out missing", NotificationKind.CORRECTION_REQUIRED)

    assert notifier.kinds() == [NotificationKind.ABSENT, NotificationKind.CORRECTION_REQUIRED]


def test_delivery_failure_is_logged_not_raised(caplog):
    dispatcher = NotificationDispatcher(RecordingNotifier(fail=True), executor=ImmediateExecutor())

    with caplog.at_level(logging.ERROR):
        dispatcher.notify(EMPLOYEE, DAY, "No clock-in recorded", NotificationKind.ABSENT)

    assert "Failed to send attendance_auto_absent notice for employee 3" in caplog.text


def test_submit_failure_is_logged_not_raised(caplog):
    dispatcher = NotificationDispatcher(RecordingNotifier(), executor=RejectingExecutor())

    with caplog.at_level(logging.ERROR):
        dispatcher.notify(EMPLOYEE, DAY, "No clock-in recorded", NotificationKind.ABSENT)

    assert "Could not queue" in caplog.text


def test_notify_does_not_wait_for_delivery():
    notifier = BlockingNotifier()
    dispatcher = NotificationDispatcher(notifier, max_workers=1)
    try:
        dispatcher.notify(EMPLOYEE, DAY, "Clock-out missing", NotificationKind.CORRECTION_REQUIRED)
        assert not notifier.done.is_set()
    finally:
        notifier.release.set()
        dispatcher.shutdown(wait=True)
    assert notifier.done.is_set()


def test_in_app_notifier_stores_message_for_user_account():
    repo = FakeNotificationRepo()

    InAppNotifier(repo).notify(EMPLOYEE, DAY, "Clock-out missing", NotificationKind.CORRECTION_REQUIRED)

    (stored,) = repo.created
    assert stored.user_id == 33
    assert stored.title == "Attendance Correction Required"
    assert stored.type == "warning"
    assert "2025-01-06" in stored.message
    assert "Clock-out missing" in stored.message
    assert stored.data == {
        "date": "2025-01-06",
        "reason": "Clock-out missing",
        "action": "attendance_correction_required",
    }


def test_in_app_notifier_skips_employee_without_account():
    repo = FakeNotificationRepo()

    InAppNotifier(repo).notify(Employee(employee_id=4, full_name="No Login"), DAY, "x", NotificationKind.ABSENT)

    assert repo.created == []


def test_only_recent_dates_are_remembered():
    notifier = RecordingNotifier()
    dispatcher = NotificationDispatcher(notifier, executor=ImmediateExecutor(), retain_days=2)

    for day in (date(2025, 1, 6), date(2025, 1, 7), date(2025, 1, 8)):
        dispatcher.notify(EMPLOYEE, day, "No clock-in recorded", NotificationKind.ABSENT)
    dispatcher.notify(EMPLOYEE, date(2025, 1, 8), "No clock-in recorded", NotificationKind.ABSENT)

    assert dispatcher.remembered_dates == (date(2025, 1, 7), date(2025, 1, 8))
    assert len(notifier.sent) == 3
