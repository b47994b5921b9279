from __future__ import annotations

import logging
from datetime import date
from typing import Protocol

from ..core.enums import NotificationKind
from ..employees.model import Employee
from .model import TEMPLATES, Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, employee: Employee, work_date: date, reason: str, kind: NotificationKind) -> None:
        raise NotImplementedError


class InAppNotifier(Notifier):
    """Stores an in-app notification for the employee's login account."""

    def __init__(self, notifications: NotificationRepository):
        self._notifications = notifications

    def notify(self, employee: Employee, work_date: date, reason: str, kind: NotificationKind) -> None:
        if employee.user_id is None:
            logger.debug("Employee %s has no user account; %s notice not stored", employee.employee_id, kind.value)
            return

        title, severity, template = TEMPLATES[kind]
        day = work_date.isoformat()
        self._notifications.create(
            Notification(
                user_id=employee.user_id,
                employee_id=employee.employee_id,
                title=title,
                message=template.format(date=day, reason=reason),
                type=severity,
                data={"date": day, "reason": reason, "action": kind.value},
            )
        )
        logger.info("Notification %s sent to user %s for %s", kind.value, employee.user_id, day)
