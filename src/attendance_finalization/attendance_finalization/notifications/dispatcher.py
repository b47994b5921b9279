from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import date
from typing import Dict, Optional, Set, Tuple

from ..core.constants import DEFAULT_NOTIFICATION_RETAIN_DAYS, DEFAULT_NOTIFICATION_WORKERS
from ..core.enums import NotificationKind
from ..employees.model import Employee
from .notifier import Notifier

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Fire-and-forget front of a Notifier.

    `notify` hands the work to a thread pool and returns at once. It never raises:
    submit and delivery failures are logged and dropped (no retry). Each
    (employee, date, kind) is delivered at most once, so an overlapping
    scheduled + manual run does not notify twice. Only the `retain_days` most
    recent dates are remembered.
    """

    def __init__(
        self,
        notifier: Notifier,
        *,
        executor: Optional[Executor] = None,
        max_workers: int = DEFAULT_NOTIFICATION_WORKERS,
        retain_days: int = DEFAULT_NOTIFICATION_RETAIN_DAYS,
    ):
        self._notifier = notifier
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="attendance-notify")
        self._retain_days = max(1, int(retain_days))
        self._sent: Dict[date, Set[Tuple[int, NotificationKind]]] = {}
        self._lock = threading.Lock()

    def notify(self, employee: Employee, work_date: date, reason: str, kind: NotificationKind) -> None:
        key = (employee.employee_id, kind)
        with self._lock:
            sent_on_day = self._sent.setdefault(work_date, set())
            if key in sent_on_day:
                logger.debug(
                    "Duplicate %s notice for employee %s on %s suppressed", kind.value, employee.employee_id, work_date
                )
                return
            sent_on_day.add(key)
            self._forget_old_dates()

        try:
            future = self._executor.submit(self._notifier.notify, employee, work_date, reason, kind)
        except Exception:
            logger.exception("Could not queue %s notice for employee %s", kind.value, employee.employee_id)
            return

        future.add_done_callback(lambda f: self._log_failure(f, employee, kind))

    def _forget_old_dates(self) -> None:
        # caller holds self._lock
        for stale in sorted(self._sent)[: -self._retain_days]:
            del self._sent[stale]

    @property
    def remembered_dates(self) -> Tuple[date, ...]:
        with self._lock:
            return tuple(sorted(self._sent))

    @staticmethod
    def _log_failure(future: Future, employee: Employee, kind: NotificationKind) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error(
                "Failed to send %s notice for employee %s: %s",
                kind.value,
                employee.employee_id,
                exc,
                exc_info=exc,
            )

    def shutdown(self, *, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
