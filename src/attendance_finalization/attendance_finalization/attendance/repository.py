from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import FinalState, RecordStatus
from .model import AttendanceRecord


class AttendanceRecordStore(Protocol):
    def find(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: FinalState,
        status_reason: Optional[str] = None,
        shift_id: Optional[int] = None,
    ) -> Optional[AttendanceRecord]:
        """Insert a record without clock data.

        Returns None when a record for (employee_id, work_date) already exists.
        """

        raise NotImplementedError

    def save(self, record: AttendanceRecord, *, expected_status: Optional[RecordStatus] = None) -> bool:
        """Persist every mutable field of `record`.

        With expected_status the write only happens while the stored status still
        equals it; False means another writer got there first.
        """

        raise NotImplementedError

    def list_open_clock_ins(self, work_date: date, *, statuses: Iterable[RecordStatus]) -> Sequence[AttendanceRecord]:
        """Records of `work_date` with clock_in set, clock_out null and status in `statuses`."""

        raise NotImplementedError

    def count_by_status(self, work_date: date, status: RecordStatus) -> int:
        raise NotImplementedError

    def count_open_clock_ins(self, work_date: date) -> int:
        raise NotImplementedError
