from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import EmployeeShiftAssignment, Shift


class ShiftRepository(Protocol):
    def get_by_id(self, shift_id: int) -> Optional[Shift]:
        raise NotImplementedError


class ShiftAssignmentRepository(Protocol):
    def list_covering(self, *, employee_id: int, work_date: date) -> Sequence[EmployeeShiftAssignment]:
        """Active assignments whose [effective_date, end_date] window contains work_date."""

        raise NotImplementedError
