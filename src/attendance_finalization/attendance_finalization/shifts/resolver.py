from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from .model import Shift
from .repository import ShiftAssignmentRepository, ShiftRepository

logger = logging.getLogger(__name__)


class ShiftResolver:
    """Resolve the shift an employee works on a given date.

    One covering assignment is expected. When several overlap, the one with the
    latest effective_date (not after the date) wins, ties going to the highest
    assignment_id, and the overlap is reported as a data-integrity warning.
    """

    def __init__(self, assignments: ShiftAssignmentRepository, shifts: ShiftRepository):
        self._assignments = assignments
        self._shifts = shifts

    def resolve_shift(self, employee_id: int, work_date: date) -> Optional[Shift]:
        candidates = [
            a
            for a in self._assignments.list_covering(employee_id=employee_id, work_date=work_date)
            if a.covers(work_date)
        ]
        if not candidates:
            return None

        candidates.sort(key=lambda a: (a.effective_date, a.assignment_id), reverse=True)
        chosen = candidates[0]
        if len(candidates) > 1:
            logger.warning(
                "Employee %s has %d overlapping shift assignments on %s (ids=%s); using assignment %s",
                employee_id,
                len(candidates),
                work_date.isoformat(),
                [a.assignment_id for a in candidates],
                chosen.assignment_id,
            )

        shift = self._shifts.get_by_id(chosen.shift_id)
        if shift is None:
            logger.warning(
                "Assignment %s for employee %s points at missing shift %s",
                chosen.assignment_id,
                employee_id,
                chosen.shift_id,
            )
        return shift
