from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple

from ...core.enums import FinalState
from ...shifts.model import Shift
from ..model import AttendanceRecord


@dataclass(frozen=True)
class AttendanceMetrics:
    worked_minutes: int
    break_minutes: int
    work_hours: float
    late_minutes: int
    is_late: bool
    early_exit_minutes: int
    overtime_minutes: int


class MetricsCalculator(ABC):
    """Calculator interface (Strategy Pattern for derived attendance metrics)."""

    @abstractmethod
    def compute(self, record: AttendanceRecord, shift: Shift) -> AttendanceMetrics:
        """Metrics for a record with both clock_in and clock_out set."""

        raise NotImplementedError

    @abstractmethod
    def classify(self, metrics: AttendanceMetrics, shift: Shift) -> Tuple[FinalState, str]:
        """Final status (present / half_day / absent) and its reason."""

        raise NotImplementedError
