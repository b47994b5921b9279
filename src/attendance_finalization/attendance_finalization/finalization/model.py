from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from ..attendance.model import AttendanceRecord
from ..core.enums import FinalState, RecordStatus, TransitionOutcome


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of finalizing one employee on one date."""

    employee_id: int
    work_date: date
    outcome: TransitionOutcome
    status: Optional[RecordStatus] = None
    reason: Optional[str] = None
    record: Optional[AttendanceRecord] = None

    def as_dict(self) -> dict:
        return {
            "employeeId": self.employee_id,
            "date": self.work_date.isoformat(),
            "outcome": self.outcome.value,
            "status": self.status.value if self.status is not None else None,
            "reason": self.reason,
        }


@dataclass(frozen=True)
class DaySkipped:
    """A whole date left alone by the calendar gates ("holiday" / "weekend")."""

    work_date: date
    reason: str

    def as_dict(self) -> dict:
        return {"date": self.work_date.isoformat(), "skipped": True, "reason": self.reason}


@dataclass
class FinalizationStats:
    processed: int = 0
    skipped: int = 0
    present: int = 0
    half_day: int = 0
    absent: int = 0
    leave: int = 0
    pending_correction: int = 0
    incomplete: int = 0
    errors: int = 0
    auto_finalized: int = 0

    def tally(self, result: TransitionResult) -> None:
        outcome = result.outcome
        if outcome is TransitionOutcome.COMPLETED:
            if result.status is FinalState.PRESENT:
                self.present += 1
            elif result.status is FinalState.ABSENT:
                self.absent += 1
            else:
                self.half_day += 1
        elif outcome in (TransitionOutcome.MARKED_ABSENT, TransitionOutcome.CORRECTED_INVALID):
            self.absent += 1
        elif outcome is TransitionOutcome.MARKED_INCOMPLETE:
            self.incomplete += 1
        elif outcome is TransitionOutcome.SKIPPED_ON_LEAVE:
            self.leave += 1
        else:
            self.skipped += 1
            # pending_correction is a breakdown of skipped, not a separate bucket
            if result.status is FinalState.PENDING_CORRECTION:
                self.pending_correction += 1

    def as_dict(self) -> dict:
        return {
            "processed": self.processed,
            "skipped": self.skipped,
            "present": self.present,
            "halfDay": self.half_day,
            "absent": self.absent,
            "leave": self.leave,
            "pendingCorrection": self.pending_correction,
            "incomplete": self.incomplete,
            "errors": self.errors,
            "autoFinalized": self.auto_finalized,
        }


@dataclass
class ReconcileResult:
    errors: int = 0
    transitions: List[TransitionResult] = field(default_factory=list)

    @property
    def auto_finalized(self) -> int:
        return sum(1 for t in self.transitions if t.outcome is TransitionOutcome.COMPLETED)
