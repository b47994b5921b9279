from __future__ import annotations

from enum import Enum
from typing import Union


class Role(str, Enum):
    """User role used for authorization on admin triggers."""

    ADMIN = "admin"
    STAFF = "staff"


class LiveState(str, Enum):
    """Transient status written by real-time clock actions during the shift."""

    IN_PROGRESS = "in_progress"
    ON_BREAK = "on_break"
    COMPLETED = "completed"


class FinalState(str, Enum):
    """Authoritative status written only by finalization (or an admin correction)."""

    PRESENT = "present"
    HALF_DAY = "half_day"
    ABSENT = "absent"
    LEAVE = "leave"
    HOLIDAY = "holiday"
    PENDING_CORRECTION = "pending_correction"
    INCOMPLETE = "incomplete"

    @property
    def is_terminal(self) -> bool:
        return self is not FinalState.INCOMPLETE


RecordStatus = Union[LiveState, FinalState]


def parse_status(value: str) -> RecordStatus:
    """Map a stored status string onto the live or final enum."""
    if isinstance(value, (LiveState, FinalState)):
        return value
    try:
        return LiveState(value)
    except ValueError:
        return FinalState(value)


def is_terminal(status: RecordStatus) -> bool:
    return isinstance(status, FinalState) and status.is_terminal


class NotificationKind(str, Enum):
    ABSENT = "attendance_auto_absent"
    CORRECTION_REQUIRED = "attendance_correction_required"
    AUTO_CLOCK_OUT = "attendance_auto_clock_out"


class TransitionOutcome(str, Enum):
    """What one state-machine call did for one employee and date."""

    SKIPPED_NO_SHIFT = "skipped: no shift"
    SKIPPED_SHIFT_ACTIVE = "skipped: shift active"
    SKIPPED_ALREADY_FINALIZED = "skipped: already finalized"
    SKIPPED_ON_LEAVE = "skipped: on leave"
    SKIPPED_CONCURRENT_UPDATE = "skipped: concurrently finalized"
    SKIPPED_HOLIDAY = "skipped: holiday"
    SKIPPED_NON_WORKING_DAY = "skipped: weekend"
    MARKED_ABSENT = "marked absent"
    MARKED_INCOMPLETE = "marked incomplete"
    CORRECTED_INVALID = "corrected invalid record"
    COMPLETED = "completed"

    @property
    def is_noop(self) -> bool:
        return self.value.startswith("skipped")
