from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..core.enums import NotificationKind


@dataclass(frozen=True)
class Notification:
    user_id: int
    employee_id: int
    title: str
    message: str
    type: str
    category: str = "attendance"
    data: Dict[str, Any] = field(default_factory=dict)
    notification_id: Optional[int] = None


# kind -> (title, severity, message template)
TEMPLATES: Dict[NotificationKind, tuple[str, str, str]] = {
    NotificationKind.ABSENT: (
        "Attendance Marked as Absent",
        "error",
        "Your attendance for {date} was marked as absent. Reason: {reason}. "
        "Please submit a correction request if this is incorrect.",
    ),
    NotificationKind.CORRECTION_REQUIRED: (
        "Attendance Correction Required",
        "warning",
        "Your attendance for {date} requires correction. Reason: {reason}. Please submit a correction request.",
    ),
    NotificationKind.AUTO_CLOCK_OUT: (
        "Automatic Clock-Out Applied",
        "warning",
        "You were clocked out automatically for {date}. Reason: {reason}. "
        "Please submit a correction request if your actual clock-out time differs.",
    ),
}
