from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..company_calendar.mysql_calendar_repository import parse_weekend_days
from ..core.constants import (
    DEFAULT_AUTO_CLOCK_OUT_BUFFER_MINUTES,
    DEFAULT_FINALIZATION_INTERVAL_MINUTES,
    DEFAULT_NOTIFICATION_WORKERS,
    DEFAULT_SHIFT_END_BUFFER_MINUTES,
    DEFAULT_WEEKEND_DAYS,
)


@dataclass(frozen=True)
class FinalizationSettings:
    interval_minutes: int = DEFAULT_FINALIZATION_INTERVAL_MINUTES
    shift_end_buffer_minutes: int = DEFAULT_SHIFT_END_BUFFER_MINUTES
    auto_clock_out_buffer_minutes: int = DEFAULT_AUTO_CLOCK_OUT_BUFFER_MINUTES
    timezone: Optional[str] = None
    scheduler_enabled: bool = True
    notification_workers: int = DEFAULT_NOTIFICATION_WORKERS
    weekend_days: Tuple[int, ...] = DEFAULT_WEEKEND_DAYS

    @classmethod
    def from_dict(cls, raw: Optional[dict]) -> "FinalizationSettings":
        raw = raw or {}
        weekend = raw.get("weekend_days")
        return cls(
            interval_minutes=int(raw.get("interval_minutes", DEFAULT_FINALIZATION_INTERVAL_MINUTES)),
            shift_end_buffer_minutes=int(raw.get("shift_end_buffer_minutes", DEFAULT_SHIFT_END_BUFFER_MINUTES)),
            auto_clock_out_buffer_minutes=int(
                raw.get("auto_clock_out_buffer_minutes", DEFAULT_AUTO_CLOCK_OUT_BUFFER_MINUTES)
            ),
            timezone=raw.get("timezone") or None,
            scheduler_enabled=bool(raw.get("scheduler_enabled", True)),
            notification_workers=int(raw.get("notification_workers", DEFAULT_NOTIFICATION_WORKERS)),
            weekend_days=parse_weekend_days(weekend) if weekend is not None else DEFAULT_WEEKEND_DAYS,
        )
