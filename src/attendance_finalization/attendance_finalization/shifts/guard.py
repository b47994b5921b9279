from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Tuple

from ..common.clock import Clock
from ..common.datetime_utils import TimeLike, at_time, parse_time_of_day
from ..core.constants import DEFAULT_SHIFT_END_BUFFER_MINUTES
from .model import Shift

logger = logging.getLogger(__name__)


def shift_bounds(shift: Shift, anchor: date) -> Tuple[datetime, datetime]:
    """Concrete (start, end) of `shift` starting on `anchor`.

    Overnight shifts (end earlier than start) end on the next day.
    Raises ValueError/TypeError when the shift times are malformed.
    """
    start = at_time(anchor, shift.start_time)
    end = at_time(anchor, shift.end_time)
    if end < start:
        end += timedelta(days=1)
    return start, end


def shift_end_day(shift: Shift, work_date: date) -> date:
    """Calendar day on which the shift worked on `work_date` ends."""
    start = parse_time_of_day(shift.start_time)
    end = parse_time_of_day(shift.end_time)
    return work_date + timedelta(days=1) if end < start else work_date


class ShiftEndGuard:
    """Answers "is it safe to decide on this day yet?".

    Past days are always over and future days never are. On the day itself the
    shift end plus a buffer must have passed. The caller passes the calendar day
    the shift actually ends on, so overnight rollover is not detected here.
    """

    def __init__(self, clock: Clock, *, buffer_minutes: int = DEFAULT_SHIFT_END_BUFFER_MINUTES):
        self._clock = clock
        self._buffer_minutes = int(buffer_minutes)

    def has_shift_ended(self, shift_end_time: TimeLike, target_date: date, buffer_minutes: Optional[int] = None) -> bool:
        buffer = self._buffer_minutes if buffer_minutes is None else int(buffer_minutes)
        now = self._clock.now()
        today = now.date()

        if today > target_date:
            return True
        if today < target_date:
            return False

        try:
            shift_end = at_time(target_date, shift_end_time)
        except (TypeError, ValueError):
            logger.warning(
                "Malformed shift end time %r for %s; treating shift as not ended",
                shift_end_time,
                target_date.isoformat(),
            )
            return False

        return now >= shift_end + timedelta(minutes=buffer)

    def has_shift_ended_for(self, shift: Shift, work_date: date) -> bool:
        """Guard for `shift` worked on `work_date`, with overnight rollover applied."""
        try:
            end_day = shift_end_day(shift, work_date)
        except (TypeError, ValueError):
            logger.warning(
                "Malformed times on shift %s (%r-%r); treating shift as not ended",
                shift.shift_id,
                shift.start_time,
                shift.end_time,
            )
            return False
        return self.has_shift_ended(shift.end_time, end_day)
