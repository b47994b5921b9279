from __future__ import annotations

from datetime import date
from typing import Protocol


class CalendarRules(Protocol):
    """Company calendar owned by the holiday / working-rule management module."""

    def is_holiday(self, day: date) -> bool:
        raise NotImplementedError

    def is_working_day(self, day: date) -> bool:
        raise NotImplementedError
