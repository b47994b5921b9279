from __future__ import annotations

from datetime import date
from typing import Protocol


class LeaveLookup(Protocol):
    def has_approved_leave(self, employee_id: int, day: date) -> bool:
        raise NotImplementedError
