from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee as seen by finalization.

    user_id is the login account that receives in-app notices (None when the
    employee has no account).
    """

    employee_id: int
    full_name: str
    user_id: Optional[int] = None
    is_active: bool = True
