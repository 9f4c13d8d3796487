from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: an entry of the employee directory.

    The ledger only needs to know the employee exists.
    """

    employee_id: str
    full_name: str
    email: Optional[str] = None
    is_active: bool = True
