from __future__ import annotations

from datetime import date
from typing import Mapping, Optional, Protocol, Sequence

from .model import AttendanceRecord

UPDATABLE_FIELDS = frozenset({"first_clock_in", "last_clock_out", "num_clock_ins", "total_hours_worked"})


class AttendanceRepository(Protocol):
    """Record store for attendance records, keyed by (employee_id, date)."""

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_record(
        self,
        *,
        employee_id: str,
        work_date: date,
        first_clock_in: str,
        num_clock_ins: int,
        total_hours_worked: str,
    ) -> str:
        """Insert a record and return the id assigned to it."""

        raise NotImplementedError

    def update_fields(self, attendance_id: str, fields: Mapping[str, object]) -> Optional[AttendanceRecord]:
        """Apply a partial update and return the record as stored afterwards."""

        raise NotImplementedError

    def list_open(self) -> Sequence[AttendanceRecord]:
        """All records with no clock-out, across employees and dates."""

        raise NotImplementedError

    def get_recent_for_employee(self, employee_id: str, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_range_for_employee(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
