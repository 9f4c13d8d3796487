from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from attendance_ledger.attendance.model import AttendanceRecord
from attendance_ledger.attendance.service import AttendanceService
from attendance_ledger.core.exceptions import DuplicateRecordError, StoreFailureError
from attendance_ledger.employees.model import Employee


class FakeClock:
    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def set_time(self, value: str) -> None:
        hours, minutes, seconds = (int(p) for p in value.split(":"))
        self.current = self.current.replace(hour=hours, minute=minutes, second=seconds)

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


@dataclass
class InMemoryEmployees:
    employees_by_id: dict[str, Employee]

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        return self.employees_by_id.get(employee_id)


class InMemoryAttendance:
    def __init__(self):
        self._by_id: dict[str, AttendanceRecord] = {}
        self._id = 0
        self.failing_employees: set[str] = set()
        self.fail_list_open = False
        self.updates: list[tuple[str, dict]] = []

    def add(self, record: AttendanceRecord) -> AttendanceRecord:
        self._by_id[record.attendance_id] = record
        return record

    def all(self) -> list[AttendanceRecord]:
        return list(self._by_id.values())

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        for r in self._by_id.values():
            if r.employee_id == employee_id and r.work_date == work_date:
                return r
        return None

    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        return self._by_id.get(attendance_id)

    def create_record(self, *, employee_id, work_date, first_clock_in, num_clock_ins, total_hours_worked) -> str:
        if self.get_for_employee_and_date(employee_id, work_date):
            raise DuplicateRecordError("Duplicate entry for key 'unique_employee_date'")
        self._id += 1
        attendance_id = f"att-{self._id}"
        self._by_id[attendance_id] = AttendanceRecord(
            attendance_id=attendance_id,
            employee_id=employee_id,
            work_date=work_date,
            first_clock_in=first_clock_in,
            last_clock_out=None,
            num_clock_ins=num_clock_ins,
            total_hours_worked=total_hours_worked,
        )
        return attendance_id

    def update_fields(self, attendance_id: str, fields) -> Optional[AttendanceRecord]:
        record = self._by_id.get(attendance_id)
        if record is None:
            return None
        if record.employee_id in self.failing_employees:
            raise StoreFailureError("connection reset by peer", retryable=True)
        self.updates.append((attendance_id, dict(fields)))
        updated = dataclasses.replace(record, **dict(fields))
        self._by_id[attendance_id] = updated
        return updated

    def list_open(self):
        if self.fail_list_open:
            raise StoreFailureError("Lost connection to MySQL server", retryable=True)
        return [r for r in self._by_id.values() if r.last_clock_out is None]

    def get_recent_for_employee(self, employee_id: str, limit: int):
        items = [r for r in self._by_id.values() if r.employee_id == employee_id]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit]

    def get_range_for_employee(self, employee_id: str, *, start_date=None, end_date=None):
        items = [
            r
            for r in self._by_id.values()
            if r.employee_id == employee_id
            and (start_date is None or r.work_date >= start_date)
            and (end_date is None or r.work_date <= end_date)
        ]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 9, 0, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def employees() -> InMemoryEmployees:
    return InMemoryEmployees(
        {
            "emp-1": Employee(employee_id="emp-1", full_name="An"),
            "emp-2": Employee(employee_id="emp-2", full_name="Binh"),
            "emp-3": Employee(employee_id="emp-3", full_name="Chi"),
        }
    )


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def service(attendance_repo, employees, clock) -> AttendanceService:
    return AttendanceService(attendance_repo, employees, clock=clock)
