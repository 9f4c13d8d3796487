from __future__ import annotations

import uuid
from datetime import date
from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.exceptions import StoreFailureError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import AttendanceRecord
from .repository import UPDATABLE_FIELDS, AttendanceRepository

_COLUMNS = "id, employee_id, date, first_clock_in, last_clock_out, num_clock_ins, total_hours_worked"


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    try:
        num_clock_ins = int(r.get("num_clock_ins") or 0)
    except (TypeError, ValueError) as exc:
        value = r.get("num_clock_ins")
        raise StoreFailureError(f"Corrupt num_clock_ins for attendance {r.get('id')}: {value!r}") from exc

    return AttendanceRecord(
        attendance_id=str(r["id"]),
        employee_id=str(r["employee_id"]),
        work_date=r["date"],
        first_clock_in=normalize_mysql_time(r["first_clock_in"]),
        last_clock_out=normalize_mysql_time(r.get("last_clock_out")),
        num_clock_ins=num_clock_ins,
        total_hours_worked=normalize_mysql_time(r.get("total_hours_worked")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE employee_id=%s AND date=%s
                """,
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE id=%s", (attendance_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create_record(
        self,
        *,
        employee_id: str,
        work_date: date,
        first_clock_in: str,
        num_clock_ins: int,
        total_hours_worked: str,
    ) -> str:
        attendance_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(id, employee_id, date, first_clock_in, num_clock_ins, total_hours_worked)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (attendance_id, employee_id, work_date, first_clock_in, int(num_clock_ins), total_hours_worked),
            )
        return attendance_id

    def update_fields(self, attendance_id: str, fields: Mapping[str, object]) -> Optional[AttendanceRecord]:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update attendance columns: {sorted(unknown)}")
        if not fields:
            return self.get_by_id(attendance_id)

        # Column names come from UPDATABLE_FIELDS only.
        names = sorted(fields)
        assignments = ", ".join(f"{name}=%s" for name in names)
        params = [fields[name] for name in names] + [attendance_id]

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"UPDATE attendance SET {assignments} WHERE id=%s", tuple(params))
            cur.execute(f"SELECT {_COLUMNS} FROM attendance WHERE id=%s", (attendance_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_open(self) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE last_clock_out IS NULL
                ORDER BY date ASC, employee_id ASC
                """
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_recent_for_employee(self, employee_id: str, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE employee_id=%s
                ORDER BY date DESC
                LIMIT %s
                """,
                (employee_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def get_range_for_employee(
        self,
        employee_id: str,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["employee_id=%s"]
        params: list[object] = [employee_id]

        if start_date is not None:
            clauses.append("date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("date <= %s")
            params.append(end_date)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance
                WHERE {where}
                ORDER BY date DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]
