from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeDirectory


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, full_name, email, is_active
                FROM employees
                WHERE id=%s
                """,
                (employee_id,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Employee(
                employee_id=str(row["id"]),
                full_name=row["full_name"],
                email=row.get("email"),
                is_active=bool(row.get("is_active", True)),
            )
