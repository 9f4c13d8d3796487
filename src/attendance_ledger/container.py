from __future__ import annotations

from dataclasses import dataclass

from .attendance.guard import RequestGuard
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import Clock, SystemClock
from .core.constants import DEFAULT_IDEMPOTENCY_CACHE_SIZE
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeDirectory
from .employees.repository import EmployeeDirectory
from .reports.service import AttendanceSummaryService


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    employees_repo: EmployeeDirectory

    attendance_service: AttendanceService
    summary_service: AttendanceSummaryService


def build_services(
    attendance_repo: AttendanceRepository,
    employees_repo: EmployeeDirectory,
    *,
    clock: Clock | None = None,
    require_uuid_ids: bool = False,
    idempotency_cache_size: int = DEFAULT_IDEMPOTENCY_CACHE_SIZE,
) -> Container:
    clock = clock or SystemClock()
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        clock=clock,
        guard=RequestGuard(cache_size=idempotency_cache_size),
        require_uuid_ids=require_uuid_ids,
    )
    summary_service = AttendanceSummaryService(attendance_repo, clock=clock)

    return Container(
        attendance_repo=attendance_repo,
        employees_repo=employees_repo,
        attendance_service=attendance_service,
        summary_service=summary_service,
    )


def build_container(
    *,
    db_config: dict,
    require_uuid_ids: bool = False,
    idempotency_cache_size: int = DEFAULT_IDEMPOTENCY_CACHE_SIZE,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        MySQLAttendanceRepository(conn),
        MySQLEmployeeDirectory(conn),
        require_uuid_ids=require_uuid_ids,
        idempotency_cache_size=idempotency_cache_size,
    )
