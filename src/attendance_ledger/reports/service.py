from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import Clock, SystemClock
from ..common.time_arithmetic import sum_times
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT, ZERO_DURATION
from ..core.enums import ReportPeriod
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class SummaryData:
    period: ReportPeriod
    rows: list[dict]
    present_days: int
    total_days: int
    absent_days: int
    total_hours_worked: str

    def to_dict(self) -> dict:
        return {
            "period": self.period.value,
            "rows": self.rows,
            "present_days": self.present_days,
            "total_days": self.total_days,
            "absent_days": self.absent_days,
            "total_hours_worked": self.total_hours_worked,
        }


def parse_period(value: Optional[str]) -> ReportPeriod:
    if not value:
        return ReportPeriod.ALL
    try:
        return ReportPeriod(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(p.value for p in ReportPeriod)
        raise ValidationError(f"Unknown period {value!r} (expected one of: {allowed})") from exc


def period_start(period: ReportPeriod, today: date) -> Optional[date]:
    if period == ReportPeriod.LAST_7_DAYS:
        return today - timedelta(days=7)
    if period == ReportPeriod.LAST_30_DAYS:
        return today - timedelta(days=30)
    if period == ReportPeriod.MONTH:
        return today.replace(day=1)
    if period == ReportPeriod.YEAR:
        return today.replace(month=1, day=1)
    return None


def _total_days(period: ReportPeriod, today: date, records: Sequence[AttendanceRecord]) -> int:
    if period == ReportPeriod.LAST_7_DAYS:
        return 7
    if period == ReportPeriod.LAST_30_DAYS:
        return 30
    if period == ReportPeriod.MONTH:
        return calendar.monthrange(today.year, today.month)[1]
    if period == ReportPeriod.YEAR:
        return 365
    if not records:
        return 0
    earliest = min(r.work_date for r in records)
    return (today - earliest).days + 1


class AttendanceSummaryService:
    """Attendance history and per-period statistics for one employee."""

    def __init__(self, attendance: AttendanceRepository, *, clock: Clock | None = None):
        self._attendance = attendance
        self._clock = clock or SystemClock()

    def get_history(self, employee_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT) -> list[dict]:
        employee_id = require_non_empty(employee_id, "employee ID")
        return [r.to_dict() for r in self._attendance.get_recent_for_employee(employee_id, int(limit))]

    def build_summary(
        self,
        employee_id: str,
        *,
        period: ReportPeriod = ReportPeriod.ALL,
        today: Optional[date] = None,
    ) -> SummaryData:
        employee_id = require_non_empty(employee_id, "employee ID")
        today = today or self._clock.now().date()

        records = list(
            self._attendance.get_range_for_employee(
                employee_id,
                start_date=period_start(period, today),
                end_date=today,
            )
        )
        records.sort(key=lambda r: r.work_date, reverse=True)

        present_days = len(records)
        total_days = _total_days(period, today, records)

        return SummaryData(
            period=period,
            rows=[r.to_dict() for r in records],
            present_days=present_days,
            total_days=total_days,
            absent_days=max(0, total_days - present_days),
            total_hours_worked=sum_times(r.total_hours_worked or ZERO_DURATION for r in records),
        )
