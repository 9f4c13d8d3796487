from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Mapping, Optional, TypeVar, Union

from ..common.datetime_utils import Clock, SystemClock
from ..common.time_arithmetic import add_times, duration_between
from ..common.validators import require_non_empty, require_uuid
from ..core.constants import END_OF_DAY_TIME, TIME_FORMAT, ZERO_DURATION
from ..core.enums import PunchAction, SessionState
from ..core.exceptions import (
    DomainError,
    DuplicateRecordError,
    NoActiveSessionError,
    NotFoundError,
    StoreFailureError,
)
from ..employees.repository import EmployeeDirectory
from .guard import RequestGuard
from .model import (
    AttendanceError,
    AttendanceRecord,
    LedgerResult,
    PunchResult,
    ResetSummary,
    TodayStatus,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AttendanceService:
    """Attendance ledger: accumulates worked time per employee and day.

    Public operations never raise domain errors; they return either the
    persisted record or an ``AttendanceError`` so callers can branch on
    ``is_error(result)``.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        *,
        clock: Clock | None = None,
        guard: RequestGuard | None = None,
        require_uuid_ids: bool = False,
    ):
        self._attendance = attendance
        self._employees = employees
        self._clock = clock or SystemClock()
        self._guard = guard or RequestGuard()
        self._require_uuid_ids = bool(require_uuid_ids)

    # ----- mutating operations -----

    def clock_in(self, employee_id: str, *, request_token: str | None = None) -> LedgerResult:
        return self._run("clock_in", employee_id, request_token, self._clock_in)

    def resume_clock_in(self, employee_id: str, *, request_token: str | None = None) -> LedgerResult:
        return self._run("resume", employee_id, request_token, self._resume_clock_in)

    def clock_out(self, employee_id: str, *, request_token: str | None = None) -> LedgerResult:
        return self._run("clock_out", employee_id, request_token, self._clock_out)

    def punch(self, employee_id: str, *, request_token: str | None = None) -> Union[PunchResult, AttendanceError]:
        """Single-button clock: close an open session, resume a closed one, or start the day."""
        return self._run("punch", employee_id, request_token, self._punch)

    def finalize_day_attendance(self, employee_id: str) -> Optional[LedgerResult]:
        return self._run("finalize", employee_id, None, self._finalize_today)

    def reset_attendance_for_new_day(self) -> ResetSummary:
        """Close every open record, across all employees.

        Best effort: a failure for one employee is logged and the loop moves on.
        Tomorrow's records are created lazily on the next clock-in.
        """
        summary = ResetSummary()
        now = self._clock.now()

        try:
            open_records = list(self._attendance.list_open())
        except DomainError as exc:
            logger.error("Could not list open attendance records for reset: %s", exc)
            summary.failures.append(("*", AttendanceError.from_exception(exc)))
            return summary

        if not open_records:
            logger.info("No open attendance records to finalize")
            return summary

        logger.info("Finalizing %d open attendance records", len(open_records))
        for record in open_records:
            try:
                with self._guard.hold(record.employee_id):
                    current = self._attendance.get_by_id(record.attendance_id)
                    if current is None or not current.is_clocked_in:
                        continue
                    finalized = self._finalize(current, now)
            except Exception as exc:
                logger.warning("Failed to finalize attendance for employee %s: %s", record.employee_id, exc)
                summary.failures.append((record.employee_id, AttendanceError.from_exception(exc)))
                continue
            summary.finalized.append(finalized)

        return summary

    # ----- queries -----

    def get_today_attendance(self, employee_id: str) -> Optional[LedgerResult]:
        """Today's record, or None before the first clock-in of the day."""
        try:
            employee_id = self._validate_employee_id(employee_id)
            return self._today_record(employee_id, self._clock.now())
        except DomainError as exc:
            return self._failure("get_today", employee_id, exc)

    def get_today_status(self, employee_id: str) -> Union[TodayStatus, AttendanceError]:
        try:
            employee_id = self._validate_employee_id(employee_id)
            now = self._clock.now()
            record = self._today_record(employee_id, now)
            if record is None:
                return TodayStatus(state=SessionState.NOT_CLOCKED_IN, record=None)

            total = record.total_hours_worked or ZERO_DURATION
            if record.is_clocked_in:
                live_total = add_times(total, duration_between(record.first_clock_in, now.strftime(TIME_FORMAT)))
                return TodayStatus(state=SessionState.CLOCKED_IN, record=record, live_total=live_total)
            return TodayStatus(state=SessionState.CLOCKED_OUT, record=record, live_total=total)
        except DomainError as exc:
            return self._failure("get_today", employee_id, exc)

    # ----- internals -----

    def _run(self, action: str, employee_id: str, request_token: str | None, operation: Callable[[str, datetime], T]):
        try:
            employee_id = self._validate_employee_id(employee_id)
            key = (employee_id, action, request_token) if request_token else None

            cached = self._guard.recall(key)
            if cached is not None:
                logger.info("Replaying %s for employee %s (token %s)", action, employee_id, request_token)
                return cached

            with self._guard.hold(employee_id):
                result = operation(employee_id, self._clock.now())
                self._guard.remember(key, result)
            return result
        except DomainError as exc:
            return self._failure(action, employee_id, exc)

    def _failure(self, action: str, employee_id: str, exc: DomainError) -> AttendanceError:
        error = AttendanceError.from_exception(exc)
        if isinstance(exc, StoreFailureError):
            logger.error("%s failed for employee %s: %s (retryable=%s)", action, employee_id, exc, error.retryable)
        else:
            logger.info("%s rejected for employee %s: %s", action, employee_id, exc)
        return error

    def _validate_employee_id(self, employee_id: str) -> str:
        employee_id = require_non_empty(employee_id, "employee ID")
        if self._require_uuid_ids:
            require_uuid(employee_id, "employee ID")
        return employee_id

    def _today_record(self, employee_id: str, now: datetime) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_employee_and_date(employee_id, now.date())

    def _update(self, record: AttendanceRecord, fields: Mapping[str, object]) -> AttendanceRecord:
        updated = self._attendance.update_fields(record.attendance_id, fields)
        if updated is None:
            raise StoreFailureError(f"Attendance record {record.attendance_id} disappeared during update")
        return updated

    def _clock_in(self, employee_id: str, now: datetime) -> AttendanceRecord:
        if self._employees.get_by_id(employee_id) is None:
            raise NotFoundError(f"User with ID {employee_id} not found in the database")

        today = now.date()
        current_time = now.strftime(TIME_FORMAT)

        record = self._attendance.get_for_employee_and_date(employee_id, today)
        if record is None:
            try:
                attendance_id = self._attendance.create_record(
                    employee_id=employee_id,
                    work_date=today,
                    first_clock_in=current_time,
                    num_clock_ins=1,
                    total_hours_worked=ZERO_DURATION,
                )
            except DuplicateRecordError:
                # A concurrent clock-in created today's record first.
                logger.warning("Record for employee %s on %s already exists, updating it", employee_id, today)
                record = self._attendance.get_for_employee_and_date(employee_id, today)
                if record is None:
                    raise
            else:
                created = self._attendance.get_by_id(attendance_id)
                if created is None:
                    raise StoreFailureError(f"Attendance record {attendance_id} not found after insert")
                logger.info("Created attendance record %s for employee %s at %s", attendance_id, employee_id, current_time)
                return created

        # Additional clock-in on the same day. last_clock_out is left as is;
        # resume_clock_in is the operation that reopens the session.
        updated = self._update(
            record,
            {
                "num_clock_ins": record.num_clock_ins + 1,
                "first_clock_in": current_time,
            },
        )
        logger.info("Employee %s clocked in again at %s (#%d)", employee_id, current_time, updated.num_clock_ins)
        return updated

    def _resume_clock_in(self, employee_id: str, now: datetime) -> AttendanceRecord:
        record = self._today_record(employee_id, now)
        if record is None:
            logger.info("No record today for employee %s, starting a new one", employee_id)
            return self._clock_in(employee_id, now)

        current_time = now.strftime(TIME_FORMAT)
        updated = self._update(
            record,
            {
                "first_clock_in": current_time,
                "num_clock_ins": record.num_clock_ins + 1,
                "last_clock_out": None,
            },
        )
        logger.info("Employee %s resumed at %s with %s already worked", employee_id, current_time, updated.total_hours_worked)
        return updated

    def _clock_out(self, employee_id: str, now: datetime) -> AttendanceRecord:
        record = self._today_record(employee_id, now)
        if record is None:
            raise NoActiveSessionError("No active attendance record found")

        current_time = now.strftime(TIME_FORMAT)
        session = duration_between(record.first_clock_in, current_time)
        total = add_times(record.total_hours_worked, session) if record.total_hours_worked else session

        updated = self._update(record, {"last_clock_out": current_time, "total_hours_worked": total})
        logger.info("Employee %s clocked out at %s (session %s, total %s)", employee_id, current_time, session, total)
        return updated

    def _punch(self, employee_id: str, now: datetime) -> PunchResult:
        record = self._today_record(employee_id, now)
        if record is None:
            return PunchResult(action=PunchAction.CLOCK_IN, record=self._clock_in(employee_id, now))
        if record.is_clocked_in:
            return PunchResult(action=PunchAction.CLOCK_OUT, record=self._clock_out(employee_id, now))
        return PunchResult(action=PunchAction.RESUME, record=self._resume_clock_in(employee_id, now))

    def _finalize_today(self, employee_id: str, now: datetime) -> Optional[AttendanceRecord]:
        record = self._today_record(employee_id, now)
        if record is None:
            return None
        return self._finalize(record, now)

    def _finalize(self, record: AttendanceRecord, now: datetime) -> AttendanceRecord:
        if not record.is_clocked_in:
            return record

        # A record from an earlier day is closed against its own end of day.
        closing_time = END_OF_DAY_TIME if now.date() > record.work_date else now.strftime(TIME_FORMAT)
        session = duration_between(record.first_clock_in, closing_time)
        total = add_times(record.total_hours_worked, session) if record.total_hours_worked else session

        updated = self._update(record, {"last_clock_out": END_OF_DAY_TIME, "total_hours_worked": total})
        logger.info(
            "Finalized attendance %s for employee %s on %s (total %s)",
            record.attendance_id,
            record.employee_id,
            record.work_date,
            total,
        )
        return updated
