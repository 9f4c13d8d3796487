from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Union

from ..core.constants import DATE_FORMAT, ZERO_DURATION
from ..core.enums import ErrorCode, PunchAction, SessionState
from ..core.exceptions import (
    ActionInProgressError,
    DomainError,
    NoActiveSessionError,
    NotFoundError,
    StoreFailureError,
    ValidationError,
)


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per (employee, date).

    ``first_clock_in`` holds the start of the current or most recent
    session, not necessarily the first clock-in of the day.
    """

    attendance_id: str
    employee_id: str
    work_date: date
    first_clock_in: str
    last_clock_out: Optional[str]
    num_clock_ins: int
    total_hours_worked: Optional[str] = ZERO_DURATION

    @property
    def is_clocked_in(self) -> bool:
        return self.last_clock_out is None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "employee_id": self.employee_id,
            "date": self.work_date.strftime(DATE_FORMAT),
            "first_clock_in": self.first_clock_in,
            "last_clock_out": self.last_clock_out,
            "num_clock_ins": self.num_clock_ins,
            "total_hours_worked": self.total_hours_worked,
        }


_ERROR_CODES = (
    (ValidationError, ErrorCode.INVALID_INPUT),
    (NotFoundError, ErrorCode.NOT_FOUND),
    (NoActiveSessionError, ErrorCode.NO_ACTIVE_SESSION),
    (ActionInProgressError, ErrorCode.ACTION_IN_PROGRESS),
    (StoreFailureError, ErrorCode.STORE_FAILURE),
)


@dataclass(frozen=True)
class AttendanceError:
    """Error value returned across the ledger boundary instead of raising."""

    code: ErrorCode
    message: str
    retryable: bool = False

    @classmethod
    def from_exception(cls, exc: DomainError) -> "AttendanceError":
        for exc_type, code in _ERROR_CODES:
            if isinstance(exc, exc_type):
                return cls(code=code, message=str(exc), retryable=bool(getattr(exc, "retryable", False)))
        return cls(code=ErrorCode.STORE_FAILURE, message=str(exc))

    def to_dict(self) -> dict:
        return {"error": self.code.value, "message": self.message, "retryable": self.retryable}


LedgerResult = Union[AttendanceRecord, AttendanceError]


def is_error(result: object) -> bool:
    return isinstance(result, AttendanceError)


@dataclass(frozen=True)
class TodayStatus:
    """Read-model for clients deciding what to show for today."""

    state: SessionState
    record: Optional[AttendanceRecord]
    live_total: str = ZERO_DURATION

    def to_dict(self) -> dict:
        return {
            "state": self.state.value,
            "record": self.record.to_dict() if self.record else None,
            "live_total": self.live_total,
        }


@dataclass(frozen=True)
class PunchResult:
    """Outcome of a single-button punch: which action ran and the record it left."""

    action: PunchAction
    record: AttendanceRecord

    def to_dict(self) -> dict:
        return {"action": self.action.value, "record": self.record.to_dict()}


@dataclass
class ResetSummary:
    finalized: list[AttendanceRecord] = field(default_factory=list)
    failures: list[tuple[str, AttendanceError]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "finalized": [r.to_dict() for r in self.finalized],
            "failures": [{"employee_id": emp, **err.to_dict()} for emp, err in self.failures],
        }
