from __future__ import annotations

from enum import Enum


class SessionState(str, Enum):
    """Where an employee stands today, derived from today's record."""

    NOT_CLOCKED_IN = "NOT_CLOCKED_IN"
    CLOCKED_IN = "CLOCKED_IN"
    CLOCKED_OUT = "CLOCKED_OUT"


class ErrorCode(str, Enum):
    """Tags carried by error values returned from the ledger."""

    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    NO_ACTIVE_SESSION = "NO_ACTIVE_SESSION"
    STORE_FAILURE = "STORE_FAILURE"
    ACTION_IN_PROGRESS = "ACTION_IN_PROGRESS"


class PunchAction(str, Enum):
    CLOCK_IN = "clock_in"
    RESUME = "resume"
    CLOCK_OUT = "clock_out"


class ReportPeriod(str, Enum):
    """History filters offered to employees."""

    LAST_7_DAYS = "7days"
    LAST_30_DAYS = "30days"
    MONTH = "month"
    YEAR = "year"
    ALL = "all"
