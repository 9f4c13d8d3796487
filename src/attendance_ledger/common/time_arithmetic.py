"""Arithmetic on ``HH:MM:SS`` strings.

Durations and times of day share the same textual format. Hours are not
capped for durations, so a day total may read ``25:00:00``.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ..core.constants import DATE_FORMAT, TIME_FORMAT, ZERO_DURATION
from ..core.exceptions import ValidationError
from .datetime_utils import Clock

logger = logging.getLogger(__name__)


def parse_hms(value: str) -> int:
    """Parse ``H+:MM:SS`` into a number of seconds."""
    if value is None:
        raise ValidationError("Time value is missing")

    parts = str(value).strip().split(":")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValidationError(f"Invalid time value: {value!r}")

    hours, minutes, seconds = (int(p) for p in parts)
    if minutes >= 60 or seconds >= 60:
        raise ValidationError(f"Invalid time value: {value!r}")
    return hours * 3600 + minutes * 60 + seconds


def format_hms(total_seconds: int) -> str:
    total_seconds = int(total_seconds)
    if total_seconds < 0:
        raise ValueError("Duration cannot be negative")

    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def duration_between(start: str, end: str) -> str:
    """Elapsed time from ``start`` to ``end`` on the same calendar day.

    An ``end`` earlier than ``start`` yields ``00:00:00``.
    """
    elapsed = parse_hms(end) - parse_hms(start)
    if elapsed < 0:
        logger.warning("Negative duration between %s and %s clamped to zero", start, end)
        return ZERO_DURATION
    return format_hms(elapsed)


def add_times(a: str, b: str) -> str:
    return format_hms(parse_hms(a) + parse_hms(b))


def sum_times(values: Iterable[str]) -> str:
    total = ZERO_DURATION
    for value in values:
        total = add_times(total, value)
    return total


def current_time(clock: Clock) -> str:
    return clock.now().strftime(TIME_FORMAT)


def current_date(clock: Clock) -> str:
    return clock.now().strftime(DATE_FORMAT)
