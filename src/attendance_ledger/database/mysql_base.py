from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import time, timedelta
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..common.time_arithmetic import format_hms
from ..core.exceptions import DuplicateRecordError, StoreFailureError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_RETRYABLE_ERRORS = (mysql.connector.errors.OperationalError, mysql.connector.errors.InterfaceError)


def translate_error(exc: mysql.connector.Error) -> StoreFailureError:
    """Map a connector error onto the store failure taxonomy."""

    if isinstance(exc, mysql.connector.errors.IntegrityError) and exc.errno == errorcode.ER_DUP_ENTRY:
        return DuplicateRecordError(str(exc))
    return StoreFailureError(str(exc), retryable=isinstance(exc, _RETRYABLE_ERRORS))


def _rollback_quietly(conn) -> None:
    # A dropped connection fails the rollback too; the original error wins.
    try:
        conn.rollback()
    except mysql.connector.Error as exc:
        logger.warning("Rollback failed: %s", exc)


def _close_quietly(conn) -> None:
    try:
        conn.close()
    except mysql.connector.Error as exc:
        logger.warning("Closing MySQL connection failed: %s", exc)


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    try:
        conn = conn_factory.connect()
    except mysql.connector.Error as exc:
        raise translate_error(exc) from exc

    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        _rollback_quietly(conn)
        raise translate_error(exc) from exc
    except Exception:
        _rollback_quietly(conn)
        raise
    finally:
        _close_quietly(conn)


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def _time_seconds(value: Any) -> int:
    if isinstance(value, time):
        return value.hour * 3600 + value.minute * 60 + value.second

    if isinstance(value, timedelta):
        return int(value.total_seconds())

    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return hours * 3600 + minutes * 60 + seconds

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def normalize_mysql_time(value: Any) -> Optional[str]:
    """Normalize MySQL TIME/VARCHAR values into ``HH:MM:SS`` text.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta (hours may exceed 24 for durations)
    - string (e.g. '08:30:00')

    A value that cannot be read as a time raises ``StoreFailureError``.
    """

    if value is None:
        return None

    try:
        return format_hms(_time_seconds(value))
    except (TypeError, ValueError) as exc:
        raise StoreFailureError(f"Corrupt time value in attendance store: {value!r}") from exc

