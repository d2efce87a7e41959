from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import time, timedelta
from functools import wraps
from typing import Any, Dict, List, Optional

import mysql.connector

from ..core.exceptions import DataAccessError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

READ_RETRIES = 1


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """Open a connection, yield ``(conn, cursor)``, commit on success.

    Driver errors are rolled back and re-raised as ``DataAccessError``.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as exc:
        conn.rollback()
        logger.error("Query failed: %s", exc)
        raise DataAccessError("Query against the record store failed") from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def retry_read(func=None, *, retries: int = READ_RETRIES):
    """Retry a read-only repository method after a ``DataAccessError``.

    Writes must not use this decorator.
    """

    def decorate(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            attempt = 0
            while True:
                try:
                    return fn(*args, **kwargs)
                except DataAccessError:
                    if attempt >= retries:
                        raise
                    attempt += 1
                    logger.warning("Retrying %s after a failed read (attempt %s)", fn.__qualname__, attempt)

        return wrapper

    if func is not None:
        return decorate(func)
    return decorate


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Normalize MySQL TIME values across connector implementations.

    mysql-connector can return TIME as:
    - datetime.time
    - datetime.timedelta
    - string (e.g. '08:30:00')
    """

    if value is None:
        return None

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        parts = value.strip().split(":")
        if len(parts) < 2:
            raise ValueError(f"Invalid time string: {value!r}")
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")


def to_float(value: Any) -> float:
    """DECIMAL columns come back as Decimal; NULL as None."""
    return float(value or 0)
