from __future__ import annotations

from datetime import date
from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, retry_read
from .model import Holiday
from .repository import HolidayRepository


def _row_to_holiday(r: dict[str, Any]) -> Holiday:
    return Holiday(
        holiday_id=int(r["holiday_id"]),
        customer_id=int(r["customer_id"]),
        holiday_date=r["holiday_date"],
        name=r.get("holiday_name") or "",
    )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def add(self, *, customer_id: int, holiday_date: date, name: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO holidays(customer_id, holiday_date, holiday_name) VALUES(%s,%s,%s)",
                (int(customer_id), holiday_date, name),
            )
            return int(cur.lastrowid)

    @retry_read
    def get_by_date(self, customer_id: int, holiday_date: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, customer_id, holiday_date, holiday_name
                FROM holidays
                WHERE customer_id=%s AND holiday_date=%s
                """,
                (int(customer_id), holiday_date),
            )
            r = fetchone(cur)
            return _row_to_holiday(r) if r else None

    @retry_read
    def list_between(self, customer_id: int, start: date, end: date) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT holiday_id, customer_id, holiday_date, holiday_name
                FROM holidays
                WHERE customer_id=%s AND holiday_date BETWEEN %s AND %s
                ORDER BY holiday_date
                """,
                (int(customer_id), start, end),
            )
            return [_row_to_holiday(r) for r in fetchall(cur)]

    def delete(self, customer_id: int, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM holidays WHERE customer_id=%s AND holiday_id=%s",
                (int(customer_id), int(holiday_id)),
            )
            return cur.rowcount > 0
