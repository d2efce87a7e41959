from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time, retry_read
from .model import AttendanceRecord, AttendanceReportRow, AttendanceSettings
from .repository import AttendanceRepository, AttendanceSettingsRepository

_RECORD_COLUMNS = """
    attendance_id, customer_id, employee_id, work_date,
    check_in_time, check_out_time, status, notes, selfie_path
"""


def _row_to_record(r: dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        customer_id=int(r["customer_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus.parse(r["status"]),
        notes=r.get("notes"),
        selfie_path=r.get("selfie_path"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @retry_read
    def get_by_id(self, customer_id: int, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_RECORD_COLUMNS} FROM attendance_records WHERE customer_id=%s AND attendance_id=%s",
                (int(customer_id), int(attendance_id)),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    @retry_read
    def get_for_employee_and_date(self, customer_id: int, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE customer_id=%s AND employee_id=%s AND work_date=%s
                """,
                (int(customer_id), int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    @retry_read
    def list_for_date(self, customer_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS}
                FROM attendance_records
                WHERE customer_id=%s AND work_date=%s
                ORDER BY employee_id
                """,
                (int(customer_id), work_date),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        customer_id: int,
        employee_id: int,
        work_date: date,
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
        status: AttendanceStatus,
        notes: Optional[str] = None,
        selfie_path: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    customer_id, employee_id, work_date, check_in_time, check_out_time, status, notes, selfie_path
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (int(customer_id), int(employee_id), work_date, check_in_time, check_out_time, status.value, notes, selfie_path),
            )
            return int(cur.lastrowid)

    def update_checkout(
        self,
        *,
        customer_id: int,
        attendance_id: int,
        check_out_time: datetime,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, status=%s, notes=%s
                WHERE customer_id=%s AND attendance_id=%s
                """,
                (check_out_time, status.value, notes, int(customer_id), int(attendance_id)),
            )
            return cur.rowcount > 0

    def update_record(
        self,
        *,
        customer_id: int,
        attendance_id: int,
        check_in_time: Optional[datetime],
        check_out_time: Optional[datetime],
        status: AttendanceStatus,
        notes: Optional[str] = None,
        selfie_path: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_out_time=%s, status=%s, notes=%s, selfie_path=%s
                WHERE customer_id=%s AND attendance_id=%s
                """,
                (check_in_time, check_out_time, status.value, notes, selfie_path, int(customer_id), int(attendance_id)),
            )
            return cur.rowcount > 0

    def delete(self, customer_id: int, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance_records WHERE customer_id=%s AND attendance_id=%s",
                (int(customer_id), int(attendance_id)),
            )
            return cur.rowcount > 0

    @retry_read
    def get_report_rows(
        self,
        *,
        customer_id: int,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["ar.customer_id=%s", "ar.work_date BETWEEN %s AND %s"]
        params: list[object] = [int(customer_id), start_date, end_date]

        if employee_id is not None:
            clauses.append("ar.employee_id=%s")
            params.append(int(employee_id))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT
                    ar.attendance_id, ar.employee_id, e.employee_code, e.first_name, e.last_name, e.job_title,
                    ar.work_date, ar.check_in_time, ar.check_out_time, ar.status, ar.notes, ar.selfie_path
                FROM attendance_records ar
                JOIN employees e ON e.employee_id = ar.employee_id AND e.customer_id = ar.customer_id
                WHERE {where}
                ORDER BY ar.work_date DESC, ar.check_in_time DESC
                """,
                tuple(params),
            )
            rows = fetchall(cur)

            return [
                AttendanceReportRow(
                    attendance_id=int(r["attendance_id"]),
                    employee_id=int(r["employee_id"]),
                    employee_code=r["employee_code"],
                    employee_name=f"{r.get('first_name') or ''} {r.get('last_name') or ''}".strip(),
                    job_title=r.get("job_title"),
                    work_date=r["work_date"],
                    check_in_time=r.get("check_in_time"),
                    check_out_time=r.get("check_out_time"),
                    status=AttendanceStatus.parse(r["status"]),
                    notes=r.get("notes"),
                    selfie_path=r.get("selfie_path"),
                )
                for r in rows
            ]


class MySQLAttendanceSettingsRepository(AttendanceSettingsRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @retry_read
    def get(self, customer_id: int) -> Optional[AttendanceSettings]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT customer_id, work_start_time, late_threshold_minutes,
                       geofencing_enabled, photo_verification_enabled
                FROM attendance_settings
                WHERE customer_id=%s
                """,
                (int(customer_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return AttendanceSettings(
                customer_id=int(r["customer_id"]),
                work_start_time=normalize_mysql_time(r["work_start_time"]),
                late_threshold_minutes=r.get("late_threshold_minutes"),
                geofencing_enabled=bool(r.get("geofencing_enabled", True)),
                photo_verification_enabled=bool(r.get("photo_verification_enabled", True)),
            )

    def upsert(self, settings: AttendanceSettings) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_settings(
                    customer_id, work_start_time, late_threshold_minutes,
                    geofencing_enabled, photo_verification_enabled
                )
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    work_start_time=VALUES(work_start_time),
                    late_threshold_minutes=VALUES(late_threshold_minutes),
                    geofencing_enabled=VALUES(geofencing_enabled),
                    photo_verification_enabled=VALUES(photo_verification_enabled)
                """,
                (
                    int(settings.customer_id),
                    settings.work_start_time,
                    settings.late_threshold_minutes,
                    1 if settings.geofencing_enabled else 0,
                    1 if settings.photo_verification_enabled else 0,
                ),
            )
