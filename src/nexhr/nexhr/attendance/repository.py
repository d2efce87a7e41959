from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord, AttendanceReportRow, AttendanceSettings


class AttendanceRepository(Protocol):
    def get_by_id(self, customer_id: int, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, customer_id: int, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_date(self, customer_id: int, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

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
        raise NotImplementedError

    def update_checkout(
        self,
        *,
        customer_id: int,
        attendance_id: int,
        check_out_time: datetime,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

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
        """Manual override (admin edit)."""

        raise NotImplementedError

    def delete(self, customer_id: int, attendance_id: int) -> bool:
        raise NotImplementedError

    def get_report_rows(
        self,
        *,
        customer_id: int,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        raise NotImplementedError


class AttendanceSettingsRepository(Protocol):
    def get(self, customer_id: int) -> Optional[AttendanceSettings]:
        raise NotImplementedError

    def upsert(self, settings: AttendanceSettings) -> None:
        raise NotImplementedError
