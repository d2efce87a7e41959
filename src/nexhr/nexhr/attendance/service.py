from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Optional, Sequence

from ..analytics.aggregator import count_attendance
from ..analytics.model import AttendanceCounts
from ..common.datetime_utils import format_duration, now_local
from ..common.validators import require_bool, require_int_in_range
from ..core.constants import MAX_LATE_THRESHOLD_MINUTES
from ..core.context import TenantContext
from ..core.enums import AttendanceStatus, ChangeType
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..holidays.repository import HolidayRepository
from ..realtime.notifier import ChangeNotifier
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, AttendanceReportRow, AttendanceSettings
from .policy import DefaultAssignmentPolicy
from .repository import AttendanceRepository, AttendanceSettingsRepository

logger = logging.getLogger(__name__)

TABLE = "attendance_records"

_KEEP = object()


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


def _combine(work_date: date, value: Optional[time]) -> Optional[datetime]:
    return datetime.combine(work_date, value) if value is not None else None


def _is_placeholder(r: AttendanceRecord) -> bool:
    return (
        r.check_in_time is None
        and r.status in (AttendanceStatus.NOT_MARKED, AttendanceStatus.ABSENT)
        and not r.notes
    )


def _fmt_time(value: Optional[datetime]) -> str:
    return value.strftime("%H:%M") if value else "-"


def record_to_dict(r: AttendanceRecord) -> dict:
    return {
        "attendance_id": r.attendance_id,
        "employee_id": r.employee_id,
        "date": r.work_date.strftime("%Y-%m-%d"),
        "check_in": _fmt_time(r.check_in_time),
        "check_out": _fmt_time(r.check_out_time),
        "work_hours": r.work_hours,
        "status": r.status.value,
        "notes": r.notes or "",
        "selfie_path": r.selfie_path,
    }


def report_row_to_dict(r: AttendanceReportRow) -> dict:
    return {
        "attendance_id": r.attendance_id,
        "employee_id": r.employee_id,
        "employee_code": r.employee_code,
        "employee_name": r.employee_name,
        "job_title": r.job_title or "",
        "date": r.work_date.strftime("%Y-%m-%d"),
        "check_in": _fmt_time(r.check_in_time),
        "check_out": _fmt_time(r.check_out_time),
        "status": r.status.value,
        "notes": r.notes or "",
    }


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        settings: AttendanceSettingsRepository,
        employees: EmployeeRepository,
        *,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
        policy: Optional[DefaultAssignmentPolicy] = None,
        notifier: Optional[ChangeNotifier] = None,
        holidays: Optional[HolidayRepository] = None,
    ):
        self._attendance = attendance
        self._holidays = holidays
        self._settings = settings
        self._employees = employees
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._policy = policy or DefaultAssignmentPolicy(factory=self._factory)
        self._notifier = notifier

    def _emit(self, change_type: ChangeType, ctx: TenantContext, record_id: Optional[int], **payload) -> None:
        if self._notifier:
            self._notifier.emit(TABLE, change_type, customer_id=ctx.customer_id, record_id=record_id, **payload)

    def _require_employee(self, ctx: TenantContext, employee_id: int) -> None:
        if not self._employees.get_by_id(ctx.customer_id, int(employee_id)):
            raise NotFoundError("Employee not found")

    def _holiday_dates(self, ctx: TenantContext, work_date: date) -> set[date]:
        if self._holidays is None:
            return set()
        return {h.holiday_date for h in self._holidays.list_between(ctx.customer_id, work_date, work_date)}

    def _require_record(self, ctx: TenantContext, attendance_id: int) -> AttendanceRecord:
        rec = self._attendance.get_by_id(ctx.customer_id, int(attendance_id))
        if not rec:
            raise NotFoundError("Attendance record not found")
        return rec

    # -------- Settings --------
    def get_settings(self, ctx: TenantContext) -> AttendanceSettings:
        return self._settings.get(ctx.customer_id) or AttendanceSettings(customer_id=ctx.customer_id)

    def update_settings(
        self,
        ctx: TenantContext,
        *,
        work_start_time: Optional[time] = None,
        late_threshold_minutes: Optional[int] = None,
        geofencing_enabled: Optional[bool] = None,
        photo_verification_enabled: Optional[bool] = None,
    ) -> AttendanceSettings:
        current = self.get_settings(ctx)
        changes: dict = {}
        if work_start_time is not None:
            changes["work_start_time"] = work_start_time
        if late_threshold_minutes is not None:
            changes["late_threshold_minutes"] = require_int_in_range(
                late_threshold_minutes, "Late threshold", 0, MAX_LATE_THRESHOLD_MINUTES
            )
        if geofencing_enabled is not None:
            changes["geofencing_enabled"] = require_bool(geofencing_enabled, "Geofencing")
        if photo_verification_enabled is not None:
            changes["photo_verification_enabled"] = require_bool(photo_verification_enabled, "Photo verification")

        updated = replace(current, **changes)
        self._settings.upsert(updated)
        logger.info("Attendance settings updated for customer %s: %s", ctx.customer_id, sorted(changes))
        return updated

    def derive_status(
        self,
        ctx: TenantContext,
        *,
        work_date: date,
        check_in: Optional[datetime],
        now: Optional[datetime] = None,
    ) -> AttendanceStatus:
        decision = self._factory.derive(
            check_in=check_in,
            work_date=work_date,
            now=now or now_local(),
            settings=self.get_settings(ctx),
        )
        return decision.status

    # -------- Self service --------
    def check_in(self, ctx: TenantContext, *, now: Optional[datetime] = None, selfie_path: Optional[str] = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()
        employee_id = ctx.require_employee()
        self._require_employee(ctx, employee_id)

        existing = self._attendance.get_for_employee_and_date(ctx.customer_id, employee_id, today)
        if existing and existing.check_in_time is not None:
            raise ValidationError("You have already checked in today")
        if existing and not _is_placeholder(existing):
            raise ValidationError("Attendance for today has already been recorded")

        settings = self.get_settings(ctx)
        strategy = self._factory.for_checkin(check_in=now, work_date=today, now=now, settings=settings)
        decision = strategy.decide_checkin(check_in=now, work_date=today, now=now, settings=settings)

        if existing:
            # A backfilled placeholder is replaced by the real check-in.
            self._attendance.update_record(
                customer_id=ctx.customer_id,
                attendance_id=existing.attendance_id,
                check_in_time=now,
                check_out_time=None,
                status=decision.status,
                notes=decision.note,
                selfie_path=selfie_path,
            )
            attendance_id = existing.attendance_id
            change = ChangeType.UPDATE
        else:
            attendance_id = self._attendance.create(
                customer_id=ctx.customer_id,
                employee_id=employee_id,
                work_date=today,
                check_in_time=now,
                check_out_time=None,
                status=decision.status,
                notes=decision.note,
                selfie_path=selfie_path,
            )
            change = ChangeType.INSERT

        logger.info("Employee %s checked in at %s as %s", employee_id, now.strftime("%H:%M"), decision.status.value)
        self._emit(change, ctx, attendance_id, employee_id=employee_id)
        return AttendanceRecord(
            attendance_id=attendance_id,
            customer_id=ctx.customer_id,
            employee_id=employee_id,
            work_date=today,
            check_in_time=now,
            check_out_time=None,
            status=decision.status,
            notes=decision.note,
            selfie_path=selfie_path,
        )

    def check_out(self, ctx: TenantContext, *, now: Optional[datetime] = None) -> AttendanceRecord:
        now = now or now_local()
        today = now.date()
        employee_id = ctx.require_employee()

        record = self._attendance.get_for_employee_and_date(ctx.customer_id, employee_id, today)
        if not record or record.check_in_time is None:
            raise ValidationError("You need to check in before checking out")
        if record.check_out_time is not None:
            raise ValidationError("You have already checked out today")

        settings = self.get_settings(ctx)
        strategy = self._factory.for_checkin(check_in=record.check_in_time, work_date=today, now=now, settings=settings)
        decision = strategy.decide_checkout(now=now, current=record.status)

        self._attendance.update_checkout(
            customer_id=ctx.customer_id,
            attendance_id=record.attendance_id,
            check_out_time=now,
            status=decision.status,
            notes=decision.note or record.notes,
        )
        logger.info("Employee %s checked out at %s", employee_id, now.strftime("%H:%M"))
        self._emit(ChangeType.UPDATE, ctx, record.attendance_id, employee_id=employee_id)
        return replace(record, check_out_time=now, status=decision.status, notes=decision.note or record.notes)

    def get_today_record(self, ctx: TenantContext, *, today: Optional[date] = None) -> Optional[AttendanceRecord]:
        employee_id = ctx.require_employee()
        return self._attendance.get_for_employee_and_date(ctx.customer_id, employee_id, today or now_local().date())

    # -------- Manual management --------
    def add_record(
        self,
        ctx: TenantContext,
        *,
        employee_id: int,
        work_date: date,
        check_in: Optional[time] = None,
        check_out: Optional[time] = None,
        status: Optional[AttendanceStatus] = None,
        notes: Optional[str] = None,
        selfie_path: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        self._require_employee(ctx, employee_id)
        if self._attendance.get_for_employee_and_date(ctx.customer_id, int(employee_id), work_date):
            raise ValidationError("An attendance record already exists for this employee and day")

        check_in_dt = _combine(work_date, check_in)
        check_out_dt = _combine(work_date, check_out)
        if check_out_dt and not check_in_dt:
            raise ValidationError("Check-out requires a check-in time")
        if check_in_dt and check_out_dt and check_out_dt < check_in_dt:
            raise ValidationError("Check-out cannot be earlier than check-in")

        if status is None:
            status = self.derive_status(ctx, work_date=work_date, check_in=check_in_dt, now=now)

        attendance_id = self._attendance.create(
            customer_id=ctx.customer_id,
            employee_id=int(employee_id),
            work_date=work_date,
            check_in_time=check_in_dt,
            check_out_time=check_out_dt,
            status=status,
            notes=(notes or "").strip() or None,
            selfie_path=selfie_path,
        )
        self._emit(ChangeType.INSERT, ctx, attendance_id, employee_id=int(employee_id))
        return attendance_id

    def update_record(
        self,
        ctx: TenantContext,
        attendance_id: int,
        *,
        check_in=_KEEP,
        check_out=_KEEP,
        status=_KEEP,
        notes=_KEEP,
    ) -> AttendanceRecord:
        """Edit a record; arguments left out keep their stored value."""
        rec = self._require_record(ctx, attendance_id)

        check_in_dt = rec.check_in_time if check_in is _KEEP else _combine(rec.work_date, check_in)
        check_out_dt = rec.check_out_time if check_out is _KEEP else _combine(rec.work_date, check_out)
        new_status = rec.status if status is _KEEP else AttendanceStatus(status)
        new_notes = rec.notes if notes is _KEEP else ((notes or "").strip() or None)

        if check_in_dt and check_out_dt and check_out_dt < check_in_dt:
            raise ValidationError("Check-out cannot be earlier than check-in")

        ok = self._attendance.update_record(
            customer_id=ctx.customer_id,
            attendance_id=rec.attendance_id,
            check_in_time=check_in_dt,
            check_out_time=check_out_dt,
            status=new_status,
            notes=new_notes,
            selfie_path=rec.selfie_path,
        )
        if not ok:
            raise ValidationError("Updating attendance failed")
        self._emit(ChangeType.UPDATE, ctx, rec.attendance_id, employee_id=rec.employee_id)
        return replace(rec, check_in_time=check_in_dt, check_out_time=check_out_dt, status=new_status, notes=new_notes)

    def update_status(self, ctx: TenantContext, *, employee_id: int, work_date: date, status: AttendanceStatus) -> AttendanceRecord:
        rec = self._attendance.get_for_employee_and_date(ctx.customer_id, int(employee_id), work_date)
        if not rec:
            raise NotFoundError("Attendance record not found")
        return self.update_record(ctx, rec.attendance_id, status=status)

    def delete_record(self, ctx: TenantContext, attendance_id: int) -> None:
        rec = self._require_record(ctx, attendance_id)
        if not self._attendance.delete(ctx.customer_id, rec.attendance_id):
            raise ValidationError("Deleting attendance failed")
        logger.info("Deleted attendance %s of employee %s", rec.attendance_id, rec.employee_id)
        self._emit(ChangeType.DELETE, ctx, rec.attendance_id, employee_id=rec.employee_id)

    # -------- Listings and summaries --------
    def list_records(
        self,
        ctx: TenantContext,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[AttendanceReportRow]:
        if end < start:
            raise ValidationError("End date must not be before start date")
        return self._attendance.get_report_rows(customer_id=ctx.customer_id, start_date=start, end_date=end, employee_id=employee_id)

    def list_my_records(self, ctx: TenantContext, *, start: date, end: date) -> Sequence[AttendanceReportRow]:
        return self.list_records(ctx, start=start, end=end, employee_id=ctx.require_employee())

    def day_records(
        self,
        ctx: TenantContext,
        work_date: date,
        *,
        now: Optional[datetime] = None,
        include_missing: bool = True,
    ) -> list[AttendanceRecord]:
        """Stored records of a day, plus unsaved placeholders for employees with none."""
        records = list(self._attendance.list_for_date(ctx.customer_id, work_date))
        if include_missing:
            records.extend(
                self._policy.backfill(
                    employees=self._employees.list_all(ctx.customer_id),
                    records=records,
                    work_date=work_date,
                    now=now or now_local(),
                    settings=self.get_settings(ctx),
                    holidays=self._holiday_dates(ctx, work_date),
                )
            )
        return records

    def daily_summary(
        self,
        ctx: TenantContext,
        work_date: date,
        *,
        now: Optional[datetime] = None,
        include_missing: bool = True,
    ) -> AttendanceCounts:
        return count_attendance(self.day_records(ctx, work_date, now=now, include_missing=include_missing))

    def backfill_day(self, ctx: TenantContext, work_date: date, *, now: Optional[datetime] = None) -> int:
        """Persist placeholders for employees with no record; returns how many were written."""
        now = now or now_local()
        existing = self._attendance.list_for_date(ctx.customer_id, work_date)
        placeholders = self._policy.backfill(
            employees=self._employees.list_all(ctx.customer_id),
            records=existing,
            work_date=work_date,
            now=now,
            settings=self.get_settings(ctx),
            holidays=self._holiday_dates(ctx, work_date),
        )
        for p in placeholders:
            attendance_id = self._attendance.create(
                customer_id=ctx.customer_id,
                employee_id=p.employee_id,
                work_date=work_date,
                check_in_time=None,
                check_out_time=None,
                status=p.status,
            )
            self._emit(ChangeType.INSERT, ctx, attendance_id, employee_id=p.employee_id)
        if placeholders:
            logger.info("Backfilled %s attendance rows for %s (customer %s)", len(placeholders), work_date, ctx.customer_id)
        return len(placeholders)

    def build_report(
        self,
        ctx: TenantContext,
        *,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> ReportData:
        query_rows = self.list_records(ctx, start=start, end=end, employee_id=employee_id)

        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for r in query_rows:
            minutes = 0
            if r.check_in_time and r.check_out_time:
                minutes = max(int((r.check_out_time - r.check_in_time).total_seconds() // 60), 0)

            row = report_row_to_dict(r)
            row["work_hours"] = format_duration(minutes) if r.check_out_time else "-"
            out_rows.append(row)

            s = summary_map.get(r.employee_id)
            if not s:
                s = {
                    "employee_id": r.employee_id,
                    "employee_code": r.employee_code,
                    "employee_name": r.employee_name,
                    "total_minutes": 0,
                    "days": 0,
                }
                summary_map[r.employee_id] = s
            s["total_minutes"] += minutes
            s["days"] += 1

        summary = []
        for s in sorted(summary_map.values(), key=lambda x: x["total_minutes"], reverse=True):
            summary.append(
                {
                    "employee_id": s["employee_id"],
                    "employee_code": s["employee_code"],
                    "employee_name": s["employee_name"],
                    "days": s["days"],
                    "total_hours": format_duration(s["total_minutes"]),
                }
            )
        return ReportData(rows=out_rows, summary=summary)

    def export_csv(self, ctx: TenantContext, *, start: date, end: date, employee_id: Optional[int] = None) -> str:
        report = self.build_report(ctx, start=start, end=end, employee_id=employee_id)
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(["Employee ID", "Name", "Date", "Check In", "Check Out", "Work Hours", "Status", "Notes"])
        for r in report.rows:
            writer.writerow(
                [r["employee_code"], r["employee_name"], r["date"], r["check_in"], r["check_out"], r["work_hours"], r["status"], r["notes"]]
            )
        return buf.getvalue()
