from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.context import TenantContext
from ..core.enums import ChangeType, RequestStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..realtime.notifier import ChangeNotifier
from .model import LeaveRequest
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

TABLE = "leave_requests"


def leave_to_dict(r: LeaveRequest) -> dict:
    return {
        "request_id": r.request_id,
        "employee_id": r.employee_id,
        "leave_type": r.leave_type,
        "start_date": r.start_date.strftime("%Y-%m-%d"),
        "end_date": r.end_date.strftime("%Y-%m-%d"),
        "days": r.days,
        "reason": r.reason,
        "status": r.status.value,
        "created_at": r.created_at.strftime("%Y-%m-%d %H:%M"),
        "admin_note": r.admin_note or "",
    }


class LeaveService:
    def __init__(
        self,
        leaves: LeaveRepository,
        employees: EmployeeRepository,
        *,
        notifier: Optional[ChangeNotifier] = None,
    ):
        self._leaves = leaves
        self._employees = employees
        self._notifier = notifier

    def _emit(self, change_type: ChangeType, ctx: TenantContext, request_id: int, **payload) -> None:
        if self._notifier:
            self._notifier.emit(TABLE, change_type, customer_id=ctx.customer_id, record_id=request_id, **payload)

    def apply_leave(
        self,
        ctx: TenantContext,
        *,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        now: Optional[datetime] = None,
    ) -> int:
        employee_id = ctx.require_employee()
        if not self._employees.get_by_id(ctx.customer_id, employee_id):
            raise NotFoundError("Employee not found")

        if end_date < start_date:
            raise ValidationError("End date must be on or after the start date")

        leave_type = require_non_empty(leave_type, "Leave type")
        reason = require_non_empty(reason, "Reason")
        request_id = self._leaves.create(
            customer_id=ctx.customer_id,
            employee_id=employee_id,
            leave_type=leave_type,
            start_date=start_date,
            end_date=end_date,
            reason=reason,
            created_at=now or now_local(),
        )
        logger.info("Employee %s applied for %s leave %s..%s", employee_id, leave_type, start_date, end_date)
        self._emit(ChangeType.INSERT, ctx, request_id, employee_id=employee_id)
        return request_id

    def _decide(
        self,
        ctx: TenantContext,
        *,
        request_id: int,
        status: RequestStatus,
        admin_note: str,
        now: Optional[datetime],
    ) -> None:
        decided_by = ctx.require_employee()
        request = self._leaves.get_by_id(ctx.customer_id, int(request_id))
        if not request:
            raise NotFoundError("Leave request not found")
        if request.status != RequestStatus.PENDING:
            raise ValidationError("Only pending requests can be decided")

        ok = self._leaves.decide(
            customer_id=ctx.customer_id,
            request_id=request.request_id,
            status=status,
            decided_by=decided_by,
            decided_at=now or now_local(),
            admin_note=(admin_note or "").strip() or None,
        )
        if not ok:
            raise ValidationError("Only pending requests can be decided")
        logger.info("Leave request %s %s by %s", request.request_id, status.value.lower(), decided_by)
        self._emit(ChangeType.UPDATE, ctx, request.request_id, status=status.value)

    def approve_leave(self, ctx: TenantContext, *, request_id: int, admin_note: str = "", now: Optional[datetime] = None) -> None:
        self._decide(ctx, request_id=request_id, status=RequestStatus.APPROVED, admin_note=admin_note, now=now)

    def reject_leave(self, ctx: TenantContext, *, request_id: int, admin_note: str = "", now: Optional[datetime] = None) -> None:
        self._decide(ctx, request_id=request_id, status=RequestStatus.REJECTED, admin_note=admin_note, now=now)

    def list_leaves(self, ctx: TenantContext, *, status: Optional[RequestStatus] = None) -> Sequence[LeaveRequest]:
        return self._leaves.list_requests(ctx.customer_id, status=status, limit=500)

    def list_my_leaves(self, ctx: TenantContext) -> Sequence[LeaveRequest]:
        return self._leaves.list_requests(ctx.customer_id, employee_id=ctx.require_employee(), limit=200)
