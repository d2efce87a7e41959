from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def create(
        self,
        *,
        customer_id: int,
        employee_id: int,
        leave_type: str,
        start_date: date,
        end_date: date,
        reason: str,
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, customer_id: int, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list_requests(
        self,
        customer_id: int,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        customer_id: int,
        request_id: int,
        status: RequestStatus,
        decided_by: int,
        decided_at: datetime,
        admin_note: Optional[str] = None,
    ) -> bool:
        """Only PENDING requests may be decided; returns False otherwise."""
        raise NotImplementedError
