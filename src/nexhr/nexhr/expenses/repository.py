from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import Expense


class ExpenseRepository(Protocol):
    def create(
        self,
        *,
        customer_id: int,
        employee_id: int,
        description: str,
        category: str,
        amount: float,
        submission_date: date,
        bill_path: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, customer_id: int, expense_id: int) -> Optional[Expense]:
        raise NotImplementedError

    def list_expenses(
        self,
        customer_id: int,
        *,
        status: Optional[RequestStatus] = None,
        employee_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[Expense]:
        """Newest submission first."""
        raise NotImplementedError

    def decide(
        self,
        *,
        customer_id: int,
        expense_id: int,
        status: RequestStatus,
        decided_by: int,
        decided_at: datetime,
    ) -> bool:
        """Only PENDING expenses may be decided; returns False otherwise."""
        raise NotImplementedError

    def delete(self, customer_id: int, expense_id: int) -> bool:
        raise NotImplementedError
