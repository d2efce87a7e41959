from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import RequestStatus


@dataclass(frozen=True)
class Expense:
    expense_id: int
    customer_id: int
    employee_id: int
    description: str
    category: str
    amount: float
    submission_date: date
    status: RequestStatus = RequestStatus.PENDING
    bill_path: Optional[str] = None
    decided_by: Optional[int] = None
    decided_at: Optional[datetime] = None


@dataclass(frozen=True)
class ExpenseCategory:
    name: str
    count: int
    amount: float
