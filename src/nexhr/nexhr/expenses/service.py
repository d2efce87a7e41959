from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, require_non_empty, require_non_negative
from ..core.context import TenantContext
from ..core.enums import ChangeType, RequestStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..realtime.notifier import ChangeNotifier
from .model import Expense, ExpenseCategory
from .repository import ExpenseRepository

logger = logging.getLogger(__name__)

TABLE = "expenses"


def expense_to_dict(e: Expense) -> dict:
    return {
        "expense_id": e.expense_id,
        "employee_id": e.employee_id,
        "description": e.description,
        "category": e.category,
        "amount": e.amount,
        "date": e.submission_date.strftime("%Y-%m-%d"),
        "status": e.status.value,
        "bill_path": e.bill_path,
    }


def category_breakdown(expenses: Sequence[Expense]) -> list[ExpenseCategory]:
    """Count and total per category, largest total first; ties keep first-seen order."""
    counts: dict[str, int] = {}
    totals: dict[str, float] = {}
    for e in expenses:
        counts[e.category] = counts.get(e.category, 0) + 1
        totals[e.category] = totals.get(e.category, 0.0) + e.amount
    rows = [ExpenseCategory(name=name, count=counts[name], amount=round(totals[name], 2)) for name in counts]
    return sorted(rows, key=lambda c: -c.amount)


class ExpenseService:
    def __init__(
        self,
        expenses: ExpenseRepository,
        employees: EmployeeRepository,
        *,
        notifier: Optional[ChangeNotifier] = None,
    ):
        self._expenses = expenses
        self._employees = employees
        self._notifier = notifier

    def _emit(self, change_type: ChangeType, ctx: TenantContext, expense_id: int, **payload) -> None:
        if self._notifier:
            self._notifier.emit(TABLE, change_type, customer_id=ctx.customer_id, record_id=expense_id, **payload)

    def _require_expense(self, ctx: TenantContext, expense_id: int) -> Expense:
        expense = self._expenses.get_by_id(ctx.customer_id, int(expense_id))
        if not expense:
            raise NotFoundError("Expense not found")
        return expense

    def submit_expense(
        self,
        ctx: TenantContext,
        *,
        description: str,
        category: str,
        amount,
        expense_date: Optional[date] = None,
        bill_path: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> int:
        employee_id = ctx.require_employee()
        if not self._employees.get_by_id(ctx.customer_id, employee_id):
            raise NotFoundError("Employee not found")

        amount = require_non_negative(amount, "Amount")
        if amount == 0:
            raise ValidationError("Amount must be greater than zero")

        expense_id = self._expenses.create(
            customer_id=ctx.customer_id,
            employee_id=employee_id,
            description=optional_text(description),
            category=require_non_empty(category, "Category"),
            amount=round(amount, 2),
            submission_date=expense_date or (now or now_local()).date(),
            bill_path=optional_text(bill_path) or None,
        )
        logger.info("Employee %s submitted expense %s (%.2f)", employee_id, expense_id, amount)
        self._emit(ChangeType.INSERT, ctx, expense_id, employee_id=employee_id)
        return expense_id

    def _decide(self, ctx: TenantContext, expense_id: int, status: RequestStatus, now: Optional[datetime]) -> None:
        decided_by = ctx.require_employee()
        expense = self._require_expense(ctx, expense_id)
        if expense.status != RequestStatus.PENDING:
            raise ValidationError("Only pending expenses can be decided")

        ok = self._expenses.decide(
            customer_id=ctx.customer_id,
            expense_id=expense.expense_id,
            status=status,
            decided_by=decided_by,
            decided_at=now or now_local(),
        )
        if not ok:
            raise ValidationError("Only pending expenses can be decided")
        logger.info("Expense %s %s by %s", expense.expense_id, status.value.lower(), decided_by)
        self._emit(ChangeType.UPDATE, ctx, expense.expense_id, status=status.value)

    def approve_expense(self, ctx: TenantContext, expense_id: int, *, now: Optional[datetime] = None) -> None:
        self._decide(ctx, expense_id, RequestStatus.APPROVED, now)

    def reject_expense(self, ctx: TenantContext, expense_id: int, *, now: Optional[datetime] = None) -> None:
        self._decide(ctx, expense_id, RequestStatus.REJECTED, now)

    def withdraw_expense(self, ctx: TenantContext, expense_id: int) -> None:
        """The submitter may delete a claim while it is still pending."""
        expense = self._require_expense(ctx, expense_id)
        if expense.employee_id != ctx.require_employee():
            raise NotFoundError("Expense not found")
        if expense.status != RequestStatus.PENDING:
            raise ValidationError("Only pending expenses can be withdrawn")
        if not self._expenses.delete(ctx.customer_id, expense.expense_id):
            raise ValidationError("Withdrawing the expense failed")
        self._emit(ChangeType.DELETE, ctx, expense.expense_id)

    def list_expenses(
        self,
        ctx: TenantContext,
        *,
        status: Optional[RequestStatus] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[Expense]:
        if start and end and end < start:
            raise ValidationError("End date must not be before start date")
        return self._expenses.list_expenses(ctx.customer_id, status=status, start=start, end=end)

    def list_my_expenses(self, ctx: TenantContext) -> Sequence[Expense]:
        return self._expenses.list_expenses(ctx.customer_id, employee_id=ctx.require_employee())

    def expense_categories(
        self,
        ctx: TenantContext,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[ExpenseCategory]:
        """Approved spending per category."""
        return category_breakdown(self.list_expenses(ctx, status=RequestStatus.APPROVED, start=start, end=end))
