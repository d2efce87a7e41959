from __future__ import annotations

from ..model import SalaryRecord
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: sum of allowances - sum of deductions, not below 0."""

    def net_pay(self, salary: SalaryRecord) -> float:
        net = salary.allowances.gross - salary.deductions.total
        return round(max(net, 0.0), 2)
