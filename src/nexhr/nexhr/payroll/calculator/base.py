from __future__ import annotations

from abc import ABC, abstractmethod

from ..model import SalaryRecord


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def net_pay(self, salary: SalaryRecord) -> float:
        raise NotImplementedError
