from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .exceptions import ValidationError


@dataclass(frozen=True)
class TenantContext:
    """Who is acting and on behalf of which customer.

    Passed explicitly into every service call; repositories filter every
    read and write by ``customer_id``.
    """

    customer_id: int
    employee_id: Optional[int] = None

    def require_employee(self) -> int:
        if self.employee_id is None:
            raise ValidationError("An employee login is required for this action")
        return int(self.employee_id)
