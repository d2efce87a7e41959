from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Holiday


class HolidayRepository(Protocol):
    def add(self, *, customer_id: int, holiday_date: date, name: str) -> int:
        raise NotImplementedError

    def get_by_date(self, customer_id: int, holiday_date: date) -> Optional[Holiday]:
        raise NotImplementedError

    def list_between(self, customer_id: int, start: date, end: date) -> Sequence[Holiday]:
        """Holidays in ``[start, end]``, oldest first."""
        raise NotImplementedError

    def delete(self, customer_id: int, holiday_id: int) -> bool:
        raise NotImplementedError
