from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Holiday:
    """A tenant-wide day off; nobody is expected to check in."""

    holiday_id: int
    customer_id: int
    holiday_date: date
    name: str = ""
