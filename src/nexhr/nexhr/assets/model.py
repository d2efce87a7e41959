from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.enums import AssetStatus


@dataclass(frozen=True)
class Asset:
    asset_id: int
    customer_id: int
    name: str
    asset_type: str
    serial_number: str
    status: AssetStatus
    value: float
    purchase_date: Optional[date] = None
    employee_id: Optional[int] = None
    bill_path: Optional[str] = None


@dataclass(frozen=True)
class AssetStats:
    total: int = 0
    total_value: float = 0.0
    assigned: int = 0
    available: int = 0
    in_maintenance: int = 0

    def share(self, count: int) -> int:
        """Whole-number percentage of ``total``; 0 for an empty inventory."""
        if self.total == 0:
            return 0
        return int(count * 100 / self.total + 0.5)
