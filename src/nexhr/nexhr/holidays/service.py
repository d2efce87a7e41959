from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.validators import optional_text
from ..core.context import TenantContext
from ..core.enums import ChangeType
from ..core.exceptions import NotFoundError, ValidationError
from ..realtime.notifier import ChangeNotifier
from .model import Holiday
from .repository import HolidayRepository

logger = logging.getLogger(__name__)

TABLE = "holidays"


def holiday_to_dict(h: Holiday) -> dict:
    return {
        "holiday_id": h.holiday_id,
        "date": h.holiday_date.strftime("%Y-%m-%d"),
        "name": h.name,
    }


class HolidayService:
    """Use case: maintain the tenant's holiday calendar."""

    def __init__(self, holidays: HolidayRepository, *, notifier: Optional[ChangeNotifier] = None):
        self._holidays = holidays
        self._notifier = notifier

    def _emit(self, change_type: ChangeType, ctx: TenantContext, holiday_id: int) -> None:
        if self._notifier:
            self._notifier.emit(TABLE, change_type, customer_id=ctx.customer_id, record_id=holiday_id)

    def add_holiday(self, ctx: TenantContext, *, holiday_date: date, name: str = "") -> int:
        if self._holidays.get_by_date(ctx.customer_id, holiday_date):
            raise ValidationError(f"{holiday_date:%Y-%m-%d} is already a holiday")
        holiday_id = self._holidays.add(customer_id=ctx.customer_id, holiday_date=holiday_date, name=optional_text(name))
        logger.info("Holiday %s added for customer %s", holiday_date, ctx.customer_id)
        self._emit(ChangeType.INSERT, ctx, holiday_id)
        return holiday_id

    def list_holidays(self, ctx: TenantContext, *, year: int) -> Sequence[Holiday]:
        return self._holidays.list_between(ctx.customer_id, date(int(year), 1, 1), date(int(year), 12, 31))

    def is_holiday(self, ctx: TenantContext, day: date) -> bool:
        return self._holidays.get_by_date(ctx.customer_id, day) is not None

    def delete_holiday(self, ctx: TenantContext, holiday_id: int) -> None:
        if not self._holidays.delete(ctx.customer_id, int(holiday_id)):
            raise NotFoundError("Holiday not found")
        self._emit(ChangeType.DELETE, ctx, int(holiday_id))
