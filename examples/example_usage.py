"""Example: use the service layer directly, without Flask.

Controllers stay thin; the same services answer here for tenant 1.
"""

import importlib
from datetime import date

from config import get_settings_module

from src.nexhr.nexhr.container import build_container
from src.nexhr.nexhr.core.context import TenantContext


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, absent_cutoff_hour=settings.ABSENT_CUTOFF_HOUR)
    ctx = TenantContext(customer_id=1)

    print(container.live_analytics.summary(ctx.customer_id).to_dict())
    print(container.attendance_service.daily_summary(ctx, date.today()))
    container.live_analytics.close()


if __name__ == "__main__":
    main()
