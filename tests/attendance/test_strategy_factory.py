from datetime import date, datetime, time

from src.nexhr.nexhr.attendance.factory import AttendanceStrategyFactory
from src.nexhr.nexhr.attendance.model import AttendanceSettings
from src.nexhr.nexhr.attendance.strategies.absent_strategy import AbsentStrategy
from src.nexhr.nexhr.attendance.strategies.late_strategy import LateStrategy
from src.nexhr.nexhr.attendance.strategies.not_marked_strategy import NotMarkedStrategy
from src.nexhr.nexhr.attendance.strategies.present_strategy import PresentStrategy
from src.nexhr.nexhr.core.enums import AttendanceStatus

SETTINGS = AttendanceSettings(customer_id=1, work_start_time=time(9, 0), late_threshold_minutes=30)
DAY = date(2025, 1, 6)


def _derive(check_in, now, work_date=DAY, settings=SETTINGS):
    return AttendanceStrategyFactory().derive(check_in=check_in, work_date=work_date, now=now, settings=settings)


def test_factory_checkin_at_threshold_is_present():
    now = datetime(2025, 1, 6, 9, 30)
    strategy = AttendanceStrategyFactory().for_checkin(check_in=now, work_date=DAY, now=now, settings=SETTINGS)

    assert isinstance(strategy, PresentStrategy)
    assert _derive(now, now).status == AttendanceStatus.PRESENT


def test_factory_checkin_after_threshold_is_late():
    now = datetime(2025, 1, 6, 9, 31)
    strategy = AttendanceStrategyFactory().for_checkin(check_in=now, work_date=DAY, now=now, settings=SETTINGS)

    assert isinstance(strategy, LateStrategy)
    decision = _derive(now, now)
    assert decision.status == AttendanceStatus.LATE
    assert decision.note == "Late by 1 min"


def test_missing_threshold_falls_back_to_thirty_minutes():
    settings = AttendanceSettings(customer_id=1, work_start_time=time(10, 0), late_threshold_minutes=None)

    assert _derive(datetime(2025, 1, 6, 10, 30), datetime(2025, 1, 6, 11, 0), settings=settings).status == AttendanceStatus.PRESENT
    assert _derive(datetime(2025, 1, 6, 10, 31), datetime(2025, 1, 6, 11, 0), settings=settings).status == AttendanceStatus.LATE


def test_late_window_crossing_midnight_keeps_evening_checkin_present():
    settings = AttendanceSettings(customer_id=1, work_start_time=time(23, 45), late_threshold_minutes=30)
    evening = datetime(2025, 1, 6, 23, 50)

    assert settings.late_deadline(DAY) == datetime(2025, 1, 7, 0, 15)
    assert _derive(evening, evening, settings=settings).status == AttendanceStatus.PRESENT
    assert _derive(datetime(2025, 1, 7, 0, 20), evening, settings=settings).note == "Late by 5 min"


def test_no_checkin_on_past_day_is_absent():
    strategy = AttendanceStrategyFactory().for_checkin(
        check_in=None, work_date=date(2025, 1, 5), now=datetime(2025, 1, 6, 8, 0), settings=SETTINGS
    )
    assert isinstance(strategy, AbsentStrategy)


def test_no_checkin_today_before_noon_is_not_marked():
    strategy = AttendanceStrategyFactory().for_checkin(
        check_in=None, work_date=DAY, now=datetime(2025, 1, 6, 11, 59), settings=SETTINGS
    )
    assert isinstance(strategy, NotMarkedStrategy)
    assert _derive(None, datetime(2025, 1, 6, 11, 59)).status == AttendanceStatus.NOT_MARKED


def test_no_checkin_today_from_noon_is_absent():
    assert _derive(None, datetime(2025, 1, 6, 12, 0)).status == AttendanceStatus.ABSENT


def test_no_checkin_on_future_day_is_not_marked():
    assert _derive(None, datetime(2025, 1, 6, 15, 0), work_date=date(2025, 1, 7)).status == AttendanceStatus.NOT_MARKED


def test_cutoff_is_configurable():
    factory = AttendanceStrategyFactory(absent_cutoff=time(10, 0))
    decision = factory.derive(check_in=None, work_date=DAY, now=datetime(2025, 1, 6, 10, 0), settings=SETTINGS)

    assert decision.status == AttendanceStatus.ABSENT


def test_checkout_keeps_status_decided_at_checkin():
    late = LateStrategy().decide_checkout(now=datetime(2025, 1, 6, 18, 0), current=AttendanceStatus.LATE)
    assert late.status == AttendanceStatus.LATE
