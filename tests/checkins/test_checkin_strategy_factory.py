from datetime import date, datetime

from src.school_portal.school_portal.checkins.factory import CheckInStrategyFactory
from src.school_portal.school_portal.checkins.strategies.late_strategy import LateStrategy
from src.school_portal.school_portal.checkins.strategies.normal_strategy import NormalStrategy
from src.school_portal.school_portal.core.enums import CheckInStatus, Turno


def test_factory_checkin_on_time_within_grace():
    today = date(2026, 2, 7)  # Saturday
    now = datetime(2026, 2, 7, 15, 10, 0)

    factory = CheckInStrategyFactory()
    strategy = factory.for_checkin(now=now, today=today, turno=Turno.SABATO_POMERIGGIO, grace_minutes=10)

    assert isinstance(strategy, NormalStrategy)


def test_factory_checkin_late_after_grace():
    today = date(2026, 2, 7)
    now = datetime(2026, 2, 7, 15, 11, 0)

    factory = CheckInStrategyFactory()
    strategy = factory.for_checkin(now=now, today=today, turno=Turno.SABATO_POMERIGGIO, grace_minutes=10)

    assert isinstance(strategy, LateStrategy)


def test_factory_never_late_on_a_day_without_lesson():
    today = date(2026, 2, 9)  # Monday
    now = datetime(2026, 2, 9, 23, 0, 0)

    strategy = CheckInStrategyFactory().for_checkin(
        now=now, today=today, turno=Turno.DOMENICA_MATTINA, grace_minutes=10
    )

    assert isinstance(strategy, NormalStrategy)


def test_factory_never_late_without_slot():
    strategy = CheckInStrategyFactory().for_checkin(
        now=datetime(2026, 2, 7, 23, 0), today=date(2026, 2, 7), turno=None, grace_minutes=0
    )

    assert isinstance(strategy, NormalStrategy)


def test_late_minutes_count_from_slot_start():
    decision = LateStrategy().decide_checkin(
        now=datetime(2026, 2, 8, 9, 55, 30),
        today=date(2026, 2, 8),
        turno=Turno.DOMENICA_MATTINA,
        grace_minutes=10,
    )

    assert decision.status == CheckInStatus.LATE
    assert decision.is_late is True
    assert decision.late_minutes == 25


def test_checkout_keeps_lateness():
    current = LateStrategy().decide_checkin(
        now=datetime(2026, 2, 7, 18, 20), today=date(2026, 2, 7), turno=Turno.SABATO_SERA, grace_minutes=10
    )

    out = CheckInStrategyFactory().for_checkout().decide_checkout(now=datetime(2026, 2, 7, 20, 0), current=current)

    assert out.status == CheckInStatus.CHECKED_OUT
    assert out.is_late is True
    assert out.late_minutes == 20
