from __future__ import annotations

import time
from datetime import date, datetime, timedelta, timezone

import pytest
from google.cloud.firestore_v1._helpers import decode_value, encode_value

from src.school_portal.school_portal.database.firestore_base import as_date, as_datetime, date_key


@pytest.fixture(params=["America/New_York", "Europe/Rome", "Asia/Tokyo"])
def host_tz(request, monkeypatch):
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", request.param)
    time.tzset()
    yield request.param
    monkeypatch.undo()
    time.tzset()


def _stored(value):
    return decode_value(encode_value(value), None)


def test_stored_date_reads_back_same_day(host_tz):
    day = date(2026, 2, 7)

    assert as_date(_stored(date_key(day))) == day


def test_stored_wall_clock_time_reads_back_unchanged(host_tz):
    checked_in = datetime(2026, 2, 7, 15, 4, 30)

    assert as_datetime(_stored(checked_in)) == checked_in


def test_edit_form_resave_keeps_the_date(host_tz):
    day = date(2026, 3, 1)
    for _ in range(3):
        day = as_date(_stored(date_key(day)))

    assert day == date(2026, 3, 1)


def test_aware_values_are_normalised_to_utc():
    rome = timezone(timedelta(hours=1))

    assert as_datetime(datetime(2026, 2, 7, 16, 0, tzinfo=rome)) == datetime(2026, 2, 7, 15, 0)
    assert as_datetime("2026-02-07T16:00:00+01:00") == datetime(2026, 2, 7, 15, 0)
    assert as_datetime("2026-02-07T15:00:00Z") == datetime(2026, 2, 7, 15, 0)


def test_naive_and_plain_date_values_pass_through():
    assert as_datetime(datetime(2026, 2, 7, 9, 30)) == datetime(2026, 2, 7, 9, 30)
    assert as_datetime(date(2026, 2, 7)) == datetime(2026, 2, 7)
    assert as_datetime(None) is None
    assert as_datetime("") is None
