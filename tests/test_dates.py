from datetime import date, datetime

import pendulum
import pytest

from ofertas.errors import ClockError
from ofertas.utils import dates

UTC_MINUS_3 = pendulum.timezone(-3 * 3600)


def test_day_start_is_local_midnight_in_utc():
    now = pendulum.datetime(2024, 5, 10, 23, 59, tz=UTC_MINUS_3)
    assert dates.day_start_utc(now) == datetime(2024, 5, 10, 3, 0)


def test_day_start_from_utc_reading_after_local_midnight():
    # 02:30 UTC is still the previous day at UTC-3
    now = pendulum.datetime(2024, 5, 11, 2, 30, tz="UTC")
    assert dates.day_start_utc(now) == datetime(2024, 5, 10, 3, 0)
    assert dates.day_key(now) == date(2024, 5, 10)


def test_minutes_apart_across_midnight_are_different_days():
    before = pendulum.datetime(2024, 5, 10, 23, 59, tz=UTC_MINUS_3)
    after = pendulum.datetime(2024, 5, 11, 0, 1, tz=UTC_MINUS_3)
    assert dates.day_key(before) != dates.day_key(after)
    assert dates.to_utc_naive(before) < dates.day_start_utc(after)


def test_offset_is_configurable(monkeypatch):
    monkeypatch.setenv("DAY_UTC_OFFSET_HOURS", "0")
    now = pendulum.datetime(2024, 5, 10, 1, 0, tz="UTC")
    assert dates.day_start_utc(now) == datetime(2024, 5, 10, 0, 0)


def test_invalid_offset_raises_clock_error(monkeypatch):
    monkeypatch.setenv("DAY_UTC_OFFSET_HOURS", "not-a-number")
    with pytest.raises(ClockError):
        dates.day_start_utc()


def test_to_utc_naive_returns_plain_datetime():
    value = dates.to_utc_naive(pendulum.datetime(2024, 5, 10, 12, 0, tz=UTC_MINUS_3))
    assert type(value) is datetime
    assert value == datetime(2024, 5, 10, 15, 0)
