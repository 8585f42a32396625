"""Day window helpers.

Offers are grouped by calendar day in a fixed UTC offset (UTC-3 unless
``DAY_UTC_OFFSET_HOURS`` says otherwise). Timestamps are persisted as naive
UTC datetimes so SQLite and PostgreSQL compare them the same way.
"""

from __future__ import annotations

import os
from datetime import date, datetime

import pendulum

from ofertas.errors import ClockError

DEFAULT_UTC_OFFSET_HOURS = -3


def utc_offset_hours() -> int:
    return int(os.environ.get("DAY_UTC_OFFSET_HOURS", DEFAULT_UTC_OFFSET_HOURS))


def day_timezone() -> pendulum.FixedTimezone:
    return pendulum.timezone(utc_offset_hours() * 3600)


def now_in_tz() -> pendulum.DateTime:
    return pendulum.now(day_timezone())


def _localize(now: datetime | None) -> pendulum.DateTime:
    try:
        current = pendulum.instance(now) if now is not None else now_in_tz()
        return current.in_timezone(day_timezone())
    except (ValueError, OverflowError, TypeError) as exc:
        raise ClockError(f"Invalid clock reading: {exc}") from exc


def _naive_utc(value: pendulum.DateTime) -> datetime:
    utc = value.in_timezone("UTC")
    return datetime(utc.year, utc.month, utc.day, utc.hour, utc.minute, utc.second, utc.microsecond)


def day_start_utc(now: datetime | None = None) -> datetime:
    """Return the start of the current day window as a naive UTC datetime."""
    local = _localize(now)
    try:
        return _naive_utc(local.start_of("day"))
    except (ValueError, OverflowError) as exc:
        raise ClockError(f"Invalid day boundary: {exc}") from exc


def day_key(now: datetime | None = None) -> date:
    local = _localize(now)
    return date(local.year, local.month, local.day)


def to_utc_naive(value: datetime) -> datetime:
    return _naive_utc(pendulum.instance(value))
