"""
Clock capability and DateKey helpers.

A DateKey is an 8-digit ``YYYYMMDD`` string in the local calendar. The
helpers are pure functions of the clock's current time.
"""
from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Protocol

DATE_KEY_FORMAT = "%Y%m%d"
_DATE_KEY_RE = re.compile(r"^\d{8}$")


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Local wall-clock time."""

    def now(self) -> datetime:
        return datetime.now()


def format_date_key(day: date) -> str:
    return day.strftime(DATE_KEY_FORMAT)


def is_date_key(value: str) -> bool:
    if not isinstance(value, str) or not _DATE_KEY_RE.match(value):
        return False
    try:
        datetime.strptime(value, DATE_KEY_FORMAT)
    except ValueError:
        return False
    return True


def today_key(clock: Clock) -> str:
    return format_date_key(clock.now().date())


def yesterday_key(clock: Clock) -> str:
    return format_date_key(clock.now().date() - timedelta(days=1))


def tomorrow_key(clock: Clock) -> str:
    return format_date_key(clock.now().date() + timedelta(days=1))
