"""Reference-timezone helpers: what date is "today" for the office."""

from datetime import date, datetime, timedelta, timezone
from functools import lru_cache
from zoneinfo import ZoneInfo


@lru_cache(maxsize=8)
def _get_tz(tz_name):
    return ZoneInfo(tz_name)


def _resolve_tz_name(tz_name):
    if tz_name is None:
        from flask import current_app
        tz_name = current_app.config.get('REFERENCE_TIMEZONE', 'Asia/Kolkata')
    return tz_name


def today_in_zone(tz_name=None, now=None):
    """Calendar date in the reference timezone.

    Args:
        tz_name: IANA timezone name. Falls back to app config or Asia/Kolkata.
        now: Aware datetime to convert instead of the wall clock (tests).

    Returns:
        datetime.date for "today" in that zone, independent of server TZ.
    """
    local_tz = _get_tz(_resolve_tz_name(tz_name))
    current = now if now is not None else datetime.now(timezone.utc)
    return current.astimezone(local_tz).date()


def today_string(tz_name=None, now=None):
    return today_in_zone(tz_name, now).isoformat()


def future_date_string(days, tz_name=None, now=None):
    """YYYY-MM-DD that is ``days`` after today in the reference timezone."""
    return (today_in_zone(tz_name, now) + timedelta(days=days)).isoformat()


def start_of_month(day: date) -> date:
    return day.replace(day=1)
