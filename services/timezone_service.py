"""Timezone handling service.

Every per-day record (check-ins, adherence logs, snapshots) is keyed by the
calendar day in the user's own timezone. These helpers resolve that day.
"""
from datetime import datetime, date, time
from typing import Tuple
import pytz
from pytz import timezone as pytz_timezone


def get_timezone_object(timezone_str: str) -> pytz.BaseTzInfo:
    """Get timezone object from timezone string."""
    try:
        return pytz_timezone(timezone_str or 'UTC')
    except pytz.exceptions.UnknownTimeZoneError:
        # Fallback to UTC if timezone is invalid
        return pytz.UTC


def convert_utc_to_user_time(user_timezone: str, utc_datetime: datetime) -> Tuple[datetime, date, time]:
    """
    Convert UTC datetime to user's local time.

    Args:
        user_timezone: User's timezone string
        utc_datetime: UTC datetime (naive values are treated as UTC)

    Returns:
        Tuple of (local_datetime, local_date, local_time)
    """
    if utc_datetime.tzinfo is None:
        utc_datetime = pytz.UTC.localize(utc_datetime)

    local_datetime = utc_datetime.astimezone(get_timezone_object(user_timezone))
    return local_datetime, local_datetime.date(), local_datetime.time()


def get_current_user_time(user_timezone: str) -> Tuple[datetime, date, time]:
    """Get current time in user's timezone as (local_datetime, local_date, local_time)."""
    return convert_utc_to_user_time(user_timezone, datetime.now(pytz.UTC))


def get_user_today(user_timezone: str) -> date:
    """Calendar day it currently is for the user."""
    _, today, _ = get_current_user_time(user_timezone)
    return today
