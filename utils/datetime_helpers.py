"""Timezone-aware date/time helpers for the hotel back office."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from flask import current_app


def get_timezone() -> ZoneInfo:
    """Get the configured timezone."""
    tz_name = current_app.config.get('TIMEZONE', 'Asia/Bangkok')
    return ZoneInfo(tz_name)


def get_today() -> date:
    """Get today's date in the configured timezone."""
    return datetime.now(get_timezone()).date()


def get_now() -> datetime:
    """Get current datetime in the configured timezone."""
    return datetime.now(get_timezone())


def get_local_now() -> datetime:
    """
    Current wall-clock time in the configured timezone, naive and to the second.

    This is the form timestamps are stored in, so string comparison in SQL
    matches chronological order.
    """
    return get_now().replace(tzinfo=None, microsecond=0)
