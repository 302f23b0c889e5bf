"""
Timezone utility functions for the Spread Pick'em application
"""

from datetime import datetime, timezone

import pytz
from flask import current_app, has_app_context

# Kickoff weekdays follow the league's home timezone unless configured otherwise
DEFAULT_TIMEZONE = "America/New_York"


def get_app_timezone():
    """Get the application's configured timezone"""
    timezone_name = DEFAULT_TIMEZONE
    if has_app_context():
        timezone_name = current_app.config.get("TIMEZONE", DEFAULT_TIMEZONE)
    return resolve_timezone(timezone_name)


def resolve_timezone(tz):
    """Turn a timezone name (or tzinfo) into a tzinfo"""
    if tz is None:
        return get_app_timezone()
    if isinstance(tz, str):
        try:
            return pytz.timezone(tz)
        except pytz.UnknownTimeZoneError:
            # Fallback to UTC if timezone is invalid
            return pytz.UTC
    return tz


def get_utc_time():
    """Get current time in UTC"""
    return datetime.now(timezone.utc)


def ensure_utc(dt):
    """Return an aware datetime, reading a naive one as UTC"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def convert_to_app_timezone(dt, tz=None):
    """Convert a datetime to the application's timezone"""
    if dt is None:
        return None

    return ensure_utc(dt).astimezone(resolve_timezone(tz))


def has_kickoff_passed(kickoff, now=None):
    """Check whether a game has kicked off at ``now`` (default: the current instant)"""
    if kickoff is None:
        return False
    if now is None:
        now = get_utc_time()
    return ensure_utc(now) >= ensure_utc(kickoff)


def format_game_time(dt, format_str="%a %m/%d at %I:%M %p", tz=None):
    """Format a game time in the application's timezone"""
    if dt is None:
        return "TBD"

    app_time = convert_to_app_timezone(dt, tz)
    return app_time.strftime(format_str)
