"""
Timezone utilities for calgrid.

The layout engine works in one local civil-time frame. These helpers convert
incoming UTC instants (e.g. from iCalendar feeds) into that frame and step
civil days without losing the wall-clock time across daylight-saving changes.
"""

from datetime import datetime, timedelta
import time as _time
import pytz


# Default timezone - can be overridden by config
_local_timezone_name: str = "UTC"


def set_timezone(timezone_name: str):
    """Set the local timezone for the engine."""
    global _local_timezone_name
    _local_timezone_name = timezone_name


def get_timezone_name() -> str:
    return _local_timezone_name


def get_local_timezone():
    """
    Get the local timezone as a pytz timezone object.

    Returns:
        pytz timezone object for the configured local timezone.
    """
    try:
        return pytz.timezone(_local_timezone_name)
    except pytz.UnknownTimeZoneError:
        # Fall back to the offset the system currently uses
        is_dst = _time.localtime().tm_isdst
        if is_dst:
            offset_seconds = -_time.altzone
        else:
            offset_seconds = -_time.timezone
        return pytz.FixedOffset(offset_seconds // 60)


def utc_to_local_naive(dt: datetime) -> datetime:
    """
    Convert an aware datetime to a naive local datetime.

    Args:
        dt: A datetime object with tzinfo (usually UTC).

    Returns:
        A naive datetime (tzinfo=None) representing local civil time.
        Naive input is returned unchanged.
    """
    if dt.tzinfo is not None:
        return dt.astimezone(get_local_timezone()).replace(tzinfo=None)
    return dt


def shift_civil(dt: datetime, delta: timedelta) -> datetime:
    """
    Add a civil (wall-clock) delta to a datetime.

    Naive datetimes already step in civil time. pytz-aware datetimes carry a
    fixed offset, so they are re-localized after the shift; otherwise a day
    step across a DST transition would land one hour off.
    """
    tz = dt.tzinfo
    if tz is not None and hasattr(tz, 'localize'):
        return tz.localize(dt.replace(tzinfo=None) + delta)
    return dt + delta


def utc_offset_delta(start: datetime, end: datetime) -> timedelta:
    """Difference of the UTC offsets of two instants (zero for naive ones)."""
    start_offset = start.utcoffset() if start.tzinfo is not None else None
    end_offset = end.utcoffset() if end.tzinfo is not None else None
    if start_offset is None or end_offset is None:
        return timedelta(0)
    return end_offset - start_offset
