"""
Multi-day segmentation.

Splits an event into one Segment per civil day it covers within the visible
window, expanding recurring events into their occurrences. Also grows or
shrinks a multi-day event by one trailing day while the user resizes it.
"""

import sys
from datetime import datetime, timedelta
from typing import Optional

from .config import LocalizationConfig
from .date_utils import (
    DAY_MINUTES, add_days, count_days, format_date, format_date_lite, format_time,
    midnight, minutes_of_day, subtract_days,
)
from .event_model import Event, Segment


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] SEGMENTS: {msg}", file=sys.stderr)


def add_day_segment(event: Event, texts: Optional[LocalizationConfig] = None) -> str:
    """
    Extend an event by one day at its end.

    Returns the day key of the new last segment.
    """
    if not event.segments:
        event.segments = {
            event.start_day: Segment(
                start=event.start_day,
                start_date=event.start_date,
                start_time_minutes=event.start_time_minutes,
                end_time_minutes=DAY_MINUTES,
                is_first_day=True,
                is_last_day=False,
            )
        }

    # The current last segment now runs until the end of its day.
    previous_segment = event.segments.get(format_date(event.end_date, None, texts))
    if previous_segment:
        previous_segment.is_last_day = False
        previous_segment.end_time_minutes = DAY_MINUTES
    else:
        # Happens when resize events come in faster than the caller throttles
        # them; updating a guessed segment would look worse than skipping.
        _debug_print(f"No segment at {event.end_day} for event {event.eid}, skipping update")

    end_date = add_days(event.end_date, 1)
    formatted_date = format_date(end_date, None, texts)
    event.segments[formatted_date] = Segment(
        start=formatted_date,
        start_date=midnight(end_date),
        start_time_minutes=0,
        end_time_minutes=event.end_time_minutes,
        is_first_day=False,
        is_last_day=True,
    )

    event.days_count = len(event.segments)
    event.end_date = end_date
    event.end = f"{formatted_date} {format_time(event.end_time_minutes, texts=texts)}"

    return formatted_date


def remove_day_segment(event: Event, texts: Optional[LocalizationConfig] = None) -> str:
    """
    Shrink an event by its last day.

    Does nothing on an event with a single segment. Returns the day key of
    the (new) last day.
    """
    if not event.segments or len(event.segments) <= 1:
        return event.end_day

    event.segments.pop(event.end_day, None)

    end_date = subtract_days(event.end_date, 1)
    formatted_date = format_date(end_date, None, texts)
    previous_segment = event.segments.get(formatted_date)

    if previous_segment:
        previous_segment.is_last_day = True
        previous_segment.end_time_minutes = event.end_time_minutes
        # Back to a plain single-day event.
        if len(event.segments) == 1 and previous_segment.is_first_day:
            event.segments = None
    else:
        _debug_print(f"No segment at {formatted_date} for event {event.eid}, skipping update")

    event.days_count = len(event.segments) if event.segments else 1
    event.end_date = end_date
    event.end = f"{formatted_date} {format_time(event.end_time_minutes, texts=texts)}"

    return formatted_date


def build_segments(
    event: Event,
    view_start: datetime,
    view_end: datetime,
    texts: Optional[LocalizationConfig] = None,
    occurrences: Optional[dict[str, bool]] = None,
) -> Event:
    """
    Rebuild all segments of an event for the visible window.

    The previous segments mapping is replaced, never patched. An event
    without any day inside the window ends up with segments set to None.

    Args:
        event: The event to segment.
        view_start: First instant of the visible window.
        view_end: Last instant of the visible window.
        texts: Localization used for the day keys.
        occurrences: Optional precomputed day key -> True lookup of the days
            a recurring event occurs on. Replaces the repeat rule matching.
    """
    if event.start_date is None or event.end_date is None:
        event.segments = None
        event.days_count = 1
        return event

    if event.repeat:
        segments = _recurring_segments(event, view_start, view_end, texts, occurrences)
    else:
        segments = _plain_segments(event, view_start, view_end, texts)

    event.segments = segments or None
    event.days_count = len(segments) or 1
    return event


def _ends_at_midnight(event: Event) -> bool:
    return (event.end_date.hour == 0 and event.end_date.minute == 0
            and event.end_day != event.start_day)


def _plain_segments(event: Event, view_start: datetime, view_end: datetime,
                    texts: Optional[LocalizationConfig]) -> dict[str, Segment]:
    event_start = event.start_date
    event_end = event.end_date
    end_time_minutes = event.end_time_minutes
    # An event ending at midnight does not show on the next day.
    if _ends_at_midnight(event):
        event_end -= timedelta(seconds=1)
        end_time_minutes = DAY_MINUTES

    segments: dict[str, Segment] = {}
    cursor = max(view_start, event_start)
    end = min(view_end, event_end)

    while cursor <= end:
        next_midnight = midnight(add_days(cursor, 1))
        is_first_day = cursor == event_start
        is_last_day = end == event_end and next_midnight >= end

        start_date = event.start_date if is_first_day else cursor
        formatted_date = event.start_day if is_first_day else format_date(cursor, None, texts)

        segments[formatted_date] = Segment(
            start=formatted_date,
            start_date=start_date,
            start_time_minutes=event.start_time_minutes if is_first_day else minutes_of_day(cursor),
            end_time_minutes=end_time_minutes if is_last_day else DAY_MINUTES,
            is_first_day=is_first_day,
            is_last_day=is_last_day,
        )
        cursor = next_midnight

    return segments


def _recurring_segments(event: Event, view_start: datetime, view_end: datetime,
                        texts: Optional[LocalizationConfig],
                        occurrences: Optional[dict[str, bool]]) -> dict[str, Segment]:
    rule = event.repeat
    until = rule.until_date
    end_time_minutes = event.end_time_minutes
    if _ends_at_midnight(event):
        end_time_minutes = DAY_MINUTES
        duration_days = max(count_days(event.start_date, subtract_days(event.end_date, 1)), 1)
    else:
        duration_days = max(count_days(event.start_date, event.end_date), 1)

    window_start = midnight(view_start)
    # Start early enough to catch an occurrence already running at view start.
    day = subtract_days(window_start, duration_days - 1)

    segments: dict[str, Segment] = {}
    occurrence_start_key: Optional[str] = None
    occurrence_end_key: Optional[str] = None

    while day <= view_end:
        formatted_date = format_date(day, None, texts)

        if occurrence_end_key is None and (until is None or day <= until):
            if occurrences is not None:
                matched = bool(occurrences.get(formatted_date))
            else:
                matched = rule.matches(day, event.start_date)
            if matched:
                occurrence_start_key = formatted_date
                occurrence_end_key = format_date(add_days(day, duration_days - 1), None, texts)

        if occurrence_end_key is not None:
            is_first_day = formatted_date == occurrence_start_key
            is_last_day = formatted_date == occurrence_end_key
            if day >= window_start:
                segments[formatted_date] = Segment(
                    start=formatted_date,
                    start_date=day.replace(hour=event.start_date.hour, minute=event.start_date.minute)
                    if is_first_day else day,
                    start_time_minutes=event.start_time_minutes if is_first_day else 0,
                    end_time_minutes=end_time_minutes if is_last_day else DAY_MINUTES,
                    is_first_day=is_first_day,
                    is_last_day=is_last_day,
                )
            if is_last_day:
                occurrence_start_key = occurrence_end_key = None

        day = add_days(day, 1)

    return segments
