"""
Import of iCalendar events into the layout engine.

VEVENT components are parsed with icalendar and turned into engine events;
RRULE is mapped onto the engine's repeat rule. For rules the engine cannot
express, recurring_ical_events expands the real occurrences into the day
lookup accepted by build_segments().
"""

import sys
from datetime import datetime, date, timedelta
from typing import Optional

from icalendar import Calendar as ICalCalendar, Event as ICalEvent
from recurring_ical_events import of as recurring_events_of

from .date_utils import format_date_lite
from .event_factory import normalize_event
from .event_model import Event, RepeatRule
from .timezone_utils import utc_to_local_naive
from .view_context import ViewContext


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] ICAL: {msg}", file=sys.stderr)


_FREQUENCIES = {
    'DAILY': 'day',
    'WEEKLY': 'week',
    'MONTHLY': 'month',
    'YEARLY': 'year',
}

_WEEKDAYS = {'MO': 1, 'TU': 2, 'WE': 3, 'TH': 4, 'FR': 5, 'SA': 6, 'SU': 7}


def _to_local(value) -> tuple[datetime, bool]:
    """Return (naive local datetime, is_all_day) for a DTSTART/DTEND value."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, datetime.min.time()), True
    return utc_to_local_naive(value), False


def repeat_rule_from_rrule(rrule) -> Optional[RepeatRule]:
    """
    Map an icalendar vRecur onto a RepeatRule.

    Returns None for frequencies the engine does not model (e.g. HOURLY).
    COUNT is not supported and dropped.
    """
    freq = (rrule.get('FREQ') or [None])[0]
    every = _FREQUENCIES.get(freq)
    if every is None:
        _debug_print(f"Unsupported RRULE frequency: {freq}")
        return None

    weekdays = None
    byday = rrule.get('BYDAY')
    if byday:
        # Keep the weekday, drop ordinal prefixes like '1MO' or '-1FR'
        weekdays = sorted({_WEEKDAYS[day[-2:]] for day in byday if day[-2:] in _WEEKDAYS}) or None

    until = None
    until_values = rrule.get('UNTIL')
    if until_values:
        until, _ = _to_local(until_values[0])

    if rrule.get('COUNT'):
        _debug_print("RRULE COUNT is not supported, repeating without end")

    return RepeatRule(every=every, weekdays=weekdays, until=until)


def event_from_ical(component: ICalEvent, context: ViewContext) -> Event:
    """Convert a VEVENT component into a normalized engine event."""
    start, all_day = _to_local(component.get('DTSTART').dt)
    dtend = component.get('DTEND')
    duration = component.get('DURATION')
    if dtend:
        end, _ = _to_local(dtend.dt)
    elif duration:
        end = start + duration.dt
    else:
        # A date-only event without end lasts one day (RFC 5545)
        end = start + (timedelta(days=1) if all_day else timedelta(0))

    raw = {
        'start_date': start,
        'end_date': end,
        'start': format_date_lite(start) if all_day else None,
        'end': format_date_lite(end) if all_day else None,
        'title': str(component.get('SUMMARY', '')),
        'content': str(component.get('DESCRIPTION', '')),
        'all_day': all_day,
        'uid': str(component.get('UID', '')),
    }
    rrule = component.get('RRULE')
    if rrule:
        raw['repeat'] = repeat_rule_from_rrule(rrule)

    return normalize_event(raw, context)


def events_from_ics(ical_text: str, context: ViewContext) -> list[Event]:
    """
    Parse VCALENDAR text and add all its events to the context.

    Returns the imported events.
    """
    vcal = ICalCalendar.from_ical(ical_text)
    events = [event_from_ical(component, context) for component in vcal.walk('VEVENT')]
    context.events.extend(events)
    context.add_events_to_view(events)
    _debug_print(f"Imported {len(events)} events")
    return events


def occurrence_lookup(component: ICalEvent, start: datetime, end: datetime) -> dict[str, bool]:
    """
    Expand one recurring VEVENT between two instants.

    Returns a day key -> True mapping of the local days occurrences start
    on, suitable for build_segments(occurrences=...).
    """
    vcal = ICalCalendar()
    vcal.add('prodid', '-//calgrid//calgrid//')
    vcal.add('version', '2.0')
    vcal.add_component(component)

    lookup: dict[str, bool] = {}
    for occurrence in recurring_events_of(vcal).between(start, end):
        local_start, _ = _to_local(occurrence.get('DTSTART').dt)
        lookup[format_date_lite(local_start)] = True
    return lookup
