"""
Event creation and deletion on behalf of the hosting view.
"""

import sys
from dataclasses import fields
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional, Union

from .date_utils import DAY_MINUTES, count_days, format_date, format_time, minutes_of_day, string_to_date
from .event_model import Event, RepeatRule
from .timezone_utils import shift_civil
from .view_context import ViewContext

# Duration of an event created without an explicit end
DEFAULT_EVENT_DURATION = timedelta(hours=2)

_EVENT_FIELDS = {f.name for f in fields(Event)}


def _debug_print(msg: str) -> None:
    timestamp = datetime.now().strftime("%H:%M:%S")
    print(f"[{timestamp}] EVENTS: {msg}", file=sys.stderr)


def _split_overrides(values: dict[str, Any]) -> dict[str, Any]:
    """Keep known Event fields, park the rest in `extra`."""
    known = {k: v for k, v in values.items() if k in _EVENT_FIELDS}
    unknown = {k: v for k, v in values.items() if k not in _EVENT_FIELDS}
    if unknown:
        known['extra'] = {**known.get('extra', {}), **unknown}
    if 'repeat' in known:
        known['repeat'] = RepeatRule.from_value(known['repeat'])
    return known


def _format_instant(d: datetime, context: ViewContext) -> str:
    formatted = format_date(d, None, context.texts)
    if context.show_time:
        formatted += f" {format_time(minutes_of_day(d), texts=context.texts)}"
    return formatted


def create_event(
    date_time: Union[str, datetime],
    overrides: Optional[dict[str, Any]],
    context: ViewContext,
) -> Optional[Event]:
    """
    Create an event at the given date and time.

    The event lasts two hours unless overrides say otherwise. The context's
    on_event_create hook gets the candidate event and a callback deleting it;
    returning a falsy value cancels the creation.

    Returns:
        The created event, or None if the date is invalid or creation was vetoed.
    """
    date_time = string_to_date(date_time)
    if date_time is None:
        return None

    end_date = shift_civil(date_time, DEFAULT_EVENT_DURATION)
    start = _format_instant(date_time, context)
    end = _format_instant(end_date, context)

    event = Event(**{
        'eid': context.next_event_id(),
        'start': start,
        'start_date': date_time,
        'start_time_minutes': minutes_of_day(date_time),
        'end': end,
        'end_date': end_date if context.show_time else string_to_date(end),
        'end_time_minutes': minutes_of_day(end_date),
        **_split_overrides(overrides or {}),
    })

    if callable(context.on_event_create):
        if not context.on_event_create(event, lambda: delete_event(event, context)):
            _debug_print(f"Creation of {event.eid} vetoed")
            return None

    if event.start_day != event.end_day:
        event.days_count = count_days(event.start_date, event.end_date)

    context.events.append(event)
    # Segments get built here if the event became a multi-day one.
    context.add_events_to_view([event])

    context.emit_with_event('event-create', event)
    context.emit_with_event('event-change', event)

    return event


def delete_event(event: Event, context: ViewContext) -> None:
    """Remove an event from the view and from the global event list."""
    context.emit_with_event('event-delete', event)

    context.events = [e for e in context.events if e.eid != event.eid]
    context.view_events = [e for e in context.view_events if e.eid != event.eid]


def normalize_event(raw: Union[Event, dict[str, Any]], context: ViewContext) -> Event:
    """
    Turn a caller-supplied event mapping into an Event.

    `start` and `end` are 'YYYY-MM-DD[ HH:MM]' strings (or datetimes);
    the parsed instants, minutes of the day, eid and days count are derived
    from them. A malformed date leaves the matching *_date field at None.
    """
    if isinstance(raw, Event):
        values = {f: getattr(raw, f) for f in _EVENT_FIELDS}
    else:
        values = _split_overrides(dict(raw))

    start_date = string_to_date(values.get('start_date') or values.get('start'))
    end_date = string_to_date(values.get('end_date') or values.get('end'))
    start = values.get('start')
    end = values.get('end')
    if not isinstance(start, str):
        start = _format_instant(start_date, context) if start_date else ''
    if not isinstance(end, str):
        end = _format_instant(end_date, context) if end_date else ''

    values.update(
        eid=values.get('eid') or context.next_event_id(),
        start=start,
        start_date=start_date,
        start_time_minutes=minutes_of_day(start_date),
        end=end,
        end_date=end_date,
        end_time_minutes=minutes_of_day(end_date),
        segments=None,
    )
    event = Event(**values)

    if event.start_day != event.end_day:
        event.days_count = max(count_days(event.start_date, event.end_date), 1)
        # Ending at midnight does not take a day of the next date.
        if end_date is not None and minutes_of_day(end_date) == 0 and event.days_count > 1:
            event.days_count -= 1
            if event.days_count == 1:
                event.end_time_minutes = DAY_MINUTES
    else:
        event.days_count = 1
    return event


def normalize_events(raws: Iterable[Union[Event, dict[str, Any]]], context: ViewContext) -> list[Event]:
    """Normalize caller events and add them to the context's global list and view."""
    events = [normalize_event(raw, context) for raw in raws]
    context.events.extend(events)
    context.add_events_to_view(events)
    return events
