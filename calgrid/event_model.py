"""
Event records handled by the layout engine.

An Event is the scheduling unit the hosting view hands in. When it covers
more than one civil day in the current view (or it repeats), it carries a
mapping of day key -> Segment describing the slice drawn on each day.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional, Union

from .date_utils import midnight, string_to_date


class RepeatKind(Enum):
    DAILY = "day"
    WEEKDAYS = "week"
    MONTHLY = "month"
    YEARLY = "year"


def _match_daily(rule: 'RepeatRule', day: datetime, origin: datetime) -> bool:
    return True


def _match_weekdays(rule: 'RepeatRule', day: datetime, origin: datetime) -> bool:
    weekdays = rule.weekdays or [origin.isoweekday()]
    return day.isoweekday() in weekdays


def _match_monthly(rule: 'RepeatRule', day: datetime, origin: datetime) -> bool:
    return day.day == origin.day


def _match_yearly(rule: 'RepeatRule', day: datetime, origin: datetime) -> bool:
    return day.day == origin.day and day.month == origin.month


_MATCHERS: dict[RepeatKind, Callable[['RepeatRule', datetime, datetime], bool]] = {
    RepeatKind.DAILY: _match_daily,
    RepeatKind.WEEKDAYS: _match_weekdays,
    RepeatKind.MONTHLY: _match_monthly,
    RepeatKind.YEARLY: _match_yearly,
}


@dataclass
class RepeatRule:
    """
    How an event repeats.

    every:    "day", "week", "month" or "year"
    weekdays: ISO weekday numbers (1=Monday ... 7=Sunday). When given, they
              decide the matching days whatever `every` says.
    until:    last day an occurrence may start on (string or datetime).
    """
    every: str = "week"
    weekdays: Optional[list[int]] = None
    until: Union[str, datetime, None] = None

    @property
    def kind(self) -> RepeatKind:
        if self.weekdays:
            return RepeatKind.WEEKDAYS
        try:
            return RepeatKind(self.every)
        except ValueError:
            return RepeatKind.WEEKDAYS

    @property
    def until_date(self) -> Optional[datetime]:
        if self.until is None:
            return None
        return string_to_date(self.until)

    def matches(self, day: datetime, origin: datetime) -> bool:
        """
        Tell whether an occurrence starts on `day`.

        `origin` is the start of the original event. Days before it never
        match; from the original day on, only the rule decides.
        """
        if midnight(day) < midnight(origin):
            return False
        return _MATCHERS[self.kind](self, day, origin)

    @classmethod
    def from_value(cls, value: Any) -> Optional['RepeatRule']:
        """Accept a RepeatRule, a mapping with the same keys, or None."""
        if value is None or isinstance(value, RepeatRule):
            return value
        return cls(
            every=value.get('every', 'week'),
            weekdays=list(value['weekdays']) if value.get('weekdays') else None,
            until=value.get('until'),
        )


@dataclass
class Segment:
    """One civil-day slice of an event's footprint."""
    start: str  # Day key, YYYY-MM-DD
    start_date: datetime
    start_time_minutes: int = 0
    end_time_minutes: int = 24 * 60
    is_first_day: bool = False
    is_last_day: bool = False
    top: int = 0
    height: int = 0


@dataclass
class Event:
    """
    A calendar event as laid out by the engine.

    start/end hold the caller-facing formatted strings ('YYYY-MM-DD HH:MM', or
    just the date for time-less events) while start_date/end_date hold the
    parsed instants (None when the string was malformed).
    """
    eid: Optional[str] = None
    start: str = ''
    start_date: Optional[datetime] = None
    start_time_minutes: int = 0
    end: str = ''
    end_date: Optional[datetime] = None
    end_time_minutes: int = 0
    title: str = ''
    content: str = ''
    background: bool = False
    all_day: bool = False
    segments: Optional[dict[str, Segment]] = None
    repeat: Optional[RepeatRule] = None
    days_count: int = 1
    deletable: bool = True
    deleting: bool = False
    resizable: bool = True
    resizing: bool = False
    draggable: bool = True
    dragging: bool = False
    focused: bool = False
    top: int = 0
    height: int = 0
    classes: list[str] = field(default_factory=list)
    # Caller keys the engine does not know about, kept untouched
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def start_day(self) -> str:
        return self.start[:10]

    @property
    def end_day(self) -> str:
        return self.end[:10]

    @property
    def has_time(self) -> bool:
        return ':' in self.start

    @property
    def is_multi_day(self) -> bool:
        return self.start_day != self.end_day

    def __repr__(self):
        return f"Event(eid={self.eid!r}, title={self.title!r}, start={self.start!r}, end={self.end!r})"
