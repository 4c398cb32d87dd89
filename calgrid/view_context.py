"""
View context shared by the layout operations.

Holds what the hosting view provides to the engine: the visible window and
time grid, the global event list and the visible working set, the event id
source, the creation veto hook and the notification sink.
"""

import itertools
import uuid
from datetime import datetime, timedelta
from dataclasses import replace
from typing import Callable, Iterable, Optional, Union

from .config import Config, LayoutConfig, LocalizationConfig
from .date_utils import TodayCache, format_date_lite, format_time, midnight
from .event_model import Event, Segment
from .geometry import map_to_geometry
from .overlaps import OverlapRecord, compute_overlaps, event_in_range
from .segments import build_segments

# Veto hook: (candidate event, delete callback) -> keep the event?
CreateHook = Callable[[Event, Callable[[], None]], bool]
EventCallback = Callable[[str, Event], None]


class ViewContext:
    """
    State of one calendar view.

    The view owns `events` (every known event) and `view_events` (those
    visible in [view_start, view_end]). Layout functions read the time grid
    settings from here.
    """

    def __init__(
        self,
        layout: Optional[LayoutConfig] = None,
        texts: Optional[LocalizationConfig] = None,
        view_start: Optional[datetime] = None,
        view_end: Optional[datetime] = None,
        on_event_create: Optional[CreateHook] = None,
    ):
        layout = layout or LayoutConfig()
        self.time_from = layout.time_from
        self.time_to = layout.time_to
        self.time_step = layout.time_step
        self.time_cell_height = layout.time_cell_height
        self.min_event_height = layout.min_event_height
        self.overlaps_per_time_step = layout.overlaps_per_time_step
        self.show_time = layout.show_time
        self.texts = texts or LocalizationConfig()

        self.uid = uuid.uuid4().hex[:8]
        self._event_ids = itertools.count()
        self.today = TodayCache()

        self.events: list[Event] = []
        self.view_events: list[Event] = []

        now = midnight(datetime.now())
        self.view_start = view_start or now
        self.view_end = view_end or (self.view_start + timedelta(days=1, seconds=-1))

        self.on_event_create = on_event_create
        self._on_event_callback: Optional[EventCallback] = None

    @classmethod
    def from_config(cls, config: Config, **kwargs) -> 'ViewContext':
        return cls(layout=config.layout, texts=config.localization, **kwargs)

    # ==================== Notifications ====================

    def set_on_event_callback(self, callback: EventCallback) -> None:
        self._on_event_callback = callback

    def emit_with_event(self, name: str, event: Event) -> None:
        """Signal 'event-create', 'event-change' or 'event-delete' to the view."""
        if self._on_event_callback:
            self._on_event_callback(name, event)

    def next_event_id(self) -> str:
        return f"{self.uid}_{next(self._event_ids)}"

    # ==================== Working set ====================

    def set_view(self, view_start: datetime, view_end: datetime) -> None:
        """Move the visible window and rebuild the working set."""
        self.view_start = view_start
        self.view_end = view_end
        self.view_events = []
        self.add_events_to_view(self.events)

    def add_events_to_view(self, events: Iterable[Event]) -> None:
        """Add the events inside the window to the working set, segmenting multi-day and recurring ones."""
        for event in events:
            if not event_in_range(event, self.view_start, self.view_end):
                continue
            # days_count only reflects the last window, so ask the event itself.
            if event.repeat or event.is_multi_day:
                build_segments(event, self.view_start, self.view_end, self.texts)
            self.view_events.append(event)

    def cell_events(self, day: datetime) -> list[Event]:
        """Working-set events showing on a given day."""
        day_key = format_date_lite(day)
        day_start = midnight(day)
        day_end = day_start + timedelta(days=1, seconds=-1)
        cell = []
        for event in self.view_events:
            if event.segments is not None:
                if day_key in event.segments:
                    cell.append(event)
            elif event_in_range(event, day_start, day_end):
                cell.append(event)
        return cell

    def cell_is_today(self, day: datetime) -> bool:
        """Whether a day cell should be highlighted as today."""
        return self.today.is_today(day)

    # ==================== Layout ====================

    def update_event_position(self, item: Union[Event, Segment]) -> Union[Event, Segment]:
        return map_to_geometry(
            item, self.time_from, self.time_to, self.time_cell_height,
            self.time_step, self.min_event_height,
        )

    def _day_occurrence(self, event: Event, day_key: str) -> Event:
        """
        Copy of a segmented event reduced to its slice of one day.

        Recurring and multi-day events are compared on the instants they
        actually cover that day, not on the instants of the original event.
        """
        segment = event.segments[day_key]
        day_start = midnight(segment.start_date)
        start = segment.start
        if event.has_time:
            start = f"{start} {format_time(segment.start_time_minutes)}"
        return replace(
            event,
            start=start,
            start_date=day_start + timedelta(minutes=segment.start_time_minutes),
            end_date=day_start + timedelta(minutes=segment.end_time_minutes),
            repeat=None,
            segments=None,
        )

    def layout_cell(self, day: datetime) -> tuple[dict[str, OverlapRecord], int]:
        """
        Lay out one day cell.

        Computes the overlaps of the events of that day, then places each of
        them (or its segment for that day) vertically.

        Returns:
            (cell_overlaps, longest_streak) as computed by compute_overlaps.
        """
        events = self.cell_events(day)
        day_key = format_date_lite(day)
        occurrences = [
            self._day_occurrence(event, day_key) if event.segments is not None else event
            for event in events
        ]
        result = compute_overlaps(occurrences, self.overlaps_per_time_step, self.time_step)

        for event in events:
            if event.segments is not None:
                self.update_event_position(event.segments[day_key])
            else:
                self.update_event_position(event)
        return result
