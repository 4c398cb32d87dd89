"""
Overlap detection and column layout for one rendering cell.

A cell is a day, or a split column within a day. Events sharing time inside
a cell are drawn side by side: each one gets a column index (its position)
and the cell gets a column count (the longest streak).
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from operator import itemgetter
from typing import Iterable, Optional

from .date_utils import add_days, dates_in_same_time_step, midnight
from .event_model import Event


@dataclass
class OverlapRecord:
    """Overlap state of one event during one layout pass."""
    overlaps: list[str] = field(default_factory=list)
    start: str = ''  # Sort key
    position: int = 0


def _takes_part(event: Event) -> bool:
    """Background and all-day events never push others aside."""
    return not event.background and not event.all_day


def compute_overlaps(
    cell_events: Iterable[Event],
    overlaps_per_time_step: bool = False,
    time_step: int = 30,
) -> tuple[dict[str, OverlapRecord], int]:
    """
    Compute the overlaps of all events of a cell.

    The whole relation is rebuilt on every call; a flag change (e.g. an event
    turned into a background event) therefore drops its previous overlaps.

    Args:
        cell_events: The events (or per-day event copies) of one cell.
        overlaps_per_time_step: When set, two events only overlap if they
            also start within the same time step.
        time_step: Time step in minutes.

    Returns:
        (cell_overlaps, longest_streak): the overlap record of each event by
        eid, and the largest number of columns any event needs.
    """
    events = list(cell_events)
    cell_overlaps: dict[str, OverlapRecord] = {
        e.eid: OverlapRecord(start=e.start) for e in events
    }

    for i, e in enumerate(events):
        record = cell_overlaps[e.eid]
        # Never compare a pair twice: only look at the events after e.
        for e2 in events[i + 1:]:
            if e2.eid == e.eid:
                continue
            record2 = cell_overlaps[e2.eid]
            in_range = event_in_range(e2, e.start_date, e.end_date)
            same_step = (dates_in_same_time_step(e.start_date, e2.start_date, time_step)
                         if overlaps_per_time_step else True)

            if _takes_part(e) and _takes_part(e2) and in_range and same_step:
                if e2.eid not in record.overlaps:
                    record.overlaps.append(e2.eid)
                if e.eid not in record2.overlaps:
                    record2.overlaps.append(e.eid)
            else:
                if e2.eid in record.overlaps:
                    record.overlaps.remove(e2.eid)
                if e.eid in record2.overlaps:
                    record2.overlaps.remove(e.eid)

    longest_streak = 0
    for eid, record in cell_overlaps.items():
        # Position in the streak: start ascending, ties broken by id descending.
        row = [(other, cell_overlaps[other].start) for other in record.overlaps]
        row.append((eid, record.start))
        row.sort(key=itemgetter(0), reverse=True)
        row.sort(key=itemgetter(1))
        record.position = [other for other, _ in row].index(eid)

        longest_streak = max(overlaps_streak(record, cell_overlaps), longest_streak)

    return cell_overlaps, longest_streak


def overlaps_streak(record: OverlapRecord, cell_overlaps: dict[str, OverlapRecord]) -> int:
    """
    Number of simultaneous events this event is drawn alongside, itself included.

    E.g. 3 events [1, 2, 3] where 1 overlaps 2 and 3 but 2 and 3 don't
    overlap: the streak is 2, so each event is 50% wide, not 33%.
    """
    streak = len(record.overlaps) + 1
    removed: list[str] = []
    for eid in record.overlaps:
        if eid in removed:
            continue
        for other in record.overlaps:
            if other == eid:
                continue
            if eid not in cell_overlaps[other].overlaps and other not in removed:
                removed.append(other)
    return streak - len(removed)


def event_in_range(event: Event, start: Optional[datetime], end: Optional[datetime]) -> bool:
    """
    Tell whether an event is in a date range, even partially.

    All-day and time-less events are compared on whole days, both range ends
    included. Timed events use half-open instant comparison.
    """
    if event.start_date is None or start is None or end is None:
        return False

    if event.all_day or not event.has_time:
        event_start_midnight = midnight(event.start_date)
        start_midnight = midnight(start)
        end_of_day = midnight(end) + timedelta(hours=23, minutes=59, seconds=59, microseconds=999000)
        if start_midnight <= event_start_midnight <= end_of_day:
            return True
        return bool(event.repeat) and recurring_event_in_range(event, start_midnight, end_of_day)

    if event.repeat:
        return recurring_event_in_range(event, start, end)

    if event.end_date is None:
        return False
    return event.start_date < end and event.end_date > start


def recurring_event_in_range(event: Event, start: datetime, end: datetime) -> bool:
    """
    Tell whether one of the occurrences of a recurring event starts in a range.

    Walks the range day by day (stopping at the repeat end date) and applies
    the same day matching as the segmentation.
    """
    if end <= event.start_date:
        return False

    limit = end
    until = event.repeat.until_date
    if until is not None:
        # The until day itself may still hold an occurrence.
        limit = min(limit, midnight(add_days(until, 1)))

    day = start
    while day < limit:
        if event.repeat.matches(day, event.start_date):
            return True
        day = add_days(day, 1)
    return False
