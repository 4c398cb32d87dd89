"""
Vertical placement of events and segments in the time grid.
"""

from typing import Union

from .event_model import Event, Segment

# Smallest height an event is drawn with, so short events stay clickable
MIN_EVENT_HEIGHT = 20


def map_to_geometry(
    item: Union[Event, Segment],
    time_from: int,
    time_to: int,
    time_cell_height: int,
    time_step: int,
    min_height: int = MIN_EVENT_HEIGHT,
) -> Union[Event, Segment]:
    """
    Set the top and height (pixels) of an event or segment.

    Times are minutes of the day; time_cell_height pixels stand for
    time_step minutes. The top is clamped to the grid and the height to
    min_height.
    """
    minutes_from_top = item.start_time_minutes - time_from
    top = round(minutes_from_top * time_cell_height / time_step)

    minutes_from_top = min(item.end_time_minutes, time_to) - time_from
    bottom = round(minutes_from_top * time_cell_height / time_step)

    item.top = max(top, 0)
    item.height = max(bottom - item.top, min_height)
    return item
