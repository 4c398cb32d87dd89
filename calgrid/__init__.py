"""
calgrid - layout engine for calendar day and week views.

This package computes where calendar events go:
- Date and time helpers (date_utils.py, timezone_utils.py)
- Event records and repeat rules (event_model.py)
- Event creation and deletion (event_factory.py)
- Multi-day segmentation (segments.py)
- Overlap detection and column layout (overlaps.py)
- Vertical pixel geometry (geometry.py)
- View state shared by the above (view_context.py)
- Configuration (config.py) and iCalendar import (ical_import.py)
"""

from .config import Config, LayoutConfig, LocalizationConfig
from .date_utils import (
    TodayCache, add_days, subtract_days, get_week, is_leap_year,
    format_date, format_date_lite, format_time, string_to_date,
    count_days, dates_in_same_time_step, previous_first_day_of_week,
)
from .event_model import Event, Segment, RepeatRule, RepeatKind
from .event_factory import create_event, delete_event, normalize_event, normalize_events
from .segments import add_day_segment, remove_day_segment, build_segments
from .overlaps import OverlapRecord, compute_overlaps, event_in_range, recurring_event_in_range
from .geometry import map_to_geometry
from .view_context import ViewContext

__all__ = [
    'Config',
    'LayoutConfig',
    'LocalizationConfig',
    # Date helpers
    'TodayCache',
    'add_days',
    'subtract_days',
    'get_week',
    'is_leap_year',
    'format_date',
    'format_date_lite',
    'format_time',
    'string_to_date',
    'count_days',
    'dates_in_same_time_step',
    'previous_first_day_of_week',
    # Events
    'Event',
    'Segment',
    'RepeatRule',
    'RepeatKind',
    'create_event',
    'delete_event',
    'normalize_event',
    'normalize_events',
    # Layout
    'add_day_segment',
    'remove_day_segment',
    'build_segments',
    'OverlapRecord',
    'compute_overlaps',
    'event_in_range',
    'recurring_event_in_range',
    'map_to_geometry',
    'ViewContext',
]
