from datetime import datetime, timedelta

import pytest

from calgrid.config import Config, LayoutConfig, LocalizationConfig
from calgrid.date_utils import TodayCache
from calgrid.event_factory import normalize_events
from calgrid.view_context import ViewContext

from .conftest import WEEK_START


def test_defaults_to_a_one_day_view():
    context = ViewContext()

    assert (context.view_start.hour, context.view_start.minute) == (0, 0)
    assert context.view_end - context.view_start == timedelta(days=1, seconds=-1)
    assert context.time_step == 30
    assert context.events == [] and context.view_events == []


def test_from_config():
    config = Config(
        layout=LayoutConfig(time_from=8 * 60, time_step=15, time_cell_height=20),
        localization=LocalizationConfig(am='vm', pm='nm'),
    )

    context = ViewContext.from_config(config, view_start=WEEK_START)

    assert (context.time_from, context.time_step, context.time_cell_height) == (480, 15, 20)
    assert context.texts.pm == 'nm'
    assert context.view_start == WEEK_START


def test_event_ids_are_scoped_to_the_view(context):
    other = ViewContext()

    assert context.next_event_id() == f'{context.uid}_0'
    assert context.next_event_id() == f'{context.uid}_1'
    assert other.next_event_id() != f'{context.uid}_0'


def test_cell_events(context):
    single, overnight, _ = normalize_events([
        {'start': '2019-11-05 09:00', 'end': '2019-11-05 10:00'},
        {'start': '2019-11-05 22:00', 'end': '2019-11-06 02:00'},
        {'start': '2019-11-07 09:00', 'end': '2019-11-07 10:00'},
    ], context)

    assert context.cell_events(datetime(2019, 11, 5)) == [single, overnight]
    assert context.cell_events(datetime(2019, 11, 6, 12, 0)) == [overnight]
    assert context.cell_events(datetime(2019, 11, 8)) == []


def test_layout_cell(context):
    overnight, early = normalize_events([
        {'start': '2019-11-05 22:00', 'end': '2019-11-06 02:00'},
        {'start': '2019-11-06 01:00', 'end': '2019-11-06 03:00'},
    ], context)

    cell_overlaps, longest_streak = context.layout_cell(datetime(2019, 11, 6))

    assert longest_streak == 2
    assert cell_overlaps[early.eid].overlaps == [overnight.eid]
    segment = overnight.segments['2019-11-06']
    assert (segment.top, segment.height) == (0, 160)
    assert (early.top, early.height) == (80, 160)

    context.layout_cell(datetime(2019, 11, 5))
    segment = overnight.segments['2019-11-05']
    assert (segment.top, segment.height) == (22 * 80, 160)


def test_set_view_rebuilds_the_working_set(context):
    weekly, single = normalize_events([
        {'start': '2019-11-04 09:00', 'end': '2019-11-04 10:00', 'repeat': {'every': 'week'}},
        {'start': '2019-11-05 09:00', 'end': '2019-11-05 10:00'},
    ], context)
    assert list(weekly.segments) == ['2019-11-04']

    next_week = WEEK_START + timedelta(days=7)
    context.set_view(next_week, next_week + timedelta(days=7, seconds=-1))

    assert context.view_events == [weekly]
    assert list(weekly.segments) == ['2019-11-11']
    assert context.events == [weekly, single]


def test_notifications_without_callback_are_dropped(context):
    event = normalize_events([{'start': '2019-11-05 09:00', 'end': '2019-11-05 10:00'}], context)[0]
    context.emit_with_event('event-change', event)


def test_set_view_over_partly_visible_multi_day_event():
    context = ViewContext(view_start=datetime(2019, 11, 3), view_end=datetime(2019, 11, 3, 23, 59, 59))
    event, = normalize_events([{'start': '2019-11-02 18:00', 'end': '2019-11-03 02:00'}], context)
    assert list(event.segments) == ['2019-11-03']
    assert event.days_count == 1

    context.set_view(datetime(2019, 11, 2), datetime(2019, 11, 2, 23, 59, 59))

    assert list(event.segments) == ['2019-11-02']
    assert context.cell_events(datetime(2019, 11, 2)) == [event]


def test_set_view_onto_event_outside_previous_window():
    context = ViewContext(view_start=datetime(2019, 11, 10), view_end=datetime(2019, 11, 10, 23, 59, 59))
    event, = normalize_events([{'start': '2019-11-02 18:00', 'end': '2019-11-03 02:00'}], context)
    assert context.view_events == []

    context.set_view(datetime(2019, 11, 1), datetime(2019, 11, 3, 23, 59, 59))

    assert list(event.segments) == ['2019-11-02', '2019-11-03']
    assert context.cell_events(datetime(2019, 11, 3)) == [event]


def test_event_ending_at_midnight_keeps_its_height(context):
    event, = normalize_events([{'start': '2019-11-04 22:00', 'end': '2019-11-05 00:00'}], context)
    assert event.end_time_minutes == 24 * 60

    context.layout_cell(datetime(2019, 11, 4))

    segment = event.segments['2019-11-04']
    assert (segment.top, segment.height) == (22 * 80, 160)
    assert context.cell_events(datetime(2019, 11, 5)) == []


@pytest.mark.parametrize('reverse', [False, True])
def test_recurring_events_overlap_on_their_own_times(reverse):
    next_week = WEEK_START + timedelta(days=7)
    context = ViewContext(view_start=next_week, view_end=next_week + timedelta(days=7, seconds=-1))
    raws = [
        {'eid': 'morning', 'start': '2019-11-04 09:00', 'end': '2019-11-04 10:00', 'repeat': {'every': 'week'}},
        {'eid': 'afternoon', 'start': '2019-11-04 14:00', 'end': '2019-11-04 15:00', 'repeat': {'every': 'week'}},
        {'eid': 'late', 'start': '2019-11-04 09:30', 'end': '2019-11-04 10:30', 'repeat': {'every': 'week'}},
    ]
    if reverse:
        raws.reverse()
    normalize_events(raws, context)

    cell_overlaps, longest_streak = context.layout_cell(next_week)

    assert longest_streak == 2
    assert cell_overlaps['afternoon'].overlaps == []
    assert cell_overlaps['morning'].overlaps == ['late']
    assert (cell_overlaps['morning'].position, cell_overlaps['late'].position) == (0, 1)


def test_cell_is_today(context):
    context.today = TodayCache(clock=lambda: datetime(2019, 11, 5, 8, 0))

    assert context.cell_is_today(datetime(2019, 11, 5))
    assert not context.cell_is_today(datetime(2019, 11, 4))
