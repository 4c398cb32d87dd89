import copy
from datetime import datetime, timedelta

from calgrid.event_model import RepeatRule, Segment
from calgrid.segments import add_day_segment, build_segments, remove_day_segment

from .conftest import assert_contiguous

NOVEMBER_START = datetime(2019, 11, 1)
NOVEMBER_END = datetime(2019, 11, 30, 23, 59, 59)

NEXT_WEEK_START = datetime(2019, 11, 11)
NEXT_WEEK_END = NEXT_WEEK_START + timedelta(days=7, seconds=-1)


def test_overnight_event_is_split_in_two(make_event):
    event = make_event('2019-11-02 18:00', '2019-11-03 02:00')
    assert event.days_count == 2

    build_segments(event, NOVEMBER_START, NOVEMBER_END)

    assert list(event.segments) == ['2019-11-02', '2019-11-03']
    first, last = event.segments.values()
    assert (first.start_time_minutes, first.end_time_minutes) == (18 * 60, 24 * 60)
    assert (last.start_time_minutes, last.end_time_minutes) == (0, 2 * 60)
    assert first.is_first_day and not first.is_last_day
    assert last.is_last_day and not last.is_first_day
    assert first.start_date == datetime(2019, 11, 2, 18, 0)
    assert last.start_date == datetime(2019, 11, 3)
    assert event.days_count == len(event.segments)
    assert_contiguous(event.segments)


def test_interior_days_run_all_day(make_event):
    event = make_event('2019-11-04 10:00', '2019-11-07 15:00')
    build_segments(event, NOVEMBER_START, NOVEMBER_END)

    assert event.days_count == 4
    middle = [event.segments['2019-11-05'], event.segments['2019-11-06']]
    assert all((s.start_time_minutes, s.end_time_minutes) == (0, 24 * 60) for s in middle)
    assert not any(s.is_first_day or s.is_last_day for s in middle)
    assert_contiguous(event.segments)


def test_segments_are_clipped_to_the_view(make_event):
    event = make_event('2019-11-02 18:00', '2019-11-05 10:00')
    build_segments(event, datetime(2019, 11, 4), datetime(2019, 11, 10, 23, 59, 59))

    assert list(event.segments) == ['2019-11-04', '2019-11-05']
    assert not event.segments['2019-11-04'].is_first_day
    assert event.segments['2019-11-04'].start_time_minutes == 0
    assert event.segments['2019-11-05'].is_last_day
    assert event.days_count == 2


def test_event_ending_at_midnight_does_not_spill(make_event):
    event = make_event('2019-11-04 20:00', '2019-11-05 00:00')
    assert event.days_count == 1

    build_segments(event, NOVEMBER_START, NOVEMBER_END)

    assert list(event.segments) == ['2019-11-04']
    segment = event.segments['2019-11-04']
    assert segment.is_first_day and segment.is_last_day
    assert segment.end_time_minutes == 24 * 60


def test_event_outside_view_has_no_segments(make_event):
    event = make_event('2019-10-02 18:00', '2019-10-03 02:00')
    build_segments(event, NOVEMBER_START, NOVEMBER_END)

    assert event.segments is None
    assert event.days_count == 1


def test_rebuild_replaces_mapping(make_event):
    event = make_event('2019-11-02 18:00', '2019-11-03 02:00')
    build_segments(event, NOVEMBER_START, NOVEMBER_END)
    previous = event.segments

    build_segments(event, NOVEMBER_START, NOVEMBER_END)

    assert event.segments is not previous
    assert event.segments == previous


def test_invalid_event_dates_give_no_segments(make_event):
    event = make_event('not a date', '2019-11-03 02:00')
    build_segments(event, NOVEMBER_START, NOVEMBER_END)
    assert event.segments is None


def test_add_day_segment_on_single_day_event(make_event):
    event = make_event('2019-11-04 09:00', '2019-11-04 10:00')
    assert event.segments is None

    assert add_day_segment(event) == '2019-11-05'

    assert list(event.segments) == ['2019-11-04', '2019-11-05']
    assert event.segments['2019-11-04'].end_time_minutes == 24 * 60
    assert not event.segments['2019-11-04'].is_last_day
    assert event.segments['2019-11-05'] == Segment(
        start='2019-11-05',
        start_date=datetime(2019, 11, 5),
        start_time_minutes=0,
        end_time_minutes=10 * 60,
        is_first_day=False,
        is_last_day=True,
    )
    assert event.end == '2019-11-05 10:00'
    assert event.end_date == datetime(2019, 11, 5, 10, 0)
    assert event.days_count == 2
    assert_contiguous(event.segments)


def test_remove_day_segment_back_to_single_day(make_event):
    event = make_event('2019-11-04 09:00', '2019-11-04 10:00')
    add_day_segment(event)

    assert remove_day_segment(event) == '2019-11-04'

    assert event.segments is None
    assert event.days_count == 1
    assert event.end == '2019-11-04 10:00'
    assert event.end_date == datetime(2019, 11, 4, 10, 0)


def test_add_then_remove_restores_event(make_event):
    event = make_event('2019-11-02 18:00', '2019-11-03 02:00')
    build_segments(event, NOVEMBER_START, NOVEMBER_END)
    before = (event.end, event.end_date, event.days_count, copy.deepcopy(event.segments))

    add_day_segment(event)
    add_day_segment(event)
    assert event.days_count == 4
    assert event.end == '2019-11-05 02:00'
    assert_contiguous(event.segments)

    remove_day_segment(event)
    remove_day_segment(event)

    assert (event.end, event.end_date, event.days_count, event.segments) == before


def test_remove_day_segment_on_single_segment_is_noop(make_event):
    event = make_event('2019-11-04 09:00', '2019-11-04 10:00')
    build_segments(event, NOVEMBER_START, NOVEMBER_END)
    before = copy.deepcopy(event.segments)

    assert remove_day_segment(event) == '2019-11-04'
    assert event.segments == before
    assert remove_day_segment(make_event('2019-11-04 09:00', '2019-11-04 10:00')) == '2019-11-04'


def test_add_day_segment_tolerates_missing_previous_segment(make_event):
    event = make_event('2019-11-02 18:00', '2019-11-03 02:00')
    build_segments(event, NOVEMBER_START, NOVEMBER_END)
    # As if a fast resize had not caught up yet
    del event.segments['2019-11-03']

    assert add_day_segment(event) == '2019-11-04'
    assert event.segments['2019-11-04'].is_last_day
    assert event.end == '2019-11-04 02:00'


def test_weekly_event_on_two_weekdays(make_event):
    event = make_event('2019-11-04 09:00', '2019-11-04 10:00',
                       repeat={'every': 'week', 'weekdays': [1, 3]})

    build_segments(event, NEXT_WEEK_START, NEXT_WEEK_END)

    assert list(event.segments) == ['2019-11-11', '2019-11-13']
    for segment in event.segments.values():
        assert segment.is_first_day and segment.is_last_day
        assert (segment.start_time_minutes, segment.end_time_minutes) == (9 * 60, 10 * 60)
    assert event.segments['2019-11-11'].start_date == datetime(2019, 11, 11, 9, 0)
    assert event.days_count == 2


def test_recurring_multi_day_occurrence_crossing_view_start(make_event):
    # Sunday night to Monday morning, every week
    event = make_event('2019-11-03 22:00', '2019-11-04 02:00', repeat={'every': 'week'})

    build_segments(event, NEXT_WEEK_START, NEXT_WEEK_END)

    assert list(event.segments) == ['2019-11-11', '2019-11-17']
    monday, sunday = event.segments['2019-11-11'], event.segments['2019-11-17']
    assert not monday.is_first_day and monday.is_last_day
    assert (monday.start_time_minutes, monday.end_time_minutes) == (0, 2 * 60)
    assert sunday.is_first_day and not sunday.is_last_day
    assert (sunday.start_time_minutes, sunday.end_time_minutes) == (22 * 60, 24 * 60)


def test_recurring_event_stops_after_until(make_event):
    event = make_event('2019-11-04 09:00', '2019-11-04 10:00',
                       repeat=RepeatRule(every='week', weekdays=[1, 3], until='2019-11-12'))

    build_segments(event, NEXT_WEEK_START, NEXT_WEEK_END)

    assert list(event.segments) == ['2019-11-11']


def test_recurring_event_uses_occurrence_lookup(make_event):
    event = make_event('2019-11-04 09:00', '2019-11-04 10:00', repeat={'every': 'week'})

    build_segments(event, NEXT_WEEK_START, NEXT_WEEK_END, occurrences={'2019-11-12': True})

    assert list(event.segments) == ['2019-11-12']


def test_monthly_event(make_event):
    event = make_event('2019-10-15 10:00', '2019-10-15 11:00', repeat={'every': 'month'})

    build_segments(event, NOVEMBER_START, NOVEMBER_END)

    assert list(event.segments) == ['2019-11-15']


def test_recurring_start_day_outside_weekdays(make_event):
    # Tuesday event repeating on Mondays and Wednesdays
    event = make_event('2019-11-05 09:00', '2019-11-05 10:00',
                       repeat={'every': 'week', 'weekdays': [1, 3]})

    build_segments(event, datetime(2019, 11, 4), NEXT_WEEK_START - timedelta(seconds=1))

    assert list(event.segments) == ['2019-11-06']
