from datetime import datetime, timedelta

import pytest

from calgrid.event_factory import normalize_event
from calgrid.view_context import ViewContext

# Monday 2019-11-04 to Sunday 2019-11-10
WEEK_START = datetime(2019, 11, 4)
WEEK_END = WEEK_START + timedelta(days=7, seconds=-1)


@pytest.fixture
def context():
    return ViewContext(view_start=WEEK_START, view_end=WEEK_END)


@pytest.fixture
def make_event(context):
    def _make(start, end, **kwargs):
        return normalize_event({'start': start, 'end': end, **kwargs}, context)

    return _make


@pytest.fixture
def emitted(context):
    signals: list[tuple[str, str]] = []
    context.set_on_event_callback(lambda name, event: signals.append((name, event.eid)))
    return signals


def assert_contiguous(segments):
    """Day keys follow each other without gaps, one first day and one last day."""
    keys = sorted(segments)
    days = [datetime.strptime(k, '%Y-%m-%d') for k in keys]
    assert all(b - a == timedelta(days=1) for a, b in zip(days, days[1:]))
    assert sum(s.is_first_day for s in segments.values()) == 1
    assert sum(s.is_last_day for s in segments.values()) == 1
