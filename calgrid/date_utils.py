"""
Date and time helpers for the layout engine.

All functions work on plain datetime objects in local civil time and never
mutate their arguments. A malformed date string parses to None, and every
helper accepts None and hands back a neutral value instead of raising, so a
single broken event degrades its own layout rather than the whole view.
"""

import calendar
import math
import re
from datetime import datetime, date, timedelta
from typing import Callable, Optional, Union

from .config import LocalizationConfig
from .timezone_utils import shift_civil, utc_offset_delta

DAY_MINUTES = 24 * 60

_DEFAULT_TEXTS = LocalizationConfig()
_TOKEN_RE = re.compile(r'(\{[a-zA-Z]+\}|[a-zA-Z]+)')
_DATE_FORMATS = ('%Y/%m/%d %H:%M:%S', '%Y/%m/%d %H:%M', '%Y/%m/%d')

DateLike = Union[str, date, datetime, None]


def add_days(d: Optional[datetime], days: int) -> Optional[datetime]:
    """Return a copy of d moved by a number of civil days."""
    if d is None:
        return None
    return shift_civil(d, timedelta(days=days))


def subtract_days(d: Optional[datetime], days: int) -> Optional[datetime]:
    return add_days(d, -days)


def midnight(d: Optional[datetime]) -> Optional[datetime]:
    """Truncate d to the start of its civil day."""
    if d is None:
        return None
    return shift_civil(d.replace(hour=0, minute=0, second=0, microsecond=0), timedelta(0))


def minutes_of_day(d: Optional[datetime]) -> int:
    if d is None:
        return 0
    return d.hour * 60 + d.minute


def get_week(d: Optional[datetime]) -> int:
    """ISO-8601 week number."""
    if d is None:
        return 0
    return d.isocalendar()[1]


def is_leap_year(d: Optional[datetime]) -> bool:
    if d is None:
        return False
    return calendar.isleap(d.year)


def previous_first_day_of_week(d: Optional[datetime] = None, week_starts_on_sunday: bool = False) -> datetime:
    """
    Return d if it is the first day of its week, else the previous one.

    The week starts on Monday unless week_starts_on_sunday is set. Without a
    date, today is used.
    """
    d = d or datetime.now()
    # isoweekday(): Monday=1 ... Sunday=7
    offset = d.isoweekday() % 7 if week_starts_on_sunday else d.isoweekday() - 1
    return subtract_days(d, offset)


class TodayCache:
    """
    Single-slot cache of today's day key.

    The formatted string is only rebuilt when the live day of the month
    differs from the cached one, so is_today() stays cheap when called for
    every cell of a view.
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now):
        self._clock = clock
        self._day: Optional[int] = None
        self._formatted = ''

    def today(self) -> str:
        now = self._clock()
        if self._day != now.day:
            self._day = now.day
            self._formatted = format_date_lite(now)
        return self._formatted

    def is_today(self, d: Optional[datetime]) -> bool:
        if d is None:
            return False
        return format_date_lite(d) == self.today()


def _nth(d: int) -> str:
    """English ordinal suffix for a day of the month."""
    if 3 < d < 21:
        return 'th'
    return {1: 'st', 2: 'nd', 3: 'rd'}.get(d % 10, 'th')


def _substitute(fmt: str, tokens: dict) -> str:
    def _replace(match):
        word = match.group(1)
        value = tokens.get(word.strip('{}'))
        return word if value is None else str(value)
    return _TOKEN_RE.sub(_replace, fmt)


def format_time(time: int, fmt: str = 'HH:mm', texts: Optional[LocalizationConfig] = None) -> str:
    """
    Format a time of day given in minutes.

    Tokens: H (0-24), HH (00-24), h (1-12), hh (01-12), m, mm, am, AM.
    Tokens may be wrapped in braces to glue them to other letters.
    """
    texts = texts or _DEFAULT_TEXTS
    hours = int(time // 60)
    h = hours % 12 or 12
    am = texts.am if hours == 24 or hours < 12 else texts.pm
    m = int(time % 60)
    return _substitute(fmt, {
        'H': hours,
        'h': h,
        'HH': f'{hours:02d}',
        'hh': f'{h:02d}',
        'am': am,
        'AM': am.upper(),
        'm': m,
        'mm': f'{m:02d}',
    })


def format_date(d: Optional[datetime], fmt: Optional[str] = 'yyyy-mm-dd',
                texts: Optional[LocalizationConfig] = None) -> str:
    """
    Format a date against a token table.

    Tokens:
        D     1 to 7, 7 = Sunday      DD    M to S
        DDD   Mon to Sun              DDDD  Monday to Sunday
        d     1 to 31                 dd    01 to 31
        S     st, nd, rd, th
        m     1 to 12                 mm    01 to 12
        mmm   Jan to Dec              mmmm  January to December
        mmmmG genitive month name
        yyyy  2019                    yy    19

    Unknown words are kept as they are. None or 'yyyy-mm-dd' uses the
    format_date_lite fast path.
    """
    if d is None:
        return ''
    if not fmt or fmt == 'yyyy-mm-dd':
        return format_date_lite(d)

    texts = texts or _DEFAULT_TEXTS
    weekday = d.weekday()  # 0 to 6 with 6 = Sunday
    day_name = texts.get_day_name(weekday)
    month_name = texts.get_month_name(d.month)
    return _substitute(fmt, {
        'D': weekday + 1,
        'DD': day_name[:1],
        'DDD': day_name[:3],
        'DDDD': day_name,
        'd': d.day,
        'dd': f'{d.day:02d}',
        'S': _nth(d.day),
        'm': d.month,
        'mm': f'{d.month:02d}',
        'mmm': month_name[:3],
        'mmmm': month_name,
        'mmmmG': texts.get_month_name(d.month, genitive=True),
        'yyyy': d.year,
        'yy': f'{d.year:04d}'[2:],
    })


def format_date_lite(d: Optional[datetime]) -> str:
    """Format a date as a YYYY-MM-DD day key, skipping the token machinery."""
    if d is None:
        return ''
    return f'{d.year:04d}-{d.month:02d}-{d.day:02d}'


def string_to_date(value: DateLike) -> Optional[datetime]:
    """
    Convert a string to a datetime. Datetimes are returned as they are.

    Accepts 'YYYY-MM-DD', 'YYYY-MM-DD HH:MM' and 'YYYY-MM-DD HH:MM:SS'
    (the '-' separators are normalized to '/' before parsing). Returns None
    when the value cannot be parsed.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    if not isinstance(value, str):
        return None

    normalized = value.strip().replace('-', '/')
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(normalized, fmt)
        except ValueError:
            continue
    return None


def count_days(start: DateLike, end: DateLike) -> int:
    """
    Count the number of days a date range spans onto.

    E.g. count_days('2019-11-02 18:00', '2019-11-03 02:00') == 2
    """
    start = string_to_date(start)
    end = string_to_date(end)
    if start is None or end is None:
        return 0

    start = midnight(start)
    # One minute past midnight so a same-day range still rounds up to a day
    end = midnight(end) + timedelta(minutes=1)

    delta = end - start + utc_offset_delta(start, end)
    return math.ceil(delta / timedelta(days=1))


def dates_in_same_time_step(date1: Optional[datetime], date2: Optional[datetime], time_step: int) -> bool:
    """True if both instants are at most one time step (in minutes) apart."""
    if date1 is None or date2 is None:
        return False
    return abs(date1 - date2) <= timedelta(minutes=time_step)
