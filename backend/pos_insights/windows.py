"""
Window selection: restricts a sale collection to a reporting period.

All calendar boundaries are computed in the timezone of the reference `now`
passed by the caller; nothing here reads the wall clock.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, List, Optional

from pos_insights.insight_models import Period, SaleRecord, Window

logger = logging.getLogger(__name__)

ROLLING_WEEK = timedelta(days=7)


def to_local(ts: datetime, now: datetime) -> datetime:
    """Expresses a timestamp in the same zone (or naivety) as `now`."""
    tz = now.tzinfo
    if tz is None:
        if ts.tzinfo is None:
            return ts
        return ts.astimezone(timezone.utc).replace(tzinfo=None)
    if ts.tzinfo is None:
        return ts.replace(tzinfo=tz)
    return ts.astimezone(tz)


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def parse_date(value) -> Optional[date]:
    """YYYY-MM-DD (or a longer ISO string) to a date; raises ValueError."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def resolve_window(
    now: datetime,
    period: Period,
    start_date=None,
    end_date=None,
) -> Window:
    """Returns the [start, end] bounds for a period; None means unbounded."""
    period = Period.parse(period)

    if period == Period.TODAY:
        return Window(period, start_of_day(now), None)
    if period == Period.WEEK:
        return Window(period, now - ROLLING_WEEK, None)
    if period == Period.MONTH:
        return Window(period, start_of_day(now).replace(day=1), None)
    if period == Period.YEAR:
        return Window(period, start_of_day(now).replace(month=1, day=1), None)

    start = parse_date(start_date)
    end = parse_date(end_date)
    if start is None or end is None:
        logger.debug("Custom window without both bounds; no filtering applied")
        return Window(period, None, None)
    return Window(
        period,
        datetime.combine(start, time.min, tzinfo=now.tzinfo),
        datetime.combine(end, time.max, tzinfo=now.tzinfo),
    )


def in_window(ts: datetime, window: Window, now: datetime) -> bool:
    local_ts = to_local(ts, now)
    if window.start is not None and local_ts < window.start:
        return False
    if window.end is not None and local_ts > window.end:
        return False
    return True


def select_window(
    sales: Iterable[SaleRecord],
    now: datetime,
    period: Period = Period.WEEK,
    start_date=None,
    end_date=None,
) -> List[SaleRecord]:
    """Returns the sales whose timestamp falls inside the period window."""
    window = resolve_window(now, period, start_date, end_date)
    return [s for s in sales if in_window(s.timestamp, window, now)]


def trailing_week(sales: Iterable[SaleRecord], now: datetime) -> List[SaleRecord]:
    """Sales in the rolling 7 days ending at `now` (today inclusive)."""
    cutoff = now - ROLLING_WEEK
    return [s for s in sales if to_local(s.timestamp, now) >= cutoff]
