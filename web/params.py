from __future__ import annotations

from datetime import date, datetime, time, timedelta

from billdesk.constants import LOCAL_TZ


def day_bounds(start: date | None, end: date | None) -> tuple[datetime | None, datetime | None]:
    """Turn an inclusive local date range into datetimes: start of ``start``, end of ``end``."""
    start_at = datetime.combine(start, time.min, tzinfo=LOCAL_TZ) if start else None
    end_at = datetime.combine(end, time.max, tzinfo=LOCAL_TZ) if end else None
    return start_at, end_at


def default_period(start: date | None, end: date | None, days: int = 30) -> tuple[datetime, datetime]:
    """Like ``day_bounds`` but fills a missing side with the last ``days`` days."""
    today = datetime.now(LOCAL_TZ).date()
    end = end or today
    start = start or end - timedelta(days=days)
    return datetime.combine(start, time.min, tzinfo=LOCAL_TZ), datetime.combine(end, time.max, tzinfo=LOCAL_TZ)
