import time
from datetime import datetime, timedelta, timezone

from . import settings

WAREHOUSE_TZ = timezone(timedelta(hours=settings.TIMEZONE_OFFSET_HOURS))


def now_epoch() -> int:
    """Current time as whole epoch seconds."""
    return int(time.time())


def _local_date(epoch_seconds: int):
    return datetime.fromtimestamp(epoch_seconds, tz=WAREHOUSE_TZ).date()


def day_key(epoch_seconds: int) -> str:
    """Calendar day of the timestamp in UTC+7, as 'YYYYMMDD' (e.g. '20240131')."""
    d = _local_date(epoch_seconds)
    return f"{d.year:04d}{d.month:02d}{d.day:02d}"


def is_same_day(ts1: int, ts2: int) -> bool:
    return _local_date(ts1) == _local_date(ts2)


def days_between(from_ts: int, to_ts: int | None = None) -> int:
    """
    Whole days between the UTC+7 midnights of the two timestamps.
    Uses the current time when to_ts is omitted; never negative.
    """
    if to_ts is None:
        to_ts = now_epoch()
    diff_in_days = (_local_date(to_ts) - _local_date(from_ts)).days
    return diff_in_days if diff_in_days > 0 else 0
