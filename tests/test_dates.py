from datetime import datetime

from stock_ledger import dates
from stock_ledger.dates import day_key, days_between, is_same_day

from tests.helpers import DAY1, DAY2, DAY3, NOW

MIDNIGHT_MAR1 = 1709226000  # 2024-03-01 00:00 +07:00 (still Feb 29 in UTC)
LATE_FEB29 = 1709224200  # 2024-02-29 23:30 +07:00


def test_day_key_uses_utc_plus_seven():
    assert day_key(MIDNIGHT_MAR1) == "20240301"
    assert day_key(MIDNIGHT_MAR1 - 1) == "20240229"
    assert day_key(LATE_FEB29) == "20240229"


def test_day_keys_sort_chronologically():
    keys = [day_key(ts) for ts in (DAY3, DAY1, NOW, DAY2)]
    assert sorted(keys) == ["20240301", "20240302", "20240303", "20240310"]


def test_is_same_day():
    assert is_same_day(MIDNIGHT_MAR1, DAY1)
    assert not is_same_day(LATE_FEB29, MIDNIGHT_MAR1)
    assert not is_same_day(DAY1, DAY2)


def test_days_between_counts_midnights():
    assert days_between(DAY1, DAY2) == 1
    assert days_between(LATE_FEB29, MIDNIGHT_MAR1) == 1
    assert days_between(DAY1, NOW) == 9


def test_days_between_is_clamped_to_zero():
    assert days_between(DAY2, DAY1) == 0
    assert days_between(DAY1, DAY1 + 3600) == 0


def test_days_between_defaults_to_now(monkeypatch):
    monkeypatch.setattr(dates, "now_epoch", lambda: NOW)
    assert days_between(DAY1) == 9


def test_day_key_pads_early_years():
    early = datetime(999, 6, 1, 12, tzinfo=dates.WAREHOUSE_TZ)
    assert day_key(int(early.timestamp())) == "09990601"
