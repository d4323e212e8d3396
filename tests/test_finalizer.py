from stock_ledger.buckets import new_snapshot
from stock_ledger.finalizer import finalize, resolve_cutoff, storage_floor, total_duration
from stock_ledger.schemas import GoodsReceipt

from tests.helpers import DAY1, DAY2, DAY2_MIDNIGHT, DAY3, NOW


def test_resolve_cutoff():
    assert resolve_cutoff(None, NOW) == NOW
    assert resolve_cutoff(DAY2, NOW) == DAY2
    assert resolve_cutoff(NOW + 10_000, NOW) == NOW


def test_storage_floor_never_precedes_receipt():
    receipt = GoodsReceipt(imported_at=DAY2)
    assert storage_floor(receipt, None) == DAY2
    assert storage_floor(receipt, DAY1) == DAY2
    assert storage_floor(receipt, DAY3) == DAY3


def _entries(item, receipt, days):
    entries = {}
    for key, (date, storage) in days.items():
        snapshot = new_snapshot(item, receipt, [], opening_qty=0, date=date)
        snapshot.storage_time_days = storage
        entries[key] = (snapshot, set())
    return entries


def test_total_duration_with_and_without_window(item, receipt):
    entries = _entries(
        item,
        receipt,
        {"20240301": (DAY1, 1), "20240302": (DAY2, 2), "20240303": (DAY3, 3)},
    )
    assert total_duration(entries) == 6
    assert total_duration(entries, DAY2_MIDNIGHT, DAY3) == 5
    # A half-open window does not filter.
    assert total_duration(entries, DAY2_MIDNIGHT, None) == 6


def test_finalize_adds_trailing_bucket_when_stock_remains(item, receipt):
    entries = _entries(item, receipt, {"20240301": (DAY1, 0)})
    total = finalize(entries, item, receipt, ["OUT-1"], last_stock_qty=15, now=NOW)

    trailing, ids = entries["20240310"]
    assert trailing.opening_stock == trailing.closing_stock == 15
    assert trailing.closing_master_qty == 2
    assert trailing.asin_outbound == ["OUT-1"]
    assert ids == set()
    assert total == 10


def test_finalize_leaves_empty_stock_alone(item, receipt):
    entries = _entries(item, receipt, {"20240301": (DAY1, 1)})
    assert finalize(entries, item, receipt, [], last_stock_qty=0, now=NOW) == 1
    assert list(entries) == ["20240301"]
