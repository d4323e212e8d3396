import logging
from typing import Optional

from .buckets import new_snapshot, set_measure
from .dates import day_key, days_between
from .schemas import DayEntry, GoodsReceipt, InventoryItem

logger = logging.getLogger(__name__)


def resolve_cutoff(to_date: Optional[int], now: int) -> int:
    """The moment the ledger is closed: now, or to_date if that is earlier."""
    if to_date is None:
        return now
    return min(to_date, now)


def storage_floor(receipt: GoodsReceipt, from_date: Optional[int]) -> int:
    """Storage is never counted from before the goods were received."""
    if from_date is None:
        return receipt.imported_at
    return max(from_date, receipt.imported_at)


def storage_days(receipt: GoodsReceipt, from_date: Optional[int], until: int) -> int:
    """Inclusive number of storage days up to the given moment."""
    return days_between(storage_floor(receipt, from_date), until) + 1


def total_duration(
    entries: dict[str, DayEntry],
    from_date: Optional[int] = None,
    to_date: Optional[int] = None,
) -> int:
    total = 0
    for snapshot, _ in entries.values():
        if from_date is not None and to_date is not None:
            if snapshot.date < from_date or snapshot.date > to_date:
                continue
        total += snapshot.storage_time_days
    return total


def finalize(
    entries: dict[str, DayEntry],
    item: InventoryItem,
    receipt: GoodsReceipt,
    asin_outbound: list[str],
    last_stock_qty: int,
    now: int,
    from_date: Optional[int] = None,
    to_date: Optional[int] = None,
) -> int:
    """
    Stamps storage time on the cutoff day's bucket, adding a zero-movement
    trailing bucket when stock is still held on a day without events.
    Returns the total storage duration.
    """
    cutoff = resolve_cutoff(to_date, now)
    cutoff_day = day_key(cutoff)

    if cutoff_day in entries:
        snapshot, _ = entries[cutoff_day]
        snapshot.storage_time_days = storage_days(receipt, from_date, cutoff)
    elif last_stock_qty > 0:
        snapshot = new_snapshot(item, receipt, asin_outbound, last_stock_qty, cutoff)
        set_measure(snapshot, "closing", last_stock_qty, item)
        snapshot.storage_time_days = storage_days(receipt, from_date, cutoff)
        entries[cutoff_day] = (snapshot, set())
        logger.debug(f"  > Trailing bucket {cutoff_day} holding {last_stock_qty} units")

    return total_duration(entries, from_date, to_date)
