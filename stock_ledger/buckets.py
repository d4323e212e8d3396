import logging

from .converters import calculate_cbm, calculate_master_qty
from .dates import day_key, is_same_day
from .schemas import (
    DayEntry,
    DaySnapshot,
    Dimension,
    GoodsReceipt,
    HistoryEvent,
    InventoryItem,
)

logger = logging.getLogger(__name__)

# Measure -> (units field, CBM field, master carton field) on DaySnapshot.
MEASURES = {
    "opening": ("opening_stock", "opening_cbm", "opening_master_qty"),
    "inbound": ("inbound_qty", "inbound_cbm", "inbound_master_qty"),
    "closing": ("closing_stock", "closing_cbm", "closing_master_qty"),
    "allocated": ("allocated_qty", "allocated_cbm", "allocated_master_qty"),
    "disposal": ("disposal_stock", "disposal_cbm", "disposal_master_qty"),
    "restore": ("restore_stock_qty", "restore_stock_cbm", "restore_master_qty"),
    "outbound": ("outbound_qty", "outbound_cbm", "outbound_master_qty"),
}


def get_measure(snapshot: DaySnapshot, measure: str) -> int:
    units_field, _, _ = MEASURES[measure]
    return getattr(snapshot, units_field)


def set_measure(
    snapshot: DaySnapshot, measure: str, quantity: int, item: InventoryItem
) -> None:
    """Writes a unit quantity and recomputes its CBM and master carton figures."""
    units_field, cbm_field, master_field = MEASURES[measure]
    setattr(snapshot, units_field, quantity)
    setattr(
        snapshot,
        cbm_field,
        calculate_cbm(quantity, item.inner_qty_on_mas, item.volume, item.master_volume),
    )
    setattr(snapshot, master_field, calculate_master_qty(quantity, item.inner_qty_on_mas))


def adjust_measure(
    snapshot: DaySnapshot, measure: str, delta: int, item: InventoryItem
) -> None:
    """Adds delta to a measure. The result is floored at zero."""
    quantity = get_measure(snapshot, measure) + delta
    if quantity < 0:
        logger.warning(
            f"⚠️ {measure} would drop to {quantity} on {day_key(snapshot.date)}; clamping to 0."
        )
        quantity = 0
    set_measure(snapshot, measure, quantity, item)


def new_snapshot(
    item: InventoryItem,
    receipt: GoodsReceipt,
    asin_outbound: list[str],
    opening_qty: int,
    date: int,
) -> DaySnapshot:
    """A snapshot with the opening balance and the item's static metadata filled in."""
    snapshot = DaySnapshot(
        asin=item.asin,
        asin_outbound=list(asin_outbound),
        unit_price=item.unit_price,
        received_date=receipt.imported_at,
        inner_qty_on_mas=item.inner_qty_on_mas,
        date=date,
        line_in_cd=item.index_customs_declaration,
        po_no=item.po_no,
        master_dimension=(item.master_dimension or Dimension()).model_copy(),
        dimension=(item.dimension or Dimension()).model_copy(),
    )
    set_measure(snapshot, "opening", opening_qty, item)
    return snapshot


def get_or_create_bucket(
    entries: dict[str, DayEntry],
    event: HistoryEvent,
    item: InventoryItem,
    inventory_id: str,
    receipt: GoodsReceipt,
    asin_outbound: list[str],
    inbound_units: dict[str, int],
    last_stock_qty: int,
) -> DayEntry:
    """
    Returns the bucket for the event's day, creating it on the first event of
    that day. Inbound is only seeded on the goods receipt's own day.
    """
    date = day_key(event.created_at)
    entry = entries.get(date)
    if entry is not None:
        return entry

    snapshot = new_snapshot(item, receipt, asin_outbound, last_stock_qty, event.created_at)
    if is_same_day(event.created_at, receipt.imported_at):
        set_measure(snapshot, "inbound", inbound_units.get(inventory_id, 0), item)

    logger.debug(f"  > New bucket {date} (opening {last_stock_qty})")
    entry = (snapshot, set())
    entries[date] = entry
    return entry


def close_bucket(snapshot: DaySnapshot, event: HistoryEvent, item: InventoryItem) -> int:
    """Sets the closing balance from the event and returns it as the carried stock."""
    set_measure(snapshot, "closing", event.stock_qty, item)
    return event.stock_qty
