import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Optional

from .buckets import adjust_measure, close_bucket, get_or_create_bucket
from .dates import day_key, days_between, now_epoch
from .exceptions import ReconciliationError
from .finalizer import finalize, storage_floor
from .schemas import (
    DISPOSAL_STATUSES,
    DaySnapshot,
    DayEntry,
    GoodsReceipt,
    HistoryEvent,
    InventoryItem,
    InventoryStatus,
    ReconciliationResult,
)

logger = logging.getLogger(__name__)


@dataclass
class RunningTrackers:
    """
    Quantities remembered between events of a single run.

    on_hand: (day, goods issue) -> units moved AVAILABLE -> ON_HAND that day
    disposal: (day, status) -> units moved into a disposal status that day
    lifetime_disposal: status -> units currently held in that disposal status
    lifetime_allocation: goods issue -> units allocated and not yet shipped
    """

    on_hand: dict[tuple[str, str], int] = field(default_factory=dict)
    disposal: dict[tuple[str, InventoryStatus], int] = field(default_factory=dict)
    lifetime_disposal: dict[InventoryStatus, int] = field(
        default_factory=lambda: {status: 0 for status in DISPOSAL_STATUSES}
    )
    lifetime_allocation: dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def release_allocation(self, goods_issue_id: str, quantity: int) -> None:
        remaining = self.lifetime_allocation[goods_issue_id] - quantity
        if remaining < 0:
            logger.warning(
                f"⚠️ Goods issue '{goods_issue_id}' released {quantity} units but only "
                f"{self.lifetime_allocation[goods_issue_id]} were allocated; clamping to 0."
            )
            remaining = 0
        self.lifetime_allocation[goods_issue_id] = remaining

    def release_disposal(self, status: InventoryStatus, quantity: int) -> None:
        remaining = self.lifetime_disposal[status] - quantity
        if remaining < 0:
            logger.warning(
                f"⚠️ {status.name} released {quantity} units but only "
                f"{self.lifetime_disposal[status]} were held; clamping to 0."
            )
            remaining = 0
        self.lifetime_disposal[status] = remaining


@dataclass
class EventContext:
    """Everything a transition handler needs for one event."""

    event: HistoryEvent
    day: str
    snapshot: DaySnapshot
    goods_issue_ids: set[str]
    item: InventoryItem
    receipt: GoodsReceipt
    trackers: RunningTrackers
    from_date: Optional[int] = None
    to_date: Optional[int] = None

    @property
    def quantity(self) -> int:
        return self.event.quantity

    @property
    def on_hand_key(self) -> tuple[str, str]:
        return (self.day, self.event.goods_issue_id)

    def adjust(self, measure: str, delta: int) -> None:
        if delta:
            adjust_measure(self.snapshot, measure, delta, self.item)


def split_reversal(lifetime: int, ledger: int, quantity: int) -> tuple[int, int]:
    """
    Splits a reversed quantity into (carried, same_day).

    same_day is the part that undoes movement recorded on this day's ledger;
    carried is the part that must have been moved on an earlier day. When
    what remains after the reversal still covers today's ledger, nothing from
    today is undone.
    """
    if lifetime - quantity >= ledger:
        return quantity, 0
    carried = max(lifetime - ledger, 0)
    same_day = min(quantity - carried, ledger)
    return quantity - same_day, same_day


# --- Transition handlers ---


def _allocate(ctx: EventContext) -> None:
    """AVAILABLE -> ON_HAND"""
    key = ctx.on_hand_key
    ctx.trackers.on_hand[key] = ctx.trackers.on_hand.get(key, 0) + ctx.quantity
    ctx.trackers.lifetime_allocation[ctx.event.goods_issue_id] += ctx.quantity
    ctx.adjust("allocated", ctx.quantity)


def _dispose(ctx: EventContext) -> None:
    """AVAILABLE -> DAMAGED / RETURNED / LIQUIDATION"""
    status = ctx.event.new_status
    key = (ctx.day, status)
    ctx.trackers.disposal[key] = ctx.trackers.disposal.get(key, 0) + ctx.quantity
    ctx.trackers.lifetime_disposal[status] += ctx.quantity
    ctx.adjust("disposal", ctx.quantity)


def _deallocate(ctx: EventContext) -> None:
    """ON_HAND -> AVAILABLE"""
    trackers = ctx.trackers
    issue_id = ctx.event.goods_issue_id
    key = ctx.on_hand_key

    ledger = trackers.on_hand.get(key)
    if ledger is None:
        ctx.adjust("restore", ctx.quantity)
    else:
        carried, same_day = split_reversal(
            trackers.lifetime_allocation[issue_id], ledger, ctx.quantity
        )
        ctx.adjust("restore", carried)
        ctx.adjust("allocated", -same_day)
        trackers.on_hand[key] = ledger - same_day

    trackers.release_allocation(issue_id, ctx.quantity)


def _dispose_allocated(ctx: EventContext) -> None:
    """ON_HAND -> DAMAGED / RETURNED / LIQUIDATION"""
    trackers = ctx.trackers
    issue_id = ctx.event.goods_issue_id
    status = ctx.event.new_status
    key = ctx.on_hand_key

    ledger = trackers.on_hand.get(key)
    if ledger is not None:
        _, same_day = split_reversal(
            trackers.lifetime_allocation[issue_id], ledger, ctx.quantity
        )
        if same_day:
            ctx.adjust("allocated", -same_day)
            ctx.adjust("disposal", same_day)
            trackers.on_hand[key] = ledger - same_day

    trackers.release_allocation(issue_id, ctx.quantity)
    trackers.lifetime_disposal[status] += ctx.quantity
    disposal_key = (ctx.day, status)
    trackers.disposal[disposal_key] = trackers.disposal.get(disposal_key, 0) + ctx.quantity


def _export(ctx: EventContext) -> None:
    """ON_HAND -> EXPORTED"""
    trackers = ctx.trackers
    issue_id = ctx.event.goods_issue_id
    key = ctx.on_hand_key

    ledger = trackers.on_hand.get(key)
    if ledger is not None:
        ctx.adjust("allocated", -ctx.quantity)
        trackers.on_hand[key] = max(ledger - ctx.quantity, 0)
    trackers.release_allocation(issue_id, ctx.quantity)

    ctx.adjust("outbound", ctx.quantity)
    ctx.goods_issue_ids.add(issue_id)

    until = ctx.event.created_at
    if ctx.to_date is not None:
        until = min(ctx.to_date, until)
    ctx.snapshot.storage_time_days = (
        days_between(storage_floor(ctx.receipt, ctx.from_date), until) + 1
    )


def _restore_disposed(ctx: EventContext) -> None:
    """DAMAGED / RETURNED / LIQUIDATION -> AVAILABLE"""
    trackers = ctx.trackers
    status = ctx.event.old_status
    key = (ctx.day, status)

    ledger = trackers.disposal.get(key)
    if ledger is None:
        ctx.adjust("restore", ctx.quantity)
    else:
        carried, same_day = split_reversal(
            trackers.lifetime_disposal[status], ledger, ctx.quantity
        )
        ctx.adjust("restore", carried)
        ctx.adjust("disposal", -same_day)
        trackers.disposal[key] = ledger - same_day

    trackers.release_disposal(status, ctx.quantity)


def _allocate_disposed(ctx: EventContext) -> None:
    """DAMAGED / RETURNED / LIQUIDATION -> ON_HAND"""
    trackers = ctx.trackers
    status = ctx.event.old_status
    issue_id = ctx.event.goods_issue_id
    key = (ctx.day, status)

    ledger = trackers.disposal.get(key)
    if ledger is not None:
        _, same_day = split_reversal(trackers.lifetime_disposal[status], ledger, ctx.quantity)
        if same_day:
            ctx.adjust("disposal", -same_day)
            trackers.disposal[key] = ledger - same_day
    ctx.adjust("allocated", ctx.quantity)

    on_hand_key = ctx.on_hand_key
    trackers.on_hand[on_hand_key] = trackers.on_hand.get(on_hand_key, 0) + ctx.quantity
    trackers.release_disposal(status, ctx.quantity)
    trackers.lifetime_allocation[issue_id] += ctx.quantity


def _build_transitions() -> dict[tuple[InventoryStatus, InventoryStatus], Callable]:
    available = InventoryStatus.AVAILABLE
    on_hand = InventoryStatus.ON_HAND

    table = {
        (available, on_hand): _allocate,
        (on_hand, available): _deallocate,
        (on_hand, InventoryStatus.EXPORTED): _export,
    }
    for status in DISPOSAL_STATUSES:
        table[(available, status)] = _dispose
        table[(on_hand, status)] = _dispose_allocated
        table[(status, available)] = _restore_disposed
        table[(status, on_hand)] = _allocate_disposed
    return table


# (old status, new status) -> handler. Pairs not listed are no-ops.
TRANSITIONS = _build_transitions()


def apply_event(ctx: EventContext) -> bool:
    """Runs the handler for the event's transition. Returns False for a no-op pair."""
    handler = TRANSITIONS.get((ctx.event.old_status, ctx.event.new_status))
    if handler is None:
        return False
    handler(ctx)
    return True


def _reconcile(
    item: InventoryItem,
    inventory_id: str,
    asin_outbound: list[str],
    receipt: GoodsReceipt,
    history: list[HistoryEvent],
    inbound_units: dict[str, int],
    from_date: Optional[int],
    to_date: Optional[int],
    now: int,
    opening_stock_qty: int,
) -> ReconciliationResult:
    entries: dict[str, DayEntry] = {}
    trackers = RunningTrackers()
    last_stock_qty = opening_stock_qty
    skipped = 0

    for event in history:
        if event.new_status == InventoryStatus.PENDING_FOR_IMPORT:
            skipped += 1
            continue

        snapshot, goods_issue_ids = get_or_create_bucket(
            entries, event, item, inventory_id, receipt, asin_outbound,
            inbound_units, last_stock_qty,
        )
        last_stock_qty = close_bucket(snapshot, event, item)

        ctx = EventContext(
            event=event,
            day=day_key(event.created_at),
            snapshot=snapshot,
            goods_issue_ids=goods_issue_ids,
            item=item,
            receipt=receipt,
            trackers=trackers,
            from_date=from_date,
            to_date=to_date,
        )
        if apply_event(ctx):
            logger.debug(
                f"  > {ctx.day}: {event.old_status.name} -> {event.new_status.name} "
                f"x{event.quantity} ({event.goods_issue_id or '-'})"
            )

    total = finalize(
        entries, item, receipt, asin_outbound, last_stock_qty, now, from_date, to_date
    )
    if skipped:
        logger.debug(f"  > Skipped {skipped} pending-for-import events")
    return ReconciliationResult(entries=entries, total_duration=total)


def reconcile_history(
    item: InventoryItem,
    inventory_id: str,
    asin_outbound: list[str],
    receipt: GoodsReceipt,
    history: list[HistoryEvent],
    inbound_units: dict[str, int],
    from_date: Optional[int] = None,
    to_date: Optional[int] = None,
    now: Optional[int] = None,
    opening_stock_qty: int = 0,
) -> ReconciliationResult:
    """
    Reconciles one item's status history into a day-by-day ledger.

    History must already be in ascending chronological order; it is never
    re-sorted. inbound_units maps inventory ids to the units received, and
    is only read for the goods receipt's own day. now defaults to the
    current time and is used to close the ledger. opening_stock_qty is the
    stock already held before the first event (0 for a fresh item).

    Raises ReconciliationError if the run cannot complete.
    """
    if now is None:
        now = now_epoch()

    logger.info(f"Reconciling inventory '{inventory_id}' ({len(history)} history events)...")
    try:
        result = _reconcile(
            item, inventory_id, asin_outbound, receipt, history, inbound_units,
            from_date, to_date, now, opening_stock_qty,
        )
    except (ArithmeticError, ValueError, OSError) as e:
        logger.error(f"❌ Reconciliation failed for inventory '{inventory_id}': {e}")
        raise ReconciliationError() from e

    logger.info(
        f"✅ {len(result.entries)} day(s) reconciled, total duration {result.total_duration} day(s)."
    )
    return result
