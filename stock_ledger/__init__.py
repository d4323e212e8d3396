from .codec import parse_request, process_inventory_history, serialize_result
from .converters import calculate_cbm, calculate_master_qty, round_float
from .dates import day_key, days_between, is_same_day
from .exceptions import ReconciliationError
from .ledger import reconcile_history
from .schemas import (
    DaySnapshot,
    Dimension,
    GoodsReceipt,
    HistoryEvent,
    InventoryItem,
    InventoryStatus,
    ReconcileRequest,
    ReconciliationResult,
)

__all__ = [
    "DaySnapshot",
    "Dimension",
    "GoodsReceipt",
    "HistoryEvent",
    "InventoryItem",
    "InventoryStatus",
    "ReconcileRequest",
    "ReconciliationError",
    "ReconciliationResult",
    "calculate_cbm",
    "calculate_master_qty",
    "day_key",
    "days_between",
    "is_same_day",
    "parse_request",
    "process_inventory_history",
    "reconcile_history",
    "round_float",
    "serialize_result",
]
