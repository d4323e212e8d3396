import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from . import settings


class InventoryStatus(IntEnum):
    OTHER = 0
    AVAILABLE = 1
    ON_HAND = 2
    DAMAGED = 3
    RETURNED = 4
    LIQUIDATION = 5
    EXPORTED = 6
    PENDING_FOR_IMPORT = 7

    @classmethod
    def _missing_(cls, value):
        # Unknown codes never trap; they fall back to OTHER.
        return cls.OTHER

    @classmethod
    def from_code(cls, value: Any) -> "InventoryStatus":
        if isinstance(value, cls):
            return value
        return cls(_to_int(value))


DISPOSAL_STATUSES = frozenset(InventoryStatus(code) for code in settings.DISPOSAL_STATUS_CODES)


def _to_int(value: Any) -> int:
    """Loose numeric coercion used by the wire models: anything unusable becomes 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0
        return int(number) if math.isfinite(number) else 0
    return 0


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    return number if math.isfinite(number) else 0.0


def _to_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


class WireModel(BaseModel):
    """Base for every model that crosses the JSON boundary (camelCase keys)."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Dimension(WireModel):
    length: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @field_validator("length", "width", "height", mode="before")
    @classmethod
    def _coerce_float(cls, v):
        return _to_float(v)


def _dimension_or_none(v):
    # A dimension that is not an object on the wire is treated as absent.
    if v is None or isinstance(v, Dimension):
        return v
    return v if isinstance(v, dict) else None


class InventoryItem(WireModel):
    """
    The inventory record being reconciled. Only volume, packaging and the
    descriptive fields copied onto each snapshot matter to the ledger; the
    rest are carried so a full record can be passed straight through.
    """

    id: str = ""
    creator_id: int = 0
    created_at: int = 0
    updated_at: int = 0
    status: InventoryStatus = InventoryStatus.OTHER
    shelf_code: str = ""
    customer_id: int = 0
    stock_qty: int = 0
    stock_cbm: float = 0.0
    goods_receipt_id: str = ""
    goods_issue_id: str = ""
    goods_id: str = ""
    duration: int = 0
    export_at: int = 0
    asin: str = ""
    supplier_id: str = ""
    asin_outbound: str = ""
    index_customs_declaration: str = ""
    unit_price: float = 0.0
    inner_qty_on_mas: int = Field(default=1, ge=1)
    po_no: str = ""
    master_dimension: Optional[Dimension] = None
    dimension: Optional[Dimension] = None
    volume: float = 0.0
    master_volume: float = 0.0
    master_qty: int = 0
    do_no: str = ""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    @field_validator(
        "creator_id", "created_at", "updated_at", "customer_id", "stock_qty",
        "duration", "export_at", "master_qty",
        mode="before",
    )
    @classmethod
    def _coerce_int(cls, v):
        return _to_int(v)

    @field_validator(
        "stock_cbm", "unit_price", "volume", "master_volume", mode="before"
    )
    @classmethod
    def _coerce_float(cls, v):
        return _to_float(v)

    @field_validator(
        "id", "shelf_code", "goods_receipt_id", "goods_issue_id", "goods_id",
        "asin", "supplier_id", "asin_outbound", "index_customs_declaration",
        "po_no", "do_no",
        mode="before",
    )
    @classmethod
    def _coerce_str(cls, v):
        return _to_str(v)

    @field_validator("inner_qty_on_mas", mode="before")
    @classmethod
    def _coerce_inner_qty(cls, v):
        # A carton always holds at least one unit.
        return max(_to_int(v), 1)

    @field_validator("status", mode="before")
    @classmethod
    def _coerce_status(cls, v):
        return InventoryStatus.from_code(v)

    @field_validator("master_dimension", "dimension", mode="before")
    @classmethod
    def _coerce_dimension(cls, v):
        return _dimension_or_none(v)


class GoodsReceipt(WireModel):
    imported_at: int = 0

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    @field_validator("imported_at", mode="before")
    @classmethod
    def _coerce_int(cls, v):
        return _to_int(v)


class HistoryEvent(WireModel):
    """One status transition of the item; stock_qty is the quantity after the move."""

    created_at: int = 0
    stock_qty: int = 0
    old_status: InventoryStatus = InventoryStatus.OTHER
    new_status: InventoryStatus = InventoryStatus.OTHER
    quantity: int = Field(default=0, ge=0)
    goods_issue_id: str = ""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        frozen = True

    @field_validator("created_at", "stock_qty", "quantity", mode="before")
    @classmethod
    def _coerce_int(cls, v):
        return _to_int(v)

    @field_validator("old_status", "new_status", mode="before")
    @classmethod
    def _coerce_status(cls, v):
        return InventoryStatus.from_code(v)

    @field_validator("goods_issue_id", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return _to_str(v)


class DaySnapshot(WireModel):
    """
    The reconciled ledger row for one calendar day. Every *_cbm and
    *_master_qty field is derived from its unit field; write them through
    stock_ledger.buckets.set_measure, never directly.
    """

    opening_stock: int = 0
    opening_cbm: float = 0.0
    opening_master_qty: int = 0
    asin: str = ""
    asin_outbound: list[str] = Field(default_factory=list)
    unit_price: float = 0.0
    received_date: int = 0
    inner_qty_on_mas: int = 1
    date: int = 0
    line_in_cd: str = ""
    po_no: str = ""
    master_dimension: Dimension = Field(default_factory=Dimension)
    dimension: Dimension = Field(default_factory=Dimension)
    inbound_qty: int = 0
    inbound_cbm: float = 0.0
    inbound_master_qty: int = 0
    closing_stock: int = 0
    closing_cbm: float = 0.0
    closing_master_qty: int = 0
    allocated_qty: int = 0
    allocated_cbm: float = 0.0
    allocated_master_qty: int = 0
    disposal_stock: int = 0
    disposal_cbm: float = 0.0
    disposal_master_qty: int = 0
    restore_stock_qty: int = 0
    restore_stock_cbm: float = 0.0
    restore_master_qty: int = 0
    outbound_qty: int = 0
    outbound_cbm: float = 0.0
    outbound_master_qty: int = 0
    storage_time_days: int = 0


class ReconcileRequest(WireModel):
    """
    The payload handed over by the caller for one item. Extra keys sent by
    the upstream service (goods, supplier, customer, receipt orders) are ignored.
    """

    inventory: InventoryItem
    inventory_id: str = ""
    asin_outbound_list: list[str] = Field(default_factory=list)
    goods_receipt: GoodsReceipt = Field(default_factory=GoodsReceipt)
    inventory_history_list: list[HistoryEvent] = Field(default_factory=list)
    inventory_ids_map: dict[str, int] = Field(default_factory=dict)
    opening_stock_qty: int = Field(default=0, ge=0)
    from_date: Optional[int] = None
    to_date: Optional[int] = None

    @field_validator("inventory_id", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return _to_str(v)

    @field_validator("opening_stock_qty", mode="before")
    @classmethod
    def _coerce_int(cls, v):
        return _to_int(v)

    @field_validator("inventory_ids_map", mode="before")
    @classmethod
    def _coerce_ids_map(cls, v):
        if not isinstance(v, dict):
            return {}
        return {str(key): _to_int(qty) for key, qty in v.items()}


DayEntry = tuple[DaySnapshot, set[str]]


@dataclass
class ReconciliationResult:
    entries: dict[str, DayEntry] = field(default_factory=dict)
    total_duration: int = 0

    def sorted_days(self) -> list[str]:
        """Day keys in calendar order (YYYYMMDD sorts lexicographically)."""
        return sorted(self.entries)

    def snapshot(self, day: str) -> DaySnapshot:
        return self.entries[day][0]

    def goods_issue_ids(self, day: str) -> set[str]:
        return self.entries[day][1]
