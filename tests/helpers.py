"""Constants and factories shared by the ledger tests.

All timestamps are fixed epoch seconds so the warehouse calendar (UTC+7)
is unambiguous:

    DAY1 = 2024-03-01 09:00 +07:00
    DAY2 = 2024-03-02 09:00 +07:00
    DAY3 = 2024-03-03 09:00 +07:00
    NOW  = 2024-03-10 12:00 +07:00
"""

from stock_ledger.schemas import HistoryEvent, InventoryStatus

HOUR = 3600
DAY = 86400

DAY1 = 1709258400
DAY2 = DAY1 + DAY
DAY3 = DAY2 + DAY
DAY2_MIDNIGHT = 1709226000 + DAY  # 2024-03-02 00:00 +07:00
NOW = 1710046800

INVENTORY_ID = "INV-1"
INBOUND_UNITS = 100

S = InventoryStatus


def make_event(created_at, old, new, quantity, stock_qty, goods_issue_id="GI-1"):
    return HistoryEvent(
        created_at=created_at,
        old_status=old,
        new_status=new,
        quantity=quantity,
        stock_qty=stock_qty,
        goods_issue_id=goods_issue_id,
    )
