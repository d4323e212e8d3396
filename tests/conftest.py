"""Shared fixtures for the ledger tests."""

import pytest

from stock_ledger.ledger import reconcile_history
from stock_ledger.schemas import Dimension, GoodsReceipt, InventoryItem

from tests.helpers import DAY1, HOUR, INBOUND_UNITS, INVENTORY_ID, NOW


@pytest.fixture
def item():
    """10 units per master carton; 0.012 CBM per unit, 0.1 CBM per carton."""
    return InventoryItem(
        id=INVENTORY_ID,
        asin="B00TEST",
        volume=0.012,
        master_volume=0.1,
        inner_qty_on_mas=10,
        unit_price=2.5,
        po_no="PO-1",
        index_customs_declaration="CD-7",
        dimension=Dimension(length=10, width=20, height=5),
        master_dimension=Dimension(length=50, width=40, height=30),
    )


@pytest.fixture
def receipt():
    """Received on DAY1 at 08:00 +07:00."""
    return GoodsReceipt(imported_at=DAY1 - HOUR)


@pytest.fixture
def run(item, receipt):
    """Runs the reconciliation for the default item with a fixed 'now'."""

    def _run(history, **kwargs):
        kwargs.setdefault("now", NOW)
        return reconcile_history(
            item=item,
            inventory_id=INVENTORY_ID,
            asin_outbound=["OUT-1", "OUT-2"],
            receipt=receipt,
            history=history,
            inbound_units={INVENTORY_ID: INBOUND_UNITS},
            **kwargs,
        )

    return _run
